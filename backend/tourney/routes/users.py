"""
User accounts and login.

register / login are public; everything else needs a bearer token.
Admin-only: promoting/demoting users and deleting other users.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session, select

from tourney.database import get_session
from tourney.models.user import AccessToken, User
from tourney.security import get_auth_settings, get_current_token, get_current_user, require_admin
from tourney.services.auth_service import (
    AuthSettings,
    authenticate,
    create_user,
    hash_password,
    issue_access_token,
    revoke_user_tokens,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 8


# ============================================================================
# Request/Response Models
# ============================================================================


class RegisterRequest(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        v = v.strip()
        if len(v) < MIN_USERNAME_LENGTH:
            raise ValueError("Username too short")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError("Password too short")
        return v


class LoginRequest(BaseModel):
    username: str
    password: str


class PasswordChangeRequest(BaseModel):
    old_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v):
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError("Password too short")
        return v


class UserAdminUpdate(BaseModel):
    admin: Optional[bool] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    admin: bool
    created_at: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


def _get_user_or_404(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/users/register", response_model=UserResponse, status_code=201)
def register(request: RegisterRequest, session: Session = Depends(get_session)):
    """Create an account. The first account on a fresh database is admin."""
    if session.exec(select(User).where(User.username == request.username)).first():
        raise HTTPException(status_code=409, detail="User already exists")

    try:
        user = create_user(session, request.username, request.password)
        session.commit()
        session.refresh(user)
    except Exception as e:
        session.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    return user


@router.post("/users/login", response_model=TokenResponse)
def login(
    request: LoginRequest,
    session: Session = Depends(get_session),
    settings: AuthSettings = Depends(get_auth_settings),
):
    user = authenticate(session, request.username.strip(), request.password)
    if not user:
        raise HTTPException(status_code=401, detail="Wrong username/password")

    raw_token, stored = issue_access_token(session, user, settings)
    session.commit()
    session.refresh(stored)
    logger.info("User %d logged in", user.id)
    return TokenResponse(access_token=raw_token, expires_at=stored.expires_at)


@router.post("/users/logout")
def logout(token: AccessToken = Depends(get_current_token), session: Session = Depends(get_session)):
    """Revoke the token used for this request"""
    session.delete(token)
    session.commit()
    return {"message": "Logged out"}


@router.get("/users/me", response_model=UserResponse)
def get_me(user: User = Depends(get_current_user)):
    return user


@router.patch("/users/me")
def change_password(
    request: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    if request.new_password == request.old_password:
        raise HTTPException(status_code=400, detail="New password is the same")
    if not verify_password(user.password_hash, request.old_password):
        raise HTTPException(status_code=400, detail="Wrong password")

    user.password_hash = hash_password(request.new_password)
    session.add(user)
    session.commit()
    return {"message": "Password changed"}


@router.get("/users", response_model=List[UserResponse])
def list_users(session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    return session.exec(select(User).order_by(User.id)).all()


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    return _get_user_or_404(session, user_id)


@router.patch("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    request: UserAdminUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """Promote or demote a user (admin only)"""
    target = _get_user_or_404(session, user_id)
    if request.admin is not None:
        if target.id == admin.id and not request.admin:
            raise HTTPException(status_code=403, detail="Forbidden: cannot demote yourself")
        target.admin = request.admin

    session.add(target)
    session.commit()
    session.refresh(target)
    return target


@router.delete("/users/{user_id}", status_code=204)
def delete_user(user_id: int, session: Session = Depends(get_session), admin: User = Depends(require_admin)):
    """Delete another user and their tokens (admin only)"""
    if user_id == admin.id:
        raise HTTPException(status_code=403, detail="Forbidden: cannot delete current user")
    target = _get_user_or_404(session, user_id)

    try:
        revoke_user_tokens(session, target.id)
        session.delete(target)
        session.commit()
    except Exception as e:
        session.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to delete user: {str(e)}")
