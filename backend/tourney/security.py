"""
FastAPI auth dependencies.

Settings come from the environment through get_auth_settings, which is an
ordinary dependency (tests override it):
- TOKEN_SECRET: key for the stored token HMAC (a dev default is used, with a warning)
- TOKEN_TTL_MINUTES: bearer token lifetime (default 1440)
"""
import logging
import os

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from tourney.database import get_session
from tourney.models.user import AccessToken, User
from tourney.services.auth_service import AuthSettings, resolve_access_token

logger = logging.getLogger(__name__)

DEV_TOKEN_SECRET = "tourney-dev-secret-change-me"

_bearer = HTTPBearer(auto_error=False)


def get_auth_settings() -> AuthSettings:
    secret = os.getenv("TOKEN_SECRET", DEV_TOKEN_SECRET)
    if secret == DEV_TOKEN_SECRET:
        logger.warning("TOKEN_SECRET is not set; using the insecure development secret")
    return AuthSettings(
        token_secret=secret,
        token_ttl_minutes=int(os.getenv("TOKEN_TTL_MINUTES", str(24 * 60))),
    )


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer),
    session: Session = Depends(get_session),
    settings: AuthSettings = Depends(get_auth_settings),
) -> AccessToken:
    """Stored token for the request's bearer credentials; 401 otherwise."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Unauthorized", headers={"WWW-Authenticate": "Bearer"})

    token = resolve_access_token(session, credentials.credentials, settings)
    if token is None:
        raise HTTPException(status_code=401, detail="Unauthorized", headers={"WWW-Authenticate": "Bearer"})
    return token


def get_current_user(
    token: AccessToken = Depends(get_current_token),
    session: Session = Depends(get_session),
) -> User:
    user = session.get(User, token.user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized", headers={"WWW-Authenticate": "Bearer"})
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.admin:
        raise HTTPException(status_code=403, detail="Forbidden: not admin")
    return user
