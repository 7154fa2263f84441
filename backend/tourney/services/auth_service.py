"""
Accounts and bearer tokens.

Passwords are stored as werkzeug hashes. A login issues a random bearer
token (secrets.token_urlsafe); only its HMAC-SHA256 under the configured
token secret is stored, so a leaked table cannot be replayed without the
secret. Logout deletes the stored token; expired tokens are rejected and
removed on sight.

The secret and token lifetime arrive as an AuthSettings argument; nothing
here reads the environment.
"""
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlmodel import Session, func, select
from werkzeug.security import check_password_hash, generate_password_hash

from tourney.models.user import AccessToken, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSettings:
    token_secret: str
    token_ttl_minutes: int = 24 * 60


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def _token_digest(settings: AuthSettings, raw_token: str) -> str:
    return hmac.new(settings.token_secret.encode("utf-8"), raw_token.encode("utf-8"), hashlib.sha256).hexdigest()


def create_user(session: Session, username: str, password: str) -> User:
    """
    Create an account. The very first account becomes admin so a fresh
    install can bootstrap itself; later admins are promoted by an admin.
    Does not commit.
    """
    user_count = session.exec(select(func.count()).select_from(User)).one()
    user = User(username=username, password_hash=hash_password(password), admin=user_count == 0)
    session.add(user)
    session.flush()
    if user.admin:
        logger.info("First account %r created as admin", username)
    return user


def authenticate(session: Session, username: str, password: str) -> Optional[User]:
    """User for a username/password pair, or None."""
    user = session.exec(select(User).where(User.username == username)).first()
    if not user or not verify_password(user.password_hash, password):
        return None
    return user


def issue_access_token(session: Session, user: User, settings: AuthSettings) -> Tuple[str, AccessToken]:
    """Returns (raw bearer token, stored row). Does not commit."""
    raw_token = secrets.token_urlsafe(32)
    stored = AccessToken(
        user_id=user.id,
        token_hash=_token_digest(settings, raw_token),
        expires_at=datetime.utcnow() + timedelta(minutes=settings.token_ttl_minutes),
    )
    session.add(stored)
    session.flush()
    return raw_token, stored


def resolve_access_token(session: Session, raw_token: str, settings: AuthSettings) -> Optional[AccessToken]:
    """Stored token for a bearer value, or None when unknown or expired."""
    digest = _token_digest(settings, raw_token)
    stored = session.exec(select(AccessToken).where(AccessToken.token_hash == digest)).first()
    if not stored:
        return None

    if stored.expires_at <= datetime.utcnow():
        session.delete(stored)
        session.commit()
        return None
    return stored


def revoke_user_tokens(session: Session, user_id: int) -> int:
    """Delete every token of a user. Returns the number deleted. Does not commit."""
    tokens = session.exec(select(AccessToken).where(AccessToken.user_id == user_id)).all()
    for token in tokens:
        session.delete(token)
    session.flush()
    return len(tokens)
