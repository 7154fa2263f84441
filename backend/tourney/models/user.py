from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True)
    password_hash: str  # werkzeug hash, never returned by the API
    admin: bool = Field(default=False)  # Admins manage tournaments, enrollment and generation
    created_at: datetime = Field(default_factory=datetime.utcnow)


class AccessToken(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    token_hash: str = Field(unique=True, index=True)  # HMAC-SHA256 of the bearer token
    expires_at: datetime
    created_at: datetime = Field(default_factory=datetime.utcnow)
