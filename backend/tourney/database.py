"""
Database engine and session dependency.

Settings (from the environment, .env loaded on import):
- DATABASE_URL: SQLAlchemy URL (default sqlite:///./tourney.db)
- SQL_ECHO: true/1/yes to log every statement

SQLite connections get PRAGMA foreign_keys=ON so a dangling team or
tournament reference fails the same way it would on Postgres.
"""
import os
from pathlib import Path
from typing import Any, Dict, Generator, Optional

from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tourney.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str, echo: bool = False, poolclass: Optional[Any] = None) -> Engine:
    """Build an engine for url. Used for the app engine and the test engine alike."""
    kwargs: Dict[str, Any] = {"echo": echo}
    if poolclass is not None:
        kwargs["poolclass"] = poolclass

    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" not in url:
            Path(url.replace("sqlite:///", "", 1)).parent.mkdir(parents=True, exist_ok=True)

    db_engine = create_engine(url, **kwargs)
    if is_sqlite:
        event.listen(db_engine, "connect", _enable_sqlite_foreign_keys)
    return db_engine


engine: Engine = create_db_engine(DATABASE_URL, echo=SQL_ECHO)


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db(db_engine: Optional[Engine] = None) -> None:
    """Create all tables (every model registers itself via the tourney.models import)"""
    import tourney.models  # noqa: F401

    SQLModel.metadata.create_all(db_engine or engine)
