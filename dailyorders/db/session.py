"""Database engine and session management."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from dailyorders.core.config import settings

connect_args: dict[str, Any] = {}
if settings.database_url.startswith("sqlite"):
    # Competing writers wait on the database lock instead of failing outright.
    connect_args = {"check_same_thread": False, "timeout": 15}

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and ensure proper cleanup."""
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
