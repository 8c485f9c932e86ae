"""
Database engine and session management (SQLAlchemy 2.0).
"""

import os
from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from shared.config.settings import DATABASE_URL
from shared.utils.exceptions import DatabaseError


def _pool_size() -> int:
    """(2 * cores) + 1, capped at 20."""
    return min((os.cpu_count() or 4) * 2 + 1, 20)


def build_engine(url: str) -> Engine:
    """Create an engine with pooling suited to the backend behind ``url``."""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=_pool_size(),
        max_overflow=15,
        pool_timeout=30,
        pool_recycle=1800,
        connect_args={"connect_timeout": 10},
    )


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding a session that is closed after the request.

        @router.get("/menu")
        def list_menu(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def safe_commit(db: Session, operation: str = "commit") -> None:
    """Commit, rolling back and raising DatabaseError if the database refuses."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise DatabaseError(operation, error=str(e)) from e
    except Exception:
        db.rollback()
        raise
