"""Database session management."""
from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from vfast.config.settings import settings


def engine_kwargs() -> Dict[str, Any]:
    """Connection options for the configured backend."""
    if settings.is_sqlite():
        # SQLite has no pool sizing and is used from TestClient threads
        return {"connect_args": {"check_same_thread": False}, "echo": settings.DB_ECHO}
    return {
        "pool_pre_ping": True,
        "echo": settings.DB_ECHO,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_POOL_OVERFLOW,
    }


engine = create_engine(settings.get_database_url(), **engine_kwargs())

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function that yields a database session.

    Usage in FastAPI endpoints:
        @router.get("/bookings")
        def list_bookings(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
