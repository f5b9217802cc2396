"""Database initialization utilities."""
from sqlalchemy.engine import Engine

from vfast.core.logging import get_logger
from vfast.db.base import Base, import_models
from vfast.db.session import engine as default_engine

logger = get_logger(__name__)


def init_db(engine: Engine = default_engine) -> None:
    """
    Create any missing tables.

    Suitable for development and tests; production schemas are managed
    out of band.
    """
    import_models()
    try:
        Base.metadata.create_all(bind=engine)
        logger.info(f"Database initialized with {len(Base.metadata.tables)} tables")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise


def drop_db(engine: Engine = default_engine) -> None:
    """
    Drop all database tables.

    WARNING: This will delete all data!
    """
    import_models()
    Base.metadata.drop_all(bind=engine)
    logger.warning("All database tables dropped")

