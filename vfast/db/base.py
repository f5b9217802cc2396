"""SQLAlchemy Base class for all models."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def import_models():
    """Import all models to register them with SQLAlchemy."""
    # Imported for the side effect of registering the mappers on Base
    from vfast.models import booking, guest, room, user  # noqa: F401
