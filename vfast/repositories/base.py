"""
Base repository with the CRUD operations shared by all repositories.

Repositories flush but never commit; the service that owns the unit of
work decides when to commit or roll back.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from vfast.core.exceptions import ResourceNotFoundError
from vfast.core.logging import get_logger
from vfast.models.base import Base

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository over one mapped class.
    """

    not_found_error = None

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    # ==================== Read Operations ====================

    def find_by_id(self, entity_id: int) -> Optional[ModelType]:
        return self.db.get(self.model, entity_id)

    def get_by_id(self, entity_id: int) -> ModelType:
        """
        Fetch by primary key or raise the repository's not-found error.
        """
        entity = self.find_by_id(entity_id)
        if entity is None:
            raise self._not_found(entity_id)
        return entity

    def get_for_update(self, entity_id: int) -> ModelType:
        """Fetch by primary key holding a row lock until the transaction ends."""
        stmt = select(self.model).where(self.model.id == entity_id).with_for_update()
        entity = self.db.execute(stmt).scalars().first()
        if entity is None:
            raise self._not_found(entity_id)
        return entity

    def list_all(self) -> List[ModelType]:
        return list(self.db.execute(select(self.model).order_by(self.model.id)).scalars().all())

    # ==================== Write Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        self.db.add(entity)
        self.db.flush()
        logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
        return entity

    def update(self, entity: ModelType, data: Dict[str, Any]) -> ModelType:
        for key, value in data.items():
            setattr(entity, key, value)
        self.db.flush()
        return entity

    def delete(self, entity: ModelType) -> None:
        self.db.delete(entity)
        self.db.flush()

    def _not_found(self, entity_id: Any) -> Exception:
        if self.not_found_error is not None:
            return self.not_found_error(entity_id)
        return ResourceNotFoundError(self.model.__name__, entity_id)
