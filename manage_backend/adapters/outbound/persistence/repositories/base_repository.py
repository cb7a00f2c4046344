# manage_backend/adapters/outbound/persistence/repositories/base_repository.py

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from manage_backend.adapters.outbound.persistence.models.base_model import Base
from manage_backend.domain.exceptions import (
    DatabaseOperationException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
)

ModelType = TypeVar("ModelType", bound=Base)


def _is_unique_violation(error: IntegrityError) -> bool:
    error_msg = str(error).lower()
    return "unique" in error_msg or "duplicate" in error_msg


class AsyncCRUDBase(Generic[ModelType]):
    """
    Generic async CRUD over one model and one session.

    SQLAlchemy errors never leave this class: unique violations become
    ResourceAlreadyExistsException, everything else becomes
    DatabaseOperationException. Writes roll back before raising.

    Attributes:
        model: SQLAlchemy model class
        db: Async database session
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db
        self.name = model.__name__
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    @asynccontextmanager
    async def _guard(self, action: str, *, write: bool = False):
        try:
            yield
        except IntegrityError as e:
            if write:
                await self.db.rollback()
            if _is_unique_violation(e):
                self.logger.warning(f"Unique constraint hit while trying to {action}: {e}")
                raise ResourceAlreadyExistsException(detail=f"{self.name} with these values already exists")
            self.logger.error(f"Integrity error while trying to {action}: {e}")
            raise DatabaseOperationException(detail=f"Could not {action}", original_error=e)
        except SQLAlchemyError as e:
            if write:
                await self.db.rollback()
            self.logger.error(f"Database error while trying to {action}: {e}")
            raise DatabaseOperationException(detail=f"Could not {action}", original_error=e)

    async def get(self, id: Any) -> Optional[ModelType]:
        async with self._guard(f"fetch {self.name} {id}"):
            result = await self.db.execute(select(self.model).where(self.model.id == id))
            return result.scalar_one_or_none()

    async def get_by_field(self, field_name: str, value: Any) -> Optional[ModelType]:
        async with self._guard(f"fetch {self.name} by {field_name}"):
            result = await self.db.execute(
                select(self.model).where(getattr(self.model, field_name) == value)
            )
            return result.scalar_one_or_none()

    async def exists(self, *, exclude_id: Optional[Any] = None, **filters) -> bool:
        """
        True when a row matches every ``field=value`` filter.

        Args:
            exclude_id: row to ignore, e.g. the user being edited
        """
        query = select(self.model.id).filter_by(**filters)
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        async with self._guard(f"check {self.name} existence"):
            result = await self.db.execute(select(query.exists()))
            return bool(result.scalar())

    async def get_multi(self, *, skip: int = 0, limit: int = 100, order_by: Any = None) -> List[ModelType]:
        query = select(self.model).offset(skip).limit(limit)
        if order_by is not None:
            query = query.order_by(order_by)
        async with self._guard(f"list {self.name} rows"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def count(self) -> int:
        async with self._guard(f"count {self.name} rows"):
            result = await self.db.execute(select(func.count()).select_from(self.model))
            return int(result.scalar_one())

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Raises:
            ResourceAlreadyExistsException: On a unique constraint violation
            DatabaseOperationException: On any other database error
        """
        db_obj = self.model(**obj_in)
        async with self._guard(f"create {self.name}", write=True):
            self.db.add(db_obj)
            await self.db.commit()
            await self.db.refresh(db_obj)
        self.logger.info(f"{self.name} {db_obj.id} created")
        return db_obj

    async def update(self, db_obj: ModelType, changes: Dict[str, Any]) -> ModelType:
        """Apply ``changes`` to ``db_obj``; keys that are not columns are skipped."""
        for field, value in changes.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        async with self._guard(f"update {self.name} {db_obj.id}", write=True):
            await self.db.commit()
            await self.db.refresh(db_obj)
        self.logger.info(f"{self.name} {db_obj.id} updated: {sorted(changes)}")
        return db_obj

    async def remove(self, id: Any) -> None:
        """
        Raises:
            ResourceNotFoundException: If no row has this id
        """
        obj = await self.get(id)
        if obj is None:
            raise ResourceNotFoundException(detail=f"{self.name} not found", resource_id=id)
        async with self._guard(f"delete {self.name} {id}", write=True):
            await self.db.delete(obj)
            await self.db.commit()
        self.logger.info(f"{self.name} {id} deleted")
