# manage_backend/adapters/outbound/persistence/repositories/user_repository.py

"""
Repository for user operations.

Implements the IUserRepository port over SQLAlchemy and hands domain
dataclasses, never ORM objects, back to the use cases.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from manage_backend.adapters.outbound.persistence.models import User
from manage_backend.adapters.outbound.persistence.repositories.base_repository import AsyncCRUDBase
from manage_backend.application.ports.outbound import IUserRepository
from manage_backend.domain.exceptions import ResourceNotFoundException
from manage_backend.domain.models.user_domain_model import User as DomainUser


def _to_domain(user: Optional[User]) -> Optional[DomainUser]:
    return user.to_domain() if user is not None else None


class AsyncUserRepository(IUserRepository):
    """
    Async user repository bound to one database session.
    """

    def __init__(self, db: AsyncSession):
        self.crud = AsyncCRUDBase(User, db)

    async def get(self, id: int) -> Optional[DomainUser]:
        return _to_domain(await self.crud.get(id))

    async def get_by_username(self, username: str) -> Optional[DomainUser]:
        return _to_domain(await self.crud.get_by_field("username", username))

    async def get_by_email(self, email: str) -> Optional[DomainUser]:
        return _to_domain(await self.crud.get_by_field("email", email))

    async def create(self, user_data: Dict[str, Any]) -> DomainUser:
        return (await self.crud.create(user_data)).to_domain()

    async def update(self, id: int, changes: Dict[str, Any]) -> DomainUser:
        """
        Raises:
            ResourceNotFoundException: If the user does not exist
            ResourceAlreadyExistsException: If a unique column would collide
        """
        db_obj = await self.crud.get(id)
        if db_obj is None:
            raise ResourceNotFoundException(detail="User not found", resource_id=id)
        return (await self.crud.update(db_obj, changes)).to_domain()

    async def delete(self, id: int) -> None:
        await self.crud.remove(id)

    async def list(self, offset: int = 0, limit: int = 100) -> Tuple[List[DomainUser], int]:
        users = await self.crud.get_multi(
            skip=offset, limit=limit, order_by=User.created_at.desc()
        )
        total = await self.crud.count()
        return [u.to_domain() for u in users], total

    async def username_exists(self, username: str, exclude_id: Optional[int] = None) -> bool:
        return await self.crud.exists(username=username, exclude_id=exclude_id)

    async def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        return await self.crud.exists(email=email, exclude_id=exclude_id)
