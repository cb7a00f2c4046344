# manage_backend/adapters/outbound/persistence/models/user_model.py

"""
User model.
"""

from sqlalchemy import Column, DateTime, Integer, String, func

from manage_backend.adapters.outbound.persistence.models.base_model import Base
from manage_backend.domain.models.user_domain_model import ROLE_USER, STATUS_ACTIVE, User as DomainUser


class User(Base):
    """
    System user.

    Attributes:
        id: Auto-increment identifier
        username: Unique login name
        email: Unique email address
        password: Password hash
        role: "user" or "admin"
        status: "active" or "inactive"
        created_at: Creation date and time
        updated_at: Last update date and time
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_USER)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<User(username={self.username}, role={self.role}, status={self.status})>"

    def to_domain(self) -> DomainUser:
        return DomainUser(
            id=self.id,
            username=self.username,
            email=self.email,
            password=self.password,
            role=self.role,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
