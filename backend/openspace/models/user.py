"""User model for guests, hosts and administrators."""

from enum import Enum

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from openspace.db.base import Base, TimestampMixin


class UserRole(str, Enum):
    """Account role."""

    USER = "user"
    HOST = "host"
    ADMIN = "admin"


class User(Base, TimestampMixin):
    """User model."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.USER.value, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)  # False when banned
    profile_image: Mapped[str | None] = mapped_column(String(500), nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_host(self) -> bool:
        return self.role == UserRole.HOST.value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
