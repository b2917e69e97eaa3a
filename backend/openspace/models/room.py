"""Room listing model."""

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from openspace.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from openspace.models.user import User


class Room(Base, TimestampMixin):
    """A listed space owned by a host."""

    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    host_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    host: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, title={self.title}, host_id={self.host_id})>"
