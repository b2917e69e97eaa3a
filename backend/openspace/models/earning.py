"""Earning model: one settled booking payment split between platform and host."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from openspace.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from openspace.models.booking import Booking
    from openspace.models.user import User


class EarningStatus(str, Enum):
    """Payout lifecycle of an earning."""

    PENDING = "pending"
    AVAILABLE = "available"
    PAID_OUT = "paid_out"


class Earning(Base, TimestampMixin):
    """Platform/host split of a booking payment.

    ``created_at`` marks when the payment settled and is the only field
    used for revenue period filtering.
    """

    __tablename__ = "earnings"
    __table_args__ = (
        CheckConstraint("platform_fee >= 0", name="ck_earnings_platform_fee_non_negative"),
        CheckConstraint("platform_fee <= amount", name="ck_earnings_platform_fee_within_amount"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    host_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    booking_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        comment="One earning per booking",
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, comment="Total paid by the guest"
    )
    platform_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, comment="Portion retained by the platform"
    )
    host_payout: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, comment="Portion owed to the host"
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EarningStatus.PENDING.value, index=True
    )
    # Free-form: unrecognized methods are reported under their raw code
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    available_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    paid_out_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    payout_id: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    payout_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True, comment="How the host was paid, e.g. bank_transfer"
    )

    host: Mapped["User"] = relationship("User", lazy="selectin")
    booking: Mapped["Booking"] = relationship("Booking", lazy="selectin")

    def __repr__(self) -> str:
        return (
            f"<Earning(id={self.id}, host_id={self.host_id}, amount={self.amount}, "
            f"platform_fee={self.platform_fee}, status={self.status})>"
        )
