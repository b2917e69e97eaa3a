"""Service for seeding demo hosts, bookings and earnings.

Note: Uses standard random for demo data generation (not cryptographic).
"""
# ruff: noqa: S311

import random
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from openspace.models.booking import (
    ONLINE_PAYMENT_METHODS,
    Booking,
    BookingStatus,
    PaymentMethod,
    PaymentStatus,
)
from openspace.models.earning import EarningStatus
from openspace.models.room import Room
from openspace.models.user import User, UserRole
from openspace.services.earnings import record_booking_earning

logger = structlog.get_logger()

SEED_EMAIL_DOMAIN = "seed.openspace.test"

HOST_NAMES = [
    ("Maria", "Santos"),
    ("Jose", "Reyes"),
    ("Ana", "Cruz"),
    ("Paolo", "Garcia"),
    ("Liza", "Mendoza"),
]
GUEST_NAMES = [
    ("Carlo", "Bautista"),
    ("Bea", "Villanueva"),
    ("Miguel", "Ramos"),
    ("Trish", "Aquino"),
    ("Nico", "Torres"),
    ("Hannah", "Flores"),
]
ROOM_TITLES = [
    "Cozy Studio near BGC",
    "Beachfront Cabana in La Union",
    "Loft with City View in Makati",
    "Mountain Cabin in Baguio",
    "Co-working Room in Cebu IT Park",
]

# Weighted so card and gcash dominate, as in production traffic
PAYMENT_WEIGHTS = {
    PaymentMethod.CARD: 4,
    PaymentMethod.GCASH: 3,
    PaymentMethod.MAYA: 2,
    PaymentMethod.PROPERTY: 1,
}


def seed_email(first: str, last: str) -> str:
    return f"{first}.{last}@{SEED_EMAIL_DOMAIN}".lower()


async def seed_earnings(
    db: AsyncSession,
    bookings_per_host: int = 12,
    months: int = 6,
    now: datetime | None = None,
) -> dict[str, int | Decimal]:
    """Create demo users, rooms, completed bookings and their earnings.

    Idempotent: does nothing if seeded users already exist.
    """
    existing = await db.scalar(
        select(func.count(User.id)).where(User.email.like(f"%@{SEED_EMAIL_DOMAIN}"))
    )
    if existing:
        logger.info("Earnings data already seeded", existing_users=existing)
        return {"seeded": False}

    now = now or datetime.now(UTC)
    window = timedelta(days=30 * months)

    hosts = [
        User(email=seed_email(first, last), first_name=first, last_name=last, role=UserRole.HOST.value)
        for first, last in HOST_NAMES
    ]
    guests = [
        User(email=seed_email(first, last), first_name=first, last_name=last, role=UserRole.USER.value)
        for first, last in GUEST_NAMES
    ]
    db.add_all(hosts + guests)
    await db.flush()

    rooms = [
        Room(
            host_id=host.id,
            title=title,
            price_per_night=Decimal(random.randrange(1500, 6500, 50)),
        )
        for host, title in zip(hosts, ROOM_TITLES, strict=True)
    ]
    db.add_all(rooms)
    await db.flush()

    methods = list(PAYMENT_WEIGHTS)
    weights = list(PAYMENT_WEIGHTS.values())
    bookings_created = 0
    total_fees = Decimal("0")

    for room in rooms:
        for _ in range(bookings_per_host):
            check_out = now - timedelta(seconds=random.uniform(0, window.total_seconds()))
            nights = random.randint(1, 5)
            method = random.choices(methods, weights=weights)[0]

            booking = Booking(
                room_id=room.id,
                user_id=random.choice(guests).id,
                host_id=room.host_id,
                check_in=check_out - timedelta(days=nights),
                check_out=check_out,
                total_price=room.price_per_night * nights,
                payment_method=method.value,
                payment_status=PaymentStatus.PAID.value,
                booking_status=BookingStatus.COMPLETED.value,
            )
            db.add(booking)
            await db.flush()

            earning = await record_booking_earning(db, booking)
            earning.created_at = check_out
            if method in ONLINE_PAYMENT_METHODS or earning.available_date <= now:
                earning.status = EarningStatus.AVAILABLE.value
            total_fees += earning.platform_fee
            bookings_created += 1

    await db.commit()

    logger.info(
        "earnings_seeded",
        hosts=len(hosts),
        guests=len(guests),
        bookings=bookings_created,
        total_fees=str(total_fees),
    )
    return {
        "seeded": True,
        "users_created": len(hosts) + len(guests),
        "bookings_created": bookings_created,
        "total_fees": total_fees,
    }
