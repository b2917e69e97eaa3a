"""SQLAlchemy models."""

from openspace.models.booking import Booking
from openspace.models.earning import Earning
from openspace.models.room import Room
from openspace.models.user import User

__all__ = [
    "Booking",
    "Earning",
    "Room",
    "User",
]
