"""Package and existing-booking models consumed by the availability resolver."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BookingStatus(str, Enum):
    """Lifecycle status of a booking as stored by the backend."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that take a slot on the wedding date and open a preparation window.
OCCUPYING_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.CONFIRMED, BookingStatus.COMPLETED}
)


class Package(BaseModel):
    """
    A vendor's wedding package as seen by the booking core.

    Slot counts are deliberately unconstrained here: malformed values are
    reported by the resolver as a ConfigurationError instead of being
    rejected at parse time.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    default_slots: int
    preparation_days: int = 0
    name: str = ""
    price: Optional[float] = None
    blackout_dates: dict[date, Optional[str]] = Field(default_factory=dict)
    slot_overrides: dict[date, int] = Field(default_factory=dict)


class ConfirmedBooking(BaseModel):
    """An existing booking, reduced to what availability needs."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    booking_id: str
    package_id: int
    wedding_date: date
    status: BookingStatus = BookingStatus.CONFIRMED

    @property
    def occupies_slot(self) -> bool:
        return self.status in OCCUPYING_STATUSES
