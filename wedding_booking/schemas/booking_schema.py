"""Booking submission and pending-booking snapshot models."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from wedding_booking.schemas.package_schema import BookingStatus


@dataclass(frozen=True)
class ReceiptFile:
    """An uploaded payment receipt. Lives only in memory; never persisted."""
    filename: str
    content: bytes
    content_type: str = "image/jpeg"

    @property
    def size(self) -> int:
        return len(self.content)


class CreateBookingResponse(BaseModel):
    """Result of a successful booking creation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    booking_id: str
    status: BookingStatus = BookingStatus.PENDING
    message: str = ""


class PendingBooking(BaseModel):
    """In-progress booking persisted across an authentication detour.

    ``timestamp`` is epoch milliseconds; ``form_data`` holds only the
    serializable wizard fields (never the receipt).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    package_id: int
    form_data: dict[str, Any] = Field(default_factory=dict)
    timestamp: int
