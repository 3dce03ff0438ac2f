"""Derived per-date availability model."""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class DateAvailability(BaseModel):
    """Slot capacity and blocking status of one package on one calendar date."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    date: dt.date
    total_slots: int
    booked_slots: int = 0
    available_slots: int
    available: bool
    is_blocked: bool = False
    is_preparation_period: bool = False
    reason: Optional[str] = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "DateAvailability":
        if not 0 <= self.booked_slots <= self.total_slots:
            raise ValueError(
                f"booked_slots ({self.booked_slots}) must be within 0..{self.total_slots}"
            )
        if self.available_slots != self.total_slots - self.booked_slots:
            raise ValueError("available_slots must equal total_slots - booked_slots")
        if self.is_preparation_period and not self.is_blocked:
            raise ValueError("a preparation-period date must also be blocked")
        if self.available and (self.is_blocked or self.available_slots <= 0):
            raise ValueError("a blocked or full date cannot be available")
        return self

    @classmethod
    def open_date(cls, day: dt.date, total_slots: int) -> "DateAvailability":
        """Availability of a date with no bookings and no blocking."""
        return cls(
            date=day,
            total_slots=total_slots,
            booked_slots=0,
            available_slots=total_slots,
            available=total_slots > 0,
        )
