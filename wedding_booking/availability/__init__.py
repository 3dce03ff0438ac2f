from wedding_booking.availability.calendar import (
    BookingCalendar,
    CalendarCell,
    CalendarMonth,
    CellStatus,
    SelectionResult,
    classify_cell,
)
from wedding_booking.availability.resolver import (
    is_preparation_date,
    preparation_dates,
    resolve,
    resolve_date,
    resolve_range,
    upcoming_availability,
)

__all__ = [
    "resolve", "resolve_date", "resolve_range", "preparation_dates",
    "is_preparation_date", "upcoming_availability",
    "BookingCalendar", "CalendarCell", "CalendarMonth", "CellStatus",
    "SelectionResult", "classify_cell",
]
