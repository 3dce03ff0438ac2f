"""
Availability resolver: pure per-date capacity computation for a package.

Given a package's slot configuration and its existing bookings, works out
for each calendar date how many slots remain and whether the date is
blocked, either by a vendor blackout or by the preparation period that
follows every confirmed booking.

The resolver has no notion of "now". Excluding today and past dates is the
calendar's job.

Usage:
    result = resolve_range(package, date(2025, 12, 1), date(2025, 12, 31), bookings)
    assert result[date(2025, 12, 20)].available_slots == 2
"""

import logging
from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Optional, Union

from wedding_booking.config import settings
from wedding_booking.errors import ConfigurationError
from wedding_booking.schemas.availability_schema import DateAvailability
from wedding_booking.schemas.package_schema import ConfirmedBooking, Package
from wedding_booking.utils import iter_dates

logger = logging.getLogger(__name__)

PREPARATION_REASON = "Date falls within preparation period of another confirmed booking"
BLACKOUT_REASON = "This date is not available"
FULL_REASON = "No available slots for this date"

DateOrRange = Union[date, tuple[date, date]]


def validate_package(package: Optional[Package]) -> Package:
    """Fail fast on package data the resolver cannot trust."""
    if package is None:
        raise ConfigurationError("Package configuration is missing")
    if package.default_slots < 1:
        raise ConfigurationError(
            f"Package {package.id} has invalid default_slots: {package.default_slots}"
        )
    if package.preparation_days < 0:
        raise ConfigurationError(
            f"Package {package.id} has invalid preparation_days: {package.preparation_days}"
        )
    for day, slots in package.slot_overrides.items():
        if slots < 0:
            raise ConfigurationError(
                f"Package {package.id} has a negative slot override on {day}: {slots}"
            )
    return package


def _occupying(package: Package, bookings: Iterable[ConfirmedBooking]) -> list[ConfirmedBooking]:
    return [b for b in bookings if b.package_id == package.id and b.occupies_slot]


def _booked_counts(package: Package, bookings: Iterable[ConfirmedBooking]) -> Counter:
    return Counter(b.wedding_date for b in _occupying(package, bookings))


def _preparation_window(wedding_date: date, preparation_days: int) -> list[date]:
    """Dates in ``(wedding_date, wedding_date + preparation_days]``."""
    return [wedding_date + timedelta(days=offset) for offset in range(1, preparation_days + 1)]


def preparation_dates(package: Package, bookings: Iterable[ConfirmedBooking]) -> set[date]:
    """All dates covered by the preparation window of any occupying booking."""
    validate_package(package)
    blocked: set[date] = set()
    if package.preparation_days == 0:
        return blocked
    for booking in _occupying(package, bookings):
        blocked.update(_preparation_window(booking.wedding_date, package.preparation_days))
    return blocked


def _resolve_one(
    package: Package,
    day: date,
    counts: Counter,
    prep_dates: set[date],
    wedding_date_precedence: bool,
) -> DateAvailability:
    total = package.slot_overrides.get(day, package.default_slots)
    booked = counts.get(day, 0)
    if booked > total:
        logger.warning(
            "Package %s is overbooked on %s (%d bookings, %d slots); clamping",
            package.id, day, booked, total,
        )
        booked = total
    remaining = total - booked

    in_preparation = day in prep_dates
    if in_preparation and booked > 0 and wedding_date_precedence:
        # A wedding date keeps its numeric availability until its slots run out.
        in_preparation = remaining == 0

    is_blackout = day in package.blackout_dates
    is_blocked = is_blackout or in_preparation

    if is_blackout:
        reason = package.blackout_dates[day] or BLACKOUT_REASON
    elif in_preparation:
        reason = PREPARATION_REASON
    elif remaining == 0:
        reason = FULL_REASON
    else:
        reason = None

    return DateAvailability(
        date=day,
        total_slots=total,
        booked_slots=booked,
        available_slots=remaining,
        available=remaining > 0 and not is_blocked,
        is_blocked=is_blocked,
        is_preparation_period=in_preparation,
        reason=reason,
    )


def resolve_range(
    package: Package,
    start: date,
    end: date,
    bookings: Iterable[ConfirmedBooking],
    wedding_date_precedence: Optional[bool] = None,
) -> dict[date, DateAvailability]:
    """
    Resolve availability for every date in the inclusive range ``[start, end]``.

    Bookings outside the range still matter: a booking shortly before
    ``start`` can push its preparation window into the range.

    Raises:
        ConfigurationError: If the package is malformed or the range is inverted.
    """
    validate_package(package)
    if end < start:
        raise ConfigurationError(f"Invalid date range: {start} is after {end}")
    if wedding_date_precedence is None:
        wedding_date_precedence = settings.availability.wedding_date_precedence

    bookings = list(bookings)
    counts = _booked_counts(package, bookings)
    prep = preparation_dates(package, bookings)
    result = {
        day: _resolve_one(package, day, counts, prep, wedding_date_precedence)
        for day in iter_dates(start, end)
    }
    logger.debug(
        "Resolved %d dates for package %s (%s..%s)", len(result), package.id, start, end
    )
    return result


def resolve_date(
    package: Package,
    day: date,
    bookings: Iterable[ConfirmedBooking],
    wedding_date_precedence: Optional[bool] = None,
) -> DateAvailability:
    """Resolve availability for a single date."""
    return resolve_range(package, day, day, bookings, wedding_date_precedence)[day]


def resolve(
    package: Package,
    date_or_range: DateOrRange,
    bookings: Iterable[ConfirmedBooking],
) -> Union[DateAvailability, dict[date, DateAvailability]]:
    """Resolve a single date or an inclusive ``(start, end)`` range."""
    if isinstance(date_or_range, tuple):
        start, end = date_or_range
        return resolve_range(package, start, end, bookings)
    return resolve_date(package, date_or_range, bookings)


def is_preparation_date(package: Package, day: date, bookings: Iterable[ConfirmedBooking]) -> bool:
    """Check whether a date is blocked by another booking's preparation period."""
    return resolve_date(package, day, bookings).is_preparation_period


def upcoming_availability(
    package: Package,
    bookings: Iterable[ConfirmedBooking],
    start: date,
    days_ahead: int,
    limit: int,
) -> list[DateAvailability]:
    """First ``limit`` bookable dates in ``[start, start + days_ahead)``."""
    if days_ahead < 1 or limit < 1:
        return []
    end = start + timedelta(days=days_ahead - 1)
    resolved = resolve_range(package, start, end, bookings)
    return [entry for entry in resolved.values() if entry.available][:limit]
