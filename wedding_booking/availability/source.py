"""
Availability data sources for the calendar.

Two interchangeable implementations of the same four lookups:
    LocalAvailabilitySource - offline catalog and ledger, resolved in-process
    HttpAvailabilitySource  - the marketplace API's package endpoints
"""

import logging
from datetime import date, timedelta
from typing import Any, Optional, Protocol

import httpx
from pydantic import ValidationError as SchemaValidationError

from wedding_booking.availability import resolver
from wedding_booking.config import settings
from wedding_booking.errors import ConfigurationError, TransportError
from wedding_booking.schemas.availability_schema import DateAvailability
from wedding_booking.schemas.package_schema import Package
from wedding_booking.tools import bookings as booking_ledger
from wedding_booking.tools import packages as package_catalog
from wedding_booking.utils import Clock, local_now, parse_iso_date, to_iso

logger = logging.getLogger(__name__)


class AvailabilitySource(Protocol):
    async def get_availability(self, package_id: int, day: date) -> DateAvailability: ...

    async def get_availability_range(
        self, package_id: int, start: date, end: date
    ) -> dict[date, DateAvailability]: ...

    async def get_preparation_days(self, package_id: int) -> int: ...

    async def get_upcoming_availability(
        self, package_id: int, days_ahead: int = ..., limit: int = ...
    ) -> list[DateAvailability]: ...


class LocalAvailabilitySource:
    """Resolves availability against the in-memory catalog and booking ledger."""

    def __init__(self, clock: Clock = local_now) -> None:
        self.clock = clock

    def _package(self, package_id: int) -> Package:
        package = package_catalog.get_package(package_id)
        if package is None:
            raise ConfigurationError(f"Package {package_id} not found")
        return package

    async def get_availability(self, package_id: int, day: date) -> DateAvailability:
        package = self._package(package_id)
        return resolver.resolve_date(
            package, day, booking_ledger.list_occupying_bookings(package_id)
        )

    async def get_availability_range(
        self, package_id: int, start: date, end: date
    ) -> dict[date, DateAvailability]:
        package = self._package(package_id)
        return resolver.resolve_range(
            package, start, end, booking_ledger.list_occupying_bookings(package_id)
        )

    async def get_preparation_days(self, package_id: int) -> int:
        return self._package(package_id).preparation_days

    async def get_upcoming_availability(
        self,
        package_id: int,
        days_ahead: int = settings.availability.upcoming_days_ahead,
        limit: int = settings.availability.upcoming_limit,
    ) -> list[DateAvailability]:
        package = self._package(package_id)
        # Same-day bookings are not allowed, so the window opens tomorrow.
        start = self.clock().date() + timedelta(days=1)
        return resolver.upcoming_availability(
            package,
            booking_ledger.list_occupying_bookings(package_id),
            start,
            days_ahead,
            limit,
        )


def _clamp_overbooking(day: date, payload: dict) -> dict:
    """The server reports overbooking as negative availability; clamp it to full."""
    total = payload.get("totalSlots")
    booked = payload.get("bookedSlots", 0)
    remaining = payload.get("availableSlots")
    if not all(isinstance(value, int) for value in (total, booked, remaining)):
        return payload
    if booked <= total and remaining >= 0:
        return payload
    logger.warning(
        "Server reports package overbooked on %s (%s booked, %s slots); clamping",
        day, booked, total,
    )
    return {**payload, "bookedSlots": total, "availableSlots": 0, "available": False}


def _parse_entry(day: date, payload: Any) -> DateAvailability:
    if not isinstance(payload, dict):
        raise TransportError(f"availability_malformed: {day}")
    try:
        return DateAvailability.model_validate(
            {**_clamp_overbooking(day, payload), "date": to_iso(day)}
        )
    except SchemaValidationError as exc:
        raise TransportError(f"availability_malformed: {day}") from exc


class HttpAvailabilitySource:
    """Reads availability from the marketplace API."""

    def __init__(self, http: Optional[httpx.AsyncClient] = None) -> None:
        self.http = http or httpx.AsyncClient(
            base_url=settings.api.base_url,
            timeout=settings.api.timeout_sec,
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> dict:
        try:
            response = await self.http.get(path, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"availability_request_failed: {exc}") from exc

        if response.status_code == 404:
            raise ConfigurationError(f"Package not found: {path}")
        if response.status_code >= 400:
            raise TransportError(f"availability_error_{response.status_code}")
        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError("availability_response_not_json") from exc
        if not isinstance(body, dict):
            raise TransportError("availability_response_malformed")
        return body

    async def get_availability(self, package_id: int, day: date) -> DateAvailability:
        body = await self._get(
            f"/packages/{package_id}/availability/date", params={"date": to_iso(day)}
        )
        return _parse_entry(day, body)

    async def get_availability_range(
        self, package_id: int, start: date, end: date
    ) -> dict[date, DateAvailability]:
        body = await self._get(
            f"/packages/{package_id}/availability/range",
            params={"startDate": to_iso(start), "endDate": to_iso(end)},
        )
        availability = body.get("availability") or {}
        if not isinstance(availability, dict):
            raise TransportError("availability_response_malformed")
        result = {}
        for key, entry in availability.items():
            try:
                day = parse_iso_date(key)
            except ValueError as exc:
                raise TransportError(f"availability_malformed_date: {key}") from exc
            try:
                result[day] = _parse_entry(day, entry)
            except TransportError as exc:
                # Left out of the map, the calendar shows the date as unresolved.
                logger.warning("Skipping availability for package %s: %s", package_id, exc)
        logger.debug("Fetched %d dates for package %s", len(result), package_id)
        return result

    async def get_preparation_days(self, package_id: int) -> int:
        body = await self._get(f"/packages/{package_id}/preparation-days")
        try:
            return int(body.get("preparationDays", 0))
        except (TypeError, ValueError) as exc:
            raise TransportError("preparation_days_malformed") from exc

    async def get_upcoming_availability(
        self,
        package_id: int,
        days_ahead: int = settings.availability.upcoming_days_ahead,
        limit: int = settings.availability.upcoming_limit,
    ) -> list[DateAvailability]:
        body = await self._get(
            f"/packages/{package_id}/upcoming-availability",
            params={"daysAhead": days_ahead, "limit": limit},
        )
        upcoming = []
        for item in body.get("upcomingDates") or []:
            try:
                day = parse_iso_date(str(item["date"]))
            except (KeyError, TypeError, ValueError) as exc:
                raise TransportError("upcoming_availability_malformed") from exc
            upcoming.append(_parse_entry(day, item.get("availability")))
        return upcoming
