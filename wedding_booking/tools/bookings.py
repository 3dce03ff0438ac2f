"""
Mock booking ledger standing in for the booking-creation endpoint.

In production, bookings are created by the marketplace backend from the
multipart payload the submission pipeline sends. This in-memory version
applies the same server-side checks so the offline demo and tests behave
like the real service.
"""

import logging
import re
import uuid
from datetime import date, datetime, timezone
from typing import Mapping, Optional, TypedDict

from wedding_booking.availability.resolver import resolve_date
from wedding_booking.schemas.booking_schema import ReceiptFile
from wedding_booking.schemas.package_schema import (
    OCCUPYING_STATUSES,
    BookingStatus,
    ConfirmedBooking,
)
from wedding_booking.tools.packages import get_package
from wedding_booking.utils import parse_iso_date

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")


class BookingRecord(TypedDict):
    """Full booking record stored in the ledger."""

    booking_id: str
    client_id: str
    package_id: int
    wedding_date: str
    wedding_time: str
    venue: str
    special_requests: str
    payment_method: str
    payment_amount: float
    receipt_filename: Optional[str]
    allow_marketing: bool
    status: str
    created_at: str


class BookingResult(TypedDict, total=False):
    """Result from create_booking and the status-change helpers."""

    success: bool
    message: str
    booking_id: str
    status: str
    details: BookingRecord

_bookings: dict[str, BookingRecord] = {}


def create_booking(
    fields: Mapping[str, str],
    receipt: Optional[ReceiptFile],
    client_id: str,
    today: date,
) -> BookingResult:
    """Create a pending booking from submitted form fields."""
    missing = [
        name for name in ("packageId", "weddingDate", "venue")
        if not (fields.get(name) or "").strip()
    ]
    if missing:
        return {
            "success": False,
            "message": "Package ID, wedding date, and venue are required",
        }

    try:
        package_id = int(fields["packageId"])
        wedding_date = parse_iso_date(fields["weddingDate"])
    except ValueError:
        return {"success": False, "message": "Package ID or wedding date is malformed"}

    if wedding_date <= today:
        return {"success": False, "message": "Wedding date must be in the future"}

    wedding_time = (fields.get("weddingTime") or "").strip()
    if wedding_time and not TIME_PATTERN.match(wedding_time):
        return {"success": False, "message": "Wedding time must be in HH:MM format"}

    package = get_package(package_id)
    if package is None:
        return {"success": False, "message": "Package not found or inactive"}

    availability = resolve_date(package, wedding_date, list_occupying_bookings(package_id))
    if not availability.available:
        return {
            "success": False,
            "message": availability.reason or "Package is not available for this date",
        }

    try:
        payment_amount = float(fields.get("paymentAmount") or 0)
    except ValueError:
        return {"success": False, "message": "Payment amount must be a number"}

    booking_id = f"WB-{uuid.uuid4().hex[:6].upper()}"
    record: BookingRecord = {
        "booking_id": booking_id,
        "client_id": client_id,
        "package_id": package_id,
        "wedding_date": wedding_date.isoformat(),
        "wedding_time": wedding_time,
        "venue": fields["venue"].strip(),
        "special_requests": fields.get("specialRequests") or "",
        "payment_method": fields.get("paymentMethod") or "",
        "payment_amount": payment_amount,
        "receipt_filename": receipt.filename if receipt else None,
        "allow_marketing": (fields.get("allowMarketing") or "false").lower() == "true",
        "status": BookingStatus.PENDING.value,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    _bookings[booking_id] = record
    logger.info(
        "Booking created: %s for package %s on %s", booking_id, package_id, record["wedding_date"]
    )
    return {
        "success": True,
        "booking_id": booking_id,
        "status": record["status"],
        "message": "Booking submitted successfully",
        "details": record,
    }


def _set_status(booking_id: str, status: BookingStatus) -> BookingResult:
    if booking_id not in _bookings:
        return {"success": False, "message": f"Booking {booking_id} not found."}
    _bookings[booking_id]["status"] = status.value
    logger.info("Booking %s: %s", status.value, booking_id)
    return {
        "success": True,
        "booking_id": booking_id,
        "status": status.value,
        "message": f"Booking {booking_id} is now {status.value}.",
        "details": _bookings[booking_id],
    }


def confirm_booking(booking_id: str) -> BookingResult:
    """Planner confirms a pending booking; it now occupies a slot."""
    return _set_status(booking_id, BookingStatus.CONFIRMED)


def complete_booking(booking_id: str) -> BookingResult:
    return _set_status(booking_id, BookingStatus.COMPLETED)


def cancel_booking(booking_id: str) -> BookingResult:
    """Cancel a booking, releasing its slot and preparation window."""
    return _set_status(booking_id, BookingStatus.CANCELLED)


def get_booking(booking_id: str) -> Optional[BookingRecord]:
    """Retrieve a booking by id."""
    return _bookings.get(booking_id)


def add_confirmed_booking(package_id: int, wedding_date: date, client_id: str = "seed") -> str:
    """Insert an already-confirmed booking directly. Used for seeding demos and tests."""
    booking_id = f"WB-{uuid.uuid4().hex[:6].upper()}"
    _bookings[booking_id] = {
        "booking_id": booking_id,
        "client_id": client_id,
        "package_id": package_id,
        "wedding_date": wedding_date.isoformat(),
        "wedding_time": "",
        "venue": "",
        "special_requests": "",
        "payment_method": "",
        "payment_amount": 0.0,
        "receipt_filename": None,
        "allow_marketing": False,
        "status": BookingStatus.CONFIRMED.value,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    return booking_id


def list_occupying_bookings(package_id: int) -> list[ConfirmedBooking]:
    """Bookings of a package in a status that takes a slot."""
    return [
        ConfirmedBooking(
            booking_id=record["booking_id"],
            package_id=record["package_id"],
            wedding_date=parse_iso_date(record["wedding_date"]),
            status=BookingStatus(record["status"]),
        )
        for record in _bookings.values()
        if record["package_id"] == package_id
        and BookingStatus(record["status"]) in OCCUPYING_STATUSES
    ]


def reset() -> None:
    """Clear all bookings. Used by test fixtures for isolation."""
    _bookings.clear()
