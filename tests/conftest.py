"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from wedding_booking.auth import LocalAuthSession, User
from wedding_booking.booking.recovery import MemoryStorage, PendingBookingRecovery
from wedding_booking.booking.submission import BookingSubmissionPipeline, LocalBookingTransport
from wedding_booking.booking.wizard import BookingWizard
from wedding_booking.schemas.booking_schema import ReceiptFile
from wedding_booking.schemas.package_schema import BookingStatus, ConfirmedBooking, Package
from wedding_booking.tools import bookings as booking_ledger
from wedding_booking.tools import packages as package_catalog

NOW = datetime(2025, 11, 1, 10, 0)


class FakeClock:
    """Controllable clock; call it like ``datetime.now``."""

    def __init__(self, start: datetime = NOW) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def reset_backends():
    package_catalog.reset()
    booking_ledger.reset()
    yield
    package_catalog.reset()
    booking_ledger.reset()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def recovery(storage, clock):
    return PendingBookingRecovery(storage, ttl_seconds=300, clock=clock)


@pytest.fixture
def auth(recovery):
    return LocalAuthSession(recovery=recovery)


@pytest.fixture
def signed_in_auth(recovery):
    return LocalAuthSession(user=make_user(), recovery=recovery)


@pytest.fixture
def pipeline(auth, recovery, clock):
    return BookingSubmissionPipeline(LocalBookingTransport(auth, clock=clock), auth, recovery, clock=clock)


@pytest.fixture
def wizard(auth, recovery, pipeline, clock):
    return BookingWizard(7, auth, recovery, pipeline, clock=clock)


def make_user(user_id: str = "client-001") -> User:
    return User(user_id=user_id, name="Maria & Jose")


def make_package(
    package_id: int = 99,
    default_slots: int = 3,
    preparation_days: int = 2,
    **kwargs,
) -> Package:
    """Helper to create a Package with sensible defaults."""
    return Package(
        id=package_id,
        default_slots=default_slots,
        preparation_days=preparation_days,
        **kwargs,
    )


def make_booking(
    wedding_date: date,
    package_id: int = 99,
    status: BookingStatus = BookingStatus.CONFIRMED,
    booking_id: Optional[str] = None,
) -> ConfirmedBooking:
    return ConfirmedBooking(
        booking_id=booking_id or f"WB-{wedding_date:%m%d}00",
        package_id=package_id,
        wedding_date=wedding_date,
        status=status,
    )


def make_receipt(
    filename: str = "gcash-receipt.jpg",
    content_type: str = "image/jpeg",
    size: int = 2048,
) -> ReceiptFile:
    return ReceiptFile(filename=filename, content=b"\xff" * size, content_type=content_type)


def fill_details(wizard: BookingWizard, wedding_date: str = "2025-12-20", venue: str = "Garden Hall") -> None:
    wizard.select_date(wedding_date)
    wizard.update(venue=venue)


def fill_confirmation(wizard: BookingWizard) -> None:
    wizard.update(payment_method="gcash", payment_amount=50000)
    wizard.attach_receipt("gcash-receipt.jpg", b"\xff\xd8receipt")
    wizard.update(agreed_to_terms=True, agreed_to_privacy=True)
