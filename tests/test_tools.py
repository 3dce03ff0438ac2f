"""Tests for the mock package catalog and booking ledger."""

from datetime import date

import pytest

from tests.conftest import make_package, make_receipt
from wedding_booking.tools import bookings as booking_ledger
from wedding_booking.tools import packages as package_catalog

TODAY = date(2025, 11, 1)


def _fields(**overrides) -> dict[str, str]:
    fields = {
        "packageId": "7",
        "weddingDate": "2025-12-20",
        "venue": "Garden Hall",
        "paymentMethod": "gcash",
        "paymentAmount": "50000",
        "allowMarketing": "true",
    }
    fields.update(overrides)
    return fields


class TestPackageCatalog:
    def test_get_known_package(self):
        package = package_catalog.get_package(7)
        assert package.name == "Garden Romance Package"
        assert package.preparation_days == 2

    def test_get_unknown_package(self):
        assert package_catalog.get_package(404) is None
        assert package_catalog.get_preparation_days(404) is None

    def test_all_packages_sorted(self):
        assert [p.id for p in package_catalog.get_all_packages()] == [1, 3, 7]

    def test_register_and_reset(self):
        package_catalog.register_package(make_package(package_id=42))
        assert package_catalog.get_package(42) is not None
        package_catalog.reset()
        assert package_catalog.get_package(42) is None


class TestCreateBooking:
    def test_success(self):
        result = booking_ledger.create_booking(_fields(), make_receipt(), client_id="c1", today=TODAY)
        assert result["success"]
        assert result["status"] == "pending"
        assert result["message"] == "Booking submitted successfully"
        record = booking_ledger.get_booking(result["booking_id"])
        assert record["payment_amount"] == 50000.0
        assert record["allow_marketing"] is True

    @pytest.mark.parametrize("missing", ["packageId", "weddingDate", "venue"])
    def test_required_fields(self, missing):
        result = booking_ledger.create_booking(_fields(**{missing: ""}), None, client_id="c1", today=TODAY)
        assert result == {"success": False, "message": "Package ID, wedding date, and venue are required"}

    def test_date_must_be_future(self):
        result = booking_ledger.create_booking(_fields(weddingDate="2025-11-01"), None, client_id="c1", today=TODAY)
        assert result["message"] == "Wedding date must be in the future"

    def test_time_format(self):
        result = booking_ledger.create_booking(_fields(weddingTime="3pm"), None, client_id="c1", today=TODAY)
        assert result["message"] == "Wedding time must be in HH:MM format"

    def test_unknown_package(self):
        result = booking_ledger.create_booking(_fields(packageId="404"), None, client_id="c1", today=TODAY)
        assert result["message"] == "Package not found or inactive"

    def test_full_date_rejected(self):
        package_catalog.register_package(make_package(package_id=5, default_slots=1, preparation_days=0))
        booking_ledger.add_confirmed_booking(5, date(2025, 12, 20))
        result = booking_ledger.create_booking(_fields(packageId="5"), None, client_id="c1", today=TODAY)
        assert not result["success"]
        assert result["message"] == "No available slots for this date"


class TestStatusChanges:
    def test_lifecycle(self):
        booking_id = booking_ledger.create_booking(_fields(), None, client_id="c1", today=TODAY)["booking_id"]
        assert booking_ledger.list_occupying_bookings(7) == []

        booking_ledger.confirm_booking(booking_id)
        occupying = booking_ledger.list_occupying_bookings(7)
        assert [b.booking_id for b in occupying] == [booking_id]

        booking_ledger.complete_booking(booking_id)
        assert len(booking_ledger.list_occupying_bookings(7)) == 1

    def test_cancel_releases_slot(self):
        booking_id = booking_ledger.add_confirmed_booking(7, date(2025, 12, 20))
        booking_ledger.cancel_booking(booking_id)
        assert booking_ledger.list_occupying_bookings(7) == []

    def test_unknown_booking(self):
        result = booking_ledger.confirm_booking("WB-NOPE00")
        assert not result["success"]

    def test_reset_clears_ledger(self):
        booking_id = booking_ledger.add_confirmed_booking(7, date(2025, 12, 20))
        booking_ledger.reset()
        assert booking_ledger.get_booking(booking_id) is None
