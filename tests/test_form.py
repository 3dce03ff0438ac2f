"""Tests for booking form validation gates."""

from datetime import date

import pytest

from tests.conftest import make_receipt
from wedding_booking.booking.form import (
    SNAPSHOT_FIELDS,
    BookingFormData,
    restore_fields,
    snapshot_fields,
    update_form,
    validate_all,
    validate_step,
)
from wedding_booking.booking.state_machine import WizardStep

TODAY = date(2025, 11, 1)


def _details(**overrides) -> BookingFormData:
    values = {"wedding_date": "2025-12-20", "venue": "Garden Hall"}
    values.update(overrides)
    return BookingFormData(**values)


def _complete(**overrides) -> BookingFormData:
    values = {
        "wedding_date": "2025-12-20",
        "venue": "Garden Hall",
        "payment_method": "gcash",
        "payment_amount": 50000.0,
        "receipt_file": make_receipt(),
        "agreed_to_terms": True,
        "agreed_to_privacy": True,
    }
    values.update(overrides)
    return BookingFormData(**values)


class TestDetailsGate:
    def test_valid_details(self):
        assert validate_step(_details(), WizardStep.DETAILS, TODAY).is_valid

    def test_missing_date(self):
        result = validate_step(_details(wedding_date=""), WizardStep.DETAILS, TODAY)
        assert result.errors == ["Wedding date is required"]

    def test_unparseable_date(self):
        result = validate_step(_details(wedding_date="20/12/2025"), WizardStep.DETAILS, TODAY)
        assert result.errors == ["Wedding date must be a valid date (YYYY-MM-DD)"]

    @pytest.mark.parametrize("wedding_date", ["2025-11-01", "2025-10-31"])
    def test_today_and_past_rejected(self, wedding_date):
        result = validate_step(_details(wedding_date=wedding_date), WizardStep.DETAILS, TODAY)
        assert result.errors == ["Wedding date must be in the future"]

    def test_tomorrow_accepted(self):
        assert validate_step(_details(wedding_date="2025-11-02"), WizardStep.DETAILS, TODAY).is_valid

    def test_blank_venue(self):
        result = validate_step(_details(venue="   "), WizardStep.DETAILS, TODAY)
        assert result.errors == ["Venue is required"]

    @pytest.mark.parametrize("value,valid", [("", True), ("09:30", True), ("23:59", True), ("24:00", False), ("9am", False)])
    def test_optional_time_format(self, value, valid):
        result = validate_step(_details(wedding_time=value), WizardStep.DETAILS, TODAY)
        assert result.is_valid is valid

    def test_collects_all_errors(self):
        result = validate_step(BookingFormData(), WizardStep.DETAILS, TODAY)
        assert result.errors == ["Wedding date is required", "Venue is required"]


class TestConfirmationGate:
    def test_complete_form_is_valid(self):
        assert validate_step(_complete(), WizardStep.CONFIRMATION, TODAY).is_valid

    def test_empty_confirmation_errors_in_order(self):
        result = validate_step(_details(), WizardStep.CONFIRMATION, TODAY)
        assert result.errors == [
            "Please select a payment method",
            "Payment amount is required",
            "Please upload your payment receipt",
            "You must agree to the Terms and Conditions",
            "You must agree to the Privacy Policy",
        ]

    def test_unsupported_payment_method(self):
        result = validate_step(_complete(payment_method="cash"), WizardStep.CONFIRMATION, TODAY)
        assert not result.is_valid

    def test_preview_counts_as_receipt(self):
        form = _complete(receipt_file=None, receipt_preview="receipt.png")
        assert validate_step(form, WizardStep.CONFIRMATION, TODAY).is_valid

    def test_receipt_must_be_image(self):
        form = _complete(receipt_file=make_receipt("receipt.pdf", "application/pdf"))
        result = validate_step(form, WizardStep.CONFIRMATION, TODAY)
        assert result.errors == ["Only image files (JPEG, JPG, PNG, GIF, WEBP) are allowed for receipts"]

    def test_receipt_size_limit(self):
        form = _complete(receipt_file=make_receipt(size=10 * 1024 * 1024 + 1))
        result = validate_step(form, WizardStep.CONFIRMATION, TODAY)
        assert result.errors == ["Receipt file must be 10MB or smaller"]

    def test_missing_privacy_only(self):
        result = validate_step(_complete(agreed_to_privacy=False), WizardStep.CONFIRMATION, TODAY)
        assert result.errors == ["You must agree to the Privacy Policy"]

    def test_validate_all_rechecks_details(self):
        result = validate_all(_complete(wedding_date="2025-11-01"), TODAY)
        assert result.errors == ["Wedding date must be in the future"]


class TestFormUpdates:
    def test_update_returns_copy(self):
        form = BookingFormData()
        updated = update_form(form, venue="Garden Hall")
        assert updated.venue == "Garden Hall"
        assert form.venue == ""

    def test_amount_cast_to_float(self):
        assert update_form(BookingFormData(), payment_amount="50000").payment_amount == 50000.0

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="guest_count"):
            update_form(BookingFormData(), guest_count=120)


class TestSnapshotFields:
    def test_snapshot_excludes_receipt_and_preview(self):
        data = snapshot_fields(_complete(receipt_preview="receipt.jpg"))
        assert set(data) == set(SNAPSHOT_FIELDS)
        assert "receipt_file" not in data
        assert "receipt_preview" not in data

    def test_restore_ignores_receipt_keys(self):
        form = restore_fields(BookingFormData(), {"venue": "Garden Hall", "receipt_preview": "x.jpg"})
        assert form.venue == "Garden Hall"
        assert form.receipt_preview == ""

    def test_restore_malformed_keeps_form(self):
        form = _details()
        assert restore_fields(form, {"payment_amount": "lots"}) == form
