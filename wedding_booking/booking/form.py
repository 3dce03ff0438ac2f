"""
Booking form data and per-step validation gates.

The wizard never stores a "valid" flag: every gate is recomputed from the
current form state, so a value edited after passing a step is re-checked on
the next transition and again at submission.

Usage:
    form = BookingFormData(wedding_date="2025-12-20", venue="Garden Hall")
    result = validate_step(form, WizardStep.DETAILS, today=date(2025, 10, 1))
    assert result.is_valid
"""

import logging
import re
from dataclasses import dataclass, field, fields, replace
from datetime import date
from typing import Any, Callable, Optional

from wedding_booking.booking.state_machine import WizardStep
from wedding_booking.config import settings
from wedding_booking.schemas.booking_schema import ReceiptFile
from wedding_booking.utils import parse_iso_date

logger = logging.getLogger(__name__)

PAYMENT_METHODS: frozenset[str] = frozenset({"gcash", "maya", "bank_transfer"})
RECEIPT_CONTENT_TYPES: frozenset[str] = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
)
RECEIPT_EXTENSIONS: frozenset[str] = frozenset({"jpeg", "jpg", "png", "gif", "webp"})
TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")

# Fields that survive an authentication detour. The receipt and its preview
# are bound to an in-memory file and are re-attached by the user.
SNAPSHOT_FIELDS: tuple[str, ...] = (
    "wedding_date",
    "wedding_time",
    "venue",
    "special_requests",
    "payment_method",
    "payment_amount",
    "agreed_to_terms",
    "agreed_to_privacy",
    "allow_marketing",
)


@dataclass
class BookingFormData:
    """
    Wizard-local booking form state.

    Lives only for the active session; discarded on reset.
    """
    wedding_date: str = ""
    wedding_time: str = ""
    venue: str = ""
    special_requests: str = ""
    payment_method: str = ""
    payment_amount: float = 0.0
    receipt_file: Optional[ReceiptFile] = None
    receipt_preview: str = ""
    agreed_to_terms: bool = False
    agreed_to_privacy: bool = False
    allow_marketing: bool = False

    @property
    def has_receipt(self) -> bool:
        return self.receipt_file is not None or bool(self.receipt_preview)


@dataclass
class StepValidation:
    """Outcome of a step's validation gate."""
    is_valid: bool
    errors: list[str] = field(default_factory=list)


FORM_FIELD_NAMES: frozenset[str] = frozenset(f.name for f in fields(BookingFormData))


def _check_wedding_date(form: BookingFormData, today: date) -> list[str]:
    if not form.wedding_date.strip():
        return ["Wedding date is required"]
    try:
        wedding_date = parse_iso_date(form.wedding_date)
    except ValueError:
        return ["Wedding date must be a valid date (YYYY-MM-DD)"]
    if wedding_date <= today:
        return ["Wedding date must be in the future"]
    return []


def _check_venue(form: BookingFormData, today: date) -> list[str]:
    return [] if form.venue.strip() else ["Venue is required"]


def _check_wedding_time(form: BookingFormData, today: date) -> list[str]:
    value = form.wedding_time.strip()
    if value and not TIME_PATTERN.match(value):
        return ["Wedding time must be in HH:MM format"]
    return []


def _check_payment_method(form: BookingFormData, today: date) -> list[str]:
    if not form.payment_method:
        return ["Please select a payment method"]
    if form.payment_method not in PAYMENT_METHODS:
        return [f"Unsupported payment method: {form.payment_method}"]
    return []


def _check_payment_amount(form: BookingFormData, today: date) -> list[str]:
    return [] if form.payment_amount > 0 else ["Payment amount is required"]


def _check_receipt(form: BookingFormData, today: date) -> list[str]:
    if not form.has_receipt:
        return ["Please upload your payment receipt"]
    receipt = form.receipt_file
    if receipt is None:
        return []
    errors = []
    extension = receipt.filename.rsplit(".", 1)[-1].lower() if "." in receipt.filename else ""
    if receipt.content_type.lower() not in RECEIPT_CONTENT_TYPES or extension not in RECEIPT_EXTENSIONS:
        errors.append("Only image files (JPEG, JPG, PNG, GIF, WEBP) are allowed for receipts")
    if receipt.size > settings.upload.max_receipt_bytes:
        limit_mb = settings.upload.max_receipt_bytes // (1024 * 1024)
        errors.append(f"Receipt file must be {limit_mb}MB or smaller")
    return errors


def _check_terms(form: BookingFormData, today: date) -> list[str]:
    return [] if form.agreed_to_terms else ["You must agree to the Terms and Conditions"]


def _check_privacy(form: BookingFormData, today: date) -> list[str]:
    return [] if form.agreed_to_privacy else ["You must agree to the Privacy Policy"]


Check = Callable[[BookingFormData, date], list[str]]

STEP_CHECKS: dict[WizardStep, list[Check]] = {
    WizardStep.DETAILS: [_check_wedding_date, _check_venue, _check_wedding_time],
    WizardStep.CONFIRMATION: [
        _check_payment_method,
        _check_payment_amount,
        _check_receipt,
        _check_terms,
        _check_privacy,
    ],
    WizardStep.SUCCESS: [],
}


def validate_step(form: BookingFormData, step: WizardStep, today: date) -> StepValidation:
    """Run a step's validation gate against the current form state."""
    errors: list[str] = []
    for check in STEP_CHECKS[step]:
        errors.extend(check(form, today))
    if errors:
        logger.debug("Step '%s' failed validation: %s", step.value, errors)
    return StepValidation(is_valid=not errors, errors=errors)


def validate_all(form: BookingFormData, today: date) -> StepValidation:
    """Both gates together, as re-checked at submission time."""
    details = validate_step(form, WizardStep.DETAILS, today)
    confirmation = validate_step(form, WizardStep.CONFIRMATION, today)
    errors = details.errors + confirmation.errors
    return StepValidation(is_valid=not errors, errors=errors)


def update_form(form: BookingFormData, **changes: Any) -> BookingFormData:
    """Return a copy of the form with the given fields changed."""
    unknown = set(changes) - FORM_FIELD_NAMES
    if unknown:
        raise ValueError(f"Unknown booking form field(s): {', '.join(sorted(unknown))}")
    if "payment_amount" in changes:
        changes["payment_amount"] = float(changes["payment_amount"] or 0)
    return replace(form, **changes)


def snapshot_fields(form: BookingFormData) -> dict[str, Any]:
    """Serializable subset of the form, keyed by field name."""
    return {name: getattr(form, name) for name in SNAPSHOT_FIELDS}


def restore_fields(form: BookingFormData, data: dict[str, Any]) -> BookingFormData:
    """Apply restorable snapshot values, ignoring anything else in ``data``."""
    restorable = {
        name: value for name, value in data.items()
        if name in SNAPSHOT_FIELDS and value is not None
    }
    try:
        return update_form(form, **restorable)
    except (TypeError, ValueError):
        logger.warning("Discarding malformed pending booking fields")
        return form
