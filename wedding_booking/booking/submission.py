"""
Booking submission pipeline.

Re-checks every precondition against the current form (nothing is trusted
from earlier steps), packs text fields and the receipt into one multipart
request, and translates transport outcomes into the booking error taxonomy.
"""

import logging
from typing import Optional, Protocol

import httpx
from pydantic import ValidationError as SchemaValidationError

from wedding_booking.auth import AuthCapability
from wedding_booking.booking.form import BookingFormData, validate_all
from wedding_booking.booking.recovery import PendingBookingRecovery
from wedding_booking.config import settings
from wedding_booking.errors import (
    AuthenticationRequired,
    SessionExpired,
    TransportError,
    ValidationError,
)
from wedding_booking.schemas.booking_schema import CreateBookingResponse, ReceiptFile
from wedding_booking.tools import bookings as booking_ledger
from wedding_booking.utils import Clock, local_now

logger = logging.getLogger(__name__)

BOOKINGS_PATH = "/bookings"
RECEIPT_FIELD = "receiptFile"


class BookingTransport(Protocol):
    """Delivers a booking payload to the booking-creation endpoint."""

    async def create_booking(
        self, fields: dict[str, str], receipt: Optional[ReceiptFile]
    ) -> CreateBookingResponse: ...


def _format_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else str(amount)


def build_payload(package_id: int, form: BookingFormData) -> dict[str, str]:
    """Text parts of the multipart payload; every value is a string."""
    payload = {
        "packageId": str(package_id),
        "weddingDate": form.wedding_date.strip(),
        "venue": form.venue.strip(),
        "paymentMethod": form.payment_method,
        "paymentAmount": _format_amount(form.payment_amount),
        "allowMarketing": "true" if form.allow_marketing else "false",
    }
    if form.wedding_time.strip():
        payload["weddingTime"] = form.wedding_time.strip()
    if form.special_requests.strip():
        payload["specialRequests"] = form.special_requests.strip()
    return payload


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return default


class HttpBookingTransport:
    """POSTs the booking as multipart form data to the marketplace API."""

    def __init__(self, http: Optional[httpx.AsyncClient] = None) -> None:
        self.http = http or httpx.AsyncClient(
            base_url=settings.api.base_url,
            timeout=settings.api.timeout_sec,
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    async def create_booking(
        self, fields: dict[str, str], receipt: Optional[ReceiptFile]
    ) -> CreateBookingResponse:
        files = None
        if receipt is not None:
            files = {RECEIPT_FIELD: (receipt.filename, receipt.content, receipt.content_type)}
        try:
            response = await self.http.post(BOOKINGS_PATH, data=fields, files=files)
        except httpx.HTTPError as exc:
            raise TransportError(f"booking_request_failed: {exc}") from exc

        if response.status_code == 401:
            raise SessionExpired("Session expired. Please log in again.")
        if response.status_code in {400, 409, 422}:
            message = _error_message(response, "Booking was rejected")
            raise ValidationError([message])
        if response.status_code >= 400:
            raise TransportError(
                _error_message(response, f"booking_error_{response.status_code}")
            )

        try:
            return CreateBookingResponse.model_validate(response.json())
        except (ValueError, SchemaValidationError) as exc:
            raise TransportError("booking_response_malformed") from exc


class LocalBookingTransport:
    """Routes submissions to the in-memory booking ledger."""

    def __init__(self, auth: AuthCapability, clock: Clock = local_now) -> None:
        self.auth = auth
        self.clock = clock

    async def create_booking(
        self, fields: dict[str, str], receipt: Optional[ReceiptFile]
    ) -> CreateBookingResponse:
        user = self.auth.current_user
        if not self.auth.is_authenticated or user is None:
            raise SessionExpired("Session expired. Please log in again.")
        result = booking_ledger.create_booking(
            fields, receipt, client_id=user.user_id, today=self.clock().date()
        )
        if not result["success"]:
            raise ValidationError([result["message"]])
        return CreateBookingResponse(
            booking_id=result["booking_id"],
            status=result["status"],
            message=result["message"],
        )


class BookingSubmissionPipeline:
    """Validates, packages and sends a booking, then cleans up recovery state."""

    def __init__(
        self,
        transport: BookingTransport,
        auth: AuthCapability,
        recovery: PendingBookingRecovery,
        clock: Clock = local_now,
    ) -> None:
        self.transport = transport
        self.auth = auth
        self.recovery = recovery
        self.clock = clock

    async def submit(self, package_id: int, form: BookingFormData) -> CreateBookingResponse:
        """
        Create a booking from the current form state.

        Raises:
            AuthenticationRequired: Caller is not signed in.
            ValidationError: A step gate fails, or the server rejected the data.
            SessionExpired: Authentication lapsed mid-submission.
            TransportError: Network or server failure; safe to retry.
        """
        if not self.auth.is_authenticated:
            raise AuthenticationRequired(
                "Authentication required. Please log in to complete your booking."
            )

        validation = validate_all(form, self.clock().date())
        if not validation.is_valid:
            raise ValidationError(validation.errors)

        payload = build_payload(package_id, form)
        logger.info(
            "Submitting booking for package %s on %s", package_id, payload["weddingDate"]
        )
        response = await self.transport.create_booking(payload, form.receipt_file)

        self.recovery.clear()
        logger.info("Booking %s created (%s)", response.booking_id, response.status.value)
        return response
