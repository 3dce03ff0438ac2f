"""
Booking wizard: form state, step gates, login detour and submission.

This is the seam the surrounding UI talks to. It owns one form, one state
machine and one error slot; recovery and submission are delegated to
their own components.

Flow:
    details --advance--> confirmation --submit--> success --reset--> details
              (guest? snapshot, redirect to login, restore on return)
"""

import uuid
from typing import Any, Optional

from wedding_booking.auth import AuthCapability, booking_package_from_path, booking_return_path
from wedding_booking.booking.form import (
    BookingFormData,
    StepValidation,
    restore_fields,
    update_form,
    validate_step,
)
from wedding_booking.booking.recovery import PendingBookingRecovery
from wedding_booking.booking.state_machine import (
    WizardStateMachine,
    WizardStep,
    WizardTrigger,
)
from wedding_booking.booking.submission import BookingSubmissionPipeline
from wedding_booking.errors import (
    AuthenticationRequired,
    SessionExpired,
    TransportError,
    ValidationError,
)
from wedding_booking.logging_context import get_session_logger, set_session_id
from wedding_booking.schemas.booking_schema import ReceiptFile
from wedding_booking.utils import Clock, local_now

logger = get_session_logger(__name__)

SESSION_EXPIRED_MESSAGE = "Session expired. Please log in again."
SUBMIT_FAILED_MESSAGE = "Failed to submit booking. Please try again."


class BookingWizard:
    """Two-step booking wizard for a single package."""

    def __init__(
        self,
        package_id: int,
        auth: AuthCapability,
        recovery: PendingBookingRecovery,
        pipeline: BookingSubmissionPipeline,
        clock: Clock = local_now,
    ) -> None:
        self.package_id = package_id
        self.auth = auth
        self.recovery = recovery
        self.pipeline = pipeline
        self.clock = clock
        self.session_id = f"BKS-{uuid.uuid4().hex[:6]}"
        self._sm = WizardStateMachine()
        self._reset_state()

    def _reset_state(self) -> None:
        self.form = BookingFormData()
        self.error: Optional[str] = None
        self.show_field_errors = False
        self.is_submitting = False
        self.booking_id: Optional[str] = None
        self.awaiting_login = False

    def _begin_action(self) -> None:
        set_session_id(self.session_id)
        self.error = None

    # ------------------------------------------------------------------ #
    # State queries
    # ------------------------------------------------------------------ #

    @property
    def step(self) -> WizardStep:
        return self._sm.current_step

    def get_step_trace(self) -> list[str]:
        return self._sm.get_step_trace()

    def validation(self, step: Optional[WizardStep] = None) -> StepValidation:
        """Validation gate for ``step`` (default: the current step)."""
        return validate_step(self.form, step or self.step, self.clock().date())

    # ------------------------------------------------------------------ #
    # Form input
    # ------------------------------------------------------------------ #

    def select_date(self, iso_date: str) -> None:
        """Date-selection callback for the calendar."""
        self.update(wedding_date=iso_date)

    def update(self, **changes: Any) -> None:
        """Merge field changes into the form."""
        self._begin_action()
        if self.step == WizardStep.SUCCESS:
            logger.warning("Ignoring form change after booking %s succeeded", self.booking_id)
            return
        self.form = update_form(self.form, **changes)

    def attach_receipt(self, filename: str, content: bytes, content_type: str = "image/jpeg") -> None:
        self.update(
            receipt_file=ReceiptFile(filename=filename, content=content, content_type=content_type),
            receipt_preview=filename,
        )

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #

    def advance(self) -> WizardStep:
        """
        Try to move forward from the details step.

        On a failed gate the wizard stays put, keeps the first error in the
        error slot and asks the UI to show every field error. A guest who
        passes the gate is sent to log in with their details saved.
        """
        self._begin_action()
        if self.step != WizardStep.DETAILS:
            logger.debug("advance() ignored in step '%s'", self.step.value)
            return self.step

        result = self.validation()
        if not result.is_valid:
            self.error = result.errors[0]
            self.show_field_errors = True
            return self.step

        try:
            self._require_authentication()
        except AuthenticationRequired:
            self._hand_off_to_login()
            return self.step

        self.show_field_errors = False
        return self._sm.transition(WizardTrigger.ADVANCE)

    def back(self) -> WizardStep:
        """Return to details without touching entered data."""
        self._begin_action()
        if self.step == WizardStep.CONFIRMATION:
            self.show_field_errors = False
            return self._sm.transition(WizardTrigger.BACK)
        return self.step

    def reset(self) -> WizardStep:
        """Discard everything and start again at details."""
        set_session_id(self.session_id)
        self._sm.transition(WizardTrigger.RESET)
        self._reset_state()
        logger.info("Booking wizard reset")
        return self.step

    # ------------------------------------------------------------------ #
    # Login detour
    # ------------------------------------------------------------------ #

    def _require_authentication(self) -> None:
        if not self.auth.is_authenticated:
            raise AuthenticationRequired("Please log in to continue your booking.")

    def _hand_off_to_login(self) -> None:
        self.recovery.snapshot(self.package_id, self.form)
        self.awaiting_login = True
        self.auth.redirect_to_login(booking_return_path(self.package_id))
        logger.info("Guest sent to login from details step")

    def on_authenticated(self, return_to: Optional[str]) -> bool:
        """
        Resume after login.

        Returns:
            True if saved details were restored into this wizard.
        """
        set_session_id(self.session_id)
        self.awaiting_login = False
        if booking_package_from_path(return_to) is None:
            return False

        data = self.recovery.restore(self.package_id)
        if data is None:
            return False

        self.form = restore_fields(self.form, data)
        if self.step == WizardStep.DETAILS and self.validation(WizardStep.DETAILS).is_valid:
            self._sm.transition(WizardTrigger.RESTORE)
        logger.info("Booking resumed at step '%s'", self.step.value)
        return True

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    async def submit(self) -> Optional[str]:
        """
        Submit the booking from the confirmation step.

        Returns:
            The new booking id, or None if nothing was created.
        """
        if self.is_submitting:
            logger.debug("Submission already in flight; ignored")
            return None
        self._begin_action()
        if self.step != WizardStep.CONFIRMATION:
            logger.debug("submit() ignored in step '%s'", self.step.value)
            return None

        result = self.validation()
        if not result.is_valid:
            self.error = result.errors[0]
            self.show_field_errors = True
            return None

        self.is_submitting = True
        try:
            response = await self.pipeline.submit(self.package_id, self.form)
        except SessionExpired:
            self.error = SESSION_EXPIRED_MESSAGE
            return None
        except AuthenticationRequired as exc:
            self.error = str(exc)
            return None
        except ValidationError as exc:
            self.error = str(exc)
            return None
        except TransportError:
            logger.exception("Booking submission failed")
            self.error = SUBMIT_FAILED_MESSAGE
            return None
        finally:
            self.is_submitting = False

        self.booking_id = response.booking_id
        self._sm.transition(WizardTrigger.SUBMIT_SUCCEEDED)
        return self.booking_id
