from wedding_booking.booking.form import BookingFormData, StepValidation, validate_step
from wedding_booking.booking.recovery import (
    FileStorage,
    MemoryStorage,
    PendingBookingRecovery,
)
from wedding_booking.booking.state_machine import (
    WizardStateMachine,
    WizardStep,
    WizardTrigger,
)
from wedding_booking.booking.submission import (
    BookingSubmissionPipeline,
    HttpBookingTransport,
    LocalBookingTransport,
)
from wedding_booking.booking.wizard import BookingWizard

__all__ = [
    "BookingWizard",
    "BookingFormData",
    "StepValidation",
    "validate_step",
    "WizardStateMachine",
    "WizardStep",
    "WizardTrigger",
    "PendingBookingRecovery",
    "MemoryStorage",
    "FileStorage",
    "BookingSubmissionPipeline",
    "HttpBookingTransport",
    "LocalBookingTransport",
]
