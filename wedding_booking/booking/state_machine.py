"""
Finite state machine for the booking wizard's step flow.

Three steps (details, confirmation, success) and an explicit transition
table. Every step change goes through ``transition``; anything not in the
table is rejected, so the wizard can never skip a step forward.

Usage:
    sm = WizardStateMachine()
    sm.transition(WizardTrigger.ADVANCE)
    assert sm.current_step == WizardStep.CONFIRMATION
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class WizardStep(str, Enum):
    """All steps of the booking wizard."""
    DETAILS = "details"
    CONFIRMATION = "confirmation"
    SUCCESS = "success"


class WizardTrigger(str, Enum):
    """Events that cause step transitions."""
    ADVANCE = "advance"
    BACK = "back"
    RESTORE = "restore"
    SUBMIT_SUCCEEDED = "submit_succeeded"
    RESET = "reset"


@dataclass(frozen=True)
class Transition:
    """A single valid step transition."""
    from_step: WizardStep
    to_step: WizardStep
    trigger: WizardTrigger


@dataclass
class StepEntry:
    """Recorded history entry for a step visit."""
    step: WizardStep
    entered_at: datetime
    trigger: Optional[WizardTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current step."""


class WizardStateMachine:
    """
    Deterministic state machine for the booking wizard.

    Validation gates live in the wizard; this class only knows which
    step changes are legal.
    """

    TRANSITIONS: list[Transition] = [
        # --- Forward ---
        Transition(WizardStep.DETAILS, WizardStep.CONFIRMATION, WizardTrigger.ADVANCE),
        Transition(WizardStep.DETAILS, WizardStep.CONFIRMATION, WizardTrigger.RESTORE),
        Transition(WizardStep.CONFIRMATION, WizardStep.SUCCESS, WizardTrigger.SUBMIT_SUCCEEDED),

        # --- Back ---
        Transition(WizardStep.CONFIRMATION, WizardStep.DETAILS, WizardTrigger.BACK),

        # --- Reset ---
        Transition(WizardStep.DETAILS, WizardStep.DETAILS, WizardTrigger.RESET),
        Transition(WizardStep.CONFIRMATION, WizardStep.DETAILS, WizardTrigger.RESET),
        Transition(WizardStep.SUCCESS, WizardStep.DETAILS, WizardTrigger.RESET),
    ]

    def __init__(self) -> None:
        self._current_step = WizardStep.DETAILS
        self._history: list[StepEntry] = [
            StepEntry(step=WizardStep.DETAILS, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_step(self) -> WizardStep:
        return self._current_step

    def can_transition(self, trigger: WizardTrigger) -> bool:
        return trigger in self.get_valid_triggers()

    def transition(self, trigger: WizardTrigger) -> WizardStep:
        """
        Execute a step transition.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_step == self._current_step and t.trigger == trigger:
                old_step = self._current_step
                self._current_step = t.to_step
                self._history.append(StepEntry(
                    step=self._current_step,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                logger.debug(
                    "Wizard transition: %s -> %s (trigger: %s)",
                    old_step.value, self._current_step.value, trigger.value,
                )
                return self._current_step

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_step.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[WizardTrigger]:
        """Return all triggers valid from the current step."""
        return [t.trigger for t in self.TRANSITIONS if t.from_step == self._current_step]

    def get_history(self) -> list[StepEntry]:
        return list(self._history)

    def get_step_trace(self) -> list[str]:
        """Return ordered list of step names visited."""
        return [entry.step.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_step == WizardStep.SUCCESS
