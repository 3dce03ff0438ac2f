"""
Authentication capability consumed by the booking core.

Session management lives outside this package. The core only needs to
know whether the caller is signed in, who they are, and how to send them
to the login page with a way back.
"""

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from wedding_booking.booking.recovery import PendingBookingRecovery

logger = logging.getLogger(__name__)

BOOKING_PATH_PATTERN = re.compile(r"^/booking/(\d+)/?$")


@dataclass(frozen=True)
class User:
    """Signed-in marketplace user."""
    user_id: str
    role: str = "client"
    name: str = ""


class AuthCapability(Protocol):
    @property
    def is_authenticated(self) -> bool: ...

    @property
    def current_user(self) -> Optional[User]: ...

    def redirect_to_login(self, return_to: str) -> None: ...


def booking_return_path(package_id: int) -> str:
    return f"/booking/{package_id}"


def booking_package_from_path(path: Optional[str]) -> Optional[int]:
    """Package id if ``path`` is a booking-flow return destination."""
    if not path:
        return None
    match = BOOKING_PATH_PATTERN.match(path.strip())
    return int(match.group(1)) if match else None


class LocalAuthSession:
    """
    In-memory auth session for the offline demo and tests.

    Logging out clears the device's pending booking, as the web client's
    auth store does.
    """

    def __init__(
        self,
        user: Optional[User] = None,
        recovery: Optional["PendingBookingRecovery"] = None,
    ) -> None:
        self._user = user
        self.recovery = recovery
        self.pending_redirect: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    def redirect_to_login(self, return_to: str) -> None:
        self.pending_redirect = return_to
        logger.info("Redirecting to login (return to %s)", return_to)

    def login(self, user: User) -> Optional[str]:
        """Sign in and hand back the return destination, if any."""
        self._user = user
        return_to, self.pending_redirect = self.pending_redirect, None
        logger.info("User %s signed in", user.user_id)
        return return_to

    def logout(self) -> None:
        self._user = None
        if self.recovery is not None:
            self.recovery.clear()
        logger.info("User signed out")

    def expire(self) -> None:
        """Drop the session without the logout cleanup, as a lapsed token would."""
        self._user = None
