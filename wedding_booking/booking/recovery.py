"""
Pending-booking recovery across an authentication detour.

When a guest finishes the details step, their form is snapshotted to
device-local storage before the redirect to login. After login the
snapshot is read back exactly once: restored if it is fresh and belongs
to the package being booked, silently dropped otherwise. Every read
deletes it.

Storage is a plain key-value seam with last-write-wins semantics; there is
one snapshot slot per device, not per account.
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from pydantic import ValidationError as SchemaValidationError

from wedding_booking.booking.form import BookingFormData, snapshot_fields
from wedding_booking.config import settings
from wedding_booking.schemas.booking_schema import PendingBooking
from wedding_booking.utils import Clock, local_now

logger = logging.getLogger(__name__)


class SnapshotStorage(Protocol):
    """Device-scoped key-value storage."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage, used by tests and the console demo."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class FileStorage:
    """One JSON file per key under a directory."""

    def __init__(self, directory: Union[str, Path] = settings.recovery.storage_dir) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class PendingBookingRecovery:
    """Snapshot and single-use restore of an in-progress booking."""

    def __init__(
        self,
        storage: SnapshotStorage,
        ttl_seconds: int = settings.recovery.ttl_seconds,
        clock: Clock = local_now,
        key: str = settings.recovery.storage_key,
    ) -> None:
        self.storage = storage
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock
        self.key = key

    def _now_ms(self) -> int:
        return int(self.clock().timestamp() * 1000)

    def snapshot(self, package_id: int, form: BookingFormData) -> PendingBooking:
        """Persist the serializable form fields, replacing any prior snapshot."""
        pending = PendingBooking(
            package_id=package_id,
            form_data=snapshot_fields(form),
            timestamp=self._now_ms(),
        )
        self.storage.set(self.key, pending.model_dump_json(by_alias=True))
        logger.info("Pending booking saved for package %s", package_id)
        return pending

    def restore(self, package_id: int) -> Optional[dict[str, Any]]:
        """
        Read and delete the snapshot.

        Returns:
            The saved form fields if the snapshot is younger than the TTL and
            was taken for ``package_id``; otherwise None.
        """
        raw = self.storage.get(self.key)
        if raw is None:
            return None
        self.storage.delete(self.key)

        try:
            pending = PendingBooking.model_validate_json(raw)
        except SchemaValidationError:
            logger.warning("Discarding unreadable pending booking snapshot")
            return None

        age_ms = self._now_ms() - pending.timestamp
        if age_ms < 0:
            logger.info("Pending booking timestamp is in the future; dropped")
            return None
        if age_ms >= self.ttl.total_seconds() * 1000:
            logger.info("Pending booking expired after %.0fs; dropped", age_ms / 1000)
            return None
        if pending.package_id != package_id:
            logger.info(
                "Pending booking for package %s ignored while booking package %s",
                pending.package_id, package_id,
            )
            return None

        logger.info("Pending booking restored for package %s", package_id)
        return pending.form_data

    def clear(self) -> None:
        """Delete any snapshot. Safe to call when none exists."""
        self.storage.delete(self.key)

    def has_snapshot(self) -> bool:
        return self.storage.get(self.key) is not None
