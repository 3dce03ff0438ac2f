"""
Centralized configuration with environment variable overrides.

Availability thresholds, the pending-booking freshness window, upload limits
and API endpoints are configurable here. Nothing is hardcoded in the
resolver, wizard or transport logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var (1/0, true/false, yes/no, on/off)."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class AvailabilityConfig:
    """Calendar classification and upcoming-date projection settings."""

    limited_ratio: float = _safe_float("AVAILABILITY_LIMITED_RATIO", "0.2")
    upcoming_days_ahead: int = _safe_int("AVAILABILITY_UPCOMING_DAYS_AHEAD", "30")
    upcoming_limit: int = _safe_int("AVAILABILITY_UPCOMING_LIMIT", "7")
    # When true, a wedding date inside another booking's preparation window
    # is only blocked once its own slots run out.
    wedding_date_precedence: bool = _safe_bool(
        "AVAILABILITY_WEDDING_DATE_PRECEDENCE", "true"
    )


@dataclass(frozen=True)
class RecoveryConfig:
    """Pending-booking snapshot settings."""

    ttl_seconds: int = _safe_int("PENDING_BOOKING_TTL_SECONDS", "300")
    storage_dir: str = os.getenv("PENDING_BOOKING_DIR", ".wedding_booking")
    storage_key: str = os.getenv("PENDING_BOOKING_KEY", "pendingBooking")


@dataclass(frozen=True)
class UploadConfig:
    """Receipt upload limits."""

    max_receipt_bytes: int = _safe_int("MAX_RECEIPT_BYTES", str(10 * 1024 * 1024))


@dataclass(frozen=True)
class ApiConfig:
    """Backend endpoints used by the HTTP data source and booking transport."""

    base_url: str = os.getenv("API_BASE_URL", "http://localhost:5000/api")
    timeout_sec: float = _safe_float("API_TIMEOUT", "30.0")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    availability: AvailabilityConfig = field(default_factory=AvailabilityConfig)
    recovery: RecoveryConfig = field(default_factory=RecoveryConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "Wedding Package Booking")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 0.0 < config.availability.limited_ratio <= 1.0:
        raise ValueError(
            "AVAILABILITY_LIMITED_RATIO must be in (0.0, 1.0], "
            f"got {config.availability.limited_ratio}"
        )
    if config.availability.upcoming_days_ahead < 1:
        raise ValueError(
            "AVAILABILITY_UPCOMING_DAYS_AHEAD must be >= 1, "
            f"got {config.availability.upcoming_days_ahead}"
        )
    if config.availability.upcoming_limit < 1:
        raise ValueError(
            f"AVAILABILITY_UPCOMING_LIMIT must be >= 1, got {config.availability.upcoming_limit}"
        )
    if config.recovery.ttl_seconds < 1:
        raise ValueError(
            f"PENDING_BOOKING_TTL_SECONDS must be >= 1, got {config.recovery.ttl_seconds}"
        )
    if not config.recovery.storage_key.strip():
        raise ValueError("PENDING_BOOKING_KEY must not be empty")
    if config.upload.max_receipt_bytes < 1:
        raise ValueError(
            f"MAX_RECEIPT_BYTES must be >= 1, got {config.upload.max_receipt_bytes}"
        )
    if config.api.timeout_sec <= 0:
        raise ValueError(f"API_TIMEOUT must be > 0, got {config.api.timeout_sec}")
    if not config.api.base_url.startswith(("http://", "https://")):
        raise ValueError(f"API_BASE_URL must be an http(s) URL, got {config.api.base_url!r}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
