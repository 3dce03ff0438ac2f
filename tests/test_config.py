"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from wedding_booking.config import (
    ApiConfig,
    AppConfig,
    AvailabilityConfig,
    RecoveryConfig,
    UploadConfig,
    _safe_bool,
    _safe_float,
    _safe_int,
    _validate_config,
)


class TestConfigDefaults:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_recovery_defaults(self):
        config = RecoveryConfig()
        assert config.ttl_seconds == 300
        assert config.storage_key == "pendingBooking"

    def test_availability_defaults(self):
        config = AvailabilityConfig()
        assert config.limited_ratio == pytest.approx(0.2)
        assert config.upcoming_days_ahead == 30
        assert config.upcoming_limit == 7
        assert config.wedding_date_precedence is True

    def test_upload_limit_is_ten_megabytes(self):
        assert UploadConfig().max_receipt_bytes == 10 * 1024 * 1024


class TestConfigValidation:
    def test_limited_ratio_above_one(self):
        config = replace(AppConfig(), availability=replace(AvailabilityConfig(), limited_ratio=1.5))
        with pytest.raises(ValueError, match="AVAILABILITY_LIMITED_RATIO"):
            _validate_config(config)

    def test_limited_ratio_zero(self):
        config = replace(AppConfig(), availability=replace(AvailabilityConfig(), limited_ratio=0.0))
        with pytest.raises(ValueError, match="AVAILABILITY_LIMITED_RATIO"):
            _validate_config(config)

    def test_ttl_must_be_positive(self):
        config = replace(AppConfig(), recovery=replace(RecoveryConfig(), ttl_seconds=0))
        with pytest.raises(ValueError, match="PENDING_BOOKING_TTL_SECONDS"):
            _validate_config(config)

    def test_storage_key_not_blank(self):
        config = replace(AppConfig(), recovery=replace(RecoveryConfig(), storage_key="  "))
        with pytest.raises(ValueError, match="PENDING_BOOKING_KEY"):
            _validate_config(config)

    def test_base_url_must_be_http(self):
        config = replace(AppConfig(), api=replace(ApiConfig(), base_url="ftp://example.com"))
        with pytest.raises(ValueError, match="API_BASE_URL"):
            _validate_config(config)

    def test_timeout_must_be_positive(self):
        config = replace(AppConfig(), api=replace(ApiConfig(), timeout_sec=0))
        with pytest.raises(ValueError, match="API_TIMEOUT"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_parsing(self):
        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_float_parsing(self):
        assert _safe_float("NONEXISTENT_VAR_12345", "0.25") == pytest.approx(0.25)

    def test_safe_int_invalid_names_variable(self, monkeypatch):
        monkeypatch.setenv("TEST_BAD_INT", "five")
        with pytest.raises(ValueError, match="TEST_BAD_INT"):
            _safe_int("TEST_BAD_INT", "1")

    @pytest.mark.parametrize("raw,expected", [("true", True), ("0", False), ("Yes", True), ("off", False)])
    def test_safe_bool_parsing(self, monkeypatch, raw, expected):
        monkeypatch.setenv("TEST_FLAG", raw)
        assert _safe_bool("TEST_FLAG", "true") is expected

    def test_safe_bool_invalid(self, monkeypatch):
        monkeypatch.setenv("TEST_FLAG", "maybe")
        with pytest.raises(ValueError, match="TEST_FLAG"):
            _safe_bool("TEST_FLAG", "true")
