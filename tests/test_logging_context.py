"""Tests for the booking-session correlation ID."""

import logging

from wedding_booking.logging_context import (
    SessionIdFilter,
    get_session_id,
    get_session_logger,
    set_session_id,
)


class TestSessionId:
    def test_set_and_get(self):
        set_session_id("BKS-abc123")
        assert get_session_id() == "BKS-abc123"

    def test_filter_tags_record(self):
        set_session_id("BKS-def456")
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)
        assert SessionIdFilter().filter(record)
        assert record.session_id == "BKS-def456"

    def test_filter_attached_once(self):
        logger = get_session_logger("tests.session")
        get_session_logger("tests.session")
        assert sum(isinstance(f, SessionIdFilter) for f in logger.filters) == 1

    def test_wizard_actions_set_session(self, wizard):
        wizard.update(venue="Garden Hall")
        assert get_session_id() == wizard.session_id
        assert wizard.session_id.startswith("BKS-")
