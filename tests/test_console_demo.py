"""Tests for the scripted console demo scenarios."""

import asyncio

from console_demo import ConsoleSession, format_month
from wedding_booking.booking.state_machine import WizardStep


class TestScenarios:
    def test_booking_scenario_reaches_success(self, capsys):
        session = ConsoleSession()
        session.run_scenario("booking")
        assert session.wizard.step == WizardStep.SUCCESS
        assert session.wizard.booking_id.startswith("WB-")
        assert not session.recovery.has_snapshot()
        assert "Your booking details were restored" in capsys.readouterr().out

    def test_expired_scenario_starts_over(self, capsys):
        session = ConsoleSession()
        session.run_scenario("expired")
        assert session.wizard.step == WizardStep.DETAILS
        assert session.wizard.form.venue == ""
        assert not session.recovery.has_snapshot()
        assert "Please re-enter your booking details" in capsys.readouterr().out

    def test_calendar_scenario_refuses_preparation_day(self, capsys):
        session = ConsoleSession()
        session.run_scenario("calendar")
        out = capsys.readouterr().out
        assert "2-day preparation period" in out
        assert session.wizard.form.wedding_date == "2025-12-13"

    def test_unknown_command_is_reported(self, capsys):
        ConsoleSession()._process_input("dance")
        assert "Unknown command 'dance'" in capsys.readouterr().out


class TestFormatMonth:
    def test_grid_has_header_and_weeks(self):
        session = ConsoleSession()
        view = asyncio.run(session.calendar.show_month(2025, 12))
        lines = format_month(view).splitlines()
        assert "December 2025" in lines[0]
        assert lines[1].split() == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        assert len(lines) == 2 + len(view.weeks)
