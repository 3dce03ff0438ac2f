"""
Offline console demo: runs the booking flow end to end without a backend.

Uses the real resolver, calendar, wizard, recovery protocol and submission
pipeline against the mock package catalog and booking ledger. The clock is
simulated so the login detour can be made to take two minutes or six.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario expired
    python console_demo.py --scenario calendar
"""

import argparse
import asyncio
import shlex
from datetime import datetime, timedelta
from typing import Optional

from wedding_booking.auth import LocalAuthSession, User
from wedding_booking.availability.calendar import BookingCalendar, CalendarMonth, CellStatus, WEEKDAY_LABELS
from wedding_booking.availability.source import LocalAvailabilitySource
from wedding_booking.booking.recovery import MemoryStorage, PendingBookingRecovery
from wedding_booking.booking.submission import BookingSubmissionPipeline, LocalBookingTransport
from wedding_booking.booking.wizard import BookingWizard
from wedding_booking.config import settings
from wedding_booking.errors import BookingError
from wedding_booking.tools import bookings as booking_ledger
from wedding_booking.tools import packages as package_catalog
from wedding_booking.utils import parse_iso_date

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_START = datetime(2025, 11, 1, 10, 0)
DEMO_PACKAGE_ID = 7

STATUS_MARKS = {
    CellStatus.PAST: "  .",
    CellStatus.TODAY: "  T",
    CellStatus.AVAILABLE: "",
    CellStatus.LIMITED: "",
    CellStatus.FULL: "  F",
    CellStatus.PREPARATION: "  P",
    CellStatus.BLOCKED: "  X",
    CellStatus.LOADING: "  ?",
}


class DemoClock:
    """Simulated wall clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now += timedelta(minutes=minutes)


def format_month(view: CalendarMonth) -> str:
    """Plain-text month grid: slot counts, or a status mark for unselectable days."""
    lines = [view.title.center(7 * 8), "".join(label.rjust(8) for label in WEEKDAY_LABELS)]
    for week in view.weeks:
        row = []
        for cell in week:
            if cell is None:
                row.append(" " * 8)
                continue
            mark = STATUS_MARKS[cell.status]
            if not mark:
                mark = f"{cell.availability.available_slots}/{cell.availability.total_slots}"
            if cell.is_selected:
                mark = "*" + mark.strip()
            row.append(f"{cell.day.day:>3}{mark:>5}")
        lines.append("".join(row))
    return "\n".join(lines)


class ConsoleSession:
    """Drives one booking wizard and its calendar in the terminal."""

    def __init__(self, package_id: int = DEMO_PACKAGE_ID, start: datetime = DEMO_START) -> None:
        self.clock = DemoClock(start)
        self.storage = MemoryStorage()
        self.recovery = PendingBookingRecovery(self.storage, clock=self.clock)
        self.auth = LocalAuthSession(recovery=self.recovery)
        self.package = package_catalog.get_package(package_id)
        if self.package is None:
            raise SystemExit(f"Unknown package: {package_id}")

        transport = LocalBookingTransport(self.auth, clock=self.clock)
        pipeline = BookingSubmissionPipeline(transport, self.auth, self.recovery, clock=self.clock)
        self.wizard = BookingWizard(
            package_id, self.auth, self.recovery, pipeline, clock=self.clock
        )
        self.calendar = BookingCalendar(
            package_id,
            LocalAvailabilitySource(clock=self.clock),
            on_select=self.wizard.select_date,
            clock=self.clock,
            default_slots=self.package.default_slots,
        )

    def say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Booking]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def show_state(self) -> None:
        form = self.wizard.form
        self.system_log(
            f"step={self.wizard.step.value} date={form.wedding_date or '-'} "
            f"venue={form.venue or '-'} payment={form.payment_method or '-'} "
            f"snapshot={'yes' if self.recovery.has_snapshot() else 'no'}"
        )
        if self.wizard.error:
            print(f"{RED}  !! {self.wizard.error}{RESET}")

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "booking": [
            "calendar 2025-12",
            "pick 2025-12-20",
            "set venue Garden Hall",
            "advance",
            "wait 2",
            "login",
            "set payment_method gcash",
            "set payment_amount 50000",
            "receipt gcash-receipt.jpg",
            "agree",
            "submit",
        ],
        "expired": [
            "calendar 2025-12",
            "pick 2025-12-20",
            "set venue Garden Hall",
            "advance",
            "wait 6",
            "reset",
            "login",
        ],
        "calendar": [
            "seed 2025-12-10",
            "calendar 2025-12",
            "pick 2025-12-11",
            "pick 2025-12-13",
            "next",
            "prev",
        ],
    }

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if steps is None:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {settings.app_name.upper()} - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Package: {self.package.name} (id {self.package.id}){RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}\n")

        for step in steps:
            print(f"\n{BLUE}[Couple] {RESET}{step}")
            self._process_input(step)

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        self.system_log(f"Step trace: {' -> '.join(self.wizard.get_step_trace())}")
        print(f"{BOLD}{'=' * 60}{RESET}\n")

    def run(self) -> None:
        """Interactive mode: one command per line, 'help' lists them."""
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {settings.app_name.upper()} - Console Demo{RESET}")
        print(f"{DIM}  Booking {self.package.name}. Type 'help' for commands, 'quit' to exit.{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        while True:
            try:
                user_input = input(f"\n{BLUE}[Couple] {RESET}").strip()
            except (EOFError, KeyboardInterrupt):
                print(f"\n{DIM}Session ended.{RESET}")
                break
            if not user_input:
                continue
            if user_input.lower() in {"quit", "exit"}:
                break
            self._process_input(user_input)

    # ------------------------------------------------------------------ #
    # Command dispatch
    # ------------------------------------------------------------------ #

    def _process_input(self, text: str) -> None:
        try:
            command, *args = shlex.split(text)
        except ValueError as exc:
            print(f"{RED}  !! {exc}{RESET}")
            return
        handler = getattr(self, f"_cmd_{command.lower()}", None)
        if handler is None:
            self.say(f"Unknown command '{command}'. Type 'help'.")
            return
        try:
            handler(*args)
        except (BookingError, ValueError, TypeError) as exc:
            print(f"{RED}  !! {exc}{RESET}")

    def _cmd_help(self) -> None:
        self.say(
            "calendar YYYY-MM | next | prev | pick YYYY-MM-DD | set FIELD VALUE | "
            "receipt FILENAME | agree | advance | back | wait MINUTES | login | "
            "logout | submit | reset | seed YYYY-MM-DD | state"
        )

    def _cmd_state(self) -> None:
        self.show_state()

    def _show(self, view: CalendarMonth) -> None:
        print(format_month(view))
        if self.calendar.error:
            print(f"{YELLOW}  Availability unavailable ({self.calendar.error}); showing default capacity.{RESET}")
        for line in self.calendar.summary():
            self.system_log(line)

    def _cmd_calendar(self, month: Optional[str] = None) -> None:
        if month:
            first = parse_iso_date(f"{month}-01")
        else:
            first = self.clock().date()
        self._show(asyncio.run(self.calendar.show_month(first.year, first.month)))

    def _cmd_next(self) -> None:
        self._show(asyncio.run(self.calendar.next_month()))

    def _cmd_prev(self) -> None:
        self._show(asyncio.run(self.calendar.previous_month()))

    def _cmd_pick(self, iso_date: str) -> None:
        result = asyncio.run(self.calendar.click(parse_iso_date(iso_date)))
        if not result.selected:
            self.say(result.reason or "That date cannot be selected.")
            return
        details = self.calendar.selected_details
        if details is not None:
            self.say(
                f"{result.iso_date} selected: {details.available_slots}/"
                f"{details.total_slots} slots available."
            )
        self.show_state()

    def _cmd_set(self, field_name: str, *value: str) -> None:
        self.wizard.update(**{field_name: " ".join(value)})
        self.show_state()

    def _cmd_receipt(self, filename: str) -> None:
        content_type = "image/png" if filename.lower().endswith(".png") else "image/jpeg"
        self.wizard.attach_receipt(filename, b"\xff\xd8demo-receipt", content_type)
        self.system_log(f"Receipt attached: {filename}")

    def _cmd_agree(self) -> None:
        self.wizard.update(agreed_to_terms=True, agreed_to_privacy=True)
        self.system_log("Terms and privacy policy accepted")

    def _cmd_advance(self) -> None:
        step = self.wizard.advance()
        if self.auth.pending_redirect:
            self.say(f"Please log in to continue. You'll return to {self.auth.pending_redirect}.")
        elif self.wizard.error:
            self.say("Please fix the highlighted fields.")
        else:
            self.say(f"Moved to {step.value}.")
        self.show_state()

    def _cmd_back(self) -> None:
        self.wizard.back()
        self.show_state()

    def _cmd_wait(self, minutes: str) -> None:
        self.clock.advance(float(minutes))
        self.system_log(f"{minutes} minute(s) pass (now {self.clock().strftime('%H:%M')})")

    def _cmd_login(self, user_id: str = "client-001") -> None:
        return_to = self.auth.login(User(user_id=user_id, name="Demo Couple"))
        restored = self.wizard.on_authenticated(return_to)
        if restored:
            self.say("Welcome back! Your booking details were restored.")
        else:
            self.say("Welcome! Please re-enter your booking details.")
        self.show_state()

    def _cmd_logout(self) -> None:
        self.auth.logout()
        self.system_log("Signed out; pending booking cleared")

    def _cmd_submit(self) -> None:
        booking_id = asyncio.run(self.wizard.submit())
        if booking_id:
            record = booking_ledger.get_booking(booking_id)
            status = record["status"] if record else "pending"
            self.say(f"Booking {booking_id} submitted ({status}). We'll confirm once payment is verified.")
        self.show_state()

    def _cmd_reset(self) -> None:
        self.wizard.reset()
        self.show_state()

    def _cmd_seed(self, iso_date: str) -> None:
        booking_id = booking_ledger.add_confirmed_booking(self.package.id, parse_iso_date(iso_date))
        self.system_log(f"Seeded confirmed booking {booking_id} on {iso_date}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline wedding booking console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    parser.add_argument(
        "--package",
        type=int,
        default=DEMO_PACKAGE_ID,
        help="Package id from the mock catalog",
    )
    args = parser.parse_args()

    session = ConsoleSession(package_id=args.package)
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
