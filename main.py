"""
Wedding package booking entry point.

Runs the offline console demo, or prints a package's availability calendar
for one month, from the mock catalog or from the marketplace API.

Usage:
    Console demo:   python main.py console [--scenario booking|expired|calendar]
    Month calendar: python main.py calendar <package_id> <YYYY-MM> [--api]
"""

import asyncio
import logging
import sys

from wedding_booking.config import settings
from wedding_booking.errors import BookingError
from wedding_booking.utils import parse_iso_date

logger = logging.getLogger(__name__)

USAGE = (
    "usage: python main.py console [--scenario booking|expired|calendar]\n"
    "       python main.py calendar <package_id> <YYYY-MM> [--api]"
)


def _run_console_mode(argv: list[str]) -> None:
    """Start the offline console demo (no backend required)."""
    from console_demo import main as console_main

    sys.argv = [sys.argv[0], *argv]
    console_main()


async def _print_calendar(package_id: int, year: int, month: int, use_api: bool) -> None:
    from console_demo import format_month
    from wedding_booking.availability.calendar import BookingCalendar
    from wedding_booking.availability.source import HttpAvailabilitySource, LocalAvailabilitySource
    from wedding_booking.tools.packages import get_package

    if use_api:
        source = HttpAvailabilitySource()
        default_slots = 1
    else:
        source = LocalAvailabilitySource()
        package = get_package(package_id)
        default_slots = package.default_slots if package else 1

    calendar = BookingCalendar(
        package_id, source, on_select=lambda iso: None, default_slots=default_slots
    )
    try:
        view = await calendar.show_month(year, month)
    finally:
        if isinstance(source, HttpAvailabilitySource):
            await source.aclose()

    print(format_month(view))
    if calendar.error:
        print(f"Availability could not be loaded ({calendar.error}); showing default capacity.")
    for line in calendar.summary():
        print(line)


def _run_calendar_mode(argv: list[str]) -> None:
    use_api = "--api" in argv
    args = [arg for arg in argv if arg != "--api"]
    if len(args) != 2:
        raise SystemExit(USAGE)
    try:
        package_id = int(args[0])
        first = parse_iso_date(f"{args[1]}-01")
    except ValueError:
        raise SystemExit(USAGE)

    logger.info(
        "Rendering %s for package %s from %s",
        args[1], package_id, settings.api.base_url if use_api else "the offline catalog",
    )
    try:
        asyncio.run(_print_calendar(package_id, first.year, first.month, use_api))
    except BookingError as exc:
        raise SystemExit(f"error: {exc}")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode(sys.argv[2:])
    elif len(sys.argv) > 1 and sys.argv[1] == "calendar":
        _run_calendar_mode(sys.argv[2:])
    else:
        print(USAGE)
