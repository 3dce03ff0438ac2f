"""
Calendar presentation adapter.

Turns resolved availability into a Sunday-first month grid of cells with a
single display status each, decides which clicks count as a selection, and
keeps the visible month and the selected date's details in sync with the
data source.

Cell status precedence (first match wins):
    today / past -> loading -> preparation -> blocked -> full -> limited -> available

A date whose availability has not been fetched yet is "loading" and cannot
be selected. Default capacity is only assumed after a failed range fetch.

Both fetch kinds are last-request-wins: a response that arrives after a
newer request was issued, or for a month that is no longer visible, is
dropped.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from wedding_booking.availability.resolver import FULL_REASON
from wedding_booking.config import settings
from wedding_booking.errors import ConfigurationError, StaleDataDiscarded, TransportError
from wedding_booking.schemas.availability_schema import DateAvailability
from wedding_booking.utils import Clock, iter_dates, local_now, month_bounds, shift_month, to_iso

if TYPE_CHECKING:
    from wedding_booking.availability.source import AvailabilitySource

logger = logging.getLogger(__name__)

TODAY_MESSAGE = "Please select a future date. Same-day bookings are not allowed."
PAST_MESSAGE = "Past dates are not available for booking."
BLOCKED_MESSAGE = "This date is not available for booking."
LOADING_MESSAGE = "Availability for this date is still loading."
WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


class CellStatus(str, Enum):
    """Display status of one calendar day."""
    PAST = "past"
    TODAY = "today"
    AVAILABLE = "available"
    LIMITED = "limited"
    FULL = "full"
    PREPARATION = "preparation"
    BLOCKED = "blocked"
    LOADING = "loading"


SELECTABLE_STATUSES = frozenset({CellStatus.AVAILABLE, CellStatus.LIMITED})

LEGEND: list[tuple[CellStatus, str]] = [
    (CellStatus.AVAILABLE, "Available"),
    (CellStatus.LIMITED, "Limited slots"),
    (CellStatus.FULL, "Fully Booked"),
    (CellStatus.PREPARATION, "Preparation Period"),
    (CellStatus.BLOCKED, "Unavailable/Blocked"),
    (CellStatus.PAST, "Past Dates"),
    (CellStatus.TODAY, "Today (Not Available)"),
    (CellStatus.LOADING, "Loading"),
]


def _sunday_index(day: date) -> int:
    """Column of ``day`` in a Sunday-first week (Sunday == 0)."""
    return (day.weekday() + 1) % 7


def classify_cell(
    day: date,
    availability: Optional[DateAvailability],
    today: date,
    limited_ratio: float = settings.availability.limited_ratio,
) -> CellStatus:
    """Map a date and its availability (None when not yet fetched) to one display status."""
    if day == today:
        return CellStatus.TODAY
    if day < today:
        return CellStatus.PAST
    if availability is None:
        return CellStatus.LOADING
    if availability.is_preparation_period:
        return CellStatus.PREPARATION
    if availability.is_blocked:
        return CellStatus.BLOCKED
    if availability.available_slots == 0:
        return CellStatus.FULL
    if availability.available_slots <= math.ceil(availability.total_slots * limited_ratio):
        return CellStatus.LIMITED
    return CellStatus.AVAILABLE


def ineligible_reason(
    status: CellStatus,
    availability: Optional[DateAvailability],
    preparation_days: Optional[int],
) -> Optional[str]:
    """Why a cell cannot be selected, or None if it can."""
    if status == CellStatus.TODAY:
        return TODAY_MESSAGE
    if status == CellStatus.PAST:
        return PAST_MESSAGE
    if status == CellStatus.LOADING or availability is None:
        return LOADING_MESSAGE
    if status == CellStatus.PREPARATION:
        if not preparation_days:
            return availability.reason or BLOCKED_MESSAGE
        return (
            f"This date is blocked due to a {preparation_days}-day preparation "
            "period following another confirmed booking."
        )
    if status == CellStatus.BLOCKED:
        return availability.reason or BLOCKED_MESSAGE
    if status == CellStatus.FULL:
        return availability.reason or FULL_REASON
    return None


def tooltip_for(
    status: CellStatus,
    availability: Optional[DateAvailability],
    preparation_days: Optional[int],
) -> str:
    reason = ineligible_reason(status, availability, preparation_days)
    if reason is not None:
        return reason
    return f"{availability.available_slots} of {availability.total_slots} slots available"


@dataclass(frozen=True)
class CalendarCell:
    day: date
    status: CellStatus
    availability: Optional[DateAvailability]
    tooltip: str
    is_selected: bool = False

    @property
    def iso_date(self) -> str:
        return to_iso(self.day)

    @property
    def selectable(self) -> bool:
        return self.status in SELECTABLE_STATUSES


@dataclass
class CalendarMonth:
    """One rendered month; ``weeks`` rows hold None where a day is outside the month."""
    year: int
    month: int
    weeks: list[list[Optional[CalendarCell]]] = field(default_factory=list)

    @property
    def title(self) -> str:
        return date(self.year, self.month, 1).strftime("%B %Y")

    @property
    def cells(self) -> list[CalendarCell]:
        return [cell for week in self.weeks for cell in week if cell is not None]

    def cell(self, day: date) -> Optional[CalendarCell]:
        for candidate in self.cells:
            if candidate.day == day:
                return candidate
        return None


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of clicking a calendar day."""
    selected: bool
    iso_date: str
    status: CellStatus
    reason: Optional[str] = None


class BookingCalendar:
    """
    Month calendar for choosing a wedding date for one package.

    ``on_select`` receives the ISO date of every accepted click; the wizard's
    ``select_date`` is the usual target.
    """

    def __init__(
        self,
        package_id: int,
        source: "AvailabilitySource",
        on_select: Callable[[str], None],
        clock: Clock = local_now,
        default_slots: int = 1,
        limited_ratio: float = settings.availability.limited_ratio,
    ) -> None:
        self.package_id = package_id
        self.source = source
        self.on_select = on_select
        self.clock = clock
        self.default_slots = default_slots
        self.limited_ratio = limited_ratio

        today = clock().date()
        self.year, self.month = today.year, today.month
        self.preparation_days: Optional[int] = None
        self.availability: dict[date, DateAvailability] = {}
        self.loading = False
        self.error: Optional[str] = None
        self.selected_date: Optional[date] = None
        self.selected_details: Optional[DateAvailability] = None

        self._range_seq = 0
        self._detail_seq = 0

    # ------------------------------------------------------------------ #
    # Fetching
    # ------------------------------------------------------------------ #

    def fetch_window(self, year: int, month: int) -> tuple[date, date]:
        """
        Date range requested for a visible month.

        Runs from the 1st to whichever is later: the Saturday closing the
        last grid week, or the month end plus the preparation days.
        """
        first, last = month_bounds(year, month)
        grid_end = last + timedelta(days=6 - _sunday_index(last))
        spill_end = last + timedelta(days=self.preparation_days or 0)
        return first, max(grid_end, spill_end)

    def _ensure_current(self, seq: int, current_seq: int, requested: object, current: object) -> None:
        if seq != current_seq or requested != current:
            raise StaleDataDiscarded(
                f"Discarding response #{seq} for {requested}; current is #{current_seq} for {current}"
            )

    async def _load_preparation_days(self) -> None:
        if self.preparation_days is not None:
            return
        try:
            self.preparation_days = await self.source.get_preparation_days(self.package_id)
        except TransportError as exc:
            logger.warning("Could not load preparation days for package %s: %s", self.package_id, exc)

    async def show_month(self, year: int, month: int) -> CalendarMonth:
        """Make ``(year, month)`` the visible month and load its availability."""
        self.year, self.month = year, month
        self._range_seq += 1
        seq = self._range_seq
        self.loading = True
        self.error = None

        try:
            await self._load_preparation_days()
            start, end = self.fetch_window(year, month)
            try:
                fetched = await self.source.get_availability_range(self.package_id, start, end)
            except TransportError as exc:
                self._ensure_current(seq, self._range_seq, (year, month), (self.year, self.month))
                logger.error("Availability fetch failed for package %s: %s", self.package_id, exc)
                self.error = str(exc)
                fetched = {
                    day: DateAvailability.open_date(day, self.default_slots)
                    for day in iter_dates(start, end)
                }
            self._ensure_current(seq, self._range_seq, (year, month), (self.year, self.month))
        except StaleDataDiscarded as exc:
            logger.debug("%s", exc)
            return self.render()
        except ConfigurationError:
            self.loading = False
            raise

        self.availability = fetched
        self.loading = False
        return self.render()

    async def next_month(self) -> CalendarMonth:
        return await self.show_month(*shift_month(self.year, self.month, 1))

    async def previous_month(self) -> CalendarMonth:
        return await self.show_month(*shift_month(self.year, self.month, -1))

    async def refresh_selected_details(self) -> Optional[DateAvailability]:
        """Fetch fresh details for the selected date, for the summary panel."""
        if self.selected_date is None:
            self.selected_details = None
            return None

        self._detail_seq += 1
        seq = self._detail_seq
        requested = self.selected_date
        try:
            details = await self.source.get_availability(self.package_id, requested)
            self._ensure_current(seq, self._detail_seq, requested, self.selected_date)
        except StaleDataDiscarded as exc:
            logger.debug("%s", exc)
            return self.selected_details
        except TransportError as exc:
            logger.error("Date details fetch failed for %s: %s", requested, exc)
            if seq == self._detail_seq:
                self.selected_details = None
            return None

        self.selected_details = details
        return details

    # ------------------------------------------------------------------ #
    # Rendering and selection
    # ------------------------------------------------------------------ #

    def availability_for(self, day: date) -> Optional[DateAvailability]:
        """Fetched availability, or None while the date is loading or outside the fetched window."""
        if self.loading:
            return None
        return self.availability.get(day)

    def _cell(self, day: date, today: date) -> CalendarCell:
        availability = self.availability_for(day)
        status = classify_cell(day, availability, today, self.limited_ratio)
        return CalendarCell(
            day=day,
            status=status,
            availability=availability,
            tooltip=tooltip_for(status, availability, self.preparation_days),
            is_selected=day == self.selected_date,
        )

    def render(self) -> CalendarMonth:
        """Build the Sunday-first grid for the visible month."""
        today = self.clock().date()
        first, last = month_bounds(self.year, self.month)
        row: list[Optional[CalendarCell]] = [None] * _sunday_index(first)
        view = CalendarMonth(year=self.year, month=self.month)

        day = first
        while day <= last:
            row.append(self._cell(day, today))
            if len(row) == 7:
                view.weeks.append(row)
                row = []
            day += timedelta(days=1)
        if row:
            row.extend([None] * (7 - len(row)))
            view.weeks.append(row)
        return view

    async def click(self, day: date) -> SelectionResult:
        """
        Handle a click on ``day``.

        Ineligible days never change the selection; the reason is returned
        for the UI to show.
        """
        cell = self._cell(day, self.clock().date())
        if not cell.selectable:
            reason = ineligible_reason(cell.status, cell.availability, self.preparation_days)
            logger.debug("Ignoring click on %s (%s)", cell.iso_date, cell.status.value)
            return SelectionResult(False, cell.iso_date, cell.status, reason)

        self.selected_date = day
        self.on_select(cell.iso_date)
        await self.refresh_selected_details()
        return SelectionResult(True, cell.iso_date, cell.status)

    # ------------------------------------------------------------------ #
    # Static panels
    # ------------------------------------------------------------------ #

    def legend(self) -> list[tuple[CellStatus, str]]:
        return list(LEGEND)

    def summary(self) -> list[str]:
        slots = self.default_slots
        lines = [
            f"Default: {slots} slot{'s' if slots != 1 else ''} per date",
            "Bookings must be made at least 1 day in advance. "
            "Today's date is not available for booking.",
        ]
        prep = self.preparation_days or 0
        if prep > 0:
            lines.append(
                f"This package requires {prep} preparation day{'s' if prep != 1 else ''} "
                "after each confirmed booking."
            )
        return lines
