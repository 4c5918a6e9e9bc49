"""
Month-view calendar grid for picking a booking day.

The grid is a Sunday-first month: leading blank cells pad the first week up to
the weekday of day 1, followed by exactly one cell per day of the month. Each
day is classified against the occupied-date set and "today":

    booked     -> in the occupied set (not selectable)
    past       -> strictly before today (not selectable)
    available  -> selectable

`CalendarView` carries the only state that survives navigation: the occupied
set and the single selected date. Every navigation step returns a new view
and the grid is recomputed from scratch.
"""

import calendar
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import AbstractSet, FrozenSet, Iterator, List, Optional, Union

YEAR_OPTION_COUNT = 3
MIN_YEAR = date.min.year
MAX_YEAR = date.max.year


class DayState(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    PAST = "past"


@dataclass(frozen=True)
class BlankCell:
    """Padding before day 1."""

    is_blank = True


@dataclass(frozen=True)
class DayCell:
    date: date
    state: DayState

    is_blank = False

    @property
    def day(self) -> int:
        return self.date.day

    @property
    def selectable(self) -> bool:
        return self.state is DayState.AVAILABLE


Cell = Union[BlankCell, DayCell]

BLANK = BlankCell()


def classify_day(day: date, occupied: AbstractSet[date], today: date) -> DayState:
    if day in occupied:
        return DayState.BOOKED
    if day < today:
        return DayState.PAST
    return DayState.AVAILABLE


def leading_blank_count(year: int, month: int) -> int:
    # date.weekday() is Monday=0; shift so Sunday=0
    return (date(year, month, 1).weekday() + 1) % 7


def build_month_grid(
    year: int,
    month: int,
    occupied: AbstractSet[date],
    today: date,
) -> Iterator[Cell]:
    """Yield the cells of one month in calendar order."""
    for _ in range(leading_blank_count(year, month)):
        yield BLANK

    days_in_month = calendar.monthrange(year, month)[1]
    for day_number in range(1, days_in_month + 1):
        day = date(year, month, day_number)
        yield DayCell(date=day, state=classify_day(day, occupied, today))


def initial_selection(
    requested: Optional[date],
    today: date,
    occupied: AbstractSet[date],
) -> Optional[date]:
    """Pick the date selected on first render.

    A requested date in the past is clamped forward to today. With no request
    the default is today, unless today is already occupied, in which case
    nothing is selected and the visitor has to choose.
    """
    if requested is None:
        return None if today in occupied else today
    return max(requested, today)


@dataclass(frozen=True)
class CalendarView:
    year: int
    month: int
    today: date
    occupied: FrozenSet[date] = field(default_factory=frozenset)
    selected: Optional[date] = None

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be in 1..12, got {self.month}")
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            raise ValueError(f"year out of range: {self.year}")

    @classmethod
    def open(
        cls,
        today: date,
        occupied: AbstractSet[date],
        requested: Optional[date] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> "CalendarView":
        """Build the first view for a page request.

        The displayed month is the explicitly requested one when both `year`
        and `month` are valid, otherwise the month of the selection (or of
        today when nothing is selected).
        """
        candidate = initial_selection(requested, today, occupied)
        anchor = candidate or today
        if year is None or month is None or not 1 <= month <= 12 or not MIN_YEAR <= year <= MAX_YEAR:
            year, month = anchor.year, anchor.month
        view = cls(year=year, month=month, today=today, occupied=frozenset(occupied))
        # A requested day that is already booked is left unselected
        return view.select(candidate) if candidate else view

    @property
    def label(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    def cells(self) -> Iterator[Cell]:
        return build_month_grid(self.year, self.month, self.occupied, self.today)

    def state_of(self, day: date) -> DayState:
        return classify_day(day, self.occupied, self.today)

    def select(self, day: date) -> "CalendarView":
        """Select `day` if it is available; booked and past days are ignored."""
        if self.state_of(day) is not DayState.AVAILABLE:
            return self
        return replace(self, selected=day)

    @property
    def selection_outside_month(self) -> bool:
        return self.selected is not None and (self.selected.year, self.selected.month) != (self.year, self.month)

    def can_shift(self, offset: int) -> bool:
        index = self.year * 12 + (self.month - 1) + offset
        return MIN_YEAR <= index // 12 <= MAX_YEAR

    def shift_month(self, offset: int) -> "CalendarView":
        """Move by `offset` months; stays on the current month past the supported year range."""
        if not self.can_shift(offset):
            return self
        index = self.year * 12 + (self.month - 1) + offset
        return replace(self, year=index // 12, month=index % 12 + 1)

    def with_month(self, month: int) -> "CalendarView":
        return replace(self, month=month)

    def with_year(self, year: int) -> "CalendarView":
        return replace(self, year=year)

    def year_options(self) -> List[int]:
        return [self.today.year + i for i in range(YEAR_OPTION_COUNT)]

    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])
