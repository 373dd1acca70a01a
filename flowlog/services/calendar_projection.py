"""
Calendar projection: stored entries → one month of calendar cells.

Public API
----------
build(year, month, entries)      → list[CalendarCell]   (one per day, in order)
month_grid(year, month, cells)   → list[list[CalendarCell | None]]  (Mon-first weeks)
days_in_month(year, month)       → int
shift_month(year, month, delta)  → (year, month)
current_month(today=None)        → (year, month)

Everything here is a pure function of its arguments. The only clock access is
`current_month()` when the caller does not pass `today`.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from flowlog.core.errors import InvalidCalendarDate
from flowlog.models.period import Flow
from flowlog.schemas.entry import Entry

_MIN_YEAR = 1
_MAX_YEAR = 9999


@dataclass(frozen=True)
class CalendarCell:
    day: int
    date: date
    flow: Optional[Flow] = None

    @property
    def is_marked(self) -> bool:
        return self.flow is not None


# ---------------------------------------------------------------------------
# Month arithmetic
# ---------------------------------------------------------------------------

def _check(year, month) -> None:
    if isinstance(year, bool) or isinstance(month, bool):
        raise InvalidCalendarDate(year, month)
    if not isinstance(year, int) or not isinstance(month, int):
        raise InvalidCalendarDate(year, month)
    if not (_MIN_YEAR <= year <= _MAX_YEAR) or not (1 <= month <= 12):
        raise InvalidCalendarDate(year, month)


def days_in_month(year: int, month: int) -> int:
    """Gregorian month length; February has 29 days in leap years."""
    _check(year, month)
    return calendar.monthrange(year, month)[1]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    _check(year, month)
    index = year * 12 + (month - 1) + delta
    new_year, new_month = divmod(index, 12)
    new_month += 1
    _check(new_year, new_month)
    return new_year, new_month


def current_month(today: Optional[date] = None) -> tuple[int, int]:
    today = today or date.today()
    return today.year, today.month


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

def build(year: int, month: int, entries: Iterable[Entry]) -> list[CalendarCell]:
    """
    One cell per day 1..days_in_month. A cell carries the flow of the entry
    dated that exact day; entries from other months are ignored. If the same
    date appears twice in `entries`, the later one wins.
    """
    length = days_in_month(year, month)

    by_day: dict[int, Flow] = {}
    for entry in entries:
        if entry.date.year == year and entry.date.month == month:
            by_day[entry.date.day] = entry.flow

    return [
        CalendarCell(day=d, date=date(year, month, d), flow=by_day.get(d))
        for d in range(1, length + 1)
    ]


def month_grid(
    year: int, month: int, cells: list[CalendarCell]
) -> list[list[Optional[CalendarCell]]]:
    """
    Lay cells out as Monday-first weeks. Slots before day 1 and after the
    last day are None; every week has exactly 7 slots.
    """
    length = days_in_month(year, month)
    if len(cells) != length:
        raise InvalidCalendarDate(year, month, len(cells))

    lead = calendar.weekday(year, month, 1)  # Monday == 0
    slots: list[Optional[CalendarCell]] = [None] * lead + list(cells)
    slots += [None] * (-len(slots) % 7)
    return [slots[i:i + 7] for i in range(0, len(slots), 7)]
