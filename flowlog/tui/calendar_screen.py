"""
Full-screen month calendar (curses).

Render/update cycle: draw the month from a fresh store snapshot, wait up to
POLL_INTERVAL_MS for a key, apply it, repeat. `curses.wrapper` puts the
terminal back into its previous mode on every exit path, exceptions included.

Keys: [ / ← previous month, ] / → next month, t current month, q / Esc quit.
"""
from __future__ import annotations

import calendar
import curses
import logging
from datetime import date
from typing import Callable, Optional

from flowlog.models.period import Flow
from flowlog.services import calendar_projection as projection
from flowlog.services.calendar_projection import CalendarCell
from flowlog.services.entry_store import EntryStore

logger = logging.getLogger(__name__)

CELL_W = 7
WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

FLOW_MARKS = {
    Flow.NONE: "·",
    Flow.SPOTTING: "s",
    Flow.LIGHT: "l",
    Flow.MEDIUM: "m",
    Flow.HEAVY: "h",
    Flow.APOCALYPTIC: "A",
}

_ESC = 27


def format_cell(cell: CalendarCell) -> str:
    """Fixed-width text for one day, e.g. ' 5 m '."""
    mark = FLOW_MARKS[cell.flow] if cell.flow is not None else " "
    return f"{cell.day:2} {mark}".ljust(CELL_W - 1)


def legend() -> str:
    return "   ".join(f"{FLOW_MARKS[f]} {f.label}" for f in Flow.options())


def safestr(scr, y, x, text, attr=0):
    h, w = scr.getmaxyx()
    if y < 0 or y >= h - 1 or x < 0 or x >= w - 1:
        return
    room = w - x - 1
    if room <= 0:
        return
    try:
        scr.addstr(y, x, str(text)[:room], attr)
    except curses.error:
        pass


class CalendarScreen:
    def __init__(
        self,
        stdscr,
        store: EntryStore,
        year: int,
        month: int,
        poll_ms: int = 250,
        today: Optional[Callable[[], date]] = None,
    ):
        self.scr = stdscr
        self.store = store
        self.year = year
        self.month = month
        self.poll_ms = poll_ms
        self._today = today or date.today
        self.should_quit = False
        self._attrs: dict[Flow, int] = {}

        projection.days_in_month(year, month)  # reject bad components up front

    # --- cycle ---

    def run(self) -> None:
        self._init_curses()
        self.scr.timeout(self.poll_ms)
        while not self.should_quit:
            self.draw()
            key = self.scr.getch()
            if key != -1:
                self.handle_key(key)

    def cells(self) -> list[CalendarCell]:
        first = date(self.year, self.month, 1)
        last = date(self.year, self.month, projection.days_in_month(self.year, self.month))
        return projection.build(self.year, self.month, self.store.entries_between(first, last))

    def handle_key(self, key: int) -> None:
        if key in (ord("q"), ord("Q"), _ESC):
            self.should_quit = True
        elif key in (ord("["), curses.KEY_LEFT):
            self.year, self.month = projection.shift_month(self.year, self.month, -1)
        elif key in (ord("]"), curses.KEY_RIGHT):
            self.year, self.month = projection.shift_month(self.year, self.month, 1)
        elif key in (ord("t"), ord("T")):
            self.year, self.month = projection.current_month(self._today())

    # --- drawing ---

    def draw(self) -> None:
        self.scr.erase()
        h, w = self.scr.getmaxyx()
        cal_w = CELL_W * 7
        left = max(2, (w - cal_w) // 2)

        title = f"{calendar.month_name[self.month].upper()}   {self.year}"
        safestr(self.scr, 1, left, "◀  [  ", curses.A_DIM)
        safestr(self.scr, 1, left + 6, title, curses.A_BOLD)
        safestr(self.scr, 1, left + 6 + len(title) + 2, "  ]  ▶", curses.A_DIM)

        for i, name in enumerate(WEEKDAYS):
            safestr(self.scr, 3, left + i * CELL_W, name.center(CELL_W - 1), curses.A_BOLD)
        safestr(self.scr, 4, left, "─" * cal_w, curses.A_DIM)

        today = self._today()
        cells = self.cells()
        row = 5
        for week in projection.month_grid(self.year, self.month, cells):
            for col, cell in enumerate(week):
                if cell is None:
                    continue
                attr = self._attrs.get(cell.flow, 0) if cell.flow is not None else curses.A_DIM
                if cell.date == today:
                    attr |= curses.A_REVERSE
                safestr(self.scr, row, left + col * CELL_W, format_cell(cell), attr)
            row += 2

        marked = sum(1 for c in cells if c.is_marked)
        safestr(self.scr, row + 1, left, legend(), curses.A_DIM)
        safestr(self.scr, row + 2, left, f"{marked} logged day(s) this month", curses.A_DIM)
        safestr(self.scr, h - 2, 2, "[←/[] prev   [→/]] next   [t] today   [q] quit", curses.A_DIM)
        self.scr.refresh()

    def _init_curses(self) -> None:
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        if not curses.has_colors():
            return
        curses.start_color()
        curses.use_default_colors()
        palette = [
            (Flow.SPOTTING, curses.COLOR_MAGENTA, -1, 0),
            (Flow.LIGHT, curses.COLOR_RED, -1, 0),
            (Flow.MEDIUM, curses.COLOR_RED, -1, curses.A_BOLD),
            (Flow.HEAVY, curses.COLOR_WHITE, curses.COLOR_RED, 0),
            (Flow.APOCALYPTIC, curses.COLOR_WHITE, curses.COLOR_RED, curses.A_BOLD),
        ]
        self._attrs[Flow.NONE] = curses.A_NORMAL
        for pair, (flow, fg, bg, extra) in enumerate(palette, start=1):
            curses.init_pair(pair, fg, bg)
            self._attrs[flow] = curses.color_pair(pair) | extra


def run_calendar(store: EntryStore, year: int, month: int, poll_ms: int = 250) -> None:
    logger.debug("calendar screen for %04d-%02d", year, month)
    curses.wrapper(lambda scr: CalendarScreen(scr, store, year, month, poll_ms).run())
