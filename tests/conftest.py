"""
Shared pytest fixtures.

Stores are in-memory SQLite by default, so no file is left behind; the
file-backed fixture lives under pytest's tmp_path.
"""
from __future__ import annotations

from collections import deque
from datetime import date
from typing import Iterable, Sequence

import pytest

from flowlog.models.period import Flow
from flowlog.services.entry_store import EntryStore


class ScriptedPrompter:
    """Prompter that replays canned answers and records every question."""

    def __init__(
        self,
        dates: Iterable[date] = (),
        flows: Iterable[Flow] = (),
        confirms: Iterable[bool] = (),
    ):
        self.dates = deque(dates)
        self.flows = deque(flows)
        self.confirms = deque(confirms)
        self.asked: list[str] = []
        self.offered: list[list[Flow]] = []

    def _next(self, queue: deque, message: str):
        self.asked.append(message)
        answer = queue.popleft()
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def pick_date(self, message: str) -> date:
        return self._next(self.dates, message)

    def pick_flow(self, message: str, options: Sequence[Flow]) -> Flow:
        self.offered.append(list(options))
        return self._next(self.flows, message)

    def confirm(self, message: str) -> bool:
        return self._next(self.confirms, message)


@pytest.fixture()
def store():
    s = EntryStore.open(":memory:")
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "data.db3"


@pytest.fixture()
def file_store(db_path):
    s = EntryStore.open(db_path)
    try:
        yield s
    finally:
        s.close()
