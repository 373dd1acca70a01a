"""
Tests for the entry store.

Covered:
  - insert / find / delete basics
  - upsert conflict handling (overwrite, keep existing, callback errors)
  - exactly one row per date after repeated overwrites
  - snapshots (entries_between, all_entries)
  - idempotent open against the same file
  - error translation: StorageUnavailable, UnsupportedFlowCode, ConstraintViolation
"""
from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import func, select, text

from flowlog.core.errors import (
    CodecError,
    ConstraintViolation,
    StorageUnavailable,
    UnsupportedFlowCode,
)
from flowlog.models.period import Flow, PeriodEntry
from flowlog.services.entry_store import (
    Decision,
    EntryStore,
    UpsertOutcome,
    always,
)

D = date(2024, 3, 10)


def _never_called(existing):
    raise AssertionError("conflict callback must not run for a new date")


def _row_count(store: EntryStore, day: date) -> int:
    with store._engine.connect() as conn:
        return conn.execute(
            select(func.count()).select_from(PeriodEntry).where(PeriodEntry.logdate == day)
        ).scalar_one()


class TestFindAndInsert:
    def test_find_on_empty_store(self, store):
        assert store.find(D) is None

    @pytest.mark.parametrize("flow", list(Flow))
    def test_upsert_then_find_returns_flow(self, store, flow):
        result = store.upsert(D, flow, _never_called)
        assert result.outcome is UpsertOutcome.INSERTED
        assert result.previous is None
        assert store.find(D) is flow

    def test_find_is_exact_match(self, store):
        store.upsert(D, Flow.LIGHT, _never_called)
        assert store.find(date(2024, 3, 9)) is None
        assert store.find(date(2024, 3, 11)) is None

    def test_upsert_accepts_integer_code(self, store):
        store.upsert(D, 4, _never_called)
        assert store.find(D) is Flow.HEAVY

    def test_upsert_rejects_unknown_code(self, store):
        with pytest.raises(UnsupportedFlowCode):
            store.upsert(D, 9, _never_called)
        assert store.find(D) is None


class TestConflicts:
    def test_scenario_insert_overwrite_skip(self, store):
        r1 = store.upsert(D, Flow.MEDIUM, always(Decision.OVERWRITE))
        assert r1.outcome is UpsertOutcome.INSERTED
        assert store.find(D) is Flow.MEDIUM

        r2 = store.upsert(D, Flow.HEAVY, always(Decision.OVERWRITE))
        assert r2.outcome is UpsertOutcome.OVERWRITTEN
        assert r2.previous is Flow.MEDIUM
        assert store.find(D) is Flow.HEAVY

        r3 = store.upsert(D, Flow.LIGHT, always(Decision.KEEP_EXISTING))
        assert r3.outcome is UpsertOutcome.SKIPPED
        assert r3.flow is Flow.HEAVY
        assert store.find(D) is Flow.HEAVY

    def test_callback_receives_existing_value(self, store):
        store.upsert(D, Flow.SPOTTING, _never_called)
        seen = []

        def resolver(existing):
            seen.append(existing)
            return Decision.KEEP_EXISTING

        store.upsert(D, Flow.APOCALYPTIC, resolver)
        assert seen == [Flow.SPOTTING]

    def test_repeated_overwrites_leave_one_row(self, file_store):
        file_store.upsert(D, Flow.LIGHT, always(Decision.OVERWRITE))
        file_store.upsert(D, Flow.MEDIUM, always(Decision.OVERWRITE))
        file_store.upsert(D, Flow.HEAVY, always(Decision.OVERWRITE))
        assert _row_count(file_store, D) == 1
        assert file_store.find(D) is Flow.HEAVY

    def test_overwrite_with_same_value(self, store):
        store.upsert(D, Flow.LIGHT, _never_called)
        result = store.upsert(D, Flow.LIGHT, always(Decision.OVERWRITE))
        assert result.outcome is UpsertOutcome.OVERWRITTEN
        assert store.find(D) is Flow.LIGHT

    def test_callback_error_leaves_store_untouched(self, store):
        store.upsert(D, Flow.MEDIUM, _never_called)

        def boom(existing):
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            store.upsert(D, Flow.HEAVY, boom)
        assert store.find(D) is Flow.MEDIUM

    def test_unknown_decision_rejected(self, store):
        store.upsert(D, Flow.MEDIUM, _never_called)
        with pytest.raises(ValueError):
            store.upsert(D, Flow.HEAVY, lambda existing: "maybe")
        assert store.find(D) is Flow.MEDIUM

    def test_always_accepts_string_decision(self):
        assert always("overwrite")(Flow.NONE) is Decision.OVERWRITE


class TestDelete:
    def test_delete_existing(self, store):
        store.upsert(D, Flow.HEAVY, _never_called)
        assert store.delete(D) is True
        assert store.find(D) is None

    def test_delete_missing_is_noop(self, store):
        store.upsert(D, Flow.HEAVY, _never_called)
        assert store.delete(date(2024, 3, 11)) is False
        assert store.find(D) is Flow.HEAVY


class TestSnapshots:
    def test_entries_between_is_inclusive_and_ordered(self, store):
        for day, flow in [
            (date(2024, 4, 1), Flow.LIGHT),
            (date(2024, 2, 29), Flow.HEAVY),
            (date(2024, 3, 31), Flow.MEDIUM),
            (date(2024, 3, 1), Flow.SPOTTING),
        ]:
            store.upsert(day, flow, _never_called)

        march = store.entries_between(date(2024, 3, 1), date(2024, 3, 31))
        assert [(e.date, e.flow) for e in march] == [
            (date(2024, 3, 1), Flow.SPOTTING),
            (date(2024, 3, 31), Flow.MEDIUM),
        ]

    def test_all_entries(self, store):
        store.upsert(date(2024, 5, 2), Flow.NONE, _never_called)
        store.upsert(date(2024, 5, 1), Flow.LIGHT, _never_called)
        assert [e.date.day for e in store.all_entries()] == [1, 2]

    def test_entries_are_immutable(self, store):
        store.upsert(D, Flow.LIGHT, _never_called)
        entry = store.all_entries()[0]
        with pytest.raises(Exception):
            entry.flow = Flow.HEAVY
        assert store.find(D) is Flow.LIGHT


class TestOpen:
    def test_open_is_idempotent_and_persistent(self, db_path):
        with EntryStore.open(db_path) as first:
            first.upsert(D, Flow.MEDIUM, _never_called)

        with EntryStore.open(db_path) as second:
            assert second.find(D) is Flow.MEDIUM

        with EntryStore.open(f"sqlite:///{db_path}") as third:
            assert third.find(D) is Flow.MEDIUM

    def test_memory_stores_are_independent(self):
        with EntryStore.open(":memory:") as a, EntryStore.open("sqlite://") as b:
            a.upsert(D, Flow.HEAVY, _never_called)
            assert a.find(D) is Flow.HEAVY
            assert b.find(D) is None

    def test_unopenable_location(self, tmp_path):
        with pytest.raises(StorageUnavailable) as info:
            EntryStore.open(tmp_path / "missing" / "dir" / "data.db3")
        assert info.value.code == "STORAGE_UNAVAILABLE"


class TestCorruption:
    def test_unknown_stored_code_raises_codec_error(self, store):
        with store._engine.begin() as conn:
            conn.execute(text("INSERT INTO period (logdate, flow) VALUES ('2024-03-10', 9)"))

        with pytest.raises(UnsupportedFlowCode):
            store.find(D)
        with pytest.raises(CodecError):
            store.all_entries()
        with pytest.raises(CodecError):
            store.upsert(D, Flow.LIGHT, always(Decision.OVERWRITE))

    def test_constraint_violation_is_surfaced(self, store, monkeypatch):
        store.upsert(D, Flow.MEDIUM, _never_called)
        # Pretend the lookup missed so the insert collides with the primary key.
        monkeypatch.setattr(EntryStore, "_get", staticmethod(lambda db, day: None))

        with pytest.raises(ConstraintViolation) as info:
            store.upsert(D, Flow.HEAVY, _never_called)
        assert info.value.details["day"] == "2024-03-10"

        monkeypatch.undo()
        assert store.find(D) is Flow.MEDIUM
