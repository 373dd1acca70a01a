"""
Entry store: the durable date → flow mapping behind the `period` table.

Public API
----------
EntryStore.open(location)                  → EntryStore
store.find(day)                            → Flow | None
store.upsert(day, flow, on_conflict)       → UpsertResult
store.delete(day)                          → bool
store.entries_between(start, end)          → list[Entry]
store.all_entries()                        → list[Entry]

Upsert
------
Absent date → insert, INSERTED.
Present date → `on_conflict(existing)` decides:
  OVERWRITE      delete old row + insert new row in one transaction
  KEEP_EXISTING  nothing is written, SKIPPED

The store never talks to a user. Interactive confirmation lives in the
conflict callback supplied by the caller (see services/session.py).
"""
from __future__ import annotations

import enum
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from flowlog.core.errors import ConstraintViolation, StorageUnavailable
from flowlog.db.base import Base, make_engine, make_session_factory, resolve_url
from flowlog.models.period import Flow, PeriodEntry
from flowlog.schemas.entry import Entry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Decision / result types
# ---------------------------------------------------------------------------

class Decision(str, enum.Enum):
    OVERWRITE = "overwrite"
    KEEP_EXISTING = "keep_existing"


class UpsertOutcome(str, enum.Enum):
    INSERTED = "inserted"
    OVERWRITTEN = "overwritten"
    SKIPPED = "skipped"


ConflictResolver = Callable[[Flow], Decision]


@dataclass
class UpsertResult:
    """What an upsert did. `flow` is the value stored for `date` afterwards."""
    outcome: UpsertOutcome
    date: date
    flow: Flow
    previous: Optional[Flow] = None


def always(decision: Decision) -> ConflictResolver:
    """Fixed conflict policy, for non-interactive callers."""
    decision = Decision(decision)

    def _resolve(existing: Flow) -> Decision:
        return decision

    return _resolve


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class EntryStore:
    def __init__(self, url: str):
        self.url = url
        self._engine = make_engine(url)
        self._session_factory = make_session_factory(self._engine)

    @classmethod
    def open(cls, location: str | Path) -> "EntryStore":
        """
        Open (or create) the store at `location` and make sure the `period`
        table exists. Safe to call against an already-initialized database.
        """
        url = resolve_url(location)
        try:
            store = cls(url)
            Base.metadata.create_all(bind=store._engine, checkfirst=True)
        except SQLAlchemyError as exc:
            logger.error("cannot open storage at %s: %s", url, exc)
            raise StorageUnavailable(url, reason=exc.__class__.__name__) from exc
        logger.debug("opened entry store at %s", url)
        return store

    def close(self) -> None:
        self._engine.dispose()

    def __enter__(self) -> "EntryStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- reads ---

    def find(self, day: date) -> Optional[Flow]:
        """Stored flow for exactly `day`, or None."""
        with self._session() as db:
            row = self._get(db, day)
            return Flow.from_code(row.flow) if row is not None else None

    def entries_between(self, start: date, end: date) -> list[Entry]:
        """Entries with start <= date <= end, ordered by date."""
        with self._session() as db:
            rows = (
                db.query(PeriodEntry)
                .filter(PeriodEntry.logdate >= start, PeriodEntry.logdate <= end)
                .order_by(PeriodEntry.logdate)
                .all()
            )
            return [Entry.from_row(r) for r in rows]

    def all_entries(self) -> list[Entry]:
        with self._session() as db:
            rows = db.query(PeriodEntry).order_by(PeriodEntry.logdate).all()
            return [Entry.from_row(r) for r in rows]

    # --- writes ---

    def upsert(self, day: date, flow: Flow, on_conflict: ConflictResolver) -> UpsertResult:
        if not isinstance(flow, Flow):
            flow = Flow.from_code(flow)

        with self._session(day) as db:
            existing = self._get(db, day)

            if existing is None:
                db.add(PeriodEntry(logdate=day, flow=flow.code))
                db.commit()
                logger.info("inserted %s for %s", flow, day)
                return UpsertResult(UpsertOutcome.INSERTED, day, flow)

            previous = Flow.from_code(existing.flow)
            decision = Decision(on_conflict(previous))

            if decision is Decision.KEEP_EXISTING:
                logger.info("kept %s for %s (offered %s)", previous, day, flow)
                return UpsertResult(UpsertOutcome.SKIPPED, day, previous, previous)

            # Delete + insert share one transaction, so no reader sees the
            # date empty in between.
            db.delete(existing)
            db.flush()
            db.add(PeriodEntry(logdate=day, flow=flow.code))
            db.commit()
            logger.info("overwrote %s with %s for %s", previous, flow, day)
            return UpsertResult(UpsertOutcome.OVERWRITTEN, day, flow, previous)

    def delete(self, day: date) -> bool:
        """Remove the entry for `day`. Returns False when there was none."""
        with self._session(day) as db:
            removed = db.query(PeriodEntry).filter(PeriodEntry.logdate == day).delete()
            db.commit()
        if removed:
            logger.info("deleted entry for %s", day)
        return bool(removed)

    # --- internals ---

    @contextmanager
    def _session(self, day: Optional[date] = None) -> Iterator[Session]:
        """
        Session scope. Anything not committed is rolled back on exit.
        Driver errors are translated into the application hierarchy.
        """
        db = self._session_factory()
        try:
            yield db
        except IntegrityError as exc:
            db.rollback()
            logger.error("constraint violated for %s: %s", day, exc.orig)
            raise ConstraintViolation(day, reason=str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("storage error at %s: %s", self.url, exc)
            raise StorageUnavailable(self.url, reason=exc.__class__.__name__) from exc
        finally:
            db.close()

    @staticmethod
    def _get(db: Session, day: date) -> Optional[PeriodEntry]:
        return db.query(PeriodEntry).filter(PeriodEntry.logdate == day).first()
