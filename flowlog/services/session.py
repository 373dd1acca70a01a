"""
Interactive logging session.

State machine
-------------
  PROMPTING_DATE → PROMPTING_INTENSITY → CONFIRMING_SAVE → CONFIRMING_EXIT
  CONFIRMING_EXIT → PROMPTING_DATE (declined) | DONE (accepted)

CONFIRMING_SAVE declined discards the date and flow. Accepted calls
EntryStore.upsert; if the date is already logged, the conflict callback asks
whether to overwrite. Whatever the answer, the loop moves on to
CONFIRMING_EXIT.

The prompter is injected. Anything it raises (EOF, Ctrl-C, terminal errors)
propagates and ends the session; upsert is the only write and it is atomic,
so nothing half-saved is left behind.
"""
from __future__ import annotations

import enum
import logging
from datetime import date
from typing import Optional, Protocol, Sequence

from flowlog.models.period import Flow
from flowlog.services.entry_store import Decision, EntryStore, UpsertResult

logger = logging.getLogger(__name__)


class Prompter(Protocol):
    def pick_date(self, message: str) -> date: ...

    def pick_flow(self, message: str, options: Sequence[Flow]) -> Flow: ...

    def confirm(self, message: str) -> bool: ...


class SessionState(str, enum.Enum):
    PROMPTING_DATE = "prompting_date"
    PROMPTING_INTENSITY = "prompting_intensity"
    CONFIRMING_SAVE = "confirming_save"
    CONFIRMING_EXIT = "confirming_exit"
    DONE = "done"


class SessionLoop:
    def __init__(self, store: EntryStore, prompter: Prompter):
        self.store = store
        self.prompter = prompter
        self.state = SessionState.PROMPTING_DATE
        self.results: list[UpsertResult] = []
        self._date: Optional[date] = None
        self._flow: Optional[Flow] = None

    def run(self) -> list[UpsertResult]:
        """Drive the loop until the user confirms exit."""
        while self.state is not SessionState.DONE:
            self.step()
        return self.results

    def step(self) -> SessionState:
        """Handle the current state once and return the next one."""
        handler = {
            SessionState.PROMPTING_DATE: self._prompt_date,
            SessionState.PROMPTING_INTENSITY: self._prompt_intensity,
            SessionState.CONFIRMING_SAVE: self._confirm_save,
            SessionState.CONFIRMING_EXIT: self._confirm_exit,
        }[self.state]
        self.state = handler()
        return self.state

    # --- states ---

    def _prompt_date(self) -> SessionState:
        self._date = self.prompter.pick_date("Select date")
        return SessionState.PROMPTING_INTENSITY

    def _prompt_intensity(self) -> SessionState:
        self._flow = self.prompter.pick_flow("Select flow intensity", Flow.options())
        return SessionState.CONFIRMING_SAVE

    def _confirm_save(self) -> SessionState:
        day, flow = self._date, self._flow
        self._date = self._flow = None

        if not self.prompter.confirm(f"Save {flow} flow for {day}?"):
            logger.debug("save of %s for %s declined", flow, day)
            return SessionState.CONFIRMING_EXIT

        result = self.store.upsert(day, flow, self._ask_overwrite(day))
        self.results.append(result)
        logger.info("%s: %s for %s", result.outcome.value, result.flow, day)
        return SessionState.CONFIRMING_EXIT

    def _confirm_exit(self) -> SessionState:
        if self.prompter.confirm("Exit?"):
            return SessionState.DONE
        return SessionState.PROMPTING_DATE

    def _ask_overwrite(self, day: date):
        def _resolve(existing: Flow) -> Decision:
            if self.prompter.confirm(f"{existing} already present at {day}, overwrite it?"):
                return Decision.OVERWRITE
            return Decision.KEEP_EXISTING

        return _resolve
