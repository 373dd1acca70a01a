"""
Command-line entry point.

  flowlog            same as `flowlog log`
  flowlog log        interactive logging session
  flowlog calendar   full-screen month calendar of logged days

All failures from the application hierarchy end the process with status 1
and a `CODE: message` line on stderr. Ctrl-C / EOF exit with 130.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Annotated, Iterator, Optional

import typer
from rich.console import Console

from flowlog.core.config import settings
from flowlog.core.errors import FlowlogException
from flowlog.core.logging import configure_logging
from flowlog.db.base import MEMORY_URL
from flowlog.services import calendar_projection as projection
from flowlog.services.entry_store import EntryStore, UpsertOutcome
from flowlog.services.session import SessionLoop
from flowlog.tui.calendar_screen import run_calendar
from flowlog.tui.prompts import RichPrompter

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    help="Log daily flow intensity and browse it on a calendar.",
)

DbOption = Annotated[
    Optional[str],
    typer.Option("--db", help="Database URL or SQLite file path (default from settings)."),
]
MemoryOption = Annotated[
    bool,
    typer.Option("--memory", help="Use a throwaway in-memory database."),
]


@contextmanager
def _opened_store(db: Optional[str], memory: bool) -> Iterator[EntryStore]:
    """Open the store, translate failures into exit codes, always close."""
    location = MEMORY_URL if memory else (db or settings.DATABASE_URL)
    store: Optional[EntryStore] = None
    try:
        store = EntryStore.open(location)
        yield store
    except FlowlogException as exc:
        logger.error("%s: %s", exc.code, exc.message)
        typer.echo(f"{exc.code}: {exc.message}", err=True)
        raise typer.Exit(code=1)
    except (KeyboardInterrupt, EOFError):
        typer.echo("Interrupted.", err=True)
        raise typer.Exit(code=130)
    finally:
        if store is not None:
            store.close()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Override FLOWLOG_LOG_LEVEL."),
    ] = None,
) -> None:
    configure_logging(settings, log_level)
    if ctx.invoked_subcommand is None:
        log(db=None, memory=False)


@app.command("log")
def log(db: DbOption = None, memory: MemoryOption = False) -> None:
    """Pick a date and a flow, save it, repeat until you choose to exit."""
    console = Console()
    with _opened_store(db, memory) as store:
        results = SessionLoop(store, RichPrompter(console=console)).run()

    saved = sum(1 for r in results if r.outcome is not UpsertOutcome.SKIPPED)
    console.print(f"[bold]{saved}[/bold] entr{'y' if saved == 1 else 'ies'} saved.")


@app.command("calendar")
def calendar_cmd(
    db: DbOption = None,
    memory: MemoryOption = False,
    year: Annotated[Optional[int], typer.Option("--year", help="Year to open on.")] = None,
    month: Annotated[Optional[int], typer.Option("--month", help="Month (1-12) to open on.")] = None,
) -> None:
    """Show logged days on a month calendar."""
    now_year, now_month = projection.current_month()
    with _opened_store(db, memory) as store:
        target_year = year if year is not None else now_year
        target_month = month if month is not None else now_month
        projection.days_in_month(target_year, target_month)
        run_calendar(store, target_year, target_month, settings.POLL_INTERVAL_MS)


if __name__ == "__main__":
    app()
