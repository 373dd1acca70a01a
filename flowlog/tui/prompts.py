"""
Inline prompts built on rich. Implements the `Prompter` protocol the session
loop expects: every method returns an already-validated value or raises.
"""
from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from flowlog.models.period import Flow

# Styles shared with the calendar legend, lightest to heaviest.
FLOW_STYLES = {
    Flow.NONE: "dim",
    Flow.SPOTTING: "magenta",
    Flow.LIGHT: "bright_red",
    Flow.MEDIUM: "red",
    Flow.HEAVY: "bold red",
    Flow.APOCALYPTIC: "bold white on red",
}


class RichPrompter:
    def __init__(
        self,
        console: Optional[Console] = None,
        today: Optional[date] = None,
        min_date: Optional[date] = None,
        max_date: Optional[date] = None,
    ):
        self.console = console or Console()
        self.today = today
        self.min_date = min_date
        self.max_date = max_date

    def pick_date(self, message: str) -> date:
        default = (self.today or date.today()).isoformat()
        while True:
            answer = Prompt.ask(
                f"{message} [dim](YYYY-MM-DD)[/dim]",
                default=default,
                console=self.console,
            )
            try:
                picked = date.fromisoformat(answer.strip())
            except ValueError:
                self.console.print(f"[red]Not a date:[/red] {answer}")
                continue
            if self.min_date and picked < self.min_date:
                self.console.print(f"[red]Pick a date on or after {self.min_date}.[/red]")
                continue
            if self.max_date and picked > self.max_date:
                self.console.print(f"[red]Pick a date on or before {self.max_date}.[/red]")
                continue
            return picked

    def pick_flow(self, message: str, options: Sequence[Flow]) -> Flow:
        table = Table(box=box.SIMPLE, show_header=False, padding=(0, 1))
        table.add_column("#", style="bold", justify="right")
        table.add_column("Flow")
        for flow in options:
            table.add_row(str(flow.code), f"[{FLOW_STYLES[flow]}]{flow.label}[/]")
        self.console.print(table)

        answer = Prompt.ask(
            message,
            choices=[str(f.code) for f in options],
            default=str(options[0].code),
            console=self.console,
        )
        return Flow.from_code(int(answer))

    def confirm(self, message: str) -> bool:
        return Confirm.ask(message, console=self.console)
