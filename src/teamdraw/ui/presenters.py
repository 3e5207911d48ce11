from __future__ import annotations

from collections.abc import Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.draw_engine import winner_tally
from ..core.models import Group, Participant, WinnerRecord


class RichPresenter:
    def __init__(self, *, no_color: bool = False, console: Console | None = None):
        if console is not None:
            self.console = console
        elif no_color:
            self.console = Console(force_terminal=False, color_system=None)
        else:
            self.console = Console()

    def roster(self, participants: Sequence[Participant], *, source: str) -> None:
        self.console.print(
            Panel(
                f"Loaded [bold]{len(participants)}[/] participants from {source}",
                title="teamdraw",
                border_style="bold cyan",
                expand=False,
            )
        )

    def groups(self, groups: Sequence[Group]) -> None:
        if not groups:
            self.console.print("[yellow]No groups to show.[/]")
            return
        for group in groups:
            table = Table(title=group.name, box=box.ROUNDED, show_header=False, title_justify="left")
            table.add_column("member")
            for member in group.members:
                table.add_row(member.name)
            table.caption = f"{group.size} people"
            self.console.print(table)

    def candidate_text(self, participant: Participant | None) -> Text:
        name = participant.name if participant is not None else "…"
        return Text(name, style="dim bold")

    def winner(self, record: WinnerRecord, *, number: int) -> None:
        self.console.print(
            Panel(
                Text(record.name, style="bold #2f6bff", justify="center"),
                title=f"Winner #{number}",
                subtitle=record.timestamp.astimezone().strftime("%H:%M:%S"),
                border_style="bold yellow",
                expand=False,
            )
        )

    def history(self, records: Sequence[WinnerRecord], *, show_tally: bool = False) -> None:
        table = Table(title="Winners", box=box.SIMPLE_HEAVY)
        table.add_column("#", justify="right")
        table.add_column("Name")
        table.add_column("Time", style="dim")
        total = len(records)
        for idx, record in enumerate(records):
            table.add_row(str(total - idx), record.name, record.timestamp.astimezone().strftime("%H:%M:%S"))
        self.console.print(table)
        if show_tally and records:
            tally = Table(title="Wins per person", box=box.MINIMAL)
            tally.add_column("Name")
            tally.add_column("Wins", justify="right")
            for name, wins in winner_tally(records):
                tally.add_row(name, str(wins))
            self.console.print(tally)

    def notice(self, message: str) -> None:
        self.console.print(f"[yellow]{message}[/]")

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]{message}[/]")
