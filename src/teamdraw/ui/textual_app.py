from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from pathlib import Path

from textual import on
from textual.app import App, ComposeResult
from textual.containers import Grid, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.timer import Timer
from textual.widgets import (
    Button,
    Checkbox,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Static,
    TabbedContent,
    TabPane,
    TextArea,
)

from ..config import Settings
from ..core.draw_engine import DrawState, winner_tally
from ..core.errors import ExternalCallFailure, TeamDrawError
from ..core.models import Group, Participant, WinnerRecord
from ..core.partition import MAX_GROUP_SIZE, MIN_GROUP_SIZE, group_clipboard_text
from ..features.session.service import Workspace, WorkspaceConfig
from ..naming import build_naming
from ..naming.capabilities import NamingCapability

_READY_TEXT = "Ready to draw"

_CSS = """
    Screen { background: #f4f6fb; color: #1b233d; }
    .section { padding: 1 2; background: #ffffff; border: round #d9e2f5; margin: 0 0 1 0; height: auto; }
    .controls { height: auto; column-gap: 1; }
    .controls Button { margin: 0 1 0 0; }
    #names-input { height: 6; }
    #roster { height: 12; }
    #display {
        content-align: center middle;
        text-align: center;
        height: 5;
        border: round #c7d6ff;
        background: #e7edff;
        text-style: bold;
    }
    #display.spinning { color: #6b7594; }
    #display.revealed { color: #2f6bff; }
    #group-size { width: 12; }
    #theme { width: 40; }
    #copy-group { width: 12; }
    #confirm-dialog {
        grid-size: 2;
        grid-gutter: 1 2;
        padding: 1 2;
        width: 60;
        height: 11;
        border: thick #d24a5f;
        background: #ffffff;
    }
    #confirm-prompt { column-span: 2; height: 3; content-align: center middle; width: 100%; }
"""


class _TimerHandle:
    def __init__(self, timer: Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()


class TextualScheduler:
    """Adapts ``App.set_timer`` to the scheduler contract used by the draw engine."""

    def __init__(self, app: App) -> None:
        self._app = app

    def now(self) -> float:
        return time.monotonic()

    def schedule(self, delay: float, callback: Callable[[], None]) -> _TimerHandle:
        return _TimerHandle(self._app.set_timer(max(0.0, delay), callback))


class ConfirmScreen(ModalScreen[bool]):
    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, prompt: str) -> None:
        super().__init__()
        self.prompt = prompt

    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield Grid(
            Label(self.prompt, id="confirm-prompt"),
            Button("Yes, clear", variant="error", id="confirm-yes"),
            Button("Cancel", variant="primary", id="confirm-no"),
            id="confirm-dialog",
        )

    @on(Button.Pressed)
    def _on_choice(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm-yes")

    def action_cancel(self) -> None:
        self.dismiss(False)


def format_history(records: Sequence[WinnerRecord], *, show_tally: bool = False) -> str:
    if not records:
        return "[dim]No winners yet[/]"
    total = len(records)
    lines = [
        f"[b]#{total - idx}[/] {record.name}  [dim]{record.timestamp.astimezone().strftime('%H:%M:%S')}[/]"
        for idx, record in enumerate(records)
    ]
    if show_tally:
        lines.append("")
        lines.append("[b]Wins per person[/]")
        lines.extend(f"{name}: {wins}" for name, wins in winner_tally(records))
    return "\n".join(lines)


def format_groups(groups: Sequence[Group]) -> str:
    if not groups:
        return "[dim]Set a group size and press Group[/]"
    blocks = []
    for group in groups:
        members = "\n".join(f"  • {member.name}" for member in group.members)
        blocks.append(f"[b]{group.name}[/] [dim]({group.size} people)[/]\n{members}")
    return "\n\n".join(blocks)


def clipboard_for(groups: Sequence[Group], raw: str) -> str | None:
    """Clipboard text for the 1-based group number in *raw*, or ``None`` when it names no group."""

    try:
        number = int(raw.strip())
    except (AttributeError, ValueError):
        return None
    if not 1 <= number <= len(groups):
        return None
    return group_clipboard_text(groups[number - 1])


def parse_group_size(raw: str, participant_count: int) -> int | None:
    """Validate the group-size field; the ceiling is the roster size, or 100 when empty."""

    try:
        size = int(raw.strip())
    except (AttributeError, ValueError):
        return None
    ceiling = min(MAX_GROUP_SIZE, participant_count) if participant_count else MAX_GROUP_SIZE
    if size < MIN_GROUP_SIZE or size > max(MIN_GROUP_SIZE, ceiling):
        return None
    return size


class TeamDrawApp(App[None]):
    TITLE = "teamdraw"
    SUB_TITLE = "Lottery draws and random groups"
    BINDINGS = [
        ("ctrl+d", "draw", "Draw"),
        ("ctrl+g", "regroup", "Group"),
        ("delete", "remove_participant", "Remove selected"),
        ("ctrl+q", "quit", "Quit"),
    ]
    CSS = _CSS

    def __init__(
        self,
        *,
        config: WorkspaceConfig | None = None,
        naming: NamingCapability | None = None,
        initial_file: str | None = None,
    ) -> None:
        super().__init__()
        self.workspace = Workspace(
            config,
            scheduler=TextualScheduler(self),
            naming=naming,
            on_candidate=self._show_candidate,
            on_reveal=self._show_reveal,
        )
        self._initial_file = initial_file

    # --- Compose UI ---
    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield Header(show_clock=False)
        with TabbedContent(initial="tab-input"):
            with TabPane("Participants", id="tab-input"):
                with Vertical(classes="section"):
                    yield TextArea(id="names-input")
                    with Horizontal(classes="controls"):
                        yield Button("Add", id="btn-add", variant="primary")
                        yield Button("AI parse", id="btn-extract", variant="success")
                        yield Input(placeholder="path/to/names.csv", id="file-path")
                        yield Button("Load file", id="btn-load")
                        yield Button("Clear all", id="btn-clear", variant="error")
                with Vertical(classes="section"):
                    yield Label("", id="roster-caption")
                    yield DataTable(id="roster", cursor_type="row", zebra_stripes=True)
            with TabPane("Lottery", id="tab-lottery"):
                with Vertical(classes="section"):
                    yield Static(_READY_TEXT, id="display")
                    with Horizontal(classes="controls"):
                        yield Checkbox("Allow repeat winners", self.workspace.engine.allow_repeat, id="allow-repeat")
                        yield Static("", id="remaining")
                        yield Button("Draw", id="btn-draw", variant="primary")
                        yield Button("Clear history", id="btn-reset-history", variant="error")
                with Vertical(classes="section"):
                    yield Static("", id="history")
            with TabPane("Groups", id="tab-groups"):
                with Horizontal(classes="section controls"):
                    yield Label("People per group:")
                    yield Input(str(self.workspace.group_size), id="group-size", type="integer")
                    yield Button("Group", id="btn-group", variant="primary")
                    yield Input(placeholder=self.workspace.config.default_theme, id="theme")
                    yield Button("AI names", id="btn-name", variant="success")
                    yield Input(placeholder="Group #", id="copy-group", type="integer")
                    yield Button("Copy group", id="btn-copy")
                with Vertical(classes="section"):
                    yield Static(format_groups([]), id="groups")
        yield Footer()

    def on_mount(self) -> None:  # type: ignore[override]
        roster = self.query_one("#roster", DataTable)
        roster.add_column("Name", key="name")
        if self._initial_file:
            self._load_file(self._initial_file)
        self._refresh_roster()
        self._refresh_lottery()

    def on_unmount(self) -> None:
        self.workspace.close()

    # --- Rendering ---
    def _refresh_roster(self) -> None:
        roster = self.query_one("#roster", DataTable)
        roster.clear()
        for participant in self.workspace.participants:
            roster.add_row(participant.name, key=participant.id)
        self.query_one("#roster-caption", Label).update(f"{len(self.workspace.participants)} participants")
        self._refresh_lottery()

    def _refresh_lottery(self) -> None:
        engine = self.workspace.engine
        spinning = engine.state is DrawState.SPINNING
        remaining = engine.remaining
        self.query_one("#remaining", Static).update(f"Remaining: {remaining}")
        self.query_one("#btn-draw", Button).disabled = spinning or remaining == 0
        self.query_one("#btn-reset-history", Button).disabled = spinning or not engine.winners
        self.query_one("#history", Static).update(format_history(engine.winners, show_tally=engine.allow_repeat))

    def _refresh_groups(self) -> None:
        self.query_one("#groups", Static).update(format_groups(self.workspace.groups))

    # --- Engine callbacks ---
    def _show_candidate(self, participant: Participant) -> None:
        display = self.query_one("#display", Static)
        display.set_classes("spinning")
        display.update(participant.name)

    def _show_reveal(self, record: WinnerRecord | None) -> None:
        display = self.query_one("#display", Static)
        if record is None:
            display.set_classes("")
            display.update(_READY_TEXT)
            self.notify("Nobody was left to draw from.", severity="warning")
        else:
            display.set_classes("revealed")
            display.update(f"🏆 {record.name}")
        self._refresh_lottery()

    # --- Participant actions ---
    def _load_file(self, raw_path: str) -> None:
        path = Path(raw_path).expanduser()
        try:
            content = path.read_text(encoding="utf-8-sig")
        except OSError as exc:
            self.notify(f"Could not read {path}: {exc}", severity="error")
            return
        added = self.workspace.add_file_content(content)
        self.notify(f"Loaded {len(added)} names from {path.name}")

    @on(Button.Pressed, "#btn-add")
    def _on_add(self) -> None:
        area = self.query_one("#names-input", TextArea)
        if not area.text.strip():
            return
        self.workspace.add_text(area.text)
        area.clear()
        self._refresh_roster()

    @on(Button.Pressed, "#btn-extract")
    def _on_extract(self) -> None:
        area = self.query_one("#names-input", TextArea)
        if not area.text.strip():
            return
        self.query_one("#btn-extract", Button).disabled = True
        self.run_worker(self._extract(area.text), exclusive=True, group="extract")

    async def _extract(self, text: str) -> None:
        area = self.query_one("#names-input", TextArea)
        button = self.query_one("#btn-extract", Button)
        try:
            added = await self.workspace.extract_and_add(text)
        except ExternalCallFailure as exc:
            self.notify(f"AI parsing failed: {exc}", severity="error")
            return
        finally:
            button.disabled = False
        area.clear()
        self.notify(f"AI found {len(added)} names")
        self._refresh_roster()

    @on(Button.Pressed, "#btn-load")
    def _on_load(self) -> None:
        field = self.query_one("#file-path", Input)
        if not field.value.strip():
            return
        self._load_file(field.value.strip())
        field.value = ""
        self._refresh_roster()

    @on(Button.Pressed, "#btn-clear")
    def _on_clear(self) -> None:
        def _confirmed(ok: bool | None) -> None:
            if ok:
                self.workspace.clear_participants(confirm=True)
                self._refresh_roster()

        self.push_screen(ConfirmScreen("Remove every participant?"), _confirmed)

    def action_remove_participant(self) -> None:
        roster = self.query_one("#roster", DataTable)
        if roster.row_count == 0:
            return
        row_key = roster.coordinate_to_cell_key(roster.cursor_coordinate).row_key
        if row_key.value is None:
            return
        try:
            self.workspace.remove_participant(row_key.value)
        except KeyError:
            return
        self._refresh_roster()

    # --- Lottery actions ---
    @on(Checkbox.Changed, "#allow-repeat")
    def _on_repeat(self, event: Checkbox.Changed) -> None:
        self.workspace.set_allow_repeat(event.value)
        self._refresh_lottery()

    @on(Button.Pressed, "#btn-draw")
    def _on_draw(self) -> None:
        self.action_draw()

    def action_draw(self) -> None:
        try:
            self.workspace.start_draw()
        except TeamDrawError as exc:
            self.notify(str(exc), severity="warning")
            return
        self._refresh_lottery()

    @on(Button.Pressed, "#btn-reset-history")
    def _on_reset_history(self) -> None:
        def _confirmed(ok: bool | None) -> None:
            if ok:
                self.workspace.clear_history(confirm=True)
                display = self.query_one("#display", Static)
                display.set_classes("")
                display.update(_READY_TEXT)
                self._refresh_lottery()

        self.push_screen(ConfirmScreen("Clear the winner history?"), _confirmed)

    # --- Grouping actions ---
    @on(Button.Pressed, "#btn-group")
    def _on_group(self) -> None:
        self.action_regroup()

    def action_regroup(self) -> None:
        raw = self.query_one("#group-size", Input).value
        size = parse_group_size(raw, len(self.workspace.participants))
        if size is None:
            self.notify(f"Group size must be between {MIN_GROUP_SIZE} and the number of participants.", severity="warning")
            return
        try:
            self.workspace.regroup(size)
        except TeamDrawError as exc:
            self.notify(str(exc), severity="warning")
            return
        self._refresh_groups()

    def copy_group(self, raw: str) -> str | None:
        text = clipboard_for(self.workspace.groups, raw)
        if text is not None:
            self.copy_to_clipboard(text)
        return text

    @on(Button.Pressed, "#btn-copy")
    def _on_copy(self) -> None:
        field = self.query_one("#copy-group", Input)
        if self.copy_group(field.value) is None:
            self.notify(f"Enter a group number between 1 and {len(self.workspace.groups)}.", severity="warning")
            return
        self.notify(f"Copied group {field.value.strip()} to the clipboard")

    @on(Button.Pressed, "#btn-name")
    def _on_name(self) -> None:
        if not self.workspace.groups or self.workspace.naming_in_flight:
            return
        button = self.query_one("#btn-name", Button)
        button.disabled = True
        button.label = "Naming…"
        self.run_worker(self._name_groups(self.query_one("#theme", Input).value), exclusive=True, group="naming")

    async def _name_groups(self, theme: str) -> None:
        button = self.query_one("#btn-name", Button)
        try:
            await self.workspace.name_groups(theme)
        except TeamDrawError as exc:
            self.notify(str(exc), severity="warning")
        finally:
            button.disabled = False
            button.label = "AI names"
        self._refresh_groups()


def run_textual(initial_file: str | None = None, *, settings: Settings | None = None) -> None:
    cfg = settings or Settings.from_env()
    app = TeamDrawApp(
        config=WorkspaceConfig.from_settings(cfg),
        naming=build_naming(cfg),
        initial_file=initial_file,
    )
    app.run()
