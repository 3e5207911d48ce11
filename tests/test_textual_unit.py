from __future__ import annotations

from datetime import datetime, timezone

import pytest

pytest.importorskip("textual")

from teamdraw.core.models import Group, Participant, WinnerRecord
from teamdraw.features.session import WorkspaceConfig
from teamdraw.naming import StaticNaming
from teamdraw.ui.textual_app import (
    TeamDrawApp,
    TextualScheduler,
    clipboard_for,
    format_groups,
    format_history,
    parse_group_size,
)


class _FakeTimer:
    def __init__(self) -> None:
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class _FakeApp:
    def __init__(self) -> None:
        self.timers: list[tuple[float, object, _FakeTimer]] = []

    def set_timer(self, delay, callback):
        timer = _FakeTimer()
        self.timers.append((delay, callback, timer))
        return timer


def test_scheduler_adapts_set_timer():
    fake = _FakeApp()
    scheduler = TextualScheduler(fake)  # type: ignore[arg-type]
    handle = scheduler.schedule(-1.0, lambda: None)
    assert fake.timers[0][0] == 0.0
    handle.cancel()
    assert fake.timers[0][2].stopped
    assert scheduler.now() <= scheduler.now()


def test_format_history_numbers_newest_first():
    ts = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    records = [WinnerRecord("b", "Bo", ts), WinnerRecord("a", "Ann", ts), WinnerRecord("b", "Bo", ts)]
    lines = format_history(records).splitlines()
    assert lines[0].startswith("[b]#3[/] Bo")
    assert lines[2].startswith("[b]#1[/] Bo")
    assert "Wins per person" not in format_history(records)
    assert "Bo: 2" in format_history(records, show_tally=True)
    assert "No winners yet" in format_history([])


def test_format_groups_lists_members_and_sizes():
    group = Group(id="g", name="Otters", members=(Participant("a", "Ann"), Participant("b", "Bo")))
    text = format_groups([group])
    assert "[b]Otters[/]" in text
    assert "(2 people)" in text
    assert "Ann" in text and "Bo" in text
    assert "press Group" in format_groups([])


@pytest.mark.parametrize(
    ("raw", "count", "expected"),
    [("3", 10, 3), (" 2 ", 2, 2), ("5", 3, None), ("1", 10, None), ("abc", 10, None), ("100", 0, 100), ("101", 0, None)],
)
def test_parse_group_size(raw, count, expected):
    assert parse_group_size(raw, count) == expected


def test_app_builds_workspace_from_config():
    naming = StaticNaming()
    app = TeamDrawApp(config=WorkspaceConfig(allow_repeat=True, group_size=4), naming=naming)
    assert app.workspace.group_size == 4
    assert app.workspace.engine.allow_repeat is True
    assert app.workspace.naming is naming
    assert isinstance(app.workspace.engine._scheduler, TextualScheduler)


def test_clipboard_for_selects_group_by_number():
    groups = [
        Group(id="g1", name="Otters", members=(Participant("a", "Ann"), Participant("b", "Bo"))),
        Group(id="g2", name="Owls", members=(Participant("c", "Cy"),)),
    ]
    assert clipboard_for(groups, "2") == "Owls\nCy"
    assert clipboard_for(groups, " 1 ") == "Otters\nAnn\nBo"
    for raw in ("0", "3", "two", ""):
        assert clipboard_for(groups, raw) is None


def test_copy_group_sends_text_to_the_clipboard():
    app = TeamDrawApp(config=WorkspaceConfig(seed=1))
    copied: list[str] = []
    app.copy_to_clipboard = copied.append  # type: ignore[method-assign]
    app.workspace.add_text("Ann, Bo, Cy")
    app.workspace.regroup(2)

    text = app.copy_group("2")
    second = app.workspace.groups[1]
    assert text == f"Group 2\n{second.members[0].name}"
    assert copied == [text]
    assert app.copy_group("5") is None
    assert copied == [text]
