from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler

from .config import Settings
from .core.draw_engine import DrawState
from .core.errors import NoEligibleParticipants
from .core.models import WinnerRecord
from .core.partition import MAX_GROUP_SIZE, MIN_GROUP_SIZE
from .core.scheduler import AsyncioScheduler, ManualScheduler
from .features.session.service import Workspace, WorkspaceConfig
from .naming import build_naming
from .ui.presenters import RichPresenter

logger = logging.getLogger(__name__)


def _group_size(raw: str) -> int:
    try:
        size = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid group size: {raw!r}") from exc
    if not MIN_GROUP_SIZE <= size <= MAX_GROUP_SIZE:
        raise argparse.ArgumentTypeError(f"group size must be between {MIN_GROUP_SIZE} and {MAX_GROUP_SIZE}")
    return size


def _non_negative(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid duration: {raw!r}") from exc
    if value < 0 or value != value:
        raise argparse.ArgumentTypeError("duration must be zero or positive")
    return value


def _positive(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid count: {raw!r}") from exc
    if value < 1:
        raise argparse.ArgumentTypeError("count must be at least 1")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="teamdraw", description="Lottery draws and random groups for HR events")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output (default is colored)")
    sub = parser.add_subparsers(dest="command", required=True)

    group = sub.add_parser("group", help="Split the names in FILE into random groups")
    group.add_argument("file", help="CSV or text file; the first column of each line is a name")
    group.add_argument("--size", "-k", type=_group_size, default=3, help="People per group (default 3)")
    group.add_argument(
        "--name-theme",
        default=None,
        metavar="THEME",
        help="Ask the AI for group names on this theme (needs TEAMDRAW_GEMINI_API_KEY)",
    )

    draw = sub.add_parser("draw", help="Draw lottery winners from the names in FILE")
    draw.add_argument("file", help="CSV or text file; the first column of each line is a name")
    draw.add_argument("--draws", "-n", type=_positive, default=1, help="Number of winners to draw (default 1)")
    draw.add_argument("--allow-repeat", action="store_true", help="Let previous winners win again")
    draw.add_argument(
        "--duration",
        type=_non_negative,
        default=None,
        metavar="SECONDS",
        help="Reveal animation length; 0 reveals instantly (default from TEAMDRAW_REVEAL_SECONDS)",
    )
    # If omitted, draws use the system RNG. Pass an int to reproduce.
    draw.add_argument("--seed", type=int, default=None, help="RNG seed (system randomness if omitted)")

    tui = sub.add_parser("tui", help="Open the interactive terminal UI")
    tui.add_argument("file", nargs="?", default=None, help="Optional names file to preload")
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose, rich_tracebacks=verbose)],
    )


def _read_names(workspace: Workspace, path: str, presenter: RichPresenter) -> bool:
    file_path = Path(path).expanduser()
    try:
        content = file_path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        presenter.error(f"Could not read {file_path}: {exc}")
        return False
    workspace.add_file_content(content)
    if not workspace.participants:
        presenter.error(f"No names found in {file_path}")
        return False
    presenter.roster(workspace.participants, source=file_path.name)
    return True


def run_group(args: argparse.Namespace, settings: Settings, presenter: RichPresenter) -> int:
    workspace = Workspace(
        WorkspaceConfig.from_settings(settings, group_size=args.size),
        scheduler=ManualScheduler(),
        naming=build_naming(settings) if args.name_theme is not None else None,
    )
    try:
        if not _read_names(workspace, args.file, presenter):
            return 1
        workspace.regroup(args.size)
        if args.name_theme is not None:
            asyncio.run(workspace.name_groups(args.name_theme))
        presenter.groups(workspace.groups)
    finally:
        workspace.close()
    return 0


def _draw_instant(workspace: Workspace, scheduler: ManualScheduler) -> WinnerRecord | None:
    workspace.start_draw()
    scheduler.run_until_idle()
    engine = workspace.engine
    return engine.winners[0] if engine.state is DrawState.REVEALED else None


async def _draw_animated(workspace: Workspace, presenter: RichPresenter) -> WinnerRecord | None:
    done: asyncio.Future[WinnerRecord | None] = asyncio.get_running_loop().create_future()

    def _revealed(record: WinnerRecord | None) -> None:
        if not done.done():
            done.set_result(record)

    with Live(presenter.candidate_text(None), console=presenter.console, transient=True, refresh_per_second=20) as live:
        workspace.engine.on_candidate = lambda participant: live.update(presenter.candidate_text(participant))
        workspace.engine.on_reveal = _revealed
        workspace.start_draw()
        return await done


def run_draw(args: argparse.Namespace, settings: Settings, presenter: RichPresenter) -> int:
    duration = settings.reveal_seconds if args.duration is None else args.duration
    config = WorkspaceConfig.from_settings(
        settings, allow_repeat=args.allow_repeat, reveal_seconds=duration, seed=args.seed
    )
    logger.debug("starting draws", extra={"draws": args.draws, "duration": duration, "allow_repeat": args.allow_repeat})
    if duration == 0:
        return _draw_loop(config, args, presenter, ManualScheduler())

    return asyncio.run(_run_animated(config, args, presenter))


def _draw_loop(
    config: WorkspaceConfig, args: argparse.Namespace, presenter: RichPresenter, scheduler: ManualScheduler
) -> int:
    workspace = Workspace(config, scheduler=scheduler)
    try:
        if not _read_names(workspace, args.file, presenter):
            return 1
        for _ in range(args.draws):
            try:
                record = _draw_instant(workspace, scheduler)
            except NoEligibleParticipants:
                presenter.notice("Everyone has already won; no eligible participants left.")
                break
            if record is not None:
                presenter.winner(record, number=len(workspace.engine.winners))
        presenter.history(workspace.engine.winners, show_tally=config.allow_repeat)
    finally:
        workspace.close()
    return 0


async def _run_animated(config: WorkspaceConfig, args: argparse.Namespace, presenter: RichPresenter) -> int:
    workspace = Workspace(config, scheduler=AsyncioScheduler())
    try:
        if not _read_names(workspace, args.file, presenter):
            return 1
        for _ in range(args.draws):
            try:
                record = await _draw_animated(workspace, presenter)
            except NoEligibleParticipants:
                presenter.notice("Everyone has already won; no eligible participants left.")
                break
            if record is not None:
                presenter.winner(record, number=len(workspace.engine.winners))
        presenter.history(workspace.engine.winners, show_tally=config.allow_repeat)
    finally:
        workspace.close()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    settings = Settings.from_env()

    if args.command == "tui":
        from .ui.textual_app import run_textual

        run_textual(args.file, settings=settings)
        return 0

    presenter = RichPresenter(no_color=args.no_color)
    if args.command == "group":
        return run_group(args, settings, presenter)
    return run_draw(args, settings, presenter)


if __name__ == "__main__":
    raise SystemExit(main())
