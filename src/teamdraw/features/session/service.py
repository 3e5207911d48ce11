from __future__ import annotations

import logging
import random
import secrets
import string
from collections.abc import Callable
from dataclasses import dataclass, replace

from ...config import DEFAULT_THEME, Settings
from ...core.draw_engine import DrawEngine, RevealTiming, winner_tally
from ...core.errors import (
    ConfirmationRequiredError,
    EmptyInputError,
    NamingInProgressError,
)
from ...core.models import Group, Participant, WinnerRecord
from ...core.partition import MAX_GROUP_SIZE, MIN_GROUP_SIZE, group_clipboard_text, partition
from ...core.registry import ParticipantRegistry
from ...core.scheduler import AsyncioScheduler, Scheduler
from ...naming.capabilities import (
    NamingCapability,
    apply_group_names,
    extract_participant_names,
    generate_group_names,
)
from ...naming.stub import OfflineNaming
from .concurrency import run_blocking
from .schemas import (
    GroupPayload,
    LotteryPayload,
    ParticipantPayload,
    TallyEntry,
    WinnerPayload,
    WorkspacePayload,
)

__all__ = [
    "Workspace",
    "WorkspaceConfig",
    "WorkspaceManager",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkspaceConfig:
    """Configuration for one lottery/grouping workspace."""

    allow_repeat: bool = False
    group_size: int = 3
    reveal_seconds: float = 3.0
    seed: int | None = None
    default_theme: str = DEFAULT_THEME

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: object) -> WorkspaceConfig:
        base = cls(reveal_seconds=settings.reveal_seconds, default_theme=settings.default_theme)
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(base, **values)


class Workspace:
    """Owns every piece of mutable state behind one UI session.

    The registry, draw engine and current groups live here and are handed to
    subordinate components by reference; nothing is kept in module globals.
    """

    def __init__(
        self,
        config: WorkspaceConfig | None = None,
        *,
        scheduler: Scheduler | None = None,
        naming: NamingCapability | None = None,
        workspace_id: str = "",
        on_candidate: Callable[[Participant], None] | None = None,
        on_reveal: Callable[[WinnerRecord | None], None] | None = None,
    ) -> None:
        cfg = config or WorkspaceConfig()
        self.id = workspace_id
        self.config = cfg
        self.rng = random.Random(cfg.seed) if cfg.seed is not None else secrets.SystemRandom()
        self.registry = ParticipantRegistry()
        self.naming: NamingCapability = naming or OfflineNaming()
        self.groups: list[Group] = []
        self.group_size = _clamp_group_size(cfg.group_size)
        self.engine = DrawEngine(
            lambda: self.registry.participants,
            scheduler=scheduler or AsyncioScheduler(),
            rng=self.rng,
            timing=RevealTiming(duration=max(0.0, cfg.reveal_seconds)),
            allow_repeat=cfg.allow_repeat,
            on_candidate=on_candidate,
            on_reveal=on_reveal,
        )
        self._naming_in_flight = False

    # ------------------------------------------------------------ participants
    @property
    def participants(self) -> tuple[Participant, ...]:
        return self.registry.participants

    def add_text(self, text: str) -> list[Participant]:
        return self.registry.add_text(text)

    def add_file_content(self, content: str) -> list[Participant]:
        added = self.registry.add_file_content(content)
        logger.info("imported participants from file", extra={"workspace": self.id, "added": len(added)})
        return added

    async def extract_and_add(self, text: str) -> list[Participant]:
        """Run AI extraction on *text*; on failure the registry stays unchanged."""

        names = await run_blocking(extract_participant_names, self.naming, text)
        return self.registry.add_names(names)

    def remove_participant(self, participant_id: str) -> Participant:
        return self.registry.remove(participant_id)

    def clear_participants(self, *, confirm: bool = False) -> int:
        if not confirm:
            raise ConfirmationRequiredError("clearing all participants requires confirmation")
        return self.registry.clear()

    # ------------------------------------------------------------------ groups
    def regroup(self, size: int | None = None) -> list[Group]:
        if size is not None:
            self.group_size = _clamp_group_size(size)
        participants = self.registry.participants
        if not participants:
            raise EmptyInputError("add participants before grouping")
        self.groups = partition(participants, self.group_size, rng=self.rng)
        return self.groups

    @property
    def naming_in_flight(self) -> bool:
        return self._naming_in_flight

    async def name_groups(self, theme: str | None = None) -> list[Group]:
        if not self.groups:
            raise EmptyInputError("create groups before naming them")
        if self._naming_in_flight:
            raise NamingInProgressError("group naming is already running")
        self._naming_in_flight = True
        targets = list(self.groups)
        try:
            names = await run_blocking(
                generate_group_names,
                self.naming,
                len(targets),
                theme,
                default_theme=self.config.default_theme,
            )
        finally:
            self._naming_in_flight = False
        # A regroup while the request was outstanding replaces the group set.
        if [group.id for group in targets] != [group.id for group in self.groups]:
            logger.info("groups changed while naming; discarding generated names", extra={"workspace": self.id})
            return self.groups
        apply_group_names(self.groups, names)
        return self.groups

    # ----------------------------------------------------------------- lottery
    def start_draw(self) -> None:
        self.engine.start_draw()

    def set_allow_repeat(self, allow: bool) -> None:
        self.engine.allow_repeat = bool(allow)

    def clear_history(self, *, confirm: bool = False) -> None:
        if not confirm:
            raise ConfirmationRequiredError("clearing the winner history requires confirmation")
        self.engine.clear_history()

    def close(self) -> None:
        self.engine.close()

    # --------------------------------------------------------------- snapshots
    def lottery_payload(self) -> LotteryPayload:
        return _lottery_payload(self.engine)

    def group_payloads(self) -> list[GroupPayload]:
        return [_group_payload(group) for group in self.groups]

    def snapshot(self) -> WorkspacePayload:
        return WorkspacePayload(
            workspace=self.id,
            participants=[_participant_payload(p) for p in self.registry.participants],
            groups=self.group_payloads(),
            group_size=self.group_size,
            lottery=self.lottery_payload(),
            naming_in_flight=self._naming_in_flight,
        )


class WorkspaceManager:
    """Owns workspace lifecycle independent of the presentation layer."""

    def __init__(
        self,
        *,
        naming_factory: Callable[[], NamingCapability] | None = None,
        scheduler_factory: Callable[[], Scheduler] = AsyncioScheduler,
    ) -> None:
        self._workspaces: dict[str, Workspace] = {}
        self._naming_factory = naming_factory or OfflineNaming
        self._scheduler_factory = scheduler_factory

    def __len__(self) -> int:
        return len(self._workspaces)

    def create(self, config: WorkspaceConfig | None = None) -> str:
        workspace_id = _sid()
        while workspace_id in self._workspaces:
            workspace_id = _sid()
        self._workspaces[workspace_id] = Workspace(
            config,
            scheduler=self._scheduler_factory(),
            naming=self._naming_factory(),
            workspace_id=workspace_id,
        )
        logger.debug("workspace created", extra={"workspace": workspace_id})
        return workspace_id

    def get(self, workspace_id: str) -> Workspace:
        workspace = self._workspaces.get(workspace_id)
        if workspace is None:
            raise KeyError(f"workspace '{workspace_id}' not found")
        return workspace

    def close(self, workspace_id: str) -> None:
        workspace = self._workspaces.pop(workspace_id, None)
        if workspace is None:
            raise KeyError(f"workspace '{workspace_id}' not found")
        workspace.close()

    def close_all(self) -> None:
        for workspace in self._workspaces.values():
            workspace.close()
        self._workspaces.clear()


def _sid(length: int = 10) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _clamp_group_size(size: int) -> int:
    return max(MIN_GROUP_SIZE, min(MAX_GROUP_SIZE, int(size)))


def _participant_payload(participant: Participant) -> ParticipantPayload:
    return ParticipantPayload(id=participant.id, name=participant.name)


def _group_payload(group: Group) -> GroupPayload:
    return GroupPayload(
        id=group.id,
        name=group.name,
        members=[_participant_payload(member) for member in group.members],
        size=group.size,
        clipboard=group_clipboard_text(group),
    )


def _lottery_payload(engine: DrawEngine) -> LotteryPayload:
    display = engine.display_candidate
    winner = engine.current_winner
    return LotteryPayload(
        state=engine.state,
        allow_repeat=engine.allow_repeat,
        remaining=engine.remaining,
        display=display.name if display is not None else None,
        current_winner=_participant_payload(winner) if winner is not None else None,
        winners=[WinnerPayload(id=r.id, name=r.name, timestamp=r.timestamp) for r in engine.winners],
        tally=[TallyEntry(name=name, wins=wins) for name, wins in winner_tally(engine.winners)],
    )
