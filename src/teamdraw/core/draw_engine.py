"""Lottery draw state machine.

The engine moves ``IDLE -> SPINNING -> REVEALED``.  While spinning it emits
cosmetic candidates on a decaying cadence; once the reveal duration has
elapsed it performs the single authoritative pick from a freshly computed
eligibility pool and prepends a :class:`WinnerRecord` to the history.

All work happens in scheduler callbacks, so the caller is never blocked and
exactly one handle is outstanding at any time.
"""

from __future__ import annotations

import enum
import logging
import random
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from .errors import DrawInProgressError, NoEligibleParticipants
from .models import Participant, WinnerRecord
from .scheduler import Handle, Scheduler
from .shuffle import default_rng

__all__ = ["DrawEngine", "DrawState", "RevealTiming", "winner_tally"]

logger = logging.getLogger(__name__)

# Absorbs float drift accumulated across the tick chain.
_EPSILON = 1e-6


class DrawState(str, enum.Enum):
    IDLE = "idle"
    SPINNING = "spinning"
    REVEALED = "revealed"


@dataclass(frozen=True)
class RevealTiming:
    """Cadence of the reveal sequence, in seconds."""

    duration: float = 3.0
    fast_interval: float = 0.05
    slow_interval: float = 0.1
    slowdown_at: float = 0.7

    def __post_init__(self) -> None:
        if self.duration < 0:
            raise ValueError("duration must be non-negative")
        if self.fast_interval <= 0 or self.slow_interval <= 0:
            raise ValueError("tick intervals must be positive")
        if not 0.0 <= self.slowdown_at <= 1.0:
            raise ValueError("slowdown_at must be within [0, 1]")

    def interval_at(self, elapsed: float) -> float:
        if elapsed > self.duration * self.slowdown_at:
            return self.slow_interval
        return self.fast_interval


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DrawEngine:
    def __init__(
        self,
        participants: Callable[[], Sequence[Participant]],
        *,
        scheduler: Scheduler,
        rng: random.Random | None = None,
        timing: RevealTiming | None = None,
        allow_repeat: bool = False,
        clock: Callable[[], datetime] = _utc_now,
        on_candidate: Callable[[Participant], None] | None = None,
        on_reveal: Callable[[WinnerRecord | None], None] | None = None,
    ) -> None:
        self._participants = participants
        self._scheduler = scheduler
        self._rng = rng or default_rng()
        self.timing = timing or RevealTiming()
        self.allow_repeat = allow_repeat
        self._clock = clock
        self.on_candidate = on_candidate
        self.on_reveal = on_reveal

        self._state = DrawState.IDLE
        self._history: list[WinnerRecord] = []
        self._current_winner: Participant | None = None
        self._display: Participant | None = None
        self._handle: Handle | None = None
        self._started_at = 0.0
        self._closed = False

    # ------------------------------------------------------------------ views
    @property
    def state(self) -> DrawState:
        return self._state

    @property
    def winners(self) -> tuple[WinnerRecord, ...]:
        """Draw history, most recent first."""
        return tuple(self._history)

    @property
    def current_winner(self) -> Participant | None:
        return self._current_winner

    @property
    def display_candidate(self) -> Participant | None:
        return self._display

    @property
    def closed(self) -> bool:
        return self._closed

    def eligible_pool(self) -> list[Participant]:
        participants = list(self._participants())
        if self.allow_repeat:
            return participants
        won = {record.id for record in self._history}
        return [participant for participant in participants if participant.id not in won]

    @property
    def remaining(self) -> int:
        return len(self.eligible_pool())

    # ---------------------------------------------------------------- actions
    def start_draw(self) -> None:
        if self._closed:
            raise RuntimeError("draw engine has been closed")
        if self._state is DrawState.SPINNING:
            raise DrawInProgressError("a draw is already in progress")
        pool_size = self.remaining
        if pool_size == 0:
            raise NoEligibleParticipants("no eligible participants to draw from")

        self._state = DrawState.SPINNING
        self._current_winner = None
        self._started_at = self._scheduler.now()
        logger.debug("draw started", extra={"pool": pool_size, "allow_repeat": self.allow_repeat})
        self._handle = self._scheduler.schedule(0.0, self._tick)

    def clear_history(self) -> None:
        self._cancel_pending()
        self._history.clear()
        self._current_winner = None
        self._display = None
        self._state = DrawState.IDLE

    def close(self) -> None:
        if self._closed:
            return
        was_spinning = self._state is DrawState.SPINNING
        self._cancel_pending()
        self._closed = True
        if was_spinning:
            self._state = DrawState.IDLE
            logger.info("draw engine closed mid-spin; pending reveal cancelled")

    # --------------------------------------------------------------- internals
    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        if self._closed or self._state is not DrawState.SPINNING:
            return
        elapsed = self._scheduler.now() - self._started_at
        duration = self.timing.duration
        if elapsed + _EPSILON >= duration:
            self._reveal()
            return

        pool = self.eligible_pool()
        if pool:
            self._display = pool[self._rng.randrange(len(pool))]
            if self.on_candidate is not None:
                self.on_candidate(self._display)
        delay = min(self.timing.interval_at(elapsed), duration - elapsed)
        self._handle = self._scheduler.schedule(delay, self._tick)

    def _reveal(self) -> None:
        pool = self.eligible_pool()
        if not pool:
            logger.warning("eligibility pool emptied during the reveal; no winner recorded")
            self._state = DrawState.IDLE
            self._display = None
            if self.on_reveal is not None:
                self.on_reveal(None)
            return

        winner = pool[self._rng.randrange(len(pool))]
        record = WinnerRecord(id=winner.id, name=winner.name, timestamp=self._clock())
        self._history.insert(0, record)
        self._current_winner = winner
        self._display = winner
        self._state = DrawState.REVEALED
        logger.info("winner drawn", extra={"participant_id": winner.id, "pool": len(pool)})
        if self.on_reveal is not None:
            self.on_reveal(record)


def winner_tally(records: Iterable[WinnerRecord]) -> list[tuple[str, int]]:
    """Count wins per name, keeping first-seen order."""

    counts: dict[str, int] = {}
    for record in records:
        counts[record.name] = counts.get(record.name, 0) + 1
    return list(counts.items())
