from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

__all__ = ["Group", "Participant", "WinnerRecord", "new_id"]


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Participant:
    id: str
    name: str


@dataclass
class Group:
    """A partition run's output; ``name`` may be overwritten by AI naming."""

    id: str
    name: str
    members: tuple[Participant, ...] = field(default_factory=tuple)

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class WinnerRecord:
    id: str
    name: str
    timestamp: datetime
