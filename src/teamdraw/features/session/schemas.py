from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ...core.draw_engine import DrawState
from ...core.partition import MAX_GROUP_SIZE, MIN_GROUP_SIZE

__all__ = [
    "AddTextRequest",
    "AllowRepeatRequest",
    "CreateWorkspaceRequest",
    "FileContentRequest",
    "GroupPayload",
    "GroupRequest",
    "LotteryPayload",
    "NamingRequest",
    "ParticipantPayload",
    "TallyEntry",
    "WinnerPayload",
    "WorkspacePayload",
]


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ParticipantPayload(_APIModel):
    id: str
    name: str


class GroupPayload(_APIModel):
    id: str
    name: str
    members: list[ParticipantPayload]
    size: int
    clipboard: str


class WinnerPayload(_APIModel):
    id: str
    name: str
    timestamp: datetime


class TallyEntry(_APIModel):
    name: str
    wins: int


class LotteryPayload(_APIModel):
    state: DrawState
    allow_repeat: bool
    remaining: int
    display: str | None = None
    current_winner: ParticipantPayload | None = None
    winners: list[WinnerPayload]
    tally: list[TallyEntry]


class WorkspacePayload(_APIModel):
    workspace: str
    participants: list[ParticipantPayload]
    groups: list[GroupPayload]
    group_size: int
    lottery: LotteryPayload
    naming_in_flight: bool


# ---------------------------------------------------------------- requests
class CreateWorkspaceRequest(BaseModel):
    allow_repeat: bool = False
    group_size: int = Field(default=3, ge=MIN_GROUP_SIZE, le=MAX_GROUP_SIZE)
    reveal_seconds: float | None = Field(default=None, ge=0.0, le=30.0)
    seed: int | None = None


class AddTextRequest(BaseModel):
    text: str


class FileContentRequest(BaseModel):
    content: str


class GroupRequest(BaseModel):
    size: int = Field(ge=MIN_GROUP_SIZE, le=MAX_GROUP_SIZE)


class NamingRequest(BaseModel):
    theme: str | None = None


class AllowRepeatRequest(BaseModel):
    allow_repeat: bool
