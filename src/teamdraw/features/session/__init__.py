"""Workspace feature: service layer, schemas, and API router."""

from .router import create_workspace_router
from .schemas import (
    GroupPayload,
    LotteryPayload,
    ParticipantPayload,
    TallyEntry,
    WinnerPayload,
    WorkspacePayload,
)
from .service import Workspace, WorkspaceConfig, WorkspaceManager

__all__ = [
    "GroupPayload",
    "LotteryPayload",
    "ParticipantPayload",
    "TallyEntry",
    "WinnerPayload",
    "Workspace",
    "WorkspaceConfig",
    "WorkspaceManager",
    "WorkspacePayload",
    "create_workspace_router",
]
