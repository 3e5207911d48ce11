"""Draw, shuffle and grouping primitives shared by every surface."""

from .draw_engine import DrawEngine, DrawState, RevealTiming, winner_tally
from .errors import (
    ConfirmationRequiredError,
    DrawInProgressError,
    EmptyInputError,
    ExternalCallFailure,
    MalformedResponse,
    NamingInProgressError,
    NoEligibleParticipants,
    TeamDrawError,
)
from .models import Group, Participant, WinnerRecord, new_id
from .partition import MAX_GROUP_SIZE, group_clipboard_text, partition
from .registry import ParticipantRegistry, parse_name_file, split_names
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from .shuffle import shuffled

__all__ = [
    "AsyncioScheduler",
    "ConfirmationRequiredError",
    "DrawEngine",
    "DrawInProgressError",
    "DrawState",
    "EmptyInputError",
    "ExternalCallFailure",
    "Group",
    "MAX_GROUP_SIZE",
    "MalformedResponse",
    "ManualScheduler",
    "NamingInProgressError",
    "NoEligibleParticipants",
    "Participant",
    "ParticipantRegistry",
    "RevealTiming",
    "Scheduler",
    "TeamDrawError",
    "WinnerRecord",
    "group_clipboard_text",
    "new_id",
    "parse_name_file",
    "partition",
    "shuffled",
    "split_names",
    "winner_tally",
]
