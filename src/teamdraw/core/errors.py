from __future__ import annotations

__all__ = [
    "ConfirmationRequiredError",
    "DrawInProgressError",
    "EmptyInputError",
    "ExternalCallFailure",
    "MalformedResponse",
    "NamingInProgressError",
    "NoEligibleParticipants",
    "TeamDrawError",
]


class TeamDrawError(Exception):
    """Base class for every recoverable teamdraw failure."""


class EmptyInputError(TeamDrawError):
    """An action was requested with no participants to act on."""


class NoEligibleParticipants(EmptyInputError):
    """The eligibility pool is empty, so no draw can start."""


class DrawInProgressError(TeamDrawError):
    """A draw was requested while the reveal sequence is still running."""


class NamingInProgressError(TeamDrawError):
    """A group naming request is already outstanding."""


class ConfirmationRequiredError(TeamDrawError):
    """A destructive action was requested without explicit confirmation."""


class ExternalCallFailure(TeamDrawError):
    """The external text-generation capability failed."""


class MalformedResponse(ExternalCallFailure):
    """The external capability answered with data of the wrong shape."""
