"""Boundary policies around the external naming and extraction calls.

The two capabilities fail differently on purpose:

* group naming never fails; any error degrades to ``Group 1 .. Group N``;
* name extraction raises :class:`ExternalCallFailure` so the caller can tell
  the user and leave the participant list untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from ..config import DEFAULT_THEME
from ..core.errors import ExternalCallFailure, MalformedResponse
from ..core.models import Group
from ..core.partition import default_group_name

__all__ = [
    "NameExtractor",
    "NameGenerator",
    "NamingCapability",
    "apply_group_names",
    "extract_participant_names",
    "fallback_names",
    "generate_group_names",
    "resolve_theme",
]

logger = logging.getLogger(__name__)


@runtime_checkable
class NameGenerator(Protocol):
    def generate_names(self, count: int, theme: str) -> Sequence[str]: ...


@runtime_checkable
class NameExtractor(Protocol):
    def extract_names(self, text: str) -> Sequence[str]: ...


@runtime_checkable
class NamingCapability(NameGenerator, NameExtractor, Protocol):
    """Both capabilities served by a single backend."""


def fallback_names(count: int) -> list[str]:
    return [default_group_name(index) for index in range(max(0, count))]


def resolve_theme(theme: str | None, default: str = DEFAULT_THEME) -> str:
    cleaned = (theme or "").strip()
    return cleaned or default


def _string_list(payload: Any) -> list[str]:
    if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
        raise MalformedResponse(f"expected a list of strings, got {type(payload).__name__}")
    if not all(isinstance(item, str) for item in payload):
        raise MalformedResponse("expected every entry to be a string")
    return list(payload)


def generate_group_names(
    generator: NameGenerator,
    count: int,
    theme: str | None = None,
    *,
    default_theme: str = DEFAULT_THEME,
) -> list[str]:
    """Ask *generator* for ``count`` names; never raises.

    A successful answer is truncated to ``count`` entries and may be shorter;
    positions it does not cover keep their current name.  Any failure yields
    the deterministic fallback names.
    """

    if count <= 0:
        return []
    chosen_theme = resolve_theme(theme, default_theme)
    try:
        names = _string_list(generator.generate_names(count, chosen_theme))
    except Exception as exc:  # noqa: BLE001 - every failure degrades to defaults
        logger.warning(
            "Group naming failed; using fallback names",
            extra={"count": count, "error": f"{type(exc).__name__}: {exc}"},
        )
        return fallback_names(count)
    return [name.strip() for name in names[:count]]


def apply_group_names(groups: Sequence[Group], names: Sequence[str]) -> None:
    for group, name in zip(groups, names):
        if name and name.strip():
            group.name = name.strip()


def extract_participant_names(extractor: NameExtractor, text: str) -> list[str]:
    """Extract person names from messy *text*.

    Raises
    ------
    ExternalCallFailure
        When the capability fails or answers with the wrong shape.
    """

    if not text or not text.strip():
        return []
    try:
        raw = extractor.extract_names(text)
    except ExternalCallFailure:
        raise
    except Exception as exc:
        raise ExternalCallFailure(f"name extraction failed: {exc}") from exc
    return [name.strip() for name in _string_list(raw) if name.strip()]
