from __future__ import annotations

from collections.abc import Sequence

from ..core.errors import ExternalCallFailure

__all__ = ["OfflineNaming", "StaticNaming"]


class OfflineNaming:
    """Stand-in used when no API key is configured; every call fails."""

    reason = "AI naming is not configured (set TEAMDRAW_GEMINI_API_KEY)"

    def generate_names(self, count: int, theme: str) -> Sequence[str]:  # noqa: ARG002
        raise ExternalCallFailure(self.reason)

    def extract_names(self, text: str) -> Sequence[str]:  # noqa: ARG002
        raise ExternalCallFailure(self.reason)


class StaticNaming:
    """Deterministic capability returning canned answers; records every call."""

    def __init__(self, names: Sequence[str] = (), extracted: Sequence[str] = ()) -> None:
        self.names = list(names)
        self.extracted = list(extracted)
        self.calls: list[tuple[str, object]] = []

    def generate_names(self, count: int, theme: str) -> Sequence[str]:
        self.calls.append(("generate", (count, theme)))
        return list(self.names)

    def extract_names(self, text: str) -> Sequence[str]:
        self.calls.append(("extract", text))
        return list(self.extracted)
