"""In-memory participant list and the text/file parsers that feed it."""

from __future__ import annotations

import csv
import logging
import re
from collections.abc import Callable, Iterable, Iterator

from .models import Participant, new_id

__all__ = ["ParticipantRegistry", "parse_name_file", "split_names"]

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[,\n]+")


def split_names(text: str) -> list[str]:
    """Split free text on commas and newlines, trimming and dropping blanks."""

    if not text:
        return []
    return [chunk.strip() for chunk in _SEPARATORS.split(text) if chunk.strip()]


def parse_name_file(content: str) -> list[str]:
    """Return the first comma-delimited field of every non-blank line."""

    if not content:
        return []
    names: list[str] = []
    for line in content.lstrip("\ufeff").splitlines():
        if not line.strip():
            continue
        name = _first_field(line).strip()
        if name:
            names.append(name)
    return names


def _first_field(line: str) -> str:
    # Each line stands alone; malformed quoting or oversized fields fall back to a plain split.
    try:
        row = next(csv.reader([line], strict=True), [])
    except csv.Error:
        return line.split(",", 1)[0]
    return row[0] if row else ""


class ParticipantRegistry:
    """Ordered participants with unique ids; names may repeat."""

    def __init__(self, id_factory: Callable[[], str] = new_id) -> None:
        self._id_factory = id_factory
        self._participants: dict[str, Participant] = {}

    def __len__(self) -> int:
        return len(self._participants)

    def __iter__(self) -> Iterator[Participant]:
        return iter(tuple(self._participants.values()))

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._participants

    @property
    def participants(self) -> tuple[Participant, ...]:
        return tuple(self._participants.values())

    def names(self) -> list[str]:
        return [participant.name for participant in self._participants.values()]

    def get(self, participant_id: str) -> Participant | None:
        return self._participants.get(participant_id)

    def add_names(self, names: Iterable[str]) -> list[Participant]:
        added: list[Participant] = []
        for raw in names:
            name = raw.strip() if isinstance(raw, str) else ""
            if not name:
                continue
            participant = Participant(id=self._fresh_id(), name=name)
            self._participants[participant.id] = participant
            added.append(participant)
        logger.debug("added participants", extra={"added": len(added), "total": len(self._participants)})
        return added

    def add_text(self, text: str) -> list[Participant]:
        return self.add_names(split_names(text))

    def add_file_content(self, content: str) -> list[Participant]:
        return self.add_names(parse_name_file(content))

    def remove(self, participant_id: str) -> Participant:
        try:
            return self._participants.pop(participant_id)
        except KeyError as exc:
            raise KeyError(f"participant '{participant_id}' not found") from exc

    def clear(self) -> int:
        removed = len(self._participants)
        self._participants.clear()
        return removed

    def _fresh_id(self) -> str:
        while True:
            candidate = self._id_factory()
            if candidate not in self._participants:
                return candidate
            logger.warning("id factory produced a duplicate id; retrying")
