"""Split participants into fixed-size groups."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable, Sequence
from typing import Final

from .models import Group, Participant, new_id
from .shuffle import shuffled

__all__ = ["MAX_GROUP_SIZE", "MIN_GROUP_SIZE", "default_group_name", "group_clipboard_text", "partition"]

logger = logging.getLogger(__name__)

MIN_GROUP_SIZE: Final = 2
MAX_GROUP_SIZE: Final = 100


def default_group_name(index: int) -> str:
    return f"Group {index + 1}"


def partition(
    participants: Sequence[Participant],
    group_size: int,
    *,
    rng: random.Random | None = None,
    id_factory: Callable[[], str] = new_id,
) -> list[Group]:
    """Shuffle *participants* and slice them into groups of ``group_size``.

    Produces ``ceil(n / group_size)`` groups.  Only the final group may be
    short; members are never rebalanced across groups.  An empty input yields
    an empty list.
    """

    if isinstance(group_size, bool) or not isinstance(group_size, int):
        raise TypeError("group_size must be an integer")
    if group_size < MIN_GROUP_SIZE:
        raise ValueError(f"group_size must be at least {MIN_GROUP_SIZE}")
    if not participants:
        return []

    order = shuffled(participants, rng)
    count = math.ceil(len(order) / group_size)
    groups = [
        Group(
            id=id_factory(),
            name=default_group_name(index),
            members=tuple(order[index * group_size : (index + 1) * group_size]),
        )
        for index in range(count)
    ]
    logger.debug(
        "partitioned participants",
        extra={"participants": len(order), "group_size": group_size, "groups": count},
    )
    return groups


def group_clipboard_text(group: Group) -> str:
    return "\n".join([group.name, *(member.name for member in group.members)])
