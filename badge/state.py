"""Badge state derivation.

A button shows one of three images depending on how many tasks the selected
count source reports.  The mapping only looks at the (clamped) count and the
configured thresholds; the count source decides which number comes in, never
how it is mapped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

from streamdeck.defines import BadgeCountSource

logger = logging.getLogger(__name__)

DEFAULT_SHORT_THRESHOLD = 5


class DueTasksState(IntEnum):
    NONE = 0
    SHORT = 1
    LONG = 2


@dataclass(frozen=True)
class BadgeThresholds:
    short: int = DEFAULT_SHORT_THRESHOLD

    def __post_init__(self) -> None:
        if self.short < 1:
            raise ValueError(f"short threshold must be at least 1, got {self.short}")


def clamp_count(raw: Any) -> int:
    """Coerce automation output to a non-negative int; garbage becomes 0."""
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return max(raw, 0)
    try:
        value = int(float(str(raw).strip()))
    except (TypeError, ValueError, OverflowError):
        logger.debug("Clamping malformed count %r to 0", raw)
        return 0
    return max(value, 0)


def derive(
    count: Any,
    mode: Optional[BadgeCountSource] = None,
    thresholds: BadgeThresholds = BadgeThresholds(),
) -> DueTasksState:
    """Map a due-task count to a badge state.

    ``mode`` is accepted so callers can pass the source along, but it does not
    influence the result.
    """
    value = clamp_count(count)
    if value <= 0:
        return DueTasksState.NONE
    if value < thresholds.short:
        return DueTasksState.SHORT
    return DueTasksState.LONG
