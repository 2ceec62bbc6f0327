"""Badge state derivation for OmniFocus due counts."""

from .state import BadgeThresholds, DueTasksState, clamp_count, derive

__all__ = ["BadgeThresholds", "DueTasksState", "clamp_count", "derive"]
