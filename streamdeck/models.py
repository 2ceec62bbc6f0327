from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .defines import BadgeCountSource


class ActionSettings(BaseModel):
    """Per-button settings as stored by the Stream Deck application."""

    perspective: str = ""
    custom_perspective: str = Field("", alias="customPerspective")
    refresh_interval: Optional[int] = Field(None, alias="refreshInterval")
    badge_count: BadgeCountSource = Field(BadgeCountSource.OVERDUE, alias="badgeCount")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("perspective", "custom_perspective", mode="before")
    @classmethod
    def blank_if_missing(cls, v):  # noqa D401
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("refresh_interval", mode="before")
    @classmethod
    def coerce_interval(cls, v):  # noqa D401
        """The Property Inspector sends numbers as strings; drop anything unparsable."""
        if v is None or isinstance(v, bool):
            return None
        try:
            return int(float(str(v).strip()))
        except (ValueError, OverflowError):
            return None

    @field_validator("badge_count", mode="before")
    @classmethod
    def known_source(cls, v):  # noqa D401
        try:
            return BadgeCountSource(v)
        except (ValueError, TypeError):
            return BadgeCountSource.OVERDUE

    @property
    def effective_perspective(self) -> str:
        return self.custom_perspective or self.perspective

    def interval_seconds(self, default: int, minimum: int) -> int:
        interval = self.refresh_interval if self.refresh_interval is not None else default
        return max(interval, minimum)


class EventPayload(BaseModel):
    settings: ActionSettings = Field(default_factory=ActionSettings)

    model_config = ConfigDict(extra="allow")

    @field_validator("settings", mode="before")
    @classmethod
    def settings_dict(cls, v):  # noqa D401
        return v if isinstance(v, dict) else {}


class InboundEvent(BaseModel):
    """An event received from the Stream Deck application."""

    event: str
    action: Optional[str] = None
    context: Optional[str] = None
    device: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")

    @field_validator("payload", mode="before")
    @classmethod
    def payload_dict(cls, v):  # noqa D401
        return v if isinstance(v, dict) else {}

    @property
    def settings(self) -> ActionSettings:
        return EventPayload.model_validate(self.payload).settings
