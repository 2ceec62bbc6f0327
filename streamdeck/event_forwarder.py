"""Outbound events to the Stream Deck application."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol
from urllib.parse import quote

from badge import DueTasksState
from omnifocus_api import TaskQuery

from . import defines

logger = logging.getLogger(__name__)

PERSPECTIVE_URL = "omnifocus:///perspective/{name}"


class DeckTransport(Protocol):
    def send(self, context: Optional[str], message: Dict[str, Any]) -> bool: ...


def perspective_payload(perspectives: List[str]) -> Dict[str, Any]:
    return {
        defines.PAYLOAD_EVENT_TYPE: defines.EVENT_TYPE_GET_PERSPECTIVES,
        defines.PAYLOAD_PERSPECTIVES: list(perspectives),
    }


class EventForwarder:
    """Builds Stream Deck events and hands them to the transport.

    ``is_active`` is consulted after any slow call; if it says the context is
    gone the event is dropped instead of being sent to a stale button.
    """

    def __init__(
        self,
        transport: DeckTransport,
        query: TaskQuery,
        is_active: Callable[[str], bool] = lambda context: True,
    ) -> None:
        self.transport = transport
        self.query = query
        self.is_active = is_active

    async def send_perspective_list(self, action: str, context: str) -> bool:
        perspectives = await self.query.perspectives()
        if not self.is_active(context):
            logger.debug("Context %s went away; not sending perspectives", context)
            return False
        message = {
            "action": action,
            "event": defines.EVENT_SEND_TO_PROPERTY_INSPECTOR,
            "payload": perspective_payload(perspectives),
        }
        return self.transport.send(context, message)

    def send_badge(self, context: str, state: DueTasksState, count: int) -> None:
        self.transport.send(context, {"event": defines.EVENT_SET_STATE, "payload": {"state": int(state)}})
        title = str(count) if count > 0 else ""
        self.transport.send(context, {"event": defines.EVENT_SET_TITLE, "payload": {"title": title, "target": 0}})

    def show_alert(self, context: str) -> None:
        self.transport.send(context, {"event": defines.EVENT_SHOW_ALERT})

    def open_perspective(self, perspective: str) -> bool:
        if not perspective:
            return False
        url = PERSPECTIVE_URL.format(name=quote(perspective, safe=""))
        return self.transport.send(None, {"event": defines.EVENT_OPEN_URL, "payload": {"url": url}})
