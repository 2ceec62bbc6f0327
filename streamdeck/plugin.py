"""Event dispatch and per-button polling.

Each visible button gets a poll task that refreshes its badge, then sleeps
for the button's refresh interval.  A refresh that is requested while another
one is still running for the same button is dropped rather than queued, and
a result that comes back after the button was removed or reconfigured is
discarded.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Callable, Coroutine, Dict, Optional, Set

from pydantic import ValidationError

from badge import BadgeThresholds, DueTasksState, clamp_count, derive
from omnifocus_api import ScriptUnavailable, TaskQuery
from utils.config import PluginConfig

from . import defines
from .event_forwarder import DeckTransport, EventForwarder
from .models import ActionSettings, InboundEvent
from .registry import ActionInstance, ActionRegistry

logger = logging.getLogger(__name__)


class OmniFocusPlugin:
    def __init__(self, query: TaskQuery, transport: DeckTransport, config: PluginConfig) -> None:
        self.query = query
        self.config = config
        self.thresholds = BadgeThresholds(short=config.short_threshold)
        self.registry = ActionRegistry()
        self.forwarder = EventForwarder(transport, query, is_active=self.registry.is_active)
        self._background: Set[asyncio.Task] = set()
        self._handlers: Dict[str, Callable[[InboundEvent], None]] = {
            defines.EVENT_WILL_APPEAR: self._on_will_appear,
            defines.EVENT_WILL_DISAPPEAR: self._on_will_disappear,
            defines.EVENT_DID_RECEIVE_SETTINGS: self._on_did_receive_settings,
            defines.EVENT_KEY_DOWN: self._on_key_down,
            defines.EVENT_SEND_TO_PLUGIN: self._on_send_to_plugin,
            defines.EVENT_PROPERTY_INSPECTOR_DID_APPEAR: self._on_property_inspector_did_appear,
            defines.EVENT_SYSTEM_DID_WAKE_UP: self._on_system_did_wake_up,
        }

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def dispatch(self, raw: str) -> None:
        """Handle one raw websocket message. Must be called from the event loop."""
        try:
            event = InboundEvent.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Ignoring invalid message from Stream Deck: %s", exc)
            return

        handler = self._handlers.get(event.event)
        if handler is None:
            logger.debug("No handler for %s", event.event)
            return
        handler(event)

    def _on_will_appear(self, event: InboundEvent) -> None:
        if event.context:
            self.register(event.context, event.action or "", event.settings)

    def _on_will_disappear(self, event: InboundEvent) -> None:
        if event.context:
            self.unregister(event.context)

    def _on_did_receive_settings(self, event: InboundEvent) -> None:
        if not event.context:
            return
        existing = self.registry.get(event.context)
        action = event.action or (existing.action if existing else "")
        self.register(event.context, action, event.settings)

    def _on_key_down(self, event: InboundEvent) -> None:
        instance = self.registry.get(event.context)
        settings = instance.settings if instance else event.settings
        self.forwarder.open_perspective(settings.effective_perspective)
        if instance is not None:
            self._spawn(self.refresh(instance))

    def _on_send_to_plugin(self, event: InboundEvent) -> None:
        if event.payload.get(defines.PAYLOAD_EVENT_TYPE) == defines.EVENT_TYPE_GET_PERSPECTIVES:
            self._request_perspectives(event)

    def _on_property_inspector_did_appear(self, event: InboundEvent) -> None:
        self._request_perspectives(event)

    def _on_system_did_wake_up(self, event: InboundEvent) -> None:
        for instance in self.registry:
            self._spawn(self.refresh(instance))

    def _request_perspectives(self, event: InboundEvent) -> None:
        instance = self.registry.get(event.context)
        if instance is None:
            logger.debug("Perspective request for unknown context %s", event.context)
            return
        self._spawn(self.forwarder.send_perspective_list(event.action or instance.action, instance.context))

    # ------------------------------------------------------------------
    # Contexts
    # ------------------------------------------------------------------

    def register(self, context: str, action: str, settings: ActionSettings) -> ActionInstance:
        """(Re)configure a button and start polling it."""
        self.unregister(context)
        instance = self.registry.add(context, action, settings)
        try:
            instance.handle = self.query.setup_script(settings.badge_count.script_name)
        except ScriptUnavailable as exc:
            logger.error("Script for %s unavailable: %s", context, exc)
            instance.unavailable = True
            self.forwarder.show_alert(context)
            self.forwarder.send_badge(context, DueTasksState.NONE, 0)
            return instance

        instance.poll_task = self._spawn(self._poll_loop(instance))
        logger.info(
            "Polling %s every %ss (badge from %s)",
            context,
            self._interval(instance),
            settings.badge_count.value,
        )
        return instance

    def unregister(self, context: str) -> None:
        instance = self.registry.remove(context)
        if instance is not None and instance.poll_task is not None:
            instance.poll_task.cancel()

    def _interval(self, instance: ActionInstance) -> int:
        return instance.settings.interval_seconds(
            self.config.default_refresh_interval,
            self.config.min_refresh_interval,
        )

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def refresh(self, instance: ActionInstance) -> Optional[DueTasksState]:
        """Query the count for *instance* and push the badge.

        Returns the delivered state, or ``None`` if nothing was sent.
        """
        if instance.unavailable or instance.handle is None:
            return None
        if instance.in_flight:
            logger.debug("Refresh for %s already running; dropped", instance.context)
            return None

        instance.in_flight = True
        try:
            count = clamp_count(await self.query.due_count(instance.handle))
        finally:
            instance.in_flight = False

        if not self.registry.is_active(instance.context, instance.generation):
            logger.debug("Discarding result for stale context %s", instance.context)
            return None

        state = derive(count, instance.settings.badge_count, self.thresholds)
        self.forwarder.send_badge(instance.context, state, count)
        return state

    async def _poll_loop(self, instance: ActionInstance) -> None:
        interval = self._interval(instance)
        while self.registry.is_active(instance.context, instance.generation):
            await self.refresh(instance)
            await asyncio.sleep(interval)

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background task failed", exc_info=task.exception())

    async def shutdown(self) -> None:
        for instance in self.registry:
            self.registry.remove(instance.context)
        tasks = list(self._background)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
