"""Serialized, time-bounded queries against OmniFocus.

OmniFocus handles Apple Events one at a time, so every automation call goes
through a single lock and runs in a worker thread to keep the event loop free.
Each call is bounded by ``timeout`` seconds; a call that overruns is reported
as :class:`ScriptExecutionError`, but the lock stays held until the worker
thread has returned.

``fetch_*`` methods raise.  :pymeth:`TaskQuery.due_count` and
:pymeth:`TaskQuery.perspectives` are the error boundary used by the plugin:
they log the failure and fall back to ``0`` / ``[]``.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional, TypeVar

from .apple_script_client import (
    DEFAULT_TIMEOUT,
    MalformedResult,
    ScriptExecutionError,
    ScriptHandle,
    ScriptUnavailable,
)
from .bridge import AutomationBridge

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _drain(work: "asyncio.Future[Any]") -> None:
    """Wait for an abandoned worker to finish and discard its outcome."""
    cancelled = False
    while not work.done():
        try:
            await asyncio.wait({work})
        except asyncio.CancelledError:
            cancelled = True
    if not work.cancelled() and work.exception() is not None:
        logger.debug("Abandoned automation call failed: %s", work.exception())
    if cancelled:
        raise asyncio.CancelledError


class TaskQuery:
    def __init__(
        self,
        bridge: AutomationBridge,
        timeout: float = DEFAULT_TIMEOUT,
        lock: Optional[asyncio.Lock] = None,
    ) -> None:
        self.bridge = bridge
        self.timeout = timeout
        self._lock = lock or asyncio.Lock()

    async def _call(self, func: Callable[..., T], *args: Any) -> T:
        async with self._lock:
            work = asyncio.ensure_future(asyncio.to_thread(func, *args))
            try:
                return await asyncio.wait_for(asyncio.shield(work), timeout=self.timeout)
            except asyncio.TimeoutError:
                await _drain(work)
                raise ScriptExecutionError(f"Automation call timed out after {self.timeout:g}s") from None
            except asyncio.CancelledError:
                await _drain(work)
                raise

    def setup_script(self, name: str) -> ScriptHandle:
        """Load the named script; raises ``ScriptUnavailable``."""
        return self.bridge.run_script(name)

    async def fetch_due_count(self, handle: ScriptHandle) -> int:
        return await self._call(self.bridge.fetch_count, handle)

    async def fetch_perspectives(self) -> List[str]:
        return list(await self._call(self.bridge.fetch_perspectives))

    async def due_count(self, handle: ScriptHandle) -> int:
        try:
            return await self.fetch_due_count(handle)
        except MalformedResult as exc:
            logger.warning("Ignoring malformed count from %s: %s", handle.name, exc)
        except ScriptExecutionError as exc:
            logger.warning("Count script %s failed: %s", handle.name, exc)
        return 0

    async def perspectives(self) -> List[str]:
        try:
            return await self.fetch_perspectives()
        except (ScriptExecutionError, ScriptUnavailable) as exc:
            logger.warning("Could not fetch perspectives: %s", exc)
        except MalformedResult as exc:
            logger.warning("Ignoring malformed perspective list: %s", exc)
        return []
