from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str], None]


def build_ws_url(port: int, host: str = "127.0.0.1") -> str:
    return f"ws://{host}:{int(port)}"


class StreamDeckConnection:
    """Websocket link to the Stream Deck application.

    Outbound messages go through a queue so that :pymeth:`send` can be called
    from synchronous code; a dedicated send loop drains it.
    """

    def __init__(self, *, port: int, plugin_uuid: str, register_event: str, host: str = "127.0.0.1") -> None:
        self.url = build_ws_url(port, host)
        self.plugin_uuid = plugin_uuid
        self.register_event = register_event
        self._ws = None
        self._open = False
        self._closing = False
        self._outbox: asyncio.Queue[str] = asyncio.Queue()

    @property
    def is_open(self) -> bool:
        return self._open and self._ws is not None

    def registration_message(self) -> Dict[str, Any]:
        return {"event": self.register_event, "uuid": self.plugin_uuid}

    def send(self, context: Optional[str], message: Dict[str, Any]) -> bool:
        """Queue *message* for delivery, tagged with *context* when given."""
        if not self.is_open:
            logger.debug("Dropping %s for %s: socket not open", message.get("event"), context)
            return False
        body = dict(message)
        if context is not None:
            body["context"] = context
        self._outbox.put_nowait(json.dumps(body))
        return True

    async def close(self, reason: str = "Plugin closing") -> None:
        self._closing = True
        ws = self._ws
        if ws is None:
            return
        try:
            await ws.close(code=1000, reason=reason)
        except ConnectionClosed:
            pass

    async def run(self, on_message: MessageHandler) -> None:
        """Connect, register, and pump messages until the socket closes."""
        try:
            async with websockets.connect(self.url) as ws:
                self._ws = ws
                await ws.send(json.dumps(self.registration_message()))
                self._open = True
                logger.info("Registered plugin %s at %s", self.plugin_uuid, self.url)

                receiver = asyncio.create_task(self._recv_loop(ws, on_message))
                sender = asyncio.create_task(self._send_loop(ws))
                done, pending = await asyncio.wait(
                    {receiver, sender},
                    return_when=asyncio.FIRST_COMPLETED,
                )

                for task in pending:
                    task.cancel()

                for task in done:
                    exc = task.exception()
                    if exc:
                        raise exc
        except ConnectionClosed as e:
            if not self._closing and e.rcvd is not None and e.rcvd.code not in (1000, 1001):
                logger.warning("Stream Deck connection closed unexpectedly: %s", e)
            else:
                logger.info("Stream Deck connection closed")
        finally:
            self._open = False
            self._ws = None

    async def _recv_loop(self, ws, on_message: MessageHandler) -> None:
        async for message in ws:
            if isinstance(message, bytes):
                message = message.decode("utf-8", errors="replace")
            on_message(message)

    async def _send_loop(self, ws) -> None:
        while True:
            message = await self._outbox.get()
            await ws.send(message)
