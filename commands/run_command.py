import asyncio
import json
import logging
from typing import Optional

from omnifocus_api import OsaScriptBridge, TaskQuery
from streamdeck.connection import StreamDeckConnection
from streamdeck.plugin import OmniFocusPlugin
from utils.config import PluginConfig

logger = logging.getLogger(__name__)


def parse_info(info: Optional[str]) -> dict:
    """Decode the ``-info`` JSON blob; an unreadable blob is logged and ignored."""
    if not info:
        return {}
    try:
        data = json.loads(info)
    except json.JSONDecodeError as e:
        logger.warning("Could not decode -info argument: %s", e)
        return {}
    return data if isinstance(data, dict) else {}


async def serve(
    config: PluginConfig,
    *,
    port: int,
    plugin_uuid: str,
    register_event: str,
) -> None:
    """Run the plugin until the Stream Deck application closes the socket."""
    query = TaskQuery(OsaScriptBridge(timeout=config.script_timeout), timeout=config.script_timeout)
    connection = StreamDeckConnection(port=port, plugin_uuid=plugin_uuid, register_event=register_event)
    plugin = OmniFocusPlugin(query, connection, config)
    try:
        await connection.run(plugin.dispatch)
    finally:
        await plugin.shutdown()


def handle_run(config: PluginConfig, port: int, plugin_uuid: str, register_event: str, info: Optional[str] = None):
    details = parse_info(info)
    app_info = details.get("application", {})
    if isinstance(app_info, dict) and app_info.get("version"):
        logger.info("Stream Deck %s on %s", app_info.get("version"), app_info.get("platform", "unknown"))
    asyncio.run(serve(config, port=port, plugin_uuid=plugin_uuid, register_event=register_event))
