import asyncio
import json

from rich.console import Console

from omnifocus_api import OsaScriptBridge, ScriptExecutionError, ScriptUnavailable, TaskQuery
from utils.config import PluginConfig

console = Console()


def handle_perspectives(config: PluginConfig, json_output: bool = False) -> int:
    """List perspective names. Returns the process exit code."""
    query = TaskQuery(OsaScriptBridge(timeout=config.script_timeout), timeout=config.script_timeout)
    try:
        names = asyncio.run(query.fetch_perspectives())
    except (ScriptUnavailable, ScriptExecutionError) as e:
        console.print(f"[red]Could not read perspectives:[/red] {e}")
        return 1

    if json_output:
        print(json.dumps(names, indent=2))
    elif not names:
        console.print("No perspectives found.")
    else:
        for name in names:
            console.print(f"- {name}", markup=False)
    return 0
