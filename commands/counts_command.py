import asyncio
from typing import List, Tuple

from rich.console import Console
from rich.table import Table

from badge import BadgeThresholds, DueTasksState, derive
from omnifocus_api import OsaScriptBridge, ScriptUnavailable, TaskQuery
from streamdeck.defines import BadgeCountSource
from utils.config import PluginConfig

console = Console()

Row = Tuple[BadgeCountSource, str, str]


async def collect_counts(query: TaskQuery, thresholds: BadgeThresholds) -> List[Row]:
    """Run every count script once, in order, and derive the badge for each."""
    rows: List[Row] = []
    for source in BadgeCountSource:
        try:
            handle = query.setup_script(source.script_name)
        except ScriptUnavailable as e:
            rows.append((source, "-", f"unavailable: {e}"))
            continue
        count = await query.due_count(handle)
        state = derive(count, source, thresholds)
        rows.append((source, str(count), state.name.title()))
    return rows


def handle_counts(config: PluginConfig) -> List[Row]:
    """Print the current counts and the badge each one would produce."""
    query = TaskQuery(OsaScriptBridge(timeout=config.script_timeout), timeout=config.script_timeout)
    rows = asyncio.run(collect_counts(query, BadgeThresholds(short=config.short_threshold)))

    table = Table(title=f"OmniFocus counts (short below {config.short_threshold})")
    table.add_column("Source", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Badge")
    for source, count, badge in rows:
        style = "red" if badge == DueTasksState.LONG.name.title() else None
        table.add_row(source.value, count, badge, style=style)
    console.print(table)
    return rows
