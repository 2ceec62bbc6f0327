#!/usr/bin/env python3
"""OmniFocus Stream Deck plugin: task counts and perspectives on Stream Deck buttons.

The Stream Deck application starts the plugin as::

    ofsd -port 28196 -pluginUUID <uuid> -registerEvent registerPlugin -info '{...}'

:pyfunc:`main` rewrites those single-dash arguments for typer and routes them
to the ``run`` command.  The other commands are for checking the OmniFocus
side from a terminal.
"""
import logging
import sys
from typing import List, Optional

import typer

from commands.counts_command import handle_counts
from commands.perspectives_command import handle_perspectives
from commands.run_command import handle_run
from utils.config import PluginConfig, load_env_vars
from utils.logger import configure_logging

__version__ = "1.0.0"

# Arguments the Stream Deck application passes with a single dash
STREAMDECK_ARGS = ("port", "pluginUUID", "registerEvent", "info")

logger = logging.getLogger("ofsd")

app = typer.Typer(
    name="ofsd",
    help="OmniFocus Stream Deck plugin - task counts and perspectives on your Stream Deck.",
    no_args_is_help=True,
)


def _load_config() -> PluginConfig:
    load_env_vars()
    config = PluginConfig.from_env()
    configure_logging(config.log_level, log_file=config.log_file)
    return config


def _version_callback(value: bool):
    if value:
        typer.echo(f"ofsd {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
):
    """OmniFocus Stream Deck plugin."""


@app.command("run")
def run(
    port: int = typer.Option(..., "--port", help="Websocket port of the Stream Deck application."),
    plugin_uuid: str = typer.Option(..., "--pluginUUID", help="UUID used to register the plugin."),
    register_event: str = typer.Option(..., "--registerEvent", help="Event name used to register the plugin."),
    info: Optional[str] = typer.Option(None, "--info", help="JSON blob describing the host application."),
):
    """Connect to the Stream Deck application and serve button updates."""
    config = _load_config()
    logger.info("Starting ofsd %s on port %s", __version__, port)
    handle_run(config, port, plugin_uuid, register_event, info)


@app.command("counts")
def counts():
    """Run the count scripts once and show the badge each one would produce."""
    handle_counts(_load_config())


@app.command("perspectives")
def perspectives(
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format."),
):
    """List the perspectives available in OmniFocus."""
    code = handle_perspectives(_load_config(), json_output=json_output)
    if code:
        raise typer.Exit(code=code)


def normalize_argv(argv: List[str]) -> List[str]:
    """Turn Stream Deck launch arguments into a ``run`` invocation."""
    single_dash = {f"-{name}": f"--{name}" for name in STREAMDECK_ARGS}
    converted = [single_dash.get(arg, arg) for arg in argv]
    if converted and converted[0] in single_dash.values():
        converted.insert(0, "run")
    return converted


def main(argv: Optional[List[str]] = None):
    args = normalize_argv(list(sys.argv[1:] if argv is None else argv))
    app(args=args, prog_name="ofsd")


if __name__ == "__main__":
    main()
