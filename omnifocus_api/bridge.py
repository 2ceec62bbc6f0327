"""Automation bridge to OmniFocus.

The rest of the plugin talks to OmniFocus only through the
:class:`AutomationBridge` protocol, so tests can swap in a fake that returns
scripted results.  :class:`OsaScriptBridge` is the real implementation and runs
the bundled AppleScript files with ``osascript``.
"""
from __future__ import annotations

from typing import List, Protocol

from .apple_script_client import (
    DEFAULT_TIMEOUT,
    MalformedResult,
    ScriptHandle,
    execute_applescript,
    load_script,
)

PERSPECTIVE_SCRIPT = "perspective_names"


class AutomationBridge(Protocol):
    def run_script(self, name: str) -> ScriptHandle: ...

    def fetch_count(self, handle: ScriptHandle) -> int: ...

    def fetch_perspectives(self) -> List[str]: ...


def parse_count(output: str) -> int:
    """Parse the integer printed by a count script."""
    text = (output or "").strip()
    try:
        return int(text)
    except ValueError:
        raise MalformedResult(f"Expected an integer count, got {text!r}") from None


def parse_perspectives(output: str) -> List[str]:
    """Split script output into perspective names, dropping blank lines."""
    return [line.strip() for line in (output or "").splitlines() if line.strip()]


class OsaScriptBridge:
    """Runs the bundled scripts through ``osascript``."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout
        self._perspective_handle: ScriptHandle | None = None

    def run_script(self, name: str) -> ScriptHandle:
        return load_script(name)

    def fetch_count(self, handle: ScriptHandle) -> int:
        return parse_count(execute_applescript(handle, timeout=self.timeout))

    def fetch_perspectives(self) -> List[str]:
        if self._perspective_handle is None:
            self._perspective_handle = load_script(PERSPECTIVE_SCRIPT)
        return parse_perspectives(execute_applescript(self._perspective_handle, timeout=self.timeout))
