"""
OmniFocus API layer package.
Runs the bundled AppleScript files and exposes the counts the plugin needs.
"""

from .apple_script_client import (
    MalformedResult,
    ScriptExecutionError,
    ScriptHandle,
    ScriptUnavailable,
)
from .bridge import AutomationBridge, OsaScriptBridge
from .task_query import TaskQuery

__all__ = [
    'AutomationBridge',
    'MalformedResult',
    'OsaScriptBridge',
    'ScriptExecutionError',
    'ScriptHandle',
    'ScriptUnavailable',
    'TaskQuery',
]
