"""AppleScript execution helper for the OmniFocus Stream Deck plugin.

Scripts are shipped as ``*.applescript`` files inside the
``omnifocus_api/applescripts`` directory and run through the system
``osascript`` command.  Callers load a script once with :pyfunc:`load_script`
and then execute the returned :class:`ScriptHandle` as often as they like.

Returned output is *stdout* with leading/trailing whitespace stripped.  A
non-zero exit status or a timeout raises :class:`ScriptExecutionError` with
stderr attached.
"""
from __future__ import annotations

import pathlib
import shutil
import subprocess
from dataclasses import dataclass
from typing import Final, Optional, Sequence

__all__: Final = [
    "MalformedResult",
    "ScriptExecutionError",
    "ScriptHandle",
    "ScriptUnavailable",
    "execute_applescript",
    "load_script",
]

SCRIPTS_DIR = pathlib.Path(__file__).resolve().parent / "applescripts"
DEFAULT_TIMEOUT = 5.0


class ScriptUnavailable(RuntimeError):
    """Raised when a script cannot be set up (missing file or no ``osascript``)."""


class ScriptExecutionError(RuntimeError):
    """Raised when ``osascript`` fails, exits non-zero or times out."""


class MalformedResult(ValueError):
    """Raised when a script returns output that cannot be parsed."""


@dataclass(frozen=True)
class ScriptHandle:
    name: str
    path: pathlib.Path


def _osascript_path() -> Optional[str]:
    return shutil.which("osascript")


def load_script(name: str, scripts_dir: pathlib.Path = SCRIPTS_DIR) -> ScriptHandle:
    """Return a handle for the bundled script *name* (without extension)."""
    if _osascript_path() is None:
        raise ScriptUnavailable("osascript is not available on this system")
    path = scripts_dir / f"{name}.applescript"
    if not path.is_file():
        raise ScriptUnavailable(f"No bundled script named {name!r}")
    return ScriptHandle(name=name, path=path)


def execute_applescript(
    handle: ScriptHandle,
    args: Sequence[str] = (),
    timeout: float = DEFAULT_TIMEOUT,
) -> str:  # noqa: D401
    """Run the script behind *handle* and return its *stdout* as ``str``."""
    cmd = ["osascript", str(handle.path), *args]
    try:
        process = subprocess.run(cmd, capture_output=True, text=True, check=False, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        raise ScriptExecutionError(f"Script {handle.name!r} timed out after {timeout:g}s") from exc
    except OSError as exc:
        raise ScriptExecutionError(f"Could not launch osascript: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise MalformedResult(f"Script {handle.name!r} produced undecodable output: {exc}") from exc

    if process.returncode != 0:
        raise ScriptExecutionError(
            f"Script {handle.name!r} failed (code {process.returncode}): {process.stderr.strip()}"
        )
    return process.stdout.strip()
