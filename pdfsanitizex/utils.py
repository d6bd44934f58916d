"""Utility helpers for :mod:`pdfsanitizex`."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import MutableMapping, Sequence

_LOGGER = logging.getLogger("pdfsanitizex")


def resolve_path(path: os.PathLike[str] | str) -> Path:
    """Resolve *path* into an absolute :class:`~pathlib.Path`."""

    resolved = Path(path).expanduser().resolve()
    _LOGGER.debug("Resolved path '%s' to '%s'", path, resolved)
    return resolved


def ensure_parent_dir(path: Path) -> None:
    """Create parent directory for *path* if it does not exist."""

    path.parent.mkdir(parents=True, exist_ok=True)


def which(executables: Sequence[str]) -> str | None:
    """Return the first executable from *executables* found on ``PATH``."""

    for candidate in executables:
        found = shutil.which(candidate)
        if found:
            _LOGGER.debug("Detected external tool: %s -> %s", candidate, found)
            return found
    return None


def run_subprocess(
    command: Sequence[str],
    *,
    input_data: bytes | None = None,
    env: MutableMapping[str, str] | None = None,
    check: bool = True,
    capture_stderr: bool = True,
) -> subprocess.CompletedProcess[bytes]:
    """Run *command* capturing its standard output as bytes.

    Parameters
    ----------
    command:
        Command and arguments to execute.
    input_data:
        Bytes fed to the process on standard input.
    env:
        Optional environment overrides.
    check:
        Whether to raise :class:`subprocess.CalledProcessError` on non-zero exit.
    capture_stderr:
        When false, standard error is inherited from the current process.
    """

    _LOGGER.debug("Executing command: %s", " ".join(command))
    completed = subprocess.run(
        list(command),
        input=input_data,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE if capture_stderr else None,
        check=check,
    )
    _LOGGER.debug(
        "Command finished with exit code %s (%d stdout bytes)",
        completed.returncode,
        len(completed.stdout or b""),
    )
    return completed


def decode_output(raw: bytes | None, *, limit: int = 2000) -> str:
    """Decode captured process output for log messages, keeping the tail."""

    if not raw:
        return ""
    text = raw.decode("utf-8", errors="replace").strip()
    if len(text) > limit:
        text = "..." + text[-limit:]
    return text


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "500.0 B")
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"


__all__ = [
    "resolve_path",
    "ensure_parent_dir",
    "which",
    "run_subprocess",
    "decode_output",
    "format_file_size",
]
