"""
Open bookmarks in an external browser.

The command is a user-configurable string such as ``xdg-open``, ``open`` or
``cmd /c start``; the URL is appended as the last argument.
"""
import logging
import shlex
import subprocess
from typing import List

from .exceptions import LaunchError

logger = logging.getLogger(__name__)


def build_command(url: str, command: str) -> List[str]:
    """Split the configured command and append the URL."""
    parts = shlex.split(command or "")
    if not parts:
        raise LaunchError("No browser command configured. Use 'set-browser <cmd>'.")
    return parts + [url]


def open_url(url: str, command: str) -> subprocess.Popen:
    """
    Start the browser command for a URL without waiting for it.

    Raises:
        LaunchError: If no command is configured or it cannot be started
    """
    argv = build_command(url, command)
    logger.debug(f"Launching: {argv}")
    try:
        return subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        raise LaunchError(f"could not start '{argv[0]}': {e}") from e
