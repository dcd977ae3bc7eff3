"""
JSON persistence for the canonical bookmark collection.

The whole ``AppState`` is written to a single file. The next identifier is
not stored; it is recomputed from the highest persisted ID on every load so
that hand edits to the file stay consistent.
"""
import json
import logging
import platform
from pathlib import Path
from typing import Optional, Union

from .exceptions import StoreError
from .models import AppState

logger = logging.getLogger(__name__)

BOOKMARKS_JSON = "bookmarks.json"

DEFAULT_BROWSER_COMMANDS = {
    "darwin": "open",
    "linux": "xdg-open",
    "windows": "cmd /c start",
}


def default_browser_command(system_name: Optional[str] = None) -> str:
    """Command used to open URLs when the store does not set one."""
    system_name = (system_name or platform.system()).lower()
    return DEFAULT_BROWSER_COMMANDS.get(system_name, "")


def save_state(state: AppState, path: Union[str, Path] = BOOKMARKS_JSON):
    """Write the state as indented JSON, replacing the file."""
    path = Path(path)
    try:
        data = json.dumps(state.to_dict(), indent=2, ensure_ascii=False)
        path.write_text(data, encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        raise StoreError(f"could not write {path}: {e}") from e
    logger.debug(f"Saved {len(state.bookmarks)} bookmarks to {path}")


def load_state(path: Union[str, Path] = BOOKMARKS_JSON,
               system_name: Optional[str] = None) -> AppState:
    """
    Load the bookmark state from disk.

    A missing file is not an error: a new state is created with the
    platform's default browser command and saved right away.

    Args:
        path: Location of the JSON store
        system_name: Override for ``platform.system()`` when picking the
            default browser command

    Returns:
        Loaded AppState with ``next_id`` recomputed

    Raises:
        StoreError: If the file exists but cannot be read or decoded
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No '{path.name}' found. Creating a new one.")
        state = AppState()
        state.config.default_browser_cmd = default_browser_command(system_name)
        save_state(state, path)
        return state

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise StoreError(f"could not read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise StoreError(f"could not decode JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise StoreError(f"could not decode JSON in {path}: expected an object")

    try:
        state = AppState.from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise StoreError(f"malformed bookmark in {path}: {e}") from e

    logger.debug(f"Loaded {len(state.bookmarks)} bookmarks from {path}")
    return state
