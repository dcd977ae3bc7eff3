"""
unimark - unified browser bookmarks

Finds the bookmarks stored by every installed browser (Chrome, Brave, Edge,
Firefox), merges them into one deduplicated collection, and lets you browse
and open them from the terminal without launching each browser.

Example Usage:
    >>> from unimark import load_state, run_import, save_state
    >>> state = load_state("bookmarks.json")
    >>> summary = run_import(state)
    >>> print(summary.message())
    >>> save_state(state, "bookmarks.json")
"""

__version__ = "0.3.0"
__author__ = "unimark Contributors"

# Models
from unimark.models import AppState, Bookmark, BrowserConfig

# Import engine
from unimark.browser_import import (
    ImportSummary,
    OSKind,
    detect_os,
    locate,
    parse_chromium_file,
    read_firefox_bookmarks,
    run_import,
)

# Persistence
from unimark.store import load_state, save_state

# Configuration
from unimark.config import UnimarkConfig, get_config, init_config

# Errors
from unimark.exceptions import (
    UnimarkError,
    SourceError,
    ReadError,
    FormatError,
    OpenError,
    QueryError,
    StoreError,
    LaunchError,
    ConfigError,
)

__all__ = [
    # Models
    "AppState",
    "Bookmark",
    "BrowserConfig",
    # Import engine
    "ImportSummary",
    "OSKind",
    "detect_os",
    "locate",
    "parse_chromium_file",
    "read_firefox_bookmarks",
    "run_import",
    # Persistence
    "load_state",
    "save_state",
    # Config
    "UnimarkConfig",
    "get_config",
    "init_config",
    # Errors
    "UnimarkError",
    "SourceError",
    "ReadError",
    "FormatError",
    "OpenError",
    "QueryError",
    "StoreError",
    "LaunchError",
    "ConfigError",
]
