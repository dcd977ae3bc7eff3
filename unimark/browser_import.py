"""
Browser bookmark import for unimark.

This module finds the bookmark stores of installed browsers and folds their
contents into the canonical collection:

- Chromium-family browsers (Chrome, Brave, Edge) keep a JSON ``Bookmarks``
  file holding a tree of folders and URL entries.
- Firefox keeps bookmarks in ``places.sqlite`` inside a profile directory.

Every parsed (name, url) pair goes through ``AppState.merge``, so the dedup
rules are identical regardless of where a bookmark came from. A failure in
one browser source is reported and skipped; it never aborts the run.
"""

import os
import json
import sqlite3
import logging
import platform
from contextlib import closing
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .exceptions import (
    FormatError, OpenError, QueryError, ReadError, RowDecodeError, SourceError
)
from .models import AppState

logger = logging.getLogger(__name__)

PLACES_DB_NAME = "places.sqlite"

# moz_bookmarks.type: 1 = bookmark, 2 = folder, 3 = separator
FIREFOX_TYPE_BOOKMARK = 1

FIREFOX_BOOKMARKS_QUERY = """
    SELECT b.title, p.url
    FROM moz_bookmarks AS b
    JOIN moz_places AS p ON b.fk = p.id
    WHERE b.type = ? AND b.title IS NOT NULL
"""

BookmarkPair = Tuple[str, str]


class OSKind(Enum):
    """Operating system families with known browser locations."""
    MACOS = "darwin"
    LINUX = "linux"
    WINDOWS = "windows"


@dataclass(frozen=True)
class BrowserProfilePath:
    """A candidate bookmark location for one browser."""
    browser: str
    path: Path


@dataclass
class ChromiumBookmarkNode:
    """A decoded node of a Chromium bookmark tree."""
    type: str
    name: str = ""
    url: Optional[str] = None
    children: List["ChromiumBookmarkNode"] = field(default_factory=list)

    @property
    def is_url(self) -> bool:
        return self.type == "url"


@dataclass
class ImportSummary:
    """Outcome of one import run."""
    new_count: int = 0
    found_any: bool = False
    browsers: List[str] = field(default_factory=list)
    notices: List[str] = field(default_factory=list)

    def message(self) -> str:
        """One-line summary for the user."""
        if self.new_count > 0:
            return f"Imported {self.new_count} new bookmarks. Run 'save' to persist them."
        elif self.found_any:
            return "No new bookmarks found."
        else:
            return "Could not find any supported browser bookmarks on default paths."


# ============================================================================
# Profile location
# ============================================================================

def detect_os(system_name: Optional[str] = None) -> Optional[OSKind]:
    """Map a ``platform.system()`` value to an OSKind, or None if unsupported."""
    system_name = (system_name or platform.system()).lower()
    for kind in OSKind:
        if kind.value == system_name:
            return kind
    return None


def locate(os_kind: Optional[OSKind],
           home_dir: Union[str, Path]) -> Tuple[Dict[str, List[Path]], Optional[Path]]:
    """
    Candidate bookmark locations for the default profile of each browser.

    Paths are not checked for existence.

    Args:
        os_kind: Operating system family, or None for an unsupported one
        home_dir: Home directory of the current user

    Returns:
        Tuple of (browser label -> Chromium ``Bookmarks`` file paths,
        Firefox profiles root or None)
    """
    home = Path(home_dir)
    chromium: Dict[str, List[Path]] = {}
    firefox_root: Optional[Path] = None

    if os_kind == OSKind.MACOS:
        app_support = home / "Library" / "Application Support"
        chromium["Chrome"] = [app_support / "Google/Chrome/Default/Bookmarks"]
        chromium["Brave"] = [app_support / "BraveSoftware/Brave-Browser/Default/Bookmarks"]
        chromium["Edge"] = [app_support / "Microsoft Edge/Default/Bookmarks"]
        firefox_root = app_support / "Firefox/Profiles"
    elif os_kind == OSKind.LINUX:
        config_dir = home / ".config"
        chromium["Chrome"] = [config_dir / "google-chrome/Default/Bookmarks"]
        chromium["Brave"] = [config_dir / "BraveSoftware/Brave-Browser/Default/Bookmarks"]
        firefox_root = home / ".mozilla/firefox"
    elif os_kind == OSKind.WINDOWS:
        local_appdata = home / "AppData" / "Local"
        chromium["Chrome"] = [local_appdata / "Google/Chrome/User Data/Default/Bookmarks"]
        chromium["Brave"] = [local_appdata / "BraveSoftware/Brave-Browser/User Data/Default/Bookmarks"]
        chromium["Edge"] = [local_appdata / "Microsoft/Edge/User Data/Default/Bookmarks"]
        firefox_root = home / "AppData/Roaming/Mozilla/Firefox/Profiles"

    return chromium, firefox_root


def candidate_profiles(os_kind: Optional[OSKind],
                       home_dir: Union[str, Path]) -> List[BrowserProfilePath]:
    """Flatten ``locate`` output into a list of (browser, path) candidates."""
    chromium, firefox_root = locate(os_kind, home_dir)
    profiles = [
        BrowserProfilePath(browser, path)
        for browser, paths in chromium.items()
        for path in paths
    ]
    if firefox_root is not None:
        profiles.append(BrowserProfilePath("Firefox", firefox_root))
    return profiles


# ============================================================================
# Chromium
# ============================================================================

def _decode_chromium_node(data, path: Path) -> Tuple[ChromiumBookmarkNode, list]:
    """Decode a node's own fields; children are returned raw."""
    if not isinstance(data, dict):
        raise FormatError(f"bookmark node is not an object: {data!r:.60}", path)

    # null fields read as their empty values
    node_type = data.get("type") or ""
    name = data.get("name") or ""
    url = data.get("url")
    children = data.get("children") or []

    if not isinstance(node_type, str) or not isinstance(name, str):
        raise FormatError("bookmark node has a non-string type or name", path)
    if url is not None and not isinstance(url, str):
        raise FormatError(f"bookmark '{name}' has a non-string url", path)
    if not isinstance(children, list):
        raise FormatError(f"children of '{name}' is not a list", path)

    return ChromiumBookmarkNode(type=node_type, name=name, url=url), children


def decode_chromium_tree(data, path: Optional[Path] = None) -> ChromiumBookmarkNode:
    """
    Decode a raw JSON node and all of its descendants.

    Uses an explicit stack, so folder depth is limited only by memory.
    """
    root, raw_children = _decode_chromium_node(data, path)
    stack = [(root, raw_children)]
    while stack:
        node, raw_children = stack.pop()
        for raw in raw_children:
            child, grandchildren = _decode_chromium_node(raw, path)
            node.children.append(child)
            stack.append((child, grandchildren))
    return root


def flatten_chromium_tree(root: ChromiumBookmarkNode) -> List[BookmarkPair]:
    """Collect (name, url) pairs of URL leaves in pre-order."""
    pairs = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_url and node.url:
            pairs.append((node.name, node.url))
        stack.extend(reversed(node.children))
    return pairs


def parse_chromium_file(path: Union[str, Path]) -> List[BookmarkPair]:
    """
    Parse a Chromium ``Bookmarks`` file into (name, url) pairs.

    Args:
        path: Path to the JSON bookmarks file

    Returns:
        Pairs for every URL entry with a non-empty url, roots in file order,
        each root in pre-order

    Raises:
        ReadError: If the file cannot be read
        FormatError: If the file is not a bookmark tree with a ``roots`` object
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(f"could not read {path}: {e}", path) from e

    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as e:
        raise FormatError(f"could not parse JSON in {path}: {e}", path) from e

    if not isinstance(data, dict) or not isinstance(data.get("roots"), dict):
        raise FormatError(f"no 'roots' object in {path}", path)

    pairs = []
    for root_name, root_data in data["roots"].items():
        root = decode_chromium_tree(root_data, path)
        pairs.extend(flatten_chromium_tree(root))
        logger.debug(f"Chromium root '{root_name}' done, {len(pairs)} bookmarks so far")

    return pairs


# ============================================================================
# Firefox
# ============================================================================

def _decode_firefox_text(value) -> str:
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RowDecodeError(f"invalid UTF-8: {e}") from e
    if isinstance(value, str):
        return value
    raise RowDecodeError(f"unexpected value type: {type(value).__name__}")


def _decode_firefox_row(row) -> BookmarkPair:
    title, url = row
    return _decode_firefox_text(title), _decode_firefox_text(url)


def read_firefox_bookmarks(db_path: Union[str, Path]) -> List[BookmarkPair]:
    """
    Read (title, url) pairs for bookmark entries from a Firefox places database.

    The database is opened read-only and immutable so a running browser's
    file is never written or locked. Rows that cannot be decoded are skipped.

    Raises:
        OpenError: If the database cannot be opened
        QueryError: If the bookmark query cannot be executed
    """
    db_path = Path(db_path)
    if not db_path.is_file():
        raise OpenError(f"firefox database not found: {db_path}", db_path)
    uri = f"{db_path.absolute().as_uri()}?mode=ro&immutable=1"

    try:
        conn = sqlite3.connect(uri, uri=True)
    except sqlite3.Error as e:
        raise OpenError(f"could not open firefox database {db_path}: {e}", db_path) from e

    # Text is decoded per row so one bad value cannot abort the whole read
    conn.text_factory = bytes

    pairs = []
    skipped = 0
    with closing(conn):
        try:
            cursor = conn.execute(FIREFOX_BOOKMARKS_QUERY, (FIREFOX_TYPE_BOOKMARK,))
            for row in cursor:
                try:
                    pairs.append(_decode_firefox_row(row))
                except RowDecodeError as e:
                    skipped += 1
                    logger.debug(f"Skipping Firefox row: {e}")
        except sqlite3.Error as e:
            raise QueryError(f"could not query firefox bookmarks in {db_path}: {e}", db_path) from e

    if skipped:
        logger.debug(f"Skipped {skipped} undecodable rows in {db_path}")
    return pairs


def find_places_db(root: Union[str, Path]) -> Optional[Path]:
    """
    Search a directory tree for the first ``places.sqlite`` file.

    Directories are visited top-down in sorted order; unreadable
    directories are ignored.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        if PLACES_DB_NAME in filenames:
            return Path(dirpath) / PLACES_DB_NAME
    return None


# ============================================================================
# Orchestration
# ============================================================================

def run_import(state: AppState, os_kind: Optional[OSKind] = None,
               home_dir: Optional[Union[str, Path]] = None) -> ImportSummary:
    """
    Scan all known browsers and merge new bookmarks into ``state``.

    This is the main API function. Persisting the result is left to the
    caller.

    Args:
        state: Application state holding the canonical collection
        os_kind: Operating system family (detected when omitted)
        home_dir: Home directory (``Path.home()`` when omitted)

    Returns:
        ImportSummary with the net number of new bookmarks and whether any
        supported browser was found
    """
    if os_kind is None:
        os_kind = detect_os()
    if home_dir is None:
        home_dir = Path.home()

    chromium_paths, firefox_root = locate(os_kind, home_dir)
    summary = ImportSummary()
    initial_count = len(state.bookmarks)

    for browser, paths in chromium_paths.items():
        for path in paths:
            if not path.exists():
                continue
            try:
                pairs = parse_chromium_file(path)
            except SourceError as e:
                notice = f"Failed to import from {browser} at {path}: {e}"
                logger.warning(notice)
                summary.notices.append(notice)
                continue

            for name, url in pairs:
                state.merge(name, url)
            logger.info(f"Successfully checked for {browser} bookmarks.")
            summary.browsers.append(browser)
            summary.found_any = True

    if firefox_root is not None:
        _import_firefox(state, firefox_root, summary)

    summary.new_count = len(state.bookmarks) - initial_count
    return summary


def _import_firefox(state: AppState, firefox_root: Path, summary: ImportSummary):
    places_db = find_places_db(firefox_root)
    if places_db is None:
        notice = f"Could not find a Firefox '{PLACES_DB_NAME}' file."
        logger.info(notice)
        summary.notices.append(notice)
        return

    try:
        pairs = read_firefox_bookmarks(places_db)
    except SourceError as e:
        notice = f"Failed to import from Firefox at {places_db}: {e}"
        logger.warning(notice)
        summary.notices.append(notice)
        return

    for title, url in pairs:
        state.merge(title, url)
    logger.info("Successfully checked for Firefox bookmarks.")
    summary.browsers.append("Firefox")
    summary.found_any = True
