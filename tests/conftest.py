import pytest
import json
import os
import sqlite3
from pathlib import Path

from unimark import config as config_module
from unimark.models import AppState, Bookmark


def chromium_url(name, url):
    return {"type": "url", "name": name, "url": url}


def chromium_folder(name, *children):
    return {"type": "folder", "name": name, "children": list(children)}


@pytest.fixture
def sample_chromium_tree():
    """Bookmark tree with one top-level URL and one nested URL."""
    return {
        "checksum": "0123456789abcdef",
        "roots": {
            "bookmark_bar": chromium_folder(
                "Bookmarks bar",
                chromium_url("A", "http://a"),
                chromium_folder("Nested", chromium_url("B", "http://b")),
            )
        },
        "version": 1,
    }


@pytest.fixture
def write_chromium_file(tmp_path):
    """
    Factory writing a Chromium ``Bookmarks`` JSON file.

    Usage:
        path = write_chromium_file(tree)
        path = write_chromium_file(tree, tmp_path / "Chrome" / "Bookmarks")
    """
    def _write(tree, path=None):
        path = Path(path) if path else tmp_path / "Bookmarks"
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(tree, f)
        return path
    return _write


@pytest.fixture
def make_places_db(tmp_path):
    """
    Factory creating a minimal Firefox ``places.sqlite``.

    ``entries`` are (type, title, url) tuples; each gets its own moz_places row.
    """
    def _make(entries, path=None):
        path = Path(path) if path else tmp_path / "places.sqlite"
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(path)
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE moz_places (
                id INTEGER PRIMARY KEY,
                url TEXT,
                title TEXT
            )
        """)
        cursor.execute("""
            CREATE TABLE moz_bookmarks (
                id INTEGER PRIMARY KEY,
                type INTEGER,
                fk INTEGER,
                parent INTEGER,
                title TEXT
            )
        """)
        for place_id, (entry_type, title, url) in enumerate(entries, start=1):
            cursor.execute("INSERT INTO moz_places (id, url, title) VALUES (?, ?, ?)",
                           (place_id, url, title))
            cursor.execute("INSERT INTO moz_bookmarks (type, fk, parent, title) VALUES (?, ?, ?, ?)",
                           (entry_type, place_id, 0, title))
        conn.commit()
        conn.close()
        return path
    return _make


@pytest.fixture
def linux_home(tmp_path):
    """Empty home directory to populate with Linux browser layouts."""
    home = tmp_path / "home"
    home.mkdir(exist_ok=True)
    return home


@pytest.fixture
def linux_chrome_path(linux_home):
    return linux_home / ".config" / "google-chrome" / "Default" / "Bookmarks"


@pytest.fixture
def linux_firefox_root(linux_home):
    return linux_home / ".mozilla" / "firefox"


@pytest.fixture
def state_with_a():
    """State holding a single bookmark for http://a."""
    return AppState(bookmarks=[Bookmark(id=1, name="A", url="http://a")])


@pytest.fixture
def clean_unimark_env(monkeypatch, tmp_path):
    """
    Clean environment that does not touch the real config.

    Removes UNIMARK_ environment variables, points HOME at a temp directory
    and resets the cached global config.
    """
    for key in list(os.environ.keys()):
        if key.startswith("UNIMARK_"):
            monkeypatch.delenv(key, raising=False)

    mock_home = tmp_path / "home"
    mock_home.mkdir(exist_ok=True)
    monkeypatch.setenv("HOME", str(mock_home))
    monkeypatch.setenv("USERPROFILE", str(mock_home))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_config", None)

    return tmp_path
