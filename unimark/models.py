"""
Data model for the unified bookmark collection.

The canonical collection lives in an ``AppState`` for the lifetime of the
process and is persisted as a whole by ``unimark.store``. Every bookmark that
enters the collection goes through ``AppState.merge``, which is the only place
duplicate detection happens.
"""
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Bookmark:
    """A bookmark in the canonical collection."""
    id: int
    name: str
    url: str
    favorite: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bookmark":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            url=data["url"],
            favorite=bool(data.get("favorite", False)),
        )


@dataclass
class BrowserConfig:
    """Settings persisted alongside the bookmarks."""
    default_browser_cmd: str = ""


def get_next_id(bookmarks: List[Bookmark]) -> int:
    """Get the next unique integer ID for a new bookmark."""
    if not bookmarks:
        return 1
    return max(b.id for b in bookmarks) + 1


def merge_bookmark(bookmarks: List[Bookmark], name: str, url: str,
                   next_id: int) -> Optional[Bookmark]:
    """
    Fold a (name, url) pair into a bookmark list.

    URLs are compared by exact string equality. Names and favorite flags are
    never used for matching, and existing entries are never modified.

    Args:
        bookmarks: Collection to append to (mutated in place)
        name: Display name for the new bookmark
        url: Bookmark URL, the dedup key
        next_id: Identifier to assign if the bookmark is new

    Returns:
        The appended Bookmark, or None if the URL was already present
    """
    for existing in bookmarks:
        if existing.url == url:
            return None

    bookmark = Bookmark(id=next_id, name=name, url=url)
    bookmarks.append(bookmark)
    return bookmark


@dataclass
class AppState:
    """In-memory application state: the canonical collection plus config."""
    bookmarks: List[Bookmark] = field(default_factory=list)
    config: BrowserConfig = field(default_factory=BrowserConfig)
    next_id: int = field(default=1, compare=False)

    def __post_init__(self):
        self.recompute_next_id()

    def recompute_next_id(self):
        """Reset ``next_id`` from the highest identifier in the collection."""
        self.next_id = get_next_id(self.bookmarks)

    def merge(self, name: str, url: str) -> Optional[Bookmark]:
        """Merge a parsed bookmark into the collection, skipping known URLs."""
        bookmark = merge_bookmark(self.bookmarks, name, url, self.next_id)
        if bookmark is not None:
            self.next_id += 1
            logger.debug(f"Added bookmark #{bookmark.id}: {url}")
        return bookmark

    def get(self, bookmark_id: int) -> Optional[Bookmark]:
        for bookmark in self.bookmarks:
            if bookmark.id == bookmark_id:
                return bookmark
        return None

    def toggle_favorite(self, bookmark_id: int) -> Optional[Bookmark]:
        """Flip the favorite flag of a bookmark. Returns None if not found."""
        bookmark = self.get(bookmark_id)
        if bookmark is not None:
            bookmark.favorite = not bookmark.favorite
        return bookmark

    def sorted_bookmarks(self, favorites_only: bool = False) -> List[Bookmark]:
        """Bookmarks ordered by name, case-insensitive."""
        bookmarks = [b for b in self.bookmarks if b.favorite or not favorites_only]
        return sorted(bookmarks, key=lambda b: b.name.lower())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bookmarks": [b.to_dict() for b in self.bookmarks],
            "config": asdict(self.config),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppState":
        bookmarks = [Bookmark.from_dict(b) for b in data.get("bookmarks") or []]
        config_data = data.get("config") or {}
        config = BrowserConfig(
            default_browser_cmd=config_data.get("default_browser_cmd", "") or ""
        )
        return cls(bookmarks=bookmarks, config=config)
