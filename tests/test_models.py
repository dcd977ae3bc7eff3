"""
Tests for unimark/models.py

Covers the merge policy, identifier assignment and (de)serialization of the
canonical collection.
"""
import pytest

from unimark.models import AppState, Bookmark, BrowserConfig, get_next_id, merge_bookmark


class TestGetNextId:
    """Test next identifier computation."""

    def test_empty_collection_starts_at_one(self):
        assert get_next_id([]) == 1

    def test_max_plus_one(self):
        bookmarks = [Bookmark(3, "c", "http://c"), Bookmark(10, "j", "http://j"), Bookmark(5, "e", "http://e")]
        assert get_next_id(bookmarks) == 11

    def test_gaps_are_not_reused(self):
        """IDs freed by deleting records in the middle are never handed out again."""
        state = AppState(bookmarks=[Bookmark(1, "a", "http://a"), Bookmark(4, "d", "http://d")])
        assert state.next_id == 5


class TestMergeBookmark:
    """Test the merge policy."""

    def test_appends_new_url(self):
        bookmarks = []
        added = merge_bookmark(bookmarks, "Example", "https://example.com", 1)

        assert added == Bookmark(1, "Example", "https://example.com", False)
        assert bookmarks == [added]

    def test_existing_url_is_noop(self):
        bookmarks = [Bookmark(1, "Example", "https://example.com", True)]

        assert merge_bookmark(bookmarks, "Other name", "https://example.com", 2) is None
        assert bookmarks == [Bookmark(1, "Example", "https://example.com", True)]

    @pytest.mark.parametrize("variant", [
        "https://example.com/",
        "HTTPS://example.com",
        "http://example.com",
        "https://Example.com",
    ])
    def test_exact_match_only(self, variant):
        """Near-duplicates are distinct bookmarks."""
        bookmarks = [Bookmark(1, "Example", "https://example.com")]

        assert merge_bookmark(bookmarks, "Variant", variant, 2) is not None
        assert len(bookmarks) == 2

    def test_same_name_different_url_is_kept(self):
        bookmarks = [Bookmark(1, "Docs", "https://a.example")]

        assert merge_bookmark(bookmarks, "Docs", "https://b.example", 2) is not None


class TestAppStateMerge:
    """Test merging through AppState."""

    def test_first_pair_wins(self):
        """Given two pairs with the same URL, only the first is retained."""
        state = AppState()
        state.merge("First", "http://x")
        state.merge("Second", "http://x")

        assert state.bookmarks == [Bookmark(1, "First", "http://x")]

    def test_ids_unique_and_increasing(self):
        state = AppState(bookmarks=[Bookmark(2, "b", "http://b")])
        for i in range(20):
            state.merge(f"n{i}", f"http://{i % 7}")
            state.merge("b again", "http://b")

        ids = [b.id for b in state.bookmarks]
        assert len(ids) == len(set(ids))
        assert ids == sorted(ids)
        assert state.next_id > max(ids)

    def test_duplicate_does_not_advance_next_id(self):
        state = AppState()
        state.merge("a", "http://a")
        state.merge("a", "http://a")

        assert state.next_id == 2

    def test_merge_is_idempotent(self):
        pairs = [("A", "http://a"), ("B", "http://b"), ("A2", "http://a")]
        once = AppState()
        twice = AppState()
        for name, url in pairs:
            once.merge(name, url)
        for _ in range(2):
            for name, url in pairs:
                twice.merge(name, url)

        assert once.bookmarks == twice.bookmarks


class TestAppStateOperations:
    """Test lookup, favorites and sorting."""

    @pytest.fixture
    def state(self):
        return AppState(bookmarks=[
            Bookmark(1, "zeta", "http://z"),
            Bookmark(2, "Alpha", "http://a", favorite=True),
            Bookmark(3, "beta", "http://b"),
        ])

    def test_get(self, state):
        assert state.get(3).name == "beta"
        assert state.get(99) is None

    def test_toggle_favorite(self, state):
        assert state.toggle_favorite(1).favorite is True
        assert state.toggle_favorite(1).favorite is False
        assert state.toggle_favorite(42) is None

    def test_sorted_case_insensitive(self, state):
        assert [b.name for b in state.sorted_bookmarks()] == ["Alpha", "beta", "zeta"]

    def test_sorted_favorites_only(self, state):
        assert [b.id for b in state.sorted_bookmarks(favorites_only=True)] == [2]

    def test_sorting_does_not_reorder_collection(self, state):
        state.sorted_bookmarks()
        assert [b.id for b in state.bookmarks] == [1, 2, 3]


class TestSerialization:
    """Test dict conversion used by the store."""

    def test_round_trip_shape(self):
        state = AppState(
            bookmarks=[Bookmark(1, "A", "http://a", True)],
            config=BrowserConfig(default_browser_cmd="xdg-open"),
        )

        assert state.to_dict() == {
            "bookmarks": [{"id": 1, "name": "A", "url": "http://a", "favorite": True}],
            "config": {"default_browser_cmd": "xdg-open"},
        }

    def test_from_dict_recomputes_next_id(self):
        state = AppState.from_dict({"bookmarks": [
            {"id": 4, "name": "d", "url": "http://d", "favorite": False},
            {"id": 9, "name": "i", "url": "http://i", "favorite": False},
        ]})

        assert state.next_id == 10

    def test_from_dict_defaults(self):
        state = AppState.from_dict({"bookmarks": [{"id": 1, "url": "http://a"}]})

        assert state.bookmarks == [Bookmark(1, "", "http://a", False)]
        assert state.config.default_browser_cmd == ""

    def test_from_empty_dict(self):
        state = AppState.from_dict({})
        assert state.bookmarks == []
        assert state.next_id == 1
