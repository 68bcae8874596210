"""
Unit tests for ListStore: uniqueness, cross-list exclusivity, validation
and pagination of the ratings/parked/rejects lists.
"""
import pytest

from recommandateur.errors import ConflictError, ValidationError
from recommandateur.lists.store import ListStore, clamp_page, exclusion_set
from recommandateur.storage.kv import InMemoryKVStore


class TestInsert:
    """Insert semantics and the invariants it enforces."""

    def test_added_item_is_normalized_and_stamped(self, store):
        result = store.insert("ratings", {"canonical_key": "Matrix, The", "rating": 4})

        assert result.added is True
        assert result.key == "matrix-the"
        items = store.read_collection("ratings")
        assert len(items) == 1
        assert items[0]["canonical_key"] == "matrix-the"
        assert items[0]["rating"] == 4
        assert items[0]["rated_at"].endswith("Z")

    def test_parked_items_get_added_at(self, store):
        store.insert("parked", {"canonical_key": "Alien 1979"})
        assert "added_at" in store.read_collection("parked")[0]

    def test_existing_timestamp_is_kept(self, store):
        store.insert("rejects", {"canonical_key": "x", "added_at": "2024-01-01T00:00:00Z"})
        assert store.read_collection("rejects")[0]["added_at"] == "2024-01-01T00:00:00Z"

    def test_conflict_across_lists_leaves_target_unchanged(self, store):
        """A key already rated cannot be parked."""
        store.insert("ratings", {"canonical_key": "Matrix, The", "rating": 4})

        with pytest.raises(ConflictError) as exc_info:
            store.insert("parked", {"canonical_key": "matrix-the"})

        assert exc_info.value.conflict_with == "ratings"
        assert exc_info.value.key == "matrix-the"
        assert store.read_collection("parked") == []

    def test_conflict_between_parked_and_rejects(self, store):
        store.insert("parked", {"canonical_key": "Dune 2021"})
        with pytest.raises(ConflictError) as exc_info:
            store.insert("rejects", {"canonical_key": "DUNE (2021)"})
        assert exc_info.value.conflict_with == "parked"

    def test_conflict_when_rating_a_parked_title(self, store):
        store.insert("parked", {"canonical_key": "Dune 2021"})
        with pytest.raises(ConflictError):
            store.insert("ratings", {"canonical_key": "dune-2021", "rating": 3})
        assert store.read_collection("ratings") == []

    def test_duplicate_is_a_noop(self, store):
        item = {"canonical_key": "Matrix, The", "rating": 4}
        store.insert("ratings", item)
        second = store.insert("ratings", item)

        assert second.added is False
        assert second.reason == "duplicate"
        assert len(store.read_collection("ratings")) == 1

    def test_duplicate_detected_after_normalization(self, store):
        store.insert("parked", {"canonical_key": "Matrix, The"})
        assert store.insert("parked", {"canonical_key": "matrix the"}).added is False

    def test_key_lives_in_exactly_one_list(self, store):
        store.insert("ratings", {"canonical_key": "a", "rating": 1})
        store.insert("parked", {"canonical_key": "b"})
        store.insert("rejects", {"canonical_key": "c"})
        for name, key in [("parked", "a"), ("rejects", "a"), ("ratings", "b"), ("ratings", "c")]:
            with pytest.raises(ConflictError):
                store.insert(name, {"canonical_key": key, "rating": 2} if name == "ratings" else {"canonical_key": key})
        assert store.membership("A") == "ratings"
        assert store.membership("b") == "parked"
        assert store.membership("c") == "rejects"
        assert store.membership("d") is None


class TestInsertValidation:
    """Bad payloads are refused before any write."""

    @pytest.mark.parametrize("rating", [None, "4", -0.1, 5.5, float("nan"), float("inf"), True])
    def test_invalid_ratings(self, store, rating):
        with pytest.raises(ValidationError):
            store.insert("ratings", {"canonical_key": "x", "rating": rating})
        assert store.read_collection("ratings") == []

    def test_missing_rating(self, store):
        with pytest.raises(ValidationError):
            store.insert("ratings", {"canonical_key": "x"})

    @pytest.mark.parametrize("rating", [0, 5, 2.5])
    def test_rating_bounds_are_inclusive(self, store, rating):
        assert store.insert("ratings", {"canonical_key": f"x{rating}", "rating": rating}).added

    def test_rating_forbidden_outside_ratings(self, store):
        with pytest.raises(ValidationError):
            store.insert("parked", {"canonical_key": "x", "rating": 3})

    @pytest.mark.parametrize("key", [None, "", "   ", 42, "!!!"])
    def test_invalid_keys(self, store, key):
        with pytest.raises(ValidationError):
            store.insert("parked", {"canonical_key": key})

    def test_unknown_list(self, store):
        with pytest.raises(ValidationError):
            store.insert("favorites", {"canonical_key": "x"})

    def test_non_dict_payload(self, store):
        with pytest.raises(ValidationError):
            store.insert("parked", ["x"])


class TestReads:

    def test_missing_or_corrupt_list_reads_empty(self):
        kv = InMemoryKVStore()
        kv.put_raw("parked", "{not json")
        kv.put_json("rejects", {"not": "a list"})
        store = ListStore(kv)
        assert store.read_collection("ratings") == []
        assert store.read_collection("parked") == []
        assert store.read_collection("rejects") == []

    def test_pagination(self, store):
        for i in range(5):
            store.insert("parked", {"canonical_key": f"title-{i}"})

        page = store.list_items("parked", offset=1, limit=2)

        assert page.total == 5
        assert [x["canonical_key"] for x in page.items] == ["title-1", "title-2"]
        assert (page.offset, page.limit) == (1, 2)

    def test_offset_past_end(self, store):
        store.insert("parked", {"canonical_key": "a"})
        page = store.list_items("parked", offset=10)
        assert page.items == []
        assert page.total == 1

    def test_exclusion_keys_cover_all_lists(self, store):
        store.insert("ratings", {"canonical_key": "A", "rating": 3})
        store.insert("parked", {"canonical_key": "B"})
        store.insert("rejects", {"canonical_key": "C"})
        assert store.exclusion_keys() == {"a", "b", "c"}


class TestClampPage:

    @pytest.mark.parametrize("offset,limit,expected", [
        (None, None, (0, 1000)),
        (-5, 10, (0, 10)),
        (3, 0, (3, 1)),
        (0, -1, (0, 1)),
        (0, 99999, (0, 5000)),
    ])
    def test_clamping(self, offset, limit, expected):
        assert clamp_page(offset, limit) == expected


def test_exclusion_set_ignores_blank_and_malformed_items():
    lists = {"ratings": [{"canonical_key": ""}, "oops", {"canonical_key": "Matrix, The"}], "parked": []}
    assert exclusion_set(lists) == {"matrix-the"}
