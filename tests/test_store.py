"""Tests for the in-memory inventory store."""
import threading

import pytest

from inventory_service.store import InventoryStore, NotFound, ValidationError


@pytest.fixture
def store():
    return InventoryStore()


class TestCreate:
    """Tests for InventoryStore.create."""

    def test_ids_start_at_one_and_increase(self, store):
        """Test that ids are allocated 1..N in creation order."""
        ids = [store.create(f"Item {n}").id for n in range(5)]
        assert ids == [1, 2, 3, 4, 5]

    def test_missing_description_defaults_to_empty(self, store):
        """Test that a missing description becomes an empty string."""
        item = store.create("Hammer")
        assert item.description == ""
        assert item.photo_filename is None
        assert item.photo_url is None

    def test_empty_name_is_rejected(self, store):
        """Test that an empty or absent name raises ValidationError."""
        with pytest.raises(ValidationError):
            store.create("")
        with pytest.raises(ValidationError):
            store.create(None)

    def test_rejected_create_does_not_use_an_id(self, store):
        """Test that a failed create does not consume an id."""
        with pytest.raises(ValidationError):
            store.create("")
        assert store.create("Hammer").id == 1

    def test_create_with_photo_sets_url(self, store):
        """Test that creating with a photo filename derives the photo URL."""
        item = store.create("Drill", "Cordless", "p1.jpg")
        assert item.photo_filename == "p1.jpg"
        assert item.photo_url == "/inventory/1/photo"

    def test_concurrent_creates_get_distinct_ids(self, store):
        """Test that creates from many threads never share an id."""
        def worker():
            for _ in range(50):
                store.create("Screw")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ids = [item.id for item in store.list()]
        assert len(ids) == 400
        assert sorted(set(ids)) == list(range(1, 401))


class TestDelete:
    """Tests for InventoryStore.delete and id reuse."""

    def test_deleted_id_is_never_reused(self, store):
        """Test that deleting an item never frees its id for reuse."""
        store.create("A")
        store.create("B")
        store.delete(2)
        assert store.create("C").id == 3

    def test_delete_returns_confirmation(self, store):
        """Test that delete returns a confirmation referencing the id."""
        store.create("A")
        result = store.delete(1)
        assert result["success"] is True
        assert result["id"] == 1
        assert "1" in result["message"]

    def test_delete_unknown_raises_not_found(self, store):
        """Test that deleting an unknown id raises NotFound."""
        with pytest.raises(NotFound):
            store.delete(42)

    def test_hammer_drill_scenario(self, store):
        """Test the create, create, delete, get, list sequence end to end."""
        hammer = store.create("Hammer", "", None)
        assert hammer.to_dict() == {
            "ID": 1,
            "InventoryName": "Hammer",
            "Description": "",
            "PhotoFilename": None,
            "PhotoUrl": None,
        }

        drill = store.create("Drill", "Cordless", "p1.jpg")
        assert drill.id == 2
        assert drill.photo_url == "/inventory/2/photo"

        store.delete(1)
        with pytest.raises(NotFound):
            store.get(1)
        assert [item.id for item in store.list()] == [2]


class TestListAndGet:
    """Tests for ordering and lookup."""

    def test_list_keeps_insertion_order_after_update(self, store):
        """Test that updating an item does not change its list position."""
        for name in ("A", "B", "C"):
            store.create(name)
        store.update_fields(2, name="B2")

        assert [item.name for item in store.list()] == ["A", "B2", "C"]

    def test_list_is_a_snapshot(self, store):
        """Test that the returned list and its items are detached from the store."""
        store.create("A")
        snapshot = store.list()
        store.create("B")
        snapshot[0].name = "changed"

        assert len(snapshot) == 1
        assert store.get(1).name == "A"

    def test_get_unknown_raises_not_found(self, store):
        """Test that getting an unknown id raises NotFound with status 404."""
        with pytest.raises(NotFound) as excinfo:
            store.get(7)
        assert excinfo.value.kind == "not_found"
        assert excinfo.value.http_status == 404

    def test_len_counts_current_items(self, store):
        """Test that len() counts only items not deleted."""
        store.create("A")
        store.create("B")
        store.delete(1)
        assert len(store) == 1


class TestUpdate:
    """Tests for update_fields and update_photo."""

    def test_only_description_changes(self, store):
        """Test that updating only the description leaves the name untouched."""
        store.create("Hammer", "old")
        item = store.update_fields(1, description="x")
        assert item.name == "Hammer"
        assert item.description == "x"

    def test_empty_string_is_a_real_value(self, store):
        """Test that an empty string description is stored, not skipped."""
        store.create("Hammer", "old")
        item = store.update_fields(1, description="")
        assert item.description == ""

    def test_no_fields_leaves_item_unchanged(self, store):
        """Test that an update with no fields returns the item unchanged."""
        store.create("Hammer", "old")
        item = store.update_fields(1)
        assert (item.name, item.description) == ("Hammer", "old")

    def test_update_unknown_raises_not_found(self, store):
        """Test that updating an unknown id raises NotFound."""
        with pytest.raises(NotFound):
            store.update_fields(3, name="x")

    def test_update_photo_overwrites_filename(self, store):
        """Test that a new photo filename replaces the old one."""
        store.create("Drill", "", "old.jpg")
        item = store.update_photo(1, "new.jpg")
        assert item.photo_filename == "new.jpg"
        assert item.photo_url == "/inventory/1/photo"

    def test_update_photo_on_item_without_photo(self, store):
        """Test that adding a photo to an item without one sets the URL."""
        store.create("Drill")
        assert store.update_photo(1, "new.jpg").photo_url == "/inventory/1/photo"

    def test_update_photo_requires_filename(self, store):
        """Test that update_photo without a filename raises ValidationError."""
        store.create("Drill")
        with pytest.raises(ValidationError):
            store.update_photo(1, None)

    def test_update_photo_unknown_id_reported_first(self, store):
        """Test that an unknown id is reported before a missing filename."""
        with pytest.raises(NotFound):
            store.update_photo(9, None)
