"""
In-memory inventory store.

Keeps the ordered list of inventory items and the id counter. Ids start at 1,
grow by one per created item and are never handed out twice, even after a
delete. Every operation runs under a single lock.
"""
import threading
from dataclasses import dataclass, replace
from typing import Optional

from .photos import photo_url


class InventoryError(Exception):
    """Base class for errors surfaced to API callers."""

    kind = "error"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class ValidationError(InventoryError):
    """A required field is missing or empty."""

    kind = "validation_error"
    http_status = 400


class NotFound(InventoryError):
    """Unknown item id, or a photo that cannot be served."""

    kind = "not_found"
    http_status = 404


@dataclass
class InventoryItem:
    """One inventory record. PhotoUrl is derived, never stored."""

    id: int
    name: str
    description: str = ""
    photo_filename: Optional[str] = None

    @property
    def photo_url(self) -> Optional[str]:
        return photo_url(self.id, self.photo_filename is not None)

    def to_dict(self) -> dict:
        return {
            "ID": self.id,
            "InventoryName": self.name,
            "Description": self.description,
            "PhotoFilename": self.photo_filename,
            "PhotoUrl": self.photo_url,
        }


class InventoryStore:
    """Ordered, lock-guarded collection of inventory items."""

    def __init__(self):
        self._items: list[InventoryItem] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _find(self, item_id: int) -> InventoryItem:
        for item in self._items:
            if item.id == item_id:
                return item
        raise NotFound(f"Item with ID {item_id} not found")

    def create(self, name: Optional[str], description: Optional[str] = None,
               photo_filename: Optional[str] = None) -> InventoryItem:
        """Register a new item under the next free id."""
        if not name:
            raise ValidationError("Field inventory_name is required")

        with self._lock:
            item = InventoryItem(
                id=self._next_id,
                name=name,
                description=description or "",
                photo_filename=photo_filename,
            )
            self._next_id += 1
            self._items.append(item)
            return replace(item)

    def list(self) -> list[InventoryItem]:
        """Snapshot of all items in insertion order."""
        with self._lock:
            return [replace(item) for item in self._items]

    def get(self, item_id: int) -> InventoryItem:
        with self._lock:
            return replace(self._find(item_id))

    def update_fields(self, item_id: int, name: Optional[str] = None,
                      description: Optional[str] = None) -> InventoryItem:
        """
        Update name and/or description.

        None leaves a field unchanged; an empty string is stored as given.
        """
        with self._lock:
            item = self._find(item_id)
            if name is not None:
                item.name = name
            if description is not None:
                item.description = description
            return replace(item)

    def update_photo(self, item_id: int, photo_filename: Optional[str]) -> InventoryItem:
        """Point the item at a new photo file. The old file is left on disk."""
        with self._lock:
            item = self._find(item_id)
            if not photo_filename:
                raise ValidationError("Photo file not provided")
            item.photo_filename = photo_filename
            return replace(item)

    def delete(self, item_id: int) -> dict:
        """Remove an item. Its photo file, if any, stays in the cache."""
        with self._lock:
            item = self._find(item_id)
            self._items.remove(item)

        return {
            "success": True,
            "message": f"Item with ID {item_id} deleted",
            "id": item_id,
        }
