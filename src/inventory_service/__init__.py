"""
Inventory Service - A small record-keeping service for inventory items

Features:
- Register items with a name, description and optional photo
- List, fetch, search, update and delete items
- Serve and replace item photos kept in a cache directory
- CLI for starting the API server
"""

__version__ = "0.1.0"

from .store import (
    InventoryItem,
    InventoryStore,
    InventoryError,
    ValidationError,
    NotFound,
)
from .photos import (
    photo_url,
    resolve_photo_path,
    save_upload,
)

__all__ = [
    "InventoryItem",
    "InventoryStore",
    "InventoryError",
    "ValidationError",
    "NotFound",
    "photo_url",
    "resolve_photo_path",
    "save_upload",
]
