"""
Photo handling for inventory items.

Photos live as plain files in the cache directory. The store only remembers
the filename; whether the file is still there is checked when it is served.
"""
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .store import InventoryItem


def photo_url(item_id: int, has_photo: bool) -> Optional[str]:
    """URL the photo of an item is served from, or None without a photo."""
    if not has_photo:
        return None
    return f"/inventory/{item_id}/photo"


def resolve_photo_path(item: "InventoryItem", cache_dir: Path) -> Path:
    """
    Locate the photo file of an item inside the cache directory.

    Args:
        item: Inventory item whose photo should be served
        cache_dir: Directory uploaded photos are written to

    Returns:
        Absolute path to the photo file

    Raises:
        NotFound: if the item has no photo or the file is gone from the cache
    """
    from .store import NotFound

    if not item.photo_filename:
        raise NotFound(f"Photo for item with ID {item.id} not found")

    photo_path = Path(cache_dir).resolve() / item.photo_filename
    if not photo_path.is_file():
        raise NotFound(f"Photo file for item with ID {item.id} is missing from cache")

    return photo_path


def save_upload(source: BinaryIO, cache_dir: Path) -> str:
    """Copy an uploaded file into the cache directory and return its new filename."""
    filename = uuid.uuid4().hex
    with open(Path(cache_dir) / filename, 'wb') as f:
        shutil.copyfileobj(source, f)
    return filename
