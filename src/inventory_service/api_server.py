#!/usr/bin/env python3
"""
FastAPI server for the inventory service.

Provides registration, lookup, update and deletion of inventory items, plus
upload and download of item photos kept in a cache directory.
"""
import json
import re
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, File, Form, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .photos import resolve_photo_path, save_upload
from .store import InventoryError, InventoryStore, ValidationError

TEMPLATES_DIR = Path(__file__).parent / 'templates'

# Wrong standard methods on a known path are reported as a missing resource
STANDARD_METHODS = {"GET", "POST", "PUT", "DELETE"}

LEADING_INT = re.compile(r'\s*([+-]?\d+)')

router = APIRouter()


class InventoryUpdate(BaseModel):
    """Fields of an item that can be edited. Omitted fields stay unchanged."""
    inventory_name: Optional[str] = None
    description: Optional[str] = None


class InventoryItemResponse(BaseModel):
    """An inventory item as returned by the API."""
    ID: int
    InventoryName: str
    Description: str = ""
    PhotoFilename: Optional[str] = None
    PhotoUrl: Optional[str] = None


class SearchResponse(BaseModel):
    """Search result. PhotoUrl is only present when requested."""
    ID: int
    InventoryName: str
    Description: str = ""
    PhotoUrl: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    kind: Optional[str] = None


NOT_FOUND = {404: {"model": ErrorResponse, "description": "Item not found"}}
BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Missing or invalid field"}}

UPDATE_BODY_SCHEMA = InventoryUpdate.model_json_schema()


def get_store(request: Request) -> InventoryStore:
    return request.app.state.store


def get_cache_dir(request: Request) -> Path:
    return request.app.state.cache_dir


def has_upload(photo: Optional[UploadFile]) -> bool:
    """Browsers send an empty file part when no file was picked."""
    return photo is not None and bool(photo.filename)


def parse_item_id(raw_id: Optional[str]) -> int:
    """Read the leading integer of a form value, so "2abc" and "1.5" give 2 and 1."""
    match = LEADING_INT.match(raw_id or "")
    if not match:
        raise ValidationError("Invalid ID for search")
    return int(match.group(1))


async def read_update(request: Request) -> InventoryUpdate:
    """Parse an optional JSON or urlencoded body into the editable fields."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        data = dict(await request.form())
    else:
        body = await request.body()
        if not body.strip():
            return InventoryUpdate()
        try:
            data = json.loads(body)
        except ValueError:
            raise ValidationError("Request body is not valid JSON")

    if not isinstance(data, dict):
        raise ValidationError("Request body must be an object")

    try:
        return InventoryUpdate.model_validate(data)
    except PydanticValidationError:
        raise ValidationError("Fields inventory_name and description must be strings")


def search_item(store: InventoryStore, raw_id: Optional[str], include_photo: Optional[str]) -> dict:
    """Look up an item by a form-supplied id, optionally with its photo URL."""
    item = store.get(parse_item_id(raw_id))

    result = {
        "ID": item.id,
        "InventoryName": item.name,
        "Description": item.description,
    }
    if include_photo == "on" and item.photo_url:
        result["PhotoUrl"] = item.photo_url

    return result


@router.post("/register", status_code=status.HTTP_201_CREATED,
             response_model=InventoryItemResponse, responses=BAD_REQUEST)
async def register_item(
    inventory_name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    store: InventoryStore = Depends(get_store),
    cache_dir: Path = Depends(get_cache_dir),
):
    """Register a new item, optionally with a photo."""
    photo_filename = save_upload(photo.file, cache_dir) if has_upload(photo) else None

    try:
        item = store.create(inventory_name, description, photo_filename)
    except ValidationError:
        if photo_filename:
            (cache_dir / photo_filename).unlink(missing_ok=True)
        raise

    return item.to_dict()


@router.get("/inventory", response_model=list[InventoryItemResponse])
async def list_items(store: InventoryStore = Depends(get_store)):
    """List all registered items."""
    return [item.to_dict() for item in store.list()]


@router.get("/inventory/{item_id}", response_model=InventoryItemResponse, responses=NOT_FOUND)
async def get_item(item_id: int, store: InventoryStore = Depends(get_store)):
    """Get a single item by id."""
    return store.get(item_id).to_dict()


@router.put(
    "/inventory/{item_id}",
    response_model=InventoryItemResponse,
    responses={**NOT_FOUND, **BAD_REQUEST},
    openapi_extra={
        "requestBody": {
            "required": False,
            "content": {
                "application/json": {"schema": UPDATE_BODY_SCHEMA},
                "application/x-www-form-urlencoded": {"schema": UPDATE_BODY_SCHEMA},
            },
        }
    },
)
async def update_item(
    item_id: int,
    request: Request,
    store: InventoryStore = Depends(get_store),
):
    """Change the name and/or description of an item. An empty body changes nothing."""
    store.get(item_id)
    update = await read_update(request)
    item = store.update_fields(item_id, update.inventory_name, update.description)
    return item.to_dict()


@router.get(
    "/inventory/{item_id}/photo",
    response_class=FileResponse,
    responses={200: {"content": {"image/jpeg": {}}, "description": "Photo file"}, **NOT_FOUND},
)
async def get_item_photo(
    item_id: int,
    store: InventoryStore = Depends(get_store),
    cache_dir: Path = Depends(get_cache_dir),
):
    """Serve the photo of an item."""
    photo_path = resolve_photo_path(store.get(item_id), cache_dir)
    return FileResponse(photo_path, media_type="image/jpeg")


@router.put("/inventory/{item_id}/photo", response_model=InventoryItemResponse,
            responses={**NOT_FOUND, **BAD_REQUEST})
async def replace_item_photo(
    item_id: int,
    photo: Optional[UploadFile] = File(None),
    store: InventoryStore = Depends(get_store),
    cache_dir: Path = Depends(get_cache_dir),
):
    """Replace the photo of an item. The previous file stays in the cache."""
    store.get(item_id)
    if not has_upload(photo):
        raise ValidationError("Photo file not provided")

    photo_filename = save_upload(photo.file, cache_dir)
    return store.update_photo(item_id, photo_filename).to_dict()


@router.delete("/inventory/{item_id}", response_model=MessageResponse, responses=NOT_FOUND)
async def delete_item(item_id: int, store: InventoryStore = Depends(get_store)):
    """Remove an item from the inventory."""
    result = store.delete(item_id)
    return {"message": result["message"]}


@router.post("/search", response_model=SearchResponse, response_model_exclude_unset=True,
             responses={**NOT_FOUND, **BAD_REQUEST})
async def search(
    search_id: Optional[str] = Form(None, alias="id"),
    include_photo: Optional[str] = Form(None, alias="includePhoto"),
    store: InventoryStore = Depends(get_store),
):
    """Find an item by id submitted from the search form."""
    return search_item(store, search_id, include_photo)


@router.get("/RegisterForm.html", response_class=FileResponse)
async def register_form():
    return FileResponse(TEMPLATES_DIR / 'RegisterForm.html', media_type="text/html")


@router.get("/SearchForm.html", response_class=FileResponse)
async def search_form():
    return FileResponse(TEMPLATES_DIR / 'SearchForm.html', media_type="text/html")


@router.get("/health")
async def health(request: Request) -> dict:
    """Health check endpoint."""
    return {
        "status": "ok",
        "item_count": len(request.app.state.store),
        "cache_dir": str(request.app.state.cache_dir),
    }


def register_error_handlers(app: FastAPI) -> None:
    """Turn inventory, validation and routing errors into {"error": ...} bodies."""

    @app.exception_handler(InventoryError)
    async def inventory_error_handler(request: Request, exc: InventoryError):
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Invalid request data",
                "kind": ValidationError.kind,
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in e["loc"]),
                        "message": e["msg"],
                    }
                    for e in exc.errors()
                ],
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        status_code = exc.status_code
        if status_code == status.HTTP_405_METHOD_NOT_ALLOWED and request.method in STANDARD_METHODS:
            status_code = status.HTTP_404_NOT_FOUND

        if status_code == status.HTTP_404_NOT_FOUND:
            message = "Resource not found"
        elif status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            message = "Method not allowed"
        else:
            message = str(exc.detail)
        return JSONResponse(status_code=status_code, content={"error": message})


def create_app(cache_dir: Path) -> FastAPI:
    """Build an app with its own empty store, serving photos from cache_dir."""
    app = FastAPI(
        title="Inventory Management API",
        description="API for registering, searching and updating inventory items",
        version=__version__,
        docs_url="/docs",
    )
    app.state.store = InventoryStore()
    app.state.cache_dir = Path(cache_dir).resolve()

    # Enable CORS so the HTML forms work when opened from disk
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(router)
    return app
