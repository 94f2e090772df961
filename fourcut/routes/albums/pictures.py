"""Picture routes - slot uploads, edits, deletion, listing and tag search.

Upload and edit endpoints take multipart bodies: a JSON ``data`` part
and an ``image`` file part.
"""
import logging
import mimetypes
from datetime import date, datetime, time
from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field, StringConstraints, ValidationError
from starlette.background import BackgroundTask

from ...application.models import UNSET, Picture, PictureUpdate
from ...config import ALLOWED_IMAGE_TYPES, TAG_MAX_LENGTH
from ...database import create_connection
from ...dependencies import require_user
from ...infrastructure.storage import (
    ImageNotFoundError,
    InvalidImageError,
    StorageError,
    UploadError,
    get_image_store,
)
from .deps import get_picture_service

router = APIRouter(prefix="/api/v1/albums")
logger = logging.getLogger(__name__)

Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=TAG_MAX_LENGTH)]


class CreatePictureRequest(BaseModel):
    slot_id: int = Field(ge=1)
    content: str | None = None
    pictured_at: date
    tags: list[Tag] = []


class UpdatePictureRequest(BaseModel):
    content: str | None = None
    tags: list[Tag] | None = None
    pictured_at: date | None = None


def _parse(model: type[BaseModel], raw: str) -> BaseModel:
    try:
        return model.model_validate_json(raw)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))


def _at_midnight(value: date | None) -> datetime | None:
    return datetime.combine(value, time()) if value else None


def _store_image(image: UploadFile) -> str:
    """Hand an uploaded file to the image store and return its reference."""
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported image type: {image.content_type}")
    try:
        return get_image_store().store(image.file, image.content_type)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UploadError as e:
        raise HTTPException(status_code=500, detail=str(e))


def _discard_image(image_ref: str) -> None:
    """Release an image no picture adopted."""
    try:
        get_image_store().release(image_ref)
    except StorageError as e:
        logger.error("Failed to release unadopted image %s: %s", image_ref, e)


def _picture_to_dict(picture: Picture) -> dict:
    return {
        "id": picture.id,
        "slot_id": picture.slot_id,
        "image_ref": picture.image_ref,
        "content": picture.content,
        "pictured_at": picture.pictured_at.date().isoformat() if picture.pictured_at else None,
        "tags": sorted(picture.tags),
        "uploader_id": picture.uploader_id,
    }


@router.post("/{album_id}/pictures")
def upload_picture(
    album_id: str,
    request: Request,
    data: str = Form(...),
    image: UploadFile = File(...)
):
    """Upload a picture into an empty slot."""
    user = require_user(request)
    payload = _parse(CreatePictureRequest, data)
    image_ref = _store_image(image)

    db = create_connection()
    try:
        service = get_picture_service(db)
        picture_id = service.create_in_slot(
            user["id"],
            album_id,
            payload.slot_id,
            payload.content,
            _at_midnight(payload.pictured_at),
            payload.tags,
            image_ref
        )
        return {"status": "ok", "picture_id": picture_id}
    except Exception:
        # The picture never adopted the image
        _discard_image(image_ref)
        raise
    finally:
        db.close()


@router.patch("/{album_id}/pictures/{picture_id}")
def update_picture(
    album_id: str,
    picture_id: str,
    request: Request,
    data: str | None = Form(None),
    image: UploadFile | None = File(None)
):
    """Edit a picture; only the supplied fields are replaced."""
    user = require_user(request)
    payload = _parse(UpdatePictureRequest, data) if data else UpdatePictureRequest()
    supplied = payload.model_fields_set
    image_ref = _store_image(image) if image is not None else UNSET

    changes = PictureUpdate(
        content=payload.content if "content" in supplied else UNSET,
        tags=(payload.tags or []) if "tags" in supplied else UNSET,
        pictured_at=_at_midnight(payload.pictured_at) if "pictured_at" in supplied else UNSET,
        image_ref=image_ref
    )

    db = create_connection()
    try:
        service = get_picture_service(db)
        picture = service.update_picture(user["id"], album_id, picture_id, changes)
    except Exception:
        if image_ref is not UNSET:
            _discard_image(image_ref)
        raise
    finally:
        db.close()

    return {"status": "ok", "picture": _picture_to_dict(picture)}


@router.delete("/{album_id}/pictures/{picture_id}")
def delete_picture(album_id: str, picture_id: str, request: Request):
    """Delete a picture and free its slot."""
    user = require_user(request)

    db = create_connection()
    try:
        service = get_picture_service(db)
        service.delete_picture(user["id"], album_id, picture_id)
        return {"status": "ok"}
    finally:
        db.close()


@router.get("/{album_id}/pictures")
def get_pictures_in_slots(album_id: str, request: Request):
    """Get the album layout with one entry per occupied slot."""
    user = require_user(request)

    db = create_connection()
    try:
        service = get_picture_service(db)
        layout = service.list_by_slot(user["id"], album_id)
        return {
            "status": "ok",
            "album_id": layout.album_id,
            "slot_count": layout.slot_count,
            "pictures": [_picture_to_dict(p) for p in layout.pictures]
        }
    finally:
        db.close()


@router.get("/{album_id}/pictures/{picture_id}/image")
def get_picture_image(album_id: str, picture_id: str, request: Request):
    """Stream the image held by a picture."""
    user = require_user(request)

    db = create_connection()
    try:
        service = get_picture_service(db)
        picture = service.get_picture(user["id"], album_id, picture_id)
    finally:
        db.close()

    try:
        stream = get_image_store().open(picture.image_ref)
    except ImageNotFoundError:
        raise HTTPException(status_code=404, detail="Image not found")

    media_type = mimetypes.guess_type(picture.image_ref)[0] or "application/octet-stream"
    return StreamingResponse(stream, media_type=media_type, background=BackgroundTask(stream.close))


@router.get("/{album_id}/tags")
def search_tags(album_id: str, request: Request, keyword: str = ""):
    """Search the album's tags containing the keyword."""
    user = require_user(request)

    db = create_connection()
    try:
        service = get_picture_service(db)
        matches = service.search_tags(album_id, user["id"], keyword)
        return {
            "status": "ok",
            "tags": [{"tag": m.tag, "picture_ids": m.picture_ids} for m in matches]
        }
    finally:
        db.close()
