"""Album routes - create, update, delete and role lookup."""
from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from ...database import create_connection
from ...dependencies import require_user
from .deps import get_album_service

router = APIRouter(prefix="/api/v1/albums")


class CreateAlbumRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    member_user_ids: list[int] = []
    guest_user_ids: list[int] = []


class UpdateAlbumRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    member_user_ids: list[int] | None = None
    guest_user_ids: list[int] | None = None


@router.post("")
def create_album(data: CreateAlbumRequest, request: Request):
    """Create a new album owned by the caller."""
    user = require_user(request)

    db = create_connection()
    try:
        service = get_album_service(db)
        album_id = service.create_album(
            name=data.name,
            owner_id=user["id"],
            member_ids=data.member_user_ids,
            guest_ids=data.guest_user_ids
        )
        return {"status": "ok", "album_id": album_id}
    finally:
        db.close()


@router.patch("/{album_id}")
def update_album(album_id: str, data: UpdateAlbumRequest, request: Request):
    """Rename an album or replace its member/guest lists."""
    user = require_user(request)

    db = create_connection()
    try:
        service = get_album_service(db)
        service.update_album(
            album_id,
            user["id"],
            name=data.name,
            member_ids=data.member_user_ids,
            guest_ids=data.guest_user_ids
        )
        return {"status": "ok"}
    finally:
        db.close()


@router.delete("/{album_id}")
def delete_album(album_id: str, request: Request):
    """Delete an album with all its pictures."""
    user = require_user(request)

    db = create_connection()
    try:
        service = get_album_service(db)
        service.delete_album(album_id, user["id"])
        return {"status": "ok"}
    finally:
        db.close()


@router.get("/{album_id}/roles/me")
def get_my_role(album_id: str, request: Request):
    """Get the caller's role in an album."""
    user = require_user(request)

    db = create_connection()
    try:
        service = get_album_service(db)
        role = service.get_role(album_id, user["id"])
        return {"status": "ok", "role": role.value}
    finally:
        db.close()
