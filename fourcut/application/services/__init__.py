"""Application services - business logic layer."""

from .access_control import AccessControl
from .album_service import AlbumService
from .picture_service import PictureService

__all__ = [
    "AccessControl",
    "AlbumService",
    "PictureService",
]
