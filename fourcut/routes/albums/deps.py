"""Shared dependencies for album routes.

This module contains factory functions for creating services
used across the album sub-modules.
"""
from ...application.services import AlbumService, PictureService
from ...infrastructure.repositories import AlbumRepository, PictureRepository, TagRepository
from ...infrastructure.storage import get_image_store


def get_album_service(db) -> AlbumService:
    """Create AlbumService with repositories."""
    return AlbumService(
        album_repository=AlbumRepository(db),
        picture_repository=PictureRepository(db),
        image_store=get_image_store()
    )


def get_picture_service(db) -> PictureService:
    """Create PictureService with repositories."""
    return PictureService(
        album_repository=AlbumRepository(db),
        picture_repository=PictureRepository(db),
        tag_repository=TagRepository(db),
        image_store=get_image_store()
    )
