# Repository Pattern Implementation
"""
Repositories abstract database operations.
Each entity has its own repository; all repositories built on the same
connection share its transactions.
"""
from .base import Repository, ConnectionProtocol
from .album_repository import AlbumRepository
from .picture_repository import PictureRepository, SlotTakenError
from .tag_repository import TagRepository

__all__ = [
    "Repository",
    "ConnectionProtocol",
    "AlbumRepository",
    "PictureRepository",
    "SlotTakenError",
    "TagRepository",
]
