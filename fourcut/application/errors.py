"""Domain errors raised by the album and picture services.

Every error carries a stable ``code`` and the HTTP status a transport
adapter should answer with. None of them are transient, so callers
should not retry.
"""
from typing import Optional


class AlbumError(Exception):
    """Base exception for album use cases."""

    code = "BAD_REQUEST"
    status_code = 400
    default_message = "Bad request"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return self.args[0]


class NotFoundError(AlbumError):
    """Album, picture or slot address does not exist."""

    code = "NOT_FOUND"
    status_code = 404
    default_message = "Not found"


class PermissionDeniedError(AlbumError):
    """Caller's role in the album is insufficient."""

    code = "PERMISSION_DENIED"
    status_code = 403
    default_message = "Permission denied"


class InvalidMembershipError(AlbumError):
    """Owner, member and guest sets overlap."""

    code = "INVALID_MEMBERSHIP"
    status_code = 400
    default_message = "Invalid album membership"


class InvalidSlotError(AlbumError):
    """Slot number outside the album layout."""

    code = "INVALID_SLOT"
    status_code = 400
    default_message = "Invalid slot"


class SlotOccupiedError(AlbumError):
    """Slot already holds a picture."""

    code = "SLOT_OCCUPIED"
    status_code = 409
    default_message = "Slot is already occupied"


class InvalidKeywordError(AlbumError):
    """Empty or malformed search keyword."""

    code = "INVALID_KEYWORD"
    status_code = 400
    default_message = "Invalid keyword"
