"""Picture service - slot placement, edits and tag search.

This service encapsulates business logic for:
- Uploading a picture into an empty album slot
- Editing or replacing a picture in place
- Deleting a picture and freeing its slot
- Listing an album's slots and searching its tags
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from ..errors import (
    InvalidKeywordError,
    InvalidSlotError,
    NotFoundError,
    SlotOccupiedError,
)
from ..models import Album, Picture, PictureUpdate, SlotLayout, TagMatch, normalize_tags
from .access_control import AccessControl
from ...config import TAG_MAX_LENGTH, TAG_SEARCH_LIMIT
from ...infrastructure.repositories import (
    AlbumRepository,
    PictureRepository,
    SlotTakenError,
    TagRepository,
)
from ...infrastructure.storage import ImageStore, StorageError

logger = logging.getLogger(__name__)


class PictureService:
    """Service for pictures placed in album slots.

    Every use case runs as one transaction: the role check, the slot
    check and the writes to pictures and tags commit together or not
    at all. Image references are released only after the commit that
    dropped them.
    """

    def __init__(
        self,
        album_repository: AlbumRepository,
        picture_repository: PictureRepository,
        tag_repository: TagRepository,
        image_store: ImageStore = None,
        access_control: AccessControl = None
    ):
        self.album_repo = album_repository
        self.picture_repo = picture_repository
        self.tag_repo = tag_repository
        self.image_store = image_store
        self.access = access_control or AccessControl()

    def create_in_slot(
        self,
        user_id: int,
        album_id: str,
        slot_id: int,
        content: Optional[str],
        pictured_at: Optional[datetime],
        tags: Optional[Iterable[str]],
        image_ref: str
    ) -> str:
        """Place a new picture into an empty slot.

        On success the picture adopts ``image_ref``; on failure the
        caller keeps ownership of it.

        Returns:
            New picture ID

        Raises:
            NotFoundError: If the album doesn't exist
            PermissionDeniedError: If user is not owner or member
            InvalidSlotError: If slot_id is outside the album layout
            SlotOccupiedError: If the slot already holds a picture
        """
        normalized = normalize_tags(tags)

        with self.picture_repo.transaction():
            album = self._get_album(album_id)
            self.access.require(album, user_id, AccessControl.CONTRIBUTORS)

            if not album.has_slot(slot_id):
                raise InvalidSlotError(
                    f"Slot {slot_id} is outside 1..{album.slot_count}"
                )
            if self.picture_repo.get_in_slot(album_id, slot_id) is not None:
                raise self._slot_occupied(album_id, slot_id, user_id)

            try:
                picture_id = self.picture_repo.insert(
                    album_id=album_id,
                    slot_id=slot_id,
                    image_ref=image_ref,
                    uploader_id=user_id,
                    content=content,
                    pictured_at=pictured_at
                )
            except SlotTakenError as e:
                raise self._slot_occupied(album_id, slot_id, user_id) from e
            self.tag_repo.attach(album_id, picture_id, normalized)

        logger.info(
            "Picture %s created in album %s slot %s by user %s",
            picture_id, album_id, slot_id, user_id
        )
        return picture_id

    def update_picture(
        self,
        user_id: int,
        album_id: str,
        picture_id: str,
        changes: PictureUpdate
    ) -> Picture:
        """Replace any subset of a picture's content, tags, date and image.

        Returns:
            The updated picture

        Raises:
            NotFoundError: If album or picture doesn't exist
            PermissionDeniedError: If user is not owner or member
        """
        replaced_image = None

        with self.picture_repo.transaction():
            album = self._get_album(album_id)
            self.access.require(album, user_id, AccessControl.CONTRIBUTORS)
            picture = self._get_picture(album_id, picture_id)
            if changes.is_empty():
                return picture

            columns = changes.column_changes()
            if columns:
                self.picture_repo.update(picture_id, **columns)
            if changes.has_tags:
                self.tag_repo.replace(album_id, picture_id, normalize_tags(changes.tags))

            new_image = columns.get("image_ref")
            if new_image is not None and new_image != picture.image_ref:
                replaced_image = picture.image_ref

            updated = self.picture_repo.get_by_id(picture_id)

        logger.info(
            "Picture %s in album %s updated by user %s (%s)",
            picture_id, album_id, user_id,
            ", ".join(sorted(columns) + (["tags"] if changes.has_tags else []))
        )
        if replaced_image:
            self._release_image(replaced_image)
        return updated

    def delete_picture(self, user_id: int, album_id: str, picture_id: str) -> None:
        """Delete a picture, freeing its slot.

        Raises:
            NotFoundError: If album or picture doesn't exist
            PermissionDeniedError: If user is not owner or member
        """
        with self.picture_repo.transaction():
            album = self._get_album(album_id)
            self.access.require(album, user_id, AccessControl.CONTRIBUTORS)
            picture = self._get_picture(album_id, picture_id)

            self.tag_repo.detach(album_id, picture_id)
            self.picture_repo.delete(picture_id)

        logger.info(
            "Picture %s deleted from album %s slot %s by user %s",
            picture_id, album_id, picture.slot_id, user_id
        )
        self._release_image(picture.image_ref)

    def get_picture(self, user_id: int, album_id: str, picture_id: str) -> Picture:
        """Get a single picture of an album.

        Raises:
            NotFoundError: If album or picture doesn't exist
            PermissionDeniedError: If user has no role in the album
        """
        with self.picture_repo.transaction(immediate=False):
            album = self._get_album(album_id)
            self.access.require(album, user_id, AccessControl.VIEWERS)
            return self._get_picture(album_id, picture_id)

    def list_by_slot(self, user_id: int, album_id: str) -> SlotLayout:
        """Get the album's occupied slots in slot order.

        Raises:
            NotFoundError: If the album doesn't exist
            PermissionDeniedError: If user has no role in the album
        """
        with self.picture_repo.transaction(immediate=False):
            album = self._get_album(album_id)
            self.access.require(album, user_id, AccessControl.VIEWERS)
            pictures = self.picture_repo.list_by_album(album_id)

        return SlotLayout(album_id=album_id, slot_count=album.slot_count, pictures=pictures)

    def search_tags(self, album_id: str, user_id: int, keyword: str) -> list[TagMatch]:
        """Search the album's tags containing ``keyword``.

        Raises:
            InvalidKeywordError: If keyword is empty or too long
            NotFoundError: If the album doesn't exist
            PermissionDeniedError: If user has no role in the album
        """
        keyword = (keyword or "").strip().lower()
        if not keyword:
            raise InvalidKeywordError("Keyword must not be empty")
        if len(keyword) > TAG_MAX_LENGTH:
            raise InvalidKeywordError(f"Keyword longer than {TAG_MAX_LENGTH} characters")

        with self.tag_repo.transaction(immediate=False):
            album = self._get_album(album_id)
            self.access.require(album, user_id, AccessControl.VIEWERS)
            return self.tag_repo.search(album_id, keyword, limit=TAG_SEARCH_LIMIT)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get_album(self, album_id: str) -> Album:
        album = self.album_repo.get_by_id(album_id)
        if album is None:
            raise NotFoundError(f"Album not found: {album_id}")
        return album

    def _get_picture(self, album_id: str, picture_id: str) -> Picture:
        picture = self.picture_repo.get_by_id(picture_id)
        if picture is None or picture.album_id != album_id:
            raise NotFoundError(f"Picture not found: {picture_id}")
        return picture

    @staticmethod
    def _slot_occupied(album_id: str, slot_id: int, user_id: int) -> SlotOccupiedError:
        logger.warning(
            "User %s lost slot %s of album %s: already occupied", user_id, slot_id, album_id
        )
        return SlotOccupiedError(f"Slot {slot_id} is already occupied")

    def _release_image(self, image_ref: str) -> None:
        if self.image_store is None:
            return
        try:
            self.image_store.release(image_ref)
        except StorageError as e:
            logger.error("Failed to release image %s: %s", image_ref, e)
