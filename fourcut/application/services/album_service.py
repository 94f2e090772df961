"""Album service - album lifecycle and membership.

Albums are fixed grids of slots shared between an owner, members and
guests. Only the owner may rename, re-member or delete an album.
"""
import logging
from typing import Iterable, Optional

from ..errors import InvalidMembershipError, InvalidSlotError, NotFoundError
from ..models import Album, Role
from .access_control import AccessControl
from ...config import ALBUM_SLOT_COUNT
from ...infrastructure.repositories import AlbumRepository, PictureRepository
from ...infrastructure.storage import ImageStore, StorageError

logger = logging.getLogger(__name__)


class AlbumService:
    """Service for managing albums.

    Responsibilities:
    - Create albums with their initial member and guest lists
    - Rename albums and replace membership lists (owner only)
    - Delete albums together with their pictures and tags (owner only)
    - Report a caller's role in an album
    """

    def __init__(
        self,
        album_repository: AlbumRepository,
        picture_repository: PictureRepository,
        image_store: ImageStore = None,
        access_control: AccessControl = None,
        slot_count: int = None
    ):
        self.album_repo = album_repository
        self.picture_repo = picture_repository
        self.image_store = image_store
        self.access = access_control or AccessControl()
        self.slot_count = slot_count or ALBUM_SLOT_COUNT

    # ========================================================================
    # Album CRUD
    # ========================================================================

    def create_album(
        self,
        name: str,
        owner_id: int,
        member_ids: Iterable[int] = None,
        guest_ids: Iterable[int] = None,
        slot_count: int = None
    ) -> str:
        """Create a new album owned by the caller.

        Args:
            name: Album name
            owner_id: Creating user, becomes owner
            member_ids: Users allowed to upload and edit pictures
            guest_ids: Users allowed to view pictures
            slot_count: Layout size, defaults to the configured slot count

        Returns:
            New album ID

        Raises:
            InvalidMembershipError: If owner, members and guests overlap
            InvalidSlotError: If slot_count is not positive
        """
        members = set(member_ids or ())
        guests = set(guest_ids or ())
        self._validate_membership(owner_id, members, guests)

        if slot_count is None:
            slot_count = self.slot_count
        if slot_count < 1:
            raise InvalidSlotError(f"Album needs at least one slot, got {slot_count}")

        with self.album_repo.transaction():
            album_id = self.album_repo.create(
                name=name,
                owner_id=owner_id,
                slot_count=slot_count,
                member_ids=members,
                guest_ids=guests
            )

        logger.info(
            "Album %s created by user %s (%d slots, %d members, %d guests)",
            album_id, owner_id, slot_count, len(members), len(guests)
        )
        return album_id

    def get_album(self, album_id: str) -> Album:
        """Get album or raise NotFoundError."""
        album = self.album_repo.get_by_id(album_id)
        if album is None:
            raise NotFoundError(f"Album not found: {album_id}")
        return album

    def update_album(
        self,
        album_id: str,
        user_id: int,
        name: Optional[str] = None,
        member_ids: Optional[Iterable[int]] = None,
        guest_ids: Optional[Iterable[int]] = None
    ) -> None:
        """Rename an album and/or replace its membership lists.

        Supplied lists replace the current ones wholesale; None leaves a
        field untouched.

        Raises:
            NotFoundError: If the album doesn't exist
            PermissionDeniedError: If user is not the owner
            InvalidMembershipError: If the resulting sets overlap
        """
        with self.album_repo.transaction():
            album = self.get_album(album_id)
            self.access.require(album, user_id, AccessControl.OWNER_ONLY)

            members = set(member_ids) if member_ids is not None else album.member_ids
            guests = set(guest_ids) if guest_ids is not None else album.guest_ids
            self._validate_membership(album.owner_id, members, guests)

            if name is not None:
                self.album_repo.rename(album_id, name)
            if member_ids is not None or guest_ids is not None:
                self.album_repo.set_membership(album_id, members, guests)

        logger.info("Album %s updated by user %s", album_id, user_id)

    def delete_album(self, album_id: str, user_id: int) -> None:
        """Delete album with all its pictures and tags.

        Raises:
            NotFoundError: If the album doesn't exist
            PermissionDeniedError: If user is not the owner
        """
        with self.album_repo.transaction():
            album = self.get_album(album_id)
            self.access.require(album, user_id, AccessControl.OWNER_ONLY)

            image_refs = self.picture_repo.image_refs_in_album(album_id)
            self.album_repo.delete(album_id)

        logger.info(
            "Album %s deleted by user %s (%d pictures)", album_id, user_id, len(image_refs)
        )
        for image_ref in image_refs:
            self._release_image(image_ref)

    # ========================================================================
    # Roles
    # ========================================================================

    def get_role(self, album_id: str, user_id: int) -> Role:
        """Get user's role in an album; NONE for outsiders.

        Raises:
            NotFoundError: If the album doesn't exist
        """
        return self.access.role_of(self.get_album(album_id), user_id)

    # ========================================================================
    # Helpers
    # ========================================================================

    @staticmethod
    def _validate_membership(owner_id: int, member_ids: set, guest_ids: set) -> None:
        if owner_id in member_ids or owner_id in guest_ids:
            raise InvalidMembershipError("Owner cannot also be a member or guest")

        overlap = member_ids & guest_ids
        if overlap:
            raise InvalidMembershipError(
                f"Users cannot be both member and guest: {sorted(overlap)}"
            )

    def _release_image(self, image_ref: str) -> None:
        if self.image_store is None:
            return
        try:
            self.image_store.release(image_ref)
        except StorageError as e:
            logger.error("Failed to release image %s: %s", image_ref, e)
