"""Album repository - album identity, layout and membership.

Albums keep their owner inline; members and guests live in the
album_members table, one row per collaborator, so a user can hold at
most one collaborator role per album.
"""
import uuid
from datetime import datetime
from typing import Iterable, Optional

from ...application.models import Album
from .base import Repository

MEMBER = "member"
GUEST = "guest"


class AlbumRepository(Repository):
    """Repository for albums and their membership lists."""

    def create(
        self,
        name: str,
        owner_id: int,
        slot_count: int,
        member_ids: Iterable[int] = (),
        guest_ids: Iterable[int] = (),
        album_id: str = None
    ) -> str:
        """Create a new album.

        Args:
            name: Album name
            owner_id: Owner user ID
            slot_count: Number of slots in the album layout
            member_ids: Users allowed to upload and edit
            guest_ids: Users allowed to view
            album_id: Optional UUID

        Returns:
            New album UUID
        """
        if album_id is None:
            album_id = str(uuid.uuid4())

        self._execute(
            """INSERT INTO albums (id, name, owner_id, slot_count, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (album_id, name, owner_id, slot_count, datetime.now())
        )
        self._insert_members(album_id, MEMBER, member_ids)
        self._insert_members(album_id, GUEST, guest_ids)
        return album_id

    def get_by_id(self, album_id: str) -> Optional[Album]:
        """Get album with its membership sets."""
        cursor = self._execute("SELECT * FROM albums WHERE id = ?", (album_id,))
        row = self._row_to_dict(cursor.fetchone())
        if row is None:
            return None

        album = Album(
            id=row["id"],
            name=row["name"],
            owner_id=row["owner_id"],
            slot_count=row["slot_count"],
            created_at=row["created_at"],
        )
        cursor = self._execute(
            "SELECT user_id, role FROM album_members WHERE album_id = ?",
            (album_id,)
        )
        for member in cursor.fetchall():
            if member["role"] == MEMBER:
                album.member_ids.add(member["user_id"])
            else:
                album.guest_ids.add(member["user_id"])
        return album

    def rename(self, album_id: str, name: str) -> bool:
        cursor = self._execute(
            "UPDATE albums SET name = ? WHERE id = ?",
            (name, album_id)
        )
        return cursor.rowcount > 0

    def set_membership(
        self,
        album_id: str,
        member_ids: Iterable[int],
        guest_ids: Iterable[int]
    ) -> None:
        """Replace both collaborator lists wholesale."""
        self._execute("DELETE FROM album_members WHERE album_id = ?", (album_id,))
        self._insert_members(album_id, MEMBER, member_ids)
        self._insert_members(album_id, GUEST, guest_ids)

    def delete(self, album_id: str) -> bool:
        """Delete album (members, pictures and tags deleted via CASCADE)."""
        cursor = self._execute(
            "DELETE FROM albums WHERE id = ?",
            (album_id,)
        )
        return cursor.rowcount > 0

    def _insert_members(self, album_id: str, role: str, user_ids: Iterable[int]) -> None:
        now = datetime.now()
        self._execute_many(
            """INSERT INTO album_members (album_id, user_id, role, added_at)
               VALUES (?, ?, ?, ?)""",
            [(album_id, user_id, role, now) for user_id in sorted(set(user_ids))]
        )
