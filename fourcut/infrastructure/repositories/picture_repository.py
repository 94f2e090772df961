"""Picture repository - the slot-picture ledger.

Each picture occupies exactly one slot of one album. The
UNIQUE(album_id, slot_id) constraint makes the occupancy check part of
the insert itself, so two writers racing for the same slot cannot both
succeed even across processes.
"""
import sqlite3
import uuid
from datetime import datetime
from typing import Optional

from ...application.models import Picture
from .base import Repository


class SlotTakenError(Exception):
    """Insert rejected because the slot already holds a picture."""
    pass


class PictureRepository(Repository):
    """Repository for pictures placed in album slots."""

    UPDATABLE_FIELDS = {"content", "pictured_at", "image_ref"}

    def insert(
        self,
        album_id: str,
        slot_id: int,
        image_ref: str,
        uploader_id: int,
        content: str = None,
        pictured_at: datetime = None,
        picture_id: str = None
    ) -> str:
        """Insert a picture into an empty slot.

        Returns:
            New picture UUID

        Raises:
            SlotTakenError: If the slot is already occupied
        """
        if picture_id is None:
            picture_id = str(uuid.uuid4())

        now = datetime.now()
        try:
            self._execute(
                """INSERT INTO pictures
                   (id, album_id, slot_id, image_ref, content, pictured_at,
                    uploader_id, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    picture_id, album_id, slot_id, image_ref, content,
                    pictured_at, uploader_id, now, now
                )
            )
        except sqlite3.IntegrityError as e:
            if "pictures.album_id, pictures.slot_id" in str(e):
                raise SlotTakenError(f"Slot {slot_id} of album {album_id} is occupied") from e
            raise
        return picture_id

    def get_by_id(self, picture_id: str) -> Optional[Picture]:
        """Get picture with its tags."""
        cursor = self._execute("SELECT * FROM pictures WHERE id = ?", (picture_id,))
        row = self._row_to_dict(cursor.fetchone())
        if row is None:
            return None
        picture = self._to_picture(row)
        picture.tags = self._tags_of([picture.id]).get(picture.id, set())
        return picture

    def get_in_slot(self, album_id: str, slot_id: int) -> Optional[str]:
        """Get ID of the picture occupying a slot, if any."""
        cursor = self._execute(
            "SELECT id FROM pictures WHERE album_id = ? AND slot_id = ?",
            (album_id, slot_id)
        )
        row = cursor.fetchone()
        return row["id"] if row else None

    def list_by_album(self, album_id: str) -> list[Picture]:
        """Get all pictures of an album ordered by slot."""
        cursor = self._execute(
            "SELECT * FROM pictures WHERE album_id = ? ORDER BY slot_id",
            (album_id,)
        )
        pictures = [self._to_picture(dict(row)) for row in cursor.fetchall()]
        tags = self._tags_of([p.id for p in pictures])
        for picture in pictures:
            picture.tags = tags.get(picture.id, set())
        return pictures

    def image_refs_in_album(self, album_id: str) -> list[str]:
        cursor = self._execute(
            "SELECT image_ref FROM pictures WHERE album_id = ?",
            (album_id,)
        )
        return [row["image_ref"] for row in cursor.fetchall()]

    def update(self, picture_id: str, **kwargs) -> bool:
        """Update picture fields; slot and album are never updatable."""
        updates = {k: v for k, v in kwargs.items() if k in self.UPDATABLE_FIELDS}
        updates["updated_at"] = datetime.now()

        set_clause = ", ".join(f"{k} = ?" for k in updates.keys())
        values = list(updates.values()) + [picture_id]

        cursor = self._execute(
            f"UPDATE pictures SET {set_clause} WHERE id = ?",
            tuple(values)
        )
        return cursor.rowcount > 0

    def delete(self, picture_id: str) -> bool:
        """Delete picture (tags deleted via CASCADE)."""
        cursor = self._execute(
            "DELETE FROM pictures WHERE id = ?",
            (picture_id,)
        )
        return cursor.rowcount > 0

    def _tags_of(self, picture_ids: list[str]) -> dict[str, set[str]]:
        if not picture_ids:
            return {}
        placeholders = ",".join("?" * len(picture_ids))
        cursor = self._execute(
            f"SELECT picture_id, tag FROM picture_tags WHERE picture_id IN ({placeholders})",
            tuple(picture_ids)
        )
        tags: dict[str, set[str]] = {}
        for row in cursor.fetchall():
            tags.setdefault(row["picture_id"], set()).add(row["tag"])
        return tags

    @staticmethod
    def _to_picture(row: dict) -> Picture:
        return Picture(
            id=row["id"],
            album_id=row["album_id"],
            slot_id=row["slot_id"],
            image_ref=row["image_ref"],
            uploader_id=row["uploader_id"],
            content=row["content"],
            pictured_at=row["pictured_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
