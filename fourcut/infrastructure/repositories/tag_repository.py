"""Tag repository - per-album keyword index over picture tags."""
from typing import Iterable

from ...application.models import TagMatch
from .base import Repository


def _escape_like(keyword: str) -> str:
    return keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class TagRepository(Repository):
    """Reverse mapping from tag text to the pictures carrying it.

    Rows are keyed by album so that a search never sees another
    album's tags. Tags are expected to be normalized by the caller.
    """

    def attach(self, album_id: str, picture_id: str, tags: Iterable[str]) -> None:
        self._execute_many(
            "INSERT OR IGNORE INTO picture_tags (album_id, picture_id, tag) VALUES (?, ?, ?)",
            [(album_id, picture_id, tag) for tag in sorted(set(tags))]
        )

    def detach(self, album_id: str, picture_id: str) -> int:
        cursor = self._execute(
            "DELETE FROM picture_tags WHERE album_id = ? AND picture_id = ?",
            (album_id, picture_id)
        )
        return cursor.rowcount

    def replace(self, album_id: str, picture_id: str, tags: Iterable[str]) -> None:
        """Swap a picture's tag set; run inside a transaction."""
        self.detach(album_id, picture_id)
        self.attach(album_id, picture_id, tags)

    def search(self, album_id: str, keyword: str, limit: int = 50) -> list[TagMatch]:
        """Search tags that start with or contain the keyword.

        Tags starting with the keyword come first, then the remaining
        substring matches, each group in alphabetical order.

        Args:
            album_id: Album to search in
            keyword: Normalized, non-empty keyword
            limit: Maximum number of distinct tags returned
        """
        pattern = _escape_like(keyword)
        cursor = self._execute(
            """SELECT tag, picture_id,
                      CASE WHEN tag LIKE ? ESCAPE '\\' THEN 0 ELSE 1 END as rank
               FROM picture_tags
               WHERE album_id = ? AND tag LIKE ? ESCAPE '\\'
               ORDER BY rank, tag, picture_id""",
            (f"{pattern}%", album_id, f"%{pattern}%")
        )

        matches: dict[str, TagMatch] = {}
        for row in cursor.fetchall():
            match = matches.get(row["tag"])
            if match is None:
                if len(matches) >= limit:
                    break
                match = matches[row["tag"]] = TagMatch(tag=row["tag"])
            match.picture_ids.append(row["picture_id"])
        return list(matches.values())
