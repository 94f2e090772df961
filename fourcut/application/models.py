"""Album, picture and role types shared by services and repositories."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Iterator, Optional


class Role(str, Enum):
    """Caller's permission tier within one album, derived from membership."""
    OWNER = "OWNER"
    MEMBER = "MEMBER"
    GUEST = "GUEST"
    NONE = "NONE"


@dataclass
class Album:
    id: str
    name: str
    owner_id: int
    slot_count: int
    member_ids: set[int] = field(default_factory=set)
    guest_ids: set[int] = field(default_factory=set)
    created_at: Optional[datetime] = None

    def has_slot(self, slot_id: int) -> bool:
        return 1 <= slot_id <= self.slot_count


@dataclass
class Picture:
    id: str
    album_id: str
    slot_id: int
    image_ref: str
    uploader_id: int
    content: Optional[str] = None
    pictured_at: Optional[datetime] = None
    tags: set[str] = field(default_factory=set)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class SlotLayout:
    """Snapshot of an album's occupied slots, ordered by slot number."""
    album_id: str
    slot_count: int
    pictures: list[Picture] = field(default_factory=list)

    def slots(self) -> Iterator[Optional[Picture]]:
        """Yield one entry per slot, None where the slot is empty."""
        by_slot = {p.slot_id: p for p in self.pictures}
        for slot_id in range(1, self.slot_count + 1):
            yield by_slot.get(slot_id)


@dataclass
class TagMatch:
    tag: str
    picture_ids: list[str] = field(default_factory=list)


class _Unset:
    """Marker for a field the caller did not supply."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


@dataclass(frozen=True)
class PictureUpdate:
    """Partial picture edit.

    Each field is either ``UNSET`` (leave untouched) or the replacement
    value. ``None`` explicitly clears ``content`` or ``pictured_at``;
    an empty ``tags`` collection removes every tag.
    """
    content: Optional[str] | _Unset = UNSET
    tags: Optional[Iterable[str]] | _Unset = UNSET
    pictured_at: Optional[datetime] | _Unset = UNSET
    image_ref: str | _Unset = UNSET

    def __post_init__(self):
        if self.image_ref is None:
            raise ValueError("image_ref cannot be cleared")

    def column_changes(self) -> dict:
        """Supplied values for columns stored on the picture row."""
        return {
            name: getattr(self, name)
            for name in ("content", "pictured_at", "image_ref")
            if getattr(self, name) is not UNSET
        }

    @property
    def has_tags(self) -> bool:
        return self.tags is not UNSET

    def is_empty(self) -> bool:
        return not self.column_changes() and not self.has_tags


def normalize_tags(tags: Optional[Iterable[str]]) -> set[str]:
    """Trim and lower-case tags, dropping blanks and duplicates.

    A single string is treated as one tag.
    """
    if not tags:
        return set()
    if isinstance(tags, str):
        tags = [tags]
    normalized = {t.strip().lower() for t in tags if t is not None}
    normalized.discard("")
    return normalized
