"""Tests for repository layer against a real SQLite database."""
from datetime import datetime

import pytest

from fourcut.infrastructure.repositories import (
    AlbumRepository,
    PictureRepository,
    SlotTakenError,
    TagRepository,
)


@pytest.fixture
def album_repo(db_connection):
    return AlbumRepository(db_connection)


@pytest.fixture
def picture_repo(db_connection):
    return PictureRepository(db_connection)


@pytest.fixture
def tag_repo(db_connection):
    return TagRepository(db_connection)


@pytest.fixture
def album_id(album_repo):
    return album_repo.create("Trip", owner_id=1, slot_count=4, member_ids=[2], guest_ids=[3])


class TestAlbumRepository:

    def test_create_and_get(self, album_repo, album_id):
        album = album_repo.get_by_id(album_id)

        assert album.name == "Trip"
        assert album.owner_id == 1
        assert album.slot_count == 4
        assert album.member_ids == {2}
        assert album.guest_ids == {3}
        assert isinstance(album.created_at, datetime)

    def test_get_missing_returns_none(self, album_repo):
        assert album_repo.get_by_id("missing") is None

    def test_rename(self, album_repo, album_id):
        assert album_repo.rename(album_id, "Holiday") is True
        assert album_repo.get_by_id(album_id).name == "Holiday"

    def test_set_membership_swaps_roles(self, album_repo, album_id):
        """A user can move between members and guests in one call."""
        album_repo.set_membership(album_id, member_ids=[3], guest_ids=[2, 4])

        album = album_repo.get_by_id(album_id)
        assert album.member_ids == {3}
        assert album.guest_ids == {2, 4}

    def test_set_membership_can_clear(self, album_repo, album_id):
        album_repo.set_membership(album_id, member_ids=[], guest_ids=[])

        album = album_repo.get_by_id(album_id)
        assert album.member_ids == set()
        assert album.guest_ids == set()

    def test_delete_cascades(self, album_repo, picture_repo, tag_repo, album_id, db_connection):
        picture_id = picture_repo.insert(album_id, 1, "a.jpg", uploader_id=2)
        tag_repo.attach(album_id, picture_id, ["sea"])

        assert album_repo.delete(album_id) is True

        assert album_repo.get_by_id(album_id) is None
        assert picture_repo.get_by_id(picture_id) is None
        for table in ("album_members", "pictures", "picture_tags"):
            count = db_connection.execute(
                f"SELECT COUNT(*) FROM {table} WHERE album_id = ?", (album_id,)
            ).fetchone()[0]
            assert count == 0, table

    def test_transaction_rolls_back_on_error(self, album_repo):
        with pytest.raises(RuntimeError):
            with album_repo.transaction():
                album_repo.create("Doomed", owner_id=1, slot_count=4, album_id="doomed")
                raise RuntimeError("boom")

        assert album_repo.get_by_id("doomed") is None


class TestPictureRepository:

    def test_insert_and_get(self, picture_repo, album_id):
        when = datetime(2024, 7, 1)
        picture_id = picture_repo.insert(
            album_id, 2, "a.jpg", uploader_id=2, content="hi", pictured_at=when
        )

        picture = picture_repo.get_by_id(picture_id)
        assert picture.slot_id == 2
        assert picture.image_ref == "a.jpg"
        assert picture.content == "hi"
        assert picture.pictured_at == when
        assert picture.tags == set()

    def test_insert_into_occupied_slot_raises(self, picture_repo, album_id):
        picture_repo.insert(album_id, 1, "a.jpg", uploader_id=1)

        with pytest.raises(SlotTakenError):
            picture_repo.insert(album_id, 1, "b.jpg", uploader_id=2)

    def test_same_slot_in_other_album_is_free(self, album_repo, picture_repo, album_id):
        other = album_repo.create("Other", owner_id=1, slot_count=4)

        picture_repo.insert(album_id, 1, "a.jpg", uploader_id=1)
        picture_repo.insert(other, 1, "b.jpg", uploader_id=1)

    def test_get_in_slot(self, picture_repo, album_id):
        picture_id = picture_repo.insert(album_id, 3, "a.jpg", uploader_id=1)

        assert picture_repo.get_in_slot(album_id, 3) == picture_id
        assert picture_repo.get_in_slot(album_id, 1) is None

    def test_list_by_album_ordered_by_slot(self, picture_repo, tag_repo, album_id):
        third = picture_repo.insert(album_id, 3, "c.jpg", uploader_id=1)
        first = picture_repo.insert(album_id, 1, "a.jpg", uploader_id=1)
        tag_repo.attach(album_id, third, ["sky"])

        pictures = picture_repo.list_by_album(album_id)

        assert [p.id for p in pictures] == [first, third]
        assert pictures[1].tags == {"sky"}

    def test_update_ignores_slot(self, picture_repo, album_id):
        picture_id = picture_repo.insert(album_id, 1, "a.jpg", uploader_id=1, content="x")

        picture_repo.update(picture_id, content=None, image_ref="b.jpg", slot_id=4)

        picture = picture_repo.get_by_id(picture_id)
        assert picture.slot_id == 1
        assert picture.content is None
        assert picture.image_ref == "b.jpg"

    def test_image_refs_in_album(self, picture_repo, album_id):
        picture_repo.insert(album_id, 1, "a.jpg", uploader_id=1)
        picture_repo.insert(album_id, 2, "b.jpg", uploader_id=1)

        assert sorted(picture_repo.image_refs_in_album(album_id)) == ["a.jpg", "b.jpg"]

    def test_delete_frees_slot(self, picture_repo, album_id):
        picture_id = picture_repo.insert(album_id, 1, "a.jpg", uploader_id=1)

        assert picture_repo.delete(picture_id) is True
        picture_repo.insert(album_id, 1, "b.jpg", uploader_id=1)


class TestTagRepository:

    @pytest.fixture
    def tagged(self, picture_repo, tag_repo, album_id):
        """Three pictures: p1 sunset/beach, p2 sunset, p3 midsummer."""
        ids = {}
        for slot, tags in ((1, ["sunset", "beach"]), (2, ["sunset"]), (3, ["midsummer"])):
            picture_id = picture_repo.insert(album_id, slot, f"{slot}.jpg", uploader_id=1)
            tag_repo.attach(album_id, picture_id, tags)
            ids[slot] = picture_id
        return ids

    def test_search_groups_pictures_by_tag(self, tag_repo, album_id, tagged):
        results = tag_repo.search(album_id, "sunset")

        assert len(results) == 1
        assert results[0].tag == "sunset"
        assert sorted(results[0].picture_ids) == sorted([tagged[1], tagged[2]])

    def test_search_puts_prefix_matches_first(self, tag_repo, album_id, tagged):
        """'su' prefixes sunset; it only appears inside midsummer."""
        results = tag_repo.search(album_id, "su")

        assert [r.tag for r in results] == ["sunset", "midsummer"]

    def test_search_no_match(self, tag_repo, album_id, tagged):
        assert tag_repo.search(album_id, "mountain") == []

    def test_search_is_scoped_to_album(self, album_repo, picture_repo, tag_repo, album_id, tagged):
        other = album_repo.create("Other", owner_id=9, slot_count=4)
        picture_id = picture_repo.insert(other, 1, "x.jpg", uploader_id=9)
        tag_repo.attach(other, picture_id, ["sunrise"])

        assert [r.tag for r in tag_repo.search(album_id, "sun")] == ["sunset"]
        assert [r.tag for r in tag_repo.search(other, "sun")] == ["sunrise"]

    @pytest.mark.parametrize("keyword", ["%", "_", "\\"])
    def test_search_treats_wildcards_literally(self, tag_repo, album_id, tagged, keyword):
        assert tag_repo.search(album_id, keyword) == []

    def test_search_wildcard_in_tag(self, picture_repo, tag_repo, album_id):
        picture_id = picture_repo.insert(album_id, 1, "a.jpg", uploader_id=1)
        tag_repo.attach(album_id, picture_id, ["100%", "1000"])

        assert [r.tag for r in tag_repo.search(album_id, "0%")] == ["100%"]

    def test_search_limit_counts_tags(self, picture_repo, tag_repo, album_id):
        picture_id = picture_repo.insert(album_id, 1, "a.jpg", uploader_id=1)
        tag_repo.attach(album_id, picture_id, ["cat1", "cat2", "cat3"])

        assert [r.tag for r in tag_repo.search(album_id, "cat", limit=2)] == ["cat1", "cat2"]

    def test_replace_swaps_tag_set(self, tag_repo, album_id, tagged):
        tag_repo.replace(album_id, tagged[1], ["ocean"])

        assert tag_repo.search(album_id, "beach") == []
        assert [r.picture_ids for r in tag_repo.search(album_id, "sunset")] == [[tagged[2]]]
        assert [r.picture_ids for r in tag_repo.search(album_id, "ocean")] == [[tagged[1]]]

    def test_detach(self, tag_repo, album_id, tagged):
        assert tag_repo.detach(album_id, tagged[1]) == 2
        assert tag_repo.search(album_id, "beach") == []


class TestSchema:

    def test_init_db_is_idempotent(self, db_connection):
        from fourcut.database import init_db

        init_db(db_connection)

        tables = {
            row["name"] for row in db_connection.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            )
        }
        assert {"albums", "album_members", "pictures", "picture_tags"} <= tables

    def test_foreign_keys_enforced(self, picture_repo):
        import sqlite3

        with pytest.raises(sqlite3.IntegrityError):
            picture_repo.insert("no-such-album", 1, "a.jpg", uploader_id=1)
