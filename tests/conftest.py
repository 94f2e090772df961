"""Test configuration and fixtures for shared slot albums.

This module provides isolated test environments:
- Temporary database (SQLite)
- Temporary image store directory
- Repositories and services wired to that database
- An HTTP client that can act as any user
"""
import io
import os
import sys
import tempfile
from pathlib import Path
from typing import Dict, Generator

import pytest
from fastapi.testclient import TestClient

# Ensure fourcut is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment BEFORE importing fourcut modules
_session_dir = Path(tempfile.mkdtemp(prefix="fourcut-tests-"))
os.environ["FOURCUT_DATABASE_PATH"] = str(_session_dir / "unused.db")
os.environ["FOURCUT_IMAGES_DIR"] = str(_session_dir / "images")
os.environ["FOURCUT_BASE_URL"] = ""
os.environ["FOURCUT_LOG_LEVEL"] = "WARNING"

OWNER_ID = 1
MEMBER_ID = 2
GUEST_ID = 3
STRANGER_ID = 4


@pytest.fixture(scope="function")
def isolated_environment(tmp_path: Path) -> Dict:
    """Create completely isolated environment for a single test.

    Returns:
        Dict with paths: db_path, images_dir, base_dir
    """
    env = {
        "db_path": tmp_path / "test.db",
        "images_dir": tmp_path / "images",
        "base_dir": tmp_path
    }
    env["images_dir"].mkdir(parents=True, exist_ok=True)
    return env


@pytest.fixture(scope="function")
def patched_config(isolated_environment: Dict, monkeypatch):
    """Point the database and image store at the isolated directories."""
    import fourcut.database as db_module
    from fourcut.infrastructure.storage import reset_storage

    monkeypatch.setattr(db_module, "DATABASE_PATH", isolated_environment["db_path"])
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("STORAGE_BASE_PATH", str(isolated_environment["images_dir"]))
    reset_storage()

    yield isolated_environment

    reset_storage()


@pytest.fixture(scope="function")
def fresh_database(patched_config: Dict) -> Path:
    """Initialize fresh database with schema for each test."""
    from fourcut.database import create_connection, init_db

    conn = create_connection(patched_config["db_path"])
    try:
        init_db(conn)
    finally:
        conn.close()

    return patched_config["db_path"]


@pytest.fixture(scope="function")
def db_connection(fresh_database: Path):
    """Connection to the fresh test database."""
    from fourcut.database import create_connection

    conn = create_connection(fresh_database)
    yield conn
    conn.close()


@pytest.fixture(scope="function")
def image_store(patched_config: Dict):
    """Local image store rooted in the isolated images directory."""
    from fourcut.infrastructure.storage import LocalImageStore, StorageConfig

    return LocalImageStore(StorageConfig(backend="local", base_path=patched_config["images_dir"]))


@pytest.fixture(scope="function")
def album_service(db_connection, image_store):
    """AlbumService backed by the test database."""
    from fourcut.application.services import AlbumService
    from fourcut.infrastructure.repositories import AlbumRepository, PictureRepository

    return AlbumService(
        album_repository=AlbumRepository(db_connection),
        picture_repository=PictureRepository(db_connection),
        image_store=image_store,
        slot_count=4
    )


@pytest.fixture(scope="function")
def picture_service(db_connection, image_store):
    """PictureService backed by the test database."""
    from fourcut.application.services import PictureService
    from fourcut.infrastructure.repositories import (
        AlbumRepository, PictureRepository, TagRepository
    )

    return PictureService(
        album_repository=AlbumRepository(db_connection),
        picture_repository=PictureRepository(db_connection),
        tag_repository=TagRepository(db_connection),
        image_store=image_store
    )


@pytest.fixture(scope="function")
def shared_album(album_service) -> str:
    """Four-slot album: owner 1, member 2, guest 3."""
    return album_service.create_album(
        "Four Cut",
        OWNER_ID,
        member_ids=[MEMBER_ID],
        guest_ids=[GUEST_ID]
    )


@pytest.fixture(scope="function")
def test_image_bytes() -> bytes:
    """Create minimal valid JPEG image in memory.

    Returns:
        JPEG file as bytes
    """
    from PIL import Image

    img = Image.new('RGB', (100, 100), color='red')
    img_bytes = io.BytesIO()
    img.save(img_bytes, format='JPEG', quality=85)
    return img_bytes.getvalue()


@pytest.fixture(scope="function")
def stored_image(image_store, test_image_bytes) -> str:
    """Reference to an image already held by the image store."""
    return image_store.store(test_image_bytes, "image/jpeg")


@pytest.fixture(scope="function")
def client(fresh_database: Path) -> Generator[TestClient, None, None]:
    """Create test client with fresh isolated environment.

    Usage:
        def test_something(client):
            response = client.get("/health")
            assert response.status_code == 200
    """
    from fourcut.main import app

    with TestClient(app) as test_client:
        yield test_client


def as_user(user_id: int) -> Dict[str, str]:
    """Headers identifying the caller, as set by the auth gateway."""
    from fourcut.config import USER_HEADER

    return {USER_HEADER: str(user_id)}
