"""Application configuration and constants."""
import os
from pathlib import Path

# Directory paths
BASE_DIR = Path(__file__).resolve().parent.parent
DATABASE_PATH = Path(os.environ.get("FOURCUT_DATABASE_PATH", str(BASE_DIR / "fourcut.db")))
IMAGES_DIR = Path(os.environ.get("FOURCUT_IMAGES_DIR", str(BASE_DIR / "images")))

# Create directories if they don't exist
IMAGES_DIR.mkdir(parents=True, exist_ok=True)

# Seconds a connection waits for another writer before giving up
DATABASE_TIMEOUT = float(os.environ.get("FOURCUT_DATABASE_TIMEOUT", "5.0"))

# Base URL configuration (for running under a subpath like /fourcut)
BASE_URL = os.environ.get("FOURCUT_BASE_URL", "").strip("/")
ROOT_PATH = f"/{BASE_URL}" if BASE_URL else ""

# Album layout: every album is a fixed grid of numbered slots
ALBUM_SLOT_COUNT = int(os.environ.get("FOURCUT_ALBUM_SLOT_COUNT", "4"))

# Tags
TAG_MAX_LENGTH = 50
TAG_SEARCH_LIMIT = int(os.environ.get("FOURCUT_TAG_SEARCH_LIMIT", "50"))

# Allowed upload types
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}

# Header carrying the caller id, set by the authenticating gateway
USER_HEADER = os.environ.get("FOURCUT_USER_HEADER", "X-User-Id")

# Paths that don't require a caller identity (without BASE_URL prefix)
PUBLIC_PATHS = {"/health", "/docs", "/openapi.json"}

LOG_LEVEL = os.environ.get("FOURCUT_LOG_LEVEL", "INFO").upper()
