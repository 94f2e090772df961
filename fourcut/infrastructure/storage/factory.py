"""Factory for creating image store backends."""
import os
from pathlib import Path
from typing import Optional

from ...config import IMAGES_DIR

from .base import ImageStore, StorageConfig
from .local_storage import LocalImageStore


# Singleton instance
_storage_instance: Optional[ImageStore] = None


def get_storage_config() -> StorageConfig:
    """Get storage configuration from environment variables.

    Environment variables:
    - STORAGE_BACKEND: 'local' (default)
    - STORAGE_BASE_PATH: Directory for local storage (default: IMAGES_DIR)
    """
    backend = os.environ.get("STORAGE_BACKEND", "local").lower()

    if backend == "local":
        base_path = os.environ.get("STORAGE_BASE_PATH")
        return StorageConfig(
            backend="local",
            base_path=Path(base_path) if base_path else Path(IMAGES_DIR)
        )

    raise ValueError(f"Unknown storage backend: {backend}")


def get_storage_from_config(config: StorageConfig) -> ImageStore:
    """Create image store from configuration."""
    if config.backend == "local":
        return LocalImageStore(config)

    raise ValueError(f"Unknown storage backend: {config.backend}")


def get_image_store() -> ImageStore:
    """Get or create singleton image store.

    The instance is cached for reuse.
    """
    global _storage_instance

    if _storage_instance is None:
        _storage_instance = get_storage_from_config(get_storage_config())

    return _storage_instance


def reset_storage():
    """Reset storage singleton (useful for testing)."""
    global _storage_instance
    _storage_instance = None
