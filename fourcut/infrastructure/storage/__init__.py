"""Image store abstraction.

The album core receives opaque image references; this package is the
local reference implementation of the store that issues them.
"""
from .base import (
    ImageStore,
    StorageError,
    ImageNotFoundError,
    UploadError,
    InvalidImageError,
    DeleteError,
    StorageConfig,
)
from .local_storage import LocalImageStore
from .factory import get_image_store, get_storage_from_config, reset_storage

__all__ = [
    "ImageStore",
    "StorageError",
    "ImageNotFoundError",
    "UploadError",
    "InvalidImageError",
    "DeleteError",
    "StorageConfig",
    "LocalImageStore",
    "get_image_store",
    "get_storage_from_config",
    "reset_storage",
]
