"""Abstract image store interface."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union, Optional


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ImageNotFoundError(StorageError):
    """Image reference unknown to the store."""
    pass


class UploadError(StorageError):
    """Failed to store image."""
    pass


class InvalidImageError(UploadError):
    """Payload is not a decodable image."""
    pass


class DeleteError(StorageError):
    """Failed to release image."""
    pass


@dataclass
class StorageConfig:
    """Storage configuration."""
    backend: str  # 'local'

    # Local storage settings
    base_path: Optional[Path] = None

    def __post_init__(self):
        if self.backend == "local" and self.base_path is None:
            from ...config import IMAGES_DIR
            self.base_path = Path(IMAGES_DIR)


class ImageStore(ABC):
    """Holds image payloads on behalf of pictures.

    The album core only ever sees the opaque reference returned by
    :meth:`store`; ownership of that reference passes to the picture
    that adopts it, and the picture hands it back through
    :meth:`release` when it is deleted or its image is replaced.
    """

    @abstractmethod
    def store(
        self,
        content: Union[bytes, BinaryIO],
        content_type: Optional[str] = None
    ) -> str:
        """Store an image payload.

        Args:
            content: Image bytes or file-like object
            content_type: MIME type of the payload

        Returns:
            Opaque image reference

        Raises:
            InvalidImageError: If the payload is not an image
            UploadError: If the payload cannot be written
        """
        pass

    @abstractmethod
    def release(self, image_ref: str) -> bool:
        """Drop an image the core no longer references.

        Returns:
            True if the image existed and was removed

        Raises:
            DeleteError: If removal fails
        """
        pass

    @abstractmethod
    def exists(self, image_ref: str) -> bool:
        """Check if an image reference is live."""
        pass

    @abstractmethod
    def open(self, image_ref: str) -> BinaryIO:
        """Open an image for reading.

        Raises:
            ImageNotFoundError: If the reference is unknown
        """
        pass
