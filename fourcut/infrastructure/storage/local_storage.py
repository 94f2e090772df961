"""Local filesystem image store."""
import uuid
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional, Union

from PIL import Image, UnidentifiedImageError

from .base import (
    ImageStore,
    StorageConfig,
    ImageNotFoundError,
    UploadError,
    InvalidImageError,
    DeleteError
)

# Pillow format name -> file extension
_EXTENSIONS = {"JPEG": ".jpg", "PNG": ".png", "GIF": ".gif", "WEBP": ".webp"}


class LocalImageStore(ImageStore):
    """Filesystem image store.

    Stores files flat under base_path as <uuid><ext>; the file name is
    the image reference.
    """

    def __init__(self, config: StorageConfig):
        """Initialize local storage.

        Args:
            config: Storage configuration with base_path
        """
        if config.backend != "local":
            raise ValueError(f"LocalImageStore requires backend='local', got '{config.backend}'")

        self.config = config
        self.base_path = Path(config.base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_path(self, image_ref: str) -> Path:
        """Get full filesystem path for a reference."""
        # Sanitize reference to prevent directory traversal
        safe_ref = Path(image_ref).name
        return self.base_path / safe_ref

    def store(
        self,
        content: Union[bytes, BinaryIO],
        content_type: Optional[str] = None
    ) -> str:
        """Verify and write an image, returning its reference."""
        data = content if isinstance(content, bytes) else content.read()
        image_format = self._detect_format(data)

        image_ref = f"{uuid.uuid4()}{_EXTENSIONS.get(image_format, '')}"
        try:
            self._get_path(image_ref).write_bytes(data)
        except OSError as e:
            raise UploadError(f"Failed to store image: {e}")
        return image_ref

    def release(self, image_ref: str) -> bool:
        """Delete image file."""
        file_path = self._get_path(image_ref)

        if not file_path.exists():
            return False

        try:
            file_path.unlink()
            return True
        except OSError as e:
            raise DeleteError(f"Failed to delete {image_ref}: {e}")

    def exists(self, image_ref: str) -> bool:
        """Check if file exists."""
        file_path = self._get_path(image_ref)
        return file_path.exists() and file_path.is_file()

    def open(self, image_ref: str) -> BinaryIO:
        """Get file as stream for reading."""
        file_path = self._get_path(image_ref)

        if not file_path.exists():
            raise ImageNotFoundError(f"Image not found: {image_ref}")

        return open(file_path, 'rb')

    @staticmethod
    def _detect_format(data: bytes) -> str:
        """Return the Pillow format name, rejecting anything undecodable."""
        try:
            with Image.open(BytesIO(data)) as img:
                img.verify()
                return img.format
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise InvalidImageError(f"Not a valid image: {e}")
