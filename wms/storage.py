"""
Object storage for item images.

Objects are written below ``<storage_dir>/<bucket>/items/`` and served by
the application under ``storage_public_url``.
"""
import io
import time
from pathlib import Path
from typing import BinaryIO, Optional

from PIL import Image, UnidentifiedImageError

from wms.core.config import settings
from wms.error_handlers import ImageRejectedError, StorageError
from wms.logging_config import get_logger

logger = get_logger("storage")

# Pillow format name -> file extension and MIME type
IMAGE_FORMATS = {
    "JPEG": ("jpg", "image/jpeg"),
    "PNG": ("png", "image/png"),
    "WEBP": ("webp", "image/webp"),
}


def sniff_image(content: bytes) -> Optional[str]:
    """Return the Pillow format name of an image, or None if it is not one."""
    try:
        with Image.open(io.BytesIO(content)) as image:
            image.verify()
            return image.format
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return None


def _safe_name(value: str) -> str:
    return "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in value)


class LocalObjectStorage:
    """A single bucket on the local filesystem."""

    def __init__(
        self,
        root: str = None,
        bucket: str = None,
        public_url: str = None,
        max_size: int = None,
        allowed_types: set[str] = None,
    ):
        self.root = Path(root or settings.storage_dir)
        self.bucket = bucket or settings.storage_bucket
        self.public_url = (public_url or settings.storage_public_url).rstrip("/")
        self.max_size = max_size or settings.max_image_size
        self.allowed_types = allowed_types or settings.allowed_image_types

    @property
    def bucket_dir(self) -> Path:
        return self.root / self.bucket

    def get_public_url(self, path: str) -> str:
        return f"{self.public_url}/{self.bucket}/{path.lstrip('/')}"

    def _object_path(self, url: str) -> Optional[str]:
        prefix = f"{self.public_url}/{self.bucket}/"
        if not url or not url.startswith(prefix):
            return None
        path = url[len(prefix):]
        if not path or ".." in Path(path).parts:
            return None
        return path

    def _check_size(self, size: int) -> None:
        if size > self.max_size:
            raise ImageRejectedError(
                f"Image exceeds the maximum size of {self.max_size // (1024 * 1024)}MB",
                [{"field": "file", "max_size": self.max_size}]
            )

    def read_upload(self, stream: BinaryIO) -> bytes:
        """Read an uploaded file, giving up once it is larger than ``max_size``."""
        content = stream.read(self.max_size + 1)
        self._check_size(len(content))
        return content

    def validate_image(self, content: bytes, content_type: Optional[str]) -> str:
        """
        Check size, declared type and actual content.

        Returns the file extension to store the image under.
        """
        self._check_size(len(content))
        if (content_type or "").lower() not in self.allowed_types:
            raise ImageRejectedError(
                f"Unsupported image type '{content_type}'",
                [{"field": "file", "allowed": sorted(self.allowed_types)}]
            )

        detected = sniff_image(content)
        if detected not in IMAGE_FORMATS or IMAGE_FORMATS[detected][1] not in self.allowed_types:
            raise ImageRejectedError(
                "Uploaded file is not a valid image",
                [{"field": "file", "detected": detected}]
            )
        return IMAGE_FORMATS[detected][0]

    def upload_image(
        self,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
        material_no: str,
    ) -> str:
        """Store an item image and return its public URL."""
        ext = self.validate_image(content, content_type)
        path = f"items/{_safe_name(material_no)}-{int(time.time() * 1000)}.{ext}"
        target = self.bucket_dir / path

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            logger.error(f"Failed to write {target}: {exc}")
            raise StorageError(str(exc), original_error=type(exc).__name__) from exc

        logger.info(f"Stored image {path} ({len(content)} bytes, uploaded as {filename})")
        return self.get_public_url(path)

    def delete_image(self, url: Optional[str]) -> bool:
        """
        Remove the object behind a public URL.

        URLs outside the bucket are ignored. Failures are logged and
        reported as False.
        """
        path = self._object_path(url)
        if path is None:
            return False

        try:
            (self.bucket_dir / path).unlink()
        except FileNotFoundError:
            logger.warning(f"Image {path} was already removed")
            return False
        except OSError as exc:
            logger.error(f"Failed to delete image {path}: {exc}")
            return False

        logger.info(f"Deleted image {path}")
        return True


storage = LocalObjectStorage()


def get_storage() -> LocalObjectStorage:
    """Dependency for FastAPI endpoints."""
    return storage
