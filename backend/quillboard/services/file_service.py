"""
Quillboard Backend: Image Storage Service
==========================================

What:  Validates, stores and removes post featured images.
How:   Checks extension, declared content type and size, then writes the
       bytes to a date-organized directory under a UUID filename.
Who:   Called by PostService on create/update/delete, and by the uploads
       route to resolve stored files.

Validation contract:
    1. Extension must be one of the allowed raster formats
    2. Declared content type must be one of the allowed image types
    3. Extension and content type must name the same format
       (photo.png declared as image/jpeg is rejected)
    4. Size must be non-zero and at most settings.max_image_size

    Validation never touches the disk, so a rejected image aborts the whole
    operation before anything is written.

Directory Structure:
    uploads/
    └── 2026/
        └── 10/
            └── 19/
                ├── a1b2c3d4-....jpg
                └── e5f6g7h8-....webp
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from quillboard.config import settings
from quillboard.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
# Extension → canonical content type
ALLOWED_EXTENSIONS = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

# Declared content type → canonical content type
ALLOWED_MIME_TYPES = {
    "image/jpeg": "image/jpeg",
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
    "image/png": "image/png",
    "image/gif": "image/gif",
    "image/webp": "image/webp",
}


class FileService:
    """
    Manages the featured-image lifecycle.

    Lifecycle of an uploaded image:
        1. PostService calls validate_image() before touching the database
        2. store_file() writes the bytes and returns the relative path
        3. The relative path is saved on the post
        4. If the post write fails, PostService calls delete_image()
        5. When a post is deleted or its image replaced, the old file is
           removed with delete_image() after the commit
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                          If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """
        Returns:  Normalized extension (lowercase with dot).
        Raises:   ValidationError if extension is not allowed.
        """
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_content_type(self, content_type: Optional[str], extension: str) -> str:
        """
        Check the declared content type and that it agrees with the extension.

        Returns:  Canonical content type (e.g. "image/jpeg").
        Raises:   ValidationError on an unknown type or a mismatch.
        """
        declared = (content_type or "").split(";")[0].strip().lower()
        canonical = ALLOWED_MIME_TYPES.get(declared)
        if canonical is None:
            raise ValidationError(
                message=(
                    f"Content type '{declared or 'unknown'}' is not supported. "
                    "The file must be a JPEG, PNG, GIF or WebP image."
                ),
                field="image",
                context={"content_type": declared, "allowed": sorted(set(ALLOWED_MIME_TYPES.values()))},
            )
        if ALLOWED_EXTENSIONS[extension] != canonical:
            raise ValidationError(
                message=f"File extension '{extension}' does not match content type '{declared}'",
                field="image",
                context={"extension": extension, "content_type": declared},
            )
        return canonical

    def validate_size(self, size: int) -> None:
        """
        Raises:
            ValidationError for empty files or files above max_image_size.
        """
        if size <= 0:
            raise ValidationError(message="The uploaded image is empty", field="image")

        if size > settings.max_image_size:
            max_mb = settings.max_image_size / (1024 * 1024)
            raise ValidationError(
                message=f"Image is too large ({size / (1024 * 1024):.1f}MB). Maximum is {max_mb:.0f}MB.",
                field="image",
                context={"max_size": settings.max_image_size, "actual_size": size},
            )

    def validate_image(self, filename: str, content_type: Optional[str], content: bytes) -> str:
        """
        Run every check without writing anything.

        Returns:  Normalized extension to store the file under.
        """
        ext = self.validate_extension(filename)
        self.validate_content_type(content_type, ext)
        self.validate_size(len(content))
        return ext

    # ── Storage ───────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """
        Creates a YYYY/MM/DD/<uuid><ext> path.

        Returns: Tuple of (absolute_path, relative_path_from_storage_root).
        """
        now = datetime.now(timezone.utc)
        date_dir = now.strftime("%Y/%m/%d")
        unique_name = f"{uuid.uuid4()}{extension}"

        relative_path = f"{date_dir}/{unique_name}"
        absolute_path = self.storage_root / relative_path

        return absolute_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated file content to disk.

        Returns: Tuple of (absolute_path, relative_path).

        Raises:
            FileStorageError if directory creation or file write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)

            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)

            logger.info("Image stored: %s (%d bytes)", relative_path, len(content))
            return str(absolute_path), relative_path

        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            absolute_path.unlink(missing_ok=True)
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

    def resolve_path(self, relative_path: str) -> Optional[Path]:
        """
        Map a stored relative path to an absolute path inside storage_root.

        Returns None for paths that escape the storage root.
        """
        candidate = (self.storage_root / relative_path).resolve()
        if not candidate.is_relative_to(self.storage_root):
            return None
        return candidate

    def public_url(self, relative_path: Optional[str]) -> Optional[str]:
        """Relative storage path → URL served by the uploads route."""
        if not relative_path:
            return None
        return f"{settings.upload_url_prefix}/{relative_path}"

    # ── Cleanup ───────────────────────────────────────────────────────────

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a file from storage if it exists.

        Cleanup is best-effort: failures are logged, never raised, so an
        already-decided response is not turned into an error.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def delete_image(self, relative_path: Optional[str]) -> None:
        """Remove a stored image by its relative path."""
        if not relative_path:
            return
        path = self.resolve_path(relative_path)
        if path is None:
            logger.warning("Refusing to delete path outside storage root: %s", relative_path)
            return
        await self.cleanup_file(str(path))


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
