"""
Cyber Kitchen Backend — Image Upload Service
==============================================

What:  Stores one uploaded image under the media root and returns its URL.
How:   Resolves the (sanitized) destination folder through MediaManager,
       generates a collision-resistant filename, writes the bytes.
Who:   Called by POST /api/upload.

Filename Scheme:
    img-<epoch milliseconds>-<random 0..1e9><original extension>
    e.g. img-1700000000000-482913377.png

    Only the extension of the client filename is kept; the rest of the
    client filename never reaches the filesystem.
"""

import logging
import os
import random
import time
from typing import Optional

from cyberkitchen.config import settings
from cyberkitchen.exceptions import ValidationError
from cyberkitchen.services.media_service import MediaManager, media_manager

logger = logging.getLogger(__name__)


def generate_upload_filename(original_filename: Optional[str]) -> str:
    """Build `img-<timestamp>-<random><ext>` from the client filename's extension."""
    ext = os.path.splitext(original_filename or "")[1]
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"img-{unique_suffix}{ext}"


class UploadService:
    """Validates presence and size of an upload, then stores it."""

    def __init__(self, media: Optional[MediaManager] = None, max_size: Optional[int] = None):
        self.media = media or media_manager
        self.max_size = max_size or settings.max_upload_size

    def validate_payload(self, content: Optional[bytes]) -> None:
        """
        Raises:
            ValidationError if there is no payload, it is empty, or too large.
        """
        if content is None:
            raise ValidationError(message="No file uploaded", field="image")
        if len(content) == 0:
            raise ValidationError(message="Uploaded file is empty", field="image")
        if len(content) > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"max_size": self.max_size, "actual_size": len(content)},
            )

    async def store_upload(
        self,
        filename: Optional[str],
        content: Optional[bytes],
        folder: Optional[str] = None,
    ) -> str:
        """
        Store an uploaded image and return its public URL.

        Returns:
            "/recipes/medias/[<sanitized-folder>/]<generated-filename>"

        Raises:
            ValidationError: No/empty/oversized payload.
            FileStorageError: The folder or file could not be written.
        """
        self.validate_payload(content)

        destination, safe_folder = self.media.resolve_upload_folder(folder)
        stored_name = generate_upload_filename(filename)
        stored_path = await self.media.store_bytes(destination, stored_name, content)

        url = self.media.public_url(stored_path)
        logger.info(
            "Upload stored: original=%s folder=%s url=%s",
            filename or "unknown",
            safe_folder or "/",
            url,
        )
        return url


# ── Singleton Instance ────────────────────────────────────────────────────
upload_service = UploadService()
