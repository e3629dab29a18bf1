"""
Cyber Kitchen Backend — Media Manager
=======================================

What:  Manages the tree of folders and image files under the media root.
How:   Every client-supplied path is resolved to an absolute path first,
       then checked for containment inside the media root, then acted upon.
Who:   Called by the media routes, UploadService and RecipeImporter.

Security Model:
    1. Folder names for uploads are sanitized per segment: anything outside
       [A-Za-z0-9_-] becomes "_", so ".." turns into "__".
    2. Paths for delete/rename are resolved with Path.resolve() (collapses
       "..", follows symlinks) BEFORE the containment check.
    3. The resolved path must be a strict descendant of the resolved media
       root; the root itself is never deleted or renamed.

Path Forms Accepted:
    /recipes/medias/desserts/img-1.jpg   ← public URL (prefix is stripped)
    desserts/img-1.jpg                   ← relative to the media root
"""

import asyncio
import logging
import re
import shutil
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import aiofiles.os

from cyberkitchen.config import settings
from cyberkitchen.exceptions import AccessDeniedError, FileStorageError

logger = logging.getLogger(__name__)

# Characters allowed in a folder segment; everything else becomes "_"
UNSAFE_SEGMENT_CHARS = re.compile(r"[^A-Za-z0-9_-]")

# Both separators split nesting levels, whatever the host OS
PATH_SEPARATORS = re.compile(r"[/\\]")


def sanitize_folder(name: Optional[str]) -> str:
    """
    Turn a caller-supplied folder path into a safe relative POSIX path.

    Example:
        "Desserts/Crème brûlée" → "Desserts/Cr_me_br_l_e"
        "../etc"                → "__/etc"
        "a//b/"                 → "a/b"
    """
    if not name:
        return ""
    parts = [UNSAFE_SEGMENT_CHARS.sub("_", part) for part in PATH_SEPARATORS.split(name) if part]
    return "/".join(parts)


class MediaManager:
    """
    Owns the media root and every filesystem mutation under it.

    Directory Structure:
        recipes/medias/
        ├── import-1700000000000.jpg
        └── Desserts/
            └── Cakes/
                └── img-1700000000000-123456789.png
    """

    def __init__(self, media_root: Optional[Path] = None, url_prefix: Optional[str] = None):
        """
        Args:
            media_root: Override the media directory (used in tests).
            url_prefix: Override the public URL prefix (used in tests).
        """
        self.media_root = Path(media_root or settings.media_root).resolve()
        self.url_prefix = "/" + (url_prefix or settings.media_url_prefix).strip("/")
        self.media_root.mkdir(parents=True, exist_ok=True)
        logger.info("MediaManager initialized with media_root=%s", self.media_root)

    # ── Path Helpers ──────────────────────────────────────────────────────

    def public_url(self, path: Path) -> str:
        """Public URL of a file stored under the media root."""
        relative = Path(path).resolve().relative_to(self.media_root).as_posix()
        return f"{self.url_prefix}/{relative}"

    def resolve_media_path(self, raw_path: str) -> Path:
        """
        Resolve a client path to an absolute path inside the media root.

        Raises:
            AccessDeniedError: The resolved path is the media root itself or
                               lies outside it.
        """
        relative = raw_path.replace("\\", "/").lstrip("/")
        prefix = self.url_prefix.lstrip("/")
        if relative == prefix:
            relative = ""
        elif relative.startswith(prefix + "/"):
            relative = relative[len(prefix) + 1:]

        resolved = (self.media_root / relative).resolve()

        if self.media_root not in resolved.parents:
            logger.warning("Rejected path outside media root: %r → %s", raw_path, resolved)
            raise AccessDeniedError(path=raw_path, context={"resolved": str(resolved)})
        return resolved

    # ── Folder Operations ─────────────────────────────────────────────────

    def resolve_upload_folder(self, name: Optional[str]) -> Tuple[Path, str]:
        """
        Sanitize `name` and make sure the folder exists under the media root.

        Returns:
            Tuple of (absolute_folder_path, sanitized_relative_folder).
            The relative folder is "" when no name was given.
        """
        safe_folder = sanitize_folder(name)
        folder = self.media_root / safe_folder if safe_folder else self.media_root
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create upload folder %s: %s", folder, str(e))
            raise FileStorageError(
                message="Failed to create upload folder",
                context={"path": str(folder), "os_error": str(e)},
            )
        return folder, safe_folder

    async def delete_folder(self, raw_path: str) -> bool:
        """
        Recursively delete a folder (or a stray file) under the media root.

        Returns:
            True if something was deleted, False if the path was already absent.
        """
        target = self.resolve_media_path(raw_path)
        if not target.exists():
            logger.debug("Delete folder: already gone: %s", target)
            return False

        try:
            if target.is_dir():
                await asyncio.to_thread(shutil.rmtree, target)
            else:
                await aiofiles.os.remove(target)
        except OSError as e:
            logger.error("Failed to delete folder %s: %s", target, str(e))
            raise FileStorageError(
                message="Failed to delete folder",
                context={"path": str(target), "os_error": str(e)},
            )

        logger.info("Deleted folder: %s", target.relative_to(self.media_root))
        return True

    async def rename_folder(self, old_raw_path: str, new_raw_path: str) -> bool:
        """
        Move a folder to a new location under the media root.

        Both paths are resolved and checked before anything is touched.
        Missing parents of the destination are created.

        Returns:
            True if the folder was moved, False if the old folder does not exist.
        """
        source = self.resolve_media_path(old_raw_path)
        destination = self.resolve_media_path(new_raw_path)

        if not source.exists():
            logger.info("Rename folder: source not found, nothing to do: %s", source)
            return False

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            await aiofiles.os.rename(source, destination)
        except OSError as e:
            logger.error("Failed to rename folder %s → %s: %s", source, destination, str(e))
            raise FileStorageError(
                message="Failed to rename folder",
                context={"source": str(source), "destination": str(destination), "os_error": str(e)},
            )

        logger.info(
            "Renamed folder: %s → %s",
            source.relative_to(self.media_root),
            destination.relative_to(self.media_root),
        )
        return True

    # ── File Operations ───────────────────────────────────────────────────

    async def delete_file(self, raw_path: str) -> bool:
        """
        Delete a single file under the media root.

        Returns:
            True if the file was deleted, False if it was already absent.
        """
        target = self.resolve_media_path(raw_path)
        if not target.exists():
            logger.debug("Delete file: already gone: %s", target)
            return False

        try:
            await aiofiles.os.remove(target)
        except OSError as e:
            logger.error("Failed to delete file %s: %s", target, str(e))
            raise FileStorageError(
                message="Failed to delete file",
                context={"path": str(target), "os_error": str(e)},
            )

        logger.info("Deleted file: %s", target.relative_to(self.media_root))
        return True

    async def store_bytes(self, folder: Path, filename: str, content: bytes) -> Path:
        """
        Write `content` as `folder/filename` and return the absolute path.

        `filename` is generated by the caller and never contains separators.

        Raises:
            FileStorageError if the directory or file cannot be written.
        """
        absolute_path = folder / filename
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info(
            "File stored: %s (%d bytes)",
            absolute_path.relative_to(self.media_root).as_posix(),
            len(content),
        )
        return absolute_path


# ── Singleton Instance ────────────────────────────────────────────────────
media_manager = MediaManager()
