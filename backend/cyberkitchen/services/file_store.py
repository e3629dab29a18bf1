"""
Cyber Kitchen Backend — JSON File Recipe Store
================================================

What:  Persists the whole recipe collection as one pretty-printed JSON file.
How:   load() reads and parses the file; save() writes a sibling temp file
       and swaps it into place with os.replace.
Who:   Backs GET /api/recipes and POST /api/recipes.

Failure Semantics:
    - File absent                → []
    - File unparsable / not list → [] (logged, never raised)
    - File unreadable (OSError)  → FileStorageError (500)
    - Write fails (OSError)      → FileStorageError (500), old file untouched

Concurrency:
    No locking. Two overlapping saves each replace the file; the last
    os.replace wins. Readers never observe a half-written document.
"""

import json
import logging
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from cyberkitchen.config import settings
from cyberkitchen.exceptions import FileStorageError
from cyberkitchen.services.repository_base import RecipeCollection, RecipeRepository

logger = logging.getLogger(__name__)


class JsonFileRecipeRepository(RecipeRepository):
    """Recipe repository backed by a single JSON document on disk."""

    def __init__(self, path: Optional[Path] = None):
        """
        Args:
            path: Override the recipes file location (used in tests).
                  If None, uses settings.recipes_file.
        """
        self.path = Path(path or settings.recipes_file)

    async def load(self) -> RecipeCollection:
        if not await aiofiles.os.path.exists(self.path):
            return []

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except UnicodeDecodeError as e:
            logger.warning("Recipes file %s is not UTF-8 (%s); returning []", self.path, e)
            return []
        except OSError as e:
            logger.error("Failed to read recipes file %s: %s", self.path, str(e))
            raise FileStorageError(
                message="Failed to read file",
                context={"path": str(self.path), "os_error": str(e)},
            )

        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            # Corrupt or empty file reads as an empty collection
            logger.warning("Recipes file %s is not valid JSON (%s); returning []", self.path, e)
            return []

        if not isinstance(data, list):
            logger.warning(
                "Recipes file %s holds a %s, not a list; returning []",
                self.path,
                type(data).__name__,
            )
            return []

        return data

    async def save(self, recipes: RecipeCollection) -> int:
        document = json.dumps(recipes, indent=2, ensure_ascii=False)
        tmp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex}.tmp")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(document)
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to save recipes file %s: %s", self.path, str(e))
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise FileStorageError(
                message="Failed to save file",
                context={"path": str(self.path), "os_error": str(e)},
            )

        logger.info("Saved %d recipes to %s", len(recipes), self.path.name)
        return len(recipes)


# ── Singleton Instance ────────────────────────────────────────────────────
recipe_repository = JsonFileRecipeRepository()
