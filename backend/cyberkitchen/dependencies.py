"""
Cyber Kitchen Backend — FastAPI Dependency Providers
======================================================

What:  Functions handing the service singletons to route handlers.
How:   Routes declare `Depends(get_...)`; tests replace them through
       `app.dependency_overrides` (e.g. an InMemoryRecipeRepository, or a
       RecipeImporter wired to httpx.MockTransport).
"""

from cyberkitchen.services.file_store import recipe_repository
from cyberkitchen.services.import_service import RecipeImporter, recipe_importer
from cyberkitchen.services.media_service import MediaManager, media_manager
from cyberkitchen.services.repository_base import RecipeRepository
from cyberkitchen.services.upload_service import UploadService, upload_service


def get_recipe_repository() -> RecipeRepository:
    return recipe_repository


def get_media_manager() -> MediaManager:
    return media_manager


def get_upload_service() -> UploadService:
    return upload_service


def get_recipe_importer() -> RecipeImporter:
    return recipe_importer
