"""
Cyber Kitchen Backend — Recipe Import Route Handler
=====================================================

What:  POST /api/import-recipe — scrape a recipe page into the Recipe shape.
How:   Validates the URL field and delegates to RecipeImporter.
Who:   Called by the frontend's "Import from URL" dialog.

The returned recipe is not saved; the frontend appends it to its collection
and calls POST /api/recipes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends

from cyberkitchen.dependencies import get_recipe_importer
from cyberkitchen.exceptions import ValidationError
from cyberkitchen.schemas.recipe import ErrorResponse, ImportRecipeRequest, Recipe
from cyberkitchen.services.import_service import RecipeImporter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Import"])


@router.post(
    "/import-recipe",
    response_model=Recipe,
    responses={
        200: {"description": "Normalized recipe", "model": Recipe},
        400: {"description": "No URL provided", "model": ErrorResponse},
        404: {"description": "No JSON-LD recipe data on the page", "model": ErrorResponse},
        500: {"description": "Page could not be fetched", "model": ErrorResponse},
    },
    summary="Import a recipe from a web page",
    description=(
        "Fetches the page, reads its schema.org JSON-LD Recipe data, and "
        "downloads the recipe image into the media folder when one is declared. "
        "A failed image download does not fail the import; `imageUrl` is then empty."
    ),
)
async def import_recipe(
    payload: Optional[ImportRecipeRequest] = Body(default=None),
    importer: RecipeImporter = Depends(get_recipe_importer),
) -> Recipe:
    url = payload.url.strip() if payload and payload.url else ""
    if not url:
        raise ValidationError(message="No URL provided", field="url")

    logger.info("Received import request: url=%s", url)
    return await importer.import_recipe(url)
