"""
Cyber Kitchen Backend — Recipe Collection Route Handlers
==========================================================

What:  GET /api/recipes (load the collection) and POST /api/recipes (replace it).
How:   Thin wrappers around the RecipeRepository dependency.
Who:   Called by the frontend on startup and after every edit.

The collection is stored exactly as sent: any extra keys the frontend keeps
on a recipe (ids, categories, ...) survive a save/load round trip.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from cyberkitchen.dependencies import get_recipe_repository
from cyberkitchen.schemas.recipe import ErrorResponse, SaveRecipesResponse
from cyberkitchen.services.repository_base import RecipeRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Recipes"])


@router.get(
    "/recipes",
    response_model=List[Dict[str, Any]],
    responses={
        200: {"description": "The full recipe collection (empty if none or corrupt)"},
        500: {"description": "Recipes file could not be read", "model": ErrorResponse},
    },
    summary="List all recipes",
)
async def list_recipes(
    repository: RecipeRepository = Depends(get_recipe_repository),
) -> List[Dict[str, Any]]:
    return await repository.load()


@router.post(
    "/recipes",
    response_model=SaveRecipesResponse,
    responses={
        200: {"description": "Collection replaced", "model": SaveRecipesResponse},
        500: {"description": "Recipes file could not be written", "model": ErrorResponse},
    },
    summary="Replace the whole recipe collection",
    description=(
        "Overwrites the stored collection with the request body. There are no "
        "partial updates: send every recipe on each save."
    ),
)
async def save_recipes(
    recipes: List[Dict[str, Any]] = Body(..., description="Every recipe, in display order"),
    repository: RecipeRepository = Depends(get_recipe_repository),
) -> SaveRecipesResponse:
    count = await repository.save(recipes)
    return SaveRecipesResponse(success=True, count=count)
