"""
Cyber Kitchen Backend — Pydantic Request/Response Schemas
===========================================================

What:  Pydantic models defining the API contract between frontend and backend.
How:   FastAPI uses these models to validate request bodies, serialize responses,
       and generate the OpenAPI documentation.

Naming:
    The frontend speaks camelCase (`imageUrl`, `oldPath`). Python attributes
    are snake_case with camelCase aliases; responses are serialized by alias.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Domain Model
# ══════════════════════════════════════════════════════════════════════════


DEFAULT_SERVINGS = 4


class Recipe(CamelModel):
    """
    What:  The normalized recipe shape produced by the importer.
    Who:   Returned by POST /api/import-recipe; the frontend adds it to its
           collection and saves the whole collection with POST /api/recipes.
    """

    title: str = Field(description="Recipe name")
    description: str = Field(default="", description="Short description")
    ingredients: List[str] = Field(default_factory=list, description="Ingredient lines in order")
    instructions: str = Field(default="", description="Steps separated by blank lines")
    image_url: str = Field(default="", description="Relative media URL or empty")
    servings: int = Field(default=DEFAULT_SERVINGS, description="Number of servings")
    prep_time: str = Field(default="", description="ISO-8601 duration or empty")
    cook_time: str = Field(default="", description="ISO-8601 duration or empty")
    source_url: str = Field(default="", description="Page the recipe was imported from")


# ══════════════════════════════════════════════════════════════════════════
# Request Models: optional fields so missing values become 400, not 422
# ══════════════════════════════════════════════════════════════════════════


class PathRequest(CamelModel):
    """Body of DELETE /api/file and DELETE /api/folder."""

    path: Optional[str] = Field(default=None, description="Media path to delete")


class RenameFolderRequest(CamelModel):
    """Body of POST /api/rename-folder."""

    old_path: Optional[str] = Field(default=None, description="Existing folder path")
    new_path: Optional[str] = Field(default=None, description="Destination folder path")


class ImportRecipeRequest(CamelModel):
    """Body of POST /api/import-recipe."""

    url: Optional[str] = Field(default=None, description="Page URL carrying JSON-LD recipe data")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SaveRecipesResponse(BaseModel):
    success: bool = True
    count: int = Field(description="Number of recipes written")


class UploadResponse(BaseModel):
    path: str = Field(description="Public URL of the stored image")


class SuccessResponse(BaseModel):
    """
    Result of delete/rename operations.

    `message` is only present for no-op results (e.g. renaming a folder
    that does not exist).
    """

    success: bool = True
    message: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or unhealthy")
    version: str
    recipes_file: str = Field(description="present, absent, or unreadable")
    media_root: str = Field(description="writable or unwritable")
    uptime_seconds: float


class ErrorResponse(BaseModel):
    """Shape of every error body produced by the global exception handlers."""

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable explanation")
    details: Optional[dict] = None
    request_id: Optional[str] = None
