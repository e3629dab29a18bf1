"""
Cyber Kitchen Backend — Media Route Handlers
==============================================

What:  Image upload plus delete/rename of files and folders under the media root.
How:   Extracts request data, checks required fields, delegates to
       UploadService / MediaManager.
Who:   Called by the frontend's image picker and folder manager.

Route Inventory:
    POST   /api/upload          multipart: image (+ optional folder) → {path}
    DELETE /api/file            {path}                               → {success}
    DELETE /api/folder          {path}                               → {success}
    POST   /api/rename-folder   {oldPath, newPath}                   → {success[, message]}

Error responses (handled by global exception handlers):
    400: Missing file or path (ValidationError)
    403: Path resolves outside the media root (AccessDeniedError)
    500: Filesystem failure (FileStorageError)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile

from cyberkitchen.dependencies import get_media_manager, get_upload_service
from cyberkitchen.exceptions import ValidationError
from cyberkitchen.schemas.recipe import (
    ErrorResponse,
    PathRequest,
    RenameFolderRequest,
    SuccessResponse,
    UploadResponse,
)
from cyberkitchen.services.media_service import MediaManager
from cyberkitchen.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Media"])

PATH_ERRORS = {
    400: {"description": "No path provided", "model": ErrorResponse},
    403: {"description": "Path outside the media directory", "model": ErrorResponse},
    500: {"description": "Filesystem error", "model": ErrorResponse},
}


def _require_path(payload: Optional[PathRequest]) -> str:
    if payload is None or not payload.path:
        raise ValidationError(message="No path provided", field="path")
    return payload.path


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        400: {"description": "No file uploaded", "model": ErrorResponse},
        500: {"description": "Filesystem error", "model": ErrorResponse},
    },
    summary="Upload a recipe image",
    description=(
        "Stores the `image` file under the media root, inside the optional "
        "`folder` (nested with `/`, unsafe characters replaced by `_`). "
        "Returns the public URL of the stored image."
    ),
)
async def upload_image(
    image: Optional[UploadFile] = File(default=None, description="Image file"),
    folder: Optional[str] = Form(default=None, description="Destination folder, e.g. Desserts/Cakes"),
    uploads: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    if image is None:
        raise ValidationError(message="No file uploaded", field="image")

    try:
        content = await image.read()
        path = await uploads.store_upload(filename=image.filename, content=content, folder=folder)
    finally:
        await image.close()

    return UploadResponse(path=path)


@router.delete(
    "/file",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
    responses=PATH_ERRORS,
    summary="Delete a media file",
    description="Deleting a file that does not exist succeeds.",
)
async def delete_file(
    payload: Optional[PathRequest] = Body(default=None),
    media: MediaManager = Depends(get_media_manager),
) -> SuccessResponse:
    await media.delete_file(_require_path(payload))
    return SuccessResponse(success=True)


@router.delete(
    "/folder",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
    responses=PATH_ERRORS,
    summary="Delete a media folder recursively",
    description="Deleting a folder that does not exist succeeds.",
)
async def delete_folder(
    payload: Optional[PathRequest] = Body(default=None),
    media: MediaManager = Depends(get_media_manager),
) -> SuccessResponse:
    await media.delete_folder(_require_path(payload))
    return SuccessResponse(success=True)


@router.post(
    "/rename-folder",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Missing paths", "model": ErrorResponse},
        403: {"description": "Path outside the media directory", "model": ErrorResponse},
        500: {"description": "Filesystem error", "model": ErrorResponse},
    },
    summary="Rename (move) a media folder",
    description=(
        "Moves `oldPath` to `newPath`, creating missing parents. If `oldPath` "
        "does not exist the call succeeds with an explanatory message."
    ),
)
async def rename_folder(
    payload: Optional[RenameFolderRequest] = Body(default=None),
    media: MediaManager = Depends(get_media_manager),
) -> SuccessResponse:
    if payload is None or not payload.old_path or not payload.new_path:
        raise ValidationError(message="Missing paths", context={"fields": ["oldPath", "newPath"]})

    renamed = await media.rename_folder(payload.old_path, payload.new_path)
    if not renamed:
        return SuccessResponse(success=True, message="Old folder not found, nothing to rename")
    return SuccessResponse(success=True)
