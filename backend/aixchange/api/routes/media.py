"""Media Routes — uploads, generated images, and file serving from the external images directory.

Invariants:
    - Served paths containing ".." answer 400; missing or non-regular files answer 404
    - Served files carry an extension-derived content type and an immutable cache header
    - Image generation failures answer 500 with the default-image fallback hint
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from aixchange.config import get_settings
from aixchange.core.errors import BusinessRuleError, ImageGenerationError, ResourceNotFoundError
from aixchange.core.filenames import (
    CACHE_CONTROL_IMMUTABLE, content_type_for, is_safe_relative_path, is_valid_folder,
)
from aixchange.infrastructure.image_store import ImageStore
from aixchange.schemas.media import GenerateImageRequest, GeneratedImage, ImageDetails, UploadedFile
from aixchange.services.image_service import ImageService, get_image_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["media"])


def get_image_store() -> ImageStore:
    return ImageStore(get_settings().external_images_path)


def _serve(path: str, store: ImageStore) -> FileResponse:
    if ".." in path or not is_safe_relative_path(path):
        raise BusinessRuleError("Invalid path", "INVALID_PATH")
    target = store.locate(path)
    if target is None:
        raise ResourceNotFoundError("File", path)
    return FileResponse(
        target,
        media_type=content_type_for(path),
        headers={"Cache-Control": CACHE_CONTROL_IMMUTABLE},
    )


@router.get("/api/external-images/{path:path}")
async def external_image(path: str, store: ImageStore = Depends(get_image_store)):
    return _serve(path, store)


@router.get("/public/{path:path}")
async def public_file(path: str, store: ImageStore = Depends(get_image_store)):
    return _serve(path, store)


@router.post("/api/upload", response_model=UploadedFile)
async def upload(
    file: UploadFile | None = File(None),
    folder: str = Form("solutions", alias="type"),
    images: ImageService = Depends(get_image_service),
):
    if file is None or not file.filename:
        raise BusinessRuleError("No file uploaded", "NO_FILE")
    if not is_valid_folder(folder):
        raise BusinessRuleError("Invalid upload type", "INVALID_FOLDER")
    stored = await images.save_upload(folder, file.filename, await file.read())
    return UploadedFile(url=stored.url, filename=stored.filename)


@router.post("/api/generate-image")
async def generate_image(
    body: GenerateImageRequest,
    images: ImageService = Depends(get_image_service),
):
    if not body.description or not body.description.strip():
        raise BusinessRuleError("Description is required", "DESCRIPTION_REQUIRED")
    try:
        stored = await images.generate_solution_image(body.description, body.title)
    except ImageGenerationError as e:
        logger.error(
            f"Image generation failed: {e.message}",
            extra={"error_code": e.code, "entity_id": body.solution_id},
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to generate image",
                "status": "error",
                "details": "AI image generation failed, using default image instead",
                "useDefaultImage": True,
                "defaultImagePath": get_settings().placeholder_image_path,
            },
        )
    return GeneratedImage(
        image_url=stored.url,
        filename=stored.filename,
        details=ImageDetails(size=images.size, format=images.format, location=stored.url),
    )
