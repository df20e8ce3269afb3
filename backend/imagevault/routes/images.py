"""
ImageVault Backend — Image Record Route Handlers
==================================================

What:  POST/GET /api/images and GET/PUT /api/images/{id}.
Why:   The whole public API of the service.
How:   Extracts form fields, path ids and JSON bodies, delegates to
       UploadService and ImageService, returns their results.
       No try/except here: errors propagate to the global handlers.

Request Flow (POST):
    1. FastAPI parses the multipart body (python-multipart)
    2. UploadService streams the `image` part to the upload directory
    3. ImageService inserts the record with the stored path
    4. 201 Created with the insert acknowledgement
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from imagevault.schemas.image import (
    ErrorResponse,
    ImageRecord,
    ImageUpdate,
    InsertResult,
    UpdateResult,
)
from imagevault.services.image_service import ImageService, get_image_service
from imagevault.services.upload_service import UploadService, get_upload_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/images", tags=["Images"])


@router.post("/", status_code=201, response_model=InsertResult, include_in_schema=False)
@router.post(
    "",
    status_code=201,
    response_model=InsertResult,
    responses={
        201: {"description": "Image stored and record created", "model": InsertResult},
        500: {"description": "Upload missing, write failed or insert failed", "model": ErrorResponse},
    },
    summary="Upload an image with its description",
)
async def create_image(
    image: Optional[UploadFile] = File(default=None, description="The image file, stored as-is"),
    name: Optional[str] = Form(default=None),
    type: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    color: Optional[str] = Form(default=None),
    life_span: Optional[str] = Form(default=None, alias="lifeSpan"),
    uploads: UploadService = Depends(get_upload_service),
    service: ImageService = Depends(get_image_service),
) -> InsertResult:
    """
    Store the uploaded file, then insert its record.

    Text fields are not validated. If the insert fails the stored file is
    left in place.
    """
    try:
        _, image_path = await uploads.store_upload(image)
    finally:
        if image is not None:
            await image.close()

    return await service.create_image(
        image_path=image_path,
        name=name,
        type=type,
        description=description,
        color=color,
        life_span=life_span,
    )


@router.get("/", response_model=List[ImageRecord], include_in_schema=False)
@router.get(
    "",
    response_model=List[ImageRecord],
    responses={500: {"description": "Store error", "model": ErrorResponse}},
    summary="List all image records",
)
async def list_images(
    response: Response,
    service: ImageService = Depends(get_image_service),
) -> List[ImageRecord]:
    """
    Every record, unsorted and unpaginated.

    X-Total-Count mirrors the array length for clients that only need a count.
    """
    records = await service.list_images()
    response.headers["X-Total-Count"] = str(len(records))
    return records


@router.get(
    "/{image_id}",
    response_model=ImageRecord,
    responses={
        404: {"description": "No record with this id", "model": ErrorResponse},
        500: {"description": "Malformed id or store error", "model": ErrorResponse},
    },
    summary="Get one image record",
)
async def get_image(
    image_id: str,
    service: ImageService = Depends(get_image_service),
) -> ImageRecord:
    """
    A malformed id is a 500 (the id parser's message), an unknown
    well-formed id is a 404.
    """
    return await service.get_image(image_id)


@router.put(
    "/{image_id}",
    response_model=UpdateResult,
    responses={500: {"description": "Malformed id or store error", "model": ErrorResponse}},
    summary="Update the text fields of an image record",
)
async def update_image(
    image_id: str,
    changes: Optional[ImageUpdate] = None,
    service: ImageService = Depends(get_image_service),
) -> UpdateResult:
    """
    Update name, type, description, color and lifespan.

    Unknown ids are not a 404: the response reports matchedCount 0.
    """
    return await service.update_image(image_id, changes)
