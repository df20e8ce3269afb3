"""
ImageVault Backend — Uploaded File Serving
============================================

What:  GET /uploads/{filename} returns a stored image verbatim.
Why:   imagePath values in records are URLs under /uploads.
How:   UploadService.resolve() confines the lookup to the upload directory;
       FileResponse streams the file and guesses the media type from its name.

No authentication: anyone who knows a filename can fetch it.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from imagevault.exceptions import NotFoundError
from imagevault.services.upload_service import UploadService, get_upload_service

router = APIRouter(tags=["Uploads"])


@router.get(
    "/uploads/{filename:path}",
    summary="Serve an uploaded image file",
    responses={
        200: {"description": "The stored file"},
        404: {"description": "File not found"},
    },
)
async def serve_upload(
    filename: str,
    uploads: UploadService = Depends(get_upload_service),
):
    path = uploads.resolve(filename)
    if path is None:
        raise NotFoundError(resource_id=filename)
    return FileResponse(path=str(path))
