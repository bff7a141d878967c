# app/api/routers/images.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status

from app.api.deps import get_context, require_admin
from app.core.context import AppContext
from app.core.errors import ValidationError
from app.services.images import UploadFilePart, image_to_dict

router = APIRouter(prefix="/images", tags=["images"])


async def _read_part(upload: UploadFile, max_bytes: int) -> UploadFilePart:
    # one byte past the limit is enough for validation to reject an oversize file
    try:
        data = await upload.read(max_bytes + 1)
    finally:
        await upload.close()
    return UploadFilePart(filename=upload.filename or "upload", content_type=upload.content_type, data=data)


@router.post("/upload", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def upload_image(
    image: UploadFile | None = File(default=None),
    ctx: AppContext = Depends(get_context),
):
    """
    Upload one image (multipart field "image") to the image host and record it.

    Raises:
        ValidationError (400): no file, not an image, empty or too large
        UpstreamError (500): the image host rejected the upload
    """
    if image is None:
        raise ValidationError("No image file provided", code="NO_FILE")
    record = await ctx.images.upload(await _read_part(image, ctx.settings.max_upload_bytes))
    return {"success": True, "message": "Image uploaded successfully", "data": image_to_dict(record)}


@router.post("/upload-multiple", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def upload_multiple_images(
    images: List[UploadFile] | None = File(default=None),
    ctx: AppContext = Depends(get_context),
):
    """
    Upload several images (multipart field "images"), one after another.

    A file that fails is skipped and the rest still go through; the request
    only fails when no file could be stored.

    Raises:
        ValidationError (400): no files, or more than MAX_UPLOAD_FILES
        UpstreamError (500): every file failed
    """
    if not images:
        raise ValidationError("No image files provided", code="NO_FILE")
    if len(images) > ctx.settings.max_upload_files:
        raise ValidationError(f"At most {ctx.settings.max_upload_files} files per request", code="TOO_MANY_FILES")
    max_bytes = ctx.settings.max_upload_bytes
    records = await ctx.images.upload_many(images, read=lambda f: _read_part(f, max_bytes))
    return {
        "success": True,
        "message": f"{len(records)} image(s) uploaded successfully",
        "data": [image_to_dict(r) for r in records],
    }


@router.get("/{image_id}")
async def get_image(image_id: uuid.UUID, ctx: AppContext = Depends(get_context)):
    """Public: image record by id."""
    return {"success": True, "data": image_to_dict(await ctx.images.get(image_id))}


@router.delete("/{image_id}", dependencies=[Depends(require_admin)])
async def delete_image(image_id: uuid.UUID, ctx: AppContext = Depends(get_context)):
    """
    Delete an image from the host and from the database.
    If the host delete fails the local record is still removed.

    Raises:
        ImageNotFound (404): no such image
    """
    await ctx.images.delete(image_id)
    return {"success": True, "message": "Image deleted successfully"}
