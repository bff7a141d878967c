# app/services/images.py
"""
Image record manager: keeps the local Image table in step with the external image host.
"""
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable

from app.core.errors import ImageNotFound, UpstreamError, ValidationError
from app.models.image import Image
from app.services.image_host import ImageHost

logger = logging.getLogger("uvicorn.error")


@dataclass
class UploadFilePart:
    """One uploaded file, already read into memory."""
    filename: str
    content_type: str | None
    data: bytes


def image_to_dict(img: Image) -> dict:
    return {
        "id": str(img.id),
        "url": img.url,
        "storageId": img.storage_id,
        "createdAt": img.created_at.isoformat() if img.created_at else None,
    }


class ImageManager:
    def __init__(self, host: ImageHost, upload_folder: str | None = None,
                 max_upload_bytes: int = 10 * 1024 * 1024):
        self.host = host
        self.upload_folder = upload_folder
        self.max_upload_bytes = max_upload_bytes

    def validate_part(self, part: UploadFilePart) -> None:
        if not (part.content_type or "").startswith("image/"):
            raise ValidationError(f"File '{part.filename}' is not an image", code="INVALID_FILE_TYPE")
        if not part.data:
            raise ValidationError(f"File '{part.filename}' is empty", code="EMPTY_FILE")
        if len(part.data) > self.max_upload_bytes:
            raise ValidationError(
                f"File '{part.filename}' exceeds the {self.max_upload_bytes} byte limit",
                code="FILE_TOO_LARGE",
            )

    async def create(self, data: bytes | str, filename: str = "upload", folder: str | None = None) -> Image:
        """Send data to the image host, then persist the returned url + storage id."""
        result = await self.host.upload(data, folder=folder or self.upload_folder, filename=filename)
        return await Image.create(url=result.url, storage_id=result.storage_id)

    async def upload(self, part: UploadFilePart) -> Image:
        self.validate_part(part)
        return await self.create(part.data, filename=part.filename)

    async def upload_many(
        self,
        items: Iterable,
        read: Callable[[object], Awaitable[UploadFilePart]] | None = None,
    ) -> list[Image]:
        """
        Upload files one by one. A failing file is logged and skipped;
        only when every file fails does the whole call fail.

        Args:
            items: UploadFilePart objects, or raw uploads when read is given
            read: Turns one raw upload into an UploadFilePart; called inside the
                loop so only one file is held in memory at a time

        Raises:
            UpstreamError: no file could be stored
        """
        created: list[Image] = []
        names: list[str] = []
        for item in items:
            name = getattr(item, "filename", None) or "upload"
            names.append(name)
            try:
                part = await read(item) if read is not None else item
                created.append(await self.upload(part))
            except (ValidationError, UpstreamError) as exc:
                logger.warning("[images] upload of %s failed: %s", name, exc.message)
            except Exception:
                logger.error("[images] upload of %s failed unexpectedly", name, exc_info=True)
        if not created:
            raise UpstreamError("Failed to upload any images", code="UPLOAD_FAILED",
                                context={"files": names})
        return created

    async def create_from_url(self, url: str) -> Image:
        """Record an image that already lives at url (no host upload)."""
        storage_id = f"admin-upload-{int(time.time() * 1000)}-{secrets.token_hex(5)}"
        return await Image.create(url=url, storage_id=storage_id)

    async def get(self, image_id) -> Image:
        img = await Image.get_or_none(id=image_id)
        if not img:
            raise ImageNotFound()
        return img

    async def delete(self, image_id) -> None:
        """
        Delete on the host first, then locally. A host failure is logged and the
        local record is removed anyway. Prompts that reference the image are left as is.
        """
        img = await self.get(image_id)
        try:
            await self.host.delete(img.storage_id)
        except UpstreamError as exc:
            logger.warning("[images] host delete failed for %s (%s); removing local record anyway",
                           img.storage_id, exc.context or exc.message)
        await img.delete()
