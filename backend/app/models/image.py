# app/models/image.py
import uuid
from tortoise import fields, models


class Image(models.Model):
    """
    Metadata of an image stored on the external image host.
    - url: Durable public URL returned by the host
    - storage_id: Host-side identifier used for deletion (Cloudinary public_id)
    Both are written once at creation and never updated.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    url = fields.CharField(max_length=1024)
    storage_id = fields.CharField(max_length=255)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "images"
