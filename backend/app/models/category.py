# app/models/category.py
import uuid
from tortoise import fields, models


class Category(models.Model):
    """Named tag usable by prompts. Name uniqueness is not enforced."""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=128)
    description = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "categories"
