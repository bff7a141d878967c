# app/models/prompt.py
"""
Database model for prompts.
A prompt is the central entity: user text, an optional category, the images
produced for it and the generation status.
"""
import uuid
from enum import Enum
from tortoise import fields, models


class PromptStatus(str, Enum):
    QUEUED = "queued"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


class Prompt(models.Model):
    """
    Prompt database model.

    References (weak, checked at write time, never cascaded):
    - category_id: Category UUID or null
    - image_ids: ordered list of Image UUID strings

    created_by is the anonymous tokenId of the submitter, or "admin:<admin id>"
    for prompts created through the admin API.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    prompt_text = fields.TextField()
    category_id = fields.UUIDField(null=True, index=True)
    image_ids = fields.JSONField(default=list)
    status = fields.CharEnumField(PromptStatus, max_length=16, default=PromptStatus.QUEUED, index=True)
    created_by = fields.CharField(max_length=128)
    created_at = fields.DatetimeField(auto_now_add=True, index=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "prompts"
