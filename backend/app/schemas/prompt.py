# app/schemas/prompt.py
"""
Pydantic schemas for prompt submission and admin prompt creation.
"""
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.prompt import PromptStatus


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class GeneratePromptIn(BaseModel):
    """
    Request model for anonymous prompt submission.
    Supplying imageIds marks the prompt done immediately (no generation).
    """
    promptText: Optional[str] = None
    categoryId: Optional[uuid.UUID] = None
    count: int = Field(default=1, ge=1, le=4)  # Images requested from the generator
    size: str = Field(default="1024x1024", pattern=r"^\d{2,4}x\d{2,4}$")
    imageIds: Optional[List[uuid.UUID]] = None

    blank_category = field_validator("categoryId", mode="before")(_blank_to_none)


class AdminPromptIn(BaseModel):
    """
    Request model for admin prompt creation.
    imageUrls are recorded as images as-is (they are assumed to be hosted already).
    """
    promptText: Optional[str] = None
    categoryId: Optional[uuid.UUID] = None
    status: PromptStatus = PromptStatus.DONE
    imageUrls: Optional[List[str]] = None

    blank_category = field_validator("categoryId", mode="before")(_blank_to_none)
