# app/api/routers/prompts.py
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_context, require_anon
from app.core.context import AppContext
from app.models.anon_user import AnonUser
from app.models.prompt import PromptStatus
from app.schemas.prompt import GeneratePromptIn
from app.services import prompts as prompt_service

router = APIRouter(prefix="/prompts", tags=["prompts"])


@router.post("/generate")
async def generate_prompt(
    body: GeneratePromptIn,
    user: AnonUser = Depends(require_anon),
    ctx: AppContext = Depends(get_context),
):
    """
    Submit a prompt for image generation.

    Without imageIds the prompt is created "queued" and generation runs in the
    background; poll GET /prompts/{id} for the status. With imageIds (all of which
    must exist) the prompt is created "done" and nothing runs afterwards.

    Args:
        body: promptText (required), categoryId, imageIds, count, size
        user: Anonymous identity (from dependency)

    Returns:
        dict: success, message, data with id, promptText, images, status, createdAt

    Raises:
        ValidationError (400): promptText missing
        CategoryNotFound (404): categoryId does not exist
        InvalidImageReference (400): any imageId does not exist
    """
    prompt = await prompt_service.submit_prompt(
        ctx.generation,
        token_id=user.token_id,
        prompt_text=body.promptText,
        category_id=body.categoryId,
        image_ids=body.imageIds,
        count=body.count,
        size=body.size,
    )
    data = await prompt_service.serialize_prompt(prompt)
    return {
        "success": True,
        "message": "Prompt generation request accepted",
        "data": {k: data[k] for k in ("id", "promptText", "images", "status", "createdAt")},
    }


@router.get("", dependencies=[Depends(require_anon)])
async def list_prompts(
    category: Optional[uuid.UUID] = Query(default=None),
    status: Optional[PromptStatus] = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """List prompts newest first, optionally filtered by category and status."""
    items, pagination = await prompt_service.list_prompts(category, status, page, limit)
    return {"success": True, "data": items, "pagination": pagination}


@router.get("/{prompt_id}", dependencies=[Depends(require_anon)])
async def get_prompt(prompt_id: uuid.UUID):
    """Prompt detail with category and images; clients poll this for status changes."""
    prompt = await prompt_service.get_prompt(prompt_id)
    return {"success": True, "data": await prompt_service.serialize_prompt(prompt)}
