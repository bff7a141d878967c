# app/services/prompts.py
"""
Prompt creation, lookup and serialization.

Category and image references are plain ids; they are checked here, at write time.
"""
import math
import uuid

from app.core.errors import CategoryNotFound, InvalidImageReference, PromptNotFound, ValidationError
from app.models.category import Category
from app.models.image import Image
from app.models.prompt import Prompt, PromptStatus
from app.services.images import image_to_dict
from app.services.lifecycle import GenerationQueue, initial_status


def _category_summary(c: Category) -> dict:
    """Short embedded form used inside serialized prompts."""
    return {"id": str(c.id), "name": c.name, "description": c.description}


async def require_category(category_id) -> Category:
    category = await Category.get_or_none(id=category_id)
    if not category:
        raise CategoryNotFound()
    return category


async def resolve_image_ids(image_ids: list) -> list[str]:
    """
    Check that every id names an existing Image; any miss fails the whole list.
    A repeated id counts as a miss, since it cannot name a second image.
    """
    ordered = [str(i) for i in image_ids]
    if not ordered:
        return []
    found = await Image.filter(id__in=ordered).count()
    if found != len(ordered):
        raise InvalidImageReference()
    return ordered


def _clean_text(prompt_text: str | None) -> str:
    text = (prompt_text or "").strip()
    if not text:
        raise ValidationError("promptText is required", code="PROMPT_TEXT_REQUIRED")
    return text


async def submit_prompt(
    queue: GenerationQueue,
    token_id: str,
    prompt_text: str,
    category_id=None,
    image_ids: list | None = None,
    count: int = 1,
    size: str = "1024x1024",
) -> Prompt:
    """
    Anonymous submission. With images the prompt is done immediately;
    without, it is queued and handed to the generation queue.
    """
    text = _clean_text(prompt_text)
    if category_id:
        await require_category(category_id)
    ids = await resolve_image_ids(image_ids or [])

    prompt = await Prompt.create(
        prompt_text=text,
        category_id=category_id or None,
        image_ids=ids,
        status=initial_status(ids),
        created_by=token_id,
    )
    if prompt.status == PromptStatus.QUEUED:
        queue.submit(prompt.id, text, count=count, size=size)
    return prompt


async def create_admin_prompt(
    admin_id,
    prompt_text: str,
    image_record_ids: list[str],
    category_id=None,
    status: PromptStatus = PromptStatus.DONE,
) -> Prompt:
    """Admin direct-create: status is taken as given and no generation is scheduled."""
    text = _clean_text(prompt_text)
    if category_id:
        await require_category(category_id)
    return await Prompt.create(
        prompt_text=text,
        category_id=category_id or None,
        image_ids=image_record_ids,
        status=status,
        created_by=f"admin:{admin_id}",
    )


async def get_prompt(prompt_id) -> Prompt:
    prompt = await Prompt.get_or_none(id=prompt_id)
    if not prompt:
        raise PromptNotFound()
    return prompt


async def serialize_prompts(prompts: list[Prompt]) -> list[dict]:
    """Join prompts with their category and images using two batched queries."""
    category_ids = {p.category_id for p in prompts if p.category_id}
    image_ids = {i for p in prompts for i in (p.image_ids or [])}

    categories = {}
    if category_ids:
        categories = {c.id: c for c in await Category.filter(id__in=list(category_ids))}
    images = {}
    if image_ids:
        images = {str(img.id): img for img in await Image.filter(id__in=list(image_ids))}

    items = []
    for p in prompts:
        category = categories.get(_as_uuid(p.category_id)) if p.category_id else None
        items.append({
            "id": str(p.id),
            "promptText": p.prompt_text,
            "category": _category_summary(category) if category else None,
            # deleted images simply drop out of the listing
            "images": [image_to_dict(images[i]) for i in (p.image_ids or []) if i in images],
            "status": p.status.value if isinstance(p.status, PromptStatus) else p.status,
            "createdBy": p.created_by,
            "createdAt": p.created_at.isoformat() if p.created_at else None,
            "updatedAt": p.updated_at.isoformat() if p.updated_at else None,
        })
    return items


async def serialize_prompt(prompt: Prompt) -> dict:
    return (await serialize_prompts([prompt]))[0]


def _as_uuid(value) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


async def list_prompts(
    category_id=None,
    status: PromptStatus | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[dict], dict]:
    """Newest first, filtered; returns (items, pagination)."""
    qs = Prompt.all().order_by("-created_at")
    if category_id:
        qs = qs.filter(category_id=category_id)
    if status:
        qs = qs.filter(status=status)

    total = await qs.count()
    rows = await qs.offset((page - 1) * limit).limit(limit)
    pagination = {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit)}
    return await serialize_prompts(rows), pagination
