# app/api/routers/admin.py
from __future__ import annotations

import asyncio
import datetime as dt
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from tortoise import timezone
from tortoise.functions import Count

from app.api.deps import get_context, require_admin, require_super_admin
from app.core.context import AppContext
from app.core.errors import InvalidCredentials, UsernameTaken, ValidationError
from app.core.security import ROLE_ADMIN, create_admin_token, hash_password, verify_password
from app.models.admin import Admin
from app.models.anon_user import AnonUser
from app.models.category import Category
from app.models.prompt import Prompt, PromptStatus
from app.schemas.auth import AdminCreateIn, AdminLoginIn
from app.schemas.prompt import AdminPromptIn
from app.services import prompts as prompt_service

router = APIRouter(prefix="/admin", tags=["admin"])


def _admin_to_dict(a: Admin) -> dict:
    """
    Convert Admin model instance to dictionary format for API responses.
    The password hash is never included.
    """
    return {
        "id": str(a.id),
        "username": a.username,
        "role": a.role,
        "createdAt": a.created_at.isoformat() if a.created_at else None,
    }


def _require_credentials(username: Optional[str], password: Optional[str]) -> tuple[str, str]:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("Username and password are required", code="CREDENTIALS_REQUIRED")
    return username, password


# ==============================================================================
# I. Authentication
# ==============================================================================
@router.post("/login")
async def login(body: AdminLoginIn):
    """
    Authenticate an admin and issue an admin token (24 hours by default).

    Unknown username and wrong password produce the same error, so the
    response does not reveal which one was wrong.

    Returns:
        dict: success, message, data with token and admin (id, username, role, createdAt)

    Raises:
        ValidationError (400): username or password missing
        InvalidCredentials (401): no such admin or wrong password
    """
    username, password = _require_credentials(body.username, body.password)
    admin = await Admin.get_or_none(username=username)
    if not admin or not verify_password(password, admin.password_hash):
        raise InvalidCredentials()
    return {
        "success": True,
        "message": "Admin authenticated",
        "data": {"token": create_admin_token(str(admin.id)), "admin": _admin_to_dict(admin)},
    }


# ==============================================================================
# II. Statistics
# ==============================================================================
async def _prompts_by_status() -> dict:
    counts = {s.value: 0 for s in PromptStatus}
    rows = await Prompt.annotate(count=Count("id")).group_by("status").values("status", "count")
    for row in rows:
        key = row["status"].value if isinstance(row["status"], PromptStatus) else row["status"]
        counts[key] = row["count"]
    return counts


@router.get("/stats", dependencies=[Depends(require_admin)])
async def get_stats():
    """
    Aggregate counts for the admin dashboard.

    Returns:
        dict: data with totalPrompts, totalCategories, totalAnonUsers,
              promptsByStatus (every status, zero when absent) and
              recentPrompts (created in the last 7 days)
    """
    week_ago = timezone.now() - dt.timedelta(days=7)
    total_prompts, total_categories, total_anon, by_status, recent = await asyncio.gather(
        Prompt.all().count(),
        Category.all().count(),
        AnonUser.all().count(),
        _prompts_by_status(),
        Prompt.filter(created_at__gte=week_ago).count(),
    )
    return {
        "success": True,
        "data": {
            "totalPrompts": total_prompts,
            "totalCategories": total_categories,
            "totalAnonUsers": total_anon,
            "promptsByStatus": by_status,
            "recentPrompts": recent,
        },
    }


# ==============================================================================
# III. Admin accounts (super admin only)
# ==============================================================================
@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_admin(body: AdminCreateIn, current: Admin = Depends(require_super_admin)):
    """
    Create a new admin account. New accounts always get the plain "admin" role.

    Raises:
        ValidationError (400): username or password missing
        UsernameTaken (409): username already exists
        InsufficientPrivilege (403): caller is not a super admin
    """
    username, password = _require_credentials(body.username, body.password)
    if await Admin.filter(username=username).exists():
        raise UsernameTaken()
    admin = await Admin.create(username=username, password_hash=hash_password(password), role=ROLE_ADMIN)
    return {"success": True, "message": "Admin created successfully", "data": _admin_to_dict(admin)}


@router.get("/list", dependencies=[Depends(require_super_admin)])
async def list_admins():
    """List all admin accounts, newest first."""
    rows = await Admin.all().order_by("-created_at")
    return {"success": True, "data": [_admin_to_dict(a) for a in rows]}


# ==============================================================================
# IV. Prompt moderation
# ==============================================================================
@router.post("/prompts", status_code=status.HTTP_201_CREATED)
async def create_prompt(
    body: AdminPromptIn,
    current: Admin = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    """
    Create a prompt directly with an explicit status (default "done").

    Each entry of imageUrls becomes an image record pointing at that URL.
    No generation is scheduled, whatever the status.

    Raises:
        ValidationError (400): promptText missing or status not one of queued/generating/done/failed
        CategoryNotFound (404): categoryId does not exist
    """
    if not (body.promptText or "").strip():
        raise ValidationError("promptText is required", code="PROMPT_TEXT_REQUIRED")
    if body.categoryId:
        await prompt_service.require_category(body.categoryId)

    image_ids = []
    for url in body.imageUrls or []:
        if url and url.strip():
            img = await ctx.images.create_from_url(url.strip())
            image_ids.append(str(img.id))

    prompt = await prompt_service.create_admin_prompt(
        admin_id=current.id,
        prompt_text=body.promptText,
        image_record_ids=image_ids,
        category_id=body.categoryId,
        status=body.status,
    )
    return {
        "success": True,
        "message": "Prompt created successfully",
        "data": await prompt_service.serialize_prompt(prompt),
    }


@router.get("/prompts", dependencies=[Depends(require_admin)])
async def list_all_prompts(
    category: Optional[uuid.UUID] = Query(default=None),
    status_: Optional[PromptStatus] = Query(default=None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
):
    """List every prompt, newest first, with optional category/status filters."""
    items, pagination = await prompt_service.list_prompts(category, status_, page, limit)
    return {"success": True, "data": items, "pagination": pagination}


@router.delete(
    "/prompts/{prompt_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_prompt(prompt_id: uuid.UUID):
    """
    Delete a prompt. Its images stay in place (records and hosted files);
    favorites pointing at it are cleaned up lazily when read.

    Raises:
        PromptNotFound (404): no such prompt
    """
    prompt = await prompt_service.get_prompt(prompt_id)
    await prompt.delete()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
