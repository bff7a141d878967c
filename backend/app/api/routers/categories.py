# app/api/routers/categories.py
import uuid

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import require_admin, require_anon
from app.schemas.category import CategoryIn
from app.services import categories as category_service

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", dependencies=[Depends(require_anon)])
async def list_categories():
    """List all categories, newest first (anonymous token required)."""
    rows = await category_service.list_categories()
    return {"success": True, "data": [category_service.category_to_dict(c) for c in rows]}


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_category(body: CategoryIn):
    """
    Create a category (admin only).

    Raises:
        ValidationError (400): name missing or blank
    """
    category = await category_service.create_category(body.name, body.description)
    return {"success": True, "message": "Category created", "data": category_service.category_to_dict(category)}


@router.put("/{category_id}", dependencies=[Depends(require_admin)])
async def update_category(category_id: uuid.UUID, body: CategoryIn):
    """
    Update name and/or description (admin only). Omitted fields keep their value.

    Raises:
        CategoryNotFound (404): no such category
    """
    category = await category_service.update_category(category_id, body.name, body.description)
    return {"success": True, "message": "Category updated", "data": category_service.category_to_dict(category)}


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_category(category_id: uuid.UUID):
    """
    Delete a category (admin only). Refused while any prompt still uses it.

    Raises:
        CategoryInUse (409): referenced by at least one prompt
        CategoryNotFound (404): no such category
    """
    await category_service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
