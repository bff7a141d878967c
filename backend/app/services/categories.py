# app/services/categories.py
from app.core.errors import CategoryInUse, CategoryNotFound, ValidationError
from app.models.category import Category
from app.models.prompt import Prompt


def category_to_dict(c: Category) -> dict:
    return {
        "id": str(c.id),
        "name": c.name,
        "description": c.description,
        "createdAt": c.created_at.isoformat() if c.created_at else None,
        "updatedAt": c.updated_at.isoformat() if c.updated_at else None,
    }


async def list_categories() -> list[Category]:
    return await Category.all().order_by("-created_at")


async def create_category(name: str | None, description: str | None = None) -> Category:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required", code="CATEGORY_NAME_REQUIRED")
    return await Category.create(name=name, description=description)


async def update_category(category_id, name: str | None = None, description: str | None = None) -> Category:
    """Only fields that are provided change; an explicitly blank name is rejected."""
    category = await Category.get_or_none(id=category_id)
    if not category:
        raise CategoryNotFound()
    if name is not None:
        if not name.strip():
            raise ValidationError("Category name cannot be empty", code="CATEGORY_NAME_REQUIRED")
        category.name = name.strip()
    if description is not None:
        category.description = description
    await category.save()
    return category


async def delete_category(category_id) -> None:
    """
    Raises:
        CategoryInUse: at least one prompt references the category (nothing is changed)
        CategoryNotFound: no such category
    """
    in_use = await Prompt.filter(category_id=category_id).count()
    if in_use > 0:
        raise CategoryInUse(in_use)
    deleted = await Category.filter(id=category_id).delete()
    if not deleted:
        raise CategoryNotFound()
