# app/api/routers/user.py
from fastapi import APIRouter, Depends

from app.api.deps import require_anon
from app.core.errors import ValidationError
from app.models.anon_user import AnonUser
from app.schemas.favorite import FavoriteIn
from app.services import favorites as favorite_service

router = APIRouter(prefix="/user", tags=["user"])


def _prompt_id(body: FavoriteIn):
    if body.promptId is None:
        raise ValidationError("promptId is required", code="PROMPT_ID_REQUIRED")
    return body.promptId


@router.get("/favorites")
async def get_favorites(user: AnonUser = Depends(require_anon)):
    """
    List the caller's favorite prompts in the order they were added,
    with category and image details. Favorites whose prompt was deleted are skipped.
    """
    return {"success": True, "data": await favorite_service.list_favorites(user)}


@router.post("/favorites/add")
async def add_favorite(body: FavoriteIn, user: AnonUser = Depends(require_anon)):
    """
    Add a prompt to favorites. Adding one that is already there succeeds without change.

    Returns:
        dict: success, message, data (favorite prompt ids in order)

    Raises:
        ValidationError (400): promptId missing
        PromptNotFound (404): prompt does not exist
    """
    added, ids = await favorite_service.add_favorite(user, _prompt_id(body))
    return {"success": True, "message": "Added to favorites" if added else "Already in favorites", "data": ids}


@router.post("/favorites/remove")
async def remove_favorite(body: FavoriteIn, user: AnonUser = Depends(require_anon)):
    """Remove a prompt from favorites; removing one that is not there is not an error."""
    ids = await favorite_service.remove_favorite(user, _prompt_id(body))
    return {"success": True, "message": "Removed from favorites", "data": ids}
