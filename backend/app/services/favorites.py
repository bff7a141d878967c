# app/services/favorites.py
"""
Favorites of an anonymous identity: an ordered set of prompt ids.

Rows point at prompts by plain id. When a favorited prompt has since been
deleted, reads skip it and remove the stale row.
"""
import logging

from tortoise.exceptions import OperationalError

from app.core.errors import PromptNotFound
from app.models.anon_user import AnonUser
from app.models.favorite import Favorite
from app.models.prompt import Prompt
from app.services.prompts import serialize_prompts

logger = logging.getLogger("uvicorn.error")


async def favorite_ids(user: AnonUser) -> list[str]:
    rows = await Favorite.filter(anon_user=user).order_by("id").values_list("prompt_id", flat=True)
    return [str(pid) for pid in rows]


async def add_favorite(user: AnonUser, prompt_id) -> tuple[bool, list[str]]:
    """
    Append prompt_id unless already present.

    Returns:
        (added, ids) where added is False when the prompt was already a favorite

    Raises:
        PromptNotFound: prompt_id does not exist
    """
    if not await Prompt.filter(id=prompt_id).exists():
        raise PromptNotFound()
    _, created = await Favorite.get_or_create(anon_user=user, prompt_id=prompt_id)
    return created, await favorite_ids(user)


async def remove_favorite(user: AnonUser, prompt_id) -> list[str]:
    """Removing an id that is not in the list is not an error."""
    await Favorite.filter(anon_user=user, prompt_id=prompt_id).delete()
    return await favorite_ids(user)


async def list_favorites(user: AnonUser) -> list[dict]:
    """Favorited prompts in the order they were added, joined with category and images."""
    rows = await Favorite.filter(anon_user=user).order_by("id")
    if not rows:
        return []
    wanted = [row.prompt_id for row in rows]
    prompts = {p.id: p for p in await Prompt.filter(id__in=wanted)}

    dangling = [row.id for row in rows if row.prompt_id not in prompts]
    if dangling:
        await _prune(user, dangling)

    ordered = [prompts[row.prompt_id] for row in rows if row.prompt_id in prompts]
    return await serialize_prompts(ordered)


async def _prune(user: AnonUser, favorite_row_ids: list[int]) -> None:
    try:
        await Favorite.filter(id__in=favorite_row_ids).delete()
    except OperationalError as exc:
        logger.warning("[favorites] could not prune %d dangling favorite(s) of %s: %s",
                       len(favorite_row_ids), user.id, exc)
        return
    logger.info("[favorites] pruned %d dangling favorite(s) of %s", len(favorite_row_ids), user.id)
