# app/models/favorite.py
from tortoise import fields, models


class Favorite(models.Model):
    """
    One entry of an anonymous user's favorites list.

    prompt_id is a plain UUID, not a foreign key: deleting a prompt leaves the row
    dangling and the favorites service filters/prunes it on read.
    The auto-increment id gives the list its insertion order.
    """
    id = fields.IntField(pk=True)
    anon_user = fields.ForeignKeyField(
        "models.AnonUser",
        related_name="favorites",
        on_delete=fields.CASCADE,
    )
    prompt_id = fields.UUIDField(index=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "favorites"
        unique_together = (("anon_user", "prompt_id"),)
