# app/models/anon_user.py
import uuid
from tortoise import fields, models


class AnonUser(models.Model):
    """
    Anonymous identity.
    - token_id: 64 hex chars (256 random bits), the subject of anonymous tokens
    - favorites: reverse relation to Favorite rows (ordered by Favorite.id)
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    token_id = fields.CharField(max_length=64, unique=True, index=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "anon_users"
