# app/models/admin.py
"""
Database model for admin accounts.
Admins authenticate with username/password; role decides whether they may manage other admins.
"""
import uuid
from tortoise import fields, models


class Admin(models.Model):
    """
    Admin account.

    Security:
    - Password is stored as an Argon2 hash only
    - Username must be unique across all admins
    - Role is "admin" (moderation) or "superAdmin" (also manages admin accounts)
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    username = fields.CharField(max_length=128, unique=True, index=True)
    password_hash = fields.CharField(max_length=255)
    role = fields.CharField(max_length=16, default="admin")  # "admin" or "superAdmin"
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "admins"
