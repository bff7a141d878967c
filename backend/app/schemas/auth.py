# app/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request models for admin login and admin account creation.
"""
from pydantic import BaseModel


class AdminLoginIn(BaseModel):
    """
    Request model for admin login.
    Fields are optional so that a missing value is reported as a 400 with a
    readable message instead of a schema error.
    """
    username: str | None = None
    password: str | None = None


class AdminCreateIn(BaseModel):
    """Request model for creating an admin account (super admin only)."""
    username: str | None = None
    password: str | None = None
