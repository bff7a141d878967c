# app/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- Admin: Admin account (admin / superAdmin)
- AnonUser: Anonymous identity behind anonymous tokens
- Favorite: One favorited prompt of an anonymous identity
- Category: Prompt category
- Image: Image record on the external image host
- Prompt: Prompt with generation status
"""
from .admin import Admin
from .anon_user import AnonUser
from .favorite import Favorite
from .category import Category
from .image import Image
from .prompt import Prompt, PromptStatus
