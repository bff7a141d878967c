# app/core/db.py
"""
Database configuration and initialization module.
Handles Tortoise ORM setup, database connection, and migration configuration.
"""
import logging

from tortoise import Tortoise, connections

from app.config import settings

logger = logging.getLogger("uvicorn.error")

# Tortoise ORM configuration dictionary
# This configuration is also used by Aerich for database migrations
TORTOISE_ORM = {
    "connections": {"default": settings.database_url},
    "apps": {
        "models": {
            "models": [
                "app.models.admin",
                "app.models.anon_user",
                "app.models.favorite",
                "app.models.category",
                "app.models.image",
                "app.models.prompt",
                "aerich.models",             # Required: Let Aerich manage migration tables
            ],
            "default_connection": "default",
        },
    },
}


async def init_db(generate_schemas: bool | None = None):
    """
    Initialize Tortoise ORM database connection.

    Args:
        generate_schemas: Create missing tables (defaults to settings.generate_schemas).
            Keep off in production and use Aerich migrations instead.
    """
    await Tortoise.init(config=TORTOISE_ORM)
    if settings.generate_schemas if generate_schemas is None else generate_schemas:
        logger.info("[db] generating schemas")
        await Tortoise.generate_schemas(safe=True)


async def close_db():
    """Close all database connections."""
    await Tortoise.close_connections()


async def ping_db() -> bool:
    """Return True when the default connection answers a trivial query."""
    try:
        await connections.get("default").execute_query("SELECT 1")
    except Exception as exc:
        logger.warning("[db] ping failed: %s", exc)
        return False
    return True
