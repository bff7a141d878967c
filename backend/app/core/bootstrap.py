# app/core/bootstrap.py
"""
Bootstrap module for application initialization.
Creates the first super admin so that somebody can manage admin accounts.
"""
import logging
from app.config import settings
from app.models.admin import Admin
from app.core.security import ROLE_SUPER_ADMIN, hash_password

logger = logging.getLogger("uvicorn.error")


async def ensure_default_super_admin() -> Admin | None:
    """
    If no super admin exists, create one from SUPER_ADMIN_USERNAME / SUPER_ADMIN_PASSWORD.
    Only takes effect when:
      - there is currently no admin with role="superAdmin"
      - and SUPER_ADMIN_PASSWORD is set (no default weak password)
    """
    if await Admin.filter(role=ROLE_SUPER_ADMIN).exists():
        return None

    password = settings.super_admin_password
    if not password:
        logger.warning("[bootstrap] No super admin present, but SUPER_ADMIN_PASSWORD not set -> skip creating one.")
        return None

    # If the username is taken by a plain admin, pick a non-conflicting name
    base_username = settings.super_admin_username
    username = base_username
    suffix = 1
    while await Admin.filter(username=username).exists():
        suffix += 1
        username = f"{base_username}{suffix}"

    admin = await Admin.create(username=username, password_hash=hash_password(password), role=ROLE_SUPER_ADMIN)
    logger.warning("[bootstrap] Created default super admin -> username=%s id=%s", admin.username, admin.id)
    return admin


async def seed_super_admin(username: str, password: str) -> tuple[Admin, bool]:
    """
    Make username a super admin with the given password.
    An existing account is promoted and its password reset; otherwise one is created.

    Returns:
        (admin, created)
    """
    admin = await Admin.get_or_none(username=username)
    if admin is None:
        admin = await Admin.create(username=username, password_hash=hash_password(password), role=ROLE_SUPER_ADMIN)
        logger.info("[bootstrap] Super admin %s created", username)
        return admin, True

    if admin.role != ROLE_SUPER_ADMIN:
        logger.info("[bootstrap] Promoting admin %s to super admin", username)
    admin.role = ROLE_SUPER_ADMIN
    admin.password_hash = hash_password(password)
    await admin.save()
    logger.info("[bootstrap] Super admin %s updated", username)
    return admin, False
