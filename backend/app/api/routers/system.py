# app/api/routers/system.py
import datetime as dt

from fastapi import APIRouter, Depends

from app.api.deps import get_context
from app.core.context import AppContext
from app.core.db import ping_db

router = APIRouter(tags=["system"])


@router.get("/health")
async def health():
    return {"status": "OK", "message": "Server is running"}


@router.get("/api/test")
async def api_test(ctx: AppContext = Depends(get_context)):
    """Self-check: confirms routing works and reports whether the database answers."""
    return {
        "success": True,
        "message": "API is working!",
        "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
        "data": {
            "server": ctx.settings.APP_NAME,
            "version": ctx.settings.APP_VERSION,
            "database": "connected" if await ping_db() else "disconnected",
        },
    }
