# app/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.db import init_db, close_db
from app.core.bootstrap import ensure_default_super_admin
from app.core.context import AppContext
from app.core.error_handlers import register_error_handlers

from app.api.routers import admin, auth, categories, images, prompts, system, user

logger = logging.getLogger("uvicorn.error")


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.on_event("startup")
async def on_startup():
    setup_logging()
    await init_db()
    # Ensure there's a super admin account on first run
    await ensure_default_super_admin()
    app.state.context = AppContext.build(settings)
    logger.info("[startup] %s ready (env=%s, image provider=%s)",
                settings.APP_NAME, settings.env, app.state.context.generation.generator.provider_name)


@app.on_event("shutdown")
async def on_shutdown():
    context = getattr(app.state, "context", None)
    if context is not None:
        await context.close()
    await close_db()
    logger.info("[shutdown] complete")


# REST (paths kept without a version segment)
app.include_router(system.router)
app.include_router(auth.router, prefix="/api")
app.include_router(admin.router, prefix="/api")
app.include_router(categories.router, prefix="/api")
app.include_router(prompts.router, prefix="/api")
app.include_router(user.router, prefix="/api")
app.include_router(images.router, prefix="/api")
