import os
import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from app.config import settings
from app.core import db as db_module
from app.core.context import AppContext
from app.core.security import ROLE_ADMIN, ROLE_SUPER_ADMIN, hash_password
from app.main import app
from app.models.admin import Admin
from app.services.generation import PlaceholderGenerator

from fakes import FakeImageHost


TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL

TEST_SETTINGS = settings.model_copy(update={"generation_delay_seconds": 0.0, "max_upload_files": 5})


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """Fresh database for tests that talk to the ORM directly."""
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def image_host():
    return FakeImageHost()


@pytest_asyncio.fixture
async def generator():
    return PlaceholderGenerator()


@pytest_asyncio.fixture
async def context(db, image_host, generator):
    """Application context wired to the fakes, with no generation delay."""
    ctx = AppContext.build(TEST_SETTINGS, image_host=image_host, generator=generator)
    yield ctx
    await ctx.close()


@pytest_asyncio.fixture
async def client(context):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    Startup handlers do not run; the test context is installed directly.
    """
    app.state.context = context
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def create_admin(db):
    """
    Factory fixture to create admin accounts directly via ORM.
    """

    async def _create_admin(password: str = "AdminPass!23", role: str = ROLE_ADMIN) -> tuple[Admin, str]:
        admin = await Admin.create(
            username=f"admin_{uuid.uuid4().hex[:6]}",
            password_hash=hash_password(password),
            role=role,
        )
        return admin, password

    return _create_admin


@pytest_asyncio.fixture
async def create_super_admin(create_admin):
    async def _create_super_admin(password: str = "SuperPass!23") -> tuple[Admin, str]:
        return await create_admin(password=password, role=ROLE_SUPER_ADMIN)

    return _create_super_admin


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain admin Authorization headers via the login endpoint.
    """

    async def _get_headers(username: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/admin/login",
            json={"username": username, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["token"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers


@pytest_asyncio.fixture
async def admin_headers(create_admin, auth_header_factory):
    admin, password = await create_admin()
    return await auth_header_factory(admin.username, password)


@pytest_asyncio.fixture
async def anon_headers(client):
    """Authorization headers of a freshly issued anonymous identity."""
    resp = await client.post("/api/auth/anonymous")
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}
