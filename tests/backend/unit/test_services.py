"""
Unit tests for the category, prompt and favorites services.
"""
import uuid

import pytest

from app.core.errors import (
    CategoryInUse,
    CategoryNotFound,
    InvalidImageReference,
    PromptNotFound,
    ValidationError,
)
from app.core.security import ROLE_SUPER_ADMIN, verify_password
from app.core.bootstrap import ensure_default_super_admin, seed_super_admin
from app.config import settings
from app.models.admin import Admin
from app.models.anon_user import AnonUser
from app.models.category import Category
from app.models.favorite import Favorite
from app.models.image import Image
from app.models.prompt import Prompt, PromptStatus
from app.services import categories, favorites, prompts
from app.services.generation import PlaceholderGenerator
from app.services.images import ImageManager
from app.services.lifecycle import GenerationQueue

from fakes import FakeImageHost


pytestmark = pytest.mark.asyncio


def _queue() -> GenerationQueue:
    return GenerationQueue(PlaceholderGenerator(), ImageManager(FakeImageHost()), delay_seconds=0)


class TestCategories:
    async def test_create_requires_name(self, db):
        with pytest.raises(ValidationError):
            await categories.create_category("   ")

    async def test_partial_update(self, db):
        cat = await categories.create_category("Landscapes", "wide shots")
        updated = await categories.update_category(cat.id, description="mountains")
        assert updated.name == "Landscapes"
        assert updated.description == "mountains"
        with pytest.raises(ValidationError):
            await categories.update_category(cat.id, name="")

    async def test_update_missing(self, db):
        with pytest.raises(CategoryNotFound):
            await categories.update_category(uuid.uuid4(), name="x")

    async def test_delete_in_use_changes_nothing(self, db):
        cat = await categories.create_category("Portraits")
        await Prompt.create(prompt_text="a face", category_id=cat.id, status=PromptStatus.DONE, created_by="t")
        with pytest.raises(CategoryInUse) as info:
            await categories.delete_category(cat.id)
        assert info.value.count == 1
        assert await Category.filter(id=cat.id).exists()

    async def test_delete(self, db):
        cat = await categories.create_category("Empty")
        await categories.delete_category(cat.id)
        with pytest.raises(CategoryNotFound):
            await categories.delete_category(cat.id)


class TestPrompts:
    async def test_submit_without_images_is_queued(self, db):
        queue = _queue()
        prompt = await prompts.submit_prompt(queue, "tok", "  a castle  ")
        assert prompt.prompt_text == "a castle"
        assert prompt.status == PromptStatus.QUEUED
        assert queue.task_for(prompt.id) is not None
        await queue.drain()

    async def test_submit_with_images_is_done(self, db):
        queue = _queue()
        img = await Image.create(url="https://cdn.test/a.png", storage_id="a")
        other = await Image.create(url="https://cdn.test/b.png", storage_id="b")
        prompt = await prompts.submit_prompt(queue, "tok", "a castle", image_ids=[other.id, img.id])
        assert prompt.status == PromptStatus.DONE
        assert prompt.image_ids == [str(other.id), str(img.id)]
        assert queue.pending == 0

    async def test_repeated_image_id_rejects_submission(self, db):
        img = await Image.create(url="https://cdn.test/a.png", storage_id="a")
        with pytest.raises(InvalidImageReference):
            await prompts.submit_prompt(_queue(), "tok", "dup", image_ids=[img.id, img.id])
        assert await Prompt.all().count() == 0

    async def test_unknown_image_rejects_whole_submission(self, db):
        img = await Image.create(url="https://cdn.test/a.png", storage_id="a")
        with pytest.raises(InvalidImageReference):
            await prompts.submit_prompt(_queue(), "tok", "x", image_ids=[img.id, uuid.uuid4()])
        assert await Prompt.all().count() == 0

    async def test_unknown_category(self, db):
        with pytest.raises(CategoryNotFound):
            await prompts.submit_prompt(_queue(), "tok", "x", category_id=uuid.uuid4())

    async def test_blank_text(self, db):
        with pytest.raises(ValidationError):
            await prompts.submit_prompt(_queue(), "tok", "   ")

    async def test_serialize_drops_deleted_images(self, db):
        cat = await Category.create(name="Art")
        keep = await Image.create(url="https://cdn.test/keep.png", storage_id="keep")
        gone = await Image.create(url="https://cdn.test/gone.png", storage_id="gone")
        prompt = await prompts.create_admin_prompt("adm", "x", [str(keep.id), str(gone.id)], category_id=cat.id)
        await gone.delete()

        data = await prompts.serialize_prompt(prompt)
        assert [i["id"] for i in data["images"]] == [str(keep.id)]
        assert data["category"] == {"id": str(cat.id), "name": "Art", "description": None}
        assert data["createdBy"] == "admin:adm"
        assert data["status"] == "done"

    async def test_list_filters_and_paginates(self, db):
        cat = await Category.create(name="Art")
        for i in range(5):
            await Prompt.create(prompt_text=f"p{i}", category_id=cat.id if i % 2 else None,
                                status=PromptStatus.DONE, created_by="t")
        await Prompt.create(prompt_text="q", status=PromptStatus.QUEUED, created_by="t")

        items, page = await prompts.list_prompts(page=1, limit=4)
        assert len(items) == 4
        assert page == {"page": 1, "limit": 4, "total": 6, "pages": 2}

        items, page = await prompts.list_prompts(category_id=cat.id)
        assert page["total"] == 2

        items, _ = await prompts.list_prompts(status=PromptStatus.QUEUED)
        assert [i["promptText"] for i in items] == ["q"]


class TestFavorites:
    async def _user(self) -> AnonUser:
        return await AnonUser.create(token_id=uuid.uuid4().hex * 2)

    async def test_add_is_idempotent_and_ordered(self, db):
        user = await self._user()
        p1 = await Prompt.create(prompt_text="one", status=PromptStatus.DONE, created_by="t")
        p2 = await Prompt.create(prompt_text="two", status=PromptStatus.DONE, created_by="t")

        added, ids = await favorites.add_favorite(user, p2.id)
        assert added is True
        added, ids = await favorites.add_favorite(user, p1.id)
        added, ids = await favorites.add_favorite(user, p2.id)
        assert added is False
        assert ids == [str(p2.id), str(p1.id)]

    async def test_add_unknown_prompt(self, db):
        with pytest.raises(PromptNotFound):
            await favorites.add_favorite(await self._user(), uuid.uuid4())

    async def test_remove_absent_is_fine(self, db):
        user = await self._user()
        assert await favorites.remove_favorite(user, uuid.uuid4()) == []

    async def test_dangling_favorites_are_skipped_and_pruned(self, db):
        user = await self._user()
        keep = await Prompt.create(prompt_text="keep", status=PromptStatus.DONE, created_by="t")
        gone = await Prompt.create(prompt_text="gone", status=PromptStatus.DONE, created_by="t")
        await favorites.add_favorite(user, gone.id)
        await favorites.add_favorite(user, keep.id)
        await gone.delete()

        listed = await favorites.list_favorites(user)
        assert [p["id"] for p in listed] == [str(keep.id)]
        assert await Favorite.filter(anon_user=user).count() == 1


class TestBootstrap:
    async def test_skips_without_password(self, db, monkeypatch):
        monkeypatch.setattr(settings, "super_admin_password", None)
        assert await ensure_default_super_admin() is None
        assert await Admin.all().count() == 0

    async def test_creates_once(self, db, monkeypatch):
        monkeypatch.setattr(settings, "super_admin_password", "Boot!pass1")
        monkeypatch.setattr(settings, "super_admin_username", "root")
        await Admin.create(username="root", password_hash="x", role="admin")

        created = await ensure_default_super_admin()
        assert created.username == "root2"
        assert created.role == ROLE_SUPER_ADMIN
        assert await ensure_default_super_admin() is None

    async def test_seed_promotes_existing(self, db):
        await Admin.create(username="ops", password_hash="x", role="admin")
        admin, created = await seed_super_admin("ops", "N3w!pass")
        assert created is False
        assert admin.role == ROLE_SUPER_ADMIN
        assert verify_password("N3w!pass", admin.password_hash)
