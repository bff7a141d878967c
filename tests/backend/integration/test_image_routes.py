import io
import uuid

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.api.routers.images import _read_part
from app.models.image import Image


pytestmark = pytest.mark.asyncio


def _file(name: str, data: bytes = b"\x89PNG...", content_type: str = "image/png"):
    return (name, data, content_type)


async def test_upload_get_and_delete(client, admin_headers, image_host):
    resp = await client.post("/api/images/upload", headers=admin_headers, files={"image": _file("cat.png")})
    assert resp.status_code == 201
    image = resp.json()["data"]
    assert image["url"].startswith("https://res.example.test/")
    assert image["storageId"]

    # image lookup is public
    got = await client.get(f"/api/images/{image['id']}")
    assert got.status_code == 200
    assert got.json()["data"]["url"] == image["url"]

    deleted = await client.delete(f"/api/images/{image['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert image_host.deleted == [image["storageId"]]
    assert (await client.get(f"/api/images/{image['id']}")).status_code == 404


async def test_upload_requires_admin(client, anon_headers):
    resp = await client.post("/api/images/upload", headers=anon_headers, files={"image": _file("cat.png")})
    assert resp.status_code == 401


async def test_upload_rejects_bad_files(client, admin_headers):
    resp = await client.post("/api/images/upload", headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "NO_FILE"

    resp = await client.post(
        "/api/images/upload",
        headers=admin_headers,
        files={"image": _file("notes.txt", b"hello", "text/plain")},
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_FILE_TYPE"


async def test_upload_host_failure_is_500(client, admin_headers, image_host):
    image_host.fail_on.add("cat.png")
    resp = await client.post("/api/images/upload", headers=admin_headers, files={"image": _file("cat.png")})
    assert resp.status_code == 500
    assert resp.json()["code"] == "UPSTREAM_ERROR"
    assert await Image.all().count() == 0


async def test_upload_multiple_partial_success(client, admin_headers, image_host):
    image_host.fail_on.add("two.png")
    files = [("images", _file(name)) for name in ("one.png", "two.png", "three.png")]
    resp = await client.post("/api/images/upload-multiple", headers=admin_headers, files=files)
    assert resp.status_code == 201
    assert len(resp.json()["data"]) == 2
    assert await Image.all().count() == 2


async def test_upload_multiple_all_failed(client, admin_headers, image_host):
    image_host.fail_on.update({"one.png", "two.png"})
    files = [("images", _file(name)) for name in ("one.png", "two.png")]
    resp = await client.post("/api/images/upload-multiple", headers=admin_headers, files=files)
    assert resp.status_code == 500
    assert resp.json()["code"] == "UPLOAD_FAILED"


async def test_upload_multiple_too_many_files(client, admin_headers, context):
    limit = context.settings.max_upload_files
    files = [("images", _file(f"{i}.png")) for i in range(limit + 1)]
    resp = await client.post("/api/images/upload-multiple", headers=admin_headers, files=files)
    assert resp.status_code == 400
    assert resp.json()["code"] == "TOO_MANY_FILES"


async def test_delete_survives_host_failure(client, admin_headers, image_host):
    image = (await client.post(
        "/api/images/upload", headers=admin_headers, files={"image": _file("cat.png")}
    )).json()["data"]
    image_host.fail_delete = True
    resp = await client.delete(f"/api/images/{image['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert not await Image.filter(id=image["id"]).exists()


async def test_get_unknown_image(client):
    resp = await client.get(f"/api/images/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["code"] == "IMAGE_NOT_FOUND"


async def test_oversize_upload_is_rejected(client, admin_headers, context, monkeypatch):
    monkeypatch.setattr(context.settings, "max_upload_bytes", 16)
    monkeypatch.setattr(context.images, "max_upload_bytes", 16)

    resp = await client.post(
        "/api/images/upload", headers=admin_headers, files={"image": _file("big.png", b"x" * 64)}
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "FILE_TOO_LARGE"

    files = [("images", _file("small.png", b"x" * 8)), ("images", _file("big.png", b"x" * 64))]
    resp = await client.post("/api/images/upload-multiple", headers=admin_headers, files=files)
    assert resp.status_code == 201
    assert len(resp.json()["data"]) == 1


async def test_upload_read_stops_past_the_limit():
    upload = UploadFile(file=io.BytesIO(b"x" * 1000), filename="big.png",
                        headers=Headers({"content-type": "image/png"}))
    part = await _read_part(upload, max_bytes=10)
    assert len(part.data) == 11
    assert part.content_type == "image/png"
