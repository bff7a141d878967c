import uuid

import pytest


pytestmark = pytest.mark.asyncio


async def _admin_prompt(client, admin_headers, text: str) -> str:
    resp = await client.post("/api/admin/prompts", headers=admin_headers, json={"promptText": text})
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["id"]


async def test_favorites_flow(client, anon_headers, admin_headers):
    first = await _admin_prompt(client, admin_headers, "first")
    second = await _admin_prompt(client, admin_headers, "second")

    add = await client.post("/api/user/favorites/add", headers=anon_headers, json={"promptId": second})
    assert add.status_code == 200
    assert add.json()["message"] == "Added to favorites"
    assert add.json()["data"] == [second]

    await client.post("/api/user/favorites/add", headers=anon_headers, json={"promptId": first})
    again = await client.post("/api/user/favorites/add", headers=anon_headers, json={"promptId": second})
    assert again.json()["message"] == "Already in favorites"
    assert again.json()["data"] == [second, first]

    listed = await client.get("/api/user/favorites", headers=anon_headers)
    assert [p["promptText"] for p in listed.json()["data"]] == ["second", "first"]

    removed = await client.post("/api/user/favorites/remove", headers=anon_headers, json={"promptId": second})
    assert removed.json()["data"] == [first]
    # removing twice is fine
    removed = await client.post("/api/user/favorites/remove", headers=anon_headers, json={"promptId": second})
    assert removed.status_code == 200


async def test_favorites_are_per_identity(client, anon_headers, admin_headers):
    prompt_id = await _admin_prompt(client, admin_headers, "shared")
    await client.post("/api/user/favorites/add", headers=anon_headers, json={"promptId": prompt_id})

    other_token = (await client.post("/api/auth/anonymous")).json()["data"]["token"]
    other = {"Authorization": f"Bearer {other_token}"}
    assert (await client.get("/api/user/favorites", headers=other)).json()["data"] == []


async def test_deleted_prompt_disappears_from_favorites(client, anon_headers, admin_headers):
    keep = await _admin_prompt(client, admin_headers, "keep")
    gone = await _admin_prompt(client, admin_headers, "gone")
    for prompt_id in (gone, keep):
        await client.post("/api/user/favorites/add", headers=anon_headers, json={"promptId": prompt_id})

    await client.delete(f"/api/admin/prompts/{gone}", headers=admin_headers)

    listed = await client.get("/api/user/favorites", headers=anon_headers)
    assert [p["id"] for p in listed.json()["data"]] == [keep]


async def test_favorite_validation(client, anon_headers):
    resp = await client.post("/api/user/favorites/add", headers=anon_headers, json={})
    assert resp.status_code == 400
    assert resp.json()["code"] == "PROMPT_ID_REQUIRED"

    resp = await client.post("/api/user/favorites/add", headers=anon_headers, json={"promptId": str(uuid.uuid4())})
    assert resp.status_code == 404

    resp = await client.post("/api/user/favorites/add", headers=anon_headers, json={"promptId": "not-a-uuid"})
    assert resp.status_code == 400
