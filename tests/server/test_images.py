"""Tests for GET /images/*."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from lessonhub.server.app import create_app
from lessonhub.server.routes.images import resolve_image

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def images_dir(tmp_path):
    root = tmp_path / "images"
    (root / "subjects").mkdir(parents=True)
    (root / "maths.png").write_bytes(PNG_BYTES)
    (root / "subjects" / "music.png").write_bytes(PNG_BYTES)
    (tmp_path / "secret.txt").write_text("do not serve")
    return root


@pytest_asyncio.fixture
async def client(memory_store, images_dir):
    transport = ASGITransport(app=create_app(store=memory_store, images_dir=str(images_dir)))
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_serves_existing_image(client):
    resp = await client.get("/images/maths.png")
    assert resp.status_code == 200
    assert resp.content == PNG_BYTES
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["content-type"] == "image/png"


@pytest.mark.asyncio
async def test_serves_nested_image(client):
    resp = await client.get("/images/subjects/music.png")
    assert resp.status_code == 200
    assert resp.content == PNG_BYTES


@pytest.mark.asyncio
async def test_missing_image(client):
    resp = await client.get("/images/nonexistent.png")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Image not found"}


@pytest.mark.asyncio
async def test_directory_is_not_an_image(client):
    resp = await client.get("/images/subjects")
    assert resp.status_code == 404


def test_resolve_image_rejects_escape(images_dir):
    root = images_dir.resolve()
    assert resolve_image(root, "../secret.txt") is None
    assert resolve_image(root, "maths.png") == root / "maths.png"


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["/images", "/images/"])
async def test_image_root_is_not_found(client, url):
    resp = await client.get(url)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Image not found"}
