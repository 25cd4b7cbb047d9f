"""Tests for serving the built single-page front end."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.api.frontend import mount_frontend

INDEX_HTML = "<!doctype html><div id=\"root\"></div>"


@pytest.fixture
def dist(tmp_path):
    (tmp_path / "index.html").write_text(INDEX_HTML)
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "app.js").write_text("console.log('kb')")
    return tmp_path


@pytest.fixture
async def spa_client(dist):
    app = FastAPI()

    @app.get("/api/ping")
    async def ping() -> dict[str, str]:
        return {"pong": "ok"}

    assert mount_frontend(app, str(dist)) is True
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestMountFrontend:

    def test_missing_directory_not_mounted(self, tmp_path) -> None:
        app = FastAPI()
        assert mount_frontend(app, "") is False
        assert mount_frontend(app, str(tmp_path / "nope")) is False

    @pytest.mark.anyio
    async def test_root_serves_index(self, spa_client: AsyncClient) -> None:
        resp = await spa_client.get("/")
        assert resp.status_code == 200
        assert resp.text == INDEX_HTML

    @pytest.mark.anyio
    async def test_asset_served(self, spa_client: AsyncClient) -> None:
        resp = await spa_client.get("/assets/app.js")
        assert resp.status_code == 200
        assert resp.text == "console.log('kb')"

    @pytest.mark.anyio
    async def test_client_route_falls_back_to_index(self, spa_client: AsyncClient) -> None:
        resp = await spa_client.get("/admin/articles")
        assert resp.status_code == 200
        assert resp.text == INDEX_HTML

    @pytest.mark.anyio
    async def test_api_routes_win(self, spa_client: AsyncClient) -> None:
        resp = await spa_client.get("/api/ping")
        assert resp.json() == {"pong": "ok"}

    @pytest.mark.anyio
    async def test_unknown_api_path_is_404(self, spa_client: AsyncClient) -> None:
        resp = await spa_client.get("/api/missing")
        assert resp.status_code == 404
