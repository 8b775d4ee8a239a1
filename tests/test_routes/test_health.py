import pytest

from helpers import asgi_client


async def test_health_endpoint(make_app):
    async with asgi_client(make_app()) as client:
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert "version" in data
        assert data["providers"] == {"gemini": True, "openai": False}


@pytest.mark.parametrize("endpoint, streaming", [("generate", False), ("stream", True)])
async def test_endpoint_info(make_app, endpoint, streaming):
    async with asgi_client(make_app()) as client:
        resp = await client.get(f"/api/{endpoint}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["ok"] is True
        assert data["endpoint"] == endpoint
        assert data["model"] == "gemini-test"
        assert data["streaming"] is streaming
        assert data["timestamp"]


async def test_cors_preflight(make_app):
    async with asgi_client(make_app()) as client:
        resp = await client.options(
            "/api/stream",
            headers={
                "Origin": "http://kids3d.example",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] in ("*", "http://kids3d.example")
        assert resp.headers["access-control-allow-credentials"] == "true"
