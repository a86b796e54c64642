"""Tests for FastAPI app setup and router structure, no DB required.

Uses starlette TestClient with init_db and the store mocked so no live
PostgreSQL is needed.
"""

from unittest.mock import AsyncMock, MagicMock, patch


def _mock_store():
    store = MagicMock()
    store.load_initial_data = AsyncMock()
    return store


def test_health_returns_ok():
    """GET /health should return {status: ok} without a live database."""
    with patch("api.database.init_db", new_callable=AsyncMock), \
            patch("api.main.build_store", return_value=_mock_store()):
        from api.main import app
        from starlette.testclient import TestClient
        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["service"] == "supplier-hub-api"


def test_startup_loads_store():
    """The lifespan hook should load the store once."""
    store = _mock_store()
    with patch("api.database.init_db", new_callable=AsyncMock), \
            patch("api.main.build_store", return_value=store):
        from api.main import app
        from starlette.testclient import TestClient
        with TestClient(app, raise_server_exceptions=False):
            pass
    store.load_initial_data.assert_awaited_once()


def test_root_lists_endpoints():
    """GET / should list known endpoints."""
    with patch("api.database.init_db", new_callable=AsyncMock), \
            patch("api.main.build_store", return_value=_mock_store()):
        from api.main import app
        from starlette.testclient import TestClient
        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert "endpoints" in data
    for key in ("suppliers", "evaluations", "non_conformities", "imports", "reports"):
        assert key in data["endpoints"], f"Missing endpoint key: {key}"


def test_unknown_route_returns_404():
    """Unknown paths should 404."""
    with patch("api.database.init_db", new_callable=AsyncMock), \
            patch("api.main.build_store", return_value=_mock_store()):
        from api.main import app
        from starlette.testclient import TestClient
        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/this_route_does_not_exist")
    assert resp.status_code == 404
