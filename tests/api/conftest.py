"""API test fixtures - FastAPI test client over a fresh in-memory database.

Invariants:
    - get_db dependency overridden to use the test DB session
    - db_manager patched so readiness probes see the test engine
    - make_client builds an app from explicit Settings (exposed models, prefix)

Design Decisions:
    - Registry read from Base (autorest.models imported by the root conftest),
      not from settings.models_module: no import side effects per test
"""

import pytest
from httpx import ASGITransport, AsyncClient

import autorest.infrastructure.database as db_module
from autorest.config import Settings
from autorest.infrastructure.database import DatabaseSessionManager, get_db
from autorest.infrastructure.model_registry import registry_from_base
from autorest.main import create_app


@pytest.fixture
async def make_client(test_engine, test_session_factory):
    """Factory: build an app with the given settings and yield a client for it."""
    clients = []
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    async def _make(root_path: str = "", **settings_kwargs) -> AsyncClient:
        settings_kwargs.setdefault("api_prefix", "/api/v1")
        app = create_app(Settings(**settings_kwargs), registry_from_base())
        app.dependency_overrides[get_db] = override_get_db
        client = AsyncClient(
            transport=ASGITransport(app=app, root_path=root_path),
            base_url="http://test",
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
    db_module.db_manager = original_manager


@pytest.fixture
async def client(make_client):
    """Client exposing every sample model with default paths under /api/v1."""
    return await make_client()
