"""
Shared test fixtures.

Every test gets its own app built by create_app() over a fresh in-memory
SQLite database. For integration tests against PostgreSQL, point
DATABASE_URL at a running server.
"""

from contextlib import AsyncExitStack
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from trestle.core.config import Settings
from trestle.core.database import Base
from trestle.main import create_app

# Use SQLite async for tests (aiosqlite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_settings(**overrides) -> Settings:
    values = {"DATABASE_URL": TEST_DATABASE_URL, "LOG_LEVEL": "WARNING"}
    values.update(overrides)
    return Settings(**values)


async def build_test_app(settings: Settings, create_schema: bool = True) -> FastAPI:
    """create_app() plus the schema, created straight from the models."""
    app = create_app(settings)
    if not create_schema:
        return app
    async with app.state.container.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return app


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    app = await build_test_app(settings)
    yield app
    await app.state.container.engine.dispose()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide a test HTTP client bound to the app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """A session on the app's database, for service and repository tests."""
    async with app.state.container.sessionmaker() as session:
        yield session


@pytest_asyncio.fixture
async def make_client():
    """
    Factory fixture for clients of differently configured hosts.

        client = await make_client(HOST_DOMAINS=["logistics"])
    """
    async with AsyncExitStack() as stack:
        async def _make(
            raise_app_exceptions: bool = True, create_schema: bool = True, **overrides
        ) -> AsyncClient:
            app = await build_test_app(make_settings(**overrides), create_schema)
            stack.push_async_callback(app.state.container.engine.dispose)
            return await stack.enter_async_context(
                AsyncClient(
                    transport=ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions),
                    base_url="http://test",
                )
            )
        yield _make


# ─── Helper factories ─────────────────────────────────────────

@pytest_asyncio.fixture
async def make_project(client: AsyncClient):
    """Factory fixture for creating projects through the API."""
    async def _make(version: str = "1", **fields) -> dict:
        if version.startswith("2"):
            body = {"code": "BRG-0042", "name": "Riverside Footbridge"}
        else:
            body = {"name": "Riverside Footbridge"}
        body.update(fields)
        response = await client.post(f"/api/v{version}/projects", json=body)
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest_asyncio.fixture
async def make_shipment(client: AsyncClient):
    """Factory fixture for creating shipments through the API."""
    async def _make(**fields) -> dict:
        body = {"tracking_number": "NWS-784512", "carrier": "Nordic Freight"}
        body.update(fields)
        response = await client.post("/api/v1/shipments", json=body)
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest_asyncio.fixture
async def make_order(client: AsyncClient):
    """Factory fixture for creating orders through the API."""
    async def _make(version: str = "1", **fields) -> dict:
        body = {"order_number": "PO-2026-0001", "material_sku": "STL-BEAM-200", "quantity": 10}
        body.update(fields)
        response = await client.post(f"/api/v{version}/orders", json=body)
        assert response.status_code == 201, response.text
        return response.json()
    return _make
