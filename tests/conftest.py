"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from taskrep.api.app import create_api_app
from taskrep.config import Settings
from taskrep.store import TransitionStore
from tests.harness import CHAIN

STATUS_NAMES = ["New", "In Progress", "Review", "Completed"]


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def store() -> TransitionStore:
    return TransitionStore()


@pytest_asyncio.fixture
async def seeded_store(store: TransitionStore) -> TransitionStore:
    """Store holding New -> In Progress -> Review -> Completed."""
    for order, name in enumerate(STATUS_NAMES, start=1):
        await store.create_status(name, sequence_order=order, is_default=name == "New")
    for from_status, to_status in CHAIN:
        await store.create_transition(from_status, to_status)
    return store


@pytest.fixture
def api_app(seeded_store: TransitionStore, test_settings: Settings) -> FastAPI:
    return create_api_app(store=seeded_store, settings=test_settings)


@pytest_asyncio.fixture
async def client(api_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=api_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
