from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from tests.fakes import InMemoryTaskStore


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        mongo_uri="mongodb://localhost:27017/taskdb_test",
        mongo_timeout_ms=100,
        metrics_interval_seconds=0.05,
    )


@pytest.fixture
def task_store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def unavailable_store() -> InMemoryTaskStore:
    return InMemoryTaskStore(available=False)


@pytest.fixture
def test_app(test_settings: Settings, task_store: InMemoryTaskStore) -> FastAPI:
    return create_app(test_settings, task_store=task_store)


@pytest.fixture
def test_client(test_app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(test_app) as client:
        yield client


@pytest.fixture
def degraded_client(
    test_settings: Settings, unavailable_store: InMemoryTaskStore
) -> Generator[TestClient, None, None]:
    app = create_app(test_settings, task_store=unavailable_store)
    with TestClient(app) as client:
        yield client
