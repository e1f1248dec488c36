from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from visitor_counter.api.dependencies import get_clock
from visitor_counter.config import get_settings
from visitor_counter.main import create_app
from visitor_counter.observability.metrics import reset_metrics
from visitor_counter.storage.base import VisitStore

_ENV_VARS = (
    "STORAGE_BACKEND",
    "DATABASE_URL",
    "INACTIVITY_THRESHOLD_MS",
    "VISIT_INCREMENT_POLICY",
    "CORS_ALLOW_ORIGINS",
    "ENABLE_METRICS_ENDPOINT",
)


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    reset_metrics()

    yield

    get_settings.cache_clear()
    reset_metrics()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'visits.db'}"


@pytest.fixture
def app_factory(monkeypatch: pytest.MonkeyPatch, clock: FakeClock) -> Callable[..., FastAPI]:
    def _factory(store: VisitStore | None = None, **env: str) -> FastAPI:
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        get_settings.cache_clear()
        application = create_app(get_settings(), store=store)
        application.dependency_overrides[get_clock] = lambda: clock
        return application

    return _factory


@pytest.fixture
def open_client() -> Callable[[FastAPI], AsyncClient]:
    def _open(application: FastAPI) -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=application), base_url="http://test")

    return _open


@pytest.fixture
async def api_client(app_factory, open_client) -> AsyncIterator[AsyncClient]:
    async with open_client(app_factory()) as client:
        yield client
