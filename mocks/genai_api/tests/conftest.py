from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from mocks.genai_api.app.main import create_app
from shared.common.config import Settings


ClientFactory = Callable[..., TestClient]


def settings_for(**overrides: object) -> Settings:
    values: dict[str, object] = {"mock_delay_ms": 0, "random_seed": 1, "cache_sweep_interval_seconds": 3600}
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


@pytest.fixture
def make_client() -> Iterator[ClientFactory]:
    opened: list[TestClient] = []

    def factory(**overrides: object) -> TestClient:
        client = TestClient(create_app(settings_for(**overrides)))
        client.__enter__()
        opened.append(client)
        return client

    yield factory
    for client in opened:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client: ClientFactory) -> TestClient:
    return make_client()


@pytest.fixture
def bearer() -> dict[str, str]:
    return {"Authorization": "Bearer test-token"}


@pytest.fixture
def api_key() -> dict[str, str]:
    return {"x-goog-api-key": "test-key"}
