"""Integration test fixtures: real app wiring and SQLite, mocked providers."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from finz.api.app import create_app
from finz.core.config import APIConfig, FinzConfig, StorageConfig, SummaryConfig

HANDSHAKE_URL = "https://fc.yahoo.com"
TOKEN_URL = "https://query1.finance.yahoo.com/v1/test/getcrumb"


def make_config(tmp_path: Path, storage: bool = True, api_key: str | None = None) -> FinzConfig:
    return FinzConfig(
        summary=SummaryConfig(enabled=False),
        storage=StorageConfig(enabled=storage, sqlite_path=str(tmp_path / "finz.db")),
        api=APIConfig(api_key=api_key),
    )


@pytest.fixture
def provider_mock():
    """Router with the session handshake and token endpoints pre-mocked."""
    with respx.mock(assert_all_called=False) as router:
        router.get(HANDSHAKE_URL).mock(
            return_value=httpx.Response(404, headers={"set-cookie": "A3=d=test; Path=/"})
        )
        router.get(TOKEN_URL, name="token").mock(
            return_value=httpx.Response(200, text="testcrumb")
        )
        yield router


@pytest.fixture
def config(tmp_path) -> FinzConfig:
    return make_config(tmp_path)


@pytest.fixture
def client(config, provider_mock):
    with TestClient(create_app(config=config)) as c:
        yield c


@pytest.fixture
def stateless_client(tmp_path, provider_mock):
    with TestClient(create_app(config=make_config(tmp_path, storage=False))) as c:
        yield c


@pytest.fixture
def authed_client(tmp_path, provider_mock):
    with TestClient(create_app(config=make_config(tmp_path, api_key="test-secret-key"))) as c:
        yield c
