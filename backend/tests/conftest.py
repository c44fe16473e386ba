"""
Pytest configuration.

Provides an in-memory local store, a REST service on a temporary data
directory, and application contexts wired to that service in-process or to
an unreachable server.
"""
from typing import Callable, Generator, Optional

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from zxsgit.config import Settings
from zxsgit.context import AppContext
from zxsgit.main import create_app
from zxsgit.services.local_store import LocalStore


def refuse_connection(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


# ==================== Configuration ====================

@pytest.fixture(scope="function")
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a fresh data directory with an in-memory local store."""
    return Settings(
        api_url="http://testserver",
        data_dir=str(tmp_path / "data"),
        local_store_path=None,
        environment="test",
    )


@pytest.fixture(scope="function")
def local_store() -> LocalStore:
    return LocalStore()


# ==================== REST service ====================

@pytest.fixture(scope="function")
def server_app(test_settings) -> FastAPI:
    return create_app(test_settings)


@pytest.fixture(scope="function")
def api_client(server_app) -> Generator[TestClient, None, None]:
    with TestClient(server_app) as client:
        yield client


# ==================== Application contexts ====================

@pytest.fixture(scope="function")
def make_context(test_settings, server_app) -> Callable[..., AppContext]:
    """
    Factory for initialized application contexts.

    online=True talks to server_app in-process; online=False gets a
    transport that refuses every connection; handler overrides both with a
    custom mock transport.
    """
    def factory(
        online: bool = True,
        store: Optional[LocalStore] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> AppContext:
        if handler is not None:
            transport = httpx.MockTransport(handler)
        elif online:
            transport = httpx.ASGITransport(app=server_app)
        else:
            transport = httpx.MockTransport(refuse_connection)
        context = AppContext(test_settings, transport=transport, store=store or LocalStore())
        context.initialize()
        return context

    return factory


@pytest.fixture(scope="function")
def online(make_context) -> AppContext:
    return make_context()


@pytest.fixture(scope="function")
def offline(make_context) -> AppContext:
    return make_context(online=False)
