"""Test configuration and fixtures.

Every test gets a fresh app (and so a fresh registry and credential store).
Unit tests drive the core with FakeWebSocket transports instead of real sockets.
"""

import os
from typing import Generator

# Set env flags BEFORE importing application modules
os.environ.setdefault("DEBUG", "1")
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("KEEPALIVE_URL", "")

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from main import create_app
from realtime import LiveConnection


class FakeWebSocket:
    """Records frames written to it; can be closed or made to fail on send."""

    def __init__(self, connected: bool = True, fail: bool = False):
        state = WebSocketState.CONNECTED if connected else WebSocketState.DISCONNECTED
        self.client_state = state
        self.application_state = state
        self.fail = fail
        self.sent: list = []
        self.closed = False

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("socket is closing")
        self.sent.append(message)

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("socket is closing")
        self.sent.append(text)

    async def close(self, code: int = 1000):
        self.closed = True
        self.application_state = WebSocketState.DISCONNECTED

    def drop(self):
        # what uvicorn does once a native ping goes unanswered
        self.client_state = WebSocketState.DISCONNECTED


@pytest.fixture()
def make_conn():
    def _make(account_id=None, origin_url=None, **kwargs) -> LiveConnection:
        conn = LiveConnection(FakeWebSocket(**kwargs))  # type: ignore[arg-type]
        if account_id:
            conn.tag(account_id, origin_url)
        return conn
    return _make


@pytest.fixture()
def app():
    return create_app()


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
