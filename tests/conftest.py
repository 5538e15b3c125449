import json
from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from validcode.config import Settings
from validcode.main import create_app


EXECUTOR_URL = 'http://executor.test/execute'
SECRET = 'test-secret'


class FakeExecutor:
    """Stands in for the remote executor; records every body it receives."""

    def __init__(self, responder: Callable[[dict], httpx.Response]):
        self.responder = responder
        self.calls: List[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        return self.responder(body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def make_settings(**overrides) -> Settings:
    values = dict(
        executor_url=EXECUTOR_URL,
        verify_delay_min_ms=0,
        verify_delay_max_ms=0,
        log_level='WARNING',
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def echo_executor():
    return FakeExecutor(lambda body: httpx.Response(200, json={'stdout': body['properties']['stdin']}))


@pytest.fixture
def client(echo_executor):
    with TestClient(create_app(make_settings(), transport=echo_executor.transport)) as c:
        yield c


@pytest.fixture
def auth_client(echo_executor):
    settings = make_settings(auth_required=True, shared_secret=SECRET)
    with TestClient(create_app(settings, transport=echo_executor.transport)) as c:
        yield c
