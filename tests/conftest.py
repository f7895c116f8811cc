import httpx
import pytest

from httpbridge.fetcher import HTTPRequestBridge


class Recorder:
    """MockTransport wrapper that keeps every request it was asked to send."""

    def __init__(self):
        self.calls = []
        self.handler = lambda request: httpx.Response(200, content=b"ok")
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.calls[-1]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def bridge(recorder):
    return HTTPRequestBridge(transport=recorder.transport)
