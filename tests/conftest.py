import json
from types import SimpleNamespace

import pytest

from utils import sendcloud
from utils.sendcloud import SendcloudClient


class FakeResponse:
    """Just enough of requests.Response for the Sendcloud client."""

    def __init__(
        self,
        status_code=200,
        json_data=None,
        text="",
        content_type="application/json",
        reason="OK",
    ):
        self.status_code = status_code
        self._json = json_data
        self.text = json.dumps(json_data) if json_data is not None else text
        self.content = self.text.encode("utf-8")
        self.headers = {"Content-Type": content_type} if content_type else {}
        self.reason = reason

    def json(self):
        return json.loads(self.text)


class FakeSink:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    async def update_fulfillment_status(self, parcel_id, tracking_number, status):
        self.calls.append((parcel_id, tracking_number, status))
        if self.error:
            raise self.error


@pytest.fixture
def sendcloud_api(monkeypatch):
    """Queue responses (or exceptions) for requests.request and record calls."""
    api = SimpleNamespace(calls=[], responses=[])

    def fake_request(method, url, **kwargs):
        api.calls.append(SimpleNamespace(method=method, url=url, **kwargs))
        response = api.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(sendcloud.requests, "request", fake_request)
    return api


@pytest.fixture
def client():
    return SendcloudClient(
        public_key="pub", secret_key="sec", base_url="https://sendcloud.test/api/v2"
    )


@pytest.fixture
def sink():
    return FakeSink()
