import json
from pathlib import Path
from typing import List

import httpx
import pytest
from halsync.protocol import Request

FIXTURES = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict:
    with open(FIXTURES / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def orders_body() -> dict:
    return load_fixture("orders.json")


class RecordingFetch:
    """Stand-in transport: records requests, replays canned responses."""

    def __init__(self, *responses: httpx.Response):
        self.calls: List[Request] = []
        self._responses = list(responses)

    async def __call__(self, request: Request) -> httpx.Response:
        self.calls.append(request)
        if not self._responses:
            raise AssertionError(f"unexpected {request.method} {request.url}")
        return self._responses.pop(0)


@pytest.fixture
def recording_fetch():
    return RecordingFetch
