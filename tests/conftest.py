# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx
import pytest

from coreason_fm_router.exceptions import ModelDispatchError
from coreason_fm_router.health import HealthCache, HealthGate

PROXY_URL = "http://localhost:8082"


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingTransport(httpx.MockTransport):
    """MockTransport that records every request it serves."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    @property
    def calls(self) -> int:
        return len(self.requests)


class FakeDispatcher:
    """In-memory dispatcher: models listed in `failing` raise ModelDispatchError."""

    def __init__(self, failing: Optional[Iterable[str]] = None) -> None:
        self.failing = set(failing or [])
        self.calls: List[str] = []

    async def dispatch(self, model_id: str, messages: List[Dict[str, Any]], **kwargs: Any) -> Any:
        self.calls.append(model_id)
        if model_id in self.failing:
            raise ModelDispatchError(model_id, "503 Service Unavailable")
        return {"model": model_id, "content": "ok"}


def healthy_transport() -> CountingTransport:
    return CountingTransport(lambda request: httpx.Response(200, json={"status": "ok"}))


def timeout_transport() -> CountingTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    return CountingTransport(handler)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> CountingTransport:
    return healthy_transport()


@pytest.fixture
def health_gate(clock: FakeClock, transport: CountingTransport) -> HealthGate:
    return HealthGate(HealthCache(ttl_seconds=30.0, clock=clock), transport=transport)


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()
