"""
Test configuration and fixtures.
Fakes stand in for the camera, the permission host and the lookup service.
"""

import asyncio
import os
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from herbscan.core.config import Settings
from herbscan.services.permission import (
    IPermissionHost, PermissionGate, PermissionResponse, PermissionState
)
from herbscan.services.resolution import HttpResolutionClient, IResolutionClient, LookupOutcome
from herbscan.services.scanner import IScanSource, ScanSessionController


class FakePermissionHost(IPermissionHost):
    """Permission host answering from a script of responses."""

    def __init__(
        self,
        responses: Optional[List[PermissionResponse]] = None,
        status: PermissionState = PermissionState.UNKNOWN,
    ):
        self.responses = list(responses or [PermissionResponse(granted=True)])
        self.status = status
        self.prompt_count = 0
        self.check_count = 0
        self.gate: Optional[asyncio.Event] = None

    async def check(self) -> PermissionState:
        self.check_count += 1
        return self.status

    async def prompt(self) -> PermissionResponse:
        self.prompt_count += 1
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        self.status = PermissionState.GRANTED if response.granted else PermissionState.DENIED
        return response


class FakeScanSource(IScanSource):
    """In-memory camera: tests push payloads with emit()."""

    def __init__(self, fail_on_open: bool = False):
        self.fail_on_open = fail_on_open
        self.open_count = 0
        self.release_count = 0
        self._callback = None

    @property
    def is_open(self) -> bool:
        return self._callback is not None

    async def open(self, on_detection) -> None:
        self.open_count += 1
        if self.fail_on_open:
            raise RuntimeError("device busy")
        self._callback = on_detection

    def release(self) -> None:
        self.release_count += 1
        self._callback = None

    def emit(self, payload: str) -> bool:
        if self._callback is None:
            return False
        return self._callback(payload)


class ControlledResolutionClient(IResolutionClient):
    """Resolution client whose calls complete when the test says so."""

    def __init__(self):
        self.pending: Dict[str, asyncio.Future] = {}
        self.calls: List[str] = []
        self.closed = False

    async def resolve(self, key: str) -> LookupOutcome:
        self.calls.append(key)
        future = asyncio.get_running_loop().create_future()
        self.pending[key] = future
        return await future

    def complete(self, key: str, outcome: LookupOutcome) -> None:
        self.pending[key].set_result(outcome)

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep HERBSCAN_* variables from the developer shell out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("HERBSCAN_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Settings:
    monkeypatch.chdir(tmp_path)
    return Settings(api_base_url="http://lookup.test")


@pytest.fixture
def permission_host() -> FakePermissionHost:
    return FakePermissionHost()


@pytest.fixture
def permission_gate(permission_host) -> PermissionGate:
    return PermissionGate(permission_host)


@pytest.fixture
def scan_source() -> FakeScanSource:
    return FakeScanSource()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def controller(scan_source, permission_gate, clock) -> ScanSessionController:
    return ScanSessionController(scan_source, permission_gate, debounce_seconds=1.0, clock=clock)


@pytest.fixture
def controlled_client() -> ControlledResolutionClient:
    return ControlledResolutionClient()


def make_http_client(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> HttpResolutionClient:
    """HttpResolutionClient talking to an in-process handler."""
    return HttpResolutionClient(
        base_url=kwargs.pop("base_url", "http://lookup.test"),
        transport=httpx.MockTransport(handler),
        **kwargs
    )


@pytest.fixture
def http_client_factory():
    return make_http_client


@pytest.fixture
def host_factory():
    return FakePermissionHost


@pytest.fixture
def source_factory():
    return FakeScanSource
