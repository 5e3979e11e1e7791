"""Test fixtures for upload-relay unit tests."""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest

from upload_relay.core.lifespan import State
from upload_relay.core.settings import RelayConfig
from upload_relay.services.relay import UploadRelay

EXTERNAL_ENDPOINT = "https://relay-target.test/externalFiles"


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request
# -----------------------------------------------------------------------------


@dataclass
class MockHeaders:
    """Mock Headers object for Robyn Request."""

    _data: dict = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key, default)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key] = value


@dataclass
class MockRequest:
    """Mock Request object for Robyn."""

    headers: MockHeaders = field(default_factory=MockHeaders)
    files: dict[str, bytes] = field(default_factory=dict)
    method: str = "POST"
    path: str = "/upload"


# -----------------------------------------------------------------------------
# Remote endpoint double
# -----------------------------------------------------------------------------


@dataclass
class RemoteEndpoint:
    """Records every forwarded request and answers with a canned status or error."""

    upload_dir: Path
    status_code: int = 200
    error: Exception | None = None
    fail_for: set[str] = field(default_factory=set)
    requests: list[httpx.Request] = field(default_factory=list)
    files_on_disk: list[set[str]] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.files_on_disk.append({path.name for path in self.upload_dir.iterdir()})
        if self.error is not None:
            raise self.error
        if any(f'filename="{name}"'.encode() in request.content for name in self.fail_for):
            return httpx.Response(502, json={"error": "bad gateway"})
        return httpx.Response(self.status_code, json={"ok": True})


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def test_state() -> State:
    """Create a test state container."""
    return State()


@pytest.fixture
def global_dependencies(test_state: State) -> dict:
    """Setup global dependencies for tests."""
    yield {"state": test_state}
    test_state.clear()


@pytest.fixture
def make_mock_request(global_dependencies):
    """Factory fixture to create mock requests."""

    def _make(files: dict[str, bytes] | None = None, headers: dict | None = None) -> MockRequest:
        return MockRequest(files=files or {}, headers=MockHeaders(_data=headers or {}))

    return _make


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def relay_config(upload_dir: Path) -> RelayConfig:
    return RelayConfig(upload_dir=upload_dir, external_endpoint=EXTERNAL_ENDPOINT, listen_port=3000)


@pytest.fixture
def remote(upload_dir: Path) -> RemoteEndpoint:
    return RemoteEndpoint(upload_dir=upload_dir)


@pytest.fixture
async def make_relay(relay_config: RelayConfig, remote: RemoteEndpoint):
    """Factory for UploadRelay instances talking to the in-memory remote endpoint."""
    relays: list[UploadRelay] = []

    def _make(config: RelayConfig | None = None, handler: Callable | None = None) -> UploadRelay:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler or remote))
        relay = UploadRelay(config or relay_config, client)
        relays.append(relay)
        return relay

    yield _make
    for relay in relays:
        await relay.aclose()
