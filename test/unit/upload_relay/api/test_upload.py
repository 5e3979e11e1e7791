"""Tests for the upload endpoint response contract."""

import inspect
from pathlib import Path

import httpx
import orjson
from asgi_correlation_id import correlation_id
from robyn import Request

from upload_relay.api.upload import relay_upload, render_report, upload
from upload_relay.core.router import parse_request_files, parse_response
from upload_relay.models.core import UploadFile
from upload_relay.models.relay import ForwardOutcome, RelayReport


def _respond(result) -> tuple[int, dict]:
    response = parse_response(result)
    return response.status_code, orjson.loads(response.description)


# -----------------------------------------------------------------------------
# render_report Tests
# -----------------------------------------------------------------------------


def test_all_forwarded_renders_success() -> None:
    """Verify a fully successful report maps to the 200 success body."""
    report = RelayReport(outcomes=[ForwardOutcome(filename="a.json", forwarded=True)])

    status, body = _respond(render_report(report))

    assert status == 200
    assert body == {"message": "Files uploaded successfully"}


def test_any_failure_renders_error_with_file_list() -> None:
    """Verify a failing report maps to a single 500 listing every file."""
    report = RelayReport(
        outcomes=[
            ForwardOutcome(filename="a.json", forwarded=True),
            ForwardOutcome(filename="b.json", forwarded=False, error="boom"),
        ]
    )

    status, body = _respond(render_report(report))

    assert status == 500
    assert body == {
        "error": "Internal Server Error",
        "files": [
            {"filename": "a.json", "forwarded": True},
            {"filename": "b.json", "forwarded": False},
        ],
    }


# -----------------------------------------------------------------------------
# End-to-end handler Tests
# -----------------------------------------------------------------------------


async def test_upload_scenario_single_json_file(make_relay, make_mock_request, remote, upload_dir: Path) -> None:
    """Verify POST of a.json is forwarded, answered with 200 and leaves no local copy."""
    request = make_mock_request(files={"a.json": b'{"x":1}'})
    kwargs: dict = {}
    assert parse_request_files({"files"}, request, kwargs) is None

    status, body = _respond(await relay_upload(make_relay(), kwargs["files"]))

    assert status == 200
    assert body == {"message": "Files uploaded successfully"}
    sent = remote.requests[0].content
    assert b'filename="a.json"' in sent
    assert b"Content-Type: application/json" in sent
    assert b'{"x":1}' in sent
    assert not (upload_dir / "a.json").exists()


async def test_upload_remote_down_returns_500(make_relay, remote, upload_dir: Path) -> None:
    """Verify an unreachable remote yields the generic 500 and no leftover file."""
    remote.error = httpx.ConnectError("unreachable")

    status, body = _respond(await relay_upload(make_relay(), UploadFile(files={"a.json": b"{}"})))

    assert status == 500
    assert body["error"] == "Internal Server Error"
    assert list(upload_dir.iterdir()) == []


def test_upload_without_files_is_rejected(make_mock_request) -> None:
    """Verify zero files is answered with 422 before the relay runs."""
    request = make_mock_request(files={})
    kwargs: dict = {}

    error = parse_request_files({"files"}, request, kwargs)

    assert error is not None
    assert error.status_code == 422
    assert orjson.loads(error.description) == {"error": "missing_files", "required": ["files"]}
    assert "files" not in kwargs


# -----------------------------------------------------------------------------
# Registered route Tests
# -----------------------------------------------------------------------------


class TestUploadRoute:
    """Tests for the /upload handler as registered on the router."""

    def test_signature_exposes_only_robyn_injected_params(self) -> None:
        """Verify the files param is hidden and request is injected first."""
        params = inspect.signature(upload).parameters

        assert list(params) == ["request", "global_dependencies"]
        assert params["request"].annotation is Request

    async def test_route_relays_files_from_state(
        self, make_relay, make_mock_request, global_dependencies, remote, upload_dir: Path
    ) -> None:
        """Verify the route takes files from the request and the relay from state."""
        global_dependencies["state"].relay = make_relay()
        request = make_mock_request(files={"a.json": b'{"x":1}'}, headers={"x-request-id": "req-42"})

        response = await upload(request, global_dependencies=global_dependencies)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert orjson.loads(response.description) == {"message": "Files uploaded successfully"}
        assert b'filename="a.json"' in remote.requests[0].content
        assert correlation_id.get() == "req-42"
        assert list(upload_dir.iterdir()) == []

    async def test_route_reports_failure_as_500(
        self, make_relay, make_mock_request, global_dependencies, remote
    ) -> None:
        """Verify a failed forward surfaces through the route as the aggregated 500."""
        remote.status_code = 502
        global_dependencies["state"].relay = make_relay()
        request = make_mock_request(files={"a.json": b"{}"})

        response = await upload(request, global_dependencies=global_dependencies)

        assert response.status_code == 500
        assert orjson.loads(response.description) == {
            "error": "Internal Server Error",
            "files": [{"filename": "a.json", "forwarded": False}],
        }
        assert correlation_id.get()

    async def test_route_without_files_skips_relay(self, make_mock_request, global_dependencies) -> None:
        """Verify a request with no files is answered 422 before state is touched."""
        response = await upload(make_mock_request(files={}), global_dependencies=global_dependencies)

        assert response.status_code == 422
        assert "relay" not in global_dependencies["state"]
