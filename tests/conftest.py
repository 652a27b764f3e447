"""Pytest configuration and fixtures for request-builder tests.

Fixture server subprocesses (HTTP and HTTPS) are shared per session. Unit
tests never touch the network: recording_transport answers every request
in-process and keeps what was sent.
"""

from __future__ import annotations

import socket
import subprocess
import sys
import time
from pathlib import Path
from typing import Any, Callable, Generator
from unittest.mock import patch

import httpx
import pytest

# Project root for fixture paths
PROJECT_ROOT = Path(__file__).parent.parent
FIXTURES_DIR = PROJECT_ROOT / "tests" / "fixtures"
MOCK_SERVER_MODULE = "tests.integration.mock_server"
CERT_FILE = FIXTURES_DIR / "server.crt"
KEY_FILE = FIXTURES_DIR / "server.key"
STARTUP_TIMEOUT = 10.0


def unused_port(host: str = "127.0.0.1") -> int:
    """Ask the OS for an ephemeral port that is free at the time of the call."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


class MockServer:
    """Runs tests/integration/mock_server.py in a subprocess.

    With tls=True the server speaks HTTPS using the self-signed certificate
    in tests/fixtures/. The server counts as up once /echo answers.
    """

    def __init__(self, tls: bool = False, host: str = "127.0.0.1") -> None:
        self.tls = tls
        self.host = host
        self.port = unused_port(host)
        scheme = "https" if tls else "http"
        self.base_url = f"{scheme}://{host}:{self.port}"
        self._process: subprocess.Popen | None = None

    def _command(self) -> list[str]:
        command = [
            sys.executable, "-m", MOCK_SERVER_MODULE,
            "--host", self.host,
            "--port", str(self.port),
        ]
        if self.tls:
            command += ["--ssl-certfile", str(CERT_FILE), "--ssl-keyfile", str(KEY_FILE)]
        return command

    def _answers(self) -> bool:
        try:
            response = httpx.get(f"{self.base_url}/echo", verify=False, timeout=1.0)
        except httpx.TransportError:
            return False
        return response.status_code == 200

    def start(self) -> None:
        """Start the subprocess and wait for the first answer from /echo.

        Raises:
            RuntimeError: If the server exits or stays silent past STARTUP_TIMEOUT.
        """
        self._process = subprocess.Popen(
            self._command(),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=PROJECT_ROOT,
        )

        give_up_at = time.monotonic() + STARTUP_TIMEOUT
        while not self._answers():
            exited = self._process.poll() is not None
            if exited or time.monotonic() > give_up_at:
                stderr = self._process.stderr.read() if exited else b""
                self.stop()
                raise RuntimeError(
                    f"{self.base_url} did not come up: "
                    f"{stderr.decode(errors='replace') or '(no stderr)'}"
                )
            time.sleep(0.1)

    def stop(self) -> None:
        """Terminate the subprocess, killing it if it ignores SIGTERM for 5s."""
        if self._process is None:
            return
        self._process.terminate()
        try:
            self._process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            self._process.kill()
            self._process.wait(timeout=5)
        self._process = None

    def __enter__(self) -> MockServer:
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()


class RecordingTransport:
    """Answers requests in-process and records what was sent.

    responder maps the sent httpx.Request to the httpx.Response to return;
    it may also raise an httpx exception to simulate transport failures.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.client_kwargs: list[dict[str, Any]] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, content=b"SUCCESS")
        )

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self.responder(request)


# =============================================================================
# Pytest Fixtures
# =============================================================================


@pytest.fixture
def recording_transport() -> Generator[RecordingTransport, None, None]:
    """Route every client the dispatcher builds through a RecordingTransport.

    The kwargs the dispatcher passed to httpx.Client are kept on
    client_kwargs. The proxy kwarg is recorded but not applied, so proxied
    requests still reach the recorder.
    """
    recorder = RecordingTransport()
    real_client = httpx.Client

    def make_client(**kwargs: Any) -> httpx.Client:
        recorder.client_kwargs.append(dict(kwargs))
        kwargs.pop("proxy", None)
        return real_client(transport=httpx.MockTransport(recorder.handle), **kwargs)

    with patch("request_builder.dispatcher.httpx.Client", side_effect=make_client):
        yield recorder


@pytest.fixture(scope="session")
def http_server() -> Generator[MockServer, None, None]:
    """Plain HTTP fixture server, started once per session."""
    with MockServer() as server:
        yield server


@pytest.fixture(scope="session")
def https_server() -> Generator[MockServer, None, None]:
    """HTTPS fixture server with a self-signed certificate."""
    with MockServer(tls=True) as server:
        yield server


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests under tests/integration/ as integration, all others as unit.

    Select with `pytest -m unit` or `pytest -m integration`.
    """
    for item in items:
        kind = "integration" if "integration" in item.path.parent.parts else "unit"
        item.add_marker(getattr(pytest.mark, kind))
