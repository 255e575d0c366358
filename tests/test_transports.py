# Copyright (c) Syntropy Systems
"""Tests for the HTTPS and SSH transports."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import paramiko
import pytest
from conftest import VALID_SPECFILE

from poweron_validate.errors import SymitarClientError
from poweron_validate.models.api import SymConfig
from poweron_validate.transports.https import VALIDATE_PATH, SymitarHTTPS, build_base_url
from poweron_validate.transports.ssh import (
    SSHConfig,
    SymitarSSH,
    ValidateWorker,
    default_staging_directory,
)

SYM_CONFIG = SymConfig(sym_number=1, symitar_user_number="1234", symitar_user_password="secret")


@pytest.fixture
def specfile(temp_dir: Path) -> Path:
    path = temp_dir / "REPORT.PO"
    _ = path.write_text(VALID_SPECFILE)
    return path


class TestBuildBaseUrl:
    """Tests for HTTPS base URL construction."""

    def test_default_port_omitted(self) -> None:
        """Test 443 and no port give a bare host URL."""
        assert build_base_url("sym.example.com") == "https://sym.example.com"
        assert build_base_url("sym.example.com", 443) == "https://sym.example.com"

    def test_custom_port(self) -> None:
        """Test other ports are appended."""
        assert build_base_url("sym.example.com", 8443) == "https://sym.example.com:8443"


class TestSymitarHTTPS:
    """Tests for the HTTPS client against a mock transport."""

    def _client(self, handler: httpx.MockTransport) -> SymitarHTTPS:
        return SymitarHTTPS("https://sym.example.com/", SYM_CONFIG, transport=handler)

    def test_valid_file(self, specfile: Path) -> None:
        """Test the request body and a passing reply."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"isValid": True, "errors": None})

        with self._client(httpx.MockTransport(handler)) as client:
            reply = client.validate_poweron(str(specfile))

        assert reply.is_valid
        assert reply.errors == []
        assert str(seen[0].url) == f"https://sym.example.com{VALIDATE_PATH}"
        body = json.loads(seen[0].content)
        assert body == {
            "symNumber": 1,
            "symitarUserNumber": "1234",
            "symitarUserPassword": "secret",
            "fileName": "REPORT.PO",
            "content": VALID_SPECFILE,
        }

    def test_byte_order_mark_not_sent(self, temp_dir: Path) -> None:
        """Test a UTF-8 BOM is stripped from the uploaded content."""
        path = temp_dir / "BOM.PO"
        _ = path.write_text(VALID_SPECFILE, encoding="utf-8-sig")
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"isValid": True})

        with self._client(httpx.MockTransport(handler)) as client:
            _ = client.validate_poweron(str(path))

        assert json.loads(seen[0].content)["content"] == VALID_SPECFILE

    def test_invalid_file(self, specfile: Path) -> None:
        """Test an invalid reply carries its errors."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                200, json={"isValid": False, "errors": ["Syntax error on line 5"]}
            )
        )
        with self._client(transport) as client:
            reply = client.validate_poweron(str(specfile))

        assert not reply.is_valid
        assert reply.errors == ["Syntax error on line 5"]

    def test_http_error_uses_detail(self, specfile: Path) -> None:
        """Test server errors surface the response detail."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(401, json={"detail": "Bad credentials"})
        )
        with self._client(transport) as client:
            with pytest.raises(SymitarClientError, match="Bad credentials"):
                _ = client.validate_poweron(str(specfile))

    def test_connection_error(self, specfile: Path) -> None:
        """Test transport failures raise SymitarClientError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with self._client(httpx.MockTransport(handler)) as client:
            with pytest.raises(SymitarClientError, match="Connection error"):
                _ = client.validate_poweron(str(specfile))

    def test_malformed_reply(self, specfile: Path) -> None:
        """Test a reply without isValid is rejected."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": 1}))
        with self._client(transport) as client:
            with pytest.raises(SymitarClientError, match="Unexpected response"):
                _ = client.validate_poweron(str(specfile))

    def test_unreadable_file(self, temp_dir: Path) -> None:
        """Test a missing local file raises before any request."""
        handler = MagicMock()
        with self._client(httpx.MockTransport(handler)) as client:
            with pytest.raises(SymitarClientError, match="Could not read"):
                _ = client.validate_poweron(str(temp_dir / "MISSING.PO"))
        handler.assert_not_called()


class FakeStdin:
    def __init__(self) -> None:
        self.lines: list[dict[str, object]] = []
        self.closed = False

    def write(self, data: str) -> None:
        self.lines.append(json.loads(data))

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


class FakeStdout:
    def __init__(self, replies: list[str]) -> None:
        self.replies = list(replies)

    def readline(self) -> str:
        return self.replies.pop(0) if self.replies else ""


class FakeStderr:
    def __init__(self, text: str = "") -> None:
        self.text = text

    def read(self) -> bytes:
        return self.text.encode()


def _fake_ssh_client(replies: list[dict[str, object]], stderr: str = "") -> MagicMock:
    client = MagicMock(spec=paramiko.SSHClient)
    client.stdin = FakeStdin()
    client.stdout = FakeStdout([json.dumps(r) + "\n" for r in replies])
    client.exec_command.return_value = (client.stdin, client.stdout, FakeStderr(stderr))
    client.sftp = MagicMock()
    client.open_sftp.return_value = client.sftp
    return client


class TestValidateWorker:
    """Tests for the JSON-lines validate worker."""

    def test_handshake_validate_and_reset(self, specfile: Path) -> None:
        """Test login, upload, validate and reset happen in order."""
        client = _fake_ssh_client(
            [
                {"ready": True},
                {"isValid": False, "errors": "Syntax error on line 5"},
                {"reset": True},
            ]
        )
        worker = ValidateWorker(client, SYM_CONFIG, command="validator --stdio")

        reply = worker.validate_poweron(str(specfile))

        client.exec_command.assert_called_once_with("validator --stdio")
        client.sftp.put.assert_called_once_with(
            str(specfile), "/SYM/SYM001/REPWRITERSPECS/REPORT.PO"
        )
        assert client.stdin.lines == [
            {"symNumber": 1, "symitarUserNumber": "1234", "symitarUserPassword": "secret"},
            {"file": "REPORT.PO"},
            {"reset": True},
        ]
        assert not reply.is_valid
        assert reply.errors == ["Syntax error on line 5"]

    def test_failed_reset_keeps_verdict(self, specfile: Path) -> None:
        """Test a reply survives a failed reset and the next file is refused."""
        client = _fake_ssh_client([{"ready": True}, {"isValid": True}], stderr="worker died")
        worker = ValidateWorker(client, SYM_CONFIG)

        reply = worker.validate_poweron(str(specfile))

        assert reply.is_valid
        with pytest.raises(SymitarClientError, match="did not reset.*worker died"):
            _ = worker.validate_poweron(str(specfile))
        assert client.sftp.put.call_count == 1

    def test_login_rejected(self) -> None:
        """Test a worker that does not acknowledge readiness fails to start."""
        client = _fake_ssh_client([{"ready": False, "error": "bad password"}])
        with pytest.raises(SymitarClientError, match="bad password"):
            _ = ValidateWorker(client, SYM_CONFIG)

    def test_worker_exits(self, specfile: Path) -> None:
        """Test an exited worker reports its stderr."""
        client = _fake_ssh_client([{"ready": True}], stderr="segfault")
        worker = ValidateWorker(client, SYM_CONFIG)
        with pytest.raises(SymitarClientError, match="segfault"):
            _ = worker.validate_poweron(str(specfile))

    def test_upload_failure(self, specfile: Path) -> None:
        """Test SFTP errors become SymitarClientError."""
        client = _fake_ssh_client([{"ready": True}])
        client.sftp.put.side_effect = OSError("permission denied")
        worker = ValidateWorker(client, SYM_CONFIG, staging_directory="/tmp/specs")
        with pytest.raises(SymitarClientError, match="permission denied"):
            _ = worker.validate_poweron(str(specfile))

    def test_overlapping_calls_rejected(self, specfile: Path) -> None:
        """Test a second call while one is in flight is refused."""
        client = _fake_ssh_client([{"ready": True}])
        worker = ValidateWorker(client, SYM_CONFIG)
        entered = threading.Event()
        release = threading.Event()

        def slow_put(local: str, remote: str) -> None:
            entered.set()
            _ = release.wait(5)
            raise OSError("aborted")

        client.sftp.put.side_effect = slow_put
        errors: list[Exception] = []

        def first_call() -> None:
            try:
                _ = worker.validate_poweron(str(specfile))
            except SymitarClientError as e:
                errors.append(e)

        thread = threading.Thread(target=first_call)
        thread.start()
        assert entered.wait(5)
        try:
            with pytest.raises(SymitarClientError, match="busy"):
                _ = worker.validate_poweron(str(specfile))
        finally:
            release.set()
            thread.join(5)
        assert len(errors) == 1

    def test_closed_worker(self, specfile: Path) -> None:
        """Test a closed worker refuses work."""
        client = _fake_ssh_client([{"ready": True}])
        worker = ValidateWorker(client, SYM_CONFIG)
        worker.close()
        worker.close()
        client.sftp.close.assert_called_once()
        assert client.stdin.closed
        with pytest.raises(SymitarClientError, match="closed"):
            _ = worker.validate_poweron(str(specfile))


class TestSymitarSSH:
    """Tests for the SSH session lifecycle."""

    def _session(self, client: MagicMock) -> SymitarSSH:
        return SymitarSSH(
            SSHConfig(host="sym.example.com", username="user", password="pw", port=2222),
            client_factory=lambda: client,
        )

    def test_worker_requires_ready(self) -> None:
        """Test workers cannot be created before connecting."""
        session = self._session(_fake_ssh_client([{"ready": True}]))
        assert not session.is_ready
        with pytest.raises(SymitarClientError, match="not ready"):
            _ = session.create_validate_worker(SYM_CONFIG)

    def test_connect_create_and_end(self) -> None:
        """Test connection settings, worker creation and teardown."""
        client = _fake_ssh_client([{"ready": True}])
        session = self._session(client)

        session.wait_until_ready()
        session.wait_until_ready()
        worker = session.create_validate_worker(SYM_CONFIG)
        session.end()

        client.connect.assert_called_once_with(
            "sym.example.com",
            port=2222,
            username="user",
            password="pw",
            timeout=30.0,
            look_for_keys=False,
            allow_agent=False,
        )
        assert worker.staging_directory == default_staging_directory(1)
        client.sftp.close.assert_called_once()
        client.close.assert_called_once()
        assert not session.is_ready

    def test_connect_failure(self) -> None:
        """Test authentication errors become SymitarClientError."""
        client = _fake_ssh_client([])
        client.connect.side_effect = paramiko.AuthenticationException("denied")
        session = self._session(client)
        with pytest.raises(SymitarClientError, match="denied"):
            session.wait_until_ready()
        assert not session.is_ready
