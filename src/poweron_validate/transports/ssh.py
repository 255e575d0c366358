# Copyright (c) Syntropy Systems
"""SSH session and stateful validate worker for a Symitar host."""
from __future__ import annotations

import json
import logging
import posixpath
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, cast

import paramiko
from pydantic import ValidationError

from poweron_validate.errors import SymitarClientError
from poweron_validate.models.api import SymConfig, ValidationReply
from poweron_validate.transports.base import apply_log_level

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_VALIDATE_COMMAND = "poweron-validate --stdio"


def default_staging_directory(sym_number: int) -> str:
    """Remote directory specfiles are uploaded to before validation."""
    return f"/SYM/SYM{sym_number:03d}/REPWRITERSPECS"


@dataclass(frozen=True)
class SSHConfig:
    """Connection settings for the Symitar SSH host."""

    host: str
    username: str
    password: str
    port: int = 22


class ValidateWorker:
    """Long-lived remote validation process.

    One worker serves a whole session. It is single-flight: the remote
    process keeps per-session state, so calls must not overlap.
    Creating it logs in to Symitar, which is the slow part.
    """

    sym_config: SymConfig
    staging_directory: str
    _sftp: paramiko.SFTPClient
    _stdin: paramiko.ChannelFile
    _stdout: paramiko.ChannelFile
    _stderr: paramiko.ChannelFile
    _lock: threading.Lock
    _closed: bool
    _reset_failure: str | None

    def __init__(
        self,
        client: paramiko.SSHClient,
        sym_config: SymConfig,
        *,
        command: str = DEFAULT_VALIDATE_COMMAND,
        staging_directory: str | None = None,
    ) -> None:
        self.sym_config = sym_config
        self.staging_directory = staging_directory or default_staging_directory(
            sym_config.sym_number
        )
        self._lock = threading.Lock()
        self._closed = False
        self._reset_failure = None
        try:
            self._sftp = client.open_sftp()
            self._stdin, self._stdout, self._stderr = client.exec_command(command)
        except (paramiko.SSHException, OSError) as e:
            msg = f"Failed to start validate worker: {e}"
            raise SymitarClientError(msg) from e

        ack = self._exchange(sym_config.model_dump(by_alias=True))
        if not ack.get("ready", False):
            detail = ack.get("error") or "login rejected"
            msg = f"Validate worker did not start: {detail}"
            raise SymitarClientError(msg)
        logger.debug("Validate worker ready for sym %03d", sym_config.sym_number)

    def _read_stderr(self) -> str:
        try:
            return cast("bytes", self._stderr.read()).decode("utf-8", "replace").strip()
        except (paramiko.SSHException, OSError):
            return ""

    def _exchange(self, payload: dict[str, object]) -> dict[str, object]:
        """Send one JSON line and read one JSON line back."""
        try:
            self._stdin.write(json.dumps(payload) + "\n")
            self._stdin.flush()
            line = cast("str", self._stdout.readline())
        except (paramiko.SSHException, OSError) as e:
            msg = f"Validate worker connection lost: {e}"
            raise SymitarClientError(msg) from e

        if not line:
            detail = self._read_stderr() or "no output"
            msg = f"Validate worker exited unexpectedly: {detail}"
            raise SymitarClientError(msg)
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            msg = f"Malformed reply from validate worker: {line.strip()!r}"
            raise SymitarClientError(msg) from e
        if not isinstance(data, dict):
            msg = f"Malformed reply from validate worker: {line.strip()!r}"
            raise SymitarClientError(msg)
        return cast("dict[str, object]", data)

    def validate_poweron(self, path: str) -> ValidationReply:
        """Upload ``path`` to the staging directory and validate it.

        Raises:
            SymitarClientError: If the worker is closed, busy or failed to
                reset after the previous file, the upload fails, or the
                worker replies with something unexpected.

        """
        if self._closed:
            msg = "Validate worker is closed"
            raise SymitarClientError(msg)
        if self._reset_failure is not None:
            msg = f"Validate worker did not reset after the last file: {self._reset_failure}"
            raise SymitarClientError(msg)
        if not self._lock.acquire(blocking=False):
            msg = "Validate worker is busy; calls must be sequential"
            raise SymitarClientError(msg)
        try:
            name = Path(path).name
            remote_path = posixpath.join(self.staging_directory, name)
            try:
                _ = self._sftp.put(str(path), remote_path)
            except (paramiko.SSHException, OSError) as e:
                msg = f"Upload of {name} failed: {e}"
                raise SymitarClientError(msg) from e

            data = self._exchange({"file": name})
            try:
                reply = ValidationReply.model_validate(data)
            except ValidationError as e:
                msg = f"Malformed validation reply for {name}: {e}"
                raise SymitarClientError(msg) from e

            # A failed reset fails the next file, not this one.
            try:
                _ = self._exchange({"reset": True})
            except SymitarClientError as e:
                self._reset_failure = str(e)
                logger.warning("Validate worker reset after %s failed: %s", name, e)
            return reply
        finally:
            self._lock.release()

    def close(self) -> None:
        """Stop the remote process and release the SFTP channel."""
        if self._closed:
            return
        self._closed = True
        try:
            self._stdin.close()
        finally:
            self._sftp.close()


class SymitarSSH:
    """SSH connection to a Symitar host.

    Call ``wait_until_ready()`` before creating a worker.
    """

    config: SSHConfig
    validate_command: str
    staging_directory: str | None
    connect_timeout: float
    _client: paramiko.SSHClient
    _ready: threading.Event
    _workers: list[ValidateWorker]

    def __init__(
        self,
        config: SSHConfig,
        log_level: str = "warning",
        *,
        validate_command: str | None = None,
        staging_directory: str | None = None,
        connect_timeout: float = 30.0,
        client_factory: Callable[[], paramiko.SSHClient] = paramiko.SSHClient,
    ) -> None:
        self.config = config
        self.validate_command = validate_command or DEFAULT_VALIDATE_COMMAND
        self.staging_directory = staging_directory
        self.connect_timeout = connect_timeout
        apply_log_level(logger, log_level)
        apply_log_level(logging.getLogger("paramiko"), log_level)
        self._client = client_factory()
        self._ready = threading.Event()
        self._workers = []

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def wait_until_ready(self) -> None:
        """Connect and authenticate; returns once the session is usable.

        Raises:
            SymitarClientError: If the host cannot be reached or rejects
                the credentials.

        """
        if self._ready.is_set():
            return
        self._client.load_system_host_keys()
        self._client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        logger.debug("Connecting to %s:%s", self.config.host, self.config.port)
        try:
            self._client.connect(
                self.config.host,
                port=self.config.port,
                username=self.config.username,
                password=self.config.password,
                timeout=self.connect_timeout,
                look_for_keys=False,
                allow_agent=False,
            )
        except (paramiko.SSHException, OSError) as e:
            msg = f"SSH connection to {self.config.host}:{self.config.port} failed: {e}"
            raise SymitarClientError(msg) from e
        self._ready.set()

    def create_validate_worker(self, sym_config: SymConfig) -> ValidateWorker:
        """Start the session's validate worker."""
        if not self._ready.is_set():
            msg = "SSH session is not ready; call wait_until_ready() first"
            raise SymitarClientError(msg)
        worker = ValidateWorker(
            self._client,
            sym_config,
            command=self.validate_command,
            staging_directory=self.staging_directory,
        )
        self._workers.append(worker)
        return worker

    def end(self) -> None:
        """Close every worker and the SSH connection."""
        try:
            for worker in self._workers:
                worker.close()
        finally:
            self._workers.clear()
            self._client.close()
            self._ready.clear()
            logger.debug("Closed SSH session to %s", self.config.host)
