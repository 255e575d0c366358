# Copyright (c) Syntropy Systems
"""HTTPS client for validating PowerOn files against a Symitar host."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from typing_extensions import Self

from poweron_validate.errors import SymitarClientError
from poweron_validate.models.api import (
    ErrorResponse,
    SymConfig,
    ValidatePowerOnRequest,
    ValidationReply,
)
from poweron_validate.transports.base import apply_log_level

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

logger = logging.getLogger(__name__)

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)

VALIDATE_PATH = "/api/v1/poweron/validate"


def build_base_url(hostname: str, port: int | None = None) -> str:
    """``https://<hostname>`` with ``:<port>`` appended unless it is 443."""
    base = f"https://{hostname}"
    if port is not None and port != 443:
        base = f"{base}:{port}"
    return base


class SymitarHTTPS:
    """Stateless HTTPS validation client.

    Each call uploads the file content and returns the host's verdict.
    """

    base_url: str
    sym_config: SymConfig
    timeout: float
    _client: httpx.Client

    def __init__(
        self,
        base_url: str,
        sym_config: SymConfig,
        log_level: str = "info",
        *,
        timeout: float = 120.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Base URL of the Symitar host (e.g., "https://sym.example.com")
            sym_config: Sym number and Symitar user credentials
            log_level: "debug" or "info"
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)

        """
        self.base_url = base_url.rstrip("/")
        self.sym_config = sym_config
        self.timeout = timeout
        apply_log_level(logger, log_level)
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def end(self) -> None:
        """Close the HTTP client."""
        self._client.close()
        logger.debug("Closed HTTPS client for %s", self.base_url)

    def __enter__(self) -> Self:
        """Enter the client context and return self."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the client context and close the HTTP client."""
        self.end()

    def _request(
        self,
        method: str,
        path: str,
        json: Mapping[str, object] | None = None,
        *,
        response_model: type[ResponseModel],
    ) -> ResponseModel:
        """Make an HTTP request to the host."""
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self._client.request(method=method, url=url, json=json)
            _ = response.raise_for_status()
            return response_model.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            # Try to get error detail from response
            try:
                detail = ErrorResponse.model_validate(e.response.json()).detail
            except (ValidationError, ValueError):
                detail = str(e)
            msg = f"Server error: {detail}"
            raise SymitarClientError(msg) from e
        except httpx.RequestError as e:
            msg = f"Connection error: {e}"
            raise SymitarClientError(msg) from e
        except (ValidationError, ValueError) as e:
            msg = f"Unexpected response from {url}: {e}"
            raise SymitarClientError(msg) from e

    def validate_poweron(self, path: str) -> ValidationReply:
        """Validate the PowerOn file at ``path``.

        Raises:
            SymitarClientError: If the file cannot be read or the host
                cannot be reached.

        """
        try:
            content = Path(path).read_text(encoding="utf-8-sig", errors="replace")
        except OSError as e:
            msg = f"Could not read {path}: {e}"
            raise SymitarClientError(msg) from e

        request = ValidatePowerOnRequest(
            **self.sym_config.model_dump(),
            file_name=Path(path).name,
            content=content,
        )
        reply = self._request(
            "POST",
            VALIDATE_PATH,
            json=request.model_dump(by_alias=True),
            response_model=ValidationReply,
        )
        logger.debug("%s valid=%s", Path(path).name, reply.is_valid)
        return reply
