# Copyright (c) Syntropy Systems
"""API key verification."""
from __future__ import annotations

import logging
import os

import httpx
from pydantic import ValidationError

from poweron_validate.errors import SubscriptionError
from poweron_validate.models.api import (
    ErrorResponse,
    SubscriptionCheck,
    SubscriptionResponse,
)

logger = logging.getLogger(__name__)

SUBSCRIPTION_URL_ENV = "POWERON_SUBSCRIPTION_URL"


def subscription_url() -> str | None:
    """Verification endpoint configured in the environment, if any."""
    return os.environ.get(SUBSCRIPTION_URL_ENV) or None


def verify_api_key(
    api_key: str | None,
    hostname: str,
    *,
    url: str | None = None,
    timeout: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> None:
    """Verify that ``api_key`` is licensed for ``hostname``.

    Raises:
        SubscriptionError: If the key is missing or rejected, or the
            verification service cannot be reached.

    """
    if not api_key:
        msg = "An API key is required to validate PowerOn files"
        raise SubscriptionError(msg)

    endpoint = url or subscription_url()
    if not endpoint:
        msg = f"No subscription endpoint configured; set {SUBSCRIPTION_URL_ENV}"
        raise SubscriptionError(msg)
    payload = SubscriptionCheck(api_key=api_key, hostname=hostname)
    logger.debug("Verifying API key for %s", hostname)
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.post(endpoint, json=payload.model_dump(by_alias=True))
            _ = response.raise_for_status()
            result = SubscriptionResponse.model_validate(response.json())
    except httpx.HTTPStatusError as e:
        try:
            detail = ErrorResponse.model_validate(e.response.json()).detail
        except (ValidationError, ValueError):
            detail = f"HTTP {e.response.status_code}"
        msg = f"API key verification failed: {detail}"
        raise SubscriptionError(msg) from e
    except httpx.RequestError as e:
        msg = f"API key verification failed: could not reach {endpoint}: {e}"
        raise SubscriptionError(msg) from e
    except (ValidationError, ValueError) as e:
        msg = f"API key verification failed: unexpected response: {e}"
        raise SubscriptionError(msg) from e

    if not result.valid:
        msg = f"API key verification failed: {result.message or 'invalid API key'}"
        raise SubscriptionError(msg)
