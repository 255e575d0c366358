# Copyright (c) Syntropy Systems
"""Capability shared by the Symitar transports."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from poweron_validate.models.api import ValidationReply


class PowerOnValidator(Protocol):
    """Anything that can validate one PowerOn file at a time."""

    def validate_poweron(self, path: str) -> ValidationReply:
        ...


def apply_log_level(logger: logging.Logger, level: str) -> None:
    """Set a transport logger's level from a name such as ``"debug"``."""
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
