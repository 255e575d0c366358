# Copyright (c) Syntropy Systems
"""Logging setup for the validate-poweron CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "poweron_validate"


def configure_logging(*, debug: bool = False) -> logging.Logger:
    """Send package logs to stderr through rich."""
    level = logging.DEBUG if debug else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated invocations don't duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=debug,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    return logger
