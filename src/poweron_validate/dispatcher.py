# Copyright (c) Syntropy Systems
"""Feed candidate files to a Symitar transport one at a time."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from poweron_validate.models.api import SymConfig
from poweron_validate.models.validation import ConnectionType
from poweron_validate.results import (
    ResultAggregator,
    outcome_from_exception,
    outcome_from_reply,
)
from poweron_validate.transports.https import SymitarHTTPS, build_base_url
from poweron_validate.transports.ssh import SSHConfig, SymitarSSH

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from contextlib import AbstractContextManager

    from poweron_validate.models.validation import (
        CandidateFile,
        RunConfig,
        ValidationResult,
    )
    from poweron_validate.transports.base import PowerOnValidator

    SessionOpener = Callable[[RunConfig], AbstractContextManager[PowerOnValidator]]

logger = logging.getLogger(__name__)


def sym_config_for(config: RunConfig) -> SymConfig:
    """Symitar login shared by both transports."""
    return SymConfig(
        sym_number=config.sym,
        symitar_user_number=config.symitar_user_number,
        symitar_user_password=config.symitar_user_password.get_secret_value(),
    )


@contextmanager
def https_session(config: RunConfig) -> Iterator[PowerOnValidator]:
    """HTTPS client for the run; closed without waiting on the way out."""
    client = SymitarHTTPS(
        build_base_url(config.symitar_hostname, config.https_port),
        sym_config_for(config),
        "debug" if config.debug else "info",
        timeout=config.request_timeout,
    )
    try:
        yield client
    finally:
        try:
            client.end()
        except Exception as e:  # noqa: BLE001
            logger.warning("%s Error closing HTTPS client: %s", config.log_prefix, e)


@contextmanager
def ssh_session(config: RunConfig) -> Iterator[PowerOnValidator]:
    """SSH session plus its single validate worker.

    The worker is created once and reused for every file.
    """
    client = SymitarSSH(
        SSHConfig(
            host=config.symitar_hostname,
            port=config.ssh_port,
            username=config.ssh_username or config.symitar_user_number,
            password=config.ssh_password.get_secret_value()
            or config.symitar_user_password.get_secret_value(),
        ),
        "debug" if config.debug else "warning",
        validate_command=config.ssh_validate_command,
        staging_directory=config.ssh_staging_directory,
    )
    try:
        client.wait_until_ready()
        yield client.create_validate_worker(sym_config_for(config))
    finally:
        client.end()


SESSION_OPENERS: dict[ConnectionType, SessionOpener] = {
    ConnectionType.HTTPS: https_session,
    ConnectionType.SSH: ssh_session,
}


def run_sequentially(
    validator: PowerOnValidator,
    files: Sequence[CandidateFile],
    config: RunConfig,
) -> ValidationResult:
    """Validate ``files`` in order, one call at a time.

    A failing or raising file becomes one error entry; the loop goes on.
    """
    aggregator = ResultAggregator()
    for candidate in files:
        logger.info("%s Validating %s...", config.log_prefix, candidate.path)
        try:
            reply = validator.validate_poweron(str(config.local_path(candidate.path)))
        except Exception as e:  # noqa: BLE001
            outcome = outcome_from_exception(candidate.name, e)
        else:
            outcome = outcome_from_reply(candidate.name, reply)

        if outcome.is_valid:
            logger.debug("%s %s passed", config.log_prefix, candidate.name)
        else:
            logger.error("%s %s", config.log_prefix, outcome.error_entry)
        aggregator.record(outcome)
    return aggregator.result()


def validate_with_transport(
    config: RunConfig,
    files: Sequence[CandidateFile],
    *,
    openers: dict[ConnectionType, SessionOpener] | None = None,
) -> ValidationResult:
    """Open the transport named by ``config.connection_type`` and validate."""
    table = openers if openers is not None else SESSION_OPENERS
    opener = table[config.connection_type]
    with opener(config) as validator:
        return run_sequentially(validator, files, config)


def validate_with_https(
    config: RunConfig, files: Sequence[CandidateFile]
) -> ValidationResult:
    return validate_with_transport(
        config.model_copy(update={"connection_type": ConnectionType.HTTPS}), files
    )


def validate_with_ssh(
    config: RunConfig, files: Sequence[CandidateFile]
) -> ValidationResult:
    return validate_with_transport(
        config.model_copy(update={"connection_type": ConnectionType.SSH}), files
    )
