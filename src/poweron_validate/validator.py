# Copyright (c) Syntropy Systems
"""Run entry point: verify, resolve, filter, dispatch."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from poweron_validate.changeset import resolve_changeset
from poweron_validate.dispatcher import validate_with_transport
from poweron_validate.results import empty_result
from poweron_validate.skip_policy import filter_candidates
from poweron_validate.subscription import verify_api_key

if TYPE_CHECKING:
    from poweron_validate.models.validation import (
        CandidateFile,
        RunConfig,
        ValidationResult,
    )

logger = logging.getLogger(__name__)


def collect_files(config: RunConfig) -> list[CandidateFile]:
    """Candidate files for the run after ignore-list and skip-policy."""
    candidates = resolve_changeset(
        config.target_branch,
        config.poweron_directory,
        config.ignore_list,
        repo_root=config.workdir,
        log_prefix=config.log_prefix,
    )
    return filter_candidates(
        candidates,
        root=config.repo_root,
        log_prefix=config.log_prefix,
    )


def validate_powerons(config: RunConfig) -> ValidationResult:
    """Validate every PowerOn file in scope for ``config``.

    Raises:
        SubscriptionError: If the API key is rejected.
        BranchResolutionError: If the target branch cannot be found.

    """
    api_key = config.api_key.get_secret_value() if config.api_key else None
    verify_api_key(
        api_key,
        config.symitar_hostname,
        url=config.subscription_url,
    )

    files = collect_files(config)
    if not files:
        logger.info("%s No PowerOn files found to validate", config.log_prefix)
        return empty_result()

    logger.info("%s Found %d file(s) to validate:", config.log_prefix, len(files))
    for candidate in files:
        logger.info("%s - %s (%s)", config.log_prefix, candidate.path, candidate.status)

    return validate_with_transport(config, files)
