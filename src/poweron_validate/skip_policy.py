# Copyright (c) Syntropy Systems
"""Decide which candidate files are not validated standalone."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from poweron_validate.classifier import (
    extension_requires_skip,
    has_print_title_division,
    has_target_division,
    starts_with_procedure,
    strip_comments,
)
from poweron_validate.models.validation import CandidateFile, SkipDecision

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

INCLUDE_FILE_REASON = "file is an include/procedure file, not validated standalone"
PROCEDURE_REASON = "file is a procedure, not a specification"
MISSING_BOTH_REASON = "missing required TARGET and PRINT TITLE divisions"
MISSING_TARGET_REASON = "missing required TARGET division"
MISSING_PRINT_TITLE_REASON = "missing required PRINT TITLE division"


def decide_text(text: str) -> SkipDecision:
    """Content policy for PowerOn source text."""
    if starts_with_procedure(text):
        return SkipDecision.because(PROCEDURE_REASON)

    stripped = strip_comments(text)
    has_target = has_target_division(stripped)
    has_print_title = has_print_title_division(stripped)
    if not has_target and not has_print_title:
        return SkipDecision.because(MISSING_BOTH_REASON)
    if not has_target:
        return SkipDecision.because(MISSING_TARGET_REASON)
    if not has_print_title:
        return SkipDecision.because(MISSING_PRINT_TITLE_REASON)
    return SkipDecision.keep()


def decide(path: str | Path) -> SkipDecision:
    """Skip decision for the file at ``path``.

    Include extensions are skipped without opening the file. A file that
    cannot be read is kept so the remote validator reports the problem.
    """
    if extension_requires_skip(path):
        return SkipDecision.because(INCLUDE_FILE_REASON)

    try:
        text = Path(path).read_text(encoding="utf-8-sig", errors="replace")
    except OSError as e:
        logger.debug("Could not read %s for skip checks: %s", path, e)
        return SkipDecision.keep()

    return decide_text(text)


def filter_candidates(
    candidates: Iterable[CandidateFile],
    *,
    root: Path | None = None,
    log_prefix: str = "",
) -> list[CandidateFile]:
    """Drop candidates the skip-policy excludes, logging each reason."""
    kept: list[CandidateFile] = []
    for candidate in candidates:
        location = Path(candidate.path)
        if root is not None and not location.is_absolute():
            location = root / location
        decision = decide(location)
        if decision.skip:
            logger.info("%s Skipping %s: %s", log_prefix, candidate.path, decision.reason)
            continue
        kept.append(candidate)
    return kept
