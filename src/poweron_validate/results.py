# Copyright (c) Syntropy Systems
"""Fold per-file outcomes into a run result."""

from __future__ import annotations

from typing import TYPE_CHECKING

from poweron_validate.models.validation import ValidationOutcome, ValidationResult

if TYPE_CHECKING:
    from poweron_validate.models.api import ValidationReply


def outcome_from_reply(file_name: str, reply: ValidationReply) -> ValidationOutcome:
    """Outcome for a transport that answered."""
    return ValidationOutcome(
        file_name=file_name,
        is_valid=reply.is_valid,
        errors=[] if reply.is_valid else list(reply.errors),
    )


def outcome_from_exception(file_name: str, exc: BaseException) -> ValidationOutcome:
    """Outcome for a transport call that raised."""
    message = str(exc) or type(exc).__name__
    return ValidationOutcome(file_name=file_name, is_valid=False, errors=[message])


class ResultAggregator:
    """Accumulates outcomes in validation order."""

    _outcomes: list[ValidationOutcome]

    def __init__(self) -> None:
        self._outcomes = []

    def record(self, outcome: ValidationOutcome) -> None:
        self._outcomes.append(outcome)

    def result(self) -> ValidationResult:
        """Build the run's ValidationResult."""
        failed = [outcome for outcome in self._outcomes if not outcome.is_valid]
        validated = len(self._outcomes)
        return ValidationResult(
            files_validated=validated,
            files_passed=validated - len(failed),
            files_failed=len(failed),
            errors=[outcome.error_entry for outcome in failed],
            validated_files=[outcome.file_name for outcome in self._outcomes],
        )


def empty_result() -> ValidationResult:
    """Result for a run with nothing to validate."""
    return ValidationResult()
