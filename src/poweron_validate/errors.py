# Copyright (c) Syntropy Systems
"""Exception hierarchy for validate-poweron."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from poweron_validate.git import GitResult


class PowerOnValidateError(Exception):
    """Base error for validate-poweron."""


class ConfigError(PowerOnValidateError):
    """Raised when run inputs are invalid."""


class SubscriptionError(PowerOnValidateError):
    """Raised when the API key cannot be verified."""


class SymitarClientError(PowerOnValidateError):
    """Error from Symitar transport communication."""


class GitError(PowerOnValidateError):
    """Raised when a git command fails in check mode."""

    result: GitResult | None

    def __init__(self, message: str, result: GitResult | None = None) -> None:
        super().__init__(message)
        self.result = result


class BranchResolutionError(PowerOnValidateError):
    """Raised when no form of the target branch resolves to a commit."""

    branch: str
    tried: tuple[str, ...]

    def __init__(self, branch: str, tried: tuple[str, ...]) -> None:
        msg = (
            f"Could not resolve target branch '{branch}' "
            f"(tried: {', '.join(tried)}). "
            "Make sure the repository is checked out with full history "
            "(e.g. actions/checkout with fetch-depth: 0)."
        )
        super().__init__(msg)
        self.branch = branch
        self.tried = tried
