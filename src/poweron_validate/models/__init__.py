# Copyright (c) Syntropy Systems
"""Pydantic models for validate-poweron."""

from .api import (
    ErrorResponse,
    SubscriptionCheck,
    SubscriptionResponse,
    SymConfig,
    ValidatePowerOnRequest,
    ValidationReply,
)
from .validation import (
    CandidateFile,
    ConnectionType,
    FileStatus,
    RunConfig,
    SkipDecision,
    ValidationOutcome,
    ValidationResult,
)

__all__ = [
    "CandidateFile",
    "ConnectionType",
    "ErrorResponse",
    "FileStatus",
    "RunConfig",
    "SkipDecision",
    "SubscriptionCheck",
    "SubscriptionResponse",
    "SymConfig",
    "ValidatePowerOnRequest",
    "ValidationOutcome",
    "ValidationReply",
    "ValidationResult",
]
