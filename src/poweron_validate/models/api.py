# Copyright (c) Syntropy Systems
"""Pydantic models for Symitar and subscription API requests and responses."""

from __future__ import annotations

from pydantic import Field, field_validator

from .base import CamelModel, PowerOnBaseModel


class SymConfig(CamelModel):
    """Symitar session credentials shared by both transports."""

    sym_number: int
    symitar_user_number: str
    symitar_user_password: str


class ValidatePowerOnRequest(SymConfig):
    """Request to validate one PowerOn file over HTTPS."""

    file_name: str
    content: str


class ValidationReply(CamelModel):
    """Validation reply from a transport.

    ``errors`` may arrive as a single string, a list, or null.
    """

    is_valid: bool
    errors: list[str] = Field(default_factory=list)

    @field_validator("errors", mode="before")
    @classmethod
    def _coerce_errors(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value else []
        return value


class ErrorResponse(PowerOnBaseModel):
    """Error response."""

    detail: str
    error_code: str | None = None


class SubscriptionCheck(CamelModel):
    """Request to verify an API key for a host."""

    api_key: str
    hostname: str


class SubscriptionResponse(PowerOnBaseModel):
    """Subscription verification response."""

    valid: bool
    message: str | None = None
