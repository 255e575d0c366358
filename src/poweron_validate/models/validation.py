# Copyright (c) Syntropy Systems
"""Pydantic models for change-sets and validation results."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field, SecretStr, field_validator, model_validator
from typing_extensions import Self

from .base import CamelModel, FrozenModel, PowerOnBaseModel


class FileStatus(str, Enum):
    """Normalized change status of a candidate file."""

    EXISTING = "existing"
    ADDED = "added"
    MODIFIED = "modified"
    CHANGED = "changed"


class ConnectionType(str, Enum):
    """Remote validation transport."""

    SSH = "ssh"
    HTTPS = "https"


class CandidateFile(FrozenModel):
    """A file in scope for this run.

    ``status`` is one of the FileStatus values, or a git status code
    passed through verbatim (``R100``, ``C75``, ``T``...).
    """

    path: str
    status: str = FileStatus.EXISTING.value

    @property
    def name(self) -> str:
        """Basename of the file."""
        return Path(self.path).name


class SkipDecision(FrozenModel):
    """Whether the skip-policy excludes a file, and why."""

    skip: bool = False
    reason: str | None = None

    @classmethod
    def keep(cls) -> SkipDecision:
        return cls(skip=False)

    @classmethod
    def because(cls, reason: str) -> SkipDecision:
        return cls(skip=True, reason=reason)


class ValidationOutcome(PowerOnBaseModel):
    """Result of validating a single file."""

    file_name: str
    is_valid: bool
    errors: list[str] = Field(default_factory=list)

    @property
    def error_entry(self) -> str:
        """Aggregate error line attributed to the file."""
        return f"{self.file_name}: " + "\n".join(self.errors)


class ValidationResult(CamelModel):
    """Aggregated outcome of one run."""

    files_validated: int = 0
    files_passed: int = 0
    files_failed: int = 0
    errors: list[str] = Field(default_factory=list)
    validated_files: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_counts(self) -> Self:
        if self.files_validated != self.files_passed + self.files_failed:
            msg = "files_validated must equal files_passed + files_failed"
            raise ValueError(msg)
        if self.files_validated != len(self.validated_files):
            msg = "validated_files must list every validated file"
            raise ValueError(msg)
        if len(self.errors) != self.files_failed:
            msg = "errors must hold exactly one entry per failed file"
            raise ValueError(msg)
        return self

    @property
    def ok(self) -> bool:
        """True when no file failed."""
        return self.files_failed == 0


class RunConfig(FrozenModel):
    """Inputs for a single validation run."""

    symitar_hostname: str
    sym_number: str
    symitar_user_number: str
    symitar_user_password: SecretStr
    ssh_username: str = ""
    ssh_password: SecretStr = SecretStr("")
    ssh_port: int = Field(default=22, ge=1, le=65535)
    https_port: int | None = Field(default=None, ge=1, le=65535)
    api_key: SecretStr | None = None
    connection_type: ConnectionType = ConnectionType.SSH
    poweron_directory: str = "REPWRITERSPECS/"
    target_branch: str | None = None
    ignore_list: frozenset[str] = frozenset()
    log_prefix: str = "[ValidatePowerOn]"
    debug: bool = False
    repo_root: Path | None = None
    ssh_validate_command: str | None = None
    ssh_staging_directory: str | None = None
    request_timeout: float = 120.0
    subscription_url: str | None = None

    @field_validator("sym_number")
    @classmethod
    def _sym_number_is_numeric(cls, value: str) -> str:
        value = value.strip()
        if not value.isdigit():
            msg = f"sym number must be numeric, got {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("target_branch")
    @classmethod
    def _blank_branch_is_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def sym(self) -> int:
        """Sym number as an integer."""
        return int(self.sym_number)

    @property
    def workdir(self) -> Path:
        """Directory git commands and relative paths are rooted at."""
        return self.repo_root if self.repo_root is not None else Path.cwd()

    def local_path(self, path: str) -> Path:
        """Filesystem location of a repo-relative candidate path."""
        candidate = Path(path)
        if self.repo_root is None or candidate.is_absolute():
            return candidate
        return self.repo_root / candidate
