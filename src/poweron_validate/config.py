# Copyright (c) Syntropy Systems
"""Project configuration for validate-poweron."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

import yaml

from poweron_validate.errors import ConfigError

CONFIG_FILENAME = ".validate-poweron.yaml"


@dataclass
class ProjectConfig:
    """Defaults for a repository, overridden by CLI options."""

    poweron_directory: str = "REPWRITERSPECS/"
    connection_type: str = "ssh"
    ssh_port: int = 22
    https_port: int | None = None
    validate_ignore: list[str] = field(default_factory=list)
    log_prefix: str = "[ValidatePowerOn]"

    # Remote command speaking the JSON-lines validate protocol
    ssh_validate_command: str | None = None

    # Where specfiles are uploaded on the host (default /SYM/SYMnnn/REPWRITERSPECS)
    ssh_staging_directory: str | None = None

    subscription_url: str | None = None

    # Per-request timeout for HTTPS calls (seconds)
    request_timeout: float = 120.0


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find the nearest config file by walking up from start_path.

    Falls back to ``~/.validate-poweron.yaml``. Returns None if neither
    exists.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current == current.parent:
            break
        current = current.parent

    global_config = Path.home() / CONFIG_FILENAME
    if global_config.is_file():
        return global_config

    return None


def _str_or_none(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def load_config(
    config_path: Path | None = None,
    *,
    start_path: Path | None = None,
) -> ProjectConfig:
    """Load configuration from a config file or defaults.

    Looks for config in:
    1. Provided config_path
    2. Nearest .validate-poweron.yaml walking up from start_path (default: cwd)
    3. ~/.validate-poweron.yaml
    4. Defaults

    Values of the wrong type are ignored.
    """
    config = ProjectConfig()

    if config_path is None:
        config_path = find_config_file(start_path)

    if config_path is None or not config_path.exists():
        return config

    try:
        with config_path.open() as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {config_path}: {e}"
        raise ConfigError(msg) from e

    if not isinstance(raw, dict):
        msg = f"{config_path} must contain a mapping"
        raise ConfigError(msg)
    data = cast("dict[str, object]", raw)

    poweron_directory = _str_or_none(data.get("poweron_directory"))
    if poweron_directory:
        config.poweron_directory = poweron_directory
    connection_type = _str_or_none(data.get("connection_type"))
    if connection_type:
        config.connection_type = connection_type.lower()
    ssh_port = data.get("ssh_port")
    if isinstance(ssh_port, int) and not isinstance(ssh_port, bool):
        config.ssh_port = ssh_port
    https_port = data.get("https_port")
    if isinstance(https_port, int) and not isinstance(https_port, bool):
        config.https_port = https_port
    validate_ignore = data.get("validate_ignore")
    if isinstance(validate_ignore, str):
        config.validate_ignore = parse_ignore_list(validate_ignore)
    elif isinstance(validate_ignore, list):
        config.validate_ignore = [
            str(item).strip() for item in validate_ignore if str(item).strip()
        ]
    log_prefix = _str_or_none(data.get("log_prefix"))
    if log_prefix:
        config.log_prefix = log_prefix
    config.ssh_validate_command = (
        _str_or_none(data.get("ssh_validate_command")) or config.ssh_validate_command
    )
    config.ssh_staging_directory = (
        _str_or_none(data.get("ssh_staging_directory")) or config.ssh_staging_directory
    )
    config.subscription_url = (
        _str_or_none(data.get("subscription_url")) or config.subscription_url
    )
    request_timeout = data.get("request_timeout")
    if isinstance(request_timeout, (int, float)) and not isinstance(request_timeout, bool):
        config.request_timeout = float(request_timeout)

    return config


def parse_ignore_list(value: str | None) -> list[str]:
    """Split a comma-separated ignore list, dropping blanks."""
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]
