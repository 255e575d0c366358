# Copyright (c) Syntropy Systems
"""GitHub Actions step outputs and annotations."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


def in_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def action_inputs(name: str) -> list[str]:
    """Environment variable names GitHub uses for action input ``name``.

    The runner keeps hyphens (``INPUT_SYM-NUMBER``); the underscore form
    is accepted too.
    """
    upper = name.upper().replace(" ", "_")
    names = [f"INPUT_{upper}"]
    underscored = f"INPUT_{upper.replace('-', '_')}"
    if underscored not in names:
        names.append(underscored)
    return names


def set_outputs(outputs: Mapping[str, object]) -> bool:
    """Append ``name=value`` lines to ``$GITHUB_OUTPUT``.

    Returns False when not running under a runner that provides the file.
    """
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        return False
    with Path(output_path).open("a", encoding="utf-8") as f:
        for name, value in outputs.items():
            f.write(f"{name}={value}\n")
    return True


def escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def error_annotation(message: str) -> str:
    """Workflow command that raises an error annotation."""
    return f"::error::{escape_data(message)}"
