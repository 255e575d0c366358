# Copyright (c) Syntropy Systems
"""Pytest fixtures for validate-poweron tests."""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from poweron_validate.models.api import ValidationReply
from poweron_validate.models.validation import RunConfig

VALID_SPECFILE = """TARGET=ACCOUNT

DEFINE
  @MYVAR=NUMBER
END

PRINT TITLE="My Report"
  ACCOUNT:NUMBER
END
"""

PROCEDURE_FILE = "PROCEDURE MYPROC\n  [ procedure content ]\nEND\n"

SHARE_SPECFILE = """TARGET=SHARE

SELECT
  SHARE:BALANCE > 1000.00
END

PRINT TITLE="Large share balances"
  COL=1 SHARE:ID
  COL=10 SHARE:BALANCE
  NEWLINE
END
"""


class FakeValidator:
    """Records calls and answers from a script of replies or exceptions."""

    def __init__(self, replies: dict[str, ValidationReply | BaseException] | None = None) -> None:
        self.replies = replies or {}
        self.calls: list[str] = []

    def validate_poweron(self, path: str) -> ValidationReply:
        self.calls.append(path)
        reply = self.replies.get(Path(path).name, ValidationReply(is_valid=True))
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def poweron_repo(temp_dir: Path) -> Path:
    """A checkout with a REPWRITERSPECS directory of valid specfiles."""
    specs = temp_dir / "REPWRITERSPECS"
    specs.mkdir()
    for name in ("FILE1.PO", "FILE2.PO"):
        _ = (specs / name).write_text(VALID_SPECFILE)
    return temp_dir


@pytest.fixture
def make_config(temp_dir: Path) -> Callable[..., RunConfig]:
    """Factory for RunConfig rooted at the temp directory."""

    def _make(**overrides: object) -> RunConfig:
        values: dict[str, object] = {
            "symitar_hostname": "test.symitar.example.com",
            "sym_number": "001",
            "symitar_user_number": "1234",
            "symitar_user_password": "password",
            "ssh_username": "sshuser",
            "ssh_password": "sshpass",
            "ssh_port": 22,
            "api_key": "test-api-key",
            "poweron_directory": "REPWRITERSPECS/",
            "log_prefix": "[Test]",
            "repo_root": temp_dir,
        }
        values.update(overrides)
        return RunConfig.model_validate(values)

    return _make


def git(repo: Path, *args: str) -> None:
    """Run git in ``repo`` with a fixed committer identity."""
    _ = subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=repo,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repo(temp_dir: Path) -> Path:
    """A git repo whose ``feature`` branch modifies, adds and deletes specfiles.

    ``main`` holds KEEP.PO, GONE.PO and NOTES.md. The checked-out
    ``feature`` branch edits KEEP.PO, adds NEW.PO and README.md, and
    deletes GONE.PO. NEW.PO shares no content with GONE.PO, so git does
    not report the pair as a rename.
    """
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    specs = temp_dir / "REPWRITERSPECS"
    specs.mkdir()
    git(temp_dir, "init", "-q")
    git(temp_dir, "symbolic-ref", "HEAD", "refs/heads/main")
    _ = (specs / "KEEP.PO").write_text(VALID_SPECFILE)
    _ = (specs / "GONE.PO").write_text(VALID_SPECFILE)
    _ = (specs / "NOTES.md").write_text("notes\n")
    git(temp_dir, "add", ".")
    git(temp_dir, "commit", "-q", "-m", "initial")

    git(temp_dir, "checkout", "-q", "-b", "feature")
    _ = (specs / "KEEP.PO").write_text(VALID_SPECFILE + "[ edited ]\n")
    _ = (specs / "NEW.PO").write_text(SHARE_SPECFILE)
    _ = (specs / "README.md").write_text("readme\n")
    (specs / "GONE.PO").unlink()
    git(temp_dir, "add", "-A")
    git(temp_dir, "commit", "-q", "-m", "feature work")
    return temp_dir


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Generator[None, None, None]:
    """Undo CLI logging setup so caplog sees package records."""
    yield
    logger = logging.getLogger("poweron_validate")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
