# Copyright (c) Syntropy Systems
"""Thin git command runner."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from poweron_validate.errors import GitError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitResult:
    """Result envelope for a git invocation."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_git(
    args: list[str],
    *,
    repo_root: Path,
    check: bool = True,
) -> GitResult:
    """Run ``git <args>`` in ``repo_root`` and return structured result.

    Raises:
        GitError: If git is not installed, or the command exits non-zero
            while ``check`` is set.

    """
    git_path = shutil.which("git")
    if git_path is None:
        msg = "git executable not found on PATH"
        raise GitError(msg)

    argv = ["git", *args]
    logger.debug("Running %s in %s", " ".join(argv), repo_root)
    try:
        completed = subprocess.run(  # noqa: S603
            [git_path, *args],
            cwd=repo_root,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            check=False,
        )
    except OSError as e:
        msg = f"failed to run {' '.join(argv)}: {e}"
        raise GitError(msg) from e

    result = GitResult(
        argv=tuple(argv),
        cwd=repo_root.resolve(),
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )
    if check and not result.ok:
        detail = (result.stderr or result.stdout).strip()
        msg = f"command failed ({result.returncode}): {' '.join(argv)}\n{detail}"
        raise GitError(msg, result)
    return result


def ref_exists(ref: str, *, repo_root: Path) -> bool:
    """Return True if ``ref`` resolves to a commit."""
    result = run_git(
        ["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"],
        repo_root=repo_root,
        check=False,
    )
    return result.ok


def split_name_status_z(output: str) -> list[str]:
    """Turn ``--name-status -z`` output into tab-separated records.

    Rename and copy codes (``R100``, ``C75``) are followed by two paths,
    every other code by one. Paths come through unquoted.
    """
    fields = output.split("\0")
    records: list[str] = []
    i = 0
    while i < len(fields):
        code = fields[i]
        if not code:
            i += 1
            continue
        width = 2 if code[0] in "RC" else 1
        paths = fields[i + 1 : i + 1 + width]
        i += 1 + width
        if len(paths) < width:
            logger.warning("Truncated git diff record: %r", code)
            break
        records.append("\t".join([code, *paths]))
    return records


def diff_name_status(ref: str, directory: str, *, repo_root: Path) -> list[str]:
    """Records of ``git diff --name-status -z <ref> -- <directory>``.

    Each record is ``<code>\\t<path>`` (``<code>\\t<old>\\t<new>`` for
    renames and copies), with non-ASCII paths left unquoted.
    """
    result = run_git(
        ["diff", "--name-status", "-z", ref, "--", directory],
        repo_root=repo_root,
    )
    return split_name_status_z(result.stdout)


def is_work_tree(repo_root: Path) -> bool:
    result = run_git(
        ["rev-parse", "--is-inside-work-tree"],
        repo_root=repo_root,
        check=False,
    )
    return result.ok and result.stdout.strip() == "true"
