# Copyright (c) Syntropy Systems
"""Resolve the set of PowerOn files in scope for a run."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from poweron_validate.classifier import is_poweron_file
from poweron_validate.errors import BranchResolutionError
from poweron_validate.git import diff_name_status, ref_exists
from poweron_validate.models.validation import CandidateFile, FileStatus

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator

logger = logging.getLogger(__name__)

_REMOTE_PREFIX = "origin/"

_STATUS_NAMES = {
    "A": FileStatus.ADDED.value,
    "M": FileStatus.MODIFIED.value,
}


def branch_variants(branch: str) -> list[str]:
    """Forms a target branch may be checked out under, in lookup order.

    CI checkouts expose the same branch as ``origin/main``, ``main``,
    ``refs/remotes/origin/main`` and so on. Duplicates are dropped.
    """
    bare = branch[len(_REMOTE_PREFIX):] if branch.startswith(_REMOTE_PREFIX) else branch
    candidates = [
        branch,
        f"refs/remotes/origin/{bare}",
        bare,
        f"refs/heads/{bare}",
        f"remotes/origin/{bare}",
    ]
    variants: list[str] = []
    for candidate in candidates:
        if candidate not in variants:
            variants.append(candidate)
    return variants


def resolve_branch(branch: str, *, repo_root: Path, log_prefix: str = "") -> str:
    """Return the first variant of ``branch`` that resolves to a commit.

    Raises:
        BranchResolutionError: If no variant resolves.

    """
    tried: list[str] = []
    for variant in branch_variants(branch):
        tried.append(variant)
        if ref_exists(variant, repo_root=repo_root):
            if variant != branch:
                logger.info("%s Resolved target branch %s as %s", log_prefix, branch, variant)
            return variant
        logger.debug("%s Branch reference %s not found", log_prefix, variant)
    raise BranchResolutionError(branch, tuple(tried))


def parse_name_status(line: str) -> CandidateFile | None:
    """Parse one ``git diff --name-status`` line.

    Returns None for deletions and malformed lines. Renames and copies
    (``R100\\told\\tnew``) yield the destination path.
    """
    parts = line.rstrip("\r\n").split("\t")
    if len(parts) < 2 or not parts[0]:
        return None
    code = parts[0].strip()
    path = parts[-1]
    if code == "D" or not path:
        return None
    return CandidateFile(path=path, status=_STATUS_NAMES.get(code, code))


def _walk_files(directory: str, root: Path) -> Iterator[str]:
    base = Path(directory)
    top = base if base.is_absolute() else root / base
    if not top.is_dir():
        logger.warning("PowerOn directory not found: %s", top)
        return
    for dirpath, dirnames, filenames in os.walk(top):
        dirnames.sort()
        rel_dir = os.path.relpath(dirpath, top)
        for filename in sorted(filenames):
            full = Path(dirpath) / filename
            if not full.is_file():
                continue
            if rel_dir == ".":
                yield os.path.join(directory, filename)
            else:
                yield os.path.join(directory, rel_dir, filename)


def scan_directory(directory: str, *, repo_root: Path) -> list[CandidateFile]:
    """Every PowerOn file under ``directory``, tagged ``existing``."""
    return [
        CandidateFile(path=path, status=FileStatus.EXISTING.value)
        for path in _walk_files(directory, repo_root)
        if is_poweron_file(path)
    ]


def diff_against(
    branch: str,
    directory: str,
    *,
    repo_root: Path,
    log_prefix: str = "",
) -> list[CandidateFile]:
    """PowerOn files changed relative to ``branch``, deletions excluded."""
    ref = resolve_branch(branch, repo_root=repo_root, log_prefix=log_prefix)
    candidates: list[CandidateFile] = []
    for line in diff_name_status(ref, directory, repo_root=repo_root):
        candidate = parse_name_status(line)
        if candidate is None:
            continue
        if not is_poweron_file(candidate.path):
            logger.debug("%s Not a PowerOn file: %s", log_prefix, candidate.path)
            continue
        candidates.append(candidate)
    return candidates


def resolve_changeset(
    target_branch: str | None,
    directory: str,
    ignore_list: Collection[str],
    *,
    repo_root: Path,
    log_prefix: str = "",
) -> list[CandidateFile]:
    """Candidate files for this run, in scan/diff order.

    Without a target branch every PowerOn file under ``directory`` is in
    scope. With one, only files changed relative to it are.
    """
    if target_branch:
        logger.info("%s Comparing against %s", log_prefix, target_branch)
        candidates = diff_against(
            target_branch, directory, repo_root=repo_root, log_prefix=log_prefix
        )
    else:
        candidates = scan_directory(directory, repo_root=repo_root)

    kept: list[CandidateFile] = []
    for candidate in candidates:
        if candidate.name in ignore_list:
            logger.info("%s Ignoring %s (in ignore list)", log_prefix, candidate.path)
            continue
        kept.append(candidate)
    return kept
