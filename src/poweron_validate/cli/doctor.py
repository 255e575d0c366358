# Copyright (c) Syntropy Systems
"""validate-poweron doctor command."""

import shutil
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from poweron_validate.changeset import resolve_branch
from poweron_validate.config import find_config_file, load_config
from poweron_validate.errors import BranchResolutionError, ConfigError, GitError
from poweron_validate.git import is_work_tree

console = Console()


def doctor(
    target_branch: Optional[str] = typer.Option(
        None,
        "--target-branch", "-b",
        help="Check that this branch resolves",
    ),
    repo_root: Optional[Path] = typer.Option(
        None,
        "--repo-root",
        help="Repository root (default: current directory)",
    ),
) -> None:
    """Check the checkout and diagnose issues.

    Verifies:
    - git is installed
    - the directory is a git work tree
    - the PowerOn directory exists
    - the target branch resolves (with --target-branch)
    """
    issues: list[str] = []
    warnings: list[str] = []
    root = repo_root or Path.cwd()

    config_path = find_config_file(root)
    try:
        project = load_config(config_path, start_path=root)
    except ConfigError as e:
        console.print(f"[red]\u2717[/red] {escape(str(e))}")
        issues.append("Invalid config file")
        project = None
    else:
        if config_path is not None:
            console.print(f"[green]\u2713[/green] Config: {config_path}")
        else:
            console.print("[dim]\u2022[/dim] No config file, using defaults")

    git_path = shutil.which("git")
    if git_path is None:
        console.print("[red]\u2717[/red] git not found on PATH")
        issues.append("git missing")
    else:
        console.print(f"[green]\u2713[/green] git: {git_path}")
        try:
            if is_work_tree(root):
                console.print(f"[green]\u2713[/green] Git work tree: {root}")
            else:
                console.print(f"[yellow]\u26a0[/yellow] Not a git work tree: {root}")
                warnings.append("Not a git work tree; --target-branch will not work")
        except GitError as e:
            console.print(f"[red]\u2717[/red] git error: {escape(str(e))}")
            issues.append(f"git error: {escape(str(e))}")

    if project is not None:
        directory = root / project.poweron_directory
        if directory.is_dir():
            console.print(f"[green]\u2713[/green] PowerOn directory: {directory}")
        else:
            console.print(f"[yellow]\u26a0[/yellow] PowerOn directory not found: {directory}")
            warnings.append("PowerOn directory missing")

    if target_branch and git_path is not None:
        try:
            ref = resolve_branch(target_branch, repo_root=root)
            console.print(f"[green]\u2713[/green] Target branch: {target_branch} -> {ref}")
        except BranchResolutionError as e:
            console.print(f"[red]\u2717[/red] {escape(str(e))}")
            issues.append("Target branch does not resolve")
        except GitError as e:
            console.print(f"[red]\u2717[/red] git error: {escape(str(e))}")
            issues.append(f"git error: {escape(str(e))}")

    # Summary
    console.print()
    if issues:
        console.print(f"[red]Found {len(issues)} issue(s)[/red]")
        for issue in issues:
            console.print(f"  - {issue}")
        raise typer.Exit(1)
    if warnings:
        console.print(f"[yellow]Found {len(warnings)} warning(s)[/yellow]")
        for warning in warnings:
            console.print(f"  - {warning}")
    else:
        console.print("[green]All checks passed[/green]")
