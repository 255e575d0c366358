# Copyright (c) Syntropy Systems
"""validate-poweron files command."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from poweron_validate.changeset import resolve_changeset
from poweron_validate.ci import action_inputs
from poweron_validate.config import load_config, parse_ignore_list
from poweron_validate.errors import PowerOnValidateError
from poweron_validate.log import configure_logging
from poweron_validate.skip_policy import filter_candidates

console = Console()


def files(
    poweron_directory: Optional[str] = typer.Option(
        None,
        "--poweron-directory", "-d",
        envvar=action_inputs("poweron-directory"),
        help="Directory holding PowerOn files (default: REPWRITERSPECS/)",
    ),
    target_branch: Optional[str] = typer.Option(
        None,
        "--target-branch", "-b",
        envvar=action_inputs("target-branch"),
        help="Only list files changed relative to this branch",
    ),
    validate_ignore: Optional[str] = typer.Option(
        None,
        "--validate-ignore", "-i",
        envvar=action_inputs("validate-ignore"),
        help="Comma-separated file names to skip",
    ),
    repo_root: Optional[Path] = typer.Option(
        None,
        "--repo-root",
        help="Repository root (default: current directory)",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to .validate-poweron.yaml",
    ),
) -> None:
    """List the PowerOn files a run would validate.

    Applies the ignore list and skip checks without contacting Symitar.
    """
    configure_logging()
    try:
        project = load_config(config_file, start_path=repo_root)
        root = repo_root or Path.cwd()
        ignore = (
            parse_ignore_list(validate_ignore)
            if validate_ignore is not None
            else project.validate_ignore
        )
        candidates = resolve_changeset(
            target_branch or None,
            poweron_directory or project.poweron_directory,
            frozenset(ignore),
            repo_root=root,
            log_prefix=project.log_prefix,
        )
        kept = filter_candidates(candidates, root=root, log_prefix=project.log_prefix)
    except PowerOnValidateError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if not kept:
        console.print("[dim]No PowerOn files to validate[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("File")
    table.add_column("Status")
    for candidate in kept:
        table.add_row(candidate.path, candidate.status)
    console.print(table)
    console.print(f"[dim]{len(kept)} file(s)[/dim]")
