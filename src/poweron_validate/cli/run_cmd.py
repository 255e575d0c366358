# Copyright (c) Syntropy Systems
"""validate-poweron run command."""
from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from poweron_validate.ci import action_inputs, error_annotation, in_github_actions, set_outputs
from poweron_validate.config import ProjectConfig, load_config, parse_ignore_list
from poweron_validate.errors import ConfigError, PowerOnValidateError
from poweron_validate.log import configure_logging
from poweron_validate.models.validation import ConnectionType, RunConfig, ValidationResult
from poweron_validate.validator import validate_powerons

console = Console()


def build_run_config(  # noqa: PLR0913
    project: ProjectConfig,
    *,
    symitar_hostname: str,
    sym_number: str,
    symitar_user_number: str,
    symitar_user_password: str,
    ssh_username: str | None,
    ssh_password: str | None,
    ssh_port: int | None,
    https_port: int | None,
    api_key: str | None,
    connection_type: str | None,
    poweron_directory: str | None,
    target_branch: str | None,
    validate_ignore: str | None,
    debug: bool,
    repo_root: Path | None,
) -> RunConfig:
    """Merge CLI inputs over project defaults into a RunConfig.

    Raises:
        ConfigError: If the connection type or any other input is invalid.

    """
    kind = (connection_type or project.connection_type).strip().lower()
    if kind not in {c.value for c in ConnectionType}:
        msg = f'Invalid connection type: {kind}. Must be "https" or "ssh"'
        raise ConfigError(msg)

    ignore_list = (
        parse_ignore_list(validate_ignore)
        if validate_ignore is not None
        else project.validate_ignore
    )

    try:
        return RunConfig(
            symitar_hostname=symitar_hostname,
            sym_number=sym_number,
            symitar_user_number=symitar_user_number,
            symitar_user_password=symitar_user_password,
            ssh_username=ssh_username or "",
            ssh_password=ssh_password or "",
            ssh_port=ssh_port if ssh_port is not None else project.ssh_port,
            https_port=https_port if https_port is not None else project.https_port,
            api_key=api_key or None,
            connection_type=ConnectionType(kind),
            poweron_directory=poweron_directory or project.poweron_directory,
            target_branch=target_branch,
            ignore_list=frozenset(ignore_list),
            log_prefix=project.log_prefix,
            debug=debug,
            repo_root=repo_root,
            ssh_validate_command=project.ssh_validate_command,
            ssh_staging_directory=project.ssh_staging_directory,
            request_timeout=project.request_timeout,
            subscription_url=project.subscription_url,
        )
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        msg = f"Invalid input: {details}"
        raise ConfigError(msg) from e


def _say(line: str) -> None:
    console.print(line, markup=False, highlight=False)


def _print_header(config: RunConfig) -> None:
    prefix = config.log_prefix
    _say(f"{prefix} Starting PowerOn validation")
    _say(f"{prefix} Connection: {config.connection_type.value.upper()}")
    _say(f"{prefix} Hostname: {config.symitar_hostname}")
    _say(f"{prefix} Sym: {config.sym_number}")
    _say(f"{prefix} Directory: {config.poweron_directory}")
    if config.target_branch:
        _say(f"{prefix} Target branch: {config.target_branch}")
    if config.ignore_list:
        _say(f"{prefix} Ignoring: {', '.join(sorted(config.ignore_list))}")


def _print_summary(result: ValidationResult, duration: int) -> None:
    table = Table(title="Validation Summary", show_header=False)
    table.add_column("Metric", style="dim")
    table.add_column("Value")
    table.add_row("Files Validated", str(result.files_validated))
    table.add_row("Files Passed", f"[green]{result.files_passed}[/green]")
    failed_style = "red" if result.files_failed else "green"
    table.add_row("Files Failed", f"[{failed_style}]{result.files_failed}[/{failed_style}]")
    table.add_row("Duration", f"{duration}s")
    console.print()
    console.print(table)


def run(  # noqa: PLR0913
    symitar_hostname: str = typer.Option(
        ...,
        "--symitar-hostname", "-H",
        envvar=action_inputs("symitar-hostname"),
        help="Symitar host name",
    ),
    sym_number: str = typer.Option(
        ...,
        "--sym-number", "-s",
        envvar=action_inputs("sym-number"),
        help="Sym number (e.g. 001)",
    ),
    symitar_user_number: str = typer.Option(
        ...,
        "--symitar-user-number",
        envvar=action_inputs("symitar-user-number"),
        help="Symitar user number",
    ),
    symitar_user_password: str = typer.Option(
        ...,
        "--symitar-user-password",
        envvar=action_inputs("symitar-user-password"),
        help="Symitar user password",
    ),
    ssh_username: Optional[str] = typer.Option(
        None,
        "--ssh-username",
        envvar=action_inputs("ssh-username"),
        help="SSH user (defaults to the Symitar user number)",
    ),
    ssh_password: Optional[str] = typer.Option(
        None,
        "--ssh-password",
        envvar=action_inputs("ssh-password"),
        help="SSH password (defaults to the Symitar user password)",
    ),
    ssh_port: Optional[int] = typer.Option(
        None,
        "--ssh-port",
        envvar=action_inputs("ssh-port"),
        help="SSH port (default: 22)",
    ),
    https_port: Optional[int] = typer.Option(
        None,
        "--https-port",
        envvar=action_inputs("https-port"),
        help="HTTPS port when not 443",
    ),
    api_key: Optional[str] = typer.Option(
        None,
        "--api-key",
        envvar=action_inputs("api-key"),
        help="Subscription API key",
    ),
    connection_type: Optional[str] = typer.Option(
        None,
        "--connection-type", "-c",
        envvar=action_inputs("connection-type"),
        help="Transport: ssh (default) or https",
    ),
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
        help="Only validate files changed relative to this branch",
    ),
    validate_ignore: Optional[str] = typer.Option(
        None,
        "--validate-ignore", "-i",
        envvar=action_inputs("validate-ignore"),
        help="Comma-separated file names to skip",
    ),
    debug: bool = typer.Option(
        False,
        "--debug/--no-debug",
        envvar=action_inputs("debug"),
        help="Verbose transport logging",
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
    report: Optional[Path] = typer.Option(
        None,
        "--report",
        help="Write the result as JSON to this path",
    ),
) -> None:
    """Validate PowerOn files on a Symitar host.

    Without --target-branch every PowerOn file in the directory is
    validated. With it, only files changed relative to that branch.

    Examples:

        validate-poweron run -H sym.example.com -s 001 \\
            --symitar-user-number 1234 --symitar-user-password secret

        validate-poweron run ... --target-branch origin/main -c https
    """
    configure_logging(debug=debug)

    try:
        project = load_config(config_file, start_path=repo_root)
        config = build_run_config(
            project,
            symitar_hostname=symitar_hostname,
            sym_number=sym_number,
            symitar_user_number=symitar_user_number,
            symitar_user_password=symitar_user_password,
            ssh_username=ssh_username,
            ssh_password=ssh_password,
            ssh_port=ssh_port,
            https_port=https_port,
            api_key=api_key,
            connection_type=connection_type,
            poweron_directory=poweron_directory,
            target_branch=target_branch,
            validate_ignore=validate_ignore,
            debug=debug,
            repo_root=repo_root,
        )
        _print_header(config)

        start = time.monotonic()
        result = validate_powerons(config)
        duration = round(time.monotonic() - start)
    except PowerOnValidateError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _ = set_outputs(
        {
            "files-validated": result.files_validated,
            "files-passed": result.files_passed,
            "files-failed": result.files_failed,
            "duration": duration,
        }
    )
    if report is not None:
        report.parent.mkdir(parents=True, exist_ok=True)
        _ = report.write_text(result.model_dump_json(by_alias=True, indent=2) + "\n")

    _print_summary(result, duration)

    if result.files_failed:
        console.print()
        console.print(
            f"[red]Validation failed for {result.files_failed} file(s):[/red]"
        )
        annotate = in_github_actions()
        for error in result.errors:
            console.print(f"  - {error}", markup=False, highlight=False)
            if annotate:
                print(error_annotation(error))  # noqa: T201
        console.print(f"[red]Found {result.files_failed} invalid PowerOn file(s)[/red]")
        raise typer.Exit(1)

    _say(f"{config.log_prefix} All PowerOn files validated successfully!")
