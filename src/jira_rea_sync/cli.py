"""Command-line interface for Jira to Rea synchronization."""

import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from jira_rea_sync import __version__
from jira_rea_sync.config import Config
from jira_rea_sync.errors import ImportAborted, OperationCancelled, SyncError
from jira_rea_sync.jira import JiraClient, WorklogCandidate, WorklogFetcher
from jira_rea_sync.rea import ReaClient, ReaProject
from jira_rea_sync.sync import DateRangeKey, ReconciliationEngine, SyncSession
from jira_rea_sync.utils import get_logger, setup_logging
from jira_rea_sync.utils.audit import FileAuditLog

app = typer.Typer(help="Transfer Jira work logs into the Rea time-sheet portal")
console = Console()
logger = get_logger(__name__)

CONFIG_DIR_OPTION = typer.Option(
    None,
    "--config-dir",
    help="Configuration directory. Defaults to ~/.jira-rea-sync/",
)
FROM_DATE_OPTION = typer.Option(
    None,
    "--from-date",
    help="First day to transfer (YYYY-MM-DD). Defaults to today.",
)
TO_DATE_OPTION = typer.Option(
    None,
    "--to-date",
    help="Last day to transfer (YYYY-MM-DD). Defaults to today.",
)
JIRA_TOKEN_OPTION = typer.Option(
    None,
    "--jira-token",
    envvar="JIRA_API_TOKEN",
    help="Jira API token. Prompted for if not given.",
)
REA_PASSWORD_OPTION = typer.Option(
    None,
    "--rea-password",
    envvar="REA_PASSWORD",
    help="Rea portal password. Prompted for if not given.",
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable verbose logging.")


def _parse_date(value: str | None) -> date:
    if not value:
        return date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        console.print(f"[red]Invalid date '{value}'. Use YYYY-MM-DD[/red]")
        raise typer.Exit(code=1)


def _parse_range(from_date: str | None, to_date: str | None) -> tuple[date, date]:
    start, end = _parse_date(from_date), _parse_date(to_date)
    if end < start:
        console.print(f"[red]--to-date {end} is before --from-date {start}[/red]")
        raise typer.Exit(code=1)
    return start, end


def _require_jira_url(config: Config) -> str:
    if not config.jira_url:
        console.print("[yellow]Jira is not configured. Run: jira-rea-sync configure[/yellow]")
        raise typer.Exit(code=1)
    return config.jira_url


def _open_session(config: Config, confirm: bool = False) -> SyncSession:
    return SyncSession(
        jira=JiraClient(_require_jira_url(config), timeout=config.timeout),
        rea=ReaClient(config.rea_url, timeout=config.timeout, confirm=confirm),
    )


def _login_jira(session: SyncSession, config: Config, token: str | None) -> None:
    email = config.jira_email or Prompt.ask("Jira e-mail")
    token = token or Prompt.ask("Jira API token", password=True)
    myself = session.login_jira(email, token)
    config.remember("jira", "email", email.strip())
    console.print(f"[green]✓ Logged into Jira as {myself.display_name or email}[/green]")


def _login_rea(session: SyncSession, config: Config, password: str | None) -> None:
    username = config.rea_username or Prompt.ask("Rea portal user name")
    password = password or Prompt.ask("Rea portal password", password=True)
    profile = session.login_rea(username, password)
    config.remember("rea", "username", username.strip())
    console.print(f"[green]✓ Logged into the Rea portal as {profile.name or username}[/green]")


def _print_candidates(candidates: list[WorklogCandidate]) -> None:
    table = Table(title="Jira Worklogs")
    table.add_column("Issue", style="cyan")
    table.add_column("Task", style="magenta")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Hours", justify="right", style="green")
    table.add_column("Comment")

    for candidate in candidates:
        table.add_row(
            candidate.issue_key,
            candidate.task,
            f"{candidate.start:%Y-%m-%d %H:%M}",
            f"{candidate.end:%Y-%m-%d %H:%M}",
            f"{candidate.effort_hours:.2f}",
            candidate.comment,
        )

    console.print(table)
    total = sum(candidate.effort_hours for candidate in candidates)
    console.print(f"Total: [bold]{total:.2f}[/bold] hours in {len(candidates)} worklogs")


def _print_projects(projects: list[ReaProject]) -> None:
    table = Table(title="Rea Projects")
    table.add_column("#", style="cyan")
    table.add_column("ID", style="magenta")
    table.add_column("Project")
    for index, project in enumerate(projects, 1):
        table.add_row(str(index), project.id, project.display_name)
    console.print(table)


def _sorted_projects(rea: ReaClient) -> list[ReaProject]:
    projects = rea.list_projects()
    return sorted(projects, key=lambda p: p.display_name.casefold())


def _choose_project(session: SyncSession) -> str:
    projects = _sorted_projects(session.rea)
    if not projects:
        console.print("[yellow]No projects are assigned to this Rea profile.[/yellow]")
        raise typer.Exit(code=1)

    _print_projects(projects)
    choice = Prompt.ask(
        "Import into project #",
        choices=[str(i) for i in range(1, len(projects) + 1)],
        default="1",
    )
    return projects[int(choice) - 1].id


@app.command()
def configure(config_dir: Optional[Path] = CONFIG_DIR_OPTION) -> None:
    """Remember service URLs and user names. Secrets are never stored."""
    setup_logging(config_dir=config_dir)
    config = Config(config_dir)

    console.print("[bold cyan]Jira to Rea Configuration[/bold cyan]\n")

    jira_url = Prompt.ask("Jira site URL (e.g. https://mycompany.atlassian.net/)", default=config.jira_url)
    jira_email = Prompt.ask("Jira e-mail", default=config.jira_email)
    rea_url = Prompt.ask("Rea portal API URL", default=config.rea_url or ReaClient.BASE_URL)
    rea_username = Prompt.ask("Rea portal user name", default=config.rea_username)
    timezone = Prompt.ask(
        "Time zone for worklog days (blank for this machine's zone)",
        default=config.get("jira", "timezone", ""),
    )

    config.remember("jira", "base_url", jira_url.strip() if jira_url else None)
    config.remember("jira", "email", jira_email.strip() if jira_email else None)
    config.remember("jira", "timezone", timezone.strip() or None)
    config.remember("rea", "base_url", rea_url.strip() if rea_url else None)
    config.remember("rea", "username", rea_username.strip() if rea_username else None)

    try:
        config.timezone
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"\n[green]Configuration saved to {config.storage.settings_file}[/green]")
    console.print("Run 'jira-rea-sync import' to transfer work logs.")


@app.command()
def worklogs(
    from_date: Optional[str] = FROM_DATE_OPTION,
    to_date: Optional[str] = TO_DATE_OPTION,
    jira_token: Optional[str] = JIRA_TOKEN_OPTION,
    verbose: bool = VERBOSE_OPTION,
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
) -> None:
    """List your Jira worklogs in a date window."""
    setup_logging(log_level=logging.DEBUG if verbose else logging.INFO, config_dir=config_dir)
    config = Config(config_dir)
    start, end = _parse_range(from_date, to_date)

    try:
        with _open_session(config) as session:
            _login_jira(session, config, jira_token)
            fetcher = WorklogFetcher(session.jira, timezone=config.timezone)
            candidates = fetcher.fetch(None, start, end)
    except (SyncError, ValueError) as e:
        logger.error(f"Listing worklogs failed: {e}", exc_info=verbose)
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    if not candidates:
        console.print("[yellow]No worklogs found.[/yellow]")
        return
    _print_candidates(candidates)


@app.command()
def projects(
    rea_password: Optional[str] = REA_PASSWORD_OPTION,
    verbose: bool = VERBOSE_OPTION,
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
) -> None:
    """List the Rea portal projects of your profile."""
    setup_logging(log_level=logging.DEBUG if verbose else logging.INFO, config_dir=config_dir)
    config = Config(config_dir)

    try:
        with ReaClient(config.rea_url, timeout=config.timeout) as rea:
            username = config.rea_username or Prompt.ask("Rea portal user name")
            rea.login(username, rea_password or Prompt.ask("Rea portal password", password=True))
            config.remember("rea", "username", username.strip())
            found = _sorted_projects(rea)
    except (SyncError, ValueError) as e:
        logger.error(f"Listing projects failed: {e}", exc_info=verbose)
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    if not found:
        console.print("[yellow]No projects are assigned to this Rea profile.[/yellow]")
        return
    _print_projects(found)


@app.command("import")
def import_worklogs(
    from_date: Optional[str] = FROM_DATE_OPTION,
    to_date: Optional[str] = TO_DATE_OPTION,
    project_id: Optional[str] = typer.Option(
        None,
        "--project-id",
        help="Rea project to import into. Defaults to the last one used, else asks.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be sent without creating entries.",
    ),
    confirm: bool = typer.Option(
        False,
        "--confirm",
        help="Print each time entry request and ask before sending it.",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask before importing."),
    jira_token: Optional[str] = JIRA_TOKEN_OPTION,
    rea_password: Optional[str] = REA_PASSWORD_OPTION,
    verbose: bool = VERBOSE_OPTION,
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
) -> None:
    """Import your Jira worklogs into the Rea portal, skipping those already there."""
    setup_logging(log_level=logging.DEBUG if verbose else logging.INFO, config_dir=config_dir)
    logger.info(f"Jira to Rea v{__version__}")

    config = Config(config_dir)
    range_key = DateRangeKey.from_dates(*_parse_range(from_date, to_date))
    engine = ReconciliationEngine(audit=FileAuditLog(config.storage.audit_file))

    try:
        with _open_session(config, confirm=confirm) as session:
            _login_jira(session, config, jira_token)
            _login_rea(session, config, rea_password)

            fetcher = WorklogFetcher(session.jira, timezone=config.timezone)
            candidates = fetcher.fetch(None, range_key.start, range_key.end)
            if not candidates:
                console.print(f"[yellow]No worklogs found for {range_key}.[/yellow]")
                return
            _print_candidates(candidates)

            target = project_id or config.rea_project_id or _choose_project(session)
            if not (yes or dry_run):
                typer.confirm(
                    f"Import {len(candidates)} worklogs into Rea project {target}?",
                    abort=True,
                )

            mode = "[bold cyan]DRY RUN[/bold cyan]" if dry_run else "[bold green]IMPORT[/bold green]"
            console.print(f"Starting {mode}...")
            result = engine.import_batch(
                session,
                candidates,
                user_id=session.rea_user_id or "",
                project_id=target,
                range_key=range_key,
                dry_run=dry_run,
            )
            if not dry_run:
                config.remember("rea", "project_id", target)

    except ImportAborted as e:
        logger.error(f"Import aborted: {e}", exc_info=verbose)
        console.print(f"[red]Error: {e}[/red]")
        console.print(
            f"[yellow]{e.result.sent} entries were sent and {e.result.skipped} skipped "
            "before the failure.[/yellow]"
        )
        raise typer.Exit(code=1)
    except OperationCancelled as e:
        console.print("[yellow]Import cancelled by user[/yellow]")
        if e.result is not None:
            console.print(
                f"[yellow]{e.result.sent} entries were sent and {e.result.skipped} skipped "
                "before cancelling.[/yellow]"
            )
        raise typer.Exit(code=0)
    except (SyncError, ValueError) as e:
        logger.error(f"Import failed: {e}", exc_info=verbose)
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="Import Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="magenta")
    table.add_row("Would send" if dry_run else "Sent", str(result.sent))
    table.add_row("Already in Rea portal", str(result.skipped))
    console.print(table)

    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"Jira to Rea v{__version__}")


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(0)


if __name__ == "__main__":
    main()
