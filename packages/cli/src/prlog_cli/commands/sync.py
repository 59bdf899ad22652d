"""sync command — fetch PR activity and fold it into the month documents."""

from __future__ import annotations

import re
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from prlog_core.gh.search import fetch_records, get_client
from prlog_core.records import CLOSED, MERGED, OPEN, PENDING_REVIEW, REVIEWED, UPDATED
from prlog_core.sync import SyncReport, sync
from prlog_store.errors import VaultUnavailable

console = Console()

_ORG_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_ORG_MAX_LENGTH = 39

_SECTION_STYLE = {
    "PRs": "green",
    "PR Updates": "blue",
    "Code Reviews": "cyan",
    "Pending Reviews": "magenta",
}


def validate_org(org: str) -> str:
    if not _ORG_RE.match(org):
        raise click.BadParameter(
            f"Invalid GitHub organization name {org!r}. "
            "Only alphanumeric characters, hyphens, and underscores are allowed.",
            param_hint="'--org'",
        )
    if len(org) > _ORG_MAX_LENGTH:
        raise click.BadParameter(
            f"GitHub organization name too long (max {_ORG_MAX_LENGTH} characters).",
            param_hint="'--org'",
        )
    return org


def print_fetch_counts(fetched: dict) -> None:
    count = {category: len(records) for category, records in fetched.items()}
    console.print(
        f"  Found [green]{count.get(MERGED, 0)} merged[/green], "
        f"[red]{count.get(CLOSED, 0)} closed[/red], "
        f"[yellow]{count.get(OPEN, 0)} open[/yellow] and "
        f"[blue]{count.get(UPDATED, 0)} updated[/blue] PRs"
    )
    console.print(
        f"  Found [cyan]{count.get(REVIEWED, 0)} code reviews[/cyan] and "
        f"[magenta]{count.get(PENDING_REVIEW, 0)} pending reviews[/magenta]"
    )


def print_report(report: SyncReport) -> None:
    """Print what the sync did (or, in dry-run mode, would do) to each document."""
    if not report.documents and not report.invalid:
        console.print("[yellow]No new PRs or reviews to add.[/yellow]")
        return

    if report.dry_run:
        console.print("[yellow]DRY RUN — changes that would be made:[/yellow]")

    for doc in report.documents:
        name = Path(doc.path).name
        if doc.error:
            console.print(f"\n[red]Failed:[/red] {name} — {doc.error}")
            continue
        if not doc.changed:
            console.print(f"\n[dim]Up to date:[/dim] {name}")
        elif doc.created:
            console.print(f"\n[yellow]{'Would create' if report.dry_run else 'Created'}:[/yellow] {name}")
        else:
            console.print(f"\n[green]{'Would update' if report.dry_run else 'Updated'}:[/green] {name}")
        for section in doc.healed:
            console.print(f"  [yellow]+ section[/yellow] {section}")
        for warning in doc.heal_warnings:
            console.print(f"  [yellow]Warning:[/yellow] {warning}")
        for section, rows in doc.added.items():
            style = _SECTION_STYLE.get(section, "white")
            console.print(f"  [{style}]{section}[/{style}] (+{len(rows)})")
            for row in rows:
                console.print(f"    {row}", markup=False, highlight=False)
        if doc.duplicates:
            console.print(f"  [dim]Skipped {doc.duplicates} existing row(s)[/dim]")

    table = Table(title="Sync summary", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")
    table.add_row("Documents", str(len(report.documents)))
    table.add_row("Rows added", str(report.rows_added))
    table.add_row("Duplicates skipped", str(report.duplicates))
    table.add_row("Invalid records skipped", str(len(report.invalid)))
    table.add_row("Healing warnings", str(report.heal_warnings))
    table.add_row("Failed documents", f"[red]{len(report.failures)}[/red]" if report.failures else "0")
    console.print()
    console.print(table)


@click.command("sync")
@click.option("--org", default=None, help="GitHub organization name (or set GITHUB_ORG).")
@click.option("--vault", "vault_path", default=None, help="PR Log directory (or set VAULT_PATH).")
@click.option("--from", "from_date", default=None, help="Start date, YYYY-MM-DD. Default: 7 days before --to.")
@click.option("--to", "to_date", default=None, help="End date, YYYY-MM-DD. Default: today.")
@click.option("--dry-run", is_flag=True, help="Preview changes without writing files.")
@click.pass_context
def sync_cmd(ctx, org: str | None, vault_path: str | None, from_date: str | None, to_date: str | None, dry_run: bool):
    """Fetch your PRs and code reviews, then update the monthly logs.

    \b
    Examples:
      prlog sync --org mycompany
      prlog sync --org mycompany --from 2024-01-01 --to 2024-01-31
      GITHUB_ORG=mycompany prlog sync --dry-run
    """
    from prlog_core.config import resolve_date_range
    from prlog_cli.auth import resolve_github_token

    config = dict(ctx.obj["config"]) if ctx.obj else {}
    org = org or config.get("org")
    vault_path = vault_path or config.get("vault")

    if not org:
        raise click.UsageError("GitHub organization required. Use --org or set GITHUB_ORG.")
    validate_org(org)

    try:
        start, end = resolve_date_range(from_date, to_date, lookback_days=config.get("lookback_days", 7))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="'--from' / '--to'")

    token = resolve_github_token()
    if not token:
        raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")

    console.print("[bold blue]PR Log Sync[/bold blue]")
    console.print(f"Date range: [green]{start}[/green] to [green]{end}[/green]")
    if dry_run:
        console.print("[yellow]DRY RUN — no files will be modified[/yellow]")

    console.print("\n[blue]Fetching your PRs and code reviews...[/blue]")
    fetched = fetch_records(get_client(token), org, start, end, limit=config.get("search_limit", 100))
    print_fetch_counts(fetched)

    records = [record for category_records in fetched.values() for record in category_records]
    try:
        report = sync(records, vault_path, dry_run=dry_run)
    except VaultUnavailable as e:
        raise click.ClickException(str(e))

    print_report(report)
    if report.failures:
        ctx.exit(1)
    console.print("\n[green]Done![/green]")
