"""stats command — Summary metrics across every month document in the vault."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prlog_core.document import SUMMARY_METRICS as _METRICS

console = Console()


@click.command("stats")
@click.option("--vault", "vault_path", default=None, help="PR Log directory (or set VAULT_PATH).")
@click.pass_context
def stats_cmd(ctx, vault_path: str | None):
    """Show PR and review counts for each month in the vault.

    Counts are recomputed from the table rows, so manual edits since the
    last sync are reflected. Nothing is written.
    """
    from prlog_core.document import parse
    from prlog_core.summary import count_metrics
    from prlog_store.readonly import ReadOnlyVault
    from prlog_store.errors import DocumentReadFailure

    config = ctx.obj.get("config", {}) if ctx.obj else {}
    vault = ReadOnlyVault(vault_path or config.get("vault"))

    month_keys = vault.list_documents()
    if not month_keys:
        console.print(f"[yellow]No PR log documents found in {vault.root}.[/yellow]")
        return

    table = Table(title=f"PR Log — {vault.root}", show_header=True, header_style="bold cyan")
    table.add_column("Month", style="bold", no_wrap=True)
    for metric in _METRICS:
        table.add_column(metric, justify="right")

    totals = dict.fromkeys(_METRICS, 0)
    for key in month_keys:
        try:
            text = vault.read(key)
        except DocumentReadFailure as e:
            console.print(f"[red]Skipping {key}: {e}[/red]")
            continue
        metrics = count_metrics(parse(text or "", key)).as_metrics()
        for metric in _METRICS:
            totals[metric] += metrics[metric]
        table.add_row(key, *(str(metrics[m]) for m in _METRICS))

    table.add_row("[bold]Total[/bold]", *(f"[bold]{totals[m]}[/bold]" for m in _METRICS))
    console.print(table)
