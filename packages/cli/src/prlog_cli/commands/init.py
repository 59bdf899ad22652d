"""init command — write a .prlog.yml so later runs need no flags."""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

console = Console()


@click.command("init")
@click.pass_context
def init_cmd(ctx):
    """Set up prlog for this directory.

    Prompts for the GitHub organization and the PR Log vault path, then
    writes them to the configuration file, keeping any other keys.
    """
    from prlog_cli.commands.sync import validate_org
    from prlog_core.config import default_vault_path

    config_path = ctx.obj.get("config_path", ".prlog.yml") if ctx.obj else ".prlog.yml"
    current = ctx.obj.get("config", {}) if ctx.obj else {}

    console.print("\n[bold cyan]prlog init[/bold cyan] — setup wizard\n")

    org = click.prompt("GitHub organization", default=current.get("org") or None)
    validate_org(org)
    vault = click.prompt("PR Log vault path", default=current.get("vault") or default_vault_path())

    _write_config(Path(config_path), {"org": org, "vault": vault})
    console.print(f"[green]Wrote {config_path}[/green]")
    console.print("Run a sync with: [bold]prlog sync --dry-run[/bold]")


def _write_config(path: Path, values: dict) -> None:
    """Write or update the YAML config, preserving any existing keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(values)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))
