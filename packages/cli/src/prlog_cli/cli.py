"""CLI entry point for prlog.

Commands:
  sync   — fetch your PRs and reviews from GitHub and update the month logs
  stats  — show the Summary metrics of every month document in the vault
  init   — interactive setup of .prlog.yml
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prlog_cli.commands.init import init_cmd
from prlog_cli.commands.stats import stats_cmd
from prlog_cli.commands.sync import sync_cmd

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("prlog"),
    prog_name="prlog",
)
@click.option(
    "--config",
    "config_path",
    default=".prlog.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRLOG_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every skipped record and file write.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Sync your GitHub PRs and code reviews into monthly markdown logs."""
    from prlog_core.config import load_config

    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config_path)
    ctx.obj["config_path"] = config_path


main.add_command(sync_cmd)
main.add_command(stats_cmd)
main.add_command(init_cmd)
