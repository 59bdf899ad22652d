"""Dry-run vault — reads real documents, never writes.

Using a DryRunVault rather than branching on a flag lets the sync engine
run the identical classify/heal/merge/summarize path in both modes; only
commit() differs. Nothing on disk is created or touched, not even the
vault directory.
"""

from __future__ import annotations

from prlog_store.base import BaseVault


class DryRunVault(BaseVault):
    """Keeps would-be document text in memory for preview."""

    dry_run = True

    def __init__(self, root):
        super().__init__(root)
        self.pending: dict[str, str] = {}

    def commit(self, month_key: str, text: str) -> None:
        self.pending[month_key] = text
