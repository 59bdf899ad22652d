"""Read-only vault for commands that inspect documents without syncing."""

from __future__ import annotations

from prlog_store.base import BaseVault
from prlog_store.errors import DocumentWriteFailure


class ReadOnlyVault(BaseVault):
    """Reads documents in place; commit() always fails."""

    def commit(self, month_key: str, text: str) -> None:
        raise DocumentWriteFailure(f"Vault is open read-only: {self.path_for(month_key)}")
