"""Abstract vault interface.

A vault is a directory holding one markdown document per month, named
``<MM>-<MonthName>.md``. The sync engine depends on BaseVault, not on a
concrete backend, so dry-run and apply modes share every decision up to
the final commit() call.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path

from prlog_store.errors import DocumentReadFailure

_DOCUMENT_NAME_RE = re.compile(r"^\d{2}-[A-Za-z]+\.md$")


class BaseVault(ABC):
    """Read/commit access to the month documents of one vault directory."""

    dry_run: bool = False

    def __init__(self, root):
        self.root = Path(root).expanduser()

    def path_for(self, month_key: str) -> Path:
        return self.root / f"{month_key}.md"

    def read(self, month_key: str) -> str | None:
        """Return the document's text, or None if it does not exist yet.

        Line endings are returned untranslated so untouched bytes render back
        exactly as they were.
        """
        path = self.path_for(month_key)
        if path.is_symlink():
            raise DocumentReadFailure(f"Refusing to operate on symbolic link: {path}")
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadFailure(f"Could not read {path}: {e}") from e

    def list_documents(self) -> list[str]:
        """Return the month keys of every document in the vault, in month order."""
        if not self.root.is_dir():
            return []
        return sorted(p.stem for p in self.root.iterdir() if _DOCUMENT_NAME_RE.match(p.name) and p.is_file())

    @abstractmethod
    def commit(self, month_key: str, text: str) -> None:
        """Persist the full new text of a month document."""

    def close(self) -> None:
        """Release any resources held by the vault.

        Default is a no-op so callers can always call close() safely.
        """
