"""FileVault: month documents on the local filesystem.

Every commit writes a sibling temporary file and renames it over the target
with os.replace, so a crash mid-write leaves either the old document or the
new one, never a truncated mix. There is no lock: two concurrent runs
against the same vault must be serialized by the caller.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile

from prlog_store.base import BaseVault
from prlog_store.errors import DocumentWriteFailure, VaultUnavailable

logger = logging.getLogger(__name__)

_NEW_FILE_MODE = 0o644


class FileVault(BaseVault):
    """Writes documents in place under ``root``, creating the directory if needed."""

    def __init__(self, root):
        super().__init__(root)
        if self.root.is_symlink():
            raise VaultUnavailable(f"Vault path cannot be a symbolic link: {self.root}")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise VaultUnavailable(f"Could not create vault directory {self.root}: {e}") from e
        if not self.root.is_dir():
            raise VaultUnavailable(f"Vault path is not a directory: {self.root}")

    def commit(self, month_key: str, text: str) -> None:
        path = self.path_for(month_key)
        if path.is_symlink():
            raise DocumentWriteFailure(f"Refusing to operate on symbolic link: {path}")

        mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else _NEW_FILE_MODE
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=self.root)
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise DocumentWriteFailure(f"Could not write {path}: {e}") from e
        logger.debug("Wrote %s (%d bytes)", path, len(text))
