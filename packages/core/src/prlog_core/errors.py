"""Exceptions raised by the synchronization engine.

Both are recoverable: the engine catches them, logs the skip or fallback,
and counts it in the run report. Vault-level failures live in
prlog_store.errors because the store package owns the filesystem.
"""

from __future__ import annotations


class InvalidRecord(ValueError):
    """A record is missing a required field or carries an unparseable date."""

    def __init__(self, reason: str, record=None):
        super().__init__(reason)
        self.reason = reason
        self.record = record


class SectionHealingFailure(ValueError):
    """The canonical splice point for a missing section cannot be determined."""
