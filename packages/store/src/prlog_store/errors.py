"""Vault failures.

VaultUnavailable is fatal to a run: nothing is written when the vault root
cannot be created. The document-level errors abort only the affected month.
"""

from __future__ import annotations


class VaultError(Exception):
    """Base class for vault persistence errors."""


class VaultUnavailable(VaultError):
    """The vault root directory cannot be created or used."""


class DocumentReadFailure(VaultError):
    """An existing document cannot be read."""


class DocumentWriteFailure(VaultError):
    """A document cannot be created or replaced."""
