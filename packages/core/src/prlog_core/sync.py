"""Sync orchestration: records in, updated month documents out.

Control flow per run:
    group_records() → for each month (in month order):
        read → parse or template → heal → merge per section → recompute → commit

Documents are independent. A failure reading or writing one month is
recorded in its DocumentReport and the run moves on; only an unusable
vault root aborts the whole run, before any document is touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from prlog_core.document import MANAGED_SECTIONS, heal, parse, render, template
from prlog_core.errors import InvalidRecord
from prlog_core.merge import merge
from prlog_core.records import group_records
from prlog_core.summary import recompute
from prlog_store.base import BaseVault
from prlog_store.dryrun import DryRunVault
from prlog_store.errors import DocumentReadFailure, DocumentWriteFailure
from prlog_store.filesystem import FileVault

logger = logging.getLogger(__name__)


@dataclass
class DocumentReport:
    """What happened to one month document during a sync."""

    month_key: str
    path: str
    created: bool = False
    healed: list[str] = field(default_factory=list)
    heal_warnings: list[str] = field(default_factory=list)
    # section name -> rendered rows appended, in insertion order
    added: dict[str, list[str]] = field(default_factory=dict)
    duplicates: int = 0
    changed: bool = False
    written: bool = False
    error: str | None = None

    @property
    def rows_added(self) -> int:
        return sum(len(rows) for rows in self.added.values())


@dataclass
class SyncReport:
    dry_run: bool
    documents: list[DocumentReport] = field(default_factory=list)
    invalid: list[InvalidRecord] = field(default_factory=list)

    @property
    def rows_added(self) -> int:
        return sum(d.rows_added for d in self.documents)

    @property
    def duplicates(self) -> int:
        return sum(d.duplicates for d in self.documents)

    @property
    def heal_warnings(self) -> int:
        return sum(len(d.heal_warnings) for d in self.documents)

    @property
    def failures(self) -> list[DocumentReport]:
        return [d for d in self.documents if d.error is not None]

    @property
    def ok(self) -> bool:
        return not self.failures


def open_vault(vault_path, dry_run: bool = False) -> BaseVault:
    """Return the vault backend for the run mode.

    Raises VaultUnavailable in apply mode if the root cannot be created.
    """
    if dry_run:
        return DryRunVault(vault_path)
    return FileVault(vault_path)


def sync(records, vault_path, dry_run: bool = False) -> SyncReport:
    """Fold ``records`` into the month documents under ``vault_path``.

    Classification, dedup and healing are identical in both modes; with
    ``dry_run`` the report is the preview and the filesystem is not touched.
    """
    vault = open_vault(vault_path, dry_run=dry_run)
    try:
        return sync_vault(records, vault)
    finally:
        vault.close()


def sync_vault(records, vault: BaseVault) -> SyncReport:
    batch = group_records(records)
    report = SyncReport(dry_run=vault.dry_run, invalid=batch.invalid)
    if batch.invalid:
        logger.info("Skipped %d invalid record(s)", len(batch.invalid))

    for key in sorted(batch.groups):
        report.documents.append(_sync_document(vault, key, batch.years[key], batch.groups[key]))
    return report


def _sync_document(vault: BaseVault, key: str, year: int, rows_by_section: dict) -> DocumentReport:
    doc_report = DocumentReport(month_key=key, path=str(vault.path_for(key)))

    try:
        original = vault.read(key)
    except DocumentReadFailure as e:
        logger.error("%s: %s", key, e)
        doc_report.error = str(e)
        return doc_report

    if original is None or not original.strip():
        doc = parse(template(key, year), key)
        doc_report.created = original is None
    else:
        doc = parse(original, key)

    healed = heal(doc)
    doc_report.healed = healed.added
    doc_report.heal_warnings = healed.warnings

    for name in MANAGED_SECTIONS:
        rows = rows_by_section.get(name)
        if not rows:
            continue
        # Stable: rows from the same day keep their input order.
        result = merge(doc, name, sorted(rows, key=lambda r: r.cells[0]))
        doc_report.duplicates += result.duplicates
        if result.added:
            doc_report.added[name] = [row.raw for row in result.added]

    recompute(doc)
    text = render(doc)
    doc_report.changed = text != (original or "")
    if not doc_report.changed:
        logger.info("%s: already up to date", key)
        return doc_report

    try:
        vault.commit(key, text)
    except DocumentWriteFailure as e:
        logger.error("%s: %s", key, e)
        doc_report.error = str(e)
        return doc_report

    doc_report.written = not vault.dry_run
    logger.info(
        "%s: %d row(s) added, %d duplicate(s) skipped%s",
        key,
        doc_report.rows_added,
        doc_report.duplicates,
        " (dry run)" if vault.dry_run else "",
    )
    return doc_report
