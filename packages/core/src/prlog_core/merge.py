"""Append-only merge of new rows into a month document.

Rows are never edited or removed once written. A PR logged as "open" and
merged in a later sync window keeps its "open" row; the "merged" record is
a duplicate by url and is skipped. Only a new DedupKey adds a row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from prlog_core.document import MonthDocument, Row, dedup_key

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    section: str
    added: list[Row] = field(default_factory=list)
    duplicates: int = 0


def merge(doc: MonthDocument, section_name: str, rows) -> MergeResult:
    """Append each row whose DedupKey is not already in the section.

    Rows land after the last existing table line, in the order given. The
    section's key index is updated as rows are added, so duplicates within
    ``rows`` itself also collapse to the first occurrence.
    """
    section = doc.section(section_name)
    if section is None:
        raise ValueError(f"{doc.month_key} has no {section_name!r} section; heal the document first")

    result = MergeResult(section=section_name)
    insert_at = section.table_end()

    for row in rows:
        key = dedup_key(section_name, row)
        if key in section.keys:
            logger.debug("%s/%s: skipping existing row %s", doc.month_key, section_name, key)
            result.duplicates += 1
            continue
        if insert_at is None:
            insert_at = section.add_table()
        section.body.insert(insert_at, section.terminate(row))
        section.keys.add(key)
        insert_at += 1
        result.added.append(row)

    return result
