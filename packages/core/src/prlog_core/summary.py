"""Recalculate the Summary table from the contents of the log sections."""

from __future__ import annotations

import re
from dataclasses import dataclass

from prlog_core.document import CODE_REVIEWS, PENDING_REVIEWS, PR_UPDATES, PRS, SUMMARY, MonthDocument, Row

UPDATE_STATUS = "Continued work"

_DATE_CELL_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# First cell, then the value cell, then the rest of the line. Escaped pipes
# (\|) do not end a cell.
_VALUE_CELL_RE = re.compile(r"^(?P<head>\s*\|(?:\\\||[^|])*\|)(?P<value>(?:\\\||[^|])*)(?P<rest>\|.*)$")


@dataclass
class SummaryCounts:
    merged: int = 0
    closed: int = 0
    open: int = 0
    updates: int = 0
    reviews: int = 0
    pending_reviews: int = 0

    @property
    def total_prs(self) -> int:
        return self.merged + self.closed + self.open

    def as_metrics(self) -> dict[str, int]:
        return {
            "Total PRs": self.total_prs,
            "Merged": self.merged,
            "Closed": self.closed,
            "Open": self.open,
            "PR Updates": self.updates,
            "Reviews": self.reviews,
            "Pending Reviews": self.pending_reviews,
        }


def _is_review_row(row: Row) -> bool:
    return len(row.cells) >= 2 and bool(_DATE_CELL_RE.match(row.cells[0])) and row.last.startswith("@")


def _rows(doc: MonthDocument, name: str) -> list[Row]:
    section = doc.section(name)
    return section.rows() if section is not None else []


def count_metrics(doc: MonthDocument) -> SummaryCounts:
    counts = SummaryCounts()
    for row in _rows(doc, PRS):
        status = row.last
        if status == "merged":
            counts.merged += 1
        elif status == "closed":
            counts.closed += 1
        elif status == "open":
            counts.open += 1
    counts.updates = sum(1 for row in _rows(doc, PR_UPDATES) if row.last == UPDATE_STATUS)
    counts.reviews = sum(1 for row in _rows(doc, CODE_REVIEWS) if _is_review_row(row))
    counts.pending_reviews = sum(1 for row in _rows(doc, PENDING_REVIEWS) if _is_review_row(row))
    return counts


def _metric_name(row: Row) -> str:
    return row.cells[0].strip().strip("*").strip().casefold() if row.cells else ""


def _replace_value(raw: str, value: int) -> str:
    match = _VALUE_CELL_RE.match(raw)
    if match is None:
        return raw
    cell = match.group("value")
    if cell.strip():
        lead = cell[: len(cell) - len(cell.lstrip())]
        trail = cell[len(cell.rstrip()) :]
    else:
        lead = trail = " "
    return f"{match.group('head')}{lead}{value}{trail}{match.group('rest')}"


def recompute(doc: MonthDocument) -> bool:
    """Rewrite the value cell of each Summary metric row; return True if anything changed.

    Only value cells change. Metric rows a legacy Summary lacks are not added.
    """
    summary = doc.section(SUMMARY)
    if summary is None:
        return False

    metrics = {name.casefold(): value for name, value in count_metrics(doc).as_metrics().items()}
    changed = False
    for i, item in enumerate(summary.body):
        if not isinstance(item, Row):
            continue
        name = _metric_name(item)
        if name not in metrics:
            continue
        raw = _replace_value(item.raw, metrics[name])
        if raw != item.raw:
            summary.body[i] = Row.parse(raw)
            changed = True
    return changed
