"""Input records and their classification into month documents and sections.

A Record is produced by the external query layer (see prlog_core.gh.search)
and is never mutated afterwards. Classification maps it to the document it
belongs in (``MM-MonthName``) and the managed section that receives its row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime

from prlog_core.document import Row
from prlog_core.errors import InvalidRecord

logger = logging.getLogger(__name__)

MERGED = "merged"
CLOSED = "closed"
OPEN = "open"
UPDATED = "updated"
REVIEWED = "reviewed"
PENDING_REVIEW = "pending_review"

CATEGORIES = (MERGED, CLOSED, OPEN, UPDATED, REVIEWED, PENDING_REVIEW)

SECTION_FOR_CATEGORY = {
    MERGED: "PRs",
    CLOSED: "PRs",
    OPEN: "PRs",
    UPDATED: "PR Updates",
    REVIEWED: "Code Reviews",
    PENDING_REVIEW: "Pending Reviews",
}

# Review rows end in an @author cell instead of a status label.
_AUTHOR_CATEGORIES = {REVIEWED, PENDING_REVIEW}

# Fixed table so document names never depend on the host locale.
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True)
class Record:
    """One pull request event as reported by the code-hosting platform."""

    category: str
    date: str  # ISO-8601 calendar date, YYYY-MM-DD
    repo: str
    title: str
    url: str
    status_or_author: str = ""


def parse_date(value) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date.

    Raises ValueError for anything else, including well-formed but
    impossible dates such as 2026-02-30.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()


def month_key(day: date) -> str:
    return f"{day.month:02d}-{MONTH_NAMES[day.month - 1]}"


def _is_missing(value) -> bool:
    return value is None or not str(value).strip() or str(value).strip() == "null"


def validate(record: Record) -> date:
    """Return the record's parsed date, or raise InvalidRecord."""
    if record.category not in SECTION_FOR_CATEGORY:
        raise InvalidRecord(f"unknown category {record.category!r}", record)
    if _is_missing(record.repo):
        raise InvalidRecord("missing repo", record)
    if _is_missing(record.url):
        raise InvalidRecord("missing url", record)
    try:
        return parse_date(record.date)
    except (TypeError, ValueError):
        raise InvalidRecord(f"unparseable date {record.date!r}", record)


def classify(record: Record) -> tuple[str, str]:
    """Map a record to ``(month_key, section_name)``."""
    day = validate(record)
    return month_key(day), SECTION_FOR_CATEGORY[record.category]


def escape_cell(value) -> str:
    """Make a value safe to place inside a single markdown table cell."""
    text = "" if value is None else str(value)
    for ch in ("\r", "\n", "\0"):
        text = text.replace(ch, "")
    return text.replace("|", "\\|")


def build_row(record: Record) -> Row:
    """Render a record as a table row for its section."""
    day = parse_date(record.date).isoformat()
    repo = escape_cell(record.repo).strip()
    title = escape_cell(record.title).strip()
    url = escape_cell(record.url).strip()
    last = escape_cell(record.status_or_author).strip()
    if record.category in _AUTHOR_CATEGORIES:
        last = "@" + last.lstrip("@")
    return Row.from_cells([day, repo, f"[{title}]({url})", last])


@dataclass
class ClassifiedBatch:
    """Records grouped by month and section, plus the ones that were dropped."""

    # month_key -> section name -> rows, in input order
    groups: dict[str, dict[str, list[Row]]]
    # month_key -> year of the earliest record, used to title new documents
    years: dict[str, int]
    invalid: list[InvalidRecord]


def group_records(records) -> ClassifiedBatch:
    groups: dict[str, dict[str, list[Row]]] = {}
    years: dict[str, int] = {}
    invalid: list[InvalidRecord] = []

    for record in records:
        try:
            key, section = classify(record)
        except InvalidRecord as e:
            logger.info("Skipping record (%s): %s", e.reason, getattr(record, "url", None) or record)
            invalid.append(e)
            continue
        year = parse_date(record.date).year
        years[key] = min(years.get(key, year), year)
        groups.setdefault(key, {}).setdefault(section, []).append(build_row(record))

    return ClassifiedBatch(groups=groups, years=years, invalid=invalid)
