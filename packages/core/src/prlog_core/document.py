"""Month document model: parse, heal, and render.

A month document is a markdown file with five managed sections, each a
heading followed by a table:

    [[PR Log]]                      <- preamble (verbatim)
    # January 2026 - PR Log
    ## Summary                      <- managed sections, canonical order
    ## PRs
    ## PR Updates
    ## Code Reviews
    ## Pending Reviews
    ## Related Project Notes        <- FreeformTail (verbatim)

parse() and render() are the only functions that touch raw text. Everything
inside a section that is not a data row (blank lines, the column header,
the separator, notes a human typed between rows) is kept as a verbatim
line, so render(parse(text)) == text for any input.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from prlog_core.errors import SectionHealingFailure

logger = logging.getLogger(__name__)

SUMMARY = "Summary"
PRS = "PRs"
PR_UPDATES = "PR Updates"
CODE_REVIEWS = "Code Reviews"
PENDING_REVIEWS = "Pending Reviews"

MANAGED_SECTIONS = (SUMMARY, PRS, PR_UPDATES, CODE_REVIEWS, PENDING_REVIEWS)

COLUMNS = {
    SUMMARY: ("Metric", "Value"),
    PRS: ("Date", "Repo", "Title", "Status"),
    PR_UPDATES: ("Date", "Repo", "Title", "Status"),
    CODE_REVIEWS: ("Date", "Repo", "Title", "Author"),
    PENDING_REVIEWS: ("Date", "Repo", "Title", "Author"),
}

SUMMARY_METRICS = ("Total PRs", "Merged", "Closed", "Open", "PR Updates", "Reviews", "Pending Reviews")

_HEADER_RE = re.compile(r"^##\s+(Summary|PRs|PR Updates|Code Reviews|Pending Reviews)\s*$")
# Headings that end the last managed section and start the FreeformTail.
_TAIL_HEADING_RE = re.compile(r"^#{1,2}\s")
# The one non-managed heading the template places between managed sections.
_THEMES_RE = re.compile(r"^##\s+Themes\s*$")
_SEPARATOR_RE = re.compile(r"^\s*\|(?:\s*:?-+:?\s*\|)+\s*$")
_CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")
_LINK_URL_RE = re.compile(r"\]\(([^()\s]+)\)\s*$")


def _is_table_line(line: str) -> bool:
    stripped = line.strip()
    return len(stripped) >= 2 and stripped.startswith("|") and stripped.endswith("|")


def _column_header(columns) -> str:
    return "| " + " | ".join(columns) + " |"


def _column_separator(columns) -> str:
    return "|" + "|".join("-" * (len(c) + 2) for c in columns) + "|"


@dataclass(frozen=True)
class Row:
    """One data row of a section table.

    ``raw`` is the exact line as it appears in the file; rows read from disk
    are rendered from it so hand-edited spacing survives a sync.
    """

    cells: tuple[str, ...]
    raw: str

    @classmethod
    def from_cells(cls, cells) -> Row:
        cells = tuple(cells)
        return cls(cells=cells, raw="| " + " | ".join(cells) + " |")

    @classmethod
    def parse(cls, line: str) -> Row:
        inner = line.strip()[1:-1]
        return cls(cells=tuple(c.strip() for c in _CELL_SPLIT_RE.split(inner)), raw=line)

    @property
    def last(self) -> str:
        return self.cells[-1] if self.cells else ""

    def link_url(self) -> str | None:
        """Return the target of the first ``[title](url)`` cell, if any."""
        for cell in self.cells:
            match = _LINK_URL_RE.search(cell)
            if match:
                return match.group(1)
        return None


def _terminate(item, line_ending: str):
    # Lines are split on "\n", so a CRLF line keeps its "\r".
    suffix = line_ending[:-1]
    if not suffix:
        return item
    if isinstance(item, Row):
        return Row(cells=item.cells, raw=item.raw + suffix)
    return item + suffix


def dedup_key(section_name: str, row: Row):
    """Identity of a row within its section.

    Rows are keyed by PR url, except PR Updates where the same PR is logged
    once per day of activity, so the key there is ``(date, url)``.
    """
    url = row.link_url()
    if url is None:
        url = row.cells[2] if len(row.cells) > 2 else row.raw.strip()
    if section_name == PR_UPDATES:
        return (row.cells[0] if row.cells else "", url)
    return url


@dataclass
class Section:
    name: str
    header: str
    # Row for data rows, str for every other line, in file order.
    body: list = field(default_factory=list)
    # Terminator given to lines this section synthesizes; "\r\n" for CRLF documents.
    line_ending: str = "\n"
    keys: set = field(init=False, repr=False)

    def __post_init__(self):
        self.keys = {dedup_key(self.name, row) for row in self.rows()}

    def rows(self) -> list[Row]:
        return [item for item in self.body if isinstance(item, Row)]

    def terminate(self, item):
        """Give a synthesized Row or line the section's line terminator."""
        return _terminate(item, self.line_ending)

    def lines(self) -> list[str]:
        return [self.header] + [item.raw if isinstance(item, Row) else item for item in self.body]

    def table_end(self) -> int | None:
        """Index just past the last table line (column header, separator or row)."""
        end = None
        for i, item in enumerate(self.body):
            if isinstance(item, Row) or _is_table_line(item):
                end = i + 1
        return end

    def add_table(self) -> int:
        """Insert an empty table for a section that has none; return the row insertion index."""
        columns = COLUMNS[self.name]
        if self.body and not self.body[0].strip():
            start, block = 1, [_column_header(columns), _column_separator(columns)]
        else:
            start, block = 0, ["", _column_header(columns), _column_separator(columns)]
        self.body[start:start] = [self.terminate(line) for line in block]
        insert_at = start + len(block)
        if insert_at >= len(self.body) or str(self.body[insert_at]).strip():
            self.body.insert(insert_at, self.terminate(""))
        return insert_at


@dataclass
class MonthDocument:
    month_key: str
    preamble: list[str] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)
    tail: list[str] = field(default_factory=list)
    trailing_newline: bool = True
    line_ending: str = "\n"

    def section(self, name: str) -> Section | None:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def section_names(self) -> list[str]:
        return [s.name for s in self.sections]


@dataclass
class HealResult:
    added: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def month_name(month_key: str) -> str:
    return month_key.split("-", 1)[-1]


def new_section(name: str, line_ending: str = "\n") -> Section:
    """Build an empty managed section with its header and table."""
    columns = COLUMNS[name]
    body: list = ["", _column_header(columns), _column_separator(columns)]
    if name == SUMMARY:
        body.extend(Row.from_cells([f"**{metric}**", "0"]) for metric in SUMMARY_METRICS)
    body.append("")
    return Section(
        name=name,
        header=_terminate(f"## {name}", line_ending),
        body=[_terminate(item, line_ending) for item in body],
        line_ending=line_ending,
    )


def template(month_key: str, year: int) -> str:
    """Canonical text of a brand-new month document."""
    lines = ["[[PR Log]]", "", f"# {month_name(month_key)} {year} - PR Log", ""]
    for name in MANAGED_SECTIONS:
        lines.extend(new_section(name).lines())
        if name == SUMMARY:
            lines.extend(["## Themes", "<!-- Add themes based on PRs -->", ""])
    lines.append("## Related Project Notes")
    return "\n".join(lines) + "\n"


def _parse_body(lines: list[str]) -> list:
    body: list = []
    for i, line in enumerate(lines):
        if not _is_table_line(line) or _SEPARATOR_RE.match(line):
            body.append(line)
            continue
        following = lines[i + 1] if i + 1 < len(lines) else ""
        if _SEPARATOR_RE.match(following):
            body.append(line)  # column header
        else:
            body.append(Row.parse(line))
    return body


def _starts_tail(line: str) -> bool:
    return bool(_TAIL_HEADING_RE.match(line)) and not _THEMES_RE.match(line)


def _line_ending(text: str) -> str:
    return "\r\n" if text.count("\r\n") * 2 > text.count("\n") else "\n"


def parse(text: str, month_key: str) -> MonthDocument:
    """Parse document text into its preamble, managed sections and tail.

    The managed region ends at the first level-1 or level-2 heading, other
    than ``## Themes``, that follows a managed section. A managed section
    name appearing after that point is part of the FreeformTail.
    """
    trailing_newline = text.endswith("\n")
    line_ending = _line_ending(text)
    lines = text.split("\n") if text else []
    if trailing_newline:
        lines.pop()

    headers: list[tuple[int, str]] = []
    seen: set[str] = set()
    for i, line in enumerate(lines):
        match = _HEADER_RE.match(line)
        if not match:
            if headers and _starts_tail(line):
                break
            continue
        name = match.group(1)
        if name in seen:
            logger.warning("%s: duplicate %r header on line %d kept as text", month_key, name, i + 1)
            continue
        seen.add(name)
        headers.append((i, name))

    doc = MonthDocument(month_key=month_key, trailing_newline=trailing_newline, line_ending=line_ending)
    if not headers:
        doc.preamble = lines
        return doc

    doc.preamble = lines[: headers[0][0]]
    for n, (start, name) in enumerate(headers):
        is_last = n == len(headers) - 1
        end = len(lines) if is_last else headers[n + 1][0]
        body = lines[start + 1 : end]
        if is_last:
            for j, line in enumerate(body):
                if _starts_tail(line):
                    doc.tail = body[j:]
                    body = body[:j]
                    break
        doc.sections.append(Section(name=name, header=lines[start], body=_parse_body(body), line_ending=line_ending))
    return doc


def render(doc: MonthDocument) -> str:
    lines = list(doc.preamble)
    for section in doc.sections:
        lines.extend(section.lines())
    lines.extend(doc.tail)
    text = "\n".join(lines)
    if lines and doc.trailing_newline:
        text += "\n"
    return text


def load(path, year: int | None = None) -> MonthDocument:
    """Read a month document from disk, or build one from the template.

    The month key is taken from the file name (``01-January.md``).
    """
    path = Path(path)
    key = path.stem
    if not path.exists():
        return parse(template(key, year or date.today().year), key)
    with open(path, encoding="utf-8", newline="") as f:
        return parse(f.read(), key)


def _splice_index(doc: MonthDocument, name: str) -> int:
    ranks = [MANAGED_SECTIONS.index(s.name) for s in doc.sections]
    if ranks != sorted(ranks):
        raise SectionHealingFailure(
            f"sections are out of canonical order ({', '.join(doc.section_names())}); "
            f"cannot place {name!r}"
        )
    rank = MANAGED_SECTIONS.index(name)
    for i, existing in enumerate(ranks):
        if existing > rank:
            return i
    return len(doc.sections)


def heal(doc: MonthDocument) -> HealResult:
    """Insert any missing managed section at its canonical position.

    Existing sections are never modified or reordered. A complete document
    is left untouched.
    """
    result = HealResult()
    for name in MANAGED_SECTIONS:
        if doc.section(name) is not None:
            continue
        try:
            index = _splice_index(doc, name)
        except SectionHealingFailure as e:
            logger.warning("%s: %s; appending it after the last managed section", doc.month_key, e)
            result.warnings.append(str(e))
            index = len(doc.sections)
        doc.sections.insert(index, new_section(name, doc.line_ending))
        result.added.append(name)
        logger.debug("%s: added missing %r section", doc.month_key, name)
    return result
