"""Fetch PR activity records from GitHub's issue search.

One search per category, each a single blocking call. A failed search is
logged and contributes no records; the sync engine never retries.
"""

from __future__ import annotations

import logging

from github import Github, GithubException

from prlog_core.records import CLOSED, MERGED, OPEN, PENDING_REVIEW, REVIEWED, UPDATED, Record
from prlog_core.summary import UPDATE_STATUS

logger = logging.getLogger(__name__)

# category -> (search qualifiers, issue attribute that dates the record)
_SEARCHES = {
    MERGED: ("author:@me is:pr is:merged merged:{span}", "closed_at"),
    CLOSED: ("author:@me is:pr is:closed is:unmerged closed:{span}", "closed_at"),
    OPEN: ("author:@me is:pr is:open created:{span}", "created_at"),
    UPDATED: ("author:@me is:pr is:open updated:{span}", "updated_at"),
    REVIEWED: ("reviewed-by:@me -author:@me is:pr is:merged merged:{span}", "closed_at"),
    PENDING_REVIEW: ("review-requested:@me is:pr is:open updated:{span}", "updated_at"),
}

_STATUS = {
    MERGED: "merged",
    CLOSED: "closed",
    OPEN: "open",
    UPDATED: UPDATE_STATUS,
}


def get_client(token: str):
    return Github(token)


def build_query(category: str, org: str, from_date, to_date) -> str:
    qualifiers, _ = _SEARCHES[category]
    span = f"{_iso(from_date)}..{_iso(to_date)}"
    return f"org:{org} " + qualifiers.format(span=span)


def _iso(value) -> str:
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def _repo_name(html_url: str) -> str:
    # https://github.com/<owner>/<repo>/pull/<number>
    parts = (html_url or "").rstrip("/").split("/")
    return parts[-3] if len(parts) >= 3 else ""


def to_record(issue, category: str) -> Record:
    """Normalize one search hit. Missing fields are left empty for validation to reject."""
    _, date_attr = _SEARCHES[category]
    stamp = getattr(issue, date_attr, None)
    url = issue.html_url or ""
    if category in (REVIEWED, PENDING_REVIEW):
        last = issue.user.login if issue.user is not None else ""
    else:
        last = _STATUS[category]
    return Record(
        category=category,
        date=stamp.date().isoformat() if stamp is not None else "",
        repo=_repo_name(url),
        title=issue.title or "",
        url=url,
        status_or_author=last,
    )


def search_records(gh, category: str, org: str, from_date, to_date, limit: int = 100) -> list[Record]:
    query = build_query(category, org, from_date, to_date)
    records: list[Record] = []
    try:
        for issue in gh.search_issues(query):
            if len(records) >= limit:
                logger.warning("More than %d %s results; keeping the first %d", limit, category, limit)
                break
            records.append(to_record(issue, category))
    except GithubException as e:
        logger.warning("GitHub search for %s PRs failed (%s): %s", category, e.status, e.data)
        return []
    logger.debug("%s: %d record(s) for %r", category, len(records), query)
    return records


def fetch_records(gh, org: str, from_date, to_date, limit: int = 100) -> dict[str, list[Record]]:
    """Run every category search; return records keyed by category."""
    return {category: search_records(gh, category, org, from_date, to_date, limit) for category in _SEARCHES}
