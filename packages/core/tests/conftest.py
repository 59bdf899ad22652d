import pytest

# A March document in the layout older versions produced: no PR Updates or
# Pending Reviews sections, a Repos metric, rows separated from their table
# header by a blank line, and hand-written notes at the end.
LEGACY_MARCH = """[[PR Log]]

# March 2024 - PR Log

## Summary

| Metric | Value |
|--------|-------|
| **Total PRs** | 2 |
| **Merged** | 1 |
| **Closed** | 1 |
| **Reviews** | 1 |
| **Repos** | api, web |

## Themes
- Auth cleanup

## PRs

| Date | Repo | Title | Status |
|------|------|-------|--------|

| 2024-03-04 | api | [Fix login](https://github.com/acme/api/pull/1) | merged |
| 2024-03-05 | web | [Drop IE](https://github.com/acme/web/pull/2) | closed |

## Code Reviews

| Date | Repo | Title | Author |
|------|------|-------|--------|

| 2024-03-06 | api | [Add cache](https://github.com/acme/api/pull/3) | @alice |

## Related Project Notes
- Talked to the infra team about rate limits
"""

PR_UPDATES_BLOCK = """## PR Updates

| Date | Repo | Title | Status |
|------|------|-------|--------|

"""

PENDING_REVIEWS_BLOCK = """## Pending Reviews

| Date | Repo | Title | Author |
|------|------|-------|--------|

"""


@pytest.fixture
def legacy_text():
    return LEGACY_MARCH


@pytest.fixture
def healed_legacy_text():
    return LEGACY_MARCH.replace("## Code Reviews", PR_UPDATES_BLOCK + "## Code Reviews").replace(
        "## Related Project Notes", PENDING_REVIEWS_BLOCK + "## Related Project Notes"
    )
