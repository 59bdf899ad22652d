"""Tests for record validation, classification and row building."""

from datetime import date

import pytest

from prlog_core.errors import InvalidRecord
from prlog_core.records import (
    MONTH_NAMES,
    Record,
    build_row,
    classify,
    escape_cell,
    group_records,
    month_key,
    parse_date,
)


def _record(category="merged", day="2026-01-15", repo="my-repo", title="Add new feature", url="https://x/123", last=""):
    return Record(category=category, date=day, repo=repo, title=title, url=url, status_or_author=last or category)


class TestMonthKey:
    def test_january(self):
        assert month_key(date(2026, 1, 15)) == "01-January"

    def test_december(self):
        assert month_key(date(2025, 12, 31)) == "12-December"

    def test_every_month_is_two_digit_and_english(self):
        keys = [month_key(date(2026, m, 1)) for m in range(1, 13)]
        assert keys[8] == "09-September"
        assert all(len(k.split("-")[0]) == 2 for k in keys)
        assert [k.split("-")[1] for k in keys] == list(MONTH_NAMES)


class TestParseDate:
    def test_valid_date(self):
        assert parse_date("2026-01-15") == date(2026, 1, 15)

    def test_impossible_date_rejected(self):
        with pytest.raises(ValueError):
            parse_date("2026-02-30")

    def test_non_iso_format_rejected(self):
        with pytest.raises(ValueError):
            parse_date("01/15/2026")


class TestClassify:
    @pytest.mark.parametrize(
        "category, section",
        [
            ("merged", "PRs"),
            ("closed", "PRs"),
            ("open", "PRs"),
            ("updated", "PR Updates"),
            ("reviewed", "Code Reviews"),
            ("pending_review", "Pending Reviews"),
        ],
    )
    def test_category_to_section(self, category, section):
        assert classify(_record(category=category)) == ("01-January", section)

    def test_unparseable_date(self):
        with pytest.raises(InvalidRecord) as exc:
            classify(_record(day="not-a-date"))
        assert "date" in exc.value.reason

    def test_empty_date(self):
        with pytest.raises(InvalidRecord):
            classify(_record(day=""))

    @pytest.mark.parametrize("repo", ["", "   ", "null", None])
    def test_missing_repo(self, repo):
        with pytest.raises(InvalidRecord):
            classify(_record(repo=repo))

    @pytest.mark.parametrize("url", ["", "null"])
    def test_missing_url(self, url):
        with pytest.raises(InvalidRecord):
            classify(_record(url=url))

    def test_unknown_category(self):
        with pytest.raises(InvalidRecord):
            classify(_record(category="draft"))


class TestEscapeCell:
    def test_pipe_is_escaped(self):
        assert escape_cell("a | b") == "a \\| b"

    def test_newlines_are_stripped(self):
        assert escape_cell("line one\r\nline two\n") == "line oneline two"

    def test_none_becomes_empty(self):
        assert escape_cell(None) == ""


class TestBuildRow:
    def test_pr_row(self):
        row = build_row(_record())
        assert row.raw == "| 2026-01-15 | my-repo | [Add new feature](https://x/123) | merged |"

    def test_review_row_prefixes_author(self):
        row = build_row(_record(category="reviewed", last="alice"))
        assert row.raw.endswith("| @alice |")

    def test_review_row_does_not_double_at(self):
        row = build_row(_record(category="pending_review", last="@bob"))
        assert row.last == "@bob"

    def test_title_with_pipe_and_newline_stays_on_one_line(self):
        row = build_row(_record(title="Fix a|b\nparsing"))
        assert "\n" not in row.raw
        assert "[Fix a\\|bparsing](https://x/123)" in row.raw
        assert row.cells[2] == "[Fix a\\|bparsing](https://x/123)"


class TestGroupRecords:
    def test_groups_by_month_and_section(self):
        batch = group_records(
            [
                _record(day="2026-01-02", url="https://x/1"),
                _record(category="reviewed", day="2026-01-03", url="https://x/2", last="carol"),
                _record(day="2026-02-01", url="https://x/3"),
            ]
        )
        assert set(batch.groups) == {"01-January", "02-February"}
        assert set(batch.groups["01-January"]) == {"PRs", "Code Reviews"}
        assert batch.years["01-January"] == 2026
        assert batch.invalid == []

    def test_invalid_records_collected_not_raised(self):
        batch = group_records([_record(repo="null"), _record(day="2026-13-01"), _record()])
        assert len(batch.invalid) == 2
        assert len(batch.groups["01-January"]["PRs"]) == 1

    def test_input_order_kept_within_section(self):
        batch = group_records([_record(url="https://x/2"), _record(url="https://x/1")])
        urls = [row.link_url() for row in batch.groups["01-January"]["PRs"]]
        assert urls == ["https://x/2", "https://x/1"]
