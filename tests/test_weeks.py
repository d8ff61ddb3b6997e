"""Tests for weeks.py – week descriptor parser."""
import pytest

from taru_timetable_export.weeks import (
    format_weeks,
    match_range,
    match_single,
    parse_weeks,
)


class TestMatchers:
    def test_range(self):
        assert match_range("1-5周") == (1, 5)
        assert match_range("1-5周(单)") == (1, 5)
        assert match_range("第3-12周") == (3, 12)

    def test_range_no_match(self):
        assert match_range("6周") is None
        assert match_range("1-5") is None

    def test_single(self):
        assert match_single("6周") == (6, 6)
        assert match_single("6周(双)") == (6, 6)

    def test_single_rejects_trailing_text(self):
        assert match_single("6周abc") is None
        assert match_single("3周-5周") is None
        assert match_single("1-5周") is None


class TestParseWeeks:
    def test_empty(self):
        assert parse_weeks("") == []
        assert parse_weeks(None) == []

    def test_range(self):
        assert parse_weeks("1-5周") == [1, 2, 3, 4, 5]

    def test_odd(self):
        assert parse_weeks("1-5周(单)") == [1, 3, 5]

    def test_even(self):
        assert parse_weeks("1-6周(双)") == [2, 4, 6]

    def test_single(self):
        assert parse_weeks("6周") == [6]
        assert parse_weeks("6周(双)") == [6]
        assert parse_weeks("5周(双)") == []

    def test_union_sorted(self):
        assert parse_weeks("3周,1-2周") == [1, 2, 3]
        assert parse_weeks("1-2周,3周") == [1, 2, 3]

    def test_overlap_deduped(self):
        assert parse_weeks("1-4周,3-6周,4周") == [1, 2, 3, 4, 5, 6]

    def test_mixed_parity(self):
        assert parse_weeks("1-7周(单),2-4周(双)") == [1, 2, 3, 4, 5, 7]

    def test_whitespace_around_clauses(self):
        assert parse_weeks(" 1-2周 , 9周 ") == [1, 2, 9]

    def test_reversed_range(self):
        assert parse_weeks("5-3周") == []
        assert parse_weeks("5-3周,8周") == [8]

    def test_unrecognized_clauses_skipped(self):
        assert parse_weeks("待定") == []
        assert parse_weeks("6周abc,2周") == [2]
        assert parse_weeks("3周-5周") == []

    def test_non_string(self):
        assert parse_weeks(12) == []

    @pytest.mark.parametrize(
        "descriptor",
        ["1-16周", "1-5周(单),2-10周(双)", "9周,1-3周,2-4周", "1-1周,1周"],
    )
    def test_strictly_ascending(self, descriptor):
        weeks = parse_weeks(descriptor)
        assert weeks
        assert all(a < b for a, b in zip(weeks, weeks[1:]))


class TestFormatWeeks:
    def test_runs(self):
        assert format_weeks([1, 2, 3, 5, 7, 8]) == "1-3周,5周,7-8周"

    def test_unsorted_input(self):
        assert format_weeks([8, 1, 2, 2]) == "1-2周,8周"

    def test_empty(self):
        assert format_weeks([]) == ""

    def test_parses_back(self):
        weeks = [1, 3, 5, 6, 7, 12]
        assert parse_weeks(format_weeks(weeks)) == weeks
