# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for month keys and month ranges.
"""

import pytest

from domain.months import MonthKey, count_months, iter_months, month_range


class TestMonthKeyParsing:
    """Test parsing and formatting of YYYY-MM keys."""

    def test_parse_valid_key(self):
        month = MonthKey.parse("2024-06")

        assert month.year == 2024
        assert month.month == 6
        assert str(month) == "2024-06"

    def test_parse_strips_whitespace(self):
        assert str(MonthKey.parse(" 2024-06 ")) == "2024-06"

    @pytest.mark.parametrize("value", [
        "2024-6", "2024-13", "2024-00", "24-06", "2024/06", "June 2024", "", "2024-06-01"
    ])
    def test_parse_rejects_malformed_keys(self, value):
        with pytest.raises(ValueError):
            MonthKey.parse(value)

    def test_parse_rejects_non_string(self):
        with pytest.raises(ValueError):
            MonthKey.parse(202406)

    def test_label(self):
        assert MonthKey(2024, 11).label == "November 2024"
        assert MonthKey(2025, 1).name == "January"


class TestMonthArithmetic:
    """Test ordering and month arithmetic."""

    def test_ordering_is_chronological(self):
        assert MonthKey(2024, 12) < MonthKey(2025, 1)
        assert MonthKey(2024, 2) > MonthKey(2024, 1)

    def test_add_months_rolls_over_year(self):
        assert MonthKey(2024, 11).add_months(3) == MonthKey(2025, 2)

    def test_add_negative_months(self):
        assert MonthKey(2024, 3).add_months(-5) == MonthKey(2023, 10)

    def test_months_until(self):
        assert MonthKey(2024, 11).months_until(MonthKey(2025, 2)) == 3
        assert MonthKey(2024, 6).months_until(MonthKey(2024, 6)) == 0


class TestMonthRange:
    """Test inclusive month ranges."""

    def test_range_across_year_boundary(self):
        months = month_range(MonthKey.parse("2024-11"), MonthKey.parse("2025-02"))

        assert [str(m) for m in months] == ["2024-11", "2024-12", "2025-01", "2025-02"]

    def test_single_month_range(self):
        month = MonthKey(2024, 6)
        assert list(iter_months(month, month)) == [month]

    def test_reversed_range_is_empty(self):
        assert month_range(MonthKey(2024, 6), MonthKey(2024, 5)) == []
        assert count_months(MonthKey(2024, 6), MonthKey(2024, 5)) == 0

    def test_count_months(self):
        assert count_months(MonthKey(2024, 1), MonthKey(2024, 12)) == 12
        assert count_months(MonthKey(2024, 11), MonthKey(2025, 2)) == 4
