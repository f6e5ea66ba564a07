"""
Tests for date utility functions in utils/date.py

- parse_date() / is_valid_date(): strict D.M.YYYY parsing
- is_equal_month_day(): year-agnostic comparison
- elapsed_years(): whole-year counting around the anniversary
- merge_sort(): ordering and stability
"""

from datetime import date

from utils.date import elapsed_years, is_equal_month_day, is_valid_date, merge_sort, parse_date


class TestParseDate:
    """Tests for parse_date() and is_valid_date()"""

    def test_short_day_and_month(self):
        assert parse_date("1.3.2000") == date(2000, 3, 1)

    def test_zero_padded(self):
        assert parse_date("01.03.2000") == date(2000, 3, 1)

    def test_impossible_calendar_date(self):
        assert parse_date("31.2.2000") is None

    def test_leap_day(self):
        assert parse_date("29.2.2000") == date(2000, 2, 29)
        assert parse_date("29.2.2001") is None

    def test_wrong_separator(self):
        assert parse_date("1/3/2000") is None

    def test_surrounding_whitespace_rejected(self):
        assert parse_date(" 1.3.2000") is None
        assert parse_date("1.3.2000 ") is None

    def test_two_digit_year_rejected(self):
        assert parse_date("1.3.00") is None

    def test_non_string_rejected(self):
        assert parse_date(None) is None
        assert parse_date(20000301) is None

    def test_list_of_formats(self):
        assert parse_date("2000-03-01", ["%d.%m.%Y", "%Y-%m-%d"]) == date(2000, 3, 1)

    def test_is_valid_date(self):
        assert is_valid_date("15.6.1995")
        assert not is_valid_date("15.13.1995")
        assert not is_valid_date("")


class TestIsEqualMonthDay:
    """Tests for is_equal_month_day()"""

    def test_same_day_different_year(self):
        assert is_equal_month_day(date(2023, 3, 1), date(2000, 3, 1))

    def test_different_day(self):
        assert not is_equal_month_day(date(2023, 3, 1), date(2000, 3, 2))

    def test_leap_day_only_matches_leap_day(self):
        """Feb 29 birthdays are not moved to Feb 28 or Mar 1 in common years"""
        born = date(2000, 2, 29)
        assert not is_equal_month_day(date(2023, 2, 28), born)
        assert not is_equal_month_day(date(2023, 3, 1), born)
        assert is_equal_month_day(date(2024, 2, 29), born)


class TestElapsedYears:
    """Tests for elapsed_years()"""

    def test_on_anniversary(self):
        assert elapsed_years(date(2020, 3, 1), date(2023, 3, 1)) == 3

    def test_day_before_anniversary(self):
        assert elapsed_years(date(2020, 3, 1), date(2023, 2, 28)) == 2

    def test_same_day_start(self):
        assert elapsed_years(date(2023, 3, 1), date(2023, 3, 1)) == 0

    def test_future_start_never_negative(self):
        assert elapsed_years(date(2025, 3, 1), date(2023, 3, 1)) == 0


class TestMergeSort:
    """Tests for merge_sort()"""

    def test_sorts_by_key(self):
        assert merge_sort([3, 1, 2], key=lambda x: x) == [1, 2, 3]

    def test_empty_and_single(self):
        assert merge_sort([], key=lambda x: x) == []
        assert merge_sort([7], key=lambda x: x) == [7]

    def test_stable_for_equal_keys(self):
        items = [("b", 2), ("a1", 1), ("c", 3), ("a2", 1), ("a3", 1)]
        result = merge_sort(items, key=lambda item: item[1])
        assert [name for name, _ in result] == ["a1", "a2", "a3", "b", "c"]

    def test_input_not_modified(self):
        items = [2, 1]
        merge_sort(items, key=lambda x: x)
        assert items == [2, 1]
