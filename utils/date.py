"""
Date utilities for Birthder.

Strict parsing of the D.M.YYYY input format, month/day comparison for recurring
annual events, whole-year counting and a stable merge sort used to order listings.

Key functions: is_valid_date(), parse_date(), is_equal_month_day(), elapsed_years(),
merge_sort().
"""

import re
from datetime import date, datetime

from config import DATE_FORMAT, get_logger

logger = get_logger("date")

# strptime alone tolerates leading spaces, so the shape is checked first
FORMAT_SHAPES = {"%d": r"\d{1,2}", "%m": r"\d{1,2}", "%Y": r"\d{4}"}


def _shape_for(fmt):
    parts = re.split(r"(%[dmY])", fmt)
    return re.compile("".join(FORMAT_SHAPES.get(part, re.escape(part)) for part in parts))


def _parse(raw, fmt):
    if not isinstance(raw, str) or not _shape_for(fmt).fullmatch(raw):
        return None
    try:
        return datetime.strptime(raw, fmt).date()
    except ValueError:
        logger.debug(f"DATE_ERROR: {raw} is not a valid calendar date for {fmt}")
        return None


def parse_date(raw, fmt=DATE_FORMAT):
    """
    Parse a date string strictly against one format or a list of formats

    Args:
        raw: Value to parse (anything that is not a string is rejected)
        fmt: strptime format, or a list/tuple of formats tried in order

    Returns:
        datetime.date, or None if the value does not match
    """
    formats = fmt if isinstance(fmt, (list, tuple)) else [fmt]
    for candidate in formats:
        parsed = _parse(raw, candidate)
        if parsed is not None:
            return parsed
    return None


def is_valid_date(raw, fmt=DATE_FORMAT) -> bool:
    """Check if the value is a string that strictly follows the date format."""
    return parse_date(raw, fmt) is not None


def is_equal_month_day(first: date, second: date) -> bool:
    """Check if two dates have the same month and day, ignoring the year."""
    return first.month == second.month and first.day == second.day


def elapsed_years(start: date, today: date) -> int:
    """
    Count whole years between start and today

    Args:
        start: Date the period started (e.g. first working day)
        today: Reference date

    Returns:
        Number of completed years, never negative
    """
    years = today.year - start.year
    if (today.month, today.day) < (start.month, start.day):
        years -= 1
    return max(years, 0)


def merge_sort(items, key):
    """
    Stable merge sort

    Items with equal keys keep their input order, which keeps listings deterministic
    for people sharing a day.

    Args:
        items: Sequence to sort (left untouched)
        key: Function mapping an item to a comparable key

    Returns:
        New sorted list
    """
    items = list(items)
    if len(items) <= 1:
        return items

    middle = len(items) // 2
    left = merge_sort(items[:middle], key)
    right = merge_sort(items[middle:], key)

    merged = []
    i = j = 0
    while i < len(left) and j < len(right):
        # <= takes from the left half on ties
        if key(left[i]) <= key(right[j]):
            merged.append(left[i])
            i += 1
        else:
            merged.append(right[j])
            j += 1

    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged
