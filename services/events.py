"""
Date event engine for Birthder.

Decides which users have a birthday or work anniversary on a given day, orders
listings by how soon each event comes around again, and composes the reminder,
listing and congratulation texts.

Main functions: find_users_for_event(), sort_by_upcoming(), form_listing(),
form_reminder_message(), form_anniversary_message(), form_congratulation_message().
"""

from datetime import date, timedelta
from enum import Enum
from typing import List, Optional

from config import (
    COMPANY_NAME,
    MSG_NO_RESULTS,
    OUTPUT_DATE_FORMAT,
    OUTPUT_SHORT_DATE_FORMAT,
    get_logger,
)
from utils.date import elapsed_years, is_equal_month_day, merge_sort, parse_date

logger = get_logger("date_events")


class EventKind(Enum):
    BIRTHDAY = ("date_of_birth", "date of birth", "was born on")
    WORK_ANNIVERSARY = ("date_of_fwd", "first working day", "joined us on")

    def __init__(self, attribute, label, listing_verb):
        self.attribute = attribute
        self.label = label
        self.listing_verb = listing_verb

    def raw_date(self, user) -> Optional[str]:
        return getattr(user, self.attribute, None)

    def date_of(self, user) -> Optional[date]:
        """Parsed event date of the user, or None if absent or invalid."""
        return parse_date(self.raw_date(user))


def target_date(today: date, amount: int, unit: str = "days") -> date:
    """today shifted by the advance-notice window (unit is 'days' or 'weeks')."""
    return today + timedelta(**{unit: amount})


def find_users_for_event(kind: EventKind, when: date, users) -> List:
    """
    Find the users whose event falls on the same month and day as the given date

    Args:
        kind: Which date attribute to look at
        when: Date to compare against (its year is ignored)
        users: Iterable of user records

    Returns:
        Matching users in roster order
    """
    matches = []
    for user in users:
        event_date = kind.date_of(user)
        if event_date is not None and is_equal_month_day(when, event_date):
            matches.append(user)
    return matches


def sort_by_upcoming(kind: EventKind, users, today: date) -> List:
    """
    Order users by how soon their event comes around again

    The listing starts with the first event strictly after today and wraps around the
    end of the year. People whose event is today come last, a full cycle away.
    People sharing a day keep their roster order.

    Args:
        kind: Which date attribute to order by
        users: Iterable of user records (invalid or missing dates are skipped)
        today: Reference date

    Returns:
        New list of users
    """
    entries = [
        ((event_date.month, event_date.day), user)
        for user in users
        for event_date in [kind.date_of(user)]
        if event_date is not None
    ]
    if not entries:
        return []

    # Appended last so that the stable sort keeps it behind people born today
    today_marker = ((today.month, today.day), None)
    ordered = merge_sort(entries + [today_marker], key=lambda entry: entry[0])

    position = next(i for i, entry in enumerate(ordered) if entry is today_marker)
    rotated = ordered[position + 1 :] + ordered[:position]
    return [user for _, user in rotated]


def form_listing(kind: EventKind, users, today: date) -> str:
    """One line per user with a valid date, in upcoming order."""
    lines = [
        f"{user.mention} {kind.listing_verb} {kind.date_of(user).strftime(OUTPUT_DATE_FORMAT)}"
        for user in sort_by_upcoming(kind, users, today)
    ]
    return "\n".join(lines) if lines else MSG_NO_RESULTS


def form_reminder_message(users, target_day: date, amount_of_time: int, unit: str = "days") -> str:
    """
    Form a reminder message

    Args:
        users: Birthday people to name
        target_day: Date of the birthday
        amount_of_time: How far ahead the reminder is sent
        unit: Unit of amount_of_time

    Returns:
        e.g. "@alice, @bob are having a birthday on 15.06."
    """
    names = ", ".join(user.mention for user in users)
    to_be = "are" if len(users) > 1 else "is"
    if amount_of_time == 1 and unit == "days":
        when = "tomorrow"
    else:
        when = f"on {target_day.strftime(OUTPUT_SHORT_DATE_FORMAT)}"
    return f"{names} {to_be} having a birthday {when}."


def form_anniversary_message(users, today: date, company_name: str = COMPANY_NAME) -> str:
    """
    Form the work anniversary sentence for the given users

    Users who started less than a year ago are left out. An empty string means there
    is nothing to announce.

    Args:
        users: Users whose first working day matches today
        today: Reference date
        company_name: Used in the sentence

    Returns:
        e.g. "@alice has been with WIS Software for 3 years and @bob ... for 1 year"
    """
    sentences = []
    for user in users:
        start = EventKind.WORK_ANNIVERSARY.date_of(user)
        if start is None:
            continue
        years = elapsed_years(start, today)
        if years == 0:
            logger.debug(f"ANNIVERSARY: Skipping {user.name}, started less than a year ago")
            continue
        unit = "year" if years == 1 else "years"
        sentences.append(f"{user.mention} has been with {company_name} for {years} {unit}")
    return " and ".join(sentences)


def form_congratulation_message(users, quote: str) -> str:
    names = " and ".join(user.mention for user in users)
    return f"Today is birthday of {names}!\n{quote}"
