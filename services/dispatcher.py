"""
Chat command processing for Birthder.

Each handler is a plain function of the command arguments, the roster and whether the
caller is privileged, and returns a CommandResult with the reply text. dispatch()
matches a message against the route table and calls the right handler; the
privilege lookup only happens for privileged routes.

Commands:
    birthday set <user> <D.M.YYYY>    (privileged)
    birthday delete <user>            (privileged)
    birthdays on <D.M.YYYY>           (privileged)
    birthdays list
    fwd set <user> <D.M.YYYY>         (privileged)
    fwd delete <user>                 (privileged)
    fwd list
    pitch in <user> / pitch out <user>
    <D.M.YYYY> in a direct message sets the sender's own birthday
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional

from config import (
    MSG_INVALID_DATE,
    MSG_NO_USERS_ON_DATE,
    MSG_PERMISSION_DENIED,
    get_logger,
)
from services.events import EventKind, find_users_for_event, form_listing
from utils.date import parse_date

logger = get_logger("dispatcher")

USER_PATTERN = r"(<@[A-Z0-9]+(?:\|[^>]*)?>|@?[\w .\-]+?)\?*"
MENTION_PATTERN = re.compile(r"<@([A-Z0-9]+)(?:\|[^>]*)?>")

KIND_KEYWORDS = {"birthday": EventKind.BIRTHDAY, "fwd": EventKind.WORK_ANNIVERSARY}

ROUTES = {
    "set": re.compile(r"^\s*(birthday|fwd) set\s+" + USER_PATTERN + r"\s+(\S+)\s*$", re.I),
    "delete": re.compile(r"^\s*(birthday|fwd) delete\s+" + USER_PATTERN + r"\s*$", re.I),
    "check": re.compile(r"^\s*birthdays on\s+(\S+)\s*$", re.I),
    "list": re.compile(r"^\s*(birthdays|fwd) list\s*$", re.I),
    "pitch": re.compile(r"^\s*pitch (in|out)\s+" + USER_PATTERN + r"\s*$", re.I),
    "self_set": re.compile(r"^\s*(\d{1,2}\.\d{1,2}\.\d{4})\s*$"),
}


@dataclass
class CommandResult:
    text: str
    changed: bool = False


def get_ambiguous_user_text(users) -> str:
    names = ", ".join(user.name for user in users)
    return f"Be more specific, I know {len(users)} people named like that: {names}"


def resolve_users(name: str, roster) -> List:
    """Users matching a Slack mention (<@U123>) or a fuzzy name."""
    mention = MENTION_PATTERN.fullmatch(name.strip())
    if mention:
        user = roster.get_user(mention.group(1))
        return [user] if user else []
    return roster.find_users_by_fuzzy_name(name)


def _resolve_one(name: str, roster):
    """Return (user, None) for a single match or (None, CommandResult) with the error."""
    users = resolve_users(name, roster)
    if len(users) > 1:
        return None, CommandResult(get_ambiguous_user_text(users))
    if not users:
        return None, CommandResult(f"I have never met {name.strip()}.")
    return users[0], None


def handle_set_date(kind: EventKind, name: str, raw_date: str, roster, is_privileged: bool):
    """Link the date to the user (privileged)."""
    if not is_privileged:
        return CommandResult(MSG_PERMISSION_DENIED)
    if parse_date(raw_date) is None:
        return CommandResult(MSG_INVALID_DATE)

    user, error = _resolve_one(name, roster)
    if error:
        return error

    setattr(user, kind.attribute, raw_date)
    roster.save_user(user)
    logger.info(f"COMMAND: Set {kind.label} of {user.name} ({user.id}) to {raw_date}")
    noun = "birthday" if kind is EventKind.BIRTHDAY else kind.label
    return CommandResult(f"Saving {user.name}'s {noun}.", changed=True)


def handle_delete_date(kind: EventKind, name: str, roster, is_privileged: bool):
    """Clear the user's date; clearing an absent date is reported, not an error."""
    if not is_privileged:
        return CommandResult(MSG_PERMISSION_DENIED)

    user, error = _resolve_one(name, roster)
    if error:
        return error

    if not kind.raw_date(user):
        return CommandResult(f"No date specified for {user.name}.")

    setattr(user, kind.attribute, None)
    roster.save_user(user)
    logger.info(f"COMMAND: Removed {kind.label} of {user.name} ({user.id})")
    noun = "birthday" if kind is EventKind.BIRTHDAY else kind.label
    return CommandResult(f"Removing {user.name}'s {noun}.", changed=True)


def handle_users_on_date(kind: EventKind, raw_date: str, roster, is_privileged: bool):
    if not is_privileged:
        return CommandResult(MSG_PERMISSION_DENIED)
    when = parse_date(raw_date)
    if when is None:
        return CommandResult(MSG_INVALID_DATE)

    users = find_users_for_event(kind, when, roster.list_users())
    if not users:
        return CommandResult(MSG_NO_USERS_ON_DATE)
    return CommandResult(", ".join(user.mention for user in users))


def handle_list(kind: EventKind, roster, today: date = None):
    return CommandResult(form_listing(kind, roster.list_users(), today or date.today()))


def handle_self_set_birthday(user_id: str, raw_date: str, roster):
    user = roster.get_user(user_id)
    if user is None:
        return CommandResult("I don't know you yet, please try again in a minute.")
    if parse_date(raw_date) is None:
        return CommandResult(MSG_INVALID_DATE)

    user.date_of_birth = raw_date
    roster.save_user(user)
    logger.info(f"COMMAND: {user.name} ({user.id}) set own date of birth")
    return CommandResult(f"Thanks! I saved your date of birth: {raw_date}.", changed=True)


def handle_pitch_in(name: str, responder_id: str, accepted: bool, roster, reminders):
    user, error = _resolve_one(name, roster)
    if error:
        return error
    if user.id == responder_id:
        return CommandResult("Nice try, but you can't pitch in for your own present.")
    if reminders is None or not reminders.record_pitching_in(user, responder_id, accepted):
        return CommandResult(f"There is no open pitching-in survey for {user.name}.")
    if accepted:
        return CommandResult(f"Thanks, you're in for {user.mention}'s present!", changed=True)
    return CommandResult(f"OK, you're out for {user.mention}'s present.", changed=True)


def dispatch(
    text: str,
    caller_id: str,
    roster,
    is_privileged: Callable[[], bool],
    reminders=None,
    is_direct_message: bool = False,
    today: date = None,
) -> Optional[CommandResult]:
    """
    Route a chat message to its handler

    Args:
        text: Message text
        caller_id: Slack ID of the sender
        roster: RosterStore
        is_privileged: Zero-argument callable, only called for privileged routes
        reminders: ReminderService, needed for pitching-in answers
        is_direct_message: Bare dates are only accepted in direct messages
        today: Reference date for listings

    Returns:
        CommandResult, or None if the message is not a command
    """
    match = ROUTES["set"].match(text)
    if match:
        kind = KIND_KEYWORDS[match.group(1).lower()]
        return handle_set_date(kind, match.group(2), match.group(3), roster, is_privileged())

    match = ROUTES["delete"].match(text)
    if match:
        kind = KIND_KEYWORDS[match.group(1).lower()]
        return handle_delete_date(kind, match.group(2), roster, is_privileged())

    match = ROUTES["check"].match(text)
    if match:
        return handle_users_on_date(EventKind.BIRTHDAY, match.group(1), roster, is_privileged())

    match = ROUTES["list"].match(text)
    if match:
        kind = EventKind.BIRTHDAY if match.group(1).lower() == "birthdays" else EventKind.WORK_ANNIVERSARY
        return handle_list(kind, roster, today)

    match = ROUTES["pitch"].match(text)
    if match:
        accepted = match.group(1).lower() == "in"
        return handle_pitch_in(match.group(2), caller_id, accepted, roster, reminders)

    match = ROUTES["self_set"].match(text)
    if match and is_direct_message:
        return handle_self_set_birthday(caller_id, match.group(1), roster)

    return None
