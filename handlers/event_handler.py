"""
Slack event processing for Birthder.

Keeps the roster up to date with the people the bot sees, welcomes new team members
and routes chat messages to the command dispatcher.

Main function: register_event_handlers().
"""

import re

from config import COMPANY_NAME, MSG_WELCOME, get_logger
from services.dispatcher import dispatch

events_logger = get_logger("events")

BOT_MENTION_PREFIX = re.compile(r"^\s*<@([A-Z0-9]+)>\s*")


def strip_bot_mention(text: str, bot_user_id: str) -> str:
    """Remove a leading @-mention of the bot, so "@bot birthdays list" is a command."""
    match = BOT_MENTION_PREFIX.match(text)
    if match and match.group(1) == bot_user_id:
        return text[match.end() :]
    return text


def register_first_time_sender(user_id, roster, directory):
    """
    Add a sender the roster does not know yet, using a single user lookup

    Returns:
        The new UserRecord, or None if the sender is known, inactive or unknown to Slack
    """
    if not user_id or roster.get_user(user_id) is not None:
        return None

    user = directory.get_user(user_id)
    if not directory.is_active_profile(user):
        return None
    return roster.ensure_user(user_id, user.get("name") or user_id)


def handle_message_event(event, say, roster, directory, reminders, bot_user_id=None):
    """
    Process one message event

    Args:
        event: Slack message event payload
        say: Reply function bound to the event's channel
        roster: RosterStore
        directory: SlackDirectory, used for the privilege check
        reminders: ReminderService, used for pitching-in answers
        bot_user_id: The bot's own user ID

    Returns:
        CommandResult, or None if the message was ignored
    """
    if event.get("bot_id") or event.get("subtype"):
        return None

    user_id = event.get("user")
    if not user_id:
        return None

    text = strip_bot_mention(event.get("text", ""), bot_user_id)
    is_direct_message = event.get("channel_type") == "im"

    result = dispatch(
        text,
        user_id,
        roster,
        is_privileged=lambda: directory.is_privileged_user(user_id),
        reminders=reminders,
        is_direct_message=is_direct_message,
    )
    if result is None:
        return None

    events_logger.info(f"COMMAND: Handled '{text[:40]}' from {user_id} (changed={result.changed})")
    say(result.text)
    return result


def register_event_handlers(app, roster, directory, reminders):
    events_logger.info("EVENT_HANDLER: Registering event handlers")

    @app.event("message")
    def handle_message(event, say, context):
        """Handle chat messages that look like commands"""
        user_id = event.get("user")
        try:
            register_first_time_sender(user_id, roster, directory)
            handle_message_event(
                event, say, roster, directory, reminders, bot_user_id=context.get("bot_user_id")
            )
        except Exception as e:
            events_logger.error(f"COMMAND_ERROR: Failed to handle message from {user_id}: {e}")

    @app.event("team_join")
    def handle_team_join(event):
        """Add new team members to the roster and ask for their date of birth"""
        user = event.get("user", {})
        if user.get("is_bot") or user.get("deleted"):
            return

        user_id = user["id"]
        roster.ensure_user(user_id, user.get("name") or user_id)
        try:
            app.client.chat_postMessage(
                channel=user_id, text=MSG_WELCOME.format(company_name=COMPANY_NAME)
            )
            events_logger.info(f"TEAM_JOIN: Welcomed {user_id}")
        except Exception as e:
            events_logger.error(f"TEAM_JOIN: Failed to welcome {user_id}: {e}")

    events_logger.info("EVENT_HANDLER: All event handlers registered (message, team_join)")


def sync_roster_from_directory(roster, directory):
    """
    Add every active workspace member to the roster

    Returns:
        Number of members seen
    """
    members = directory.list_members()
    for user_id, name in members:
        roster.ensure_user(user_id, name)
    events_logger.info(f"ROSTER_SYNC: Synced {len(members)} members")
    return len(members)
