"""
Slack API wrappers for Birthder.

SlackNotifier delivers messages and manages temporary birthday channels;
SlackDirectory answers questions about workspace users (privileges, existence,
activity). Slack errors are logged and turned into False/None so a single failing
call never aborts a notification cycle.

Key classes: SlackNotifier, SlackDirectory.
"""

import re
from typing import Iterable, List, Optional, Tuple

from slack_sdk.errors import SlackApiError

from config import ADMIN_USERS, get_logger

logger = get_logger("slack")

SLACK_CHANNEL_NAME_MAX_LENGTH = 80
SLACK_INVITE_BATCH_SIZE = 1000


def slack_channel_name(raw: str) -> str:
    """
    Turn arbitrary text into a valid Slack channel name

    Slack only accepts lowercase letters, digits, hyphens and underscores, up to 80
    characters.
    """
    name = re.sub(r"[^a-z0-9_-]+", "-", raw.lower()).strip("-")
    return name[:SLACK_CHANNEL_NAME_MAX_LENGTH]


class SlackNotifier:
    """Sends messages and manages rooms through a Slack Bolt app."""

    def __init__(self, app):
        self.app = app

    def send_direct(self, user_id: str, text: str) -> bool:
        try:
            self.app.client.chat_postMessage(channel=user_id, text=text)
            logger.info(f"MESSAGE: Sent DM to {user_id}")
            return True
        except SlackApiError as e:
            logger.error(f"API_ERROR: Failed to send DM to {user_id}: {e}")
            return False

    def send_to_room(self, room: str, text: str) -> bool:
        try:
            self.app.client.chat_postMessage(channel=room, text=text)
            logger.info(f"MESSAGE: Sent message to channel {room}")
            return True
        except SlackApiError as e:
            logger.error(f"API_ERROR: Failed to send message to {room}: {e}")
            return False

    def create_room(self, name: str, member_ids: Iterable[str]) -> Optional[str]:
        """
        Create a private channel and invite the given members

        Returns:
            Channel ID, or None if the channel could not be created
        """
        channel_name = slack_channel_name(name)
        try:
            response = self.app.client.conversations_create(name=channel_name, is_private=True)
            room_id = response["channel"]["id"]
        except SlackApiError as e:
            logger.error(f"API_ERROR: Failed to create channel {channel_name}: {e}")
            return None

        members = list(member_ids)
        for start in range(0, len(members), SLACK_INVITE_BATCH_SIZE):
            batch = members[start : start + SLACK_INVITE_BATCH_SIZE]
            try:
                self.app.client.conversations_invite(channel=room_id, users=",".join(batch))
            except SlackApiError as e:
                logger.error(f"API_ERROR: Failed to invite members to {channel_name}: {e}")

        logger.info(f"CHANNEL: Created {channel_name} ({room_id}) with {len(members)} members")
        return room_id

    def delete_room(self, room_id: str) -> bool:
        # Bots cannot delete channels; archiving is the closest equivalent
        try:
            self.app.client.conversations_archive(channel=room_id)
            logger.info(f"CHANNEL: Archived {room_id}")
            return True
        except SlackApiError as e:
            logger.error(f"API_ERROR: Failed to archive channel {room_id}: {e}")
            return False


class SlackDirectory:
    """Workspace user lookups."""

    def __init__(self, app, admin_users: List[str] = None):
        self.app = app
        self.admin_users = ADMIN_USERS if admin_users is None else admin_users

    def _user_info(self, user_id: str) -> Optional[dict]:
        response = self.app.client.users_info(user=user_id)
        if not response.get("ok"):
            return None
        return response.get("user")

    def is_privileged_user(self, user_id: str) -> bool:
        """
        Check if user is privileged (in ADMIN_USERS, or workspace admin/owner)

        Lookup failures deny the privilege.
        """
        if user_id in self.admin_users:
            logger.debug(f"PERMISSIONS: {user_id} is privileged via ADMIN_USERS list")
            return True

        try:
            user = self._user_info(user_id)
        except SlackApiError as e:
            logger.error(
                f"API_ERROR: Could not get user data for {user_id}, "
                f"ensure the bot has the users:read scope: {e}"
            )
            return False

        if not user:
            logger.error(f"API_ERROR: No user data returned for {user_id}")
            return False
        return bool(user.get("is_admin") or user.get("is_owner"))

    def does_user_exist(self, user_id: str) -> bool:
        try:
            return self._user_info(user_id) is not None
        except SlackApiError as e:
            logger.error(f"API_ERROR: Failed to look up {user_id}: {e}")
            return False

    def get_user(self, user_id: str) -> Optional[dict]:
        """Slack user object, or None if it cannot be fetched."""
        try:
            return self._user_info(user_id)
        except SlackApiError as e:
            logger.error(f"API_ERROR: Failed to check status of {user_id}: {e}")
            return None

    @staticmethod
    def is_active_profile(user: Optional[dict]) -> bool:
        """Not deleted/deactivated and not a bot."""
        if not user:
            return False
        return not user.get("deleted", False) and not user.get("is_bot", False)

    def is_user_active(self, user_id: str) -> bool:
        return self.is_active_profile(self.get_user(user_id))

    def list_members(self) -> List[Tuple[str, str]]:
        """
        All active human members of the workspace

        Returns:
            List of (user_id, name) tuples
        """
        members = []
        cursor = None
        try:
            while True:
                kwargs = {"limit": 200}
                if cursor:
                    kwargs["cursor"] = cursor
                response = self.app.client.users_list(**kwargs)
                for user in response.get("members", []):
                    if user.get("deleted") or user.get("is_bot") or user.get("id") == "USLACKBOT":
                        continue
                    members.append((user["id"], user.get("name") or user["id"]))

                cursor = response.get("response_metadata", {}).get("next_cursor")
                if not cursor:
                    break
        except SlackApiError as e:
            logger.error(f"API_ERROR: Failed to list workspace members: {e}")

        logger.info(f"DIRECTORY: Retrieved {len(members)} members")
        return members

    def is_bot_in_channel(self, channel_name: str) -> bool:
        """Check that the bot is a member of the channel with the given name."""
        cursor = None
        wanted = channel_name.lstrip("#")
        try:
            while True:
                kwargs = {"types": "public_channel,private_channel", "limit": 200}
                if cursor:
                    kwargs["cursor"] = cursor
                response = self.app.client.conversations_list(**kwargs)
                for channel in response.get("channels", []):
                    if channel.get("name") == wanted:
                        return bool(channel.get("is_member"))

                cursor = response.get("response_metadata", {}).get("next_cursor")
                if not cursor:
                    return False
        except SlackApiError as e:
            logger.error(f"API_ERROR: Failed to look up channel {channel_name}: {e}")
            return False
