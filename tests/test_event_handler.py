"""
Tests for Slack event processing in handlers/event_handler.py
"""

from unittest.mock import MagicMock

from handlers.event_handler import (
    handle_message_event,
    register_first_time_sender,
    strip_bot_mention,
    sync_roster_from_directory,
)
from messaging.slack import SlackDirectory
from storage.roster import RosterStore


class TestStripBotMention:
    def test_leading_bot_mention_removed(self):
        assert strip_bot_mention("<@UBOT> birthdays list", "UBOT") == "birthdays list"

    def test_other_mention_kept(self):
        assert strip_bot_mention("<@U001> hi", "UBOT") == "<@U001> hi"


class TestHandleMessageEvent:
    """Tests for handle_message_event()"""

    def test_command_answered(self, roster, directory):
        say = MagicMock()
        event = {"user": "U001", "text": "<@UBOT> birthdays on 15.6.2000", "channel_type": "channel"}

        result = handle_message_event(event, say, roster, directory, MagicMock(), bot_user_id="UBOT")

        assert result.text == "@bob"
        say.assert_called_once_with("@bob")
        directory.is_privileged_user.assert_called_once_with("U001")

    def test_bot_messages_ignored(self, roster, directory):
        say = MagicMock()
        event = {"user": "U001", "bot_id": "B1", "text": "birthdays list"}
        assert handle_message_event(event, say, roster, directory, MagicMock()) is None
        say.assert_not_called()

    def test_direct_message_date(self, roster, directory):
        say = MagicMock()
        event = {"user": "U003", "text": "24.12.1991", "channel_type": "im"}
        handle_message_event(event, say, roster, directory, MagicMock())
        assert roster.get_user("U003").date_of_birth == "24.12.1991"

    def test_chatter_ignored(self, roster, directory):
        say = MagicMock()
        event = {"user": "U001", "text": "good morning", "channel_type": "channel"}
        assert handle_message_event(event, say, roster, directory, MagicMock()) is None
        say.assert_not_called()


class TestRegisterFirstTimeSender:
    """Tests for register_first_time_sender()"""

    def test_new_sender_added_with_one_lookup(self, mock_slack_app):
        roster = RosterStore(path=None)
        directory = SlackDirectory(mock_slack_app, admin_users=[])

        user = register_first_time_sender("U123456", roster, directory)

        assert user.name == "testuser"
        mock_slack_app.client.users_info.assert_called_once_with(user="U123456")

    def test_known_sender_not_looked_up(self, mock_slack_app, roster):
        directory = SlackDirectory(mock_slack_app, admin_users=[])
        assert register_first_time_sender("U001", roster, directory) is None
        mock_slack_app.client.users_info.assert_not_called()

    def test_bot_sender_not_added(self, mock_slack_app):
        mock_slack_app.client.users_info.return_value["user"]["is_bot"] = True
        roster = RosterStore(path=None)
        directory = SlackDirectory(mock_slack_app, admin_users=[])
        assert register_first_time_sender("U123456", roster, directory) is None
        assert roster.list_users() == []

    def test_lookup_failure_ignored(self, mock_slack_app, slack_api_error):
        mock_slack_app.client.users_info.side_effect = slack_api_error("user_not_found")
        roster = RosterStore(path=None)
        directory = SlackDirectory(mock_slack_app, admin_users=[])
        assert register_first_time_sender("U999", roster, directory) is None


class TestSyncRoster:
    def test_members_added(self, directory):
        roster = RosterStore(path=None)
        directory.list_members.return_value = [("U1", "alice"), ("U2", "bob")]
        assert sync_roster_from_directory(roster, directory) == 2
        assert [user.name for user in roster.list_users()] == ["alice", "bob"]
