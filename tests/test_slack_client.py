"""
Tests for the Slack wrappers in messaging/slack.py

Verifies that SlackNotifier and SlackDirectory call the correct Slack SDK methods
with proper parameters and turn SlackApiError into False/None.
"""

from messaging.slack import SlackDirectory, SlackNotifier, slack_channel_name


class TestSlackChannelName:
    """Tests for slack_channel_name()"""

    def test_lowercases_and_replaces_invalid_characters(self):
        assert slack_channel_name("John.Smith-birthday-channel-15-06") == "john-smith-birthday-channel-15-06"

    def test_truncated_to_80(self):
        assert len(slack_channel_name("a" * 100)) == 80


class TestSlackNotifier:
    """Tests for message delivery and room management"""

    def test_send_direct(self, mock_slack_app):
        assert SlackNotifier(mock_slack_app).send_direct("U1", "hello") is True
        mock_slack_app.client.chat_postMessage.assert_called_once_with(channel="U1", text="hello")

    def test_send_failure_returns_false(self, mock_slack_app, slack_api_error):
        mock_slack_app.client.chat_postMessage.side_effect = slack_api_error("channel_not_found")
        assert SlackNotifier(mock_slack_app).send_to_room("general", "hi") is False

    def test_create_room_private_and_invites(self, mock_slack_app):
        room_id = SlackNotifier(mock_slack_app).create_room("Bob-birthday", ["U1", "U3"])

        assert room_id == "C0NEW"
        mock_slack_app.client.conversations_create.assert_called_once_with(
            name="bob-birthday", is_private=True
        )
        mock_slack_app.client.conversations_invite.assert_called_once_with(
            channel="C0NEW", users="U1,U3"
        )

    def test_create_room_failure(self, mock_slack_app, slack_api_error):
        mock_slack_app.client.conversations_create.side_effect = slack_api_error("name_taken")
        assert SlackNotifier(mock_slack_app).create_room("bob", ["U1"]) is None
        mock_slack_app.client.conversations_invite.assert_not_called()

    def test_delete_room_archives(self, mock_slack_app):
        assert SlackNotifier(mock_slack_app).delete_room("C0NEW") is True
        mock_slack_app.client.conversations_archive.assert_called_once_with(channel="C0NEW")


class TestSlackDirectory:
    """Tests for user lookups"""

    def test_admin_users_list_skips_api(self, mock_slack_app):
        directory = SlackDirectory(mock_slack_app, admin_users=["U123456"])
        assert directory.is_privileged_user("U123456") is True
        mock_slack_app.client.users_info.assert_not_called()

    def test_workspace_admin_privileged(self, mock_slack_app):
        mock_slack_app.client.users_info.return_value["user"]["is_admin"] = True
        assert SlackDirectory(mock_slack_app, admin_users=[]).is_privileged_user("U123456")

    def test_regular_user_not_privileged(self, mock_slack_app):
        assert not SlackDirectory(mock_slack_app, admin_users=[]).is_privileged_user("U123456")

    def test_lookup_error_denies_privilege(self, mock_slack_app, slack_api_error):
        mock_slack_app.client.users_info.side_effect = slack_api_error("user_not_found")
        assert not SlackDirectory(mock_slack_app, admin_users=[]).is_privileged_user("U999")

    def test_deleted_user_inactive(self, mock_slack_app):
        mock_slack_app.client.users_info.return_value["user"]["deleted"] = True
        directory = SlackDirectory(mock_slack_app, admin_users=[])
        assert directory.does_user_exist("U123456") is True
        assert directory.is_user_active("U123456") is False

    def test_get_user_failure_returns_none(self, mock_slack_app, slack_api_error):
        mock_slack_app.client.users_info.side_effect = slack_api_error("user_not_found")
        directory = SlackDirectory(mock_slack_app, admin_users=[])
        assert directory.get_user("U999") is None
        assert directory.is_active_profile(None) is False

    def test_list_members_paginates_and_filters(self, mock_slack_app):
        mock_slack_app.client.users_list.side_effect = [
            {
                "members": [
                    {"id": "U1", "name": "alice"},
                    {"id": "B1", "name": "somebot", "is_bot": True},
                ],
                "response_metadata": {"next_cursor": "page2"},
            },
            {
                "members": [
                    {"id": "USLACKBOT", "name": "slackbot"},
                    {"id": "U2", "name": "gone", "deleted": True},
                    {"id": "U3", "name": "carol"},
                ],
                "response_metadata": {"next_cursor": ""},
            },
        ]
        members = SlackDirectory(mock_slack_app, admin_users=[]).list_members()
        assert members == [("U1", "alice"), ("U3", "carol")]
        assert mock_slack_app.client.users_list.call_args_list[1].kwargs["cursor"] == "page2"

    def test_bot_in_channel(self, mock_slack_app):
        mock_slack_app.client.conversations_list.return_value = {
            "channels": [{"name": "general", "is_member": False}, {"name": "hr", "is_member": True}],
        }
        directory = SlackDirectory(mock_slack_app, admin_users=[])
        assert directory.is_bot_in_channel("#hr") is True
        assert directory.is_bot_in_channel("general") is False
        assert directory.is_bot_in_channel("random") is False
