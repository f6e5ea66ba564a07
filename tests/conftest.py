"""
Shared pytest fixtures for Birthder tests.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest
from slack_sdk.errors import SlackApiError

from storage.roster import RosterStore, UserRecord


@pytest.fixture
def reference_date():
    """Fixed reference date for deterministic testing: March 1, 2023"""
    return date(2023, 3, 1)


@pytest.fixture
def make_user():
    """Factory for roster records"""

    def _make_user(user_id, name, date_of_birth=None, date_of_fwd=None):
        return UserRecord(id=user_id, name=name, date_of_birth=date_of_birth, date_of_fwd=date_of_fwd)

    return _make_user


@pytest.fixture
def roster():
    """In-memory roster with a birthday on 1 March and one on 15 June"""
    store = RosterStore(path=None)
    alice = store.ensure_user("U001", "alice")
    alice.date_of_birth = "1.3.2000"
    store.save_user(alice)
    bob = store.ensure_user("U002", "bob")
    bob.date_of_birth = "15.6.1995"
    store.save_user(bob)
    store.ensure_user("U003", "carol")
    return store


@pytest.fixture
def notifier():
    """Notifier double that accepts every message"""
    mock = MagicMock()
    mock.send_direct.return_value = True
    mock.send_to_room.return_value = True
    mock.create_room.return_value = "C0ROOM"
    mock.delete_room.return_value = True
    return mock


@pytest.fixture
def directory():
    """Directory double where everybody exists and is active"""
    mock = MagicMock()
    mock.is_user_active.return_value = True
    mock.does_user_exist.return_value = True
    mock.is_privileged_user.return_value = True
    return mock


@pytest.fixture
def mock_slack_app():
    """Mock Slack Bolt app with common API responses"""
    app = MagicMock()
    app.client.chat_postMessage.return_value = {"ok": True, "ts": "1234567890.123456"}
    app.client.users_info.return_value = {
        "ok": True,
        "user": {
            "id": "U123456",
            "name": "testuser",
            "is_admin": False,
            "is_owner": False,
            "is_bot": False,
            "deleted": False,
        },
    }
    app.client.conversations_create.return_value = {"ok": True, "channel": {"id": "C0NEW"}}
    return app


@pytest.fixture
def slack_api_error():
    """Factory for SlackApiError exceptions"""

    def _make_error(error_code="unknown_error"):
        return SlackApiError(message=error_code, response={"ok": False, "error": error_code})

    return _make_error
