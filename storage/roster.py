"""
JSON-based roster storage for Birthder.

Keeps one record per Slack user with the raw date strings set through chat
commands. Records are kept in insertion order, which is the order reminders,
matches and same-day ties are reported in.

Storage format:
{
  "USER_ID": {
    "name": "slack-handle",
    "date_of_birth": "D.M.YYYY" or null,
    "date_of_fwd": "D.M.YYYY" or null,
    "created_at": "ISO timestamp",
    "updated_at": "ISO timestamp"
  }
}

Key class: RosterStore (list_users(), get_user(), get_user_by_name(),
find_users_by_fuzzy_name(), ensure_user(), save_user()).
"""

import json
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from filelock import FileLock

from config import ROSTER_JSON_FILE, TIMEOUTS, get_logger

logger = get_logger("roster")


@dataclass
class UserRecord:
    id: str
    name: str
    date_of_birth: Optional[str] = None
    date_of_fwd: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def mention(self) -> str:
        return f"@{self.name}"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "date_of_birth": self.date_of_birth,
            "date_of_fwd": self.date_of_fwd,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, user_id: str, data: dict) -> "UserRecord":
        return cls(
            id=user_id,
            name=data.get("name") or user_id,
            date_of_birth=data.get("date_of_birth"),
            date_of_fwd=data.get("date_of_fwd"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


class RosterStore:
    """
    Roster of known users backed by a JSON file.

    Passing path=None keeps the roster in memory only (used by tests and dry runs).
    """

    def __init__(self, path: Optional[str] = ROSTER_JSON_FILE):
        self.path = path
        self._users: Dict[str, UserRecord] = {}
        self._thread_lock = threading.Lock()
        self._file_lock = FileLock(path + ".lock", timeout=TIMEOUTS["file_lock"]) if path else None
        if path:
            self._load()

    def _load(self):
        try:
            with self._file_lock:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
        except FileNotFoundError:
            logger.info(f"STORAGE: {self.path} not found, starting with an empty roster")
            return
        except json.JSONDecodeError as e:
            logger.error(f"JSON_ERROR: Failed to parse roster JSON: {e}")
            return

        self._users = {
            user_id: UserRecord.from_dict(user_id, record) for user_id, record in data.items()
        }
        logger.info(f"STORAGE: Loaded {len(self._users)} users from {self.path}")

    def _persist(self):
        if not self.path:
            return
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        data = {user_id: user.to_dict() for user_id, user in self._users.items()}
        try:
            with self._file_lock:
                with open(self.path, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"STORAGE_ERROR: Cannot write to {self.path}: {e}")

    def list_users(self) -> List[UserRecord]:
        return list(self._users.values())

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self._users.get(user_id)

    def get_user_by_name(self, name: str) -> Optional[UserRecord]:
        lowered = name.lower()
        for user in self._users.values():
            if user.name.lower() == lowered:
                return user
        return None

    def find_users_by_fuzzy_name(self, name: str) -> List[UserRecord]:
        """
        Find users whose name starts with the given text, ignoring case

        An exact (case-insensitive) match wins outright, so "alex" does not become
        ambiguous because "alexandra" also exists.

        Args:
            name: Name or name prefix, with or without a leading @

        Returns:
            List of matching users in roster order
        """
        lowered = name.strip().lstrip("@").lower()
        if not lowered:
            return []
        matches = [user for user in self._users.values() if user.name.lower().startswith(lowered)]
        exact = [user for user in matches if user.name.lower() == lowered]
        return exact or matches

    def ensure_user(self, user_id: str, name: str) -> UserRecord:
        """Return the user's record, creating it (or refreshing the name) as needed."""
        with self._thread_lock:
            user = self._users.get(user_id)
            now = datetime.now(timezone.utc).isoformat()
            if user is None:
                user = UserRecord(id=user_id, name=name, created_at=now, updated_at=now)
                self._users[user_id] = user
                logger.info(f"ROSTER: Added {name} ({user_id})")
                self._persist()
            elif name and user.name != name:
                logger.info(f"ROSTER: Renamed {user.name} to {name} ({user_id})")
                user.name = name
                user.updated_at = now
                self._persist()
            return user

    def save_user(self, user: UserRecord):
        with self._thread_lock:
            user.updated_at = datetime.now(timezone.utc).isoformat()
            self._users[user.id] = user
            self._persist()
            logger.info(
                f"ROSTER: Saved {user.name} ({user.id}) "
                f"birth={user.date_of_birth} fwd={user.date_of_fwd}"
            )
