"""
Side-table for transient per-birthday state.

When an advance reminder fires, the bot may open a temporary private channel and a
pitching-in survey for the birthday person. Both live here, keyed by the birthday
person's user ID, instead of on the roster record, and are dropped by the TTL sweep.

Storage format:
{
  "USER_ID": {
    "event_date": "YYYY-MM-DD",
    "birthday_channel": {"room_name": "...", "room_id": "..."} or null,
    "pitching_in": {"accepted": [...], "declined": [...], "closed": false,
                    "opened_on": "YYYY-MM-DD"} or null
  }
}
"""

import json
import os
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from filelock import FileLock

from config import CELEBRATION_STATE_FILE, TIMEOUTS, get_logger

logger = get_logger("celebration_state")


@dataclass
class BirthdayChannel:
    room_name: str
    room_id: Optional[str] = None


@dataclass
class PitchingInSurvey:
    accepted: List[str] = field(default_factory=list)
    declined: List[str] = field(default_factory=list)
    closed: bool = False
    opened_on: Optional[str] = None  # ISO date of the tick that opened the survey

    def record(self, user_id: str, accepted: bool):
        """Record a response; a later answer replaces an earlier one."""
        for bucket in (self.accepted, self.declined):
            if user_id in bucket:
                bucket.remove(user_id)
        (self.accepted if accepted else self.declined).append(user_id)


@dataclass
class CelebrationState:
    user_id: str
    event_date: date
    birthday_channel: Optional[BirthdayChannel] = None
    pitching_in: Optional[PitchingInSurvey] = None

    def to_dict(self) -> dict:
        return {
            "event_date": self.event_date.isoformat(),
            "birthday_channel": vars(self.birthday_channel) if self.birthday_channel else None,
            "pitching_in": vars(self.pitching_in) if self.pitching_in else None,
        }

    @classmethod
    def from_dict(cls, user_id: str, data: dict) -> "CelebrationState":
        channel = data.get("birthday_channel")
        survey = data.get("pitching_in")
        return cls(
            user_id=user_id,
            event_date=date.fromisoformat(data["event_date"]),
            birthday_channel=BirthdayChannel(**channel) if channel else None,
            pitching_in=PitchingInSurvey(**survey) if survey else None,
        )


class CelebrationStateStore:
    """Keyed store of CelebrationState; path=None keeps it in memory."""

    def __init__(self, path: Optional[str] = CELEBRATION_STATE_FILE):
        self.path = path
        self._states: Dict[str, CelebrationState] = {}
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
            return
        except json.JSONDecodeError as e:
            logger.error(f"JSON_ERROR: Failed to parse celebration state JSON: {e}")
            return

        for user_id, raw in data.items():
            try:
                self._states[user_id] = CelebrationState.from_dict(user_id, raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"STATE_ERROR: Dropping unreadable state for {user_id}: {e}")

    def _persist(self):
        if not self.path:
            return
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        data = {user_id: state.to_dict() for user_id, state in self._states.items()}
        try:
            with self._file_lock:
                with open(self.path, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"STORAGE_ERROR: Cannot write to {self.path}: {e}")

    def get(self, user_id: str) -> Optional[CelebrationState]:
        return self._states.get(user_id)

    def get_or_create(self, user_id: str, event_date: date) -> CelebrationState:
        with self._thread_lock:
            state = self._states.get(user_id)
            if state is None or state.event_date != event_date:
                state = CelebrationState(user_id=user_id, event_date=event_date)
                self._states[user_id] = state
            return state

    def save(self, state: CelebrationState):
        with self._thread_lock:
            self._states[state.user_id] = state
            self._persist()

    def remove(self, user_id: str) -> Optional[CelebrationState]:
        with self._thread_lock:
            state = self._states.pop(user_id, None)
            if state is not None:
                self._persist()
                logger.info(f"STATE: Removed celebration state for {user_id}")
            return state

    def all(self) -> List[CelebrationState]:
        return list(self._states.values())
