"""
Birthder Configuration - Core Settings and Constants

Centralized configuration loaded from environment variables (and an optional .env file
in the project root): Tenor image search, cron schedules, advance-notice window,
temporary birthday channels, pitching-in surveys and date formats.

Key modules: utils/log_setup.py
"""

import os

from dotenv import load_dotenv

# Project root is one level up from the config/ package directory
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


def _env_bool(name, default="false"):
    return os.getenv(name, default).strip().lower() == "true"


def _env_int(name, default):
    value = os.getenv(name)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _env_list(name, default="", separator=","):
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(separator) if item.strip()]


# ----- FILE STRUCTURE CONFIGURATION -----

DATA_DIR = os.getenv("BIRTHDER_DATA_DIR", "data")
LOGS_DIR = os.path.join(DATA_DIR, "logs")
STORAGE_DIR = os.path.join(DATA_DIR, "storage")

ROSTER_JSON_FILE = os.path.join(STORAGE_DIR, "roster.json")
CELEBRATION_STATE_FILE = os.path.join(STORAGE_DIR, "celebration_state.json")

# ----- SLACK -----

# Rooms are addressed by name, as in chat.postMessage(channel="general")
BIRTHDAY_ANNOUNCEMENT_CHANNEL = os.getenv("BIRTHDAY_ANNOUNCEMENT_CHANNEL", "general")
BIRTHDAY_LOGGING_CHANNEL = os.getenv("BIRTHDAY_LOGGING_CHANNEL", "hr")

# Slack user IDs with privileges on top of workspace admins/owners
ADMIN_USERS = _env_list("ADMIN_USERS")

COMPANY_NAME = os.getenv("COMPANY_NAME", "WIS Software")

# ----- TENOR IMAGE SEARCH -----

TENOR_API_KEY = os.getenv("TENOR_API_KEY", "")
TENOR_API_URL = "https://api.tenor.com/v1"
TENOR_IMG_LIMIT = _env_int("TENOR_IMG_LIMIT", 50)
TENOR_SEARCH_TERM = _env_list(
    "TENOR_SEARCH_TERM",
    "darthvaderbirthday,futuramabirthday,gameofthronesbirthday,harrypotterbirthday,"
    "kingofthehillbirthday,lanadelreybirthday,madhatterbirthday,pulpfictionbirthday,"
    "rickandmortybirthday,rocketbirthday,sheldonbirthday,simpsonbirthday,"
    "thesimpsonsbirthday,tmntbirthday",
)
TENOR_BLACKLIST = _env_list("TENOR_BLACKLIST", "641ee5344bdc3f9f4d3ef52344dfe6bd")

# ----- SCHEDULING -----

# Cron expressions; both 5-field and 6-field (seconds first) forms are accepted
BIRTHDAY_CRON_STRING = os.getenv("BIRTHDAY_CRON_STRING", "0 0 7 * * *")
HAPPY_REMINDER_SCHEDULER = os.getenv("HAPPY_REMINDER_SCHEDULER", "0 0 7 * * *")
SCHEDULER_TIMEZONE = os.getenv("SCHEDULER_TIMEZONE") or None

# Run a full notification cycle right after startup
RUN_ON_STARTUP = _env_bool("RUN_ON_STARTUP")

# Time and measure of it to announce birthdays in advance. For example, 7 days.
NUMBER_OF_DAYS_IN_ADVANCE = _env_int("NUMBER_OF_DAYS_IN_ADVANCE", 7)
BIRTHDAY_ANNOUNCEMENT_BEFORE_MODE = os.getenv("BIRTHDAY_ANNOUNCEMENT_BEFORE_MODE", "days")
SUPPORTED_TIME_UNITS = ("days", "weeks")

# ----- TEMPORARY BIRTHDAY CHANNELS AND SURVEYS -----

CREATE_BIRTHDAY_CHANNELS = _env_bool("CREATE_BIRTHDAY_CHANNELS")
CREATE_PITCHING_IN_SURVEYS = _env_bool("CREATE_PITCHING_IN_SURVEYS")
BIRTHDAY_CHANNEL_MESSAGE = _env_list(
    "BIRTHDAY_CHANNEL_MESSAGE",
    "@%username% is having a birthday soon, so let's discuss a present.",
    separator="|",
)
BIRTHDAY_CHANNEL_BLACKLIST = _env_list("BIRTHDAY_CHANNEL_BLACKLIST")
BIRTHDAY_CHANNEL_TTL = _env_int("BIRTHDAY_CHANNEL_TTL", 3)

# ----- DATE FORMATS -----

# Input format: "DD.MM.YYYY" or "D.M.YYYY"
DATE_FORMAT = "%d.%m.%Y"
# Output formats
OUTPUT_SHORT_DATE_FORMAT = "%d.%m"
OUTPUT_DATE_FORMAT = "%d.%m.%Y"

# ----- RETRY AND TIMEOUTS -----

RETRY_LIMITS = {
    "http_request": 60,  # Attempts per Tenor HTTP request
    "image_selection": 5,  # Searches before giving up on a usable image
}

RETRY_DELAYS = {
    "http_request": 1.0,  # Seconds between HTTP attempts
}

TIMEOUTS = {
    "http_request": 30,
    "file_lock": 10,
}

# ----- LOGGING -----

# Import and initialize the logging system early so every module can log at import time
from utils.log_setup import setup_logging  # noqa: E402

setup_logging(LOGS_DIR)

from utils.log_setup import get_logger  # noqa: E402, F401

logger = get_logger("main")

if BIRTHDAY_ANNOUNCEMENT_BEFORE_MODE not in SUPPORTED_TIME_UNITS:
    logger.warning(
        f"CONFIG: Unsupported BIRTHDAY_ANNOUNCEMENT_BEFORE_MODE "
        f"'{BIRTHDAY_ANNOUNCEMENT_BEFORE_MODE}', falling back to 'days'"
    )
    BIRTHDAY_ANNOUNCEMENT_BEFORE_MODE = "days"
