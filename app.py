"""
Birthder - Slack Birthday and Work Anniversary Bot

Main application entry point that initializes the Slack Bolt app, the roster and
celebration state stores, the notification service and background scheduling.

Features: daily congratulations with Tenor images, advance reminders, temporary
birthday channels, pitching-in surveys, work anniversaries, chat commands.
Uses Slack Bolt, Tenor API and APScheduler.
"""

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

# Import configuration
from config import (
    BIRTHDAY_LOGGING_CHANNEL,
    RETRY_DELAYS,
    RETRY_LIMITS,
    RUN_ON_STARTUP,
    TENOR_API_KEY,
    TENOR_BLACKLIST,
    TENOR_IMG_LIMIT,
    TENOR_SEARCH_TERM,
    logger,
)

# Import services
from integrations.tenor import TenorImageProvider
from messaging.slack import SlackDirectory, SlackNotifier
from services.reminders import ReminderService
from services.scheduler import run_now, setup_scheduler
from storage.celebration_state import CelebrationStateStore
from storage.roster import RosterStore
from utils.retry import RetryPolicy

# Import event handlers
from handlers.event_handler import register_event_handlers, sync_roster_from_directory


def check_startup_requirements(directory) -> list:
    """
    Check what the bot needs before it can run its features

    Returns:
        List of problem descriptions, empty when everything is in place
    """
    problems = []
    if not TENOR_API_KEY:
        problems.append("TENOR_API_KEY is not set")
    if not directory.is_bot_in_channel(BIRTHDAY_LOGGING_CHANNEL):
        problems.append(
            f"The bot is not a member of the logging channel #{BIRTHDAY_LOGGING_CHANNEL}"
        )
    return problems


def build_reminder_service(app, roster, directory) -> ReminderService:
    image_provider = TenorImageProvider(
        api_key=TENOR_API_KEY,
        search_terms=TENOR_SEARCH_TERM,
        limit=TENOR_IMG_LIMIT,
        blacklist=TENOR_BLACKLIST,
        policy=RetryPolicy(
            max_attempts=RETRY_LIMITS["http_request"], delay=RETRY_DELAYS["http_request"]
        ),
    )
    return ReminderService(
        roster=roster,
        notifier=SlackNotifier(app),
        directory=directory,
        image_provider=image_provider,
        state=CelebrationStateStore(),
    )


# Initialize Slack app
app = App()
logger.info("INIT: App initialized")

# Start the app
if __name__ == "__main__":
    handler = SocketModeHandler(app)
    logger.info("INIT: Handler initialized, starting app")
    try:
        directory = SlackDirectory(app)
        problems = check_startup_requirements(directory)
        if problems:
            logger.error(
                "INIT_ERROR: Features disabled, fix the following and restart: "
                + "; ".join(problems)
            )
        else:
            roster = RosterStore()
            sync_roster_from_directory(roster, directory)

            reminders = build_reminder_service(app, roster, directory)
            register_event_handlers(app, roster, directory, reminders)

            # Set up the scheduler with the notification entry points
            setup_scheduler(reminders)

            # Catch up on today's notifications when asked to
            if RUN_ON_STARTUP:
                run_now(reminders)

        # Start the app
        handler.start()
    except Exception as e:
        logger.critical(f"CRITICAL: Error starting app: {e}")
