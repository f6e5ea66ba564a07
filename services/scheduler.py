"""
Background scheduling of the notification cycle.

Registers the congratulation and reminder entry points of a ReminderService as cron
jobs on an APScheduler BackgroundScheduler. Cron expressions come from configuration
and may have 5 fields (minute first) or 6 fields (seconds first, as in
"0 0 7 * * *").

Key functions: build_cron_trigger(), setup_scheduler(), run_now().
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from config import (
    BIRTHDAY_CRON_STRING,
    HAPPY_REMINDER_SCHEDULER,
    SCHEDULER_TIMEZONE,
    get_logger,
)

logger = get_logger("scheduler")

CRON_FIELDS_WITH_SECONDS = ("second", "minute", "hour", "day", "month", "day_of_week")

_scheduler = None


def build_cron_trigger(expression: str, timezone=SCHEDULER_TIMEZONE) -> CronTrigger:
    """
    Build a CronTrigger from a 5- or 6-field cron expression

    Raises:
        ValueError: if the expression has the wrong number of fields or invalid values
    """
    fields = expression.split()
    if len(fields) == 5:
        return CronTrigger.from_crontab(expression, timezone=timezone)
    if len(fields) == 6:
        return CronTrigger(timezone=timezone, **dict(zip(CRON_FIELDS_WITH_SECONDS, fields)))
    raise ValueError(f"Cron expression must have 5 or 6 fields, got {len(fields)}: '{expression}'")


def setup_scheduler(
    reminders,
    congratulation_cron: str = BIRTHDAY_CRON_STRING,
    reminder_cron: str = HAPPY_REMINDER_SCHEDULER,
    scheduler: BackgroundScheduler = None,
):
    """
    Register the cron jobs and start the background scheduler

    An empty cron string disables that job; an invalid one is logged and skipped.

    Args:
        reminders: ReminderService whose entry points are scheduled
        congratulation_cron: When to post congratulations
        reminder_cron: When to send reminders, sweep channels and nudge users
        scheduler: Injected for tests; a BackgroundScheduler is created otherwise

    Returns:
        The started scheduler
    """
    global _scheduler

    if _scheduler is not None and scheduler is None:
        logger.info("SCHEDULER: Already running, skipping initialization")
        return _scheduler

    scheduler = scheduler or BackgroundScheduler(timezone=SCHEDULER_TIMEZONE)

    jobs = (
        ("congratulations", congratulation_cron, reminders.run_congratulations),
        ("reminders", reminder_cron, reminders.run_reminders),
    )
    for job_id, expression, func in jobs:
        if not expression:
            logger.info(f"SCHEDULER: No cron expression for {job_id}, job disabled")
            continue
        try:
            trigger = build_cron_trigger(expression)
        except ValueError as e:
            logger.error(f"SCHEDULER_ERROR: Invalid cron expression for {job_id}: {e}")
            continue

        scheduler.add_job(
            func,
            trigger=trigger,
            id=job_id,
            replace_existing=True,
            max_instances=1,  # Ticks never overlap
            coalesce=True,
        )
        logger.info(f"SCHEDULER: Scheduled {job_id} with '{expression}'")

    scheduler.start()
    _scheduler = scheduler
    logger.info("SCHEDULER: Background scheduler started")
    return scheduler


def run_now(reminders):
    """Run a full notification cycle immediately (manual trigger)."""
    logger.info("SCHEDULER: Running notification cycle on demand")
    reminders.run_cycle()
