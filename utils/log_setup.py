"""
Multi-component logging configuration for Birthder.

Sets up component-specific log files with automatic rotation so that scheduled
notification cycles, chat commands, Slack API calls and storage operations can be
followed separately.

Key functions: setup_logging(), get_logger().
"""

import os
import logging
import logging.handlers

LOG_FILE_NAMES = {
    "main": "main.log",  # Startup and configuration
    "commands": "commands.log",  # Chat commands and their outcomes
    "events": "events.log",  # Slack events
    "reminders": "reminders.log",  # Notification cycle
    "slack": "slack.log",  # Slack API interactions
    "images": "images.log",  # Tenor image provider
    "storage": "storage.log",  # Roster and celebration state
    "system": "system.log",  # Everything else
    "scheduler": "scheduler.log",  # Cron jobs
}

# Component to log file mapping
COMPONENT_LOG_MAPPING = {
    "main": "main",
    "config": "main",
    "app": "main",
    "commands": "commands",
    "dispatcher": "commands",
    "events": "events",
    "event_handler": "events",
    "reminders": "reminders",
    "date_events": "reminders",
    "slack": "slack",
    "tenor": "images",
    "retry": "images",
    "storage": "storage",
    "roster": "storage",
    "celebration_state": "storage",
    "date": "system",
    "scheduler": "scheduler",
}

log_handlers = {}
_logging_initialized = False


def setup_logging(logs_dir):
    """
    Set up the logging system with component-specific file routing

    Args:
        logs_dir: Directory where log files should be stored
    """
    global _logging_initialized

    if _logging_initialized:
        return

    os.makedirs(logs_dir, exist_ok=True)

    log_formatter = logging.Formatter(
        "%(asctime)s - [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    for log_type, log_file in LOG_FILE_NAMES.items():
        full_log_path = os.path.join(logs_dir, log_file)
        handler = logging.handlers.RotatingFileHandler(
            full_log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB per file
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(log_formatter)
        log_handlers[log_type] = handler

    root_logger = logging.getLogger("birthder")
    root_logger.setLevel(logging.INFO)

    _logging_initialized = True


def get_logger(name):
    """
    Get a logger routed to the log file of its component.

    Args:
        name: Logger name/component (e.g., 'commands', 'slack', 'reminders')

    Returns:
        Configured logger instance
    """
    if not _logging_initialized:
        raise RuntimeError("Logging system not initialized. Call setup_logging() first.")

    if not name.startswith("birthder."):
        full_name = f"birthder.{name}"
    else:
        full_name = name
        name = name.replace("birthder.", "")

    logger = logging.getLogger(full_name)

    if logger.hasHandlers():
        return logger

    log_type = COMPONENT_LOG_MAPPING.get(name, "system")

    if log_type in log_handlers:
        logger.addHandler(log_handlers[log_type])
        logger.setLevel(logging.INFO)
        logger.propagate = False

    return logger
