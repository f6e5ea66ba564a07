"""
Birthder Configuration Package

Re-exports all settings so callers can write: from config import DATE_FORMAT, get_logger, ...

Modules:
    config.settings - Environment-driven settings, feature flags, logging bootstrap
    config.messages - User-facing reply strings and quote pools
"""

from config.settings import *  # noqa: F401, F403
from config.messages import *  # noqa: F401, F403
