"""
Timezone utilities for consistent time handling across the application
"""
import logging
from datetime import datetime
from dateutil.relativedelta import relativedelta
import pytz
from flask import current_app

logger = logging.getLogger(__name__)


def get_local_timezone():
    """Configured business timezone, falling back to UTC on a bad name"""
    timezone_name = current_app.config.get('TIMEZONE', 'Asia/Jakarta')
    try:
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone '{timezone_name}', using UTC")
        return pytz.UTC


def get_local_time():
    """
    Get current time in the configured timezone
    Returns naive datetime for database compatibility
    """
    utc_time = datetime.now(pytz.UTC)
    return utc_time.astimezone(get_local_timezone()).replace(tzinfo=None)


def get_local_date():
    """Today's date in the configured timezone"""
    return get_local_time().date()


def month_bounds(month, year):
    """
    Return the naive [start, end) datetimes covering a calendar month.

    Meeting dates are stored as naive local times, so the bounds are too.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    start = datetime(year, month, 1)
    return start, start + relativedelta(months=1)
