"""
Centralized timezone management for the plant clock.
All datetime operations should use this module for consistency.
"""

from datetime import datetime, timezone as dt_timezone
from zoneinfo import ZoneInfo

from dyeplan.core.setting import config

# Plant timezone, Asia/Kolkata (IST) unless PLANT_TIMEZONE says otherwise
PLANT_TZ = ZoneInfo(config.PLANT_TIMEZONE)


def get_plant_now(tz: ZoneInfo = PLANT_TZ) -> datetime:
    """
    Get current datetime in the plant timezone.

    Returns:
        datetime: Current time (timezone-aware)

    Example:
        >>> now = get_plant_now()
        >>> print(now.tzinfo)
        Asia/Kolkata
    """
    return datetime.now(tz=tz)


def get_utc_now() -> datetime:
    """Get current datetime in UTC (timezone-aware)."""
    return datetime.now(tz=dt_timezone.utc)


def get_plant_today(tz: ZoneInfo = PLANT_TZ) -> str:
    """Today's date in the plant timezone as YYYY-MM-DD."""
    return get_plant_now(tz).strftime("%Y-%m-%d")


def make_plant_aware(dt: datetime, tz: ZoneInfo = PLANT_TZ) -> datetime:
    """
    Convert a naive datetime to a plant-timezone-aware one.

    Args:
        dt: Naive datetime object

    Returns:
        datetime: Timezone-aware datetime (unchanged if already aware)

    Example:
        >>> naive_dt = datetime(2026, 1, 23, 10, 30, 0)
        >>> aware_dt = make_plant_aware(naive_dt)
        >>> print(aware_dt.tzinfo)
        Asia/Kolkata
    """
    if dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=tz)
