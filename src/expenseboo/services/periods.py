"""Budget period resolution.

A budget period starts on the configured reset day (pay day or monthly reset
date) and runs until the next one. When the reset day does not exist in a
month (31 in April, 30 in February) the period starts on that month's last
day instead. The clamp is applied to the month being tested as well as to the
previous month, which keeps ``period_start`` idempotent.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import datetime

from ..logging_config import get_logger
from ..models.settings import Settings

logger = get_logger(__name__)

PERIOD_KEY_FORMAT = "%Y-%m"
PERIOD_DISPLAY_FORMAT = "%B %Y"


def _previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def _next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def _reset_point(year: int, month: int, reset_day: int, *, like: datetime) -> datetime:
    """Midnight of ``reset_day`` in the given month, clamped to the month length."""

    day = min(reset_day, monthrange(year, month)[1])
    return datetime(year, month, day, tzinfo=like.tzinfo)


def period_start(moment: datetime, settings: Settings) -> datetime:
    """Return the start of the budget period containing ``moment``.

    Falls back to ``moment`` itself when the settings cannot produce a valid
    calendar date.
    """

    reset_day = settings.reset_day
    try:
        current = _reset_point(moment.year, moment.month, reset_day, like=moment)
        if moment.day >= current.day:
            return current
        year, month = _previous_month(moment.year, moment.month)
        return _reset_point(year, month, reset_day, like=moment)
    except (ValueError, OverflowError, TypeError):
        logger.warning(
            "Could not resolve period start; using the raw date",
            extra={"moment": moment, "reset_day": reset_day},
        )
        return moment


def period_label(moment: datetime, settings: Settings) -> str:
    """Sortable ``YYYY-MM`` label of the period containing ``moment``."""

    return period_start(moment, settings).strftime(PERIOD_KEY_FORMAT)


def period_display_label(moment: datetime, settings: Settings) -> str:
    """``Month YYYY`` label used when grouping records for display."""

    return period_start(moment, settings).strftime(PERIOD_DISPLAY_FORMAT)


def current_period_window(now: datetime, settings: Settings) -> tuple[datetime, datetime]:
    """Inclusive ``[period_start(now), now]`` window for "current" views."""

    return period_start(now, settings), now


def calendar_month_key(moment: datetime) -> str:
    """Calendar ``YYYY-MM`` key, independent of the reset policy."""

    return moment.strftime(PERIOD_KEY_FORMAT)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """Return ``[start, end)`` datetimes covering a calendar month."""

    start = datetime(year, month, 1)
    next_year, next_month = _next_month(year, month)
    return start, datetime(next_year, next_month, 1)


def in_window(moment: datetime, start: datetime, end: datetime) -> bool:
    """Inclusive on both ends."""

    return start <= moment <= end
