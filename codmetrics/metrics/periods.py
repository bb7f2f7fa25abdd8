"""
Reporting Periods

Named date-range presets used by the dashboard period selector, and
period-over-period comparison helpers.
"""

from datetime import date, timedelta
from typing import Literal, Optional, get_args

from codmetrics.metrics.types import DateRange, Number, Trend

Period = Literal["today", "yesterday", "last7days", "last30days", "thisMonth", "lastMonth"]

PERIODS = get_args(Period)
DEFAULT_PERIOD = "last30days"


def resolve_period(period: str, today: Optional[date] = None) -> DateRange:
    """
    Resolve a named period to an inclusive date range.

    Unknown names resolve to the last 30 days.
    """
    today = today or date.today()

    if period == "today":
        return DateRange(date_from=today, date_to=today)
    if period == "yesterday":
        yesterday = today - timedelta(days=1)
        return DateRange(date_from=yesterday, date_to=yesterday)
    if period == "last7days":
        return DateRange(date_from=today - timedelta(days=6), date_to=today)
    if period == "thisMonth":
        return DateRange(date_from=today.replace(day=1), date_to=today)
    if period == "lastMonth":
        last_of_previous = today.replace(day=1) - timedelta(days=1)
        return DateRange(date_from=last_of_previous.replace(day=1), date_to=last_of_previous)
    return DateRange(date_from=today - timedelta(days=29), date_to=today)


def previous_period(date_from: date, date_to: date) -> DateRange:
    """
    The range of the same length ending the day before date_from.

    Raises:
        ValueError: When that range would start before date.min
    """
    length = (date_to - date_from).days + 1
    try:
        prev_to = date_from - timedelta(days=1)
        prev_from = prev_to - timedelta(days=length - 1)
    except OverflowError:
        raise ValueError("Previous period starts before the earliest supported date")
    return DateRange(date_from=prev_from, date_to=prev_to)


def calculate_trend(current: Number, previous: Number) -> Trend:
    """Percent change from previous to current."""
    current = float(current)
    previous = float(previous)

    if previous > 0:
        percent_change = (current - previous) / previous * 100
    elif current > 0:
        percent_change = 100.0
    else:
        percent_change = 0.0

    if percent_change > 0:
        direction = "up"
    elif percent_change < 0:
        direction = "down"
    else:
        direction = "neutral"

    return Trend(
        current=current,
        previous=previous,
        percent_change=percent_change,
        direction=direction,
    )
