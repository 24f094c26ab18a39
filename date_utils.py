"""Date helpers shared by the stores and the statistics engine.

All dates travel through the core as ISO ``yyyy-MM-dd`` strings.
"""
import calendar
from datetime import date, datetime, timedelta
from typing import List, Tuple

DATE_FORMAT = "%Y-%m-%d"
DISPLAY_FORMAT = "%d.%m.%Y"


def today_string() -> str:
    """Today's local date as an ISO string."""
    return date.today().isoformat()


def parse_date(date_str: str) -> date:
    return datetime.strptime(date_str, DATE_FORMAT).date()


def is_valid_date(date_str: str) -> bool:
    try:
        return parse_date(date_str).isoformat() == date_str
    except (TypeError, ValueError):
        return False


def days_before(date_str: str, days: int) -> str:
    """The ISO date ``days`` calendar days before ``date_str``."""
    return (parse_date(date_str) - timedelta(days=days)).isoformat()


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_dates(year: int, month: int) -> List[str]:
    """Every date of the month (1-12), first to last."""
    return [date(year, month, day).isoformat()
            for day in range(1, days_in_month(year, month) + 1)]


def current_month() -> Tuple[int, int]:
    today = date.today()
    return today.year, today.month


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def next_month(year: int, month: int) -> Tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def format_for_display(date_str: str) -> str:
    """Render ``2025-03-07`` as ``07.03.2025``; unparseable input is returned as-is."""
    try:
        return parse_date(date_str).strftime(DISPLAY_FORMAT)
    except (TypeError, ValueError):
        return date_str
