# habit_stats.py
from dataclasses import dataclass
from typing import Callable, Iterable, Tuple

from date_utils import days_before, today_string
from day_status import DayStatus, DayStatusStore

STREAK_HORIZON_DAYS = 365


@dataclass(frozen=True)
class MonthStats:
    year: int
    month: int
    total_days: int
    success_days: int
    failure_days: int
    unmarked_days: int
    success_rate: int  # percent of marked days that are successes


@dataclass(frozen=True)
class HabitStats:
    habit_id: str
    total_marked_days: int
    success_days: int
    failure_days: int
    success_rate: int
    current_streak: int


def _tally(statuses: Iterable[DayStatus]) -> Tuple[int, int]:
    success = failure = 0
    for status in statuses:
        if status is DayStatus.SUCCESS:
            success += 1
        elif status is DayStatus.FAILURE:
            failure += 1
    return success, failure


def success_rate(success_days: int, failure_days: int) -> int:
    """Whole percent of marked days that were successes, rounded down; 0 with nothing marked."""
    marked = success_days + failure_days
    if marked == 0:
        return 0
    return success_days * 100 // marked


class StatsEngine:
    """Streaks and success statistics computed from a DayStatusStore."""

    def __init__(self, day_store: DayStatusStore, clock: Callable[[], str] = today_string):
        self.day_store = day_store
        self.clock = clock

    def calculate_streak(self, habit_id: str) -> int:
        """
        Count successes walking back from today, at most 365 days.

        A failure ends the streak. An unmarked today means there is no streak
        yet; an unmarked day further back is skipped without ending it.
        """
        today = self.clock()
        streak = 0
        for offset in range(STREAK_HORIZON_DAYS):
            status = self.day_store.get_status(habit_id, days_before(today, offset))
            if status is DayStatus.SUCCESS:
                streak += 1
            elif status is DayStatus.FAILURE:
                break
            elif offset == 0:
                break
        return streak

    def get_month_stats(self, habit_id: str, year: int, month: int) -> MonthStats:
        statuses = self.day_store.get_statuses_in_month(habit_id, year, month)
        success, failure = _tally(statuses.values())
        return MonthStats(
            year=year,
            month=month,
            total_days=len(statuses),
            success_days=success,
            failure_days=failure,
            unmarked_days=len(statuses) - (success + failure),
            success_rate=success_rate(success, failure),
        )

    def get_habit_stats(self, habit_id: str) -> HabitStats:
        success, failure = _tally(self.day_store.get_all_statuses(habit_id).values())
        return HabitStats(
            habit_id=habit_id,
            total_marked_days=success + failure,
            success_days=success,
            failure_days=failure,
            success_rate=success_rate(success, failure),
            current_streak=self.calculate_streak(habit_id),
        )
