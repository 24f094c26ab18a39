# day_status.py
import logging
import re
from enum import Enum
from typing import Dict, List, Optional

from date_utils import month_dates

logger = logging.getLogger(__name__)

STATUS_KEY = re.compile(r"^(?P<habit_id>.+)_(?P<date>\d{4}-\d{2}-\d{2})_success$")


class DayStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    UNMARKED = "unmarked"

    @classmethod
    def from_stored(cls, value: Optional[bool]) -> "DayStatus":
        if value is True:
            return cls.SUCCESS
        if value is False:
            return cls.FAILURE
        return cls.UNMARKED

    @property
    def is_marked(self) -> bool:
        return self is not DayStatus.UNMARKED


def status_key(habit_id: str, date: str) -> str:
    return f"{habit_id}_{date}_success"


class DayStatusStore:
    """Tri-state outcome per (habit id, date), kept in a key-value store.

    Only success and failure are stored; an absent key is the unmarked state.
    Dates are opaque ISO ``yyyy-MM-dd`` strings supplied by the caller.
    """

    def __init__(self, storage):
        self.storage = storage

    def set_status(self, habit_id: str, date: str, success: bool):
        """Mark a day as success (True) or failure (False), overwriting any prior value."""
        self.storage.put(status_key(habit_id, date), bool(success))

    def get_status(self, habit_id: str, date: str) -> DayStatus:
        return DayStatus.from_stored(self.storage.get(status_key(habit_id, date)))

    def remove_status(self, habit_id: str, date: str):
        """Unmark a day. Unmarking an unmarked day does nothing."""
        self.storage.remove(status_key(habit_id, date))

    def _status_keys(self, habit_id: Optional[str] = None) -> List[str]:
        matched = []
        for key in self.storage.keys():
            m = STATUS_KEY.match(key)
            if m and (habit_id is None or m.group("habit_id") == habit_id):
                matched.append(key)
        return matched

    def get_all_statuses(self, habit_id: str) -> Dict[str, DayStatus]:
        """Every explicitly marked date for the habit, oldest first."""
        statuses = {}
        for key in self._status_keys(habit_id):
            value = self.storage.get(key)
            if not isinstance(value, bool):
                logger.warning(f"Ignoring non-boolean day status under {key!r}: {value!r}")
                continue
            statuses[STATUS_KEY.match(key).group("date")] = DayStatus.from_stored(value)
        return dict(sorted(statuses.items()))

    def get_statuses_in_month(self, habit_id: str, year: int, month: int) -> Dict[str, DayStatus]:
        """Status of every calendar day in the month (1-12), unmarked days included."""
        return {date: self.get_status(habit_id, date) for date in month_dates(year, month)}

    def count_marked_days(self, habit_id: str) -> int:
        return len(self.get_all_statuses(habit_id))

    def clear_habit_data(self, habit_id: str):
        """Remove every day status recorded for one habit."""
        keys = self._status_keys(habit_id)
        self.storage.remove_many(keys)
        logger.info(f"Cleared {len(keys)} day statuses for habit {habit_id}")

    def clear_all(self):
        """Remove every day status for every habit."""
        keys = self._status_keys()
        self.storage.remove_many(keys)
        logger.info(f"Cleared {len(keys)} day statuses")
