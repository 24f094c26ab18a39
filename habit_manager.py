import logging
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from date_utils import today_string
from day_status import DayStatus, DayStatusStore
from errors import HabitTrackerError, NotFoundError, ValidationError
from habit import Habit, ReminderTime
from habit_registry import HabitRegistry, HabitSortType
from habit_stats import StatsEngine
from reminders import LoggingReminderScheduler, ReminderScheduler

logger = logging.getLogger(__name__)


class HabitManager:
    """Handles habit creation, deletion, resets and reminders across both stores."""

    def __init__(self, registry: HabitRegistry, day_store: DayStatusStore,
                 reminders: Optional[ReminderScheduler] = None,
                 clock: Callable[[], str] = today_string):
        self.registry = registry
        self.day_store = day_store
        self.reminders = reminders or LoggingReminderScheduler()
        self.clock = clock
        self.stats = StatsEngine(day_store, clock)

    def _fire_reminder(self, method: str, *args):
        # The scheduler is fire-and-forget: its failures never undo core changes.
        try:
            getattr(self.reminders, method)(*args)
        except Exception as e:
            logger.warning(f"Reminder scheduler {method} failed: {e}")

    # -------------------------
    # Habits
    # -------------------------
    def create_habit(self, name: str, icon: str, color: str,
                     reminder: Optional[ReminderTime] = None) -> Tuple[Optional[Habit], str]:
        """
        Create a new habit and make it the active one.

        Args:
            name: Display name, trimmed before use
            icon: Emoji or symbol shown next to the name
            color: Hex color like #4CAF50
            reminder: Optional daily reminder time

        Returns:
            (habit or None, message)
        """
        name = (name or "").strip()
        if not name:
            return None, "Habit name cannot be empty."
        if self.registry.is_name_taken(name):
            return None, f"Habit '{name}' already exists."

        habit = Habit(name=name, icon=icon, color=color,
                      created_date=self.clock(), reminder=reminder)
        try:
            self.registry.validate_new(habit)
        except ValidationError as e:
            return None, str(e)
        if not self.registry.add(habit):
            return None, f"Habit '{name}' could not be saved."

        self.registry.set_active_habit_id(habit.id)
        if reminder is not None:
            self._fire_reminder("schedule_daily_reminder",
                                habit.id, reminder.hour, reminder.minute, habit.name)
        logger.info(f"Created habit '{name}' ({habit.id})")
        return habit, f"Habit '{name}' created successfully!"

    def update_habit(self, habit: Habit) -> Tuple[bool, str]:
        try:
            self.registry.validate_update(habit)
        except HabitTrackerError as e:
            return False, str(e)
        previous = self.registry.get(habit.id)
        if not self.registry.update(habit):
            return False, f"Habit '{habit.name}' could not be saved."
        self._sync_reminder(previous, habit)
        return True, f"Habit '{habit.name}' updated."

    def deactivate_habit(self, habit_id: str) -> Tuple[bool, str]:
        if not self.registry.deactivate(habit_id):
            return False, f"Habit {habit_id} not found."
        self._fire_reminder("cancel_reminder", habit_id)
        return True, "Habit deactivated."

    def set_active_habit(self, habit_id: str) -> Tuple[bool, str]:
        habit = self.registry.get(habit_id)
        if habit is None or not habit.is_active:
            return False, f"Habit {habit_id} is not an active habit."
        self.registry.set_active_habit_id(habit_id)
        return True, f"'{habit.name}' is now the active habit."

    def sort_habits(self, habits: List[Habit], sort_type: HabitSortType) -> List[Habit]:
        activity = None
        if sort_type is HabitSortType.MOST_ACTIVE:
            activity = {h.id: self.day_store.count_marked_days(h.id) for h in habits}
        return self.registry.sort(habits, sort_type, activity)

    # -------------------------
    # Reminders
    # -------------------------
    def _require_habit(self, habit_id: str) -> Habit:
        habit = self.registry.get(habit_id)
        if habit is None:
            raise NotFoundError(f"Habit {habit_id} not found.")
        return habit

    def _sync_reminder(self, previous: Optional[Habit], current: Habit):
        if previous is None or previous.reminder == current.reminder:
            return
        if current.reminder is None or not current.is_active:
            if previous.reminder is not None:
                self._fire_reminder("cancel_reminder", current.id)
            return
        self._fire_reminder("schedule_daily_reminder", current.id,
                            current.reminder.hour, current.reminder.minute, current.name)

    def set_reminder(self, habit_id: str, hour: int, minute: int) -> Tuple[bool, str]:
        """Store a daily reminder time on the habit and hand it to the scheduler."""
        try:
            habit = self._require_habit(habit_id)
            reminder = ReminderTime(hour, minute)
        except HabitTrackerError as e:
            return False, str(e)
        if not habit.is_active:
            return False, f"Habit '{habit.name}' is inactive."

        updated = replace(habit, reminder=reminder)
        if not self.registry.update(updated):
            return False, f"Habit '{habit.name}' could not be saved."
        self._fire_reminder("schedule_daily_reminder", habit_id, hour, minute, habit.name)
        return True, f"Reminder set for {reminder}."

    def clear_reminder(self, habit_id: str) -> Tuple[bool, str]:
        try:
            habit = self._require_habit(habit_id)
        except NotFoundError as e:
            return False, str(e)

        if not self.registry.update(replace(habit, reminder=None)):
            return False, f"Habit '{habit.name}' could not be saved."
        self._fire_reminder("cancel_reminder", habit_id)
        return True, "Reminder removed."

    # -------------------------
    # Day statuses
    # -------------------------
    def mark_day(self, habit_id: str, date: str, success: bool):
        self.day_store.set_status(habit_id, date, success)

    def mark_today(self, habit_id: str, success: bool) -> str:
        today = self.clock()
        self.mark_day(habit_id, today, success)
        return today

    def unmark_day(self, habit_id: str, date: str):
        self.day_store.remove_status(habit_id, date)

    def get_day_status(self, habit_id: str, date: str) -> DayStatus:
        return self.day_store.get_status(habit_id, date)

    # -------------------------
    # Deletion and resets
    # -------------------------
    def delete_completely(self, habit_id: str) -> bool:
        """Remove a habit together with all of its day statuses."""
        self.day_store.clear_habit_data(habit_id)
        removed = self.registry.remove(habit_id)
        if removed:
            self._fire_reminder("cancel_reminder", habit_id)
            logger.info(f"Deleted habit {habit_id} and its data")
        return removed

    def reset_habit_data(self, habit_id: str):
        """Forget every marked day of one habit; the habit itself stays."""
        self.day_store.clear_habit_data(habit_id)

    def reset_all_data(self):
        """Factory reset: all day statuses, all habits and the active pointer."""
        for habit in self.registry.get_all():
            if habit.reminder is not None:
                self._fire_reminder("cancel_reminder", habit.id)
        self.day_store.clear_all()
        self.registry.clear_all_habits()
        logger.info("All habit data reset")
