# reminders.py
import logging

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Interface of the daily-reminder collaborator.

    The core only fires these calls and never looks at a result.
    """

    def schedule_daily_reminder(self, habit_id: str, hour: int, minute: int, label: str):
        raise NotImplementedError

    def cancel_reminder(self, habit_id: str):
        raise NotImplementedError


class LoggingReminderScheduler(ReminderScheduler):
    """Records reminder requests in the log; used when no OS alarm service is wired in."""

    def __init__(self):
        self.scheduled = {}

    def schedule_daily_reminder(self, habit_id: str, hour: int, minute: int, label: str):
        self.scheduled[habit_id] = (hour, minute, label)
        logger.info(f"Reminder for '{label}' ({habit_id}) set to {hour:02d}:{minute:02d} daily")

    def cancel_reminder(self, habit_id: str):
        self.scheduled.pop(habit_id, None)
        logger.info(f"Reminder for {habit_id} cancelled")
