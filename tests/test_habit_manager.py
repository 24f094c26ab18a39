import unittest
from dataclasses import replace
from unittest.mock import MagicMock

from day_status import DayStatus, DayStatusStore
from habit import ReminderTime
from habit_manager import HabitManager
from habit_registry import HabitRegistry, HabitSortType
from local_storage import LocalKeyValueStore

TODAY = "2025-03-15"


class TestHabitManager(unittest.TestCase):
    def setUp(self):
        """Fresh in-memory stores and a mocked reminder service for each test."""
        self.storage = LocalKeyValueStore(None)
        self.registry = HabitRegistry(self.storage)
        self.days = DayStatusStore(self.storage)
        self.reminders = MagicMock()
        self.manager = HabitManager(self.registry, self.days,
                                    reminders=self.reminders, clock=lambda: TODAY)

    def test_create_habit_trims_and_activates(self):
        first, _ = self.manager.create_habit("Read", "📚", "#112233")
        habit, message = self.manager.create_habit("  Run  ", "🏃", "#445566")

        self.assertIsNotNone(habit)
        self.assertEqual(habit.name, "Run")
        self.assertEqual(habit.created_date, TODAY)
        self.assertIn("created successfully", message)
        self.assertEqual(self.registry.get_active_habit_id(), habit.id)
        self.assertEqual([h.id for h in self.registry.get_all()], [first.id, habit.id])
        self.reminders.schedule_daily_reminder.assert_not_called()

    def test_create_habit_validation_errors(self):
        self.manager.create_habit("Read", "📚", "#112233")

        for args in [("   ", "📚", "#112233"),
                     ("read", "📚", "#112233"),
                     ("Swim", "", "#112233"),
                     ("Swim", "🏊", "#GGGGGG")]:
            habit, message = self.manager.create_habit(*args)
            self.assertIsNone(habit)
            self.assertTrue(message)

        self.assertEqual(len(self.registry.get_all()), 1)

    def test_create_habit_with_reminder_schedules_it(self):
        habit, _ = self.manager.create_habit("Read", "📚", "#112233", ReminderTime(20, 15))

        self.reminders.schedule_daily_reminder.assert_called_once_with(habit.id, 20, 15, "Read")
        self.assertEqual(self.registry.get(habit.id).reminder, ReminderTime(20, 15))

    def test_set_and_clear_reminder(self):
        habit, _ = self.manager.create_habit("Read", "📚", "#112233")

        ok, message = self.manager.set_reminder(habit.id, 7, 5)
        self.assertTrue(ok)
        self.assertIn("07:05", message)
        self.reminders.schedule_daily_reminder.assert_called_once_with(habit.id, 7, 5, "Read")

        ok, _ = self.manager.set_reminder(habit.id, 25, 0)
        self.assertFalse(ok)
        self.assertEqual(self.registry.get(habit.id).reminder, ReminderTime(7, 5))

        ok, _ = self.manager.clear_reminder(habit.id)
        self.assertTrue(ok)
        self.assertIsNone(self.registry.get(habit.id).reminder)
        self.reminders.cancel_reminder.assert_called_once_with(habit.id)

        self.assertFalse(self.manager.set_reminder("missing", 7, 0)[0])

    def test_update_habit_reschedules_changed_reminder(self):
        habit, _ = self.manager.create_habit("Read", "📚", "#112233")

        ok, _ = self.manager.update_habit(replace(habit, reminder=ReminderTime(7, 0)))
        self.assertTrue(ok)
        self.reminders.schedule_daily_reminder.assert_called_once_with(habit.id, 7, 0, "Read")

        # Renaming without touching the reminder does not reschedule.
        self.manager.update_habit(replace(habit, name="Read more", reminder=ReminderTime(7, 0)))
        self.assertEqual(self.reminders.schedule_daily_reminder.call_count, 1)

        ok, _ = self.manager.update_habit(replace(habit, name="Read more", reminder=None))
        self.assertTrue(ok)
        self.reminders.cancel_reminder.assert_called_once_with(habit.id)

    def test_set_reminder_rejects_inactive_habit(self):
        habit, _ = self.manager.create_habit("Read", "📚", "#112233")
        self.manager.deactivate_habit(habit.id)

        ok, message = self.manager.set_reminder(habit.id, 8, 0)

        self.assertFalse(ok)
        self.assertIn("inactive", message)
        self.assertIsNone(self.registry.get(habit.id).reminder)
        self.reminders.schedule_daily_reminder.assert_not_called()

    def test_reminder_failure_does_not_undo_update(self):
        habit, _ = self.manager.create_habit("Read", "📚", "#112233")
        self.reminders.schedule_daily_reminder.side_effect = RuntimeError("no alarm service")

        ok, _ = self.manager.set_reminder(habit.id, 9, 0)

        self.assertTrue(ok)
        self.assertEqual(self.registry.get(habit.id).reminder, ReminderTime(9, 0))

    def test_delete_completely_cascades(self):
        keep, _ = self.manager.create_habit("Read", "📚", "#112233")
        doomed, _ = self.manager.create_habit("Run", "🏃", "#445566")
        self.manager.mark_day(doomed.id, "2025-03-14", True)
        self.manager.mark_today(doomed.id, False)
        self.manager.mark_today(keep.id, True)

        self.assertTrue(self.manager.delete_completely(doomed.id))

        self.assertEqual([h.id for h in self.registry.get_all()], [keep.id])
        self.assertEqual(self.days.get_all_statuses(doomed.id), {})
        self.assertIs(self.manager.get_day_status(doomed.id, "2025-03-14"), DayStatus.UNMARKED)
        self.assertIs(self.manager.get_day_status(keep.id, TODAY), DayStatus.SUCCESS)
        self.assertEqual(self.registry.get_active_habit_id(), keep.id)
        self.reminders.cancel_reminder.assert_called_once_with(doomed.id)

        self.assertFalse(self.manager.delete_completely(doomed.id))

    def test_reset_habit_data_keeps_habit(self):
        habit, _ = self.manager.create_habit("Read", "📚", "#112233")
        self.manager.mark_today(habit.id, True)

        self.manager.reset_habit_data(habit.id)

        self.assertEqual(self.days.get_all_statuses(habit.id), {})
        self.assertEqual(self.registry.get_active_habit_id(), habit.id)
        self.assertEqual(len(self.registry.get_all()), 1)

    def test_reset_all_data(self):
        self.registry.initialize()
        habit, _ = self.manager.create_habit("Read", "📚", "#112233", ReminderTime(8, 0))
        self.manager.mark_today(habit.id, True)

        self.manager.reset_all_data()

        self.assertEqual(self.registry.get_all(), [])
        self.assertEqual(self.registry.get_active_habit_id(), "")
        self.assertEqual(self.days.get_all_statuses(habit.id), {})
        self.assertFalse(self.registry.initialize())
        self.reminders.cancel_reminder.assert_called_once_with(habit.id)

    def test_unmark_day(self):
        habit, _ = self.manager.create_habit("Read", "📚", "#112233")
        self.manager.mark_day(habit.id, "2025-03-01", True)
        self.manager.unmark_day(habit.id, "2025-03-01")
        self.manager.unmark_day(habit.id, "2025-03-01")
        self.assertIs(self.manager.get_day_status(habit.id, "2025-03-01"), DayStatus.UNMARKED)

    def test_deactivate_and_set_active(self):
        a, _ = self.manager.create_habit("A", "🅰", "#112233")
        b, _ = self.manager.create_habit("B", "🅱", "#112233")

        self.assertTrue(self.manager.set_active_habit(a.id)[0])
        self.assertTrue(self.manager.deactivate_habit(a.id)[0])
        self.assertEqual(self.registry.get_active_habit_id(), b.id)
        self.assertFalse(self.manager.set_active_habit(a.id)[0])
        self.assertFalse(self.manager.deactivate_habit("missing")[0])

    def test_update_habit_messages(self):
        a, _ = self.manager.create_habit("A", "🅰", "#112233")
        self.manager.create_habit("B", "🅱", "#112233")

        a.name = "b"
        ok, message = self.manager.update_habit(a)
        self.assertFalse(ok)
        self.assertIn("already exists", message)

        a.name = "Alpha"
        self.assertTrue(self.manager.update_habit(a)[0])
        self.assertEqual(self.registry.get(a.id).name, "Alpha")

    def test_sort_most_active(self):
        a, _ = self.manager.create_habit("A", "🅰", "#112233")
        b, _ = self.manager.create_habit("B", "🅱", "#112233")
        self.manager.mark_day(b.id, "2025-03-01", True)
        self.manager.mark_day(b.id, "2025-03-02", False)
        self.manager.mark_day(a.id, "2025-03-01", True)

        ordered = self.manager.sort_habits(self.registry.get_all(), HabitSortType.MOST_ACTIVE)
        self.assertEqual([h.id for h in ordered], [b.id, a.id])

    def test_stats_available_from_manager(self):
        habit, _ = self.manager.create_habit("Read", "📚", "#112233")
        self.manager.mark_today(habit.id, True)
        self.manager.mark_day(habit.id, "2025-03-14", True)

        self.assertEqual(self.manager.stats.calculate_streak(habit.id), 2)


if __name__ == '__main__':
    unittest.main()
