# habit_registry.py
import json
import logging
from dataclasses import replace
from enum import Enum
from typing import Dict, List, Optional

from errors import (
    HabitTrackerError, ImportParseError, MalformedDataError, NotFoundError, ValidationError
)
from habit import Habit, new_habit_id

logger = logging.getLogger(__name__)

KEY_HABITS_LIST = "habits_list"
KEY_ACTIVE_HABIT_ID = "active_habit_id"
KEY_FIRST_RUN = "first_run"


class HabitSortType(Enum):
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    CREATED_DATE_ASC = "created_date_asc"
    CREATED_DATE_DESC = "created_date_desc"
    MOST_ACTIVE = "most_active"


class HabitRegistry:
    """Ordered list of habits plus the active-habit pointer.

    Habits are kept as one JSON array under ``habits_list`` in the shared
    key-value store. Insertion order is preserved and inactive (soft-deleted)
    habits stay in the list.
    """

    def __init__(self, storage):
        self.storage = storage

    # -------------------------
    # Persistence
    # -------------------------
    def _load(self) -> List[Habit]:
        raw = self.storage.get(KEY_HABITS_LIST)
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
            if not isinstance(entries, list):
                raise MalformedDataError("habits_list is not a JSON array")
            return [Habit.from_dict(entry) for entry in entries]
        except (TypeError, ValueError, MalformedDataError) as e:
            logger.error(f"Stored habit list is unreadable, treating it as empty: {e}")
            return []

    def _save(self, habits: List[Habit]):
        payload = json.dumps([h.to_dict() for h in habits], ensure_ascii=False)
        self.storage.put(KEY_HABITS_LIST, payload)

    # -------------------------
    # First run
    # -------------------------
    def is_first_run(self) -> bool:
        return not self.storage.get(KEY_FIRST_RUN, False)

    def initialize(self) -> bool:
        """
        Seed the default habit on the very first start.

        Runs once per store: after ``first_run`` is recorded an empty list
        stays empty.

        Returns:
            True if the default habit was created
        """
        if self.storage.contains(KEY_HABITS_LIST) or not self.is_first_run():
            return False

        default_habit = Habit.create_default()
        self._save([default_habit])
        self.set_active_habit_id(default_habit.id)
        self.storage.put(KEY_FIRST_RUN, True)
        logger.info("First run: created default habit")
        return True

    # -------------------------
    # Queries
    # -------------------------
    def get_all(self) -> List[Habit]:
        return self._load()

    def get_active(self) -> List[Habit]:
        return [h for h in self._load() if h.is_active]

    def get(self, habit_id: str) -> Optional[Habit]:
        return next((h for h in self._load() if h.id == habit_id), None)

    def is_name_taken(self, name: str, exclude_id: str = "") -> bool:
        wanted = name.strip().casefold()
        return any(
            h.name.strip().casefold() == wanted and h.id != exclude_id
            for h in self._load()
        )

    def generate_unique_name(self, base_name: str) -> str:
        counter = 1
        new_name = base_name
        while self.is_name_taken(new_name):
            new_name = f"{base_name} ({counter})"
            counter += 1
        return new_name

    def search(self, query: str) -> List[Habit]:
        """Active habits whose name contains ``query``, ignoring case."""
        needle = query.strip().casefold()
        return [h for h in self.get_active() if needle in h.name.casefold()]

    @staticmethod
    def sort(habits: List[Habit], sort_type: HabitSortType,
             activity: Optional[Dict[str, int]] = None) -> List[Habit]:
        """
        Return ``habits`` ordered by ``sort_type``.

        MOST_ACTIVE needs ``activity`` (marked-day count per habit id); without
        it the newest habits come first.
        """
        if sort_type is HabitSortType.NAME_ASC:
            return sorted(habits, key=lambda h: h.name.casefold())
        if sort_type is HabitSortType.NAME_DESC:
            return sorted(habits, key=lambda h: h.name.casefold(), reverse=True)
        if sort_type is HabitSortType.CREATED_DATE_ASC:
            return sorted(habits, key=lambda h: h.created_date)
        if sort_type is HabitSortType.CREATED_DATE_DESC:
            return sorted(habits, key=lambda h: h.created_date, reverse=True)
        if activity is None:
            return sorted(habits, key=lambda h: h.created_date, reverse=True)
        return sorted(habits, key=lambda h: activity.get(h.id, 0), reverse=True)

    # -------------------------
    # Validation
    # -------------------------
    def validate_new(self, habit: Habit):
        """Raise ValidationError if ``habit`` cannot be added."""
        habit.validate()
        habits = self._load()
        if any(h.id == habit.id for h in habits):
            raise ValidationError(f"A habit with id {habit.id} already exists.")
        if self.is_name_taken(habit.name):
            raise ValidationError(f"Habit '{habit.name.strip()}' already exists.")

    def validate_update(self, habit: Habit):
        """Raise ValidationError or NotFoundError if ``habit`` cannot replace its stored record."""
        habit.validate()
        if self.get(habit.id) is None:
            raise NotFoundError(f"Habit {habit.id} not found.")
        if self.is_name_taken(habit.name, exclude_id=habit.id):
            raise ValidationError(f"Habit '{habit.name.strip()}' already exists.")

    # -------------------------
    # Mutations
    # -------------------------
    def add(self, habit: Habit) -> bool:
        """Append a valid habit with an untaken name; the first habit becomes active."""
        try:
            self.validate_new(habit)
        except HabitTrackerError as e:
            logger.info(f"Rejected new habit: {e}")
            return False

        habits = self._load()
        habits.append(habit)
        self._save(habits)
        if not self.get_active_habit_id():
            self.set_active_habit_id(habit.id)
        return True

    def update(self, habit: Habit) -> bool:
        """Replace the stored record with the same id, keeping its position."""
        try:
            self.validate_update(habit)
        except HabitTrackerError as e:
            logger.info(f"Rejected habit update: {e}")
            return False

        habits = [habit if h.id == habit.id else h for h in self._load()]
        self._save(habits)
        return True

    def deactivate(self, habit_id: str) -> bool:
        """Soft delete: clear ``is_active`` and move the active pointer if needed."""
        habits = self._load()
        if not any(h.id == habit_id for h in habits):
            logger.info(f"Cannot deactivate habit {habit_id}: not found")
            return False

        habits = [replace(h, is_active=False) if h.id == habit_id else h for h in habits]
        self._save(habits)
        self._release_active_pointer(habit_id, habits)
        return True

    def remove(self, habit_id: str) -> bool:
        """Hard delete the record; day statuses are left to the caller."""
        habits = self._load()
        remaining = [h for h in habits if h.id != habit_id]
        if len(remaining) == len(habits):
            return False

        self._save(remaining)
        self._release_active_pointer(habit_id, remaining)
        return True

    def clear_all_habits(self):
        """Drop the habit list and active pointer. ``first_run`` is kept."""
        self.storage.remove_many([KEY_HABITS_LIST, KEY_ACTIVE_HABIT_ID])

    # -------------------------
    # Active habit
    # -------------------------
    def get_active_habit_id(self) -> str:
        return self.storage.get(KEY_ACTIVE_HABIT_ID) or ""

    def set_active_habit_id(self, habit_id: str):
        self.storage.put(KEY_ACTIVE_HABIT_ID, habit_id)

    def _release_active_pointer(self, habit_id: str, habits: List[Habit]):
        if self.get_active_habit_id() != habit_id:
            return
        active = [h for h in habits if h.is_active]
        self.set_active_habit_id(active[0].id if active else "")

    def get_active_habit(self) -> Optional[Habit]:
        """
        Resolve the active pointer.

        A pointer to a missing or inactive habit falls back to the first
        active habit, which is persisted as the new pointer.
        """
        active = self.get_active()
        active_id = self.get_active_habit_id()
        for habit in active:
            if habit.id == active_id:
                return habit
        if not active:
            return None
        self.set_active_habit_id(active[0].id)
        return active[0]

    # -------------------------
    # Export / import
    # -------------------------
    def export_habits(self) -> str:
        return json.dumps([h.to_dict() for h in self._load()], ensure_ascii=False, indent=2)

    def _parse_import(self, payload: str) -> List[Habit]:
        try:
            entries = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise ImportParseError(f"Import is not valid JSON: {e}")
        if not isinstance(entries, list):
            raise ImportParseError("Import must be a JSON array of habits")

        parsed = []
        for entry in entries:
            try:
                habit = Habit.from_dict(entry)
            except MalformedDataError as e:
                logger.info(f"Skipping malformed imported habit: {e}")
                continue
            if habit.is_valid():
                parsed.append(habit)
        return parsed

    def import_habits(self, payload: str) -> bool:
        """
        Merge habits from an exported JSON array.

        Only valid habits whose names are free are added; existing habits are
        never overwritten, and an imported id that is already in use gets a
        fresh one.

        Returns:
            False if the payload is malformed or holds no valid habit
        """
        try:
            imported = self._parse_import(payload)
        except ImportParseError as e:
            logger.warning(f"Import rejected: {e}")
            return False
        if not imported:
            logger.warning("Import rejected: no valid habits")
            return False

        habits = self._load()
        taken_names = {h.name.strip().casefold() for h in habits}
        taken_ids = {h.id for h in habits}
        added = 0
        for habit in imported:
            name_key = habit.name.strip().casefold()
            if name_key in taken_names:
                continue
            if habit.id in taken_ids:
                habit = replace(habit, id=new_habit_id())
            habits.append(habit)
            taken_names.add(name_key)
            taken_ids.add(habit.id)
            added += 1

        self._save(habits)
        if not self.get_active_habit_id():
            first_active = next((h for h in habits if h.is_active), None)
            if first_active is not None:
                self.set_active_habit_id(first_active.id)
        logger.info(f"Imported {added} of {len(imported)} habits")
        return True
