# habit.py
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from date_utils import today_string
from errors import MalformedDataError, ValidationError

DEFAULT_HABIT_ID = "default_habit"
COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


@dataclass(frozen=True)
class ReminderTime:
    """Daily reminder time of day; hour and minute always travel together."""
    hour: int
    minute: int

    def __post_init__(self):
        if isinstance(self.hour, bool) or not isinstance(self.hour, int) or not 0 <= self.hour <= 23:
            raise ValidationError(f"Reminder hour must be 0-23, got {self.hour!r}")
        if isinstance(self.minute, bool) or not isinstance(self.minute, int) or not 0 <= self.minute <= 59:
            raise ValidationError(f"Reminder minute must be 0-59, got {self.minute!r}")

    def __str__(self):
        return f"{self.hour:02d}:{self.minute:02d}"


def new_habit_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Habit:
    name: str
    icon: str
    color: str
    created_date: str = field(default_factory=today_string)
    id: str = field(default_factory=new_habit_id)
    is_active: bool = True
    reminder: Optional[ReminderTime] = None

    @classmethod
    def create_default(cls) -> "Habit":
        """The habit seeded on first run."""
        return cls(id=DEFAULT_HABIT_ID, name="My habit", icon="🎯", color="#4CAF50")

    def validate(self):
        """Raise ValidationError unless name, icon and color are usable."""
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Habit name cannot be empty.")
        if not isinstance(self.icon, str) or not self.icon.strip():
            raise ValidationError("Habit icon cannot be empty.")
        if not isinstance(self.color, str) or not COLOR_PATTERN.match(self.color):
            raise ValidationError(f"Color must look like #RRGGBB, got {self.color!r}.")

    def is_valid(self) -> bool:
        try:
            self.validate()
            return True
        except ValidationError:
            return False

    @property
    def display_name(self) -> str:
        return f"{self.icon} {self.name}"

    # -------------------------
    # JSON shape
    # -------------------------
    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "createdDate": self.created_date,
            "isActive": self.is_active,
        }
        if self.reminder is not None:
            data["reminderHour"] = self.reminder.hour
            data["reminderMinute"] = self.reminder.minute
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        """
        Build a Habit from its persisted/exported JSON object.

        Missing ``id`` or ``createdDate`` are filled in; a reminder needs both
        ``reminderHour`` and ``reminderMinute`` or neither.

        Raises:
            MalformedDataError: If the object does not have the habit shape
        """
        if not isinstance(data, dict):
            raise MalformedDataError(f"Habit entry must be an object, got {type(data).__name__}")

        for key in ("name", "icon", "color"):
            if not isinstance(data.get(key), str):
                raise MalformedDataError(f"Habit field '{key}' is missing or not a string")

        hour = data.get("reminderHour")
        minute = data.get("reminderMinute")
        if (hour is None) != (minute is None):
            raise MalformedDataError("reminderHour and reminderMinute must be set together")
        try:
            reminder = ReminderTime(hour, minute) if hour is not None else None
        except ValidationError as e:
            raise MalformedDataError(str(e))

        is_active = data.get("isActive", True)
        if not isinstance(is_active, bool):
            raise MalformedDataError("Habit field 'isActive' must be a boolean")

        return cls(
            id=str(data.get("id") or new_habit_id()),
            name=data["name"],
            icon=data["icon"],
            color=data["color"],
            created_date=str(data.get("createdDate") or today_string()),
            is_active=is_active,
            reminder=reminder,
        )
