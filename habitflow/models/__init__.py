from .category import Category
from .habit import Habit, ScheduleMode, FrequencyType
from .completion import HabitCompletion

__all__ = [
    "Category",
    "Habit",
    "ScheduleMode",
    "FrequencyType",
    "HabitCompletion",
]
