"""Tick counter and the calendar values derived from it."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

TICK_MINUTES = 10
TICKS_PER_HOUR = 60 // TICK_MINUTES
START_MINUTES = 8 * 60


class TimeOfDay(str, Enum):
    DAWN = "dawn"
    MORNING = "morning"
    NOON = "noon"
    AFTERNOON = "afternoon"
    DUSK = "dusk"
    EVENING = "evening"
    NIGHT = "night"
    MIDNIGHT = "midnight"

    @classmethod
    def from_hour(cls, hour: int) -> TimeOfDay:
        if 5 <= hour <= 6:
            return cls.DAWN
        if 7 <= hour <= 10:
            return cls.MORNING
        if 11 <= hour <= 13:
            return cls.NOON
        if 14 <= hour <= 16:
            return cls.AFTERNOON
        if 17 <= hour <= 18:
            return cls.DUSK
        if 19 <= hour <= 21:
            return cls.EVENING
        if hour >= 22 or hour <= 1:
            return cls.NIGHT
        return cls.MIDNIGHT

    @property
    def temperature_modifier(self) -> float:
        return _TIME_OF_DAY_MODIFIERS[self]

    @property
    def is_dark(self) -> bool:
        return self in (TimeOfDay.EVENING, TimeOfDay.NIGHT, TimeOfDay.MIDNIGHT)


_TIME_OF_DAY_MODIFIERS = {
    TimeOfDay.DAWN: -3.0,
    TimeOfDay.MORNING: 0.0,
    TimeOfDay.NOON: 5.0,
    TimeOfDay.AFTERNOON: 3.0,
    TimeOfDay.DUSK: -1.0,
    TimeOfDay.EVENING: -4.0,
    TimeOfDay.NIGHT: -6.0,
    TimeOfDay.MIDNIGHT: -8.0,
}


def minutes_to_ticks(minutes: int) -> int:
    """Round a duration up to whole ticks, never less than one."""
    return max(1, -(-minutes // TICK_MINUTES))


@dataclass(slots=True)
class WorldClock:
    tick: int = 0

    def advance(self) -> None:
        self.tick += 1

    @property
    def total_minutes(self) -> int:
        return START_MINUTES + self.tick * TICK_MINUTES

    @property
    def day(self) -> int:
        return self.total_minutes // (24 * 60) + 1

    @property
    def hour(self) -> int:
        return (self.total_minutes // 60) % 24

    @property
    def minute(self) -> int:
        return self.total_minutes % 60

    @property
    def time_of_day(self) -> TimeOfDay:
        return TimeOfDay.from_hour(self.hour)

    def describe(self) -> str:
        return f"Day {self.day}, {self.hour:02d}:{self.minute:02d} ({self.time_of_day.value})"
