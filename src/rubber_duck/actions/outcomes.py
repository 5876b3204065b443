"""Structured results of resolving an intent."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from rubber_duck.errors import ErrorKind


class EventKind(str, Enum):
    LOOKED = "looked"
    MOVED = "moved"
    ENTERED = "entered"
    EXITED = "exited"
    EXAMINED = "examined"
    ITEM_TAKEN = "item_taken"
    ITEM_DROPPED = "item_dropped"
    ITEM_SPILLED = "item_spilled"
    OPENED = "opened"
    CLOSED = "closed"
    SKILL_CHECK = "skill_check"
    XP_AWARDED = "xp_awarded"
    LEVEL_UP = "level_up"
    BLUEPRINT_CREATED = "blueprint_created"
    BLUEPRINT_RESUMED = "blueprint_resumed"
    BLUEPRINT_SUPPLIED = "blueprint_supplied"
    BLUEPRINT_COMPLETED = "blueprint_completed"
    TREE_CHOPPED = "tree_chopped"
    TREE_FELLED = "tree_felled"
    FRUIT_PICKED = "fruit_picked"
    FIREWOOD_SPLIT = "firewood_split"
    FORAGED = "foraged"
    ITEM_PROCESSED = "item_processed"
    RESOURCE_DEPLETED = "resource_depleted"
    RESOURCE_REGROWN = "resource_regrown"
    FIRE_LIT = "fire_lit"
    FIRE_STOKED = "fire_stoked"
    FIRE_OUT = "fire_out"
    ATE = "ate"
    DRANK = "drank"
    COOKED = "cooked"
    FISHED = "fished"
    RESTED = "rested"
    OBSERVED = "observed"
    KETTLE_FILLED = "kettle_filled"
    KETTLE_HEATED = "kettle_heated"
    TEA_BREWED = "tea_brewed"
    WARMED = "warmed"
    BOOK_READ = "book_read"
    TUTORIAL_COMPLETED = "tutorial_completed"
    TREE_KICKED = "tree_kicked"
    DUCK_SPOKE = "duck_spoke"
    TOOL_BROKEN = "tool_broken"
    INJURED = "injured"
    INVENTORY_LISTED = "inventory_listed"
    STATUS_REPORTED = "status_reported"
    TIME_ADVANCED = "time_advanced"
    WEATHER_CHANGED = "weather_changed"
    WILDLIFE_MOVED = "wildlife_moved"
    FAILED = "failed"


@dataclass(slots=True)
class OutcomeEvent:
    kind: EventKind
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, **self.data}


@dataclass(slots=True)
class StateDelta:
    ticks: int = 0
    position: tuple[int, int] | None = None
    room: str | None = None
    inventory_changes: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class Outcome:
    success: bool
    intent: str
    message: str
    events: list[OutcomeEvent] = field(default_factory=list)
    delta: StateDelta = field(default_factory=StateDelta)
    error: ErrorKind | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "intent": self.intent,
            "message": self.message,
            "events": [event.to_dict() for event in self.events],
            "delta": asdict(self.delta),
            "error": self.error.value if self.error else None,
        }

    def find(self, kind: EventKind) -> list[OutcomeEvent]:
        return [event for event in self.events if event.kind == kind]


@dataclass(slots=True)
class Resolution:
    """What a handler committed: its message, events and time cost in ticks."""

    message: str
    events: list[OutcomeEvent] = field(default_factory=list)
    ticks: int = 0
