"""The closed set of intents and the two ways callers produce them."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import MISSING, dataclass, fields
from typing import Any, Union

from rubber_duck.errors import InvalidArgument


@dataclass(frozen=True, slots=True)
class Look:
    pass


@dataclass(frozen=True, slots=True)
class Move:
    direction: str


@dataclass(frozen=True, slots=True)
class Enter:
    target: str = "cabin"


@dataclass(frozen=True, slots=True)
class Exit:
    pass


@dataclass(frozen=True, slots=True)
class Examine:
    target: str


@dataclass(frozen=True, slots=True)
class Take:
    item: str
    quantity: int = 1


@dataclass(frozen=True, slots=True)
class Drop:
    item: str
    quantity: int = 1


@dataclass(frozen=True, slots=True)
class Use:
    item: str
    target: str | None = None


@dataclass(frozen=True, slots=True)
class Open:
    target: str


@dataclass(frozen=True, slots=True)
class Close:
    target: str


@dataclass(frozen=True, slots=True)
class Create:
    item: str


@dataclass(frozen=True, slots=True)
class Chop:
    target: str = "tree"


@dataclass(frozen=True, slots=True)
class Light:
    target: str | None = None


@dataclass(frozen=True, slots=True)
class Stoke:
    item: str
    target: str | None = None


@dataclass(frozen=True, slots=True)
class Rest:
    pass


@dataclass(frozen=True, slots=True)
class Observe:
    pass


@dataclass(frozen=True, slots=True)
class Fish:
    pass


@dataclass(frozen=True, slots=True)
class Inventory:
    pass


@dataclass(frozen=True, slots=True)
class Status:
    pass


@dataclass(frozen=True, slots=True)
class Wait:
    duration: str = "short"


@dataclass(frozen=True, slots=True)
class Simulate:
    ticks: int = 1


@dataclass(frozen=True, slots=True)
class Talk:
    message: str | None = None


Intent = Union[
    Look, Move, Enter, Exit, Examine, Take, Drop, Use, Open, Close, Create,
    Chop, Light, Stoke, Rest, Observe, Fish, Inventory, Status, Wait, Simulate, Talk,
]

INTENT_TYPES: tuple[type, ...] = (
    Look, Move, Enter, Exit, Examine, Take, Drop, Use, Open, Close, Create,
    Chop, Light, Stoke, Rest, Observe, Fish, Inventory, Status, Wait, Simulate, Talk,
)

QUERY_TYPES: tuple[type, ...] = (Look, Examine, Inventory, Status)

INTENT_NAMES: dict[str, type] = {cls.__name__.lower(): cls for cls in INTENT_TYPES}


def intent_name(intent: Any) -> str:
    return type(intent).__name__.lower()


def intent_from_call(name: str, arguments: Mapping[str, Any] | None = None) -> Intent:
    """Build an intent from a tool-call style name and argument mapping."""
    if not isinstance(name, str):
        raise InvalidArgument(f"Action name must be text, got {name!r}.")
    if arguments is not None and not isinstance(arguments, Mapping):
        raise InvalidArgument(f"Arguments for '{name}' must be a mapping of names to values.")
    cls = INTENT_NAMES.get(name.strip().lower())
    if cls is None:
        raise InvalidArgument(f"Unknown action '{name}'.")

    arguments = dict(arguments or {})
    accepted = {item.name: item for item in fields(cls)}
    unknown = sorted(set(arguments) - set(accepted))
    if unknown:
        raise InvalidArgument(f"'{name}' does not take: {', '.join(unknown)}.")

    values: dict[str, Any] = {}
    for arg_name, spec in accepted.items():
        if arg_name not in arguments or arguments[arg_name] in (None, ""):
            if spec.default is MISSING:
                raise InvalidArgument(f"'{name}' needs a {arg_name}.")
            continue
        value = arguments[arg_name]
        if arg_name in ("quantity", "ticks"):
            try:
                value = int(value)
            except (TypeError, ValueError) as exc:
                raise InvalidArgument(f"{arg_name} must be a whole number, got {value!r}.") from exc
        else:
            value = str(value).strip()
        values[arg_name] = value
    return cls(**values)


class IntentParser:
    """Free-text commands such as 'use axe on tree' or 'take 2 logs'."""

    _DIRECTION = r"(north|south|east|west|n|s|e|w)"
    _PATTERNS: tuple[tuple[re.Pattern[str], Any], ...] = (
        (re.compile(r"^(?:look|l)(?:\s+around)?$", re.IGNORECASE), lambda m: Look()),
        (re.compile(r"^(?:inventory|inv|i)$", re.IGNORECASE), lambda m: Inventory()),
        (re.compile(r"^(?:status|stats)$", re.IGNORECASE), lambda m: Status()),
        (re.compile(r"^(?:exit|leave|go outside|go out)(?:\s+.*)?$", re.IGNORECASE), lambda m: Exit()),
        (re.compile(r"^(?:move|go|walk|head)\s+" + _DIRECTION + r"$", re.IGNORECASE), lambda m: Move(m.group(1))),
        (re.compile(r"^(?:move|go|walk|head)\s+(?!fishing$)(\S+)$", re.IGNORECASE), lambda m: Move(m.group(1))),
        (re.compile(r"^" + _DIRECTION + r"$", re.IGNORECASE), lambda m: Move(m.group(1))),
        (re.compile(r"^enter(?:\s+(?:the\s+)?(.+))?$", re.IGNORECASE), lambda m: Enter(m.group(1) or "cabin")),
        (re.compile(r"^(?:examine|inspect|x|look at|check)\s+(?:the\s+)?(.+)$", re.IGNORECASE), lambda m: Examine(m.group(1))),
        (
            re.compile(r"^(?:take|get|grab|pick up)\s+(?:(\d+)\s+)?(?:the\s+)?(.+)$", re.IGNORECASE),
            lambda m: Take(m.group(2), int(m.group(1) or 1)),
        ),
        (
            re.compile(r"^drop\s+(?:(\d+)\s+)?(?:the\s+)?(.+)$", re.IGNORECASE),
            lambda m: Drop(m.group(2), int(m.group(1) or 1)),
        ),
        (
            re.compile(r"^use\s+(?:the\s+)?(.+?)(?:\s+(?:on|with|in|into|at)\s+(?:the\s+)?(.+))?$", re.IGNORECASE),
            lambda m: Use(m.group(1), m.group(2)),
        ),
        (
            re.compile(r"^read\s+(?:the\s+)?(.+?)(?:\s+(next|previous)(?:\s+page)?)?$", re.IGNORECASE),
            lambda m: Use(m.group(1), f"{m.group(2)} page" if m.group(2) else None),
        ),
        (re.compile(r"^kick\s+(?:the\s+)?(.+)$", re.IGNORECASE), lambda m: Use("foot", m.group(1))),
        (re.compile(r"^open\s+(?:the\s+)?(.+)$", re.IGNORECASE), lambda m: Open(m.group(1))),
        (re.compile(r"^(?:close|shut)\s+(?:the\s+)?(.+)$", re.IGNORECASE), lambda m: Close(m.group(1))),
        (re.compile(r"^(?:create|make|craft|build)\s+(?:a\s+|an\s+|the\s+)?(.+)$", re.IGNORECASE), lambda m: Create(m.group(1))),
        (re.compile(r"^split\s+(?:a\s+|the\s+)?logs?$", re.IGNORECASE), lambda m: Chop("chopping block")),
        (re.compile(r"^chop(?:\s+(?:down\s+)?(?:a\s+|the\s+)?(.+))?$", re.IGNORECASE), lambda m: Chop(m.group(1) or "tree")),
        (re.compile(r"^(?:light|ignite|kindle)(?:\s+(?:a\s+|the\s+)?(.+))?$", re.IGNORECASE), lambda m: Light(m.group(1))),
        (
            re.compile(r"^(?:stoke|feed)\s+(?:the\s+)?(fire|fireplace|hearth|campfire)\s+with\s+(.+)$", re.IGNORECASE),
            lambda m: Stoke(m.group(2), m.group(1)),
        ),
        (
            re.compile(r"^(?:stoke|add|burn)\s+(?:the\s+)?(.+?)(?:\s+(?:to|into|on|in)\s+(?:the\s+)?(.+))?$", re.IGNORECASE),
            lambda m: Stoke(m.group(1), m.group(2)),
        ),
        (re.compile(r"^(?:rest|sleep|nap)(?:\s+.*)?$", re.IGNORECASE), lambda m: Rest()),
        (re.compile(r"^(?:observe|watch)(?:\s+.*)?$", re.IGNORECASE), lambda m: Observe()),
        (re.compile(r"^(?:fish|go fishing|cast)(?:\s+.*)?$", re.IGNORECASE), lambda m: Fish()),
        (re.compile(r"^wait(?:\s+(short|medium|long))?$", re.IGNORECASE), lambda m: Wait(m.group(1) or "short")),
        (re.compile(r"^simulate(?:\s+(\d+))?(?:\s+ticks?)?$", re.IGNORECASE), lambda m: Simulate(int(m.group(1) or 1))),
        (re.compile(r"^say\s+(.+)$", re.IGNORECASE), lambda m: Talk(m.group(1).strip().strip("\"'"))),
        (
            re.compile(r"^(?:talk|speak)(?:\s+(?:to|with)\s+(?:the\s+)?(?:rubber\s+)?duck)?(?:[\s:,]+(.+))?$", re.IGNORECASE),
            lambda m: Talk(m.group(1).strip().strip("\"'") if m.group(1) else None),
        ),
    )

    def parse(self, text: str) -> Intent:
        cleaned = " ".join(text.strip().split())
        if not cleaned:
            raise InvalidArgument("Say what you want to do.")

        for pattern, build in self._PATTERNS:
            match = pattern.match(cleaned)
            if match:
                return build(match)
        raise InvalidArgument(f"I don't understand '{cleaned}'.")
