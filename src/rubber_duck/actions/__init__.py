"""Intent and outcome types shared by the resolver, the stepper and callers."""

from .intents import INTENT_TYPES, QUERY_TYPES, Intent, IntentParser, intent_from_call, intent_name
from .outcomes import EventKind, Outcome, OutcomeEvent, Resolution, StateDelta

__all__ = [
    "EventKind",
    "INTENT_TYPES",
    "Intent",
    "IntentParser",
    "Outcome",
    "OutcomeEvent",
    "QUERY_TYPES",
    "Resolution",
    "StateDelta",
    "intent_from_call",
    "intent_name",
]
