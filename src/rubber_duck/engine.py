from __future__ import annotations

import logging
import random
from typing import Any

from rubber_duck.actions.intents import Intent, IntentParser, QUERY_TYPES, intent_from_call
from rubber_duck.actions.outcomes import EventKind, Outcome, OutcomeEvent
from rubber_duck.actions.resolver import ActionResolver
from rubber_duck.blueprints import BlueprintEngine
from rubber_duck.config import Settings, settings as default_settings
from rubber_duck.errors import InvalidArgument
from rubber_duck.persistence import JsonStateStore
from rubber_duck.state import WorldState, new_world
from rubber_duck.stepper import WorldStepper
from rubber_duck.telemetry import LoggingTelemetry, Telemetry


class GameEngine:
    """Owns the live world and routes caller input through the resolver."""

    def __init__(
        self,
        *,
        config: Settings | None = None,
        store: JsonStateStore | None = None,
        telemetry: Telemetry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or default_settings
        self.store = store or JsonStateStore(self.config.state_path)
        self._logger = logger or logging.getLogger("rubber_duck.engine")
        self.parser = IntentParser()
        self.resolver = ActionResolver(
            stepper=WorldStepper(weather_interval_ticks=self.config.weather_interval_ticks),
            blueprints=BlueprintEngine(duplicate_policy=self.config.duplicate_blueprint_policy),
            telemetry=telemetry or LoggingTelemetry(),
            failure_xp_ratio=self.config.failure_xp_ratio,
            duck_name=self.config.duck_name,
        )
        self._world: WorldState | None = None

    @property
    def world(self) -> WorldState:
        """The live world, loaded from the store or created on first use."""
        if self._world is None:
            self._world = self.load() or self.new_world()
        return self._world

    def new_world(self, seed: int | None = None) -> WorldState:
        if seed is None:
            seed = self.config.seed if self.config.seed is not None else random.randrange(2**31)
        self._world = new_world(
            seed,
            inventory_capacity=self.config.inventory_capacity,
            cooldown_ticks=self.config.resource_cooldown_ticks,
        )
        self._logger.info("world_created", extra={"seed": seed})
        if self.config.autosave:
            self.save()
        return self._world

    def load(self) -> WorldState | None:
        world = self.store.load()
        if world is not None:
            self._world = world
        return world

    def save(self) -> None:
        if self._world is not None:
            self.store.save(self._world)

    def handle(self, intent: Intent) -> Outcome:
        outcome = self.resolver.resolve(self.world, intent)
        if outcome.success and self.config.autosave and not isinstance(intent, QUERY_TYPES):
            self.save()
        return outcome

    def handle_text(self, text: str) -> Outcome:
        try:
            intent = self.parser.parse(text)
        except InvalidArgument as exc:
            return self._rejected("unknown", exc)
        return self.handle(intent)

    def handle_call(self, name: str, arguments: dict[str, Any] | None = None) -> Outcome:
        try:
            intent = intent_from_call(name, arguments)
        except InvalidArgument as exc:
            return self._rejected(name, exc)
        return self.handle(intent)

    def _rejected(self, name: str, exc: InvalidArgument) -> Outcome:
        self._logger.info("intent_unparsed", extra={"intent": name, "reason": str(exc)})
        return Outcome(
            success=False,
            intent=str(name),
            message=str(exc),
            events=[OutcomeEvent(EventKind.FAILED, {"error": exc.kind.value, "reason": str(exc)})],
            error=exc.kind,
        )
