"""Tick-by-tick world progression: clock, weather, fires, regrowth, wildlife, vitals."""

from __future__ import annotations

import logging

from rubber_duck.actions.outcomes import EventKind, OutcomeEvent
from rubber_duck.registry import APPLE_FRUIT_MAX, APPLE_REGROW_CHANCE
from rubber_duck.state import WorldState
from rubber_duck.world.temperature import drift_warmth
from rubber_duck.world.wildlife import update_creature

HUNGER_PER_TICK = 0.5
THIRST_PER_TICK = 0.5
STARVATION_THRESHOLD = 90.0
HYPOTHERMIA_THRESHOLD = 10.0
EXPOSURE_DAMAGE = 0.5


class WorldStepper:
    """Advances a world by whole ticks using the world's own random source.

    ``advance(world, n)`` is exactly ``n`` calls of the single-tick update, so
    splitting an advance into parts never changes the result.
    """

    def __init__(self, *, weather_interval_ticks: int = 6, logger: logging.Logger | None = None) -> None:
        self._weather_interval_ticks = max(1, weather_interval_ticks)
        self._logger = logger or logging.getLogger("rubber_duck.stepper")

    def advance(self, world: WorldState, ticks: int) -> list[OutcomeEvent]:
        events: list[OutcomeEvent] = []
        for _ in range(ticks):
            events.extend(self._tick(world))
        if ticks:
            events.append(
                OutcomeEvent(
                    EventKind.TIME_ADVANCED,
                    {"ticks": ticks, "tick": world.clock.tick, "time": world.clock.describe()},
                )
            )
            self._logger.debug("world_advanced", extra={"ticks": ticks, "tick": world.clock.tick})
        return events

    def _tick(self, world: WorldState) -> list[OutcomeEvent]:
        events: list[OutcomeEvent] = []
        rng = world.rng
        world.clock.advance()

        if world.clock.tick % self._weather_interval_ticks == 0:
            for region, weather in world.grid.reroll_weather(rng).items():
                events.append(OutcomeEvent(EventKind.WEATHER_CHANGED, {"region": region.value, "weather": weather.value}))

        for key, fire in world.store.fires.items():
            if fire.burn():
                events.append(OutcomeEvent(EventKind.FIRE_OUT, {"fire": key}))

        for node in world.store.nodes.values():
            if node.tick():
                events.append(OutcomeEvent(EventKind.RESOURCE_REGROWN, {"node": node.id}))
            if node.variety == "apple" and not node.depleted and node.fruit < APPLE_FRUIT_MAX:
                if rng.random() < APPLE_REGROW_CHANCE:
                    node.fruit += 1

        time_of_day = world.clock.time_of_day
        for creature in world.store.wildlife.values():
            if update_creature(creature, world.grid, time_of_day, rng):
                events.append(
                    OutcomeEvent(
                        EventKind.WILDLIFE_MOVED,
                        {"creature": creature.id, "to": [creature.position.row, creature.position.col]},
                    )
                )

        self._update_vitals(world)
        return events

    def _update_vitals(self, world: WorldState) -> None:
        vitals = world.player.vitals
        vitals.warmth = round(drift_warmth(vitals.warmth, world.player_temperature()), 2)
        vitals.adjust("hunger", HUNGER_PER_TICK)
        vitals.adjust("thirst", THIRST_PER_TICK)
        if (
            vitals.hunger >= STARVATION_THRESHOLD
            or vitals.thirst >= STARVATION_THRESHOLD
            or vitals.warmth <= HYPOTHERMIA_THRESHOLD
        ):
            vitals.adjust("health", -EXPOSURE_DAMAGE)
