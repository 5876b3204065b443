from __future__ import annotations

from dataclasses import dataclass

import pytest

from rubber_duck.actions import intents as i
from rubber_duck.actions.outcomes import EventKind
from rubber_duck.actions.resolver import ActionResolver
from rubber_duck.entities import FIRE_DESCRIPTIONS
from rubber_duck.errors import ErrorKind, PreconditionFailed
from rubber_duck.models import CABIN_POSITION, START_POSITION, FireState, Position, Room
from rubber_duck.persistence import snapshot
from rubber_duck.state import WorldState, new_world


class StubTelemetry:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def emit(self, event_name: str, payload: dict) -> None:
        self.events.append((event_name, payload))


class HalfwayInteractions:
    duck_name = "Quackers"

    def rest(self, world: WorldState):
        world.player.vitals.energy = 1.0
        world.store.pile(world.player.location_key).add("log")
        raise PreconditionFailed("You change your mind.")


class ExplodingInteractions:
    duck_name = "Quackers"

    def rest(self, world: WorldState):
        world.player.vitals.energy = 1.0
        raise RuntimeError("boom")


def _walk_to_cabin(resolver: ActionResolver, world: WorldState) -> None:
    for _ in range(4):
        assert resolver.resolve(world, i.Move("north")).success


def _step_inside(resolver: ActionResolver, world: WorldState) -> None:
    _walk_to_cabin(resolver, world)
    assert resolver.resolve(world, i.Open("door")).success
    assert resolver.resolve(world, i.Enter("cabin")).success


def test_every_intent_has_a_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    ActionResolver()

    @dataclass(frozen=True)
    class Dance:
        pass

    monkeypatch.setattr(i, "INTENT_TYPES", (*i.INTENT_TYPES, Dance))
    with pytest.raises(TypeError):
        ActionResolver()


def test_look_lists_walkable_exits() -> None:
    world = new_world(7)
    outcome = ActionResolver().resolve(world, i.Look())

    assert outcome.success
    looked = outcome.find(EventKind.LOOKED)[0]
    assert looked.data["exits"] == ["east", "north", "west"]
    assert looked.data["biome"] == "path"
    assert world.clock.tick == 0


def test_walking_north_reaches_the_cabin() -> None:
    world = new_world(7)
    resolver = ActionResolver()

    _walk_to_cabin(resolver, world)

    assert world.player.position == CABIN_POSITION
    assert world.clock.tick == 4
    assert world.player.vitals.energy == 92.0
    assert "log cabin" in resolver.resolve(world, i.Look()).message


def test_cold_fireplace_seen_from_the_clearing_changes_nothing() -> None:
    world = new_world(7)
    resolver = ActionResolver()
    _walk_to_cabin(resolver, world)
    before = snapshot(world).model_dump()

    outcome = resolver.resolve(world, i.Examine("fireplace"))

    assert outcome.success
    assert outcome.message == FIRE_DESCRIPTIONS[FireState.COLD]
    assert "old ash" in outcome.message
    assert outcome.delta.ticks == 0
    assert snapshot(world).model_dump() == before


def test_walking_off_the_map_is_an_invalid_argument() -> None:
    world = new_world(7)
    outcome = ActionResolver().resolve(world, i.Move("south"))

    assert not outcome.success
    assert outcome.error == ErrorKind.INVALID_ARGUMENT
    assert world.player.position == START_POSITION
    assert world.clock.tick == 0
    assert world.player.vitals.energy == 100.0


def test_the_lake_blocks_the_way() -> None:
    world = new_world(7)
    resolver = ActionResolver()
    _walk_to_cabin(resolver, world)

    outcome = resolver.resolve(world, i.Move("north"))

    assert outcome.error == ErrorKind.PRECONDITION_FAILED
    assert world.player.position == CABIN_POSITION
    assert world.clock.tick == 4


def test_snowy_forest_is_slow_going() -> None:
    world = new_world(7)
    world.player.position = Position(5, 7)

    outcome = ActionResolver().resolve(world, i.Move("east"))

    assert outcome.success
    assert outcome.delta.ticks == 2
    assert world.player.vitals.energy == 96.0


def test_exhaustion_stops_walking() -> None:
    world = new_world(7)
    world.player.vitals.energy = 1.0

    outcome = ActionResolver().resolve(world, i.Move("north"))

    assert outcome.error == ErrorKind.PRECONDITION_FAILED
    assert world.player.position == START_POSITION


def test_closed_door_keeps_you_out() -> None:
    world = new_world(7)
    resolver = ActionResolver()
    _walk_to_cabin(resolver, world)

    outcome = resolver.resolve(world, i.Enter("cabin"))

    assert outcome.error == ErrorKind.PRECONDITION_FAILED
    assert world.player.room is None


def test_moving_between_cabin_rooms() -> None:
    world = new_world(7)
    resolver = ActionResolver()
    _step_inside(resolver, world)
    assert world.player.room == Room.CABIN_MAIN

    assert resolver.resolve(world, i.Move("west")).success
    assert world.player.room == Room.WOODSHED
    assert resolver.resolve(world, i.Exit()).success
    assert world.player.room == Room.CABIN_MAIN
    assert resolver.resolve(world, i.Move("north")).success
    assert world.player.room == Room.CABIN_TERRACE
    assert resolver.resolve(world, i.Move("south")).success
    assert resolver.resolve(world, i.Move("south")).success
    assert world.player.room is None
    assert world.player.position == CABIN_POSITION


def test_opening_an_open_door_is_free() -> None:
    world = new_world(7)
    resolver = ActionResolver()
    _walk_to_cabin(resolver, world)
    assert resolver.resolve(world, i.Open("door")).delta.ticks == 1

    again = resolver.resolve(world, i.Open("door"))

    assert again.success
    assert again.delta.ticks == 0
    assert again.find(EventKind.OPENED)[0].data["changed"] is False


def test_fixtures_must_be_in_reach() -> None:
    world = new_world(7)
    resolver = ActionResolver()
    _walk_to_cabin(resolver, world)

    assert resolver.resolve(world, i.Open("cupboard")).error == ErrorKind.INVALID_ARGUMENT
    assert resolver.resolve(world, i.Open("wardrobe")).error == ErrorKind.INVALID_ARGUMENT


def test_cellar_hatch_is_locked() -> None:
    world = new_world(7)
    resolver = ActionResolver()
    _step_inside(resolver, world)

    outcome = resolver.resolve(world, i.Open("cellar hatch"))

    assert outcome.error == ErrorKind.PRECONDITION_FAILED
    assert world.store.fixtures["cellar_hatch"].is_open is False


def test_open_cupboard_exposes_its_contents() -> None:
    world = new_world(7)
    resolver = ActionResolver()
    _step_inside(resolver, world)

    assert resolver.resolve(world, i.Take("kettle")).error == ErrorKind.PRECONDITION_FAILED
    opened = resolver.resolve(world, i.Open("cupboard"))
    assert opened.find(EventKind.OPENED)[0].data["items"] == {"tea_cup": 1, "kettle": 1}
    assert resolver.resolve(world, i.Take("kettle")).success
    assert world.player.inventory.has("kettle")


def test_take_over_capacity_changes_nothing() -> None:
    world = new_world(3, inventory_capacity=10.0)
    pile = world.store.pile(START_POSITION.key())
    pile.add("log", 5)
    resolver = ActionResolver()

    outcome = resolver.resolve(world, i.Take("log", 3))

    assert outcome.error == ErrorKind.RESOURCE_EXHAUSTED
    assert world.store.pile(START_POSITION.key()).count("log") == 5
    assert world.player.inventory.summary() == {}
    assert world.clock.tick == 0

    taken = resolver.resolve(world, i.Take("logs", 2))
    assert taken.success
    assert taken.delta.inventory_changes == {"log": 2}
    assert world.player.inventory.weight() == 10.0


def test_take_and_drop() -> None:
    world = new_world(3)
    world.store.pile(START_POSITION.key()).add("stick", 2)
    resolver = ActionResolver()

    assert resolver.resolve(world, i.Take("stick", 2)).success
    assert resolver.resolve(world, i.Drop("stick", 3)).error == ErrorKind.PRECONDITION_FAILED
    dropped = resolver.resolve(world, i.Drop("stick"))

    assert dropped.delta.inventory_changes == {"stick": -1}
    assert world.player.inventory.count("stick") == 1
    assert world.store.pile(START_POSITION.key()).count("stick") == 1
    assert resolver.resolve(world, i.Take("stick", 0)).error == ErrorKind.INVALID_ARGUMENT


def test_queries_cost_no_time() -> None:
    world = new_world(3)
    resolver = ActionResolver()

    for intent in (i.Look(), i.Inventory(), i.Status(), i.Examine("self")):
        outcome = resolver.resolve(world, intent)
        assert outcome.success
        assert outcome.delta.ticks == 0
    assert world.clock.tick == 0


def test_status_reports_time_and_vitals() -> None:
    world = new_world(3)
    outcome = ActionResolver().resolve(world, i.Status())

    data = outcome.find(EventKind.STATUS_REPORTED)[0].data
    assert data["time"] == "Day 1, 08:00 (morning)"
    assert data["season"] == "autumn"
    assert data["vitals"]["health"] == 100.0
    assert data["skills"]["woodcutting"] == 10


def test_examining_something_unknown() -> None:
    world = new_world(3)
    outcome = ActionResolver().resolve(world, i.Examine("unicorn"))

    assert outcome.error == ErrorKind.INVALID_ARGUMENT


def test_wait_and_simulate_advance_the_clock() -> None:
    world = new_world(3)
    resolver = ActionResolver()

    assert resolver.resolve(world, i.Wait("long")).delta.ticks == 6
    assert resolver.resolve(world, i.Simulate(3)).success
    assert world.clock.tick == 9
    assert resolver.resolve(world, i.Simulate(11)).error == ErrorKind.INVALID_ARGUMENT
    assert resolver.resolve(world, i.Wait("forever")).error == ErrorKind.INVALID_ARGUMENT
    assert world.clock.tick == 9


def test_rejected_intent_rolls_back_partial_changes() -> None:
    world = new_world(3)
    resolver = ActionResolver(interactions=HalfwayInteractions())

    outcome = resolver.resolve(world, i.Rest())

    assert not outcome.success
    assert outcome.message == "You change your mind."
    assert outcome.find(EventKind.FAILED)[0].data["error"] == "precondition_failed"
    assert world.player.vitals.energy == 100.0
    assert world.store.pile(START_POSITION.key()).count("log") == 0


def test_crashing_handler_rolls_back_and_propagates() -> None:
    world = new_world(3)
    resolver = ActionResolver(interactions=ExplodingInteractions())

    with pytest.raises(RuntimeError):
        resolver.resolve(world, i.Rest())
    assert world.player.vitals.energy == 100.0


def test_outcomes_are_published_to_telemetry() -> None:
    world = new_world(3)
    telemetry = StubTelemetry()
    resolver = ActionResolver(telemetry=telemetry)

    resolver.resolve(world, i.Move("north"))
    resolver.resolve(world, i.Move("south"))
    resolver.resolve(world, i.Move("south"))

    names = [name for name, _ in telemetry.events]
    assert "moved" in names
    assert "time_advanced" in names
    assert names[-1] == "failed"
    assert all(payload["intent"] == "move" for _, payload in telemetry.events)


def test_looking_around_leaves_no_empty_piles_behind() -> None:
    world = new_world(9)
    world.player.position = Position(8, 6)
    key = world.player.position.key()
    world.store.ground.pop(key, None)
    resolver = ActionResolver()

    assert resolver.resolve(world, i.Look()).success
    assert resolver.resolve(world, i.Examine("bush")).success

    assert key not in world.store.ground
