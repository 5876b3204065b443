from __future__ import annotations

import pytest

from rubber_duck.actions import intents as i
from rubber_duck.actions.outcomes import EventKind
from rubber_duck.actions.resolver import ActionResolver
from rubber_duck.blueprints import BlueprintEngine
from rubber_duck.errors import ErrorKind, InvalidArgument, PreconditionFailed
from rubber_duck.models import FireState, Position
from rubber_duck.registry import get_item
from rubber_duck.skills import Skill, xp_for_level
from rubber_duck.state import WorldState, new_world

FOREST = Position(8, 6)


def _crafter() -> WorldState:
    world = new_world(21)
    world.player.position = FOREST
    for item_id in ("sharp_stone", "stick", "plant_fiber"):
        world.player.inventory.add(item_id, 2)
    return world


def test_stone_knife_completes_exactly_once() -> None:
    world = _crafter()
    resolver = ActionResolver()

    created = resolver.resolve(world, i.Create("stone knife"))
    assert created.success
    assert created.delta.ticks == 1

    resolver.resolve(world, i.Use("sharp stone"))
    resolver.resolve(world, i.Use("stick"))
    finished = resolver.resolve(world, i.Use("plant fiber"))

    assert finished.find(EventKind.BLUEPRINT_COMPLETED)
    assert finished.find(EventKind.LEVEL_UP)[0].data == {"skill": "stonemasonry", "level": 2}
    assert world.player.inventory.count("stone_knife") == 1
    assert world.blueprints.open == {}
    assert world.player.skills.skills["stonemasonry"].xp == 15

    again = resolver.resolve(world, i.Use("plant fiber"))
    assert not again.success
    assert world.player.inventory.count("stone_knife") == 1
    assert world.player.inventory.count("plant_fiber") == 1
    assert world.player.skills.skills["stonemasonry"].xp == 15


def test_supplying_the_wrong_item_changes_nothing() -> None:
    world = _crafter()
    world.player.inventory.add("log")
    resolver = ActionResolver()
    resolver.resolve(world, i.Create("stone knife"))
    tick = world.clock.tick

    outcome = resolver.resolve(world, i.Use("log", "blueprint"))

    assert outcome.error == ErrorKind.PRECONDITION_FAILED
    assert world.player.inventory.count("log") == 1
    blueprint = next(iter(world.blueprints.open.values()))
    assert [line.supplied for line in blueprint.lines] == [0, 0, 0]
    assert world.clock.tick == tick


def test_campfire_needs_survival_skill() -> None:
    world = _crafter()

    outcome = ActionResolver().resolve(world, i.Create("campfire"))

    assert outcome.error == ErrorKind.PRECONDITION_FAILED
    assert world.blueprints.open == {}
    assert world.clock.tick == 0


def test_campfire_is_built_where_it_was_planned() -> None:
    world = new_world(21)
    world.player.position = FOREST
    world.player.skills.skills["survival"] = Skill(level=5, xp=xp_for_level(5))
    for item_id, quantity in (("stone", 4), ("kindling", 1), ("log", 2)):
        world.player.inventory.add(item_id, quantity)
    resolver = ActionResolver()

    created = resolver.resolve(world, i.Create("campfire"))
    assert created.find(EventKind.BLUEPRINT_CREATED)[0].data["owner"] == "tile/8/6"

    assert resolver.resolve(world, i.Move("east")).success
    away = resolver.resolve(world, i.Use("stone", "campfire"))
    assert away.error == ErrorKind.PRECONDITION_FAILED
    assert resolver.resolve(world, i.Move("west")).success

    for _ in range(4):
        assert resolver.resolve(world, i.Use("stone", "campfire")).success
    assert resolver.resolve(world, i.Use("kindling")).success
    resolver.resolve(world, i.Use("log"))
    done = resolver.resolve(world, i.Use("log"))

    assert done.find(EventKind.BLUEPRINT_COMPLETED)
    campfire = world.store.fires["campfire/8/6"]
    assert campfire.state == FireState.COLD
    assert world.player.inventory.summary() == {}
    assert resolver.resolve(world, i.Create("campfire")).error == ErrorKind.PRECONDITION_FAILED


def test_create_resumes_an_open_project() -> None:
    world = _crafter()
    resolver = ActionResolver()
    first = resolver.resolve(world, i.Create("stone knife"))
    resolver.resolve(world, i.Use("stick"))

    again = resolver.resolve(world, i.Create("stone knife"))

    assert again.find(EventKind.BLUEPRINT_RESUMED)
    assert again.delta.ticks == 0
    assert len(world.blueprints.open) == 1
    assert first.find(EventKind.BLUEPRINT_CREATED)[0].data["blueprint"] == "bp-1"


def test_duplicate_policies() -> None:
    world = _crafter()

    rejecting = BlueprintEngine(duplicate_policy="reject")
    rejecting.create(world.blueprints, world.store, "stone knife")
    with pytest.raises(PreconditionFailed):
        rejecting.create(world.blueprints, world.store, "stone knife")

    parallel = BlueprintEngine(duplicate_policy="parallel")
    result = parallel.create(world.blueprints, world.store, "stone knife")
    assert result.resumed is False
    assert sorted(world.blueprints.open) == ["bp-1", "bp-2"]


def test_unknown_recipe() -> None:
    world = _crafter()

    with pytest.raises(InvalidArgument):
        BlueprintEngine().create(world.blueprints, world.store, "spaceship")


def test_examining_a_project_shows_progress() -> None:
    world = _crafter()
    resolver = ActionResolver()
    resolver.resolve(world, i.Create("stone knife"))
    resolver.resolve(world, i.Use("stick"))

    outcome = resolver.resolve(world, i.Examine("blueprint"))

    assert outcome.success
    details = outcome.find(EventKind.EXAMINED)[0].data["blueprints"][0]
    assert details["lines"] == [["sharp_stone", 1, 0], ["stick", 1, 1], ["plant_fiber", 1, 0]]
    assert "stick 1/1" in outcome.message


def test_a_second_campfire_cannot_replace_a_burning_one() -> None:
    world = new_world(21)
    world.player.position = FOREST
    world.player.skills.skills["survival"] = Skill(level=5, xp=xp_for_level(5))
    for item_id, quantity in (("stone", 8), ("kindling", 2), ("log", 4)):
        world.player.inventory.add(item_id, quantity)
    resolver = ActionResolver(blueprints=BlueprintEngine(duplicate_policy="parallel"))

    assert resolver.resolve(world, i.Create("campfire")).success
    assert resolver.resolve(world, i.Create("campfire")).success
    assert sorted(world.blueprints.open) == ["bp-1", "bp-2"]
    for item_id, quantity in (("stone", 4), ("kindling", 1), ("log", 2)):
        for _ in range(quantity):
            assert resolver.resolve(world, i.Use(item_id, "campfire")).success
    assert list(world.blueprints.open) == ["bp-1"]

    campfire = world.store.fires["campfire/8/6"]
    campfire.state = FireState.ROARING
    campfire.fuel = 80
    tick = world.clock.tick

    outcome = resolver.resolve(world, i.Use("stone", "campfire"))

    assert outcome.error == ErrorKind.PRECONDITION_FAILED
    assert outcome.message == "A campfire already stands here."
    assert world.store.fires["campfire/8/6"].state == FireState.ROARING
    assert world.store.fires["campfire/8/6"].fuel == 80
    assert world.player.inventory.count("stone") == 4
    assert [line.supplied for line in world.blueprints.open["bp-1"].lines] == [0, 0, 0]
    assert world.clock.tick == tick


def test_finished_item_is_set_down_when_the_pack_is_full() -> None:
    world = _crafter()
    resolver = ActionResolver()
    resolver.resolve(world, i.Create("stone knife"))
    resolver.resolve(world, i.Use("sharp stone"))
    resolver.resolve(world, i.Use("stick"))
    inventory = world.player.inventory
    inventory.capacity = inventory.weight() - get_item("plant_fiber").weight

    finished = resolver.resolve(world, i.Use("plant fiber"))

    assert finished.success
    assert finished.find(EventKind.BLUEPRINT_COMPLETED)[0].data["location"] == FOREST.key()
    assert "set it down" in finished.message
    assert inventory.count("stone_knife") == 0
    assert world.store.ground[FOREST.key()].count("stone_knife") == 1
