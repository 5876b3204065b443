from __future__ import annotations

import random

from rubber_duck.actions import intents as i
from rubber_duck.actions.outcomes import EventKind
from rubber_duck.actions.resolver import ActionResolver
from rubber_duck.entities import FIREPLACE
from rubber_duck.errors import ErrorKind
from rubber_duck.models import CABIN_POSITION, FireState, Position, Room
from rubber_duck.state import WorldState, new_world

FOREST = Position(8, 6)


class FixedRandom(random.Random):
    """Every roll lands on the same value, so skill checks are predictable."""

    def __init__(self, roll: float = 0.0) -> None:
        super().__init__(0)
        self.roll = roll

    def random(self) -> float:
        return self.roll


def _world_at(position: Position, room: Room | None = None, roll: float = 0.0) -> WorldState:
    world = new_world(9)
    world.player.position = position
    world.player.room = room
    world.rng = FixedRandom(roll)
    return world


def test_foraging_never_takes_more_than_the_bush_holds() -> None:
    world = _world_at(FOREST)
    world.store.nodes["bush/8/6"].cooldown_ticks = 10_000
    resolver = ActionResolver()

    found = 0
    errors = set()
    for _ in range(50):
        world.player.vitals.energy = 100.0
        outcome = resolver.resolve(world, i.Use("hands", "bush"))
        found += len(outcome.find(EventKind.FORAGED))
        if not outcome.success:
            errors.add(outcome.error)
        assert world.store.nodes["bush/8/6"].yield_remaining >= 0

    assert found == 8
    assert errors == {ErrorKind.RESOURCE_EXHAUSTED}
    assert world.store.nodes["bush/8/6"].yield_remaining == 0
    assert world.player.inventory.count("stick") == 8


def test_chopping_fells_a_tree_after_enough_hits() -> None:
    world = _world_at(FOREST)
    world.player.inventory.add("axe")
    variety = world.store.nodes["tree/8/6"].variety
    resolver = ActionResolver()

    outcomes = [resolver.resolve(world, i.Chop("tree")) for _ in range(3)]

    assert all(outcome.success for outcome in outcomes)
    assert not outcomes[1].find(EventKind.TREE_FELLED)
    assert outcomes[2].find(EventKind.TREE_FELLED)
    assert world.player.inventory.count("log") == (1 if variety == "apple" else 2)
    assert world.player.inventory.first("axe").durability == 57
    assert world.store.nodes["tree/8/6"].yield_remaining == 2
    assert world.player.vitals.energy == 76.0


def test_chopping_needs_an_axe() -> None:
    world = _world_at(FOREST)
    outcome = ActionResolver().resolve(world, i.Chop("tree"))

    assert outcome.error == ErrorKind.PRECONDITION_FAILED
    assert world.clock.tick == 0


def test_splitting_firewood_in_the_woodshed() -> None:
    world = _world_at(CABIN_POSITION, Room.WOODSHED)

    outcome = ActionResolver().resolve(world, i.Chop("chopping block"))

    assert outcome.success
    assert outcome.delta.ticks == 2
    assert world.player.inventory.count("firewood") == 2
    woodshed = world.store.pile(Room.WOODSHED.value)
    assert woodshed.count("log") == 5
    assert woodshed.first("axe").durability == 59


def test_a_missed_swing_at_the_block_hurts() -> None:
    world = _world_at(CABIN_POSITION, Room.WOODSHED, roll=0.999)

    outcome = ActionResolver().resolve(world, i.Use("axe", "log"))

    assert outcome.success
    injured = outcome.find(EventKind.INJURED)
    assert injured
    assert world.player.vitals.health == 100.0 - injured[0].data["damage"]
    assert 95.0 <= world.player.vitals.health <= 99.0
    assert world.store.pile(Room.WOODSHED.value).count("log") == 6


def test_lighting_the_cabin_fire() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_MAIN)
    resolver = ActionResolver()

    assert resolver.resolve(world, i.Light("fire")).error == ErrorKind.PRECONDITION_FAILED

    stoked = resolver.resolve(world, i.Stoke("kindling", "fire"))
    assert stoked.success
    fire = world.store.fires[FIREPLACE]
    assert (fire.fuel, fire.tinder_ready, fire.state) == (10, True, FireState.COLD)

    assert resolver.resolve(world, i.Stoke("kindling", "fireplace")).success
    lit = resolver.resolve(world, i.Light("fire"))

    assert lit.success
    assert lit.find(EventKind.FIRE_LIT)
    fire = world.store.fires[FIREPLACE]
    assert fire.state == FireState.BURNING
    assert fire.fuel == 17
    cabin = world.store.pile(Room.CABIN_MAIN.value)
    assert cabin.first("matchbox").durability == 19
    assert cabin.count("kindling") == 0
    assert resolver.resolve(world, i.Light("fire")).error == ErrorKind.PRECONDITION_FAILED


def test_resting_and_cooking_by_a_lit_fire() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_MAIN)
    world.store.fires[FIREPLACE].fuel = 60
    world.store.fires[FIREPLACE].state = FireState.ROARING
    world.player.inventory.add("small_fish")
    world.player.vitals.energy = 50.0
    resolver = ActionResolver()

    cooked = resolver.resolve(world, i.Use("small fish", "fire"))
    assert cooked.success
    assert world.player.inventory.count("cooked_fish") == 1
    assert world.player.inventory.count("small_fish") == 0

    rested = resolver.resolve(world, i.Rest())
    assert rested.find(EventKind.RESTED)[0].data["by_fire"] is True
    assert world.player.vitals.energy == 88.0


def test_stoking_something_that_will_not_burn() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_MAIN)
    world.player.inventory.add("stone")

    outcome = ActionResolver().resolve(world, i.Stoke("stone", "fire"))

    assert outcome.error == ErrorKind.INFEASIBLE
    assert world.player.inventory.count("stone") == 1


def test_fishing_from_the_terrace() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_TERRACE)

    outcome = ActionResolver().resolve(world, i.Fish())

    assert outcome.success
    assert outcome.delta.ticks == 3
    assert outcome.find(EventKind.FISHED)[0].data["item"] == "small_fish"
    assert world.player.inventory.count("small_fish") == 1


def test_no_fishing_indoors() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_MAIN)

    assert ActionResolver().resolve(world, i.Fish()).error == ErrorKind.PRECONDITION_FAILED


def test_eating_and_drinking() -> None:
    world = _world_at(CABIN_POSITION)
    world.player.inventory.add("apple")
    resolver = ActionResolver()

    assert resolver.resolve(world, i.Use("apple")).success
    assert world.player.vitals.hunger == 10.5
    assert world.player.inventory.count("apple") == 0

    assert resolver.resolve(world, i.Use("hands", "water")).success
    assert world.player.vitals.thirst == 0.5


def test_no_water_far_from_the_lake() -> None:
    world = _world_at(Position(10, 5))

    outcome = ActionResolver().resolve(world, i.Use("hands", "water"))

    assert outcome.error == ErrorKind.PRECONDITION_FAILED
    assert world.player.vitals.thirst == 20.0


def test_picking_apples() -> None:
    world = _world_at(FOREST)
    tree = world.store.nodes["tree/8/6"]
    tree.variety = "apple"
    tree.fruit = 4

    outcome = ActionResolver().resolve(world, i.Use("hands", "tree"))

    assert outcome.success
    assert world.player.inventory.count("apple") == 3
    assert world.store.nodes["tree/8/6"].fruit >= 1


def test_knapping_two_stones() -> None:
    world = _world_at(FOREST)
    world.player.inventory.add("stone", 2)

    outcome = ActionResolver().resolve(world, i.Use("stone", "stone"))

    assert outcome.success
    assert world.player.inventory.count("sharp_stone") == 1
    assert world.player.inventory.count("stone") == 0


def test_whittling_a_log_with_a_knife() -> None:
    world = _world_at(FOREST)
    world.player.inventory.add("knife")
    world.player.inventory.add("log")

    outcome = ActionResolver().resolve(world, i.Use("knife", "log"))

    assert outcome.success
    assert world.player.inventory.count("kindling") == 4
    assert world.player.inventory.first("knife").durability == 49


def test_unmatched_use_does_nothing() -> None:
    world = _world_at(FOREST)
    world.player.inventory.add("strange_compass")
    world.player.inventory.add("log")
    resolver = ActionResolver()

    assert resolver.resolve(world, i.Use("compass")).error == ErrorKind.INFEASIBLE
    nothing = resolver.resolve(world, i.Use("log", "tree"))
    assert nothing.error == ErrorKind.INFEASIBLE
    assert nothing.message == "Nothing happens."
    assert resolver.resolve(world, i.Use("log", "moon")).error == ErrorKind.INVALID_ARGUMENT
    assert resolver.resolve(world, i.Use("axe", "tree")).error == ErrorKind.PRECONDITION_FAILED
    assert world.player.inventory.summary() == {"strange_compass": 1, "log": 1}
    assert world.clock.tick == 0


def test_observing_wildlife() -> None:
    world = _world_at(FOREST)

    outcome = ActionResolver().resolve(world, i.Observe())

    assert outcome.success
    assert outcome.delta.ticks == 2
    assert outcome.find(EventKind.OBSERVED)


def test_talking_to_the_duck() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_MAIN)

    outcome = ActionResolver(duck_name="Bill").resolve(world, i.Talk("Why does my loop never end?"))

    assert outcome.success
    spoke = outcome.find(EventKind.DUCK_SPOKE)[0]
    assert spoke.data["duck"] == "Bill"
    assert "Bill: ..." in outcome.message
    assert outcome.delta.ticks == 1


def test_the_duck_is_not_everywhere() -> None:
    world = _world_at(FOREST)

    assert ActionResolver().resolve(world, i.Talk("hello")).error == ErrorKind.PRECONDITION_FAILED


def test_using_an_item_on_another_item_does_nothing() -> None:
    world = _world_at(FOREST)
    world.player.inventory.add("matchbox")
    world.player.inventory.add("rubber_duck")

    outcome = ActionResolver().resolve(world, i.Use("matchbox", "duck"))

    assert outcome.error == ErrorKind.INFEASIBLE
    assert outcome.message == "Nothing happens."
    assert world.player.inventory.first("matchbox").durability == 20


def test_stoking_a_lit_fire_brightens_it() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_MAIN)
    fire = world.store.fires[FIREPLACE]
    fire.state = FireState.BURNING
    fire.fuel = 35
    world.player.inventory.add("log")

    outcome = ActionResolver().resolve(world, i.Stoke("log", "fire"))

    assert outcome.success
    stoked = outcome.find(EventKind.FIRE_STOKED)[0].data
    assert (stoked["fuel"], stoked["state"]) == (95, "roaring")
    assert world.store.fires[FIREPLACE].state == FireState.ROARING
    assert world.store.fires[FIREPLACE].fuel == 89


def test_fishing_wears_the_rod() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_TERRACE)
    world.player.inventory.add("fishing_rod")

    outcome = ActionResolver().resolve(world, i.Fish())

    assert outcome.success
    assert world.player.inventory.first("fishing_rod").durability == 29
    assert not outcome.find(EventKind.TOOL_BROKEN)


def test_a_worn_rod_breaks_on_the_last_cast() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_TERRACE)
    world.player.inventory.add("fishing_rod")
    world.player.inventory.first("fishing_rod").durability = 1

    outcome = ActionResolver().resolve(world, i.Fish())

    assert outcome.success
    assert outcome.find(EventKind.TOOL_BROKEN)[0].data == {"item": "fishing_rod"}
    assert world.player.inventory.count("fishing_rod") == 0
    assert world.player.inventory.count("small_fish") == 1


def test_brewing_and_drinking_tea() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_TERRACE)
    inventory = world.player.inventory
    inventory.add("kettle")
    resolver = ActionResolver()

    filled = resolver.resolve(world, i.Use("kettle", "water"))
    assert filled.find(EventKind.KETTLE_FILLED)
    assert inventory.summary() == {"water_kettle": 1}

    world.player.room = Room.CABIN_MAIN
    fire = world.store.fires[FIREPLACE]
    fire.state = FireState.BURNING
    fire.fuel = 35
    heated = resolver.resolve(world, i.Use("kettle of water"))
    assert heated.find(EventKind.KETTLE_HEATED)
    assert inventory.summary() == {"hot_water_kettle": 1}

    inventory.add("tea_cup")
    inventory.add("wild_herbs")
    brewed = resolver.resolve(world, i.Use("herbs", "cup"))
    assert brewed.find(EventKind.TEA_BREWED)
    assert inventory.summary() == {"kettle": 1, "herbal_tea": 1}
    assert brewed.find(EventKind.XP_AWARDED)[0].data == {"skill": "foraging", "amount": 2}

    vitals = world.player.vitals
    vitals.mood = 50.0
    vitals.energy = 50.0
    vitals.warmth = 40.0
    drank = resolver.resolve(world, i.Use("tea"))

    warmed = drank.find(EventKind.WARMED)[0].data
    assert (warmed["warmth"], warmed["mood"], warmed["energy"]) == (52.0, 68.0, 56.0)
    assert inventory.summary() == {"kettle": 1, "tea_cup": 1}


def test_filling_the_kettle_needs_open_water() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_MAIN)
    world.player.inventory.add("kettle")

    outcome = ActionResolver().resolve(world, i.Use("kettle", "water"))

    assert outcome.error == ErrorKind.PRECONDITION_FAILED
    assert world.player.inventory.summary() == {"kettle": 1}


def test_tea_is_brewed_inside_the_cabin() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_TERRACE)
    for item_id in ("hot_water_kettle", "tea_cup", "wild_herbs"):
        world.player.inventory.add(item_id)

    outcome = ActionResolver().resolve(world, i.Use("hot kettle", "tea cup"))

    assert outcome.error == ErrorKind.PRECONDITION_FAILED
    assert world.player.inventory.count("herbal_tea") == 0


def test_wrapping_up_in_the_blanket() -> None:
    world = _world_at(FOREST)
    world.player.inventory.add("wool_blanket")
    world.player.vitals.warmth = 30.0
    world.player.vitals.mood = 50.0

    outcome = ActionResolver().resolve(world, i.Use("blanket"))

    assert outcome.find(EventKind.WARMED)[0].data["warmth"] == 40.0
    assert world.player.vitals.mood == 55.0
    assert world.player.inventory.count("wool_blanket") == 1


def test_reading_the_tutorial_to_the_end() -> None:
    world = _world_at(CABIN_POSITION, Room.CABIN_MAIN)
    world.player.inventory.add("tutorial_book")
    resolver = ActionResolver()

    first = resolver.resolve(world, i.Use("tutorial book"))
    assert first.message.startswith("Page 1 of 12:")
    assert first.find(EventKind.BOOK_READ)[0].data == {"item": "tutorial_book", "page": 1, "pages": 12}

    for _ in range(10):
        assert not resolver.resolve(world, i.Use("tutorial book", "next page")).find(EventKind.TUTORIAL_COMPLETED)
    last = resolver.resolve(world, i.Use("tutorial book", "next page"))

    assert last.find(EventKind.TUTORIAL_COMPLETED)
    assert world.player.bookmarks["tutorial_book"] == 12
    assert world.player.tutorial_reward_claimed is True
    inventory = world.player.inventory
    assert (inventory.count("knife"), inventory.count("kindling"), inventory.count("apple")) == (1, 5, 3)

    again = resolver.resolve(world, i.Use("tutorial book"))
    assert again.message.startswith("Page 12 of 12:")
    assert not again.find(EventKind.TUTORIAL_COMPLETED)
    assert inventory.count("knife") == 1

    back = resolver.resolve(world, i.Use("tutorial book", "previous page"))
    assert back.find(EventKind.BOOK_READ)[0].data["page"] == 11


def test_the_old_book_lifts_the_mood() -> None:
    world = _world_at(FOREST)
    world.player.inventory.add("old_book")
    world.player.vitals.mood = 50.0

    outcome = ActionResolver().resolve(world, i.Use("old book"))

    assert outcome.find(EventKind.BOOK_READ)[0].data["pages"] == 1
    assert world.player.vitals.mood == 53.0
    assert world.player.inventory.count("old_book") == 1


def test_kicking_an_apple_tree() -> None:
    world = _world_at(FOREST)
    tree = world.store.nodes["tree/8/6"]
    tree.variety = "apple"
    tree.fruit = 2

    outcome = ActionResolver().resolve(world, i.Use("foot", "tree"))

    assert outcome.find(EventKind.TREE_KICKED)[0].data == {"tree": "apple", "dropped": "apple"}
    assert world.player.inventory.count("apple") == 1


def test_kicking_a_bare_tree_stubs_a_toe() -> None:
    world = _world_at(FOREST)
    tree = world.store.nodes["tree/8/6"]
    tree.variety = "pine"
    tree.fruit = 0
    world.player.vitals.mood = 50.0

    outcome = ActionResolver().resolve(world, i.Use("feet", "tree"))

    assert outcome.find(EventKind.TREE_KICKED)[0].data == {"tree": "pine", "dropped": None}
    assert world.player.vitals.mood == 49.0
