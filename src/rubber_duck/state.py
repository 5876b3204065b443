"""The single world-state aggregate and the factory for fresh worlds."""

from __future__ import annotations

import random
from dataclasses import dataclass, field, fields

from rubber_duck.blueprints import BlueprintLedger
from rubber_duck.entities import CUPBOARD, FIREPLACE, TABLE, EntityStore, Fire, Fixture, Inventory, Player, ResourceNode
from rubber_duck.models import CABIN_POSITION, FireState, Position, Room
from rubber_duck.registry import (
    APPLE_FRUIT_MAX,
    TREE_HITS,
    TREE_VARIETIES,
    TREES_PER_STAND,
    bush_yield,
)
from rubber_duck.world.clock import WorldClock
from rubber_duck.world.grid import WorldGrid
from rubber_duck.world.temperature import compute_temperature
from rubber_duck.world.wildlife import spawn_wildlife

CABIN_ITEMS = (
    ("matchbox", 1),
    ("kindling", 2),
    ("old_book", 1),
    ("tutorial_book", 1),
    ("strange_compass", 1),
    ("ancient_map", 1),
    ("wool_blanket", 1),
    ("wild_herbs", 1),
)


@dataclass(slots=True)
class WorldState:
    seed: int
    clock: WorldClock = field(default_factory=WorldClock)
    grid: WorldGrid = field(default_factory=WorldGrid)
    store: EntityStore = field(default_factory=EntityStore)
    blueprints: BlueprintLedger = field(default_factory=BlueprintLedger)
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    @property
    def player(self) -> Player:
        return self.store.player

    def restore_from(self, other: WorldState) -> None:
        for item in fields(self):
            setattr(self, item.name, getattr(other, item.name))

    def player_fire_state(self) -> FireState:
        player = self.player
        if player.room == Room.CABIN_MAIN:
            return self.store.fires[FIREPLACE].state
        if player.room is None or player.room == Room.CABIN_TERRACE:
            campfire = self.store.fires.get(self.store.campfire_key(player.position))
            if campfire is not None:
                return campfire.state
        return FireState.COLD

    def player_temperature(self) -> float:
        player = self.player
        indoor = player.room in (Room.CABIN_MAIN, Room.WOODSHED)
        return compute_temperature(
            self.grid.tile(player.position).biome,
            self.clock.time_of_day,
            indoor,
            self.player_fire_state(),
            self.grid.weather_at(player.position),
        )


def new_world(seed: int, *, inventory_capacity: float = 50.0, cooldown_ticks: int = 12) -> WorldState:
    rng = random.Random(seed)
    grid = WorldGrid()
    store = EntityStore(player=Player(inventory=Inventory(capacity=inventory_capacity)))

    cabin = store.pile(Room.CABIN_MAIN.value)
    for item_id, quantity in CABIN_ITEMS:
        cabin.add(item_id, quantity)
    store.pile(TABLE).add("rubber_duck")
    store.pile(CUPBOARD).add("tea_cup")
    store.pile(CUPBOARD).add("kettle")
    woodshed = store.pile(Room.WOODSHED.value)
    woodshed.add("log", 6)
    woodshed.add("axe")

    store.fixtures = {
        "door": Fixture("door", "door", (CABIN_POSITION.key(), Room.CABIN_MAIN.value)),
        "cupboard": Fixture("cupboard", "cupboard", (Room.CABIN_MAIN.value,), contents=CUPBOARD),
        "cellar_hatch": Fixture("cellar_hatch", "cellar hatch", (Room.CABIN_MAIN.value,), locked=True),
    }
    store.fires[FIREPLACE] = Fire()

    for position in sorted(grid.tiles, key=lambda pos: (pos.row, pos.col)):
        tile = grid.tile(position)
        if tile.walkable and position != CABIN_POSITION:
            stones = rng.randint(0, 3)
            if stones:
                store.pile(position.key()).add("stone", stones)
        if tile.has("bush"):
            amount = bush_yield(tile.biome)
            store.nodes[f"bush/{position.row}/{position.col}"] = ResourceNode(
                id=f"bush/{position.row}/{position.col}",
                kind="bush",
                position=position,
                yield_remaining=amount,
                max_yield=amount,
                cooldown_ticks=cooldown_ticks,
            )
        if tile.has("trees"):
            store.nodes[f"tree/{position.row}/{position.col}"] = _tree_stand(position, tile.biome, rng, cooldown_ticks)

    store.wildlife = {creature.id: creature for creature in spawn_wildlife(grid, rng)}
    return WorldState(seed=seed, grid=grid, store=store, rng=rng)


def _tree_stand(position: Position, biome, rng: random.Random, cooldown_ticks: int) -> ResourceNode:
    varieties = TREE_VARIETIES[biome]
    variety = rng.choices([name for name, _ in varieties], weights=[weight for _, weight in varieties], k=1)[0]
    return ResourceNode(
        id=f"tree/{position.row}/{position.col}",
        kind="tree",
        position=position,
        yield_remaining=TREES_PER_STAND,
        max_yield=TREES_PER_STAND,
        cooldown_ticks=cooldown_ticks,
        variety=variety,
        hits_required=TREE_HITS[variety],
        fruit=APPLE_FRUIT_MAX // 2 if variety == "apple" else 0,
    )
