"""Versioned world snapshots and the JSON file store that keeps them."""

from __future__ import annotations

import json
import logging
import random
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from rubber_duck.blueprints import Blueprint, BlueprintLedger, BlueprintLine
from rubber_duck.entities import (
    FIREPLACE,
    EntityStore,
    Fire,
    Fixture,
    Inventory,
    ItemInstance,
    ItemList,
    Player,
    ResourceNode,
    Vitals,
)
from rubber_duck.errors import StateCorruption
from rubber_duck.models import CABIN_POSITION, Direction, FireState, Position, Room
from rubber_duck.registry import BOOK_PAGES, ITEMS, RECIPES, TREE_DESCRIPTIONS, TREE_DROPS, TREE_HITS
from rubber_duck.skills import MAX_LEVEL, Skill, SkillBook
from rubber_duck.state import WorldState
from rubber_duck.world.clock import WorldClock
from rubber_duck.world.grid import REGION_WEATHERS, Region, Weather, WorldGrid
from rubber_duck.world.wildlife import SPECIES, Behaviour, Creature

SCHEMA_VERSION = 1
REQUIRED_FIXTURES = ("door", "cupboard", "cellar_hatch")
NODE_KINDS = ("bush", "tree")
_BLUEPRINT_ID = re.compile(r"^bp-(\d+)$")

logger = logging.getLogger("rubber_duck.persistence")


class PositionModel(BaseModel):
    row: int
    col: int


class ItemModel(BaseModel):
    item_id: str
    quantity: int = Field(default=1, ge=1)
    durability: int | None = None


class SkillModel(BaseModel):
    level: int
    xp: int = Field(ge=0)


class VitalsModel(BaseModel):
    health: float
    warmth: float
    energy: float
    mood: float
    hunger: float
    thirst: float


class PlayerModel(BaseModel):
    position: PositionModel
    facing: Direction
    room: Room | None = None
    vitals: VitalsModel
    skills: dict[str, SkillModel]
    inventory: list[ItemModel] = Field(default_factory=list)
    capacity: float = Field(gt=0)
    bookmarks: dict[str, int] = Field(default_factory=dict)
    tutorial_reward_claimed: bool = False


class CreatureModel(BaseModel):
    id: str
    species: str
    position: PositionModel
    behaviour: Behaviour


class FixtureModel(BaseModel):
    id: str
    name: str
    locations: list[str]
    is_open: bool = False
    locked: bool = False
    contents: str | None = None


class FireModel(BaseModel):
    state: FireState
    fuel: int
    tinder_ready: bool = False


class NodeModel(BaseModel):
    id: str
    kind: str
    position: PositionModel
    yield_remaining: int
    max_yield: int
    cooldown_ticks: int = Field(ge=0)
    cooldown_remaining: int = Field(ge=0)
    variety: str | None = None
    progress: int = Field(default=0, ge=0)
    hits_required: int = Field(default=0, ge=0)
    fruit: int = Field(default=0, ge=0)


class BlueprintLineModel(BaseModel):
    item_id: str
    needed: int
    minutes_per_unit: int
    supplied: int


class BlueprintModel(BaseModel):
    id: str
    target: str
    owner: str
    lines: list[BlueprintLineModel]


class WorldSnapshot(BaseModel):
    """Everything needed to rebuild a world exactly, random source included."""

    schema_version: int = Field(default=SCHEMA_VERSION, description="Snapshot layout version")
    seed: int
    tick: int = Field(ge=0)
    rng_state: list[Any] = Field(description="random.Random.getstate() flattened to JSON lists")
    weather: dict[Region, Weather]
    player: PlayerModel
    wildlife: list[CreatureModel] = Field(default_factory=list)
    ground: dict[str, list[ItemModel]] = Field(default_factory=dict)
    fixtures: list[FixtureModel] = Field(default_factory=list)
    fires: dict[str, FireModel] = Field(default_factory=dict)
    nodes: list[NodeModel] = Field(default_factory=list)
    blueprints: list[BlueprintModel] = Field(default_factory=list)
    focus: str | None = None
    next_blueprint_id: int = Field(default=1, ge=1)


def snapshot(world: WorldState) -> WorldSnapshot:
    """Capture ``world`` as a snapshot model."""
    player = world.player
    version, internal, gauss_next = world.rng.getstate()
    return WorldSnapshot(
        seed=world.seed,
        tick=world.clock.tick,
        rng_state=[version, list(internal), gauss_next],
        weather=dict(world.grid.weather),
        player=PlayerModel(
            position=_position_model(player.position),
            facing=player.facing,
            room=player.room,
            vitals=VitalsModel(**player.vitals.as_dict()),
            skills={name: SkillModel(level=skill.level, xp=skill.xp) for name, skill in player.skills.skills.items()},
            inventory=_items_model(player.inventory),
            capacity=player.inventory.capacity,
            bookmarks=dict(player.bookmarks),
            tutorial_reward_claimed=player.tutorial_reward_claimed,
        ),
        wildlife=[
            CreatureModel(
                id=creature.id,
                species=creature.species,
                position=_position_model(creature.position),
                behaviour=creature.behaviour,
            )
            for creature in world.store.wildlife.values()
        ],
        ground={key: _items_model(pile) for key, pile in world.store.ground.items() if pile.items},
        fixtures=[
            FixtureModel(
                id=fixture.id,
                name=fixture.name,
                locations=list(fixture.locations),
                is_open=fixture.is_open,
                locked=fixture.locked,
                contents=fixture.contents,
            )
            for fixture in world.store.fixtures.values()
        ],
        fires={
            key: FireModel(state=fire.state, fuel=fire.fuel, tinder_ready=fire.tinder_ready)
            for key, fire in world.store.fires.items()
        },
        nodes=[
            NodeModel(
                id=node.id,
                kind=node.kind,
                position=_position_model(node.position),
                yield_remaining=node.yield_remaining,
                max_yield=node.max_yield,
                cooldown_ticks=node.cooldown_ticks,
                cooldown_remaining=node.cooldown_remaining,
                variety=node.variety,
                progress=node.progress,
                hits_required=node.hits_required,
                fruit=node.fruit,
            )
            for node in world.store.nodes.values()
        ],
        blueprints=[
            BlueprintModel(
                id=blueprint.id,
                target=blueprint.target,
                owner=blueprint.owner,
                lines=[
                    BlueprintLineModel(
                        item_id=line.item_id,
                        needed=line.needed,
                        minutes_per_unit=line.minutes_per_unit,
                        supplied=line.supplied,
                    )
                    for line in blueprint.lines
                ],
            )
            for blueprint in world.blueprints.open.values()
        ],
        focus=world.blueprints.focus,
        next_blueprint_id=world.blueprints.next_id,
    )


def restore(data: WorldSnapshot | dict[str, Any]) -> WorldState:
    """Rebuild a world from a snapshot, refusing anything inconsistent.

    Raises:
        StateCorruption: the data does not match the schema, has another
            version, or describes an impossible world. Nothing is repaired.
    """
    if isinstance(data, WorldSnapshot):
        model = data
    else:
        version = data.get("schema_version") if isinstance(data, dict) else None
        if version != SCHEMA_VERSION:
            raise StateCorruption(f"Unsupported snapshot version: {version!r}", [f"schema_version={version!r}"])
        try:
            model = WorldSnapshot.model_validate(data)
        except ValidationError as exc:
            problems = [f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()]
            raise StateCorruption("Snapshot does not match the schema", problems) from exc

    problems = validate_snapshot(model)
    if problems:
        raise StateCorruption(f"Snapshot failed validation ({len(problems)} problems)", problems)

    rng = random.Random()
    version, internal, gauss_next = model.rng_state
    rng.setstate((version, tuple(internal), gauss_next))

    player_model = model.player
    inventory = Inventory(capacity=player_model.capacity)
    inventory.items = _instances(player_model.inventory)
    player = Player(
        position=_position(player_model.position),
        facing=player_model.facing,
        room=player_model.room,
        vitals=Vitals(**player_model.vitals.model_dump()),
        skills=SkillBook({name: Skill(level=s.level, xp=s.xp) for name, s in player_model.skills.items()}),
        inventory=inventory,
        bookmarks=dict(player_model.bookmarks),
        tutorial_reward_claimed=player_model.tutorial_reward_claimed,
    )
    store = EntityStore(
        player=player,
        wildlife={
            c.id: Creature(id=c.id, species=c.species, position=_position(c.position), behaviour=c.behaviour)
            for c in model.wildlife
        },
        ground={key: ItemList(_instances(items)) for key, items in model.ground.items()},
        fixtures={
            f.id: Fixture(f.id, f.name, tuple(f.locations), f.is_open, f.locked, f.contents) for f in model.fixtures
        },
        fires={key: Fire(f.state, f.fuel, f.tinder_ready) for key, f in model.fires.items()},
        nodes={
            n.id: ResourceNode(
                id=n.id,
                kind=n.kind,
                position=_position(n.position),
                yield_remaining=n.yield_remaining,
                max_yield=n.max_yield,
                cooldown_ticks=n.cooldown_ticks,
                cooldown_remaining=n.cooldown_remaining,
                variety=n.variety,
                progress=n.progress,
                hits_required=n.hits_required,
                fruit=n.fruit,
            )
            for n in model.nodes
        },
    )
    ledger = BlueprintLedger(
        open={
            bp.id: Blueprint(
                id=bp.id,
                target=bp.target,
                owner=bp.owner,
                lines=[
                    BlueprintLine(line.item_id, line.needed, line.minutes_per_unit, line.supplied)
                    for line in bp.lines
                ],
            )
            for bp in model.blueprints
        },
        focus=model.focus,
        next_id=model.next_blueprint_id,
    )
    return WorldState(
        seed=model.seed,
        clock=WorldClock(model.tick),
        grid=WorldGrid(weather=dict(model.weather)),
        store=store,
        blueprints=ledger,
        rng=rng,
    )


def validate_snapshot(model: WorldSnapshot) -> list[str]:
    """Every consistency problem in ``model``; an empty list means it is loadable."""
    problems: list[str] = []
    if model.schema_version != SCHEMA_VERSION:
        problems.append(f"schema_version {model.schema_version} is not {SCHEMA_VERSION}")

    try:
        version, internal, gauss_next = model.rng_state
        random.Random().setstate((version, tuple(internal), gauss_next))
    except (TypeError, ValueError):
        problems.append("rng_state is not a valid random state")

    for region in Region:
        weather = model.weather.get(region)
        if weather is None:
            problems.append(f"weather missing for region {region.value}")
        elif weather not in REGION_WEATHERS[region]:
            problems.append(f"weather {weather.value} impossible in region {region.value}")

    player = model.player
    grid = WorldGrid()
    position = _position(player.position)
    if not position.in_bounds():
        problems.append(f"player position {player.position.row},{player.position.col} out of bounds")
    elif not grid.tile(position).walkable:
        problems.append("player stands on an unwalkable tile")
    if player.room is not None and position != CABIN_POSITION:
        problems.append("player is in a cabin room but not on the cabin tile")
    for name, value in player.vitals.model_dump().items():
        if not 0 <= value <= 100:
            problems.append(f"vital {name}={value} outside [0, 100]")
    for name, skill in player.skills.items():
        if not 1 <= skill.level <= MAX_LEVEL:
            problems.append(f"skill {name} level {skill.level} out of range")
    problems.extend(_item_problems("inventory", player.inventory))
    weight = sum(ITEMS[item.item_id].weight * item.quantity for item in player.inventory if item.item_id in ITEMS)
    if weight > player.capacity + 1e-9:
        problems.append(f"inventory weight {weight:.2f} exceeds capacity {player.capacity:.2f}")
    for book, page in player.bookmarks.items():
        pages = BOOK_PAGES.get(book)
        if pages is None:
            problems.append(f"bookmark in {book}, which has no pages")
        elif not 0 <= page <= len(pages):
            problems.append(f"bookmark {book} page {page} outside [0, {len(pages)}]")

    for key, items in model.ground.items():
        problems.extend(_item_problems(f"ground[{key}]", items))

    for creature in model.wildlife:
        if creature.species not in SPECIES:
            problems.append(f"creature {creature.id} has unknown species {creature.species}")
        if not _position(creature.position).in_bounds():
            problems.append(f"creature {creature.id} out of bounds")

    fixture_ids = [fixture.id for fixture in model.fixtures]
    for required in REQUIRED_FIXTURES:
        if required not in fixture_ids:
            problems.append(f"fixture {required} is missing")

    if FIREPLACE not in model.fires:
        problems.append("the cabin fireplace is missing")
    for key, fire in model.fires.items():
        if not 0 <= fire.fuel <= Fire.MAX_FUEL:
            problems.append(f"fire {key} fuel {fire.fuel} outside [0, {Fire.MAX_FUEL}]")
        if fire.state != FireState.COLD and fire.fuel == 0:
            problems.append(f"fire {key} is {fire.state.value} with no fuel")

    for node in model.nodes:
        if not _position(node.position).in_bounds():
            problems.append(f"node {node.id} out of bounds")
        if not 0 <= node.yield_remaining <= node.max_yield:
            problems.append(f"node {node.id} yield {node.yield_remaining} outside [0, {node.max_yield}]")
        if node.kind not in NODE_KINDS:
            problems.append(f"node {node.id} has unknown kind {node.kind}")
        elif node.kind == "tree" and not (
            node.variety in TREE_DROPS and node.variety in TREE_HITS and node.variety in TREE_DESCRIPTIONS
        ):
            problems.append(f"tree {node.id} has unknown variety {node.variety}")

    ids: set[str] = set()
    for blueprint in model.blueprints:
        if blueprint.id in ids:
            problems.append(f"blueprint id {blueprint.id} is used twice")
        ids.add(blueprint.id)
        numbered = _BLUEPRINT_ID.match(blueprint.id)
        if numbered and int(numbered.group(1)) >= model.next_blueprint_id:
            problems.append(f"next_blueprint_id {model.next_blueprint_id} would reissue {blueprint.id}")
        recipe = RECIPES.get(blueprint.target)
        if recipe is None:
            problems.append(f"blueprint {blueprint.id} has unknown recipe {blueprint.target}")
            continue
        expected = [line.item_id for line in recipe.lines]
        if [line.item_id for line in blueprint.lines] != expected:
            problems.append(f"blueprint {blueprint.id} lines do not match the {recipe.target} recipe")
        for line in blueprint.lines:
            if not 0 <= line.supplied <= line.needed:
                problems.append(f"blueprint {blueprint.id} line {line.item_id} supplied {line.supplied}/{line.needed}")
    if model.focus is not None and model.focus not in ids:
        problems.append(f"focused blueprint {model.focus} is not open")
    return problems


class JsonStateStore:
    """Keeps one world snapshot as pretty-printed JSON on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def save(self, world: WorldState) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = snapshot(world).model_dump(mode="json")
        temporary = self._path.with_suffix(self._path.suffix + ".tmp")
        with temporary.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
            handle.write("\n")
        temporary.replace(self._path)
        logger.debug("world_saved", extra={"path": str(self._path), "tick": world.clock.tick})

    def load(self) -> WorldState | None:
        if not self._path.exists():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except ValueError as exc:
            raise StateCorruption(f"Save file is not valid JSON: {exc}", [str(exc)]) from exc
        if not isinstance(data, dict):
            raise StateCorruption("Save file does not hold a snapshot object", ["top-level value is not an object"])
        world = restore(data)
        logger.info("world_loaded", extra={"path": str(self._path), "tick": world.clock.tick})
        return world


def _position_model(position: Position) -> PositionModel:
    return PositionModel(row=position.row, col=position.col)


def _position(model: PositionModel) -> Position:
    return Position(model.row, model.col)


def _items_model(items: ItemList) -> list[ItemModel]:
    return [
        ItemModel(item_id=instance.item_id, quantity=instance.quantity, durability=instance.durability)
        for instance in items.items
    ]


def _instances(models: list[ItemModel]) -> list[ItemInstance]:
    return [ItemInstance(item.item_id, item.quantity, item.durability) for item in models]


def _item_problems(where: str, items: list[ItemModel]) -> list[str]:
    problems: list[str] = []
    for item in items:
        definition = ITEMS.get(item.item_id)
        if definition is None:
            problems.append(f"{where}: unknown item {item.item_id}")
            continue
        if item.durability is not None and not 0 < item.durability <= (definition.durability or 0):
            problems.append(f"{where}: {item.item_id} durability {item.durability} out of range")
    return problems
