"""Actors, item containers, fires, resource nodes and the store that owns them."""

from __future__ import annotations

from dataclasses import dataclass, field

from rubber_duck.errors import PreconditionFailed, ResourceExhausted
from rubber_duck.models import Direction, FireState, Position, Room, START_POSITION
from rubber_duck.registry import get_item
from rubber_duck.skills import SkillBook
from rubber_duck.world.wildlife import Creature

TABLE = "cabin_main/table"
CUPBOARD = "cabin_main/cupboard"
FIREPLACE = "fireplace"


@dataclass(slots=True)
class ItemInstance:
    item_id: str
    quantity: int = 1
    durability: int | None = None

    @property
    def weight(self) -> float:
        return get_item(self.item_id).weight * self.quantity


@dataclass(slots=True)
class ItemList:
    """Ordered item instances; tools are kept one per instance."""

    items: list[ItemInstance] = field(default_factory=list)

    def count(self, item_id: str) -> int:
        return sum(instance.quantity for instance in self.items if instance.item_id == item_id)

    def has(self, item_id: str, quantity: int = 1) -> bool:
        return self.count(item_id) >= quantity

    def weight(self) -> float:
        return round(sum(instance.weight for instance in self.items), 3)

    def first(self, item_id: str) -> ItemInstance | None:
        for instance in self.items:
            if instance.item_id == item_id:
                return instance
        return None

    def put(self, instance: ItemInstance) -> None:
        if instance.durability is None and not get_item(instance.item_id).is_tool:
            existing = self.first(instance.item_id)
            if existing is not None:
                existing.quantity += instance.quantity
                return
        self.items.append(instance)

    def add(self, item_id: str, quantity: int = 1) -> None:
        definition = get_item(item_id)
        if definition.is_tool:
            for _ in range(quantity):
                self.put(ItemInstance(item_id, 1, definition.durability))
        elif quantity > 0:
            self.put(ItemInstance(item_id, quantity))

    def take(self, item_id: str, quantity: int = 1) -> list[ItemInstance]:
        """Remove ``quantity`` units and return them as detached instances."""
        if quantity < 1 or not self.has(item_id, quantity):
            raise PreconditionFailed(f"There isn't {quantity} {get_item(item_id).name} here.")
        removed: list[ItemInstance] = []
        remaining = quantity
        for instance in list(self.items):
            if remaining == 0:
                break
            if instance.item_id != item_id:
                continue
            moved = min(remaining, instance.quantity)
            removed.append(ItemInstance(item_id, moved, instance.durability))
            instance.quantity -= moved
            remaining -= moved
            if instance.quantity == 0:
                self.items.remove(instance)
        return removed

    def wear_tool(self, item_id: str, amount: int = 1) -> bool:
        """Spend durability on the first matching tool. Returns True if it broke."""
        tool = self.first(item_id)
        if tool is None or tool.durability is None:
            return False
        tool.durability = max(0, tool.durability - amount)
        if tool.durability == 0:
            self.items.remove(tool)
            return True
        return False

    def summary(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for instance in self.items:
            totals[instance.item_id] = totals.get(instance.item_id, 0) + instance.quantity
        return totals


@dataclass(slots=True)
class Inventory(ItemList):
    capacity: float = 50.0

    def can_hold(self, extra_weight: float) -> bool:
        return self.weight() + extra_weight <= self.capacity + 1e-9

    def add(self, item_id: str, quantity: int = 1) -> None:
        extra = get_item(item_id).weight * quantity
        if not self.can_hold(extra):
            raise ResourceExhausted(
                f"You can't carry that much: {self.weight() + extra:.1f} of {self.capacity:.0f} weight."
            )
        ItemList.add(self, item_id, quantity)

    def receive(self, instances: list[ItemInstance]) -> None:
        extra = sum(instance.weight for instance in instances)
        if not self.can_hold(extra):
            raise ResourceExhausted(
                f"You can't carry that much: {self.weight() + extra:.1f} of {self.capacity:.0f} weight."
            )
        for instance in instances:
            self.put(instance)


VITAL_NAMES = ("health", "warmth", "energy", "mood", "hunger", "thirst")


@dataclass(slots=True)
class Vitals:
    health: float = 100.0
    warmth: float = 50.0
    energy: float = 100.0
    mood: float = 70.0
    hunger: float = 20.0
    thirst: float = 20.0

    def adjust(self, name: str, delta: float) -> float:
        value = min(100.0, max(0.0, getattr(self, name) + delta))
        setattr(self, name, round(value, 2))
        return value

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in VITAL_NAMES}


@dataclass(slots=True)
class Player:
    position: Position = START_POSITION
    facing: Direction = Direction.NORTH
    room: Room | None = None
    vitals: Vitals = field(default_factory=Vitals)
    skills: SkillBook = field(default_factory=SkillBook.starting)
    inventory: Inventory = field(default_factory=Inventory)
    bookmarks: dict[str, int] = field(default_factory=dict)
    tutorial_reward_claimed: bool = False

    @property
    def indoors(self) -> bool:
        return self.room is not None

    @property
    def location_key(self) -> str:
        return self.room.value if self.room else self.position.key()


@dataclass(slots=True)
class Fire:
    state: FireState = FireState.COLD
    fuel: int = 0
    tinder_ready: bool = False

    MAX_FUEL = 100

    @property
    def lit(self) -> bool:
        return self.state != FireState.COLD

    @staticmethod
    def state_for_fuel(fuel: int) -> FireState:
        if fuel <= 0:
            return FireState.COLD
        if fuel < 10:
            return FireState.SMOLDERING
        if fuel < 40:
            return FireState.BURNING
        return FireState.ROARING

    def add_fuel(self, amount: int) -> None:
        self.fuel = min(self.MAX_FUEL, self.fuel + amount)
        if self.lit:
            self.state = self.state_for_fuel(self.fuel)

    def ignite(self) -> None:
        self.state = self.state_for_fuel(self.fuel)
        self.tinder_ready = False

    def burn(self) -> bool:
        """Consume one tick of fuel. Returns True when the fire went out."""
        if not self.lit:
            return False
        self.fuel = max(0, self.fuel - FUEL_BURN_RATE[self.state])
        self.state = self.state_for_fuel(self.fuel)
        return not self.lit


FUEL_BURN_RATE = {
    FireState.COLD: 0,
    FireState.SMOLDERING: 1,
    FireState.BURNING: 3,
    FireState.ROARING: 6,
}

FIRE_DESCRIPTIONS = {
    FireState.COLD: "The fireplace is cold and dark, filled only with old ash.",
    FireState.SMOLDERING: "Weak flames flicker among the embers, struggling to catch. A thin wisp of smoke rises.",
    FireState.BURNING: "A healthy fire crackles in the hearth, casting dancing shadows on the walls.",
    FireState.ROARING: "The fire roars and pops, flames leaping high. The heat pushes back the cold completely.",
}


@dataclass(slots=True)
class ResourceNode:
    """A depletable bush or stand of trees that regrows after a cooldown."""

    id: str
    kind: str
    position: Position
    yield_remaining: int
    max_yield: int
    cooldown_ticks: int = 12
    cooldown_remaining: int = 0
    variety: str | None = None
    progress: int = 0
    hits_required: int = 0
    fruit: int = 0

    @property
    def depleted(self) -> bool:
        return self.yield_remaining == 0

    def deplete(self) -> None:
        if self.yield_remaining <= 0:
            raise ResourceExhausted(f"The {self.kind} here has nothing left to give.")
        self.yield_remaining -= 1
        if self.yield_remaining == 0:
            self.cooldown_remaining = self.cooldown_ticks

    def tick(self) -> bool:
        """Count down the regrowth timer. Returns True when the node refilled."""
        if not self.depleted:
            return False
        self.cooldown_remaining = max(0, self.cooldown_remaining - 1)
        if self.cooldown_remaining == 0:
            self.yield_remaining = self.max_yield
            self.progress = 0
            return True
        return False


@dataclass(slots=True)
class Fixture:
    id: str
    name: str
    locations: tuple[str, ...]
    is_open: bool = False
    locked: bool = False
    contents: str | None = None


@dataclass(slots=True)
class EntityStore:
    player: Player = field(default_factory=Player)
    wildlife: dict[str, Creature] = field(default_factory=dict)
    ground: dict[str, ItemList] = field(default_factory=dict)
    fixtures: dict[str, Fixture] = field(default_factory=dict)
    fires: dict[str, Fire] = field(default_factory=dict)
    nodes: dict[str, ResourceNode] = field(default_factory=dict)

    def pile(self, location: str) -> ItemList:
        return self.ground.setdefault(location, ItemList())

    def items_at(self, location: str) -> ItemList:
        """Read-only view of a pile; missing locations are not created."""
        return self.ground.get(location) or ItemList()

    def creatures_near(self, position: Position, radius: int = 1) -> list[Creature]:
        return [
            creature
            for creature in self.wildlife.values()
            if abs(creature.position.row - position.row) <= radius
            and abs(creature.position.col - position.col) <= radius
        ]

    def node_at(self, position: Position, kind: str) -> ResourceNode | None:
        return self.nodes.get(f"{kind}/{position.row}/{position.col}")

    def fixture_here(self, name: str, location: str) -> Fixture | None:
        for fixture in self.fixtures.values():
            if (fixture.id == name or fixture.name == name) and location in fixture.locations:
                return fixture
        return None

    def campfire_key(self, position: Position) -> str:
        return f"campfire/{position.row}/{position.col}"

    def reachable_piles(self, location: str) -> list[ItemList]:
        """Item lists the player can take from at ``location``."""
        piles = [self.items_at(location)]
        if location == "cabin_main":
            piles.append(self.items_at(TABLE))
        for fixture in self.fixtures.values():
            if fixture.contents and fixture.is_open and location in fixture.locations:
                piles.append(self.items_at(fixture.contents))
        return piles
