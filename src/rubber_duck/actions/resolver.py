"""Resolve intents against a world, atomically, into structured outcomes."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any

from rubber_duck.actions import intents as i
from rubber_duck.actions.interactions import Interactions, target_kind
from rubber_duck.actions.outcomes import EventKind, Outcome, OutcomeEvent, Resolution, StateDelta
from rubber_duck.blueprints import BLUEPRINT_WORDS, BlueprintEngine
from rubber_duck.entities import FIRE_DESCRIPTIONS, FIREPLACE, TABLE, Fixture
from rubber_duck.errors import ActionError, InvalidArgument, PreconditionFailed, ResourceExhausted
from rubber_duck.models import CABIN_POSITION, Direction, Room
from rubber_duck.registry import TREE_DESCRIPTIONS, get_item, resolve_item, resolve_recipe
from rubber_duck.state import WorldState
from rubber_duck.stepper import WorldStepper
from rubber_duck.telemetry import NullTelemetry, Telemetry
from rubber_duck.world.grid import Biome
from rubber_duck.world.temperature import describe_temperature
from rubber_duck.world.wildlife import SPECIES

EXIT = "outside"

ROOM_LINKS: dict[tuple[Room, Direction], Room | str] = {
    (Room.CABIN_MAIN, Direction.NORTH): Room.CABIN_TERRACE,
    (Room.CABIN_MAIN, Direction.WEST): Room.WOODSHED,
    (Room.CABIN_MAIN, Direction.SOUTH): EXIT,
    (Room.CABIN_TERRACE, Direction.SOUTH): Room.CABIN_MAIN,
    (Room.WOODSHED, Direction.EAST): Room.CABIN_MAIN,
}

ROOM_DESCRIPTIONS = {
    Room.CABIN_MAIN: "You're inside the cabin. A stone fireplace dominates one wall and a wooden table sits by the window.",
    Room.CABIN_TERRACE: "You stand on the terrace. The lake stretches out below, still and grey.",
    Room.WOODSHED: "The woodshed smells of resin and sawdust. A scarred chopping block sits in the corner.",
}

SLOW_BIOMES = (Biome.DESERT, Biome.WINTER_FOREST)
MOVE_ENERGY_PER_TICK = 2
SEVERE_WEATHER_ENERGY = 2

WAIT_TICKS = {"short": 1, "medium": 3, "long": 6}
SIMULATE_MAX_TICKS = 10

FIXTURE_ALIASES = {
    "door": "door",
    "cabin door": "door",
    "front door": "door",
    "cupboard": "cupboard",
    "cabinet": "cupboard",
    "cellar hatch": "cellar_hatch",
    "cellar": "cellar_hatch",
    "hatch": "cellar_hatch",
    "trapdoor": "cellar_hatch",
}

Handler = Callable[[WorldState, Any], Resolution]


class ActionResolver:
    """Applies one intent to a world and reports what changed.

    Every non-query intent runs against a deep copy taken beforehand; any
    ``ActionError`` puts that copy back so a rejected intent leaves no trace.
    """

    def __init__(
        self,
        *,
        stepper: WorldStepper | None = None,
        blueprints: BlueprintEngine | None = None,
        interactions: Interactions | None = None,
        telemetry: Telemetry | None = None,
        failure_xp_ratio: float = 0.4,
        duck_name: str = "Quackers",
        logger: logging.Logger | None = None,
    ) -> None:
        self._stepper = stepper or WorldStepper()
        self._blueprints = blueprints or BlueprintEngine()
        self._interactions = interactions or Interactions(
            blueprints=self._blueprints,
            failure_xp_ratio=failure_xp_ratio,
            duck_name=duck_name,
        )
        self._telemetry = telemetry or NullTelemetry()
        self._logger = logger or logging.getLogger("rubber_duck.resolver")
        self._handlers: dict[type, Handler] = {
            i.Look: self._look,
            i.Move: self._move,
            i.Enter: self._enter,
            i.Exit: self._exit,
            i.Examine: self._examine,
            i.Take: self._take,
            i.Drop: self._drop,
            i.Use: lambda world, intent: self._interactions.use(world, intent.item, intent.target),
            i.Open: self._open,
            i.Close: self._close,
            i.Create: self._create,
            i.Chop: lambda world, intent: self._interactions.chop(world, intent.target),
            i.Light: lambda world, intent: self._interactions.light(world, intent.target),
            i.Stoke: lambda world, intent: self._interactions.stoke(world, intent.item, intent.target),
            i.Rest: lambda world, intent: self._interactions.rest(world),
            i.Observe: lambda world, intent: self._interactions.observe(world),
            i.Fish: lambda world, intent: self._interactions.fish(world),
            i.Inventory: self._inventory,
            i.Status: self._status,
            i.Wait: self._wait,
            i.Simulate: self._simulate,
            i.Talk: lambda world, intent: self._interactions.talk(world, intent.message),
        }
        missing = [cls.__name__ for cls in i.INTENT_TYPES if cls not in self._handlers]
        if missing:
            raise TypeError(f"No handler for intents: {', '.join(missing)}")

    def resolve(self, world: WorldState, intent: i.Intent) -> Outcome:
        """Apply ``intent`` to ``world`` and return the outcome. The world is mutated in place."""
        handler = self._handlers.get(type(intent))
        if handler is None:
            raise TypeError(f"Unsupported intent type: {type(intent).__name__}")

        name = i.intent_name(intent)
        query = isinstance(intent, i.QUERY_TYPES)
        snapshot = None if query else copy.deepcopy(world)
        position_before = world.player.position
        room_before = world.player.room
        inventory_before = world.player.inventory.summary()

        try:
            resolution = handler(world, intent)
            events = list(resolution.events)
            ticks = 0 if query else resolution.ticks
            if ticks:
                events.extend(self._stepper.advance(world, ticks))
        except ActionError as exc:
            if snapshot is not None:
                world.restore_from(snapshot)
            outcome = Outcome(
                success=False,
                intent=name,
                message=str(exc),
                events=[OutcomeEvent(EventKind.FAILED, {"error": exc.kind.value, "reason": str(exc)})],
                delta=StateDelta(position=(world.player.position.row, world.player.position.col)),
                error=exc.kind,
            )
            self._logger.info("intent_rejected", extra={"intent": name, "error": exc.kind.value})
            self._publish(outcome)
            return outcome
        except Exception:
            if snapshot is not None:
                world.restore_from(snapshot)
            self._logger.exception("intent_crashed", extra={"intent": name})
            raise

        player = world.player
        delta = StateDelta(
            ticks=ticks,
            position=(player.position.row, player.position.col),
            room=player.room.value if player.room else None,
            inventory_changes=_inventory_diff(inventory_before, player.inventory.summary()),
        )
        outcome = Outcome(success=True, intent=name, message=resolution.message, events=events, delta=delta)
        self._logger.info(
            "intent_resolved",
            extra={
                "intent": name,
                "ticks": ticks,
                "moved": player.position != position_before or player.room != room_before,
                "tick": world.clock.tick,
            },
        )
        self._publish(outcome)
        return outcome

    def _publish(self, outcome: Outcome) -> None:
        for event in outcome.events:
            self._telemetry.emit(event.kind.value, {"intent": outcome.intent, **event.data})

    # -- queries -----------------------------------------------------------------------

    def _look(self, world: WorldState, intent: i.Look) -> Resolution:
        player = world.player
        lines: list[str] = []
        ground = world.store.items_at(player.location_key).summary()
        if player.room is not None:
            lines.append(ROOM_DESCRIPTIONS[player.room])
            if player.room == Room.CABIN_MAIN:
                lines.append(FIRE_DESCRIPTIONS[world.store.fires[FIREPLACE].state])
                table = world.store.items_at(TABLE).summary()
                if table:
                    lines.append("On the table: " + _list_items(table) + ".")
            exits = sorted(direction.value for room, direction in ROOM_LINKS if room == player.room)
        else:
            tile = world.grid.tile(player.position)
            weather = world.grid.weather_at(player.position)
            lines.append(f"You are in a {tile.biome.label}. The weather is {weather.label}.")
            if tile.has("cabin"):
                door = world.store.fixtures["door"]
                lines.append(f"A log cabin stands here. Its door is {'open' if door.is_open else 'closed'}.")
            tree = world.store.node_at(player.position, "tree")
            if tree is not None:
                if tree.depleted:
                    lines.append("Only stumps remain where trees once stood.")
                else:
                    lines.append(TREE_DESCRIPTIONS[tree.variety])
            if tile.biome.is_water or world.grid.near_water(player.position):
                lines.append("Water glints nearby.")
            campfire = world.store.fires.get(world.store.campfire_key(player.position))
            if campfire is not None:
                lines.append(f"A ring of stones holds a campfire ({campfire.state.value}).")
            creatures = [creature.describe() for creature in world.store.creatures_near(player.position, radius=0)]
            lines.extend(creatures)
            exits = sorted(
                direction.value
                for direction in Direction
                if player.position.moved(direction).in_bounds()
                and world.grid.tile(player.position.moved(direction)).walkable
            )
        if ground:
            lines.append("You see " + _list_items(ground) + ".")
        temperature = world.player_temperature()
        lines.append(f"It is {world.clock.describe()} and feels {describe_temperature(temperature)}.")

        event = OutcomeEvent(
            EventKind.LOOKED,
            {
                "position": [player.position.row, player.position.col],
                "room": player.room.value if player.room else None,
                "biome": world.grid.tile(player.position).biome.value,
                "items": ground,
                "exits": exits,
                "temperature": temperature,
            },
        )
        return Resolution(" ".join(lines), [event])

    def _examine(self, world: WorldState, intent: i.Examine) -> Resolution:
        text = intent.target.strip()
        lowered = text.lower()
        player = world.player
        kind = target_kind(lowered)

        description: str | None = None
        data: dict[str, Any] = {"target": lowered}
        if kind == "fire" or kind == "campfire":
            description, data = self._examine_fire(world, lowered, kind)
        elif lowered in ("table", "cabin table", "wooden table"):
            if player.room != Room.CABIN_MAIN:
                raise PreconditionFailed("There's no table here.")
            table = world.store.items_at(TABLE).summary()
            description = "A sturdy wooden table." + (f" On it: {_list_items(table)}." if table else " It's bare.")
            data = {"target": "table", "items": table}
        elif kind == "blueprint" or self._blueprint_named(world, lowered):
            description, data = self._examine_blueprints(world, lowered)
        elif kind == "chopping_block":
            if player.room != Room.WOODSHED:
                raise PreconditionFailed("The chopping block is in the woodshed.")
            logs = world.store.items_at(Room.WOODSHED.value).count("log")
            description = f"A scarred chopping block. {logs} log{'s' if logs != 1 else ''} are stacked beside it."
            data = {"target": "chopping_block", "logs": logs}
        elif kind in ("tree", "bamboo"):
            description, data = self._examine_tree(world)
        elif kind == "bush":
            node = None if player.indoors else world.store.node_at(player.position, "bush")
            if node is None:
                raise PreconditionFailed("There's no undergrowth here.")
            state = "picked clean" if node.depleted else f"still hiding things ({node.yield_remaining} left)"
            description = f"The undergrowth here is {state}."
            data = {"target": "bush", "yield_remaining": node.yield_remaining, "max_yield": node.max_yield}
        elif kind == "self":
            vitals = player.vitals.as_dict()
            description = "You take stock of yourself: " + ", ".join(f"{k} {v:.0f}" for k, v in vitals.items()) + "."
            data = {"target": "self", "vitals": vitals}
        elif lowered in FIXTURE_ALIASES:
            fixture = self._fixture(world, lowered)
            state = "locked" if fixture.locked else ("open" if fixture.is_open else "closed")
            description = f"The {fixture.name} is {state}."
            data = {"target": fixture.id, "open": fixture.is_open, "locked": fixture.locked}
            if fixture.is_open and fixture.contents:
                contents = world.store.items_at(fixture.contents).summary()
                description += " Inside: " + (_list_items(contents) if contents else "nothing") + "."
                data["items"] = contents
        else:
            description, data = self._examine_item_or_creature(world, text)

        return Resolution(description, [OutcomeEvent(EventKind.EXAMINED, data)])

    def _examine_fire(self, world: WorldState, lowered: str, kind: str) -> tuple[str, dict[str, Any]]:
        player = world.player
        campfire_key = world.store.campfire_key(player.position)
        wants_campfire = kind == "campfire" or (
            player.room is None and lowered == "fire" and campfire_key in world.store.fires
        )
        if wants_campfire:
            fire = world.store.fires.get(campfire_key) if player.room is None else None
            if fire is None:
                raise PreconditionFailed("There's no campfire here.")
            key = campfire_key
            description = FIRE_DESCRIPTIONS[fire.state].replace("fireplace", "campfire").replace("hearth", "fire ring")
        else:
            sees_hearth = player.room in (Room.CABIN_MAIN, Room.CABIN_TERRACE) or (
                player.room is None and player.position == CABIN_POSITION
            )
            if not sees_hearth:
                raise PreconditionFailed("There's no fireplace here.")
            key = FIREPLACE
            fire = world.store.fires[FIREPLACE]
            description = FIRE_DESCRIPTIONS[fire.state]
        data = {"target": key, "state": fire.state.value, "fuel": fire.fuel, "tinder_ready": fire.tinder_ready}
        return description, data

    def _blueprint_named(self, world: WorldState, lowered: str) -> bool:
        recipe = resolve_recipe(lowered)
        return recipe is not None and any(bp.target == recipe.target for bp in world.blueprints.open.values())

    def _examine_blueprints(self, world: WorldState, lowered: str) -> tuple[str, dict[str, Any]]:
        ledger = world.blueprints
        blueprints = list(ledger.open.values())
        recipe = None if any(word in lowered for word in BLUEPRINT_WORDS) else resolve_recipe(lowered)
        if recipe is not None:
            blueprints = [bp for bp in blueprints if bp.target == recipe.target]
        if not blueprints:
            raise PreconditionFailed("You have no projects underway.")
        details = [
            {
                "id": bp.id,
                "target": bp.target,
                "owner": bp.owner,
                "focused": bp.id == ledger.focus,
                "lines": [list(line) for line in self._blueprints.inspect(bp)],
            }
            for bp in blueprints
        ]
        return " ".join(bp.describe() + "." for bp in blueprints), {"target": "blueprint", "blueprints": details}

    def _examine_tree(self, world: WorldState) -> tuple[str, dict[str, Any]]:
        player = world.player
        node = None if player.indoors else world.store.node_at(player.position, "tree")
        if node is None:
            raise PreconditionFailed("There are no trees here.")
        if node.depleted:
            description = "Only stumps remain. Saplings are already pushing up."
        else:
            description = TREE_DESCRIPTIONS[node.variety]
            if node.progress:
                description += f" Deep axe marks scar one trunk ({node.progress}/{node.hits_required})."
            if node.variety == "apple":
                description += f" {node.fruit} apple{'s' if node.fruit != 1 else ''} hang within reach."
        data = {
            "target": "tree",
            "variety": node.variety,
            "standing": node.yield_remaining,
            "progress": node.progress,
            "hits_required": node.hits_required,
            "fruit": node.fruit,
        }
        return description, data

    def _examine_item_or_creature(self, world: WorldState, text: str) -> tuple[str, dict[str, Any]]:
        player = world.player
        item_id = resolve_item(text)
        if item_id is not None:
            containers = [player.inventory, *world.store.reachable_piles(player.location_key)]
            instance = next((c.first(item_id) for c in containers if c.has(item_id)), None)
            if instance is None:
                raise PreconditionFailed(f"You don't see any {get_item(item_id).name} here.")
            definition = get_item(item_id)
            description = definition.description
            if item_id == "rubber_duck":
                description = description.replace("rubber duck", f"rubber duck named {self._interactions.duck_name}")
            data: dict[str, Any] = {"target": item_id, "weight": definition.weight}
            if instance.durability is not None:
                description += f" Durability {instance.durability}/{definition.durability}."
                data["durability"] = instance.durability
            return description, data

        if not player.indoors:
            lowered = text.lower()
            for creature in world.store.creatures_near(player.position):
                species = SPECIES[creature.species]
                if lowered in (species.id, species.name) or lowered.rstrip("s") == species.name:
                    return creature.describe(), {
                        "target": creature.id,
                        "species": creature.species,
                        "behaviour": creature.behaviour.value,
                    }
        raise InvalidArgument(f"You don't know what '{text}' is.")

    def _inventory(self, world: WorldState, intent: i.Inventory) -> Resolution:
        inventory = world.player.inventory
        items = inventory.summary()
        tools = {
            instance.item_id: instance.durability
            for instance in inventory.items
            if instance.durability is not None
        }
        message = ("You carry " + _list_items(items) + ".") if items else "You aren't carrying anything."
        message += f" Load {inventory.weight():.1f}/{inventory.capacity:.0f}."
        event = OutcomeEvent(
            EventKind.INVENTORY_LISTED,
            {"items": items, "tools": tools, "weight": inventory.weight(), "capacity": inventory.capacity},
        )
        return Resolution(message, [event])

    def _status(self, world: WorldState, intent: i.Status) -> Resolution:
        player = world.player
        temperature = world.player_temperature()
        vitals = player.vitals.as_dict()
        skills = {name: skill.level for name, skill in player.skills.skills.items()}
        event = OutcomeEvent(
            EventKind.STATUS_REPORTED,
            {
                "time": world.clock.describe(),
                "tick": world.clock.tick,
                "position": [player.position.row, player.position.col],
                "room": player.room.value if player.room else None,
                "season": world.grid.season_at(player.position).value,
                "weather": world.grid.weather_at(player.position).value,
                "temperature": temperature,
                "vitals": vitals,
                "skills": skills,
            },
        )
        message = f"{world.clock.describe()}. " + ", ".join(f"{k} {v:.0f}" for k, v in vitals.items()) + "."
        return Resolution(message, [event])

    # -- movement ----------------------------------------------------------------------

    def _move(self, world: WorldState, intent: i.Move) -> Resolution:
        direction = Direction.parse(intent.direction)
        if direction is None:
            raise InvalidArgument(f"'{intent.direction}' isn't a direction. Try north, south, east or west.")
        player = world.player

        if player.room is not None:
            destination = ROOM_LINKS.get((player.room, direction))
            if destination is None:
                raise PreconditionFailed(f"You can't go {direction.value} from here.")
            if destination == EXIT:
                return self._leave_cabin(world)
            self._spend_move_energy(world, MOVE_ENERGY_PER_TICK)
            origin = player.room
            player.room = destination
            player.facing = direction
            event = OutcomeEvent(EventKind.MOVED, {"from": origin.value, "to": destination.value})
            return Resolution(ROOM_DESCRIPTIONS[destination], [event], 1)

        target = player.position.moved(direction)
        if not target.in_bounds():
            raise InvalidArgument(f"You can't go {direction.value}; the land ends there.")
        tile = world.grid.tile(target)
        if not tile.walkable:
            raise PreconditionFailed(f"The {tile.biome.label} blocks your way {direction.value}.")

        ticks = 2 if tile.biome in SLOW_BIOMES else 1
        cost = MOVE_ENERGY_PER_TICK * ticks
        if world.grid.weather_at(target).is_severe:
            cost += SEVERE_WEATHER_ENERGY
        self._spend_move_energy(world, cost)

        origin = player.position
        player.position = target
        player.facing = direction
        event = OutcomeEvent(
            EventKind.MOVED,
            {"from": [origin.row, origin.col], "to": [target.row, target.col], "biome": tile.biome.value},
        )
        message = f"You walk {direction.value} into the {tile.biome.label}."
        if tile.has("cabin"):
            message += " A log cabin stands before you."
        return Resolution(message, [event], ticks)

    def _spend_move_energy(self, world: WorldState, cost: float) -> None:
        vitals = world.player.vitals
        if vitals.energy < max(cost, MOVE_ENERGY_PER_TICK):
            raise PreconditionFailed("You're too exhausted to walk any further. Rest first.")
        vitals.adjust("energy", -cost)

    def _enter(self, world: WorldState, intent: i.Enter) -> Resolution:
        player = world.player
        target = intent.target.strip().lower()
        rooms = {"terrace": Room.CABIN_TERRACE, "woodshed": Room.WOODSHED, "shed": Room.WOODSHED}
        if target in rooms:
            room = rooms[target]
            link = next((d for (origin, d), dest in ROOM_LINKS.items() if origin == player.room and dest == room), None)
            if link is None:
                raise PreconditionFailed(f"You can't reach the {target} from here.")
            return self._move(world, i.Move(link.value))
        if target not in ("cabin", "house", "inside", "cabin_main"):
            raise InvalidArgument(f"You can't enter '{intent.target}'.")
        if player.room is not None:
            raise PreconditionFailed("You're already inside.")
        if player.position != CABIN_POSITION:
            raise PreconditionFailed("There's no cabin here.")
        if not world.store.fixtures["door"].is_open:
            raise PreconditionFailed("The cabin door is closed.")
        player.room = Room.CABIN_MAIN
        player.facing = Direction.NORTH
        event = OutcomeEvent(EventKind.ENTERED, {"room": Room.CABIN_MAIN.value})
        return Resolution(ROOM_DESCRIPTIONS[Room.CABIN_MAIN], [event], 1)

    def _exit(self, world: WorldState, intent: i.Exit) -> Resolution:
        player = world.player
        if player.room is None:
            raise PreconditionFailed("You're already outside.")
        if player.room != Room.CABIN_MAIN:
            origin = player.room
            player.room = Room.CABIN_MAIN
            event = OutcomeEvent(EventKind.EXITED, {"from": origin.value, "to": Room.CABIN_MAIN.value})
            return Resolution("You step back into the cabin.", [event], 1)
        return self._leave_cabin(world)

    def _leave_cabin(self, world: WorldState) -> Resolution:
        if not world.store.fixtures["door"].is_open:
            raise PreconditionFailed("The cabin door is closed.")
        player = world.player
        player.room = None
        player.facing = Direction.SOUTH
        event = OutcomeEvent(EventKind.EXITED, {"from": Room.CABIN_MAIN.value, "to": "outside"})
        return Resolution("You step out of the cabin into the clearing.", [event], 1)

    # -- items -------------------------------------------------------------------------

    def _take(self, world: WorldState, intent: i.Take) -> Resolution:
        item_id = self._item(intent.item)
        quantity = _quantity(intent.quantity)
        player = world.player
        piles = [pile for pile in world.store.reachable_piles(player.location_key) if pile.has(item_id)]
        available = sum(pile.count(item_id) for pile in piles)
        definition = get_item(item_id)
        if available < quantity:
            raise PreconditionFailed(
                f"There {'is' if available == 1 else 'are'} only {available} {definition.name} here."
                if available
                else f"There's no {definition.name} here."
            )
        if not player.inventory.can_hold(definition.weight * quantity):
            raise ResourceExhausted(
                f"You can't carry that much: {player.inventory.weight() + definition.weight * quantity:.1f} "
                f"of {player.inventory.capacity:.0f} weight."
            )

        remaining = quantity
        taken = []
        for pile in piles:
            moved = min(remaining, pile.count(item_id))
            taken.extend(pile.take(item_id, moved))
            remaining -= moved
            if remaining == 0:
                break
        player.inventory.receive(taken)
        event = OutcomeEvent(EventKind.ITEM_TAKEN, {"item": item_id, "quantity": quantity})
        return Resolution(f"You take {_count_phrase(item_id, quantity)}.", [event], 1)

    def _drop(self, world: WorldState, intent: i.Drop) -> Resolution:
        item_id = self._item(intent.item)
        quantity = _quantity(intent.quantity)
        player = world.player
        if not player.inventory.has(item_id, quantity):
            held = player.inventory.count(item_id)
            raise PreconditionFailed(
                f"You only have {held} {get_item(item_id).name}." if held else f"You don't have any {get_item(item_id).name}."
            )
        pile = world.store.pile(player.location_key)
        for instance in player.inventory.take(item_id, quantity):
            pile.put(instance)
        event = OutcomeEvent(EventKind.ITEM_DROPPED, {"item": item_id, "quantity": quantity})
        return Resolution(f"You drop {_count_phrase(item_id, quantity)}.", [event], 1)

    def _item(self, text: str) -> str:
        item_id = resolve_item(text)
        if item_id is None:
            raise InvalidArgument(f"You don't know what '{text}' is.")
        return item_id

    # -- fixtures ----------------------------------------------------------------------

    def _fixture(self, world: WorldState, text: str) -> Fixture:
        fixture_id = FIXTURE_ALIASES.get(text.strip().lower())
        if fixture_id is None:
            raise InvalidArgument(f"There's nothing called '{text}' to open or close.")
        fixture = world.store.fixtures[fixture_id]
        if world.player.location_key not in fixture.locations:
            raise InvalidArgument(f"There's no {fixture.name} here.")
        return fixture

    def _open(self, world: WorldState, intent: i.Open) -> Resolution:
        fixture = self._fixture(world, intent.target)
        if fixture.locked:
            raise PreconditionFailed(f"The {fixture.name} is locked tight.")
        if fixture.is_open:
            event = OutcomeEvent(EventKind.OPENED, {"fixture": fixture.id, "changed": False})
            return Resolution(f"The {fixture.name} is already open.", [event])
        fixture.is_open = True
        data: dict[str, Any] = {"fixture": fixture.id, "changed": True}
        message = f"You open the {fixture.name}."
        if fixture.contents:
            contents = world.store.items_at(fixture.contents).summary()
            data["items"] = contents
            message += " Inside: " + (_list_items(contents) if contents else "nothing") + "."
        return Resolution(message, [OutcomeEvent(EventKind.OPENED, data)], 1)

    def _close(self, world: WorldState, intent: i.Close) -> Resolution:
        fixture = self._fixture(world, intent.target)
        if not fixture.is_open:
            event = OutcomeEvent(EventKind.CLOSED, {"fixture": fixture.id, "changed": False})
            return Resolution(f"The {fixture.name} is already closed.", [event])
        fixture.is_open = False
        event = OutcomeEvent(EventKind.CLOSED, {"fixture": fixture.id, "changed": True})
        return Resolution(f"You close the {fixture.name}.", [event], 1)

    # -- crafting and time -------------------------------------------------------------

    def _create(self, world: WorldState, intent: i.Create) -> Resolution:
        result = self._blueprints.create(world.blueprints, world.store, intent.item)
        blueprint = result.blueprint
        data = {
            "blueprint": blueprint.id,
            "target": blueprint.target,
            "owner": blueprint.owner,
            "lines": [list(line) for line in self._blueprints.inspect(blueprint)],
        }
        if result.resumed:
            event = OutcomeEvent(EventKind.BLUEPRINT_RESUMED, data)
            return Resolution(f"You return to your work. {blueprint.describe()}.", [event])
        event = OutcomeEvent(EventKind.BLUEPRINT_CREATED, data)
        return Resolution(f"You lay out a plan. {blueprint.describe()}.", [event], 1)

    def _wait(self, world: WorldState, intent: i.Wait) -> Resolution:
        ticks = WAIT_TICKS.get(intent.duration.strip().lower())
        if ticks is None:
            raise InvalidArgument(f"Wait how long? Choose {', '.join(WAIT_TICKS)}.")
        return Resolution("You wait and let the world go about its business.", [], ticks)

    def _simulate(self, world: WorldState, intent: i.Simulate) -> Resolution:
        if not 1 <= intent.ticks <= SIMULATE_MAX_TICKS:
            raise InvalidArgument(f"Simulate between 1 and {SIMULATE_MAX_TICKS} ticks.")
        return Resolution(f"{intent.ticks} tick{'s' if intent.ticks != 1 else ''} pass.", [], intent.ticks)


def _inventory_diff(before: dict[str, int], after: dict[str, int]) -> dict[str, int]:
    changes: dict[str, int] = {}
    for item_id in sorted(set(before) | set(after)):
        change = after.get(item_id, 0) - before.get(item_id, 0)
        if change:
            changes[item_id] = change
    return changes


def _quantity(value: int) -> int:
    if value < 1:
        raise InvalidArgument("Quantity must be at least 1.")
    return value


def _count_phrase(item_id: str, quantity: int) -> str:
    name = get_item(item_id).name
    return f"the {name}" if quantity == 1 else f"{quantity} {name}"


def _list_items(items: dict[str, int]) -> str:
    parts = []
    for item_id, count in items.items():
        name = get_item(item_id).name
        parts.append(f"{name} x{count}" if count > 1 else name)
    return ", ".join(parts)
