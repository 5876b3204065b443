"""Item use and the skill-driven actions behind it.

``Use`` is resolved in a fixed order: feeding an open blueprint first, then a
harvesting or processing rule from the registry, then a fixed interaction
(fire, food, water, kettle, books). Anything else fails with "Nothing happens."
"""

from __future__ import annotations

import logging
import random

from rubber_duck.actions.outcomes import EventKind, OutcomeEvent, Resolution
from rubber_duck.blueprints import BLUEPRINT_WORDS, Blueprint, BlueprintEngine
from rubber_duck.entities import FIREPLACE, TABLE, Fire, ItemList, ResourceNode
from rubber_duck.errors import Infeasible, InvalidArgument, PreconditionFailed, ResourceExhausted
from rubber_duck.models import FireState, Room
from rubber_duck.registry import (
    BOOK_PAGES,
    COOKING,
    FEET,
    FISH_WITH_ROD,
    FISH_WITHOUT_ROD,
    FIXED_RULES,
    HANDS,
    HARVEST_RULES,
    ITEMS,
    PROCESSING_RULES,
    SKILL_CHECKS,
    TOOL_POWER,
    TREE_DROPS,
    TUTORIAL_REWARD,
    CheckSpec,
    InteractionRule,
    find_rule,
    forage_table,
    get_item,
    resolve_item,
)
from rubber_duck.skills import SkillCheck, xp_award
from rubber_duck.state import WorldState
from rubber_duck.world.clock import TimeOfDay

HAND_WORDS = ("hand", "hands", "fist", "fists", "bare hands", "barehand")
FOOT_WORDS = ("foot", "feet")
FIRE_KINDS = ("fire", "fireplace", "campfire")

TARGET_WORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (BLUEPRINT_WORDS, "blueprint"),
    (("previous page", "previous", "prev", "back"), "previous_page"),
    (("next page", "next", "page"), "next_page"),
    (("chopping block", "block", "stump"), "chopping_block"),
    (("campfire",), "campfire"),
    (("fireplace", "hearth", "fire"), "fire"),
    (("bamboo",), "bamboo"),
    (("tree", "trees", "pine", "birch", "trunk", "apple tree"), "tree"),
    (("bush", "bushes", "shrub", "ground", "undergrowth"), "bush"),
    (("water", "lake", "oasis", "pond"), "water"),
    (("tea", "cup", "tea cup", "teacup", "mug"), "tea"),
    (("log", "logs"), "log"),
    (("stick", "sticks", "branch"), "stick"),
    (("stone", "stones", "rock", "rocks"), "stone"),
    (("self", "me", "myself", "mouth"), "self"),
)

DUCK_GAZE = (
    "The rubber duck fixes you with a glassy stare.",
    "The duck's eyes seem to track your words.",
    "The duck tilts ever so slightly, as if curious.",
    "It sits motionless, yet attentive.",
    "The duck seems to regard you as a puzzle.",
    "Its painted eyes look ancient for a toy.",
    "You swear it blinks, though you know it cannot.",
    "The duck looks as if it has heard this before.",
)
DUCK_MANNER = (
    "It bobs once, barely noticeable.",
    "A slow, imaginary nod seems to happen.",
    "A faint squeak almost emerges, then doesn't.",
    "You can almost hear gears turning inside its head.",
    "It holds perfectly still, like a monk at dawn.",
    "Its stillness grows louder than speech.",
    "The duck seems to sift your words like tea leaves.",
)

CHOP_ENERGY = 8
SPLIT_ENERGY = 6
FORAGE_ENERGY = 5
FISH_ENERGY = 4
REST_TICKS = 6
OBSERVE_TICKS = 2
FISH_TICKS = 3
KICK_FRUIT_CHANCE = 0.55
STUBBED_TOE_CHANCE = 0.25


def target_kind(text: str | None) -> str | None:
    if text is None:
        return None
    lowered = " ".join(text.lower().split())
    words = lowered.split()
    for options, kind in TARGET_WORDS:
        for option in options:
            if option == lowered or (" " in option and option in lowered) or option in words:
                return kind
    return None


def weighted_pick(table: tuple[tuple[str, int], ...], rng: random.Random) -> str:
    return rng.choices([name for name, _ in table], weights=[weight for _, weight in table], k=1)[0]


class Interactions:
    """Handlers for Use and for the verbs that are shorthands of it."""

    def __init__(
        self,
        *,
        blueprints: BlueprintEngine,
        failure_xp_ratio: float = 0.4,
        duck_name: str = "Quackers",
        logger: logging.Logger | None = None,
    ) -> None:
        self._blueprints = blueprints
        self._failure_xp_ratio = failure_xp_ratio
        self._duck_name = duck_name
        self._logger = logger or logging.getLogger("rubber_duck.interactions")
        self._actions = {
            "chop_tree": self._chop_tree,
            "split_firewood": self._split_firewood,
            "forage": self._forage,
            "pick_fruit": self._pick_fruit,
            "whittle_log": self._whittle_log,
            "whittle_stick": self._whittle_stick,
            "split_bamboo": self._split_bamboo,
            "knap": self._knap,
            "light": self._light,
            "stoke": self._stoke,
            "cook": self._cook,
            "eat": self._eat,
            "drink": self._drink,
            "fill_kettle": self._fill_kettle,
            "heat_kettle": self._heat_kettle,
            "brew_tea": self._brew_tea,
            "drink_tea": self._drink_tea,
            "wrap_blanket": self._wrap_blanket,
            "read": self._read,
            "kick_tree": self._kick_tree,
        }

    @property
    def duck_name(self) -> str:
        return self._duck_name

    # -- use routing -----------------------------------------------------------------

    def use(self, world: WorldState, item_text: str, target_text: str | None) -> Resolution:
        item_id = self._resolve_item_or_hands(item_text)
        source = self._source(world, item_id)
        kind = target_kind(target_text)

        blueprint = self._blueprint_target(world, item_id, target_text)
        if blueprint is not None:
            return self._supply(world, blueprint, item_id)
        if kind == "blueprint":
            raise PreconditionFailed("You don't have an active blueprint here. Try 'create <item>' first.")
        if target_text and kind is None:
            if resolve_item(target_text) is None:
                raise InvalidArgument(f"You don't see any '{target_text}' to use that on.")
            raise Infeasible("Nothing happens.")

        if kind is None:
            kind = self._implied_target(world, item_id)
        if kind is None:
            raise Infeasible(f"Use the {self._name(item_id)} on what? Nothing happens.")
        if kind in FIRE_KINDS:
            kind = self._fire_kind(world, kind)
        elif kind == "log" and item_id not in (HANDS, FEET) and get_item(item_id).has_tag("chopping"):
            kind = "chopping_block"

        rule = (
            find_rule(HARVEST_RULES, item_id, kind)
            or find_rule(PROCESSING_RULES, item_id, kind)
            or find_rule(FIXED_RULES, item_id, kind)
        )
        if rule is None:
            raise Infeasible("Nothing happens.")
        return self._run(world, rule, source, item_id, kind)

    def chop(self, world: WorldState, target_text: str) -> Resolution:
        kind = target_kind(target_text) or "tree"
        if kind == "log":
            kind = "chopping_block"
        if kind not in ("tree", "bamboo", "chopping_block"):
            raise InvalidArgument(f"You can't chop '{target_text}'.")
        tool_id, source = self._find_tool(world, "chopping")
        rule = find_rule(HARVEST_RULES, tool_id, kind)
        return self._run(world, rule, source, tool_id, kind)

    def light(self, world: WorldState, target_text: str | None) -> Resolution:
        kind = target_kind(target_text) or "fire"
        if kind not in FIRE_KINDS:
            raise InvalidArgument(f"You can't light '{target_text}'.")
        fire_kind = self._fire_kind(world, kind)
        tool_id, source = self._find_tool(world, "ignition")
        return self._run(world, find_rule(FIXED_RULES, tool_id, fire_kind), source, tool_id, fire_kind)

    def stoke(self, world: WorldState, item_text: str, target_text: str | None) -> Resolution:
        item_id = self._resolve_item_or_hands(item_text)
        if item_id in (HANDS, FEET) or not get_item(item_id).fuel:
            raise Infeasible(f"The {self._name(item_id)} won't burn. Nothing happens.")
        kind = target_kind(target_text) or "fire"
        if kind not in FIRE_KINDS:
            raise InvalidArgument(f"You can't stoke '{target_text}'.")
        fire_kind = self._fire_kind(world, kind)
        source = self._source(world, item_id)
        return self._run(world, find_rule(FIXED_RULES, item_id, fire_kind), source, item_id, fire_kind)

    def _run(self, world: WorldState, rule: InteractionRule, source: ItemList, item_id: str, kind: str) -> Resolution:
        action = self._actions[rule.action]
        resolution = action(world, source, item_id, kind)
        if not resolution.ticks:
            resolution.ticks = rule.ticks
        return resolution

    def _resolve_item_or_hands(self, text: str) -> str:
        if text.strip().lower() in HAND_WORDS:
            return HANDS
        if text.strip().lower() in FOOT_WORDS:
            return FEET
        item_id = resolve_item(text)
        if item_id is None:
            raise InvalidArgument(f"You don't know what '{text}' is.")
        return item_id

    def _source(self, world: WorldState, item_id: str) -> ItemList:
        """The container an item is used from: the inventory first, then anything within reach."""
        if item_id in (HANDS, FEET):
            return world.player.inventory
        if world.player.inventory.has(item_id):
            return world.player.inventory
        for pile in world.store.reachable_piles(world.player.location_key):
            if pile.has(item_id):
                return pile
        raise PreconditionFailed(f"You don't have a {self._name(item_id)}.")

    def _find_tool(self, world: WorldState, tag: str) -> tuple[str, ItemList]:
        containers = [world.player.inventory, *world.store.reachable_piles(world.player.location_key)]
        candidates = sorted(
            (item_id for item_id, definition in ITEMS.items() if definition.has_tag(tag)),
            key=lambda item_id: -TOOL_POWER.get(item_id, 0),
        )
        for container in containers:
            for item_id in candidates:
                if container.has(item_id):
                    return item_id, container
        raise PreconditionFailed(f"You need a {tag} tool for that.")

    def _blueprint_target(self, world: WorldState, item_id: str, target_text: str | None) -> Blueprint | None:
        if item_id in (HANDS, FEET):
            return None
        return self._blueprints.find(world.blueprints, world.store, item_id, target_text)

    def _supply(self, world: WorldState, blueprint: Blueprint, item_id: str) -> Resolution:
        skill = blueprint.recipe.skill
        level_before = world.player.skills.level(skill)
        result = self._blueprints.supply(world.blueprints, world.store, blueprint, item_id)
        line = blueprint.line_for(item_id)
        events = [
            OutcomeEvent(
                EventKind.BLUEPRINT_SUPPLIED,
                {
                    "blueprint": blueprint.id,
                    "target": blueprint.target,
                    "item": item_id,
                    "supplied": line.supplied,
                    "needed": line.needed,
                },
            )
        ]
        name = get_item(item_id).name
        if not result.completed:
            return Resolution(f"You add the {name}. {blueprint.describe()}.", events, result.ticks)

        events.append(
            OutcomeEvent(
                EventKind.BLUEPRINT_COMPLETED,
                {"blueprint": blueprint.id, "target": blueprint.target, "location": result.produced_at},
            )
        )
        events.append(OutcomeEvent(EventKind.XP_AWARDED, {"skill": skill, "amount": blueprint.recipe.xp}))
        level_after = world.player.skills.level(skill)
        if level_after > level_before:
            events.append(OutcomeEvent(EventKind.LEVEL_UP, {"skill": skill, "level": level_after}))
        target_name = blueprint.target.replace("_", " ")
        if blueprint.recipe.places_object:
            message = f"You add the {name}. The {target_name} is finished and ready to light."
        elif result.produced_at == world.player.location_key:
            message = f"You add the {name} and finish the {target_name}. Your pack is full, so you set it down."
        else:
            message = f"You add the {name} and finish the {target_name}."
        return Resolution(message, events, result.ticks)

    def _implied_target(self, world: WorldState, item_id: str) -> str | None:
        if item_id in (HANDS, FEET):
            return None
        definition = get_item(item_id)
        if definition.has_tag("readable"):
            return "self"
        if definition.has_tag("water_kettle"):
            return "fire" if self._fire_here(world) is not None else None
        if definition.has_tag("hot_kettle"):
            return "tea"
        if definition.has_tag("tea") or definition.has_tag("blanket"):
            return "self"
        if definition.has_tag("ignition") or definition.fuel:
            if self._fire_here(world) is not None:
                return "fire"
        if definition.has_tag("food"):
            return "self"
        return None

    def _fire_here(self, world: WorldState) -> str | None:
        player = world.player
        if player.room == Room.CABIN_MAIN:
            return FIREPLACE
        if player.room in (None, Room.CABIN_TERRACE):
            key = world.store.campfire_key(player.position)
            if key in world.store.fires:
                return key
        return None

    def _fire_kind(self, world: WorldState, kind: str) -> str:
        fire_key = self._fire_here(world)
        if kind == "fireplace" and world.player.room != Room.CABIN_MAIN:
            raise PreconditionFailed("The fireplace is inside the cabin.")
        if kind == "campfire" and (fire_key is None or fire_key == FIREPLACE):
            raise PreconditionFailed("There's no campfire here.")
        if fire_key is None:
            raise PreconditionFailed("There's no fire pit or hearth here.")
        return "fireplace" if fire_key == FIREPLACE else "campfire"

    def _fire(self, world: WorldState, kind: str) -> tuple[str, Fire]:
        key = FIREPLACE if kind == "fireplace" else world.store.campfire_key(world.player.position)
        return key, world.store.fires[key]

    def _name(self, item_id: str) -> str:
        if item_id == HANDS:
            return "bare hands"
        if item_id == FEET:
            return "foot"
        return get_item(item_id).name

    # -- shared bookkeeping -----------------------------------------------------------

    def _check(self, world: WorldState, spec: CheckSpec, events: list[OutcomeEvent], bonus: float = 0) -> SkillCheck:
        check = world.player.skills.check(spec.skill, spec.base + bonus, spec.coeff, world.rng)
        events.append(
            OutcomeEvent(
                EventKind.SKILL_CHECK,
                {"skill": spec.skill, "probability": check.probability, "success": check.success},
            )
        )
        return check

    def _award(self, world: WorldState, skill: str, amount: int, events: list[OutcomeEvent]) -> None:
        levelled = world.player.skills.award_xp(skill, amount)
        events.append(OutcomeEvent(EventKind.XP_AWARDED, {"skill": skill, "amount": amount}))
        if levelled:
            level = world.player.skills.level(skill)
            events.append(OutcomeEvent(EventKind.LEVEL_UP, {"skill": skill, "level": level}))
            self._logger.info("skill_level_up", extra={"skill": skill, "level": level})

    def _award_check(self, world: WorldState, spec: CheckSpec, success: bool, events: list[OutcomeEvent]) -> None:
        self._award(world, spec.skill, xp_award(spec.xp, success, self._failure_xp_ratio), events)

    def _give(self, world: WorldState, item_id: str, quantity: int, events: list[OutcomeEvent]) -> None:
        """Put new items in the inventory; whatever doesn't fit lands at the player's feet."""
        player = world.player
        spilled = 0
        for _ in range(quantity):
            try:
                player.inventory.add(item_id)
            except ResourceExhausted:
                world.store.pile(player.location_key).add(item_id)
                spilled += 1
        if spilled:
            events.append(OutcomeEvent(EventKind.ITEM_SPILLED, {"item": item_id, "quantity": spilled}))

    def _wear(self, source: ItemList, item_id: str, events: list[OutcomeEvent]) -> None:
        if source.wear_tool(item_id):
            events.append(OutcomeEvent(EventKind.TOOL_BROKEN, {"item": item_id}))

    def _spend_energy(self, world: WorldState, amount: float, action: str) -> None:
        vitals = world.player.vitals
        if vitals.energy < amount:
            raise PreconditionFailed(f"You're too exhausted to {action}. Rest first.")
        vitals.adjust("energy", -amount)

    def _outdoor_node(self, world: WorldState, kind: str) -> ResourceNode:
        player = world.player
        if player.indoors:
            raise PreconditionFailed(f"There's no {kind} in here.")
        node = world.store.node_at(player.position, kind)
        if node is None:
            raise PreconditionFailed(f"There's no {kind} here.")
        return node

    # -- harvesting --------------------------------------------------------------------

    def _chop_tree(self, world: WorldState, source: ItemList, tool_id: str, kind: str) -> Resolution:
        node = self._outdoor_node(world, "tree")
        if kind == "bamboo" and node.variety != "bamboo":
            raise PreconditionFailed("There's no bamboo growing here.")
        if node.depleted:
            raise ResourceExhausted("This stand has been cut down. Saplings need time to grow.")
        self._spend_energy(world, CHOP_ENERGY, "swing an axe")

        events: list[OutcomeEvent] = []
        spec = SKILL_CHECKS["chop_tree"]
        check = self._check(world, spec, events)
        if check.success:
            node.progress += TOOL_POWER.get(tool_id, 1)
            self._wear(source, tool_id, events)
            events.append(
                OutcomeEvent(EventKind.TREE_CHOPPED, {"tree": node.variety, "progress": node.progress, "required": node.hits_required})
            )
            message = f"Your {self._name(tool_id)} bites deep into the {node.variety}."
            if node.progress >= node.hits_required:
                message += " " + self._fell(world, node, events)
        else:
            if world.rng.random() < 0.5:
                self._wear(source, tool_id, events)
            message = "The blade glances off the bark."
        self._award_check(world, spec, check.success, events)
        return Resolution(message, events)

    def _fell(self, world: WorldState, node: ResourceNode, events: list[OutcomeEvent]) -> str:
        node.progress = 0
        node.deplete()
        drops = list(TREE_DROPS[node.variety])
        if node.variety == "bamboo":
            drops.append(("bamboo", world.rng.randint(2, 4)))
        if node.variety == "apple" and node.fruit:
            drops.append(("apple", node.fruit))
            node.fruit = 0
        for item_id, quantity in drops:
            self._give(world, item_id, quantity, events)
        events.append(OutcomeEvent(EventKind.TREE_FELLED, {"tree": node.variety, "drops": dict(drops)}))
        if node.depleted:
            events.append(OutcomeEvent(EventKind.RESOURCE_DEPLETED, {"node": node.id}))
        return f"With a groan the {node.variety} comes down."

    def _split_firewood(self, world: WorldState, source: ItemList, tool_id: str, kind: str) -> Resolution:
        player = world.player
        if player.room != Room.WOODSHED:
            raise PreconditionFailed("The chopping block is in the woodshed.")
        if player.inventory.has("log"):
            logs = player.inventory
        elif world.store.items_at(Room.WOODSHED.value).has("log"):
            logs = world.store.pile(Room.WOODSHED.value)
        else:
            raise PreconditionFailed("There's no log to split.")
        self._spend_energy(world, SPLIT_ENERGY, "split wood")

        events: list[OutcomeEvent] = []
        spec = SKILL_CHECKS["split_firewood"]
        check = self._check(world, spec, events)
        if check.success:
            logs.take("log", 1)
            pieces = world.rng.randint(2, 4)
            self._give(world, "firewood", pieces, events)
            self._wear(source, tool_id, events)
            events.append(OutcomeEvent(EventKind.FIREWOOD_SPLIT, {"firewood": pieces}))
            message = f"The log splits cleanly into {pieces} pieces of firewood."
        else:
            damage = world.rng.randint(1, 5)
            player.vitals.adjust("health", -damage)
            events.append(OutcomeEvent(EventKind.INJURED, {"damage": damage}))
            message = "The axe skips off the log and jars your arm."
        self._award_check(world, spec, check.success, events)
        return Resolution(message, events)

    def _forage(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        node = self._outdoor_node(world, "bush")
        if node.depleted:
            raise ResourceExhausted("The undergrowth here has been picked clean for now.")
        self._spend_energy(world, FORAGE_ENERGY, "forage")

        events: list[OutcomeEvent] = []
        spec = SKILL_CHECKS["forage"]
        with_tool = item_id != HANDS
        check = self._check(world, spec, events, bonus=10 if with_tool else 0)
        if check.success:
            node.deplete()
            biome = world.grid.tile(world.player.position).biome
            found = weighted_pick(forage_table(biome), world.rng)
            self._give(world, found, 1, events)
            events.append(OutcomeEvent(EventKind.FORAGED, {"item": found, "node": node.id, "remaining": node.yield_remaining}))
            if node.depleted:
                events.append(OutcomeEvent(EventKind.RESOURCE_DEPLETED, {"node": node.id}))
            if with_tool:
                self._wear(source, item_id, events)
            message = f"You search the undergrowth and find {get_item(found).name}."
        else:
            message = "You rummage around but come up empty-handed."
            if world.rng.random() < 0.25:
                self._give(world, "dry_leaves", 1, events)
                message += " Only a few dry leaves cling to your sleeves."
        self._award_check(world, spec, check.success, events)
        self._award(world, "survival", 3 if check.success else 1, events)
        return Resolution(message, events)

    def _pick_fruit(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        node = self._outdoor_node(world, "tree")
        if node.variety != "apple" or node.depleted:
            raise PreconditionFailed("There's no fruit on these trees.")
        if node.fruit == 0:
            raise ResourceExhausted("The apples here have all been picked.")
        picked = min(node.fruit, 3)
        node.fruit -= picked
        events: list[OutcomeEvent] = []
        self._give(world, "apple", picked, events)
        events.append(OutcomeEvent(EventKind.FRUIT_PICKED, {"item": "apple", "quantity": picked}))
        self._award(world, "foraging", 2, events)
        return Resolution(f"You pick {picked} apple{'s' if picked > 1 else ''}.", events)

    # -- processing --------------------------------------------------------------------

    def _process(
        self,
        world: WorldState,
        source: ItemList,
        tool_id: str,
        material: str,
        needed: int,
        product: str,
        amount: int,
        skill: tuple[str, int],
        message: str,
    ) -> Resolution:
        inventory = world.player.inventory
        if not inventory.has(material, needed):
            raise PreconditionFailed(f"You need {needed} {get_item(material).name} in your pack for that.")
        events: list[OutcomeEvent] = []
        inventory.take(material, needed)
        self._give(world, product, amount, events)
        events.append(
            OutcomeEvent(EventKind.ITEM_PROCESSED, {"from": material, "to": product, "quantity": amount})
        )
        if get_item(tool_id).is_tool:
            self._wear(source, tool_id, events)
        self._award(world, skill[0], skill[1], events)
        return Resolution(message, events)

    def _whittle_log(self, world: WorldState, source: ItemList, tool_id: str, kind: str) -> Resolution:
        return self._process(
            world, source, tool_id, "log", 1, "kindling", 4, ("woodcutting", 2),
            "You whittle the log down into a pile of fine kindling.",
        )

    def _whittle_stick(self, world: WorldState, source: ItemList, tool_id: str, kind: str) -> Resolution:
        return self._process(
            world, source, tool_id, "stick", 1, "kindling", 1, ("woodcutting", 1), "You shave the stick into tinder."
        )

    def _split_bamboo(self, world: WorldState, source: ItemList, tool_id: str, kind: str) -> Resolution:
        return self._process(
            world, source, tool_id, "bamboo", 1, "paper", 3, ("tailoring", 2),
            "You split the bamboo and press it into thin sheets of paper.",
        )

    def _knap(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        self._spend_energy(world, 5, "knap stone")
        return self._process(
            world, source, item_id, "stone", 2, "sharp_stone", 1, ("stonemasonry", 5),
            "You smash the stones together, flaking off a razor-sharp edge.",
        )

    # -- fire --------------------------------------------------------------------------

    def _light(self, world: WorldState, source: ItemList, tool_id: str, kind: str) -> Resolution:
        key, fire = self._fire(world, kind)
        if fire.lit:
            raise PreconditionFailed("The fire is already burning.")
        if fire.fuel < 5:
            raise PreconditionFailed("There isn't enough fuel laid to catch a flame.")
        if not fire.tinder_ready:
            raise PreconditionFailed("You need some tinder in there first.")

        events: list[OutcomeEvent] = []
        self._wear(source, tool_id, events)
        spec = SKILL_CHECKS["light"]
        check = self._check(world, spec, events, bonus=10 if fire.fuel >= 10 else 0)
        if check.success:
            fire.ignite()
            world.player.vitals.adjust("mood", 2)
            events.append(OutcomeEvent(EventKind.FIRE_LIT, {"fire": key, "state": fire.state.value, "fuel": fire.fuel}))
            message = "The match flares and the tinder catches. Flames lick up through the fuel."
        else:
            fire.tinder_ready = False
            fire.fuel = max(0, fire.fuel - 2)
            message = "The match sputters out and the tinder smoulders to nothing."
        self._award_check(world, spec, check.success, events)
        return Resolution(message, events)

    def _stoke(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        key, fire = self._fire(world, kind)
        if fire.fuel >= Fire.MAX_FUEL:
            raise PreconditionFailed("The fire can't take any more fuel.")
        definition = get_item(item_id)
        source.take(item_id, 1)
        fire.add_fuel(definition.fuel)
        if definition.has_tag("tinder"):
            fire.tinder_ready = True
        events = [
            OutcomeEvent(
                EventKind.FIRE_STOKED,
                {"fire": key, "item": item_id, "fuel": fire.fuel, "state": fire.state.value, "tinder": fire.tinder_ready},
            )
        ]
        self._award(world, "fire_making", 1, events)
        return Resolution(f"You add the {definition.name} to the {kind}.", events)

    def _cook(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        key, fire = self._fire(world, kind)
        if not fire.lit:
            raise PreconditionFailed("You need a lit fire to cook.")
        needed, product, amount = COOKING[item_id]
        if not source.has(item_id, needed):
            raise PreconditionFailed(f"You need {needed} {get_item(item_id).name} to cook.")
        source.take(item_id, needed)
        events: list[OutcomeEvent] = []
        self._give(world, product, amount, events)
        events.append(OutcomeEvent(EventKind.COOKED, {"from": item_id, "to": product, "quantity": amount}))
        world.player.vitals.adjust("energy", -2)
        return Resolution(f"You cook the {get_item(item_id).name} over the flames.", events)

    # -- sustenance --------------------------------------------------------------------

    def _eat(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        definition = get_item(item_id)
        source.take(item_id, 1)
        vitals = world.player.vitals
        vitals.adjust("hunger", -definition.nutrition)
        vitals.adjust("thirst", -definition.hydration)
        vitals.adjust("mood", -5 if item_id in ("small_fish", "big_fish") else 1)
        events = [OutcomeEvent(EventKind.ATE, {"item": item_id, "hunger": vitals.hunger})]
        return Resolution(f"You eat the {definition.name}.", events)

    def _drink(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        player = world.player
        if player.room in (Room.CABIN_MAIN, Room.WOODSHED) or not world.grid.near_water(player.position):
            raise PreconditionFailed("There's no water within reach.")
        player.vitals.adjust("thirst", -30)
        events = [OutcomeEvent(EventKind.DRANK, {"thirst": player.vitals.thirst})]
        return Resolution("You cup your hands and drink the cold water.", events)

    # -- kettle and comforts -----------------------------------------------------------

    def _fill_kettle(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        player = world.player
        if player.room in (Room.CABIN_MAIN, Room.WOODSHED) or not world.grid.near_water(player.position):
            raise PreconditionFailed("There's no water within reach to fill the kettle.")
        if not player.inventory.has("kettle"):
            raise PreconditionFailed("Pick up the kettle first.")
        player.inventory.take("kettle", 1)
        player.inventory.add("water_kettle")
        events = [OutcomeEvent(EventKind.KETTLE_FILLED, {"item": "water_kettle"})]
        return Resolution("You dip the kettle into the water and fill it to the brim.", events)

    def _heat_kettle(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        key, fire = self._fire(world, kind)
        if not fire.lit:
            raise PreconditionFailed("The kettle needs a lit fire to heat.")
        source.take("water_kettle", 1)
        source.add("hot_water_kettle")
        events = [OutcomeEvent(EventKind.KETTLE_HEATED, {"fire": key, "item": "hot_water_kettle"})]
        return Resolution("You hang the kettle over the flames until it whistles and steams.", events)

    def _brew_tea(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        player = world.player
        if player.room != Room.CABIN_MAIN:
            raise PreconditionFailed("Brew tea at the table inside the cabin.")
        inventory = player.inventory
        for needed in ("hot_water_kettle", "tea_cup", "wild_herbs"):
            if not inventory.has(needed):
                raise PreconditionFailed(f"You need a {get_item(needed).name} in your pack to brew tea.")
        inventory.take("wild_herbs", 1)
        inventory.take("tea_cup", 1)
        inventory.take("hot_water_kettle", 1)
        inventory.add("kettle")
        inventory.add("herbal_tea")
        events = [OutcomeEvent(EventKind.TEA_BREWED, {"item": "herbal_tea"})]
        self._award(world, "foraging", 2, events)
        return Resolution("You steep the herbs in hot water. The cabin fills with a soft, green scent.", events)

    def _drink_tea(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        source.take(item_id, 1)
        source.add("tea_cup")
        vitals = world.player.vitals
        vitals.adjust("warmth", 12)
        vitals.adjust("mood", 18)
        vitals.adjust("energy", 6)
        events = [
            OutcomeEvent(
                EventKind.WARMED,
                {"item": item_id, "warmth": vitals.warmth, "mood": vitals.mood, "energy": vitals.energy},
            )
        ]
        return Resolution("You sip the tea slowly. Warmth spreads from your chest to your fingertips.", events)

    def _wrap_blanket(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        vitals = world.player.vitals
        vitals.adjust("warmth", 10)
        vitals.adjust("mood", 5)
        events = [OutcomeEvent(EventKind.WARMED, {"item": item_id, "warmth": vitals.warmth, "mood": vitals.mood})]
        return Resolution("You wrap the wool blanket around your shoulders.", events)

    def _read(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        pages = BOOK_PAGES.get(item_id)
        if not pages:
            raise Infeasible("Nothing happens.")
        player = world.player
        current = player.bookmarks.get(item_id, 0)
        if kind == "previous_page":
            page = max(1, current - 1)
        else:
            page = min(len(pages), current + 1)
        player.bookmarks[item_id] = page
        player.vitals.adjust("mood", 3 if item_id == "old_book" else 1)

        events = [OutcomeEvent(EventKind.BOOK_READ, {"item": item_id, "page": page, "pages": len(pages)})]
        message = f"Page {page} of {len(pages)}: {pages[page - 1]}"
        if item_id == "tutorial_book" and page == len(pages) and not player.tutorial_reward_claimed:
            player.tutorial_reward_claimed = True
            for reward, quantity in TUTORIAL_REWARD:
                self._give(world, reward, quantity, events)
            events.append(OutcomeEvent(EventKind.TUTORIAL_COMPLETED, {"reward": dict(TUTORIAL_REWARD)}))
            message += " Tucked behind the last page you find a knife, some kindling and a few apples."
        return Resolution(message, events)

    def _kick_tree(self, world: WorldState, source: ItemList, item_id: str, kind: str) -> Resolution:
        node = self._outdoor_node(world, "tree")
        if node.depleted:
            raise PreconditionFailed("Only stumps remain here.")
        events: list[OutcomeEvent] = []
        dropped = None
        if node.fruit > 0 and world.rng.random() < KICK_FRUIT_CHANCE:
            node.fruit -= 1
            dropped = "apple"
            self._give(world, "apple", 1, events)
            message = "You kick the trunk and an apple thumps down beside you."
        elif world.rng.random() < STUBBED_TOE_CHANCE:
            world.player.vitals.adjust("mood", -1)
            message = "You kick the tree and stub your toe. Ouch."
        else:
            message = f"The {node.variety} shudders, but nothing falls."
        events.append(OutcomeEvent(EventKind.TREE_KICKED, {"tree": node.variety, "dropped": dropped}))
        return Resolution(message, events)

    # -- standalone verbs --------------------------------------------------------------

    def fish(self, world: WorldState) -> Resolution:
        player = world.player
        if player.room in (Room.CABIN_MAIN, Room.WOODSHED):
            raise PreconditionFailed("You can't fish from in here.")
        if not world.grid.near_water(player.position):
            raise PreconditionFailed("You need to be beside the lake or the oasis to fish.")

        rod_source = None
        for container in [player.inventory, *world.store.reachable_piles(player.location_key)]:
            if container.has("fishing_rod"):
                rod_source = container
                break
        self._spend_energy(world, FISH_ENERGY, "fish")

        bonus = 20.0 if rod_source is not None else 0.0
        time_of_day = world.clock.time_of_day
        if time_of_day in (TimeOfDay.DAWN, TimeOfDay.DUSK):
            bonus += 10
        elif time_of_day == TimeOfDay.NOON:
            bonus -= 5
        if world.grid.weather_at(player.position).is_severe:
            bonus -= 15

        events: list[OutcomeEvent] = []
        spec = SKILL_CHECKS["fish"]
        check = self._check(world, spec, events, bonus=bonus)
        if rod_source is not None:
            self._wear(rod_source, "fishing_rod", events)
        if check.success:
            table = FISH_WITH_ROD if rod_source is not None else FISH_WITHOUT_ROD
            caught = weighted_pick(table, world.rng)
            self._give(world, caught, 1, events)
            events.append(OutcomeEvent(EventKind.FISHED, {"item": caught}))
            message = f"Something tugs on the line. You pull out a {get_item(caught).name}."
        else:
            events.append(OutcomeEvent(EventKind.FISHED, {"item": None}))
            message = "You wait at the water's edge but nothing bites."
        self._award_check(world, spec, check.success, events)
        return Resolution(message, events, FISH_TICKS)

    def rest(self, world: WorldState) -> Resolution:
        vitals = world.player.vitals
        by_fire = world.player_fire_state() != FireState.COLD
        gained = 30 + (10 if by_fire else 0)
        vitals.adjust("energy", gained)
        vitals.adjust("mood", 3)
        vitals.adjust("health", 2)
        events = [OutcomeEvent(EventKind.RESTED, {"energy": vitals.energy, "by_fire": by_fire})]
        message = "You rest beside the warm fire." if by_fire else "You sit down and rest a while."
        return Resolution(message, events, REST_TICKS)

    def observe(self, world: WorldState) -> Resolution:
        player = world.player
        if player.room in (Room.CABIN_MAIN, Room.WOODSHED):
            raise PreconditionFailed("The walls block your view. Step outside or onto the terrace.")

        events: list[OutcomeEvent] = []
        spec = SKILL_CHECKS["observe"]
        check = self._check(world, spec, events)
        if check.success:
            seen = world.store.creatures_near(player.position)
            sightings = [
                {"creature": creature.id, "species": creature.species, "behaviour": creature.behaviour.value}
                for creature in seen
            ]
            message = " ".join(creature.describe() for creature in seen) or "All is still around you."
        else:
            sightings = []
            message = "You glimpse movement at the edge of sight, but can't make it out."
        events.append(OutcomeEvent(EventKind.OBSERVED, {"sightings": sightings}))
        self._award_check(world, spec, check.success, events)
        return Resolution(message, events, OBSERVE_TICKS)

    def talk(self, world: WorldState, message: str | None) -> Resolution:
        player = world.player
        holding = player.inventory.has("rubber_duck")
        in_cabin = player.room == Room.CABIN_MAIN and (
            world.store.items_at(TABLE).has("rubber_duck") or world.store.items_at(Room.CABIN_MAIN.value).has("rubber_duck")
        )
        if not (holding or in_cabin):
            raise PreconditionFailed("You need to be near the rubber duck.")

        phrase = f"{world.rng.choice(DUCK_GAZE)} {world.rng.choice(DUCK_MANNER)}"
        player.vitals.adjust("mood", 2)
        opener = f'You: "{message.strip()}"' if message and message.strip() else "You address the rubber duck softly."
        events = [OutcomeEvent(EventKind.DUCK_SPOKE, {"duck": self._duck_name, "phrase": phrase, "said": message})]
        return Resolution(f"{opener}\n{phrase}\n{self._duck_name}: ...", events, 1)
