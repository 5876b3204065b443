"""In-progress crafting projects and their requirement ledgers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from rubber_duck.entities import EntityStore, Fire, ItemInstance
from rubber_duck.errors import InvalidArgument, PreconditionFailed, ResourceExhausted
from rubber_duck.registry import RECIPES, Recipe, get_item, resolve_recipe
from rubber_duck.world.clock import minutes_to_ticks

PLAYER_OWNER = "player"
BLUEPRINT_WORDS = ("blueprint", "project")


@dataclass(slots=True)
class BlueprintLine:
    item_id: str
    needed: int
    minutes_per_unit: int
    supplied: int = 0

    @property
    def missing(self) -> int:
        return self.needed - self.supplied


@dataclass(slots=True)
class Blueprint:
    id: str
    target: str
    owner: str
    lines: list[BlueprintLine]

    @property
    def recipe(self) -> Recipe:
        return RECIPES[self.target]

    @property
    def complete(self) -> bool:
        return all(line.missing == 0 for line in self.lines)

    def line_for(self, item_id: str) -> BlueprintLine | None:
        for line in self.lines:
            if line.item_id == item_id:
                return line
        return None

    def needs(self, item_id: str) -> bool:
        line = self.line_for(item_id)
        return line is not None and line.missing > 0

    @property
    def elapsed_minutes(self) -> int:
        return sum(line.supplied * line.minutes_per_unit for line in self.lines)

    def describe(self) -> str:
        parts = [f"{get_item(line.item_id).name} {line.supplied}/{line.needed}" for line in self.lines]
        return f"Blueprint for {self.target.replace('_', ' ')}: " + ", ".join(parts)


@dataclass(slots=True)
class BlueprintLedger:
    """Every open project in the world, in creation order."""

    open: dict[str, Blueprint] = field(default_factory=dict)
    focus: str | None = None
    next_id: int = 1

    def owned_by(self, owners: tuple[str, ...]) -> list[Blueprint]:
        return [blueprint for blueprint in self.open.values() if blueprint.owner in owners]


@dataclass(slots=True)
class CreateResult:
    blueprint: Blueprint
    resumed: bool


@dataclass(slots=True)
class SupplyResult:
    blueprint: Blueprint
    item_id: str
    ticks: int
    completed: bool = False
    produced_at: str | None = None


class BlueprintEngine:
    """Creates, feeds and completes blueprints against a ledger."""

    def __init__(self, *, duplicate_policy: str = "resume", logger: logging.Logger | None = None) -> None:
        self._duplicate_policy = duplicate_policy
        self._logger = logger or logging.getLogger("rubber_duck.blueprints")

    def create(self, ledger: BlueprintLedger, store: EntityStore, target_text: str) -> CreateResult:
        recipe = resolve_recipe(target_text)
        if recipe is None:
            raise InvalidArgument(f"You don't know how to make '{target_text}'.")

        player = store.player
        level = player.skills.level(recipe.skill)
        if level < recipe.level:
            raise PreconditionFailed(
                f"Making a {recipe.target.replace('_', ' ')} needs {recipe.skill} {recipe.level}; you have {level}."
            )

        if recipe.places_object:
            if player.indoors:
                raise PreconditionFailed("You need open ground outside to build that.")
            if store.campfire_key(player.position) in store.fires:
                raise PreconditionFailed("There is already a campfire here.")
            owner = player.position.key()
        else:
            owner = PLAYER_OWNER

        existing = [bp for bp in ledger.owned_by((owner,)) if bp.target == recipe.target]
        if existing and self._duplicate_policy == "resume":
            blueprint = existing[-1]
            ledger.focus = blueprint.id
            self._logger.info("blueprint_resumed", extra={"blueprint_id": blueprint.id, "target": blueprint.target})
            return CreateResult(blueprint=blueprint, resumed=True)
        if existing and self._duplicate_policy == "reject":
            raise PreconditionFailed(f"You already have a {recipe.target.replace('_', ' ')} project underway.")

        blueprint = Blueprint(
            id=f"bp-{ledger.next_id}",
            target=recipe.target,
            owner=owner,
            lines=[BlueprintLine(line.item_id, line.quantity, line.minutes_per_unit) for line in recipe.lines],
        )
        ledger.next_id += 1
        ledger.open[blueprint.id] = blueprint
        ledger.focus = blueprint.id
        self._logger.info("blueprint_created", extra={"blueprint_id": blueprint.id, "target": blueprint.target})
        return CreateResult(blueprint=blueprint, resumed=False)

    def find(
        self,
        ledger: BlueprintLedger,
        store: EntityStore,
        item_id: str,
        target_text: str | None,
    ) -> Blueprint | None:
        """Pick the blueprint a 'use' should feed, or None when no project is meant."""
        owners = (PLAYER_OWNER, store.player.location_key)
        candidates = ledger.owned_by(owners)
        if not candidates:
            return None

        if target_text:
            lowered = target_text.lower()
            named = resolve_recipe(lowered)
            for blueprint in reversed(candidates):
                if named is not None and blueprint.target == named.target:
                    return blueprint
            if not any(word in lowered for word in BLUEPRINT_WORDS):
                return None

        ordered = sorted(candidates, key=lambda bp: bp.id != ledger.focus)
        for blueprint in ordered:
            if blueprint.needs(item_id):
                return blueprint
        if target_text:
            return ordered[0]
        return None

    def supply(self, ledger: BlueprintLedger, store: EntityStore, blueprint: Blueprint, item_id: str) -> SupplyResult:
        player = store.player
        if blueprint.owner not in (PLAYER_OWNER, player.location_key):
            raise PreconditionFailed("You need to be at the building site to work on that.")
        if not blueprint.needs(item_id):
            raise PreconditionFailed(
                f"The {blueprint.target.replace('_', ' ')} doesn't need any {get_item(item_id).name}."
            )
        if not player.inventory.has(item_id):
            raise PreconditionFailed(f"You don't have any {get_item(item_id).name}.")
        if blueprint.recipe.places_object and store.campfire_key(player.position) in store.fires:
            raise PreconditionFailed("A campfire already stands here.")

        line = blueprint.line_for(item_id)
        player.inventory.take(item_id, 1)
        line.supplied += 1
        ledger.focus = blueprint.id
        result = SupplyResult(blueprint=blueprint, item_id=item_id, ticks=minutes_to_ticks(line.minutes_per_unit))

        if blueprint.complete:
            result.completed = True
            result.produced_at = self._complete(ledger, store, blueprint)
        return result

    def inspect(self, blueprint: Blueprint) -> tuple[tuple[str, int, int], ...]:
        return tuple((line.item_id, line.needed, line.supplied) for line in blueprint.lines)

    def _complete(self, ledger: BlueprintLedger, store: EntityStore, blueprint: Blueprint) -> str:
        del ledger.open[blueprint.id]
        if ledger.focus == blueprint.id:
            ledger.focus = next(reversed(ledger.open), None)

        player = store.player
        recipe = blueprint.recipe
        player.skills.award_xp(recipe.skill, recipe.xp)
        self._logger.info("blueprint_completed", extra={"blueprint_id": blueprint.id, "target": blueprint.target})

        if recipe.places_object:
            store.fires[store.campfire_key(player.position)] = Fire()
            return blueprint.owner

        try:
            player.inventory.add(recipe.target)
        except ResourceExhausted:
            store.pile(player.location_key).put(ItemInstance(recipe.target, 1, get_item(recipe.target).durability))
            return player.location_key
        return PLAYER_OWNER
