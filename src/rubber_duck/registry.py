"""Static item, recipe and interaction definitions."""

from __future__ import annotations

from dataclasses import dataclass, field

from rubber_duck.world.grid import Biome

HANDS = "hands"
FEET = "feet"


@dataclass(frozen=True, slots=True)
class ItemDef:
    id: str
    name: str
    weight: float
    description: str
    tags: frozenset[str] = field(default_factory=frozenset)
    fuel: int = 0
    durability: int | None = None
    nutrition: float = 0.0
    hydration: float = 0.0

    @property
    def is_tool(self) -> bool:
        return self.durability is not None

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


def _item(
    item_id: str,
    weight: float,
    description: str,
    *tags: str,
    fuel: int = 0,
    durability: int | None = None,
    nutrition: float = 0.0,
    hydration: float = 0.0,
    name: str | None = None,
) -> ItemDef:
    if fuel:
        tags = (*tags, "flammable")
    if nutrition:
        tags = (*tags, "food")
    if durability is not None:
        tags = (*tags, "tool")
    return ItemDef(
        id=item_id,
        name=name or item_id.replace("_", " "),
        weight=weight,
        description=description,
        tags=frozenset(tags),
        fuel=fuel,
        durability=durability,
        nutrition=nutrition,
        hydration=hydration,
    )


ITEMS: dict[str, ItemDef] = {
    item.id: item
    for item in (
        _item("log", 5.0, "A heavy length of split trunk. Burns for a long time.", fuel=60),
        _item("firewood", 2.0, "Split firewood, dry and ready for the hearth.", fuel=30),
        _item("kindling", 0.5, "Thin dry shavings that catch a flame easily.", "tinder", fuel=10),
        _item("stick", 0.5, "A sturdy stick. Useful for crafting or as fuel.", fuel=5),
        _item("pinecone", 0.2, "A resinous pinecone that crackles when burnt.", "tinder", fuel=5),
        _item("bark", 0.3, "Papery strips of bark.", "tinder", fuel=6),
        _item("dry_leaves", 0.1, "A crumbly handful of dry leaves.", "tinder", fuel=3),
        _item("charcoal", 0.5, "A lump of charcoal that burns hot and slow.", fuel=40),
        _item("paper", 0.1, "A thin pressed sheet of bamboo paper.", "tinder", fuel=1),
        _item("plant_fiber", 0.1, "Tough strands of plant fibre.", "tinder", fuel=1, name="plant fiber"),
        _item(
            "old_book", 1.0, "A water-stained book with most pages stuck together.", "tinder", "readable", fuel=8
        ),
        _item("tutorial_book", 0.8, "A handwritten guide titled 'Cabin Tutorial'.", "readable"),
        _item("stone", 0.5, "A smooth stone. Could be knapped into a tool.", "stone"),
        _item("sharp_stone", 0.5, "A stone with a razor-sharp edge."),
        _item("cordage", 0.2, "A length of twisted plant-fibre cord."),
        _item("bamboo", 1.0, "A straight, hollow bamboo stalk."),
        _item("axe", 3.0, "A sturdy woodcutting axe with a worn hickory handle.", "chopping", durability=60),
        _item("stone_axe", 2.0, "A crude axe made by tying a sharp stone to a stick.", "chopping", durability=25),
        _item("knife", 0.5, "A sharp hunting knife.", "cutting", durability=50),
        _item("stone_knife", 0.4, "A rough blade knapped from stone. Sharp enough to cut.", "cutting", durability=20),
        _item("fishing_rod", 1.5, "A bamboo rod strung with cordage.", "fishing", durability=30),
        _item("matchbox", 0.1, "A small box of strike-anywhere matches.", "ignition", durability=20),
        _item("wild_berry", 0.1, "A handful of tart wild berries.", "cookable", nutrition=5, hydration=2),
        _item("apple", 0.2, "A crisp apple.", nutrition=10, hydration=3),
        _item("date", 0.1, "A sticky sweet date from a desert palm.", nutrition=8),
        _item("wild_herbs", 0.1, "Fragrant wild herbs.", "herb", nutrition=2, hydration=1),
        _item("small_fish", 0.5, "A small silvery fish.", "cookable", nutrition=6, name="small fish"),
        _item("big_fish", 2.0, "A heavy lake fish.", "cookable", nutrition=10, name="big fish"),
        _item("cooked_fish", 0.5, "Flaky grilled fish.", nutrition=25, hydration=2),
        _item("cooked_berries", 0.2, "Roasted berries with caramelised juices.", nutrition=12, hydration=1),
        _item("old_boot", 1.0, "A waterlogged boot. Not much use to anyone."),
        _item("tea_cup", 0.3, "A chipped enamel tea cup."),
        _item("kettle", 1.5, "A soot-blackened kettle.", "kettle"),
        _item("water_kettle", 2.5, "The kettle, sloshing with murky lake water.", "water_kettle", name="kettle of water"),
        _item("hot_water_kettle", 2.5, "The kettle, steaming with boiled water.", "hot_kettle", name="kettle of hot water"),
        _item("herbal_tea", 0.5, "A cup of herbal tea, fragrant with mint and chamomile.", "tea", name="cup of herbal tea"),
        _item("wool_blanket", 2.0, "A thick wool blanket that smells of cedar.", "blanket"),
        _item("strange_compass", 0.3, "A brass compass whose needle points at the lake, not north."),
        _item("ancient_map", 0.1, "A faded map: desert to the west, snow to the east, a lake at the centre."),
        _item("rubber_duck", 0.2, "A yellow rubber duck with a knowing look."),
    )
}

ALIASES = {
    "berries": "wild_berry",
    "wild_berries": "wild_berry",
    "berry": "wild_berry",
    "herbs": "wild_herbs",
    "fiber": "plant_fiber",
    "fibre": "plant_fiber",
    "leaves": "dry_leaves",
    "matches": "matchbox",
    "match": "matchbox",
    "duck": "rubber_duck",
    "rod": "fishing_rod",
    "fish": "small_fish",
    "book": "old_book",
    "guide": "tutorial_book",
    "tutorial": "tutorial_book",
    "compass": "strange_compass",
    "map": "ancient_map",
    "blanket": "wool_blanket",
    "cup": "tea_cup",
    "teacup": "tea_cup",
    "tea": "herbal_tea",
    "hot_kettle": "hot_water_kettle",
    "filled_kettle": "water_kettle",
    "boot": "old_boot",
    "cord": "cordage",
    "rope": "cordage",
    "wood": "firewood",
    "logs": "log",
}


def get_item(item_id: str) -> ItemDef:
    return ITEMS[item_id]


def resolve_item(text: str) -> str | None:
    """Map a typed item name (plural, spaced or aliased) to its id."""
    query = text.strip().lower().removeprefix("the ").removeprefix("a ").strip()
    candidates = [query, query.replace(" ", "_")]
    if query.endswith("es"):
        candidates.append(query[:-2].replace(" ", "_"))
    if query.endswith("s"):
        candidates.append(query[:-1].replace(" ", "_"))
    for candidate in candidates:
        if candidate in ITEMS:
            return candidate
        if candidate in ALIASES:
            return ALIASES[candidate]
    for item in ITEMS.values():
        if item.name == query:
            return item.id
    return None


@dataclass(frozen=True, slots=True)
class RecipeLine:
    item_id: str
    quantity: int
    minutes_per_unit: int


@dataclass(frozen=True, slots=True)
class Recipe:
    target: str
    lines: tuple[RecipeLine, ...]
    skill: str
    level: int
    xp: int
    places_object: bool = False

    @property
    def total_minutes(self) -> int:
        return sum(line.quantity * line.minutes_per_unit for line in self.lines)


RECIPES: dict[str, Recipe] = {
    recipe.target: recipe
    for recipe in (
        Recipe(
            "stone_knife",
            (RecipeLine("sharp_stone", 1, 10), RecipeLine("stick", 1, 10), RecipeLine("plant_fiber", 1, 10)),
            skill="stonemasonry",
            level=1,
            xp=15,
        ),
        Recipe(
            "stone_axe",
            (RecipeLine("sharp_stone", 1, 10), RecipeLine("stick", 1, 10), RecipeLine("cordage", 1, 20)),
            skill="stonemasonry",
            level=5,
            xp=20,
        ),
        Recipe(
            "campfire",
            (RecipeLine("stone", 4, 10), RecipeLine("kindling", 1, 10), RecipeLine("log", 2, 10)),
            skill="survival",
            level=5,
            xp=20,
            places_object=True,
        ),
        Recipe("cordage", (RecipeLine("plant_fiber", 3, 10),), skill="tailoring", level=1, xp=10),
        Recipe(
            "fishing_rod",
            (RecipeLine("bamboo", 1, 10), RecipeLine("stick", 1, 10), RecipeLine("cordage", 1, 20)),
            skill="tailoring",
            level=3,
            xp=15,
        ),
    )
}


def resolve_recipe(text: str) -> Recipe | None:
    query = text.strip().lower().replace(" ", "_")
    if query in RECIPES:
        return RECIPES[query]
    item_id = resolve_item(text)
    return RECIPES.get(item_id) if item_id else None


@dataclass(frozen=True, slots=True)
class InteractionRule:
    item_tag: str
    target: str
    action: str
    ticks: int


HARVEST_RULES: tuple[InteractionRule, ...] = (
    InteractionRule("chopping", "tree", "chop_tree", 3),
    InteractionRule("chopping", "bamboo", "chop_tree", 3),
    InteractionRule("chopping", "chopping_block", "split_firewood", 2),
    InteractionRule(HANDS, "bush", "forage", 2),
    InteractionRule("cutting", "bush", "forage", 2),
    InteractionRule(HANDS, "tree", "pick_fruit", 1),
    InteractionRule(FEET, "tree", "kick_tree", 1),
)

PROCESSING_RULES: tuple[InteractionRule, ...] = (
    InteractionRule("cutting", "log", "whittle_log", 2),
    InteractionRule("cutting", "stick", "whittle_stick", 1),
    InteractionRule("cutting", "bamboo", "split_bamboo", 2),
    InteractionRule("stone", "stone", "knap", 1),
)

FIXED_RULES: tuple[InteractionRule, ...] = (
    InteractionRule("ignition", "fireplace", "light", 1),
    InteractionRule("ignition", "campfire", "light", 1),
    InteractionRule("flammable", "fireplace", "stoke", 1),
    InteractionRule("flammable", "campfire", "stoke", 1),
    InteractionRule("cookable", "fireplace", "cook", 2),
    InteractionRule("cookable", "campfire", "cook", 2),
    InteractionRule("food", "self", "eat", 1),
    InteractionRule(HANDS, "water", "drink", 1),
    InteractionRule("kettle", "water", "fill_kettle", 1),
    InteractionRule("water_kettle", "fireplace", "heat_kettle", 2),
    InteractionRule("water_kettle", "campfire", "heat_kettle", 2),
    InteractionRule("hot_kettle", "tea", "brew_tea", 1),
    InteractionRule("herb", "tea", "brew_tea", 1),
    InteractionRule("tea", "self", "drink_tea", 1),
    InteractionRule("blanket", "self", "wrap_blanket", 1),
    InteractionRule("readable", "self", "read", 1),
    InteractionRule("readable", "next_page", "read", 1),
    InteractionRule("readable", "previous_page", "read", 1),
)


def item_tags(item_id: str) -> frozenset[str]:
    if item_id in (HANDS, FEET):
        return frozenset({item_id})
    return ITEMS[item_id].tags


def find_rule(rules: tuple[InteractionRule, ...], item_id: str, target: str) -> InteractionRule | None:
    tags = item_tags(item_id)
    for rule in rules:
        if rule.target == target and rule.item_tag in tags:
            return rule
    return None


@dataclass(frozen=True, slots=True)
class CheckSpec:
    skill: str
    base: float
    coeff: float
    xp: int


SKILL_CHECKS: dict[str, CheckSpec] = {
    "chop_tree": CheckSpec("woodcutting", 55, 0.4, 6),
    "split_firewood": CheckSpec("woodcutting", 50, 0.5, 5),
    "forage": CheckSpec("foraging", 60, 0.5, 8),
    "light": CheckSpec("fire_making", 50, 0.5, 10),
    "fish": CheckSpec("fishing", 30, 0.5, 8),
    "observe": CheckSpec("observation", 40, 0.5, 6),
}

TOOL_POWER = {"axe": 2, "stone_axe": 1}

TREE_HITS = {"pine": 5, "birch": 5, "apple": 5, "bamboo": 3}
TREE_DROPS: dict[str, tuple[tuple[str, int], ...]] = {
    "pine": (("log", 2), ("kindling", 1), ("pinecone", 2), ("bark", 1)),
    "birch": (("log", 2), ("bark", 2), ("kindling", 1)),
    "apple": (("log", 1), ("stick", 2)),
    "bamboo": (),
}
TREE_DESCRIPTIONS = {
    "pine": "A tall pine stands here, sap-heavy and straight.",
    "birch": "A slender birch with pale bark and delicate branches.",
    "apple": "A hardy apple tree, its branches often heavy with fruit.",
    "bamboo": "A cluster of bamboo stalks sways softly in the breeze.",
}
APPLE_FRUIT_MAX = 6
APPLE_REGROW_CHANCE = 0.18

TREE_VARIETIES: dict[Biome, tuple[tuple[str, int], ...]] = {
    Biome.SPRING_FOREST: (("birch", 3), ("apple", 2), ("pine", 1)),
    Biome.MIXED_FOREST: (("pine", 2), ("birch", 2), ("apple", 1)),
    Biome.WINTER_FOREST: (("pine", 1),),
    Biome.BAMBOO_GROVE: (("bamboo", 1),),
}
TREES_PER_STAND = 3

BUSH_YIELD = {
    Biome.DESERT: 2,
    Biome.OASIS: 4,
    Biome.WINTER_FOREST: 3,
    Biome.BAMBOO_GROVE: 5,
}
DEFAULT_BUSH_YIELD = 8

_COMMON_FORAGE = (
    ("stick", 30),
    ("plant_fiber", 25),
    ("stone", 15),
    ("wild_berry", 15),
    ("wild_herbs", 10),
    ("dry_leaves", 5),
)
FORAGE_YIELDS: dict[Biome, tuple[tuple[str, int], ...]] = {
    Biome.DESERT: (("date", 30), ("stone", 30), ("plant_fiber", 20), ("stick", 20)),
    Biome.OASIS: (("date", 35), ("plant_fiber", 25), ("stick", 20), ("wild_herbs", 20)),
    Biome.WINTER_FOREST: (("stick", 40), ("pinecone", 25), ("stone", 20), ("plant_fiber", 15)),
    Biome.BAMBOO_GROVE: (("plant_fiber", 35), ("stick", 30), ("wild_berry", 20), ("dry_leaves", 15)),
}


def forage_table(biome: Biome) -> tuple[tuple[str, int], ...]:
    return FORAGE_YIELDS.get(biome, _COMMON_FORAGE)


def bush_yield(biome: Biome) -> int:
    return BUSH_YIELD.get(biome, DEFAULT_BUSH_YIELD)


FISH_WITH_ROD = (("small_fish", 55), ("big_fish", 25), ("old_boot", 20))
FISH_WITHOUT_ROD = (("small_fish", 75), ("big_fish", 5), ("old_boot", 20))

COOKING: dict[str, tuple[int, str, int]] = {
    "small_fish": (1, "cooked_fish", 1),
    "big_fish": (1, "cooked_fish", 2),
    "wild_berry": (2, "cooked_berries", 1),
}

BOOK_PAGES: dict[str, tuple[str, ...]] = {
    "tutorial_book": (
        "Welcome to the cabin. 'look' to see what is around you, 'status' to check yourself, 'inventory' to see your pack.",
        "Walk with 'move north' or just 'n'. 'enter cabin' and 'exit' take you in and out; the terrace sits on the east side.",
        "Cupboards and the cellar hatch open with 'open cupboard'. 'take' and 'drop' move things between you and the world.",
        "Warmth first. Lay kindling and firewood in the fireplace with 'stoke kindling', then 'light fireplace' with the matchbox.",
        "A fire burns its fuel down over time. Feed it before it goes out, and stay near it when the nights turn cold.",
        "Logs come from trees: 'chop tree' with an axe outside. Split them at the woodshed's chopping block with 'split log'.",
        "The undergrowth hides berries, herbs and stones. 'use hands on bush' to forage, or use a knife for a better find.",
        "Eat with 'use apple'. Drink from the lake with 'use hands on water'. Fish by the shore with 'fish'.",
        "Fill the kettle at the lake, heat it on a fire, then brew herbs in a cup inside the cabin for a warming tea.",
        "'create campfire' or 'create stone knife' starts a blueprint. Feed it materials with 'use stone on campfire'.",
        "Every task trains a skill. Failing still teaches a little. 'rest' restores energy, 'observe' shows the wildlife nearby.",
        "When you feel stuck, talk to the rubber duck on the table. It will not answer, but it listens.",
    ),
    "old_book": (
        "Indecipherable symbols crowd the page, circling diagrams of stars and planets you do not recognise.",
    ),
}

TUTORIAL_REWARD: tuple[tuple[str, int], ...] = (("knife", 1), ("kindling", 5), ("apple", 3))
