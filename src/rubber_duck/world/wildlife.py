"""Wildlife species, activity schedules and per-tick behaviour."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum

from rubber_duck.models import Direction, Position
from rubber_duck.world.clock import TimeOfDay
from rubber_duck.world.grid import Biome, Weather, WorldGrid

BEHAVIOUR_REROLL_CHANCE = 0.3


class Schedule(str, Enum):
    DIURNAL = "diurnal"
    NOCTURNAL = "nocturnal"
    CREPUSCULAR = "crepuscular"

    def is_active(self, time_of_day: TimeOfDay) -> bool:
        return time_of_day in _ACTIVE_BANDS[self]


_ACTIVE_BANDS = {
    Schedule.DIURNAL: {TimeOfDay.MORNING, TimeOfDay.NOON, TimeOfDay.AFTERNOON},
    Schedule.NOCTURNAL: {TimeOfDay.EVENING, TimeOfDay.NIGHT, TimeOfDay.MIDNIGHT},
    Schedule.CREPUSCULAR: {TimeOfDay.DAWN, TimeOfDay.MORNING, TimeOfDay.DUSK, TimeOfDay.EVENING},
}


class Behaviour(str, Enum):
    SLEEPING = "sleeping"
    RESTING = "resting"
    GRAZING = "grazing"
    FORAGING = "foraging"
    HUNTING = "hunting"
    MOVING = "moving"
    ALERT = "alert"
    SWIMMING = "swimming"
    SINGING = "singing"
    BASKING = "basking"


@dataclass(frozen=True, slots=True)
class Species:
    id: str
    name: str
    biomes: frozenset[Biome]
    schedule: Schedule
    behaviours: tuple[Behaviour, ...]


_FOREST = frozenset({Biome.SPRING_FOREST, Biome.MIXED_FOREST})
_DRYLAND = frozenset({Biome.DESERT, Biome.OASIS})
_SNOW = frozenset({Biome.WINTER_FOREST})
_WATER = frozenset({Biome.LAKE, Biome.OASIS})

B = Behaviour
SPECIES: dict[str, Species] = {
    species.id: species
    for species in (
        Species("deer", "deer", _FOREST, Schedule.CREPUSCULAR, (B.GRAZING, B.GRAZING, B.MOVING, B.ALERT, B.RESTING)),
        Species("rabbit", "rabbit", _FOREST, Schedule.CREPUSCULAR, (B.FORAGING, B.FORAGING, B.MOVING, B.ALERT)),
        Species("fox", "fox", _FOREST, Schedule.CREPUSCULAR, (B.HUNTING, B.MOVING, B.RESTING, B.ALERT)),
        Species("songbird", "songbird", _FOREST, Schedule.DIURNAL, (B.SINGING, B.SINGING, B.MOVING, B.RESTING)),
        Species("desert_lizard", "desert lizard", _DRYLAND, Schedule.DIURNAL, (B.BASKING, B.BASKING, B.MOVING, B.HUNTING)),
        Species("scorpion", "scorpion", _DRYLAND, Schedule.NOCTURNAL, (B.HUNTING, B.HUNTING, B.RESTING)),
        Species("hawk", "hawk", _DRYLAND, Schedule.DIURNAL, (B.HUNTING, B.MOVING, B.RESTING)),
        Species("wolf", "wolf", _SNOW, Schedule.NOCTURNAL, (B.HUNTING, B.MOVING, B.ALERT, B.RESTING)),
        Species("snowy_owl", "snowy owl", _SNOW, Schedule.NOCTURNAL, (B.HUNTING, B.HUNTING, B.RESTING)),
        Species("snowshoe_hare", "snowshoe hare", _SNOW, Schedule.DIURNAL, (B.FORAGING, B.FORAGING, B.MOVING, B.ALERT)),
        Species("duck", "duck", _WATER, Schedule.DIURNAL, (B.SWIMMING, B.SWIMMING, B.FORAGING, B.RESTING)),
        Species("heron", "heron", _WATER, Schedule.DIURNAL, (B.HUNTING, B.HUNTING, B.RESTING, B.MOVING)),
        Species("frog", "frog", _WATER, Schedule.CREPUSCULAR, (B.SINGING, B.SWIMMING, B.RESTING)),
    )
}
del B

ROSTER: tuple[tuple[str, int], ...] = (
    ("deer", 2),
    ("rabbit", 2),
    ("fox", 1),
    ("songbird", 2),
    ("desert_lizard", 2),
    ("scorpion", 1),
    ("hawk", 1),
    ("wolf", 1),
    ("snowy_owl", 1),
    ("snowshoe_hare", 2),
    ("duck", 2),
    ("heron", 1),
    ("frog", 1),
)


@dataclass(slots=True)
class Creature:
    id: str
    species: str
    position: Position
    behaviour: Behaviour = Behaviour.RESTING

    @property
    def kind(self) -> Species:
        return SPECIES[self.species]

    def describe(self) -> str:
        return f"A {self.kind.name} is {self.behaviour.value}."


def spawn_wildlife(grid: WorldGrid, rng: random.Random) -> list[Creature]:
    creatures: list[Creature] = []
    positions = sorted(grid.tiles, key=lambda pos: (pos.row, pos.col))
    for species_id, count in ROSTER:
        habitat = [pos for pos in positions if grid.tile(pos).biome in SPECIES[species_id].biomes]
        for index in range(count):
            creatures.append(
                Creature(
                    id=f"{species_id}-{index + 1}",
                    species=species_id,
                    position=rng.choice(habitat),
                )
            )
    return creatures


def choose_behaviour(species: Species, time_of_day: TimeOfDay, weather: Weather, rng: random.Random) -> Behaviour:
    if not species.schedule.is_active(time_of_day) or weather.is_severe:
        return Behaviour.SLEEPING if rng.random() < 0.8 else Behaviour.RESTING
    return rng.choice(species.behaviours)


def update_creature(creature: Creature, grid: WorldGrid, time_of_day: TimeOfDay, rng: random.Random) -> bool:
    """Advance one creature by a tick. Returns True when it changed tiles."""
    if rng.random() < BEHAVIOUR_REROLL_CHANCE:
        weather = grid.weather_at(creature.position)
        creature.behaviour = choose_behaviour(creature.kind, time_of_day, weather, rng)

    if creature.behaviour != Behaviour.MOVING:
        return False

    direction = rng.choice(list(Direction))
    target = creature.position.moved(direction)
    if not target.in_bounds() or grid.tile(target).biome not in creature.kind.biomes:
        return False
    creature.position = target
    return True
