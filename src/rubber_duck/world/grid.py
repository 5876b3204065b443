"""Static 11x11 biome map and its regional weather."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum

from rubber_duck.models import CABIN_POSITION, GRID_SIZE, START_POSITION, Position


class Biome(str, Enum):
    DESERT = "desert"
    OASIS = "oasis"
    SPRING_FOREST = "spring_forest"
    WINTER_FOREST = "winter_forest"
    LAKE = "lake"
    MIXED_FOREST = "mixed_forest"
    PATH = "path"
    BAMBOO_GROVE = "bamboo_grove"
    CLEARING = "clearing"

    @property
    def label(self) -> str:
        return _BIOME_LABELS[self]

    @property
    def base_temperature(self) -> float:
        return _BIOME_TEMPERATURES[self]

    @property
    def is_water(self) -> bool:
        return self in (Biome.LAKE, Biome.OASIS)

    @property
    def is_forest(self) -> bool:
        return self in (Biome.SPRING_FOREST, Biome.WINTER_FOREST, Biome.MIXED_FOREST, Biome.BAMBOO_GROVE)


_BIOME_LABELS = {
    Biome.DESERT: "scorching desert",
    Biome.OASIS: "refreshing oasis",
    Biome.SPRING_FOREST: "temperate forest",
    Biome.WINTER_FOREST: "snowy forest",
    Biome.LAKE: "tranquil lake",
    Biome.MIXED_FOREST: "mixed woodland",
    Biome.PATH: "worn forest path",
    Biome.BAMBOO_GROVE: "bamboo grove",
    Biome.CLEARING: "clearing",
}

_BIOME_TEMPERATURES = {
    Biome.DESERT: 35.0,
    Biome.OASIS: 28.0,
    Biome.SPRING_FOREST: 18.0,
    Biome.WINTER_FOREST: -5.0,
    Biome.LAKE: 15.0,
    Biome.MIXED_FOREST: 20.0,
    Biome.PATH: 20.0,
    Biome.BAMBOO_GROVE: 22.0,
    Biome.CLEARING: 20.0,
}


class Region(str, Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def season(self) -> Season:
        return _REGION_SEASONS[self]


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"


_REGION_SEASONS = {
    Region.NORTH: Season.SPRING,
    Region.EAST: Season.WINTER,
    Region.SOUTH: Season.AUTUMN,
    Region.WEST: Season.SUMMER,
}


class Weather(str, Enum):
    CLEAR = "clear"
    CLOUDY = "cloudy"
    OVERCAST = "overcast"
    LIGHT_RAIN = "light_rain"
    HEAVY_RAIN = "heavy_rain"
    FOG = "fog"
    SANDSTORM = "sandstorm"
    HEAT_WAVE = "heat_wave"
    LIGHT_SNOW = "light_snow"
    HEAVY_SNOW = "heavy_snow"
    BLIZZARD = "blizzard"

    @property
    def temperature_modifier(self) -> float:
        return _WEATHER_MODIFIERS[self]

    @property
    def is_severe(self) -> bool:
        return self in (Weather.HEAVY_RAIN, Weather.HEAVY_SNOW, Weather.BLIZZARD, Weather.SANDSTORM)

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


_WEATHER_MODIFIERS = {
    Weather.CLEAR: 0.0,
    Weather.CLOUDY: -2.0,
    Weather.OVERCAST: -4.0,
    Weather.LIGHT_RAIN: -5.0,
    Weather.HEAVY_RAIN: -7.0,
    Weather.FOG: -2.0,
    Weather.SANDSTORM: 5.0,
    Weather.HEAT_WAVE: 10.0,
    Weather.LIGHT_SNOW: -3.0,
    Weather.HEAVY_SNOW: -8.0,
    Weather.BLIZZARD: -15.0,
}

REGION_WEATHERS: dict[Region, tuple[Weather, ...]] = {
    Region.NORTH: (
        Weather.CLEAR,
        Weather.CLOUDY,
        Weather.OVERCAST,
        Weather.LIGHT_RAIN,
        Weather.HEAVY_RAIN,
        Weather.FOG,
    ),
    Region.EAST: (
        Weather.CLEAR,
        Weather.CLOUDY,
        Weather.OVERCAST,
        Weather.LIGHT_SNOW,
        Weather.HEAVY_SNOW,
        Weather.BLIZZARD,
        Weather.FOG,
    ),
    Region.WEST: (Weather.CLEAR, Weather.CLOUDY, Weather.HEAT_WAVE, Weather.SANDSTORM),
    Region.SOUTH: (Weather.CLEAR, Weather.CLOUDY, Weather.OVERCAST, Weather.LIGHT_RAIN, Weather.FOG),
}

INITIAL_WEATHER = {
    Region.NORTH: Weather.CLEAR,
    Region.EAST: Weather.LIGHT_SNOW,
    Region.SOUTH: Weather.CLOUDY,
    Region.WEST: Weather.CLEAR,
}

# Weather drifts along these edges; anything else is reachable only through clear skies.
_WEATHER_EDGES = {
    frozenset(pair)
    for pair in (
        (Weather.CLEAR, Weather.CLOUDY),
        (Weather.CLOUDY, Weather.OVERCAST),
        (Weather.OVERCAST, Weather.LIGHT_RAIN),
        (Weather.LIGHT_RAIN, Weather.HEAVY_RAIN),
        (Weather.OVERCAST, Weather.FOG),
        (Weather.CLOUDY, Weather.HEAT_WAVE),
        (Weather.HEAT_WAVE, Weather.SANDSTORM),
        (Weather.OVERCAST, Weather.LIGHT_SNOW),
        (Weather.LIGHT_SNOW, Weather.HEAVY_SNOW),
        (Weather.HEAVY_SNOW, Weather.BLIZZARD),
    )
}
_STAY_WEIGHT = 6
_EDGE_WEIGHT = 2


def transition_weights(current: Weather, allowed: tuple[Weather, ...]) -> list[tuple[Weather, int]]:
    """Markov weights for the next weather given the current one."""
    if current not in allowed:
        return [(weather, 1) for weather in allowed]

    weights: list[tuple[Weather, int]] = []
    for weather in allowed:
        if weather == current:
            weights.append((weather, _STAY_WEIGHT))
        elif frozenset((weather, current)) in _WEATHER_EDGES:
            weights.append((weather, _EDGE_WEIGHT))
        elif weather == Weather.CLEAR:
            weights.append((weather, 1))
    return weights


def next_weather(current: Weather, region: Region, rng: random.Random) -> Weather:
    options = transition_weights(current, REGION_WEATHERS[region])
    population = [weather for weather, _ in options]
    weights = [weight for _, weight in options]
    return rng.choices(population, weights=weights, k=1)[0]


def biome_at(position: Position) -> Biome:
    row, col = position.row, position.col
    if 3 <= row <= 5 and 4 <= col <= 6:
        return Biome.LAKE
    if 3 <= row <= 5 and col == 3:
        return Biome.OASIS
    if row == 6 and 3 <= col <= 4:
        return Biome.BAMBOO_GROVE
    if row == 6 and col in (5, 6):
        return Biome.CLEARING
    if col == 5 and row >= 7:
        return Biome.PATH
    if col <= 2:
        return Biome.DESERT
    if col >= 8:
        return Biome.WINTER_FOREST
    if row <= 2:
        return Biome.SPRING_FOREST
    return Biome.MIXED_FOREST


def region_of(position: Position) -> Region:
    centre = GRID_SIZE // 2
    d_row = position.row - centre
    d_col = position.col - centre
    if abs(d_row) >= abs(d_col):
        return Region.NORTH if d_row < 0 else Region.SOUTH
    return Region.EAST if d_col > 0 else Region.WEST


@dataclass(frozen=True, slots=True)
class Tile:
    position: Position
    biome: Biome
    features: tuple[str, ...] = ()

    @property
    def walkable(self) -> bool:
        return self.biome != Biome.LAKE

    def has(self, feature: str) -> bool:
        return feature in self.features


def _features_for(position: Position, biome: Biome) -> tuple[str, ...]:
    features: list[str] = []
    if position == START_POSITION:
        features.append("trailhead")
    if position == CABIN_POSITION:
        features.append("cabin")
    if biome.is_water:
        features.append("water")
    if biome.is_forest:
        features.append("trees")
    if biome not in (Biome.LAKE, Biome.PATH):
        features.append("bush")
    return tuple(features)


@dataclass(slots=True)
class WorldGrid:
    """Tile layout plus the current weather of each compass region."""

    weather: dict[Region, Weather] = field(default_factory=lambda: dict(INITIAL_WEATHER))
    tiles: dict[Position, Tile] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if not self.tiles:
            for row in range(GRID_SIZE):
                for col in range(GRID_SIZE):
                    position = Position(row, col)
                    biome = biome_at(position)
                    self.tiles[position] = Tile(position, biome, _features_for(position, biome))

    def tile(self, position: Position) -> Tile:
        return self.tiles[position]

    def weather_at(self, position: Position) -> Weather:
        return self.weather[region_of(position)]

    def season_at(self, position: Position) -> Season:
        return region_of(position).season

    def near_water(self, position: Position) -> bool:
        for d_row in (-1, 0, 1):
            for d_col in (-1, 0, 1):
                check = Position(position.row + d_row, position.col + d_col)
                if check.in_bounds() and self.tiles[check].biome.is_water:
                    return True
        return False

    def reroll_weather(self, rng: random.Random) -> dict[Region, Weather]:
        """Advance every region one Markov step; returns the regions that changed."""
        changed: dict[Region, Weather] = {}
        for region in Region:
            updated = next_weather(self.weather[region], region, rng)
            if updated != self.weather[region]:
                changed[region] = updated
            self.weather[region] = updated
        return changed
