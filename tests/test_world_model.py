from __future__ import annotations

import random

import pytest

from rubber_duck.models import CABIN_POSITION, START_POSITION, FireState, Position
from rubber_duck.state import new_world
from rubber_duck.stepper import WorldStepper
from rubber_duck.world.clock import TimeOfDay, WorldClock, minutes_to_ticks
from rubber_duck.world.grid import REGION_WEATHERS, Biome, Region, Weather, WorldGrid, biome_at, region_of
from rubber_duck.world.temperature import compute_temperature, drift_warmth
from rubber_duck.world.wildlife import SPECIES


def test_clock_starts_on_day_one_morning() -> None:
    clock = WorldClock()

    assert clock.describe() == "Day 1, 08:00 (morning)"
    assert clock.time_of_day == TimeOfDay.MORNING


def test_clock_rolls_over_midnight() -> None:
    clock = WorldClock(tick=96)

    assert clock.day == 2
    assert clock.describe() == "Day 2, 00:00 (night)"


def test_minutes_round_up_to_whole_ticks() -> None:
    assert minutes_to_ticks(10) == 1
    assert minutes_to_ticks(25) == 3
    assert minutes_to_ticks(0) == 1


@pytest.mark.parametrize(
    ("row", "col", "biome"),
    [
        (6, 5, Biome.CLEARING),
        (10, 5, Biome.PATH),
        (4, 5, Biome.LAKE),
        (4, 3, Biome.OASIS),
        (6, 3, Biome.BAMBOO_GROVE),
        (0, 0, Biome.DESERT),
        (0, 9, Biome.WINTER_FOREST),
        (1, 5, Biome.SPRING_FOREST),
        (8, 6, Biome.MIXED_FOREST),
    ],
)
def test_biome_layout(row: int, col: int, biome: Biome) -> None:
    assert biome_at(Position(row, col)) == biome


def test_regions_follow_the_compass() -> None:
    assert region_of(Position(0, 5)) == Region.NORTH
    assert region_of(Position(10, 5)) == Region.SOUTH
    assert region_of(Position(5, 10)) == Region.EAST
    assert region_of(Position(5, 0)) == Region.WEST


def test_tile_features() -> None:
    grid = WorldGrid()

    assert grid.tile(CABIN_POSITION).has("cabin")
    assert grid.tile(START_POSITION).has("trailhead")
    assert not grid.tile(START_POSITION).has("bush")
    lake = grid.tile(Position(4, 5))
    assert lake.has("water")
    assert not lake.walkable
    assert grid.tile(Position(6, 3)).has("trees")
    assert grid.near_water(CABIN_POSITION)
    assert not grid.near_water(START_POSITION)


def test_weather_never_leaves_the_region_set() -> None:
    grid = WorldGrid()
    rng = random.Random(11)

    for _ in range(300):
        grid.reroll_weather(rng)
        for region, weather in grid.weather.items():
            assert weather in REGION_WEATHERS[region]


def test_indoor_fire_temperature() -> None:
    assert compute_temperature(Biome.CLEARING, TimeOfDay.MORNING, True, FireState.BURNING) == 43.0
    assert compute_temperature(Biome.CLEARING, TimeOfDay.MORNING, True, FireState.COLD, Weather.BLIZZARD) == 28.0


def test_outdoor_temperature_includes_weather() -> None:
    temperature = compute_temperature(Biome.WINTER_FOREST, TimeOfDay.NIGHT, False, FireState.COLD, Weather.BLIZZARD)

    assert temperature == -26.0


def test_warmth_drifts_in_bounded_steps() -> None:
    assert drift_warmth(50.0, 43.0) == pytest.approx(51.3)
    assert drift_warmth(50.0, -26.0) == pytest.approx(45.0)
    assert drift_warmth(100.0, 80.0) == 100.0


def test_wildlife_stays_in_its_habitat() -> None:
    world = new_world(5)
    stepper = WorldStepper()

    stepper.advance(world, 60)

    for creature in world.store.wildlife.values():
        biome = world.grid.tile(creature.position).biome
        assert biome in SPECIES[creature.species].biomes
