"""Ambient temperature and its pull on the player's warmth."""

from __future__ import annotations

from rubber_duck.models import FireState
from rubber_duck.world.clock import TimeOfDay
from rubber_duck.world.grid import Biome, Weather

INDOOR_BONUS = 8.0
WARMTH_OFFSET = 20.0
WARMTH_DRIFT_RATE = 0.1
WARMTH_MAX_STEP = 5.0

FIRE_HEAT = {
    FireState.COLD: 0.0,
    FireState.SMOLDERING: 5.0,
    FireState.BURNING: 15.0,
    FireState.ROARING: 25.0,
}


def compute_temperature(
    biome: Biome,
    time_of_day: TimeOfDay,
    indoor: bool,
    fire_state: FireState = FireState.COLD,
    weather: Weather | None = None,
) -> float:
    temperature = biome.base_temperature + time_of_day.temperature_modifier
    if indoor:
        temperature += INDOOR_BONUS
    elif weather is not None:
        temperature += weather.temperature_modifier
    return temperature + FIRE_HEAT[fire_state]


def warmth_target(temperature: float) -> float:
    return min(100.0, max(0.0, temperature + WARMTH_OFFSET))


def drift_warmth(warmth: float, temperature: float) -> float:
    """Move warmth a bounded step toward what the temperature supports."""
    gap = warmth_target(temperature) - warmth
    step = max(-WARMTH_MAX_STEP, min(WARMTH_MAX_STEP, gap * WARMTH_DRIFT_RATE))
    return min(100.0, max(0.0, warmth + step))


def describe_temperature(temperature: float) -> str:
    if temperature < 0:
        return "freezing"
    if temperature < 10:
        return "cold"
    if temperature < 18:
        return "cool"
    if temperature < 26:
        return "mild"
    if temperature < 32:
        return "warm"
    return "hot"
