"""Skill levels, the experience curve and probability-gated checks."""

from __future__ import annotations

import random
from dataclasses import dataclass, field

MIN_LEVEL = 1
MAX_LEVEL = 100
MIN_CHANCE = 5.0
MAX_CHANCE = 95.0

SKILL_NAMES = (
    "woodcutting",
    "fire_making",
    "observation",
    "foraging",
    "fishing",
    "survival",
    "stonemasonry",
    "tailoring",
)
STARTING_LEVELS = {"woodcutting": 10, "fire_making": 10, "observation": 10, "foraging": 10}


def xp_for_level(level: int) -> int:
    """Cumulative experience needed to hold ``level``."""
    level = max(MIN_LEVEL, min(MAX_LEVEL, level))
    return int(10 * (level - 1) ** 1.5)


def level_for_xp(xp: int) -> int:
    level = MIN_LEVEL
    while level < MAX_LEVEL and xp >= xp_for_level(level + 1):
        level += 1
    return level


def success_probability(base: float, level: int, coeff: float) -> float:
    """Chance of success in percent, never below 5 nor above 95."""
    return max(MIN_CHANCE, min(MAX_CHANCE, base + level * coeff))


@dataclass(slots=True)
class Skill:
    level: int = MIN_LEVEL
    xp: int = 0


@dataclass(slots=True)
class SkillCheck:
    skill: str
    probability: float
    roll: float
    success: bool


@dataclass(slots=True)
class SkillBook:
    skills: dict[str, Skill] = field(default_factory=dict)

    @classmethod
    def starting(cls) -> SkillBook:
        book = cls()
        for name in SKILL_NAMES:
            level = STARTING_LEVELS.get(name, MIN_LEVEL)
            book.skills[name] = Skill(level=level, xp=xp_for_level(level))
        return book

    def level(self, name: str) -> int:
        skill = self.skills.get(name)
        return skill.level if skill else MIN_LEVEL

    def award_xp(self, name: str, amount: int) -> bool:
        """Add experience; returns True when the skill levelled up."""
        skill = self.skills.setdefault(name, Skill())
        skill.xp += max(0, amount)
        new_level = max(skill.level, level_for_xp(skill.xp))
        levelled = new_level > skill.level
        skill.level = new_level
        return levelled

    def check(self, name: str, base: float, coeff: float, rng: random.Random) -> SkillCheck:
        probability = success_probability(base, self.level(name), coeff)
        roll = rng.random() * 100
        return SkillCheck(skill=name, probability=probability, roll=roll, success=roll < probability)


def xp_award(full: int, success: bool, failure_ratio: float) -> int:
    """Full XP on success; a reduced share on failure that is never zero."""
    if success:
        return full
    return max(1, int(full * failure_ratio))
