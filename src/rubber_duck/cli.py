"""CLI-side handler wrappers and utility commands."""

from __future__ import annotations

from typing import Any

from rubber_duck.actions.intents import Simulate, Status
from rubber_duck.engine import GameEngine
from rubber_duck.persistence import JsonStateStore


class CliCommandHandler:
    """Simple sync facade over the game engine that returns printable dicts."""

    def __init__(self, engine: GameEngine) -> None:
        self._engine = engine

    def new_world(self, seed: int | None = None) -> dict[str, Any]:
        world = self._engine.new_world(seed)
        if not self._engine.config.autosave:
            self._engine.save()
        return {
            "seed": world.seed,
            "time": world.clock.describe(),
            "position": [world.player.position.row, world.player.position.col],
            "state_path": str(self._engine.store.path),
        }

    def do(self, text: str) -> dict[str, Any]:
        return self._engine.handle_text(text).to_dict()

    def call(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        return self._engine.handle_call(name, arguments).to_dict()

    def simulate(self, ticks: int) -> dict[str, Any]:
        return self._engine.handle(Simulate(ticks)).to_dict()

    def status(self) -> dict[str, Any]:
        return self._engine.handle(Status()).to_dict()

    def validate(self, store: JsonStateStore | None = None) -> dict[str, Any]:
        """Load the save through full validation; raises StateCorruption when it is bad."""
        store = store or self._engine.store
        world = store.load()
        if world is None:
            return {"valid": False, "path": str(store.path), "problems": ["no save file"]}
        return {
            "valid": True,
            "path": str(store.path),
            "seed": world.seed,
            "tick": world.clock.tick,
            "problems": [],
        }


def parse_arguments(pairs: list[str]) -> dict[str, str]:
    """Turn ``key=value`` strings into a mapping."""
    arguments: dict[str, str] = {}
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator or not key.strip():
            raise ValueError(f"Expected key=value, got {pair!r}")
        arguments[key.strip()] = value.strip()
    return arguments
