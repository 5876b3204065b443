"""CLI startup entrypoint for Rubber Duck."""

from __future__ import annotations

from pathlib import Path

import typer
from rich import print

from rubber_duck.cli import CliCommandHandler, parse_arguments
from rubber_duck.config import settings
from rubber_duck.engine import GameEngine
from rubber_duck.errors import StateCorruption
from rubber_duck.telemetry import configure_logging

app = typer.Typer(help="Rubber Duck cabin simulation")


def _build_handler() -> CliCommandHandler:
    configure_logging(settings.log_level)
    return CliCommandHandler(GameEngine(config=settings))


def _run(action):
    try:
        return action()
    except StateCorruption as exc:
        print({"error": exc.kind.value, "message": str(exc), "problems": exc.problems})
        raise typer.Exit(code=1)


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "state_path": settings.state_path,
            "seed": settings.seed,
            "duck_name": settings.duck_name,
            "duplicate_blueprint_policy": settings.duplicate_blueprint_policy,
            "autosave": settings.autosave,
        }
    )


@app.command()
def new(
    seed: int = typer.Option(None, help="Seed for the new world; random when omitted"),
    force: bool = typer.Option(False, help="Overwrite an existing save"),
) -> None:
    """Create and save a fresh world."""
    if Path(settings.state_path).exists() and not force:
        print({"error": "save_exists", "path": settings.state_path, "hint": "Pass --force to overwrite."})
        raise typer.Exit(code=1)
    print(_build_handler().new_world(seed))


@app.command()
def do(text: str) -> None:
    """Resolve one free-text intent, e.g. 'use axe on tree'."""
    handler = _build_handler()
    print(_run(lambda: handler.do(text)))


@app.command()
def call(
    name: str,
    arg: list[str] = typer.Option(None, "--arg", help="Intent argument as key=value; repeatable"),
) -> None:
    """Resolve one tool-call style intent, e.g. 'call take --arg item=log --arg quantity=2'."""
    try:
        arguments = parse_arguments(arg or [])
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    handler = _build_handler()
    print(_run(lambda: handler.call(name, arguments)))


@app.command()
def simulate(ticks: int = typer.Option(1, help="Ticks to advance (1-10)")) -> None:
    """Let time pass without acting."""
    handler = _build_handler()
    print(_run(lambda: handler.simulate(ticks)))


@app.command()
def status() -> None:
    """Show time, vitals and skills."""
    handler = _build_handler()
    print(_run(handler.status))


@app.command()
def validate() -> None:
    """Load the save and run every consistency check; exits 1 when it is corrupt."""
    handler = _build_handler()
    result = _run(handler.validate)
    print(result)
    if not result["valid"]:
        raise typer.Exit(code=1)


@app.command()
def play() -> None:
    """Interactive loop. Type 'quit' to leave."""
    handler = _build_handler()
    print({"play": "started", "hint": "Try 'look', 'north', 'open door', 'enter cabin'. Type 'quit' to exit."})
    while True:
        try:
            text = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            break
        if not text:
            continue
        if text.lower() in ("quit", "q"):
            break
        outcome = _run(lambda: handler.do(text))
        print(outcome["message"])
    print({"play": "stopped"})


if __name__ == "__main__":
    app()
