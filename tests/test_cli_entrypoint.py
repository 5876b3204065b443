from __future__ import annotations

import importlib
from pathlib import Path

import pytest


def test_console_entrypoint_exposes_app() -> None:
    pytest.importorskip("typer")

    module = importlib.import_module("rubber_duck.main")

    assert hasattr(module, "app")
    assert module.app is not None


def test_cli_commands_round_trip_a_save(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    pytest.importorskip("typer")
    from typer.testing import CliRunner

    module = importlib.import_module("rubber_duck.main")
    save = tmp_path / "world.json"
    monkeypatch.setattr(module.settings, "state_path", str(save))
    monkeypatch.setattr(module.settings, "seed", 12)
    runner = CliRunner()

    created = runner.invoke(module.app, ["new"])
    assert created.exit_code == 0
    assert save.exists()
    assert runner.invoke(module.app, ["new"]).exit_code == 1
    assert runner.invoke(module.app, ["new", "--force"]).exit_code == 0

    moved = runner.invoke(module.app, ["do", "go north"])
    assert moved.exit_code == 0
    assert "moved" in moved.output

    assert runner.invoke(module.app, ["call", "take", "--arg", "item=stone"]).exit_code == 0
    assert runner.invoke(module.app, ["call", "look", "--arg", "oops"]).exit_code != 0
    assert runner.invoke(module.app, ["simulate", "--ticks", "3"]).exit_code == 0
    assert runner.invoke(module.app, ["status"]).exit_code == 0
    assert runner.invoke(module.app, ["validate"]).exit_code == 0

    save.write_text("{broken", encoding="utf-8")
    assert runner.invoke(module.app, ["validate"]).exit_code == 1
