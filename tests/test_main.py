"""Tests for the command-line entry point."""

import json

import pytest

from main import main

SNAPSHOT = {
    "battle_id": "cli",
    "ai_team": [{"name": "Vaporeon", "types": ["Water"], "hp": 130, "attack": 65, "defense": 60,
                 "special_attack": 110, "special_defense": 95, "speed": 65,
                 "moves": [{"name": "Surf", "power": 90, "type": "Water", "category": "special"}]}],
    "player_team": [{"name": "Arcanine", "types": ["Fire"], "hp": 90, "attack": 110, "defense": 80,
                     "special_attack": 100, "special_defense": 80, "speed": 95,
                     "moves": [{"name": "Flare Blitz", "power": 120, "type": "Fire", "category": "physical"}]}],
}


@pytest.fixture
def snapshot_path(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(SNAPSHOT))
    return str(path)


class TestCLI:
    """Argument handling and output."""

    def test_prints_decision(self, snapshot_path, capsys):
        """The chosen action and its rationale are printed."""
        assert main(["--state", snapshot_path, "--skill", "90"]) == 0
        out = capsys.readouterr().out
        assert "Vaporeon chose: Surf -> Arcanine" in out
        assert "=== Battle Status (turn 0) ===" in out

    def test_player_side(self, snapshot_path, capsys):
        """--side player decides for the other party."""
        assert main(["--state", snapshot_path, "--side", "player"]) == 0
        assert "Arcanine chose: Flare Blitz -> Vaporeon" in capsys.readouterr().out

    def test_invalid_config(self, snapshot_path, tmp_path, capsys):
        """A bad config file exits with status 2."""
        cfg = tmp_path / "ai.json"
        cfg.write_text(json.dumps({"personality": "reckless"}))
        assert main(["--state", snapshot_path, "--config", str(cfg)]) == 2
        assert "Invalid AI config" in capsys.readouterr().err

    def test_missing_snapshot(self, tmp_path, capsys):
        """A missing snapshot exits with status 2."""
        assert main(["--state", str(tmp_path / "nope.json")]) == 2
