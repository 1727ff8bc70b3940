"""Tests for host data adapters."""

import json

import pandas as pd

from adapters import load_state, move_from_dict, pokemon_from_dict, state_from_dict, unwrap
from data_loader import normalize_moves_frame

SNAPSHOT = {
    "battle_id": "snap-1",
    "turn": 4,
    "weather": "Rain",
    "terrain": {"type": "Electric", "turns": 3},
    "field": {"trick_room": 2},
    "sides": {"player": {"hazards": {"stealth_rock": True}, "tailwind": 2}},
    "trainer_flags": {"ai": ["reserve_last"]},
    "ai_team": [
        {
            "name": "Pelipper",
            "types": ["Water", "Flying"],
            "stats": {"hp": 120, "attack": 50, "defense": 100, "special_attack": 95,
                      "special_defense": 70, "speed": 65},
            "current_hp": 60,
            "item": "Damp Rock",
            "ability": "Drizzle",
            "moves": [
                {"name": "Hurricane", "power": 110, "type": "Flying", "accuracy": 70, "category": "special"},
                "Protect",
            ],
            "stat_stages": {"special_attack": 1},
            "can_terastallize": True,
            "tera_type": "Ghost",
        }
    ],
    "player_team": [
        {"name": "Garchomp", "types": ["Dragon", "Ground"], "hp": 108, "attack": 130, "defense": 95,
         "special_attack": 80, "special_defense": 85, "speed": 102, "status": "burn"},
    ],
}


class TestUnwrap:
    """Host wrapper peeling."""

    def test_wrapper_is_peeled_once(self, make_pokemon):
        """Objects exposing .battler yield the inner combatant."""
        inner = make_pokemon()

        class Battler:
            battler = inner

        assert unwrap(Battler()) is inner
        assert unwrap(inner) is inner
        assert unwrap(None) is None


class TestFromDict:
    """JSON-like dicts into domain objects."""

    def test_state_round_trip(self):
        """Every snapshot section lands in the state."""
        state = state_from_dict(SNAPSHOT)
        assert state.battle_id == "snap-1"
        assert state.turn_count == 4
        assert state.weather_type == "Rain"
        assert state.terrain_type == "Electric"
        assert state.trick_room
        hazards = state.side_state("player")["hazards"]
        assert hazards["stealth_rock"] is True
        assert hazards["spikes"] == 0
        assert state.side_state("player")["tailwind"] == 2
        assert state.has_trainer_flag("ai", "reserve_last")

    def test_combatants(self):
        """Combatant fields are normalised."""
        state = state_from_dict(SNAPSHOT)
        pelipper = state.active_ai()
        assert pelipper.hp == 60 and pelipper.max_hp == 120
        assert pelipper.item == "damp rock"
        assert pelipper.has_ability("Drizzle")
        assert pelipper.stat_stages["special_attack"] == 1
        assert pelipper.can_terastallize and pelipper.tera_type == "Ghost"
        assert [m.name for m in pelipper.moves] == ["Hurricane", "Protect"]
        assert pelipper.moves[0].power == 110
        chomp = state.active_player()
        assert chomp.attack == 130 and chomp.status == "burn"

    def test_missing_stats_default(self):
        """Unknown species without stats fall back to 50s."""
        p = pokemon_from_dict({"name": "Mystery", "types": ["Normal"]})
        assert (p.max_hp, p.attack, p.speed) == (50, 50, 50)

    def test_move_enriched_from_table(self):
        """Moves given only by name are looked up in the move table."""
        moves_df = normalize_moves_frame(pd.DataFrame({
            "Name": ["Thunderbolt"], "Type": ["Electric"], "Power": [90], "Accuracy": [100],
            "PP": [15], "Damage Class": ["special"], "Priority": [0],
        }))
        mv = move_from_dict("Thunderbolt", moves_df)
        assert mv.power == 90 and mv.type == "Electric" and mv.is_special
        assert move_from_dict({"power": 10}) is None

    def test_load_state(self, tmp_path):
        """Snapshots load from disk."""
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(SNAPSHOT))
        state = load_state(str(path))
        assert state.battle_id == "snap-1"
        assert len(state.ai_team) == 1 and len(state.player_team) == 1
