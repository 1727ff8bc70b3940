"""Tests for switch urgency and replacement selection."""

import pytest

from ai_settings import ADVANCED_FLAGS, DEFAULT_FLAGS, AIConfig
from battle_state import BattleState
from move_memory import MoveMemory
from switch_intelligence import SwitchIntelligence


@pytest.fixture
def cornered(make_pokemon, make_move):
    """A worn-down Grass type facing a faster Fire type."""
    def _make(turn_count=2, bench=()):
        user = make_pokemon(name="Bulbasaur", types=("Grass",), current_hp=10, speed=45,
                            turn_count=turn_count, moves=[make_move("Tackle", 40)])
        foe = make_pokemon(name="Arcanine", types=("Fire",), speed=100,
                           moves=[make_move("Flamethrower", 90, "Fire", category="special")])
        return BattleState([user] + list(bench), [foe], battle_id="switch"), user
    return _make


class TestSwitchScore:
    """Urgency against the tier threshold."""

    def test_cornered_user_switches(self, cornered):
        """Type disadvantage 35 + survival 30 - no better option 15 = 50."""
        state, user = cornered()
        si = SwitchIntelligence()
        trace = []
        assert si.calculate_switch_score(state, user, 100) == 50
        assert si.should_switch(state, user, 100, trace)
        assert si.cache.get("switch", 0)["last_score"] == 50
        assert any("SWITCH" in line for line in trace)

    def test_just_switched_in_stays(self, cornered):
        """The anti-thrash penalty keeps a fresh switch-in in."""
        state, user = cornered(turn_count=0)
        assert not SwitchIntelligence().should_switch(state, user, 100)

    def test_beginner_threshold_is_higher(self, cornered):
        """The same state does not clear the beginner threshold."""
        state, user = cornered()
        assert not SwitchIntelligence().should_switch(state, user, 55)

    def test_trapped_user_never_switches(self, cornered):
        """Trapped combatants stay."""
        state, user = cornered()
        user.volatiles["trapped"] = True
        assert not SwitchIntelligence().should_switch(state, user, 100)

    def test_missing_input(self):
        """No state or user means no switch."""
        assert not SwitchIntelligence().should_switch(None, None, 100)

    def test_component_bounds(self, cornered):
        """Each component respects its cap."""
        state, user = cornered()
        si = SwitchIntelligence()
        user.stat_stages.update({"attack": -3, "special_attack": -3, "speed": -3, "defense": -1})
        assert si.evaluate_type_disadvantage(state, user) <= 40
        assert si.evaluate_survival(state, user) == 30
        assert si.evaluate_stat_stages(state, user) == 25

    @pytest.mark.parametrize("best, current, expected", [
        (30, 0, 35),
        (20, 0, 25),
        (16, 0, 25),
        (45, 35, 15),
        (10, 0, 0),
        (5, 0, 0),
    ])
    def test_better_option_bands(self, cornered, make_pokemon, best, current, expected):
        """Matchup improvement maps onto the 35 / 25 / 15 / 0 bands."""
        state, user = cornered(bench=(make_pokemon(name="Bench"),))
        si = SwitchIntelligence()
        scores = {"Bench": best, "Bulbasaur": current}
        si.evaluate_switch_matchup = lambda state, candidate, user: scores[candidate.name]
        assert si.evaluate_better_options(state, user) == expected

    def test_momentum_is_capped_and_flagged(self, make_pokemon, make_move):
        """Momentum tops out at 20 and only counts with its flag set."""
        user = make_pokemon(name="Bulbasaur", types=("Grass",), turn_count=2)
        foe = make_pokemon(name="Arcanine", types=("Fire",), moves=[
            make_move("Flamethrower", 90, "Fire", category="special"),
            make_move("Swords Dance", 0, "Normal", 0, "status"),
        ])
        state = BattleState([user], [foe, make_pokemon(name="Backup")])
        assert SwitchIntelligence().evaluate_momentum(state, user) == 20

        trace = []
        SwitchIntelligence().calculate_switch_score(state, user, 100, trace)
        assert "switch momentum: +20" in trace

        no_momentum = AIConfig(flags=DEFAULT_FLAGS & ~ADVANCED_FLAGS["momentum_control"])
        trace = []
        SwitchIntelligence(no_momentum).calculate_switch_score(state, user, 100, trace)
        assert not any(line.startswith("switch momentum") for line in trace)

    def test_prediction_is_capped(self, make_pokemon, make_move):
        """Two foes revealing setup chains still add at most 15."""
        user = make_pokemon(name="User")
        foes = [make_pokemon(name="FoeA"), make_pokemon(name="FoeB")]
        state = BattleState([user, make_pokemon(name="Ally")], foes, side_size=2)
        memory = MoveMemory()
        for foe in foes:
            memory.record(state.battle_id, foe, make_move("Swords Dance", 0, "Normal", 0, "status"))
            memory.record(state.battle_id, foe, make_move("Nasty Plot", 0, "Dark", 0, "status"))
        si = SwitchIntelligence(memory=memory)
        assert si.evaluate_prediction(state, user, 100) == 15
        assert si.evaluate_prediction(state, user, 80) == 0

    def test_failing_part_counts_zero(self, cornered, monkeypatch):
        """A part that raises drops out of the total instead of escaping."""
        state, user = cornered()

        def broken(self, state, user):
            raise KeyError("survival")

        monkeypatch.setattr(SwitchIntelligence, "evaluate_survival", broken)
        assert SwitchIntelligence().calculate_switch_score(state, user, 100) == 20


class TestReplacement:
    """Choosing who comes in."""

    def test_best_matchup_first(self, cornered, make_pokemon, make_move):
        """A Water type is preferred against Fire."""
        grass = make_pokemon(name="Oddish", types=("Grass",), moves=[make_move("Absorb", 20, "Grass")])
        water = make_pokemon(name="Squirtle", types=("Water",), moves=[make_move("Water Gun", 40, "Water")])
        state, user = cornered(bench=(grass, water))
        si = SwitchIntelligence()
        assert si.find_best_replacement(state, user) == 2
        ranking = si.rank_replacements(state, user)
        assert [entry["index"] for entry in ranking] == [2, 1]

    def test_reserve_blocks_voluntary_switch(self, cornered, make_pokemon):
        """A voluntary switch never brings in the reserved last slot."""
        state, user = cornered(bench=(make_pokemon(name="Reserve"),))
        state.trainer_flags["ai"] = ["reserve_last"]
        assert SwitchIntelligence().find_best_replacement(state, user) is None

    def test_reserve_allowed_after_faint(self, make_pokemon):
        """A fainted user may be replaced by the reserved slot."""
        user = make_pokemon(name="Down", current_hp=0)
        reserve = make_pokemon(name="Reserve")
        state = BattleState([user, reserve], [make_pokemon()], active={"ai": [0], "player": [0]})
        state.trainer_flags["ai"] = ["reserve_last"]
        assert SwitchIntelligence().find_best_replacement(state, user) == 1

    def test_reserve_skipped_with_other_options(self, cornered, make_pokemon):
        """With two candidates the reserve is filtered out."""
        water = make_pokemon(name="Reserve", types=("Water",))
        state, user = cornered(bench=(make_pokemon(name="Middle"), water))
        state.trainer_flags["ai"] = ["reserve_last"]
        assert SwitchIntelligence().find_best_replacement(state, user) == 1
