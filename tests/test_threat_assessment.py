"""Tests for rough damage and threat assessment."""

from battle_state import BattleState
from damage_calc import rough_damage
from move_memory import MoveMemory
from threat_assessment import assess_threat, most_threatening_opponent, priority_target


class TestRoughDamage:
    """Deterministic damage estimate."""

    def test_reference_value(self, make_pokemon, make_move):
        """Level 50, equal stats, 40 power STAB move."""
        tackle = make_move("Tackle", 40)
        assert rough_damage(tackle, make_pokemon(), make_pokemon()) == 29

    def test_zero_cases(self, make_pokemon, make_move):
        """Status moves, zero power and missing combatants deal nothing."""
        a, b = make_pokemon(), make_pokemon()
        assert rough_damage(make_move("Growl", 0, category="status"), a, b) == 0
        assert rough_damage(make_move("Splash", 0), a, b) == 0
        assert rough_damage(make_move(), None, b) == 0

    def test_power_override(self, make_pokemon, make_move):
        """An explicit power replaces the move's own."""
        a, b = make_pokemon(), make_pokemon()
        tackle = make_move("Tackle", 40)
        assert rough_damage(tackle, a, b, power=100) > rough_damage(tackle, a, b)


class TestThreat:
    """Threat score bounds and components."""

    def test_neutral_for_missing_or_fainted(self, make_pokemon, singles_state):
        """Absent or fainted threats score exactly 5."""
        observer = singles_state.active_ai()
        assert assess_threat(singles_state, observer, None) == 5.0
        fainted = make_pokemon(current_hp=0)
        assert assess_threat(singles_state, observer, fainted) == 5.0

    def test_score_is_bounded(self, make_pokemon, make_move):
        """Any pairing stays within [0, 10]."""
        mons = [
            make_pokemon(types=("Grass",), defense=40, special_defense=40, speed=20),
            make_pokemon(types=("Fire", "Flying"), attack=200, special_attack=200, speed=300,
                         ability="Huge Power"),
            make_pokemon(types=("Ghost",), current_hp=5),
            make_pokemon(types=("Normal",), attack=10, special_attack=10),
        ]
        mons[1].stat_stages.update({"attack": 6, "special_attack": 6, "speed": 6})
        state = BattleState(mons[:2], mons[2:])
        for observer in mons:
            for threat in mons:
                score = assess_threat(state, observer, threat)
                assert 0.0 <= score <= 10.0

    def test_overwhelming_threat_is_clamped(self, make_pokemon):
        """Stacked pressure clamps at 10."""
        observer = make_pokemon(types=("Grass",), defense=50, special_defense=50, speed=20)
        threat = make_pokemon(types=("Fire", "Flying"), attack=200, special_attack=200, speed=300,
                              ability="Huge Power")
        threat.stat_stages["attack"] = 6
        state = BattleState([observer], [threat])
        assert assess_threat(state, observer, threat) == 10.0

    def test_remembered_moves_raise_threat(self, make_pokemon, make_move):
        """A revealed super-effective move makes the threat worse."""
        observer = make_pokemon(types=("Grass",))
        threat = make_pokemon(types=("Normal",))
        state = BattleState([observer], [threat])
        memory = MoveMemory()
        before = assess_threat(state, observer, threat, memory=memory)
        memory.record(state.battle_id, threat, make_move("Flamethrower", 90, "Fire", category="special"))
        after = assess_threat(state, observer, threat, memory=memory)
        assert after > before

    def test_most_threatening_opponent(self, make_pokemon):
        """The strongest of two opponents is picked."""
        me = make_pokemon(types=("Grass",))
        weak = make_pokemon(name="Weak", attack=20, special_attack=20, speed=10)
        strong = make_pokemon(name="Strong", types=("Fire",), attack=180, speed=150)
        state = BattleState([me, make_pokemon()], [weak, strong], side_size=2)
        assert most_threatening_opponent(state, me) is strong

    def test_priority_target_prefers_worn_down(self, make_pokemon):
        """Between equal threats, the more damaged opponent is focused."""
        me = make_pokemon()
        healthier = make_pokemon(name="Healthier", current_hp=85)
        worn = make_pokemon(name="Worn", current_hp=75)
        state = BattleState([me, make_pokemon()], [healthier, worn], side_size=2)
        assert priority_target(state, me) is worn

    def test_priority_target_without_opponents(self, make_pokemon):
        """No living opponent on the field means no target."""
        me = make_pokemon()
        state = BattleState([me], [make_pokemon(current_hp=0)])
        assert priority_target(state, me) is None
