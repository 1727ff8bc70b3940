"""Tests for role detection."""

from battle_state import BattleState
from role_detection import best_for_role, detect_roles, has_role, primary_role, recommend_role_for_situation


class TestDetectRoles:
    """Archetype classification."""

    def test_sweeper_reported_before_wallbreaker(self, make_pokemon):
        """A fast heavy hitter is a sweeper first and a wallbreaker second."""
        p = make_pokemon(attack=130, speed=110)
        assert detect_roles(p) == ("sweeper", "wallbreaker")

    def test_wall(self, make_pokemon):
        """Bulky and slow is a wall."""
        p = make_pokemon(hp=100, defense=120, special_defense=120, speed=30, attack=60, special_attack=60)
        assert primary_role(p) == "wall"

    def test_support_by_moves(self, make_pokemon, make_move):
        """Support moves make a support."""
        p = make_pokemon(attack=60, special_attack=60, speed=60, defense=80,
                         moves=[make_move("Thunder Wave", 0, "Electric", 90, "status")])
        assert primary_role(p) == "support"

    def test_has_role_ignores_third_match(self, make_pokemon, make_move):
        """A role matched after the first two is not held."""
        p = make_pokemon(attack=130, speed=110, moves=[make_move("U-turn", 70, "Bug")])
        assert detect_roles(p) == ("sweeper", "wallbreaker")
        assert has_role(p, "wallbreaker")
        assert not has_role(p, "pivot")
        assert not has_role(None, "sweeper")

    def test_balanced_fallback(self, make_pokemon):
        """Nothing matching yields balanced."""
        assert detect_roles(make_pokemon(attack=80, special_attack=80, speed=80)) == ("balanced", None)
        assert detect_roles(None) == ("balanced", None)


class TestRoleRecommendation:
    """Counter-role lookup and bench selection."""

    def test_counter_role(self, make_pokemon):
        """Sweepers are answered by walls."""
        sweeper = make_pokemon(attack=130, speed=110)
        assert recommend_role_for_situation(sweeper) == "wall"
        assert recommend_role_for_situation(sweeper, skill=50) is None

    def test_best_for_role(self, make_pokemon):
        """The bench wall is found by party index."""
        lead = make_pokemon(name="Lead")
        filler = make_pokemon(name="Filler", attack=80, special_attack=80, speed=80)
        wall = make_pokemon(name="Wall", hp=100, defense=120, special_defense=120, speed=30,
                            attack=60, special_attack=60)
        state = BattleState([lead, filler, wall], [make_pokemon()])
        assert best_for_role(state, "ai", "wall") == 2
        assert best_for_role(state, "ai", "pivot") is None

    def test_best_for_role_skips_third_match(self, make_pokemon, make_move):
        """A bench member whose pivot match comes third is not picked as a pivot."""
        lead = make_pokemon(name="Lead")
        hitter = make_pokemon(name="Hitter", attack=130, speed=110, moves=[make_move("U-turn", 70, "Bug")])
        state = BattleState([lead, hitter], [make_pokemon()])
        assert best_for_role(state, "ai", "pivot") is None
        assert best_for_role(state, "ai", "sweeper") == 1
