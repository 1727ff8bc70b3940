"""Tests for partner-aware doubles corrections."""

import pytest

from battle_state import BattleState
from doubles_coordination import (
    CoordinationBoard,
    doubles_score,
    optimize_spread_moves,
    prevent_move_conflicts,
    prevent_overkill,
)


@pytest.fixture
def doubles_state(make_pokemon):
    ai = [make_pokemon(name="Left"), make_pokemon(name="Right", types=("Flying",))]
    foes = [make_pokemon(name="FoeA"), make_pokemon(name="FoeB")]
    return BattleState(ai, foes, side_size=2, battle_id="doubles")


class TestCoordinationBoard:
    """Planned targets per turn."""

    def test_only_current_turn_is_kept(self, doubles_state):
        """Registering a new turn drops older plans."""
        board = CoordinationBoard()
        left, right = doubles_state.ai_team
        foe = doubles_state.player_team[0]
        board.register("doubles", 1, left, foe)
        board.register("doubles", 2, right, foe)
        assert board.planned_target("doubles", 1, left) is None
        assert board.partner_targets("doubles", 2, right, foe)

    def test_cleanup(self, doubles_state):
        """Cleanup forgets the battle."""
        board = CoordinationBoard()
        left = doubles_state.ai_team[0]
        board.register("doubles", 0, left, doubles_state.player_team[0])
        board.cleanup("doubles")
        assert board.planned_target("doubles", 0, left) is None


class TestOverkill:
    """Avoid doubling up on a weakened target."""

    def test_zero_in_singles(self, singles_state):
        """Singles never applies overkill."""
        board = CoordinationBoard()
        user, target = singles_state.active_ai(), singles_state.active_player()
        target.hp = 10
        board.register(singles_state.battle_id, 0, user, target)
        assert prevent_overkill(singles_state, user, target, 100, board) == 0
        assert doubles_score(singles_state, user.moves[0], user, target, 100, board) == 0

    def test_partner_already_on_low_target(self, doubles_state):
        """A target below 30% that the partner is hitting costs 40."""
        board = CoordinationBoard()
        left, right = doubles_state.ai_team
        foe = doubles_state.player_team[0]
        foe.hp = 20
        board.register("doubles", doubles_state.turn_count, right, foe)
        assert prevent_overkill(doubles_state, left, foe, 100, board) == -40
        foe.hp = 40
        assert prevent_overkill(doubles_state, left, foe, 100, board) == -20
        foe.hp = 80
        assert prevent_overkill(doubles_state, left, foe, 100, board) == 0


class TestPartnerSynergy:
    """Move conflicts and spread moves."""

    def test_duplicate_screens(self, doubles_state, make_move):
        """Both partners carrying Reflect costs 60."""
        reflect = make_move("Reflect", 0, "Psychic", 0, "status")
        left, right = doubles_state.ai_team
        right.moves = [make_move("Light Screen", 0, "Psychic", 0, "status")]
        assert prevent_move_conflicts(doubles_state, left, reflect) == -60

    def test_spread_move_spares_immune_partner(self, doubles_state, make_move):
        """Earthquake next to a Flying partner is safe and hits both foes."""
        quake = make_move("Earthquake", 100, "Ground")
        left, right = doubles_state.ai_team
        assert optimize_spread_moves(doubles_state, left, quake) == 30 + 40
        right.type = ["Normal"]
        assert optimize_spread_moves(doubles_state, left, quake) == -40 + 40
