"""Shared fixtures for the battle decision core test suite."""

import pytest

from battle_state import BattleState
from data_loader import Move, Pokemon


@pytest.fixture
def make_move():
    """Factory for moves; defaults to a 40-power physical Normal move."""
    def _make(name="Tackle", power=40, mtype="Normal", accuracy=100, category="physical", **kwargs):
        return Move(name=name, power=power, mtype=mtype, accuracy=accuracy, category=category, **kwargs)
    return _make


@pytest.fixture
def make_pokemon(make_move):
    """Factory for combatants with flat 100 stats unless overridden."""
    def _make(name="Testmon", types=("Normal",), moves=None, hp=100, attack=100, special_attack=100,
              defense=100, special_defense=100, speed=100, **kwargs):
        if moves is None:
            moves = [make_move()]
        return Pokemon(name=name, types=list(types), hp=hp, attack=attack, special_attack=special_attack,
                       defense=defense, special_defense=special_defense, speed=speed, moves=moves, **kwargs)
    return _make


@pytest.fixture
def singles_state(make_pokemon, make_move):
    """Water attacker against a Fire defender, one combatant per side."""
    attacker = make_pokemon(
        name="Vaporeon", types=("Water",),
        moves=[make_move("Surf", 90, "Water", category="special"), make_move("Tackle", 40, "Normal")],
    )
    defender = make_pokemon(
        name="Arcanine", types=("Fire",),
        moves=[make_move("Flamethrower", 90, "Fire", category="special")],
    )
    return BattleState([attacker], [defender], battle_id="test-battle")
