"""
Deterministic single-roll damage estimate.

Used only to compare options (KO checks, threat of remembered moves); the battle
simulation resolves real damage.
"""
from typing import Optional

from data_loader import Move, Pokemon
from type_chart import DEFAULT_EFFECTIVENESS, Effectiveness


def stab_modifier(move: Move, attacker: Pokemon) -> float:
    return 1.5 if move.type in attacker.type else 1.0


def rough_damage(move: Optional[Move], attacker: Optional[Pokemon], defender: Optional[Pokemon],
                 power: Optional[float] = None, effectiveness: Optional[Effectiveness] = None) -> int:
    """
    damage = ((2*level/5 + 2) * power * atk/def / 50 + 2) * typeMod * stab

    Returns 0 for status moves, zero power, or missing combatants.
    """
    if move is None or attacker is None or defender is None or not move.is_damaging:
        return 0
    bp = move.power if power is None else power
    if not bp or bp <= 0:
        return 0
    eff = effectiveness or DEFAULT_EFFECTIVENESS
    if move.is_special:
        atk, dfn = attacker.special_attack, defender.special_defense
    else:
        atk, dfn = attacker.attack, defender.defense
    dfn = max(dfn, 1)
    base = ((2.0 * attacker.level / 5.0 + 2.0) * bp * atk / dfn) / 50.0 + 2.0
    type_mod = eff.calculate(move.type, *defender.type)
    return int(base * type_mod * stab_modifier(move, attacker))
