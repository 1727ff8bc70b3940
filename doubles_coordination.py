"""
doubles_coordination.py

Partner-aware corrections for formats with more than one combatant per side:
overkill avoidance, duplicate support moves, spread-move friendly fire, weather /
terrain synergy with the partner, and Protect cover for a setting-up partner.

Every correction is 0 in singles.
"""
import logging
from typing import Dict, Optional, Tuple

from battle_state import BattleState
from data_loader import HAZARD_MOVES, SCREEN_MOVES, WEATHER_MOVES, Move, Pokemon
from move_memory import combatant_key
from type_chart import DEFAULT_EFFECTIVENESS, Effectiveness

logger = logging.getLogger(__name__)

# Weather move -> partner abilities that want it.
WEATHER_PARTNERS: Dict[str, Tuple[str, ...]] = {
    "rain dance": ("swift swim", "drizzle"),
    "sunny day": ("chlorophyll", "drought"),
    "sandstorm": ("sand rush", "sand stream"),
    "hail": ("slush rush", "snow warning"),
    "snowscape": ("slush rush", "snow warning"),
}

PROTECT_COVER_MOVES = ("protect", "detect")


class CoordinationBoard:
    """Targets already claimed by allies, per battle and turn."""

    def __init__(self):
        self._plans: Dict[str, Dict[int, Dict[str, str]]] = {}

    def register(self, battle_id: Optional[str], turn: int, user: Optional[Pokemon],
                 target: Optional[Pokemon]) -> None:
        if not battle_id or user is None or target is None:
            return
        turns = self._plans.setdefault(battle_id, {})
        # Only the current turn matters; older plans are dropped.
        for old in [t for t in turns if t != turn]:
            del turns[old]
        turns.setdefault(turn, {})[combatant_key(user)] = combatant_key(target)

    def planned_target(self, battle_id: Optional[str], turn: int, user: Optional[Pokemon]) -> Optional[str]:
        if not battle_id or user is None:
            return None
        return self._plans.get(battle_id, {}).get(turn, {}).get(combatant_key(user))

    def partner_targets(self, battle_id: Optional[str], turn: int, partner: Optional[Pokemon],
                        target: Optional[Pokemon]) -> bool:
        if target is None:
            return False
        return self.planned_target(battle_id, turn, partner) == combatant_key(target)

    def cleanup(self, battle_id: str) -> None:
        self._plans.pop(battle_id, None)


def _is_doubles(state: Optional[BattleState]) -> bool:
    return state is not None and state.side_size > 1


def prevent_overkill(state: BattleState, attacker: Pokemon, target: Optional[Pokemon], skill: int = 100,
                     board: Optional[CoordinationBoard] = None) -> int:
    if skill < 50 or not _is_doubles(state) or target is None or board is None:
        return 0
    partner = state.partner_of(attacker)
    if partner is None or not board.partner_targets(state.battle_id, state.turn_count, partner, target):
        return 0
    hp = target.hp_fraction()
    if hp < 0.3:
        return -40
    if hp < 0.5:
        return -20
    return 0


def _conflict_class(move: Move) -> Optional[str]:
    if move.id in SCREEN_MOVES:
        return "screen"
    if move.id in HAZARD_MOVES and move.is_status:
        return "hazard"
    if move.id in WEATHER_MOVES and move.is_status:
        return "weather"
    return None


def prevent_move_conflicts(state: BattleState, attacker: Pokemon, move: Move, skill: int = 100) -> int:
    if skill < 50 or not _is_doubles(state):
        return 0
    partner = state.partner_of(attacker)
    if partner is None:
        return 0
    move_class = _conflict_class(move)
    if move_class is None or not any(_conflict_class(m) == move_class for m in partner.moves):
        return 0
    return {"screen": -60, "hazard": -50, "weather": -40}[move_class]


def optimize_spread_moves(state: BattleState, attacker: Pokemon, move: Move, skill: int = 100,
                          effectiveness: Optional[Effectiveness] = None) -> int:
    if skill < 60 or not _is_doubles(state) or not move.is_spread:
        return 0
    eff = effectiveness or DEFAULT_EFFECTIVENESS
    score = 0
    partner = state.partner_of(attacker)
    if partner is not None and move.hits_ally:
        mod = eff.calculate(move.type, *partner.type)
        if eff.ineffective(mod):
            score += 30
        elif eff.not_very_effective(mod):
            score += 15
        else:
            score -= 40
    score += 20 * len(state.opponents_of(attacker))
    return score


def coordinate_field_effects(state: BattleState, attacker: Pokemon, move: Move, skill: int = 100) -> int:
    if skill < 70 or not _is_doubles(state):
        return 0
    partner = state.partner_of(attacker)
    if partner is None:
        return 0
    if move.id in WEATHER_PARTNERS and partner.has_ability(*WEATHER_PARTNERS[move.id]):
        return 40
    if move.id == "electric terrain" and partner.has_ability("surge surfer"):
        return 35
    if move.id == "grassy terrain" and partner.has_type("Grass"):
        return 25
    if move.id == "psychic terrain" and partner.has_ability("psychic surge"):
        return 35
    return 0


def protect_setup_combo(state: BattleState, attacker: Pokemon, move: Move, skill: int = 100) -> int:
    if skill < 65 or not _is_doubles(state) or move.id not in PROTECT_COVER_MOVES:
        return 0
    partner = state.partner_of(attacker)
    if partner is None:
        return 0
    if any(m.is_setup for m in partner.moves) and partner.hp > partner.max_hp * 0.7:
        return 50
    return 0


def doubles_score(state: Optional[BattleState], move: Optional[Move], user: Optional[Pokemon],
                  target: Optional[Pokemon], skill: int = 100, board: Optional[CoordinationBoard] = None,
                  effectiveness: Optional[Effectiveness] = None) -> int:
    """Sum of every partner correction for one candidate move."""
    if not _is_doubles(state) or move is None or user is None:
        return 0
    score = prevent_overkill(state, user, target, skill, board)
    score += prevent_move_conflicts(state, user, move, skill)
    score += optimize_spread_moves(state, user, move, skill, effectiveness)
    score += coordinate_field_effects(state, user, move, skill)
    score += protect_setup_combo(state, user, move, skill)
    return score
