"""
special_mechanics.py

Once-per-battle transformations: Mega Evolution, Z-Moves, Dynamax, Terastallization.

Each mechanic is scored from six capped parts (timing, offense, sweep, survival,
party, momentum). A mechanic fires when the total reaches 70, or 50 with two or
fewer party members left. Only the first qualifying mechanic in ORDER is used.
"""
import logging
from typing import Dict, List, Optional, Set, Tuple

from ai_settings import DEFAULT_CONFIG, DYNAMAX_MIN_SKILL, AIConfig, feature_enabled, mechanic_enabled
from battle_state import BattleState, effective_speed, opponent_side
from damage_calc import rough_damage
from data_loader import BATTLE_STATS, OHKO_MOVES, Move, Pokemon
from item_intelligence import is_choice_item
from type_chart import DEFAULT_EFFECTIVENESS, Effectiveness

logger = logging.getLogger(__name__)

ORDER = ("mega_evolution", "z_moves", "dynamax", "terastallization")

STRONG_THRESHOLD = 70
LATE_GAME_THRESHOLD = 50

# Base power -> Z-Move power.
Z_POWER_TABLE: Tuple[Tuple[int, int], ...] = (
    (55, 100), (65, 120), (75, 140), (85, 160), (95, 175),
    (100, 180), (110, 185), (125, 190), (130, 195),
)
Z_POWER_MAX = 200


def z_power(base_power: int) -> int:
    if base_power <= 0:
        return 0
    for limit, power in Z_POWER_TABLE:
        if base_power <= limit:
            return power
    return Z_POWER_MAX


class MechanicUsage:
    """Mechanics each side has spent, per battle."""

    def __init__(self):
        self._used: Dict[str, Dict[str, Set[str]]] = {}

    def mark_used(self, battle_id: str, side: Optional[str], mechanic: str) -> None:
        self._used.setdefault(battle_id, {}).setdefault(side or "", set()).add(mechanic)

    def is_used(self, battle_id: str, side: Optional[str], mechanic: str) -> bool:
        return mechanic in self._used.get(battle_id, {}).get(side or "", set())

    def cleanup(self, battle_id: str) -> None:
        self._used.pop(battle_id, None)


class MechanicScorer:
    """Shared six-part scoring; subclasses adjust the parts specific to their mechanic."""

    name = ""
    caps: Dict[str, int] = {"offense": 40, "sweep": 35, "survival": 45, "momentum": 30}
    min_skill = 0

    def __init__(self, config: Optional[AIConfig] = None, effectiveness: Optional[Effectiveness] = None):
        self.config = config or DEFAULT_CONFIG
        self.eff = effectiveness or DEFAULT_EFFECTIVENESS

    # --- Gate --------------------------------------------------------------------
    def capable(self, user: Pokemon) -> bool:
        raise NotImplementedError

    def gate(self, state: BattleState, user: Pokemon, skill: int, usage: Optional[MechanicUsage] = None) -> bool:
        if not feature_enabled(self.name, skill, self.config) or skill < self.min_skill:
            return False
        if not mechanic_enabled(self.name, self.config):
            return False
        if not self.capable(user):
            return False
        if usage is not None and usage.is_used(state.battle_id, state.side_of(user), self.name):
            return False
        return True

    # --- Shared helpers -------------------------------------------------------------
    def _super_effective(self, move: Move, target: Pokemon) -> bool:
        return move.is_damaging and self.eff.super_effective(self.eff.calculate(move.type, *target.apparent_types()))

    @staticmethod
    def _remaining(state: BattleState, user: Pokemon) -> int:
        return state.alive_count(state.side_of(user))

    # --- Parts ------------------------------------------------------------------------
    def timing(self, state: BattleState, user: Pokemon) -> int:
        return 0

    def offense(self, state: BattleState, user: Pokemon) -> int:
        damaging = [m for m in user.moves if m.is_damaging]
        score = 5 * len({m.type for m in damaging})
        score += 3 * sum(1 for m in damaging if m.power >= 80)
        for opp in state.opponents_of(user):
            score += 5 * sum(1 for m in damaging if self._super_effective(m, opp))
        return score

    def sweep(self, state: BattleState, user: Pokemon) -> int:
        score = 0
        boosted = user.positive_stages()
        if boosted >= 3:
            score += 15
        elif boosted >= 1:
            score += 8
        score += 6 * len(user.moves)
        opponents = state.opponents_of(user)
        my_speed = effective_speed(user, state)
        if all(my_speed > effective_speed(opp, state) for opp in opponents):
            score += 10
        score += 4 * sum(1 for opp in opponents if opp.hp < opp.max_hp * 0.4)
        return score

    def survival(self, state: BattleState, user: Pokemon) -> int:
        score = 0
        hp = user.hp_fraction()
        if hp < 0.3:
            score += 25
        elif hp < 0.5:
            score += 15
        return score

    def party(self, state: BattleState, user: Pokemon) -> int:
        side = state.side_of(user)
        party = state.party(side)
        stronger = sum(1 for i in state.bench(side)
                       if party[i].attack > user.attack or party[i].special_attack > user.special_attack)
        score = -min(stronger * 10, 20)
        if self._remaining(state, user) == 1:
            score += 15
        return score

    def momentum(self, state: BattleState, user: Pokemon) -> int:
        score = 0
        net_stages = sum(user.stat_stages.get(s, 0) for s in BATTLE_STATS)
        if user.hp_fraction() > 0.6 and net_stages > 0:
            score += 10
        for opp in state.opponents_of(user):
            boosted = opp.positive_stages()
            if boosted >= 3:
                score += 15
            elif boosted >= 1:
                score += 8
        if state.terrain_type:
            score += 5
        return score

    # --- Aggregate ----------------------------------------------------------------------
    def score(self, state: BattleState, user: Pokemon, trace: Optional[List[str]] = None) -> int:
        total = 0
        for part in ("timing", "offense", "sweep", "survival", "party", "momentum"):
            try:
                value = int(getattr(self, part)(state, user))
            except Exception as exc:
                logger.warning("%s %s failed for %s (%s); counting 0", self.name, part, user.name, exc)
                value = 0
            cap = self.caps.get(part)
            if cap is not None:
                value = min(value, cap)
            total += value
            if value and trace is not None:
                trace.append(f"{self.name} {part}: {value:+d}")
        return total

    def qualifies(self, score: int, remaining: int) -> bool:
        return score >= STRONG_THRESHOLD or (score >= LATE_GAME_THRESHOLD and remaining <= 2)

    def should_activate(self, state: Optional[BattleState], user: Optional[Pokemon], skill: int,
                        usage: Optional[MechanicUsage] = None, trace: Optional[List[str]] = None) -> bool:
        if state is None or user is None or user.is_fainted():
            return False
        if not self.gate(state, user, skill, usage):
            return False
        total = self.score(state, user, trace)
        decision = self.qualifies(total, self._remaining(state, user))
        logger.debug("%s score for %s: %d (%s)", self.name, user.name, total, "use" if decision else "hold")
        if trace is not None:
            trace.append(f"{self.name} score {total}: {'USE' if decision else 'HOLD'}")
        return decision


class MegaEvolutionScorer(MechanicScorer):
    """Mega Evolution is permanent and costs no turns: there is rarely a reason to wait."""

    name = "mega_evolution"
    caps = {"offense": 40, "sweep": 35, "survival": 30, "momentum": 30}

    def capable(self, user: Pokemon) -> bool:
        return user.can_mega and not user.mega_evolved

    def timing(self, state: BattleState, user: Pokemon) -> int:
        return 50

    def party(self, state: BattleState, user: Pokemon) -> int:
        return 0


class ZMoveScorer(MechanicScorer):
    name = "z_moves"
    caps = {"offense": 50, "sweep": 35, "survival": 30, "momentum": 30}

    def capable(self, user: Pokemon) -> bool:
        return user.can_z_move and any(m.is_damaging for m in user.moves)

    def timing(self, state: BattleState, user: Pokemon) -> int:
        return -10 if state.turn_count <= 2 else 10

    def offense(self, state: BattleState, user: Pokemon) -> int:
        """Reward a Z-powered hit that knocks out what the regular move cannot."""
        score = 0
        for opp in state.opponents_of(user):
            best = 0
            for mv in user.moves:
                if not mv.is_damaging:
                    continue
                regular = rough_damage(mv, user, opp, effectiveness=self.eff)
                boosted = rough_damage(mv, user, opp, power=z_power(mv.power), effectiveness=self.eff)
                value = 0
                if boosted >= opp.hp > regular:
                    value = 40
                elif boosted >= opp.hp * 0.7:
                    value = 20
                if self._super_effective(mv, opp):
                    value += 10
                best = max(best, value)
            score += best
        return score

    def sweep(self, state: BattleState, user: Pokemon) -> int:
        boosted = user.positive_stages()
        if boosted >= 3:
            return 15
        return 8 if boosted >= 1 else 0


class DynamaxScorer(MechanicScorer):
    name = "dynamax"
    min_skill = DYNAMAX_MIN_SKILL

    def capable(self, user: Pokemon) -> bool:
        return user.can_dynamax and not user.dynamaxed

    @staticmethod
    def _steelsurge(user: Pokemon) -> bool:
        return user.gmax and any(m.is_damaging and m.type == "Steel" for m in user.moves)

    def timing(self, state: BattleState, user: Pokemon) -> int:
        score = 0
        turn = state.turn_count
        if turn <= 3:
            if self._steelsurge(user):
                score += 25
            elif user.hp < user.max_hp * 0.4:
                score += 20
            else:
                score -= 10
        elif turn <= 8:
            score += 20
        else:
            if len(state.opponents_of(user)) == 1:
                score += 15
            elif user.hp < user.max_hp * 0.5:
                score += 25
        if self._remaining(state, user) >= 5:
            score -= 10
        return score

    def offense(self, state: BattleState, user: Pokemon) -> int:
        score = super().offense(state, user)
        if user.gmax:
            score += 10
        if is_choice_item(user.item):
            score += 15
        return score

    def survival(self, state: BattleState, user: Pokemon) -> int:
        score = super().survival(state, user)
        for opp in state.opponents_of(user):
            if any(rough_damage(m, opp, user, effectiveness=self.eff) >= user.hp for m in opp.moves if m.is_damaging):
                score += 20
            if any(m.id in OHKO_MOVES for m in opp.moves):
                score += 15
        for restriction in ("taunt", "torment", "no_retreat"):
            if user.volatiles.get(restriction):
                score += 10
        if user.volatiles.get("perish_song"):
            score -= 30
        return score

    def momentum(self, state: BattleState, user: Pokemon) -> int:
        score = super().momentum(state, user)
        if self._steelsurge(user):
            foe_hazards = state.side_state(opponent_side(state.side_of(user)))["hazards"]
            if not foe_hazards.get("steelsurge"):
                score += 10
        return score


class TeraScorer(MechanicScorer):
    name = "terastallization"
    caps = {"offense": 40, "sweep": 35, "survival": 40, "momentum": 30}

    def capable(self, user: Pokemon) -> bool:
        return user.can_terastallize and bool(user.tera_type) and not user.terastallized

    def _tera(self, user: Pokemon) -> str:
        return str(user.tera_type).strip().title()

    def timing(self, state: BattleState, user: Pokemon) -> int:
        if state.turn_count <= 2:
            return 0
        if len(state.opponents_of(user)) == 1 and state.alive_count(opponent_side(state.side_of(user))) == 1:
            return 15
        return 10

    def offense(self, state: BattleState, user: Pokemon) -> int:
        tera = self._tera(user)
        score = 0
        for mv in user.moves:
            if not mv.is_damaging or mv.type != tera:
                continue
            # New STAB is worth more than strengthening an existing one.
            score += 10 if tera in user.type else 20
            for opp in state.opponents_of(user):
                if self._super_effective(mv, opp):
                    score += 5
        return score

    def survival(self, state: BattleState, user: Pokemon) -> int:
        """Defensive re-typing against the opponents' damaging moves."""
        tera = [self._tera(user)]
        score = 0
        for opp in state.opponents_of(user):
            for mv in opp.moves:
                if not mv.is_damaging:
                    continue
                before = self.eff.calculate(mv.type, *user.type)
                after = self.eff.calculate(mv.type, *tera)
                if self.eff.super_effective(before) and not self.eff.super_effective(after):
                    score += 15
                elif self.eff.super_effective(after) and not self.eff.super_effective(before):
                    score -= 15
        return score


def build_scorers(config: Optional[AIConfig] = None,
                  effectiveness: Optional[Effectiveness] = None) -> Dict[str, MechanicScorer]:
    classes = (MegaEvolutionScorer, ZMoveScorer, DynamaxScorer, TeraScorer)
    return {cls.name: cls(config, effectiveness) for cls in classes}


def choose_mechanic(scorers: Dict[str, MechanicScorer], state: BattleState, user: Pokemon, skill: int,
                    usage: Optional[MechanicUsage] = None, trace: Optional[List[str]] = None) -> Optional[str]:
    """First mechanic in ORDER that qualifies, or None."""
    for name in ORDER:
        scorer = scorers.get(name)
        if scorer is not None and scorer.should_activate(state, user, skill, usage, trace):
            return name
    return None
