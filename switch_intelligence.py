"""
switch_intelligence.py

Decides whether the active combatant should be withdrawn, and which party member
replaces it.

Switch urgency is the sum of eight bounded parts:
    1. type disadvantage      (0..40)
    2. survival concerns      (0..30)
    3. stat-stage loss        (0..25)
    4. better option on bench (0 / 15 / 25 / 35)
    5. momentum               (0..20, momentum_control flag)
    6. prediction             (..15, skill 85+)
    7-10. penalties: already winning, wasting boosts, just switched in, no better option
The total is compared with the tier threshold (beginner 65, mid 55, pro 45).
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from ai_settings import DEFAULT_CONFIG, AIConfig, feature_enabled, flag_enabled, get_ai_tier, switch_threshold
from battle_state import BattleState, is_faster, opponent_side
from damage_calc import rough_damage
from data_loader import BATTLE_STATS, Pokemon
from move_memory import MoveMemory
from role_detection import best_for_role, primary_role, recommend_role_for_situation
from type_chart import DEFAULT_EFFECTIVENESS, Effectiveness

logger = logging.getLogger(__name__)

RESERVE_FLAG = "reserve_last"

STATUS_URGENCY = {
    "badly_poison": 20,
    "poison": 15,
    "burn": 15,
    "sleep": 10,
    "freeze": 10,
    "paralysis": 5,
}

SWITCH_IN_ABILITIES = {
    "intimidate": 20,
    "drizzle": 15,
    "drought": 15,
    "sand stream": 15,
    "snow warning": 15,
    "regenerator": 10,
    "natural cure": 10,
    "immunity": 10,
}

# Current role -> (replacement roles that complement it, bonus)
ROLE_COMPLEMENTS = {
    "sweeper": (("wall", "tank"), 15),
    "wall": (("sweeper", "wallbreaker"), 15),
    "support": (("sweeper", "wallbreaker"), 20),
}


class SwitchAnalysisCache:
    """Last switch score per battle and field position. Inspection only."""

    def __init__(self):
        self._entries: Dict[str, Dict[int, Dict[str, int]]] = {}

    def store(self, battle_id: str, position: int, score: int, turn: int) -> None:
        self._entries.setdefault(battle_id, {})[position] = {"last_score": score, "last_turn": turn}

    def get(self, battle_id: str, position: int) -> Optional[Dict[str, int]]:
        return self._entries.get(battle_id, {}).get(position)

    def cleanup(self, battle_id: str) -> None:
        self._entries.pop(battle_id, None)


class SwitchIntelligence:
    def __init__(self, config: Optional[AIConfig] = None, effectiveness: Optional[Effectiveness] = None,
                 memory: Optional[MoveMemory] = None):
        self.config = config or DEFAULT_CONFIG
        self.eff = effectiveness or DEFAULT_EFFECTIVENESS
        self.memory = memory
        self.cache = SwitchAnalysisCache()

    # --- Helpers ---------------------------------------------------------------
    def _super_effective(self, move_type: str, defender_types: List[str]) -> bool:
        return self.eff.super_effective(self.eff.calculate(move_type, *defender_types))

    def _reserve_active(self, state: BattleState, side: Optional[str]) -> bool:
        return bool(self.config.respect_reserve_last) and state.has_trainer_flag(side, RESERVE_FLAG)

    def _has_type_disadvantage(self, user: Pokemon, opp: Pokemon) -> bool:
        return any(mv.is_damaging and self._super_effective(mv.type, user.type) for mv in opp.moves)

    def _has_advantage(self, state: BattleState, user: Pokemon) -> bool:
        """True when the user hits every living opponent super-effectively."""
        opponents = state.opponents_of(user)
        if not opponents:
            return False
        return all(any(mv.is_damaging and self._super_effective(mv.type, opp.apparent_types())
                       for mv in user.moves)
                   for opp in opponents)

    # --- 1. Type disadvantage ----------------------------------------------------
    def evaluate_type_disadvantage(self, state: BattleState, user: Pokemon) -> int:
        score = 0
        for opp in state.opponents_of(user):
            for mv in opp.moves:
                if not mv.is_damaging or not self._super_effective(mv.type, user.type):
                    continue
                score += 20
                if mv.type in opp.type:
                    score += 15
            resisted = sum(1 for mv in user.moves
                           if self.eff.not_very_effective(self.eff.calculate(mv.type, *opp.apparent_types())))
            if resisted >= 3:
                score += 10
        return min(score, 40)

    # --- 2. Survival --------------------------------------------------------------
    def evaluate_survival(self, state: BattleState, user: Pokemon) -> int:
        score = 0
        hp = user.hp_fraction()
        if hp < 0.25:
            score += 30
        elif hp < 0.40:
            score += 20
        elif hp < 0.55:
            score += 10
        if hp < 0.5 and not any(mv.is_healing for mv in user.moves):
            score += 10
        score += STATUS_URGENCY.get(user.status or "", 0)
        for opp in state.opponents_of(user):
            if not is_faster(opp, user, state):
                continue
            for mv in opp.moves:
                if mv.is_damaging and self._super_effective(mv.type, user.type) and \
                        rough_damage(mv, opp, user, effectiveness=self.eff) >= user.hp:
                    score += 15
        return min(score, 30)

    # --- 3. Stat stages -------------------------------------------------------------
    def evaluate_stat_stages(self, state: BattleState, user: Pokemon) -> int:
        stages = user.stat_stages
        score = 8 * sum(1 for s in BATTLE_STATS if stages.get(s, 0) < 0)
        if stages.get("attack", 0) <= -2 and user.attack > user.special_attack:
            score += 10
        if stages.get("special_attack", 0) <= -2 and user.special_attack > user.attack:
            score += 10
        if stages.get("speed", 0) <= -2:
            score += 12
        for opp in state.opponents_of(user):
            boosted = opp.positive_stages()
            if boosted >= 2:
                score += 5
            if boosted >= 4:
                score += 10
        return min(score, 25)

    # --- Matchups -------------------------------------------------------------------
    def _defensive_matchup(self, candidate: Pokemon, opp: Pokemon) -> int:
        score = 0
        for mv in opp.moves:
            if not mv.is_damaging:
                continue
            mod = self.eff.calculate(mv.type, *candidate.type)
            if self.eff.ineffective(mod):
                score += 40
            elif self.eff.not_very_effective(mod):
                score += 15
            elif self.eff.super_effective(mod):
                score -= 25
        return score

    def evaluate_switch_matchup(self, state: BattleState, candidate: Pokemon, user: Pokemon) -> int:
        """Broad matchup: candidate typing on offense, opponents' damaging moves on defense."""
        if not candidate.type:
            return 0
        score = 0
        for opp in state.opponents_of(user):
            for t in dict.fromkeys(candidate.type):
                mod = self.eff.calculate(t, *opp.apparent_types())
                if self.eff.super_effective(mod):
                    score += 20
                elif self.eff.not_very_effective(mod):
                    score -= 10
                elif self.eff.ineffective(mod):
                    score -= 40
            score += self._defensive_matchup(candidate, opp)
        return score

    def evaluate_switch_matchup_detailed(self, state: BattleState, candidate: Pokemon, user: Pokemon) -> int:
        """Detailed matchup: candidate's damaging moves on offense, same defensive part."""
        if not candidate.type:
            return 0
        score = 0
        for opp in state.opponents_of(user):
            score += self._defensive_matchup(candidate, opp)
            for mv in candidate.moves:
                if not mv.is_damaging:
                    continue
                mod = self.eff.calculate(mv.type, *opp.apparent_types())
                if self.eff.super_effective(mod):
                    score += 20
                elif self.eff.ineffective(mod):
                    score -= 40
        return score

    def evaluate_switch_candidate(self, state: BattleState, candidate: Pokemon, user: Pokemon,
                                  skill: int = 100) -> int:
        score = 50 + self.evaluate_switch_matchup(state, candidate, user)
        score += int(candidate.hp_fraction() * 20)
        if candidate.status:
            score -= 20
        for opp in state.opponents_of(user):
            if candidate.speed > opp.speed:
                score += 15

        if skill >= 55:
            complements = ROLE_COMPLEMENTS.get(primary_role(user))
            if complements and primary_role(candidate) in complements[0]:
                score += complements[1]

        hazards = state.side_state(state.side_of(user))["hazards"]
        if hazards.get("stealth_rock"):
            mod = self.eff.calculate("Rock", *candidate.type)
            if self.eff.ineffective(mod):
                score += 15
            elif self.eff.not_very_effective(mod):
                score += 10
            elif self.eff.super_effective(mod):
                score -= 15
        if hazards.get("spikes", 0) > 0 and (candidate.has_type("Flying") or candidate.has_ability("levitate")):
            score += 10

        if candidate.ability:
            score += SWITCH_IN_ABILITIES.get(candidate.ability, 0)
        return score

    # --- 4. Better options ------------------------------------------------------------
    def evaluate_better_options(self, state: BattleState, user: Pokemon, trace: Optional[List[str]] = None) -> int:
        side = state.side_of(user)
        party = state.party(side)
        candidates = state.bench(side)
        if self._reserve_active(state, side) and len(candidates) > 1:
            candidates = [i for i in candidates if i != len(party) - 1]
        if not candidates:
            return 0

        best_idx: Optional[int] = None
        best_score = -100
        for idx in candidates:
            matchup = self.evaluate_switch_matchup(state, party[idx], user)
            if matchup > best_score:
                best_idx, best_score = idx, matchup
        if best_idx is None:
            return 0

        current = self.evaluate_switch_matchup(state, user, user)
        improvement = best_score - current
        logger.debug("Better option %s: matchup %d vs current %d", party[best_idx].name, best_score, current)
        if trace is not None:
            trace.append(f"best bench option {party[best_idx].name}: matchup {best_score} vs {current}")
        if improvement > 25:
            return 35
        if improvement > 15:
            return 25
        if improvement > 5 and best_score > 40:
            return 15
        return 0

    # --- 5. Momentum --------------------------------------------------------------------
    def evaluate_momentum(self, state: BattleState, user: Pokemon) -> int:
        side = state.side_of(user)
        score = 0
        if state.alive_count(side) < state.alive_count(opponent_side(side)):
            score += 10
        for opp in state.opponents_of(user):
            if any(mv.is_setup for mv in opp.moves) and self._has_type_disadvantage(user, opp):
                score += 15
        return min(score, 20)

    # --- 6. Prediction -----------------------------------------------------------------
    def evaluate_prediction(self, state: BattleState, user: Pokemon, skill: int) -> int:
        if skill < 85 or self.memory is None:
            return 0
        score = 0
        for opp in state.opponents_of(user):
            rec = self.memory.query(state.battle_id, opp)
            if rec.is_empty():
                continue
            if len(rec.setup_moves) >= 2:
                score += 10
            if opp.hp < opp.max_hp * 0.35:
                score -= 15
        return min(score, 15)

    # --- Aggregate -----------------------------------------------------------------------
    def _safe_part(self, name: str, part: Callable[..., int], *args: Any) -> int:
        try:
            return int(part(*args))
        except Exception as exc:
            logger.warning("Switch part '%s' failed (%s); counting 0", name, exc)
            return 0

    def calculate_switch_score(self, state: BattleState, user: Pokemon, skill: int,
                               trace: Optional[List[str]] = None) -> int:
        parts: List[Tuple[str, int]] = []
        for name, part in (("type disadvantage", self.evaluate_type_disadvantage),
                           ("survival", self.evaluate_survival),
                           ("stat loss", self.evaluate_stat_stages)):
            parts.append((name, self._safe_part(name, part, state, user)))
        better = self._safe_part("better options", self.evaluate_better_options, state, user, trace)
        parts.append(("better options", better))
        if flag_enabled("momentum_control", self.config):
            parts.append(("momentum", self._safe_part("momentum", self.evaluate_momentum, state, user)))
        if feature_enabled("prediction", skill, self.config):
            parts.append(("prediction", self._safe_part("prediction", self.evaluate_prediction, state, user, skill)))

        if self._safe_part("has advantage", self._has_advantage, state, user):
            parts.append(("has advantage", -20))
        boosts = sum(max(user.stat_stages.get(s, 0), 0) for s in BATTLE_STATS)
        if boosts > 0:
            parts.append(("wasting boosts", -min(boosts * 10, 30)))
        if user.turn_count < 2:
            parts.append(("just switched in", -40))
        if better <= 0:
            parts.append(("no better option", -15))

        score = 0
        for name, value in parts:
            score += value
            if value and trace is not None:
                trace.append(f"switch {name}: {value:+d}")
        return score

    def should_switch(self, state: Optional[BattleState], user: Optional[Pokemon], skill: int,
                      trace: Optional[List[str]] = None) -> bool:
        if state is None or user is None or user.is_fainted() or user.is_trapped():
            return False
        if not feature_enabled("switch_intelligence", skill, self.config):
            return False
        score = self.calculate_switch_score(state, user, skill, trace)
        position = state.position_of(user)
        self.cache.store(state.battle_id, position if position is not None else -1, score, state.turn_count)
        threshold = switch_threshold(skill, self.config)
        decision = score >= threshold
        logger.debug("Switch score for %s: %d (threshold %d, %s)", user.name, score, threshold,
                     "switch" if decision else "stay")
        if trace is not None:
            trace.append(f"switch score {score} vs {get_ai_tier(skill, self.config)} threshold {threshold}: "
                         f"{'SWITCH' if decision else 'STAY'}")
        return decision

    # --- Replacement -----------------------------------------------------------------------
    def rank_replacements(self, state: BattleState, user: Pokemon, skill: int = 100,
                          trace: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """Eligible party members, best detailed matchup first (party order on ties)."""
        side = state.side_of(user)
        party = state.party(side)
        ranking = []
        for idx in state.bench(side):
            candidate = party[idx]
            ranking.append({
                "index": idx,
                "pokemon": candidate,
                "matchup": self._safe_part("matchup", self.evaluate_switch_matchup_detailed, state, candidate, user),
                "candidate_score": self._safe_part("candidate", self.evaluate_switch_candidate,
                                                   state, candidate, user, skill),
            })

        if self._reserve_active(state, side):
            reserved = len(party) - 1
            voluntary = not user.is_fainted()
            if len(ranking) > 1 or (voluntary and len(ranking) == 1):
                ranking = [entry for entry in ranking if entry["index"] != reserved]
                if trace is not None:
                    trace.append(f"reserving party slot {reserved}")

        ranking.sort(key=lambda entry: entry["matchup"], reverse=True)
        if trace is not None:
            for entry in ranking:
                trace.append(f"candidate {entry['pokemon'].name}: matchup {entry['matchup']}, "
                             f"overall {entry['candidate_score']}")
        return ranking

    def find_best_replacement(self, state: Optional[BattleState], user: Optional[Pokemon], skill: int = 100,
                              trace: Optional[List[str]] = None) -> Optional[int]:
        if state is None or user is None:
            return None
        ranking = self.rank_replacements(state, user, skill, trace)
        if not ranking:
            return None
        best = ranking[0]
        logger.debug("Best replacement for %s: %s (matchup %d)", user.name, best["pokemon"].name, best["matchup"])
        return best["index"]

    def role_based_candidate(self, state: BattleState, user: Pokemon, skill: int = 100) -> Optional[int]:
        """Bench member filling the role that counters the first opponent on the field."""
        opponents = state.opponents_of(user)
        if not opponents:
            return None
        role = recommend_role_for_situation(opponents[0], skill)
        if role is None:
            return None
        return best_for_role(state, state.side_of(user), role)
