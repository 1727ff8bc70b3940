"""
threat_assessment.py

Danger score in [0, 10] for an (observer, threat) pair.

Components, in order: stat pressure, type pressure, remembered moves (skill 50+),
ability tier (skill 60+), HP scaling, accumulated boosts (skill 55+), speed edge.
"""
import logging
from typing import Dict, List, Optional, Tuple

from battle_state import BattleState, effective_speed
from data_loader import OHKO_MOVES, Pokemon
from move_memory import MoveMemory
from type_chart import DEFAULT_EFFECTIVENESS, Effectiveness

logger = logging.getLogger(__name__)

BASE_THREAT = 5.0
MIN_THREAT = 0.0
MAX_THREAT = 10.0

ABILITY_THREAT_TIERS: Dict[float, Tuple[str, ...]] = {
    1.5: ("huge power", "pure power", "parental bond", "gorilla tactics",
          "protosynthesis", "quark drive"),
    0.8: ("adaptability", "sheer force", "technician", "skill link",
          "strong jaw", "tough claws", "sharpness"),
    0.6: ("gale wings", "prankster", "quick draw"),
    0.5: ("speed boost", "unburden", "motor drive"),
    0.3: ("wonder guard", "multiscale", "regenerator", "magic bounce"),
}


def _stat_threat(observer: Pokemon, threat: Pokemon) -> float:
    score = 0.0
    if threat.attack > observer.defense * 1.5:
        score += 1.0
    elif threat.attack > observer.defense:
        score += 0.5
    if threat.special_attack > observer.special_defense * 1.5:
        score += 1.0
    elif threat.special_attack > observer.special_defense:
        score += 0.5
    return min(score, 2.5)


def _type_threat(observer: Pokemon, threat: Pokemon, eff: Effectiveness) -> float:
    score = 0.0
    for attack_type in threat.type:
        for defend_type in observer.type:
            mult = eff.calculate(attack_type, defend_type)
            if eff.super_effective(mult):
                score += 1.0
            elif eff.not_very_effective(mult):
                score -= 0.5
            elif eff.ineffective(mult):
                score -= 1.0
    return min(score, 2.0)


def _move_threat(state: BattleState, observer: Pokemon, threat: Pokemon,
                 memory: Optional[MoveMemory], eff: Effectiveness) -> float:
    if memory is None:
        return 0.0
    rec = memory.query(state.battle_id, threat)
    if rec.is_empty():
        return 0.0
    score = 0.5 * len(rec.priority_moves)
    for mv in rec.known_moves():
        if mv.is_damaging and eff.super_effective(eff.calculate(mv.type, *observer.type)):
            score += 0.8
        if mv.id in OHKO_MOVES:
            score += 1.0
    score += 0.3 * len(rec.setup_moves)
    max_dmg = memory.max_known_damage(state.battle_id, threat, observer, eff)
    if max_dmg >= observer.hp * 0.8:
        score += 1.0
    elif max_dmg >= observer.hp * 0.5:
        score += 0.5
    return min(score, 2.0)


def _ability_threat(threat: Pokemon) -> float:
    if not threat.ability:
        return 0.0
    for value, names in ABILITY_THREAT_TIERS.items():
        if threat.ability in names:
            return min(value, 1.5)
    return 0.0


def _hp_modifier(threat: Pokemon) -> float:
    hp = threat.hp_fraction()
    if hp < 0.2:
        return 0.3
    if hp < 0.4:
        return 0.6
    if hp < 0.6:
        return 0.8
    if hp > 0.9:
        return 1.2
    return 1.0


def _setup_threat(threat: Pokemon) -> float:
    boosts = sum(max(threat.stat_stages.get(s, 0), 0) for s in ("attack", "special_attack", "speed"))
    return min(boosts * 0.3, 1.5)


def _speed_threat(state: BattleState, observer: Pokemon, threat: Pokemon) -> float:
    mine = effective_speed(observer, state)
    theirs = effective_speed(threat, state)
    if theirs <= mine:
        return 0.0
    ratio = theirs / mine
    if ratio > 2.0:
        return 1.0
    if ratio > 1.5:
        return 0.7
    return 0.4


def assess_threat(state: BattleState, observer: Optional[Pokemon], threat: Optional[Pokemon],
                  skill: int = 100, memory: Optional[MoveMemory] = None,
                  effectiveness: Optional[Effectiveness] = None) -> float:
    """Return how dangerous `threat` is to `observer` on a 0-10 scale (5 is neutral)."""
    if observer is None or threat is None or threat.is_fainted():
        return BASE_THREAT
    eff = effectiveness or DEFAULT_EFFECTIVENESS
    score = BASE_THREAT
    try:
        score += _stat_threat(observer, threat)
        score += _type_threat(observer, threat, eff)
        if skill >= 50:
            score += _move_threat(state, observer, threat, memory, eff)
        if skill >= 60:
            score += _ability_threat(threat)
        score *= _hp_modifier(threat)
        if skill >= 55:
            score += _setup_threat(threat)
        score += _speed_threat(state, observer, threat)
    except Exception as exc:
        logger.warning("Threat assessment of %s failed (%s); using neutral score", threat.name, exc)
        return BASE_THREAT
    result = max(MIN_THREAT, min(score, MAX_THREAT))
    logger.debug("Threat %s -> %s: %.2f", threat.name, observer.name, result)
    return result


def most_threatening_opponent(state: BattleState, observer: Pokemon, skill: int = 100,
                              memory: Optional[MoveMemory] = None,
                              effectiveness: Optional[Effectiveness] = None) -> Optional[Pokemon]:
    best: Optional[Pokemon] = None
    best_score = -1.0
    for opp in state.opponents_of(observer):
        score = assess_threat(state, observer, opp, skill, memory, effectiveness)
        if score > best_score:
            best, best_score = opp, score
    return best


def priority_target(state: BattleState, user: Pokemon, skill: int = 100,
                    memory: Optional[MoveMemory] = None,
                    effectiveness: Optional[Effectiveness] = None) -> Optional[Pokemon]:
    """Opponent to focus: dangerous and already worn down."""
    ranked: List[Tuple[float, Pokemon]] = []
    for opp in state.opponents_of(user):
        threat = assess_threat(state, user, opp, skill, memory, effectiveness)
        ranked.append((threat * 10 + (1.0 - opp.hp_fraction()) * 20, opp))
    if not ranked:
        return None
    return max(ranked, key=lambda pair: pair[0])[1]
