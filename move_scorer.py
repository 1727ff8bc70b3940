"""
move_scorer.py

Layered, additive score for one (move, user, target) triple. Baseline 100.

Damaging moves:   damage potential, type effectiveness, STAB, critical-hit synergy
Status moves:     hazards, screens, recovery, status infliction, stat drops
Setup moves:      boost value when it is safe to set up (skill 55+)
Every move:       priority, accuracy, recoil risk, secondary effects

Each sub-factor runs in isolation: one that raises is logged and counts as 0.
"""
import logging
from typing import Callable, List, Optional

from battle_state import BattleState, SNOW_WEATHER, effective_speed, is_faster, is_grounded
from damage_calc import rough_damage
from data_loader import Move, Pokemon, normalize_id
from move_memory import MoveMemory
from type_chart import DEFAULT_EFFECTIVENESS, Effectiveness

logger = logging.getLogger(__name__)

BASE_SCORE = 100

CRIT_IMMUNE_ABILITIES = ("battle armor", "shell armor")
PRIORITY_BLOCKING_ABILITIES = ("dazzling", "queenly majesty", "armor tail")
MOLD_BREAKER_ABILITIES = ("mold breaker", "teravolt", "turboblaze")

HAZARD_SCORES = {
    # code: (hazard key, bonus, max layers; None means a single on/off layer)
    "add_spikes": ("spikes", 60, 3),
    "add_stealth_rock": ("stealth_rock", 70, None),
    "add_toxic_spikes": ("toxic_spikes", 50, 2),
    "add_sticky_web": ("sticky_web", 60, None),
}


class ScoringContext:
    """Arguments shared by every sub-factor for one scoring call."""

    def __init__(self, move: Move, user: Pokemon, target: Pokemon, skill: int, state: BattleState,
                 effectiveness: Effectiveness, memory: Optional[MoveMemory]):
        self.move = move
        self.user = user
        self.target = target
        self.skill = skill
        self.state = state
        self.eff = effectiveness
        self.memory = memory

    def type_mod(self, move: Optional[Move] = None) -> float:
        mv = move or self.move
        return self.eff.calculate(mv.type, *self.target.apparent_types())

    def target_moves(self) -> List[Move]:
        """Moves the target is known to carry: its listed set plus anything remembered."""
        moves = list(self.target.moves)
        if self.memory is not None:
            seen = {m.id for m in moves}
            for mv in self.memory.query(self.state.battle_id, self.target).known_moves():
                if mv.id not in seen:
                    moves.append(mv)
        return moves

    def target_last_move(self) -> Optional[Move]:
        last = self.target.last_move
        if not last and self.memory is not None:
            last = self.memory.last_move(self.state.battle_id, self.target)
        if not last:
            return None
        last = normalize_id(last)
        for mv in self.target_moves():
            if mv.id == last:
                return mv
        return None


def crit_immune(target: Pokemon, state: Optional[BattleState]) -> bool:
    if target.has_ability(*CRIT_IMMUNE_ABILITIES):
        return True
    if state is not None and state.side_state(state.side_of(target)).get("lucky_chant", 0) > 0:
        return True
    return False


def effective_power(move: Move, user: Pokemon, target: Pokemon, state: Optional[BattleState] = None) -> int:
    """Base power adjusted for guaranteed crits and multi-hit averages."""
    bp = move.power
    if not bp:
        return 0
    if move.has_flag("always_crit") and not crit_immune(target, state):
        bp = int(bp * 1.5)
    if move.has_flag("multi_hit"):
        if user.has_ability("skill link"):
            return bp * 5
        if user.has_item("loaded dice"):
            return bp * 4
        return bp * 3
    if move.has_flag("two_hit"):
        return bp * 2
    return bp


# --- Damaging moves -------------------------------------------------------------

def _damage_potential(ctx: ScoringContext) -> int:
    move, user, target = ctx.move, ctx.user, ctx.target
    score = 0.0
    bp = effective_power(move, user, target, ctx.state)
    if bp > 0:
        score += bp / 10.0
    if ctx.skill >= 60:
        dmg = rough_damage(move, user, target, power=bp, effectiveness=ctx.eff)
        if dmg >= target.hp:
            score += 100
        elif dmg >= target.hp * 0.7:
            score += 50
        elif dmg >= target.hp * 0.4:
            score += 25
    if move.num_targets > 1 and ctx.state.side_size > 1:
        score += 30
    return int(score)


def _type_effectiveness(ctx: ScoringContext) -> int:
    mod = ctx.type_mod()
    if ctx.eff.super_effective(mod):
        return 40
    if ctx.eff.not_very_effective(mod):
        return -30
    if ctx.eff.ineffective(mod):
        return -200
    return 0


def _stab(ctx: ScoringContext) -> int:
    return 20 if ctx.move.type in ctx.user.type else 0


def _crit_potential(ctx: ScoringContext) -> int:
    move, user, target = ctx.move, ctx.user, ctx.target
    if crit_immune(target, ctx.state):
        return 0
    high_crit = move.has_flag("high_crit")
    always_crit = move.has_flag("always_crit")
    focused = bool(user.volatiles.get("focus_energy"))
    score = 0
    if focused:
        if high_crit:
            score += 50
        elif not always_crit:
            score += 20
    elif high_crit:
        score += 15

    # A crit ignores the target's raised defenses and the user's lowered offenses.
    ignore_def = (target.stat_stages.get("defense", 0) > 0 and move.is_physical) or \
                 (target.stat_stages.get("special_defense", 0) > 0 and move.is_special)
    ignore_debuff = (user.stat_stages.get("attack", 0) < 0 and move.is_physical) or \
                    (user.stat_stages.get("special_attack", 0) < 0 and move.is_special)
    if (ignore_def or ignore_debuff) and (focused or always_crit):
        score += 30
    return score


# --- Status moves ---------------------------------------------------------------

def _status_utility(ctx: ScoringContext) -> int:
    move, user, target, state = ctx.move, ctx.user, ctx.target, ctx.state
    code = move.function_code
    score = 0

    if code in HAZARD_SCORES:
        key, bonus, max_layers = HAZARD_SCORES[code]
        current = state.side_state(state.side_of(target))["hazards"].get(key, 0)
        if max_layers is None:
            if not current:
                score += bonus
        elif int(current) < max_layers:
            score += bonus

    elif code in ("reflect", "light_screen", "aurora_veil"):
        screens = state.side_state(state.side_of(user))["screens"]
        if screens.get(code, 0) == 0:
            last = ctx.target_last_move()
            if code == "reflect":
                score += 50
                if last is not None and last.is_physical:
                    score += 40
            elif code == "light_screen":
                score += 50
                if last is not None and last.is_special:
                    score += 40
            elif state.weather_type in SNOW_WEATHER:
                score += 60
                if last is not None and last.is_damaging:
                    score += 40

    elif code == "heal_user":
        hp = user.hp_fraction()
        if hp < 0.3:
            score += 80
        if hp < 0.5:
            score += 50
        if hp < 0.7:
            score += 20

    elif code == "paralyze_target":
        if is_faster(target, user, state) and not target.status:
            score += 40
    elif code == "burn_target":
        if target.attack > target.special_attack and not target.status:
            score += 50
    elif code in ("poison_target", "badly_poison_target"):
        if not target.status and target.hp > target.max_hp * 0.7:
            score += 45

    elif code == "lower_target_attack":
        if target.attack > target.special_attack:
            score += 30
    elif code == "lower_target_speed":
        if is_faster(target, user, state):
            score += 35
    elif code == "lower_target_defense":
        if user.attack > user.special_attack:
            score += 25
    return score


def is_safe_to_setup(ctx: ScoringContext) -> bool:
    user, target = ctx.user, ctx.target
    if user.hp < user.max_hp * 0.5:
        return False
    if effective_speed(target, ctx.state) > effective_speed(user, ctx.state) * 1.5:
        return False
    for mv in ctx.target_moves():
        if mv.is_damaging and ctx.eff.super_effective(ctx.eff.calculate(mv.type, *user.type)):
            return False
    return True


def _setup_value(ctx: ScoringContext) -> int:
    if ctx.skill < 55:
        return 0
    if not is_safe_to_setup(ctx):
        return -40
    score = max(ctx.move.raised_stages, 1) * 20
    if ctx.user.hp > ctx.user.max_hp * 0.7:
        score += 30
    return score


# --- Situational ----------------------------------------------------------------

def _priority(ctx: ScoringContext) -> int:
    move, user, target, state = ctx.move, ctx.user, ctx.target, ctx.state
    if move.priority <= 0:
        return 0
    if state.terrain_type == "Psychic" and is_grounded(target, state):
        return -100
    if target.has_ability(*PRIORITY_BLOCKING_ABILITIES) and not user.has_ability(*MOLD_BREAKER_ABILITIES):
        return -100
    slower = is_faster(target, user, state)
    score = move.priority * 15
    if user.hp <= user.max_hp * 0.33 and slower:
        score += 40
    if slower:
        score += 30
    if move.is_damaging and rough_damage(move, user, target, effectiveness=ctx.eff) >= target.hp:
        score += 40
    return score


def _accuracy(ctx: ScoringContext) -> int:
    accuracy = ctx.move.accuracy
    if accuracy == 0:
        return 0
    if accuracy < 70:
        return -40
    if accuracy < 85:
        return -20
    if accuracy < 95:
        return -10
    return 0


def _recoil(ctx: ScoringContext) -> int:
    if not ctx.move.has_flag("recoil"):
        return 0
    hp = ctx.user.hp_fraction()
    if hp < 0.3:
        return -50
    if hp < 0.5:
        return -25
    return -10


def _secondary_effects(ctx: ScoringContext) -> int:
    move = ctx.move
    score = 0
    if move.has_flag("flinch") and is_faster(ctx.user, ctx.target, ctx.state):
        score += 20
    if move.lowers_target_stats:
        score += 20
    if move.is_damaging and move.inflicts_status:
        score += move.effect_chance // 2
    return score


DAMAGE_FACTORS = (
    ("damage", _damage_potential),
    ("type", _type_effectiveness),
    ("stab", _stab),
    ("crit", _crit_potential),
)
SITUATIONAL_FACTORS = (
    ("priority", _priority),
    ("accuracy", _accuracy),
    ("recoil", _recoil),
    ("secondary", _secondary_effects),
)


def _safe(name: str, factor: Callable[[ScoringContext], int], ctx: ScoringContext,
          trace: Optional[List[str]]) -> int:
    try:
        value = int(factor(ctx))
    except Exception as exc:
        logger.warning("Move factor '%s' failed for %s (%s); counting 0", name, ctx.move.name, exc)
        return 0
    if value and trace is not None:
        trace.append(f"{ctx.move.name}: {name} {value:+d}")
    return value


def score_move(move: Optional[Move], user: Optional[Pokemon], target: Optional[Pokemon], skill: int,
               state: Optional[BattleState], effectiveness: Optional[Effectiveness] = None,
               memory: Optional[MoveMemory] = None, trace: Optional[List[str]] = None) -> int:
    """Return the move's score (baseline 100), or 0 when any input is missing."""
    if move is None or user is None or target is None or state is None:
        return 0
    ctx = ScoringContext(move, user, target, skill, state, effectiveness or DEFAULT_EFFECTIVENESS, memory)
    score = BASE_SCORE
    if move.is_damaging:
        for name, factor in DAMAGE_FACTORS:
            score += _safe(name, factor, ctx, trace)
    else:
        score += _safe("status", _status_utility, ctx, trace)
    if move.is_setup:
        score += _safe("setup", _setup_value, ctx, trace)
    for name, factor in SITUATIONAL_FACTORS:
        score += _safe(name, factor, ctx, trace)
    logger.debug("%s -> %s with %s: %d", user.name, target.name, move.name, score)
    return score
