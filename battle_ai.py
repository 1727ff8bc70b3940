"""
Battle AI module

- BattleAI: the host-facing decision engine
    - score_move: move scorer plus threat, field, doubles, personality and item layers
    - should_switch / choose_replacement: switch pipeline
    - should_mega_evolve / should_use_z_move / should_dynamax / should_terastallize
      and choose_special_action (Mega > Z-Move > Dynamax > Tera, one per turn)
    - choose_ai_action: full turn decision as an action dict
    - observe_move / start_battle / end_battle: per-battle memory lifecycle
- Skill level gates each layer (see ai_settings.SKILL_THRESHOLDS)
- Every entry point accepts an optional `trace` list that collects the rationale
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from adapters import unwrap
from ai_settings import DEFAULT_CONFIG, AIConfig, feature_enabled, qualifies_for_advanced_ai
from battle_state import BattleState
from doubles_coordination import CoordinationBoard, doubles_score
from field_effects import field_effects_score, weather_setting_bonus
from item_intelligence import blocks_status_moves, calculate_item_multiplier, choice_locked, item_threat_modifier
from move_memory import MoveMemory
from move_scorer import BASE_SCORE, score_move
from special_mechanics import MechanicUsage, build_scorers, choose_mechanic
from switch_intelligence import SwitchIntelligence
from threat_assessment import assess_threat
from type_chart import DEFAULT_EFFECTIVENESS, Effectiveness
from data_loader import SCREEN_MOVES, Move, Pokemon

logger = logging.getLogger(__name__)

BLOCKED_MOVE_PENALTY = -100


class BattleAI:
    def __init__(self, config: Optional[AIConfig] = None, effectiveness: Optional[Effectiveness] = None):
        self.config = config or DEFAULT_CONFIG
        self.eff = effectiveness or DEFAULT_EFFECTIVENESS
        self.memory = MoveMemory()
        self.board = CoordinationBoard()
        self.usage = MechanicUsage()
        self.switching = SwitchIntelligence(self.config, self.eff, self.memory)
        self.mechanics = build_scorers(self.config, self.eff)

    # --- Lifecycle ----------------------------------------------------------------
    def start_battle(self, battle_id: str) -> None:
        logger.debug("[%s] battle started", battle_id)

    def end_battle(self, battle_id: str) -> None:
        """Drop every per-battle map: memory, switch cache, partner plans, spent mechanics."""
        self.memory.cleanup(battle_id)
        self.switching.cache.cleanup(battle_id)
        self.board.cleanup(battle_id)
        self.usage.cleanup(battle_id)
        logger.debug("[%s] battle ended; per-battle state cleared", battle_id)

    def observe_move(self, state: Optional[BattleState], combatant: Any, move: Optional[Move]) -> None:
        if state is None:
            return
        self.memory.record(state.battle_id, unwrap(combatant), move)

    # --- Move scoring -------------------------------------------------------------
    def _personality_bonus(self, move: Move, user: Pokemon, target: Pokemon) -> int:
        modifiers = self.config.personality_modifiers.get(self.config.personality, {})
        if not modifiers:
            return 0
        classes = []
        if move.is_setup:
            classes.append("setup")
        if move.power >= 100:
            classes.append("powerful")
        if move.has_flag("ohko") or 0 < move.accuracy < 80:
            classes.append("risky")
        if move.has_flag("recoil"):
            classes.append("recoil")
        screen = move.function_code in SCREEN_MOVES.values()
        if screen or move.function_code == "protect" or move.is_healing:
            classes.append("defensive")
        if move.function_code.startswith("add_"):
            classes.append("hazards")
        if screen:
            classes.append("screens")
        if move.is_healing:
            classes.append("recovery")
        if move.function_code == "protect":
            classes.append("protect")
        if move.is_damaging and self.eff.super_effective(self.eff.calculate(move.type, *target.apparent_types())):
            classes.append("super_effective")
        if move.is_status and move.inflicts_status:
            classes.append("status")
        if move.priority > 0 and move.is_damaging:
            classes.append("priority")
        if move.is_spread:
            classes.append("multi_target")
        return sum(modifiers.get(c, 0) for c in classes)

    def _item_bonus(self, move: Move, user: Pokemon, target: Pokemon) -> int:
        locked = choice_locked(user)
        if locked and locked != move.id:
            return BLOCKED_MOVE_PENALTY
        if move.is_status and blocks_status_moves(user):
            return BLOCKED_MOVE_PENALTY
        if not move.is_damaging:
            return 0
        mult = calculate_item_multiplier(user, move, target, self.eff)
        bonus = int(round((mult - 1.0) * 50))
        bonus += int(item_threat_modifier(target) * 5)
        return bonus

    def score_move(self, state: Optional[BattleState], move: Optional[Move], user: Any, target: Any, skill: int,
                   base_score: int = BASE_SCORE, trace: Optional[List[str]] = None) -> int:
        """
        Layered move score. `base_score` is the host's own rating; every layer adds to it.

        Returns `base_score` unchanged when the inputs are incomplete or the skill
        level does not qualify for the advanced layers.
        """
        user, target = unwrap(user), unwrap(target)
        if state is None or move is None or user is None or target is None:
            return base_score
        if not qualifies_for_advanced_ai(skill, self.config):
            return base_score

        score = base_score + score_move(move, user, target, skill, state, self.eff, self.memory, trace) - BASE_SCORE

        threat = assess_threat(state, user, target, skill, self.memory, self.eff)
        if move.is_damaging:
            score += int(threat * 5)
        if threat < 3.0:
            score -= 15
        if trace is not None:
            trace.append(f"{move.name}: threat of {target.name} {threat:.1f}")

        layers: List[Tuple[str, Callable[[], int]]] = [
            ("field", lambda: field_effects_score(state, move, user, target, skill)
             + weather_setting_bonus(state, move, user, skill)),
        ]
        if state.side_size > 1:
            layers.append(("doubles", lambda: doubles_score(state, move, user, target, skill, self.board, self.eff)))
        if feature_enabled("personalities", skill, self.config):
            layers.append(("personality", lambda: self._personality_bonus(move, user, target)))
        if feature_enabled("items", skill, self.config):
            layers.append(("items", lambda: self._item_bonus(move, user, target)))
        for name, layer in layers:
            try:
                value = int(layer())
            except Exception as exc:
                logger.warning("Layer '%s' failed for %s (%s); counting 0", name, move.name, exc)
                continue
            score += value
            if value and trace is not None:
                trace.append(f"{move.name}: {name} {value:+d}")

        logger.debug("Final score %s (%s -> %s): %d", move.name, user.name, target.name, score)
        return score

    # --- Switching ------------------------------------------------------------------
    def should_switch(self, state: Optional[BattleState], user: Any, skill: int,
                      trace: Optional[List[str]] = None) -> bool:
        if not qualifies_for_advanced_ai(skill, self.config):
            return False
        try:
            return self.switching.should_switch(state, unwrap(user), skill, trace)
        except Exception as exc:
            logger.warning("Switch evaluation failed (%s); staying in", exc)
            return False

    def choose_replacement(self, state: Optional[BattleState], user: Any, skill: int,
                           trace: Optional[List[str]] = None) -> Optional[int]:
        user = unwrap(user)
        if state is None or user is None:
            return None
        if not qualifies_for_advanced_ai(skill, self.config) or \
                not feature_enabled("switch_intelligence", skill, self.config):
            return None
        try:
            idx = self.switching.find_best_replacement(state, user, skill, trace)
            if trace is not None:
                role_pick = self.switching.role_based_candidate(state, user, skill)
                if role_pick is not None:
                    trace.append(f"role-based pick: {state.party(state.side_of(user))[role_pick].name}")
        except Exception as exc:
            logger.warning("Replacement search for %s failed (%s)", user.name, exc)
            return None
        return idx

    # --- Special mechanics ----------------------------------------------------------
    def _should_use(self, mechanic: str, state: Optional[BattleState], user: Any, skill: int,
                    trace: Optional[List[str]] = None) -> bool:
        if not qualifies_for_advanced_ai(skill, self.config):
            return False
        try:
            return self.mechanics[mechanic].should_activate(state, unwrap(user), skill, self.usage, trace)
        except Exception as exc:
            logger.warning("%s check failed (%s); holding", mechanic, exc)
            return False

    def should_mega_evolve(self, state, user, skill: int, trace: Optional[List[str]] = None) -> bool:
        return self._should_use("mega_evolution", state, user, skill, trace)

    def should_use_z_move(self, state, user, skill: int, trace: Optional[List[str]] = None) -> bool:
        return self._should_use("z_moves", state, user, skill, trace)

    def should_dynamax(self, state, user, skill: int, trace: Optional[List[str]] = None) -> bool:
        return self._should_use("dynamax", state, user, skill, trace)

    def should_terastallize(self, state, user, skill: int, trace: Optional[List[str]] = None) -> bool:
        return self._should_use("terastallization", state, user, skill, trace)

    def choose_special_action(self, state: Optional[BattleState], user: Any, skill: int,
                              trace: Optional[List[str]] = None) -> Optional[str]:
        """Pick at most one mechanic for this turn and mark it spent for the user's side."""
        user = unwrap(user)
        if state is None or user is None or not qualifies_for_advanced_ai(skill, self.config):
            return None
        mechanic = choose_mechanic(self.mechanics, state, user, skill, self.usage, trace)
        if mechanic is not None:
            self.usage.mark_used(state.battle_id, state.side_of(user), mechanic)
            logger.info("%s registered %s", user.name, mechanic)
        return mechanic

    # --- Turn decision --------------------------------------------------------------
    def choose_ai_action(self, state: Optional[BattleState], skill: int, user: Any = None) -> Dict[str, Any]:
        """
        Decision flow for one active combatant:
            1. Fainted: pick a replacement.
            2. Switch when the urgency score clears the tier threshold and a replacement exists.
            3. Otherwise score every usable move against every opponent on the field and
               attack with the best, activating a special mechanic if one qualifies.
        """
        if state is None or state.is_terminal():
            return {"type": "noop"}
        user = unwrap(user) or state.active_ai()
        if user is None:
            return {"type": "noop"}
        trace: List[str] = []
        party = state.party(state.side_of(user))

        if user.is_fainted():
            idx = self.choose_replacement(state, user, skill, trace)
            if idx is None:
                return {"type": "noop"}
            return {"type": "switch", "index": idx, "pokemon": party[idx], "reason": "replace_fainted",
                    "trace": trace}

        if self.should_switch(state, user, skill, trace):
            idx = self.choose_replacement(state, user, skill, trace)
            if idx is not None:
                return {"type": "switch", "index": idx, "pokemon": party[idx], "reason": "switch_urgency",
                        "trace": trace}
            trace.append("no eligible replacement; staying in")

        best = None
        for mv in user.moves:
            if mv.pp <= 0:
                continue
            for target in state.opponents_of(user):
                score = self.score_move(state, mv, user, target, skill, trace=trace)
                if best is None or score > best[0]:
                    best = (score, mv, target)
        if best is None:
            return {"type": "noop"}

        score, move, target = best
        if state.side_size > 1:
            self.board.register(state.battle_id, state.turn_count, user, target)
        special = self.choose_special_action(state, user, skill, trace)
        return {"type": "attack", "move": move, "target": target, "score": score, "special": special,
                "reason": "best_score", "trace": trace}
