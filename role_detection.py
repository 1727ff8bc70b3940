"""
role_detection.py

Classifies combatants into team archetypes from their stats and move lists.

Detection order is fixed (sweeper, wall, tank, wallbreaker, support, pivot, lead);
the first two matches are reported. Nothing matching yields "balanced".
"""
from typing import List, Optional, Tuple

from battle_state import BattleState
from data_loader import Pokemon

BALANCED = "balanced"

SUPPORT_MOVES = {
    "reflect", "light screen", "aurora veil", "stealth rock", "spikes", "toxic spikes",
    "sticky web", "heal bell", "aromatherapy", "wish", "tailwind", "trick room",
    "will-o-wisp", "toxic", "thunder wave", "taunt",
}
PIVOT_MOVES = {"u-turn", "volt switch", "flip turn", "parting shot", "teleport", "baton pass"}
LEAD_MOVES = {"stealth rock", "spikes", "sticky web", "taunt", "fake out", "quick guard"}

# Opponent primary role -> role that counters it.
ROLE_COUNTERS = {
    "sweeper": "wall",
    "wall": "wallbreaker",
    "wallbreaker": "sweeper",
    "support": "sweeper",
    "tank": "wallbreaker",
}


def _best_offense(p: Pokemon) -> int:
    return max(p.attack, p.special_attack)


def _is_sweeper(p: Pokemon) -> bool:
    return p.speed >= 100 and (p.attack >= 100 or p.special_attack >= 100)


def _is_wall(p: Pokemon) -> bool:
    return p.max_hp + p.defense + p.special_defense >= 300 and p.speed < 70


def _is_tank(p: Pokemon) -> bool:
    return p.max_hp >= 90 and _best_offense(p) >= 100 and p.speed < 90


def _is_wallbreaker(p: Pokemon) -> bool:
    return p.attack >= 120 or p.special_attack >= 120


def _is_support(p: Pokemon) -> bool:
    return p.knows_move(*SUPPORT_MOVES)


def _is_pivot(p: Pokemon) -> bool:
    return p.knows_move(*PIVOT_MOVES)


def _is_lead(p: Pokemon) -> bool:
    if p.knows_move(*LEAD_MOVES):
        return True
    return p.speed >= 90 and p.knows_move("taunt")


_DETECTORS = (
    ("sweeper", _is_sweeper),
    ("wall", _is_wall),
    ("tank", _is_tank),
    ("wallbreaker", _is_wallbreaker),
    ("support", _is_support),
    ("pivot", _is_pivot),
    ("lead", _is_lead),
)


def matching_roles(p: Pokemon) -> List[str]:
    return [role for role, check in _DETECTORS if check(p)]


def detect_roles(p: Optional[Pokemon]) -> Tuple[str, Optional[str]]:
    """Return (primary, secondary) roles in detection order."""
    if p is None:
        return BALANCED, None
    roles = matching_roles(p)
    if not roles:
        return BALANCED, None
    return roles[0], (roles[1] if len(roles) > 1 else None)


def primary_role(p: Optional[Pokemon]) -> str:
    return detect_roles(p)[0]


def has_role(p: Optional[Pokemon], role: str) -> bool:
    """Only the reported primary and secondary roles count."""
    if p is None:
        return False
    primary, secondary = detect_roles(p)
    return role in (primary, secondary)


def recommend_role_for_situation(opponent: Optional[Pokemon], skill: int = 100) -> Optional[str]:
    """Counter-pick lookup keyed on the opponent's primary role."""
    if skill < 55 or opponent is None:
        return None
    return ROLE_COUNTERS.get(primary_role(opponent), BALANCED)


def rate_role_effectiveness(p: Pokemon, role: str) -> int:
    rating = 50
    if role == "sweeper":
        rating += p.speed // 2 + _best_offense(p) // 2
    elif role == "wall":
        rating += p.max_hp // 3 + p.defense // 3 + p.special_defense // 3
    elif role == "wallbreaker":
        rating += _best_offense(p)
    elif role == "tank":
        rating += p.max_hp // 2 + _best_offense(p) // 2
    elif role == "support" and _is_support(p):
        rating += 100
    elif role == "pivot" and _is_pivot(p):
        rating += 100
    elif role == "lead" and _is_lead(p):
        rating += 100
    return rating


def best_for_role(state: BattleState, side: str, role: str) -> Optional[int]:
    """Bench party index best suited to `role`, or None if nobody on the bench holds it."""
    best_idx: Optional[int] = None
    best_rating = -1
    party = state.party(side)
    for idx in state.bench(side):
        p = party[idx]
        if not has_role(p, role):
            continue
        rating = rate_role_effectiveness(p, role)
        if rating > best_rating:
            best_idx, best_rating = idx, rating
    return best_idx
