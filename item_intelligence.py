"""
item_intelligence.py

- Static item tables: choice items, damage boosters, type boosters (incl. plates
  and memories), defensive items, recovery items, status orbs, duration extenders
- Classification predicates and the held-item damage multiplier
- Item-driven threat modifier and the role -> recommended item table
"""
from typing import Any, Dict, Optional

from data_loader import Move, Pokemon, normalize_id
from type_chart import DEFAULT_EFFECTIVENESS, Effectiveness

CHOICE_ITEMS: Dict[str, Dict[str, Any]] = {
    "choice band": {"stat": "attack", "multiplier": 1.5},
    "choice specs": {"stat": "special_attack", "multiplier": 1.5},
    "choice scarf": {"stat": "speed", "multiplier": 1.5},
}

DAMAGE_BOOST_ITEMS: Dict[str, Dict[str, Any]] = {
    "life orb": {"multiplier": 1.3, "condition": "always"},
    "expert belt": {"multiplier": 1.2, "condition": "super_effective"},
    "muscle band": {"multiplier": 1.1, "condition": "physical"},
    "wise glasses": {"multiplier": 1.1, "condition": "special"},
    "metronome": {"multiplier": 1.2, "condition": "consecutive", "max": 2.0},
    "punching glove": {"multiplier": 1.1, "condition": "punching"},
    "loaded dice": {"multiplier": 1.0, "condition": "multi_hit"},
}

TYPE_BOOST_ITEMS: Dict[str, str] = {
    "charcoal": "Fire",
    "mystic water": "Water",
    "miracle seed": "Grass",
    "magnet": "Electric",
    "never-melt ice": "Ice",
    "black belt": "Fighting",
    "poison barb": "Poison",
    "soft sand": "Ground",
    "sharp beak": "Flying",
    "twisted spoon": "Psychic",
    "silver powder": "Bug",
    "hard stone": "Rock",
    "spell tag": "Ghost",
    "dragon fang": "Dragon",
    "black glasses": "Dark",
    "metal coat": "Steel",
    "silk scarf": "Normal",
    "fairy feather": "Fairy",
}
TYPE_BOOST_MULTIPLIER = 1.2

PLATE_ITEMS: Dict[str, str] = {
    "flame plate": "Fire", "splash plate": "Water", "meadow plate": "Grass",
    "zap plate": "Electric", "icicle plate": "Ice", "fist plate": "Fighting",
    "toxic plate": "Poison", "earth plate": "Ground", "sky plate": "Flying",
    "mind plate": "Psychic", "insect plate": "Bug", "stone plate": "Rock",
    "spooky plate": "Ghost", "draco plate": "Dragon", "dread plate": "Dark",
    "iron plate": "Steel", "pixie plate": "Fairy",
}

MEMORY_ITEMS: Dict[str, str] = {
    "fire memory": "Fire", "water memory": "Water", "grass memory": "Grass",
    "electric memory": "Electric", "ice memory": "Ice", "fighting memory": "Fighting",
    "poison memory": "Poison", "ground memory": "Ground", "flying memory": "Flying",
    "psychic memory": "Psychic", "bug memory": "Bug", "rock memory": "Rock",
    "ghost memory": "Ghost", "dragon memory": "Dragon", "dark memory": "Dark",
    "steel memory": "Steel", "fairy memory": "Fairy",
}

DEFENSIVE_ITEMS: Dict[str, Dict[str, Any]] = {
    "assault vest": {"effect": "special_defense", "multiplier": 1.5, "blocks_status": True},
    "eviolite": {"effect": "defenses", "multiplier": 1.5},
    "rocky helmet": {"effect": "contact_damage", "fraction": 1 / 6.0},
    "focus sash": {"effect": "survive_ohko", "requires_full_hp": True},
    "focus band": {"effect": "survive_chance", "chance": 10},
    "weakness policy": {"effect": "boost_on_super_effective", "stages": 2},
    "air balloon": {"effect": "ground_immunity"},
    "heavy-duty boots": {"effect": "hazard_immunity"},
}

RECOVERY_ITEMS: Dict[str, Dict[str, Any]] = {
    "leftovers": {"trigger": "end_of_turn", "fraction": 1 / 16.0},
    "black sludge": {"trigger": "end_of_turn", "fraction": 1 / 16.0, "requires_type": "Poison"},
    "shell bell": {"trigger": "on_damage_dealt", "fraction": 1 / 8.0},
    "sitrus berry": {"trigger": "below_half", "fraction": 1 / 4.0},
    "oran berry": {"trigger": "below_half", "amount": 10},
}

STATUS_ORBS: Dict[str, str] = {
    "flame orb": "burn",
    "toxic orb": "badly_poison",
}

EXTENDER_ITEMS: Dict[str, Dict[str, Any]] = {
    "heat rock": {"extends": "Sun", "turns": 3},
    "damp rock": {"extends": "Rain", "turns": 3},
    "smooth rock": {"extends": "Sand", "turns": 3},
    "icy rock": {"extends": "Snow", "turns": 3},
    "terrain extender": {"extends": "terrain", "turns": 3},
}

ITEM_THREAT_MODIFIERS: Dict[str, float] = {
    "life orb": 0.8,
    "weakness policy": 0.5,
    "assault vest": -0.5,
    "focus sash": -0.3,
    "heavy-duty boots": -0.2,
}
CHOICE_THREAT_MODIFIER = 1.0

ROLE_ITEMS: Dict[str, str] = {
    "wall": "leftovers",
    "tank": "assault vest",
    "support": "light clay",
    "wallbreaker": "life orb",
    "pivot": "heavy-duty boots",
    "lead": "focus sash",
}


def _item_of(p: Optional[Pokemon]) -> str:
    return normalize_id(p.item) if p is not None and p.item else ""


def is_choice_item(item: Optional[str]) -> bool:
    return normalize_id(item) in CHOICE_ITEMS


def is_damage_boost_item(item: Optional[str]) -> bool:
    return normalize_id(item) in DAMAGE_BOOST_ITEMS


def boosted_type(item: Optional[str]) -> Optional[str]:
    key = normalize_id(item)
    return TYPE_BOOST_ITEMS.get(key) or PLATE_ITEMS.get(key) or MEMORY_ITEMS.get(key)


def is_type_boost_item(item: Optional[str]) -> bool:
    return boosted_type(item) is not None


def is_defensive_item(item: Optional[str]) -> bool:
    return normalize_id(item) in DEFENSIVE_ITEMS


def is_recovery_item(item: Optional[str]) -> bool:
    return normalize_id(item) in RECOVERY_ITEMS


def is_status_orb(item: Optional[str]) -> bool:
    return normalize_id(item) in STATUS_ORBS


def is_extender_item(item: Optional[str]) -> bool:
    return normalize_id(item) in EXTENDER_ITEMS


def choice_locked(p: Optional[Pokemon]) -> Optional[str]:
    """Move id the holder is locked into, if any."""
    if p is None or not is_choice_item(p.item):
        return None
    return p.volatiles.get("choice_locked")


def blocks_status_moves(p: Optional[Pokemon]) -> bool:
    return bool(DEFENSIVE_ITEMS.get(_item_of(p), {}).get("blocks_status"))


def calculate_item_multiplier(user: Optional[Pokemon], move: Optional[Move], target: Optional[Pokemon] = None,
                              effectiveness: Optional[Effectiveness] = None) -> float:
    """Damage multiplier granted by the user's held item for this move."""
    if user is None or move is None or not move.is_damaging:
        return 1.0
    item = _item_of(user)
    if not item:
        return 1.0
    mult = 1.0

    choice = CHOICE_ITEMS.get(item)
    if choice:
        if (choice["stat"] == "attack" and move.is_physical) or \
           (choice["stat"] == "special_attack" and move.is_special):
            mult *= choice["multiplier"]

    boost = DAMAGE_BOOST_ITEMS.get(item)
    if boost:
        condition = boost["condition"]
        if condition == "always":
            mult *= boost["multiplier"]
        elif condition == "physical" and move.is_physical:
            mult *= boost["multiplier"]
        elif condition == "special" and move.is_special:
            mult *= boost["multiplier"]
        elif condition == "punching" and move.has_flag("punching"):
            mult *= boost["multiplier"]
        elif condition == "super_effective" and target is not None:
            eff = effectiveness or DEFAULT_EFFECTIVENESS
            if eff.super_effective(eff.calculate(move.type, *target.type)):
                mult *= boost["multiplier"]
        elif condition == "consecutive":
            streak = int(user.volatiles.get("consecutive_uses", 0)) if user.last_move == move.id else 0
            mult *= min(1.0 + (boost["multiplier"] - 1.0) * streak, boost["max"])

    if boosted_type(item) == move.type:
        mult *= TYPE_BOOST_MULTIPLIER
    return mult


def item_threat_modifier(p: Optional[Pokemon]) -> float:
    item = _item_of(p)
    if not item:
        return 0.0
    if item in CHOICE_ITEMS:
        return CHOICE_THREAT_MODIFIER
    return ITEM_THREAT_MODIFIERS.get(item, 0.0)


def recommend_item_for_role(p: Optional[Pokemon], role: str) -> str:
    if role == "sweeper" and p is not None:
        if p.speed >= 100:
            return "choice scarf"
        return "choice band" if p.attack >= p.special_attack else "choice specs"
    return ROLE_ITEMS.get(role, "leftovers")


def extension_turns(item: Optional[str], condition: Optional[str]) -> int:
    """Extra turns an extender item adds to the given weather or 'terrain'."""
    info = EXTENDER_ITEMS.get(normalize_id(item))
    if not info or not condition:
        return 0
    extends = info["extends"]
    if extends == condition or (extends == "Snow" and condition == "Hail"):
        return info["turns"]
    return 0
