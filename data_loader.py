"""
data_loader.py

- Loads local CSV files (read-only lookups for the decision core):
    gen9_pokemon_stats.csv
    gen9_pokemon_moves.csv

- Domain models:
    - Move     (power, accuracy, priority, category, type, function code, flags)
    - Pokemon  (the combatant the AI reasons about; never mutated by the core)

- Move-name tables used to classify moves into behaviour codes when the
  CSV effect text is missing or too vague.

- Helpers:
    - load_local_data(stats_path, moves_path)
    - lookup_move(name, moves_df)
    - species_stats(name, stats_df)
"""
import difflib
import itertools
import logging
import os
import re
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import pandas as pd

logger = logging.getLogger(__name__)


STATUS_KEYWORDS = {
    "burn": "burn",
    "paralyz": "paralysis",
    "badly poison": "badly_poison",
    "toxic": "badly_poison",
    "poison": "poison",
    "sleep": "sleep",
    "freeze": "freeze",
    "confus": "confusion",
    "flinch": "flinch",
    "drows": "sleep",
    "restor": "heal",
}

STAT_NAME_ALIASES: Dict[str, List[str]] = {
    "attack": ["attack", "att."],
    "defense": ["defense", "def."],
    "special_attack": ["special attack", "sp. atk", "special atk", "sp atk"],
    "special_defense": ["special defense", "sp. def", "special def", "sp def"],
    "speed": ["speed"],
    "accuracy": ["accuracy"],
    "evasion": ["evasiveness", "evasion"],
}

BATTLE_STATS = ("attack", "defense", "special_attack", "special_defense", "speed")

HAZARD_MOVES: Dict[str, Dict[str, Any]] = {
    "stealth rock": {"type": "stealth_rock"},
    "spikes": {"type": "spikes"},
    "toxic spikes": {"type": "toxic_spikes"},
    "sticky web": {"type": "sticky_web"},
    "stone axe": {"type": "stealth_rock"},
    "ceaseless edge": {"type": "spikes"},
}

SCREEN_MOVES: Dict[str, str] = {
    "reflect": "reflect",
    "light screen": "light_screen",
    "aurora veil": "aurora_veil",
}

FIELD_MOVES: Dict[str, Dict[str, str]] = {
    "tailwind": {"type": "tailwind", "scope": "side"},
    "trick room": {"type": "trick_room", "scope": "global"},
    "magic room": {"type": "magic_room", "scope": "global"},
    "wonder room": {"type": "wonder_room", "scope": "global"},
    "gravity": {"type": "gravity", "scope": "global"},
    "safeguard": {"type": "safeguard", "scope": "side"},
    "mist": {"type": "mist", "scope": "side"},
    "lucky chant": {"type": "lucky_chant", "scope": "side"},
}

TERRAIN_MOVES: Dict[str, str] = {
    "electric terrain": "Electric",
    "grassy terrain": "Grassy",
    "misty terrain": "Misty",
    "psychic terrain": "Psychic",
}

WEATHER_MOVES: Dict[str, str] = {
    "rain dance": "Rain",
    "sunny day": "Sun",
    "sandstorm": "Sand",
    "snowscape": "Snow",
    "hail": "Hail",
    "chilly reception": "Snow",
}

HEALING_MOVES: Set[str] = {
    "recover", "roost", "synthesis", "morning sun", "moonlight", "soft-boiled",
    "softboiled", "slack off", "milk drink", "shore up", "wish", "rest",
    "heal order", "strength sap", "life dew", "jungle healing", "lunar blessing",
}

OHKO_MOVES: Set[str] = {"guillotine", "fissure", "sheer cold", "horn drill"}

HIGH_CRIT_MOVES: Set[str] = {
    "slash", "night slash", "stone edge", "leaf blade", "cross chop", "psycho cut",
    "shadow claw", "crabhammer", "karate chop", "razor leaf", "air cutter",
    "attack order", "cross poison", "drill run", "spacial rend", "aeroblast",
    "blaze kick", "poison tail", "razor shell", "snipe shot", "aqua cutter",
    "esper wing", "triple arrows", "ivy cudgel", "sky attack",
}

ALWAYS_CRIT_MOVES: Set[str] = {
    "frost breath", "storm throw", "wicked blow", "surging strikes", "flower trick",
}

MULTI_HIT_MOVES: Set[str] = {
    "bullet seed", "icicle spear", "rock blast", "tail slap", "scale shot",
    "pin missile", "arm thrust", "water shuriken", "bone rush", "double slap",
    "fury attack", "fury swipes", "comet punch", "spike cannon", "barrage",
}

TWO_HIT_MOVES: Set[str] = {
    "double kick", "dual wingbeat", "bonemerang", "double hit", "dragon darts",
    "dual chop", "gear grind", "twin beam", "double iron bash", "tachyon cutter",
}

FLINCH_MOVES: Set[str] = {
    "fake out", "iron head", "rock slide", "air slash", "bite", "waterfall",
    "zen headbutt", "headbutt", "dark pulse", "icicle crash", "extrasensory",
    "stomp", "twister", "upper hand", "astonish", "fire fang", "ice fang",
    "thunder fang",
}

RECOIL_MOVES: Set[str] = {
    "brave bird", "flare blitz", "double-edge", "wood hammer", "head smash",
    "wild charge", "take down", "volt tackle", "head charge", "wave crash",
    "submission", "light of ruin", "chloroblast", "steel beam",
}

PROTECT_MOVES: Set[str] = {
    "protect", "detect", "king's shield", "spiky shield", "baneful bunker",
    "silk trap", "burning bulwark", "obstruct",
}

PIVOT_MOVES: Set[str] = {
    "u-turn", "volt switch", "flip turn", "parting shot", "teleport",
    "baton pass", "chilly reception", "shed tail",
}

PUNCHING_MOVES: Set[str] = {
    "mach punch", "drain punch", "ice punch", "fire punch", "thunder punch",
    "focus punch", "bullet punch", "shadow punch",
    "sky uppercut", "hammer arm", "power-up punch", "mega punch", "comet punch",
    "dynamic punch", "meteor mash", "rage fist", "jet punch", "wicked blow",
    "surging strikes", "headlong rush", "plasma fists", "ice hammer",
}

# Spread targets: "all_foes" hits every adjacent opponent, "all_others" also hits the ally.
SPREAD_MOVES: Dict[str, str] = {
    "earthquake": "all_others",
    "surf": "all_others",
    "discharge": "all_others",
    "lava plume": "all_others",
    "sludge wave": "all_others",
    "bulldoze": "all_others",
    "explosion": "all_others",
    "self-destruct": "all_others",
    "boomburst": "all_others",
    "magnitude": "all_others",
    "brutal swing": "all_others",
    "parabolic charge": "all_others",
    "petal blizzard": "all_others",
    "rock slide": "all_foes",
    "heat wave": "all_foes",
    "blizzard": "all_foes",
    "dazzling gleam": "all_foes",
    "hyper voice": "all_foes",
    "icy wind": "all_foes",
    "snarl": "all_foes",
    "muddy water": "all_foes",
    "electroweb": "all_foes",
    "air cutter": "all_foes",
    "bleakwind storm": "all_foes",
    "make it rain": "all_foes",
    "eruption": "all_foes",
    "water spout": "all_foes",
    "glacial lance": "all_foes",
    "astral barrage": "all_foes",
    "breaking swipe": "all_foes",
    "struggle bug": "all_foes",
    "precipice blades": "all_foes",
    "origin pulse": "all_foes",
    "diamond storm": "all_foes",
    "springtide storm": "all_foes",
    "sandsear storm": "all_foes",
    "wildbolt storm": "all_foes",
    "matcha gotcha": "all_foes",
    "mortal spin": "all_foes",
}

# Status moves whose only purpose is raising the user's stats.
SETUP_BOOSTS: Dict[str, Dict[str, int]] = {
    "swords dance": {"attack": 2},
    "dragon dance": {"attack": 1, "speed": 1},
    "nasty plot": {"special_attack": 2},
    "calm mind": {"special_attack": 1, "special_defense": 1},
    "bulk up": {"attack": 1, "defense": 1},
    "quiver dance": {"special_attack": 1, "special_defense": 1, "speed": 1},
    "shell smash": {"attack": 2, "special_attack": 2, "speed": 2},
    "agility": {"speed": 2},
    "rock polish": {"speed": 2},
    "autotomize": {"speed": 2},
    "iron defense": {"defense": 2},
    "acid armor": {"defense": 2},
    "cotton guard": {"defense": 3},
    "amnesia": {"special_defense": 2},
    "cosmic power": {"defense": 1, "special_defense": 1},
    "coil": {"attack": 1, "defense": 1},
    "growth": {"attack": 1, "special_attack": 1},
    "work up": {"attack": 1, "special_attack": 1},
    "hone claws": {"attack": 1},
    "howl": {"attack": 1},
    "shift gear": {"attack": 1, "speed": 2},
    "victory dance": {"attack": 1, "defense": 1, "speed": 1},
    "tail glow": {"special_attack": 3},
    "belly drum": {"attack": 6},
    "curse": {"attack": 1, "defense": 1},
    "no retreat": {"attack": 1, "defense": 1, "special_attack": 1, "special_defense": 1, "speed": 1},
    "clangorous soul": {"attack": 1, "defense": 1, "special_attack": 1, "special_defense": 1, "speed": 1},
    "geomancy": {"special_attack": 2, "special_defense": 2, "speed": 2},
    "tidy up": {"attack": 1, "speed": 1},
}

# Target stat drops: move -> (stat changes, chance). Chance 100 on status moves.
STAT_DROP_MOVES: Dict[str, Tuple[Dict[str, int], int]] = {
    "growl": ({"attack": -1}, 100),
    "charm": ({"attack": -2}, 100),
    "feather dance": ({"attack": -2}, 100),
    "parting shot": ({"attack": -1, "special_attack": -1}, 100),
    "string shot": ({"speed": -2}, 100),
    "scary face": ({"speed": -2}, 100),
    "cotton spore": ({"speed": -2}, 100),
    "screech": ({"defense": -2}, 100),
    "leer": ({"defense": -1}, 100),
    "tail whip": ({"defense": -1}, 100),
    "fake tears": ({"special_defense": -2}, 100),
    "metal sound": ({"special_defense": -2}, 100),
    "icy wind": ({"speed": -1}, 100),
    "electroweb": ({"speed": -1}, 100),
    "bulldoze": ({"speed": -1}, 100),
    "rock tomb": ({"speed": -1}, 100),
    "mud shot": ({"speed": -1}, 100),
    "low sweep": ({"speed": -1}, 100),
    "snarl": ({"special_attack": -1}, 100),
    "breaking swipe": ({"attack": -1}, 100),
    "lunge": ({"attack": -1}, 100),
    "trop kick": ({"attack": -1}, 100),
    "crunch": ({"defense": -1}, 20),
    "shadow ball": ({"special_defense": -1}, 20),
    "psychic": ({"special_defense": -1}, 10),
    "energy ball": ({"special_defense": -1}, 10),
    "earth power": ({"special_defense": -1}, 10),
    "moonblast": ({"special_attack": -1}, 30),
    "iron tail": ({"defense": -1}, 30),
}

# Status infliction: move -> (status, chance).
STATUS_MOVES: Dict[str, Tuple[str, int]] = {
    "thunder wave": ("paralysis", 100),
    "glare": ("paralysis", 100),
    "stun spore": ("paralysis", 100),
    "nuzzle": ("paralysis", 100),
    "will-o-wisp": ("burn", 100),
    "toxic": ("badly_poison", 100),
    "poison powder": ("poison", 100),
    "poison gas": ("poison", 100),
    "spore": ("sleep", 100),
    "sleep powder": ("sleep", 100),
    "hypnosis": ("sleep", 100),
    "sing": ("sleep", 100),
    "dark void": ("sleep", 100),
    "lovely kiss": ("sleep", 100),
    "yawn": ("sleep", 100),
    "scald": ("burn", 30),
    "flamethrower": ("burn", 10),
    "fire blast": ("burn", 10),
    "lava plume": ("burn", 30),
    "sacred fire": ("burn", 50),
    "thunderbolt": ("paralysis", 10),
    "thunder": ("paralysis", 30),
    "discharge": ("paralysis", 30),
    "body slam": ("paralysis", 30),
    "sludge bomb": ("poison", 30),
    "sludge wave": ("poison", 10),
    "poison jab": ("poison", 30),
    "gunk shot": ("poison", 30),
    "ice beam": ("freeze", 10),
    "blizzard": ("freeze", 10),
}

STATUS_FUNCTION_CODES: Dict[str, str] = {
    "paralysis": "paralyze_target",
    "burn": "burn_target",
    "poison": "poison_target",
    "badly_poison": "badly_poison_target",
    "sleep": "sleep_target",
    "freeze": "freeze_target",
}

SPREAD_TARGETS = {"all_foes", "all_others"}


def normalize_id(name: Any) -> str:
    """Lowercase, whitespace-collapsed identifier used for moves, items and abilities."""
    return " ".join(str(name or "").strip().lower().replace("_", " ").split())


def _word_to_int(word: str) -> Optional[int]:
    """Convert spelled-out numerals (one, two, etc.) used in free-form effect text."""
    mapping = {"one": 1, "two": 2, "three": 3, "four": 4, "five": 5}
    return mapping.get(word.strip().lower())


def _extract_percentage(text: str) -> Optional[int]:
    match = re.search(r"(\d+)\s*%", text)
    if match:
        return int(match.group(1))
    return None


def _infer_stage_delta(text: str) -> int:
    """Guess how many stat stages a move raises/lowers based on keywords such as 'sharply'."""
    if "drastically" in text or "severely" in text:
        return 3
    if "sharply" in text or "greatly" in text:
        return 2
    match = re.search(r"by\s+(one|two|three|four|\d+)\s+stage", text)
    if match:
        tok = match.group(1)
        if tok.isdigit():
            return int(tok)
        val = _word_to_int(tok)
        if val is not None:
            return val
    return 1


def _infer_effect_chance(text: str) -> int:
    """Best-effort guess of a secondary-effect activation chance."""
    pct = _extract_percentage(text)
    if pct is not None:
        return pct
    if "$effect_chance" in text:
        return 30
    if "may" in text or "chance" in text:
        return 30
    return 100


def _parse_effect_metadata(name: str, effect_text: Optional[str]) -> Dict[str, Any]:
    """Turn effect text plus the name tables into structured metadata."""
    text = (effect_text or "").strip()
    lower = text.lower()
    name_lower = normalize_id(name)
    meta: Dict[str, Any] = {
        "status": [],
        "stat_changes": [],
        "hazards": HAZARD_MOVES.get(name_lower),
        "screen": SCREEN_MOVES.get(name_lower),
        "weather": WEATHER_MOVES.get(name_lower),
        "terrain": TERRAIN_MOVES.get(name_lower),
        "field": [FIELD_MOVES[name_lower]] if name_lower in FIELD_MOVES else [],
        "healing": {"target": "self"} if name_lower in HEALING_MOVES else None,
    }

    if lower:
        for key, status in STATUS_KEYWORDS.items():
            if key not in lower:
                continue
            if status == "heal":
                meta["healing"] = {"target": "self"}
                continue
            if status in ("confusion", "flinch"):
                continue
            if any(entry["status"] == status for entry in meta["status"]):
                continue
            meta["status"].append({"status": status, "target": "target",
                                   "chance": _infer_effect_chance(lower)})

        sentences = [s.strip() for s in re.split(r"[.!\n]", lower) if s.strip()]
        for sentence in sentences:
            for stat, aliases in STAT_NAME_ALIASES.items():
                if not any(alias in sentence for alias in aliases):
                    continue
                target = "target"
                if any(tok in sentence for tok in ["user", "its own", "itself", "self"]):
                    target = "self"
                sign = 0
                if any(term in sentence for term in ["raise", "boost", "increase", "amplify"]):
                    sign = 1
                elif any(term in sentence for term in ["lower", "drop", "reduce", "decrease"]):
                    sign = -1
                if sign:
                    meta["stat_changes"].append({
                        "target": target,
                        "stat": stat,
                        "stages": sign * _infer_stage_delta(sentence),
                        "chance": _infer_effect_chance(sentence),
                    })
                break

    # Name tables fill in whatever the effect text did not describe.
    if name_lower in SETUP_BOOSTS and not any(ch["target"] == "self" for ch in meta["stat_changes"]):
        for stat, stages in SETUP_BOOSTS[name_lower].items():
            meta["stat_changes"].append({"target": "self", "stat": stat, "stages": stages, "chance": 100})
    if name_lower in STAT_DROP_MOVES and not any(ch["target"] == "target" for ch in meta["stat_changes"]):
        drops, chance = STAT_DROP_MOVES[name_lower]
        for stat, stages in drops.items():
            meta["stat_changes"].append({"target": "target", "stat": stat, "stages": stages, "chance": chance})
    if name_lower in STATUS_MOVES and not meta["status"]:
        status, chance = STATUS_MOVES[name_lower]
        meta["status"].append({"status": status, "target": "target", "chance": chance})

    return meta


def _infer_function_code(name_lower: str, category: str, meta: Dict[str, Any]) -> str:
    """Classify a move into the behaviour code the scorers branch on."""
    if name_lower in OHKO_MOVES:
        return "ohko"
    if category == "status":
        if meta.get("hazards"):
            return "add_" + meta["hazards"]["type"]
        if meta.get("screen"):
            return meta["screen"]
        if name_lower in PROTECT_MOVES:
            return "protect"
        if meta.get("weather"):
            return "weather"
        if meta.get("terrain"):
            return "terrain"
        if meta.get("field"):
            return "field"
        if meta.get("healing"):
            return "heal_user"
    if category == "status" and any(ch["target"] == "self" and ch["stages"] > 0
                                    for ch in meta.get("stat_changes", [])):
        return "raise_user_stats"
    for entry in meta.get("status", []):
        code = STATUS_FUNCTION_CODES.get(entry.get("status"))
        if code:
            return code
    drops = [ch for ch in meta.get("stat_changes", []) if ch["target"] == "target" and ch["stages"] < 0]
    if drops:
        stats = {ch["stat"] for ch in drops}
        if len(stats) == 1:
            stat = stats.pop()
            if stat in ("attack", "speed", "defense"):
                return f"lower_target_{stat}"
        return "lower_target_stats"
    return "none"


def _infer_flags(name_lower: str) -> Set[str]:
    flags: Set[str] = set()
    if name_lower in HIGH_CRIT_MOVES:
        flags.add("high_crit")
    if name_lower in ALWAYS_CRIT_MOVES:
        flags.add("always_crit")
    if name_lower in MULTI_HIT_MOVES:
        flags.add("multi_hit")
    if name_lower in TWO_HIT_MOVES:
        flags.add("two_hit")
    if name_lower in FLINCH_MOVES:
        flags.add("flinch")
    if name_lower in RECOIL_MOVES:
        flags.add("recoil")
    if name_lower in OHKO_MOVES:
        flags.add("ohko")
    if name_lower in PIVOT_MOVES:
        flags.add("pivot")
    if name_lower in PROTECT_MOVES:
        flags.add("protect")
    if name_lower in PUNCHING_MOVES:
        flags.add("punching")
    return flags


def _coerce_int(value: Any, default: int) -> int:
    try:
        if value is None or str(value).strip() == "" or pd.isna(value):
            return default
        return int(float(value))
    except (TypeError, ValueError):
        return default


class Move:
    """Move representation that normalizes CSV fields into scoring-ready attributes."""

    def __init__(self, name: str, power: Optional[int] = 0, mtype: str = "Normal",
                 accuracy: Optional[int] = 100, pp: Optional[int] = 10, category: str = "physical",
                 is_special: bool = False, priority: int = 0, effect: Optional[str] = None,
                 function_code: Optional[str] = None, target: Optional[str] = None,
                 effect_chance: Optional[int] = None, flags: Optional[Iterable[str]] = None):
        self.name = str(name)
        self.id = normalize_id(name)
        self.power = _coerce_int(power, 0)
        self.type = str(mtype).strip().title() if mtype else "Normal"
        # 0 marks a move that never misses
        self.accuracy = _coerce_int(accuracy, 100)
        self.pp = _coerce_int(pp, 10)
        self.max_pp = self.pp
        cat = str(category or ("special" if is_special else "physical")).strip().lower()
        if cat not in {"physical", "special", "status"}:
            cat = "special" if is_special else "physical"
        self.category = cat
        self.is_special = (self.category == "special")
        self.is_status = (self.category == "status")
        self.priority = _coerce_int(priority, 0)
        self.effect_text = str(effect or "")
        self.metadata = _parse_effect_metadata(self.name, self.effect_text)
        self.function_code = function_code or _infer_function_code(self.id, self.category, self.metadata)
        self.flags: Set[str] = _infer_flags(self.id) | set(flags or ())
        if target:
            self.target = target
        elif self.id in SPREAD_MOVES:
            self.target = SPREAD_MOVES[self.id]
        elif self.is_status and (self.function_code in ("raise_user_stats", "heal_user", "protect")
                                 or self.function_code in SCREEN_MOVES.values()):
            self.target = "self"
        else:
            self.target = "single"
        if effect_chance is None:
            chances = [s["chance"] for s in self.metadata["status"]]
            chances += [ch["chance"] for ch in self.metadata["stat_changes"] if ch["target"] == "target"]
            effect_chance = max(chances) if chances else 0
        self.effect_chance = _coerce_int(effect_chance, 0)

    @property
    def is_damaging(self) -> bool:
        return not self.is_status

    @property
    def is_physical(self) -> bool:
        return self.category == "physical"

    @property
    def is_setup(self) -> bool:
        return self.function_code == "raise_user_stats"

    @property
    def raised_stages(self) -> int:
        return sum(ch["stages"] for ch in self.metadata.get("stat_changes", [])
                   if ch["target"] == "self" and ch["stages"] > 0)

    @property
    def is_healing(self) -> bool:
        return self.function_code == "heal_user" or self.id in HEALING_MOVES

    @property
    def is_spread(self) -> bool:
        return self.target in SPREAD_TARGETS

    @property
    def hits_ally(self) -> bool:
        return self.target == "all_others"

    @property
    def num_targets(self) -> int:
        return 2 if self.is_spread else 1

    @property
    def lowers_target_stats(self) -> bool:
        return self.function_code.startswith("lower_target")

    @property
    def inflicts_status(self) -> Optional[str]:
        for entry in self.metadata.get("status", []):
            if entry.get("status") in STATUS_FUNCTION_CODES:
                return entry["status"]
        return None

    def has_flag(self, flag: str) -> bool:
        return flag in self.flags

    def __repr__(self):
        return f"Move({self.name}, {self.type}, cat={self.category}, pow={self.power}, code={self.function_code})"


_UID_COUNTER = itertools.count(1)


class Pokemon:
    """Combatant snapshot: stats, stat stages, status, volatile effects, and move set."""

    def __init__(self, name: str, types: List[str], hp: int, attack: int,
                 special_attack: int, defense: int, special_defense: int, speed: int,
                 moves: List[Move], ability: Optional[str] = None, item: Optional[str] = None,
                 level: int = 50, current_hp: Optional[int] = None, status: Optional[str] = None,
                 turn_count: int = 0, side: Optional[str] = None, uid: Optional[str] = None):
        self.name = str(name)
        raw_types = types if isinstance(types, (list, tuple)) else [types]
        self.type = [str(t).strip().title() for t in raw_types if t]
        self.max_hp = max(int(hp), 1)
        self.hp = self.max_hp if current_hp is None else max(0, min(int(current_hp), self.max_hp))
        self.attack = int(attack)
        self.special_attack = int(special_attack)
        self.defense = int(defense)
        self.special_defense = int(special_defense)
        self.speed = int(speed)
        self.moves = list(moves or [])
        self.ability = normalize_id(ability) or None
        self.item = normalize_id(item) or None
        self.level = int(level)
        self.status = status
        self.turn_count = int(turn_count)
        self.side = side
        self.uid = str(uid) if uid is not None else f"{normalize_id(name)}#{next(_UID_COUNTER)}"

        self.stat_stages = {
            "attack": 0, "defense": 0, "special_attack": 0,
            "special_defense": 0, "speed": 0, "accuracy": 0, "evasion": 0
        }
        self.volatiles: Dict[str, Any] = {}
        self.last_move: Optional[str] = None

        # Special mechanics availability and state
        self.can_mega = False
        self.can_z_move = False
        self.can_dynamax = False
        self.gmax = False
        self.can_terastallize = False
        self.tera_type: Optional[str] = None
        self.mega_evolved = False
        self.dynamaxed = False
        self.terastallized = False

    def is_fainted(self) -> bool:
        return self.hp <= 0

    def hp_fraction(self) -> float:
        return self.hp / float(self.max_hp) if self.max_hp else 0.0

    def apparent_types(self) -> List[str]:
        """Types an observer sees; an Illusion disguise overrides the real ones."""
        disguise = self.volatiles.get("illusion")
        if disguise:
            return list(disguise)
        return list(self.type)

    def has_type(self, t: str) -> bool:
        return str(t).strip().title() in self.type

    def has_ability(self, *names: str) -> bool:
        return bool(self.ability) and self.ability in {normalize_id(n) for n in names}

    def has_item(self, *names: str) -> bool:
        return bool(self.item) and self.item in {normalize_id(n) for n in names}

    def knows_move(self, *names: str) -> bool:
        wanted = {normalize_id(n) for n in names}
        return any(m.id in wanted for m in self.moves)

    def is_trapped(self) -> bool:
        return bool(self.volatiles.get("trapped"))

    def positive_stages(self) -> int:
        """Count of battle stats currently raised."""
        return sum(1 for s in BATTLE_STATS if self.stat_stages.get(s, 0) > 0)

    def __repr__(self):
        return f"Pokemon({self.name}, types={self.type}, hp={self.hp}/{self.max_hp}, ability={self.ability}, item={self.item})"


def load_local_data(
    stats_path: str = "gen9_pokemon_stats.csv",
    moves_path: str = "gen9_pokemon_moves.csv",
):
    """
    Return two DataFrames (stats, moves) with normalized column names.

    Path selection:
        1. Use the provided path when the file exists.
        2. Fall back to well-known alternates inside the repo.
    Column normalization:
        - Lowercase all columns and replace spaces with underscores.
        - Ensure stats expose a `pokemon` column, and moves expose a `move` column.
    Missing files yield empty frames; every lookup then reports "not found".
    """
    def pick_path(primary: str, fallbacks):
        if os.path.exists(primary):
            return primary
        for p in fallbacks:
            if os.path.exists(p):
                return p
        return None

    stats_file = pick_path(stats_path, ["pokemon.csv"])
    moves_file = pick_path(moves_path, ["pokemon_moves.csv"])

    stats_df = pd.read_csv(stats_file) if stats_file else pd.DataFrame(columns=["pokemon"])
    moves_df = pd.read_csv(moves_file) if moves_file else pd.DataFrame(columns=["move"])
    if not stats_file:
        logger.warning("Stats table not found at %s; species lookups disabled", stats_path)
    if not moves_file:
        logger.warning("Move table not found at %s; move lookups disabled", moves_path)
    return normalize_stats_frame(stats_df), normalize_moves_frame(moves_df)


def _norm_cols(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).strip().lower().replace(" ", "_") for c in df.columns]
    return df


def normalize_stats_frame(stats_df: pd.DataFrame) -> pd.DataFrame:
    stats_df = _norm_cols(stats_df)
    if 'pokemon' not in stats_df.columns and 'name' in stats_df.columns:
        stats_df = stats_df.rename(columns={'name': 'pokemon'})
    return stats_df


def normalize_moves_frame(moves_df: pd.DataFrame) -> pd.DataFrame:
    moves_df = _norm_cols(moves_df)
    if 'move' not in moves_df.columns:
        if 'name' in moves_df.columns:
            moves_df = moves_df.rename(columns={'name': 'move'})
        elif 'move_name' in moves_df.columns:
            moves_df = moves_df.rename(columns={'move_name': 'move'})
    return moves_df


def lookup_move(move_name: str, moves_df: Optional[pd.DataFrame]) -> Optional[Move]:
    """Build a Move from the move table, tolerating casing and missing columns."""
    if not move_name or moves_df is None or moves_df.empty or 'move' not in moves_df.columns:
        return None
    wanted = normalize_id(move_name)
    row = moves_df[moves_df['move'].astype(str).map(normalize_id) == wanted]
    if row.empty:
        return None
    r = row.iloc[0]
    mtype = r.get('type') or r.get('move_type') or "Normal"
    category = str(r.get('damage_class') or r.get('category') or "physical").strip().lower()
    effect = r.get('short_descripton') or r.get('short_description') or r.get('effect')
    if isinstance(effect, float) and pd.isna(effect):
        effect = None
    return Move(name=str(r.get('move')), power=r.get('power'), mtype=str(mtype),
                accuracy=r.get('accuracy'), pp=r.get('pp'), category=category,
                priority=r.get('priority'), effect=effect)


def _resolve_stats_row(name: str, stats_df: pd.DataFrame) -> Tuple[Optional[pd.Series], Optional[str]]:
    """Resolve a species name to a stats row using exact or fuzzy matching."""
    query = str(name or "").strip().lower()
    if not query or stats_df is None or stats_df.empty or 'pokemon' not in stats_df.columns:
        return None, None
    series = stats_df['pokemon'].dropna().astype(str).str.strip()
    exact = series[series.str.lower() == query]
    if not exact.empty:
        return stats_df.loc[exact.index[0]], exact.iloc[0]
    lower_map = {val.lower(): idx for idx, val in series.items()}
    match_list = difflib.get_close_matches(query, list(lower_map.keys()), n=1, cutoff=0.72)
    if not match_list:
        return None, None
    idx = lower_map[match_list[0]]
    return stats_df.loc[idx], str(stats_df.loc[idx]['pokemon'])


def species_stats(name: str, stats_df: Optional[pd.DataFrame]) -> Optional[Dict[str, Any]]:
    """Return base stats and typing for a species, or None when the table has no match."""
    if stats_df is None:
        return None
    row, resolved = _resolve_stats_row(name, stats_df)
    if row is None:
        return None
    if resolved and resolved.lower() != str(name).strip().lower():
        logger.info("Matched species '%s' to '%s'", name, resolved)

    def get_stat(*keys, default=50):
        for k in keys:
            if k in row.index and pd.notna(row.get(k)):
                return _coerce_int(row.get(k), default)
        return default

    types = []
    for key in ('type1', 'type_1', 'type', 'type2', 'type_2'):
        if key in row.index and pd.notna(row.get(key)) and str(row.get(key)).strip():
            t = str(row.get(key)).strip().title()
            if t not in types:
                types.append(t)
    return {
        "name": resolved,
        "types": types[:2] or ["Normal"],
        "hp": get_stat('hp', 'base_hp'),
        "attack": get_stat('attack', 'atk'),
        "defense": get_stat('defense', 'def'),
        "special_attack": get_stat('special_attack', 'sp_attack', 'sp_atk', 'spatk'),
        "special_defense": get_stat('special_defense', 'sp_defense', 'sp_def', 'spdef'),
        "speed": get_stat('speed', 'spe'),
    }
