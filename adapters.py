"""
adapters.py

The single place where host data becomes decision-core objects.

- unwrap(obj): peel one host wrapper layer (`.battler` / `.pokemon`)
- move_from_dict / pokemon_from_dict / state_from_dict: JSON-like dicts -> Move /
  Pokemon / BattleState, enriching bare move names and missing base stats from the
  pandas tables when they are supplied
- load_state(path): read a JSON battle snapshot from disk
"""
import json
import logging
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from battle_state import SIDES, BattleState
from data_loader import BATTLE_STATS, Move, Pokemon, lookup_move, species_stats

logger = logging.getLogger(__name__)

WRAPPER_ATTRS = ("battler", "pokemon")

MECHANIC_FIELDS = ("can_mega", "can_z_move", "can_dynamax", "gmax", "can_terastallize",
                   "mega_evolved", "dynamaxed", "terastallized")


def unwrap(obj: Any) -> Any:
    """Return the wrapped combatant if `obj` is a host wrapper, else `obj` itself."""
    if obj is None or isinstance(obj, (Pokemon, Move)):
        return obj
    for attr in WRAPPER_ATTRS:
        inner = getattr(obj, attr, None)
        if inner is not None:
            return inner
    return obj


def move_from_dict(data: Union[str, Dict[str, Any], Move],
                   moves_df: Optional[pd.DataFrame] = None) -> Optional[Move]:
    """Build a Move. Bare names, or dicts without a power, are looked up in `moves_df`."""
    if isinstance(data, Move):
        return data
    if isinstance(data, str):
        data = {"name": data}
    if not isinstance(data, dict) or not data.get("name"):
        logger.warning("Skipping move entry without a name: %r", data)
        return None

    base = None
    if "power" not in data and "category" not in data:
        base = lookup_move(data["name"], moves_df)
        if base is None and moves_df is not None:
            logger.info("Move '%s' not in the move table; using defaults", data["name"])

    def pick(key, fallback):
        return data[key] if key in data else fallback

    return Move(
        name=data["name"],
        power=pick("power", base.power if base else 0),
        mtype=pick("type", base.type if base else "Normal"),
        accuracy=pick("accuracy", base.accuracy if base else 100),
        pp=pick("pp", base.pp if base else 10),
        category=pick("category", base.category if base else "physical"),
        priority=pick("priority", base.priority if base else 0),
        effect=pick("effect", base.effect_text if base else None),
        function_code=data.get("function_code"),
        target=data.get("target"),
        effect_chance=data.get("effect_chance"),
        flags=data.get("flags"),
    )


def pokemon_from_dict(data: Dict[str, Any], moves_df: Optional[pd.DataFrame] = None,
                      stats_df: Optional[pd.DataFrame] = None) -> Pokemon:
    """Build a Pokemon from a snapshot dict. Base stats may sit at top level or under 'stats'."""
    stats = dict(data.get("stats") or {})
    for key in ("hp",) + BATTLE_STATS:
        if key in data and key not in stats:
            stats[key] = data[key]
    types = data.get("types") or data.get("type")

    missing = [k for k in ("hp",) + BATTLE_STATS if k not in stats]
    if missing or not types:
        species = species_stats(data.get("species") or data["name"], stats_df)
        if species:
            for key in missing:
                stats[key] = species[key]
            types = types or species["types"]
        elif missing:
            logger.warning("No base stats for %s; defaulting %s to 50", data["name"], ", ".join(missing))
            for key in missing:
                stats[key] = 50

    moves: List[Move] = []
    for entry in data.get("moves") or []:
        mv = move_from_dict(entry, moves_df)
        if mv is not None:
            moves.append(mv)

    p = Pokemon(
        name=data["name"],
        types=types or ["Normal"],
        hp=stats["hp"],
        attack=stats["attack"],
        special_attack=stats["special_attack"],
        defense=stats["defense"],
        special_defense=stats["special_defense"],
        speed=stats["speed"],
        moves=moves,
        ability=data.get("ability"),
        item=data.get("item"),
        level=data.get("level", 50),
        current_hp=data.get("current_hp"),
        status=data.get("status"),
        turn_count=data.get("turn_count", 0),
        uid=data.get("uid"),
    )
    p.stat_stages.update(data.get("stat_stages") or {})
    p.volatiles.update(data.get("volatiles") or {})
    p.last_move = data.get("last_move")
    for field_name in MECHANIC_FIELDS:
        if field_name in data:
            setattr(p, field_name, bool(data[field_name]))
    p.tera_type = data.get("tera_type")
    return p


def state_from_dict(data: Dict[str, Any], moves_df: Optional[pd.DataFrame] = None,
                    stats_df: Optional[pd.DataFrame] = None) -> BattleState:
    ai_team = [pokemon_from_dict(p, moves_df, stats_df) for p in data.get("ai_team") or []]
    player_team = [pokemon_from_dict(p, moves_df, stats_df) for p in data.get("player_team") or []]
    state = BattleState(ai_team, player_team, side_size=data.get("side_size", 1),
                        battle_id=data.get("battle_id"), active=data.get("active"))
    state.turn_count = int(data.get("turn", data.get("turn_count", 0)))

    weather = data.get("weather")
    if isinstance(weather, str):
        weather = {"type": weather, "turns": 5}
    if weather:
        state.weather.update(weather)
    terrain = data.get("terrain")
    if isinstance(terrain, str):
        terrain = {"type": terrain, "turns": 5}
    if terrain:
        state.field["terrain"].update(terrain)
    for key, value in (data.get("field") or {}).items():
        if key == "terrain":
            continue
        state.field[key] = value

    for side in SIDES:
        overrides = (data.get("sides") or {}).get(side) or {}
        current = state.side_conditions[side]
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(current.get(key), dict):
                current[key].update(value)
            else:
                current[key] = value
        state.trainer_flags[side] = list((data.get("trainer_flags") or {}).get(side) or [])
    return state


def load_state(path: str, moves_df: Optional[pd.DataFrame] = None,
               stats_df: Optional[pd.DataFrame] = None) -> BattleState:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    logger.debug("Loaded battle snapshot %s", path)
    return state_from_dict(data, moves_df, stats_df)
