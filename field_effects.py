"""
field_effects.py

Additive score corrections from the battlefield: weather, terrain, Trick Room,
Gravity, Magic Room / Wonder Room, and the party-wide value of setting weather.
Nothing here applies below skill 70.
"""
import logging
from typing import Dict, Optional, Tuple

from battle_state import (RAIN_WEATHER, SNOW_WEATHER, SUN_WEATHER, BattleState, effective_speed,
                          is_grounded)
from data_loader import OHKO_MOVES, WEATHER_MOVES, Move, Pokemon

logger = logging.getLogger(__name__)

FIELD_EFFECTS_MIN_SKILL = 70

WEATHER_ABILITY_SYNERGY: Dict[str, Tuple[str, ...]] = {
    "swift swim": tuple(RAIN_WEATHER),
    "chlorophyll": tuple(SUN_WEATHER),
    "sand rush": ("Sand",),
    "slush rush": tuple(SNOW_WEATHER),
}

# Weather -> party abilities that profit from it.
WEATHER_BENEFICIARIES: Dict[str, Tuple[str, ...]] = {
    "Sun": ("chlorophyll", "drought", "solar power"),
    "Rain": ("swift swim", "drizzle", "rain dish"),
    "Sand": ("sand rush", "sand stream", "sand force"),
    "Hail": ("slush rush", "snow warning", "ice body"),
    "Snow": ("slush rush", "snow warning", "ice body"),
}

SLEEP_POWDERS = ("spore", "sleep powder")
GRASSY_WEAKENED = ("earthquake", "magnitude", "bulldoze")
GRASSY_DRAIN = ("giga drain", "drain punch", "horn leech")
ITEM_DEPENDENT_MOVES = ("fling", "natural gift", "poltergeist", "knock off")


def weather_bonus(state: BattleState, move: Move, user: Pokemon, target: Optional[Pokemon]) -> int:
    weather = state.weather_type
    if not weather:
        return 0
    bonus = 0
    if weather in SUN_WEATHER:
        if move.type == "Fire":
            bonus += 30
        elif move.type == "Water":
            bonus -= 30
        if move.id == "weather ball":
            bonus += 20
        if move.id in ("growth", "solar beam"):
            bonus += 15
    elif weather in RAIN_WEATHER:
        if move.type == "Water":
            bonus += 30
        elif move.type == "Fire":
            bonus -= 30
        if move.id in ("thunder", "hurricane"):
            bonus += 25
        if move.id == "weather ball":
            bonus += 20
    elif weather == "Sand":
        if move.id == "weather ball":
            bonus += 20
        if move.id == "shore up":
            bonus += 15
        if move.is_damaging and target is not None and \
                not any(target.has_type(t) for t in ("Rock", "Steel", "Ground")):
            bonus += 10
    elif weather in SNOW_WEATHER:
        if move.id == "blizzard":
            bonus += 30
        if move.id == "weather ball":
            bonus += 20
        if move.id == "aurora veil":
            bonus += 25
        if move.is_damaging and user.has_type("Ice"):
            bonus += 5

    for ability, weathers in WEATHER_ABILITY_SYNERGY.items():
        if user.has_ability(ability) and weather in weathers:
            bonus += 20
    return bonus


def terrain_bonus(state: BattleState, move: Move, user: Pokemon, target: Optional[Pokemon]) -> int:
    terrain = state.terrain_type
    if not terrain:
        return 0
    bonus = 0
    target_grounded = target is not None and is_grounded(target, state)
    if terrain == "Electric":
        if move.type == "Electric" and is_grounded(user, state):
            bonus += 25
        if move.id in SLEEP_POWDERS and target_grounded:
            bonus -= 40
        if user.has_ability("surge surfer"):
            bonus += 20
    elif terrain == "Grassy":
        if move.type == "Grass" and is_grounded(user, state):
            bonus += 25
        if move.id in GRASSY_WEAKENED:
            bonus -= 20
        if move.id in GRASSY_DRAIN:
            bonus += 15
    elif terrain == "Psychic":
        if move.type == "Psychic" and is_grounded(user, state):
            bonus += 25
        if move.priority > 0 and target_grounded:
            bonus -= 40
    elif terrain == "Misty":
        if move.type == "Dragon" and target_grounded:
            bonus -= 30
        if move.inflicts_status and target_grounded:
            bonus -= 40
    return bonus


def trick_room_bonus(state: BattleState, move: Move, user: Pokemon) -> int:
    if not state.trick_room:
        return 0
    bonus = 0
    speed = effective_speed(user, state)
    if speed < 50:
        bonus += 20
    elif speed > 120:
        bonus -= 20
    if move.priority > 0:
        bonus += 15
    return bonus


def gravity_bonus(state: BattleState, move: Move, target: Optional[Pokemon]) -> int:
    if not state.room_active("gravity"):
        return 0
    bonus = 0
    if move.id in OHKO_MOVES:
        bonus += 40
    if move.type == "Ground" and target is not None and \
            (target.has_type("Flying") or target.has_ability("levitate")):
        bonus += 30
    return bonus


def room_bonus(state: BattleState, move: Move, target: Optional[Pokemon]) -> int:
    bonus = 0
    if state.room_active("magic_room") and move.id in ITEM_DEPENDENT_MOVES:
        bonus -= 20
    if state.room_active("wonder_room") and target is not None:
        # Defense and Special Defense trade places.
        if move.is_physical and target.special_defense < target.defense:
            bonus += 15
        elif move.is_special and target.defense < target.special_defense:
            bonus += 15
    return bonus


def weather_setting_bonus(state: BattleState, move: Move, user: Pokemon, skill: int = 100) -> int:
    """+20 per living party member whose ability profits from the weather this move sets."""
    if skill < FIELD_EFFECTS_MIN_SKILL:
        return 0
    weather = WEATHER_MOVES.get(move.id)
    if not weather:
        return 0
    abilities = WEATHER_BENEFICIARIES.get(weather, ())
    party = state.party(state.side_of(user))
    return 20 * sum(1 for p in party if not p.is_fainted() and p.has_ability(*abilities))


def field_effects_score(state: Optional[BattleState], move: Optional[Move], user: Optional[Pokemon],
                        target: Optional[Pokemon], skill: int = 100) -> int:
    if state is None or move is None or user is None or skill < FIELD_EFFECTS_MIN_SKILL:
        return 0
    bonus = weather_bonus(state, move, user, target)
    bonus += terrain_bonus(state, move, user, target)
    bonus += trick_room_bonus(state, move, user)
    bonus += gravity_bonus(state, move, target)
    bonus += room_bonus(state, move, target)
    return bonus
