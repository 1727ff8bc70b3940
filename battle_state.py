"""
battle_state.py

- BattleState: read-only battle snapshot the decision core consumes
    - both parties, the active slots per side, format side size
    - weather / terrain / room counters and per-side hazards, screens, tailwind
    - turn counter, trainer flags and the stable battle id
- Speed and grounding helpers shared by every scorer
"""
import itertools
from typing import Any, Dict, List, Optional, Sequence

from data_loader import Pokemon

SIDES = ("ai", "player")
SUN_WEATHER = {"Sun", "Harsh Sun"}
RAIN_WEATHER = {"Rain", "Heavy Rain"}
SNOW_WEATHER = {"Hail", "Snow"}

_BATTLE_COUNTER = itertools.count(1)


def opponent_side(side: Optional[str]) -> Optional[str]:
    """Translate a side label to its opposing side."""
    if side == "ai":
        return "player"
    if side == "player":
        return "ai"
    return None


class BattleState:
    """
    Snapshot of one battle as seen by the AI. Combatants are referenced, never
    cloned or mutated: the host simulation owns them.
    """

    def __init__(self, ai_team: List[Pokemon], player_team: List[Pokemon], side_size: int = 1,
                 battle_id: Optional[str] = None, active: Optional[Dict[str, Sequence[int]]] = None):
        self.ai_team = list(ai_team)
        self.player_team = list(player_team)
        for p in self.ai_team:
            p.side = "ai"
        for p in self.player_team:
            p.side = "player"
        self.side_size = max(1, int(side_size))
        self.battle_id = battle_id or f"battle-{next(_BATTLE_COUNTER)}"
        self.weather = {"type": None, "turns": 0}  # {"type": "Rain"/"Sun"/"Sand"/"Snow"/"Hail", "turns": int}
        self.field = {
            "terrain": {"type": None, "turns": 0},
            "trick_room": 0,
            "gravity": 0,
            "magic_room": 0,
            "wonder_room": 0,
        }
        self.side_conditions = {
            "ai": self._default_side_state(),
            "player": self._default_side_state(),
        }
        self.trainer_flags: Dict[str, List[str]] = {"ai": [], "player": []}
        self.turn_count = 0
        self._active: Dict[str, List[int]] = {}
        for side in SIDES:
            if active and side in active:
                self._active[side] = [int(i) for i in active[side]][:self.side_size]
            else:
                self._active[side] = self._default_active(side)

    @staticmethod
    def _default_side_state() -> Dict[str, Any]:
        """Return the baseline side-condition structure for hazards, screens, and buffs."""
        return {
            "hazards": {"stealth_rock": False, "spikes": 0, "toxic_spikes": 0, "sticky_web": False,
                        "steelsurge": False},
            "screens": {"reflect": 0, "light_screen": 0, "aurora_veil": 0},
            "safeguard": 0,
            "mist": 0,
            "tailwind": 0,
            "lucky_chant": 0,
        }

    def _default_active(self, side: str) -> List[int]:
        """First `side_size` living party members occupy the field."""
        living = [i for i, p in enumerate(self.party(side)) if not p.is_fainted()]
        return living[:self.side_size]

    # --- Side / party accessors ---------------------------------------------------
    def party(self, side: Optional[str]) -> List[Pokemon]:
        if side == "ai":
            return self.ai_team
        if side == "player":
            return self.player_team
        return []

    def side_of(self, pokemon: Optional[Pokemon]) -> Optional[str]:
        """Return 'ai' or 'player' to indicate which roster a Pokemon belongs to."""
        if pokemon is None:
            return None
        if any(p is pokemon for p in self.ai_team):
            return "ai"
        if any(p is pokemon for p in self.player_team):
            return "player"
        return getattr(pokemon, "side", None)

    def party_index(self, pokemon: Pokemon) -> Optional[int]:
        for i, p in enumerate(self.party(self.side_of(pokemon))):
            if p is pokemon:
                return i
        return None

    def position_of(self, pokemon: Pokemon) -> Optional[int]:
        """Field slot (0..side_size-1) of an active combatant."""
        side = self.side_of(pokemon)
        idx = self.party_index(pokemon)
        slots = self._active.get(side, [])
        return slots.index(idx) if idx in slots else None

    def active_on(self, side: Optional[str]) -> List[Pokemon]:
        """Living combatants currently on the field for a side."""
        party = self.party(side)
        return [party[i] for i in self._active.get(side, [])
                if 0 <= i < len(party) and not party[i].is_fainted()]

    def opponents_of(self, pokemon: Pokemon) -> List[Pokemon]:
        return self.active_on(opponent_side(self.side_of(pokemon)))

    def allies_of(self, pokemon: Pokemon) -> List[Pokemon]:
        return [p for p in self.active_on(self.side_of(pokemon)) if p is not pokemon]

    def partner_of(self, pokemon: Pokemon) -> Optional[Pokemon]:
        allies = self.allies_of(pokemon)
        return allies[0] if allies else None

    def bench(self, side: str) -> List[int]:
        """Party indices of living combatants that are not on the field."""
        active = self._active.get(side, [])
        return [i for i, p in enumerate(self.party(side)) if not p.is_fainted() and i not in active]

    def alive_count(self, side: Optional[str]) -> int:
        return sum(1 for p in self.party(side) if not p.is_fainted())

    def active_ai(self) -> Optional[Pokemon]:
        """Return the first living AI Pokemon on the field."""
        active = self.active_on("ai")
        return active[0] if active else None

    def active_player(self) -> Optional[Pokemon]:
        """Return the first living player Pokemon on the field."""
        active = self.active_on("player")
        return active[0] if active else None

    def is_terminal(self) -> bool:
        """A battle ends when one side has no healthy Pokemon remaining."""
        return all(p.is_fainted() for p in self.ai_team) or all(p.is_fainted() for p in self.player_team)

    def has_trainer_flag(self, side: Optional[str], flag: str) -> bool:
        return flag in self.trainer_flags.get(side, [])

    # --- Field accessors ---------------------------------------------------------
    @property
    def weather_type(self) -> Optional[str]:
        return self.weather.get("type")

    @property
    def terrain_type(self) -> Optional[str]:
        return (self.field.get("terrain") or {}).get("type")

    @property
    def trick_room(self) -> bool:
        return self.field.get("trick_room", 0) > 0

    def room_active(self, name: str) -> bool:
        return self.field.get(name, 0) > 0

    def side_state(self, side: Optional[str]) -> Dict[str, Any]:
        return self.side_conditions.get(side) or self._default_side_state()


def stage_mult(stage: int) -> float:
    """Convert a stat stage (-6..+6) into the standard battle multiplier."""
    return (2 + stage) / 2.0 if stage >= 0 else 2.0 / (2 - stage)


def is_grounded(pokemon: Optional[Pokemon], state: Optional[BattleState] = None) -> bool:
    """Return True if the Pokemon is affected by ground hazards/terrain."""
    if not pokemon:
        return False
    if state is not None and state.field.get("gravity", 0) > 0:
        return True
    if "Flying" in pokemon.type:
        return False
    if pokemon.has_ability("levitate"):
        return False
    if pokemon.has_item("air balloon"):
        return False
    return True


def effective_speed(p: Pokemon, state: Optional[BattleState] = None) -> float:
    """Calculate speed after factoring in stages, status ailments, items, weather, and Tailwind."""
    base = float(p.speed)
    base *= stage_mult(p.stat_stages.get("speed", 0))
    if p.status == "paralysis":
        base *= 0.5
    weather_type = state.weather_type if state else None
    if p.has_ability("chlorophyll") and weather_type in SUN_WEATHER:
        base *= 2.0
    elif p.has_ability("swift swim") and weather_type in RAIN_WEATHER:
        base *= 2.0
    elif p.has_ability("sand rush") and weather_type == "Sand":
        base *= 2.0
    elif p.has_ability("slush rush") and weather_type in SNOW_WEATHER:
        base *= 2.0
    elif p.has_ability("quick feet") and p.status:
        base *= 1.5
    if p.has_item("choice scarf"):
        base *= 1.5
    elif p.has_item("iron ball", "macho brace", "power anklet", "power band", "power belt",
                    "power bracer", "power lens", "power weight"):
        base *= 0.5
    if state is not None and state.side_state(state.side_of(p)).get("tailwind", 0) > 0:
        base *= 2.0
    return max(base, 1.0)


def is_faster(a: Pokemon, b: Pokemon, state: Optional[BattleState] = None) -> bool:
    """Strictly faster by effective speed (raw speed ordering, Trick Room not applied)."""
    return effective_speed(a, state) > effective_speed(b, state)
