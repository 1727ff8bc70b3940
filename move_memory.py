"""
move_memory.py

Per-battle record of every move the AI has seen an opponent use.

- MemoryRecord: observed moves in order, use counts, last move, and the derived
  priority / healing / setup / status lists
- MoveMemory: explicit map battle_id -> combatant key -> MemoryRecord with a
  cleanup call at battle end; nothing survives into the next battle
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from damage_calc import rough_damage
from data_loader import Move, Pokemon, normalize_id
from type_chart import Effectiveness

logger = logging.getLogger(__name__)


@dataclass
class MemoryRecord:
    """Everything remembered about one combatant within one battle."""
    moves: List[str] = field(default_factory=list)
    move_counts: Counter = field(default_factory=Counter)
    last_move: Optional[str] = None
    priority_moves: List[str] = field(default_factory=list)
    healing_moves: List[str] = field(default_factory=list)
    setup_moves: List[str] = field(default_factory=list)
    status_moves: List[str] = field(default_factory=list)
    max_power: int = 0
    move_data: Dict[str, Move] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.moves

    def known_moves(self) -> List[Move]:
        return [self.move_data[m] for m in self.moves if m in self.move_data]

    def _classify(self, move: Move) -> None:
        if move.priority > 0:
            self.priority_moves.append(move.id)
        if move.is_healing:
            self.healing_moves.append(move.id)
        if move.is_setup:
            self.setup_moves.append(move.id)
        if move.is_status:
            self.status_moves.append(move.id)
        self.max_power = max(self.max_power, move.power)


def combatant_key(combatant: Pokemon) -> str:
    return f"{combatant.side}:{combatant.uid}"


class MoveMemory:
    """Move observations keyed by battle id, then by combatant."""

    def __init__(self):
        self._battles: Dict[str, Dict[str, MemoryRecord]] = {}

    def battle_ids(self) -> List[str]:
        return list(self._battles)

    def record(self, battle_id: Optional[str], combatant: Optional[Pokemon], move: Optional[Move]) -> None:
        """Remember that `combatant` used `move`. Missing arguments make this a no-op."""
        if not battle_id or combatant is None or move is None:
            return
        records = self._battles.setdefault(battle_id, {})
        rec = records.setdefault(combatant_key(combatant), MemoryRecord())
        if move.id not in rec.move_counts:
            rec.moves.append(move.id)
            rec.move_data[move.id] = move
            rec._classify(move)
            logger.debug("[%s] %s revealed %s", battle_id, combatant.name, move.name)
        rec.move_counts[move.id] += 1
        rec.last_move = move.id

    def query(self, battle_id: Optional[str], combatant: Optional[Pokemon]) -> MemoryRecord:
        """Stored record, or a fresh empty one (not stored) when nothing is known."""
        if not battle_id or combatant is None:
            return MemoryRecord()
        return self._battles.get(battle_id, {}).get(combatant_key(combatant)) or MemoryRecord()

    def cleanup(self, battle_id: str) -> None:
        dropped = self._battles.pop(battle_id, None)
        if dropped is not None:
            logger.debug("[%s] cleared move memory for %d combatants", battle_id, len(dropped))

    # --- Derived queries --------------------------------------------------------
    def knows_move(self, battle_id, combatant, move_name: str) -> bool:
        return normalize_id(move_name) in self.query(battle_id, combatant).move_counts

    def has_priority_move(self, battle_id, combatant) -> bool:
        return bool(self.query(battle_id, combatant).priority_moves)

    def has_healing_move(self, battle_id, combatant) -> bool:
        return bool(self.query(battle_id, combatant).healing_moves)

    def has_setup_move(self, battle_id, combatant) -> bool:
        return bool(self.query(battle_id, combatant).setup_moves)

    def strongest_known_move(self, battle_id, combatant) -> Optional[Move]:
        best: Optional[Move] = None
        for mv in self.query(battle_id, combatant).known_moves():
            if mv.is_damaging and (best is None or mv.power > best.power):
                best = mv
        return best

    def max_known_damage(self, battle_id, attacker: Optional[Pokemon], defender: Optional[Pokemon],
                         effectiveness: Optional[Effectiveness] = None) -> int:
        """Highest rough damage any remembered move of `attacker` deals to `defender`."""
        if attacker is None or defender is None:
            return 0
        damages = [rough_damage(mv, attacker, defender, effectiveness=effectiveness)
                   for mv in self.query(battle_id, attacker).known_moves()]
        return max(damages, default=0)

    def last_move(self, battle_id, combatant) -> Optional[str]:
        return self.query(battle_id, combatant).last_move

    def move_frequency(self, battle_id, combatant, move_name: str) -> int:
        return self.query(battle_id, combatant).move_counts.get(normalize_id(move_name), 0)
