"""
type_chart.py

- Full 18-type chart (attacking -> defending multipliers)
- Effectiveness: bounded-depth calculator with an injected fallback multiplier,
  plus the super / not-very / ineffective classifiers used by every scorer
"""
import logging
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Values follow standard Pokemon multipliers: 2.0 super, 0.5 not very, 0.0 immune.
TYPE_EFFECTIVENESS: Dict[str, Dict[str, float]] = {
    "Normal":   {"Rock": 0.5, "Ghost": 0.0, "Steel": 0.5},
    "Fire":     {"Fire": 0.5, "Water": 0.5, "Grass": 2.0, "Ice": 2.0, "Bug": 2.0, "Rock": 0.5, "Dragon": 0.5, "Steel": 2.0},
    "Water":    {"Fire": 2.0, "Water": 0.5, "Grass": 0.5, "Ground": 2.0, "Rock": 2.0, "Dragon": 0.5},
    "Electric": {"Water": 2.0, "Electric": 0.5, "Grass": 0.5, "Ground": 0.0, "Flying": 2.0, "Dragon": 0.5},
    "Grass":    {"Fire": 0.5, "Water": 2.0, "Grass": 0.5, "Poison": 0.5, "Ground": 2.0, "Flying": 0.5, "Bug": 0.5, "Rock": 2.0, "Dragon": 0.5, "Steel": 0.5},
    "Ice":      {"Fire": 0.5, "Water": 0.5, "Grass": 2.0, "Ice": 0.5, "Ground": 2.0, "Flying": 2.0, "Dragon": 2.0, "Steel": 0.5},
    "Fighting": {"Normal": 2.0, "Ice": 2.0, "Rock": 2.0, "Dark": 2.0, "Steel": 2.0, "Poison": 0.5, "Flying": 0.5, "Psychic": 0.5, "Bug": 0.5, "Ghost": 0.0, "Fairy": 0.5},
    "Poison":   {"Grass": 2.0, "Poison": 0.5, "Ground": 0.5, "Rock": 0.5, "Ghost": 0.5, "Steel": 0.0, "Fairy": 2.0},
    "Ground":   {"Fire": 2.0, "Electric": 2.0, "Grass": 0.5, "Poison": 2.0, "Flying": 0.0, "Bug": 0.5, "Rock": 2.0, "Steel": 2.0},
    "Flying":   {"Electric": 0.5, "Grass": 2.0, "Fighting": 2.0, "Bug": 2.0, "Rock": 0.5, "Steel": 0.5},
    "Psychic":  {"Fighting": 2.0, "Poison": 2.0, "Psychic": 0.5, "Dark": 0.0, "Steel": 0.5},
    "Bug":      {"Fire": 0.5, "Grass": 2.0, "Fighting": 0.5, "Poison": 0.5, "Flying": 0.5, "Psychic": 2.0, "Ghost": 0.5, "Dark": 2.0, "Steel": 0.5, "Fairy": 0.5},
    "Rock":     {"Fire": 2.0, "Ice": 2.0, "Fighting": 0.5, "Ground": 0.5, "Flying": 2.0, "Bug": 2.0, "Steel": 0.5},
    "Ghost":    {"Normal": 0.0, "Psychic": 2.0, "Ghost": 2.0, "Dark": 0.5},
    "Dragon":   {"Dragon": 2.0, "Steel": 0.5, "Fairy": 0.0},
    "Dark":     {"Fighting": 0.5, "Psychic": 2.0, "Ghost": 2.0, "Dark": 0.5, "Fairy": 0.5},
    "Steel":    {"Fire": 0.5, "Water": 0.5, "Electric": 0.5, "Ice": 2.0, "Rock": 2.0, "Steel": 0.5, "Fairy": 2.0},
    "Fairy":    {"Fire": 0.5, "Fighting": 2.0, "Poison": 0.5, "Dragon": 2.0, "Dark": 2.0, "Steel": 0.5},
}

NORMAL_EFFECTIVE = 1.0
DEFAULT_MAX_DEPTH = 10


def _norm_type(t: Optional[str]) -> str:
    return (t or "").strip().title()


Resolver = Callable[[str, List[str]], float]


class Effectiveness:
    """
    Type effectiveness lookup guarded against runaway recursion.

    A host engine may plug in its own `resolver(attack_type, defend_types)`; such
    resolvers are known to call back into the calculator. Once the nesting depth
    reaches `max_depth`, or the resolver raises, the neutral `fallback` is
    returned instead of propagating the failure.
    """

    def __init__(self, chart: Optional[Dict[str, Dict[str, float]]] = None,
                 max_depth: int = DEFAULT_MAX_DEPTH, fallback: float = NORMAL_EFFECTIVE,
                 resolver: Optional[Resolver] = None):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.chart = chart if chart is not None else TYPE_EFFECTIVENESS
        self.max_depth = max_depth
        self.fallback = float(fallback)
        self.resolver = resolver or self._table_lookup
        self._depth = 0

    def _table_lookup(self, attack_type: str, defend_types: List[str]) -> float:
        mult = 1.0
        row = self.chart.get(_norm_type(attack_type), {})
        for dt in defend_types:
            mult *= row.get(_norm_type(dt), 1.0)
        return mult

    def calculate(self, attack_type: Optional[str], *defend_types: Optional[str]) -> float:
        if not attack_type:
            return self.fallback
        types = [t for t in defend_types if t]
        if not types:
            return NORMAL_EFFECTIVE
        if self._depth >= self.max_depth:
            logger.warning("Effectiveness depth limit %d reached for %s vs %s; using %.2f",
                           self.max_depth, attack_type, "/".join(types), self.fallback)
            return self.fallback
        self._depth += 1
        try:
            return float(self.resolver(attack_type, types))
        except RecursionError:
            logger.warning("Effectiveness recursion for %s vs %s; using %.2f",
                           attack_type, "/".join(types), self.fallback)
            return self.fallback
        except Exception as exc:
            logger.warning("Effectiveness lookup failed for %s vs %s (%s); using %.2f",
                           attack_type, "/".join(types), exc, self.fallback)
            return self.fallback
        finally:
            self._depth -= 1

    @staticmethod
    def super_effective(value: float) -> bool:
        return value > NORMAL_EFFECTIVE

    @staticmethod
    def not_very_effective(value: float) -> bool:
        return 0.0 < value < NORMAL_EFFECTIVE

    @staticmethod
    def ineffective(value: float) -> bool:
        return value == 0.0

    @staticmethod
    def normal(value: float) -> bool:
        return value == NORMAL_EFFECTIVE


DEFAULT_EFFECTIVENESS = Effectiveness()
