"""
ai_settings.py

- Skill-gated feature thresholds and switch aggressiveness tables
- Skill tier breakpoints (beginner / mid / pro) with an optional global override
- Advanced behaviour bit flags and personality score modifiers
- AIConfig: per-instance copy of the tables, loadable from a dict or JSON file
"""
import copy
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Minimum skill level required for each feature.
SKILL_THRESHOLDS: Dict[str, int] = {
    "core": 50,
    "switch_intelligence": 50,
    "setup": 55,
    "personalities": 65,
    "field_effects": 70,
    "items": 85,
    "prediction": 85,
    "mega_evolution": 90,
    "z_moves": 90,
    "dynamax": 90,
    "terastallization": 90,
}

# Switch urgency needed before the AI withdraws its active combatant.
SWITCH_THRESHOLDS: Dict[str, int] = {
    "beginner": 65,
    "mid": 55,
    "pro": 45,
}

# Highest skill level that still maps to the tier.
TIER_BREAKPOINTS: Dict[str, int] = {
    "beginner": 60,
    "mid": 85,
}

AI_MODE_TIERS: Dict[int, str] = {
    1: "beginner",
    2: "mid",
    3: "pro",
}

ADVANCED_FLAGS: Dict[str, int] = {
    "switch_prediction": 0x01,
    "setup_chains": 0x02,
    "hazard_calc": 0x04,
    "weather_abuse": 0x08,
    "terrain_abuse": 0x10,
    "ko_prediction": 0x20,
    "revenge_kill": 0x40,
    "momentum_control": 0x80,
}
DEFAULT_FLAGS = 0xFF

PERSONALITY_MODIFIERS: Dict[str, Dict[str, int]] = {
    "aggressive": {
        "setup": 20,
        "powerful": 30,
        "risky": 15,
        "recoil": 10,
        "defensive": -20,
    },
    "defensive": {
        "hazards": 30,
        "screens": 25,
        "recovery": 30,
        "protect": 20,
        "risky": -25,
    },
    "balanced": {
        "super_effective": 10,
        "status": 5,
    },
    "hyper_offensive": {
        "setup": 40,
        "priority": 25,
        "multi_target": 20,
        "recovery": -30,
    },
}

MECHANICS_ENABLED: Dict[str, bool] = {
    "mega_evolution": True,
    "z_moves": True,
    "dynamax": True,
    "terastallization": True,
}

RESPECT_RESERVE_LAST_POKEMON = True
DYNAMAX_MIN_SKILL = 95
DEFAULT_SKILL = 100


@dataclass
class AIConfig:
    """Mutable copy of the settings tables for one BattleAI instance."""

    _TABLE_KEYS = ("skill_thresholds", "switch_thresholds", "tier_breakpoints",
                   "personality_modifiers", "mechanics_enabled")
    _SCALAR_KEYS = ("enabled", "debug", "ai_mode_override", "flags",
                    "respect_reserve_last", "personality")

    enabled: bool = True
    debug: bool = False
    ai_mode_override: int = 0
    flags: int = DEFAULT_FLAGS
    respect_reserve_last: bool = RESPECT_RESERVE_LAST_POKEMON
    personality: str = "balanced"
    skill_thresholds: Dict[str, int] = field(default_factory=lambda: dict(SKILL_THRESHOLDS))
    switch_thresholds: Dict[str, int] = field(default_factory=lambda: dict(SWITCH_THRESHOLDS))
    tier_breakpoints: Dict[str, int] = field(default_factory=lambda: dict(TIER_BREAKPOINTS))
    personality_modifiers: Dict[str, Dict[str, int]] = field(
        default_factory=lambda: copy.deepcopy(PERSONALITY_MODIFIERS))
    mechanics_enabled: Dict[str, bool] = field(default_factory=lambda: dict(MECHANICS_ENABLED))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AIConfig":
        """
        Build a config from overrides. Table keys are merged into the defaults,
        scalar keys replace them. Unknown keys are ignored with a warning.
        """
        cfg = cls()
        for key, value in (data or {}).items():
            if key in cls._TABLE_KEYS:
                if not isinstance(value, dict):
                    raise ValueError(f"'{key}' must be a mapping, got {type(value).__name__}")
                getattr(cfg, key).update(value)
            elif key in cls._SCALAR_KEYS:
                setattr(cfg, key, value)
            else:
                logger.warning("Ignoring unknown AI setting '%s'", key)
        cfg.validate()
        return cfg

    @classmethod
    def from_json(cls, path: str) -> "AIConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def validate(self) -> None:
        if self.ai_mode_override not in (0, 1, 2, 3):
            raise ValueError(f"ai_mode_override must be 0-3, got {self.ai_mode_override!r}")
        if not isinstance(self.flags, int) or self.flags < 0:
            raise ValueError(f"flags must be a non-negative int, got {self.flags!r}")
        if self.personality not in self.personality_modifiers:
            raise ValueError(f"Unknown personality '{self.personality}'")
        for tier in ("beginner", "mid", "pro"):
            if tier not in self.switch_thresholds:
                raise ValueError(f"switch_thresholds is missing tier '{tier}'")


DEFAULT_CONFIG = AIConfig()


def get_ai_tier(skill: int, config: Optional[AIConfig] = None) -> str:
    """Map a numeric skill level onto beginner/mid/pro, honouring the global override."""
    cfg = config or DEFAULT_CONFIG
    if cfg.ai_mode_override in AI_MODE_TIERS:
        return AI_MODE_TIERS[cfg.ai_mode_override]
    if skill <= cfg.tier_breakpoints.get("beginner", 60):
        return "beginner"
    if skill <= cfg.tier_breakpoints.get("mid", 85):
        return "mid"
    return "pro"


def switch_threshold(skill: int, config: Optional[AIConfig] = None) -> int:
    cfg = config or DEFAULT_CONFIG
    return cfg.switch_thresholds.get(get_ai_tier(skill, cfg), 50)


def feature_enabled(feature: str, skill: int, config: Optional[AIConfig] = None) -> bool:
    """Unknown features are treated as disabled."""
    cfg = config or DEFAULT_CONFIG
    if not cfg.enabled:
        return False
    threshold = cfg.skill_thresholds.get(feature)
    if threshold is None:
        return False
    return skill >= threshold


def qualifies_for_advanced_ai(skill: int, config: Optional[AIConfig] = None) -> bool:
    return feature_enabled("core", skill, config)


def flag_enabled(name: str, config: Optional[AIConfig] = None) -> bool:
    cfg = config or DEFAULT_CONFIG
    bit = ADVANCED_FLAGS.get(name, 0)
    return bool(cfg.flags & bit)


def mechanic_enabled(feature: str, config: Optional[AIConfig] = None) -> bool:
    cfg = config or DEFAULT_CONFIG
    return bool(cfg.mechanics_enabled.get(feature, False))
