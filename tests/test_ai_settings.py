"""Tests for the AI settings tables and AIConfig."""

import json

import pytest

from ai_settings import (
    AIConfig,
    feature_enabled,
    flag_enabled,
    get_ai_tier,
    mechanic_enabled,
    qualifies_for_advanced_ai,
    switch_threshold,
)


class TestTiers:
    """Skill level to tier mapping."""

    def test_default_breakpoints(self):
        """60 and below is beginner, 85 and below is mid, the rest pro."""
        assert get_ai_tier(40) == "beginner"
        assert get_ai_tier(60) == "beginner"
        assert get_ai_tier(61) == "mid"
        assert get_ai_tier(85) == "mid"
        assert get_ai_tier(100) == "pro"

    def test_thresholds_per_tier(self):
        """Switch thresholds follow the tier."""
        assert switch_threshold(50) == 65
        assert switch_threshold(70) == 55
        assert switch_threshold(100) == 45

    def test_mode_override(self):
        """The global override pins every skill level to one tier."""
        cfg = AIConfig.from_dict({"ai_mode_override": 1})
        assert get_ai_tier(100, cfg) == "beginner"
        assert switch_threshold(100, cfg) == 65


class TestFeatureGates:
    """Skill thresholds, flags and mechanic switches."""

    def test_thresholds(self):
        """Features unlock at their minimum skill."""
        assert not feature_enabled("items", 84)
        assert feature_enabled("items", 85)
        assert qualifies_for_advanced_ai(50)
        assert not qualifies_for_advanced_ai(49)

    def test_unknown_feature_is_disabled(self):
        """Unknown feature names never unlock."""
        assert not feature_enabled("time_travel", 100)

    def test_disabled_config(self):
        """A disabled config turns every feature off."""
        cfg = AIConfig.from_dict({"enabled": False})
        assert not feature_enabled("core", 100, cfg)

    def test_flags(self):
        """Bit flags are all on by default."""
        assert flag_enabled("momentum_control")
        cfg = AIConfig.from_dict({"flags": 0x01})
        assert flag_enabled("switch_prediction", cfg)
        assert not flag_enabled("momentum_control", cfg)

    def test_mechanics(self):
        """Mechanics can be switched off individually."""
        cfg = AIConfig.from_dict({"mechanics_enabled": {"dynamax": False}})
        assert not mechanic_enabled("dynamax", cfg)
        assert mechanic_enabled("terastallization", cfg)


class TestAIConfig:
    """Loading overrides."""

    def test_overrides_merge_into_defaults(self):
        """Table overrides merge; untouched entries keep their defaults."""
        cfg = AIConfig.from_dict({"switch_thresholds": {"pro": 30}, "personality": "aggressive"})
        assert cfg.switch_thresholds == {"beginner": 65, "mid": 55, "pro": 30}
        assert cfg.personality == "aggressive"
        assert switch_threshold(100, cfg) == 30

    def test_defaults_are_not_shared(self):
        """Changing one config never leaks into another."""
        cfg = AIConfig.from_dict({"personality_modifiers": {"balanced": {"status": 50}}})
        assert AIConfig().personality_modifiers["balanced"]["status"] == 5
        assert cfg.personality_modifiers["balanced"]["status"] == 50

    def test_unknown_personality(self):
        """Unknown personalities are rejected at load time."""
        with pytest.raises(ValueError):
            AIConfig.from_dict({"personality": "reckless"})

    def test_table_must_be_mapping(self):
        """Table keys must be dicts."""
        with pytest.raises(ValueError):
            AIConfig.from_dict({"skill_thresholds": 5})

    def test_bad_override(self):
        """Out-of-range mode override is rejected."""
        with pytest.raises(ValueError):
            AIConfig.from_dict({"ai_mode_override": 7})

    def test_unknown_keys_are_ignored(self):
        """Unknown keys only log a warning."""
        cfg = AIConfig.from_dict({"colour": "red"})
        assert not hasattr(cfg, "colour")

    def test_from_json(self, tmp_path):
        """Overrides load from a JSON file."""
        path = tmp_path / "ai.json"
        path.write_text(json.dumps({"skill_thresholds": {"items": 70}}))
        cfg = AIConfig.from_json(str(path))
        assert feature_enabled("items", 70, cfg)

    def test_keyword_construction(self):
        """Fields can be set directly and tables still default to fresh copies."""
        cfg = AIConfig(personality="defensive", flags=0)
        assert cfg.personality == "defensive"
        assert not flag_enabled("momentum_control", cfg)
        assert cfg.skill_thresholds == AIConfig().skill_thresholds
        assert cfg.skill_thresholds is not AIConfig().skill_thresholds
