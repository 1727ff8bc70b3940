"""Tests for weather, terrain and room corrections."""

from battle_state import BattleState
from field_effects import (
    field_effects_score,
    gravity_bonus,
    room_bonus,
    terrain_bonus,
    trick_room_bonus,
    weather_setting_bonus,
)


class TestWeather:
    """Weather bonuses and weather setting."""

    def test_rain_boosts_water(self, singles_state):
        """Rain adds 30 to Water moves."""
        singles_state.weather.update({"type": "Rain", "turns": 5})
        user, target = singles_state.active_ai(), singles_state.active_player()
        surf = user.moves[0]
        assert field_effects_score(singles_state, surf, user, target) == 30

    def test_sun_weakens_water(self, singles_state):
        """Sun takes 30 from Water moves."""
        singles_state.weather.update({"type": "Sun", "turns": 5})
        user, target = singles_state.active_ai(), singles_state.active_player()
        assert field_effects_score(singles_state, user.moves[0], user, target) == -30

    def test_gated_below_skill(self, singles_state):
        """Nothing applies below skill 70."""
        singles_state.weather.update({"type": "Rain", "turns": 5})
        user, target = singles_state.active_ai(), singles_state.active_player()
        assert field_effects_score(singles_state, user.moves[0], user, target, skill=60) == 0

    def test_weather_setting_counts_party(self, make_pokemon, make_move):
        """Each living Swift Swim teammate adds 20 to Rain Dance."""
        rain_dance = make_move("Rain Dance", 0, "Water", 0, "status")
        setter = make_pokemon(name="Setter", moves=[rain_dance])
        swimmers = [make_pokemon(name="Swimmer", ability="Swift Swim") for _ in range(2)]
        state = BattleState([setter] + swimmers, [make_pokemon()])
        assert weather_setting_bonus(state, rain_dance, setter) == 40
        swimmers[0].hp = 0
        assert weather_setting_bonus(state, rain_dance, setter) == 20
        assert weather_setting_bonus(state, rain_dance, setter, skill=60) == 0


class TestTerrainAndRooms:
    """Terrain, Trick Room and Gravity."""

    def test_misty_terrain_blunts_dragon(self, singles_state, make_pokemon, make_move):
        """Dragon moves lose 30 against grounded targets on Misty Terrain."""
        singles_state.field["terrain"].update({"type": "Misty", "turns": 5})
        user = singles_state.active_ai()
        pulse = make_move("Dragon Pulse", 85, "Dragon", category="special")
        assert terrain_bonus(singles_state, pulse, user, make_pokemon()) == -30
        assert terrain_bonus(singles_state, pulse, user, make_pokemon(types=("Flying",))) == 0

    def test_trick_room_favours_slow_users(self, singles_state, make_pokemon, make_move):
        """Slow users gain 20 under Trick Room, fast ones lose 20."""
        singles_state.field["trick_room"] = 3
        tackle = make_move()
        assert trick_room_bonus(singles_state, tackle, make_pokemon(speed=30)) == 20
        assert trick_room_bonus(singles_state, tackle, make_pokemon(speed=150)) == -20

    def test_gravity_grounds_flyers(self, singles_state, make_pokemon, make_move):
        """Ground moves can hit Flying types under Gravity."""
        singles_state.field["gravity"] = 5
        quake = make_move("Earthquake", 100, "Ground")
        assert gravity_bonus(singles_state, quake, make_pokemon(types=("Flying",))) == 30
        assert gravity_bonus(singles_state, quake, make_pokemon()) == 0

    def test_misty_terrain_blocks_status_infliction(self, singles_state, make_pokemon, make_move):
        """Only moves that inflict a status condition are blocked, and only on grounded targets."""
        singles_state.field["terrain"].update({"type": "Misty", "turns": 5})
        user = singles_state.active_ai()
        wave = make_move("Thunder Wave", 0, "Electric", 90, "status", function_code="paralyze_target")
        dance = make_move("Swords Dance", 0, "Normal", 0, "status")
        assert terrain_bonus(singles_state, wave, user, make_pokemon()) == -40
        assert terrain_bonus(singles_state, wave, user, make_pokemon(types=("Flying",))) == 0
        assert terrain_bonus(singles_state, dance, user, make_pokemon()) == 0

    def test_psychic_terrain_priority_needs_grounded_target(self, singles_state, make_pokemon, make_move):
        """Priority is only blocked against grounded targets."""
        singles_state.field["terrain"].update({"type": "Psychic", "turns": 5})
        user = singles_state.active_ai()
        quick = make_move("Quick Attack", 40, priority=1)
        assert terrain_bonus(singles_state, quick, user, make_pokemon()) == -40
        assert terrain_bonus(singles_state, quick, user, make_pokemon(types=("Flying",))) == 0

    def test_wonder_room_rewards_the_swapped_weaker_stat(self, singles_state, make_pokemon, make_move):
        """Physical moves gain when the target's Special Defense is the lower stat."""
        singles_state.field["wonder_room"] = 5
        tackle = make_move()
        frail_special = make_pokemon(defense=120, special_defense=60)
        frail_physical = make_pokemon(defense=60, special_defense=120)
        assert room_bonus(singles_state, tackle, frail_special) == 15
        assert room_bonus(singles_state, tackle, frail_physical) == 0
