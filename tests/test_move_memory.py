"""Tests for per-battle move memory."""

from move_memory import MoveMemory


class TestMoveMemory:
    """Recording, querying and cleanup."""

    def test_repeated_move_is_counted_once(self, make_pokemon, make_move):
        """Recording a move N times gives frequency N and a single entry."""
        memory = MoveMemory()
        foe = make_pokemon(name="Gengar", side="player")
        ball = make_move("Shadow Ball", 80, "Ghost", category="special")
        for _ in range(3):
            memory.record("b1", foe, ball)
        rec = memory.query("b1", foe)
        assert rec.moves == ["shadow ball"]
        assert memory.move_frequency("b1", foe, "Shadow Ball") == 3
        assert rec.last_move == "shadow ball"

    def test_classification(self, make_pokemon, make_move):
        """Priority, healing and setup moves land in their lists."""
        memory = MoveMemory()
        foe = make_pokemon(side="player")
        memory.record("b1", foe, make_move("Quick Attack", 40, priority=1))
        memory.record("b1", foe, make_move("Recover", 0, "Normal", 0, "status"))
        memory.record("b1", foe, make_move("Swords Dance", 0, "Normal", 0, "status"))
        assert memory.has_priority_move("b1", foe)
        assert memory.has_healing_move("b1", foe)
        assert memory.has_setup_move("b1", foe)
        assert memory.knows_move("b1", foe, "recover")

    def test_cleanup_empties_the_battle(self, make_pokemon, make_move):
        """cleanup then query yields an empty record."""
        memory = MoveMemory()
        foe = make_pokemon(side="player")
        memory.record("b1", foe, make_move())
        memory.cleanup("b1")
        assert memory.query("b1", foe).is_empty()
        assert memory.battle_ids() == []

    def test_battles_are_isolated(self, make_pokemon, make_move):
        """Observations never leak across battle ids."""
        memory = MoveMemory()
        foe = make_pokemon(side="player")
        memory.record("b1", foe, make_move())
        assert memory.query("b2", foe).is_empty()

    def test_missing_arguments_are_ignored(self, make_pokemon, make_move):
        """Recording without a battle, combatant or move does nothing."""
        memory = MoveMemory()
        memory.record(None, make_pokemon(), make_move())
        memory.record("b1", None, make_move())
        memory.record("b1", make_pokemon(), None)
        assert memory.battle_ids() == []

    def test_strongest_and_max_damage(self, make_pokemon, make_move):
        """Derived queries use only remembered damaging moves."""
        memory = MoveMemory()
        foe = make_pokemon(side="player")
        me = make_pokemon(side="ai")
        memory.record("b1", foe, make_move("Tackle", 40))
        memory.record("b1", foe, make_move("Body Slam", 85))
        assert memory.strongest_known_move("b1", foe).name == "Body Slam"
        assert memory.max_known_damage("b1", foe, me) > 0
        assert memory.max_known_damage("b1", me, foe) == 0
