"""
Entry point.

Loads a JSON battle snapshot, asks the decision core what each active combatant
on the chosen side should do this turn, and prints the decision with its rationale.

    python main.py --state snapshot.json --skill 90 --verbose
"""
import argparse
import logging
import sys

import pandas as pd

from adapters import load_state
from ai_settings import DEFAULT_SKILL, AIConfig
from battle_ai import BattleAI
from battle_state import SIDES, BattleState
from data_loader import load_local_data, normalize_moves_frame

logger = logging.getLogger(__name__)


def print_team(team, title="Team"):
    print(f"=== {title} ===")
    for p in team:
        print(f"- {p.name} ({'/'.join(p.type)}) HP {p.hp}/{p.max_hp} | Item: {p.item} | Ability: {p.ability}")
        for mv in p.moves:
            print(f"   - {mv.name} [{mv.type}] pow={mv.power} acc={mv.accuracy} pp={mv.pp}")


def print_status(state: BattleState):
    wt = state.weather.get("type") or "None"
    turns = state.weather.get("turns", 0)
    terrain = state.terrain_type or "None"
    print(f"\n=== Battle Status (turn {state.turn_count}) ===")
    for side, label in (("ai", "AI:    "), ("player", "Player:")):
        for p in state.active_on(side):
            print(f"{label} {p.name} HP {p.hp}/{p.max_hp} | Types: {'/'.join(p.type)} | Item: {p.item}")
    print(f"Weather: {wt} (turns: {turns}) | Terrain: {terrain}\n")


def describe_action(action) -> str:
    if action["type"] == "switch":
        return f"switch to {action['pokemon'].name} (slot {action['index']}, {action['reason']})"
    if action["type"] == "attack":
        text = f"{action['move'].name} -> {action['target'].name} (score {action['score']})"
        if action.get("special"):
            text += f" with {action['special']}"
        return text
    return "no action"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Battle decision core: pick this turn's action from a snapshot")
    parser.add_argument("--state", required=True, help="Path to a JSON battle snapshot")
    parser.add_argument("--skill", type=int, default=DEFAULT_SKILL, help="Trainer skill level (0-100)")
    parser.add_argument("--config", default=None, help="JSON file with AI setting overrides")
    parser.add_argument("--moves-csv", default=None, help="Move table used to enrich moves given by name")
    parser.add_argument("--side", choices=SIDES, default="ai", help="Side whose actions are chosen")
    parser.add_argument("--verbose", action="store_true", help="Log score breakdowns at DEBUG")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = AIConfig.from_json(args.config) if args.config else AIConfig()
    except (OSError, ValueError) as e:
        print(f"Invalid AI config: {e}", file=sys.stderr)
        return 2

    if args.moves_csv:
        moves_df = normalize_moves_frame(pd.read_csv(args.moves_csv))
        stats_df = None
    else:
        stats_df, moves_df = load_local_data()

    try:
        state = load_state(args.state, moves_df, stats_df)
    except (OSError, ValueError, KeyError) as e:
        print(f"Could not load battle snapshot: {e}", file=sys.stderr)
        return 2

    print_team(state.ai_team, "AI Team")
    print()
    print_team(state.player_team, "Player Team")
    print_status(state)

    ai = BattleAI(config)
    ai.start_battle(state.battle_id)
    for user in state.active_on(args.side):
        action = ai.choose_ai_action(state, args.skill, user)
        print(f"{user.name} chose: {describe_action(action)}")
        for line in action.get("trace", []):
            print(f"   {line}")
    ai.end_battle(state.battle_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
