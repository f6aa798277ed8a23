"""
Main entry point for the Battle Board game engine.
Demonstrates core functionality with a few scripted scenarios and one
complete seeded game.
"""

import sys

from battleboard.controller import GameController
from battleboard.engine.actions import (
    roll_movement_die,
    commit_move,
    roll_battle_dice,
    resolve_battle_round,
    complete_battle,
)
from battleboard.engine.reducer import apply_action
from battleboard.engine.roster import build_roster
from battleboard.engine.state import PHASE_FINISHED
from battleboard.engine.utils import (
    initialize_game_state,
    print_game_state,
    format_event,
)


def print_events(events):
    for e in events:
        print(f"  - {format_event(e)}")


def main():
    print("Battle Board Game Engine")
    print("=" * 60)

    players = build_roster(["Aragorn", "Boromir", "Celeborn"])

    # ===== SCENARIO 1: Trapped move =====
    print("\n[SCENARIO 1: Overshooting a segment endpoint]")
    state = initialize_game_state(players)
    state.players[0].position = 3

    state, events = apply_action(state, roll_movement_die("player-0", 2))
    print_events(events)
    state, events = apply_action(state, commit_move("player-0"))
    print_events(events)
    print(f"Aragorn is still on {state.players[0].position}; "
          f"{state.current_player.name} rolls next")

    # ===== SCENARIO 2: Meeting on an endpoint =====
    print("\n[SCENARIO 2: Battle on endpoint 20]")
    state = initialize_game_state(players)
    state.players[0].position = 19
    state.players[1].position = 20

    for action in (roll_movement_die("player-0", 1), commit_move("player-0")):
        state, events = apply_action(state, action)
        print_events(events)

    # Forced dice: the attacker of each round rolls doubles, the defender does not
    while state.active_battle.winner_id is None:
        for action in (
            roll_battle_dice("attacker", [6, 6]),
            roll_battle_dice("defender", [1, 2]),
            resolve_battle_round(),
        ):
            state, events = apply_action(state, action)
            print_events(events)

    state, events = apply_action(state, complete_battle(state.active_battle.winner_id))
    print_events(events)
    print_game_state(state, verbose=True)

    # ===== SCENARIO 3: A full seeded game through the controller =====
    seed = int(sys.argv[1]) if len(sys.argv) > 1 else 7
    print(f"\n[SCENARIO 3: Full game, seed {seed}]")

    controller = GameController(seed=seed)
    controller.subscribe(lambda snapshot, events: print_events(events))
    controller.start_game(["Aragorn", "Boromir", "Celeborn", "Denethor"])

    actions_taken = 0
    while controller.state.phase != PHASE_FINISHED:
        try:
            controller.roll_dice()
        except ValueError as e:
            print(f"✗ Roll rejected: {e}")
            break
        controller.run_pending()
        actions_taken += 1

    final = controller.state
    print_game_state(final, verbose=True)

    print("\n" + "=" * 60)
    print(f"✓ Game finished after {actions_taken} rolls, "
          f"{len(controller.event_log)} events logged")
    print("=" * 60)


if __name__ == "__main__":
    main()
