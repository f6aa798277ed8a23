"""
Utility functions for the game engine.
"""

import random

from battleboard.engine import DICE_SIDES, STARTING_HIT_POINTS
from battleboard.engine.definitions import BOARD_SEGMENTS, is_endpoint
from battleboard.engine.state import GameState, Player, ActiveBattle
from battleboard.engine.actions import start_game
from battleboard.engine.reducer import apply_action
from battleboard.engine.events import (
    GameEvent,
    GAME_STARTED,
    GAME_RESET,
    PHASE_CHANGED,
    TURN_STARTED,
    MOVEMENT_ROLLED,
    PLAYER_MOVED,
    MOVE_REJECTED,
    ENDPOINT_REACHED,
    BATTLE_STARTED,
    BATTLE_DICE_ROLLED,
    BATTLE_ROUND_RESOLVED,
    BATTLE_ENDED,
    BATTLE_CLOSED,
    PLAYER_ELIMINATED,
    VICTORY,
)


def build_rng(seed: int | None = None) -> random.Random:
    """Return a random generator; pass a seed for reproducible games."""
    return random.Random(seed)


def roll_die(rng: random.Random) -> int:
    return rng.randint(1, DICE_SIDES)


def roll_battle_dice(rng: random.Random) -> list[int]:
    """Two independent dice for one side of a battle round."""
    return [roll_die(rng), roll_die(rng)]


def initialize_game_state(players: list[Player]) -> GameState:
    """
    Create a game in the playing phase with the given players seated.
    Goes through the reducer so the result is exactly what start_game produces.
    """
    state, _ = apply_action(GameState(), start_game(players))
    return state


def print_game_state(state: GameState, verbose: bool = False):
    """
    Pretty-print the current game state.

    Args:
        state: Current game state
        verbose: If True, also draw the track segment by segment
    """
    current = state.current_player
    current_name = current.name if current else "-"
    print(f"\n{'='*60}")
    print(f"Turn {state.turn_number} | Phase: {state.phase} | Current: {current_name}")
    print(f"{'='*60}")

    for player in state.players:
        marker = ">" if current is not None and player.id == current.id else " "
        status = "active" if player.is_active else "eliminated"
        hearts = "#" * player.hit_points + "." * (STARTING_HIT_POINTS - player.hit_points)
        print(f"{marker} {player.name:<12} [{player.color:<6}] pos={player.position:>2} "
              f"hp={hearts} ({status})")

    if verbose:
        print()
        for segment in BOARD_SEGMENTS:
            cells = []
            for position in segment.positions:
                here = [p.name[0] for p in state.players if p.is_active and p.position == position]
                label = f"{position}{'*' if is_endpoint(position) else ''}"
                cells.append(f"{label}:{''.join(here) or '-'}")
            print(f"  segment {segment.index + 1}: " + "  ".join(cells))

    if state.active_battle:
        print_battle_log(state.active_battle, {p.id: p.name for p in state.players})
    if state.winner:
        winner = state.get_player(state.winner)
        print(f"\nWinner: {winner.name if winner else state.winner}")
    print()


def print_battle_log(battle: ActiveBattle, names: dict[str, str]):
    """Pretty-print the rounds fought so far in a battle."""
    print(f"\n{'-'*60}")
    title = " vs ".join(names.get(pid, pid) for pid in battle.participant_ids)
    print(f"BATTLE at {battle.position}: {title} (step: {battle.phase})")
    print(f"{'-'*60}")

    for pid in battle.participant_ids:
        print(f"  {names.get(pid, pid)}: {battle.hit_points[pid]} HP")

    if not battle.battle_log:
        print("  No rounds resolved yet")
        return

    for entry in battle.battle_log:
        attacker = names.get(entry.attacker_id, entry.attacker_id)
        defender = names.get(entry.defender_id, entry.defender_id)
        print(f"  Round {entry.round_number}: {attacker} {entry.attacker_dice} vs "
              f"{defender} {entry.defender_dice} -> "
              f"damage {entry.attacker_damage}/{entry.defender_damage}")


def _dice_label(dice: list[int], doubles: bool) -> str:
    return f"{dice[0]}, {dice[1]} {'(DOUBLES!)' if doubles else '(No doubles)'}"


def format_event(event: GameEvent) -> str:
    """One human-readable log line for an event."""
    p = event.payload
    t = event.type

    if t == GAME_STARTED:
        return f"Game started with {', '.join(p['player_names'])}"
    if t == GAME_RESET:
        return "Game reset"
    if t == PHASE_CHANGED:
        return f"Phase: {p['old_phase']} -> {p['new_phase']}"
    if t == TURN_STARTED:
        return f"Turn {p['turn_number']}: {p['player_name']} to roll"
    if t == MOVEMENT_ROLLED:
        return f"{p['player_name']} rolled {p['steps']}"
    if t == PLAYER_MOVED:
        return f"{p['player_name']} moved {p['from_position']} -> {p['to_position']}"
    if t == MOVE_REJECTED:
        segment = p["segment_positions"]
        return (f"{p['player_name']} rolled {p['steps']} but cannot leave segment "
                f"{segment[0]}-{segment[-1]} without exact endpoint landing!")
    if t == ENDPOINT_REACHED:
        return f"{p['player_name']} reached endpoint {p['position']}!"
    if t == BATTLE_STARTED:
        return f"BATTLE! {' meets '.join(p['participant_names'])} at endpoint {p['position']}!"
    if t == BATTLE_DICE_ROLLED:
        return f"{p['player_name']} ({p['role']}) rolls: {_dice_label(p['dice'], p['doubles'])}"
    if t == BATTLE_ROUND_RESOLVED:
        if p["defender_damage"]:
            return (f"{p['attacker_name']} hits {p['defender_name']}! "
                    f"({p['defender_hit_points']} HP remaining)")
        if p["attacker_damage"]:
            return (f"{p['defender_name']} hits {p['attacker_name']}! "
                    f"({p['attacker_hit_points']} HP remaining)")
        return "No damage dealt this round!"
    if t == BATTLE_ENDED:
        return f"{p['winner_name']} wins the battle after {p['total_rounds']} rounds!"
    if t == BATTLE_CLOSED:
        return f"Battle closed after {p['rounds_played']} rounds, no result applied"
    if t == PLAYER_ELIMINATED:
        return f"{p['player_name']} has been eliminated from the game!"
    if t == VICTORY:
        return f"{p['winner_name']} wins the game!"
    return f"{t}: {p}"
