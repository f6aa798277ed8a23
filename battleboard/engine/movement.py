"""
Movement along the segmented track and turn order.

A player inside a segment may only leave it by first landing exactly on the
segment's endpoint. Any roll that would carry them past the endpoint from
inside the segment is rejected and the turn passes. A player already sitting
on an endpoint moves freely.
"""

from battleboard.engine import DICE_SIDES
from battleboard.engine.definitions import FINAL_POSITION, segment_of, is_endpoint
from battleboard.engine.combat import start_battle
from battleboard.engine.errors import InvariantViolation
from battleboard.engine.state import GameState, Player, PHASE_BATTLE, PHASE_FINISHED
from battleboard.engine.events import (
    GameEvent,
    phase_changed,
    turn_started,
    player_moved,
    move_rejected,
    endpoint_reached,
    battle_started,
    victory,
)


def is_trapped(position: int, steps: int) -> bool:
    """True if moving steps from position would overshoot the segment endpoint without starting on it."""
    segment = segment_of(position)
    if segment is None:
        raise InvariantViolation(f"Position {position} is off the board")
    return position + steps > segment.end_position and position != segment.end_position


def next_active_index(state: GameState, from_index: int) -> int | None:
    """
    Index of the next active player after from_index in table order, wrapping.
    Inactive players are skipped entirely. Returns from_index itself if it is
    the only active seat, or None if nobody is active.
    """
    count = len(state.players)
    for offset in range(1, count + 1):
        idx = (from_index + offset) % count
        if state.players[idx].is_active:
            return idx
    return None


def players_at(state: GameState, position: int, exclude_id: str | None = None) -> list[Player]:
    """Active players standing on position, in table order."""
    return [
        p for p in state.players
        if p.is_active and p.position == position and p.id != exclude_id
    ]


def advance_turn(state: GameState) -> list[GameEvent]:
    """Pass the turn to the next active player and clear the last roll."""
    next_idx = next_active_index(state, state.current_player_index)
    if next_idx is None:
        raise InvariantViolation("Cannot advance the turn: no active players")
    state.current_player_index = next_idx
    state.last_roll = 0
    state.turn_number += 1
    player = state.players[next_idx]
    return [turn_started(state.turn_number, player.id, player.name)]


def attempt_move(state: GameState, steps: int) -> list[GameEvent]:
    """
    Apply a movement roll to the current player.

    Modifies state in place. Exactly one of these happens:
    - rejected (trapped): position unchanged, last_roll reset, turn passes
    - lands on an endpoint held by another active player: battle starts
    - lands on the final position: game finished, mover wins
    - otherwise: turn passes to the next active player

    Returns:
        Events describing the move
    """
    if not 1 <= steps <= DICE_SIDES:
        raise ValueError(f"Movement roll must be between 1 and {DICE_SIDES}, got {steps}")

    events: list[GameEvent] = []
    mover = state.current_player
    if mover is None or not mover.is_active:
        raise InvariantViolation(f"Current player index {state.current_player_index} is not an active player")

    if is_trapped(mover.position, steps):
        segment = segment_of(mover.position)
        events.append(move_rejected(
            mover.id, mover.name, mover.position, steps,
            list(segment.positions), segment.end_position,
        ))
        state.last_roll = 0
        events.extend(advance_turn(state))
        return events

    old_position = mover.position
    mover.position = min(old_position + steps, FINAL_POSITION)
    events.append(player_moved(mover.id, mover.name, old_position, mover.position, steps))

    if is_endpoint(mover.position):
        events.append(endpoint_reached(mover.id, mover.name, mover.position))

        occupants = players_at(state, mover.position, exclude_id=mover.id)
        if occupants:
            # Two-sided battles only: the first occupant in table order defends
            occupant = occupants[0]
            state.active_battle = start_battle(mover, occupant)
            state.battle_participants = [mover.id, occupant.id]
            events.append(battle_started(
                mover.position,
                [mover.id, occupant.id],
                [mover.name, occupant.name],
                ignored_occupant_ids=[p.id for p in occupants[1:]],
            ))
            events.append(phase_changed(state.phase, PHASE_BATTLE))
            state.phase = PHASE_BATTLE
            return events

        if mover.position == FINAL_POSITION:
            state.winner = mover.id
            events.append(victory(mover.id, mover.name, "final_position"))
            events.append(phase_changed(state.phase, PHASE_FINISHED))
            state.phase = PHASE_FINISHED
            return events

    events.extend(advance_turn(state))
    return events
