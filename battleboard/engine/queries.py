"""
Query functions for UI integration.
These functions help the UI understand what actions are available
without mutating game state.
"""

from dataclasses import dataclass
from typing import Any

from battleboard.engine import DICE_SIDES
from battleboard.engine.state import (
    GameState,
    Player,
    PHASE_BATTLE,
    PHASE_PLAYING,
    BATTLE_RESOLVE,
    BATTLE_FINISHED,
)
from battleboard.engine.actions import (
    Action,
    ROLL_MOVEMENT_DIE,
    COMMIT_MOVE,
    ROLL_BATTLE_DICE,
    RESOLVE_BATTLE_ROUND,
    COMPLETE_BATTLE,
)
from battleboard.engine.definitions import segment_of, FINAL_POSITION
from battleboard.engine.combat import due_role, roller_id
from battleboard.engine.movement import is_trapped
from battleboard.engine.reducer import apply_action, PHASE_ALLOWED_ACTIONS


@dataclass
class ValidationResult:
    """Result of action validation."""
    valid: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "error": self.error}


# ===== Action Validation =====

def validate_action(state: GameState, action: Action) -> ValidationResult:
    """
    Validate an action without applying it.
    Returns ValidationResult with valid=True or valid=False with error message.
    """
    try:
        apply_action(state, action)
    except ValueError as e:
        return ValidationResult(False, str(e))
    return ValidationResult(True)


def get_available_action_types(state: GameState) -> list[str]:
    """Get action types available in the current phase and battle step."""
    allowed = list(PHASE_ALLOWED_ACTIONS.get(state.phase, []))

    if state.phase == PHASE_PLAYING:
        if state.pending_steps is None:
            allowed.remove(COMMIT_MOVE)
        else:
            allowed.remove(ROLL_MOVEMENT_DIE)

    elif state.phase == PHASE_BATTLE and state.active_battle is not None:
        battle = state.active_battle
        if due_role(battle) is None:
            allowed.remove(ROLL_BATTLE_DICE)
        if battle.phase != BATTLE_RESOLVE:
            allowed.remove(RESOLVE_BATTLE_ROUND)
        if battle.phase != BATTLE_FINISHED:
            allowed.remove(COMPLETE_BATTLE)

    return allowed


# ===== Turn and Battle Queries =====

def get_current_player(state: GameState) -> Player | None:
    if state.phase != PHASE_PLAYING:
        return None
    return state.current_player


def get_battle_due_role(state: GameState) -> str | None:
    """The battle role ("attacker" or "defender") whose roll is due, else None."""
    if state.phase != PHASE_BATTLE or state.active_battle is None:
        return None
    return due_role(state.active_battle)


def get_battle_roller(state: GameState) -> Player | None:
    """The player whose battle roll is due."""
    role = get_battle_due_role(state)
    if role is None:
        return None
    return state.get_player(roller_id(state.active_battle, role))


def get_trapping_rolls(state: GameState, player_id: str) -> list[int]:
    """Die faces that would leave this player stuck where they are."""
    player = state.get_player(player_id)
    if player is None or not player.is_active:
        return []
    return [steps for steps in range(1, DICE_SIDES + 1) if is_trapped(player.position, steps)]


def get_player_progress(player: Player) -> dict[str, Any]:
    segment = segment_of(player.position)
    return {
        "player_id": player.id,
        "position": player.position,
        "segment": segment.index + 1 if segment else None,
        "segment_end": segment.end_position if segment else None,
        "cells_to_finish": FINAL_POSITION - player.position,
    }


def get_game_summary(state: GameState) -> dict[str, Any]:
    """
    Get a summary of the current game state for UI display.
    """
    current = state.current_player
    battle = state.active_battle
    return {
        "turn_number": state.turn_number,
        "phase": state.phase,
        "current_player": current.id if current and state.phase == PHASE_PLAYING else None,
        "winner": state.winner,
        "last_roll": state.last_roll,
        "movement_die": state.movement_die,
        "active_players": [p.id for p in state.active_players],
        "eliminated_players": [p.id for p in state.players if not p.is_active],
        "progress": [get_player_progress(p) for p in state.players],
        "battle": {
            "participants": battle.participant_ids,
            "position": battle.position,
            "step": battle.phase,
            "round_number": battle.round_number,
            "due_role": due_role(battle),
            "hit_points": battle.hit_points,
            "winner": battle.winner_id,
        } if battle else None,
        "available_actions": get_available_action_types(state),
    }

