"""
Engine exceptions and the invariant check run after every applied action.
"""

from battleboard.engine import STARTING_HIT_POINTS
from battleboard.engine.definitions import FINAL_POSITION
from battleboard.engine.state import (
    GameState,
    PHASE_SETUP,
    PHASE_PLAYING,
    PHASE_BATTLE,
    PHASE_FINISHED,
)


class InvalidPhaseAction(ValueError):
    """The action is not allowed in the current phase (or battle step). State is left untouched."""

    def __init__(self, action_type: str, phase: str, detail: str | None = None):
        self.action_type = action_type
        self.phase = phase
        message = f"Action '{action_type}' is not allowed in phase '{phase}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvariantViolation(AssertionError):
    """The engine produced a state that cannot exist. This is a bug, not bad input."""


def check_invariants(state: GameState) -> None:
    """Raise InvariantViolation if state breaks any rule the engine guarantees."""
    for player in state.players:
        if not 1 <= player.position <= FINAL_POSITION:
            raise InvariantViolation(f"{player.id} is off the board at {player.position}")
        if not 0 <= player.hit_points <= STARTING_HIT_POINTS:
            raise InvariantViolation(f"{player.id} has {player.hit_points} hit points")

    if state.phase == PHASE_SETUP:
        return

    active = state.active_players
    if not active:
        raise InvariantViolation("No active players left")

    if state.phase == PHASE_PLAYING:
        current = state.current_player
        if current is None:
            raise InvariantViolation(f"Current player index {state.current_player_index} is out of range")
        if not current.is_active:
            raise InvariantViolation(f"Current player {current.id} is not active")
        if state.battle_participants or state.active_battle is not None:
            raise InvariantViolation("Battle data present outside the battle phase")

    elif state.phase == PHASE_BATTLE:
        if len(state.battle_participants) != 2:
            raise InvariantViolation(
                f"Battle needs exactly 2 participants, got {len(state.battle_participants)}")
        for pid in state.battle_participants:
            player = state.get_player(pid)
            if player is None or not player.is_active:
                raise InvariantViolation(f"Battle participant {pid} is not an active player")
        if state.active_battle is None:
            raise InvariantViolation("Phase is battle but no battle is tracked")
        if state.active_battle.participant_ids != state.battle_participants:
            raise InvariantViolation("Battle participants out of sync")
        for pid, hp in state.active_battle.hit_points.items():
            if hp < 0:
                raise InvariantViolation(f"{pid} has negative battle hit points")

    elif state.phase == PHASE_FINISHED:
        winner = state.get_player(state.winner) if state.winner else None
        if winner is None:
            raise InvariantViolation("Game finished without a winner")
        if not winner.is_active:
            raise InvariantViolation(f"Winner {winner.id} is not active")
        if len(active) > 1 and winner.position != FINAL_POSITION:
            raise InvariantViolation(
                f"Winner {winner.id} is neither the last player standing nor at {FINAL_POSITION}")
