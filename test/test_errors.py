"""
Invariant checks: every corrupted state fails fast.
"""

import pytest

from battleboard.engine.actions import roll_movement_die, commit_move
from battleboard.engine.errors import InvalidPhaseAction, InvariantViolation, check_invariants
from battleboard.engine.reducer import apply_action
from battleboard.engine.state import GameState, PHASE_FINISHED


def battle_state(make_state):
    state = make_state([19, 20, 1])
    state, _ = apply_action(state, roll_movement_die("player-0", 1))
    state, _ = apply_action(state, commit_move("player-0"))
    return state


def finished_state(make_state):
    state = make_state([25, 1, 1])
    state, _ = apply_action(state, roll_movement_die("player-0", 3))
    state, _ = apply_action(state, commit_move("player-0"))
    assert state.phase == PHASE_FINISHED
    return state


def off_board(state):
    state.players[1].position = 29


def below_start(state):
    state.players[1].position = 0


def too_many_hit_points(state):
    state.players[0].hit_points = 4


def negative_hit_points(state):
    state.players[0].hit_points = -1


def nobody_active(state):
    for player in state.players:
        player.is_active = False


def current_index_out_of_range(state):
    state.current_player_index = 7


def current_player_inactive(state):
    state.players[0].is_active = False


def battle_data_while_playing(state):
    state.battle_participants = ["player-0", "player-1"]


@pytest.mark.parametrize("corrupt", [
    off_board,
    below_start,
    too_many_hit_points,
    negative_hit_points,
    nobody_active,
    current_index_out_of_range,
    current_player_inactive,
    battle_data_while_playing,
])
def test_playing_state_invariants(make_state, corrupt):
    state = make_state([1, 1, 1])
    check_invariants(state)

    corrupt(state)

    with pytest.raises(InvariantViolation):
        check_invariants(state)


def three_participants(state):
    state.battle_participants = ["player-0", "player-1", "player-2"]
    state.active_battle.participant_ids = list(state.battle_participants)


def one_participant(state):
    state.battle_participants = ["player-0"]
    state.active_battle.participant_ids = ["player-0"]


def inactive_participant(state):
    state.players[1].is_active = False


def missing_battle(state):
    state.active_battle = None


def participants_out_of_sync(state):
    state.active_battle.participant_ids = ["player-0", "player-2"]


def negative_battle_hit_points(state):
    state.active_battle.hit_points["player-1"] = -1


@pytest.mark.parametrize("corrupt", [
    three_participants,
    one_participant,
    inactive_participant,
    missing_battle,
    participants_out_of_sync,
    negative_battle_hit_points,
])
def test_battle_state_invariants(make_state, corrupt):
    state = battle_state(make_state)
    check_invariants(state)

    corrupt(state)

    with pytest.raises(InvariantViolation):
        check_invariants(state)


def no_winner(state):
    state.winner = None


def unknown_winner(state):
    state.winner = "player-9"


def inactive_winner(state):
    state.players[0].is_active = False


def winner_short_of_the_finish(state):
    state.players[0].position = 27


@pytest.mark.parametrize("corrupt", [
    no_winner,
    unknown_winner,
    inactive_winner,
    winner_short_of_the_finish,
])
def test_finished_state_invariants(make_state, corrupt):
    state = finished_state(make_state)
    check_invariants(state)

    corrupt(state)

    with pytest.raises(InvariantViolation):
        check_invariants(state)


def test_last_player_standing_may_win_anywhere(make_state):
    state = finished_state(make_state)
    state.players[0].position = 12
    state.players[1].is_active = False
    state.players[2].is_active = False

    check_invariants(state)


def test_setup_state_is_always_valid():
    check_invariants(GameState())


def test_reducer_checks_invariants_after_every_action(make_state):
    state = make_state([1, 1])
    state.players[1].hit_points = 9

    with pytest.raises(InvariantViolation):
        apply_action(state, roll_movement_die("player-0", 2))


def test_invariant_violation_is_not_a_rule_rejection():
    assert not issubclass(InvariantViolation, ValueError)
    assert issubclass(InvalidPhaseAction, ValueError)
