"""
Game controller: subscriptions, delayed transitions, reset cancellation.
"""

import pytest

from battleboard.controller import GameController, TASK_COMMIT_MOVE
from battleboard.engine.errors import InvalidPhaseAction
from battleboard.engine.events import MOVEMENT_ROLLED, PLAYER_MOVED, BATTLE_ENDED
from battleboard.engine.state import (
    PHASE_SETUP,
    PHASE_PLAYING,
    PHASE_BATTLE,
    PHASE_FINISHED,
    BATTLE_FINISHED,
)

MOVE_DELAY = 1.0
BATTLE_DELAY = 2.0


class ScriptedRng:
    """Hands out die faces from a fixed list."""

    def __init__(self, values):
        self.values = list(values)

    def randint(self, low, high):
        value = self.values.pop(0)
        assert low <= value <= high
        return value


def controller_with(values):
    return GameController(rng=ScriptedRng(values), move_delay=MOVE_DELAY, battle_delay=BATTLE_DELAY)


# Both players move to 4; the second arrival attacks and wins in five rounds
BATTLE_ON_FOUR = [
    3, 3,
    6, 6, 1, 2,
    1, 2, 3, 4,
    6, 6, 1, 2,
    1, 2, 3, 4,
    6, 6, 1, 2,
]


def play_to_battle(controller):
    controller.roll_dice()
    controller.run_pending()
    controller.roll_dice()
    controller.run_pending()
    assert controller.state.phase == PHASE_BATTLE


def fight(controller):
    while controller.state.active_battle.phase != BATTLE_FINISHED:
        controller.roll_dice()


def test_subscribers_get_snapshot_and_events():
    controller = controller_with([2])
    received = []
    controller.subscribe(lambda snapshot, events: received.append((snapshot, events)))

    controller.start_game(["A", "B"])
    controller.roll_dice()

    snapshot, events = received[-1]
    assert snapshot.last_roll == 2
    assert [e.type for e in events] == [MOVEMENT_ROLLED]

    snapshot.players[0].position = 20
    assert controller.state.players[0].position == 1


def test_unsubscribe_stops_notifications():
    controller = controller_with([])
    received = []
    unsubscribe = controller.subscribe(lambda snapshot, events: received.append(events))

    controller.start_game(["A", "B"])
    unsubscribe()
    controller.reset_game()

    assert len(received) == 1


def test_rejected_action_notifies_nobody():
    controller = controller_with([])
    received = []
    controller.subscribe(lambda snapshot, events: received.append(events))

    with pytest.raises(InvalidPhaseAction):
        controller.roll_dice()

    assert received == []
    assert controller.state.phase == PHASE_SETUP


def test_start_game_validates_player_count():
    controller = controller_with([])

    with pytest.raises(ValueError):
        controller.start_game(["A"])
    with pytest.raises(ValueError):
        controller.start_game(["A", "B", "C", "D", "E"])


def test_move_is_applied_after_delay():
    controller = controller_with([3])
    controller.start_game(["A", "B"])

    controller.roll_dice()
    assert controller.move_pending
    assert controller.state.players[0].position == 1

    controller.advance(MOVE_DELAY / 2)
    assert controller.state.players[0].position == 1

    assert controller.advance(MOVE_DELAY / 2) == 1
    assert controller.state.players[0].position == 4
    assert not controller.move_pending
    assert PLAYER_MOVED in [e.type for e in controller.event_log]


def test_cannot_roll_while_move_is_pending():
    controller = controller_with([3, 4])
    controller.start_game(["A", "B"])
    controller.roll_dice()

    with pytest.raises(InvalidPhaseAction):
        controller.roll_dice()


class ListenerFailure(Exception):
    pass


def fail_once():
    calls = []

    def listener(snapshot, events):
        calls.append(events)
        if len(calls) == 1:
            raise ListenerFailure("renderer crashed")

    return listener


def test_failing_listener_does_not_strand_the_move():
    controller = controller_with([2, 5])
    controller.start_game(["A", "B"])
    controller.subscribe(fail_once())

    with pytest.raises(ListenerFailure):
        controller.roll_dice()

    assert controller.move_pending
    controller.run_pending()
    state = controller.state
    assert state.pending_steps is None
    assert state.players[0].position == 3
    assert state.current_player.id == "player-1"

    controller.roll_dice()
    assert controller.state.last_roll == 5


def test_failing_listener_does_not_strand_the_battle_report():
    controller = controller_with(BATTLE_ON_FOUR)
    controller.start_game(["A", "B"])
    play_to_battle(controller)
    # Stop one step short of the final resolve
    while controller.state.active_battle.round_number < 5 or controller.state.active_battle.defender_dice is None:
        controller.roll_dice()
    controller.subscribe(fail_once())

    with pytest.raises(ListenerFailure):
        controller.roll_dice()

    assert controller.battle_report_pending
    controller.run_pending()
    assert controller.state.phase == PHASE_FINISHED
    assert controller.state.winner == "player-1"


def test_reset_cancels_pending_move():
    controller = controller_with([3])
    controller.start_game(["A", "B"])
    controller.roll_dice()

    controller.reset_game()
    controller.start_game(["A", "B"])
    controller.advance(MOVE_DELAY * 5)

    state = controller.state
    assert not controller.tasks.has_pending(TASK_COMMIT_MOVE)
    assert [p.position for p in state.players] == [1, 1]
    assert state.current_player.id == "player-0"
    assert state.phase == PHASE_PLAYING


def test_roll_dice_drives_the_battle():
    controller = controller_with(BATTLE_ON_FOUR)
    controller.start_game(["A", "B"])
    play_to_battle(controller)

    battle = controller.state.active_battle
    assert battle.attacker_id == "player-1"
    assert battle.position == 4

    fight(controller)

    assert controller.state.active_battle.winner_id == "player-1"
    assert BATTLE_ENDED in [e.type for e in controller.event_log]
    assert controller.battle_report_pending


def test_battle_report_completes_after_delay():
    controller = controller_with(BATTLE_ON_FOUR)
    controller.start_game(["A", "B"])
    play_to_battle(controller)
    fight(controller)

    controller.advance(BATTLE_DELAY - 0.5)
    assert controller.state.phase == PHASE_BATTLE

    controller.advance(0.5)
    state = controller.state
    assert state.phase == PHASE_FINISHED
    assert state.winner == "player-1"
    assert not controller.battle_report_pending


def test_complete_battle_now_cancels_report():
    controller = controller_with(BATTLE_ON_FOUR)
    controller.start_game(["A", "B", "C"])
    play_to_battle(controller)
    fight(controller)

    controller.complete_battle("player-1")
    assert not controller.battle_report_pending

    controller.advance(BATTLE_DELAY * 2)
    state = controller.state
    assert state.phase == PHASE_PLAYING
    assert state.current_player.id == "player-1"
    assert state.players[0].is_active is False


def test_close_battle_cancels_report():
    controller = controller_with(BATTLE_ON_FOUR)
    controller.start_game(["A", "B", "C"])
    play_to_battle(controller)
    fight(controller)

    controller.close_battle()
    controller.advance(BATTLE_DELAY * 2)

    state = controller.state
    assert state.phase == PHASE_PLAYING
    assert state.current_player.id == "player-1"
    assert all(p.is_active for p in state.players)
    assert [p.hit_points for p in state.players] == [0, 3, 3]


def test_reset_during_battle_cancels_report():
    controller = controller_with(BATTLE_ON_FOUR)
    controller.start_game(["A", "B"])
    play_to_battle(controller)
    fight(controller)

    controller.reset_game()
    controller.advance(BATTLE_DELAY * 2)

    assert controller.state.phase == PHASE_SETUP
    assert controller.state.players == []


def test_available_actions_follow_the_phase():
    controller = controller_with([2])
    assert controller.available_actions() == ["start_game", "reset_game"]

    controller.start_game(["A", "B"])
    assert "roll_movement_die" in controller.available_actions()

    controller.roll_dice()
    assert "commit_move" in controller.available_actions()
    assert "roll_movement_die" not in controller.available_actions()


def test_seeded_game_runs_to_a_winner():
    controller = GameController(seed=11, move_delay=MOVE_DELAY, battle_delay=BATTLE_DELAY)
    controller.start_game(["A", "B", "C", "D"])

    for _ in range(5000):
        if controller.state.phase == PHASE_FINISHED:
            break
        controller.roll_dice()
        controller.run_pending()

    state = controller.state
    assert state.phase == PHASE_FINISHED
    winner = state.get_player(state.winner)
    assert winner.is_active
    assert winner.position == 28 or len(state.active_players) == 1
