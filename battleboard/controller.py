"""
Game controller: the single owner of the authoritative GameState.
Every external action goes through here, one at a time. The controller rolls
the dice, dispatches actions to the reducer, schedules the two delayed
transitions, and pushes a snapshot to subscribers after each action.
"""

import random
from typing import Any, Callable

from battleboard.config import MOVE_COMMIT_DELAY, BATTLE_COMPLETE_DELAY
from battleboard.engine.state import (
    GameState,
    PHASE_PLAYING,
    PHASE_BATTLE,
    BATTLE_RESOLVE,
    BATTLE_FINISHED,
)
from battleboard.engine.actions import (
    Action,
    start_game,
    roll_movement_die,
    commit_move,
    roll_battle_dice,
    resolve_battle_round,
    complete_battle,
    close_battle,
    reset_game,
    ROLL_BATTLE_DICE,
)
from battleboard.engine.combat import due_role
from battleboard.engine.errors import InvalidPhaseAction
from battleboard.engine.events import GameEvent
from battleboard.engine.queries import get_available_action_types
from battleboard.engine.reducer import apply_action
from battleboard.engine.roster import build_roster
from battleboard.engine.scheduler import TaskQueue, ScheduledTask
from battleboard.engine.utils import build_rng, roll_die, roll_battle_dice as draw_battle_dice

# Listener signature: (snapshot, events) -> None
Listener = Callable[[GameState, list[GameEvent]], None]

TASK_COMMIT_MOVE = "commit_move"
TASK_COMPLETE_BATTLE = "complete_battle"


class GameController:
    """
    Owns the game. Renderers subscribe for snapshots and call the action
    methods; nothing else touches the state.

    Delayed transitions run on the controller's TaskQueue. Drive it with
    advance(seconds) from a frame loop, or run_pending() to settle at once.
    """

    def __init__(
        self,
        seed: int | None = None,
        rng: random.Random | None = None,
        tasks: TaskQueue | None = None,
        move_delay: float = MOVE_COMMIT_DELAY,
        battle_delay: float = BATTLE_COMPLETE_DELAY,
    ):
        self.rng = rng if rng is not None else build_rng(seed)
        self.tasks = tasks if tasks is not None else TaskQueue()
        self.move_delay = move_delay
        self.battle_delay = battle_delay
        self.event_log: list[GameEvent] = []
        self._state = GameState()
        self._listeners: list[Listener] = []
        self._move_task: ScheduledTask | None = None
        self._battle_task: ScheduledTask | None = None

    # ===== State access and subscription =====

    @property
    def state(self) -> GameState:
        """A snapshot of the current state; changing it does not affect the game."""
        return self._state.copy()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener for (snapshot, events) after every action. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> list[GameEvent]:
        """
        Apply one action to the authoritative state.
        On a rejected action (ValueError) the state is unchanged and nobody is notified.
        """
        events = self._apply(action)
        self._notify(events)
        return events

    def _apply(self, action: Action) -> list[GameEvent]:
        new_state, events = apply_action(self._state, action)
        self._state = new_state
        self.event_log.extend(events)
        return events

    def _notify(self, events: list[GameEvent]) -> None:
        # Callers schedule or cancel follow-up tasks before notifying
        for listener in list(self._listeners):
            listener(self._state.copy(), list(events))

    # ===== Actions =====

    def start_game(self, players: list[Any]) -> list[GameEvent]:
        """Seat players from setup descriptors (names, dicts, or PlayerDescriptor models)."""
        return self.dispatch(start_game(build_roster(players)))

    def roll_dice(self) -> list[GameEvent]:
        """
        The single "roll" button.
        Playing: roll the movement die. Battle: take whichever battle step is
        due (attacker roll, defender roll, or resolving the round).
        """
        if self._state.phase == PHASE_PLAYING:
            return self.roll_movement_die()
        if self._state.phase == PHASE_BATTLE and self._state.active_battle is not None:
            battle = self._state.active_battle
            role = due_role(battle)
            if role is not None:
                return self.roll_battle_die(role)
            if battle.phase == BATTLE_RESOLVE:
                return self.resolve_battle_round()
            raise InvalidPhaseAction(ROLL_BATTLE_DICE, self._state.phase, "the battle is over")
        raise InvalidPhaseAction("roll_dice", self._state.phase)

    def roll_movement_die(self) -> list[GameEvent]:
        """Roll for the current player and schedule the move to be applied after move_delay."""
        current = self._state.current_player
        player_id = current.id if current is not None else None
        events = self._apply(roll_movement_die(player_id, roll_die(self.rng)))
        self._move_task = self.tasks.schedule(
            self.move_delay, TASK_COMMIT_MOVE, lambda: self._commit_move(player_id))
        self._notify(events)
        return events

    def _commit_move(self, player_id: str | None) -> None:
        self._move_task = None
        self.dispatch(commit_move(player_id))

    def roll_battle_die(self, role: str) -> list[GameEvent]:
        """Roll two dice for role ("attacker" or "defender")."""
        return self.dispatch(roll_battle_dice(role, draw_battle_dice(self.rng)))

    def resolve_battle_round(self) -> list[GameEvent]:
        """Resolve the round; a finished battle reports its winner after battle_delay."""
        events = self._apply(resolve_battle_round())
        battle = self._state.active_battle
        if battle is not None and battle.phase == BATTLE_FINISHED:
            winner_id = battle.winner_id
            self._battle_task = self.tasks.schedule(
                self.battle_delay, TASK_COMPLETE_BATTLE, lambda: self._report_battle(winner_id))
        self._notify(events)
        return events

    def _report_battle(self, winner_id: str) -> None:
        self._battle_task = None
        self.dispatch(complete_battle(winner_id))

    def complete_battle(self, winner_id: str) -> list[GameEvent]:
        """Merge the finished battle now instead of waiting for the scheduled report."""
        events = self._apply(complete_battle(winner_id))
        self.tasks.cancel(self._battle_task)
        self._battle_task = None
        self._notify(events)
        return events

    handle_battle_complete = complete_battle

    def close_battle(self) -> list[GameEvent]:
        """Dismiss the battle without applying its outcome."""
        events = self._apply(close_battle())
        self.tasks.cancel(self._battle_task)
        self._battle_task = None
        self._notify(events)
        return events

    def reset_game(self) -> list[GameEvent]:
        """Back to setup. Pending delayed transitions are cancelled and can never apply."""
        self.tasks.cancel_all()
        self._move_task = None
        self._battle_task = None
        return self.dispatch(reset_game())

    # ===== Task queue driving =====

    def advance(self, seconds: float) -> int:
        """Let seconds of presentation time pass. Returns how many delayed transitions ran."""
        return self.tasks.advance(seconds)

    def run_pending(self) -> int:
        """Apply every pending delayed transition now."""
        return self.tasks.run_all()

    @property
    def move_pending(self) -> bool:
        return self._move_task is not None and not self._move_task.cancelled

    @property
    def battle_report_pending(self) -> bool:
        return self._battle_task is not None and not self._battle_task.cancelled

    def available_actions(self) -> list[str]:
        return get_available_action_types(self._state)
