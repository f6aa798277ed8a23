"""
Main game reducer.
Applies actions to state, enforcing rules and producing new state.
Returns (new_state, events) where events describe what happened.
"""

from battleboard.engine import DICE_SIDES, MIN_PLAYERS, STARTING_POSITION, STARTING_HIT_POINTS
from battleboard.engine.state import (
    GameState,
    Player,
    PHASE_SETUP,
    PHASE_PLAYING,
    PHASE_BATTLE,
    PHASE_FINISHED,
    BATTLE_FINISHED,
    BATTLE_RESOLVE,
    ROLE_ATTACKER,
    ROLE_DEFENDER,
)
from battleboard.engine.actions import (
    Action,
    START_GAME,
    ROLL_MOVEMENT_DIE,
    COMMIT_MOVE,
    ROLL_BATTLE_DICE,
    RESOLVE_BATTLE_ROUND,
    COMPLETE_BATTLE,
    CLOSE_BATTLE,
    RESET_GAME,
)
from battleboard.engine.combat import (
    due_role,
    record_roll,
    resolve_battle_round,
    roller_id,
    is_doubles,
)
from battleboard.engine.movement import attempt_move
from battleboard.engine.errors import InvalidPhaseAction, InvariantViolation, check_invariants
from battleboard.engine.events import (
    GameEvent,
    game_started,
    game_reset,
    phase_changed,
    turn_started,
    movement_rolled,
    battle_dice_rolled,
    battle_round_resolved,
    battle_ended,
    battle_closed,
    player_eliminated,
    victory,
)


# Phase rules: which action types are allowed in which phases
# Note: inside a battle, the battle step further restricts these (see _validate_action_for_phase)
PHASE_ALLOWED_ACTIONS = {
    PHASE_SETUP: [START_GAME, RESET_GAME],
    PHASE_PLAYING: [ROLL_MOVEMENT_DIE, COMMIT_MOVE, RESET_GAME],
    PHASE_BATTLE: [ROLL_BATTLE_DICE, RESOLVE_BATTLE_ROUND, COMPLETE_BATTLE, CLOSE_BATTLE, RESET_GAME],
    PHASE_FINISHED: [RESET_GAME],
}


def _validate_action_for_phase(action: Action, state: GameState) -> None:
    """
    Validate that an action is allowed in the current phase and battle step.

    Special rules:
    - playing: a movement roll waits for its commit; no second roll meanwhile
    - battle: rolls only while a roll is due, resolve only after both rolled,
      complete only once the battle is finished
    """
    phase = state.phase
    allowed_actions = PHASE_ALLOWED_ACTIONS.get(phase, [])

    if action.type not in allowed_actions:
        raise InvalidPhaseAction(
            action.type, phase, f"allowed actions: {', '.join(allowed_actions)}")

    if phase == PHASE_PLAYING:
        if action.type == ROLL_MOVEMENT_DIE and state.pending_steps is not None:
            raise InvalidPhaseAction(action.type, phase, "a movement roll is already waiting to be applied")
        if action.type == COMMIT_MOVE and state.pending_steps is None:
            raise InvalidPhaseAction(action.type, phase, "no movement roll to apply")

    if phase == PHASE_BATTLE:
        battle = state.active_battle
        if battle is None:
            raise InvariantViolation("Phase is battle but no battle is tracked")
        if action.type == ROLL_BATTLE_DICE:
            due = due_role(battle)
            role = action.payload.get("role")
            if due is None:
                raise InvalidPhaseAction(action.type, phase, f"no roll is due in battle step '{battle.phase}'")
            if role in (ROLE_ATTACKER, ROLE_DEFENDER) and role != due:
                raise InvalidPhaseAction(action.type, phase, f"the {due} must roll next")
        if action.type == RESOLVE_BATTLE_ROUND and battle.phase != BATTLE_RESOLVE:
            raise InvalidPhaseAction(action.type, phase, f"battle step is '{battle.phase}', both sides must roll first")
        if action.type == COMPLETE_BATTLE and battle.phase != BATTLE_FINISHED:
            raise InvalidPhaseAction(action.type, phase, "the battle has not finished")


def apply_action(
    state: GameState,
    action: Action,
) -> tuple[GameState, list[GameEvent]]:
    """
    Apply a single action to the current state, returning new state and events.

    Validates:
    - Action is valid for current phase and battle step
    - Movement rolls come from the current player (when an actor is given)

    Args:
        state: Current game state (never modified)
        action: Action to apply

    Returns:
        Tuple of (new_state, events) where events describe what happened
    """
    _validate_action_for_phase(action, state)

    new_state = state.copy()
    events: list[GameEvent] = []

    if action.type == START_GAME:
        new_state, evts = _handle_start_game(new_state, action)
        events.extend(evts)

    elif action.type == ROLL_MOVEMENT_DIE:
        new_state, evts = _handle_roll_movement_die(new_state, action)
        events.extend(evts)

    elif action.type == COMMIT_MOVE:
        new_state, evts = _handle_commit_move(new_state, action)
        events.extend(evts)

    elif action.type == ROLL_BATTLE_DICE:
        new_state, evts = _handle_roll_battle_dice(new_state, action)
        events.extend(evts)

    elif action.type == RESOLVE_BATTLE_ROUND:
        new_state, evts = _handle_resolve_battle_round(new_state)
        events.extend(evts)

    elif action.type == COMPLETE_BATTLE:
        new_state, evts = _handle_complete_battle(new_state, action)
        events.extend(evts)

    elif action.type == CLOSE_BATTLE:
        new_state, evts = _handle_close_battle(new_state)
        events.extend(evts)

    elif action.type == RESET_GAME:
        new_state, evts = _handle_reset_game(new_state)
        events.extend(evts)

    else:
        raise ValueError(f"Unknown action type: {action.type}")

    check_invariants(new_state)
    return new_state, events


def _player_names(state: GameState) -> dict[str, str]:
    return {p.id: p.name for p in state.players}


def _require_current_player(state: GameState, action: Action) -> Player:
    current = state.current_player
    if current is None:
        raise InvariantViolation(f"Current player index {state.current_player_index} is out of range")
    if action.player is not None and action.player != current.id:
        raise ValueError(f"Not {action.player}'s turn. Current player: {current.id}")
    return current


def _handle_start_game(
    state: GameState,
    action: Action,
) -> tuple[GameState, list[GameEvent]]:
    """
    Seat the players in the given order.
    Every player starts on the first cell with full hit points, whatever the
    descriptors say.
    """
    events: list[GameEvent] = []
    players_raw = action.payload.get("players") or []

    if len(players_raw) < MIN_PLAYERS:
        raise ValueError(f"At least {MIN_PLAYERS} players are required, got {len(players_raw)}")

    players = []
    seen_ids = set()
    for raw in players_raw:
        player = Player.from_dict(raw)
        if not player.id:
            raise ValueError("Every player needs an id")
        if player.id in seen_ids:
            raise ValueError(f"Duplicate player id: {player.id}")
        seen_ids.add(player.id)
        player.position = STARTING_POSITION
        player.hit_points = STARTING_HIT_POINTS
        player.is_active = True
        players.append(player)

    state.players = players
    state.current_player_index = 0
    state.battle_participants = []
    state.active_battle = None
    state.pending_steps = None
    state.movement_die = 1
    state.last_roll = 0
    state.winner = None
    state.turn_number = 1

    events.append(game_started([p.id for p in players], [p.name for p in players]))
    events.append(phase_changed(state.phase, PHASE_PLAYING))
    state.phase = PHASE_PLAYING
    events.append(turn_started(state.turn_number, players[0].id, players[0].name))

    return state, events


def _handle_roll_movement_die(
    state: GameState,
    action: Action,
) -> tuple[GameState, list[GameEvent]]:
    """Show the roll; the position only changes on commit_move."""
    current = _require_current_player(state, action)

    steps = action.payload.get("steps")
    if not isinstance(steps, int) or not 1 <= steps <= DICE_SIDES:
        raise ValueError(f"Movement roll must be between 1 and {DICE_SIDES}, got {steps!r}")

    state.movement_die = steps
    state.last_roll = steps
    state.pending_steps = steps

    return state, [movement_rolled(current.id, current.name, steps)]


def _handle_commit_move(
    state: GameState,
    action: Action,
) -> tuple[GameState, list[GameEvent]]:
    _require_current_player(state, action)

    steps = state.pending_steps
    state.pending_steps = None
    events = attempt_move(state, steps)

    return state, events


def _handle_roll_battle_dice(
    state: GameState,
    action: Action,
) -> tuple[GameState, list[GameEvent]]:
    battle = state.active_battle
    role = action.payload.get("role")
    dice = action.payload.get("dice")

    record_roll(battle, role, dice)

    pid = roller_id(battle, role)
    name = _player_names(state).get(pid, pid)
    return state, [battle_dice_rolled(role, pid, name, list(dice), is_doubles(dice))]


def _handle_resolve_battle_round(
    state: GameState,
) -> tuple[GameState, list[GameEvent]]:
    """
    Resolve the current round.
    When a side drops to zero the battle finishes but the game stays in the
    battle phase until the outcome is merged by complete_battle.
    """
    events: list[GameEvent] = []
    battle = state.active_battle
    names = _player_names(state)

    result = resolve_battle_round(battle)
    events.append(battle_round_resolved(battle.battle_log[-1].to_dict(), names))

    if result.eliminated_id is not None:
        winner_id = battle.winner_id
        events.append(battle_ended(
            winner_id, names.get(winner_id, winner_id),
            result.eliminated_id, names.get(result.eliminated_id, result.eliminated_id),
            len(battle.battle_log),
        ))

    return state, events


def _handle_complete_battle(
    state: GameState,
    action: Action,
) -> tuple[GameState, list[GameEvent]]:
    """
    Merge the battle outcome into the roster.

    - participants take their battle-local hit points
    - anyone at zero is eliminated (inactive for the rest of the game)
    - one active player left: game over, they win
    - otherwise the battle winner takes the turn
    """
    events: list[GameEvent] = []
    battle = state.active_battle

    winner_id = action.payload.get("winner_id")
    if winner_id != battle.winner_id:
        raise ValueError(f"Battle was won by {battle.winner_id}, not {winner_id}")

    for pid in battle.participant_ids:
        player = state.get_player(pid)
        if player is None:
            raise InvariantViolation(f"Battle participant {pid} is not seated")
        player.hit_points = battle.hit_points[pid]
        if player.hit_points <= 0:
            player.hit_points = 0
            player.is_active = False
            events.append(player_eliminated(player.id, player.name, player.position))

    state.active_battle = None
    state.battle_participants = []
    state.last_roll = 0

    active = state.active_players
    if not active:
        raise InvariantViolation("Battle eliminated every player")

    if len(active) == 1:
        state.winner = active[0].id
        events.append(victory(active[0].id, active[0].name, "last_standing"))
        events.append(phase_changed(state.phase, PHASE_FINISHED))
        state.phase = PHASE_FINISHED
        return state, events

    # Battle winner continues from the endpoint
    state.current_player_index = state.index_of(winner_id)
    state.turn_number += 1
    events.append(phase_changed(state.phase, PHASE_PLAYING))
    state.phase = PHASE_PLAYING
    winner = state.current_player
    events.append(turn_started(state.turn_number, winner.id, winner.name))

    return state, events


def _handle_close_battle(
    state: GameState,
) -> tuple[GameState, list[GameEvent]]:
    """
    Dismiss the battle without applying its outcome.
    Damage already taken in resolved rounds stays on the roster, but nobody is
    eliminated and the turn stays with the initiator.
    """
    events: list[GameEvent] = []
    battle = state.active_battle

    for pid in battle.participant_ids:
        player = state.get_player(pid)
        if player is None:
            raise InvariantViolation(f"Battle participant {pid} is not seated")
        player.hit_points = battle.hit_points[pid]

    events.append(battle_closed(list(battle.participant_ids), len(battle.battle_log)))
    state.active_battle = None
    state.battle_participants = []
    events.append(phase_changed(state.phase, PHASE_PLAYING))
    state.phase = PHASE_PLAYING

    return state, events


def _handle_reset_game(
    state: GameState,
) -> tuple[GameState, list[GameEvent]]:
    events: list[GameEvent] = [game_reset()]
    if state.phase != PHASE_SETUP:
        events.append(phase_changed(state.phase, PHASE_SETUP))
    return GameState(), events


def replay_from_actions(
    initial_state: GameState,
    actions: list[Action],
) -> tuple[GameState, list[GameEvent]]:
    """
    Replay a series of actions from an initial state.
    Event sourcing: state is derived from action log.

    Args:
        initial_state: Starting game state
        actions: List of actions to apply in sequence

    Returns:
        Tuple of (final_state, all_events) after all actions applied
    """
    current_state = initial_state.copy()
    all_events: list[GameEvent] = []

    for action in actions:
        current_state, events = apply_action(current_state, action)
        all_events.extend(events)

    return current_state, all_events
