"""
Action definitions for the game.
Actions are immutable, deterministic instructions: any dice values are rolled
by the caller and carried in the payload, never drawn inside the reducer.
"""

from dataclasses import dataclass, field

from battleboard.engine.state import Player

START_GAME = "start_game"
ROLL_MOVEMENT_DIE = "roll_movement_die"
COMMIT_MOVE = "commit_move"
ROLL_BATTLE_DICE = "roll_battle_dice"
RESOLVE_BATTLE_ROUND = "resolve_battle_round"
COMPLETE_BATTLE = "complete_battle"
CLOSE_BATTLE = "close_battle"
RESET_GAME = "reset_game"


@dataclass(frozen=True)
class Action:
    """Base action class. All actions have a type, an optional acting player, and a payload."""
    type: str
    player: str | None = None  # player id performing the action; None for table-level actions
    payload: dict = field(default_factory=dict)


def start_game(players: list[Player]) -> Action:
    """
    Seat the players and begin play.
    Players are reset to the starting position and full health by the reducer,
    so only id, name and color need to be meaningful here.
    """
    return Action(
        type=START_GAME,
        payload={"players": [p.to_dict() for p in players]},
    )


def roll_movement_die(player: str, steps: int) -> Action:
    """
    Show a movement roll for the current player.
    The move itself is applied by a later commit_move.

    Example: roll_movement_die("player-0", 4)
    """
    return Action(type=ROLL_MOVEMENT_DIE, player=player, payload={"steps": steps})


def commit_move(player: str | None = None) -> Action:
    """Apply the pending movement roll (dispatched when the move delay elapses)."""
    return Action(type=COMMIT_MOVE, player=player, payload={})


def roll_battle_dice(role: str, dice: list[int]) -> Action:
    """
    Record one side's two battle dice.
    role is "attacker" or "defender" and must be the side whose roll is due.

    Example: roll_battle_dice("attacker", [3, 3])
    """
    return Action(type=ROLL_BATTLE_DICE, payload={"role": role, "dice": list(dice)})


def resolve_battle_round() -> Action:
    """Compare both sides' dice and apply damage for the current round."""
    return Action(type=RESOLVE_BATTLE_ROUND, payload={})


def complete_battle(winner_id: str) -> Action:
    """Merge a finished battle's outcome into the roster."""
    return Action(type=COMPLETE_BATTLE, payload={"winner_id": winner_id})


def close_battle() -> Action:
    """Dismiss the battle without applying its outcome."""
    return Action(type=CLOSE_BATTLE, payload={})


def reset_game() -> Action:
    """Discard everything and return to setup."""
    return Action(type=RESET_GAME, payload={})
