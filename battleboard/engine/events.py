"""
Game events for UI hooks and logging.
Events describe what happened during action processing.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameEvent":
        return cls(type=data["type"], payload=data["payload"])


# ===== Event Type Constants =====

# Phase/Turn events
GAME_STARTED = "game_started"
GAME_RESET = "game_reset"
PHASE_CHANGED = "phase_changed"
TURN_STARTED = "turn_started"

# Movement events
MOVEMENT_ROLLED = "movement_rolled"
PLAYER_MOVED = "player_moved"
MOVE_REJECTED = "move_rejected"
ENDPOINT_REACHED = "endpoint_reached"

# Battle events
BATTLE_STARTED = "battle_started"
BATTLE_DICE_ROLLED = "battle_dice_rolled"
BATTLE_ROUND_RESOLVED = "battle_round_resolved"
BATTLE_ENDED = "battle_ended"
BATTLE_CLOSED = "battle_closed"
PLAYER_ELIMINATED = "player_eliminated"

# Victory events
VICTORY = "victory"


# ===== Event Factory Functions =====

def game_started(player_ids: list[str], player_names: list[str]) -> GameEvent:
    return GameEvent(GAME_STARTED, {
        "player_ids": player_ids,
        "player_names": player_names,
    })


def game_reset() -> GameEvent:
    return GameEvent(GAME_RESET, {})


def phase_changed(old_phase: str, new_phase: str) -> GameEvent:
    return GameEvent(PHASE_CHANGED, {
        "old_phase": old_phase,
        "new_phase": new_phase,
    })


def turn_started(turn_number: int, player_id: str, player_name: str) -> GameEvent:
    return GameEvent(TURN_STARTED, {
        "turn_number": turn_number,
        "player_id": player_id,
        "player_name": player_name,
    })


def movement_rolled(player_id: str, player_name: str, steps: int) -> GameEvent:
    return GameEvent(MOVEMENT_ROLLED, {
        "player_id": player_id,
        "player_name": player_name,
        "steps": steps,
    })


def player_moved(
    player_id: str,
    player_name: str,
    from_position: int,
    to_position: int,
    steps: int,
) -> GameEvent:
    return GameEvent(PLAYER_MOVED, {
        "player_id": player_id,
        "player_name": player_name,
        "from_position": from_position,
        "to_position": to_position,
        "steps": steps,
    })


def move_rejected(
    player_id: str,
    player_name: str,
    position: int,
    steps: int,
    segment_positions: list[int],
    segment_end: int,
) -> GameEvent:
    """Emitted when a roll would overshoot the segment endpoint (the player is trapped)."""
    return GameEvent(MOVE_REJECTED, {
        "player_id": player_id,
        "player_name": player_name,
        "position": position,
        "steps": steps,
        "segment_positions": segment_positions,
        "segment_end": segment_end,
    })


def endpoint_reached(player_id: str, player_name: str, position: int) -> GameEvent:
    return GameEvent(ENDPOINT_REACHED, {
        "player_id": player_id,
        "player_name": player_name,
        "position": position,
    })


def battle_started(
    position: int,
    participant_ids: list[str],
    participant_names: list[str],
    ignored_occupant_ids: list[str] | None = None,
) -> GameEvent:
    """
    participant_ids is [initiator, occupant]; the initiator attacks first.
    ignored_occupant_ids lists any further occupants of the endpoint (battles
    are strictly two-sided, so they sit this one out).
    """
    payload: dict[str, Any] = {
        "position": position,
        "participant_ids": participant_ids,
        "participant_names": participant_names,
    }
    if ignored_occupant_ids:
        payload["ignored_occupant_ids"] = ignored_occupant_ids
    return GameEvent(BATTLE_STARTED, payload)


def battle_dice_rolled(
    role: str,
    player_id: str,
    player_name: str,
    dice: list[int],
    doubles: bool,
) -> GameEvent:
    return GameEvent(BATTLE_DICE_ROLLED, {
        "role": role,
        "player_id": player_id,
        "player_name": player_name,
        "dice": dice,
        "doubles": doubles,
    })


def battle_round_resolved(round_result: dict[str, Any], names: dict[str, str]) -> GameEvent:
    """round_result is a BattleRoundResult.to_dict(); names maps player id -> display name."""
    payload = dict(round_result)
    payload["attacker_name"] = names.get(round_result["attacker_id"], round_result["attacker_id"])
    payload["defender_name"] = names.get(round_result["defender_id"], round_result["defender_id"])
    return GameEvent(BATTLE_ROUND_RESOLVED, payload)


def battle_ended(
    winner_id: str,
    winner_name: str,
    loser_id: str,
    loser_name: str,
    total_rounds: int,
) -> GameEvent:
    return GameEvent(BATTLE_ENDED, {
        "winner_id": winner_id,
        "winner_name": winner_name,
        "loser_id": loser_id,
        "loser_name": loser_name,
        "total_rounds": total_rounds,
    })


def battle_closed(participant_ids: list[str], rounds_played: int) -> GameEvent:
    """Emitted when a battle is dismissed without its outcome being applied."""
    return GameEvent(BATTLE_CLOSED, {
        "participant_ids": participant_ids,
        "rounds_played": rounds_played,
    })


def player_eliminated(player_id: str, player_name: str, position: int) -> GameEvent:
    return GameEvent(PLAYER_ELIMINATED, {
        "player_id": player_id,
        "player_name": player_name,
        "position": position,
    })


def victory(winner_id: str, winner_name: str, reason: str) -> GameEvent:
    """
    Emitted when the game is won.

    Args:
        winner_id: The winning player's id
        winner_name: Display name of the winner
        reason: "final_position" (reached the last cell) or "last_standing"
    """
    return GameEvent(VICTORY, {
        "winner_id": winner_id,
        "winner_name": winner_name,
        "reason": reason,
    })
