"""
Player setup contract.
The setup collaborator hands over an ordered list of descriptors (name, color);
they are validated here and turned into seated Player records.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from battleboard.engine import MIN_PLAYERS, MAX_PLAYERS
from battleboard.engine.definitions import default_color
from battleboard.engine.state import Player


class PlayerDescriptor(BaseModel):
    name: str = ""
    color: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class RosterRequest(BaseModel):
    players: list[PlayerDescriptor] = Field(..., min_length=MIN_PLAYERS, max_length=MAX_PLAYERS)


def _as_descriptor(entry: Any) -> Any:
    # Bare strings are accepted as names
    if isinstance(entry, str):
        return {"name": entry}
    if isinstance(entry, Player):
        return {"name": entry.name, "color": entry.color}
    return entry


def build_roster(descriptors: list[Any]) -> list[Player]:
    """
    Validate descriptors and build players in seat order.

    Blank names become "Player N"; missing colors are taken from the color
    table in seat order. Ids are "player-<seat index>".
    Raises pydantic.ValidationError (a ValueError) for too few or too many players.
    """
    request = RosterRequest(players=[_as_descriptor(d) for d in descriptors])
    return [
        Player(
            id=f"player-{index}",
            name=descriptor.name or f"Player {index + 1}",
            color=descriptor.color or default_color(index),
        )
        for index, descriptor in enumerate(request.players)
    ]
