"""
Player setup descriptors.
"""

import pytest
from pydantic import ValidationError

from battleboard.engine.roster import PlayerDescriptor, build_roster
from battleboard.engine.state import Player


def test_names_and_default_colors_in_seat_order():
    players = build_roster(["Ann", "Bob", "Cy"])

    assert [p.id for p in players] == ["player-0", "player-1", "player-2"]
    assert [p.color for p in players] == ["red", "blue", "green"]
    assert all(p.position == 1 and p.hit_points == 3 and p.is_active for p in players)


def test_blank_names_get_seat_defaults():
    players = build_roster(["  ", {"name": "Bea", "color": "purple"}])

    assert players[0].name == "Player 1"
    assert players[1].name == "Bea"
    assert players[1].color == "purple"


def test_accepts_models_and_players():
    players = build_roster([
        PlayerDescriptor(name=" Ann "),
        Player(id="ignored", name="Bob", color="yellow"),
    ])

    assert players[0].name == "Ann"
    assert players[1].id == "player-1"
    assert players[1].color == "yellow"


@pytest.mark.parametrize("names", [[], ["Solo"], ["A", "B", "C", "D", "E"]])
def test_player_count_enforced(names):
    with pytest.raises(ValidationError):
        build_roster(names)
