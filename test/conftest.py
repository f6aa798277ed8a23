import pytest

from battleboard.engine.roster import build_roster
from battleboard.engine.utils import initialize_game_state


@pytest.fixture
def make_state():
    """
    Build a playing-phase state.

    make_state(positions=[3, 1], current=0, hit_points=None, active=None)
    seats one player per position, named A, B, C, ...
    """
    def _make(positions, current=0, hit_points=None, active=None):
        names = [chr(ord("A") + i) for i in range(len(positions))]
        state = initialize_game_state(build_roster(names))
        for i, position in enumerate(positions):
            state.players[i].position = position
            if hit_points is not None:
                state.players[i].hit_points = hit_points[i]
            if active is not None:
                state.players[i].is_active = active[i]
        state.current_player_index = current
        return state

    return _make
