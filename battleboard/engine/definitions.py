"""
Static board definitions.
The track is seven segments of four positions each (1-28). The last cell of
every segment is an endpoint: a mandatory checkpoint and the only place
battles happen.
"""

from dataclasses import dataclass

SEGMENT_LENGTH = 4
SEGMENT_COUNT = 7
FINAL_POSITION = SEGMENT_LENGTH * SEGMENT_COUNT  # 28


@dataclass(frozen=True)
class Segment:
    """Four consecutive board positions; a player may only leave by sitting on end_position."""
    index: int  # 0-based, in track order
    positions: tuple[int, ...]
    end_position: int

    @property
    def start_position(self) -> int:
        return self.positions[0]

    def __contains__(self, position: object) -> bool:
        return position in self.positions

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "positions": list(self.positions),
            "end_position": self.end_position,
        }


BOARD_SEGMENTS: tuple[Segment, ...] = tuple(
    Segment(
        index=i,
        positions=tuple(range(i * SEGMENT_LENGTH + 1, (i + 1) * SEGMENT_LENGTH + 1)),
        end_position=(i + 1) * SEGMENT_LENGTH,
    )
    for i in range(SEGMENT_COUNT)
)

ENDPOINTS: frozenset[int] = frozenset(s.end_position for s in BOARD_SEGMENTS)

# Cosmetic color tags handed out in seat order when setup does not pick one.
PLAYER_COLORS = [
    {"name": "Red", "tag": "red"},
    {"name": "Blue", "tag": "blue"},
    {"name": "Green", "tag": "green"},
    {"name": "Yellow", "tag": "yellow"},
]


def segment_of(position: int) -> Segment | None:
    """Return the segment containing position, or None if it is off the board."""
    if not isinstance(position, int) or position < 1 or position > FINAL_POSITION:
        return None
    return BOARD_SEGMENTS[(position - 1) // SEGMENT_LENGTH]


def is_endpoint(position: int) -> bool:
    return position in ENDPOINTS


def default_color(seat_index: int) -> str:
    return PLAYER_COLORS[seat_index % len(PLAYER_COLORS)]["tag"]
