"""
Battle Board Game Engine
Core rules only: no rendering, persistence, or networking.
"""

DICE_SIDES = 6

STARTING_POSITION = 1
STARTING_HIT_POINTS = 3

MIN_PLAYERS = 2
MAX_PLAYERS = 4
