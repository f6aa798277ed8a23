"""
Single place for timing configuration.
Both delays only pace the presentation; no rule depends on them.
Override with BATTLEBOARD_MOVE_DELAY / BATTLEBOARD_BATTLE_DELAY (seconds).
"""

import os


def _delay_from_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


# Between showing the movement die and committing the move.
MOVE_COMMIT_DELAY = _delay_from_env("BATTLEBOARD_MOVE_DELAY", 1.0)

# Between a battle reaching "finished" and reporting the winner to the game.
BATTLE_COMPLETE_DELAY = _delay_from_env("BATTLEBOARD_BATTLE_DELAY", 2.0)
