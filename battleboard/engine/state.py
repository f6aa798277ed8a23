"""
Game state representation.
The reducer never mutates the state it is given; it works on a deep copy.
Includes dict conversion so renderers get a plain-data view.
"""

from dataclasses import dataclass, field
from copy import deepcopy
from typing import Any

from battleboard.engine import STARTING_POSITION, STARTING_HIT_POINTS

PHASE_SETUP = "setup"
PHASE_PLAYING = "playing"
PHASE_BATTLE = "battle"
PHASE_FINISHED = "finished"

GAME_PHASES = (PHASE_SETUP, PHASE_PLAYING, PHASE_BATTLE, PHASE_FINISHED)

# Battle sub-phases. The attacker's roll is taken from "ready".
BATTLE_READY = "ready"
BATTLE_DEFENDER_ROLL = "defender-roll"
BATTLE_RESOLVE = "resolve"
BATTLE_FINISHED = "finished"

ROLE_ATTACKER = "attacker"
ROLE_DEFENDER = "defender"


def _int(v: Any, default: int) -> int:
    try:
        return int(v) if v is not None else default
    except (TypeError, ValueError):
        return default


def _dice(v: Any) -> list[int] | None:
    if not isinstance(v, list):
        return None
    return [_int(x, 1) for x in v]


@dataclass
class Player:
    """A seat at the table. Position and health are the only fields that change during play."""
    id: str  # e.g. "player-0"
    name: str
    color: str  # cosmetic tag, e.g. "red"
    position: int = STARTING_POSITION
    hit_points: int = STARTING_HIT_POINTS
    is_active: bool = True  # False once eliminated in battle

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "position": self.position,
            "hit_points": self.hit_points,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            color=str(data.get("color") or ""),
            position=_int(data.get("position"), STARTING_POSITION),
            hit_points=_int(data.get("hit_points"), STARTING_HIT_POINTS),
            is_active=bool(data.get("is_active", True)),
        )


@dataclass
class BattleRoundResult:
    """Result of a single battle round (for the battle log)."""
    round_number: int
    attacker_id: str
    defender_id: str
    attacker_dice: list[int]
    defender_dice: list[int]
    attacker_doubles: bool
    defender_doubles: bool
    attacker_damage: int  # hit points the attacker lost this round
    defender_damage: int
    attacker_hit_points: int  # after this round
    defender_hit_points: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "round_number": self.round_number,
            "attacker_id": self.attacker_id,
            "defender_id": self.defender_id,
            "attacker_dice": self.attacker_dice,
            "defender_dice": self.defender_dice,
            "attacker_doubles": self.attacker_doubles,
            "defender_doubles": self.defender_doubles,
            "attacker_damage": self.attacker_damage,
            "defender_damage": self.defender_damage,
            "attacker_hit_points": self.attacker_hit_points,
            "defender_hit_points": self.defender_hit_points,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BattleRoundResult":
        if not isinstance(data, dict):
            data = {}
        return cls(
            round_number=_int(data.get("round_number"), 0),
            attacker_id=str(data.get("attacker_id") or ""),
            defender_id=str(data.get("defender_id") or ""),
            attacker_dice=_dice(data.get("attacker_dice")) or [],
            defender_dice=_dice(data.get("defender_dice")) or [],
            attacker_doubles=bool(data.get("attacker_doubles", False)),
            defender_doubles=bool(data.get("defender_doubles", False)),
            attacker_damage=_int(data.get("attacker_damage"), 0),
            defender_damage=_int(data.get("defender_damage"), 0),
            attacker_hit_points=_int(data.get("attacker_hit_points"), 0),
            defender_hit_points=_int(data.get("defender_hit_points"), 0),
        )


@dataclass
class ActiveBattle:
    """
    Tracks an ongoing battle between exactly two players.
    Hit points here are battle-local: the roster only sees them when the
    outcome is merged (complete_battle). Closing the battle discards them.
    """
    participant_ids: list[str]  # [initiator, occupant]
    hit_points: dict[str, int]  # player id -> battle-local hit points
    position: int  # the endpoint where the players met
    attacker_index: int = 0  # index into participant_ids; alternates every round
    phase: str = BATTLE_READY
    attacker_dice: list[int] | None = None
    defender_dice: list[int] | None = None
    round_number: int = 1
    battle_log: list[BattleRoundResult] = field(default_factory=list)
    winner_id: str | None = None

    @property
    def attacker_id(self) -> str:
        return self.participant_ids[self.attacker_index]

    @property
    def defender_id(self) -> str:
        return self.participant_ids[1 - self.attacker_index]

    @property
    def loser_id(self) -> str | None:
        if self.winner_id is None:
            return None
        return next(pid for pid in self.participant_ids if pid != self.winner_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "participant_ids": self.participant_ids,
            "hit_points": self.hit_points,
            "position": self.position,
            "attacker_index": self.attacker_index,
            "phase": self.phase,
            "attacker_dice": self.attacker_dice,
            "defender_dice": self.defender_dice,
            "round_number": self.round_number,
            "battle_log": [r.to_dict() for r in self.battle_log],
            "winner_id": self.winner_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActiveBattle":
        if not isinstance(data, dict):
            data = {}
        pids = data.get("participant_ids")
        if not isinstance(pids, list):
            pids = []
        hp = data.get("hit_points")
        if not isinstance(hp, dict):
            hp = {}
        log = data.get("battle_log") or []
        if not isinstance(log, list):
            log = []
        return cls(
            participant_ids=[str(x) for x in pids],
            hit_points={str(k): _int(v, 0) for k, v in hp.items()},
            position=_int(data.get("position"), 0),
            attacker_index=1 if _int(data.get("attacker_index"), 0) == 1 else 0,
            phase=str(data.get("phase") or BATTLE_READY),
            attacker_dice=_dice(data.get("attacker_dice")),
            defender_dice=_dice(data.get("defender_dice")),
            round_number=_int(data.get("round_number"), 1),
            battle_log=[BattleRoundResult.from_dict(r) for r in log if isinstance(r, dict)],
            winner_id=data.get("winner_id"),
        )


@dataclass
class GameState:
    """Complete game state. A fresh instance is the empty setup state."""
    phase: str = PHASE_SETUP
    players: list[Player] = field(default_factory=list)
    current_player_index: int = 0
    # Player ids of the two battlers while phase == "battle", else empty
    battle_participants: list[str] = field(default_factory=list)
    movement_die: int = 1  # face currently shown on the movement die
    last_roll: int = 0  # 0 after a rejected move or a turn change
    # Movement roll waiting for its delayed commit (None when nothing is pending)
    pending_steps: int | None = None
    active_battle: ActiveBattle | None = None
    winner: str | None = None  # player id
    turn_number: int = 1

    def copy(self) -> "GameState":
        """Return a deep copy of this game state."""
        return deepcopy(self)

    @property
    def current_player(self) -> Player | None:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    def get_player(self, player_id: str) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def index_of(self, player_id: str) -> int:
        for i, player in enumerate(self.players):
            if player.id == player_id:
                return i
        raise ValueError(f"Unknown player: {player_id}")

    @property
    def active_players(self) -> list[Player]:
        return [p for p in self.players if p.is_active]

    # ===== Serialization Methods =====

    def to_dict(self) -> dict[str, Any]:
        """Convert GameState to a plain dict (renderer snapshot)."""
        return {
            "phase": self.phase,
            "players": [p.to_dict() for p in self.players],
            "current_player_index": self.current_player_index,
            "battle_participants": self.battle_participants,
            "movement_die": self.movement_die,
            "last_roll": self.last_roll,
            "pending_steps": self.pending_steps,
            "active_battle": self.active_battle.to_dict() if self.active_battle else None,
            "winner": self.winner,
            "turn_number": self.turn_number,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameState":
        """Create GameState from a dict (missing keys fall back to setup defaults)."""
        players_raw = data.get("players") or []
        if not isinstance(players_raw, list):
            players_raw = []
        bp = data.get("battle_participants") or []
        if not isinstance(bp, list):
            bp = []
        pending = data.get("pending_steps")
        phase = str(data.get("phase") or PHASE_SETUP)
        return cls(
            phase=phase if phase in GAME_PHASES else PHASE_SETUP,
            players=[Player.from_dict(p) for p in players_raw if isinstance(p, dict)],
            current_player_index=_int(data.get("current_player_index"), 0),
            battle_participants=[str(x) for x in bp],
            movement_die=_int(data.get("movement_die"), 1),
            last_roll=_int(data.get("last_roll"), 0),
            pending_steps=_int(pending, 0) if pending is not None else None,
            active_battle=ActiveBattle.from_dict(data["active_battle"])
            if data.get("active_battle") else None,
            winner=data.get("winner"),
            turn_number=_int(data.get("turn_number"), 1),
        )
