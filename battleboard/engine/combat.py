"""
Battle resolution system.
Two players who meet on an endpoint fight rounds of doubles-dice until one of
them runs out of hit points. Each round the attacker rolls two dice, then the
defender rolls two dice; doubles on exactly one side deal one damage to the
other side. The attacker role alternates every round regardless of outcome.
"""

from dataclasses import dataclass

from battleboard.engine import DICE_SIDES
from battleboard.engine.state import (
    ActiveBattle,
    BattleRoundResult,
    Player,
    BATTLE_READY,
    BATTLE_DEFENDER_ROLL,
    BATTLE_RESOLVE,
    BATTLE_FINISHED,
    ROLE_ATTACKER,
    ROLE_DEFENDER,
)

DAMAGE_PER_HIT = 1


@dataclass
class RoundResult:
    """Outcome of one resolved round."""
    attacker_id: str
    defender_id: str
    attacker_doubles: bool
    defender_doubles: bool
    attacker_damage: int
    defender_damage: int
    eliminated_id: str | None  # set when this round ended the battle


def is_doubles(dice: list[int]) -> bool:
    return len(dice) == 2 and dice[0] == dice[1]


def validate_dice(dice: list[int]) -> None:
    """Raise ValueError unless dice is exactly two values in 1..DICE_SIDES."""
    if not isinstance(dice, (list, tuple)) or len(dice) != 2:
        raise ValueError(f"Battle rolls need exactly two dice, got {dice!r}")
    for value in dice:
        if not isinstance(value, int) or not 1 <= value <= DICE_SIDES:
            raise ValueError(f"Die value must be between 1 and {DICE_SIDES}, got {value!r}")


def resolve_damage(attacker_doubles: bool, defender_doubles: bool) -> tuple[int, int]:
    """
    Damage rule for one round.

    Returns:
        (attacker_damage, defender_damage): hit points each side loses
    """
    if attacker_doubles and not defender_doubles:
        return 0, DAMAGE_PER_HIT
    if defender_doubles and not attacker_doubles:
        return DAMAGE_PER_HIT, 0
    return 0, 0


def start_battle(initiator: Player, occupant: Player) -> ActiveBattle:
    """The player who moved onto the endpoint attacks first."""
    return ActiveBattle(
        participant_ids=[initiator.id, occupant.id],
        hit_points={initiator.id: initiator.hit_points, occupant.id: occupant.hit_points},
        position=occupant.position,
    )


def due_role(battle: ActiveBattle) -> str | None:
    """Which side must roll next, or None if no roll is due (resolve pending or battle over)."""
    if battle.phase == BATTLE_READY:
        return ROLE_ATTACKER
    if battle.phase == BATTLE_DEFENDER_ROLL:
        return ROLE_DEFENDER
    return None


def roller_id(battle: ActiveBattle, role: str) -> str:
    return battle.attacker_id if role == ROLE_ATTACKER else battle.defender_id


def record_roll(battle: ActiveBattle, role: str, dice: list[int]) -> None:
    """
    Store one side's dice and advance the battle step.
    Raises ValueError if the role is not the one due or the dice are malformed.
    """
    if role not in (ROLE_ATTACKER, ROLE_DEFENDER):
        raise ValueError(f"Unknown battle role: {role!r}")
    expected = due_role(battle)
    if role != expected:
        raise ValueError(
            f"It is not the {role}'s turn to roll (battle step '{battle.phase}', due: {expected})")
    validate_dice(dice)

    if role == ROLE_ATTACKER:
        battle.attacker_dice = list(dice)
        battle.phase = BATTLE_DEFENDER_ROLL
    else:
        battle.defender_dice = list(dice)
        battle.phase = BATTLE_RESOLVE


def resolve_battle_round(battle: ActiveBattle) -> RoundResult:
    """
    Apply the damage rule to the recorded dice.

    Modifies battle in place:
    - battle-local hit points
    - battle_log (one BattleRoundResult appended)
    - on elimination: phase "finished" and winner_id
    - otherwise: roles swapped, dice cleared, phase back to "ready"
    """
    if battle.phase != BATTLE_RESOLVE or battle.attacker_dice is None or battle.defender_dice is None:
        raise ValueError(f"Both sides must roll before the round can be resolved (battle step '{battle.phase}')")

    attacker_id = battle.attacker_id
    defender_id = battle.defender_id
    attacker_doubles = is_doubles(battle.attacker_dice)
    defender_doubles = is_doubles(battle.defender_dice)
    attacker_damage, defender_damage = resolve_damage(attacker_doubles, defender_doubles)

    battle.hit_points[attacker_id] = max(0, battle.hit_points[attacker_id] - attacker_damage)
    battle.hit_points[defender_id] = max(0, battle.hit_points[defender_id] - defender_damage)

    battle.battle_log.append(BattleRoundResult(
        round_number=battle.round_number,
        attacker_id=attacker_id,
        defender_id=defender_id,
        attacker_dice=list(battle.attacker_dice),
        defender_dice=list(battle.defender_dice),
        attacker_doubles=attacker_doubles,
        defender_doubles=defender_doubles,
        attacker_damage=attacker_damage,
        defender_damage=defender_damage,
        attacker_hit_points=battle.hit_points[attacker_id],
        defender_hit_points=battle.hit_points[defender_id],
    ))

    eliminated_id = None
    if battle.hit_points[defender_id] == 0:
        eliminated_id = defender_id
        battle.winner_id = attacker_id
    elif battle.hit_points[attacker_id] == 0:
        eliminated_id = attacker_id
        battle.winner_id = defender_id

    if eliminated_id is not None:
        battle.phase = BATTLE_FINISHED
    else:
        # Role alternates every round, whoever took damage
        battle.attacker_index = 1 - battle.attacker_index
        battle.attacker_dice = None
        battle.defender_dice = None
        battle.round_number += 1
        battle.phase = BATTLE_READY

    return RoundResult(
        attacker_id=attacker_id,
        defender_id=defender_id,
        attacker_doubles=attacker_doubles,
        defender_doubles=defender_doubles,
        attacker_damage=attacker_damage,
        defender_damage=defender_damage,
        eliminated_id=eliminated_id,
    )
