"""
Dice-based ship-to-ship combat.

Attacker rolls three dice, defender rolls two. Both sides sort descending and
the top two of each are compared pairwise; the defender wins ties. Every lost
comparison costs the loser two points of damage.
"""

import random
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..config import CombatRules

logger = logging.getLogger(__name__)


@dataclass
class CombatResult:
    """Outcome of one attacker/defender pairing."""
    attacker_id: str
    defender_id: str
    attacker_rolls: list[int] = field(default_factory=list)
    defender_rolls: list[int] = field(default_factory=list)
    damage_to_attacker: int = 0
    damage_to_defender: int = 0

    @property
    def total_damage(self) -> int:
        return self.damage_to_attacker + self.damage_to_defender


class CombatResolver:
    """Seeded dice roller. Never touches the global random module."""

    def __init__(self, seed: int, rules: Optional[CombatRules] = None):
        self.seed = seed
        self.rules = rules or CombatRules()
        self.rng = random.Random(seed)

    def reset(self):
        """Rewind to the first roll of the seed."""
        self.rng = random.Random(self.seed)

    def roll_d6(self) -> int:
        return self.rng.randint(1, 6)

    def roll_dice(self, count: int) -> list[int]:
        """Roll count six-sided dice, sorted highest first."""
        return sorted((self.roll_d6() for _ in range(count)), reverse=True)

    def resolve(self, attacker_id: str, defender_id: str) -> CombatResult:
        attacker_rolls = self.roll_dice(self.rules.attacker_dice)
        defender_rolls = self.roll_dice(self.rules.defender_dice)

        result = CombatResult(
            attacker_id=attacker_id,
            defender_id=defender_id,
            attacker_rolls=attacker_rolls,
            defender_rolls=defender_rolls,
        )

        # Compare highest against highest, second against second
        for attack, defend in zip(attacker_rolls[:2], defender_rolls[:2]):
            if attack > defend:
                result.damage_to_defender += self.rules.damage_per_loss
            else:
                result.damage_to_attacker += self.rules.damage_per_loss

        logger.debug(
            f"{attacker_id} {attacker_rolls} vs {defender_id} {defender_rolls}: "
            f"{result.damage_to_attacker}/{result.damage_to_defender}"
        )
        return result
