"""
Ship-versus-shipyard assaults.

A single d6 from the shared combat resolver; a roll at or above the capture
threshold destroys the yard.
"""

from dataclasses import dataclass

from .base import CombatResolver


@dataclass
class ShipyardAssaultResult:
    attacker_id: str
    shipyard_id: str
    dice_roll: int
    success: bool


class ShipyardAssault:
    def __init__(self, resolver: CombatResolver):
        self.resolver = resolver

    def resolve(self, attacker_id: str, shipyard_id: str) -> ShipyardAssaultResult:
        roll = self.resolver.roll_d6()
        return ShipyardAssaultResult(
            attacker_id=attacker_id,
            shipyard_id=shipyard_id,
            dice_roll=roll,
            success=roll >= self.resolver.rules.shipyard_capture_roll,
        )
