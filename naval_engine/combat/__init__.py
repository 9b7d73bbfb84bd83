"""
Combat resolution modules.

Ship-to-ship dice combat first, then shipyard assaults.
"""

from .base import CombatResolver, CombatResult
from .shipyard import ShipyardAssault, ShipyardAssaultResult

__all__ = [
    "CombatResolver",
    "CombatResult",
    "ShipyardAssault",
    "ShipyardAssaultResult",
]
