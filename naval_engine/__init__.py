"""
Deterministic turn-resolution engine for a simultaneous-turn naval strategy game.

Core modules:
- hexgrid: Axial hex coordinates, tiles and A* pathfinding
- mapgen: Seeded sea-and-islands map generation
- units / structures / players: Entity stores
- orders: Order records and resolution priority
- validation: Order admission checks
- combat/: Dice combat and shipyard assaults
- encounters: PASSING / ENTRY movement conflicts awaiting decisions
- construction: Shipyard build queues
- events: Event log records
- turn: Game state aggregate and phase sequencing
"""

from .config import RulesConfig, IncomeRules
from .errors import (
    NavalEngineError, ConfigError, EntityNotFoundError, SnapshotError,
    EncounterError, EncounterNotFoundError, EncounterResolvedError,
    UnitNotInEncounterError, WrongEncounterTypeError,
)
from .hexgrid import HexCoord, HexGrid, Tile, TileType, find_path, is_continuous_path
from .mapgen import MapGenerator, find_spawn_positions
from .units import Unit, UnitManager, UnitType
from .structures import Structure, StructureManager, StructureType, NEUTRAL_OWNER
from .players import Player, PlayerManager, PlayerType
from .orders import (
    Order, OrderType, MoveOrder, DeployShipyardOrder, BuildShipOrder, BuildGalleonOrder,
    RepairShipOrder, UpgradeShipOrder, UpgradeSailsOrder, UpgradeCannonsOrder,
    UpgradeMaxLifeOrder, UpgradeStructureOrder, CancelConstructionOrder,
    AttackShipyardOrder, sort_orders, order_to_dict, order_from_dict,
)
from .validation import OrderValidator, ValidationResult
from .combat import CombatResolver, CombatResult, ShipyardAssault, ShipyardAssaultResult
from .encounters import (
    Encounter, EncounterTracker, EncounterType, PassingDecision, EntryDecision,
)
from .construction import (
    ConstructionJob, ConstructionManager, ConstructionProcessor,
    ConstructionResult, ConstructionState, ConstructionValidator, JobStatus,
)
from .events import (
    GameEvent, EventType, GoldEarnedEvent, GameDrawnEvent, event_to_dict, events_of_type,
)
from .turn import GameState, TurnResolver, Phase

__all__ = [
    # Config and errors
    "RulesConfig", "IncomeRules",
    "NavalEngineError", "ConfigError", "EntityNotFoundError", "SnapshotError",
    "EncounterError", "EncounterNotFoundError", "EncounterResolvedError",
    "UnitNotInEncounterError", "WrongEncounterTypeError",
    # Map
    "HexCoord", "HexGrid", "Tile", "TileType", "find_path", "is_continuous_path",
    "MapGenerator", "find_spawn_positions",
    # Entities
    "Unit", "UnitManager", "UnitType",
    "Structure", "StructureManager", "StructureType", "NEUTRAL_OWNER",
    "Player", "PlayerManager", "PlayerType",
    # Orders
    "Order", "OrderType", "MoveOrder", "DeployShipyardOrder", "BuildShipOrder", "BuildGalleonOrder",
    "RepairShipOrder", "UpgradeShipOrder", "UpgradeSailsOrder", "UpgradeCannonsOrder",
    "UpgradeMaxLifeOrder", "UpgradeStructureOrder", "CancelConstructionOrder",
    "AttackShipyardOrder", "sort_orders", "order_to_dict", "order_from_dict",
    "OrderValidator", "ValidationResult",
    # Combat
    "CombatResolver", "CombatResult", "ShipyardAssault", "ShipyardAssaultResult",
    # Encounters
    "Encounter", "EncounterTracker", "EncounterType", "PassingDecision", "EntryDecision",
    # Construction
    "ConstructionJob", "ConstructionManager", "ConstructionProcessor",
    "ConstructionResult", "ConstructionState", "ConstructionValidator", "JobStatus",
    # Events and turns
    "GameEvent", "EventType", "GoldEarnedEvent", "GameDrawnEvent", "event_to_dict", "events_of_type",
    "GameState", "TurnResolver", "Phase",
]
