"""
Event log records produced by turn resolution.

Each event type has its own dataclass carrying the turn number and enough
data to replay the transition without re-deriving it. The log is the only
thing presentation, replay writers and network sync need to consume.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import ClassVar, Optional

from .hexgrid import HexCoord


class EventType(Enum):
    UNIT_MOVED = "UnitMoved"
    UNITS_COLLIDED = "UnitsCollided"
    UNIT_DESTROYED = "UnitDestroyed"
    SHIP_BUILT = "ShipBuilt"
    SHIPYARD_DEPLOYED = "ShipyardDeployed"
    SHIP_REPAIRED = "ShipRepaired"
    SHIP_UPGRADED = "ShipUpgraded"
    STRUCTURE_UPGRADED = "StructureUpgraded"
    COMBAT_OCCURRED = "CombatOccurred"
    CONFLICT_DETECTED = "ConflictDetected"
    COLLISION_NEEDS_RESOLUTION = "CollisionNeedsResolution"
    COLLISION_RESOLVED = "CollisionResolved"
    CONSTRUCTION_PROGRESSED = "ConstructionProgressed"
    CONSTRUCTION_QUEUED = "ConstructionQueued"
    CONSTRUCTION_COMPLETED = "ConstructionCompleted"
    CONSTRUCTION_CANCELLED = "ConstructionCancelled"
    SHIPYARD_ATTACKED = "ShipyardAttacked"
    SHIPYARD_DESTROYED = "ShipyardDestroyed"
    PLAYER_ELIMINATED = "PlayerEliminated"
    GAME_WON = "GameWon"
    GAME_DRAWN = "GameDrawn"
    GOLD_EARNED = "GoldEarned"


@dataclass
class GameEvent:
    turn_number: int

    event_type: ClassVar[EventType]

    @property
    def message(self) -> str:
        return self.event_type.value


@dataclass
class UnitMovedEvent(GameEvent):
    unit_id: str
    from_position: HexCoord
    to_position: HexCoord
    path: list[HexCoord] = field(default_factory=list)
    movement_used: int = 0
    movement_remaining: int = 0
    remaining_path: list[HexCoord] = field(default_factory=list)

    event_type: ClassVar[EventType] = EventType.UNIT_MOVED

    @property
    def is_partial(self) -> bool:
        """The ordered path continues on a later turn."""
        return len(self.remaining_path) > 1

    @property
    def message(self) -> str:
        if self.is_partial:
            return f"Unit {self.unit_id} moved {self.movement_used} tiles (path continues)"
        return f"Unit {self.unit_id} moved from {self.from_position} to {self.to_position}"


@dataclass
class UnitsCollidedEvent(GameEvent):
    unit_ids: list[str]
    position: HexCoord

    event_type: ClassVar[EventType] = EventType.UNITS_COLLIDED

    @property
    def message(self) -> str:
        return f"{len(self.unit_ids)} units collided at {self.position}"


@dataclass
class UnitDestroyedEvent(GameEvent):
    unit_id: str
    owner_id: int
    position: HexCoord

    event_type: ClassVar[EventType] = EventType.UNIT_DESTROYED

    @property
    def message(self) -> str:
        return f"Unit {self.unit_id} (Player {self.owner_id}) was destroyed at {self.position}"


@dataclass
class ShipBuiltEvent(GameEvent):
    ship_id: str
    shipyard_id: str
    player_id: int
    position: HexCoord
    cost: int
    job_id: str = ""
    unit_type: str = "ship"

    event_type: ClassVar[EventType] = EventType.SHIP_BUILT

    @property
    def message(self) -> str:
        return f"Player {self.player_id} built {self.unit_type} at {self.position} for {self.cost} gold"


@dataclass
class ShipyardDeployedEvent(GameEvent):
    ship_id: str
    shipyard_id: str
    player_id: int
    position: HexCoord
    cost: int

    event_type: ClassVar[EventType] = EventType.SHIPYARD_DEPLOYED

    @property
    def message(self) -> str:
        return f"Player {self.player_id} deployed shipyard at {self.position}"


@dataclass
class ShipRepairedEvent(GameEvent):
    ship_id: str
    shipyard_id: str
    player_id: int
    old_health: int
    new_health: int
    cost: int

    event_type: ClassVar[EventType] = EventType.SHIP_REPAIRED

    @property
    def message(self) -> str:
        return (f"Player {self.player_id} repaired ship {self.ship_id} "
                f"({self.old_health} -> {self.new_health} HP) for {self.cost} gold")


@dataclass
class ShipUpgradedEvent(GameEvent):
    ship_id: str
    shipyard_id: str
    player_id: int
    upgrade: str  # "hull", "sails", "cannons" or "max_life"
    old_value: int
    new_value: int
    cost: int

    event_type: ClassVar[EventType] = EventType.SHIP_UPGRADED

    @property
    def message(self) -> str:
        return (f"Player {self.player_id} upgraded {self.upgrade} on ship {self.ship_id} "
                f"({self.old_value} -> {self.new_value}) for {self.cost} gold")


@dataclass
class StructureUpgradedEvent(GameEvent):
    structure_id: str
    player_id: int
    old_type: str
    new_type: str
    cost: int

    event_type: ClassVar[EventType] = EventType.STRUCTURE_UPGRADED

    @property
    def message(self) -> str:
        return f"Player {self.player_id} upgraded {self.structure_id} to {self.new_type}"


@dataclass
class CombatOccurredEvent(GameEvent):
    attacker_id: str
    defender_id: str
    position: HexCoord
    attacker_rolls: list[int]
    defender_rolls: list[int]
    damage_to_attacker: int
    damage_to_defender: int
    attacker_destroyed: bool = False
    defender_destroyed: bool = False

    event_type: ClassVar[EventType] = EventType.COMBAT_OCCURRED

    @property
    def message(self) -> str:
        return (f"Combat: {self.attacker_id} vs {self.defender_id} - Damage: "
                f"{self.damage_to_attacker} to attacker, {self.damage_to_defender} to defender")


@dataclass
class ConflictDetectedEvent(GameEvent):
    """A move was voided to keep hostile ships off the same tile."""
    unit_ids: list[str]
    position: HexCoord
    reason: str = ""

    event_type: ClassVar[EventType] = EventType.CONFLICT_DETECTED

    @property
    def message(self) -> str:
        return f"Conflict detected at {self.position} with {len(self.unit_ids)} units"


@dataclass
class CollisionNeedsResolutionEvent(GameEvent):
    """An encounter is waiting for per-unit decisions."""
    encounter_id: str
    encounter_type: str
    unit_ids: list[str]
    position: HexCoord
    contested: bool = False

    event_type: ClassVar[EventType] = EventType.COLLISION_NEEDS_RESOLUTION

    @property
    def message(self) -> str:
        return f"Collision at {self.position} needs decisions ({self.encounter_type})"


@dataclass
class CollisionResolvedEvent(GameEvent):
    encounter_id: str
    unit_ids: list[str]
    position: HexCoord
    resolution: str

    event_type: ClassVar[EventType] = EventType.COLLISION_RESOLVED

    @property
    def message(self) -> str:
        return self.resolution


@dataclass
class ConstructionProgressedEvent(GameEvent):
    job_id: str
    shipyard_id: str
    player_id: int
    turns_remaining: int
    turns_total: int

    event_type: ClassVar[EventType] = EventType.CONSTRUCTION_PROGRESSED


@dataclass
class ConstructionQueuedEvent(GameEvent):
    job_id: str
    shipyard_id: str
    player_id: int
    item_type: str
    cost: int
    queue_position: int

    event_type: ClassVar[EventType] = EventType.CONSTRUCTION_QUEUED

    @property
    def message(self) -> str:
        return f"Player {self.player_id} queued {self.item_type} at {self.shipyard_id} for {self.cost} gold"


@dataclass
class ConstructionCompletedEvent(GameEvent):
    job_id: str
    shipyard_id: str
    player_id: int
    unit_id: str

    event_type: ClassVar[EventType] = EventType.CONSTRUCTION_COMPLETED


@dataclass
class ConstructionCancelledEvent(GameEvent):
    job_id: str
    shipyard_id: str
    player_id: int
    refund: int

    event_type: ClassVar[EventType] = EventType.CONSTRUCTION_CANCELLED

    @property
    def message(self) -> str:
        return f"Player {self.player_id} cancelled {self.job_id}, refunded {self.refund} gold"


@dataclass
class ShipyardAttackedEvent(GameEvent):
    attacker_unit_id: str
    shipyard_id: str
    attacking_player_id: int
    defending_player_id: int
    position: HexCoord
    dice_roll: int
    success: bool

    event_type: ClassVar[EventType] = EventType.SHIPYARD_ATTACKED

    @property
    def message(self) -> str:
        outcome = "destroyed" if self.success else "failed to destroy"
        return (f"Player {self.attacking_player_id} rolled {self.dice_roll} and "
                f"{outcome} shipyard at {self.position}")


@dataclass
class ShipyardDestroyedEvent(GameEvent):
    shipyard_id: str
    owner_id: int
    position: HexCoord
    attacker_unit_id: Optional[str] = None

    event_type: ClassVar[EventType] = EventType.SHIPYARD_DESTROYED


@dataclass
class PlayerEliminatedEvent(GameEvent):
    player_id: int
    player_name: str

    event_type: ClassVar[EventType] = EventType.PLAYER_ELIMINATED

    @property
    def message(self) -> str:
        return f"Player {self.player_name} has been eliminated"


@dataclass
class GameWonEvent(GameEvent):
    player_id: int
    player_name: str

    event_type: ClassVar[EventType] = EventType.GAME_WON

    @property
    def message(self) -> str:
        return f"Player {self.player_name} wins!"


@dataclass
class GameDrawnEvent(GameEvent):
    """The last fleets sank together; nobody is left to win."""
    eliminated_player_ids: list[int] = field(default_factory=list)

    event_type: ClassVar[EventType] = EventType.GAME_DRAWN

    @property
    def message(self) -> str:
        return "No fleet survived. The game is a draw"


@dataclass
class GoldEarnedEvent(GameEvent):
    player_id: int
    amount: int
    base_income: int = 0
    shipyard_bonus: int = 0
    ship_bonus: int = 0
    total_gold: int = 0

    event_type: ClassVar[EventType] = EventType.GOLD_EARNED

    @property
    def message(self) -> str:
        return f"Player {self.player_id} earned {self.amount} gold (now {self.total_gold})"


def _plain(value):
    if isinstance(value, dict) and set(value) == {"q", "r"}:
        return [value["q"], value["r"]]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def event_to_dict(event: GameEvent) -> dict:
    """Flatten an event for JSON logs. Coordinates become [q, r] pairs."""
    data = _plain(asdict(event))
    data["type"] = event.event_type.value
    data["message"] = event.message
    return data


def events_of_type(events: list[GameEvent], event_type: EventType) -> list[GameEvent]:
    return [e for e in events if e.event_type == event_type]
