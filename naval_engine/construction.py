"""
Shipyard build queues.

Each shipyard owns an ordered queue of job ids. Only the head job is
Building; every other job waits as Queued. Each turn the head job counts
down, and when it reaches zero a ship is launched at the yard and the next
job is promoted.
Naval Fortresses can also queue galleons, which launch with a heavier hull.

All queue mutations move gold in the same step: a job is either fully
recorded with its cost deducted, or nothing changes.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import RulesConfig
from .errors import EntityNotFoundError
from .events import (
    GameEvent, ShipBuiltEvent, ShipyardDeployedEvent,
    ConstructionProgressedEvent, ConstructionQueuedEvent,
    ConstructionCompletedEvent, ConstructionCancelledEvent,
)
from .hexgrid import HexGrid
from .players import PlayerManager
from .structures import StructureManager, StructureType
from .units import UnitManager, Unit, UnitType
from .validation import ValidationResult, is_harbor, is_ship

logger = logging.getLogger(__name__)

SHIP_ITEM = "Ship"
GALLEON_ITEM = "Galleon"


class JobStatus(Enum):
    QUEUED = "queued"
    BUILDING = "building"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class ConstructionJob:
    job_id: str
    shipyard_id: str
    player_id: int
    item_type: str
    turns_remaining: int
    turns_total: int
    cost_paid: int
    status: JobStatus = JobStatus.QUEUED

    @property
    def progress_percent(self) -> float:
        if self.turns_total <= 0:
            return 100.0
        return (self.turns_total - self.turns_remaining) / self.turns_total * 100.0

    def to_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "shipyard_id": self.shipyard_id,
            "player_id": self.player_id,
            "item_type": self.item_type,
            "turns_remaining": self.turns_remaining,
            "turns_total": self.turns_total,
            "cost_paid": self.cost_paid,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConstructionJob":
        return cls(
            job_id=data["job_id"],
            shipyard_id=data["shipyard_id"],
            player_id=data["player_id"],
            item_type=data.get("item_type", SHIP_ITEM),
            turns_remaining=data["turns_remaining"],
            turns_total=data["turns_total"],
            cost_paid=data["cost_paid"],
            status=JobStatus(data["status"]),
        )


@dataclass
class ConstructionResult:
    success: bool
    reason: str = ""
    job_id: Optional[str] = None
    events: list[GameEvent] = field(default_factory=list)


class ConstructionState:
    """Jobs indexed by id plus one ordered queue of job ids per shipyard."""

    def __init__(self, max_queue_size: int = 5):
        self.max_queue_size = max_queue_size
        self.active_jobs: dict[str, ConstructionJob] = {}
        self.shipyard_queues: dict[str, list[str]] = {}
        self.next_job_id = 0

    def new_job_id(self) -> str:
        job_id = f"job_{self.next_job_id}"
        self.next_job_id += 1
        return job_id

    def initialize_shipyard(self, shipyard_id: str):
        self.shipyard_queues.setdefault(shipyard_id, [])

    def remove_shipyard(self, shipyard_id: str) -> list[ConstructionJob]:
        """Drop a yard's queue, returning the jobs it held."""
        job_ids = self.shipyard_queues.pop(shipyard_id, [])
        return [self.active_jobs[j] for j in job_ids if j in self.active_jobs]

    def get_job(self, job_id: str) -> Optional[ConstructionJob]:
        return self.active_jobs.get(job_id)

    def get_queue_for_shipyard(self, shipyard_id: str) -> list[ConstructionJob]:
        return [self.active_jobs[j] for j in self.shipyard_queues.get(shipyard_id, [])]

    def get_queue_length(self, shipyard_id: str) -> int:
        return len(self.shipyard_queues.get(shipyard_id, []))

    def is_queue_full(self, shipyard_id: str) -> bool:
        return self.get_queue_length(shipyard_id) >= self.max_queue_size

    def get_active_job(self, shipyard_id: str) -> Optional[ConstructionJob]:
        queue = self.shipyard_queues.get(shipyard_id)
        if not queue:
            return None
        return self.active_jobs.get(queue[0])

    def promote_head(self, shipyard_id: str):
        head = self.get_active_job(shipyard_id)
        if head and head.status == JobStatus.QUEUED:
            head.status = JobStatus.BUILDING

    def clone(self) -> "ConstructionState":
        return ConstructionState.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        return {
            "max_queue_size": self.max_queue_size,
            "next_job_id": self.next_job_id,
            "jobs": [self.active_jobs[j].to_dict() for j in sorted(self.active_jobs)],
            "queues": {sid: list(q) for sid, q in sorted(self.shipyard_queues.items())},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConstructionState":
        state = cls(data.get("max_queue_size", 5))
        state.next_job_id = data.get("next_job_id", 0)
        for entry in data.get("jobs", []):
            job = ConstructionJob.from_dict(entry)
            state.active_jobs[job.job_id] = job
        state.shipyard_queues = {sid: list(q) for sid, q in data.get("queues", {}).items()}
        return state


class ConstructionValidator:
    def __init__(self, grid: HexGrid, structures: StructureManager, players: PlayerManager,
                 state: ConstructionState, config: RulesConfig):
        self.grid = grid
        self.structures = structures
        self.players = players
        self.state = state
        self.config = config

    def validate_queue_ship(self, player_id: int, shipyard_id: str) -> ValidationResult:
        shipyard = self.structures.get_structure(shipyard_id)
        if shipyard is None:
            return ValidationResult.fail("Shipyard not found")
        if not shipyard.is_shipyard:
            return ValidationResult.fail("Structure is not a shipyard")
        if shipyard.owner_id != player_id:
            return ValidationResult.fail("You don't own this shipyard")

        return self._check_queue_and_gold(player_id, shipyard_id, self.config.costs.build_ship)

    def validate_queue_galleon(self, player_id: int, shipyard_id: str) -> ValidationResult:
        fortress = self.structures.get_structure(shipyard_id)
        if fortress is None:
            return ValidationResult.fail("Shipyard not found")
        if fortress.type != StructureType.NAVAL_FORTRESS:
            return ValidationResult.fail("Only a Naval Fortress can build galleons")
        if fortress.owner_id != player_id:
            return ValidationResult.fail("You don't own this shipyard")
        return self._check_queue_and_gold(player_id, shipyard_id, self.config.costs.build_galleon)

    def _check_queue_and_gold(self, player_id: int, shipyard_id: str, cost: int) -> ValidationResult:
        if self.state.is_queue_full(shipyard_id):
            length = self.state.get_queue_length(shipyard_id)
            return ValidationResult.fail(f"Queue is full ({length}/{self.state.max_queue_size})")

        player = self.players.get_player(player_id)
        gold = player.gold if player else 0
        if gold < cost:
            return ValidationResult.fail(f"Insufficient gold (need {cost}g, have {gold}g)")
        return ValidationResult.ok()

    def validate_deploy_shipyard(self, player_id: int, unit: Unit) -> ValidationResult:
        if not is_ship(unit):
            return ValidationResult.fail("Only ships can be deployed as shipyards")
        if not is_harbor(self.grid, unit.position):
            return ValidationResult.fail("Ship must be on a harbor tile to deploy a shipyard")
        if self.structures.get_structure_at_position(unit.position) is not None:
            return ValidationResult.fail("A shipyard already exists at this location")

        cost = self.config.costs.deploy_shipyard
        player = self.players.get_player(player_id)
        gold = player.gold if player else 0
        if gold < cost:
            return ValidationResult.fail(f"Not enough gold. Need {cost}, have {gold}")
        return ValidationResult.ok()

    def validate_cancel_job(self, player_id: int, job_id: str) -> ValidationResult:
        job = self.state.get_job(job_id)
        if job is None:
            return ValidationResult.fail("Job not found")
        if job.player_id != player_id:
            return ValidationResult.fail("You don't own this construction job")
        if job.status == JobStatus.COMPLETED:
            return ValidationResult.fail("Job is already completed")
        if job.status == JobStatus.CANCELLED:
            return ValidationResult.fail("Job is already cancelled")
        return ValidationResult.ok()


class ConstructionProcessor:
    """Advances every build queue by one turn."""

    def __init__(self, state: ConstructionState, units: UnitManager,
                 structures: StructureManager, config: RulesConfig):
        self.state = state
        self.units = units
        self.structures = structures
        self.config = config

    def process_all_queues(self, turn: int) -> list[GameEvent]:
        events: list[GameEvent] = []

        for shipyard_id in sorted(self.state.shipyard_queues):
            head = self.state.get_active_job(shipyard_id)
            if head is None:
                continue
            if head.status == JobStatus.QUEUED:
                head.status = JobStatus.BUILDING
            if head.status != JobStatus.BUILDING:
                continue

            head.turns_remaining = max(0, head.turns_remaining - 1)
            events.append(ConstructionProgressedEvent(
                turn_number=turn,
                job_id=head.job_id,
                shipyard_id=shipyard_id,
                player_id=head.player_id,
                turns_remaining=head.turns_remaining,
                turns_total=head.turns_total,
            ))

            if head.turns_remaining == 0:
                events.extend(self._complete(head, turn))

        return events

    def _complete(self, job: ConstructionJob, turn: int) -> list[GameEvent]:
        shipyard = self.structures.get_structure(job.shipyard_id)
        if shipyard is None:
            raise EntityNotFoundError(
                f"Shipyard {job.shipyard_id} vanished before {job.job_id} completed",
                context={"job_id": job.job_id, "shipyard_id": job.shipyard_id},
            )
        if job.item_type == GALLEON_ITEM:
            unit_type, max_health = UnitType.GALLEON, self.config.ship.galleon_max_health
        else:
            unit_type, max_health = UnitType.SHIP, self.config.ship.base_max_health
        ship = self.units.create_unit(
            owner_id=job.player_id,
            position=shipyard.position,
            unit_type=unit_type,
            max_health=max_health,
        )
        ship.reset_movement(self.config)

        job.status = JobStatus.COMPLETED
        queue = self.state.shipyard_queues[job.shipyard_id]
        queue.pop(0)
        del self.state.active_jobs[job.job_id]
        self.state.promote_head(job.shipyard_id)

        logger.info(f"{job.shipyard_id} launched {ship.id} for player {job.player_id}")
        return [
            ShipBuiltEvent(
                turn_number=turn,
                ship_id=ship.id,
                shipyard_id=job.shipyard_id,
                player_id=job.player_id,
                position=shipyard.position,
                cost=job.cost_paid,
                job_id=job.job_id,
                unit_type=unit_type.value,
            ),
            ConstructionCompletedEvent(
                turn_number=turn,
                job_id=job.job_id,
                shipyard_id=job.shipyard_id,
                player_id=job.player_id,
                unit_id=ship.id,
            ),
        ]


class ConstructionManager:
    """Entry point for every construction command.

    Receives its collaborators explicitly; one instance per game session.
    """

    def __init__(
        self,
        grid: HexGrid,
        units: UnitManager,
        structures: StructureManager,
        players: PlayerManager,
        state: ConstructionState,
        config: RulesConfig,
    ):
        self.units = units
        self.structures = structures
        self.players = players
        self.state = state
        self.config = config
        self.validator = ConstructionValidator(grid, structures, players, state, config)
        self.processor = ConstructionProcessor(state, units, structures, config)

    def queue_ship(self, player_id: int, shipyard_id: str, turn: int) -> ConstructionResult:
        result = self.validator.validate_queue_ship(player_id, shipyard_id)
        if not result:
            return ConstructionResult(False, result.reason)
        return self._enqueue(player_id, shipyard_id, turn, SHIP_ITEM,
                             self.config.costs.build_ship, self.config.construction.ship_build_time)

    def queue_galleon(self, player_id: int, shipyard_id: str, turn: int) -> ConstructionResult:
        result = self.validator.validate_queue_galleon(player_id, shipyard_id)
        if not result:
            return ConstructionResult(False, result.reason)
        return self._enqueue(player_id, shipyard_id, turn, GALLEON_ITEM,
                             self.config.costs.build_galleon, self.config.construction.galleon_build_time)

    def _enqueue(self, player_id: int, shipyard_id: str, turn: int,
                 item_type: str, cost: int, build_time: int) -> ConstructionResult:
        self.state.initialize_shipyard(shipyard_id)
        queue = self.state.shipyard_queues[shipyard_id]

        job = ConstructionJob(
            job_id=self.state.new_job_id(),
            shipyard_id=shipyard_id,
            player_id=player_id,
            item_type=item_type,
            turns_remaining=build_time,
            turns_total=build_time,
            cost_paid=cost,
            status=JobStatus.BUILDING if not queue else JobStatus.QUEUED,
        )
        self.state.active_jobs[job.job_id] = job
        queue.append(job.job_id)
        self.players.get_player(player_id).gold -= cost

        logger.info(f"Player {player_id} queued {job.job_id} at {shipyard_id} ({job.status.value})")
        event = ConstructionQueuedEvent(
            turn_number=turn,
            job_id=job.job_id,
            shipyard_id=shipyard_id,
            player_id=player_id,
            item_type=job.item_type,
            cost=cost,
            queue_position=len(queue) - 1,
        )
        return ConstructionResult(True, job_id=job.job_id, events=[event])

    def deploy_shipyard(self, player_id: int, unit_id: str, turn: int) -> ConstructionResult:
        """Consume a ship to found a shipyard on its harbor."""
        unit = self.units.get_unit(unit_id)
        if unit is None:
            return ConstructionResult(False, "Unit does not exist")
        if unit.owner_id != player_id:
            return ConstructionResult(False, "Player does not own this unit")
        result = self.validator.validate_deploy_shipyard(player_id, unit)
        if not result:
            return ConstructionResult(False, result.reason)

        cost = self.config.costs.deploy_shipyard
        position = unit.position
        self.players.get_player(player_id).gold -= cost
        shipyard = self.structures.create_structure(
            owner_id=player_id,
            position=position,
            structure_type=StructureType.SHIPYARD,
            max_health=self.config.structure_max_health(StructureType.SHIPYARD),
            tier=self.config.structure_tier(StructureType.SHIPYARD),
        )
        self.state.initialize_shipyard(shipyard.id)
        self.units.remove_unit(unit_id)

        logger.info(f"Player {player_id} deployed {shipyard.id} at {position} from {unit_id}")
        event = ShipyardDeployedEvent(
            turn_number=turn,
            ship_id=unit_id,
            shipyard_id=shipyard.id,
            player_id=player_id,
            position=position,
            cost=cost,
        )
        return ConstructionResult(True, events=[event])

    def cancel_job(self, player_id: int, job_id: str, turn: int,
                   refund_percent: Optional[float] = None) -> ConstructionResult:
        result = self.validator.validate_cancel_job(player_id, job_id)
        if not result:
            return ConstructionResult(False, result.reason)

        if refund_percent is None:
            refund_percent = self.config.construction.refund_percent

        job = self.state.get_job(job_id)
        refund = round(job.cost_paid * refund_percent)
        was_head = self.state.get_active_job(job.shipyard_id) is job

        job.status = JobStatus.CANCELLED
        queue = self.state.shipyard_queues.get(job.shipyard_id, [])
        if job_id in queue:
            queue.remove(job_id)
        del self.state.active_jobs[job_id]
        if was_head:
            self.state.promote_head(job.shipyard_id)

        player = self.players.get_player(player_id)
        if player:
            player.gold += refund

        logger.info(f"Player {player_id} cancelled {job_id}, refund {refund}g")
        event = ConstructionCancelledEvent(
            turn_number=turn,
            job_id=job_id,
            shipyard_id=job.shipyard_id,
            player_id=player_id,
            refund=refund,
        )
        return ConstructionResult(True, job_id=job_id, events=[event])

    def process_turn(self, turn: int) -> list[GameEvent]:
        events = []
        # Queues whose yard no longer exists are dropped before anything builds
        for shipyard_id in sorted(self.state.shipyard_queues):
            if self.structures.get_structure(shipyard_id) is None:
                events.extend(self.on_shipyard_destroyed(shipyard_id, turn))
        events.extend(self.processor.process_all_queues(turn))
        return events

    def on_shipyard_destroyed(self, shipyard_id: str, turn: int) -> list[GameEvent]:
        """Cancel every job of a lost yard. Nothing is refunded."""
        events = []
        for job in self.state.remove_shipyard(shipyard_id):
            job.status = JobStatus.CANCELLED
            del self.state.active_jobs[job.job_id]
            events.append(ConstructionCancelledEvent(
                turn_number=turn,
                job_id=job.job_id,
                shipyard_id=shipyard_id,
                player_id=job.player_id,
                refund=0,
            ))
        return events
