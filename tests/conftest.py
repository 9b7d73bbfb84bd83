"""Shared test fixtures and helpers."""

import pytest

from naval_engine import (
    RulesConfig, IncomeRules, GameState, TurnResolver, HexCoord, HexGrid, Tile, TileType,
    PlayerManager, PlayerType, ConstructionState, StructureType,
)

# --- Map layout ---

MAP_RADIUS = 6
HARBOR = HexCoord(-3, 0)
LAND = (HexCoord(-4, 0), HexCoord(-4, 1))
# A corner of the map where a spare ship can idle without meeting anyone
FAR_CORNER = HexCoord(-5, 5)


def make_grid(radius: int = MAP_RADIUS, land=LAND, harbors=(HARBOR,)) -> HexGrid:
    """Open-sea hexagon of the given radius with a small island."""
    grid = HexGrid()
    origin = HexCoord(0, 0)
    for q in range(-radius, radius + 1):
        for r in range(-radius, radius + 1):
            coord = HexCoord(q, r)
            if coord.distance(origin) <= radius:
                grid.add_tile(Tile(coord, TileType.SEA))
    for coord in land:
        grid.add_tile(Tile(coord, TileType.LAND, island_id=0))
    for coord in harbors:
        grid.add_tile(Tile(coord, TileType.HARBOR, island_id=0))
    return grid


def make_state(players: int = 2, gold: int = 500) -> GameState:
    manager = PlayerManager()
    for i in range(players):
        manager.add_player(f"Player {i}", PlayerType.HUMAN, gold=gold)
    return GameState(grid=make_grid(), players=manager, construction=ConstructionState(5))


def add_ship(state: GameState, owner_id: int, q: int, r: int, **attrs):
    unit = state.units.create_unit(owner_id, HexCoord(q, r))
    for key, value in attrs.items():
        setattr(unit, key, value)
    return unit


def add_shipyard(state: GameState, owner_id: int, position: HexCoord = HARBOR,
                 structure_type: StructureType = StructureType.SHIPYARD):
    structure = state.structures.create_structure(owner_id, position, structure_type)
    state.construction.initialize_shipyard(structure.id)
    return structure


def path(*coords) -> tuple:
    """path((0, 0), (1, 0)) -> tuple of HexCoord."""
    return tuple(HexCoord(q, r) for q, r in coords)


class FixedDice:
    """Stand-in for random.Random that hands out predetermined d6 results."""

    def __init__(self, rolls):
        self.rolls = list(rolls)

    def randint(self, low, high):
        return self.rolls.pop(0)


# --- Fixtures ---


@pytest.fixture
def config():
    return RulesConfig()


@pytest.fixture
def grid():
    return make_grid()


@pytest.fixture
def state():
    """Two players with 500 gold each, no units yet."""
    return make_state()


@pytest.fixture
def resolver(state, config):
    """Resolver with income switched off so gold only moves through orders."""
    config.income = IncomeRules(base=0, per_shipyard=0, per_ship=0)
    return TurnResolver(state, config, combat_seed=7)
