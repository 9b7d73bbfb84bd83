"""
Hex grid spatial model for the naval engine.

Uses axial coordinates (q, r) with flat-top orientation.
Origin is at map centre, positive q going east and positive r going southeast.
"""

import heapq
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class HexCoord:
    """Axial hex coordinate. Equality, hashing and ordering use (q, r)."""
    q: int
    r: int

    # E, NE, NW, W, SW, SE
    DIRECTIONS = ((1, 0), (1, -1), (0, -1), (-1, 0), (-1, 1), (0, 1))

    @property
    def s(self) -> int:
        """Third cube coordinate (q + r + s = 0)."""
        return -self.q - self.r

    def neighbor(self, direction: int) -> "HexCoord":
        dq, dr = self.DIRECTIONS[direction % 6]
        return HexCoord(self.q + dq, self.r + dr)

    def neighbors(self) -> list["HexCoord"]:
        return [self.neighbor(i) for i in range(6)]

    def distance(self, other: "HexCoord") -> int:
        return (abs(self.q - other.q) + abs(self.r - other.r) + abs(self.s - other.s)) // 2

    def direction_to(self, other: "HexCoord") -> Optional[int]:
        """Direction index towards an adjacent coordinate, or None."""
        delta = (other.q - self.q, other.r - self.r)
        if delta in self.DIRECTIONS:
            return self.DIRECTIONS.index(delta)
        return None

    @staticmethod
    def opposite_direction(direction: int) -> int:
        return (direction + 3) % 6

    def to_list(self) -> list[int]:
        return [self.q, self.r]

    @classmethod
    def from_list(cls, data) -> "HexCoord":
        return cls(int(data[0]), int(data[1]))

    def __str__(self):
        return f"({self.q}, {self.r})"


class TileType(Enum):
    SEA = "sea"
    LAND = "land"
    HARBOR = "harbor"


@dataclass
class Tile:
    """Individual hex tile."""
    coord: HexCoord
    type: TileType
    island_id: int = -1  # -1 = open sea

    @property
    def is_navigable(self) -> bool:
        return self.type in (TileType.SEA, TileType.HARBOR)


class HexGrid:
    """Static tile index keyed by axial coordinate."""

    def __init__(self):
        self.tiles: dict[HexCoord, Tile] = {}

    def add_tile(self, tile: Tile):
        self.tiles[tile.coord] = tile

    def get_tile(self, coord: HexCoord) -> Optional[Tile]:
        return self.tiles.get(coord)

    def has_tile(self, coord: HexCoord) -> bool:
        return coord in self.tiles

    def is_navigable(self, coord: HexCoord) -> bool:
        tile = self.tiles.get(coord)
        return tile is not None and tile.is_navigable

    def get_navigable_neighbors(self, coord: HexCoord) -> list[HexCoord]:
        return [n for n in coord.neighbors() if self.is_navigable(n)]

    def get_all_tiles(self) -> list[Tile]:
        return [self.tiles[c] for c in sorted(self.tiles)]

    def get_tiles_of_type(self, tile_type: TileType) -> list[Tile]:
        return [t for t in self.get_all_tiles() if t.type == tile_type]

    def get_stats(self) -> dict:
        """Get map statistics."""
        type_counts = {t.value: 0 for t in TileType}
        islands = set()
        for tile in self.tiles.values():
            type_counts[tile.type.value] += 1
            if tile.island_id >= 0:
                islands.add(tile.island_id)

        return {
            "total_tiles": len(self.tiles),
            "type_distribution": type_counts,
            "islands": len(islands),
        }

    def to_dict(self) -> dict:
        return {
            "tiles": [
                {"coord": t.coord.to_list(), "type": t.type.value, "island_id": t.island_id}
                for t in self.get_all_tiles()
            ]
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HexGrid":
        grid = cls()
        for entry in data.get("tiles", []):
            grid.add_tile(Tile(
                coord=HexCoord.from_list(entry["coord"]),
                type=TileType(entry["type"]),
                island_id=entry.get("island_id", -1),
            ))
        return grid


def is_continuous_path(path: list[HexCoord]) -> bool:
    """Every step must be exactly one hex from the previous one."""
    return all(prev.distance(curr) == 1 for prev, curr in zip(path, path[1:]))


def find_path(grid: HexGrid, start: HexCoord, goal: HexCoord,
              max_distance: int = 100) -> Optional[list[HexCoord]]:
    """Find the shortest navigable path using A*.

    Returns the path from start to goal inclusive, or None if either end is
    not navigable or the goal cannot be reached within max_distance steps.
    Frontier ties are broken by g-score and then by coordinate so the same
    input always yields the same path.
    """
    if not grid.is_navigable(start) or not grid.is_navigable(goal):
        return None

    if start == goal:
        return [start]

    open_set = [(start.distance(goal), 0, start)]
    came_from: dict[HexCoord, HexCoord] = {}
    g_score = {start: 0}
    closed: set[HexCoord] = set()

    while open_set:
        _, g, current = heapq.heappop(open_set)

        if current == goal:
            # Reconstruct path
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            return list(reversed(path))

        if current in closed:
            continue
        closed.add(current)

        for neighbor in grid.get_navigable_neighbors(current):
            if neighbor in closed:
                continue

            tentative_g = g + 1
            if tentative_g > max_distance:
                continue

            if neighbor not in g_score or tentative_g < g_score[neighbor]:
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                f_score = tentative_g + neighbor.distance(goal)
                heapq.heappush(open_set, (f_score, tentative_g, neighbor))

    logger.debug(f"No path from {start} to {goal} within {max_distance}")
    return None
