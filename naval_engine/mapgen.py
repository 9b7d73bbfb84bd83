"""
Seeded map generation: a disc of open sea dotted with islands.

Every island is land except for exactly one harbor tile.
"""

import math
import random
import logging
from collections import deque
from typing import Optional

from .hexgrid import HexCoord, HexGrid, Tile, TileType

logger = logging.getLogger(__name__)


class MapGenerator:
    """Generates a HexGrid from a seed. Same seed, same map."""

    def __init__(self, seed: int):
        self.seed = seed
        self.rng = random.Random(seed)

    def generate(
        self,
        sea_tiles: int = 500,
        islands: int = 25,
        min_island_size: int = 4,
        max_island_size: int = 8,
    ) -> HexGrid:
        grid = HexGrid()
        center = HexCoord(0, 0)
        radius = math.ceil(math.sqrt(sea_tiles / math.pi))

        # Grow the sea breadth-first from the centre
        sea: list[HexCoord] = [center]
        seen = {center}
        frontier = deque([center])
        while len(sea) < sea_tiles and frontier:
            current = frontier.popleft()
            for neighbor in current.neighbors():
                if neighbor in seen or neighbor.distance(center) > radius:
                    continue
                seen.add(neighbor)
                sea.append(neighbor)
                frontier.append(neighbor)
                if len(sea) >= sea_tiles:
                    break

        for coord in sea:
            grid.add_tile(Tile(coord, TileType.SEA))

        used: set[HexCoord] = set()
        placed = 0
        for island_id in range(islands):
            island_center = self._pick_island_center(sea, used)
            if island_center is None:
                continue

            size = self.rng.randint(min_island_size, max_island_size)
            island = self._grow_island(island_center, size, seen, used)
            if not island:
                continue

            harbor_index = self.rng.randrange(len(island))
            for i, coord in enumerate(island):
                tile_type = TileType.HARBOR if i == harbor_index else TileType.LAND
                grid.add_tile(Tile(coord, tile_type, island_id))
                used.add(coord)
            placed += 1

        logger.info(f"Map generated with seed {self.seed}: {len(sea)} tiles, {placed} islands")
        return grid

    def _pick_island_center(self, sea: list[HexCoord], used: set[HexCoord]) -> Optional[HexCoord]:
        for _ in range(100):
            candidate = sea[self.rng.randrange(len(sea))]
            if candidate not in used:
                return candidate
        return None

    def _grow_island(self, center: HexCoord, size: int,
                     valid: set[HexCoord], used: set[HexCoord]) -> list[HexCoord]:
        if center in used or center not in valid:
            return []

        island = [center]
        members = {center}
        frontier = deque([center])
        while len(island) < size and frontier:
            current = frontier.popleft()
            neighbors = current.neighbors()
            self.rng.shuffle(neighbors)
            for neighbor in neighbors:
                if neighbor in members or neighbor in used or neighbor not in valid:
                    continue
                island.append(neighbor)
                members.add(neighbor)
                frontier.append(neighbor)
                if len(island) >= size:
                    break

        return island


def find_spawn_positions(grid: HexGrid, player_count: int) -> list[HexCoord]:
    """Pick one open-sea starting tile per player, spread around the map.

    Candidates are sea tiles next to a harbor so every player can found a
    shipyard on turn one. Candidates are ordered by angle around the origin
    and sampled at even intervals.
    """
    candidates = []
    for tile in grid.get_tiles_of_type(TileType.SEA):
        if any(grid.get_tile(n) and grid.get_tile(n).type == TileType.HARBOR
               for n in tile.coord.neighbors()):
            candidates.append(tile.coord)

    if len(candidates) < player_count:
        candidates = [t.coord for t in grid.get_tiles_of_type(TileType.SEA)]
    if not candidates or player_count <= 0:
        return []

    def angle(coord: HexCoord) -> float:
        x = 1.5 * coord.q
        y = math.sqrt(3) * (coord.r + coord.q / 2)
        return math.atan2(y, x)

    candidates.sort(key=lambda c: (angle(c), c))
    step = len(candidates) / player_count
    return [candidates[int(i * step)] for i in range(player_count)]
