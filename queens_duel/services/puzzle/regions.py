from __future__ import annotations

import random
from typing import List, Optional, Tuple

from .grid import (
    BOARD_SIZE,
    MAX_REGION_SIZE,
    MIN_REGION_SIZE,
    NUM_REGIONS,
    Cell,
    MutableGrid,
    PuzzleGenerationError,
    neighbors,
)


class RegionGenerationError(PuzzleGenerationError):
    pass


class RegionGenerator:
    """Partitions the board into contiguous colored regions by randomized flood fill.

    Each region id gets a random seed cell and grows towards a random target
    size. A region that ends up too small is wiped and reseeded; a grid that
    leaves cells uncovered is thrown away and started over. Both retries are
    bounded so a bad run surfaces as ``RegionGenerationError`` instead of
    spinning forever.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        max_attempts: int = 20000,
        max_region_retries: int = 64,
    ):
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts
        self.max_region_retries = max_region_retries
        self.last_attempts = 0

    def generate(self) -> Tuple[Tuple[int, ...], ...]:
        for attempt in range(1, self.max_attempts + 1):
            grid = self._attempt()
            if grid is not None:
                self.last_attempts = attempt
                return tuple(tuple(row) for row in grid)  # type: ignore[arg-type]
        self.last_attempts = self.max_attempts
        raise RegionGenerationError(
            f'Could not partition the board into {NUM_REGIONS} regions '
            f'after {self.max_attempts} attempts'
        )

    def _attempt(self) -> Optional[MutableGrid]:
        grid: MutableGrid = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        for region_id in range(NUM_REGIONS):
            if not self._place_region(grid, region_id):
                return None
        if any(cell is None for row in grid for cell in row):
            return None
        sizes = [0] * NUM_REGIONS
        for row in grid:
            for cell in row:
                sizes[cell] += 1  # type: ignore[index]
        if any(size < MIN_REGION_SIZE for size in sizes):
            return None
        return grid

    def _place_region(self, grid: MutableGrid, region_id: int) -> bool:
        for _ in range(self.max_region_retries):
            free = [(r, c) for r in range(BOARD_SIZE) for c in range(BOARD_SIZE) if grid[r][c] is None]
            if not free:
                return False
            seed = self.rng.choice(free)
            cells = self._grow(grid, seed, region_id)
            if len(cells) >= MIN_REGION_SIZE:
                return True
            # Wipe exactly what this pass wrote; other regions stay intact.
            for r, c in cells:
                grid[r][c] = None
        return False

    def _grow(self, grid: MutableGrid, seed: Cell, region_id: int) -> List[Cell]:
        target = self.rng.randint(MIN_REGION_SIZE, MAX_REGION_SIZE)
        grid[seed[0]][seed[1]] = region_id
        cells = [seed]
        frontier = [seed]
        while frontier and len(cells) < target:
            row, col = frontier.pop(self.rng.randrange(len(frontier)))
            for r, c in neighbors(row, col):
                if grid[r][c] is not None:
                    continue
                grid[r][c] = region_id
                cells.append((r, c))
                frontier.append((r, c))
                if len(cells) >= target:
                    break
        return cells
