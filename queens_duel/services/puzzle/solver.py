from __future__ import annotations

from typing import List, Optional, Set

from .grid import BOARD_SIZE, Cell, RegionGrid, same_diagonal


def solve(regions: RegionGrid) -> Optional[List[Cell]]:
    """Find one queen per row such that columns, regions and diagonals never repeat.

    Depth-first backtracking, trying columns left to right in each row, so the
    answer for a given grid is always the same. Returns ``None`` when the
    partition admits no placement.
    """
    placed: List[Cell] = []
    used_cols: Set[int] = set()
    used_regions: Set[int] = set()

    def place(row: int) -> bool:
        if row >= BOARD_SIZE:
            return True
        for col in range(BOARD_SIZE):
            region_id = regions[row][col]
            if col in used_cols or region_id in used_regions:
                continue
            if any(same_diagonal(q, (row, col)) for q in placed):
                continue
            placed.append((row, col))
            used_cols.add(col)
            used_regions.add(region_id)
            if place(row + 1):
                return True
            placed.pop()
            used_cols.discard(col)
            used_regions.discard(region_id)
        return False

    if place(0):
        return placed
    return None
