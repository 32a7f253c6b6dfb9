from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple

BOARD_SIZE = 8
NUM_REGIONS = 8
MIN_REGION_SIZE = 3
MAX_REGION_SIZE = 12

Cell = Tuple[int, int]  # (row, col)
RegionGrid = Sequence[Sequence[int]]
MutableGrid = List[List[Optional[int]]]

# up, right, down, left
DIRECTIONS: Tuple[Cell, ...] = ((-1, 0), (0, 1), (1, 0), (0, -1))


class PuzzleGenerationError(RuntimeError):
    """Raised when a generator gives up after its bounded number of attempts."""


def on_board(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def neighbors(row: int, col: int) -> Iterator[Cell]:
    """Yields the 4-connected neighbours of a cell that lie on the board."""
    for dr, dc in DIRECTIONS:
        r, c = row + dr, col + dc
        if on_board(r, c):
            yield (r, c)


def same_diagonal(a: Cell, b: Cell) -> bool:
    return abs(a[0] - b[0]) == abs(a[1] - b[1])
