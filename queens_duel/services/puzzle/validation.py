from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .grid import Cell, on_board, same_diagonal

ROW_CONFLICT = 'row conflict'
COLUMN_CONFLICT = 'column conflict'
REGION_CONFLICT = 'region conflict'
DIAGONAL_CONFLICT = 'diagonal conflict'

_MESSAGES = {
    ROW_CONFLICT: "There's already a queen in this row",
    COLUMN_CONFLICT: "There's already a queen in this column",
    REGION_CONFLICT: "There's already a queen in this region",
    DIAGONAL_CONFLICT: 'Queens cannot attack each other diagonally',
}


@dataclass(frozen=True)
class PlacementResult:
    ok: bool
    reason: Optional[str] = None

    @property
    def message(self) -> Optional[str]:
        return _MESSAGES.get(self.reason) if self.reason else None


ACCEPTED = PlacementResult(ok=True)


def in_bounds(row: Any, col: Any) -> bool:
    """True for integer coordinates on the board (bools are not coordinates)."""
    if isinstance(row, bool) or isinstance(col, bool):
        return False
    if not isinstance(row, int) or not isinstance(col, int):
        return False
    return on_board(row, col)


def validate_placement(board, row: int, col: int, markers: Iterable[Cell]) -> PlacementResult:
    """Check a queen at (row, col) against one player's own queens.

    Checks run in a fixed order (row, column, region, diagonal) and the first
    failure wins.
    """
    markers = list(markers)
    if any(r == row for r, _ in markers):
        return PlacementResult(False, ROW_CONFLICT)
    if any(c == col for _, c in markers):
        return PlacementResult(False, COLUMN_CONFLICT)
    region_id = board.region_at(row, col)
    if any(board.region_at(r, c) == region_id for r, c in markers):
        return PlacementResult(False, REGION_CONFLICT)
    if any(same_diagonal(m, (row, col)) for m in markers):
        return PlacementResult(False, DIAGONAL_CONFLICT)
    return ACCEPTED
