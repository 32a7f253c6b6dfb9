from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .grid import BOARD_SIZE, Cell, PuzzleGenerationError, RegionGrid
from .regions import RegionGenerationError, RegionGenerator
from .solver import solve


class BoardGenerationError(PuzzleGenerationError):
    pass


@dataclass(frozen=True)
class Board:
    """A solvable puzzle: the region partition and one verified queen placement."""
    regions: Tuple[Tuple[int, ...], ...]
    solution: Tuple[Cell, ...]

    def region_at(self, row: int, col: int) -> int:
        return self.regions[row][col]

    def to_dict(self, include_solution: bool = False) -> Dict[str, Any]:
        payload: Dict[str, Any] = {'regions': [list(row) for row in self.regions]}
        if include_solution:
            payload['solution'] = [{'row': r, 'col': c} for r, c in self.solution]
        return payload

    def pretty(self, show_solution: bool = False) -> str:
        """Human-readable grid of region ids; solution cells shown as ``Q``."""
        queens = set(self.solution) if show_solution else set()
        lines: List[str] = []
        for r in range(BOARD_SIZE):
            lines.append(' '.join('Q' if (r, c) in queens else str(self.regions[r][c]) for c in range(BOARD_SIZE)))
        return '\n'.join(lines)


class BoardFactory:
    """Keeps drawing region partitions until one has a solution."""

    def __init__(
        self,
        region_generator: Optional[RegionGenerator] = None,
        solver: Callable[[RegionGrid], Optional[List[Cell]]] = solve,
        max_attempts: int = 500,
    ):
        self.region_generator = region_generator or RegionGenerator()
        self.solver = solver
        self.max_attempts = max_attempts

    def create_board(self) -> Board:
        for _ in range(self.max_attempts):
            try:
                regions = self.region_generator.generate()
            except RegionGenerationError as exc:
                raise BoardGenerationError(str(exc)) from exc
            solution = self.solver(regions)
            if solution:
                return Board(
                    regions=tuple(tuple(row) for row in regions),
                    solution=tuple(solution),
                )
        raise BoardGenerationError(f'No solvable board found after {self.max_attempts} attempts')
