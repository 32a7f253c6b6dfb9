"""Puzzle engine: region partitioning, solving, board assembly and move checks.

Everything here is pure Python with no Flask or Socket.IO imports so the
session layer and the CLI can share it.
"""

from .grid import BOARD_SIZE, NUM_REGIONS, Cell, PuzzleGenerationError
from .regions import RegionGenerator, RegionGenerationError
from .solver import solve
from .board import Board, BoardFactory, BoardGenerationError
from .validation import PlacementResult, in_bounds, validate_placement

__all__ = [
    'BOARD_SIZE',
    'NUM_REGIONS',
    'Board',
    'BoardFactory',
    'BoardGenerationError',
    'Cell',
    'PlacementResult',
    'PuzzleGenerationError',
    'RegionGenerationError',
    'RegionGenerator',
    'in_bounds',
    'solve',
    'validate_placement',
]
