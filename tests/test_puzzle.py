import random
from collections import Counter

import pytest

from queens_duel.services.puzzle import (
    BOARD_SIZE,
    NUM_REGIONS,
    Board,
    BoardFactory,
    BoardGenerationError,
    RegionGenerationError,
    RegionGenerator,
    solve,
    validate_placement,
)


def _region_cells(regions):
    cells = {}
    for r in range(BOARD_SIZE):
        for c in range(BOARD_SIZE):
            cells.setdefault(regions[r][c], set()).add((r, c))
    return cells


def _is_connected(cells):
    start = next(iter(cells))
    seen = {start}
    stack = [start]
    while stack:
        r, c = stack.pop()
        for dr, dc in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            n = (r + dr, c + dc)
            if n in cells and n not in seen:
                seen.add(n)
                stack.append(n)
    return seen == cells


def _assert_valid_partition(regions):
    assert len(regions) == BOARD_SIZE
    assert all(len(row) == BOARD_SIZE for row in regions)
    assert all(0 <= v < NUM_REGIONS for row in regions for v in row)
    cells = _region_cells(regions)
    assert sorted(cells) == list(range(NUM_REGIONS))
    for region_id, members in cells.items():
        assert len(members) >= 3, f"region {region_id} too small"
        assert _is_connected(members), f"region {region_id} not contiguous"


def _assert_valid_solution(regions, solution):
    assert len(solution) == BOARD_SIZE
    assert [r for r, _ in solution] == list(range(BOARD_SIZE))
    assert len({c for _, c in solution}) == BOARD_SIZE
    assert len({regions[r][c] for r, c in solution}) == NUM_REGIONS
    for i, a in enumerate(solution):
        for b in solution[i + 1:]:
            assert abs(a[0] - b[0]) != abs(a[1] - b[1])


@pytest.mark.parametrize('seed', [1, 2, 3, 4, 5])
def test_generated_regions_form_valid_partition(seed):
    regions = RegionGenerator(rng=random.Random(seed)).generate()
    _assert_valid_partition(regions)


@pytest.mark.parametrize('seed', [11, 12, 13])
def test_board_factory_produces_solvable_boards(seed):
    board = BoardFactory(region_generator=RegionGenerator(rng=random.Random(seed))).create_board()
    _assert_valid_partition(board.regions)
    _assert_valid_solution(board.regions, list(board.solution))
    # The stored solution is exactly what the solver derives from the regions
    assert solve(board.regions) == list(board.solution)


def test_same_seed_same_board():
    a = BoardFactory(region_generator=RegionGenerator(rng=random.Random(42))).create_board()
    b = BoardFactory(region_generator=RegionGenerator(rng=random.Random(42))).create_board()
    assert a == b


class _ShortTargets(random.Random):
    """Every region aims for 3 cells, so the board can never be covered."""

    def randint(self, a, b):
        return a


def test_region_generator_gives_up_after_max_attempts():
    gen = RegionGenerator(rng=_ShortTargets(0), max_attempts=25)
    with pytest.raises(RegionGenerationError):
        gen.generate()
    assert gen.last_attempts == 25


def test_solver_first_solution_is_ascending_search(fixed_regions, fixed_solution):
    assert solve(fixed_regions) == fixed_solution


def test_solver_with_column_regions_matches_first_eight_queens():
    regions = [[c for c in range(BOARD_SIZE)] for _ in range(BOARD_SIZE)]
    assert solve(regions) == [(0, 0), (1, 4), (2, 7), (3, 5), (4, 2), (5, 6), (6, 1), (7, 3)]


def test_solver_returns_none_when_two_rows_share_one_region():
    # Rows 0 and 1 are both entirely region 0, so one of them can never hold a queen
    regions = [[0] * BOARD_SIZE, [0] * BOARD_SIZE] + [[r] * BOARD_SIZE for r in range(1, 7)]
    assert solve(regions) is None


def test_board_factory_raises_when_nothing_is_solvable():
    unsolvable = tuple([(0,) * BOARD_SIZE, (0,) * BOARD_SIZE] + [(r,) * BOARD_SIZE for r in range(1, 7)])

    class _Stub:
        calls = 0

        def generate(self):
            _Stub.calls += 1
            return unsolvable

    factory = BoardFactory(region_generator=_Stub(), max_attempts=4)
    with pytest.raises(BoardGenerationError):
        factory.create_board()
    assert _Stub.calls == 4


def test_board_factory_wraps_region_failure():
    factory = BoardFactory(region_generator=RegionGenerator(rng=_ShortTargets(0), max_attempts=3))
    with pytest.raises(BoardGenerationError):
        factory.create_board()


def test_board_serialization_hides_solution_by_default(fixed_board):
    payload = fixed_board.to_dict()
    assert set(payload) == {'regions'}
    assert payload['regions'][1] == [0, 1, 1, 1, 1, 1, 1, 1]
    exposed = fixed_board.to_dict(include_solution=True)
    assert exposed['solution'][0] == {'row': 0, 'col': 0}
    assert len(exposed['solution']) == BOARD_SIZE


def test_board_pretty_marks_solution(fixed_board):
    text = fixed_board.pretty(show_solution=True)
    lines = text.splitlines()
    assert len(lines) == BOARD_SIZE
    assert lines[0].split()[0] == 'Q'
    assert Counter(text.split())['Q'] == BOARD_SIZE
    assert 'Q' not in fixed_board.pretty()


def test_replaying_solution_never_rejected(random_board):
    placed = []
    for row, col in random_board.solution:
        result = validate_placement(random_board, row, col, placed)
        assert result.ok, result.reason
        placed.append((row, col))


def test_board_is_immutable(fixed_board):
    with pytest.raises(Exception):
        fixed_board.regions = ()
    assert isinstance(fixed_board, Board)
