"""Bounded solution counting for partial row/column/region Latin grids."""

import logging
import random
from typing import Dict, List, Sequence, Set

from .utils import Coord, check_square, clone_grid

logger = logging.getLogger(__name__)


def quick_fill(grid: List[List[int]], region_map: Sequence[Sequence[int]]) -> int:
    """
    Single pass filling every empty cell that has exactly one value left.

    Cells are visited in row-major order and each fill is visible to the
    cells after it.

    Args:
        grid: Numeric grid (0 = empty); modified in place.
        region_map: Region id of every cell.

    Returns:
        Number of cells filled.
    """
    size = len(grid)
    everything = set(range(1, size + 1))
    filled = 0

    for row in range(size):
        for col in range(size):
            if grid[row][col]:
                continue

            used: Set[int] = {v for v in grid[row] if v}
            used |= {grid[r][col] for r in range(size) if grid[r][col]}
            region_id = region_map[row][col]
            used |= {
                grid[r][c]
                for r in range(size)
                for c in range(size)
                if region_map[r][c] == region_id and grid[r][c]
            }

            remaining = everything - used
            if len(remaining) == 1:
                grid[row][col] = remaining.pop()
                filled += 1

    return filled


def count_solutions(
    grid: Sequence[Sequence[int]],
    region_map: Sequence[Sequence[int]],
    limit: int = 2,
) -> int:
    """
    Count completions of a partial grid, stopping once limit is reached.

    Args:
        grid: Numeric grid (0 = empty).
        region_map: Region id of every cell.
        limit: Stop as soon as this many completions are found.

    Returns:
        min(number of completions, limit).

    Raises:
        ValueError: If the grids are not square grids of the same size.
    """
    size = check_square(grid, "grid")
    if check_square(region_map, "region_map") != size:
        raise ValueError("grid and region_map must have the same size.")

    work = clone_grid(grid)
    row_used: List[Set[int]] = [set() for _ in range(size)]
    col_used: List[Set[int]] = [set() for _ in range(size)]
    region_used: Dict[int, Set[int]] = {}
    empty: List[Coord] = []

    for row in range(size):
        for col in range(size):
            region_used.setdefault(region_map[row][col], set())
            value = work[row][col]
            if not value:
                empty.append((row, col))
                continue
            rid = region_map[row][col]
            if value in row_used[row] or value in col_used[col] or value in region_used[rid]:
                # Givens already clash; nothing can complete this grid.
                return 0
            row_used[row].add(value)
            col_used[col].add(value)
            region_used[rid].add(value)

    solutions = 0

    def dfs(i: int) -> None:
        nonlocal solutions
        if solutions >= limit:
            return
        if i == len(empty):
            solutions += 1
            return

        row, col = empty[i]
        rid = region_map[row][col]
        values = list(range(1, size + 1))
        random.shuffle(values)

        for value in values:
            if value in row_used[row] or value in col_used[col] or value in region_used[rid]:
                continue

            row_used[row].add(value)
            col_used[col].add(value)
            region_used[rid].add(value)

            dfs(i + 1)

            row_used[row].discard(value)
            col_used[col].discard(value)
            region_used[rid].discard(value)

            if solutions >= limit:
                return

    dfs(0)
    return solutions


def has_unique_solution(
    grid: Sequence[Sequence[int]], region_map: Sequence[Sequence[int]]
) -> bool:
    """
    Return True if exactly one completion of grid satisfies every row, column and region.

    An all-empty grid is rejected up front. Otherwise a quick-fill pass runs
    first, then an exhaustive search that stops at the second completion.
    """
    if all(value == 0 for line in grid for value in line):
        return False

    work = clone_grid(grid)
    quick_fill(work, region_map)
    return count_solutions(work, region_map, limit=2) == 1
