"""Latin grid filling under row, column and region constraints, plus mine assignment."""

import logging
import random
from typing import Dict, List, Optional, Sequence, Set

from .config import LATIN_FILL_MAX_STEPS
from .engine import Cell
from .utils import Coord, Deadline, check_deadline, check_square, get_all_coordinates

logger = logging.getLogger(__name__)

# How many backtracking steps run between two deadline checks
_DEADLINE_CHECK_INTERVAL = 512


def fill_latin_grid(
    size: int,
    region_map: Sequence[Sequence[int]],
    max_steps: int = LATIN_FILL_MAX_STEPS,
    deadline: Optional[Deadline] = None,
) -> Optional[List[List[int]]]:
    """
    Fill a size x size grid with 1..size so no row, column or region repeats a value.

    Cells are visited in row-major order. Each cell draws from its own shuffled
    permutation of 1..size; on a dead end the search steps back to the previous
    cell and tries its next untried value.

    Args:
        size: Grid side length.
        region_map: Region id of every cell; must be size x size.
        max_steps: Backtracking step budget. Pathological partitions can make
            the search very long, so it gives up once the budget is spent.
        deadline: Optional wall-clock cut-off.

    Returns:
        The filled grid, or None if no assignment was found within the budget.

    Raises:
        ValueError: If region_map does not match size.
        GenerationTimedOut: If the deadline passed.
    """
    if check_square(region_map, "region_map") != size:
        raise ValueError("region_map must be size x size.")

    grid: List[List[int]] = [[0 for _ in range(size)] for _ in range(size)]
    row_used: List[Set[int]] = [set() for _ in range(size)]
    col_used: List[Set[int]] = [set() for _ in range(size)]
    region_used: Dict[int, Set[int]] = {}
    for line in region_map:
        for region_id in line:
            region_used.setdefault(region_id, set())

    cells: List[Coord] = get_all_coordinates(size)
    total = len(cells)

    # options[i] holds the values still untried at cells[i]
    options: List[List[int]] = [[] for _ in range(total)]
    options[0] = random.sample(range(1, size + 1), size)

    idx = 0
    steps = 0
    while 0 <= idx < total:
        steps += 1
        if steps > max_steps:
            logger.debug("Latin fill gave up after %d steps", max_steps)
            return None
        if steps % _DEADLINE_CHECK_INTERVAL == 0:
            check_deadline(deadline)

        row, col = cells[idx]
        region_id = region_map[row][col]

        # Returning to a cell: undo its current value first.
        current = grid[row][col]
        if current:
            row_used[row].discard(current)
            col_used[col].discard(current)
            region_used[region_id].discard(current)
            grid[row][col] = 0

        placed = False
        while options[idx]:
            value = options[idx].pop()
            if (
                value not in row_used[row]
                and value not in col_used[col]
                and value not in region_used[region_id]
            ):
                grid[row][col] = value
                row_used[row].add(value)
                col_used[col].add(value)
                region_used[region_id].add(value)
                placed = True
                break

        if placed:
            idx += 1
            if idx < total:
                options[idx] = random.sample(range(1, size + 1), size)
        else:
            idx -= 1

    if idx < 0:
        return None

    logger.debug("Latin fill of %dx%d grid took %d steps", size, size, steps)
    return grid


def has_valid_line_sums(grid: Sequence[Sequence[int]]) -> bool:
    """Return True if every row and column sums to N(N+1)/2."""
    size = len(grid)
    expected = size * (size + 1) // 2

    for row in grid:
        if sum(row) != expected:
            return False

    for col in range(size):
        if sum(grid[row][col] for row in range(size)) != expected:
            return False

    return True


def mine_positions(
    values: Sequence[Sequence[int]], region_map: Sequence[Sequence[int]]
) -> Dict[int, Coord]:
    """
    Locate the highest-valued cell of every region.

    Ties keep the first cell in row-major order; a filled grid has none,
    since each region holds distinct values.

    Returns:
        Mapping from region id to the (row, col) of its mine.
    """
    best: Dict[int, Coord] = {}
    for row, line in enumerate(values):
        for col, value in enumerate(line):
            region_id = region_map[row][col]
            prev = best.get(region_id)
            if prev is None or value > values[prev[0]][prev[1]]:
                best[region_id] = (row, col)
    return best


def assign_mines(grid: List[List[Cell]]) -> List[List[Cell]]:
    """
    Mark the maximum-value cell of each region as its mine.

    Args:
        grid: Filled cell grid; modified in place.

    Returns:
        The same grid, for chaining.
    """
    values = [[cell.value for cell in line] for line in grid]
    region_map = [[cell.region_id for cell in line] for line in grid]

    for line in grid:
        for cell in line:
            cell.is_mine = False

    for row, col in mine_positions(values, region_map).values():
        grid[row][col].is_mine = True

    return grid
