"""Choose the initially revealed cells of a puzzle."""

import logging
import math
import random
from typing import Callable, Dict, List, Optional, Sequence, Set

from .config import CANDIDATE_PUZZLES, DIFFICULTY_BASE, DIFFICULTY_SLOPE
from .deduction import is_logically_solvable
from .latin import mine_positions
from .uniqueness import has_unique_solution
from .utils import (
    Coord,
    Deadline,
    check_deadline,
    check_square,
    clone_grid,
    empty_grid,
    get_all_coordinates,
    region_cells,
    shuffled,
)

logger = logging.getLogger(__name__)

SeedStrategy = Callable[[int, Dict[int, List[Coord]], Set[Coord], int], List[Coord]]


# -----------------------------------------------------------------------------
# Seed strategies
# -----------------------------------------------------------------------------


def _backfill_regions(
    seeds: List[Coord], regions: Dict[int, List[Coord]], mines: Set[Coord]
) -> List[Coord]:
    """Add one random non-mine cell for every region the seeds do not touch yet."""
    covered = {
        rid for rid, cells in regions.items() if any(cell in cells for cell in seeds)
    }

    out = list(seeds)
    for rid in sorted(regions):
        if rid in covered:
            continue
        options = [cell for cell in regions[rid] if cell not in mines]
        if options:
            out.append(random.choice(options))
    return out


def seed_one_per_region(
    size: int, regions: Dict[int, List[Coord]], mines: Set[Coord], round_index: int
) -> List[Coord]:
    """One random non-mine cell from every region."""
    return _backfill_regions([], regions, mines)


def seed_diagonal(
    size: int, regions: Dict[int, List[Coord]], mines: Set[Coord], round_index: int
) -> List[Coord]:
    """Non-mine cells of the main diagonal (anti-diagonal on odd rounds), then backfill."""
    if round_index % 2 == 0:
        diagonal = [(i, i) for i in range(size)]
    else:
        diagonal = [(i, size - 1 - i) for i in range(size)]
    seeds = [cell for cell in diagonal if cell not in mines]
    return _backfill_regions(seeds, regions, mines)


def seed_quadrants(
    size: int, regions: Dict[int, List[Coord]], mines: Set[Coord], round_index: int
) -> List[Coord]:
    """One random non-mine cell per spatial quadrant, then backfill."""
    half = size // 2
    bands = ((0, half), (half, size))

    seeds: List[Coord] = []
    for r0, r1 in bands:
        for c0, c1 in bands:
            options = [
                (r, c)
                for r in range(r0, r1)
                for c in range(c0, c1)
                if (r, c) not in mines
            ]
            if options:
                seeds.append(random.choice(options))
    return _backfill_regions(seeds, regions, mines)


SEED_STRATEGIES: List[SeedStrategy] = [
    seed_one_per_region,
    seed_diagonal,
    seed_quadrants,
]


# -----------------------------------------------------------------------------
# Candidate construction
# -----------------------------------------------------------------------------


def build_puzzle(
    values: Sequence[Sequence[int]], revealed: Sequence[Coord]
) -> List[List[int]]:
    """Numeric puzzle holding only the revealed values (0 elsewhere)."""
    size = len(values)
    puzzle = empty_grid(size)
    for row, col in revealed:
        puzzle[row][col] = values[row][col]
    return puzzle


def _complete_to_solvable(
    values: Sequence[Sequence[int]],
    region_map: Sequence[Sequence[int]],
    seeds: List[Coord],
    non_mines: List[Coord],
    deadline: Optional[Deadline],
) -> List[Coord]:
    """Reveal extra non-mine cells, in random order, until deduction solves the puzzle."""
    revealed = list(dict.fromkeys(seeds))
    puzzle = build_puzzle(values, revealed)
    if is_logically_solvable(puzzle, region_map):
        return revealed

    chosen = set(revealed)
    for row, col in shuffled([cell for cell in non_mines if cell not in chosen]):
        check_deadline(deadline)
        puzzle[row][col] = values[row][col]
        revealed.append((row, col))
        if is_logically_solvable(puzzle, region_map):
            break

    return revealed


def _prune_redundant(
    values: Sequence[Sequence[int]],
    region_map: Sequence[Sequence[int]],
    revealed: List[Coord],
    deadline: Optional[Deadline],
) -> List[Coord]:
    """Drop revealed cells, latest first, while the puzzle stays solvable."""
    kept = list(revealed)
    puzzle = build_puzzle(values, kept)

    for cell in reversed(revealed):
        check_deadline(deadline)
        row, col = cell
        puzzle[row][col] = 0
        if is_logically_solvable(puzzle, region_map):
            kept.remove(cell)
        else:
            puzzle[row][col] = values[row][col]

    return kept


def trim_to_cap(
    revealed: Sequence[Coord], region_map: Sequence[Sequence[int]], max_cells: int
) -> List[Coord]:
    """
    Cut a reveal set down to max_cells.

    The first revealed cell of every region is always kept, even when that
    alone exceeds max_cells; the rest of the budget goes to random picks
    among the other revealed cells. Solvability is not re-checked.
    """
    kept: List[Coord] = []
    seen_regions: Set[int] = set()
    for row, col in revealed:
        rid = region_map[row][col]
        if rid not in seen_regions:
            seen_regions.add(rid)
            kept.append((row, col))

    budget = max_cells - len(kept)
    if budget > 0:
        rest = [cell for cell in revealed if cell not in kept]
        kept.extend(random.sample(rest, min(budget, len(rest))))

    return kept


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------


def find_minimum_revealed_cells(
    values: Sequence[Sequence[int]],
    region_map: Sequence[Sequence[int]],
    max_cells: Optional[int] = None,
    attempts: int = CANDIDATE_PUZZLES,
    deadline: Optional[Deadline] = None,
) -> List[Coord]:
    """
    Pick a small set of cells whose values let deduction solve the whole grid.

    Mines (the maximum cell of each region) are never picked.

    Args:
        values: Fully solved numeric grid.
        region_map: Region id of every cell.
        max_cells: Optional cap on the number of revealed cells; the chosen
            set is trimmed to it without re-checking solvability.
        attempts: Number of candidate reveal patterns to compare.
        deadline: Optional wall-clock cut-off.

    Returns:
        Coordinates to reveal.

    Raises:
        ValueError: If the grid is not filled or attempts is non-positive.
        GenerationTimedOut: If the deadline passed.
    """
    size = check_square(values, "values")
    if check_square(region_map, "region_map") != size:
        raise ValueError("values and region_map must have the same size.")
    if any(value == 0 for line in values for value in line):
        raise ValueError("values must be a fully solved grid.")
    if attempts <= 0:
        raise ValueError("attempts must be positive.")

    mines = set(mine_positions(values, region_map).values())
    non_mines = [cell for cell in get_all_coordinates(size) if cell not in mines]
    regions = region_cells(region_map)

    candidates: List[List[Coord]] = []
    for attempt in range(attempts):
        strategy = SEED_STRATEGIES[attempt % len(SEED_STRATEGIES)]
        seeds = strategy(size, regions, mines, attempt // len(SEED_STRATEGIES))
        revealed = _complete_to_solvable(values, region_map, seeds, non_mines, deadline)
        logger.debug(
            "Candidate %d (%s): %d revealed cells",
            attempt,
            strategy.__name__,
            len(revealed),
        )
        candidates.append(revealed)

    # First of the smallest candidates
    best = min(candidates, key=len)
    best = _prune_redundant(values, region_map, best, deadline)

    if max_cells is not None and len(best) > max_cells:
        best = trim_to_cap(best, region_map, max_cells)

    return best


def generate_puzzle(
    filled_grid: Sequence[Sequence[int]],
    region_map: Sequence[Sequence[int]],
    max_cells: Optional[int] = None,
) -> List[List[int]]:
    """
    Build a minimal-clue puzzle from a solved grid.

    Args:
        filled_grid: Fully solved numeric grid.
        region_map: Region id of every cell.
        max_cells: Optional cap on the number of givens.

    Returns:
        Numeric puzzle with 0 for hidden cells. No mine is ever a given.
    """
    revealed = find_minimum_revealed_cells(filled_grid, region_map, max_cells)
    return build_puzzle(filled_grid, revealed)


def generate_uniquely_minimal_puzzle(
    filled_grid: Sequence[Sequence[int]], region_map: Sequence[Sequence[int]]
) -> List[List[int]]:
    """
    Strip givens from a solved grid, in random order, while the solution stays unique.

    Unlike generate_puzzle() the result may need search to solve, and mines
    may remain as givens.
    """
    puzzle = clone_grid(filled_grid)
    for row, col in shuffled(get_all_coordinates(len(puzzle))):
        original = puzzle[row][col]
        puzzle[row][col] = 0
        if not has_unique_solution(puzzle, region_map):
            puzzle[row][col] = original
    return puzzle


def get_difficulty_thresholds(size: int) -> Dict[str, float]:
    """
    Reveal percentages per difficulty level, adjusted for grid size.

    Larger grids are harder at the same percentage, so each level drops a
    little per doubling of size relative to a 4x4 grid.
    """
    if size <= 0:
        raise ValueError("size must be positive.")
    factor = math.log2(size) / math.log2(4)
    return {
        level: DIFFICULTY_BASE[level] - DIFFICULTY_SLOPE[level] * (factor - 1)
        for level in DIFFICULTY_BASE
    }


def reveal_cap_for_difficulty(size: int, difficulty: str) -> int:
    """
    Maximum number of initially revealed cells for a difficulty level.

    Raises:
        ValueError: If difficulty is not one of easy, medium, hard, expert.
    """
    thresholds = get_difficulty_thresholds(size)
    if difficulty not in thresholds:
        raise ValueError(
            'difficulty must be "easy", "medium", "hard" or "expert".'
        )
    non_mine_cells = size * size - size
    return math.ceil(non_mine_cells * thresholds[difficulty])
