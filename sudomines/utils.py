"""Grid helpers shared by the generation and solving modules."""

import random
import time
from typing import Dict, List, Optional, Sequence, Tuple, TypeVar

from .errors import GenerationTimedOut

T = TypeVar("T")

Coord = Tuple[int, int]

# Module-level cache: size -> {(row, col): ((nrow, ncol), ...), ...}
# Entries are immutable once built.
_NEIGHBORHOODS_CACHE: Dict[int, Dict[Coord, Tuple[Coord, ...]]] = {}

# Up, down, left, right
DIRECTIONS: Tuple[Coord, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


def get_neighborhoods(size: int) -> Dict[Coord, Tuple[Coord, ...]]:
    """
    Precompute and cache 4-connected neighbor coordinates for every cell in a grid.

    Args:
        size: Grid side length. Must be positive.

    Returns:
        Mapping from each cell (row, col) to a tuple of valid orthogonal
        neighbors (nrow, ncol).

    Raises:
        ValueError: If size is non-positive.
    """
    if size <= 0:
        raise ValueError("size must be positive.")

    cached = _NEIGHBORHOODS_CACHE.get(size)
    if cached is not None:
        return cached

    neighborhoods: Dict[Coord, Tuple[Coord, ...]] = {}
    for row in range(size):
        for col in range(size):
            nbrs: List[Coord] = []
            for dr, dc in DIRECTIONS:
                nr, nc = row + dr, col + dc
                if 0 <= nr < size and 0 <= nc < size:
                    nbrs.append((nr, nc))
            neighborhoods[(row, col)] = tuple(nbrs)

    _NEIGHBORHOODS_CACHE[size] = neighborhoods
    return neighborhoods


def get_all_coordinates(size: int) -> List[Coord]:
    """Return every (row, col) of a size x size grid in row-major order."""
    return [(row, col) for row in range(size) for col in range(size)]


def shuffled(items: Sequence[T]) -> List[T]:
    """Return a shuffled copy of items."""
    out = list(items)
    random.shuffle(out)
    return out


def clone_grid(grid: Sequence[Sequence[int]]) -> List[List[int]]:
    """Copy a numeric grid row by row."""
    return [list(row) for row in grid]


def empty_grid(size: int, fill: int = 0) -> List[List[int]]:
    return [[fill for _ in range(size)] for _ in range(size)]


def check_square(grid: Sequence[Sequence[object]], name: str = "grid") -> int:
    """
    Verify that a nested sequence is square and return its side length.

    Raises:
        ValueError: If the grid is empty or ragged.
    """
    size = len(grid)
    if size == 0:
        raise ValueError(f"{name} must not be empty.")
    for row in grid:
        if len(row) != size:
            raise ValueError(f"{name} must be square ({size}x{size}).")
    return size


def region_cells(region_map: Sequence[Sequence[int]]) -> Dict[int, List[Coord]]:
    """Group coordinates by region id, each list in row-major order."""
    cells: Dict[int, List[Coord]] = {}
    for row, line in enumerate(region_map):
        for col, region_id in enumerate(line):
            cells.setdefault(region_id, []).append((row, col))
    return cells


def get_units(region_map: Sequence[Sequence[int]]) -> List[List[Coord]]:
    """
    Build every constraint unit of the grid.

    Returns:
        All rows, then all columns, then all regions (ordered by region id),
        each as a list of coordinates.
    """
    size = len(region_map)
    rows = [[(row, col) for col in range(size)] for row in range(size)]
    cols = [[(row, col) for row in range(size)] for col in range(size)]
    regions = region_cells(region_map)
    return rows + cols + [regions[rid] for rid in sorted(regions)]


def is_valid_solution(
    grid: Sequence[Sequence[int]], region_map: Sequence[Sequence[int]]
) -> bool:
    """Return True if every row, column and region is a permutation of 1..N."""
    size = len(grid)
    expected = set(range(1, size + 1))
    for unit in get_units(region_map):
        if {grid[r][c] for r, c in unit} != expected:
            return False
    return True


class Deadline:
    """
    Wall-clock cut-off for one generation call.

    A Deadline built with seconds=None never expires.
    """

    def __init__(self, seconds: Optional[float]) -> None:
        self.seconds = seconds
        self._expires_at: Optional[float] = (
            None if seconds is None else time.monotonic() + seconds
        )

    def expired(self) -> bool:
        if self._expires_at is None:
            return False
        return time.monotonic() >= self._expires_at

    def check(self) -> None:
        """
        Raises:
            GenerationTimedOut: If the deadline has passed.
        """
        if self.expired():
            raise GenerationTimedOut(
                f"Generation exceeded its {self.seconds:.2f}s budget."
            )


def check_deadline(deadline: Optional[Deadline]) -> None:
    if deadline is not None:
        deadline.check()
