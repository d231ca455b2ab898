"""Partition an N x N grid into N connected regions of N cells each."""

import logging
import random
from collections import deque
from typing import Deque, Dict, List, Optional, Sequence, Set, Tuple

from .config import MAX_REGION_ATTEMPTS
from .errors import RegionGenerationFailed
from .utils import Coord, Deadline, check_deadline, get_all_coordinates, get_neighborhoods

logger = logging.getLogger(__name__)

UNASSIGNED = -1


def _grow_region(
    region_map: List[List[int]],
    start: Coord,
    region_id: int,
    size: int,
    neighborhoods: Dict[Coord, Tuple[Coord, ...]],
) -> List[Coord]:
    """
    Grow one region by breadth-first search from start over unassigned cells.

    Growth stops once the region holds size cells or no unassigned
    neighbor is left to visit.

    Returns:
        The cells claimed for the region (possibly fewer than size).
    """
    region: List[Coord] = []
    frontier: Deque[Coord] = deque([start])
    visited: Set[Coord] = {start}

    while frontier and len(region) < size:
        row, col = frontier.popleft()

        if region_map[row][col] == UNASSIGNED:
            region.append((row, col))
            region_map[row][col] = region_id

        if len(region) == size:
            break

        adjacent: List[Coord] = []
        for nr, nc in neighborhoods[(row, col)]:
            if region_map[nr][nc] == UNASSIGNED and (nr, nc) not in visited:
                adjacent.append((nr, nc))
                visited.add((nr, nc))

        random.shuffle(adjacent)
        frontier.extend(adjacent)

    return region


def is_region_connected(region_map: Sequence[Sequence[int]], region_id: int) -> bool:
    """
    Check that the cells carrying region_id form one 4-connected component.

    Args:
        region_map: Grid of region ids.
        region_id: Region to check.

    Returns:
        True if the region is non-empty and every one of its cells is reachable
        from its first cell through orthogonal steps inside the region.
    """
    size = len(region_map)
    cells = [
        (row, col)
        for row in range(size)
        for col in range(size)
        if region_map[row][col] == region_id
    ]
    if not cells:
        return False

    neighborhoods = get_neighborhoods(size)
    visited: Set[Coord] = {cells[0]}
    frontier: Deque[Coord] = deque([cells[0]])

    while frontier:
        cell = frontier.popleft()
        for nr, nc in neighborhoods[cell]:
            if region_map[nr][nc] == region_id and (nr, nc) not in visited:
                visited.add((nr, nc))
                frontier.append((nr, nc))

    return len(visited) == len(cells)


def validate_region_map(region_map: Sequence[Sequence[int]]) -> bool:
    """
    Return True if region_map partitions its grid into N connected regions of N cells.
    """
    size = len(region_map)
    if size == 0 or any(len(row) != size for row in region_map):
        return False

    counts: Dict[int, int] = {}
    for row in region_map:
        for region_id in row:
            counts[region_id] = counts.get(region_id, 0) + 1

    if set(counts) != set(range(size)):
        return False
    if any(count != size for count in counts.values()):
        return False

    return all(is_region_connected(region_map, rid) for rid in range(size))


def create_regions(
    size: int,
    max_attempts: int = MAX_REGION_ATTEMPTS,
    deadline: Optional[Deadline] = None,
) -> Tuple[List[List[int]], Dict[int, int]]:
    """
    Build a random partition of a size x size grid into size connected regions.

    Args:
        size: Grid side length, also the number of regions and the size of
            each region. Must be positive.
        max_attempts: Number of full partition attempts before giving up.
        deadline: Optional wall-clock cut-off, checked once per attempt.

    Returns:
        Tuple of (region_map, region_sizes) where region_map[row][col] is the
        region id in 0..size-1 and region_sizes maps every id to its cell count.

    Raises:
        ValueError: If size is non-positive.
        RegionGenerationFailed: If every attempt failed.
        GenerationTimedOut: If the deadline passed.
    """
    if size <= 0:
        raise ValueError("size must be positive.")

    neighborhoods = get_neighborhoods(size)

    for attempt in range(max_attempts):
        check_deadline(deadline)

        region_map = [[UNASSIGNED for _ in range(size)] for _ in range(size)]
        region_sizes: Dict[int, int] = {}

        cells = get_all_coordinates(size)
        random.shuffle(cells)

        success = True
        for region_id in range(size):
            start = next(
                ((r, c) for r, c in cells if region_map[r][c] == UNASSIGNED), None
            )
            if start is None:
                success = False
                break

            region = _grow_region(region_map, start, region_id, size, neighborhoods)
            if len(region) != size:
                success = False
                break

            region_sizes[region_id] = len(region)

        if not success or len(region_sizes) != size:
            continue

        # Growth order can in theory leave a region split; re-check every one.
        if all(is_region_connected(region_map, rid) for rid in range(size)):
            logger.debug(
                "Partitioned %dx%d grid after %d attempt(s)", size, size, attempt + 1
            )
            return region_map, region_sizes

    raise RegionGenerationFailed(size, max_attempts)
