"""Search-free solver deciding whether a partial grid can be completed by deduction alone."""

import logging
from typing import Dict, FrozenSet, List, Sequence, Set

from .utils import Coord, check_square, clone_grid, get_units, is_valid_solution

logger = logging.getLogger(__name__)


class LogicalDeductionEngine:
    """
    Candidate-propagation solver for row/column/region Latin grids.

    Each pass applies four techniques in order:
    1. Naked singles: a cell with one candidate takes it
    2. Hidden singles: a value with one possible cell in a unit goes there
    3. Naked pairs: two cells sharing the same two candidates claim both values
    4. Pointing pairs: a region's candidates for a value confined to one line
       clear that value from the rest of the line

    The engine never guesses. solve() returns False as soon as a pass makes
    no progress, so a False result means "needs search", not "no solution".
    """

    def __init__(
        self, grid: Sequence[Sequence[int]], region_map: Sequence[Sequence[int]]
    ) -> None:
        """
        Initialize the engine on a private copy of a partial grid.

        Args:
            grid: Numeric grid, 0 for empty cells, values in 1..N otherwise.
            region_map: Region id of every cell.

        Raises:
            ValueError: If grid and region_map are not square grids of the
                same size.
        """
        size = check_square(grid, "grid")
        if check_square(region_map, "region_map") != size:
            raise ValueError("grid and region_map must have the same size.")

        self.size: int = size
        self.values: FrozenSet[int] = frozenset(range(1, size + 1))
        self.region_map: List[List[int]] = clone_grid(region_map)

        # knowledge[row][col]: 0 -> unknown, 1..N -> placed value
        self.knowledge: List[List[int]] = clone_grid(grid)

        units = get_units(region_map)
        self._rows: List[List[Coord]] = units[:size]
        self._cols: List[List[Coord]] = units[size : 2 * size]
        self._regions: List[List[Coord]] = units[2 * size :]
        self._units: List[List[Coord]] = units

        # Working candidate sets, one per empty cell; discarded with the engine.
        self.candidates: Dict[Coord, Set[int]] = {}
        self.contradiction: bool = False

        # Metrics / counters (for analysis)
        self.passes_count: int = 0
        self.naked_singles_count: int = 0
        self.hidden_singles_count: int = 0
        self.naked_pairs_count: int = 0
        self.pointing_pairs_count: int = 0

        self._seed_candidates()

    # -------------------------------------------------------------------------
    # Candidate bookkeeping
    # -------------------------------------------------------------------------

    def _seed_candidates(self) -> None:
        """Start every empty cell from the values missing in its row, column and region."""
        region_values: Dict[int, Set[int]] = {}
        for row in range(self.size):
            for col in range(self.size):
                value = self.knowledge[row][col]
                if value:
                    region_values.setdefault(self.region_map[row][col], set()).add(value)

        for row in range(self.size):
            row_values = {v for v in self.knowledge[row] if v}
            for col in range(self.size):
                if self.knowledge[row][col]:
                    continue
                col_values = {self.knowledge[r][col] for r in range(self.size)}
                used = row_values | col_values | region_values.get(
                    self.region_map[row][col], set()
                )
                cands = set(self.values - used)
                if not cands:
                    self.contradiction = True
                self.candidates[(row, col)] = cands

    def _discard(self, cell: Coord, value: int) -> bool:
        """Remove value from a cell's candidates; return True if it was there."""
        cands = self.candidates.get(cell)
        if cands is None or value not in cands:
            return False
        cands.discard(value)
        if not cands:
            self.contradiction = True
        return True

    def _place(self, row: int, col: int, value: int) -> None:
        """
        Fill a cell and drop value from the candidates of its row and column.

        Region peers are left alone here; hidden singles, naked pairs and
        pointing pairs read region units directly.
        """
        self.knowledge[row][col] = value
        del self.candidates[(row, col)]

        for peer in self._rows[row]:
            self._discard(peer, value)
        for peer in self._cols[col]:
            self._discard(peer, value)

    def _placed_in(self, unit: List[Coord]) -> Set[int]:
        return {self.knowledge[r][c] for r, c in unit if self.knowledge[r][c]}

    # -------------------------------------------------------------------------
    # Techniques
    # -------------------------------------------------------------------------

    def naked_singles(self) -> bool:
        """Fill every cell whose candidate set has exactly one value."""
        progress = False
        for cell in list(self.candidates):
            cands = self.candidates.get(cell)
            if cands is None or len(cands) != 1:
                continue
            value = next(iter(cands))
            self._place(cell[0], cell[1], value)
            self.naked_singles_count += 1
            progress = True
            if self.contradiction:
                break
        return progress

    def hidden_singles(self) -> bool:
        """In every unit, place a missing value that fits only one cell."""
        progress = False
        for unit in self._units:
            placed = self._placed_in(unit)
            for value in self.values:
                if value in placed:
                    continue

                holders = [
                    cell
                    for cell in unit
                    if cell in self.candidates and value in self.candidates[cell]
                ]
                if len(holders) != 1:
                    continue

                row, col = holders[0]
                self._place(row, col, value)
                placed.add(value)
                self.hidden_singles_count += 1
                progress = True
                if self.contradiction:
                    return progress
        return progress

    def naked_pairs(self) -> bool:
        """Clear a pair's two values from the rest of the unit when two cells share it."""
        progress = False
        for unit in self._units:
            pairs: Dict[FrozenSet[int], List[Coord]] = {}
            for cell in unit:
                cands = self.candidates.get(cell)
                if cands is not None and len(cands) == 2:
                    pairs.setdefault(frozenset(cands), []).append(cell)

            for pair, holders in pairs.items():
                if len(holders) != 2:
                    continue

                eliminated = False
                for cell in unit:
                    if cell in holders:
                        continue
                    for value in pair:
                        if self._discard(cell, value):
                            eliminated = True

                if eliminated:
                    self.naked_pairs_count += 1
                    progress = True
                if self.contradiction:
                    return progress
        return progress

    def pointing_pairs(self) -> bool:
        """Clear a value from a row or column outside a region that must hold it there."""
        progress = False
        for region in self._regions:
            placed = self._placed_in(region)
            region_id = self.region_map[region[0][0]][region[0][1]]

            for value in self.values:
                if value in placed:
                    continue

                holders = [
                    cell
                    for cell in region
                    if cell in self.candidates and value in self.candidates[cell]
                ]
                if not holders:
                    continue

                lines: List[List[Coord]] = []
                rows = {r for r, _ in holders}
                cols = {c for _, c in holders}
                if len(rows) == 1:
                    lines.append(self._rows[next(iter(rows))])
                if len(cols) == 1:
                    lines.append(self._cols[next(iter(cols))])

                eliminated = False
                for line in lines:
                    for r, c in line:
                        if self.region_map[r][c] == region_id:
                            continue
                        if self._discard((r, c), value):
                            eliminated = True

                if eliminated:
                    self.pointing_pairs_count += 1
                    progress = True
                if self.contradiction:
                    return progress
        return progress

    # -------------------------------------------------------------------------
    # Main loop
    # -------------------------------------------------------------------------

    def is_solved(self) -> bool:
        return not self.candidates

    def solve(self) -> bool:
        """
        Run the techniques to a fixed point.

        Returns:
            True if every cell got filled and the result is a valid grid,
            False if deduction stalls or hits an empty candidate set.
        """
        if self.contradiction:
            return False

        while self.candidates:
            self.passes_count += 1
            progress = False

            for technique in (
                self.naked_singles,
                self.hidden_singles,
                self.naked_pairs,
                self.pointing_pairs,
            ):
                if technique():
                    progress = True
                if self.contradiction:
                    logger.debug("Deduction hit an empty candidate set")
                    return False
                if not self.candidates:
                    break

            if not progress:
                return False

        return is_valid_solution(self.knowledge, self.region_map)

    def stats(self) -> Dict[str, int]:
        return {
            "passes_count": self.passes_count,
            "naked_singles_count": self.naked_singles_count,
            "hidden_singles_count": self.hidden_singles_count,
            "naked_pairs_count": self.naked_pairs_count,
            "pointing_pairs_count": self.pointing_pairs_count,
        }


def is_logically_solvable(
    grid: Sequence[Sequence[int]], region_map: Sequence[Sequence[int]]
) -> bool:
    """Return True if the deduction engine fills grid completely without search."""
    return LogicalDeductionEngine(grid, region_map).solve()
