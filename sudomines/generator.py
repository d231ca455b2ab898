"""End-to-end puzzle generation: regions, Latin fill, mines and revealed cells."""

import logging
from typing import Dict, List, NamedTuple, Optional, Tuple

from .config import (
    CANDIDATE_PUZZLES,
    GENERATION_TIME_BUDGET,
    MAX_SIZE,
    MIN_SIZE,
    REVEAL_CAP_SHRINK,
    GenerationSettings,
)
from .engine import (
    Cell,
    Grid,
    build_cell_grid,
    is_game_won,
    reveal_mines_in_completed_regions,
)
from .errors import (
    GenerationTimedOut,
    LatinFillFailed,
    PuzzleAlreadySolved,
    RegionGenerationFailed,
)
from .latin import assign_mines, fill_latin_grid, has_valid_line_sums
from .regions import create_regions
from .selector import find_minimum_revealed_cells, reveal_cap_for_difficulty
from .utils import Coord, Deadline, check_deadline

logger = logging.getLogger(__name__)

TUTORIAL_VALUES = [
    [2, 4, 1, 3],
    [3, 1, 4, 2],
    [1, 2, 3, 4],
    [4, 3, 2, 1],
]
TUTORIAL_REGIONS = [
    [0, 0, 1, 1],
    [0, 0, 1, 1],
    [2, 2, 3, 3],
    [2, 2, 3, 3],
]


def _check_size(size: int) -> None:
    if not MIN_SIZE <= size <= MAX_SIZE:
        raise ValueError(f"size must be between {MIN_SIZE} and {MAX_SIZE}.")


def build_solved_values(
    size: int,
    settings: Optional[GenerationSettings] = None,
    deadline: Optional[Deadline] = None,
) -> Tuple[List[List[int]], List[List[int]]]:
    """
    Produce a region partition and a Latin fill that respects it.

    A partition that cannot be built, or a fill that fails (or whose line
    sums are off), triggers a fresh round, up to settings.max_grid_attempts
    rounds.

    Returns:
        Tuple of (values, region_map).

    Raises:
        LatinFillFailed: If no round produced a valid fill.
        GenerationTimedOut: If the deadline passed.
    """
    settings = settings or GenerationSettings()

    for attempt in range(settings.max_grid_attempts):
        check_deadline(deadline)
        try:
            region_map, _ = create_regions(
                size, settings.max_region_attempts, deadline
            )
        except RegionGenerationFailed as exc:
            logger.debug("Partition failed on attempt %d (%s)", attempt + 1, exc)
            continue
        values = fill_latin_grid(
            size, region_map, settings.latin_fill_max_steps, deadline
        )
        if values is None:
            logger.debug("Latin fill failed on attempt %d, new partition", attempt + 1)
            continue
        if not has_valid_line_sums(values):
            logger.debug("Line sums off on attempt %d, new partition", attempt + 1)
            continue
        return values, region_map

    raise LatinFillFailed(size, settings.max_grid_attempts)


def build_puzzle_grid(
    values: List[List[int]],
    region_map: List[List[int]],
    max_initial_revealed: Optional[int] = None,
    attempts: int = CANDIDATE_PUZZLES,
    deadline: Optional[Deadline] = None,
) -> Grid:
    """
    Turn a solved grid into a playable one: mines set, minimal clues revealed.

    Regions whose non-mine cells all start revealed get their mine flagged.

    Raises:
        PuzzleAlreadySolved: If the starting position is already complete.
        GenerationTimedOut: If the deadline passed.
    """
    grid = build_cell_grid(values, region_map)
    assign_mines(grid)

    revealed = find_minimum_revealed_cells(
        values, region_map, max_initial_revealed, attempts, deadline
    )
    for row, col in revealed:
        grid[row][col].revealed = True

    reveal_mines_in_completed_regions(grid)
    if is_game_won(grid):
        raise PuzzleAlreadySolved(
            f"{len(revealed)} revealed cells already complete the grid."
        )
    return grid


def generate_solved_grid(
    size: int,
    max_initial_revealed: Optional[int] = None,
    settings: Optional[GenerationSettings] = None,
    deadline: Optional[Deadline] = None,
) -> Grid:
    """
    Generate a solved, mined and minimally revealed grid with no time fallback.

    Args:
        size: Grid side length.
        max_initial_revealed: Optional cap on initially revealed cells.
        settings: Attempt bounds; defaults to GenerationSettings().
        deadline: Optional wall-clock cut-off.

    Raises:
        ValueError: If size is out of range.
        LatinFillFailed: If build_solved_values() ran out of rounds.
        PuzzleAlreadySolved: If every attempt came out already solved.
        GenerationTimedOut: If the deadline passed.
    """
    _check_size(size)
    settings = settings or GenerationSettings()
    cap = max_initial_revealed

    for attempt in range(settings.max_grid_attempts):
        values, region_map = build_solved_values(size, settings, deadline)
        try:
            return build_puzzle_grid(
                values, region_map, cap, settings.candidate_puzzles, deadline
            )
        except PuzzleAlreadySolved as exc:
            logger.debug("Attempt %d pre-solved (%s)", attempt + 1, exc)
            if cap is not None and cap > size / 2:
                cap = int(cap * REVEAL_CAP_SHRINK)

    raise PuzzleAlreadySolved(
        f"All {settings.max_grid_attempts} attempts came out already solved."
    )


def build_fallback_grid(size: int) -> Grid:
    """
    Deterministic stand-in grid for when generation runs out of time.

    Each row is its own region holding 1..size left to right, so every mine
    sits in the last column. Columns repeat values; only the first column
    starts revealed.
    """
    grid = [
        [Cell(value=col + 1, region_id=row) for col in range(size)]
        for row in range(size)
    ]
    for row in range(size):
        grid[row][size - 1].is_mine = True
        grid[row][0].revealed = True
    return grid


def generate_grid(
    size: int,
    max_initial_revealed: Optional[int] = None,
    time_budget: Optional[float] = GENERATION_TIME_BUDGET,
    settings: Optional[GenerationSettings] = None,
) -> Grid:
    """
    Generate a new puzzle grid of the given size.

    Args:
        size: Grid side length (3..10).
        max_initial_revealed: Optional cap on initially revealed cells.
        time_budget: Seconds allowed before the fallback grid is returned;
            None disables the limit.
        settings: Attempt bounds; defaults to GenerationSettings().

    Returns:
        A solved, mined, minimally revealed grid, or build_fallback_grid(size)
        if the time budget ran out.

    Raises:
        ValueError: If size is out of range or time_budget is not positive.
        LatinFillFailed: If no partition and fill succeeded within the
            attempt bound.
        PuzzleAlreadySolved: If every attempt came out already solved.
    """
    _check_size(size)
    if time_budget is not None and time_budget <= 0:
        raise ValueError("time_budget must be positive or None.")

    deadline = Deadline(time_budget)
    try:
        return generate_solved_grid(size, max_initial_revealed, settings, deadline)
    except GenerationTimedOut as exc:
        logger.warning("%s Falling back to the fixed %dx%d grid.", exc, size, size)
        return build_fallback_grid(size)


def generate_grid_with_difficulty(
    size: int,
    difficulty: str,
    time_budget: Optional[float] = GENERATION_TIME_BUDGET,
) -> Grid:
    """
    Generate a grid whose revealed-cell count is capped by a difficulty level.

    Args:
        size: Grid side length.
        difficulty: "easy", "medium", "hard" or "expert".
        time_budget: Seconds allowed before the fallback grid is returned.
    """
    cap = reveal_cap_for_difficulty(size, difficulty)
    return generate_grid(size, max_initial_revealed=cap, time_budget=time_budget)


def generate_custom_grid(size: int, max_initial_revealed: Optional[int] = None) -> Grid:
    """
    Single-shot pipeline: one partition, one fill, no retries.

    Raises:
        RegionGenerationFailed: If no partition could be built.
        LatinFillFailed: If the one Latin fill attempt fails.
    """
    _check_size(size)
    region_map, _ = create_regions(size)
    values = fill_latin_grid(size, region_map)
    if values is None:
        raise LatinFillFailed(size, 1)

    grid = build_cell_grid(values, region_map)
    assign_mines(grid)
    for row, col in find_minimum_revealed_cells(values, region_map, max_initial_revealed):
        grid[row][col].revealed = True
    return grid


def build_tutorial_grid() -> Grid:
    """The fixed 4x4 teaching grid: 2x2 regions, every 4 is a mine, nothing revealed."""
    grid = build_cell_grid(TUTORIAL_VALUES, TUTORIAL_REGIONS)
    return assign_mines(grid)


# -----------------------------------------------------------------------------
# Tutorial steps
# -----------------------------------------------------------------------------


class TutorialStep(NamedTuple):
    """Cells shown on one tutorial page of the base teaching grid."""

    revealed: Tuple[Coord, ...]
    highlighted: Tuple[Coord, ...]


_REGION_1 = ((0, 2), (0, 3), (1, 2), (1, 3))
_REGION_2 = ((2, 0), (2, 1), (3, 0), (3, 1))
_REGION_3 = ((2, 2), (2, 3), (3, 2), (3, 3))

# Steps in teaching order. Revealed mines here are shown as examples, not
# clicked, so they are not flagged either.
TUTORIAL_STEPS: Dict[str, TutorialStep] = {
    # Row/column uniqueness
    "numbers": TutorialStep(
        revealed=((0, 0), (0, 2), (1, 0), (2, 2)),
        highlighted=((0, 0), (0, 2), (1, 0), (2, 2)),
    ),
    # One full region plus a second mine
    "mines": TutorialStep(
        revealed=((0, 0), (0, 1), (1, 0), (1, 1), (2, 3)),
        highlighted=((0, 1), (2, 3)),
    ),
    # Region 1 has every non-mine cell shown; the next click flags (1, 2)
    "region_completion": TutorialStep(
        revealed=((0, 2), (0, 3), (1, 3), (0, 0), (2, 0), (3, 3)),
        highlighted=_REGION_1,
    ),
    # Row 1 and column 0 each one cell short
    "rows_columns": TutorialStep(
        revealed=((1, 0), (1, 1), (1, 3), (0, 0), (2, 0), (3, 0), (0, 3), (2, 2)),
        highlighted=((1, 0), (1, 1), (1, 2), (1, 3), (0, 0), (2, 0), (3, 0)),
    ),
    "cross_region": TutorialStep(
        revealed=(
            (0, 0), (1, 1), (0, 2), (0, 3), (2, 0), (3, 1),
            (2, 2), (2, 3), (0, 1), (1, 0), (3, 0), (3, 3),
        ),
        highlighted=((1, 2), (1, 3)),
    ),
    "mine_safety": TutorialStep(
        revealed=(
            (0, 0), (0, 1), (1, 0), (1, 1), (0, 2), (0, 3),
            (1, 3), (2, 0), (2, 1), (2, 2),
        ),
        highlighted=_REGION_1 + _REGION_2,
    ),
    # A partial grid the player finishes
    "winning": TutorialStep(
        revealed=(
            (0, 0), (0, 2), (0, 3), (1, 0), (1, 1),
            (1, 3), (2, 0), (2, 2), (3, 1), (3, 3),
        ),
        highlighted=_REGION_3,
    ),
}


def _tutorial_step(step: str) -> TutorialStep:
    try:
        return TUTORIAL_STEPS[step]
    except KeyError:
        raise ValueError(
            f"Unknown tutorial step {step!r}; expected one of {list(TUTORIAL_STEPS)}."
        ) from None


def build_tutorial_step_grid(step: str) -> Grid:
    """
    Build the teaching grid for one tutorial step.

    Args:
        step: A key of TUTORIAL_STEPS.

    Returns:
        The base tutorial grid with that step's cells revealed. No cascade
        is applied, so completions show up only after the next click.

    Raises:
        ValueError: If step is unknown.
    """
    grid = build_tutorial_grid()
    for row, col in _tutorial_step(step).revealed:
        grid[row][col].revealed = True
    return grid


def tutorial_step_highlights(step: str) -> List[Coord]:
    """Cells a tutorial step draws attention to."""
    return list(_tutorial_step(step).highlighted)
