"""
Generation parameters for the puzzle core.

Module-level constants hold the defaults; GenerationSettings bundles the
ones a caller may want to override for a single generation call.
"""

from dataclasses import dataclass
from typing import Dict

# Grid sizes
MIN_SIZE = 3
MAX_SIZE = 10

# Retry bounds
MAX_REGION_ATTEMPTS = 1000      # Partition attempts before RegionGenerationFailed
MAX_GRID_ATTEMPTS = 1000        # Partition + fill rounds before LatinFillFailed
LATIN_FILL_MAX_STEPS = 20000    # Backtracking steps before a fill is abandoned

# Minimal-clue search
CANDIDATE_PUZZLES = 10          # Candidate reveal patterns per puzzle
REVEAL_CAP_SHRINK = 0.8         # Cap multiplier when a puzzle comes out pre-solved

# Wall-clock budget of one generate_grid call, in seconds
GENERATION_TIME_BUDGET = 3.0

# Reveal percentages for a 4x4 grid, and how much each level drops per
# doubling of the grid size.
DIFFICULTY_BASE: Dict[str, float] = {
    "easy": 0.45,
    "medium": 0.25,
    "hard": 0.12,
    "expert": 0.05,
}
DIFFICULTY_SLOPE: Dict[str, float] = {
    "easy": 0.05,
    "medium": 0.05,
    "hard": 0.03,
    "expert": 0.01,
}

# calculate_difficulty() cut-offs, as percentages of non-mine cells revealed
DIFFICULTY_RATING_CUTOFFS = (
    ("easy", 50.0),
    ("medium", 30.0),
    ("hard", 15.0),
)


@dataclass(frozen=True)
class GenerationSettings:
    """Knobs for one generate_grid() call."""

    max_region_attempts: int = MAX_REGION_ATTEMPTS
    max_grid_attempts: int = MAX_GRID_ATTEMPTS
    latin_fill_max_steps: int = LATIN_FILL_MAX_STEPS
    candidate_puzzles: int = CANDIDATE_PUZZLES

    def __post_init__(self) -> None:
        if self.max_region_attempts <= 0 or self.max_grid_attempts <= 0:
            raise ValueError("Attempt bounds must be positive.")
        if self.latin_fill_max_steps <= 0:
            raise ValueError("latin_fill_max_steps must be positive.")
        if self.candidate_puzzles <= 0:
            raise ValueError("candidate_puzzles must be positive.")
