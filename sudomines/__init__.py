"""
Sudoku-Minesweeper puzzle core

Generates and plays N x N grids split into N connected regions, where every
row, column and region holds 1..N once and each region's highest value is
a hidden mine:
- Region partitioning: shuffled breadth-first growth with connectivity checks
- Latin filling: randomized iterative backtracking
- Clue selection: fewest revealed cells that pure deduction can finish
- Deduction: naked singles, hidden singles, naked pairs, pointing pairs
- Click handling: region/row/column completion cascades and win/loss detection
"""

from .analysis import (
    format_grid_values,
    run_generation_many_tests,
    run_generation_single_test,
    run_size_sweep_analysis,
    summarize_technique_mix,
)
from .config import GenerationSettings
from .deduction import LogicalDeductionEngine, is_logically_solvable
from .engine import (
    Cell,
    GameState,
    PuzzleResult,
    SudokuMinesweeper,
    apply_click,
    calculate_difficulty,
    generate_hint,
    play_cli,
)
from .errors import (
    GenerationTimedOut,
    LatinFillFailed,
    PuzzleAlreadySolved,
    RegionGenerationFailed,
    SudominesError,
)
from .generator import (
    build_fallback_grid,
    build_tutorial_grid,
    build_tutorial_step_grid,
    generate_custom_grid,
    generate_grid,
    generate_grid_with_difficulty,
    generate_solved_grid,
    tutorial_step_highlights,
)
from .latin import assign_mines, fill_latin_grid
from .regions import create_regions, validate_region_map
from .selector import (
    find_minimum_revealed_cells,
    generate_puzzle,
    generate_uniquely_minimal_puzzle,
    get_difficulty_thresholds,
)
from .uniqueness import has_unique_solution
from .worker import handle_message

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "Cell",
    "GameState",
    "PuzzleResult",
    "SudokuMinesweeper",
    "LogicalDeductionEngine",
    "GenerationSettings",
    # Generation
    "create_regions",
    "validate_region_map",
    "fill_latin_grid",
    "assign_mines",
    "generate_grid",
    "generate_solved_grid",
    "generate_grid_with_difficulty",
    "generate_custom_grid",
    "build_fallback_grid",
    "build_tutorial_grid",
    "build_tutorial_step_grid",
    "tutorial_step_highlights",
    # Solving
    "is_logically_solvable",
    "has_unique_solution",
    "find_minimum_revealed_cells",
    "generate_puzzle",
    "generate_uniquely_minimal_puzzle",
    "get_difficulty_thresholds",
    # Game logic
    "apply_click",
    "generate_hint",
    "calculate_difficulty",
    "play_cli",
    # Worker
    "handle_message",
    # Analysis functions
    "format_grid_values",
    "run_generation_single_test",
    "run_generation_many_tests",
    "run_size_sweep_analysis",
    "summarize_technique_mix",
    # Errors
    "SudominesError",
    "RegionGenerationFailed",
    "LatinFillFailed",
    "PuzzleAlreadySolved",
    "GenerationTimedOut",
]
