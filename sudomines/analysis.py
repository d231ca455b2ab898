"""Analysis and benchmarking tools for the puzzle generator."""

import random
import time
from typing import Dict, Iterable, List, Optional

import matplotlib.pyplot as plt
import numpy as np

from .deduction import LogicalDeductionEngine
from .engine import Grid, SudokuMinesweeper, grid_region_map, grid_values, revealed_percentage
from .generator import generate_grid
from .selector import reveal_cap_for_difficulty
from .utils import is_valid_solution

TECHNIQUES = ("naked_singles", "hidden_singles", "naked_pairs", "pointing_pairs")


def format_grid_values(grid: Grid, *, show_coords: bool = True) -> str:
    """
    Format a grid's visible values as a human-readable string.

    Args:
        grid: Cell grid to display.
        show_coords: If True, include coordinate labels and a header.

    Returns:
        A text grid where hidden cells are shown as '.', flagged mines as 'F'
        and clicked mines as 'M'.
    """
    n = len(grid)

    def cell_char(row: int, col: int) -> str:
        cell = grid[row][col]
        if not cell.revealed:
            return "."
        if cell.is_mine:
            return "F" if cell.is_flag else "M"
        return str(cell.value)

    lines: List[str] = []
    if show_coords:
        header = " ".join(f"{c:2d}" for c in range(n))
        lines.append("   " + header)
        lines.append("   " + "-" * (3 * n - 1))

    for row in range(n):
        line = " ".join(f"{cell_char(row, col):>2}" for col in range(n))
        lines.append(f"{row:2d} |" + line if show_coords else line)

    return "\n".join(lines)


def _puzzle_values(grid: Grid) -> List[List[int]]:
    return [
        [cell.value if cell.revealed and not cell.is_mine else 0 for cell in line]
        for line in grid
    ]


def _play_through(grid: Grid) -> Dict[str, int]:
    """Click every hidden non-mine cell in random order until the game ends."""
    game = SudokuMinesweeper(grid)
    targets = [
        (row, col)
        for row, line in enumerate(grid)
        for col, cell in enumerate(line)
        if not cell.revealed and not cell.is_mine
    ]
    random.shuffle(targets)

    status = 0
    for row, col in targets:
        status, _ = game.reveal(row, col)
        if status != 0:
            break

    return {"status": status, "clicks_count": game.clicks_count}


def run_generation_single_test(
    size: int,
    difficulty: Optional[str] = None,
    *,
    show_grid: bool = False,
    time_budget: Optional[float] = None,
) -> Dict[str, object]:
    """
    Generate one grid, check it, and play it to the end with safe clicks.

    Args:
        size: Grid side length.
        difficulty: Optional difficulty level capping the revealed cells.
        show_grid: If True, print the starting position.
        time_budget: Generation time budget; None disables the fallback.

    Returns:
        Metrics of the run: generation time, revealed cells, whether the
        solution is valid, whether deduction solves the starting position,
        per-technique counters and the play-through outcome.
    """
    cap = None if difficulty is None else reveal_cap_for_difficulty(size, difficulty)

    start = time.perf_counter()
    grid = generate_grid(size, max_initial_revealed=cap, time_budget=time_budget)
    elapsed = time.perf_counter() - start

    region_map = grid_region_map(grid)
    engine = LogicalDeductionEngine(_puzzle_values(grid), region_map)
    solvable = engine.solve()

    if show_grid:
        print(f"Size {size}x{size}, generated in {elapsed:.3f}s")
        print(format_grid_values(grid))
        print()

    out: Dict[str, object] = {
        "size": size,
        "elapsed": elapsed,
        "valid_solution": is_valid_solution(grid_values(grid), region_map),
        "revealed_count": sum(
            1 for line in grid for cell in line if cell.revealed and not cell.is_mine
        ),
        "revealed_percentage": revealed_percentage(grid),
        "logically_solvable": solvable,
    }
    out.update(engine.stats())
    out.update(_play_through(grid))
    return out


def run_generation_many_tests(
    size: int,
    runs: int,
    difficulty: Optional[str] = None,
    *,
    time_budget: Optional[float] = None,
) -> Dict[str, float]:
    """
    Run many independent generations and return averaged metrics.

    Args:
        size: Grid side length.
        runs: Number of grids to generate.
        difficulty: Optional difficulty level capping the revealed cells.
        time_budget: Generation time budget; None disables the fallback.

    Returns:
        Averages of the numeric single-run metrics (prefixed with "avg_"),
        plus:
        - std_elapsed, max_elapsed
        - valid_rate (share of grids that are real solutions, i.e. no fallback)
        - solvable_rate
        - win_rate
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    results = [
        run_generation_single_test(size, difficulty, time_budget=time_budget)
        for _ in range(runs)
    ]

    def column(key: str) -> np.ndarray:
        return np.array([float(r[key]) for r in results], dtype=float)  # type: ignore[arg-type]

    elapsed = column("elapsed")
    out: Dict[str, float] = {
        "avg_elapsed": float(elapsed.mean()),
        "std_elapsed": float(elapsed.std()),
        "max_elapsed": float(elapsed.max()),
        "valid_rate": float(column("valid_solution").mean()),
        "solvable_rate": float(column("logically_solvable").mean()),
        "win_rate": float((column("status") == 1).mean()),
    }
    for key in (
        "revealed_count",
        "revealed_percentage",
        "clicks_count",
        "passes_count",
    ) + tuple(f"{t}_count" for t in TECHNIQUES):
        out[f"avg_{key}"] = float(column(key).mean())

    return out


def run_size_sweep_analysis(
    sizes: Iterable[int],
    runs: int,
    *,
    difficulty: Optional[str] = None,
    show: bool = True,
) -> Dict[int, Dict[str, float]]:
    """
    Run aggregated generation tests over several grid sizes and plot summaries.

    Args:
        sizes: Grid sizes to test.
        runs: Number of grids per size.
        difficulty: Optional difficulty level capping the revealed cells.
        show: If True, display the plots.

    Returns:
        Mapping from size to statistics dict returned by run_generation_many_tests().
    """
    results: Dict[int, Dict[str, float]] = {}
    for size in sizes:
        results[size] = run_generation_many_tests(size, runs, difficulty)

    labels = [f"{s}x{s}" for s in results]
    x = np.arange(len(labels))

    # 1) Revealed percentage
    plt.figure()  # type: ignore[misc]
    plt.bar(x, [results[s]["avg_revealed_percentage"] for s in results])  # type: ignore[misc]
    plt.xticks(x, labels)  # type: ignore[misc]
    plt.ylabel("Average revealed non-mine cells (%)")  # type: ignore[misc]
    plt.title("Initial clues by grid size")  # type: ignore[misc]
    plt.tight_layout()

    # 2) Generation time
    plt.figure()  # type: ignore[misc]
    plt.bar(  # type: ignore[misc]
        x,
        [results[s]["avg_elapsed"] for s in results],
        yerr=[results[s]["std_elapsed"] for s in results],
    )
    plt.xticks(x, labels)  # type: ignore[misc]
    plt.ylabel("Seconds")  # type: ignore[misc]
    plt.title("Average generation time by grid size")  # type: ignore[misc]
    plt.tight_layout()

    # 3) Deduction technique mix
    bar_w = 0.2
    plt.figure()  # type: ignore[misc]
    for i, technique in enumerate(TECHNIQUES):
        plt.bar(  # type: ignore[misc]
            x + (i - 1.5) * bar_w,
            [results[s][f"avg_{technique}_count"] for s in results],
            width=bar_w,
            label=technique.replace("_", " "),
        )
    plt.xticks(x, labels)  # type: ignore[misc]
    plt.ylabel("Average applications per puzzle")  # type: ignore[misc]
    plt.title("Deduction techniques needed")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    if show:
        plt.show()  # type: ignore[misc]

    return results


def summarize_technique_mix(
    results: Dict[int, Dict[str, float]], size: int
) -> Dict[str, float]:
    """
    Share of each deduction technique among all applications for one size.

    Args:
        results: Output of run_size_sweep_analysis().
        size: Which size to summarize.

    Returns:
        Dict with "<technique>_frac" for every technique plus
        "total_applications".

    Raises:
        KeyError: If size or a technique metric is missing.
        ZeroDivisionError: If no technique was ever applied.
    """
    if size not in results:
        raise KeyError(f"Size {size!r} not found in results.")
    metrics = results[size]

    counts: Dict[str, float] = {}
    for technique in TECHNIQUES:
        key = f"avg_{technique}_count"
        if key not in metrics:
            raise KeyError(f"Missing key {key!r} in metrics for size {size!r}.")
        counts[technique] = float(metrics[key])

    total = sum(counts.values())
    if total == 0.0:
        raise ZeroDivisionError("No deduction technique was applied; cannot compute fractions.")

    out = {f"{t}_frac": c / total for t, c in counts.items()}
    out["total_applications"] = total
    return out
