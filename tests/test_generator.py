import logging
import random

import pytest

from sudomines import generator
from sudomines.config import GenerationSettings
from sudomines.deduction import is_logically_solvable
from sudomines.engine import (
    SudokuMinesweeper,
    apply_click,
    grid_region_map,
    grid_values,
    is_game_won,
)
from sudomines.errors import (
    GenerationTimedOut,
    LatinFillFailed,
    PuzzleAlreadySolved,
    RegionGenerationFailed,
)
from sudomines.generator import (
    TUTORIAL_STEPS,
    build_fallback_grid,
    build_puzzle_grid,
    build_solved_values,
    build_tutorial_grid,
    build_tutorial_step_grid,
    generate_custom_grid,
    generate_grid,
    generate_grid_with_difficulty,
    generate_solved_grid,
    tutorial_step_highlights,
)
from sudomines.regions import validate_region_map
from sudomines.selector import reveal_cap_for_difficulty
from sudomines.utils import is_valid_solution


def _check_playable(grid, size):
    values = grid_values(grid)
    region_map = grid_region_map(grid)

    assert validate_region_map(region_map)
    assert is_valid_solution(values, region_map)

    mines = [(r, c) for r in range(size) for c in range(size) if grid[r][c].is_mine]
    assert sorted(region_map[r][c] for r, c in mines) == list(range(size))
    assert all(values[r][c] == size for r, c in mines)
    # Mines only start visible when their region came fully revealed.
    assert all(grid[r][c].is_flag for r, c in mines if grid[r][c].revealed)
    assert not is_game_won(grid)


@pytest.mark.parametrize("size", [4, 5, 6, 7, 8, 9, 10])
def test_generate_grid_is_playable(size):
    grid = generate_grid(size, time_budget=None)

    _check_playable(grid, size)
    puzzle = [
        [cell.value if cell.revealed and not cell.is_mine else 0 for cell in line]
        for line in grid
    ]
    assert is_logically_solvable(puzzle, grid_region_map(grid))


def test_generate_grid_with_difficulty_caps_reveals():
    size = 5
    cap = reveal_cap_for_difficulty(size, "hard")

    grid = generate_grid_with_difficulty(size, "hard", time_budget=None)

    _check_playable(grid, size)
    revealed = sum(
        1 for line in grid for cell in line if cell.revealed and not cell.is_mine
    )
    assert revealed <= max(cap, size)


def test_generate_grid_with_unknown_difficulty():
    with pytest.raises(ValueError):
        generate_grid_with_difficulty(4, "brutal")


@pytest.mark.parametrize("size", [2, 11])
def test_generate_grid_rejects_bad_size(size):
    with pytest.raises(ValueError):
        generate_grid(size)


def test_generate_grid_rejects_non_positive_budget():
    with pytest.raises(ValueError):
        generate_grid(4, time_budget=0)


def test_generate_grid_falls_back_on_timeout(monkeypatch, caplog):
    def timed_out(*args, **kwargs):
        raise GenerationTimedOut("Generation exceeded its 3.00s budget.")

    monkeypatch.setattr(generator, "generate_solved_grid", timed_out)

    with caplog.at_level(logging.WARNING, logger="sudomines.generator"):
        grid = generate_grid(5)

    assert grid == build_fallback_grid(5)
    assert "Falling back" in caplog.text


def test_fallback_grid_layout():
    grid = build_fallback_grid(4)

    for row in range(4):
        assert [cell.value for cell in grid[row]] == [1, 2, 3, 4]
        assert {cell.region_id for cell in grid[row]} == {row}
        assert [cell.is_mine for cell in grid[row]] == [False, False, False, True]
        assert [cell.revealed for cell in grid[row]] == [True, False, False, False]


def test_generation_settings_validation():
    with pytest.raises(ValueError):
        GenerationSettings(max_region_attempts=0)
    with pytest.raises(ValueError):
        GenerationSettings(candidate_puzzles=-1)


def test_generate_grid_with_small_settings():
    settings = GenerationSettings(candidate_puzzles=2)

    grid = generate_grid(4, time_budget=None, settings=settings)

    _check_playable(grid, 4)


def test_build_puzzle_grid_detects_presolved(monkeypatch, tutorial_values, tutorial_regions):
    every_safe_cell = [
        (r, c) for r in range(4) for c in range(4) if tutorial_values[r][c] != 4
    ]
    monkeypatch.setattr(
        generator, "find_minimum_revealed_cells", lambda *args: every_safe_cell
    )

    with pytest.raises(PuzzleAlreadySolved):
        build_puzzle_grid(tutorial_values, tutorial_regions)


def test_generate_custom_grid_reports_failed_fill(monkeypatch):
    monkeypatch.setattr(generator, "fill_latin_grid", lambda *args: None)

    with pytest.raises(LatinFillFailed) as excinfo:
        generate_custom_grid(5)

    assert excinfo.value.attempts == 1


def test_tutorial_grid():
    grid = build_tutorial_grid()

    assert grid_values(grid) == generator.TUTORIAL_VALUES
    assert not any(cell.revealed for line in grid for cell in line)
    for line in grid:
        for cell in line:
            assert cell.is_mine == (cell.value == 4)


@pytest.mark.parametrize("size", [4, 5, 6, 7, 8])
def test_safe_cells_in_any_order_win(size):
    game = SudokuMinesweeper(generate_grid(size, time_budget=None))
    safe_cells = [
        (r, c) for r in range(size) for c in range(size) if not game.grid[r][c].is_mine
    ]
    random.shuffle(safe_cells)

    status = 0
    for row, col in safe_cells:
        if game.grid[row][col].revealed:
            continue
        status, _ = game.reveal(row, col)
        assert status != -1
        if status == 1:
            break

    assert status == 1
    assert all(cell.revealed for line in game.grid for cell in line)
    assert all(cell.is_flag for line in game.grid for cell in line if cell.is_mine)


def test_failed_partitions_are_retried(monkeypatch):
    real_create_regions = generator.create_regions
    calls = []

    def flaky(size, *args):
        calls.append(size)
        if len(calls) <= 2:
            raise RegionGenerationFailed(size, 1000)
        return real_create_regions(size, *args)

    monkeypatch.setattr(generator, "create_regions", flaky)

    values, region_map = build_solved_values(5)

    assert len(calls) >= 3
    assert is_valid_solution(values, region_map)


def test_failed_partitions_count_against_attempts(monkeypatch):
    def failing(size, *args):
        raise RegionGenerationFailed(size, 1000)

    monkeypatch.setattr(generator, "create_regions", failing)

    with pytest.raises(LatinFillFailed) as excinfo:
        build_solved_values(5, GenerationSettings(max_grid_attempts=4))

    assert excinfo.value.attempts == 4


def test_always_presolved_raises_presolved(monkeypatch):
    caps = []

    def presolved(values, region_map, cap, *args):
        caps.append(cap)
        raise PuzzleAlreadySolved("already complete")

    monkeypatch.setattr(generator, "build_puzzle_grid", presolved)

    with pytest.raises(PuzzleAlreadySolved, match="All 3 attempts"):
        generate_solved_grid(4, 10, GenerationSettings(max_grid_attempts=3))

    # The cap shrinks by 0.8 while it exceeds size / 2.
    assert caps == [10, 8, 6]


def test_tutorial_steps_cover_every_page():
    assert list(TUTORIAL_STEPS) == [
        "numbers",
        "mines",
        "region_completion",
        "rows_columns",
        "cross_region",
        "mine_safety",
        "winning",
    ]


@pytest.mark.parametrize(
    "step, revealed",
    [
        ("numbers", {(0, 0), (0, 2), (1, 0), (2, 2)}),
        ("mines", {(0, 0), (0, 1), (1, 0), (1, 1), (2, 3)}),
        ("region_completion", {(0, 2), (0, 3), (1, 3), (0, 0), (2, 0), (3, 3)}),
        (
            "rows_columns",
            {(1, 0), (1, 1), (1, 3), (0, 0), (2, 0), (3, 0), (0, 3), (2, 2)},
        ),
        (
            "cross_region",
            {
                (0, 0), (1, 1), (0, 2), (0, 3), (2, 0), (3, 1),
                (2, 2), (2, 3), (0, 1), (1, 0), (3, 0), (3, 3),
            },
        ),
        (
            "mine_safety",
            {
                (0, 0), (0, 1), (1, 0), (1, 1), (0, 2),
                (0, 3), (1, 3), (2, 0), (2, 1), (2, 2),
            },
        ),
        (
            "winning",
            {
                (0, 0), (0, 2), (0, 3), (1, 0), (1, 1),
                (1, 3), (2, 0), (2, 2), (3, 1), (3, 3),
            },
        ),
    ],
)
def test_tutorial_step_reveals(step, revealed):
    grid = build_tutorial_step_grid(step)

    shown = {(r, c) for r in range(4) for c in range(4) if grid[r][c].revealed}
    assert shown == revealed
    assert grid_values(grid) == generator.TUTORIAL_VALUES
    assert not any(cell.is_flag for line in grid for cell in line)


def test_region_completion_step_flags_mine_on_next_click():
    grid = build_tutorial_step_grid("region_completion")
    mine = grid[1][2]
    assert mine.is_mine and not mine.revealed

    # (1, 2) is region 1's mine; any safe click runs the completion cascade.
    result = apply_click(grid, 1, 0)

    assert result.new_grid[1][2].revealed
    assert result.new_grid[1][2].is_flag
    assert not result.game_over


def test_winning_step_can_be_finished():
    game = SudokuMinesweeper(build_tutorial_step_grid("winning"))

    status = 0
    for row in range(4):
        for col in range(4):
            cell = game.grid[row][col]
            if cell.revealed or cell.is_mine:
                continue
            status, _ = game.reveal(row, col)
            if status:
                break
        if status:
            break

    assert status == 1


def test_tutorial_step_highlights():
    assert tutorial_step_highlights("region_completion") == [
        (0, 2), (0, 3), (1, 2), (1, 3)
    ]
    assert len(tutorial_step_highlights("mine_safety")) == 8


def test_unknown_tutorial_step():
    with pytest.raises(ValueError):
        build_tutorial_step_grid("advanced")
    with pytest.raises(ValueError):
        tutorial_step_highlights("advanced")
