import pytest

from sudomines.engine import (
    Cell,
    GameState,
    PuzzleResult,
    SudokuMinesweeper,
    apply_click,
    build_cell_grid,
    calculate_difficulty,
    generate_hint,
    grid_from_dicts,
    grid_to_dicts,
    reveal_last_remaining_cell,
)
from sudomines.latin import assign_mines

MINES = {(0, 1), (1, 2), (2, 3), (3, 0)}
SAFE_CELLS = [(r, c) for r in range(4) for c in range(4) if (r, c) not in MINES]


def _reveal(grid, cells):
    for row, col in cells:
        grid[row][col].revealed = True
    return grid


def test_clicking_revealed_cell_is_a_no_op(tutorial_grid):
    tutorial_grid[0][0].revealed = True

    result = apply_click(tutorial_grid, 0, 0)

    assert result.new_grid is tutorial_grid
    assert not result.game_over
    assert not result.game_won
    assert result.message == ""


def test_click_does_not_mutate_input(tutorial_grid):
    result = apply_click(tutorial_grid, 0, 0)

    assert result.new_grid is not tutorial_grid
    assert result.new_grid[0][0].revealed
    assert not tutorial_grid[0][0].revealed


def test_clicking_a_mine_loses(tutorial_grid):
    result = apply_click(tutorial_grid, 0, 1)

    assert result.game_over
    assert not result.game_won
    assert result.message == "Game Over"
    assert result.state is GameState.LOST
    assert sum(cell.revealed for line in result.new_grid for cell in line) == 16
    assert not result.new_grid[0][1].is_flag


def test_completed_region_flags_its_mine(tutorial_values):
    region_map = [
        [0, 0, 1, 1],
        [2, 0, 3, 1],
        [2, 3, 3, 1],
        [2, 2, 3, 1],
    ]
    grid = assign_mines(build_cell_grid(tutorial_values, region_map))
    _reveal(grid, [(1, 0), (2, 0)])

    result = apply_click(grid, 3, 1)

    mine = result.new_grid[3][0]
    assert mine.is_mine
    assert mine.revealed
    assert mine.is_flag
    assert not result.game_over
    assert not result.game_won


def test_completed_row_flags_its_mine(tutorial_grid):
    _reveal(tutorial_grid, [(0, 0), (0, 2)])

    result = apply_click(tutorial_grid, 0, 3)

    assert result.new_grid[0][1].revealed
    assert result.new_grid[0][1].is_flag
    assert result.state is GameState.PLAYING


def test_completed_column_flags_its_mine(tutorial_grid):
    _reveal(tutorial_grid, [(0, 0), (1, 0)])

    result = apply_click(tutorial_grid, 2, 0)

    assert result.new_grid[3][0].is_flag
    assert result.state is GameState.PLAYING


def test_revealing_every_safe_cell_wins(tutorial_grid):
    grid = tutorial_grid
    result = None
    for row, col in SAFE_CELLS:
        if grid[row][col].revealed:
            continue
        result = apply_click(grid, row, col)
        grid = result.new_grid
        if result.game_won:
            break

    assert result is not None
    assert result.game_won
    assert result.message == "You won!"
    assert all(cell.revealed for line in grid for cell in line)
    assert all(grid[r][c].is_flag for r, c in MINES)


def test_reveal_last_remaining_cell(tutorial_grid):
    _reveal(tutorial_grid, SAFE_CELLS[:-1])
    last_row, last_col = SAFE_CELLS[-1]

    reveal_last_remaining_cell(tutorial_grid)

    assert tutorial_grid[last_row][last_col].revealed


def test_reveal_last_remaining_cell_waits_for_one(tutorial_grid):
    _reveal(tutorial_grid, SAFE_CELLS[:-2])

    reveal_last_remaining_cell(tutorial_grid)

    assert not any(tutorial_grid[r][c].revealed for r, c in SAFE_CELLS[-2:])


def test_cell_dict_round_trip():
    cell = Cell(value=3, revealed=True, is_mine=True, is_flag=True, region_id=2)

    data = cell.to_dict()

    assert data == {
        "value": 3,
        "revealed": True,
        "is_mine": True,
        "is_flag": True,
        "region_id": 2,
    }
    assert Cell.from_dict(data) == cell
    assert Cell.from_dict({"value": 1}) == Cell(value=1)


def test_grid_dicts_round_trip(tutorial_grid):
    assert grid_from_dicts(grid_to_dicts(tutorial_grid)) == tutorial_grid


def test_puzzle_result_to_dict(tutorial_grid):
    data = PuzzleResult(new_grid=tutorial_grid, game_won=True, message="You won!").to_dict()

    assert set(data) == {"newGrid", "gameOver", "gameWon", "message"}
    assert data["gameWon"] is True
    assert data["gameOver"] is False
    assert data["newGrid"][0][1]["is_mine"] is True


def test_calculate_difficulty_levels(tutorial_grid):
    assert calculate_difficulty(tutorial_grid) == "expert"

    _reveal(tutorial_grid, SAFE_CELLS[:2])
    assert calculate_difficulty(tutorial_grid) == "hard"

    _reveal(tutorial_grid, SAFE_CELLS[:4])
    assert calculate_difficulty(tutorial_grid) == "medium"

    _reveal(tutorial_grid, SAFE_CELLS[:6])
    assert calculate_difficulty(tutorial_grid) == "easy"


def test_generate_hint_picks_hidden_safe_cell(tutorial_grid):
    _reveal(tutorial_grid, SAFE_CELLS[:-1])

    assert generate_hint(tutorial_grid) == SAFE_CELLS[-1]

    _reveal(tutorial_grid, SAFE_CELLS)
    assert generate_hint(tutorial_grid) is None


def test_game_status_codes(tutorial_grid):
    game = SudokuMinesweeper(tutorial_grid)

    status, payload = game.reveal(0, 0)
    assert status == 0
    assert payload["revealed_cells"] == [(0, 0, 2)]
    assert game.clicks_count == 1

    # Repeat click is ignored.
    assert game.reveal(0, 0) == (0, {})
    assert game.clicks_count == 1

    status, payload = game.reveal(1, 2)
    assert status == -1
    assert payload["message"] == "Game Over"
    assert game.game_over
    assert game.state is GameState.LOST

    # Finished games ignore further clicks.
    assert game.reveal(3, 3) == (0, {})


def test_game_win_status(tutorial_grid):
    game = SudokuMinesweeper(tutorial_grid)

    status = 0
    for row, col in SAFE_CELLS:
        status, _ = game.reveal(row, col)
        if status:
            break

    assert status == 1
    assert game.state is GameState.WON
    assert game.message == "You won!"


def test_game_rejects_out_of_bounds(tutorial_grid):
    game = SudokuMinesweeper(tutorial_grid)

    with pytest.raises(ValueError):
        game.reveal(4, 0)
    with pytest.raises(ValueError):
        game.reveal(0, -1)


def test_game_rejects_non_square_grid():
    with pytest.raises(ValueError):
        SudokuMinesweeper([[Cell(1), Cell(2)]])
    with pytest.raises(ValueError):
        SudokuMinesweeper([])


def test_format_board_hides_unrevealed(tutorial_grid):
    game = SudokuMinesweeper(tutorial_grid)

    hidden = game.format_board(reveal_all=False, show_regions=False)
    full = game.format_board(reveal_all=True, show_regions=False)

    assert "." in hidden
    assert "M" not in hidden
    assert "." not in full.split("\n", 2)[2]
    assert full.count("M") == 4
