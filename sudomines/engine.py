"""Cell model and the click/reveal state machine of the Sudoku-Minesweeper game."""

import enum
import random
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import DIFFICULTY_RATING_CUTOFFS

WIN_MESSAGE = "You won!"
LOSS_MESSAGE = "Game Over"


@dataclass
class Cell:
    """One square of the puzzle grid."""

    value: int
    revealed: bool = False
    is_mine: bool = False
    # Set when a mine is revealed by completion logic rather than a click.
    is_flag: bool = False
    region_id: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cell":
        return cls(
            value=int(data["value"]),
            revealed=bool(data.get("revealed", False)),
            is_mine=bool(data.get("is_mine", False)),
            is_flag=bool(data.get("is_flag", False)),
            region_id=int(data.get("region_id", 0)),
        )


Grid = List[List[Cell]]


class GameState(enum.Enum):
    PLAYING = "playing"
    LOST = "lost"
    WON = "won"


@dataclass
class PuzzleResult:
    """Outcome of a single click, as handed back to the caller."""

    new_grid: Grid
    game_over: bool = False
    game_won: bool = False
    message: str = ""

    @property
    def state(self) -> GameState:
        if self.game_over:
            return GameState.LOST
        if self.game_won:
            return GameState.WON
        return GameState.PLAYING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "newGrid": grid_to_dicts(self.new_grid),
            "gameOver": self.game_over,
            "gameWon": self.game_won,
            "message": self.message,
        }


# -----------------------------------------------------------------------------
# Grid conversions
# -----------------------------------------------------------------------------


def build_cell_grid(
    values: Sequence[Sequence[int]], region_map: Sequence[Sequence[int]]
) -> Grid:
    """Wrap a numeric grid and its region map into hidden, unmined cells."""
    return [
        [
            Cell(value=value, region_id=region_map[row][col])
            for col, value in enumerate(line)
        ]
        for row, line in enumerate(values)
    ]


def copy_grid(grid: Grid) -> Grid:
    return [
        [
            Cell(c.value, c.revealed, c.is_mine, c.is_flag, c.region_id)
            for c in line
        ]
        for line in grid
    ]


def grid_values(grid: Grid) -> List[List[int]]:
    return [[cell.value for cell in line] for line in grid]


def grid_region_map(grid: Grid) -> List[List[int]]:
    return [[cell.region_id for cell in line] for line in grid]


def grid_to_dicts(grid: Grid) -> List[List[Dict[str, Any]]]:
    return [[cell.to_dict() for cell in line] for line in grid]


def grid_from_dicts(data: Sequence[Sequence[Dict[str, Any]]]) -> Grid:
    return [[Cell.from_dict(item) for item in line] for line in data]


# -----------------------------------------------------------------------------
# Cascades
# -----------------------------------------------------------------------------


def _flag(cell: Cell) -> None:
    cell.revealed = True
    cell.is_flag = True


def reveal_mines_in_completed_regions(grid: Grid) -> Grid:
    """
    Reveal and flag the mine of every region whose non-mine cells are all revealed.

    Args:
        grid: Cell grid; modified in place.

    Returns:
        The same grid.
    """
    complete: Dict[int, bool] = {}
    mines: Dict[int, List[Cell]] = {}

    for line in grid:
        for cell in line:
            rid = cell.region_id
            complete.setdefault(rid, True)
            if cell.is_mine:
                mines.setdefault(rid, []).append(cell)
            elif not cell.revealed:
                complete[rid] = False

    for rid, done in complete.items():
        if done:
            for mine in mines.get(rid, []):
                _flag(mine)

    return grid


def _flag_line(cells: Sequence[Cell]) -> None:
    line_mines = []
    for cell in cells:
        if cell.is_mine:
            line_mines.append(cell)
        elif not cell.revealed:
            return
    for mine in line_mines:
        _flag(mine)


def flag_mines_in_completed_rows_and_columns(grid: Grid) -> Grid:
    """
    Reveal and flag the mine of every row and column whose non-mine cells are revealed.

    Rows are handled before columns. Modifies grid in place and returns it.
    """
    size = len(grid)
    for row in range(size):
        _flag_line(grid[row])
    for col in range(size):
        _flag_line([grid[row][col] for row in range(size)])
    return grid


def reveal_last_remaining_cell(grid: Grid) -> Grid:
    """Reveal the only hidden non-mine cell left on the grid, if exactly one remains."""
    last: Optional[Cell] = None
    for line in grid:
        for cell in line:
            if not cell.revealed and not cell.is_mine:
                if last is not None:
                    return grid
                last = cell

    if last is not None:
        last.revealed = True
    return grid


def are_all_mines_flagged(grid: Grid) -> bool:
    return all(cell.is_flag for line in grid for cell in line if cell.is_mine)


def is_game_won(grid: Grid) -> bool:
    """Return True once every cell, mine or not, is revealed."""
    return all(cell.revealed for line in grid for cell in line)


def reveal_all_cells(grid: Grid) -> Grid:
    for line in grid:
        for cell in line:
            cell.revealed = True
    return grid


# -----------------------------------------------------------------------------
# Click handling
# -----------------------------------------------------------------------------


def apply_click(
    grid: Grid, row: int, col: int, size: Optional[int] = None
) -> PuzzleResult:
    """
    Apply a click at (row, col) and compute the resulting game state.

    The input grid is left untouched; the result carries an updated copy.
    Coordinates are not validated.

    Args:
        grid: Current cell grid.
        row: Row of the clicked cell.
        col: Column of the clicked cell.
        size: Grid side length; defaults to len(grid).

    Returns:
        PuzzleResult with the new grid, the terminal flags and a message:
            - already revealed cell: the same grid, no state change
            - mine: every cell revealed, game_over=True, "Game Over"
            - win: game_won=True, "You won!"
            - otherwise: an empty message
    """
    if grid[row][col].revealed:
        return PuzzleResult(new_grid=grid)

    size = len(grid) if size is None else size
    new_grid = copy_grid(grid)
    cell = new_grid[row][col]
    cell.revealed = True

    if cell.is_mine:
        # Clicked directly, so it is not a flag.
        cell.is_flag = False
        for r in range(size):
            for c in range(size):
                new_grid[r][c].revealed = True
        return PuzzleResult(new_grid=new_grid, game_over=True, message=LOSS_MESSAGE)

    reveal_mines_in_completed_regions(new_grid)
    flag_mines_in_completed_rows_and_columns(new_grid)
    reveal_last_remaining_cell(new_grid)

    if are_all_mines_flagged(new_grid):
        reveal_all_cells(new_grid)
        return PuzzleResult(new_grid=new_grid, game_won=True, message=WIN_MESSAGE)

    # Fallback path: everything got revealed without every mine being flagged.
    if is_game_won(new_grid):
        return PuzzleResult(new_grid=new_grid, game_won=True, message=WIN_MESSAGE)

    return PuzzleResult(new_grid=new_grid)


def generate_hint(grid: Grid) -> Optional[Tuple[int, int]]:
    """
    Pick a hidden non-mine cell at random.

    Returns:
        (row, col) of the hint, or None if no hidden non-mine cell remains.
    """
    hidden = [
        (row, col)
        for row, line in enumerate(grid)
        for col, cell in enumerate(line)
        if not cell.revealed and not cell.is_mine
    ]
    if not hidden:
        return None
    return random.choice(hidden)


def revealed_percentage(grid: Grid) -> float:
    """Percentage of non-mine cells that are revealed (one mine per region)."""
    size = len(grid)
    non_mine_cells = size * size - size
    if non_mine_cells <= 0:
        return 0.0
    revealed = sum(
        1 for line in grid for cell in line if cell.revealed and not cell.is_mine
    )
    return revealed / non_mine_cells * 100.0


def calculate_difficulty(grid: Grid) -> str:
    """
    Rate a grid by the share of non-mine cells already revealed.

    Returns:
        One of "easy", "medium", "hard" or "expert".
    """
    percentage = revealed_percentage(grid)
    for level, cutoff in DIFFICULTY_RATING_CUTOFFS:
        if percentage >= cutoff:
            return level
    return "expert"


# -----------------------------------------------------------------------------
# Stateful game wrapper
# -----------------------------------------------------------------------------


class SudokuMinesweeper:
    """Sudoku-Minesweeper game session over a pre-generated grid."""

    def __init__(self, grid: Grid) -> None:
        """
        Initialize a game session.

        Args:
            grid: Square cell grid, usually from generate_grid().

        Raises:
            ValueError: If the grid is empty or not square.
        """
        size = len(grid)
        if size == 0 or any(len(line) != size for line in grid):
            raise ValueError("Grid must be non-empty and square.")

        self.size: int = size
        self.grid: Grid = grid
        self.state: GameState = GameState.PLAYING
        self.message: str = ""
        self.clicks_count: int = 0
        self._history: List[Tuple[int, int]] = []

    @property
    def game_over(self) -> bool:
        return self.state is not GameState.PLAYING

    def reveal(self, row: int, col: int) -> Tuple[int, Dict[str, object]]:
        """
        Click a cell and return a status code plus payload.

        Args:
            row: Row of the cell to reveal.
            col: Column of the cell to reveal.

        Returns:
            Tuple of (status, payload) where status is:
                - -1: Mine hit (loss)
                - 0: Non-terminal reveal (or no-op)
                - 1: Win

            Payload contains "message" and "revealed_cells", the list of
            (row, col, value) that became visible with this click; it is
            empty for no-ops.

        Raises:
            ValueError: If coordinates are out of bounds.
        """
        if not (0 <= row < self.size and 0 <= col < self.size):
            raise ValueError("Cell coordinates are outside the board.")

        if self.game_over:
            return 0, {}

        before = self.grid
        result = apply_click(before, row, col, self.size)
        if result.new_grid is before:
            return 0, {}

        self.clicks_count += 1
        self._history.append((row, col))
        self.grid = result.new_grid
        self.message = result.message
        self.state = result.state

        revealed_cells = [
            (r, c, self.grid[r][c].value)
            for r in range(self.size)
            for c in range(self.size)
            if self.grid[r][c].revealed and not before[r][c].revealed
        ]
        payload: Dict[str, object] = {
            "message": result.message,
            "revealed_cells": revealed_cells,
        }

        if self.state is GameState.LOST:
            return -1, payload
        if self.state is GameState.WON:
            return 1, payload
        return 0, payload

    def hint(self) -> Optional[Tuple[int, int]]:
        return generate_hint(self.grid)

    def difficulty(self) -> str:
        return calculate_difficulty(self.grid)

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"
    _ANSI_FLAG = "\033[93m"

    def _c(self, s: str) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def _m(self, s: str) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}"

    def _f(self, s: str) -> str:
        """Wrap string in flag color (yellow)."""
        return f"{self._ANSI_FLAG}{s}{self._ANSI_RESET}"

    def format_board(self, reveal_all: bool = False, show_regions: bool = True) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Args:
            reveal_all: If True, show mines and all underlying values.
            show_regions: If True, append the region map next to the grid.

        Returns:
            A formatted multi-line string with coordinate labels and the board grid.
        """
        n = self.size

        def cell_str(row: int, col: int) -> str:
            cell = self.grid[row][col]
            if reveal_all or cell.revealed:
                if cell.is_mine:
                    return self._f("F") if cell.is_flag else self._m("M")
                return str(cell.value)
            return "."

        header_cells = " ".join(f"{c:2d}" for c in range(n))
        header = self._c("   ") + self._c(header_cells)
        sep = self._c("   " + "-" * (3 * n - 1))
        if show_regions:
            header += "    " + self._c(header_cells)
            sep += "    " + self._c("-" * (3 * n - 1))
        out = [header, sep]

        for row in range(n):
            line = self._c(f"{row:2d} ") + self._c("|") + " ".join(
                f" {cell_str(row, col)}" for col in range(n)
            )
            if show_regions:
                line += "    " + " ".join(
                    f"{self.grid[row][col].region_id:2d}" for col in range(n)
                )
            out.append(line)

        return "\n".join(out)

    def print_board(self) -> None:
        """Print the current visible board state to stdout."""
        print(self.format_board(reveal_all=False))

    def print_full_board(self) -> None:
        """Print the fully revealed underlying board to stdout (for debugging)."""
        print(self.format_board(reveal_all=True))


def play_cli(game: SudokuMinesweeper) -> None:
    """
    Run a simple terminal UI for playing Sudoku-Minesweeper.

    Args:
        game: A SudokuMinesweeper instance to play against.
    """
    print(
        "Sudoku-Minesweeper CLI (enter: row col). Coordinates are 0-based. "
        "Type 'h' for a hint, 'q' to quit.\n"
    )
    print(game.format_board(reveal_all=False))

    while True:
        s = input("\nMove (row col): ").strip()
        if s.lower() in {"q", "quit", "exit"}:
            print("Quit.")
            return

        if s.lower() in {"h", "hint"}:
            hint = game.hint()
            if hint is None:
                print("No hidden safe cell left.")
            else:
                print(f"Try ({hint[0]}, {hint[1]}).")
            continue

        parts = s.replace(",", " ").split()
        if len(parts) != 2:
            print("Invalid input. Example: 3 1")
            continue

        try:
            row = int(parts[0])
            col = int(parts[1])
        except ValueError:
            print("Invalid input. Coordinates must be integers.")
            continue

        try:
            status, _ = game.reveal(row, col)
        except ValueError as exc:
            print(f"Invalid input. {exc}")
            continue

        print(f"\nYou decided to reveal ({row}, {col}).\n")
        print(game.format_board(reveal_all=False))

        if status == -1:
            print("\nYou clicked a mine. You lost.")
            print("\nFull board:")
            print(game.format_board(reveal_all=True))
            return

        if status == 1:
            print("\nAll mines found. You won!")
            return
