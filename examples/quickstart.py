"""
Quickstart example for the Sudoku-Minesweeper core.

This script demonstrates basic usage of the generator and the click handler.
"""

from sudomines import (
    SudokuMinesweeper,
    generate_grid,
    generate_puzzle,
    is_logically_solvable,
    run_generation_many_tests,
)
from sudomines.engine import grid_region_map, grid_values


def main():
    print("=" * 60)
    print("Sudoku-Minesweeper - Quickstart Example")
    print("=" * 60)

    # Example 1: Generate a single grid
    print("\n1. Generating a 6x6 grid...")
    print("-" * 60)

    grid = generate_grid(6)
    game = SudokuMinesweeper(grid)
    print(game.format_board(reveal_all=False))
    print(f"Difficulty rating: {game.difficulty()}")

    # Example 2: Play it with safe clicks only
    print("\n2. Clicking every hidden safe cell...")
    print("-" * 60)

    status = 0
    for row in range(game.size):
        for col in range(game.size):
            cell = game.grid[row][col]
            if cell.revealed or cell.is_mine:
                continue
            status, payload = game.reveal(row, col)
            if status != 0:
                print(payload["message"])
                break
        if status != 0:
            break

    print(game.format_board(reveal_all=True))
    print(f"Clicks: {game.clicks_count}")

    # Example 3: Rebuild a puzzle from the solved values
    print("\n3. Building another puzzle from the same solution...")
    print("-" * 60)

    values = grid_values(grid)
    regions = grid_region_map(grid)
    puzzle = generate_puzzle(values, regions)
    givens = sum(1 for line in puzzle for v in line if v)
    print(f"Givens: {givens}, logically solvable: {is_logically_solvable(puzzle, regions)}")

    # Example 4: Statistics by size
    print("\n4. Generation statistics (5 grids each)...")
    print("-" * 60)

    for size in (4, 5, 6):
        results = run_generation_many_tests(size, runs=5)
        print(
            f"{size}x{size}: {results['avg_elapsed']*1000:7.1f} ms, "
            f"{results['avg_revealed_percentage']:5.1f}% revealed, "
            f"{results['solvable_rate']*100:5.1f}% solvable"
        )

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
