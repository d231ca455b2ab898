"""
Sudoku-Minesweeper - Interactive Demo

Run with: streamlit run app/demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import List, Sequence, Tuple

from sudomines import (
    SudokuMinesweeper,
    build_tutorial_step_grid,
    generate_grid,
    generate_grid_with_difficulty,
    tutorial_step_highlights,
)
from sudomines.generator import TUTORIAL_STEPS
from sudomines.engine import Grid

# One background per region id (sizes up to 10)
REGION_COLORS = [
    "#fde2e4", "#e2ece9", "#dfe7fd", "#fff1e6", "#e9edc9",
    "#f0efeb", "#cddafd", "#fad2e1", "#bee1e6", "#eae4e9",
]


def render_board_html(
    grid: Grid,
    highlight_cells: Sequence[Tuple[int, int]] = (),
    show_all: bool = False,
) -> str:
    """Render the board as HTML with one background color per region."""
    size = len(grid)
    # Scale cell size based on board size
    if size >= 9:
        cell_size = 30
        font_size = "14px"
    elif size >= 6:
        cell_size = 38
        font_size = "17px"
    else:
        cell_size = 46
        font_size = "20px"

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for row in range(size):
        html += "<tr>"
        for col in range(size):
            cell = grid[row][col]
            bg = REGION_COLORS[cell.region_id % len(REGION_COLORS)]
            text_color = "#222222"

            if cell.revealed or show_all:
                if cell.is_mine and cell.is_flag:
                    display = "F"  # Auto-revealed by completion
                    bg = "#ffa500"
                    text_color = "#ffffff"
                elif cell.is_mine:
                    display = "M"
                    bg = "#ff0000" if cell.revealed else "#ffcccc"
                    text_color = "#ffffff" if cell.revealed else "#ff0000"
                else:
                    display = str(cell.value)
            else:
                display = "&nbsp;"
                text_color = "#666666"

            # Thick borders between regions
            def edge(nr: int, nc: int) -> str:
                if 0 <= nr < size and 0 <= nc < size and grid[nr][nc].region_id == cell.region_id:
                    return "1px solid #bbb"
                return "3px solid #333"

            border = (
                f"border-top: {edge(row - 1, col)}; border-bottom: {edge(row + 1, col)};"
                f"border-left: {edge(row, col - 1)}; border-right: {edge(row, col + 1)};"
            )
            if (row, col) in highlight_cells:
                border = "border: 3px solid #ff0000;"

            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                {border}
                color: {text_color};
                font-weight: bold;
                font-size: {font_size};
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def new_game(size: int, difficulty: str, tutorial: str = "off") -> None:
    if tutorial != "off":
        grid = build_tutorial_step_grid(tutorial)
    elif difficulty == "minimal":
        grid = generate_grid(size)
    else:
        grid = generate_grid_with_difficulty(size, difficulty)
    st.session_state.game = SudokuMinesweeper(grid)
    st.session_state.status = 0
    st.session_state.hint = None
    st.session_state.history = []


def main():
    st.set_page_config(
        page_title="Sudoku-Minesweeper",
        page_icon="💣",
        layout="wide",
    )

    st.title("Sudoku-Minesweeper")
    st.markdown("""
    Every row, column and region holds each number once. The highest number of
    each region is a mine: reveal everything else and the mines flag themselves.
    """)

    # Sidebar configuration
    st.sidebar.header("Game Configuration")

    size = st.sidebar.slider("Grid size", 4, 9, 6)
    difficulty = st.sidebar.selectbox(
        "Difficulty",
        ["minimal", "easy", "medium", "hard", "expert"],
        help="minimal: fewest clues that still allow pure deduction. "
             "Other levels cap the number of initially revealed cells.",
    )
    tutorial = st.sidebar.selectbox(
        "Tutorial step",
        ["off"] + list(TUTORIAL_STEPS),
        help="Fixed 4x4 teaching grids; overrides size and difficulty.",
    )

    # Initialize session state
    if "game" not in st.session_state:
        st.session_state.game = None
        st.session_state.status = 0
        st.session_state.hint = None
        st.session_state.history = []
        st.session_state.prev_settings = None

    # Auto-generate new game when settings change
    current_settings = (size, difficulty, tutorial)
    if st.session_state.prev_settings != current_settings:
        new_game(size, difficulty, tutorial)
        st.session_state.prev_settings = current_settings

    game: SudokuMinesweeper = st.session_state.game

    col1, col2 = st.columns([2, 1])

    with col1:
        st.subheader("Board")

        btn_col1, btn_col2 = st.columns(2)
        with btn_col1:
            if st.button("New Game", type="primary"):
                new_game(size, difficulty, tutorial)
                st.rerun()
        with btn_col2:
            if st.button("Hint") and st.session_state.status == 0:
                st.session_state.hint = game.hint()
                st.rerun()

        highlights = [] if tutorial == "off" else tutorial_step_highlights(tutorial)
        if st.session_state.hint is not None:
            highlights.append(st.session_state.hint)

        st.markdown(
            render_board_html(
                game.grid,
                highlight_cells=highlights,
                show_all=st.session_state.status != 0,
            ),
            unsafe_allow_html=True,
        )

        if st.session_state.status == 1:
            st.success("You won!")
        elif st.session_state.status == -1:
            st.error("Game Over! You clicked a mine.")

        # Click grid
        if st.session_state.status == 0:
            st.markdown("**Reveal a cell:**")
            for row in range(game.size):
                cols = st.columns(game.size)
                for col in range(game.size):
                    cell = game.grid[row][col]
                    label = str(cell.value) if cell.revealed else "?"
                    if cols[col].button(
                        label,
                        key=f"cell_{row}_{col}",
                        disabled=cell.revealed,
                    ):
                        status, _ = game.reveal(row, col)
                        st.session_state.status = status
                        st.session_state.hint = None
                        st.session_state.history.append((row, col))
                        st.rerun()

    with col2:
        st.subheader("Game Statistics")

        revealed = sum(1 for line in game.grid for cell in line if cell.revealed)
        flagged = sum(1 for line in game.grid for cell in line if cell.is_flag)
        metrics: List[Tuple[str, object]] = [
            ("Clicks", game.clicks_count),
            ("Cells Revealed", f"{revealed}/{game.size * game.size}"),
            ("Mines Flagged", f"{flagged}/{game.size}"),
            ("Rating", game.difficulty()),
        ]
        for label, value in metrics:
            st.metric(label, value)

        st.markdown("---")
        st.subheader("Rules")
        st.markdown("""
        1. **Numbers**: each row, column and region contains 1..N once
        2. **Mines**: the highest number of a region is its mine
        3. **Completion**: finishing a region, row or column flags its mine
        4. **Win**: flag every mine without clicking one
        """)


if __name__ == "__main__":
    main()
