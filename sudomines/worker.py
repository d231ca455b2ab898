"""
Plain-data request handler for running the core in an isolated worker.

Requests and responses are dicts of lists, ints, bools and strings only, so
any transport (process pool, message queue, JSON over a pipe) can carry them.

Requests:
    {"type": "generateGrid", "size": int, "maxInitialRevealed": int?}
        -> {"grid": [[cell dict]], "regionGrid": [[int]]}
    {"type": "generatePuzzle", "filledGrid": [[int]], "regionGrid": [[int]]}
        -> {"puzzle": [[int]]}
    {"type": "applyClick", "grid": [[cell dict]], "row": int, "col": int}
        -> {"newGrid": [[cell dict]], "gameOver": bool, "gameWon": bool, "message": str}

Generation failures come back as {"error": message}.
"""

import logging
from typing import Any, Callable, Dict

from .config import GENERATION_TIME_BUDGET
from .engine import apply_click, grid_from_dicts, grid_region_map, grid_to_dicts
from .errors import SudominesError
from .generator import generate_grid
from .selector import generate_puzzle

logger = logging.getLogger(__name__)


def _generate_grid(message: Dict[str, Any]) -> Dict[str, Any]:
    grid = generate_grid(
        int(message["size"]),
        max_initial_revealed=message.get("maxInitialRevealed"),
        time_budget=message.get("timeBudget", GENERATION_TIME_BUDGET),
    )
    return {"grid": grid_to_dicts(grid), "regionGrid": grid_region_map(grid)}


def _generate_puzzle(message: Dict[str, Any]) -> Dict[str, Any]:
    puzzle = generate_puzzle(message["filledGrid"], message["regionGrid"])
    return {"puzzle": puzzle}


def _apply_click(message: Dict[str, Any]) -> Dict[str, Any]:
    grid = grid_from_dicts(message["grid"])
    result = apply_click(grid, int(message["row"]), int(message["col"]), len(grid))
    return result.to_dict()


HANDLERS: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    "generateGrid": _generate_grid,
    "generatePuzzle": _generate_puzzle,
    "applyClick": _apply_click,
}


def handle_message(message: Dict[str, Any]) -> Dict[str, Any]:
    """
    Dispatch one worker request.

    Args:
        message: Request dict with a "type" key and its parameters.

    Returns:
        The response dict; {"error": ...} if generation failed.

    Raises:
        ValueError: If the request type is unknown.
    """
    kind = message.get("type")
    handler = HANDLERS.get(kind)  # type: ignore[arg-type]
    if handler is None:
        raise ValueError(f"Unknown request type: {kind!r}")

    try:
        return handler(message)
    except SudominesError as exc:
        logger.error("Request %s failed: %s", kind, exc)
        return {"error": str(exc)}
