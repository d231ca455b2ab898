"""Exception types raised by the puzzle generation pipeline."""


class SudominesError(Exception):
    """Base class for all puzzle generation failures."""


class RegionGenerationFailed(SudominesError):
    """No valid region partition was found within the attempt budget."""

    def __init__(self, size: int, attempts: int) -> None:
        super().__init__(
            f"Failed to create {size} regions of size {size} after {attempts} attempts"
        )
        self.size = size
        self.attempts = attempts


class LatinFillFailed(SudominesError):
    """The Latin fill never succeeded before the pipeline ran out of attempts."""

    def __init__(self, size: int, attempts: int) -> None:
        super().__init__(
            f"Failed to generate a valid grid of size {size} after {attempts} attempts"
        )
        self.size = size
        self.attempts = attempts


class PuzzleAlreadySolved(SudominesError):
    """The revealed cells already complete the puzzle before any click."""


class GenerationTimedOut(SudominesError):
    """The wall-clock budget of a generation call ran out."""
