"""Exceptions and warnings raised by the maze core."""

from typing import Optional


class MazeError(Exception):
    """Base class for maze core errors."""

    pass


class InvalidDimensionsError(MazeError, ValueError):
    """Exception raised when requested maze dimensions are out of range."""

    def __init__(self, rows: int, cols: int, minimum: int, maximum: Optional[int] = None):
        self.rows = rows
        self.cols = cols
        if maximum is None or rows < minimum or cols < minimum:
            message = f"Maze dimensions must be at least {minimum}x{minimum} (got {rows}x{cols})"
        else:
            message = (
                f"Maze dimensions must be between {minimum} and {maximum} "
                f"(got {rows}x{cols})"
            )
        super().__init__(message)


class MazeFormatError(MazeError, ValueError):
    """Exception raised when maze text cannot be loaded."""

    def __init__(self, reason: str, line: Optional[int] = None):
        self.reason = reason
        self.line = line
        super().__init__(f"Line {line}: {reason}" if line is not None else reason)


class BestEffortWarning(UserWarning):
    """A bounded retry loop ran out of attempts and the grid is unsolvable.

    `stage` names the loop that gave up: "carve" or "repair".
    """

    def __init__(self, message: str, stage: str):
        self.stage = stage
        super().__init__(message)
