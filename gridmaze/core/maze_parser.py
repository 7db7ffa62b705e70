"""
Maze Parser for the grid maze engine.

Loads and exports mazes in the line-oriented text format.

Maze Format:
    line 1: number of rows
    line 2: number of columns
    line 3: barrier character
    line 4: open character
    line 5: start character
    line 6: exit character
    lines 7..: `rows` layout lines of at least `cols` characters

Unrecognized layout characters load as open cells. Exactly one start and one
exit character must appear in the layout.
"""

import logging
from pathlib import Path
from typing import Optional

from .errors import MazeFormatError
from .grid import CellType, Grid, Position, SymbolSet

logger = logging.getLogger(__name__)

HEADER_LINES = 6

SYMBOL_NAMES = ("wall", "open cell", "start", "exit")


def _read_dimension(lines: list[str], index: int, name: str) -> int:
    line_no = index + 1
    if index >= len(lines) or not lines[index].strip():
        raise MazeFormatError(f"Missing number of {name}", line=line_no)
    raw = lines[index].strip()
    try:
        value = int(raw)
    except ValueError:
        raise MazeFormatError(f"Invalid number of {name}: '{raw}'", line=line_no) from None
    if value <= 0:
        raise MazeFormatError(f"Number of {name} must be positive (got {value})", line=line_no)
    return value


def _read_symbol(lines: list[str], index: int, name: str) -> str:
    line_no = index + 1
    if index >= len(lines) or not lines[index].strip():
        raise MazeFormatError(f"Missing {name} character", line=line_no)
    return lines[index].strip()[0]


def parse_maze_text(maze_text: str) -> Grid:
    """
    Parse maze text into a grid.

    Args:
        maze_text: Text in the maze file format.

    Returns:
        Grid using the file's symbols (path marker chosen to avoid them).

    Raises:
        MazeFormatError: If the text does not follow the format.
    """
    if not maze_text or not maze_text.strip():
        raise MazeFormatError("Maze text is empty")

    # Only \n and \r\n end a line; other control characters are layout cells
    lines = [line[:-1] if line.endswith("\r") else line for line in maze_text.split("\n")]
    if lines[-1] == "":
        lines.pop()

    rows = _read_dimension(lines, 0, "rows")
    cols = _read_dimension(lines, 1, "columns")
    barrier, open_, start, exit_ = (
        _read_symbol(lines, 2 + i, name) for i, name in enumerate(SYMBOL_NAMES)
    )

    if len({barrier, open_, start, exit_}) != 4:
        raise MazeFormatError(
            f"Maze characters must be distinct (got '{barrier}', '{open_}', '{start}', '{exit_}')"
        )

    symbols = SymbolSet.from_loaded(barrier, open_, start, exit_)

    cells: list[list[CellType]] = []
    start_pos: Optional[Position] = None
    exit_pos: Optional[Position] = None

    for row in range(rows):
        index = HEADER_LINES + row
        line_no = index + 1
        if index >= len(lines):
            raise MazeFormatError(
                f"Maze data incomplete; expected {rows} rows of layout", line=line_no
            )

        line = lines[index]
        if len(line) < cols:
            raise MazeFormatError(
                f"Not enough characters (expected {cols}, got {len(line)})", line=line_no
            )

        cell_row = []
        for col, char in enumerate(line[:cols]):
            cell = symbols.kind_for(char)

            if cell == CellType.START:
                if start_pos is not None:
                    raise MazeFormatError(
                        f"Multiple start positions found: first at {start_pos}, "
                        f"second at ({row}, {col})",
                        line=line_no,
                    )
                start_pos = (row, col)
            elif cell == CellType.EXIT:
                if exit_pos is not None:
                    raise MazeFormatError(
                        f"Multiple exit positions found: first at {exit_pos}, "
                        f"second at ({row}, {col})",
                        line=line_no,
                    )
                exit_pos = (row, col)

            cell_row.append(cell)
        cells.append(cell_row)

    if start_pos is None:
        raise MazeFormatError("Start position not found in maze layout")
    if exit_pos is None:
        raise MazeFormatError("Exit position not found in maze layout")

    return Grid(cells, start=start_pos, exit=exit_pos, symbols=symbols)


def export_maze_text(grid: Grid) -> str:
    """
    Export a grid in the maze file format.

    Path markings are written as open cells so the output can be loaded back.
    """
    symbols = grid.symbols
    header = [
        str(grid.rows),
        str(grid.cols),
        symbols.barrier,
        symbols.open,
        symbols.start,
        symbols.exit,
    ]
    layout = [
        "".join(
            symbols.open if cell == CellType.PATH else symbols.char_for(cell)
            for cell in row
        )
        for row in grid.cells
    ]
    return "\n".join(header + layout) + "\n"


def load_maze_file(file_path: Path | str) -> Grid:
    """
    Load and parse a maze file from the filesystem.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        MazeFormatError: If the maze cannot be parsed.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Maze file not found: {file_path}")

    if not file_path.is_file():
        raise MazeFormatError(f"Path is not a file: {file_path}")

    try:
        maze_text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MazeFormatError(f"Failed to read maze file: {e}") from e

    return parse_maze_text(maze_text)


def load_all_mazes(mazes_dir: Path | str) -> dict[str, Grid]:
    """
    Load all maze files from a directory.

    Args:
        mazes_dir: Directory containing `*.txt` maze files.

    Returns:
        Mapping of file stem to grid, sorted by name. Invalid files are skipped.

    Raises:
        FileNotFoundError: If the directory doesn't exist.
    """
    mazes_dir = Path(mazes_dir)

    if not mazes_dir.exists():
        raise FileNotFoundError(f"Mazes directory not found: {mazes_dir}")

    if not mazes_dir.is_dir():
        raise MazeFormatError(f"Path is not a directory: {mazes_dir}")

    mazes = {}
    for maze_file in sorted(mazes_dir.glob("*.txt")):
        try:
            mazes[maze_file.stem] = load_maze_file(maze_file)
        except MazeFormatError as e:
            logger.warning(f"Failed to load {maze_file}: {e}")

    return mazes


def validate_maze_text(maze_text: str) -> tuple[bool, Optional[str]]:
    """
    Validate maze text without raising exceptions.

    Returns:
        Tuple of (is_valid, error_message).
        error_message is None if valid.
    """
    try:
        parse_maze_text(maze_text)
        return True, None
    except MazeFormatError as e:
        return False, str(e)
