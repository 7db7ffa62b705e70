"""
Grid model for the maze engine.

A grid is a rectangular matrix of cell kinds with exactly one Start and one
Exit. Generation owns the grid while it is being built; pathfinding only ever
adds or clears Path markings.

Default symbols (used after generation and for export):
    B = Barrier (impassable)
    O = Open
    S = Start
    X = Exit
    + = Path marker (never loadable)
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Optional

Position = tuple[int, int]

PATH_MARKER_CANDIDATES = "+*@%&="


class CellType(Enum):
    """Kinds of cells in the grid."""
    BARRIER = "barrier"
    OPEN = "open"
    START = "start"
    EXIT = "exit"
    PATH = "path"


class Direction(Enum):
    """4-connected movement directions, in search expansion order."""
    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"

    @property
    def delta(self) -> tuple[int, int]:
        """Get (drow, dcol) for this direction."""
        deltas = {
            Direction.NORTH: (-1, 0),
            Direction.EAST: (0, 1),
            Direction.SOUTH: (1, 0),
            Direction.WEST: (0, -1),
        }
        return deltas[self]


PASSABLE = frozenset({CellType.OPEN, CellType.START, CellType.EXIT, CellType.PATH})


@dataclass(frozen=True)
class SymbolSet:
    """Characters used to render each cell kind."""

    barrier: str = "B"
    open: str = "O"
    start: str = "S"
    exit: str = "X"
    path: str = "+"

    @classmethod
    def default(cls) -> "SymbolSet":
        return cls()

    @classmethod
    def from_loaded(cls, barrier: str, open_: str, start: str, exit_: str) -> "SymbolSet":
        """Build a symbol set from loaded characters, picking a free path marker."""
        used = {barrier, open_, start, exit_}
        path = next(c for c in PATH_MARKER_CANDIDATES if c not in used)
        return cls(barrier=barrier, open=open_, start=start, exit=exit_, path=path)

    def char_for(self, kind: CellType) -> str:
        """Get the character that renders a cell kind."""
        mapping = {
            CellType.BARRIER: self.barrier,
            CellType.OPEN: self.open,
            CellType.START: self.start,
            CellType.EXIT: self.exit,
            CellType.PATH: self.path,
        }
        return mapping[kind]

    def kind_for(self, char: str) -> CellType:
        """Convert a layout character to a cell kind. Unknown characters are open."""
        mapping = {
            self.barrier: CellType.BARRIER,
            self.open: CellType.OPEN,
            self.start: CellType.START,
            self.exit: CellType.EXIT,
        }
        return mapping.get(char, CellType.OPEN)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "barrier": self.barrier,
            "open": self.open,
            "start": self.start,
            "exit": self.exit,
            "path": self.path,
        }


class Grid:
    """
    Rectangular maze grid.

    Cells are addressed as (row, col). Start and Exit coordinates are tracked
    alongside the cells; callers keep the one-Start/one-Exit invariant by going
    through place_start() and place_exit().
    """

    def __init__(
        self,
        cells: list[list[CellType]],
        start: Optional[Position] = None,
        exit: Optional[Position] = None,
        symbols: Optional[SymbolSet] = None,
    ):
        if not cells or not cells[0]:
            raise ValueError("Grid must have at least one row and one column")
        width = len(cells[0])
        if any(len(row) != width for row in cells):
            raise ValueError("Grid rows must all have the same length")

        self.cells = cells
        self.rows = len(cells)
        self.cols = width
        self.start = start
        self.exit = exit
        self.symbols = symbols or SymbolSet.default()

    @classmethod
    def blank(cls, rows: int, cols: int, symbols: Optional[SymbolSet] = None) -> "Grid":
        """Create an all-barrier grid with no Start or Exit."""
        cells = [[CellType.BARRIER] * cols for _ in range(rows)]
        return cls(cells, symbols=symbols)

    def copy(self) -> "Grid":
        """Return an independent copy of this grid."""
        return Grid(
            [list(row) for row in self.cells],
            start=self.start,
            exit=self.exit,
            symbols=replace(self.symbols),
        )

    @property
    def dimensions(self) -> tuple[int, int]:
        return self.rows, self.cols

    # ---------- Read access ----------

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell(self, row: int, col: int) -> CellType:
        """Get cell kind at position."""
        if not self.in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is outside a {self.rows}x{self.cols} grid")
        return self.cells[row][col]

    def is_passable(self, row: int, col: int) -> bool:
        """Out of bounds counts as impassable."""
        return self.in_bounds(row, col) and self.cells[row][col] in PASSABLE

    def is_border(self, row: int, col: int) -> bool:
        return row in (0, self.rows - 1) or col in (0, self.cols - 1)

    def is_corner(self, row: int, col: int) -> bool:
        return row in (0, self.rows - 1) and col in (0, self.cols - 1)

    def is_interior(self, row: int, col: int) -> bool:
        return 1 <= row <= self.rows - 2 and 1 <= col <= self.cols - 2

    def neighbors(self, pos: Position) -> Iterator[Position]:
        """Yield in-bounds 4-connected neighbours in N, E, S, W order."""
        row, col = pos
        for direction in Direction:
            drow, dcol = direction.delta
            nrow, ncol = row + drow, col + dcol
            if self.in_bounds(nrow, ncol):
                yield nrow, ncol

    def positions(self, kind: CellType) -> list[Position]:
        """All coordinates holding a cell kind, row-major."""
        return [
            (r, c)
            for r, row in enumerate(self.cells)
            for c, cell in enumerate(row)
            if cell == kind
        ]

    def count(self, kind: CellType) -> int:
        return sum(row.count(kind) for row in self.cells)

    # ---------- Mutation ----------

    def set_cell(self, row: int, col: int, kind: CellType) -> None:
        """Set a cell's kind. Start/Exit must go through place_start/place_exit."""
        if kind in (CellType.START, CellType.EXIT):
            raise ValueError(f"Use place_start()/place_exit() to set {kind.value} cells")
        self.cell(row, col)
        if (row, col) == self.start:
            self.start = None
        if (row, col) == self.exit:
            self.exit = None
        self.cells[row][col] = kind

    def place_start(self, row: int, col: int) -> None:
        """Move the Start to (row, col); the previous Start cell becomes Open."""
        self.cell(row, col)
        if (row, col) == self.exit:
            raise ValueError("Start and Exit cannot share a cell")
        if self.start is not None and self.cells[self.start[0]][self.start[1]] == CellType.START:
            self.cells[self.start[0]][self.start[1]] = CellType.OPEN
        self.cells[row][col] = CellType.START
        self.start = (row, col)

    def place_exit(self, row: int, col: int, vacated: CellType = CellType.BARRIER) -> None:
        """Move the Exit to (row, col); the previous Exit cell becomes `vacated`."""
        self.cell(row, col)
        if (row, col) == self.start:
            raise ValueError("Start and Exit cannot share a cell")
        if self.exit is not None and self.cells[self.exit[0]][self.exit[1]] == CellType.EXIT:
            self.cells[self.exit[0]][self.exit[1]] = vacated
        self.cells[row][col] = CellType.EXIT
        self.exit = (row, col)

    def clear_path(self) -> int:
        """Turn every Path cell back into Open. Returns the number cleared."""
        cleared = 0
        for row in self.cells:
            for c, cell in enumerate(row):
                if cell == CellType.PATH:
                    row[c] = CellType.OPEN
                    cleared += 1
        return cleared

    # ---------- Rendering ----------

    def to_lines(self) -> list[str]:
        """Render each row with the active symbol set."""
        return ["".join(self.symbols.char_for(cell) for cell in row) for row in self.cells]

    def render(self) -> str:
        return "\n".join(self.to_lines())

    def __repr__(self) -> str:
        return f"Grid({self.rows}x{self.cols}, start={self.start}, exit={self.exit})"
