"""
Random maze generation.

Generation steps:
- Fill the grid with barriers.
- Place the exit on a non-corner border cell.
- Carve the interior: randomized Prim's (guarantee-path mode) or
  independent open cells with a fixed probability.
- Place the start on an open interior cell.
- Move the exit around until the start can reach it (bounded).
"""

import logging
import random
from typing import Optional

from .errors import BestEffortWarning, InvalidDimensionsError
from .grid import CellType, Grid, Position
from .reachability import start_reaches_exit

logger = logging.getLogger(__name__)

MIN_DIMENSION = 5
OPEN_PROBABILITY = 0.4
CARVE_ATTEMPTS = 10
RELOCATION_ATTEMPTS = 20
REPAIR_ATTEMPTS = 100


class RecentExits:
    """Bounded history of exit positions used by exit relocation."""

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._positions: set[Position] = set()

    def __contains__(self, pos: Position) -> bool:
        return pos in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def add(self, pos: Position) -> None:
        self._positions.add(pos)

    def clear(self) -> None:
        self._positions.clear()

    def reset(self, capacity: int, current: Optional[Position] = None) -> None:
        """Start a fresh history for a new grid, seeded with its exit."""
        self.capacity = capacity
        self._positions.clear()
        if current is not None:
            self._positions.add(current)

    def trim(self) -> None:
        """Drop the whole history once it has outgrown its capacity."""
        if len(self._positions) > self.capacity:
            self._positions.clear()


class MazeGenerator:
    """
    Builds random grids and keeps their exits reachable.

    One generator serves one grid at a time: it owns the random source and
    the recent-exit history that relocate_exit() consults.

    Example usage:
        generator = MazeGenerator(random.Random(42))
        grid = generator.generate(15, 20, guarantee_path=True)
        generator.relocate_exit(grid)
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        min_dimension: int = MIN_DIMENSION,
        max_dimension: Optional[int] = None,
        open_probability: float = OPEN_PROBABILITY,
        carve_attempts: int = CARVE_ATTEMPTS,
        relocation_attempts: int = RELOCATION_ATTEMPTS,
        repair_attempts: int = REPAIR_ATTEMPTS,
    ):
        self.rng = rng or random.Random()
        self.min_dimension = min_dimension
        self.max_dimension = max_dimension
        self.open_probability = open_probability
        self.carve_attempts = carve_attempts
        self.relocation_attempts = relocation_attempts
        self.repair_attempts = repair_attempts

        self.recent_exits = RecentExits(0)
        self.warnings: list[BestEffortWarning] = []
        # Outcome of the last repair loop run by generate()
        self.connected: Optional[bool] = None

    # ---------- Generation ----------

    def generate(self, rows: int, cols: int, guarantee_path: bool = True) -> Grid:
        """
        Generate a new random grid.

        Args:
            rows: Number of rows (at least min_dimension).
            cols: Number of columns (at least min_dimension).
            guarantee_path: Carve a connected maze instead of random open cells.

        Returns:
            The new grid. Check `warnings` for best-effort outcomes.

        Raises:
            InvalidDimensionsError: If rows or cols is out of range.
        """
        self.validate_dimensions(rows, cols)
        self.warnings = []

        grid = Grid.blank(rows, cols)

        exit_pos = self.random_border_position(rows, cols)
        grid.place_exit(*exit_pos)
        self.recent_exits.reset(min(rows, cols), exit_pos)

        carved = True
        if guarantee_path:
            carved = self._carve_until_connected(grid)
        else:
            self._open_random_cells(grid)
            self._place_start(grid)

        self.connected = self.ensure_reachable(grid)
        if not carved and not self.connected:
            self._warn(
                f"Could not generate a maze with a valid path after "
                f"{self.carve_attempts} attempts.",
                stage="carve",
            )

        # The history only tracks relocations of this grid's final layout
        self.recent_exits.reset(min(rows, cols), grid.exit)

        logger.debug(
            f"Generated {rows}x{cols} maze (guarantee_path={guarantee_path}): "
            f"start={grid.start} exit={grid.exit} open={grid.count(CellType.OPEN)}"
        )
        return grid

    def validate_dimensions(self, rows: int, cols: int) -> None:
        """Raise InvalidDimensionsError unless both dimensions are in range."""
        too_small = rows < self.min_dimension or cols < self.min_dimension
        too_large = self.max_dimension is not None and (
            rows > self.max_dimension or cols > self.max_dimension
        )
        if too_small or too_large:
            raise InvalidDimensionsError(rows, cols, self.min_dimension, self.max_dimension)

    def _carve_until_connected(self, grid: Grid) -> bool:
        for attempt in range(1, self.carve_attempts + 1):
            self._carve_prims(grid)
            self._place_start(grid)
            if start_reaches_exit(grid):
                logger.debug(f"Carve attempt {attempt} connected start and exit")
                return True

        # Some border cells are never next to a carved cell; the repair loop moves the exit
        logger.info(
            f"No carve connected start and exit after {self.carve_attempts} attempts; "
            f"relocating exit {grid.exit}"
        )
        return False

    def _open_random_cells(self, grid: Grid) -> None:
        for row in range(1, grid.rows - 1):
            for col in range(1, grid.cols - 1):
                if self.rng.random() < self.open_probability:
                    grid.set_cell(row, col, CellType.OPEN)

    def _reset_interior(self, grid: Grid) -> None:
        for row in range(1, grid.rows - 1):
            for col in range(1, grid.cols - 1):
                grid.cells[row][col] = CellType.BARRIER
        if grid.start is not None and grid.is_interior(*grid.start):
            grid.start = None

    def _random_odd_coordinate(self, size: int) -> int:
        """Random odd index in [1, size - 2]."""
        return self.rng.randrange((size - 2) // 2) * 2 + 1

    def _carve_prims(self, grid: Grid) -> None:
        """
        Carve a connected interior with randomized Prim's algorithm.

        Walls are the barrier cells next to the carved region. A wall is opened
        together with the cell beyond it when that cell is still a barrier and
        the cell on the other side of the wall is open. Only interior cells are
        ever opened.
        """
        self._reset_interior(grid)

        seed = (
            self._random_odd_coordinate(grid.rows),
            self._random_odd_coordinate(grid.cols),
        )
        grid.cells[seed[0]][seed[1]] = CellType.OPEN

        walls: list[Position] = []
        self._add_walls(grid, seed, walls)

        while walls:
            index = self.rng.randrange(len(walls))
            wall_row, wall_col = walls[index]

            # Horizontal pair, then vertical pair
            for (a_row, a_col), (b_row, b_col) in (
                ((wall_row, wall_col - 1), (wall_row, wall_col + 1)),
                ((wall_row - 1, wall_col), (wall_row + 1, wall_col)),
            ):
                if self._can_carve(grid, (a_row, a_col), (b_row, b_col)):
                    self._open_passage(grid, (wall_row, wall_col), (b_row, b_col), walls)
                elif self._can_carve(grid, (b_row, b_col), (a_row, a_col)):
                    self._open_passage(grid, (wall_row, wall_col), (a_row, a_col), walls)

            walls.pop(index)

    @staticmethod
    def _can_carve(grid: Grid, carved: Position, beyond: Position) -> bool:
        return (
            grid.cells[carved[0]][carved[1]] == CellType.OPEN
            and grid.is_interior(*beyond)
            and grid.cells[beyond[0]][beyond[1]] == CellType.BARRIER
        )

    def _open_passage(
        self, grid: Grid, wall: Position, beyond: Position, walls: list[Position]
    ) -> None:
        grid.cells[wall[0]][wall[1]] = CellType.OPEN
        grid.cells[beyond[0]][beyond[1]] = CellType.OPEN
        self._add_walls(grid, beyond, walls)

    @staticmethod
    def _add_walls(grid: Grid, pos: Position, walls: list[Position]) -> None:
        for neighbor in grid.neighbors(pos):
            if grid.is_interior(*neighbor) and grid.cell(*neighbor) == CellType.BARRIER:
                walls.append(neighbor)

    def _place_start(self, grid: Grid) -> None:
        """Put the start on a random open interior cell, opening one if needed."""
        candidates = [
            pos for pos in grid.positions(CellType.OPEN) if grid.is_interior(*pos)
        ]
        if not candidates:
            forced = (
                1 + self.rng.randrange(grid.rows - 2),
                1 + self.rng.randrange(grid.cols - 2),
            )
            grid.set_cell(*forced, CellType.OPEN)
            candidates.append(forced)

        grid.place_start(*self.rng.choice(candidates))

    # ---------- Exit relocation ----------

    def random_border_position(self, rows: int, cols: int) -> Position:
        """Pick a non-corner border cell: uniform side, uniform offset on that side."""
        side = self.rng.randrange(4)
        if side == 0:
            return 0, 1 + self.rng.randrange(cols - 2)
        if side == 1:
            return 1 + self.rng.randrange(rows - 2), cols - 1
        if side == 2:
            return rows - 1, 1 + self.rng.randrange(cols - 2)
        return 1 + self.rng.randrange(rows - 2), 0

    def relocate_exit(self, grid: Grid) -> Grid:
        """
        Move the exit to a different non-corner border cell.

        The old exit becomes a barrier and any path markings are cleared. Up to
        `relocation_attempts` draws avoid recently used positions; if all of
        them collide, one draw ignores the history.

        Returns:
            The same grid, for chaining.

        Raises:
            InvalidDimensionsError: If the grid has no non-corner border cells.
        """
        if grid.rows < 3 or grid.cols < 3:
            raise InvalidDimensionsError(grid.rows, grid.cols, 3)

        if grid.exit is not None:
            grid.set_cell(*grid.exit, CellType.BARRIER)
        grid.clear_path()

        for _ in range(self.relocation_attempts):
            pos = self.random_border_position(grid.rows, grid.cols)
            self.recent_exits.trim()
            if pos not in self.recent_exits and pos != grid.start:
                grid.place_exit(*pos)
                self.recent_exits.add(pos)
                return grid

        pos = self.random_border_position(grid.rows, grid.cols)
        if pos == grid.start:
            # Only loaded layouts can have a start on the border
            pos = self.rng.choice([p for p in self.border_positions(grid) if p != grid.start])
        grid.place_exit(*pos)
        return grid

    @staticmethod
    def border_positions(grid: Grid) -> list[Position]:
        """All non-corner border cells, row-major."""
        return [
            (row, col)
            for row in range(grid.rows)
            for col in range(grid.cols)
            if grid.is_border(row, col) and not grid.is_corner(row, col)
        ]

    def ensure_reachable(self, grid: Grid) -> bool:
        """
        Relocate the exit until the start can reach it.

        Returns:
            True if start and exit are connected, False after
            `repair_attempts` relocations without success (a warning is
            recorded and the grid is left as is).
        """
        attempts = 0
        while not start_reaches_exit(grid) and attempts < self.repair_attempts:
            self.relocate_exit(grid)
            attempts += 1

        if start_reaches_exit(grid):
            if attempts:
                logger.debug(f"Exit relocated {attempts} time(s) to reach start")
            return True

        self._warn(
            f"Could not find a reachable exit after {self.repair_attempts} "
            f"relocations; start and exit may be disconnected.",
            stage="repair",
        )
        return False

    def _warn(self, message: str, stage: str) -> None:
        logger.warning(message)
        self.warnings.append(BestEffortWarning(message, stage))
