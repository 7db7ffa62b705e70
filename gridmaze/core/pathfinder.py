"""
Shortest-path search over a grid.

Two solvers share the same contract:
- Prior Path markings are cleared first, so re-solving is idempotent.
- Movement is 4-connected; Barrier cells are never entered.
- The search stops when the Exit is dequeued/popped, not when it is discovered.
- On success every cell strictly between Start and Exit is marked Path.
- No path is a normal result (found=False), never an exception.
"""

import heapq
import itertools
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .grid import CellType, Grid, Position


class Algorithm(Enum):
    """Available search algorithms."""
    BFS = "bfs"
    ASTAR = "astar"


@dataclass
class PathResult:
    """Result of a search."""
    algorithm: Algorithm
    found: bool
    path: list[Position] = field(default_factory=list)
    expanded: int = 0

    @property
    def length(self) -> Optional[int]:
        """Hop count from Start to Exit, None when unreachable."""
        if not self.found:
            return None
        return len(self.path) - 1

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "algorithm": self.algorithm.value,
            "found": self.found,
            "length": self.length,
            "path": [list(pos) for pos in self.path],
            "expanded": self.expanded,
        }


def manhattan_distance(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def _require_endpoints(grid: Grid) -> tuple[Position, Position]:
    if grid.start is None or grid.exit is None:
        raise ValueError("Grid must have a start and an exit before solving")
    return grid.start, grid.exit


def _mark_path(grid: Grid, path: list[Position]) -> None:
    """Mark every cell of `path` except its two endpoints as Path."""
    for row, col in path[1:-1]:
        grid.cells[row][col] = CellType.PATH


def solve_bfs(grid: Grid) -> PathResult:
    """
    Find a shortest path with breadth-first search.

    Args:
        grid: Grid to solve. Path markings are updated in place.

    Returns:
        PathResult; `found` is False if the Exit is unreachable.
    """
    grid.clear_path()
    start, goal = _require_endpoints(grid)

    parent: dict[Position, Optional[Position]] = {start: None}
    queue = deque([start])
    expanded = 0

    while queue:
        current = queue.popleft()
        expanded += 1

        if current == goal:
            path = []
            node: Optional[Position] = current
            while node is not None:
                path.append(node)
                node = parent[node]
            path.reverse()
            _mark_path(grid, path)
            return PathResult(Algorithm.BFS, True, path, expanded)

        for neighbor in grid.neighbors(current):
            if neighbor not in parent and grid.is_passable(*neighbor):
                parent[neighbor] = current
                queue.append(neighbor)

    return PathResult(Algorithm.BFS, False, expanded=expanded)


@dataclass
class _Node:
    """A* search node."""
    pos: Position
    g: int
    h: int
    parent: Optional["_Node"] = None

    @property
    def f(self) -> int:
        return self.g + self.h


def _heap_entry(node: _Node, sequence: int) -> tuple[int, int, int, _Node]:
    # Ordered by f, then h; the sequence only separates full ties.
    return (node.f, node.h, sequence, node)


def solve_astar(grid: Grid) -> PathResult:
    """
    Find a shortest path with A* using the Manhattan distance heuristic.

    Open-set entries are ordered by f = g + h with ties going to the smaller h.
    A neighbour is not pushed if the open set already holds an entry for the
    same cell with an equal or lower g. That check scans the open set, which is
    linear per neighbour; fine for the grid sizes the app allows.

    Args:
        grid: Grid to solve. Path markings are updated in place.

    Returns:
        PathResult; `found` is False if the Exit is unreachable.
    """
    grid.clear_path()
    start, goal = _require_endpoints(grid)

    counter = itertools.count()
    open_set = [_heap_entry(_Node(start, 0, manhattan_distance(start, goal)), next(counter))]
    closed: set[Position] = set()
    expanded = 0

    while open_set:
        current = heapq.heappop(open_set)[3]
        if current.pos in closed:
            continue
        expanded += 1

        if current.pos == goal:
            path = []
            node: Optional[_Node] = current
            while node is not None:
                path.append(node.pos)
                node = node.parent
            path.reverse()
            _mark_path(grid, path)
            return PathResult(Algorithm.ASTAR, True, path, expanded)

        closed.add(current.pos)

        for neighbor in grid.neighbors(current.pos):
            if neighbor in closed or not grid.is_passable(*neighbor):
                continue

            g = current.g + 1
            if any(entry[3].pos == neighbor and entry[3].g <= g for entry in open_set):
                continue

            child = _Node(neighbor, g, manhattan_distance(neighbor, goal), current)
            heapq.heappush(open_set, _heap_entry(child, next(counter)))

    return PathResult(Algorithm.ASTAR, False, expanded=expanded)


def solve(grid: Grid, algorithm: Algorithm) -> PathResult:
    """Dispatch to the solver for `algorithm`."""
    if algorithm is Algorithm.BFS:
        return solve_bfs(grid)
    return solve_astar(grid)
