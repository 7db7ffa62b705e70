"""Flood-fill connectivity checks over a grid."""

from collections import deque

from .grid import Grid, Position


def reachable_region(grid: Grid, source: Position) -> set[Position]:
    """
    Collect every cell 4-connected to `source` through passable cells.

    Args:
        grid: Grid to traverse. Not modified.
        source: Starting coordinate.

    Returns:
        Set of visited coordinates (empty if `source` is not passable).
    """
    if not grid.is_passable(*source):
        return set()

    visited = {source}
    queue = deque([source])

    while queue:
        current = queue.popleft()
        for neighbor in grid.neighbors(current):
            if neighbor not in visited and grid.is_passable(*neighbor):
                visited.add(neighbor)
                queue.append(neighbor)

    return visited


def reachable(grid: Grid, source: Position, target: Position) -> bool:
    """Check whether `target` can be reached from `source`."""
    if not grid.is_passable(*source) or not grid.is_passable(*target):
        return False

    visited = {source}
    queue = deque([source])

    while queue:
        current = queue.popleft()
        if current == target:
            return True
        for neighbor in grid.neighbors(current):
            if neighbor not in visited and grid.is_passable(*neighbor):
                visited.add(neighbor)
                queue.append(neighbor)

    return False


def start_reaches_exit(grid: Grid) -> bool:
    """Check the grid's own Start against its own Exit."""
    if grid.start is None or grid.exit is None:
        return False
    return reachable(grid, grid.start, grid.exit)
