# Core module
from .errors import BestEffortWarning, InvalidDimensionsError, MazeError, MazeFormatError
from .grid import CellType, Direction, Grid, Position, SymbolSet
from .maze_generator import MazeGenerator, RecentExits
from .maze_parser import (
    export_maze_text,
    load_all_mazes,
    load_maze_file,
    parse_maze_text,
    validate_maze_text,
)
from .pathfinder import Algorithm, PathResult, solve, solve_astar, solve_bfs
from .reachability import reachable, reachable_region, start_reaches_exit

__all__ = [
    "Algorithm",
    "BestEffortWarning",
    "CellType",
    "Direction",
    "Grid",
    "InvalidDimensionsError",
    "MazeError",
    "MazeFormatError",
    "MazeGenerator",
    "PathResult",
    "Position",
    "RecentExits",
    "SymbolSet",
    "export_maze_text",
    "load_all_mazes",
    "load_maze_file",
    "parse_maze_text",
    "reachable",
    "reachable_region",
    "solve",
    "solve_astar",
    "solve_bfs",
    "start_reaches_exit",
    "validate_maze_text",
]
