"""Maze schemas for request/response validation."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from gridmaze.config import get_settings

settings = get_settings()


class MazePosition(BaseModel):
    """Schema for a position in the maze."""

    row: int
    col: int


class MazeSymbols(BaseModel):
    """Schema for the characters used to render a maze."""

    barrier: str
    open: str
    start: str
    exit: str
    path: str


class MazeGenerateRequest(BaseModel):
    """Schema for generating a random maze.

    Dimension bounds are enforced by the generator so that out-of-range
    values come back as an invalid-dimensions error.
    """

    rows: int = settings.default_rows
    cols: int = settings.default_cols
    guarantee_path: bool = True
    seed: Optional[int] = None


class MazeLoadRequest(BaseModel):
    """Schema for loading a maze from text."""

    text: str = Field(..., min_length=1)
    seed: Optional[int] = None


class PathResultResponse(BaseModel):
    """Schema for a search result."""

    algorithm: str = Field(..., pattern="^(bfs|astar)$")
    found: bool
    length: Optional[int] = None
    path: list[MazePosition]
    expanded: int


class MazeDetail(BaseModel):
    """Schema for a maze workspace snapshot."""

    id: str
    source: str
    rows: int = Field(..., gt=0)
    cols: int = Field(..., gt=0)
    start: MazePosition
    exit: MazePosition
    symbols: MazeSymbols
    grid: list[str]
    warnings: list[str] = []
    last_result: Optional[PathResultResponse] = None
    created_at: datetime


class CellResponse(BaseModel):
    """Schema for a single cell lookup."""

    row: int
    col: int
    kind: str = Field(..., pattern="^(barrier|open|start|exit|path)$")


class SampleListResponse(BaseModel):
    """Schema for the sample maze list."""

    samples: list[str]
    total: int
