"""Pytest configuration and fixtures."""

import os
from pathlib import Path
from typing import AsyncGenerator, Callable

# Keep the per-client rate limit out of the way of the test suite
os.environ.setdefault("GRIDMAZE_RATE_LIMIT_REQUESTS", "100000")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from gridmaze.config import Settings
from gridmaze.core import CellType, Grid, SymbolSet
from gridmaze.main import app
from gridmaze.services.maze_service import MazeService, get_maze_service

MAZES_DIR = Path(__file__).resolve().parent.parent / "mazes"


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at the bundled sample mazes."""
    return Settings(mazes_dir=MAZES_DIR, max_workspaces=8)


@pytest.fixture
def service(settings) -> MazeService:
    """A fresh maze service for each test."""
    return MazeService(settings)


@pytest_asyncio.fixture(scope="function")
async def client(service) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client backed by a fresh maze service."""
    app.dependency_overrides[get_maze_service] = lambda: service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_grid() -> Callable[..., Grid]:
    """Build a grid from rows drawn with the default symbols (B, O, S, X, +)."""

    def _make(*lines: str) -> Grid:
        symbols = SymbolSet.default()
        cells = [
            [CellType.PATH if c == symbols.path else symbols.kind_for(c) for c in line]
            for line in lines
        ]
        grid = Grid(cells)
        (start,) = grid.positions(CellType.START)
        (exit_,) = grid.positions(CellType.EXIT)
        grid.start = start
        grid.exit = exit_
        return grid

    return _make


@pytest.fixture
def scenario_text() -> str:
    """The 5x5 load scenario: start (1,1), exit (3,3)."""
    return "5\n5\n#\n.\nS\nE\n#####\n#S..#\n#.#.#\n#..E#\n#####\n"
