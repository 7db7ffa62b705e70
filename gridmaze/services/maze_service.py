"""Maze workspace service: owns grids and serializes operations on them."""

import asyncio
import logging
import random
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from starlette.concurrency import run_in_threadpool

from gridmaze.config import Settings, get_settings
from gridmaze.core import (
    Algorithm,
    Grid,
    MazeFormatError,
    MazeGenerator,
    PathResult,
    export_maze_text,
    load_all_mazes,
    parse_maze_text,
    solve,
)

logger = logging.getLogger(__name__)


class WorkspaceNotFoundError(LookupError):
    """Raised when a workspace id is unknown (or was evicted)."""

    pass


class SampleNotFoundError(LookupError):
    """Raised when a sample maze name is unknown."""

    pass


@dataclass
class Workspace:
    """A grid plus everything needed to keep operating on it."""

    workspace_id: str
    grid: Grid
    generator: MazeGenerator
    source: str  # generated, loaded, sample
    warnings: list[str] = field(default_factory=list)
    last_result: Optional[PathResult] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)


class MazeService:
    """
    Service holding maze workspaces.

    Each workspace has its own random source and exit history. Every
    operation on a workspace runs under that workspace's lock, and core work
    runs in the threadpool so big grids don't stall the event loop.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._workspaces: OrderedDict[str, Workspace] = OrderedDict()

    def _new_generator(self, seed: Optional[int] = None) -> MazeGenerator:
        s = self.settings
        return MazeGenerator(
            rng=random.Random(seed),
            min_dimension=s.min_dimension,
            max_dimension=s.max_dimension,
            open_probability=s.open_probability,
            carve_attempts=s.carve_attempts,
            relocation_attempts=s.relocation_attempts,
            repair_attempts=s.repair_attempts,
        )

    def _register(self, workspace: Workspace) -> Workspace:
        self._workspaces[workspace.workspace_id] = workspace
        while len(self._workspaces) > self.settings.max_workspaces:
            evicted_id, _ = self._workspaces.popitem(last=False)
            logger.info(f"Evicted workspace {evicted_id} (limit {self.settings.max_workspaces})")
        logger.info(
            f"Created workspace {workspace.workspace_id} ({workspace.source}, "
            f"{workspace.grid.rows}x{workspace.grid.cols})"
        )
        return workspace

    @staticmethod
    def _new_id() -> str:
        return f"maze_{uuid.uuid4().hex[:12]}"

    def get(self, workspace_id: str) -> Workspace:
        """Get a workspace by id."""
        workspace = self._workspaces.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(f"Maze not found: {workspace_id}")
        return workspace

    def __len__(self) -> int:
        return len(self._workspaces)

    # ---------- Creation ----------

    async def generate(
        self,
        rows: int,
        cols: int,
        guarantee_path: bool = True,
        seed: Optional[int] = None,
    ) -> Workspace:
        """
        Generate a maze in a new workspace.

        Raises:
            InvalidDimensionsError: If rows/cols are out of range.
        """
        generator = self._new_generator(seed)
        grid = await run_in_threadpool(generator.generate, rows, cols, guarantee_path)
        return self._register(
            Workspace(
                workspace_id=self._new_id(),
                grid=grid,
                generator=generator,
                source="generated",
                warnings=[str(w) for w in generator.warnings],
            )
        )

    async def load(self, maze_text: str, seed: Optional[int] = None, source: str = "loaded") -> Workspace:
        """
        Load maze text into a new workspace.

        Raises:
            MazeFormatError: If the text is malformed or the maze exceeds
                max_dimension in either direction.
        """
        grid = await run_in_threadpool(self._parse_bounded, maze_text)
        return self._register(self._workspace_for_loaded(grid, seed, source))

    def _parse_bounded(self, maze_text: str) -> Grid:
        grid = parse_maze_text(maze_text)
        self._check_size(grid)
        return grid

    def _check_size(self, grid: Grid) -> None:
        """Loaded mazes get the same size ceiling as generated ones."""
        limit = self.settings.max_dimension
        if grid.rows > limit or grid.cols > limit:
            raise MazeFormatError(
                f"Maze is {grid.rows}x{grid.cols}; loaded mazes are limited to {limit}x{limit}"
            )

    def _workspace_for_loaded(self, grid: Grid, seed: Optional[int], source: str) -> Workspace:
        generator = self._new_generator(seed)
        generator.recent_exits.reset(min(grid.rows, grid.cols), grid.exit)
        return Workspace(
            workspace_id=self._new_id(),
            grid=grid,
            generator=generator,
            source=source,
        )

    def list_samples(self) -> list[str]:
        """Names of the sample mazes that load cleanly."""
        mazes_dir = self.settings.mazes_dir
        if not mazes_dir.is_dir():
            return []
        return list(load_all_mazes(mazes_dir))

    async def load_sample(self, name: str, seed: Optional[int] = None) -> Workspace:
        """
        Load a sample maze into a new workspace.

        Raises:
            SampleNotFoundError: If no valid sample has that name.
        """
        mazes_dir = self.settings.mazes_dir
        samples = await run_in_threadpool(load_all_mazes, mazes_dir) if mazes_dir.is_dir() else {}
        if name not in samples:
            raise SampleNotFoundError(f"Sample maze not found: {name}")
        self._check_size(samples[name])
        return self._register(self._workspace_for_loaded(samples[name], seed, "sample"))

    # ---------- Operations on an existing workspace ----------

    async def regenerate(
        self, workspace_id: str, rows: int, cols: int, guarantee_path: bool = True
    ) -> Workspace:
        """Replace a workspace's grid with a freshly generated one."""
        workspace = self.get(workspace_id)
        async with workspace.lock:
            grid = await run_in_threadpool(
                workspace.generator.generate, rows, cols, guarantee_path
            )
            workspace.grid = grid
            workspace.source = "generated"
            workspace.warnings = [str(w) for w in workspace.generator.warnings]
            workspace.last_result = None
        return workspace

    async def replace(self, workspace_id: str, maze_text: str) -> Workspace:
        """
        Replace a workspace's grid with loaded text.

        The text is parsed before anything is touched, so a format error
        leaves the workspace exactly as it was.
        """
        workspace = self.get(workspace_id)
        async with workspace.lock:
            grid = await run_in_threadpool(self._parse_bounded, maze_text)
            workspace.grid = grid
            workspace.source = "loaded"
            workspace.warnings = []
            workspace.last_result = None
            workspace.generator.recent_exits.reset(min(grid.rows, grid.cols), grid.exit)
        return workspace

    async def solve(self, workspace_id: str, algorithm: Algorithm) -> Workspace:
        """Run a solver; the result is stored on the workspace."""
        workspace = self.get(workspace_id)
        async with workspace.lock:
            result = await run_in_threadpool(solve, workspace.grid, algorithm)
            workspace.last_result = result
        logger.info(
            f"Solved {workspace_id} with {algorithm.value}: "
            f"{'length ' + str(result.length) if result.found else 'unreachable'} "
            f"({result.expanded} expanded)"
        )
        return workspace

    async def relocate_exit(self, workspace_id: str) -> Workspace:
        """Move the workspace's exit to another border cell."""
        workspace = self.get(workspace_id)
        async with workspace.lock:
            await run_in_threadpool(workspace.generator.relocate_exit, workspace.grid)
            workspace.last_result = None
        return workspace

    async def export(self, workspace_id: str) -> str:
        workspace = self.get(workspace_id)
        async with workspace.lock:
            return export_maze_text(workspace.grid)

    async def snapshot(self, workspace_id: str) -> tuple[Workspace, Grid]:
        """Get a workspace and a copy of its grid taken under the lock."""
        workspace = self.get(workspace_id)
        async with workspace.lock:
            return workspace, workspace.grid.copy()

    def delete(self, workspace_id: str) -> bool:
        """Discard a workspace."""
        if workspace_id in self._workspaces:
            del self._workspaces[workspace_id]
            return True
        return False


# Singleton instance
_maze_service: Optional[MazeService] = None


def get_maze_service() -> MazeService:
    """Get singleton maze service."""
    global _maze_service
    if _maze_service is None:
        _maze_service = MazeService()
    return _maze_service
