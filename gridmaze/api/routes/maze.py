"""Maze routes for generating, loading, solving and exporting mazes."""

from fastapi import APIRouter, HTTPException, Query, Request, Response, status
from fastapi.responses import PlainTextResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.concurrency import run_in_threadpool

from gridmaze.api.deps import MazeServiceDep
from gridmaze.config import get_settings
from gridmaze.core import Algorithm, Grid, InvalidDimensionsError, MazeFormatError
from gridmaze.schemas.maze import (
    CellResponse,
    MazeDetail,
    MazeGenerateRequest,
    MazeLoadRequest,
    MazePosition,
    MazeSymbols,
    PathResultResponse,
    SampleListResponse,
)
from gridmaze.services.maze_service import (
    MazeService,
    SampleNotFoundError,
    Workspace,
    WorkspaceNotFoundError,
)


settings = get_settings()
limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/maze", tags=["Mazes"])


def _position(pos) -> MazePosition:
    return MazePosition(row=pos[0], col=pos[1])


def _to_detail(workspace: Workspace, grid: Grid) -> MazeDetail:
    """Build the response for a workspace from a grid snapshot."""
    result = workspace.last_result
    return MazeDetail(
        id=workspace.workspace_id,
        source=workspace.source,
        rows=grid.rows,
        cols=grid.cols,
        start=_position(grid.start),
        exit=_position(grid.exit),
        symbols=MazeSymbols(**grid.symbols.to_dict()),
        grid=grid.to_lines(),
        warnings=workspace.warnings,
        last_result=PathResultResponse(
            algorithm=result.algorithm.value,
            found=result.found,
            length=result.length,
            path=[_position(pos) for pos in result.path],
            expanded=result.expanded,
        ) if result else None,
        created_at=workspace.created_at,
    )


async def _detail(service: MazeService, maze_id: str) -> MazeDetail:
    try:
        workspace, grid = await service.snapshot(maze_id)
    except WorkspaceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return _to_detail(workspace, grid)


def _format_error(e: MazeFormatError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"reason": e.reason, "line": e.line},
    )


def _dimensions_error(e: InvalidDimensionsError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=str(e),
    )


def _not_found(e: LookupError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e.args[0]))


@router.post(
    "",
    response_model=MazeDetail,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(f"{settings.rate_limit_requests}/minute")
async def generate_maze(
    request: Request,
    maze_request: MazeGenerateRequest,
    service: MazeServiceDep,
) -> MazeDetail:
    """Generate a random maze in a new workspace.

    With guarantee_path the interior is carved as a connected maze and the
    exit is moved until the start can reach it. Best-effort outcomes are
    reported in `warnings`.
    """
    try:
        workspace = await service.generate(
            maze_request.rows,
            maze_request.cols,
            guarantee_path=maze_request.guarantee_path,
            seed=maze_request.seed,
        )
    except InvalidDimensionsError as e:
        raise _dimensions_error(e)

    return await _detail(service, workspace.workspace_id)


@router.post(
    "/load",
    response_model=MazeDetail,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(f"{settings.rate_limit_requests}/minute")
async def load_maze(
    request: Request,
    load_request: MazeLoadRequest,
    service: MazeServiceDep,
) -> MazeDetail:
    """Load a maze from text in the maze file format."""
    try:
        workspace = await service.load(load_request.text, seed=load_request.seed)
    except MazeFormatError as e:
        raise _format_error(e)

    return await _detail(service, workspace.workspace_id)


@router.get(
    "/samples",
    response_model=SampleListResponse,
)
async def list_samples(service: MazeServiceDep) -> SampleListResponse:
    """List the sample mazes shipped with the app."""
    samples = await run_in_threadpool(service.list_samples)
    return SampleListResponse(samples=samples, total=len(samples))


@router.post(
    "/samples/{name}",
    response_model=MazeDetail,
    status_code=status.HTTP_201_CREATED,
)
async def load_sample(name: str, service: MazeServiceDep) -> MazeDetail:
    """Load a sample maze into a new workspace."""
    try:
        workspace = await service.load_sample(name)
    except SampleNotFoundError as e:
        raise _not_found(e)
    except MazeFormatError as e:
        raise _format_error(e)

    return await _detail(service, workspace.workspace_id)


@router.get(
    "/{maze_id}",
    response_model=MazeDetail,
)
async def get_maze(maze_id: str, service: MazeServiceDep) -> MazeDetail:
    """Get the current state of a maze, including any path markings."""
    return await _detail(service, maze_id)


@router.put(
    "/{maze_id}",
    response_model=MazeDetail,
)
async def replace_maze(
    maze_id: str,
    load_request: MazeLoadRequest,
    service: MazeServiceDep,
) -> MazeDetail:
    """Replace a maze with loaded text. A malformed text leaves the maze untouched."""
    try:
        await service.replace(maze_id, load_request.text)
    except WorkspaceNotFoundError as e:
        raise _not_found(e)
    except MazeFormatError as e:
        raise _format_error(e)

    return await _detail(service, maze_id)


@router.post(
    "/{maze_id}/generate",
    response_model=MazeDetail,
)
async def regenerate_maze(
    maze_id: str,
    maze_request: MazeGenerateRequest,
    service: MazeServiceDep,
) -> MazeDetail:
    """Generate a new random maze in an existing workspace."""
    try:
        await service.regenerate(
            maze_id,
            maze_request.rows,
            maze_request.cols,
            guarantee_path=maze_request.guarantee_path,
        )
    except WorkspaceNotFoundError as e:
        raise _not_found(e)
    except InvalidDimensionsError as e:
        raise _dimensions_error(e)

    return await _detail(service, maze_id)


@router.get(
    "/{maze_id}/cell",
    response_model=CellResponse,
)
async def get_cell(
    maze_id: str,
    service: MazeServiceDep,
    row: int = Query(..., ge=0),
    col: int = Query(..., ge=0),
) -> CellResponse:
    """Get the kind of a single cell."""
    try:
        _, grid = await service.snapshot(maze_id)
    except WorkspaceNotFoundError as e:
        raise _not_found(e)

    if not grid.in_bounds(row, col):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Cell ({row}, {col}) is outside a {grid.rows}x{grid.cols} maze",
        )

    return CellResponse(row=row, col=col, kind=grid.cell(row, col).value)


@router.post(
    "/{maze_id}/solve",
    response_model=MazeDetail,
)
async def solve_maze(
    maze_id: str,
    service: MazeServiceDep,
    algorithm: Algorithm = Query(Algorithm.BFS, description="Search algorithm (bfs, astar)"),
) -> MazeDetail:
    """Find a shortest path from start to exit.

    Path cells are marked in the returned grid. An unreachable exit is a
    normal result (`found` is false), not an error.
    """
    try:
        await service.solve(maze_id, algorithm)
    except WorkspaceNotFoundError as e:
        raise _not_found(e)

    return await _detail(service, maze_id)


@router.post(
    "/{maze_id}/exit",
    response_model=MazeDetail,
)
async def relocate_exit(maze_id: str, service: MazeServiceDep) -> MazeDetail:
    """Move the exit to another border cell and clear any path markings."""
    try:
        await service.relocate_exit(maze_id)
    except WorkspaceNotFoundError as e:
        raise _not_found(e)
    except InvalidDimensionsError as e:
        raise _dimensions_error(e)

    return await _detail(service, maze_id)


@router.get(
    "/{maze_id}/export",
    response_class=PlainTextResponse,
)
async def export_maze(maze_id: str, service: MazeServiceDep) -> PlainTextResponse:
    """Export a maze in the maze file format."""
    try:
        text = await service.export(maze_id)
    except WorkspaceNotFoundError as e:
        raise _not_found(e)

    return PlainTextResponse(
        text,
        headers={"Content-Disposition": f"attachment; filename={maze_id}.txt"},
    )


@router.delete(
    "/{maze_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_maze(maze_id: str, service: MazeServiceDep) -> Response:
    """Discard a maze workspace."""
    if not service.delete(maze_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Maze not found: {maze_id}",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
