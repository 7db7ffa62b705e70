"""Tests for the maze endpoints."""

import pytest
from httpx import AsyncClient


async def _load(client: AsyncClient, text: str) -> dict:
    response = await client.post("/v1/maze/load", json={"text": text})
    assert response.status_code == 201
    return response.json()


class TestGenerateEndpoint:
    """Tests for POST /v1/maze."""

    @pytest.mark.asyncio
    async def test_generate_maze(self, client: AsyncClient):
        """Test generating a maze returns a full snapshot."""
        response = await client.post(
            "/v1/maze", json={"rows": 9, "cols": 13, "guarantee_path": True, "seed": 7}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"].startswith("maze_")
        assert data["source"] == "generated"
        assert data["rows"] == 9
        assert data["cols"] == 13
        assert len(data["grid"]) == 9
        assert all(len(line) == 13 for line in data["grid"])
        assert data["symbols"]["barrier"] == "B"
        assert data["last_result"] is None

        start, exit_ = data["start"], data["exit"]
        assert data["grid"][start["row"]][start["col"]] == "S"
        assert data["grid"][exit_["row"]][exit_["col"]] == "X"

    @pytest.mark.asyncio
    async def test_generate_uses_defaults(self, client: AsyncClient):
        """Test that an empty body uses the configured default size."""
        response = await client.post("/v1/maze", json={})

        assert response.status_code == 201
        data = response.json()
        assert (data["rows"], data["cols"]) == (15, 20)

    @pytest.mark.asyncio
    async def test_generate_too_small(self, client: AsyncClient):
        """Test that dimensions below the minimum are rejected."""
        response = await client.post("/v1/maze", json={"rows": 4, "cols": 10})

        assert response.status_code == 422
        assert "at least 5x5" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_generate_too_large(self, client: AsyncClient):
        """Test that dimensions above the maximum are rejected."""
        response = await client.post("/v1/maze", json={"rows": 10, "cols": 500})

        assert response.status_code == 422
        assert "between 5 and 200" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_regenerate_existing_maze(self, client: AsyncClient, scenario_text):
        """Test regenerating replaces the grid but keeps the id."""
        maze = await _load(client, scenario_text)

        response = await client.post(
            f"/v1/maze/{maze['id']}/generate", json={"rows": 7, "cols": 11}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == maze["id"]
        assert data["source"] == "generated"
        assert (data["rows"], data["cols"]) == (7, 11)

    @pytest.mark.asyncio
    async def test_regenerate_unknown_maze(self, client: AsyncClient):
        """Test regenerating an unknown maze returns 404."""
        response = await client.post("/v1/maze/maze_nope/generate", json={})
        assert response.status_code == 404


class TestLoadEndpoints:
    """Tests for loading and replacing mazes."""

    @pytest.mark.asyncio
    async def test_load_maze(self, client: AsyncClient, scenario_text):
        """Test loading the 5x5 scenario."""
        data = await _load(client, scenario_text)

        assert data["source"] == "loaded"
        assert data["start"] == {"row": 1, "col": 1}
        assert data["exit"] == {"row": 3, "col": 3}
        assert data["grid"] == ["#####", "#S..#", "#.#.#", "#..E#", "#####"]
        assert data["symbols"]["open"] == "."

    @pytest.mark.asyncio
    async def test_load_malformed_maze(self, client: AsyncClient):
        """Test that a format error reports the reason and line number."""
        response = await client.post(
            "/v1/maze/load", json={"text": "5\n5\n#\n.\nS\nE\n#####\n#S.\n"}
        )

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["line"] == 8
        assert "expected 5, got 3" in detail["reason"]

    @pytest.mark.asyncio
    async def test_load_oversized_maze(self, client: AsyncClient):
        """Test that loaded mazes above the size limit are rejected."""
        layout = ["#####", "#S..#"] + ["#...#"] * 197 + ["#..E#", "#####"]
        text = "201\n5\n#\n.\nS\nE\n" + "\n".join(layout) + "\n"

        response = await client.post("/v1/maze/load", json={"text": text})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert "limited to 200x200" in detail["reason"]
        assert detail["line"] is None

    @pytest.mark.asyncio
    async def test_load_empty_text(self, client: AsyncClient):
        """Test that an empty body text fails request validation."""
        response = await client.post("/v1/maze/load", json={"text": ""})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_replace_maze(self, client: AsyncClient, scenario_text):
        """Test replacing a generated maze with loaded text."""
        response = await client.post("/v1/maze", json={"rows": 9, "cols": 9, "seed": 1})
        maze_id = response.json()["id"]

        response = await client.put(f"/v1/maze/{maze_id}", json={"text": scenario_text})

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == maze_id
        assert data["rows"] == 5

    @pytest.mark.asyncio
    async def test_replace_with_bad_text_keeps_maze(self, client: AsyncClient, scenario_text):
        """Test that a failed replace leaves the maze untouched."""
        maze = await _load(client, scenario_text)

        response = await client.put(
            f"/v1/maze/{maze['id']}", json={"text": "5\n5\n#\n.\nS\nE\n"}
        )
        assert response.status_code == 422

        response = await client.get(f"/v1/maze/{maze['id']}")
        assert response.json()["grid"] == maze["grid"]

    @pytest.mark.asyncio
    async def test_replace_unknown_maze(self, client: AsyncClient, scenario_text):
        """Test replacing an unknown maze returns 404."""
        response = await client.put("/v1/maze/maze_nope", json={"text": scenario_text})
        assert response.status_code == 404


class TestSampleEndpoints:
    """Tests for the bundled sample mazes."""

    @pytest.mark.asyncio
    async def test_list_samples(self, client: AsyncClient):
        """Test that the bundled samples are listed by name."""
        response = await client.get("/v1/maze/samples")

        assert response.status_code == 200
        data = response.json()
        assert data["samples"] == ["corridors", "small", "walled_off"]
        assert data["total"] == 3

    @pytest.mark.asyncio
    async def test_load_sample(self, client: AsyncClient):
        """Test loading a sample into a new workspace."""
        response = await client.post("/v1/maze/samples/corridors")

        assert response.status_code == 201
        data = response.json()
        assert data["source"] == "sample"
        assert (data["rows"], data["cols"]) == (9, 11)

    @pytest.mark.asyncio
    async def test_load_unknown_sample(self, client: AsyncClient):
        """Test that an unknown sample returns 404."""
        response = await client.post("/v1/maze/samples/nope")
        assert response.status_code == 404


class TestSolveEndpoint:
    """Tests for POST /v1/maze/{id}/solve."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("algorithm", ["bfs", "astar"])
    async def test_solve_scenario(self, client: AsyncClient, scenario_text, algorithm):
        """Test that both searches find the length-4 path around the pillar."""
        maze = await _load(client, scenario_text)

        response = await client.post(f"/v1/maze/{maze['id']}/solve?algorithm={algorithm}")

        assert response.status_code == 200
        data = response.json()
        result = data["last_result"]
        assert result["algorithm"] == algorithm
        assert result["found"] is True
        assert result["length"] == 4
        assert result["path"][0] == {"row": 1, "col": 1}
        assert result["path"][-1] == {"row": 3, "col": 3}
        assert "".join(data["grid"]).count("+") == 3

    @pytest.mark.asyncio
    async def test_solve_defaults_to_bfs(self, client: AsyncClient, scenario_text):
        """Test that the algorithm defaults to BFS."""
        maze = await _load(client, scenario_text)

        response = await client.post(f"/v1/maze/{maze['id']}/solve")

        assert response.json()["last_result"]["algorithm"] == "bfs"

    @pytest.mark.asyncio
    async def test_solve_unreachable(self, client: AsyncClient):
        """Test that an unreachable exit is a normal result."""
        response = await client.post("/v1/maze/samples/walled_off")
        maze_id = response.json()["id"]

        response = await client.post(f"/v1/maze/{maze_id}/solve?algorithm=astar")

        assert response.status_code == 200
        result = response.json()["last_result"]
        assert result["found"] is False
        assert result["length"] is None
        assert result["path"] == []

    @pytest.mark.asyncio
    async def test_solve_unknown_algorithm(self, client: AsyncClient, scenario_text):
        """Test that an unknown algorithm fails request validation."""
        maze = await _load(client, scenario_text)

        response = await client.post(f"/v1/maze/{maze['id']}/solve?algorithm=dfs")
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_solve_unknown_maze(self, client: AsyncClient):
        """Test solving an unknown maze returns 404."""
        response = await client.post("/v1/maze/maze_nope/solve")
        assert response.status_code == 404


class TestMazeOperations:
    """Tests for cell lookup, exit relocation, export and delete."""

    @pytest.mark.asyncio
    async def test_get_maze(self, client: AsyncClient, scenario_text):
        """Test fetching a maze by id."""
        maze = await _load(client, scenario_text)

        response = await client.get(f"/v1/maze/{maze['id']}")

        assert response.status_code == 200
        assert response.json()["id"] == maze["id"]

    @pytest.mark.asyncio
    async def test_get_unknown_maze(self, client: AsyncClient):
        """Test fetching an unknown maze returns 404."""
        response = await client.get("/v1/maze/maze_nope")
        assert response.status_code == 404
        assert "Maze not found" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_get_cell(self, client: AsyncClient, scenario_text):
        """Test single cell lookups."""
        maze = await _load(client, scenario_text)

        response = await client.get(f"/v1/maze/{maze['id']}/cell", params={"row": 1, "col": 1})
        assert response.status_code == 200
        assert response.json() == {"row": 1, "col": 1, "kind": "start"}

        response = await client.get(f"/v1/maze/{maze['id']}/cell", params={"row": 2, "col": 2})
        assert response.json()["kind"] == "barrier"

    @pytest.mark.asyncio
    async def test_get_cell_out_of_bounds(self, client: AsyncClient, scenario_text):
        """Test that cells outside the grid return 404."""
        maze = await _load(client, scenario_text)

        response = await client.get(f"/v1/maze/{maze['id']}/cell", params={"row": 5, "col": 0})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_relocate_exit(self, client: AsyncClient):
        """Test moving the exit keeps it on a non-corner border cell."""
        response = await client.post("/v1/maze", json={"rows": 9, "cols": 9, "seed": 3})
        maze = response.json()
        await client.post(f"/v1/maze/{maze['id']}/solve")

        response = await client.post(f"/v1/maze/{maze['id']}/exit")

        assert response.status_code == 200
        data = response.json()
        row, col = data["exit"]["row"], data["exit"]["col"]
        assert data["exit"] != maze["exit"]
        assert row in (0, 8) or col in (0, 8)
        assert (row, col) not in {(0, 0), (0, 8), (8, 0), (8, 8)}
        assert data["last_result"] is None
        assert "+" not in "".join(data["grid"])

    @pytest.mark.asyncio
    async def test_export_maze(self, client: AsyncClient, scenario_text):
        """Test that export writes the file format with path cells as open."""
        maze = await _load(client, scenario_text)
        await client.post(f"/v1/maze/{maze['id']}/solve")

        response = await client.get(f"/v1/maze/{maze['id']}/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert f"{maze['id']}.txt" in response.headers["content-disposition"]
        assert response.text == scenario_text

    @pytest.mark.asyncio
    async def test_export_then_load(self, client: AsyncClient):
        """Test that an exported generated maze loads back unchanged."""
        response = await client.post("/v1/maze", json={"rows": 11, "cols": 11, "seed": 21})
        maze = response.json()

        response = await client.get(f"/v1/maze/{maze['id']}/export")
        reloaded = await _load(client, response.text)

        assert reloaded["grid"] == maze["grid"]
        assert reloaded["start"] == maze["start"]
        assert reloaded["exit"] == maze["exit"]

    @pytest.mark.asyncio
    async def test_delete_maze(self, client: AsyncClient, scenario_text):
        """Test deleting a maze."""
        maze = await _load(client, scenario_text)

        response = await client.delete(f"/v1/maze/{maze['id']}")
        assert response.status_code == 204

        response = await client.get(f"/v1/maze/{maze['id']}")
        assert response.status_code == 404

        response = await client.delete(f"/v1/maze/{maze['id']}")
        assert response.status_code == 404
