"""
Unit tests for the runs API endpoints.
"""

import pytest
from httpx import AsyncClient

from oncall_ai.agent_core.schemas import LLMResponse, ToolCall

pytestmark = pytest.mark.asyncio


class TestCreateRun:
    """Tests for POST /api/v1/runs."""

    async def test_run_completes(self, client: AsyncClient, llm):
        llm.queue(LLMResponse(content="Memory leak in the image resizer."))

        response = await client.post("/api/v1/runs", json={"input": "Why is api OOMing?", "workspace_id": "ws"})

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "completed"
        assert data["result"] == "Memory leak in the image resizer."
        assert data["pending_tool_name"] is None
        assert data["run_id"]

    async def test_run_pauses_on_destructive_tool(self, client: AsyncClient, llm, backends):
        llm.queue(
            LLMResponse(tool_calls=[ToolCall(id="c1", name="run_command", args={"command": "kubectl rollout restart"})])
        )

        response = await client.post("/api/v1/runs", json={"input": "restart the api"})

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "paused"
        assert data["pending_tool_name"] == "run_command"
        assert backends["run_command"].calls == []

    async def test_empty_input_is_rejected(self, client: AsyncClient):
        response = await client.post("/api/v1/runs", json={"input": ""})

        assert response.status_code == 422


class TestGetRun:
    """Tests for GET /api/v1/runs/{run_id}."""

    async def test_returns_full_state(self, client: AsyncClient, llm):
        llm.queue(LLMResponse(content="All good."))
        run_id = (await client.post("/api/v1/runs", json={"input": "check"})).json()["run_id"]

        response = await client.get(f"/api/v1/runs/{run_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["run_id"] == run_id
        assert data["status"] == "completed"
        assert [m["role"] for m in data["messages"]] == ["system", "user", "assistant"]

    async def test_unknown_run_returns_404(self, client: AsyncClient):
        response = await client.get("/api/v1/runs/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error_type"] == "RunNotFoundError"
        assert response.json()["run_id"] == "does-not-exist"
