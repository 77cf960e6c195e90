from __future__ import annotations

import json
from typing import Any, List

import pytest

from oncall_ai.agent_core.schemas import ToolContext, ToolResult, ToolRiskTier
from oncall_ai.agent_core.tools import (
    CreatePullRequestTool,
    GetFileTool,
    ListFilesTool,
    LogQueryTool,
    RunCommandTool,
)
from oncall_ai.agent_core.tools.builtin import CreatePullRequestInput

CTX = ToolContext(workspace_id="ws", run_id="run-1")


class _Backend:
    def __init__(self, result: Any) -> None:
        self.result = result
        self.calls: List[Any] = []

    async def __call__(self, params: Any, context: ToolContext) -> Any:
        self.calls.append((params, context))
        return self.result


@pytest.mark.asyncio
async def test_tool_without_backend_reports_not_configured() -> None:
    result = await LogQueryTool().execute({"log_group": "/aws/x", "query": "fields @message | limit 5"}, CTX)

    assert result.success is False
    assert result.error == "cloudwatch_query_logs not configured"


@pytest.mark.asyncio
async def test_invalid_arguments_are_a_failed_result() -> None:
    backend = _Backend("unused")

    result = await GetFileTool(backend=backend).execute({"repo": "acme/api"}, CTX)

    assert result.success is False
    assert result.error.startswith("Invalid arguments for github_get_file")
    assert backend.calls == []


@pytest.mark.asyncio
async def test_backend_receives_validated_params_and_context() -> None:
    backend = _Backend([{"timestamp": "t1", "message": "boom"}])

    result = await LogQueryTool(backend=backend).execute(
        {"log_group": "/aws/lambda/checkout", "query": "fields @message | limit 5", "extra": "ignored"}, CTX
    )

    params, context = backend.calls[0]
    assert params.log_group == "/aws/lambda/checkout"
    assert context is CTX
    assert result.success is True
    assert json.loads(result.output) == [{"timestamp": "t1", "message": "boom"}]


@pytest.mark.asyncio
async def test_backend_tool_result_passes_through() -> None:
    backend = _Backend(ToolResult.failure("throttled"))

    result = await LogQueryTool(backend=backend).execute({"log_group": "g", "query": "q"}, CTX)

    assert result.error == "throttled"


@pytest.mark.asyncio
async def test_get_file_records_repo_and_path_metadata() -> None:
    result = await GetFileTool(backend=_Backend("print('hi')\n")).execute(
        {"repo": "acme/api", "path": "app/main.py"}, CTX
    )

    assert result.output == "print('hi')\n"
    assert result.metadata == {"repo": "acme/api", "path": "app/main.py"}


@pytest.mark.parametrize(
    "raw",
    [
        ["app/main.py", "app/db.py"],
        [{"path": "app/main.py", "type": "file"}, {"path": "app/db.py"}, {"type": "dir"}],
        {"files": ["app/main.py", "app/db.py"]},
    ],
)
@pytest.mark.asyncio
async def test_list_files_extracts_paths(raw: Any) -> None:
    result = await ListFilesTool(backend=_Backend(raw)).execute({"repo": "acme/api", "path": "app"}, CTX)

    assert result.metadata == {"repo": "acme/api", "paths": ["app/main.py", "app/db.py"]}


@pytest.mark.asyncio
async def test_create_pr_accepts_json_encoded_files_with_filename_key() -> None:
    backend = _Backend({"url": "https://github.example/acme/api/pull/7"})
    files = json.dumps([{"filename": "app/main.py", "content": "fixed"}])

    result = await CreatePullRequestTool(backend=backend).execute(
        {"repo": "acme/api", "title": "Fix", "body": "b", "base": "main", "head": "fix", "files": files}, CTX
    )

    assert result.success is True
    assert result.metadata == {
        "repo": "acme/api",
        "files": ["app/main.py"],
        "url": "https://github.example/acme/api/pull/7",
    }


@pytest.mark.asyncio
async def test_create_pr_rejects_malformed_files_json() -> None:
    result = await CreatePullRequestTool(backend=_Backend({})).execute(
        {"repo": "acme/api", "title": "t", "body": "b", "base": "main", "head": "h", "files": "[not json"}, CTX
    )

    assert result.success is False
    assert "Invalid arguments" in (result.error or "")


def test_create_pr_requires_at_least_one_file() -> None:
    with pytest.raises(ValueError):
        CreatePullRequestInput.model_validate(
            {"repo": "r", "title": "t", "body": "b", "base": "main", "head": "h", "files": []}
        )


def test_definitions_carry_tier_and_file_roles() -> None:
    pr = CreatePullRequestTool().definition
    cmd = RunCommandTool().definition
    get = GetFileTool().definition

    assert pr.risk_tier == ToolRiskTier.safe_write
    assert pr.writes_files is True
    assert cmd.risk_tier == ToolRiskTier.destructive
    assert get.reads_files is True
    assert "path" in get.input_schema["properties"]
