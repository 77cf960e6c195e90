from __future__ import annotations

"""Built-in investigation tools.

Each tool validates its arguments with a pydantic input model and delegates the
actual work to an injected async backend ``(params, context) -> Any``. A tool
without a backend reports itself as not configured instead of raising.
Backends may return a ``ToolResult`` directly, a string, or any JSON-able value.
"""

import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, ClassVar, Dict, List, Optional, Type

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..schemas.domain import ToolContext, ToolResult, ToolRiskTier
from .base import ToolDefinition

Backend = Callable[[Any, ToolContext], Awaitable[Any]]


class _ToolInput(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LogQueryInput(_ToolInput):
    log_group: str = Field(description="Log group to query, e.g. /aws/lambda/checkout")
    query: str = Field(description="Logs Insights query. Include a limit clause.")
    start_time: Optional[str] = Field(default=None, description="ISO-8601 start time or relative offset like -1h")
    end_time: Optional[str] = Field(default=None, description="ISO-8601 end time (defaults to now)")


class CodeSearchInput(_ToolInput):
    query: str = Field(description="Text or symbol to search for")
    repo: Optional[str] = Field(default=None, description="Repository in owner/repo format")
    language: Optional[str] = None
    path: Optional[str] = Field(default=None, description="Path filter such as src/ or *.py")
    max_results: int = Field(default=10, ge=1, le=100)


class ListFilesInput(_ToolInput):
    repo: str = Field(description="Repository in owner/repo format")
    path: str = Field(default="", description="Directory to list, relative to the repo root")
    ref: Optional[str] = None


class GetFileInput(_ToolInput):
    repo: str = Field(description="Repository in owner/repo format")
    path: str = Field(description="File path relative to the repo root")
    ref: Optional[str] = None


class PullRequestFile(_ToolInput):
    path: str = Field(validation_alias=AliasChoices("path", "filename"))
    content: str


class CreatePullRequestInput(_ToolInput):
    repo: str
    title: str
    body: str
    base: str
    head: str
    files: List[PullRequestFile] = Field(min_length=1)

    @field_validator("files", mode="before")
    @classmethod
    def _decode_json_files(cls, v: Any) -> Any:
        # Models sometimes send the files array as a JSON string.
        if isinstance(v, str):
            return json.loads(v)
        return v


class DatabaseQueryInput(_ToolInput):
    query: str = Field(description="Read-only SQL statement")
    connection_name: Optional[str] = None
    max_rows: int = Field(default=100, ge=1, le=1000)


class RunCommandInput(_ToolInput):
    command: str = Field(description="Shell command to run on the target host")
    working_directory: Optional[str] = None
    timeout_seconds: int = Field(default=60, ge=1, le=600)


def _render(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    return json.dumps(raw, indent=2, default=str)


@dataclass(frozen=True)
class BackendTool:
    """Base for tools that validate input and delegate to ``backend``."""

    backend: Optional[Backend] = None

    name: ClassVar[str]
    description: ClassVar[str]
    input_model: ClassVar[Type[_ToolInput]]
    risk_tier: ClassVar[ToolRiskTier] = ToolRiskTier.read_only
    cost_estimate: ClassVar[float] = 0.01
    reads_files: ClassVar[bool] = False
    lists_files: ClassVar[bool] = False
    writes_files: ClassVar[bool] = False

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.input_model.model_json_schema(),
            risk_tier=self.risk_tier,
            cost_estimate=self.cost_estimate,
            reads_files=self.reads_files,
            lists_files=self.lists_files,
            writes_files=self.writes_files,
        )

    async def execute(self, args: Dict[str, Any], context: ToolContext) -> ToolResult:
        if self.backend is None:
            return ToolResult.failure(f"{self.name} not configured")
        try:
            params = self.input_model.model_validate(args)
        except (ValidationError, ValueError) as e:
            return ToolResult.failure(f"Invalid arguments for {self.name}: {e}")

        raw = await self.backend(params, context)
        if isinstance(raw, ToolResult):
            return raw
        return ToolResult(success=True, output=_render(raw), metadata=self.metadata_for(params, raw))

    def metadata_for(self, params: Any, raw: Any) -> Optional[Dict[str, Any]]:
        return None


@dataclass(frozen=True)
class LogQueryTool(BackendTool):
    name: ClassVar[str] = "cloudwatch_query_logs"
    description: ClassVar[str] = (
        "Run a Logs Insights query against a log group to find errors, latency spikes or "
        "request traces around the time of an alert."
    )
    input_model: ClassVar[Type[_ToolInput]] = LogQueryInput
    cost_estimate: ClassVar[float] = 0.02


@dataclass(frozen=True)
class CodeSearchTool(BackendTool):
    name: ClassVar[str] = "github_search_code"
    description: ClassVar[str] = (
        "Search code across repositories to find functions, error messages or configuration "
        "related to the incident."
    )
    input_model: ClassVar[Type[_ToolInput]] = CodeSearchInput


@dataclass(frozen=True)
class ListFilesTool(BackendTool):
    name: ClassVar[str] = "github_list_files"
    description: ClassVar[str] = "List files in a repository directory."
    input_model: ClassVar[Type[_ToolInput]] = ListFilesInput
    lists_files: ClassVar[bool] = True

    def metadata_for(self, params: Any, raw: Any) -> Optional[Dict[str, Any]]:
        entries = raw.get("files", []) if isinstance(raw, dict) else raw
        paths: List[str] = []
        for entry in entries or []:
            if isinstance(entry, str):
                paths.append(entry)
            elif isinstance(entry, dict) and entry.get("path"):
                paths.append(str(entry["path"]))
        return {"repo": params.repo, "paths": paths}


@dataclass(frozen=True)
class GetFileTool(BackendTool):
    name: ClassVar[str] = "github_get_file"
    description: ClassVar[str] = (
        "Read the full contents of a file. Read every file before proposing changes to it."
    )
    input_model: ClassVar[Type[_ToolInput]] = GetFileInput
    reads_files: ClassVar[bool] = True

    def metadata_for(self, params: Any, raw: Any) -> Optional[Dict[str, Any]]:
        return {"repo": params.repo, "path": params.path}


@dataclass(frozen=True)
class CreatePullRequestTool(BackendTool):
    name: ClassVar[str] = "github_create_draft_pr"
    description: ClassVar[str] = (
        "Open a draft pull request with complete file contents. Every modified file must have "
        "been read with github_get_file first; new files are allowed."
    )
    input_model: ClassVar[Type[_ToolInput]] = CreatePullRequestInput
    risk_tier: ClassVar[ToolRiskTier] = ToolRiskTier.safe_write
    cost_estimate: ClassVar[float] = 0.05
    writes_files: ClassVar[bool] = True

    def metadata_for(self, params: Any, raw: Any) -> Optional[Dict[str, Any]]:
        meta: Dict[str, Any] = {"repo": params.repo, "files": [f.path for f in params.files]}
        if isinstance(raw, dict) and raw.get("url"):
            meta["url"] = raw["url"]
        return meta


@dataclass(frozen=True)
class DatabaseQueryTool(BackendTool):
    name: ClassVar[str] = "database_query"
    description: ClassVar[str] = "Run a read-only SQL query against a configured database connection."
    input_model: ClassVar[Type[_ToolInput]] = DatabaseQueryInput
    cost_estimate: ClassVar[float] = 0.02


@dataclass(frozen=True)
class RunCommandTool(BackendTool):
    name: ClassVar[str] = "run_command"
    description: ClassVar[str] = (
        "Run a shell command on an operations host. Always requires human approval."
    )
    input_model: ClassVar[Type[_ToolInput]] = RunCommandInput
    risk_tier: ClassVar[ToolRiskTier] = ToolRiskTier.destructive
    cost_estimate: ClassVar[float] = 0.05
