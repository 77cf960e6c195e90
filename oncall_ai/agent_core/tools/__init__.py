"""Tool registry, tool protocol and built-in investigation tools."""

from .base import Tool, ToolDefinition
from .builtin import (
    BackendTool,
    CodeSearchTool,
    CreatePullRequestTool,
    DatabaseQueryTool,
    GetFileTool,
    ListFilesTool,
    LogQueryTool,
    RunCommandTool,
)
from .registry import ToolRegistry

__all__ = [
    "BackendTool",
    "CodeSearchTool",
    "CreatePullRequestTool",
    "DatabaseQueryTool",
    "GetFileTool",
    "ListFilesTool",
    "LogQueryTool",
    "RunCommandTool",
    "Tool",
    "ToolDefinition",
    "ToolRegistry",
]
