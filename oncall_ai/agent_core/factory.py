from __future__ import annotations

"""Convenience factories for wiring the agent core.

This module contains small helpers to build the default tool registry and to
instantiate an ``AgentEngine``. Application wiring and tests stay concise,
while deployments can still provide their own registry, guardrail config and
loop limits.
"""

from typing import Mapping, Optional

from .llm.base import LLMProvider
from .runtime import EngineDeps
from .runtime.engine import AgentEngine
from .runtime.models import LoopConfig
from .safety.config import GuardrailConfig
from .safety.guardrails import SafetyGuardrails
from .safety.rate_limit import RateLimiter
from .tools.builtin import (
    Backend,
    CodeSearchTool,
    CreatePullRequestTool,
    DatabaseQueryTool,
    GetFileTool,
    ListFilesTool,
    LogQueryTool,
    RunCommandTool,
)
from .tools.registry import ToolRegistry

BUILTIN_TOOLS = (
    LogQueryTool,
    CodeSearchTool,
    ListFilesTool,
    GetFileTool,
    CreatePullRequestTool,
    DatabaseQueryTool,
    RunCommandTool,
)


def build_default_registry(backends: Optional[Mapping[str, Backend]] = None) -> ToolRegistry:
    """Build the default ``ToolRegistry``.

    Every built-in tool is registered; ``backends`` maps a tool name to the
    async function that performs its work. Tools without a backend stay
    registered and report themselves as not configured when called.
    """
    backends = backends or {}
    reg = ToolRegistry()
    for tool_cls in BUILTIN_TOOLS:
        reg.register(tool_cls(backend=backends.get(tool_cls.name)))
    return reg


def build_engine(
    *,
    registry: ToolRegistry,
    llm: LLMProvider,
    guardrail_config: Optional[GuardrailConfig] = None,
    rate_limiter: Optional[RateLimiter] = None,
    loop_config: Optional[LoopConfig] = None,
) -> AgentEngine:
    """Construct an ``AgentEngine`` from config and dependencies."""
    guardrails = SafetyGuardrails(guardrail_config, rate_limiter=rate_limiter)
    return AgentEngine(deps=EngineDeps(registry=registry, llm=llm, guardrails=guardrails), config=loop_config)
