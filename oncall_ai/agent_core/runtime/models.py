from __future__ import annotations

"""Runtime configuration, dependency bundle and LangGraph state types.

The agent loop is dependency-injected.

- ``LoopConfig`` holds the limits and model options for one run.
- ``EngineDeps`` collects the registry, LLM provider and guardrails.
- ``_GraphState`` is the mutable state passed between LangGraph nodes. Only
  ``agent`` survives a pause; everything else is rebuilt per invocation.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, List, NotRequired, Optional, Required, TypedDict

from pydantic import Field

from ..llm.base import LLMOptions, LLMProvider
from ..safety.guardrails import SafetyGuardrails
from ..schemas.base import BaseSchema
from ..schemas.domain import AgentEvent, AgentState, ToolCall, ToolContext
from ..tools.registry import ToolRegistry
from .prompts import INVESTIGATOR_SYSTEM_PROMPT


class LoopConfig(BaseSchema):
    """Limits and model options for the agent loop."""

    max_iterations: int = Field(default=15, ge=1, le=200)
    timeout_seconds: float = Field(default=300.0, gt=0.0)
    system_prompt: str = INVESTIGATOR_SYSTEM_PROMPT
    temperature: float | None = Field(default=0.2, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=4096, ge=1)
    sanitize_tool_output: bool = True

    def llm_options(self) -> LLMOptions:
        return LLMOptions(temperature=self.temperature, max_tokens=self.max_tokens)


@dataclass(frozen=True)
class EngineDeps:
    """Dependency bundle for ``AgentEngine``.

    ``clock`` returns seconds and is only used for the per-invocation timeout.
    """

    registry: ToolRegistry
    llm: LLMProvider
    guardrails: SafetyGuardrails = field(default_factory=SafetyGuardrails)
    clock: Callable[[], float] = time.monotonic


class _GraphState(TypedDict):
    """Mutable LangGraph state for one engine invocation.

    Required keys:

    - ``agent``: the run's ``AgentState`` (mutated in place).
    - ``context``: identifiers passed to tool executors.
    - ``deadline``: clock value after which the loop fails with a timeout.

    Optional keys:

    - ``batch``: tool calls from the latest LLM response, awaiting processing.
    - ``observer``: event callback for this invocation.
    """

    agent: Required[AgentState]
    context: Required[ToolContext]
    deadline: Required[float]
    batch: NotRequired[List[ToolCall]]
    observer: NotRequired[Optional[Callable[[AgentEvent], None]]]
