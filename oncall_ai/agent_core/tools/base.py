from __future__ import annotations

"""Tool protocol and tool definition model.

A tool is the concrete execution unit behind an LLM tool call. The agent loop
resolves a tool call name through a ``ToolRegistry`` and executes the tool with
a ``ToolContext``.

Tools should:

- validate their own arguments and report problems as a failed ``ToolResult``,
- return text the model can read in ``ToolResult.output``,
- avoid making safety decisions themselves (guardrails and approval gating are
  applied by the loop before invocation).
"""

from typing import Any, Dict, Protocol

from pydantic import Field

from ..schemas.base import BaseSchema
from ..schemas.domain import ToolContext, ToolResult, ToolRiskTier


class ToolDefinition(BaseSchema):
    """Static description of a tool as advertised to the model.

    ``reads_files``/``lists_files``/``writes_files`` declare the tool's role in
    file-read tracking: successful reads and listings are remembered, and
    writes are only permitted on files already read in the session.
    """

    name: str
    description: str
    input_schema: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})
    risk_tier: ToolRiskTier = ToolRiskTier.read_only
    cost_estimate: float = Field(default=0.01, ge=0.0)

    reads_files: bool = False
    lists_files: bool = False
    writes_files: bool = False


class Tool(Protocol):
    """Protocol for tool implementations."""

    @property
    def definition(self) -> ToolDefinition: ...

    async def execute(self, args: Dict[str, Any], context: ToolContext) -> ToolResult: ...
