from __future__ import annotations

"""Tool registry.

The registry maps a tool name to its definition (input contract, risk tier)
and executor. The agent loop uses it to advertise tools to the model, to
decide whether a call needs human approval, and to run calls.
"""

import logging
from typing import Any, Dict, List, Optional

from ..schemas.domain import ToolContext, ToolResult, ToolRiskTier
from .base import Tool, ToolDefinition

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    In-memory mapping of tool names to implementations.

    Notes:
        - ``register`` raises ``ValueError`` when the name is already taken.
        - ``execute`` never raises: unknown tools and executor exceptions come
          back as failed ``ToolResult`` values.
    """

    def __init__(self) -> None:
        """Initialize an empty tool registry."""
        self._tools: Dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """
        Register a tool implementation.

        Args:
            tool: The tool instance to register. Its ``definition.name`` is the key.

        Raises:
            ValueError: If a tool with the same name is already registered.
        """
        name = tool.definition.name
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")
        self._tools[name] = tool

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def definition(self, name: str) -> Optional[ToolDefinition]:
        tool = self._tools.get(name)
        return tool.definition if tool is not None else None

    def definitions(self) -> List[ToolDefinition]:
        """Definitions of every registered tool, in registration order."""
        return [t.definition for t in self._tools.values()]

    def risk_tier(self, name: str) -> Optional[ToolRiskTier]:
        d = self.definition(name)
        return d.risk_tier if d is not None else None

    def requires_approval(self, name: str) -> bool:
        """Destructive tools always need a human decision before they run."""
        return self.risk_tier(name) == ToolRiskTier.destructive

    def can_auto_execute(self, name: str) -> bool:
        return self.risk_tier(name) in (ToolRiskTier.read_only, ToolRiskTier.safe_write)

    async def execute(self, name: str, args: Dict[str, Any], context: ToolContext) -> ToolResult:
        """
        Execute a registered tool.

        Args:
            name: Tool name requested by the model.
            args: Arguments from the tool call.
            context: Identifiers for the current run.

        Returns:
            ToolResult: The tool's result, or a failed result when the tool is
            unknown or its executor raised.
        """
        tool = self._tools.get(name)
        if tool is None:
            return ToolResult.failure(f"Unknown tool: {name}")
        try:
            return await tool.execute(args, context)
        except Exception as e:
            logger.warning(f"Tool '{name}' raised during execution: {e}", exc_info=True)
            return ToolResult.failure(f"Tool execution failed: {e}")
