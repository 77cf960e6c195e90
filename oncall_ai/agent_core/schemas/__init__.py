"""Schemas and DTOs for the agent core."""

from .domain import (
    AgentEvent,
    AgentEventType,
    AgentState,
    AgentStatus,
    ApprovalRequest,
    ApprovalStatus,
    LLMMessage,
    LLMResponse,
    PendingApproval,
    ToolCall,
    ToolCallRecord,
    ToolContext,
    ToolResult,
    ToolRiskTier,
)

__all__ = [
    "AgentEvent",
    "AgentEventType",
    "AgentState",
    "AgentStatus",
    "ApprovalRequest",
    "ApprovalStatus",
    "LLMMessage",
    "LLMResponse",
    "PendingApproval",
    "ToolCall",
    "ToolCallRecord",
    "ToolContext",
    "ToolResult",
    "ToolRiskTier",
]
