from __future__ import annotations

"""Domain models for the agent loop.

Everything the loop reads or writes at a suspension point is a pydantic model
so that a paused ``AgentState`` can be persisted with
``model_dump(mode="json")`` and rebuilt with ``model_validate`` in another
process.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional
from uuid import uuid4

from pydantic import ConfigDict, Field, model_validator

from .base import BaseSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ToolRiskTier(str, Enum):
    read_only = "read_only"
    safe_write = "safe_write"
    destructive = "destructive"


class AgentStatus(str, Enum):
    running = "running"
    paused = "paused"
    completed = "completed"
    failed = "failed"


class ApprovalStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    expired = "expired"


class AgentEventType(str, Enum):
    iteration_start = "iteration_start"
    tool_call = "tool_call"
    tool_result = "tool_result"
    approval_required = "approval_required"
    llm_response = "llm_response"
    completed = "completed"
    failed = "failed"


class ToolContext(BaseSchema):
    """Identifiers a tool executor may use to scope its work."""

    workspace_id: Optional[str] = None
    run_id: Optional[str] = None
    investigation_id: Optional[str] = None
    user_id: Optional[str] = None


class ToolResult(BaseSchema):
    success: bool
    output: str = ""
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def failure(cls, error: str, **metadata: Any) -> "ToolResult":
        return cls(success=False, output="", error=error, metadata=metadata or None)

    def as_message_content(self) -> str:
        """Text the model sees for this result."""
        if self.success:
            return self.output
        return f"Error: {self.error or 'tool failed'}"


class ToolCall(BaseSchema):
    id: str
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


class LLMMessage(BaseSchema):
    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None
    tool_name: Optional[str] = None


class LLMResponse(BaseSchema):
    content: Optional[str] = None
    tool_calls: List[ToolCall] = Field(default_factory=list)


class ToolCallRecord(BaseSchema):
    """One executed (or blocked) tool call. Never modified once appended."""

    model_config = ConfigDict(frozen=True)

    iteration: int
    tool_call_id: str
    tool_name: str
    args: Dict[str, Any] = Field(default_factory=dict)
    result: ToolResult
    timestamp: datetime = Field(default_factory=_utc_now)


class PendingApproval(BaseSchema):
    tool_call_id: str
    tool_name: str
    tool_args: Dict[str, Any] = Field(default_factory=dict)
    requested_at: datetime = Field(default_factory=_utc_now)
    # Calls from the same LLM batch that were not reached before the pause.
    remaining_tool_calls: List[ToolCall] = Field(default_factory=list)


class AgentState(BaseSchema):
    """Serializable state of one agent run.

    ``successfully_read_files`` and ``known_existing_files`` are keyed by
    ``"<repo>:<path>"`` and feed the pre-write invariant check.
    """

    run_id: Optional[str] = None
    status: AgentStatus = AgentStatus.running
    messages: List[LLMMessage] = Field(default_factory=list)
    iterations: int = 0
    tool_call_history: List[ToolCallRecord] = Field(default_factory=list)
    pending_approval: Optional[PendingApproval] = None
    result: Optional[str] = None
    error: Optional[str] = None
    successfully_read_files: Dict[str, bool] = Field(default_factory=dict)
    known_existing_files: Dict[str, bool] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _pending_iff_paused(self) -> "AgentState":
        if (self.status == AgentStatus.paused) != (self.pending_approval is not None):
            raise ValueError("pending_approval must be set exactly when status is paused")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.status in (AgentStatus.completed, AgentStatus.failed)


class ApprovalRequest(BaseSchema):
    """A persisted request for a human decision on one destructive tool call."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    run_id: str
    workspace_id: Optional[str] = None

    tool_call_id: str
    tool_name: str
    tool_args: Dict[str, Any] = Field(default_factory=dict)
    risk_tier: ToolRiskTier = ToolRiskTier.destructive

    status: ApprovalStatus = ApprovalStatus.pending
    requested_at: datetime = Field(default_factory=_utc_now)
    expires_at: datetime

    decided_at: Optional[datetime] = None
    decided_by: Optional[str] = None
    reason: Optional[str] = None


class AgentEvent(BaseSchema):
    id: str = Field(default_factory=lambda: str(uuid4()))
    run_id: Optional[str] = None

    type: AgentEventType
    created_at: datetime = Field(default_factory=_utc_now)

    payload: Dict[str, Any] = Field(default_factory=dict)
