"""
API Schemas.

This module contains Pydantic models used for API request bodies and response validation.
These schemas define the interface contract between the client and the server.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from oncall_ai.agent_core.schemas.domain import AgentState, AgentStatus


class RunCreate(BaseModel):
    """
    Schema for starting a new investigation run.
    """

    input: str = Field(
        ...,
        min_length=1,
        description="The alert, question or task for the investigator.",
        examples=["The checkout service is returning 500s since 14:05 UTC."],
    )
    workspace_id: Optional[str] = Field(
        default=None,
        description="Workspace that owns the run; also the rate-limit scope.",
        examples=["ws-payments"],
    )
    investigation_id: Optional[str] = Field(default=None, description="External incident or ticket id.")
    user_id: Optional[str] = Field(default=None, description="User who started the run.")


class ApprovalDecisionSubmit(BaseModel):
    """
    Schema for submitting an approval decision.

    Used by the approvals API to record a reviewer's verdict on a paused run.
    """

    reason: Optional[str] = Field(
        default=None,
        description="Optional justification for the decision. Rejection reasons are shown to the agent.",
        examples=["Restart the pod instead of deleting the volume."],
    )
    decided_by: Optional[str] = Field(
        default=None,
        description="Identity of the reviewer.",
        examples=["alice@example.com"],
    )


class RunStatusRead(BaseModel):
    """
    Summary of a run after it was started or after a decision was applied.
    """

    run_id: str
    status: AgentStatus
    iterations: int
    result: Optional[str] = None
    error: Optional[str] = None
    pending_tool_name: Optional[str] = Field(
        default=None, description="Destructive tool waiting for approval, when the run is paused."
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "run_id": "4f1f0c7e-5b8e-4a57-9b4a-2a2b0f1a6c1d",
                "status": "paused",
                "iterations": 2,
                "pending_tool_name": "run_command",
            }
        }
    )

    @classmethod
    def from_state(cls, run_id: str, state: AgentState) -> "RunStatusRead":
        return cls(
            run_id=run_id,
            status=state.status,
            iterations=state.iterations,
            result=state.result,
            error=state.error,
            pending_tool_name=state.pending_approval.tool_name if state.pending_approval else None,
        )
