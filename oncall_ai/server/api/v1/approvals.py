"""
Approvals API Endpoints.

This module provides endpoints for human-in-the-loop review of destructive
actions. It allows listing pending approval requests and submitting a decision
(approve/reject) for a paused run.
"""

from typing import List, Optional

from fastapi import APIRouter

from oncall_ai.agent_core.schemas.domain import ApprovalRequest
from oncall_ai.core.logging_config import get_logger
from oncall_ai.server.schemas import ApprovalDecisionSubmit, RunStatusRead
from oncall_ai.server.services.deps import AgentServiceDep

logger = get_logger(__name__)
router = APIRouter()

_DECISION_ERRORS = {
    404: {"description": "Run not found"},
    400: {"description": "Run is not paused for approval, or the approval expired"},
}


@router.get(
    "",
    response_model=List[ApprovalRequest],
    summary="List Pending Approvals",
    description="Retrieve pending approval requests, optionally for one workspace.",
    response_description="A list of pending approval requests, oldest first.",
)
async def list_approvals(service: AgentServiceDep, workspace_id: Optional[str] = None):
    """
    List pending approvals.

    Requests whose review window has closed are expired (and their runs failed)
    before the list is built, so reviewers never see actions they can no longer approve.
    """
    expired = await service.expire_stale()
    if expired:
        logger.info(f"Expired {len(expired)} stale approval request(s)")
    return await service.list_pending_approvals(workspace_id)


@router.post(
    "/{run_id}/approve",
    response_model=RunStatusRead,
    summary="Approve Pending Action",
    description="Approve the destructive action a run is paused on. The action runs once and the run resumes.",
    response_description="The run status after resuming.",
    responses=_DECISION_ERRORS,
)
async def approve(run_id: str, service: AgentServiceDep, submission: Optional[ApprovalDecisionSubmit] = None):
    submission = submission or ApprovalDecisionSubmit()
    state = await service.decide(
        run_id, approved=True, reason=submission.reason, decided_by=submission.decided_by
    )
    return RunStatusRead.from_state(run_id, state)


@router.post(
    "/{run_id}/reject",
    response_model=RunStatusRead,
    summary="Reject Pending Action",
    description="Reject the destructive action a run is paused on. The action is never executed.",
    response_description="The run status after the rejection was applied.",
    responses=_DECISION_ERRORS,
)
async def reject(run_id: str, service: AgentServiceDep, submission: Optional[ApprovalDecisionSubmit] = None):
    submission = submission or ApprovalDecisionSubmit()
    state = await service.decide(
        run_id, approved=False, reason=submission.reason, decided_by=submission.decided_by
    )
    return RunStatusRead.from_state(run_id, state)
