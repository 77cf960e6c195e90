"""
Agent Runs API Endpoints.

This module provides the interface for starting investigation runs and
retrieving their persisted state.
"""

from fastapi import APIRouter

from oncall_ai.agent_core.errors import RunNotFoundError
from oncall_ai.agent_core.schemas.domain import AgentState, ToolContext
from oncall_ai.core.logging_config import get_logger
from oncall_ai.server.schemas import RunCreate, RunStatusRead
from oncall_ai.server.services.deps import AgentServiceDep

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=RunStatusRead,
    status_code=201,
    summary="Start Investigation Run",
    description="Runs the investigator until it answers, fails, or pauses for approval.",
    response_description="The run status when the loop stopped.",
)
async def create_run(run_in: RunCreate, service: AgentServiceDep):
    context = ToolContext(
        workspace_id=run_in.workspace_id,
        investigation_id=run_in.investigation_id,
        user_id=run_in.user_id,
    )
    state = await service.start(run_in.input, context=context)
    return RunStatusRead.from_state(state.run_id or "", state)


@router.get(
    "/{run_id}",
    response_model=AgentState,
    summary="Get Run State",
    description="Retrieve the full persisted state of a run, including its transcript and tool history.",
    responses={404: {"description": "Run not found"}},
)
async def get_run(run_id: str, service: AgentServiceDep):
    state = await service.get_state(run_id)
    if state is None:
        raise RunNotFoundError(run_id)
    return state
