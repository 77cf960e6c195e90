"""In-memory repository implementations.

Used for local runs and tests. State is stored as JSON-mode dumps so a loaded
``AgentState`` never aliases the object that was saved.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..schemas.domain import AgentState, ApprovalRequest, ApprovalStatus


class InMemoryAgentStateRepository:
    def __init__(self) -> None:
        self._states: Dict[str, Dict[str, Any]] = {}
        self._workspaces: Dict[str, Optional[str]] = {}

    async def save(self, run_id: str, state: AgentState, *, workspace_id: Optional[str] = None) -> None:
        self._states[run_id] = state.model_dump(mode="json")
        if workspace_id is not None or run_id not in self._workspaces:
            self._workspaces[run_id] = workspace_id

    async def load(self, run_id: str) -> Optional[AgentState]:
        data = self._states.get(run_id)
        return AgentState.model_validate(data) if data is not None else None

    async def workspace_of(self, run_id: str) -> Optional[str]:
        return self._workspaces.get(run_id)


class InMemoryApprovalRepository:
    def __init__(self) -> None:
        self._requests: Dict[str, ApprovalRequest] = {}

    async def create(self, request: ApprovalRequest) -> None:
        self._requests[request.id] = request

    async def get(self, approval_id: str) -> Optional[ApprovalRequest]:
        return self._requests.get(approval_id)

    async def get_pending_for_run(self, run_id: str) -> Optional[ApprovalRequest]:
        pending = [r for r in self._requests.values() if r.run_id == run_id and r.status == ApprovalStatus.pending]
        return max(pending, key=lambda r: r.requested_at) if pending else None

    async def resolve(
        self,
        approval_id: str,
        *,
        status: ApprovalStatus,
        decided_by: Optional[str] = None,
        reason: Optional[str] = None,
        decided_at: Optional[datetime] = None,
    ) -> bool:
        current = self._requests.get(approval_id)
        if current is None or current.status != ApprovalStatus.pending:
            return False
        self._requests[approval_id] = current.model_copy(
            update={
                "status": status,
                "decided_by": decided_by,
                "reason": reason,
                "decided_at": decided_at or datetime.now(timezone.utc),
            }
        )
        return True

    async def list_pending(self, workspace_id: Optional[str] = None, limit: int = 100) -> List[ApprovalRequest]:
        pending = [
            r
            for r in self._requests.values()
            if r.status == ApprovalStatus.pending and (workspace_id is None or r.workspace_id == workspace_id)
        ]
        pending.sort(key=lambda r: r.requested_at)
        return pending[:limit]
