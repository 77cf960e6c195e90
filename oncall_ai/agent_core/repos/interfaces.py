from __future__ import annotations

"""Repository interface contracts.

The service layer depends on these Protocols instead of concrete persistence
implementations.

Contract guidelines
-------------------

- All methods are async.
- Implementations must not leak SQLAlchemy sessions/transactions to callers.
- ``save`` overwrites the previous state of a run; callers save around PAUSED
  and terminal transitions only.
"""

from datetime import datetime
from typing import List, Optional, Protocol

from ..schemas.domain import AgentState, ApprovalRequest, ApprovalStatus


class AgentStateRepository(Protocol):
    """Persist the serialized ``AgentState`` of a run."""

    async def save(self, run_id: str, state: AgentState, *, workspace_id: Optional[str] = None) -> None:
        """
        Insert or replace the state of a run.

        Args:
            run_id: The run identifier.
            state: The state to persist.
            workspace_id: Owning workspace, if any.
        """
        ...

    async def load(self, run_id: str) -> Optional[AgentState]:
        """
        Load the last saved state of a run.

        Returns:
            The ``AgentState`` if present, otherwise None.
        """
        ...

    async def workspace_of(self, run_id: str) -> Optional[str]:
        """Return the workspace a run was saved under, if any."""
        ...


class ApprovalRepository(Protocol):
    """Persist approval requests and their decisions."""

    async def create(self, request: ApprovalRequest) -> None:
        """
        Persist a new pending approval request.

        Args:
            request: The request to insert.
        """
        ...

    async def get(self, approval_id: str) -> Optional[ApprovalRequest]:
        """Fetch an approval request by id."""
        ...

    async def get_pending_for_run(self, run_id: str) -> Optional[ApprovalRequest]:
        """Return the newest pending request of a run, if any."""
        ...

    async def resolve(
        self,
        approval_id: str,
        *,
        status: ApprovalStatus,
        decided_by: Optional[str] = None,
        reason: Optional[str] = None,
        decided_at: Optional[datetime] = None,
    ) -> bool:
        """
        Move a pending request to its final status.

        This is a compare-and-set: only a request still pending is updated.

        Args:
            approval_id: The request to resolve.
            status: approved, rejected or expired.
            decided_by: Reviewer identity.
            reason: Optional reviewer note.
            decided_at: Decision time (defaults to now).

        Returns:
            bool: True if this call made the transition. False for unknown ids
            and for requests already resolved.
        """
        ...

    async def list_pending(self, workspace_id: Optional[str] = None, limit: int = 100) -> List[ApprovalRequest]:
        """List pending requests, oldest first, optionally for one workspace."""
        ...
