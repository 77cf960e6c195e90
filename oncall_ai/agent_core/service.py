from __future__ import annotations

"""High-level orchestration service for agent runs.

``AgentService`` owns the approval/resume protocol around ``AgentEngine``:

- ``start`` runs the loop, persists the resulting state and, when the run
  paused on a destructive tool, stores an ``ApprovalRequest`` and notifies a
  reviewer.
- ``decide`` loads a paused run, applies the reviewer's decision and persists
  the outcome. Expired requests fail the run without resuming it.
- ``expire_stale`` sweeps pending requests whose review window closed.

Each workspace gets its own rate limiter so one noisy workspace cannot
exhaust the budget of another.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol
from uuid import uuid4

from .approvals.manager import ApprovalManager
from .errors import ApprovalExpiredError, RunNotFoundError, RunNotPausedError
from .llm.base import LLMProvider
from .repos.interfaces import AgentStateRepository, ApprovalRepository
from .runtime.engine import AgentEngine
from .runtime.models import LoopConfig
from .safety.audit import AuditTrail
from .safety.config import GuardrailConfig
from .safety.rate_limit import RateLimiterRegistry
from .schemas.domain import (
    AgentEvent,
    AgentState,
    AgentStatus,
    ApprovalRequest,
    ApprovalStatus,
    ToolContext,
)
from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ApprovalNotifier(Protocol):
    """Out-of-band channel that tells a reviewer a decision is needed."""

    async def notify(self, request: ApprovalRequest) -> None: ...


@dataclass(frozen=True)
class AgentServiceDeps:
    """Dependency bundle for ``AgentService``."""

    registry: ToolRegistry
    llm: LLMProvider
    states: AgentStateRepository
    approvals: ApprovalRepository

    guardrail_config: GuardrailConfig = field(default_factory=GuardrailConfig)
    rate_limiters: RateLimiterRegistry = field(default_factory=RateLimiterRegistry)
    approval_manager: ApprovalManager = field(default_factory=ApprovalManager)
    notifier: Optional[ApprovalNotifier] = None
    audit: Optional[AuditTrail] = None
    observer: Optional[Callable[[AgentEvent], None]] = None


class AgentService:
    """Start runs and apply approval decisions to paused runs."""

    def __init__(
        self,
        *,
        deps: AgentServiceDeps,
        loop_config: Optional[LoopConfig] = None,
        continue_after_rejection: bool = False,
    ) -> None:
        """
        Args:
            deps: Registry, provider, repositories and safety collaborators.
            loop_config: Loop limits shared by every run.
            continue_after_rejection: Deliver a rejection to the model and keep
                the run going instead of failing it.
        """
        self._deps = deps
        self._loop_config = loop_config or LoopConfig()
        self._continue_after_rejection = continue_after_rejection

    def _engine_for(self, workspace_id: Optional[str]) -> AgentEngine:
        from .factory import build_engine

        return build_engine(
            registry=self._deps.registry,
            llm=self._deps.llm,
            guardrail_config=self._deps.guardrail_config,
            rate_limiter=self._deps.rate_limiters.for_scope(workspace_id),
            loop_config=self._loop_config,
        )

    def _observer_for(self, workspace_id: Optional[str]) -> Optional[Callable[[AgentEvent], None]]:
        observers: List[Callable[[AgentEvent], None]] = []
        if self._deps.audit is not None:
            observers.append(self._deps.audit.observer(workspace_id))
        if self._deps.observer is not None:
            observers.append(self._deps.observer)
        if not observers:
            return None

        def _fan_out(event: AgentEvent) -> None:
            for observer in observers:
                try:
                    observer(event)
                except Exception as e:
                    logger.warning(f"Observer raised on {event.type.value} event: {e}")

        return _fan_out

    async def start(
        self,
        user_input: str,
        *,
        run_id: Optional[str] = None,
        context: Optional[ToolContext] = None,
    ) -> AgentState:
        """Run a new investigation until it completes, fails or pauses.

        Returns
        -------
        AgentState
            The persisted state of the run.
        """
        run_id = run_id or str(uuid4())
        ctx = (context or ToolContext()).model_copy(update={"run_id": run_id})
        workspace_id = ctx.workspace_id
        logger.info(f"Starting run {run_id} (workspace={workspace_id})")

        engine = self._engine_for(workspace_id)
        state = await engine.run(user_input, run_id=run_id, context=ctx, observer=self._observer_for(workspace_id))
        await self._persist(run_id, state, workspace_id)
        return state

    async def decide(
        self,
        run_id: str,
        *,
        approved: bool,
        reason: Optional[str] = None,
        decided_by: Optional[str] = None,
    ) -> AgentState:
        """
        Apply a reviewer decision to a paused run.

        Raises:
            RunNotFoundError: No state is stored for ``run_id``.
            RunNotPausedError: The run is not waiting for approval, or another
                decision for the same request got there first.
            ApprovalExpiredError: The review window closed; the run has been
                failed and persisted before this is raised.
        """
        state = await self._deps.states.load(run_id)
        if state is None:
            raise RunNotFoundError(run_id)
        if state.status != AgentStatus.paused:
            raise RunNotPausedError(run_id, state.status.value)

        workspace_id = await self._deps.states.workspace_of(run_id)
        engine = self._engine_for(workspace_id)
        observer = self._observer_for(workspace_id)
        manager = self._deps.approval_manager

        request = await self._deps.approvals.get_pending_for_run(run_id)
        if request is None:
            raise RunNotPausedError(run_id, "no pending approval")
        if manager.is_expired(request):
            if not await self._expire(request, state, engine, workspace_id):
                raise RunNotPausedError(run_id, "already decided")
            raise ApprovalExpiredError(run_id, request.id)

        # Concurrent decisions race on the pending request; only the winner resumes.
        won = await self._deps.approvals.resolve(
            request.id,
            status=ApprovalStatus.approved if approved else ApprovalStatus.rejected,
            decided_by=decided_by,
            reason=reason,
            decided_at=manager.now(),
        )
        if not won:
            raise RunNotPausedError(run_id, "already decided")
        logger.info(f"Run {run_id}: approval {'granted' if approved else 'denied'} by {decided_by or 'unknown'}")

        ctx = ToolContext(workspace_id=workspace_id, run_id=run_id, user_id=decided_by)
        if approved or self._continue_after_rejection:
            state = await engine.resume_after_approval(
                state, approved, reason=reason, context=ctx, observer=observer
            )
        else:
            state = engine.close_out_rejected(state, reason=reason, observer=observer)

        await self._persist(run_id, state, workspace_id)
        return state

    async def expire_stale(self) -> List[str]:
        """Fail every run whose pending approval has expired.

        Returns
        -------
        list[str]
            Ids of the runs that were failed.
        """
        expired: List[str] = []
        for request in await self._deps.approvals.list_pending(limit=1000):
            if not self._deps.approval_manager.is_expired(request):
                continue
            state = await self._deps.states.load(request.run_id)
            workspace_id = request.workspace_id
            if state is None or state.status != AgentStatus.paused:
                await self._deps.approvals.resolve(request.id, status=ApprovalStatus.expired)
                continue
            if await self._expire(request, state, self._engine_for(workspace_id), workspace_id):
                expired.append(request.run_id)
        return expired

    async def get_state(self, run_id: str) -> Optional[AgentState]:
        return await self._deps.states.load(run_id)

    async def list_pending_approvals(self, workspace_id: Optional[str] = None) -> List[ApprovalRequest]:
        return await self._deps.approvals.list_pending(workspace_id=workspace_id)

    async def _expire(
        self,
        request: ApprovalRequest,
        state: AgentState,
        engine: AgentEngine,
        workspace_id: Optional[str],
    ) -> bool:
        won = await self._deps.approvals.resolve(
            request.id,
            status=ApprovalStatus.expired,
            reason="expired",
            decided_at=self._deps.approval_manager.now(),
        )
        if not won:
            return False
        logger.info(f"Run {request.run_id}: approval {request.id} expired")
        engine.fail_expired(state, observer=self._observer_for(workspace_id))
        await self._deps.states.save(request.run_id, state, workspace_id=workspace_id)
        return True

    async def _persist(self, run_id: str, state: AgentState, workspace_id: Optional[str]) -> None:
        await self._deps.states.save(run_id, state, workspace_id=workspace_id)
        if state.status != AgentStatus.paused or state.pending_approval is None:
            return

        request = self._deps.approval_manager.create_request(
            run_id, state.pending_approval, workspace_id=workspace_id
        )
        await self._deps.approvals.create(request)
        if self._deps.notifier is None:
            return
        try:
            await self._deps.notifier.notify(request)
        except Exception as e:
            # The request is stored; reviewers can still find it through the API.
            logger.error(f"Run {run_id}: approval notification failed: {e}", exc_info=True)
