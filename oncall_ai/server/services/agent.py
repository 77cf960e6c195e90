"""
Agent Service Wiring.

Builds the process-wide ``AgentService`` from settings and provides a singleton
accessor for API endpoints.
"""

from typing import Mapping, Optional

from oncall_ai.agent_core.approvals import ApprovalManager
from oncall_ai.agent_core.factory import build_default_registry
from oncall_ai.agent_core.llm.base import LLMProvider
from oncall_ai.agent_core.llm.pydantic_ai_provider import PydanticAIProvider
from oncall_ai.agent_core.repos import InMemoryAgentStateRepository, InMemoryApprovalRepository
from oncall_ai.agent_core.repos.sql import build_sql_repos
from oncall_ai.agent_core.safety.audit import AuditTrail
from oncall_ai.agent_core.safety.rate_limit import RateLimiterRegistry
from oncall_ai.agent_core.service import AgentService, AgentServiceDeps, ApprovalNotifier
from oncall_ai.agent_core.tools.builtin import Backend
from oncall_ai.core.logging_config import get_logger
from oncall_ai.server.core.config import Settings, settings
from oncall_ai.server.core.database import get_session_maker

logger = get_logger(__name__)


def build_agent_service(
    cfg: Settings,
    *,
    llm: Optional[LLMProvider] = None,
    backends: Optional[Mapping[str, Backend]] = None,
    notifier: Optional[ApprovalNotifier] = None,
) -> AgentService:
    """
    Build an ``AgentService`` from application settings.

    Args:
        cfg: Application settings.
        llm: Provider override; defaults to pydantic-ai with ``cfg.llm_model``.
        backends: Tool backends keyed by tool name.
        notifier: Channel used to tell reviewers about new approval requests.
    """
    session_maker = get_session_maker() if cfg.database_url else None
    if session_maker is not None:
        repos = build_sql_repos(session_factory=session_maker)
        states, approvals = repos.states, repos.approvals
    else:
        states, approvals = InMemoryAgentStateRepository(), InMemoryApprovalRepository()

    deps = AgentServiceDeps(
        registry=build_default_registry(backends),
        llm=llm or PydanticAIProvider(cfg.llm_model),
        states=states,
        approvals=approvals,
        rate_limiters=RateLimiterRegistry(cfg.rate_limit_config),
        approval_manager=ApprovalManager(window_seconds=cfg.approval_window_seconds),
        notifier=notifier,
        audit=AuditTrail(),
    )
    logger.info(
        f"Agent service ready (model={cfg.llm_model}, "
        f"storage={'sql' if session_maker is not None else 'memory'})"
    )
    return AgentService(
        deps=deps,
        loop_config=cfg.loop_config,
        continue_after_rejection=cfg.continue_after_rejection,
    )


_agent_service: Optional[AgentService] = None


def get_agent_service() -> AgentService:
    global _agent_service
    if _agent_service is None:
        _agent_service = build_agent_service(settings)
    return _agent_service
