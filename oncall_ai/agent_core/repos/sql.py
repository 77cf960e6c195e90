from __future__ import annotations

"""SQLAlchemy async repository implementations.

This module provides a SQL-backed implementation of the repository interfaces
defined in ``oncall_ai.agent_core.repos.interfaces``.

Usage
-----

- Create an async engine with ``create_engine``.
- Create tables with ``create_all`` (tests/dev; production uses migrations).
- Create a session factory with ``create_sessionmaker``.
- Build repository instances with ``build_sql_repos``.

Transaction model
-----------------

Each repository method opens an ``AsyncSession``, performs its operation, and
commits, so a saved state or approval is durable when the method returns.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..schemas.domain import AgentState, ApprovalRequest, ApprovalStatus, ToolRiskTier
from .interfaces import AgentStateRepository, ApprovalRepository
from .models import AgentStateRow, ApprovalRow, Base


def create_engine(db_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Postgres URLs are normalized to the asyncpg driver; for example
    ``postgresql://`` becomes ``postgresql+asyncpg://``. Other URLs (such as
    ``sqlite+aiosqlite://``) are used as given.
    """
    url = re.sub(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://", "postgresql+asyncpg://", db_url, count=1)
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an ``async_sessionmaker`` with safe defaults for this project."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables for the current ORM metadata."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite returns naive datetimes; everything is stored as UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _approval_from_row(row: ApprovalRow) -> ApprovalRequest:
    return ApprovalRequest(
        id=row.id,
        run_id=row.run_id,
        workspace_id=row.workspace_id,
        tool_call_id=row.tool_call_id,
        tool_name=row.tool_name,
        tool_args=dict(row.tool_args or {}),
        risk_tier=ToolRiskTier(row.risk_tier),
        status=ApprovalStatus(row.status),
        requested_at=_aware(row.requested_at),
        expires_at=_aware(row.expires_at),
        decided_at=_aware(row.decided_at),
        decided_by=row.decided_by,
        reason=row.reason,
    )


@dataclass(frozen=True)
class SqlAgentStateRepository(AgentStateRepository):
    """SQL implementation of ``AgentStateRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def save(self, run_id: str, state: AgentState, *, workspace_id: Optional[str] = None) -> None:
        """
        Insert or replace the state of a run.

        Args:
            run_id: The run identifier.
            state: The state to persist (stored as its JSON-mode dump).
            workspace_id: Owning workspace; kept from the first save when omitted.
        """
        payload = state.model_dump(mode="json")
        async with self.session_factory() as s:
            row = await s.get(AgentStateRow, run_id)
            if row is None:
                s.add(
                    AgentStateRow(
                        run_id=run_id,
                        workspace_id=workspace_id,
                        status=state.status.value,
                        state=payload,
                        updated_at=_utc_now(),
                    )
                )
            else:
                row.status = state.status.value
                row.state = payload
                row.updated_at = _utc_now()
                if workspace_id is not None:
                    row.workspace_id = workspace_id
            await s.commit()

    async def load(self, run_id: str) -> Optional[AgentState]:
        async with self.session_factory() as s:
            row = await s.get(AgentStateRow, run_id)
            if row is None:
                return None
            return AgentState.model_validate(row.state)

    async def workspace_of(self, run_id: str) -> Optional[str]:
        async with self.session_factory() as s:
            row = await s.get(AgentStateRow, run_id)
            return row.workspace_id if row is not None else None


@dataclass(frozen=True)
class SqlApprovalRepository(ApprovalRepository):
    """SQL implementation of ``ApprovalRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def create(self, request: ApprovalRequest) -> None:
        async with self.session_factory() as s:
            s.add(
                ApprovalRow(
                    id=request.id,
                    run_id=request.run_id,
                    workspace_id=request.workspace_id,
                    tool_call_id=request.tool_call_id,
                    tool_name=request.tool_name,
                    tool_args=request.model_dump(mode="json")["tool_args"],
                    risk_tier=request.risk_tier.value,
                    status=request.status.value,
                    requested_at=request.requested_at,
                    expires_at=request.expires_at,
                    decided_at=request.decided_at,
                    decided_by=request.decided_by,
                    reason=request.reason,
                )
            )
            await s.commit()

    async def get(self, approval_id: str) -> Optional[ApprovalRequest]:
        async with self.session_factory() as s:
            row = await s.get(ApprovalRow, approval_id)
            return _approval_from_row(row) if row is not None else None

    async def get_pending_for_run(self, run_id: str) -> Optional[ApprovalRequest]:
        async with self.session_factory() as s:
            stmt = (
                select(ApprovalRow)
                .where(ApprovalRow.run_id == run_id, ApprovalRow.status == ApprovalStatus.pending.value)
                .order_by(ApprovalRow.requested_at.desc())
                .limit(1)
            )
            row = (await s.execute(stmt)).scalars().first()
            return _approval_from_row(row) if row is not None else None

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

        The update only matches rows still pending, so of two concurrent
        callers exactly one sees ``True``.

        Args:
            approval_id: The request to resolve.
            status: approved, rejected or expired.
            decided_by: Reviewer identity.
            reason: Optional reviewer note.
            decided_at: Decision time (defaults to now).

        Returns:
            bool: True if this call made the transition from pending.
        """
        stmt = (
            update(ApprovalRow)
            .where(ApprovalRow.id == approval_id, ApprovalRow.status == ApprovalStatus.pending.value)
            .values(
                status=status.value,
                decided_by=decided_by,
                reason=reason,
                decided_at=decided_at or _utc_now(),
            )
        )
        async with self.session_factory() as s:
            result = await s.execute(stmt)
            await s.commit()
            return result.rowcount == 1

    async def list_pending(self, workspace_id: Optional[str] = None, limit: int = 100) -> List[ApprovalRequest]:
        async with self.session_factory() as s:
            stmt = select(ApprovalRow).where(ApprovalRow.status == ApprovalStatus.pending.value)
            if workspace_id:
                stmt = stmt.where(ApprovalRow.workspace_id == workspace_id)
            stmt = stmt.order_by(ApprovalRow.requested_at.asc()).limit(limit)
            rows = (await s.execute(stmt)).scalars().all()
            return [_approval_from_row(r) for r in rows]


@dataclass(frozen=True)
class SqlRepoBundle:
    """Convenience bundle of the SQL repositories for dependency injection."""

    states: SqlAgentStateRepository
    approvals: SqlApprovalRepository


def build_sql_repos(*, session_factory: async_sessionmaker[AsyncSession]) -> SqlRepoBundle:
    """Build a ``SqlRepoBundle`` from a session factory."""
    return SqlRepoBundle(
        states=SqlAgentStateRepository(session_factory=session_factory),
        approvals=SqlApprovalRepository(session_factory=session_factory),
    )
