from __future__ import annotations

"""SQLAlchemy ORM models for agent persistence.

These ORM models define the SQL schema used by the SQL repository
implementation in ``oncall_ai.agent_core.repos.sql``.

- Agent states store the full serialized ``AgentState`` of a run, so a paused
  run can be resumed by any process.
- Approvals store one row per destructive tool call awaiting a decision.

JSON columns use JSONB on PostgreSQL and plain JSON elsewhere. Table names are
prefixed with ``oc_`` to avoid collisions in shared databases.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class AgentStateRow(Base):
    """Row model for ``oc_agent_states``.

    ``status`` duplicates ``state["status"]`` so paused runs can be queried
    without decoding the state blob.
    """

    __tablename__ = "oc_agent_states"

    run_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    workspace_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)

    status: Mapped[str] = mapped_column(String(32))
    state: Mapped[Dict[str, Any]] = mapped_column(JSONType)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class ApprovalRow(Base):
    """Row model for ``oc_approvals``."""

    __tablename__ = "oc_approvals"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    run_id: Mapped[str] = mapped_column(String(64), index=True)
    workspace_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)

    tool_call_id: Mapped[str] = mapped_column(String(128))
    tool_name: Mapped[str] = mapped_column(String(128))
    tool_args: Mapped[Dict[str, Any]] = mapped_column(JSONType)
    risk_tier: Mapped[str] = mapped_column(String(32))

    status: Mapped[str] = mapped_column(String(32), index=True)
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    decided_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    decided_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
