from __future__ import annotations

"""Approval request lifecycle.

An ``ApprovalRequest`` is created when a run pauses on a destructive tool call
and stays ``pending`` until a reviewer decides or the review window closes.
Expiry is enforced here, before the engine is asked to resume.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..schemas.domain import ApprovalRequest, PendingApproval, ToolRiskTier


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo; stored values are UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class ApprovalManager:
    """Create approval requests and evaluate their review window."""

    def __init__(
        self,
        *,
        window_seconds: float = 30 * 60,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._window = timedelta(seconds=window_seconds)
        self._clock = clock

    @property
    def window(self) -> timedelta:
        return self._window

    def now(self) -> datetime:
        return self._clock()

    def create_request(
        self,
        run_id: str,
        pending: PendingApproval,
        *,
        workspace_id: Optional[str] = None,
    ) -> ApprovalRequest:
        requested_at = self._clock()
        return ApprovalRequest(
            run_id=run_id,
            workspace_id=workspace_id,
            tool_call_id=pending.tool_call_id,
            tool_name=pending.tool_name,
            tool_args=dict(pending.tool_args),
            risk_tier=ToolRiskTier.destructive,
            requested_at=requested_at,
            expires_at=requested_at + self._window,
        )

    def is_expired(self, request: ApprovalRequest, now: Optional[datetime] = None) -> bool:
        current = now or self._clock()
        return _aware(request.expires_at) < current

    def time_remaining(self, request: ApprovalRequest, now: Optional[datetime] = None) -> timedelta:
        current = now or self._clock()
        return max(timedelta(0), _aware(request.expires_at) - current)
