from __future__ import annotations

from datetime import datetime, timedelta, timezone

from oncall_ai.agent_core.approvals import ApprovalManager
from oncall_ai.agent_core.schemas import ApprovalStatus, PendingApproval, ToolRiskTier

T0 = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)


def _pending() -> PendingApproval:
    return PendingApproval(tool_call_id="c1", tool_name="run_command", tool_args={"command": "reboot"})


def test_create_request_uses_thirty_minute_window_by_default() -> None:
    manager = ApprovalManager(clock=lambda: T0)

    request = manager.create_request("run-1", _pending(), workspace_id="ws")

    assert request.run_id == "run-1"
    assert request.workspace_id == "ws"
    assert request.tool_name == "run_command"
    assert request.tool_args == {"command": "reboot"}
    assert request.risk_tier == ToolRiskTier.destructive
    assert request.status == ApprovalStatus.pending
    assert request.requested_at == T0
    assert request.expires_at == T0 + timedelta(minutes=30)


def test_expiry_and_time_remaining() -> None:
    manager = ApprovalManager(window_seconds=60, clock=lambda: T0)
    request = manager.create_request("run-1", _pending())

    assert manager.is_expired(request, T0 + timedelta(seconds=59)) is False
    assert manager.is_expired(request, T0 + timedelta(seconds=61)) is True
    assert manager.time_remaining(request, T0 + timedelta(seconds=20)) == timedelta(seconds=40)
    assert manager.time_remaining(request, T0 + timedelta(hours=1)) == timedelta(0)


def test_naive_expiry_is_treated_as_utc() -> None:
    manager = ApprovalManager(window_seconds=60, clock=lambda: T0)
    request = manager.create_request("run-1", _pending())
    naive = request.model_copy(update={"expires_at": request.expires_at.replace(tzinfo=None)})

    assert manager.is_expired(naive, T0 + timedelta(minutes=2)) is True
