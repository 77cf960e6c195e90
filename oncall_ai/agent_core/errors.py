"""Error types for the agent core.

Defines a small hierarchy of exceptions raised by the service layer when an
approval decision cannot be applied to a run.
"""

from __future__ import annotations


class OncallAIError(Exception):
    """Base error for all agent core exceptions."""


class RunNotFoundError(OncallAIError):
    """Raised when no persisted state exists for a run."""

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        super().__init__(f"Run not found: '{run_id}'")


class RunNotPausedError(OncallAIError):
    """Raised when an approval decision targets a run that is not awaiting one."""

    def __init__(self, run_id: str, status: str) -> None:
        self.run_id = run_id
        self.status = status
        super().__init__(f"Run '{run_id}' is not paused for approval (status={status})")


class ApprovalExpiredError(OncallAIError):
    """Raised when a decision arrives after the approval window closed."""

    def __init__(self, run_id: str, approval_id: str) -> None:
        self.run_id = run_id
        self.approval_id = approval_id
        super().__init__(f"Approval '{approval_id}' for run '{run_id}' has expired")
