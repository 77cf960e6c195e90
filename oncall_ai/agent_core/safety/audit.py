"""Audit trail observer for agent loop events.

``AuditTrail`` can be passed (directly or through ``AuditTrail.observer``) as
the loop's event observer. Each event becomes an ``AuditLogEntry`` that is
logged on the ``oncall_ai.audit`` logger and kept in a bounded buffer.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

from pydantic import Field

from ..schemas.base import BaseSchema
from ..schemas.domain import AgentEvent
from .guardrails import sanitize_output

audit_logger = logging.getLogger("oncall_ai.audit")

_SENSITIVE_KEY = re.compile(r"password|secret|token|key|credential", re.IGNORECASE)
_MAX_STRING = 500
_REDACTED = "***REDACTED***"


def sanitize_for_audit(data: Any) -> Any:
    """
    Mask secrets and truncate long strings before they reach the audit log.

    String values under sensitive-looking keys are replaced outright. Every
    other string goes through ``sanitize_output`` so secrets embedded in free
    text (queries, commands, tool output) are masked as well.
    """
    if isinstance(data, dict):
        out: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, str) and _SENSITIVE_KEY.search(str(key)):
                out[key] = _REDACTED
            else:
                out[key] = sanitize_for_audit(value)
        return out
    if isinstance(data, (list, tuple)):
        return [sanitize_for_audit(v) for v in data]
    if isinstance(data, str):
        data = sanitize_output(data)
        if len(data) > _MAX_STRING:
            return data[:_MAX_STRING] + "...[truncated]"
    return data


class AuditLogEntry(BaseSchema):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: str
    run_id: Optional[str] = None
    workspace_id: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class AuditTrail:
    """Bounded in-memory audit buffer fed by agent events."""

    def __init__(self, *, max_entries: int = 1000) -> None:
        self._entries: Deque[AuditLogEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def record(self, event: AgentEvent, *, workspace_id: Optional[str] = None) -> AuditLogEntry:
        entry = AuditLogEntry(
            event_type=event.type.value,
            run_id=event.run_id,
            workspace_id=workspace_id,
            data=sanitize_for_audit(dict(event.payload)),
        )
        with self._lock:
            self._entries.append(entry)
        audit_logger.info(json.dumps(entry.model_dump(mode="json"), default=str))
        return entry

    def __call__(self, event: AgentEvent) -> None:
        self.record(event)

    def observer(self, workspace_id: Optional[str]) -> Callable[[AgentEvent], None]:
        """Return an observer that tags entries with ``workspace_id``."""

        def _observe(event: AgentEvent) -> None:
            self.record(event, workspace_id=workspace_id)

        return _observe

    def for_run(self, run_id: str) -> List[AuditLogEntry]:
        with self._lock:
            return [e for e in self._entries if e.run_id == run_id]

    def for_workspace(self, workspace_id: str, limit: int = 100) -> List[AuditLogEntry]:
        with self._lock:
            matching = [e for e in self._entries if e.workspace_id == workspace_id]
        return matching[-limit:]
