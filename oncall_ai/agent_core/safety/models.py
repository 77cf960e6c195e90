from __future__ import annotations

"""Data records produced and consumed by the guardrail library."""

import re
from enum import Enum
from functools import lru_cache
from typing import List, Optional, Pattern

from pydantic import ConfigDict, Field

from ..schemas.base import BaseSchema


class ViolationType(str, Enum):
    sql = "sql"
    shell = "shell"
    secret = "secret"
    rate_limit = "rate_limit"
    custom = "custom"


class Severity(str, Enum):
    blocked = "blocked"
    warning = "warning"


@lru_cache(maxsize=256)
def _compile(pattern: str, flags: int) -> Pattern[str]:
    return re.compile(pattern, flags)


class GuardrailRule(BaseSchema):
    """
    One denylist or detector entry.

    Rules are plain data so deployments can extend or replace the tables in
    ``GuardrailConfig``. ``mask`` is an ``re.sub`` replacement template used by
    secret rules when sanitizing output.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    pattern: str
    violation_type: ViolationType
    severity: Severity
    description: str
    ignore_case: bool = False
    dotall: bool = False
    mask: Optional[str] = None

    @property
    def regex(self) -> Pattern[str]:
        flags = 0
        if self.ignore_case:
            flags |= re.IGNORECASE
        if self.dotall:
            flags |= re.DOTALL
        return _compile(self.pattern, flags)

    def to_violation(self) -> "SafetyViolation":
        return SafetyViolation(
            type=self.violation_type,
            severity=self.severity,
            description=self.description,
            rule=self.name,
        )


class SafetyViolation(BaseSchema):
    type: ViolationType
    severity: Severity
    description: str
    rule: Optional[str] = None


class SafetyCheckResult(BaseSchema):
    """Verdict for a single check. ``allowed`` is false iff a violation is blocked."""

    allowed: bool = True
    violations: List[SafetyViolation] = Field(default_factory=list)

    @classmethod
    def from_violations(cls, violations: List[SafetyViolation]) -> "SafetyCheckResult":
        return cls(
            allowed=not any(v.severity == Severity.blocked for v in violations),
            violations=list(violations),
        )

    @property
    def blocked_violations(self) -> List[SafetyViolation]:
        return [v for v in self.violations if v.severity == Severity.blocked]

    def block_reason(self) -> str:
        return "; ".join(v.description for v in self.blocked_violations)


class RateLimitStatus(BaseSchema):
    request_count: int
    cost_estimate: float
    window_remaining_seconds: float
