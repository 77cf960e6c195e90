"""Safety guardrails: SQL/shell denylists, secret detection, rate limiting, audit."""

from .audit import AuditLogEntry, AuditTrail, sanitize_for_audit
from .config import GuardrailConfig, RateLimitConfig
from .guardrails import (
    SafetyGuardrails,
    check_for_secrets,
    check_shell_safety,
    check_sql_safety,
    sanitize_output,
)
from .models import (
    GuardrailRule,
    RateLimitStatus,
    SafetyCheckResult,
    SafetyViolation,
    Severity,
    ViolationType,
)
from .rate_limit import RateLimiter, RateLimiterRegistry

__all__ = [
    "AuditLogEntry",
    "AuditTrail",
    "GuardrailConfig",
    "GuardrailRule",
    "RateLimitConfig",
    "RateLimitStatus",
    "RateLimiter",
    "RateLimiterRegistry",
    "SafetyCheckResult",
    "SafetyGuardrails",
    "SafetyViolation",
    "Severity",
    "ViolationType",
    "check_for_secrets",
    "check_shell_safety",
    "check_sql_safety",
    "sanitize_for_audit",
    "sanitize_output",
]
