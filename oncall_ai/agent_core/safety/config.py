from __future__ import annotations

"""Configuration objects for guardrails and rate limiting."""

from typing import Dict, List

from pydantic import Field

from ..schemas.base import BaseSchema
from .models import GuardrailRule
from .rules import DEFAULT_SECRET_RULES, DEFAULT_SHELL_RULES, DEFAULT_SQL_RULES


class RateLimitConfig(BaseSchema):
    """
    Ceilings for one rate-limit window.

    Once either ceiling is reached, further calls are denied until the window
    rolls over.
    """

    window_seconds: float = Field(default=3600.0, gt=0.0)
    max_requests: int = Field(default=100, ge=1)
    max_cost: float = Field(default=50.0, gt=0.0)


class GuardrailConfig(BaseSchema):
    """
    Aggregate configuration used to build ``SafetyGuardrails``.

    ``sql_tools``, ``shell_tools`` and ``log_query_tools`` map a tool name to the
    argument holding the statement, command or query to inspect.
    """

    sql_rules: List[GuardrailRule] = Field(default_factory=lambda: list(DEFAULT_SQL_RULES))
    shell_rules: List[GuardrailRule] = Field(default_factory=lambda: list(DEFAULT_SHELL_RULES))
    secret_rules: List[GuardrailRule] = Field(default_factory=lambda: list(DEFAULT_SECRET_RULES))

    sql_tools: Dict[str, str] = Field(default_factory=lambda: {"database_query": "query"})
    shell_tools: Dict[str, str] = Field(default_factory=lambda: {"run_command": "command"})
    log_query_tools: Dict[str, str] = Field(default_factory=lambda: {"cloudwatch_query_logs": "query"})

    scan_args_for_secrets: bool = True
    default_cost_estimate: float = Field(default=0.01, ge=0.0)
