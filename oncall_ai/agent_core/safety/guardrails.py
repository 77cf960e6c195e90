from __future__ import annotations

"""Pattern-based safety guardrails for tool calls.

``SafetyGuardrails`` is the runtime authority the agent loop consults before
executing any tool. It composes:

- a first-match SQL denylist,
- an all-match shell denylist,
- all-match secret detectors (warnings only, never blocking),
- a broad log-query heuristic,
- an optional ``RateLimiter``.

These are heuristics over text, not parsers. The module-level functions are
bound to the default rule tables for callers that do not need custom config.
"""

import logging
import re
from typing import Any, Iterator, List, Mapping, Optional, Sequence

from .config import GuardrailConfig
from .models import GuardrailRule, SafetyCheckResult, SafetyViolation, Severity, ViolationType
from .rate_limit import RateLimiter

logger = logging.getLogger(__name__)

_BROAD_FIELDS = re.compile(r"\bfields\s+\*", re.IGNORECASE)
_LIMIT_CLAUSE = re.compile(r"\blimit\b", re.IGNORECASE)


def _first_match(rules: Sequence[GuardrailRule], text: str) -> List[SafetyViolation]:
    for rule in rules:
        if rule.regex.search(text):
            return [rule.to_violation()]
    return []


def _all_matches(rules: Sequence[GuardrailRule], text: str) -> List[SafetyViolation]:
    return [rule.to_violation() for rule in rules if rule.regex.search(text)]


def _iter_strings(value: Any) -> Iterator[str]:
    """Yield every string nested in ``value``; other scalars are ignored."""
    if isinstance(value, str):
        yield value
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _iter_strings(item)
    elif isinstance(value, (list, tuple, set)):
        for item in value:
            yield from _iter_strings(item)


class SafetyGuardrails:
    """Evaluate SQL, shell, secret and rate-limit checks for the agent loop.

    ``SafetyGuardrails`` is configured by ``GuardrailConfig``; the rate limiter
    is injected so independent runs or workspaces can hold separate windows.
    """

    def __init__(
        self,
        config: Optional[GuardrailConfig] = None,
        *,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self._cfg = config or GuardrailConfig()
        self._rate_limiter = rate_limiter

    @property
    def config(self) -> GuardrailConfig:
        """Return the underlying configuration object."""
        return self._cfg

    @property
    def rate_limiter(self) -> Optional[RateLimiter]:
        return self._rate_limiter

    def check_sql_safety(self, statement: str) -> SafetyCheckResult:
        """Stop at the first destructive SQL rule that matches."""
        return SafetyCheckResult.from_violations(_first_match(self._cfg.sql_rules, statement or ""))

    def check_shell_safety(self, command: str) -> SafetyCheckResult:
        """Report every dangerous shell rule that matches."""
        return SafetyCheckResult.from_violations(_all_matches(self._cfg.shell_rules, command or ""))

    def check_for_secrets(self, text: str) -> SafetyCheckResult:
        """
        Report every secret detector that matches.

        Secret findings are warnings: the result is always ``allowed``.
        """
        violations = _all_matches(self._cfg.secret_rules, text or "")
        return SafetyCheckResult(allowed=True, violations=violations)

    def sanitize_output(self, text: str) -> str:
        """
        Replace every secret-shaped span with its mask.

        Rules are applied in table order and the table is reapplied until the
        text stops changing, so a key chained in front of an already masked
        value (``pwd=secret=...``) is masked too. Text without any match is
        returned unchanged.
        """
        if not text:
            return text
        sanitized = text
        for _ in range(len(text) + 1):
            previous = sanitized
            for rule in self._cfg.secret_rules:
                if rule.mask is None:
                    continue
                sanitized = rule.regex.sub(rule.mask, sanitized)
            if sanitized == previous:
                break
        return sanitized

    def check_log_query(self, query: str) -> List[SafetyViolation]:
        if _BROAD_FIELDS.search(query) and not _LIMIT_CLAUSE.search(query):
            return [
                SafetyViolation(
                    type=ViolationType.custom,
                    severity=Severity.warning,
                    description="Overly broad log query: 'fields *' without a limit clause",
                    rule="broad_log_query",
                )
            ]
        return []

    def check_tool_safety(
        self,
        tool_name: str,
        args: Mapping[str, Any],
        *,
        cost_estimate: Optional[float] = None,
    ) -> SafetyCheckResult:
        """
        Aggregate every applicable check for one tool invocation.

        Args:
            tool_name: Registered tool name; selects the tool-specific checks.
            args: Raw tool arguments. Non-string and nested values are walked
                without raising.
            cost_estimate: Cost charged against the rate limiter. Defaults to
                ``GuardrailConfig.default_cost_estimate``.

        Returns:
            SafetyCheckResult whose ``allowed`` is false iff any violation is blocked.
        """
        args = args or {}
        violations: List[SafetyViolation] = []

        if self._cfg.scan_args_for_secrets:
            for text in _iter_strings(args):
                violations.extend(self.check_for_secrets(text).violations)

        sql_arg = self._cfg.sql_tools.get(tool_name)
        if sql_arg is not None and isinstance(args.get(sql_arg), str):
            violations.extend(self.check_sql_safety(args[sql_arg]).violations)

        shell_arg = self._cfg.shell_tools.get(tool_name)
        if shell_arg is not None and isinstance(args.get(shell_arg), str):
            violations.extend(self.check_shell_safety(args[shell_arg]).violations)

        query_arg = self._cfg.log_query_tools.get(tool_name)
        if query_arg is not None and isinstance(args.get(query_arg), str):
            violations.extend(self.check_log_query(args[query_arg]))

        if self._rate_limiter is not None:
            cost = self._cfg.default_cost_estimate if cost_estimate is None else cost_estimate
            violations.extend(self._rate_limiter.check(cost).violations)

        result = SafetyCheckResult.from_violations(violations)
        if not result.allowed:
            logger.info(f"Tool call '{tool_name}' blocked by guardrails: {result.block_reason()}")
        elif result.violations:
            logger.debug(f"Tool call '{tool_name}' raised {len(result.violations)} guardrail warning(s)")
        return result


_default = SafetyGuardrails()


def check_sql_safety(statement: str) -> SafetyCheckResult:
    return _default.check_sql_safety(statement)


def check_shell_safety(command: str) -> SafetyCheckResult:
    return _default.check_shell_safety(command)


def check_for_secrets(text: str) -> SafetyCheckResult:
    return _default.check_for_secrets(text)


def sanitize_output(text: str) -> str:
    return _default.sanitize_output(text)
