from __future__ import annotations

"""Windowed request/cost rate limiter.

A ``RateLimiter`` is an explicit object rather than module state; the service
layer keeps one per workspace through ``RateLimiterRegistry``.
"""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from .config import RateLimitConfig
from .models import RateLimitStatus, SafetyCheckResult, SafetyViolation, Severity, ViolationType

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Track request count and accumulated cost since the start of the window.

    The window resets once ``window_seconds`` have elapsed since it started.
    Counters only advance for allowed calls.
    """

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cfg = config or RateLimitConfig()
        self._clock = clock
        self._lock = threading.Lock()
        self._request_count = 0
        self._cost = 0.0
        self._window_start = clock()

    @property
    def config(self) -> RateLimitConfig:
        return self._cfg

    def _roll_window(self, now: float) -> None:
        if now - self._window_start > self._cfg.window_seconds:
            self._request_count = 0
            self._cost = 0.0
            self._window_start = now

    def check(self, cost_estimate: float = 0.01) -> SafetyCheckResult:
        """
        Admit or deny one call with the given cost estimate.

        Returns:
            SafetyCheckResult with a blocking ``rate_limit`` violation per
            exhausted ceiling.
        """
        with self._lock:
            self._roll_window(self._clock())
            violations: List[SafetyViolation] = []

            if self._request_count >= self._cfg.max_requests:
                violations.append(
                    SafetyViolation(
                        type=ViolationType.rate_limit,
                        severity=Severity.blocked,
                        description=(
                            f"Rate limit exceeded: {self._request_count} requests in the current window "
                            f"(max {self._cfg.max_requests})"
                        ),
                        rule="max_requests",
                    )
                )
            if self._cost + cost_estimate > self._cfg.max_cost:
                violations.append(
                    SafetyViolation(
                        type=ViolationType.rate_limit,
                        severity=Severity.blocked,
                        description=(
                            f"Cost limit exceeded: estimated ${self._cost:.2f} + ${cost_estimate:.2f} "
                            f"(max ${self._cfg.max_cost:.2f})"
                        ),
                        rule="max_cost",
                    )
                )

            if violations:
                logger.warning(f"Rate limit denied call: {[v.rule for v in violations]}")
            else:
                self._request_count += 1
                self._cost += cost_estimate
            return SafetyCheckResult.from_violations(violations)

    def status(self) -> RateLimitStatus:
        with self._lock:
            now = self._clock()
            self._roll_window(now)
            remaining = max(0.0, self._cfg.window_seconds - (now - self._window_start))
            return RateLimitStatus(
                request_count=self._request_count,
                cost_estimate=self._cost,
                window_remaining_seconds=remaining,
            )


class RateLimiterRegistry:
    """Hand out one ``RateLimiter`` per scope key (typically a workspace id)."""

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cfg = config or RateLimitConfig()
        self._clock = clock
        self._lock = threading.Lock()
        self._limiters: Dict[str, RateLimiter] = {}

    def for_scope(self, key: Optional[str]) -> RateLimiter:
        scope = key or "default"
        with self._lock:
            limiter = self._limiters.get(scope)
            if limiter is None:
                limiter = RateLimiter(self._cfg, clock=self._clock)
                self._limiters[scope] = limiter
            return limiter
