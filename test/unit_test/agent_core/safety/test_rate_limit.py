from __future__ import annotations

from typing import List

import pytest

from oncall_ai.agent_core.safety import RateLimitConfig, RateLimiter, RateLimiterRegistry, ViolationType


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> _Clock:
    return _Clock()


def test_requests_over_the_ceiling_are_denied(clock: _Clock) -> None:
    limiter = RateLimiter(RateLimitConfig(max_requests=3), clock=clock)

    results = [limiter.check() for _ in range(4)]

    assert [r.allowed for r in results] == [True, True, True, False]
    denied = results[-1].violations
    assert [v.rule for v in denied] == ["max_requests"]
    assert denied[0].type == ViolationType.rate_limit


def test_cost_ceiling_is_checked_before_charging(clock: _Clock) -> None:
    limiter = RateLimiter(RateLimitConfig(max_cost=1.0), clock=clock)

    assert limiter.check(0.6).allowed is True
    denied = limiter.check(0.6)

    assert denied.allowed is False
    assert [v.rule for v in denied.violations] == ["max_cost"]
    assert limiter.status().cost_estimate == pytest.approx(0.6)


def test_denied_calls_do_not_advance_counters(clock: _Clock) -> None:
    limiter = RateLimiter(RateLimitConfig(max_requests=1), clock=clock)
    limiter.check()

    for _ in range(5):
        limiter.check()

    assert limiter.status().request_count == 1


def test_both_ceilings_can_be_reported_together(clock: _Clock) -> None:
    limiter = RateLimiter(RateLimitConfig(max_requests=1, max_cost=0.5), clock=clock)
    limiter.check(0.4)

    denied = limiter.check(0.4)

    assert {v.rule for v in denied.violations} == {"max_requests", "max_cost"}


def test_window_resets_after_it_elapses(clock: _Clock) -> None:
    limiter = RateLimiter(RateLimitConfig(window_seconds=60, max_requests=1), clock=clock)
    assert limiter.check().allowed is True
    assert limiter.check().allowed is False

    clock.now += 61

    assert limiter.check().allowed is True
    status = limiter.status()
    assert status.request_count == 1
    assert status.window_remaining_seconds == pytest.approx(60.0)


def test_status_reports_remaining_window(clock: _Clock) -> None:
    limiter = RateLimiter(RateLimitConfig(window_seconds=3600), clock=clock)
    clock.now += 600

    assert limiter.status().window_remaining_seconds == pytest.approx(3000.0)


def test_registry_hands_out_one_limiter_per_scope(clock: _Clock) -> None:
    registry = RateLimiterRegistry(RateLimitConfig(max_requests=1), clock=clock)

    a = registry.for_scope("ws-a")
    b = registry.for_scope("ws-b")

    assert registry.for_scope("ws-a") is a
    assert a is not b
    assert registry.for_scope(None) is registry.for_scope("default")

    assert a.check().allowed is True
    assert a.check().allowed is False
    assert b.check().allowed is True


def test_independent_limiters_do_not_share_state(clock: _Clock) -> None:
    limiters: List[RateLimiter] = [RateLimiter(RateLimitConfig(max_requests=1), clock=clock) for _ in range(2)]

    limiters[0].check()

    assert limiters[1].check().allowed is True
