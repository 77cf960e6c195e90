"""oncall-ai.

This package contains the execution core of an on-call investigation agent: a
language model drives tool calls (log search, code search, file reads,
pull-request creation) under safety guardrails and human approval.

High-level architecture
-----------------------

- ``oncall_ai.agent_core``:

  - Safety guardrails (SQL/shell denylists, secret detection and masking,
    rate limiting, audit trail).
  - A tool registry with risk tiers.
  - A LangGraph-based agent loop with pause/resume around destructive tools.
  - Approval requests and repository interfaces with SQL implementations.

- ``oncall_ai.server``:

  - FastAPI endpoints for listing and deciding pending approvals.

Typical workflow
----------------

Most integrations should use ``oncall_ai.agent_core.service.AgentService``:

1. Start a run with an alert or user request.
2. The loop investigates until it completes, fails, or pauses for approval.
3. A reviewer approves or rejects; the service resumes the persisted run.
"""
