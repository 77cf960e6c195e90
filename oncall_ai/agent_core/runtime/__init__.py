"""LangGraph-based agent loop.

The runtime drives a language model through tool calls with strong guarantees:

- tool calls in one batch are processed strictly in order;
- every call passes the safety guardrails, and file-writing calls also pass the
  file-read-before-write invariant;
- destructive tools never run without a human decision, and the run pauses
  into plain, serializable ``AgentState`` while it waits.

The main entry point is ``AgentEngine``.
"""

from .engine import AgentEngine, rejection_message
from .invariants import FileReadValidation, validate_pr_files_were_read
from .models import EngineDeps, LoopConfig

__all__ = [
    "AgentEngine",
    "EngineDeps",
    "FileReadValidation",
    "LoopConfig",
    "rejection_message",
    "validate_pr_files_were_read",
]
