"""Repository interfaces and implementations for agent persistence.

The repository layer is the persistence boundary for paused and finished runs.

- ``AgentStateRepository`` stores the serialized ``AgentState`` of a run so a
  paused run can be resumed later, possibly by another process.
- ``ApprovalRepository`` stores approval requests and their decisions.

In-memory implementations live in ``repos.memory``; async SQLAlchemy
implementations live in ``repos.sql``.
"""

from .interfaces import AgentStateRepository, ApprovalRepository
from .memory import InMemoryAgentStateRepository, InMemoryApprovalRepository

__all__ = [
    "AgentStateRepository",
    "ApprovalRepository",
    "InMemoryAgentStateRepository",
    "InMemoryApprovalRepository",
]
