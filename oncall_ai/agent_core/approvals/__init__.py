"""Approval requests for destructive tool calls."""

from .manager import ApprovalManager

__all__ = ["ApprovalManager"]
