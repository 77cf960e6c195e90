"""HTTP surface for the on-call agent: approvals review and run management."""
