"""Agent core: guardrails, tools, the agent loop, and approval pause/resume."""
