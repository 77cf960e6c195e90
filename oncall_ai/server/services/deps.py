"""
Agent Service Dependency.

Provides a singleton instance of the AgentService for API endpoints.
"""

from typing import Annotated

from fastapi import Depends

from oncall_ai.agent_core.service import AgentService
from oncall_ai.server.services.agent import get_agent_service

AgentServiceDep = Annotated[AgentService, Depends(get_agent_service)]
