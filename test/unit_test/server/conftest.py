from typing import Any, AsyncGenerator, Dict, List, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from oncall_ai.agent_core.llm.base import LLMOptions
from oncall_ai.agent_core.schemas import LLMMessage, LLMResponse, ToolContext
from oncall_ai.agent_core.service import AgentService
from oncall_ai.agent_core.tools.base import ToolDefinition


class ScriptedLLM:
    """LLM stand-in returning queued responses, then a plain final answer."""

    def __init__(self) -> None:
        self.responses: List[LLMResponse] = []

    def queue(self, *responses: LLMResponse) -> None:
        self.responses.extend(responses)

    async def complete(
        self, messages: Sequence[LLMMessage], tools: List[ToolDefinition], options: LLMOptions
    ) -> LLMResponse:
        if not self.responses:
            return LLMResponse(content="done")
        return self.responses.pop(0)


class RecordingBackend:
    def __init__(self, result: Any = "ok") -> None:
        self.result = result
        self.calls: List[Any] = []

    async def __call__(self, params: Any, context: ToolContext) -> Any:
        self.calls.append(params)
        return self.result


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def backends() -> Dict[str, RecordingBackend]:
    return {
        "run_command": RecordingBackend(result="command finished"),
        "github_search_code": RecordingBackend(result={"matches": []}),
    }


@pytest.fixture
def agent_service(llm: ScriptedLLM, backends: Dict[str, RecordingBackend]) -> AgentService:
    """In-memory service built through the same wiring the server uses."""
    from oncall_ai.server.core.config import Settings
    from oncall_ai.server.services.agent import build_agent_service

    return build_agent_service(Settings(_env_file=None), llm=llm, backends=backends)


@pytest_asyncio.fixture(name="client")
async def client_fixture(agent_service: AgentService) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with the agent service dependency overridden."""
    from oncall_ai.server.main import app
    from oncall_ai.server.services.agent import get_agent_service

    app.dependency_overrides[get_agent_service] = lambda: agent_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()
