"""Pydantic AI backed LLM provider.

Translates the loop's ``LLMMessage`` transcript into pydantic-ai model
messages and issues a single, non-streaming request through
``pydantic_ai.direct.model_request``. Any pydantic-ai ``Model`` (or a model
name such as ``"openai:gpt-4o"``) can be used, including ``FunctionModel`` in
tests.
"""

from typing import Any, List, Sequence, Union

from pydantic_ai.direct import model_request
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelRequestPart,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)
from pydantic_ai.models import Model, ModelRequestParameters
from pydantic_ai.settings import ModelSettings
from pydantic_ai.tools import ToolDefinition as PydanticAIToolDefinition

from oncall_ai.core.logging_config import get_logger

from ..schemas.domain import LLMMessage, LLMResponse, ToolCall
from ..tools.base import ToolDefinition
from .base import LLMOptions

logger = get_logger(__name__)


def to_model_messages(messages: Sequence[LLMMessage]) -> List[ModelMessage]:
    """Convert a transcript into pydantic-ai messages.

    Consecutive system/user/tool messages are merged into one ``ModelRequest``;
    each assistant message becomes a ``ModelResponse``.
    """
    out: List[ModelMessage] = []
    pending: List[ModelRequestPart] = []

    def flush() -> None:
        if pending:
            out.append(ModelRequest(parts=list(pending)))
            pending.clear()

    for m in messages:
        if m.role == "system":
            pending.append(SystemPromptPart(content=m.content))
        elif m.role == "user":
            pending.append(UserPromptPart(content=m.content))
        elif m.role == "tool":
            pending.append(
                ToolReturnPart(
                    tool_name=m.tool_name or "unknown",
                    content=m.content,
                    tool_call_id=m.tool_call_id or "",
                )
            )
        else:
            flush()
            parts: List[Any] = []
            if m.content:
                parts.append(TextPart(content=m.content))
            for call in m.tool_calls or []:
                parts.append(ToolCallPart(tool_name=call.name, args=dict(call.args), tool_call_id=call.id))
            out.append(ModelResponse(parts=parts))
    flush()
    return out


def from_model_response(response: ModelResponse) -> LLMResponse:
    texts: List[str] = []
    calls: List[ToolCall] = []
    for part in response.parts:
        if isinstance(part, TextPart):
            texts.append(part.content)
        elif isinstance(part, ToolCallPart):
            calls.append(ToolCall(id=part.tool_call_id, name=part.tool_name, args=part.args_as_dict()))
    content = "".join(texts) if texts else None
    return LLMResponse(content=content, tool_calls=calls)


class PydanticAIProvider:
    """``LLMProvider`` implementation on top of pydantic-ai models."""

    def __init__(self, model: Union[Model, str]) -> None:
        self._model = model

    async def complete(
        self,
        messages: Sequence[LLMMessage],
        tools: List[ToolDefinition],
        options: LLMOptions,
    ) -> LLMResponse:
        settings: ModelSettings = {}
        if options.temperature is not None:
            settings["temperature"] = options.temperature
        if options.max_tokens is not None:
            settings["max_tokens"] = options.max_tokens

        params = ModelRequestParameters(
            function_tools=[
                PydanticAIToolDefinition(
                    name=t.name,
                    description=t.description,
                    parameters_json_schema=t.input_schema,
                )
                for t in tools
            ]
        )
        logger.debug(f"LLM request: {len(messages)} messages, {len(tools)} tools")
        response = await model_request(
            self._model,
            to_model_messages(messages),
            model_settings=settings or None,
            model_request_parameters=params,
        )
        return from_model_response(response)
