from __future__ import annotations

"""LLM provider protocol used by the agent loop."""

from typing import List, Optional, Protocol, Sequence

from pydantic import Field

from ..schemas.base import BaseSchema
from ..schemas.domain import LLMMessage, LLMResponse
from ..tools.base import ToolDefinition


class LLMOptions(BaseSchema):
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1)


class LLMProvider(Protocol):
    """Protocol for chat-completion backends with tool calling.

    Implementations raise on provider failure; the loop does not retry.
    """

    async def complete(
        self,
        messages: Sequence[LLMMessage],
        tools: List[ToolDefinition],
        options: LLMOptions,
    ) -> LLMResponse: ...
