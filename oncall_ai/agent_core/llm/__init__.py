"""LLM provider abstraction for the agent loop."""

from .base import LLMOptions, LLMProvider
from .pydantic_ai_provider import PydanticAIProvider, from_model_response, to_model_messages

__all__ = [
    "LLMOptions",
    "LLMProvider",
    "PydanticAIProvider",
    "from_model_response",
    "to_model_messages",
]
