"""LLM provider abstraction."""

from blockflow.llm.mock import MockLLMProvider
from blockflow.llm.provider import LLMProvider, LLMResponse


def __getattr__(name: str):
    """Lazy import for the provider that requires litellm."""
    if name == "LiteLLMProvider":
        from blockflow.llm.litellm import LiteLLMProvider

        return LiteLLMProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "LLMProvider",
    "LLMResponse",
    "LiteLLMProvider",
    "MockLLMProvider",
]
