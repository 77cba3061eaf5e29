"""Deterministic provider for tests and offline runs."""

from typing import Any

from blockflow.llm.provider import LLMProvider, LLMResponse


class MockLLMProvider(LLMProvider):
    """
    Returns a canned reply (or echoes the last user message).

    Every call is recorded in ``calls`` so tests can assert on what the
    model block sent.
    """

    def __init__(self, reply: str | None = None, model: str = "mock-model"):
        self.reply = reply
        self.model = model
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        system: str = "",
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        self.calls.append(
            {
                "messages": messages,
                "model": model,
                "system": system,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.reply is not None:
            content = self.reply
        else:
            content = messages[-1]["content"] if messages else ""
        return LLMResponse(content=content, model=model or self.model, stop_reason="stop")
