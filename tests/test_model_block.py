"""
Tests for the model block and the LLM providers behind it.
"""

from types import SimpleNamespace

import pytest

from blockflow.blocks.base import BlockContext
from blockflow.blocks.model import ModelBlock
from blockflow.errors import BlockError
from blockflow.graph.node import NodeSpec
from blockflow.llm import litellm as litellm_provider
from blockflow.llm.litellm import LiteLLMProvider
from blockflow.llm.mock import MockLLMProvider
from blockflow.llm.provider import LLMProvider, LLMResponse


class BrokenProvider(LLMProvider):
    async def complete(self, messages, model=None, system="", temperature=0.7, max_tokens=1024):
        raise ConnectionError("provider unreachable")


@pytest.mark.asyncio
async def test_model_block_sends_prompt_and_returns_content():
    llm = MockLLMProvider(reply="An answer")
    context = BlockContext(llm=llm)
    node = NodeSpec(
        id="m1",
        type="model",
        config={"model": "test/model", "temperature": 0.2, "max_tokens": 50, "system": "Be brief"},
    )

    result = await ModelBlock().execute(node, "Explain graphs", context)

    assert result == "An answer"
    assert llm.calls == [
        {
            "messages": [{"role": "user", "content": "Explain graphs"}],
            "model": "test/model",
            "system": "Be brief",
            "temperature": 0.2,
            "max_tokens": 50,
        }
    ]


@pytest.mark.asyncio
async def test_model_block_renders_structured_input_as_json():
    llm = MockLLMProvider()
    node = NodeSpec(id="m1", type="model")

    result = await ModelBlock().execute(node, {"a": 1, "b": 2}, BlockContext(llm=llm))

    assert result == '{"a": 1, "b": 2}'
    assert llm.calls[0]["model"] == "openrouter/anthropic/claude-3.5-sonnet"


@pytest.mark.asyncio
async def test_model_block_rejects_empty_prompt():
    with pytest.raises(BlockError, match="prompt is empty"):
        await ModelBlock().execute(NodeSpec(id="m", type="model"), None, BlockContext(llm=MockLLMProvider()))


@pytest.mark.asyncio
async def test_model_block_wraps_provider_errors():
    with pytest.raises(BlockError, match="Model execution failed: provider unreachable"):
        await ModelBlock().execute(
            NodeSpec(id="m", type="model"), "hi", BlockContext(llm=BrokenProvider())
        )


def test_context_builds_litellm_provider_lazily():
    context = BlockContext()

    provider = context.get_llm()

    assert isinstance(provider, LiteLLMProvider)
    assert context.get_llm() is provider


@pytest.mark.asyncio
async def test_litellm_provider_maps_response(monkeypatch):
    captured = {}

    async def fake_acompletion(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(
            model="openrouter/x",
            choices=[
                SimpleNamespace(
                    message=SimpleNamespace(content="done"),
                    finish_reason="stop",
                )
            ],
            usage=SimpleNamespace(prompt_tokens=7, completion_tokens=3),
        )

    monkeypatch.setattr(litellm_provider.litellm, "acompletion", fake_acompletion)
    provider = LiteLLMProvider(model="openrouter/x", api_key="secret")

    response = await provider.complete([{"role": "user", "content": "hi"}], system="sys")

    assert isinstance(response, LLMResponse)
    assert response.content == "done"
    assert response.input_tokens == 7
    assert response.output_tokens == 3
    assert captured["model"] == "openrouter/x"
    assert captured["messages"][0] == {"role": "system", "content": "sys"}
    assert captured["api_key"] == "secret"
