"""Tests for OpenAICompatibleLLM implementation."""

import httpx
import pytest
from unittest.mock import MagicMock, patch

from openai import APIConnectionError, RateLimitError

from codebase_agent.llm.base import LLMError, LLMRateLimitError, Message
from codebase_agent.llm.openai_compatible import OpenAICompatibleLLM


@pytest.fixture
def mock_client():
    with patch("codebase_agent.llm.openai_compatible.OpenAI") as mock_openai:
        client = MagicMock()
        mock_openai.return_value = client
        yield client


def _completion(content="Use Node 20.", finish_reason="stop"):
    response = MagicMock()
    response.model = "gpt-4o-mini"
    response.choices = [MagicMock(finish_reason=finish_reason, message=MagicMock(content=content))]
    response.usage = MagicMock(prompt_tokens=50, completion_tokens=10, total_tokens=60)
    response.model_dump.return_value = {}
    return response


def test_client_configuration():
    with patch("codebase_agent.llm.openai_compatible.OpenAI") as mock_openai:
        OpenAICompatibleLLM(api_key="sk-test", base_url="http://localhost:11434/v1", timeout=30)

    mock_openai.assert_called_once_with(
        api_key="sk-test",
        max_retries=3,
        base_url="http://localhost:11434/v1",
        timeout=30,
    )


def test_generate(mock_client):
    mock_client.chat.completions.create.return_value = _completion()
    llm = OpenAICompatibleLLM(api_key="sk-test")

    response = llm.generate([Message(role="user", content="Which Node version?")], model="gpt-4o-mini", system="Be brief.")

    assert response.content == "Use Node 20."
    assert response.usage.input_tokens == 50
    kwargs = mock_client.chat.completions.create.call_args.kwargs
    assert kwargs["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Which Node version?"},
    ]
    assert kwargs["max_completion_tokens"] == 4000


def test_empty_content_is_an_error(mock_client):
    mock_client.chat.completions.create.return_value = _completion(content="", finish_reason="length")
    llm = OpenAICompatibleLLM(api_key="sk-test")

    with pytest.raises(LLMError, match="token limit"):
        llm.generate([Message(role="user", content="hi")], model="gpt-4o-mini")


def test_rate_limit_is_mapped(mock_client):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    mock_client.chat.completions.create.side_effect = RateLimitError(
        "slow down", response=httpx.Response(429, request=request), body=None
    )
    llm = OpenAICompatibleLLM(api_key="sk-test")

    with pytest.raises(LLMRateLimitError):
        llm.generate([Message(role="user", content="hi")], model="gpt-4o-mini")


def test_connection_error_is_mapped(mock_client):
    request = httpx.Request("POST", "http://127.0.0.1:11434/v1/chat/completions")
    mock_client.chat.completions.create.side_effect = APIConnectionError(request=request)
    llm = OpenAICompatibleLLM(api_key="ollama")

    with pytest.raises(LLMError, match="Connection error"):
        llm.generate([Message(role="user", content="hi")], model="qwen2.5-coder:7b")
