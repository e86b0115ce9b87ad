"""Tests for BedrockLLM implementation."""

import pytest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError, EndpointConnectionError

from codebase_agent.config.settings import PROVIDER_MODEL_DEFAULTS
from codebase_agent.llm.base import (
    LLMError,
    LLMInvalidRequestError,
    LLMRateLimitError,
    Message,
)
from codebase_agent.llm.bedrock import BedrockLLM

MODEL_ID = PROVIDER_MODEL_DEFAULTS["bedrock"]


@pytest.fixture
def mock_boto3():
    """Mock boto3 for testing."""
    with patch("codebase_agent.llm.bedrock.boto3") as mock:
        yield mock


@pytest.fixture
def mock_client(mock_boto3):
    client = MagicMock()
    mock_boto3.Session.return_value.client.return_value = client
    return client


@pytest.fixture
def bedrock_llm(mock_client):
    return BedrockLLM(region_name="us-west-2")


def _converse_response(text="Run npm install."):
    return {
        "output": {"message": {"role": "assistant", "content": [{"text": text}]}},
        "stopReason": "end_turn",
        "usage": {"inputTokens": 100, "outputTokens": 20, "totalTokens": 120},
    }


def _client_error(code, message="boom"):
    return ClientError({"Error": {"Code": code, "Message": message}}, "Converse")


class TestBedrockLLMInit:
    def test_init_default_region(self, mock_boto3):
        BedrockLLM()

        mock_boto3.Session.assert_called_once_with(region_name="us-east-1", profile_name=None)
        mock_boto3.Session.return_value.client.assert_called_once_with("bedrock-runtime")

    def test_init_custom_profile(self, mock_boto3):
        BedrockLLM(region_name="eu-central-1", profile_name="dev")

        mock_boto3.Session.assert_called_once_with(region_name="eu-central-1", profile_name="dev")


class TestBedrockLLMGenerate:
    def test_generate(self, bedrock_llm, mock_client):
        mock_client.converse.return_value = _converse_response()

        response = bedrock_llm.generate(
            [Message(role="user", content="How do I set up this project?")],
            model=MODEL_ID,
            max_tokens=500,
            temperature=0.2,
        )

        assert response.content == "Run npm install."
        assert response.stop_reason == "end_turn"
        assert response.usage.total_tokens == 120
        mock_client.converse.assert_called_once_with(
            modelId=MODEL_ID,
            messages=[{"role": "user", "content": [{"text": "How do I set up this project?"}]}],
            inferenceConfig={"maxTokens": 500, "temperature": 0.2},
        )

    def test_generate_with_system_prompt(self, bedrock_llm, mock_client):
        mock_client.converse.return_value = _converse_response()

        bedrock_llm.generate([Message(role="user", content="hi")], model=MODEL_ID, system="Be brief.")

        assert mock_client.converse.call_args.kwargs["system"] == [{"text": "Be brief."}]

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("ThrottlingException", LLMRateLimitError),
            ("ValidationException", LLMInvalidRequestError),
            ("ServiceUnavailableException", LLMError),
        ],
    )
    def test_client_errors_are_mapped(self, bedrock_llm, mock_client, code, expected):
        mock_client.converse.side_effect = _client_error(code)

        with pytest.raises(expected):
            bedrock_llm.generate([Message(role="user", content="hi")], model=MODEL_ID)

    def test_connection_error(self, bedrock_llm, mock_client):
        mock_client.converse.side_effect = EndpointConnectionError(endpoint_url="https://bedrock.example")

        with pytest.raises(LLMError, match="Bedrock request failed"):
            bedrock_llm.generate([Message(role="user", content="hi")], model=MODEL_ID)
