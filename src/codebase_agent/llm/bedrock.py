"""AWS Bedrock LLM provider using the Converse API."""

from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .base import (
    LLMProvider,
    Message,
    LLMResponse,
    UsageMetrics,
    LLMError,
    LLMRateLimitError,
    LLMInvalidRequestError,
)
from ..utils.debug import DebugLogger


class BedrockLLM(LLMProvider):
    """AWS Bedrock implementation using the model-agnostic Converse API."""

    def __init__(self, region_name: str = "us-east-1", profile_name: Optional[str] = None):
        """Initialize Bedrock client.

        Args:
            region_name: AWS region (default: us-east-1)
            profile_name: AWS profile name (optional)
        """
        session = boto3.Session(
            region_name=region_name,
            profile_name=profile_name
        )
        self.client = session.client("bedrock-runtime")

    @staticmethod
    def _to_bedrock_format(messages: List[Message]) -> List[Dict[str, Any]]:
        return [{"role": msg.role, "content": [{"text": msg.content}]} for msg in messages]

    def _handle_error(self, error: ClientError) -> LLMError:
        """Map a Bedrock ClientError to an LLMError subclass."""
        code = error.response["Error"]["Code"]
        msg = error.response["Error"]["Message"]

        if code == "ThrottlingException":
            return LLMRateLimitError(f"Rate limit exceeded: {msg}")
        if code == "ValidationException":
            return LLMInvalidRequestError(f"Invalid request: {msg}")
        return LLMError(f"Bedrock error ({code}): {msg}")

    def generate(
        self,
        messages: List[Message],
        model: str,
        max_tokens: int = 4000,
        temperature: float = 0.1,
        system: Optional[str] = None,
        debug_category: str = "llm",
    ) -> LLMResponse:
        request = {
            "modelId": model,
            "messages": self._to_bedrock_format(messages),
            "inferenceConfig": {
                "maxTokens": max_tokens,
                "temperature": temperature,
            }
        }
        if system:
            request["system"] = [{"text": system}]

        request_id = None
        if DebugLogger.is_enabled():
            request_id = DebugLogger.log_request("converse", request, category=debug_category)

        try:
            response = self.client.converse(**request)
        except ClientError as e:
            raise self._handle_error(e) from e
        except BotoCoreError as e:
            raise LLMError(f"Bedrock request failed: {e}") from e

        if DebugLogger.is_enabled():
            DebugLogger.log_response("converse", response, request_id, category=debug_category)

        usage = response["usage"]
        text = "".join(
            block.get("text", "") for block in response["output"]["message"]["content"]
        )
        return LLMResponse(
            content=text,
            model=model,
            stop_reason=response["stopReason"],
            usage=UsageMetrics(
                input_tokens=usage["inputTokens"],
                output_tokens=usage["outputTokens"],
                total_tokens=usage.get("totalTokens", usage["inputTokens"] + usage["outputTokens"]),
            ),
        )
