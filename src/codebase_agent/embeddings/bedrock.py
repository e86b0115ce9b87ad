import json
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .base import Embedder, EmbeddingError
from ..utils.debug import DebugLogger


class BedrockEmbedder(Embedder):
    """Amazon Titan text embeddings through the Bedrock runtime API."""

    def __init__(self, model_id: str, region_name: str = "us-east-1", dimension: int = 1536, profile_name: Optional[str] = None):
        session = boto3.Session(profile_name=profile_name, region_name=region_name)
        self.client = session.client('bedrock-runtime')
        self.model_id = model_id
        self._dimension = dimension

    def embed(self, text: str) -> List[float]:
        request_body = {
            "inputText": text
        }

        request_id = None
        if DebugLogger.is_enabled():
            request_id = DebugLogger.log_request(
                "invoke_model",
                {"modelId": self.model_id, "body": request_body},
                category="embedding",
            )

        try:
            response = self.client.invoke_model(
                modelId=self.model_id,
                body=json.dumps(request_body),
                contentType="application/json",
                accept="application/json",
            )
            response_body = json.loads(response['body'].read())
        except (ClientError, BotoCoreError) as e:
            raise EmbeddingError(f"Bedrock embedding failed: {e}") from e

        embedding = response_body.get('embedding')
        if not embedding:
            raise EmbeddingError("Bedrock embedding response did not contain a vector")

        if DebugLogger.is_enabled():
            DebugLogger.log_response("invoke_model", {
                "embedding_dimension": len(embedding),
                "input_tokens": response_body.get("inputTextTokenCount"),
                "model_id": self.model_id,
            }, request_id, category="embedding")

        return embedding

    @property
    def dimension(self) -> int:
        return self._dimension
