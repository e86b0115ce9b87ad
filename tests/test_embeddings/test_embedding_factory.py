"""Tests for embedding text preparation and provider selection."""

import pytest
from unittest.mock import patch

from codebase_agent.config.settings import Settings
from codebase_agent.embeddings.factory import create_embedder
from codebase_agent.embeddings.preprocess import normalize_whitespace, prepare_chunk_text
from codebase_agent.models.chunk import Chunk, ChunkType


def test_normalize_whitespace():
    assert normalize_whitespace("  def  main():\n\n\treturn 1  ") == "def main(): return 1"


def test_prepare_chunk_text_with_description():
    chunk = Chunk(
        type=ChunkType.DOCUMENTATION,
        content="## Setup\n\nRun   npm install",
        file_path="README.md",
        file_name="README.md",
        file_type="markdown",
        repository="demo",
        branch="main",
        start_line=3,
        end_line=5,
        description="Setup",
    )

    assert prepare_chunk_text(chunk) == (
        "File: README.md\n"
        "Type: documentation\n"
        "Description: Setup\n"
        "Content: ## Setup Run npm install"
    )


def test_prepare_chunk_text_without_description():
    chunk = Chunk(
        type=ChunkType.FUNCTION,
        content="def main():\n    pass",
        file_path="main.py",
        file_name="main.py",
        file_type="python",
        repository="demo",
        branch="main",
        start_line=1,
        end_line=2,
    )

    assert "Description:" not in prepare_chunk_text(chunk)


class TestCreateEmbedder:
    def test_bedrock(self):
        settings = Settings(embedding_provider="bedrock", aws_region="us-west-2", _env_file=None)

        with patch("codebase_agent.embeddings.bedrock.BedrockEmbedder") as mock_cls:
            create_embedder(settings)

        mock_cls.assert_called_once_with(
            model_id="amazon.titan-embed-text-v1",
            region_name="us-west-2",
            dimension=1536,
            profile_name=None,
        )

    def test_local(self):
        settings = Settings(embedding_provider="local", _env_file=None)

        with patch("codebase_agent.embeddings.local.LocalEmbedder") as mock_cls:
            create_embedder(settings)

        mock_cls.assert_called_once_with(
            model_id="jinaai/jina-code-embeddings-0.5b",
            dimension=512,
        )

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown embedding provider"):
            create_embedder(Settings(embedding_provider="word2vec", _env_file=None))
