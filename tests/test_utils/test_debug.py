"""Tests for debug logging infrastructure."""

import json
from datetime import datetime
from pathlib import Path

import pytest

from codebase_agent.utils.debug import DebugLogger


@pytest.fixture
def temp_log_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture(autouse=True)
def reset_debug_logger():
    """Reset DebugLogger state before and after each test."""
    DebugLogger.configure(enabled=False, log_dir=None)
    yield
    DebugLogger.configure(enabled=False, log_dir=None)


def test_debug_logger_disabled_by_default():
    assert DebugLogger.is_enabled() is False


def test_configure_creates_directory(temp_log_dir):
    log_dir = temp_log_dir / "nested"

    DebugLogger.configure(enabled=True, log_dir=log_dir)

    assert DebugLogger.is_enabled() is True
    assert log_dir.is_dir()


def test_default_directory():
    DebugLogger.configure(enabled=False)

    assert DebugLogger._log_dir == Path.home() / ".codebase-agent" / "logs"


def test_nothing_written_when_disabled(temp_log_dir):
    DebugLogger.configure(enabled=False, log_dir=temp_log_dir)

    request_id = DebugLogger.log_request("search", {"size": 15}, category="index")
    DebugLogger.log_response("search", {"hits": []}, request_id, category="index")

    assert request_id
    assert not temp_log_dir.exists() or list(temp_log_dir.glob("**/*.json")) == []


def test_request_and_response_share_id(temp_log_dir):
    DebugLogger.configure(enabled=True, log_dir=temp_log_dir)

    request_id = DebugLogger.log_request("converse", {"modelId": "m"}, category="llm")
    DebugLogger.log_response("converse", {"stopReason": "end_turn"}, request_id, category="llm")

    files = sorted(p.name for p in (temp_log_dir / "llm").glob("*.json"))
    assert len(files) == 2
    assert files[0].startswith("converse_") and files[0].endswith(f"_{request_id[:4]}_request.json")
    assert files[1].endswith(f"_{request_id[:4]}_response.json")


def test_entry_structure(temp_log_dir):
    DebugLogger.configure(enabled=True, log_dir=temp_log_dir)
    payload = {"inputText": "function login() {}"}

    DebugLogger.log_request("invoke_model", payload, category="embedding")

    path = next((temp_log_dir / "embedding").glob("invoke_model_*_request.json"))
    content = json.loads(path.read_text(encoding="utf-8"))
    assert content["type"] == "request"
    assert content["operation"] == "invoke_model"
    assert content["payload"] == payload
    datetime.fromisoformat(content["timestamp"])


def test_non_json_values_are_stringified(temp_log_dir):
    DebugLogger.configure(enabled=True, log_dir=temp_log_dir)

    DebugLogger.log_request("search", {"at": datetime(2024, 1, 1, 12, 0), "path": Path("/repo")}, category="index")

    path = next((temp_log_dir / "index").glob("*.json"))
    payload = json.loads(path.read_text(encoding="utf-8"))["payload"]
    assert payload["at"].startswith("2024-01-01T12:00")
    assert payload["path"] == str(Path("/repo"))
