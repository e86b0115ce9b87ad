"""Debug logging of provider and index payloads to JSON files."""

import json
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


class DebugLogger:
    """Process-wide debug logger for outbound requests and their responses.

    When enabled, every embedding call, generation call and index query writes
    one JSON file per direction under ``<log_dir>/<category>/``. Request and
    response files share a short request id so they can be paired up.
    """

    _enabled: bool = False
    _log_dir: Optional[Path] = None
    _lock = threading.Lock()

    @classmethod
    def configure(cls, enabled: bool = False, log_dir: Optional[Path] = None) -> None:
        """Configure the debug logger.

        Args:
            enabled: Whether debug logging is enabled
            log_dir: Directory for log files (default: ~/.codebase-agent/logs)
        """
        with cls._lock:
            cls._enabled = enabled
            cls._log_dir = log_dir or Path.home() / ".codebase-agent" / "logs"

            if cls._enabled:
                cls._log_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def is_enabled(cls) -> bool:
        return cls._enabled

    @classmethod
    def log_request(
        cls,
        operation: str,
        payload: Dict[str, Any],
        request_id: Optional[str] = None,
        category: str = "general",
    ) -> str:
        """Record an outbound request.

        Args:
            operation: Operation name (e.g. "invoke_model", "converse", "search")
            payload: Request body
            request_id: Identifier to reuse; a new UUID is generated if omitted
            category: Subdirectory, one of "embedding", "llm", "index"

        Returns:
            The request id, for pairing with log_response()
        """
        request_id = request_id or str(uuid.uuid4())
        if cls._enabled:
            cls._write("request", operation, payload, request_id, category)
        return request_id

    @classmethod
    def log_response(
        cls,
        operation: str,
        payload: Dict[str, Any],
        request_id: Optional[str] = None,
        category: str = "general",
    ) -> None:
        """Record the response to a previously logged request."""
        if cls._enabled:
            cls._write("response", operation, payload, request_id or str(uuid.uuid4()), category)

    @classmethod
    def _write(cls, direction: str, operation: str, data: Dict[str, Any], request_id: str, category: str) -> None:
        if not cls._log_dir:
            return

        category_dir = cls._log_dir / category
        category_dir.mkdir(parents=True, exist_ok=True)

        now = datetime.now(timezone.utc)
        filename = f"{operation}_{now.strftime('%Y%m%dT%H%M%SZ')}_{request_id[:4]}_{direction}.json"

        entry = {
            "timestamp": now.isoformat(),
            "type": direction,
            "operation": operation,
            "payload": data,
        }

        with cls._lock:
            try:
                with open(category_dir / filename, "w", encoding="utf-8") as f:
                    json.dump(entry, f, indent=2, default=cls._json_default)
            except OSError:
                # Debug output must never break a request
                pass

    @staticmethod
    def _json_default(obj: Any) -> str:
        if isinstance(obj, datetime):
            return obj.isoformat()
        return str(obj)
