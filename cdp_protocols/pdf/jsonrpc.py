"""JSON-RPC message helpers for CDP traffic.

Classification only: framing and decoding stay in the connection layer.
"""

from __future__ import annotations

import itertools
import threading
from typing import Any


def is_response(msg: Any, call_id: Any) -> bool:
    """Return True when `msg` is the reply to call `call_id`."""
    if not isinstance(msg, dict) or call_id is None:
        return False
    if msg.get("id") != call_id:
        return False
    return "result" in msg or "error" in msg


def is_notification(msg: Any, method: str) -> bool:
    """Return True when `msg` is an event for `method` (events carry no id)."""
    if not isinstance(msg, dict) or "id" in msg:
        return False
    return msg.get("method") == method


def is_error(msg: Any) -> bool:
    return isinstance(msg, dict) and "error" in msg


def extract_error(msg: dict[str, Any]) -> dict[str, Any]:
    """Return the error object of an error response as a structured reason."""
    error = msg.get("error")
    if isinstance(error, dict):
        reason: dict[str, Any] = {"kind": "response_error"}
        for key in ("code", "message", "data"):
            if key in error:
                reason[key] = error[key]
        return reason
    return {"kind": "response_error", "message": str(error)}


class CallIdGenerator:
    """Monotonic correlation ids, safe to share between threads."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            return next(self._counter)


__all__ = ["CallIdGenerator", "extract_error", "is_error", "is_notification", "is_response"]
