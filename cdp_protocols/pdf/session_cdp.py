"""Browser-level CDP WebSocket connection (websocket-client).

One connection carries every flat session (`sessionId`) of the browser; protocol
instances address their target through the `sessionId` stored in their state.
"""

from __future__ import annotations

import json
import logging
import socket
import time
from contextlib import suppress
from typing import Any
from urllib.error import URLError
from urllib.request import urlopen

import websocket

from .jsonrpc import CallIdGenerator
from .steps import Call

logger = logging.getLogger("cdp.pdf.session")


class TransportError(Exception):
    pass


def _http_get_json(url: str, timeout: float = 2.0) -> Any:
    """Fetch JSON from URL."""
    try:
        with urlopen(url, timeout=timeout) as resp:
            return json.loads(resp.read().decode())
    except (URLError, TimeoutError, ValueError) as exc:
        raise TransportError(str(exc)) from exc


def browser_ws_url(host: str = "127.0.0.1", port: int = 9222, timeout: float = 2.0) -> str:
    """Resolve the browser WebSocket endpoint from the DevTools HTTP endpoint."""
    info = _http_get_json(f"http://{host}:{port}/json/version", timeout=timeout)
    url = info.get("webSocketDebuggerUrl") if isinstance(info, dict) else None
    if not isinstance(url, str) or not url:
        raise TransportError(f"No webSocketDebuggerUrl at {host}:{port}")
    return url


class CdpConnection:
    """Low-level CDP WebSocket connection: send calls, receive raw messages."""

    def __init__(self, ws_url: str, timeout: float = 5.0) -> None:
        try:
            self.ws = websocket.create_connection(ws_url, timeout=timeout)
        except (OSError, websocket.WebSocketException) as exc:
            raise TransportError(f"Cannot connect to {ws_url}: {exc}") from exc
        self.ws_url = ws_url
        self.timeout = timeout
        self.next_call_id = CallIdGenerator()

    def send_call(self, call: Call, call_id: Any) -> None:
        payload = json.dumps(call.to_message(call_id))
        try:
            self.ws.settimeout(min(2.0, max(0.5, float(self.timeout))))
            self.ws.send(payload)
        except (OSError, websocket.WebSocketException) as exc:
            raise TransportError(str(exc)) from exc

    def recv(self, timeout: float) -> dict[str, Any] | None:
        """Return the next decoded message, or None when nothing arrived in time."""
        deadline = time.monotonic() + max(0.0, timeout)
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            try:
                # Small socket timeout so the deadline is enforced here, not by the socket.
                self.ws.settimeout(min(0.5, remaining))
                raw = self.ws.recv()
            except (TimeoutError, websocket.WebSocketTimeoutException):
                continue
            except (OSError, websocket.WebSocketException) as exc:
                raise TransportError(str(exc)) from exc

            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                logger.debug("dropping undecodable frame (%d bytes)", len(raw or ""))
                continue
            if isinstance(data, dict):
                return data

    def abort(self) -> None:
        """Hard break of the underlying socket."""
        sock = getattr(self.ws, "sock", None)
        if sock is not None:
            with suppress(OSError):
                sock.shutdown(socket.SHUT_RDWR)
            with suppress(OSError):
                sock.close()

    def close(self) -> None:
        # websocket-client close() can hang on a wedged browser; break the socket instead.
        self.abort()

    def __enter__(self) -> CdpConnection:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["CdpConnection", "TransportError", "browser_ws_url"]
