"""Blocking driver: run one protocol instance to completion over a connection."""

from __future__ import annotations

import logging
import time
from typing import Any, Protocol as TypingProtocol

from .protocol import Protocol
from .steps import Call, ProtocolTimeout

logger = logging.getLogger("cdp.pdf.driver")


class Connection(TypingProtocol):
    def next_call_id(self) -> Any: ...

    def send_call(self, call: Call, call_id: Any) -> None: ...

    def recv(self, timeout: float) -> dict[str, Any] | None: ...


def run_protocol(conn: Connection, protocol: Protocol, *, timeout: float = 30.0) -> Any:
    """Drive `protocol` until it produces output, fails, or the deadline passes.

    Messages that no step wants are dropped. Raises `ProtocolError` (or
    `ProtocolTimeout`) on failure; returns the output step's value otherwise.
    """
    protocol.start(conn.send_call, conn.next_call_id)
    deadline = time.monotonic() + timeout

    while not protocol.finished:
        remaining = deadline - time.monotonic()
        msg = conn.recv(remaining) if remaining > 0 else None
        if msg is None:
            step = protocol.current_step
            step_name = step.name if step is not None else None
            raise ProtocolTimeout(
                protocol.name,
                step_name,
                {"kind": "timeout", "timeout": timeout, "step": step_name},
            )
        if not protocol.feed(msg, conn.send_call, conn.next_call_id):
            logger.debug("%s: dropped %s", protocol.name, msg.get("method") or f"response id={msg.get('id')}")

    protocol.raise_for_error()
    return protocol.result


__all__ = ["Connection", "run_protocol"]
