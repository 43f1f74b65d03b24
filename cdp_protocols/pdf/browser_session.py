from __future__ import annotations

import base64
import logging
from collections.abc import Mapping
from typing import Any

from .config import ProtocolConfig
from .driver import Connection, run_protocol
from .protocols import CAPTURE_SCREENSHOT, CLOSE_SESSION, PRINT_TO_PDF, SPAWN_SESSION
from .session_cdp import TransportError
from .steps import ProtocolError

logger = logging.getLogger("cdp.pdf.session")


def source_options(source: Mapping[str, Any]) -> dict[str, Any]:
    """Translate `{"url": ...}` / `{"html": ...}` into navigate options."""
    if "url" in source:
        return {"source_type": "url", "url": source["url"]}
    if "html" in source:
        return {"source_type": "html", "html": source["html"]}
    raise ValueError("source must contain 'url' or 'html'")


class BrowserSession:
    """
    Page target spawned in its own browser context.

    Wraps a browser-level connection with the print/screenshot protocols.
    Use as context manager for automatic cleanup.
    """

    def __init__(self, conn: Connection, config: ProtocolConfig | None = None, **spawn_options: Any) -> None:
        self.conn = conn
        self.config = config or ProtocolConfig.from_env()
        self._spawn_options = spawn_options
        self.info: dict[str, Any] | None = None

    def __enter__(self) -> BrowserSession:
        self.spawn()
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is None:
            self.close()
            return
        # The in-flight exception wins over a failed close.
        try:
            self.close()
        except (ProtocolError, TransportError) as close_exc:
            logger.warning("close_failed %s (after %s)", close_exc, exc_type.__name__)

    @property
    def session_id(self) -> str:
        if self.info is None:
            raise RuntimeError("session not spawned")
        return str(self.info["sessionId"])

    def _options(self, extra: Mapping[str, Any]) -> dict[str, Any]:
        return {**self.config.policy_options(), **extra}

    def run(self, definition: Any, options: Mapping[str, Any], *, scoped: bool = True) -> Any:
        protocol = definition.new(self._options(options), self.session_id if scoped else None)
        return run_protocol(self.conn, protocol, timeout=self.config.timeout)

    def spawn(self) -> dict[str, Any]:
        if self.info is None:
            self.info = self.run(SPAWN_SESSION, self._spawn_options, scoped=False)
            logger.info("spawned target=%s session=%s", self.info["targetId"], self.info["sessionId"])
        return self.info

    def print_to_pdf(self, source: Mapping[str, Any], **options: Any) -> bytes:
        data = self.run(PRINT_TO_PDF, {**source_options(source), **options})
        return base64.b64decode(data)

    def capture_screenshot(self, source: Mapping[str, Any], **options: Any) -> bytes:
        data = self.run(CAPTURE_SCREENSHOT, {**source_options(source), **options})
        return base64.b64decode(data)

    def close(self) -> None:
        if self.info is None:
            return
        info, self.info = self.info, None
        self.run(CLOSE_SESSION, {"targetId": info["targetId"], "browserContextId": info["browserContextId"]}, scoped=False)


__all__ = ["BrowserSession", "source_options"]
