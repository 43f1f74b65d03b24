from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from .interception import CONSOLE_API_CALLS, POLICY_DEFAULTS, UNHANDLED_RUNTIME_EXCEPTIONS


def normalize_policy(raw: str | None, default: str) -> str:
    value = (raw or "").strip().lower()
    if value in {"ignore", "off", "none", "silent"}:
        return "ignore"
    if value in {"log", "warn", "warning"}:
        return "log"
    if value in {"raise", "error", "fail", "strict"}:
        return "raise"
    return default


@dataclass
class ProtocolConfig:
    ws_url: str | None = None
    cdp_host: str = "127.0.0.1"
    cdp_port: int = 9222
    timeout: float = 30.0
    unhandled_runtime_exceptions: str = POLICY_DEFAULTS[UNHANDLED_RUNTIME_EXCEPTIONS]
    console_api_calls: str = POLICY_DEFAULTS[CONSOLE_API_CALLS]

    @classmethod
    def from_env(cls) -> ProtocolConfig:
        ws_url = (os.environ.get("CDP_PDF_WS_URL") or "").strip() or None
        host = (os.environ.get("CDP_PDF_HOST") or "127.0.0.1").strip()
        port = int(os.environ.get("CDP_PDF_PORT", "9222"))
        timeout = float(os.environ.get("CDP_PDF_TIMEOUT", "30"))
        return cls(
            ws_url=ws_url,
            cdp_host=host,
            cdp_port=port,
            timeout=max(0.1, timeout),
            unhandled_runtime_exceptions=normalize_policy(
                os.environ.get("CDP_PDF_RUNTIME_EXCEPTIONS"),
                POLICY_DEFAULTS[UNHANDLED_RUNTIME_EXCEPTIONS],
            ),
            console_api_calls=normalize_policy(
                os.environ.get("CDP_PDF_CONSOLE_API_CALLS"),
                POLICY_DEFAULTS[CONSOLE_API_CALLS],
            ),
        )

    def policy_options(self) -> dict[str, Any]:
        """State entries that seed the interception policies of a protocol."""
        return {
            UNHANDLED_RUNTIME_EXCEPTIONS: self.unhandled_runtime_exceptions,
            CONSOLE_API_CALLS: self.console_api_calls,
        }

    @property
    def http_endpoint(self) -> str:
        return f"http://{self.cdp_host}:{self.cdp_port}"
