"""Interceptors consulted before every await step.

Runtime exceptions and console API calls arrive asynchronously while a step is
waiting for something else. Each interceptor either declines (`NO_MATCH`),
consumes the event without completing the step (`Match.keep`), or fails the
protocol (`Error`), depending on a policy stored in session state.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from . import jsonrpc
from .params import fetch_path, lookup_path
from .steps import NO_MATCH, SESSION_ID, Error, Match, MatchResult, State

logger = logging.getLogger("cdp.pdf.protocol")

UNHANDLED_RUNTIME_EXCEPTIONS = "unhandled_runtime_exceptions"
CONSOLE_API_CALLS = "console_api_calls"

POLICIES = ("ignore", "log", "raise")
POLICY_DEFAULTS: dict[str, str] = {
    UNHANDLED_RUNTIME_EXCEPTIONS: "log",
    CONSOLE_API_CALLS: "ignore",
}


def validate_policies(options: Mapping[str, Any]) -> None:
    for key in POLICY_DEFAULTS:
        if key in options and options[key] not in POLICIES:
            raise ValueError(f"{key} must be one of {', '.join(POLICIES)} (got {options[key]!r})")


def same_session(state: Mapping[str, Any], msg: Mapping[str, Any]) -> bool:
    return state.get(SESSION_ID) == msg.get(SESSION_ID)


def _policy(state: Mapping[str, Any], key: str) -> str:
    return str(state.get(key, POLICY_DEFAULTS[key]))


def intercept_exception_thrown(state: State, msg: Mapping[str, Any]) -> MatchResult:
    if not (jsonrpc.is_notification(msg, "Runtime.exceptionThrown") and same_session(state, msg)):
        return NO_MATCH

    details = fetch_path(msg, ["params", "exceptionDetails"])
    prefix = lookup_path(details, ["text"], "")
    suffix = lookup_path(details, ["exception", "description"])
    description = f"{prefix} {'undefined' if suffix is None else suffix}"

    policy = _policy(state, UNHANDLED_RUNTIME_EXCEPTIONS)
    if policy == "raise":
        return Error({"kind": "exception_thrown", "description": description})
    if policy == "log":
        logger.warning("Unhandled exception in JS runtime\n\n%s", description)
    return Match.keep(state)


def intercept_console_api_called(state: State, msg: Mapping[str, Any]) -> MatchResult:
    if not (jsonrpc.is_notification(msg, "Runtime.consoleAPICalled") and same_session(state, msg)):
        return NO_MATCH

    call_type = fetch_path(msg, ["params", "type"])
    args = json.dumps(fetch_path(msg, ["params", "args"]), indent=2, ensure_ascii=False)

    policy = _policy(state, CONSOLE_API_CALLS)
    if policy == "raise":
        return Error({"kind": "console_api_called", "type": call_type, "args": args})
    if policy == "log":
        logger.warning("console.%s called in JS runtime\n\n%s", call_type, args)
    return Match.keep(state)


INTERCEPTORS: tuple[Callable[[State, Mapping[str, Any]], MatchResult], ...] = (
    intercept_exception_thrown,
    intercept_console_api_called,
)


def intercept(state: State, msg: Mapping[str, Any]) -> MatchResult:
    """Run the chain in order; first non-`NO_MATCH` result wins."""
    for interceptor in INTERCEPTORS:
        result = interceptor(state, msg)
        if result is not NO_MATCH:
            return result
    return NO_MATCH


__all__ = [
    "CONSOLE_API_CALLS",
    "INTERCEPTORS",
    "POLICIES",
    "POLICY_DEFAULTS",
    "UNHANDLED_RUNTIME_EXCEPTIONS",
    "intercept",
    "intercept_console_api_called",
    "intercept_exception_thrown",
    "same_session",
    "validate_policies",
]
