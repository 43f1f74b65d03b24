"""Factories that turn definition entries into `Step` closures."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from . import jsonrpc
from .interception import intercept
from .params import KeySpec, ParamsSource, PathMissing, extract_fields, fetch_path, notification_matches, resolve_params
from .steps import LAST_CALL_ID, NO_MATCH, SESSION_ID, Call, Error, Match, MatchResult, State, Step, StepKind

AwaitFn = Callable[[State, Mapping[str, Any]], MatchResult]
ResponseCallback = Callable[[State, Mapping[str, Any]], Error | None]


def call_step(name: str, method: str, params: ParamsSource, defaults: Mapping[str, Any] | None = None) -> Step:
    source = params if callable(params) else tuple(params)
    static_defaults = dict(defaults or {})

    def run(state: State, call_id: Any) -> tuple[State, Call]:
        resolved = resolve_params(state, source, static_defaults)
        call = Call(method, resolved, state.get(SESSION_ID))
        return {**state, LAST_CALL_ID: call_id}, call

    return Step(StepKind.CALL, name, 2, run)


def await_step(name: str, fn: AwaitFn) -> Step:
    """Wrap a matcher so the interception chain runs before it."""

    def run(state: State, msg: Mapping[str, Any]) -> MatchResult:
        intercepted = intercept(state, msg)
        if intercepted is not NO_MATCH:
            return intercepted
        return fn(state, msg)

    return Step(StepKind.AWAIT, name, 2, run)


def await_response_step(
    name: str,
    put_keys: Iterable[KeySpec] = (),
    callback: ResponseCallback | None = None,
) -> Step:
    keys = tuple(put_keys)

    def match(state: State, msg: Mapping[str, Any]) -> MatchResult:
        if not jsonrpc.is_response(msg, fetch_path(state, LAST_CALL_ID)):
            return NO_MATCH
        if callback is not None:
            outcome = callback(state, msg)
        elif jsonrpc.is_error(msg):
            outcome = Error(jsonrpc.extract_error(msg))
        else:
            outcome = None
        if outcome is not None:
            return outcome
        return Match.remove(extract_fields(msg, "result", keys, state))

    return await_step(name, match)


def await_notification_step(
    name: str,
    method: str,
    match_keys: Iterable[KeySpec] = (),
    put_keys: Iterable[KeySpec] = (),
) -> Step:
    matchers = tuple(match_keys)
    keys = tuple(put_keys)

    def match(state: State, msg: Mapping[str, Any]) -> MatchResult:
        if not jsonrpc.is_notification(msg, method):
            return NO_MATCH
        if state.get(SESSION_ID) != msg.get(SESSION_ID):
            return NO_MATCH
        if not all(notification_matches(state, msg, spec) for spec in matchers):
            return NO_MATCH
        return Match.remove(extract_fields(msg, "params", keys, state))

    return await_step(name, match)


def output_step(keys: str | Sequence[str], name: str = "output") -> Step:
    if isinstance(keys, str):
        key = keys

        def run(state: State) -> Any:
            return fetch_path(state, [key])

    else:
        wanted = tuple(keys)

        def run(state: State) -> Any:
            missing = [k for k in wanted if k not in state]
            if missing:
                raise PathMissing(list(wanted), missing[0])
            return {k: state[k] for k in wanted}

    return Step(StepKind.OUTPUT, name, 1, run)


__all__ = [
    "AwaitFn",
    "ResponseCallback",
    "await_notification_step",
    "await_response_step",
    "await_step",
    "call_step",
    "output_step",
]
