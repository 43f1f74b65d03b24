"""Path lookups over session state and CDP payloads.

Key specifiers come in two forms:
- bare key: `"frameId"` (same key on both sides)
- pair: `(left, right)` where one side is a nested path (list of keys)

Resolution is strict: a missing segment raises `PathMissing`. A step that cannot
find a required value is a broken definition (or an unexpected message shape),
not a control-flow condition.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

KeySpec = Any  # str | tuple[str | Sequence[str], str | Sequence[str]]
ParamsSource = Callable[[Mapping[str, Any]], Mapping[str, Any]] | Iterable[KeySpec]


class PathMissing(KeyError):
    def __init__(self, path: Sequence[Any], segment: Any) -> None:
        super().__init__(segment)
        self.path = list(path)
        self.segment = segment

    def __str__(self) -> str:
        return f"missing key {self.segment!r} in path {self.path!r}"


def as_path(path: Any) -> list[Any]:
    """Wrap a single key into a one-element path."""
    if isinstance(path, (list, tuple)):
        return list(path)
    return [path]


def fetch_path(data: Any, path: Any) -> Any:
    """Strict nested lookup (dict keys, list indexes)."""
    keys = as_path(path)
    current = data
    for key in keys:
        if isinstance(current, Mapping):
            if key not in current:
                raise PathMissing(keys, key)
            current = current[key]
        elif isinstance(current, list) and isinstance(key, int) and -len(current) <= key < len(current):
            current = current[key]
        else:
            raise PathMissing(keys, key)
    return current


def lookup_path(data: Any, path: Any, default: Any = None) -> Any:
    """Lenient nested lookup; returns `default` instead of raising."""
    try:
        return fetch_path(data, path)
    except PathMissing:
        return default


def _split_spec(spec: KeySpec) -> tuple[Any, Any]:
    if isinstance(spec, tuple):
        if len(spec) != 2:
            raise ValueError(f"Key specifier must be a key or a 2-tuple, got {spec!r}")
        return spec
    return spec, spec


def resolve_params(state: Mapping[str, Any], source: ParamsSource, defaults: Mapping[str, Any] | None) -> dict[str, Any]:
    """Compute call params: defaults overlaid with values taken from state.

    `source` is either `state -> mapping` or a list of key specifiers where a
    pair reads `(output_key, state_path)`.
    """
    params: dict[str, Any] = dict(defaults or {})
    if callable(source):
        params.update(source(state))
        return params
    for spec in source:
        name, path = _split_spec(spec)
        params[name] = fetch_path(state, path)
    return params


def extract_fields(
    msg: Mapping[str, Any],
    payload_key: str,
    put_keys: Iterable[KeySpec],
    state: Mapping[str, Any],
) -> dict[str, Any]:
    """Copy fields from `msg[payload_key]` into a new state.

    Pairs read `(payload_path, state_key)`.
    """
    new_state = dict(state)
    for spec in put_keys:
        if isinstance(spec, tuple):
            path, key = _split_spec(spec)
            new_state[key] = fetch_path(msg, [payload_key, *as_path(path)])
        else:
            new_state[spec] = fetch_path(msg, [payload_key, spec])
    return new_state


def notification_matches(state: Mapping[str, Any], msg: Mapping[str, Any], spec: KeySpec) -> bool:
    """Compare `msg.params[path]` against `state[state_key]`.

    The state side is required. A field missing from the message reads as None,
    so it matches a None-valued state key.
    """
    if isinstance(spec, tuple):
        path, key = _split_spec(spec)
    else:
        path, key = [spec], spec
    expected = fetch_path(state, key)
    return lookup_path(msg, ["params", *as_path(path)]) == expected


__all__ = [
    "KeySpec",
    "ParamsSource",
    "PathMissing",
    "as_path",
    "extract_fields",
    "fetch_path",
    "lookup_path",
    "notification_matches",
    "resolve_params",
]
