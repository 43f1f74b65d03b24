"""Protocol definitions and live protocol instances.

A `ProtocolDefinition` is immutable and built once (see `builder.ProtocolBuilder`).
`definition.new(options, session_id)` compiles it for one option set and returns a
`Protocol`: compiled steps + session state + a cursor.

Driving a `Protocol`:
- `start(dispatch, next_call_id)` runs call/output steps up to the first await;
- `feed(msg, dispatch, next_call_id)` offers one incoming message to the pending
  await step and, when the step completes, runs on to the next await.

`dispatch(call, call_id)` transmits a call. Once `finished` is true, either
`result` or `error` is set.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .compiler import Include, RawEntry, compile_steps
from .interception import validate_policies
from .steps import (
    NO_MATCH,
    PROTOCOL_KEY,
    SESSION_ID,
    Call,
    Error,
    Match,
    MatchAction,
    ProtocolError,
    State,
    Step,
    StepKind,
)

logger = logging.getLogger("cdp.pdf.protocol")

Dispatch = Callable[[Call, Any], None]


@dataclass(frozen=True, eq=False)
class ProtocolDefinition:
    name: str
    raw: tuple[RawEntry, ...]
    registry: Mapping[str, Step] = field(default_factory=dict, repr=False)

    def compile(self, options: Mapping[str, Any] | None = None) -> tuple[Step, ...]:
        return compile_steps(self.raw, dict(options or {}))

    def step(self, name: str) -> Step:
        return self.registry[name]

    def initial_state(self, options: Mapping[str, Any] | None = None, session_id: str | None = None) -> State:
        state: State = dict(options or {})
        state[PROTOCOL_KEY] = self.name
        if session_id is not None:
            state[SESSION_ID] = session_id
        return state

    @property
    def has_output(self) -> bool:
        """True when some option set compiles to an output step."""
        for entry in self.raw:
            if isinstance(entry, Step) and entry.kind is StepKind.OUTPUT:
                return True
            if isinstance(entry, Include) and entry.definition.has_output:
                return True
        return False

    def new(self, options: Mapping[str, Any] | None = None, session_id: str | None = None) -> Protocol:
        opts = dict(options or {})
        validate_policies(opts)
        return Protocol(self.name, self.compile(opts), self.initial_state(opts, session_id))


class Protocol:
    """One running instance of a definition (single-threaded)."""

    def __init__(self, name: str, steps: tuple[Step, ...], state: State) -> None:
        self.name = name
        self.steps = steps
        self.state = state
        self._cursor = 0
        self.result: Any = None
        self.error: Error | None = None
        self._failed_step: str | None = None
        self.finished = False

    @property
    def current_step(self) -> Step | None:
        if self._cursor < len(self.steps):
            return self.steps[self._cursor]
        return None

    @property
    def waiting(self) -> bool:
        step = self.current_step
        return not self.finished and step is not None and step.kind is StepKind.AWAIT

    def start(self, dispatch: Dispatch, next_call_id: Callable[[], Any]) -> Protocol:
        self._advance(dispatch, next_call_id)
        return self

    def feed(self, msg: Mapping[str, Any], dispatch: Dispatch, next_call_id: Callable[[], Any]) -> bool:
        """Offer `msg` to the pending await step. Returns True when it was consumed."""
        if not self.waiting:
            return False
        step = self.steps[self._cursor]
        outcome = step.fn(self.state, msg)
        if outcome is NO_MATCH:
            return False
        if isinstance(outcome, Error):
            self._fail(step, outcome)
            return True
        if not isinstance(outcome, Match):
            raise TypeError(f"{self.name}.{step.name} returned {outcome!r}")
        self.state = outcome.state
        if outcome.action is MatchAction.REMOVE:
            self._cursor += 1
            self._advance(dispatch, next_call_id)
        return True

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise ProtocolError(self.name, self._failed_step, self.error.reason)

    def _advance(self, dispatch: Dispatch, next_call_id: Callable[[], Any]) -> None:
        while not self.finished and self._cursor < len(self.steps):
            step = self.steps[self._cursor]
            if step.kind is StepKind.AWAIT:
                return
            if step.kind is StepKind.CALL:
                call_id = next_call_id()
                self.state, call = step.fn(self.state, call_id)
                logger.debug("%s.%s -> %s (id=%s)", self.name, step.name, call.method, call_id)
                dispatch(call, call_id)
                self._cursor += 1
            else:
                self.result = step.fn(self.state)
                self._cursor += 1
                self.finished = True
        if self._cursor >= len(self.steps):
            self.finished = True

    def _fail(self, step: Step, outcome: Error) -> None:
        self.error = outcome
        self._failed_step = step.name
        self.finished = True
        logger.debug("%s.%s failed: %s", self.name, step.name, outcome.reason)


__all__ = ["Dispatch", "Protocol", "ProtocolDefinition"]
