"""Step records, match results and error types shared by the engine."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

State = dict[str, Any]

SESSION_ID = "sessionId"
LAST_CALL_ID = "last_call_id"
PROTOCOL_KEY = "__protocol__"


class StepKind(str, Enum):
    CALL = "call"
    AWAIT = "await"
    OUTPUT = "output"


@dataclass(slots=True, frozen=True)
class Step:
    """One compiled unit: issue a call, await a message, or produce output."""

    kind: StepKind
    name: str
    arity: int
    fn: Callable[..., Any] = field(compare=False, repr=False)


@dataclass(slots=True, frozen=True)
class Call:
    """Outgoing JSON-RPC request, optionally scoped to a flat CDP session."""

    method: str
    params: dict[str, Any]
    session_id: str | None = None

    def as_tuple(self) -> tuple[Any, ...]:
        if self.session_id is None:
            return (self.method, self.params)
        return (self.session_id, self.method, self.params)

    def to_message(self, call_id: Any) -> dict[str, Any]:
        msg: dict[str, Any] = {"id": call_id, "method": self.method, "params": self.params}
        if self.session_id is not None:
            msg["sessionId"] = self.session_id
        return msg


class MatchAction(str, Enum):
    REMOVE = "remove"  # step done, advance
    KEEP = "keep"  # message consumed, step still pending


class NoMatch:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_MATCH"

    def __bool__(self) -> bool:
        return False


NO_MATCH = NoMatch()


@dataclass(slots=True, frozen=True)
class Match:
    action: MatchAction
    state: State = field(repr=False)

    @classmethod
    def remove(cls, state: State) -> Match:
        return cls(MatchAction.REMOVE, state)

    @classmethod
    def keep(cls, state: State) -> Match:
        return cls(MatchAction.KEEP, state)


@dataclass(slots=True, frozen=True)
class Error:
    """Protocol-level failure; `reason["kind"]` names the failure class."""

    reason: dict[str, Any]

    @property
    def kind(self) -> str:
        return str(self.reason.get("kind") or "error")


MatchResult = NoMatch | Match | Error


class DefinitionError(ValueError):
    """Malformed protocol definition (detected when the definition is built)."""


@dataclass
class ProtocolError(Exception):
    """Terminal failure of a protocol instance, surfaced by the driver."""

    protocol: str
    step: str | None
    reason: dict[str, Any]

    def __str__(self) -> str:
        where = f"{self.protocol}.{self.step}" if self.step else self.protocol
        return f"[{where}] {self.reason.get('kind', 'error')}: {self.reason}"

    @property
    def kind(self) -> str:
        return str(self.reason.get("kind") or "error")


class ProtocolTimeout(ProtocolError):
    pass


__all__ = [
    "LAST_CALL_ID",
    "NO_MATCH",
    "PROTOCOL_KEY",
    "SESSION_ID",
    "Call",
    "DefinitionError",
    "Error",
    "Match",
    "MatchAction",
    "MatchResult",
    "NoMatch",
    "ProtocolError",
    "ProtocolTimeout",
    "State",
    "Step",
    "StepKind",
]
