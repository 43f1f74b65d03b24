"""Declarative surface for authoring protocol definitions.

Example:

    b = ProtocolBuilder("print_to_pdf")
    b.include(navigate.DEFINITION)
    b.call("print_to_pdf", "Page.printToPDF", lambda s: s.get("print_to_pdf", {}))
    b.await_response("printed", ["data"])
    with b.if_option("landscape"):
        ...
    b.output("data")
    DEFINITION = b.build()

`build()` validates that conditional blocks are balanced and step names unique.
An output step (own or from an included definition) must come last.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from .compiler import ANY_VALUE, EndIf, IfOption, Include, RawEntry
from .params import KeySpec, ParamsSource
from .protocol import ProtocolDefinition
from .step_factories import (
    AwaitFn,
    ResponseCallback,
    await_notification_step,
    await_response_step,
    await_step,
    call_step,
    output_step,
)
from .steps import DefinitionError, Step, StepKind


class ProtocolBuilder:
    def __init__(self, name: str) -> None:
        self.name = name
        self._raw: list[RawEntry] = []
        self._registry: dict[str, Step] = {}
        self._open_blocks = 0
        self._built = False
        self._output_step: str | None = None

    def _add(self, step: Step) -> ProtocolBuilder:
        if self._built:
            raise DefinitionError(f"{self.name}: builder already built")
        self._check_not_after_output(step.name)
        if step.name in self._registry:
            raise DefinitionError(f"{self.name}: duplicate step name {step.name!r}")
        self._registry[step.name] = step
        self._raw.append(step)
        if step.kind is StepKind.OUTPUT:
            self._output_step = step.name
        return self

    def _check_not_after_output(self, what: str) -> None:
        if self._output_step is not None:
            raise DefinitionError(f"{self.name}: {what!r} follows output step {self._output_step!r}")

    def call(
        self,
        name: str,
        method: str,
        params: ParamsSource = (),
        defaults: Mapping[str, Any] | None = None,
    ) -> ProtocolBuilder:
        return self._add(call_step(name, method, params, defaults))

    def await_response(
        self,
        name: str,
        put_keys: Iterable[KeySpec] = (),
        callback: ResponseCallback | None = None,
    ) -> ProtocolBuilder:
        return self._add(await_response_step(name, put_keys, callback))

    def await_notification(
        self,
        name: str,
        method: str,
        match_keys: Iterable[KeySpec] = (),
        put_keys: Iterable[KeySpec] = (),
    ) -> ProtocolBuilder:
        return self._add(await_notification_step(name, method, match_keys, put_keys))

    def await_step(self, name: str, fn: AwaitFn) -> ProtocolBuilder:
        """Custom matcher; still runs behind the interception chain."""
        return self._add(await_step(name, fn))

    def output(self, keys: str | Sequence[str]) -> ProtocolBuilder:
        return self._add(output_step(keys))

    def begin_if(self, key: str, values: Any = ANY_VALUE) -> ProtocolBuilder:
        self._raw.append(IfOption(key, values))
        self._open_blocks += 1
        return self

    def end_if(self) -> ProtocolBuilder:
        if self._open_blocks == 0:
            raise DefinitionError(f"{self.name}: end_if without matching if_option")
        self._raw.append(EndIf())
        self._open_blocks -= 1
        return self

    @contextmanager
    def if_option(self, key: str, values: Any = ANY_VALUE) -> Iterator[ProtocolBuilder]:
        self.begin_if(key, values)
        yield self
        self.end_if()

    def include(self, definition: ProtocolDefinition) -> ProtocolBuilder:
        if definition.name == self.name:
            raise DefinitionError(f"{self.name}: a protocol cannot include itself")
        self._check_not_after_output(f"include {definition.name}")
        self._raw.append(Include(definition))
        if definition.has_output:
            self._output_step = f"{definition.name}.output"
        return self

    def build(self) -> ProtocolDefinition:
        if self._open_blocks:
            raise DefinitionError(f"{self.name}: {self._open_blocks} unterminated if_option block(s)")
        self._built = True
        return ProtocolDefinition(self.name, tuple(self._raw), dict(self._registry))


__all__ = ["ProtocolBuilder"]
