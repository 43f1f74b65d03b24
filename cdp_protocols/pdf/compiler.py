"""Flatten a raw definition into an ordered tuple of steps for one option set.

Raw sequences hold `Step` records plus three markers:
- `IfOption(key)` / `IfOption(key, values)` opens a guarded block,
- `EndIf()` closes the innermost open block,
- `Include(definition)` splices another definition compiled with the same options.

A failed guard skips to its matching `EndIf` (nested blocks are bracket-matched).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .steps import DefinitionError, Step

if TYPE_CHECKING:
    from .protocol import ProtocolDefinition

ANY_VALUE = object()


@dataclass(slots=True, frozen=True)
class IfOption:
    key: str
    values: Any = ANY_VALUE

    def allows(self, options: Mapping[str, Any]) -> bool:
        if self.key not in options:
            return False
        if self.values is ANY_VALUE:
            return True
        return options[self.key] in as_value_set(self.values)


@dataclass(slots=True, frozen=True)
class EndIf:
    pass


@dataclass(slots=True, frozen=True)
class Include:
    definition: ProtocolDefinition


RawEntry = Step | IfOption | EndIf | Include


def as_value_set(values: Any) -> tuple[Any, ...]:
    """A single value is a one-element set."""
    if isinstance(values, (list, tuple, set, frozenset)):
        return tuple(values)
    return (values,)


def _skip_block(raw: Sequence[RawEntry], index: int) -> int:
    """Return the index just past the `EndIf` matching the block opened before `index`."""
    depth = 1
    while index < len(raw):
        entry = raw[index]
        index += 1
        if isinstance(entry, IfOption):
            depth += 1
        elif isinstance(entry, EndIf):
            depth -= 1
            if depth == 0:
                return index
    raise DefinitionError("Unterminated if_option block")


def compile_steps(raw: Sequence[RawEntry], options: Mapping[str, Any]) -> tuple[Step, ...]:
    acc: list[Step] = []
    index = 0
    while index < len(raw):
        entry = raw[index]
        index += 1
        if isinstance(entry, Step):
            acc.append(entry)
        elif isinstance(entry, IfOption):
            if not entry.allows(options):
                index = _skip_block(raw, index)
        elif isinstance(entry, EndIf):
            continue
        elif isinstance(entry, Include):
            acc.extend(entry.definition.compile(options))
        else:
            raise DefinitionError(f"Unknown definition entry: {entry!r}")
    return tuple(acc)


__all__ = ["ANY_VALUE", "EndIf", "IfOption", "Include", "RawEntry", "as_value_set", "compile_steps"]
