"""Broadcast target specs.

    TargetSpec = Single(module) | Named(name) | Pattern(regex) | Many(specs)

``as_target`` converts the loose values application code passes to
``notify`` (module, name, compiled regex, list/tuple) into a spec. Anything
else becomes ``Single``; the dispatcher checks the whole spec and rejects
any ``Single`` that is not a real module before invoking anything.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Tuple, Union


@dataclass(frozen=True, slots=True)
class Single:
    module: Any


@dataclass(frozen=True, slots=True)
class Named:
    name: str


@dataclass(frozen=True, slots=True)
class Pattern:
    regex: re.Pattern

    @classmethod
    def compile(cls, pattern: str, flags: int = 0) -> "Pattern":
        return cls(re.compile(pattern, flags))

    def matches(self, name: str) -> bool:
        return self.regex.search(name) is not None


@dataclass(frozen=True, slots=True)
class Many:
    items: Tuple["TargetSpec", ...]

    @classmethod
    def of(cls, items: Iterable[Any]) -> "Many":
        return cls(tuple(as_target(i) for i in items))


TargetSpec = Union[Single, Named, Pattern, Many]

# Default notify target: every registered module, the caller included.
ALL = Pattern(re.compile(".*"))


def as_target(target: Any) -> TargetSpec:
    if isinstance(target, (Single, Named, Pattern, Many)):
        return target
    if isinstance(target, str):
        return Named(target)
    if isinstance(target, re.Pattern):
        return Pattern(target)
    if isinstance(target, (list, tuple)):
        return Many.of(target)
    return Single(target)


def target_kind(spec: TargetSpec) -> str:
    return type(spec).__name__.lower()


__all__ = [
    "ALL",
    "Many",
    "Named",
    "Pattern",
    "Single",
    "TargetSpec",
    "as_target",
    "target_kind",
]
