from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

_ATOM_FORBIDDEN = re.compile(r'[\s()"]')


@dataclass(frozen=True)
class Atom:
    """Bare symbol, printed verbatim."""

    text: str

    def __post_init__(self) -> None:
        if not self.text or _ATOM_FORBIDDEN.search(self.text):
            raise ValueError(f"atom must be non-empty without spaces, quotes or parens: {self.text!r}")


@dataclass(frozen=True)
class StringLit:
    text: str


@dataclass(frozen=True)
class IntLit:
    value: int


@dataclass(frozen=True)
class FloatLit:
    value: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.value):
            raise ValueError(f"float literal must be finite, got {self.value}")


@dataclass(frozen=True)
class Tagged:
    """Parenthesized sequence; ``(:head field ...)`` by convention."""

    items: Tuple["Value", ...] = ()

    @property
    def head(self) -> str | None:
        if self.items and isinstance(self.items[0], Atom) and self.items[0].text.startswith(":"):
            return self.items[0].text[1:]
        return None

    @property
    def fields(self) -> Tuple["Value", ...]:
        return self.items[1:] if self.head is not None else self.items


Value = Union[Atom, StringLit, IntLit, FloatLit, Tagged]


def tagged(head: str, *fields: Value) -> Tagged:
    """Build the constructor application ``(:head fields...)``."""

    return Tagged((Atom(":" + head), *fields))


def seq(values: Sequence[Value]) -> Tagged:
    """Untagged list, used for level argument and constructor lists."""

    return Tagged(tuple(values))


def render(value: Value) -> str:
    """Render a value as a single-line prefix s-expression."""

    out: List[str] = []
    _emit(value, out)
    return "".join(out)


def _emit(value: Value, out: List[str]) -> None:
    if isinstance(value, Tagged):
        out.append("(")
        for idx, item in enumerate(value.items):
            if idx:
                out.append(" ")
            _emit(item, out)
        out.append(")")
    elif isinstance(value, Atom):
        out.append(value.text)
    elif isinstance(value, StringLit):
        out.append(json.dumps(value.text, ensure_ascii=True))
    elif isinstance(value, IntLit):
        out.append(str(int(value.value)))
    elif isinstance(value, FloatLit):
        out.append(repr(float(value.value)))
    else:
        raise TypeError(f"Unsupported value for rendering: {type(value)}")
