from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

from termsexp.exprs import Expr
from termsexp.names import Name


class QuotKind(Enum):
    TYPE = "type"
    CTOR = "ctor"
    LIFT = "lift"
    IND = "ind"


@dataclass(frozen=True)
class Axiom:
    pass


@dataclass(frozen=True)
class Definition:
    value: Expr


@dataclass(frozen=True)
class Theorem:
    value: Expr


@dataclass(frozen=True)
class Opaque:
    value: Expr


@dataclass(frozen=True)
class QuotInfo:
    kind: QuotKind
    type_name: Name


@dataclass(frozen=True)
class Inductive:
    constructors: Tuple["Declaration", ...] = ()


@dataclass(frozen=True)
class Constructor:
    induct: Name


@dataclass(frozen=True)
class Recursor:
    pass


Payload = Union[Axiom, Definition, Theorem, Opaque, QuotInfo, Inductive, Constructor, Recursor]

PAYLOAD_KINDS = {
    Axiom: "axiom",
    Definition: "definition",
    Theorem: "theorem",
    Opaque: "opaque",
    QuotInfo: "quot",
    Inductive: "inductive",
    Constructor: "constructor",
    Recursor: "recursor",
}


@dataclass(frozen=True)
class Declaration:
    """One compiled constant: name, type and kind-specific payload."""

    name: Name
    type: Expr
    payload: Payload

    @property
    def kind(self) -> str:
        try:
            return PAYLOAD_KINDS[type(self.payload)]
        except KeyError as exc:
            raise TypeError(f"Unsupported declaration payload: {type(self.payload)}") from exc


@dataclass(frozen=True)
class Module:
    """A module's declaration table, in the host's iteration order."""

    name: Name
    declarations: List[Declaration]
