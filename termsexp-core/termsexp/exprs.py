"""Immutable term IR as handed over by the elaborator.

Nodes compare and hash by identity (``eq=False``): the same subterm object may
be reachable from several parents, and analyses key on that object rather than
on a deep structural comparison.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple, Union

from termsexp.levels import Level
from termsexp.names import Name


@dataclass(frozen=True, eq=False)
class BVar:
    """Bound variable, a de Bruijn index counting binders outward."""

    index: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError("De Bruijn indices must be non-negative")


@dataclass(frozen=True, eq=False)
class FVar:
    name: Name


@dataclass(frozen=True, eq=False)
class MVar:
    name: Name


@dataclass(frozen=True, eq=False)
class Sort:
    level: Level


@dataclass(frozen=True, eq=False)
class Const:
    name: Name
    levels: Tuple[Level, ...] = ()


@dataclass(frozen=True, eq=False)
class App:
    fn: "Expr"
    arg: "Expr"


@dataclass(frozen=True, eq=False)
class Lam:
    """Lambda abstraction. Binder name and info are carried but never encoded."""

    binder_type: "Expr"
    body: "Expr"
    binder_name: Name = Name()


@dataclass(frozen=True, eq=False)
class Pi:
    binder_type: "Expr"
    body: "Expr"
    binder_name: Name = Name()


@dataclass(frozen=True, eq=False)
class Let:
    type: "Expr"
    value: "Expr"
    body: "Expr"
    decl_name: Name = Name()


@dataclass(frozen=True, eq=False)
class NatLit:
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or self.value < 0:
            raise ValueError(f"natural literal must be non-negative, got {self.value!r}")


@dataclass(frozen=True, eq=False)
class StrLit:
    value: str


@dataclass(frozen=True, eq=False)
class MData:
    """Metadata annotation; semantically inert."""

    expr: "Expr"
    data: Tuple[Tuple[str, object], ...] = ()


@dataclass(frozen=True, eq=False)
class Proj:
    type_name: Name
    index: int
    struct: "Expr"


Expr = Union[BVar, FVar, MVar, Sort, Const, App, Lam, Pi, Let, NatLit, StrLit, MData, Proj]

LEAF_KINDS = (BVar, FVar, MVar, Sort, Const, NatLit, StrLit)


def mk_app(fn: Expr, *args: Expr) -> Expr:
    """Left-nested application ``fn a1 ... an``."""

    result = fn
    for arg in args:
        result = App(result, arg)
    return result


def app_spine(expr: Expr) -> Tuple[Expr, List[Expr]]:
    """Split ``f a1 ... an`` into ``f`` and ``[a1, ..., an]``."""

    args: List[Expr] = []
    while isinstance(expr, App):
        args.append(expr.arg)
        expr = expr.fn
    args.reverse()
    return expr, args
