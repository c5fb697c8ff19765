from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from termsexp.declarations import Declaration, Definition, Inductive, Opaque, Theorem
from termsexp.exprs import LEAF_KINDS, App, Expr, Lam, Let, MData, Pi, Proj

Tally = Dict[Expr, int]


def _children(expr: Expr) -> Tuple[Expr, ...]:
    if isinstance(expr, App):
        return (expr.fn, expr.arg)
    if isinstance(expr, (Lam, Pi)):
        return (expr.binder_type, expr.body)
    if isinstance(expr, Let):
        return (expr.type, expr.value, expr.body)
    if isinstance(expr, MData):
        return (expr.expr,)
    if isinstance(expr, Proj):
        return (expr.struct,)
    raise TypeError(f"Unsupported term for sharing analysis: {type(expr)}")


def count_subterms(tally: Tally, expr: Expr) -> Tally:
    """Count revisits of internal nodes reachable from ``expr``.

    A node seen for the first time is recorded with count zero and its children
    are visited left to right; a node already in ``tally`` has its count bumped
    and is not descended into again, so each distinct node is expanded once no
    matter how many paths lead to it. Applications are recorded like binders,
    so ``App`` nodes appear in the tally too; leaves are not tracked. ``tally``
    is keyed by node identity and updated in place.
    """

    stack: List[Expr] = [expr]
    while stack:
        node = stack.pop()
        if node in tally:
            tally[node] += 1
            continue
        if isinstance(node, LEAF_KINDS):
            continue
        tally[node] = 0
        stack.extend(reversed(_children(node)))
    return tally


def shared_subterms(tally: Tally) -> List[Tuple[Expr, int]]:
    """Entries revisited at least once, in first-visit order."""

    return [(node, count) for node, count in tally.items() if count > 0]


@dataclass(frozen=True)
class SharingMetrics:
    """Summary of how much a term relies on structural sharing."""

    distinct: int
    shared: int
    revisits: int


def _metrics(tally: Tally) -> SharingMetrics:
    shared = shared_subterms(tally)
    return SharingMetrics(
        distinct=len(tally),
        shared=len(shared),
        revisits=sum(count for _, count in shared),
    )


def measure_sharing(expr: Expr) -> SharingMetrics:
    return _metrics(count_subterms({}, expr))


def declaration_terms(decl: Declaration) -> List[Expr]:
    """Type and value terms of a declaration, constructors included."""

    terms: List[Expr] = [decl.type]
    payload = decl.payload
    if isinstance(payload, (Definition, Theorem, Opaque)):
        terms.append(payload.value)
    elif isinstance(payload, Inductive):
        for ctor in payload.constructors:
            terms.extend(declaration_terms(ctor))
    return terms


def measure_declarations(declarations: Iterable[Declaration]) -> SharingMetrics:
    """Sharing metrics over one tally threaded through every declaration."""

    tally: Tally = {}
    for decl in declarations:
        for term in declaration_terms(decl):
            count_subterms(tally, term)
    return _metrics(tally)
