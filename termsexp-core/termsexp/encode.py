from __future__ import annotations

from typing import List, Tuple

from termsexp.exprs import (
    App,
    BVar,
    Const,
    Expr,
    FVar,
    Lam,
    Let,
    MData,
    MVar,
    NatLit,
    Pi,
    Proj,
    Sort,
    StrLit,
    app_spine,
)
from termsexp.levels import Level, LevelIMax, LevelMax, LevelMVar, LevelParam, LevelSucc, LevelZero
from termsexp.names import Name
from termsexp.sexp import Atom, IntLit, StringLit, Value, seq, tagged


def _segment_to_sexp(name: Name) -> Value:
    if isinstance(name.segment, int):
        # Numeric segments get a marker so they never read like a string segment.
        return Atom(f"#{name.segment}")
    return StringLit(name.segment)


def name_to_sexp(name: Name) -> Value:
    """Encode a qualified name as ``(:name parent-hash hash seg ...)``.

    The two hashes belong to the outermost segment and its parent chain, so two
    names that print the same but were built with different hashes stay
    distinct. Segments follow, root first.
    """

    if name.is_anonymous:
        return tagged("anonymous")

    segments: List[Value] = []
    node = name
    while not node.is_anonymous:
        segments.append(_segment_to_sexp(node))
        node = node.parent
    segments.reverse()
    return tagged("name", IntLit(name.parent.hash), IntLit(name.hash), *segments)


def _level_body(level: Level) -> Value:
    if isinstance(level, LevelZero):
        return tagged("lzero")
    if isinstance(level, LevelSucc):
        return tagged("lsucc", _level_body(level.level))
    if isinstance(level, LevelMax):
        return tagged("max", _level_body(level.lhs), _level_body(level.rhs))
    if isinstance(level, LevelIMax):
        return tagged("imax", _level_body(level.lhs), _level_body(level.rhs))
    if isinstance(level, (LevelParam, LevelMVar)):
        return name_to_sexp(level.name)
    raise TypeError(f"Unsupported universe level: {type(level)}")


def level_to_sexp(level: Level) -> Value:
    """Encode a universe level, wrapped once in ``(:level ...)``."""

    return tagged("level", _level_body(level))


def _spine(expr: App) -> Tuple[Expr, List[Expr]]:
    # Metadata around a partial application must not split the spine.
    args: List[Expr] = []
    fn: Expr = expr
    while True:
        fn, more = app_spine(fn)
        args[:0] = more
        if not isinstance(fn, MData):
            return fn, args
        while isinstance(fn, MData):
            fn = fn.expr


def expr_to_sexp(expr: Expr) -> Value:
    """Encode a term. Application spines are flattened, metadata is dropped."""

    while isinstance(expr, MData):
        expr = expr.expr

    if isinstance(expr, BVar):
        return tagged("var", IntLit(expr.index))
    if isinstance(expr, FVar):
        return name_to_sexp(expr.name)
    if isinstance(expr, MVar):
        return tagged("meta", name_to_sexp(expr.name))
    if isinstance(expr, Sort):
        return tagged("sort", level_to_sexp(expr.level))
    if isinstance(expr, Const):
        return tagged(
            "const",
            name_to_sexp(expr.name),
            seq([level_to_sexp(level) for level in expr.levels]),
        )
    if isinstance(expr, App):
        fn, args = _spine(expr)
        return tagged("apply", expr_to_sexp(fn), *(expr_to_sexp(arg) for arg in args))
    if isinstance(expr, Lam):
        return tagged("lambda", expr_to_sexp(expr.binder_type), expr_to_sexp(expr.body))
    if isinstance(expr, Pi):
        return tagged("pi", expr_to_sexp(expr.binder_type), expr_to_sexp(expr.body))
    if isinstance(expr, Let):
        return tagged(
            "let",
            expr_to_sexp(expr.type),
            expr_to_sexp(expr.value),
            expr_to_sexp(expr.body),
        )
    if isinstance(expr, NatLit):
        return tagged("literal", IntLit(expr.value))
    if isinstance(expr, StrLit):
        return tagged("literal", StringLit(expr.value))
    if isinstance(expr, Proj):
        return tagged(
            "proj",
            name_to_sexp(expr.type_name),
            IntLit(expr.index),
            expr_to_sexp(expr.struct),
        )
    raise TypeError(f"Unsupported term for encoding: {type(expr)}")
