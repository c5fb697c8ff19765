"""Rebuild a module from a JSON dump.

The dump stores names, levels and terms as id-keyed record tables, children
referencing each other by id::

    {
      "module": "n2",
      "names":  {"n1": {"str": "Nat"}, "n2": {"parent": "n1", "str": "add"}},
      "levels": {"l0": {"kind": "zero"}},
      "exprs":  {"e0": {"kind": "sort", "level": "l0"}},
      "declarations": [{"name": "n1", "type": "e0", "kind": "axiom"}]
    }

Each record is materialized once, so a subterm referenced from several parents
becomes one shared object in memory.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Set, Tuple

from termsexp.declarations import (
    Axiom,
    Constructor,
    Declaration,
    Definition,
    Inductive,
    Module,
    Opaque,
    Payload,
    QuotInfo,
    QuotKind,
    Recursor,
    Theorem,
)
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
)
from termsexp.levels import Level, LevelIMax, LevelMax, LevelMVar, LevelParam, LevelSucc, LevelZero
from termsexp.names import Name


class ModuleFormatError(ValueError):
    """Raised when a module dump is malformed."""


class _Materializer:
    def __init__(self, payload: Mapping[str, Any]):
        self.names: Mapping[str, Mapping[str, Any]] = self._table(payload, "names")
        self.levels: Mapping[str, Mapping[str, Any]] = self._table(payload, "levels")
        self.exprs: Mapping[str, Mapping[str, Any]] = self._table(payload, "exprs")
        self._cache: Dict[Tuple[str, str], object] = {}
        self._resolving: Set[Tuple[str, str]] = set()

    @staticmethod
    def _table(payload: Mapping[str, Any], key: str) -> Mapping[str, Mapping[str, Any]]:
        table = payload.get(key, {})
        if not isinstance(table, Mapping):
            raise ModuleFormatError(f"'{key}' must be an object keyed by record id")
        return table

    def _resolve(self, table: str, ref: Any, build: Callable[[str, Mapping[str, Any]], object]) -> Any:
        ref = str(ref)
        key = (table, ref)
        if key in self._cache:
            return self._cache[key]
        records = getattr(self, table)
        if ref not in records:
            raise ModuleFormatError(f"unknown {table} id {ref!r}")
        if key in self._resolving:
            raise ModuleFormatError(f"cyclic {table} record {ref!r}")
        self._resolving.add(key)
        try:
            value = build(ref, records[ref])
        except ModuleFormatError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ModuleFormatError(f"malformed {table} record {ref!r}: {exc}") from exc
        finally:
            self._resolving.discard(key)
        self._cache[key] = value
        return value

    def name(self, ref: Any) -> Name:
        if ref is None:
            return Name.anonymous()
        return self._resolve("names", ref, self._build_name)

    def _build_name(self, ref: str, record: Mapping[str, Any]) -> Name:
        parent = self.name(record.get("parent"))
        digest = record.get("hash")
        if digest is not None:
            digest = int(digest)
        if "str" in record:
            return Name.mk_str(parent, record["str"], hash=digest)
        if "num" in record:
            try:
                return Name.mk_num(parent, int(record["num"]), hash=digest)
            except ValueError as exc:
                raise ModuleFormatError(f"names record {ref!r}: {exc}") from exc
        if "parent" in record:
            raise ModuleFormatError(f"names record {ref!r} has a parent but no segment")
        return Name.anonymous()

    def level(self, ref: Any) -> Level:
        return self._resolve("levels", ref, self._build_level)

    def _build_level(self, ref: str, record: Mapping[str, Any]) -> Level:
        kind = record["kind"]
        if kind == "zero":
            return LevelZero()
        if kind == "succ":
            return LevelSucc(self.level(record["of"]))
        if kind == "max":
            return LevelMax(self.level(record["lhs"]), self.level(record["rhs"]))
        if kind == "imax":
            return LevelIMax(self.level(record["lhs"]), self.level(record["rhs"]))
        if kind == "param":
            return LevelParam(self.name(record["name"]))
        if kind == "mvar":
            return LevelMVar(self.name(record["name"]))
        raise ModuleFormatError(f"levels record {ref!r} has unknown kind {kind!r}")

    def expr(self, ref: Any) -> Expr:
        ref = str(ref)
        if ("exprs", ref) not in self._cache and self._is_app(ref):
            return self._build_spine(ref)
        return self._resolve("exprs", ref, self._build_expr)

    def _is_app(self, ref: str) -> bool:
        record = self.exprs.get(ref)
        return isinstance(record, Mapping) and record.get("kind") == "app"

    def _build_spine(self, ref: str) -> Expr:
        # Walk the fn chain down to its head, then fold the arguments back up
        # so a long spine costs no stack.
        chain: List[str] = []
        seen: Set[str] = set()
        head = ref
        while ("exprs", head) not in self._cache and self._is_app(head):
            if head in seen or ("exprs", head) in self._resolving:
                raise ModuleFormatError(f"cyclic exprs record {head!r}")
            chain.append(head)
            seen.add(head)
            try:
                head = str(self.exprs[head]["fn"])
            except KeyError as exc:
                raise ModuleFormatError(f"malformed exprs record {head!r}: {exc}") from exc

        keys = {("exprs", link) for link in chain}
        self._resolving.update(keys)
        try:
            node = self.expr(head)
            for link in reversed(chain):
                try:
                    arg = self.exprs[link]["arg"]
                except KeyError as exc:
                    raise ModuleFormatError(f"malformed exprs record {link!r}: {exc}") from exc
                node = App(node, self.expr(arg))
                self._cache[("exprs", link)] = node
                self._resolving.discard(("exprs", link))
        finally:
            self._resolving.difference_update(keys)
        return node

    def _build_expr(self, ref: str, record: Mapping[str, Any]) -> Expr:
        kind = record["kind"]
        if kind == "bvar":
            try:
                return BVar(int(record["index"]))
            except ValueError as exc:
                raise ModuleFormatError(f"exprs record {ref!r}: {exc}") from exc
        if kind == "fvar":
            return FVar(self.name(record["name"]))
        if kind == "mvar":
            return MVar(self.name(record["name"]))
        if kind == "sort":
            return Sort(self.level(record["level"]))
        if kind == "const":
            levels = tuple(self.level(level) for level in record.get("levels", ()))
            return Const(self.name(record["name"]), levels)
        if kind == "lam":
            return Lam(self.expr(record["type"]), self.expr(record["body"]), self.name(record.get("binder")))
        if kind == "pi":
            return Pi(self.expr(record["type"]), self.expr(record["body"]), self.name(record.get("binder")))
        if kind == "let":
            return Let(
                self.expr(record["type"]),
                self.expr(record["value"]),
                self.expr(record["body"]),
                self.name(record.get("binder")),
            )
        if kind == "natlit":
            try:
                return NatLit(int(record["value"]))
            except ValueError as exc:
                raise ModuleFormatError(f"exprs record {ref!r}: {exc}") from exc
        if kind == "strlit":
            return StrLit(str(record["value"]))
        if kind == "mdata":
            data = tuple(sorted((str(k), v) for k, v in record.get("data", {}).items()))
            return MData(self.expr(record["expr"]), data)
        if kind == "proj":
            return Proj(self.name(record["type_name"]), int(record["index"]), self.expr(record["struct"]))
        raise ModuleFormatError(f"exprs record {ref!r} has unknown kind {kind!r}")

    def declaration(self, record: Mapping[str, Any]) -> Declaration:
        try:
            name = self.name(record["name"])
            type_ = self.expr(record["type"])
            payload = self._payload(record)
        except KeyError as exc:
            raise ModuleFormatError(f"declaration missing field {exc}") from exc
        return Declaration(name=name, type=type_, payload=payload)

    def _payload(self, record: Mapping[str, Any]) -> Payload:
        kind = record["kind"]
        if kind == "axiom":
            return Axiom()
        if kind == "definition":
            return Definition(self.expr(record["value"]))
        if kind == "theorem":
            return Theorem(self.expr(record["value"]))
        if kind == "opaque":
            return Opaque(self.expr(record["value"]))
        if kind == "quot":
            try:
                quot_kind = QuotKind(record["quot_kind"])
            except ValueError as exc:
                raise ModuleFormatError(f"unknown quotient kind {record['quot_kind']!r}") from exc
            return QuotInfo(quot_kind, self.name(record["type_name"]))
        if kind == "inductive":
            return Inductive(tuple(self.declaration(ctor) for ctor in record.get("constructors", ())))
        if kind == "constructor":
            return Constructor(self.name(record["induct"]))
        if kind == "recursor":
            return Recursor()
        raise ModuleFormatError(f"unknown declaration kind {kind!r}")


def load_module(payload: Mapping[str, Any]) -> Module:
    """Materialize a ``Module`` from a JSON-ready mapping."""

    if not isinstance(payload, Mapping):
        raise ModuleFormatError("module dump must be a JSON object")
    materializer = _Materializer(payload)
    name = materializer.name(payload.get("module"))
    records = payload.get("declarations", [])
    if not isinstance(records, list):
        raise ModuleFormatError("'declarations' must be a list")
    declarations: List[Declaration] = [materializer.declaration(record) for record in records]
    return Module(name=name, declarations=declarations)


def load_module_file(path: str | Path) -> Module:
    target = Path(path)
    if not target.exists():
        raise FileNotFoundError(path)
    return load_module(json.loads(target.read_text(encoding="utf-8")))
