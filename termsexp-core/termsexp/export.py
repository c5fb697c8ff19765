from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Union

from termsexp.declarations import (
    Axiom,
    Constructor,
    Declaration,
    Definition,
    Inductive,
    Module,
    Opaque,
    QuotInfo,
    Recursor,
    Theorem,
)
from termsexp.encode import expr_to_sexp, name_to_sexp
from termsexp.names import Name, is_internal
from termsexp.sexp import Atom, Value, render, seq, tagged

InternalPredicate = Callable[[Name], bool]


def _payload_to_sexp(decl: Declaration) -> Value:
    payload = decl.payload
    if isinstance(payload, Axiom):
        return tagged("axiom")
    if isinstance(payload, (Definition, Theorem)):
        return tagged("function", expr_to_sexp(payload.value))
    if isinstance(payload, Opaque):
        return tagged("abstract", expr_to_sexp(payload.value))
    if isinstance(payload, QuotInfo):
        return tagged("quot-info", Atom(payload.kind.value), name_to_sexp(payload.type_name))
    if isinstance(payload, Inductive):
        return tagged(
            "data",
            expr_to_sexp(decl.type),
            seq([declaration_to_sexp(ctor) for ctor in payload.constructors]),
        )
    if isinstance(payload, Constructor):
        return tagged("constructor", name_to_sexp(payload.induct))
    if isinstance(payload, Recursor):
        return tagged("recursor", expr_to_sexp(decl.type))
    raise TypeError(f"Unsupported declaration payload: {type(payload)}")


def declaration_to_sexp(decl: Declaration) -> Value:
    """Encode ``(:definition name type payload)``."""

    return tagged("definition", name_to_sexp(decl.name), expr_to_sexp(decl.type), _payload_to_sexp(decl))


def is_visible(name: Name, internal: InternalPredicate = is_internal) -> bool:
    """Anonymous and numeric-headed names are always kept; string-headed ones unless internal."""

    if name.is_anonymous or name.is_num:
        return True
    return not internal(name)


def module_to_sexp(
    name: Name,
    declarations: Iterable[Declaration],
    internal: InternalPredicate = is_internal,
) -> Value:
    """Encode a module, keeping visible declarations in table order."""

    kept = [declaration_to_sexp(decl) for decl in declarations if is_visible(decl.name, internal)]
    return tagged("module", tagged("module-name", name_to_sexp(name)), *kept)


@dataclass(frozen=True)
class ExportOptions:
    include_internal: bool = False


@dataclass
class ExportEvent:
    """Outcome for one declaration of the module being exported."""

    module: Name
    name: Name
    kind: str
    kept: bool
    length: int = 0

    def to_record(self) -> Dict[str, object]:
        """JSON-ready event representation for tracing."""

        return {
            "event": "declaration",
            "module": str(self.module),
            "name": str(self.name),
            "kind": self.kind,
            "status": "kept" if self.kept else "skipped",
            "length": self.length,
        }


@dataclass
class ModuleEvent:
    """Brackets the declaration events of one export; ``end`` carries the stats."""

    module: Name
    phase: str
    stats: Dict[str, object] = field(default_factory=dict)

    def to_record(self) -> Dict[str, object]:
        return {"event": f"module-{self.phase}", "module": str(self.module), **self.stats}


EventHook = Callable[[Union[ExportEvent, ModuleEvent]], None]


class ModuleExporter:
    """Module encoder that reports each declaration to event hooks.

    Hooks see a ``ModuleEvent`` with phase ``begin``, one ``ExportEvent`` per
    declaration in table order, then a ``ModuleEvent`` with phase ``end``.
    """

    def __init__(
        self,
        internal: InternalPredicate = is_internal,
        options: ExportOptions | None = None,
        event_hooks: Optional[List[EventHook]] = None,
    ):
        self.internal = internal
        self.options = options if options is not None else ExportOptions()
        self.event_hooks: List[EventHook] = event_hooks or []
        self.events: List[ExportEvent] = []
        self.kind_counts: Dict[str, int] = {}

    def _keep(self, decl: Declaration) -> bool:
        return self.options.include_internal or is_visible(decl.name, self.internal)

    def _notify(self, event: ExportEvent | ModuleEvent) -> None:
        if isinstance(event, ExportEvent):
            self.events.append(event)
        for hook in self.event_hooks:
            hook(event)

    def export(self, module: Module) -> Value:
        self.events.clear()
        self.kind_counts.clear()
        self._notify(ModuleEvent(module=module.name, phase="begin"))

        kept: List[Value] = []
        for decl in module.declarations:
            if not self._keep(decl):
                self._notify(ExportEvent(module=module.name, name=decl.name, kind=decl.kind, kept=False))
                continue
            encoded = declaration_to_sexp(decl)
            kept.append(encoded)
            self.kind_counts[decl.kind] = self.kind_counts.get(decl.kind, 0) + 1
            self._notify(
                ExportEvent(
                    module=module.name,
                    name=decl.name,
                    kind=decl.kind,
                    kept=True,
                    length=len(render(encoded)),
                )
            )

        self._notify(ModuleEvent(module=module.name, phase="end", stats=self.stats()))
        return tagged("module", tagged("module-name", name_to_sexp(module.name)), *kept)

    def stats(self) -> Dict[str, object]:
        kept = sum(1 for ev in self.events if ev.kept)
        return {
            "declarations": len(self.events),
            "kept": kept,
            "skipped": len(self.events) - kept,
            "kind_counts": dict(sorted(self.kind_counts.items())),
        }
