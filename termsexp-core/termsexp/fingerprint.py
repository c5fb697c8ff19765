from __future__ import annotations

import hashlib
from typing import Iterable

from termsexp.declarations import Declaration
from termsexp.export import declaration_to_sexp
from termsexp.sexp import Value, render


def _hash_components(parts: Iterable[str]) -> str:
    raw = "|".join(parts)
    return hashlib.sha256(raw.encode()).hexdigest()[:16]


def fingerprint_value(value: Value) -> str:
    """Deterministic digest of the rendered encoding."""

    return _hash_components([render(value)])


def fingerprint_declaration(decl: Declaration) -> str:
    return _hash_components(["definition", render(declaration_to_sexp(decl))])


def fingerprint_declarations(declarations: Iterable[Declaration]) -> str:
    """Order-sensitive digest over a declaration table."""

    return _hash_components(["declarations", *(fingerprint_declaration(decl) for decl in declarations)])
