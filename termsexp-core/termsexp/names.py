from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

ANONYMOUS_HASH = 1723

Segment = Union[str, int]


def _mix(parent_hash: int, tag: str, segment: Segment) -> int:
    raw = f"{parent_hash}|{tag}|{segment}"
    return int.from_bytes(hashlib.blake2b(raw.encode(), digest_size=8).digest(), "big")


@dataclass(frozen=True)
class Name:
    """Hierarchical qualified name, a chain of segments over an anonymous root.

    ``parent`` is ``None`` only for the anonymous name. ``segment`` is a ``str``
    for string segments and an ``int`` for numeric ones. ``hash`` defaults to a
    digest of the parent hash and the segment; hosts that track provenance
    (macro scopes, private prefixes) can supply their own.
    """

    parent: Optional["Name"] = None
    segment: Optional[Segment] = None
    hash: int = ANONYMOUS_HASH

    @classmethod
    def anonymous(cls) -> "Name":
        return _ANONYMOUS

    @classmethod
    def mk_str(cls, parent: "Name", text: str, hash: int | None = None) -> "Name":
        if not isinstance(text, str):
            raise TypeError(f"string segment expected, got {type(text)}")
        digest = _mix(parent.hash, "s", text) if hash is None else hash
        return cls(parent=parent, segment=text, hash=digest)

    @classmethod
    def mk_num(cls, parent: "Name", value: int, hash: int | None = None) -> "Name":
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"numeric segment must be a non-negative int, got {value!r}")
        digest = _mix(parent.hash, "n", value) if hash is None else hash
        return cls(parent=parent, segment=value, hash=digest)

    @classmethod
    def from_components(cls, components: Iterable[Segment]) -> "Name":
        name = cls.anonymous()
        for part in components:
            name = cls.mk_num(name, part) if isinstance(part, int) else cls.mk_str(name, part)
        return name

    @classmethod
    def parse(cls, dotted: str) -> "Name":
        """Build a name from ``A.b.1`` notation; all-digit parts become numeric segments."""

        if not dotted:
            return cls.anonymous()
        parts: List[Segment] = [int(p) if p.isdigit() else p for p in dotted.split(".")]
        return cls.from_components(parts)

    @property
    def is_anonymous(self) -> bool:
        return self.parent is None

    @property
    def is_str(self) -> bool:
        return self.parent is not None and isinstance(self.segment, str)

    @property
    def is_num(self) -> bool:
        return self.parent is not None and isinstance(self.segment, int)

    def components(self) -> Tuple[Segment, ...]:
        """Segments from the root outwards."""

        parts: List[Segment] = []
        node = self
        while node.parent is not None:
            parts.append(node.segment)
            node = node.parent
        parts.reverse()
        return tuple(parts)

    def __str__(self) -> str:
        if self.is_anonymous:
            return "[anonymous]"
        return ".".join(str(part) for part in self.components())


_ANONYMOUS = Name()


def is_internal(name: Name) -> bool:
    """True when any string segment starts with ``_`` (compiler-generated)."""

    node = name
    while node.parent is not None:
        if isinstance(node.segment, str) and node.segment.startswith("_"):
            return True
        node = node.parent
    return False
