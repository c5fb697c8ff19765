from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from termsexp.names import Name


@dataclass(frozen=True)
class LevelZero:
    pass


@dataclass(frozen=True)
class LevelSucc:
    level: "Level"


@dataclass(frozen=True)
class LevelMax:
    lhs: "Level"
    rhs: "Level"


@dataclass(frozen=True)
class LevelIMax:
    """``imax u v`` is zero whenever ``v`` is zero, ``max u v`` otherwise."""

    lhs: "Level"
    rhs: "Level"


@dataclass(frozen=True)
class LevelParam:
    name: Name


@dataclass(frozen=True)
class LevelMVar:
    name: Name


Level = Union[LevelZero, LevelSucc, LevelMax, LevelIMax, LevelParam, LevelMVar]


def level_of_nat(n: int) -> Level:
    """``succ^n zero``."""

    if n < 0:
        raise ValueError(f"level must be non-negative, got {n}")
    level: Level = LevelZero()
    for _ in range(n):
        level = LevelSucc(level)
    return level
