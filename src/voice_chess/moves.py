"""
Move descriptors: the requested move before the rules engine has validated it.

- CoordinateMove: from/to squares delivered by direct board interaction.
- AlgebraicMove: SAN text (possibly only a destination hint such as "Nf3").
- CastleMove: kingside or queenside castling.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class CastleSide(Enum):
    KINGSIDE = "kingside"
    QUEENSIDE = "queenside"

    @property
    def san(self) -> str:
        return "O-O" if self is CastleSide.KINGSIDE else "O-O-O"


@dataclass(frozen=True)
class CoordinateMove:
    from_square: str
    to_square: str
    promotion: str | None = None  # piece letter: q, r, b, n


@dataclass(frozen=True)
class AlgebraicMove:
    text: str


@dataclass(frozen=True)
class CastleMove:
    side: CastleSide


class _Unparseable:
    """Sentinel returned when an utterance matches no move pattern."""

    _instance: "_Unparseable | None" = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNPARSEABLE"

    def __bool__(self) -> bool:
        return False


UNPARSEABLE = _Unparseable()

MoveDescriptor = Union[CoordinateMove, AlgebraicMove, CastleMove]
ParsedCommand = Union[MoveDescriptor, _Unparseable]

__all__ = [
    "CastleSide",
    "CoordinateMove",
    "AlgebraicMove",
    "CastleMove",
    "MoveDescriptor",
    "UNPARSEABLE",
    "ParsedCommand",
]
