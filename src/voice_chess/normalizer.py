"""
Spoken-command normalization: turn a recognized utterance into a move descriptor.

Rules are tried in a fixed order and the first match wins:
1) castling phrases ("castle king side", "long castle"),
2) piece phrase searched anywhere in the text ("knight to f3", "pawn e4"),
3) strict algebraic notation for the whole command ("Nf3", "O-O", "a8=N").

Anything else is UNPARSEABLE. The normalizer never looks at the board; the rules
engine decides which piece (if any) can reach the destination.
"""
from __future__ import annotations

import logging
import re

from .moves import UNPARSEABLE, AlgebraicMove, CastleMove, CastleSide, ParsedCommand

log = logging.getLogger("normalizer")

PIECE_WORDS: dict[str, str] = {
    "king": "K",
    "queen": "Q",
    "rook": "R",
    "bishop": "B",
    "knight": "N",
    "pawn": "",
}

# Substring phrases on the lowered utterance; checked before any square parsing.
CASTLING_PHRASES: tuple[tuple[str, CastleSide], ...] = (
    ("castle king", CastleSide.KINGSIDE),
    ("castles king", CastleSide.KINGSIDE),
    ("short castle", CastleSide.KINGSIDE),
    ("castle short", CastleSide.KINGSIDE),
    ("castle queen", CastleSide.QUEENSIDE),
    ("castles queen", CastleSide.QUEENSIDE),
    ("long castle", CastleSide.QUEENSIDE),
    ("castle long", CastleSide.QUEENSIDE),
)

CASTLE_ZERO = {"o-o": "O-O", "o-o-o": "O-O-O", "0-0": "O-O", "0-0-0": "O-O-O"}

PIECE_PHRASE_RE = re.compile(
    r"(?:\b(?P<piece>" + "|".join(PIECE_WORDS) + r")\s+)?(?:\bto\s+)?\b(?P<square>[a-h][1-8])\b(?!=)"
)
STRICT_SAN_RE = re.compile(r"^(?P<piece>[KQRBN]?)(?P<square>[a-h][1-8])(?:=?(?P<promotion>[QRBN]))?$", re.I)


def castling_side(text: str) -> CastleSide | None:
    for phrase, side in CASTLING_PHRASES:
        if phrase in text:
            return side
    return None


def piece_phrase(text: str) -> AlgebraicMove | None:
    m = PIECE_PHRASE_RE.search(text)
    if not m:
        return None
    symbol = PIECE_WORDS[m.group("piece")] if m.group("piece") else ""
    return AlgebraicMove(symbol + m.group("square"))


def strict_algebraic(command: str) -> AlgebraicMove | None:
    """Accept the whole command only if it is already shaped like SAN."""
    castle = CASTLE_ZERO.get(command.lower())
    if castle:
        return AlgebraicMove(castle)
    m = STRICT_SAN_RE.match(command)
    if not m:
        return None
    text = m.group("piece").upper() + m.group("square").lower()
    if m.group("promotion"):
        text += "=" + m.group("promotion").upper()
    return AlgebraicMove(text)


def normalize(utterance: str) -> ParsedCommand:
    """Map a raw utterance to a MoveDescriptor, or UNPARSEABLE."""
    command = (utterance or "").strip()
    text = command.lower()
    if not text:
        return UNPARSEABLE

    side = castling_side(text)
    if side is not None:
        log.debug("'%s' -> castle %s", command, side.value)
        return CastleMove(side)

    move = piece_phrase(text) or strict_algebraic(command)
    if move is None:
        log.debug("'%s' -> unparseable", command)
        return UNPARSEABLE
    log.debug("'%s' -> %s", command, move.text)
    return move


__all__ = [
    "normalize",
    "PIECE_WORDS",
    "CASTLING_PHRASES",
    "castling_side",
    "piece_phrase",
    "strict_algebraic",
]
