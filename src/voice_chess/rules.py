"""
Rules engine boundary around python-chess.

- Positions are chess.Board values; move() never mutates the board it is given,
  it returns a new board with the move pushed.
- Requests are either a chess.Move (board interaction) or SAN text (voice).
- python-chess parse errors are translated into MalformedNotation / AmbiguousNotation;
  an illegal but well-formed request returns None.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import chess
import chess.pgn

MoveRequest = Union[chess.Move, str]


class MalformedNotation(ValueError):
    """The request text is not chess notation at all."""


class AmbiguousNotation(MalformedNotation):
    """The SAN names a destination that more than one piece can legally reach."""


@dataclass(frozen=True)
class EngineMove:
    notation: str
    position: chess.Board
    uci: str


@dataclass(frozen=True)
class PositionReport:
    is_check: bool
    is_checkmate: bool
    is_stalemate: bool
    is_draw: bool
    turn: chess.Color


class RulesEngine:
    """Plain chess rules around python-chess Board."""

    def initial_position(self) -> chess.Board:
        return chess.Board()

    def position_from_fen(self, fen: str) -> chess.Board:
        # chess.Board raises ValueError on malformed FEN
        return chess.Board(fen=fen)

    def requires_promotion(self, position: chess.Board, from_square: str, to_square: str) -> bool:
        try:
            src = chess.parse_square(from_square)
            dst = chess.parse_square(to_square)
        except ValueError:
            return False
        piece = position.piece_at(src)
        if piece is None or piece.piece_type != chess.PAWN:
            return False
        return chess.square_rank(dst) in (0, 7)

    def _resolve(self, board: chess.Board, request: MoveRequest) -> chess.Move | None:
        if isinstance(request, chess.Move):
            return request
        try:
            return board.parse_san(request)
        except chess.AmbiguousMoveError as e:
            raise AmbiguousNotation(str(e)) from e
        except chess.InvalidMoveError as e:
            raise MalformedNotation(str(e)) from e
        except chess.IllegalMoveError:
            return None

    def move(self, position: chess.Board, request: MoveRequest) -> EngineMove | None:
        """Apply request to a copy of position. Returns None when the move is illegal."""
        board = position.copy()
        mv = self._resolve(board, request)
        if mv is None or mv not in board.legal_moves:
            return None
        san = board.san(mv)
        board.push(mv)
        return EngineMove(notation=san, position=board, uci=mv.uci())

    def is_draw(self, position: chess.Board) -> bool:
        return (
            position.is_insufficient_material()
            or position.can_claim_fifty_moves()
            or position.is_repetition(3)
        )

    def report(self, position: chess.Board) -> PositionReport:
        return PositionReport(
            is_check=position.is_check(),
            is_checkmate=position.is_checkmate(),
            is_stalemate=position.is_stalemate(),
            is_draw=self.is_draw(position),
            turn=position.turn,
        )

    def movetext(self, position: chess.Board) -> str:
        """PGN movetext of every move played to reach position."""
        game = chess.pgn.Game.from_board(position)
        exporter = chess.pgn.StringExporter(headers=False, variations=False, comments=False)
        return game.accept(exporter)


def coordinate_request(from_square: str, to_square: str, promotion: str | None = None) -> chess.Move:
    """Build a chess.Move from square names; raises MalformedNotation for unknown squares or pieces."""
    try:
        src = chess.parse_square(from_square.lower())
        dst = chess.parse_square(to_square.lower())
        promo = chess.Piece.from_symbol(promotion.lower()).piece_type if promotion else None
    except ValueError as e:
        raise MalformedNotation(str(e)) from e
    return chess.Move(src, dst, promotion=promo)


__all__ = [
    "RulesEngine",
    "EngineMove",
    "PositionReport",
    "MalformedNotation",
    "AmbiguousNotation",
    "coordinate_request",
]
