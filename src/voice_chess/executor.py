"""
Move executor: the only writer of GameState.

- Translates a MoveDescriptor into a rules-engine request (chess.Move or SAN text).
  A pawn reaching the last rank becomes a queen unless another piece is named.
- On acceptance appends the notation, replaces the position, flips the turn and
  recomputes the status from the engine's report; then announces the move and,
  if any, the check/terminal status.
- On rejection leaves the state untouched and reports the error (display + speech).
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Union

import chess

from .feedback import ERROR_MESSAGES, Feedback, InvalidMoveReason, status_announcement
from .moves import AlgebraicMove, CastleMove, CoordinateMove, MoveDescriptor
from .rules import AmbiguousNotation, MalformedNotation, MoveRequest, RulesEngine, coordinate_request
from .state import GameState, GameStatus, status_from_report

# SAN with only a destination on the last rank is a pawn reaching promotion.
BARE_PROMOTION_SQUARE_RE = re.compile(r"^[a-h][18]$")


@dataclass(frozen=True)
class Applied:
    notation: str
    position: chess.Board
    status: GameStatus


@dataclass(frozen=True)
class Rejected:
    reason: InvalidMoveReason

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self.reason]


MoveResult = Union[Applied, Rejected]


class MoveExecutor:
    def __init__(self, feedback: Feedback, engine: RulesEngine | None = None):
        self.log = logging.getLogger("executor")
        self.feedback = feedback
        self.engine = engine or RulesEngine()

    def new_game(self, state: GameState, fen: str | None = None) -> None:
        """Reinitialize state in place (standard start unless fen is given)."""
        fresh = GameState.new(self.engine, fen)
        state.position = fresh.position
        state.turn = fresh.turn
        state.status = fresh.status
        state.history = []
        state.last_move = None
        self.log.info("New game started fen=%s", state.position.fen())

    def to_request(self, descriptor: MoveDescriptor, state: GameState) -> MoveRequest:
        if isinstance(descriptor, CoordinateMove):
            promotion = descriptor.promotion
            if promotion is None and self.engine.requires_promotion(
                state.position, descriptor.from_square, descriptor.to_square
            ):
                promotion = "q"  # no promotion picker; always queen
            return coordinate_request(descriptor.from_square, descriptor.to_square, promotion)
        if isinstance(descriptor, CastleMove):
            return descriptor.side.san
        if isinstance(descriptor, AlgebraicMove):
            if BARE_PROMOTION_SQUARE_RE.match(descriptor.text):
                return descriptor.text + "=Q"
            return descriptor.text
        raise TypeError(f"Unsupported move descriptor: {descriptor!r}")

    def apply(self, descriptor: MoveDescriptor, state: GameState) -> MoveResult:
        if state.is_terminal:
            return self._reject(InvalidMoveReason.GAME_OVER, descriptor)
        try:
            request = self.to_request(descriptor, state)
            moved = self.engine.move(state.position, request)
        except AmbiguousNotation:
            return self._reject(InvalidMoveReason.AMBIGUOUS_MOVE, descriptor)
        except MalformedNotation:
            return self._reject(InvalidMoveReason.MALFORMED_NOTATION, descriptor)
        if moved is None:
            return self._reject(InvalidMoveReason.ILLEGAL_MOVE, descriptor)

        report = self.engine.report(moved.position)
        state.history.append(moved.notation)
        state.last_move = moved.notation
        state.position = moved.position
        state.turn = state.turn.opponent
        state.status = status_from_report(report)
        self.log.info("[ply %d] %s (%s) status=%s", len(state.history), moved.notation, moved.uci, state.status.value)

        self.feedback.announce(moved.notation)
        extra = status_announcement(state.status, state.turn)
        if extra:
            self.feedback.announce(extra)
        return Applied(notation=moved.notation, position=moved.position, status=state.status)

    def _reject(self, reason: InvalidMoveReason, descriptor: MoveDescriptor) -> Rejected:
        self.log.info("Rejected %r: %s", descriptor, reason.value)
        rejected = Rejected(reason)
        self.feedback.error(rejected.message)
        return rejected


__all__ = ["MoveExecutor", "Applied", "Rejected", "MoveResult"]
