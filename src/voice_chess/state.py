"""
Game state: the single source of truth for the current game.

GameState is written only by MoveExecutor. Everything else (session, server,
console front-end) reads a StateSnapshot projection.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import chess

from .rules import PositionReport, RulesEngine


class Side(Enum):
    WHITE = "white"
    BLACK = "black"

    @classmethod
    def from_color(cls, color: chess.Color) -> "Side":
        return cls.WHITE if color == chess.WHITE else cls.BLACK

    @property
    def opponent(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE

    @property
    def label(self) -> str:
        return self.value.capitalize()


class GameStatus(Enum):
    PLAYING = "playing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({GameStatus.CHECKMATE, GameStatus.STALEMATE, GameStatus.DRAW})


@dataclass(frozen=True)
class StateSnapshot:
    """Read-only projection for display and styling."""
    fen: str
    turn: Side
    status: GameStatus
    history: tuple[str, ...]
    last_move: str | None
    status_text: str

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> dict:
        return {
            "fen": self.fen,
            "turn": self.turn.value,
            "status": self.status.value,
            "history": list(self.history),
            "last_move": self.last_move,
            "status_text": self.status_text,
            "is_terminal": self.is_terminal,
        }


def status_from_report(report: PositionReport) -> GameStatus:
    """Checkmate > Check > Stalemate > Draw > Playing."""
    if report.is_checkmate:
        return GameStatus.CHECKMATE
    if report.is_check:
        return GameStatus.CHECK
    if report.is_stalemate:
        return GameStatus.STALEMATE
    if report.is_draw:
        return GameStatus.DRAW
    return GameStatus.PLAYING


def outcome_text(status: GameStatus, turn: Side) -> str | None:
    """How the game ended, or None while it is still going. turn is the side to move."""
    if status is GameStatus.CHECKMATE:
        return f"Checkmate! {turn.opponent.label} wins!"
    if status is GameStatus.STALEMATE:
        return "Stalemate! The game is a draw."
    if status is GameStatus.DRAW:
        return "The game is a draw."
    return None


def status_text(status: GameStatus, turn: Side) -> str:
    """Short status line: whose turn it is, or how the game ended."""
    outcome = outcome_text(status, turn)
    if outcome:
        return outcome
    if status is GameStatus.CHECK:
        return f"Check! {turn.label} to move."
    return f"{turn.label}'s turn"


@dataclass
class GameState:
    position: chess.Board
    turn: Side = Side.WHITE
    status: GameStatus = GameStatus.PLAYING
    history: list[str] = field(default_factory=list)
    last_move: str | None = None

    @classmethod
    def new(cls, engine: RulesEngine | None = None, fen: str | None = None) -> "GameState":
        engine = engine or RulesEngine()
        position = engine.position_from_fen(fen) if fen else engine.initial_position()
        report = engine.report(position)
        return cls(position=position, turn=Side.from_color(report.turn), status=status_from_report(report))

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            fen=self.position.fen(),
            turn=self.turn,
            status=self.status,
            history=tuple(self.history),
            last_move=self.last_move,
            status_text=status_text(self.status, self.turn),
        )

    def pgn(self, engine: RulesEngine | None = None) -> str:
        return (engine or RulesEngine()).movetext(self.position)


__all__ = ["Side", "GameStatus", "TERMINAL_STATUSES", "StateSnapshot", "GameState", "outcome_text", "status_text", "status_from_report"]
