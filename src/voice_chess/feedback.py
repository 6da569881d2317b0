"""
User-facing feedback: announcement texts, error messages and the transcript/error display.

Display slots follow last-one-wins: a new transcript or error replaces the one shown.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .state import GameStatus, Side, outcome_text

if TYPE_CHECKING:  # pragma: no cover
    from .speech import SpeechOutput

log = logging.getLogger("feedback")


class InvalidMoveReason(Enum):
    ILLEGAL_MOVE = "illegal_move"
    MALFORMED_NOTATION = "malformed_notation"
    AMBIGUOUS_MOVE = "ambiguous_move"
    GAME_OVER = "game_over"


ERROR_MESSAGES: dict[InvalidMoveReason, str] = {
    InvalidMoveReason.ILLEGAL_MOVE: "Invalid move. Please try again.",
    InvalidMoveReason.MALFORMED_NOTATION: "Invalid move format. Please try again.",
    InvalidMoveReason.AMBIGUOUS_MOVE: "That move is ambiguous. Please try again.",
    InvalidMoveReason.GAME_OVER: "The game is over. Start a new game to play again.",
}

UNPARSEABLE_MESSAGE = "Sorry, I didn't understand that move. Please try again."


def capture_error_message(code: str) -> str:
    return f"Speech recognition error ({code}). Please try again."


def status_announcement(status: GameStatus, turn: Side) -> str | None:
    """Extra announcement after a move; turn is the side to move after it."""
    if status is GameStatus.CHECK:
        return "Check!"
    return outcome_text(status, turn)


@dataclass(frozen=True)
class TranscriptEvent:
    text: str


@dataclass(frozen=True)
class ErrorEvent:
    message: str


class FeedbackDisplay:
    """Holds the currently displayed transcript and error (one of each)."""

    def __init__(self):
        self.transcript: TranscriptEvent | None = None
        self.error: ErrorEvent | None = None

    def show_transcript(self, text: str) -> None:
        self.transcript = TranscriptEvent(text)

    def show_error(self, message: str) -> None:
        self.error = ErrorEvent(message)

    def clear(self) -> None:
        self.transcript = None
        self.error = None

    def to_dict(self) -> dict:
        return {
            "transcript": self.transcript.text if self.transcript else None,
            "error": self.error.message if self.error else None,
        }


class Feedback:
    """Routes announcements to speech output and errors to both display and speech."""

    def __init__(self, speaker: "SpeechOutput", display: FeedbackDisplay | None = None):
        self.speaker = speaker
        self.display = display or FeedbackDisplay()

    def announce(self, text: str) -> None:
        log.info("Announce: %s", text)
        self.speaker.speak(text)

    def error(self, message: str) -> None:
        log.info("Error: %s", message)
        self.display.show_error(message)
        self.speaker.speak(message)


__all__ = [
    "InvalidMoveReason",
    "ERROR_MESSAGES",
    "UNPARSEABLE_MESSAGE",
    "capture_error_message",
    "status_announcement",
    "TranscriptEvent",
    "ErrorEvent",
    "FeedbackDisplay",
    "Feedback",
]
