"""
Voice session controller.

- At most one capture session is outstanding; start_listening() while listening is a no-op.
- Every exit path stops capture and clears the listening flag.
- Transcripts go through session commands ("new game", "repeat"), then the normalizer,
  then the executor. Board drops bypass the normalizer.
"""
from __future__ import annotations

import logging

from .executor import Applied, MoveExecutor, MoveResult
from .feedback import UNPARSEABLE_MESSAGE, Feedback, FeedbackDisplay, capture_error_message
from .moves import UNPARSEABLE, CoordinateMove
from .normalizer import normalize
from .rules import RulesEngine
from .speech import CaptureResult, SpeechCapture, SpeechOutput
from .state import GameState, StateSnapshot

NEW_GAME_PHRASES = ("new game", "restart")
REPEAT_PHRASES = ("repeat last move", "repeat")


class VoiceSession:
    def __init__(
        self,
        capture: SpeechCapture,
        speaker: SpeechOutput,
        engine: RulesEngine | None = None,
        state: GameState | None = None,
        display: FeedbackDisplay | None = None,
    ):
        self.log = logging.getLogger("VoiceSession")
        self.capture = capture
        self.feedback = Feedback(speaker, display)
        self.executor = MoveExecutor(self.feedback, engine)
        self.state = state or GameState.new(self.executor.engine)
        self.listening = False

    @property
    def display(self) -> FeedbackDisplay:
        return self.feedback.display

    def snapshot(self) -> StateSnapshot:
        return self.state.snapshot()

    def can_listen(self) -> bool:
        return not self.listening and not self.state.is_terminal

    # ---------------- Voice -----------------
    async def start_listening(self) -> MoveResult | None:
        """Run one capture session to completion. Returns the move result, if a move was attempted."""
        if self.listening:
            self.log.debug("Already listening; ignoring start request")
            return None
        if self.state.is_terminal:
            self.log.debug("Game over (%s); listening disabled", self.state.status.value)
            return None
        self.display.clear()
        self.listening = True
        self.log.debug("Listening via %s", self.capture.name)
        try:
            result = await self.capture.listen()
            return self.handle_capture(result)
        finally:
            self.capture.stop()
            self.listening = False

    def handle_capture(self, result: CaptureResult) -> MoveResult | None:
        if result.error:
            self.log.info("Capture error: %s", result.error)
            self.feedback.error(capture_error_message(result.error))
            return None
        if result.ended:
            self.log.debug("Capture ended without a result")
            return None
        return self.handle_utterance(result.transcript)

    def handle_utterance(self, transcript: str) -> MoveResult | None:
        self.display.show_transcript(transcript)
        lowered = transcript.strip().lower()
        if lowered in NEW_GAME_PHRASES:
            self.new_game()
            return None
        if lowered in REPEAT_PHRASES:
            self.feedback.announce(self.state.last_move or "No moves yet.")
            return None
        descriptor = normalize(transcript)
        if descriptor is UNPARSEABLE:
            self.log.info("Could not parse '%s'", transcript)
            self.feedback.error(UNPARSEABLE_MESSAGE)
            return None
        return self.executor.apply(descriptor, self.state)

    # ---------------- Direct interaction -----------------
    def drop_piece(self, from_square: str, to_square: str, promotion: str | None = None) -> bool:
        """Piece dropped on the board: True if accepted, False to snap it back."""
        if not to_square:
            return False
        result = self.executor.apply(CoordinateMove(from_square, to_square, promotion), self.state)
        return isinstance(result, Applied)

    def new_game(self, fen: str | None = None) -> None:
        self.display.clear()
        self.executor.new_game(self.state, fen)
        self.feedback.announce(f"New game. {self.state.turn.label} to move.")


__all__ = ["VoiceSession", "NEW_GAME_PHRASES", "REPEAT_PHRASES"]
