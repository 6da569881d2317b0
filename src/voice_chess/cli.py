"""
Console front-end: play a game by typing what you would say, or by replaying recorded audio.

Usage:
    voice-chess                       # type utterances such as "knight to f3", "castle king side"
    voice-chess --audio a.wav b.wav   # transcribe recordings through the speech API
    voice-chess --tts                 # speak announcements with OpenAI text-to-speech
Type "quit" (or send EOF) to stop.
"""
from __future__ import annotations

import argparse
import asyncio
import logging

from .config import SETTINGS
from .session import VoiceSession
from .speech import AudioFileCapture, ConsoleCapture, LogSpeaker, OpenAISpeaker, ScriptedCapture


async def play(session: VoiceSession, show_board: bool = True) -> None:
    while True:
        snap = session.snapshot()
        if show_board:
            print()
            print(session.state.position)
        print(snap.status_text)
        if not session.can_listen():
            break
        if session.capture.finished:
            break
        await session.start_listening()
        if session.display.transcript:
            print(f"Heard: {session.display.transcript.text}")
    await session.feedback.speaker.wait()


def main():
    ap = argparse.ArgumentParser(description="Play chess by voice commands from the console.")
    ap.add_argument("--fen", default=None, help="Optional starting position (FEN)")
    ap.add_argument("--audio", nargs="*", default=None, help="Recorded utterances to transcribe, in order")
    ap.add_argument("--script", nargs="*", default=None, help="Utterances to replay as if spoken, in order")
    ap.add_argument("--tts", action="store_true", help="Render announcements with OpenAI text-to-speech")
    ap.add_argument("--no-board", action="store_true", help="Do not print the board between moves")
    ap.add_argument("--log-level", default=None, help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args()

    level = (args.log_level or SETTINGS.log_level).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log = logging.getLogger("voice_chess")

    if args.audio:
        capture = AudioFileCapture(args.audio)
    elif args.script:
        capture = ScriptedCapture(args.script)
    else:
        capture = ConsoleCapture()
    speaker = OpenAISpeaker() if args.tts else LogSpeaker(echo=True)

    session = VoiceSession(capture=capture, speaker=speaker)
    if args.fen:
        session.new_game(args.fen)
    log.info("Starting voice chess capture=%s speaker=%s", capture.name, type(speaker).__name__)
    asyncio.run(play(session, show_board=not args.no_board))

    print("Moves:", session.state.pgn(session.executor.engine))


if __name__ == "__main__":
    main()
