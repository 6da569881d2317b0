"""
Speech capabilities used by the voice session.

Capture: one `await listen()` per session yields exactly one CaptureResult
(a transcript, an error code, or "ended" with nothing heard). stop() is idempotent.

Output: speak() is fire-and-forget with explicit cancel-then-speak ordering, so a
new announcement always supersedes one still being rendered.
"""
from __future__ import annotations

import asyncio
import logging
import os
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from .config import SETTINGS
from .speech_client import SpeechTransportError, synthesize_speech, transcribe_audio

log = logging.getLogger("speech")


@dataclass(frozen=True)
class CaptureResult:
    transcript: str | None = None
    error: str | None = None

    @property
    def ended(self) -> bool:
        return self.transcript is None and self.error is None


ENDED = CaptureResult()


# ---------------- Capture -----------------
class SpeechCapture:
    """Single-result asynchronous capture session."""

    name = "capture"

    @property
    def finished(self) -> bool:
        """True once the source can never produce another result."""
        return False

    async def listen(self) -> CaptureResult:
        raise NotImplementedError

    def stop(self) -> None:
        return


class ConsoleCapture(SpeechCapture):
    """Reads typed "utterances" from stdin; useful without a microphone."""

    name = "console"

    def __init__(self, prompt: str = "Say a move: ", quit_words: Iterable[str] = ("quit", "exit")):
        self.prompt = prompt
        self.quit_words = {w.lower() for w in quit_words}
        self._closed = False

    @property
    def finished(self) -> bool:
        return self._closed

    async def listen(self) -> CaptureResult:
        try:
            line = await asyncio.to_thread(input, self.prompt)
        except EOFError:
            self._closed = True
            return ENDED
        line = line.strip()
        if line.lower() in self.quit_words:
            self._closed = True
            return ENDED
        if not line:
            return CaptureResult(error="no-speech")
        return CaptureResult(transcript=line)


class ScriptedCapture(SpeechCapture):
    """Replays a fixed sequence of transcripts (or CaptureResults), then ends."""

    name = "scripted"

    def __init__(self, items: Iterable[str | CaptureResult] = ()):
        self._items = deque(items)
        self.stop_calls = 0

    @property
    def finished(self) -> bool:
        return not self._items

    def add(self, item: str | CaptureResult) -> None:
        self._items.append(item)

    async def listen(self) -> CaptureResult:
        if not self._items:
            return ENDED
        item = self._items.popleft()
        return item if isinstance(item, CaptureResult) else CaptureResult(transcript=item)

    def stop(self) -> None:
        self.stop_calls += 1


class PushCapture(SpeechCapture):
    """Single slot filled from outside (e.g. a browser that already recognized speech)."""

    name = "push"

    def __init__(self):
        self._pending: CaptureResult | None = None

    def feed(self, result: CaptureResult) -> None:
        self._pending = result

    async def listen(self) -> CaptureResult:
        result = self._pending or ENDED
        self._pending = None
        return result

    def stop(self) -> None:
        self._pending = None


class AudioFileCapture(SpeechCapture):
    """Transcribes one recorded audio file per session via the speech API."""

    name = "audio-file"

    def __init__(self, paths: Iterable[str], transcribe: Callable[[bytes, str], str] = transcribe_audio):
        self._paths = deque(paths)
        self._transcribe = transcribe

    @property
    def finished(self) -> bool:
        return not self._paths

    async def listen(self) -> CaptureResult:
        if not self._paths:
            return ENDED
        path = self._paths.popleft()
        try:
            audio = Path(path).read_bytes()
        except OSError:
            log.warning("Could not read audio file %s", path)
            return CaptureResult(error="audio-capture")
        try:
            text = await asyncio.to_thread(self._transcribe, audio, os.path.basename(path))
        except SpeechTransportError:
            return CaptureResult(error="network")
        if not text:
            return CaptureResult(error="no-speech")
        log.debug("Transcribed %s -> '%s'", path, text)
        return CaptureResult(transcript=text)


# ---------------- Output -----------------
class SpeechOutput:
    """Base class: speak() cancels whatever is in flight, then renders the new text."""

    def __init__(self, rate: float | None = None, pitch: float | None = None):
        self.rate = SETTINGS.speech_rate if rate is None else rate
        self.pitch = SETTINGS.speech_pitch if pitch is None else pitch

    def speak(self, text: str) -> None:
        self.cancel()
        self._render(text)

    def cancel(self) -> None:
        return

    async def wait(self) -> None:
        """Wait for the current announcement (if any) to finish rendering."""
        return

    def _render(self, text: str) -> None:
        raise NotImplementedError


class LogSpeaker(SpeechOutput):
    """Logs announcements; with echo=True also prints them (console play)."""

    def __init__(self, echo: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.echo = echo

    def _render(self, text: str) -> None:
        log.debug("speak rate=%.2f pitch=%.2f: %s", self.rate, self.pitch, text)
        if self.echo:
            print(f">> {text}")


class RecordingSpeaker(SpeechOutput):
    """Collects announcements so another layer (HTTP client, tests) can render them."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.spoken: list[str] = []
        self.cancelled = 0

    def cancel(self) -> None:
        self.cancelled += 1

    def _render(self, text: str) -> None:
        self.spoken.append(text)

    @property
    def current(self) -> str | None:
        return self.spoken[-1] if self.spoken else None

    def drain(self) -> list[str]:
        out, self.spoken = self.spoken, []
        return out


def _write_audio_file(audio: bytes) -> None:
    out_dir = Path(SETTINGS.audio_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    (out_dir / "announcement.mp3").write_bytes(audio)


class OpenAISpeaker(SpeechOutput):
    """Text-to-speech through the OpenAI API; one in-flight render task at a time."""

    def __init__(
        self,
        sink: Callable[[bytes], None] = _write_audio_file,
        synthesize: Callable[..., bytes] = synthesize_speech,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.sink = sink
        self._synthesize = synthesize
        self._task: asyncio.Task | None = None

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            log.debug("Cancelling in-flight announcement")
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        task = self._task
        if task is not None and not task.done():
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _render(self, text: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (plain synchronous caller): render inline
            self._deliver(self._synthesize_or_none(text))
            return
        self._task = loop.create_task(self._play(text))

    async def _play(self, text: str) -> None:
        audio = await asyncio.to_thread(self._synthesize_or_none, text)
        self._deliver(audio)

    def _synthesize_or_none(self, text: str) -> bytes | None:
        try:
            return self._synthesize(text, rate=self.rate)
        except SpeechTransportError:
            log.warning("Dropping announcement '%s': speech synthesis unavailable", text)
            return None

    def _deliver(self, audio: bytes | None) -> None:
        if audio:
            self.sink(audio)


__all__ = [
    "CaptureResult",
    "ENDED",
    "SpeechCapture",
    "ConsoleCapture",
    "ScriptedCapture",
    "PushCapture",
    "AudioFileCapture",
    "SpeechOutput",
    "LogSpeaker",
    "RecordingSpeaker",
    "OpenAISpeaker",
]
