"""
Speech client facade over the OpenAI audio APIs.

The rest of the code should not care which SDK is in use. This module turns
recorded audio into a transcript and announcement text into audio bytes.
"""
from __future__ import annotations

import logging
import random
import time
from functools import lru_cache
from typing import Callable, TypeVar

from openai import OpenAI

from .config import SETTINGS

log = logging.getLogger("speech_client")

T = TypeVar("T")


class SpeechTransportError(RuntimeError):
    """All attempts against the speech API failed."""


@lru_cache(maxsize=1)
def _client() -> OpenAI:
    return OpenAI(api_key=SETTINGS.openai_api_key or None, base_url=SETTINGS.api_base or None)


def _with_retries(what: str, call: Callable[[], T]) -> T:
    delay = 0.5
    for attempt in range(SETTINGS.responses_retries + 1):
        try:
            return call()
        except Exception as e:
            if attempt >= SETTINGS.responses_retries:
                log.exception("%s failed after %d attempts", what, attempt + 1)
                raise SpeechTransportError(f"{what} failed: {e}") from e
            sleep_s = delay * (2 ** attempt) * (0.8 + 0.4 * random.random())
            time.sleep(min(sleep_s, 10.0))
    raise SpeechTransportError(f"{what} failed")


def transcribe_audio(audio: bytes, filename: str = "utterance.wav", model: str | None = None) -> str:
    """Return the best transcript for a recorded utterance."""
    def call() -> str:
        rsp = _client().audio.transcriptions.create(
            model=model or SETTINGS.transcribe_model,
            file=(filename, audio),
            timeout=SETTINGS.responses_timeout_s,
        )
        return (getattr(rsp, "text", "") or "").strip()

    return _with_retries("Transcription", call)


def synthesize_speech(text: str, rate: float | None = None, model: str | None = None, voice: str | None = None) -> bytes:
    """Render text as mp3 audio bytes."""
    def call() -> bytes:
        rsp = _client().audio.speech.create(
            model=model or SETTINGS.tts_model,
            voice=voice or SETTINGS.tts_voice,
            input=text,
            speed=rate if rate is not None else SETTINGS.speech_rate,
            timeout=SETTINGS.responses_timeout_s,
        )
        return rsp.read()

    return _with_retries("Speech synthesis", call)


__all__ = ["transcribe_audio", "synthesize_speech", "SpeechTransportError"]
