"""
Configuration and environment loading for Voice Chess.

- Loads .env (python-dotenv) and settings.yml (YAML) from repo root if present.
- settings.yml takes precedence over environment variables.
- Exposes SETTINGS with keys used across the project (speech tuning, OpenAI transport, logging).
"""
from dataclasses import dataclass
import os
from typing import Any, Callable

import yaml
from dotenv import load_dotenv

load_dotenv()


def _repo_root() -> str:
    # this file: src/voice_chess/config.py → repo root is two levels up
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _load_yaml(path: str) -> dict:
    if not os.path.isfile(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data if isinstance(data, dict) else {}


_cfg = _load_yaml(os.environ.get("VOICECHESS_SETTINGS", os.path.join(_repo_root(), "settings.yml")))


def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
    if name in _cfg:
        val = _cfg[name]
        return cast(val) if cast else val
    env = os.environ.get(name)
    if env is not None:
        return cast(env) if cast else env
    return default


@dataclass(frozen=True)
class Settings:
    # Auth / endpoint (OpenAI speech APIs)
    openai_api_key: str
    api_base: str

    # Transport knobs
    responses_timeout_s: float
    responses_retries: int

    # Speech output
    speech_rate: float
    speech_pitch: float
    tts_model: str
    tts_voice: str
    audio_dir: str

    # Speech capture
    transcribe_model: str

    log_level: str


SETTINGS = Settings(
    openai_api_key=_get("VOICECHESS_OPENAI_API_KEY", _get("OPENAI_API_KEY", "")),
    api_base=_get("VOICECHESS_OPENAI_BASE_URL", _get("OPENAI_BASE_URL", "https://api.openai.com/v1")),
    responses_timeout_s=float(_get("VOICECHESS_RESPONSES_TIMEOUT_S", 30.0, cast=float)),
    responses_retries=int(_get("VOICECHESS_RESPONSES_RETRIES", 2, cast=int)),
    speech_rate=float(_get("VOICECHESS_SPEECH_RATE", 1.0, cast=float)),
    speech_pitch=float(_get("VOICECHESS_SPEECH_PITCH", 1.0, cast=float)),
    tts_model=_get("VOICECHESS_TTS_MODEL", "gpt-4o-mini-tts"),
    tts_voice=_get("VOICECHESS_TTS_VOICE", "alloy"),
    audio_dir=_get("VOICECHESS_AUDIO_DIR", os.path.join(_repo_root(), "runs", "audio")),
    transcribe_model=_get("VOICECHESS_TRANSCRIBE_MODEL", "whisper-1"),
    log_level=_get("VOICECHESS_LOG_LEVEL", "INFO"),
)
