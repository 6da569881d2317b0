"""
Minimal Flask API that wires the voice chess core into a browser board.

One process holds one game. The browser renders the board, recognizes speech
(or uploads a recording) and speaks the announcements it gets back.

Endpoints:
- GET  /api/game             -> state snapshot, display, listening flag
- POST /api/game/new         -> reset to the start position (optional "fen")
- POST /api/game/drop        -> {"from": "e2", "to": "e4", "promotion"?} -> {"accepted": bool}
- POST /api/game/utterance   -> {"transcript": "..."} or {"error": "no-speech"}
- POST /api/game/audio       -> raw audio body, transcribed through the speech API
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import threading

from flask import Flask, jsonify, request

from .config import SETTINGS
from .executor import Applied, Rejected
from .session import VoiceSession
from .speech import CaptureResult, PushCapture, RecordingSpeaker
from .speech_client import SpeechTransportError, transcribe_audio

log = logging.getLogger("server")

app = Flask(__name__)
lock = threading.Lock()

CAPTURE = PushCapture()
SPEAKER = RecordingSpeaker()
SESSION = VoiceSession(capture=CAPTURE, speaker=SPEAKER)


def _result_dict(result) -> dict | None:
    if isinstance(result, Applied):
        return {"applied": True, "notation": result.notation, "status": result.status.value}
    if isinstance(result, Rejected):
        return {"applied": False, "reason": result.reason.value, "message": result.message}
    return None


def _serialize(session: VoiceSession, **extra) -> dict:
    """Snapshot plus the announcements produced since the last response."""
    data = {
        "state": session.snapshot().to_dict(),
        "display": session.display.to_dict(),
        "listening": session.listening,
        "can_listen": session.can_listen(),
        "announcements": SPEAKER.drain(),
        "speech": {"rate": SPEAKER.rate, "pitch": SPEAKER.pitch},
    }
    data.update(extra)
    return data


def _run_capture(result: CaptureResult) -> dict:
    if not SESSION.can_listen():
        return _serialize(SESSION, result=None, ignored=True)
    CAPTURE.feed(result)
    move_result = asyncio.run(SESSION.start_listening())
    return _serialize(SESSION, result=_result_dict(move_result))


def _json_body() -> dict | None:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _bad_fields(data: dict, *keys: str) -> list[str]:
    """Fields that are present but not strings."""
    return [k for k in keys if data.get(k) is not None and not isinstance(data[k], str)]


def _bad_request(message: str):
    return jsonify({"error": message}), 400


@app.route("/api/game", methods=["GET"])
def get_game():
    with lock:
        return jsonify(_serialize(SESSION))


@app.route("/api/game/new", methods=["POST"])
def new_game():
    data = _json_body()
    if data is None:
        return _bad_request("request body must be a JSON object")
    if _bad_fields(data, "fen"):
        return _bad_request("fen must be a string")
    with lock:
        try:
            SESSION.new_game(data.get("fen"))
        except ValueError as e:
            return _bad_request(f"invalid fen: {e}")
        return jsonify(_serialize(SESSION))


@app.route("/api/game/drop", methods=["POST"])
def drop_piece():
    data = _json_body()
    if data is None:
        return _bad_request("request body must be a JSON object")
    bad = _bad_fields(data, "from", "to", "promotion")
    if bad:
        return _bad_request(f"{', '.join(bad)} must be a string")
    src, dst = data.get("from"), data.get("to")
    if not src:
        return _bad_request("from is required")
    with lock:
        accepted = SESSION.drop_piece(src, dst, data.get("promotion"))
        return jsonify(_serialize(SESSION, accepted=accepted))


@app.route("/api/game/utterance", methods=["POST"])
def utterance():
    data = _json_body()
    if data is None:
        return _bad_request("request body must be a JSON object")
    bad = _bad_fields(data, "transcript", "error")
    if bad:
        return _bad_request(f"{', '.join(bad)} must be a string")
    transcript = data.get("transcript")
    error = data.get("error")
    if not transcript and not error:
        return _bad_request("transcript or error is required")
    with lock:
        return jsonify(_run_capture(CaptureResult(transcript=transcript, error=error)))


@app.route("/api/game/audio", methods=["POST"])
def audio():
    body = request.get_data()
    if not body:
        return _bad_request("audio body is required")
    filename = request.args.get("filename", "utterance.webm")
    try:
        text = transcribe_audio(body, filename)
        result = CaptureResult(transcript=text) if text else CaptureResult(error="no-speech")
    except SpeechTransportError:
        result = CaptureResult(error="network")
    with lock:
        return jsonify(_run_capture(result))


def main():
    ap = argparse.ArgumentParser(description="Serve the voice chess API for a browser board.")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=5000)
    ap.add_argument("--log-level", default=None, help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args()
    level = (args.log_level or SETTINGS.log_level).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log.info("Serving voice chess on %s:%d", args.host, args.port)
    app.run(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
