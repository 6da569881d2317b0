import unittest
from unittest.mock import patch

from voice_chess import server
from voice_chess.speech_client import SpeechTransportError


class ServerApiTests(unittest.TestCase):
    def setUp(self):
        self.client = server.app.test_client()
        rsp = self.client.post("/api/game/new", json={})
        self.assertEqual(rsp.status_code, 200)

    def test_get_game(self):
        data = self.client.get("/api/game").get_json()
        self.assertEqual(data["state"]["turn"], "white")
        self.assertEqual(data["state"]["status"], "playing")
        self.assertEqual(data["state"]["history"], [])
        self.assertFalse(data["listening"])
        self.assertTrue(data["can_listen"])
        self.assertEqual(data["announcements"], [])

    def test_utterance_applies_move(self):
        data = self.client.post("/api/game/utterance", json={"transcript": "knight to f3"}).get_json()
        self.assertEqual(data["result"], {"applied": True, "notation": "Nf3", "status": "playing"})
        self.assertEqual(data["state"]["history"], ["Nf3"])
        self.assertEqual(data["state"]["turn"], "black")
        self.assertEqual(data["display"]["transcript"], "knight to f3")
        self.assertEqual(data["announcements"], ["Nf3"])
        self.assertFalse(data["listening"])

    def test_unparseable_utterance(self):
        data = self.client.post("/api/game/utterance", json={"transcript": "banana"}).get_json()
        self.assertIsNone(data["result"])
        self.assertEqual(data["display"]["error"], "Sorry, I didn't understand that move. Please try again.")
        self.assertEqual(data["state"]["history"], [])

    def test_capture_error_from_browser(self):
        data = self.client.post("/api/game/utterance", json={"error": "not-allowed"}).get_json()
        self.assertEqual(data["display"]["error"], "Speech recognition error (not-allowed). Please try again.")

    def test_utterance_requires_payload(self):
        rsp = self.client.post("/api/game/utterance", json={})
        self.assertEqual(rsp.status_code, 400)

    def test_drop_accept_and_reject(self):
        data = self.client.post("/api/game/drop", json={"from": "e2", "to": "e4"}).get_json()
        self.assertTrue(data["accepted"])
        self.assertEqual(data["state"]["last_move"], "e4")
        data = self.client.post("/api/game/drop", json={"from": "e4", "to": "e5"}).get_json()
        self.assertFalse(data["accepted"])
        self.assertEqual(data["state"]["history"], ["e4"])
        self.assertEqual(data["announcements"], ["Invalid move. Please try again."])

    def test_drop_requires_source(self):
        self.assertEqual(self.client.post("/api/game/drop", json={"to": "e4"}).status_code, 400)

    def test_drop_rejects_non_string_fields(self):
        for payload in ({"from": 12, "to": "e4"}, {"from": "e2", "to": ["e4"]}, {"from": "a7", "to": "a8", "promotion": 5}):
            rsp = self.client.post("/api/game/drop", json=payload)
            self.assertEqual(rsp.status_code, 400, payload)
            self.assertIn("must be a string", rsp.get_json()["error"])
        self.assertEqual(self.client.get("/api/game").get_json()["state"]["history"], [])

    def test_utterance_rejects_non_string_fields(self):
        for payload in ({"transcript": 5}, {"error": {"code": "network"}}):
            rsp = self.client.post("/api/game/utterance", json=payload)
            self.assertEqual(rsp.status_code, 400, payload)
        data = self.client.get("/api/game").get_json()
        self.assertEqual(data["state"]["history"], [])
        self.assertIsNone(data["display"]["transcript"])

    def test_body_must_be_an_object(self):
        self.assertEqual(self.client.post("/api/game/utterance", json=["e4"]).status_code, 400)
        self.assertEqual(self.client.post("/api/game/drop", json="e2e4").status_code, 400)
        self.assertEqual(self.client.post("/api/game/new", json={"fen": 7}).status_code, 400)

    def test_listening_disabled_after_checkmate(self):
        for move in ("f3", "e5", "g4", "queen to h4"):
            data = self.client.post("/api/game/utterance", json={"transcript": move}).get_json()
        self.assertEqual(data["state"]["status"], "checkmate")
        self.assertEqual(data["announcements"], ["Qh4#", "Checkmate! Black wins!"])
        self.assertFalse(data["can_listen"])
        data = self.client.post("/api/game/utterance", json={"transcript": "a3"}).get_json()
        self.assertTrue(data["ignored"])
        self.assertEqual(len(data["state"]["history"]), 4)

    def test_new_game_with_bad_fen(self):
        rsp = self.client.post("/api/game/new", json={"fen": "not a fen"})
        self.assertEqual(rsp.status_code, 400)

    def test_audio_is_transcribed(self):
        with patch.object(server, "transcribe_audio", return_value="pawn to e4") as transcribe:
            data = self.client.post("/api/game/audio?filename=move.webm", data=b"OggS").get_json()
        transcribe.assert_called_once_with(b"OggS", "move.webm")
        self.assertEqual(data["state"]["history"], ["e4"])

    def test_audio_transport_failure(self):
        with patch.object(server, "transcribe_audio", side_effect=SpeechTransportError("down")):
            data = self.client.post("/api/game/audio", data=b"OggS").get_json()
        self.assertEqual(data["display"]["error"], "Speech recognition error (network). Please try again.")
        self.assertEqual(data["state"]["history"], [])


if __name__ == "__main__":
    unittest.main()
