"""
Voice Chess package.

Components:
- normalizer: spoken utterance -> move descriptor (castling phrase, piece phrase, strict SAN)
- executor/state: apply descriptors through the python-chess rules engine; single game state
- session: one capture session at a time, board drops, new game
- speech/speech_client: capture and output capabilities (console, scripted, OpenAI audio)
- server/cli: Flask bridge for a browser board and a console front-end
"""
# Package exports are intentionally minimal; import modules directly as needed.
