"""
Test suite for the token replay engine.

Focus areas:
- IOIndex derivation and integrity checks
- Firing rule conservation and reversibility
- Trace parsing, ordering and case filtering
- Replay state machine and timed playback
- Graph edits and model documents
"""
