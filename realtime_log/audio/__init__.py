"""PCM16 audio decoding for response.audio.delta payloads.

WHY: The realtime API streams its spoken answers as base64 PCM16
fragments inside response.audio.delta events. Reconstructing them turns
a log back into something you can listen to.

HOW: codec.py decodes fragments to float32 numpy arrays and concatenates
them per delta run or per response cycle.

RULES:
- Decoding is per fragment; one bad fragment never loses the others
- Playback is the caller's concern, not this package's
"""
