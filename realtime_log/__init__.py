"""Realtime Log Inspector — structured model of realtime API event logs.

WHY: A realtime conversational API logs one JSON event per line, often
prefixed with a timestamp, a session tag and a source tag. Read raw, a
single spoken answer is hundreds of lines of audio and transcript deltas.
This package rebuilds sessions, response cycles, and coalesced delta runs
from that flat stream and decodes the audio the model streamed back.

HOW: Four-stage pipeline — decode lines (core.decoder), segment into
sessions (core.segmenter), group each session's events (core.grouping),
decode audio runs on demand (audio.codec). Pluggable exporters
(formatters) write the structured model to JSON, text, or WAV files.

RULES:
- Every stage is a synchronous, pure transform over in-memory text
- Malformed lines and audio fragments are skipped with a warning, never fatal
- All exporters consume the same ParsedLog
"""

__version__ = "0.1.0"
