"""Shared test fixtures for the realtime_log test suite.

WHY: Decoder, segmenter, grouping, codec, and exporter tests all need
the same realistic two-session log. Centralizing it here avoids
duplication and keeps line numbers consistent across test modules.

HOW: SAMPLE_LOG_LINES is a literal log with prefixes in several
combinations, one undecodable line, and a blank line. Factory fixtures
build DecodedLine objects and base64 PCM16 payloads for targeted tests.

RULES:
- Line numbers quoted in tests refer to SAMPLE_LOG_LINES (1-based)
- Audio payloads are built from known int16 samples
"""

import base64
import json
import struct
from typing import Any, Dict, List

import pytest

from realtime_log.core.ir import DecodedLine
from realtime_log.core.segmenter import parse_log_file


def _pcm16_b64(samples: List[int]) -> str:
    return base64.b64encode(struct.pack("<{}h".format(len(samples)), *samples)).decode("ascii")


AUDIO_CHUNK_1 = _pcm16_b64([16384, -16384])
AUDIO_CHUNK_2 = _pcm16_b64([0, 8192, -32768])

_TS = "2024-01-15T10:30:0{}.000Z"
_TAG = "[abc-123]"

SAMPLE_LOG_LINES: List[str] = [
    # 1
    _TS.format(0) + " " + _TAG + " [OPENAI] " + json.dumps({
        "type": "session.created", "event_id": "e1",
        "session": {"id": "sess_1", "model": "gpt-4o-realtime-preview", "voice": "alloy"},
    }),
    # 2
    _TS.format(1) + " " + _TAG + " [USER] " + json.dumps({"type": "input_audio_buffer.speech_started", "event_id": "e2"}),
    # 3
    _TS.format(2) + " " + _TAG + " [USER] " + json.dumps({"type": "input_audio_buffer.speech_stopped", "event_id": "e3"}),
    # 4
    _TS.format(3) + " " + _TAG + " [OPENAI] " + json.dumps({
        "type": "conversation.item.input_audio_transcription.completed", "event_id": "e4",
        "transcript": "What's the weather?",
    }),
    # 5
    _TS.format(4) + " " + _TAG + " [OPENAI] " + json.dumps({"type": "response.created", "event_id": "e5", "response": {"id": "resp_1"}}),
    # 6
    _TS.format(5) + " [OPENAI] " + json.dumps({"type": "response.audio_transcript.delta", "event_id": "e6", "delta": "It's "}),
    # 7
    _TS.format(5) + " [OPENAI] " + json.dumps({"type": "response.audio_transcript.delta", "event_id": "e7", "delta": "sunny."}),
    # 8
    _TS.format(6) + " [OPENAI] " + json.dumps({"type": "response.audio.delta", "event_id": "e8", "delta": AUDIO_CHUNK_1}),
    # 9
    _TS.format(6) + " [OPENAI] " + json.dumps({"type": "response.audio.delta", "event_id": "e9", "delta": AUDIO_CHUNK_2}),
    # 10
    json.dumps({"type": "response.audio_transcript.done", "event_id": "e10", "transcript": "It's sunny."}),
    # 11
    _TS.format(7) + " " + json.dumps({
        "type": "response.done", "event_id": "e11",
        "response": {"id": "resp_1", "usage": {"input_tokens": 10, "output_tokens": 20, "total_tokens": 30}},
    }),
    # 12
    "",
    # 13
    "2024-01-15T10:30:08.000Z [OPENAI] {not json",
    # 14
    _TS.format(9) + " [def-456] " + json.dumps({
        "type": "session.created", "event_id": "e14",
        "session": {"id": "sess_2", "model": "gpt-x"},
    }),
    # 15
    json.dumps({"type": "response.created", "event_id": "e15", "response": {"id": "resp_2"}}),
    # 16
    json.dumps({"type": "response.text.delta", "event_id": "e16", "delta": "Hel"}),
    # 17
    json.dumps({"type": "response.text.delta", "event_id": "e17", "delta": "lo"}),
    # 18
    json.dumps({"type": "response.cancelled", "event_id": "e18"}),
]

SAMPLE_LOG_TEXT = "\n".join(SAMPLE_LOG_LINES) + "\n"


@pytest.fixture
def sample_log_text():
    """The sample two-session log as one string."""
    return SAMPLE_LOG_TEXT


@pytest.fixture
def parsed_sample():
    """The sample log run through parse_log_file."""
    return parse_log_file(SAMPLE_LOG_TEXT)


@pytest.fixture
def make_line():
    """Factory building a DecodedLine from an event type and extra fields.

    Line numbers auto-increment from 1 per test unless given explicitly.
    """
    counter = {"n": 0}

    def _make(event_type: str, line_number: int = 0, timestamp: str = None, **fields: Any) -> DecodedLine:
        counter["n"] = line_number or counter["n"] + 1
        event: Dict[str, Any] = {"type": event_type, "event_id": "evt_{}".format(counter["n"])}
        event.update(fields)
        return DecodedLine(
            event=event,
            raw_text=json.dumps(event),
            line_number=counter["n"],
            timestamp=timestamp,
        )

    return _make


@pytest.fixture
def pcm16_b64():
    """Factory encoding int16 samples as base64 little-endian PCM16."""
    return _pcm16_b64
