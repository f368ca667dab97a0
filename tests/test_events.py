"""Unit tests for the event catalog helpers.

HOW: Categories, delta classification, redaction, and per-session counts
are checked against hand-built lines and the shared sample log.
"""

from dataclasses import replace

from realtime_log.config import AUDIO_REDACTION_PLACEHOLDER
from realtime_log.core.events import (
    DELTA_EVENT_TYPES,
    EventCategory,
    get_event_category,
    get_session_stats,
    is_delta_event,
    is_user_event,
    sanitize_event,
)
from realtime_log.core.ir import LogSource


class TestCategories:
    def test_known_types(self):
        assert get_event_category("session.created") is EventCategory.SESSION
        assert get_event_category("response.audio.delta") is EventCategory.RESPONSE_AUDIO
        assert get_event_category("rate_limits.updated") is EventCategory.RATE_LIMITS

    def test_unknown_and_non_string(self):
        assert get_event_category("made.up") is EventCategory.UNKNOWN
        assert get_event_category(None) is EventCategory.UNKNOWN
        assert get_event_category(42) is EventCategory.UNKNOWN

    def test_delta_types(self):
        assert len(DELTA_EVENT_TYPES) == 5
        assert is_delta_event("response.text.delta")
        assert is_delta_event("conversation.item.input_audio_transcription.delta")
        assert not is_delta_event("response.text.done")


class TestUserEvents:
    def test_user_source_tag(self, make_line):
        line = replace(make_line("input_audio_buffer.speech_started"), source=LogSource.USER)
        assert is_user_event(line)

    def test_untagged_and_openai_lines(self, make_line):
        line = make_line("conversation.item.input_audio_transcription.completed")
        assert not is_user_event(line)
        assert not is_user_event(replace(line, source=LogSource.OPENAI))


class TestSanitize:
    def test_audio_delta_redacted_on_copy(self):
        event = {"type": "response.audio.delta", "delta": "AAAA", "item_id": "i1"}
        sanitized = sanitize_event(event)
        assert sanitized == {
            "type": "response.audio.delta",
            "delta": AUDIO_REDACTION_PLACEHOLDER,
            "item_id": "i1",
        }
        assert event["delta"] == "AAAA"

    def test_other_deltas_untouched(self):
        event = {"type": "response.audio_transcript.delta", "delta": "hi"}
        assert sanitize_event(event) is event


class TestSessionStats:
    def test_counts_by_type(self, parsed_sample):
        stats = get_session_stats(parsed_sample.sessions[0])
        assert stats["response.audio.delta"] == 2
        assert stats["response.audio_transcript.delta"] == 2
        assert stats["session.created"] == 1
        assert sum(stats.values()) == 11
        assert list(stats)[0] == "session.created"

    def test_empty_session(self, parsed_sample):
        session = replace(parsed_sample.sessions[1], events=[])
        assert not get_session_stats(session)
