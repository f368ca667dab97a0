"""Event type catalog, categories, and event helpers.

WHY: Grouping and exporting depend on a handful of fixed type strings —
which events are streaming deltas, which mark a new phase, which open or
close a response. Keeping them as plain data in one module lets the rest
of the code refer to names instead of repeating string literals.

HOW: EVENT_CATEGORIES maps every known realtime event type to an
EventCategory. DELTA_EVENT_TYPES lists the streaming fragment types that
are coalesced into runs. Marker constants name the events the grouping
state machine reacts to.

RULES:
- Unknown event types categorize as EventCategory.UNKNOWN, never raise
- sanitize_event never mutates its argument
- Adding a new event type = one new entry in EVENT_CATEGORIES
"""

from __future__ import annotations

import enum
from collections import Counter
from typing import Any, Dict

from realtime_log.config import AUDIO_REDACTION_PLACEHOLDER
from realtime_log.core.ir import DecodedLine, Event, LogSource, Session


class EventCategory(str, enum.Enum):
    SESSION = "session"
    ERROR = "error"
    CONVERSATION = "conversation"
    AUDIO_BUFFER = "audio_buffer"
    RESPONSE_LIFECYCLE = "response_lifecycle"
    RESPONSE_OUTPUT = "response_output"
    RESPONSE_CONTENT = "response_content"
    RESPONSE_AUDIO = "response_audio"
    RESPONSE_TEXT = "response_text"
    FUNCTION_CALL = "function_call"
    RATE_LIMITS = "rate_limits"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Marker event types
# ---------------------------------------------------------------------------

SESSION_CREATED = "session.created"
SPEECH_STARTED = "input_audio_buffer.speech_started"
SPEECH_STOPPED = "input_audio_buffer.speech_stopped"
RESPONSE_CREATED = "response.created"
RESPONSE_DONE = "response.done"
RESPONSE_CANCELLED = "response.cancelled"
FUNCTION_CALL_ARGUMENTS_DONE = "response.function_call_arguments.done"

# ---------------------------------------------------------------------------
# Streaming delta event types
# ---------------------------------------------------------------------------

AUDIO_DELTA = "response.audio.delta"
AUDIO_TRANSCRIPT_DELTA = "response.audio_transcript.delta"
TEXT_DELTA = "response.text.delta"
FUNCTION_CALL_ARGUMENTS_DELTA = "response.function_call_arguments.delta"
INPUT_TRANSCRIPTION_DELTA = "conversation.item.input_audio_transcription.delta"

DELTA_EVENT_TYPES = frozenset({
    AUDIO_DELTA,
    AUDIO_TRANSCRIPT_DELTA,
    TEXT_DELTA,
    FUNCTION_CALL_ARGUMENTS_DELTA,
    INPUT_TRANSCRIPTION_DELTA,
})

# Delta types whose fragments concatenate into human-readable text.
TEXT_DELTA_EVENT_TYPES = frozenset({
    AUDIO_TRANSCRIPT_DELTA,
    TEXT_DELTA,
    INPUT_TRANSCRIPTION_DELTA,
})

EVENT_CATEGORIES: Dict[str, EventCategory] = {
    "session.created": EventCategory.SESSION,
    "session.updated": EventCategory.SESSION,
    "error": EventCategory.ERROR,
    "conversation.created": EventCategory.CONVERSATION,
    "conversation.item.created": EventCategory.CONVERSATION,
    "conversation.item.retrieved": EventCategory.CONVERSATION,
    "conversation.item.input_audio_transcription.delta": EventCategory.CONVERSATION,
    "conversation.item.input_audio_transcription.completed": EventCategory.CONVERSATION,
    "input_audio_buffer.committed": EventCategory.AUDIO_BUFFER,
    "input_audio_buffer.cleared": EventCategory.AUDIO_BUFFER,
    "input_audio_buffer.speech_started": EventCategory.AUDIO_BUFFER,
    "input_audio_buffer.speech_stopped": EventCategory.AUDIO_BUFFER,
    "response.created": EventCategory.RESPONSE_LIFECYCLE,
    "response.done": EventCategory.RESPONSE_LIFECYCLE,
    "response.cancelled": EventCategory.RESPONSE_LIFECYCLE,
    "response.output_item.added": EventCategory.RESPONSE_OUTPUT,
    "response.output_item.done": EventCategory.RESPONSE_OUTPUT,
    "response.content_part.added": EventCategory.RESPONSE_CONTENT,
    "response.content_part.done": EventCategory.RESPONSE_CONTENT,
    "response.audio.delta": EventCategory.RESPONSE_AUDIO,
    "response.audio.done": EventCategory.RESPONSE_AUDIO,
    "response.audio_transcript.delta": EventCategory.RESPONSE_AUDIO,
    "response.audio_transcript.done": EventCategory.RESPONSE_AUDIO,
    "response.text.delta": EventCategory.RESPONSE_TEXT,
    "response.text.done": EventCategory.RESPONSE_TEXT,
    "response.function_call_arguments.delta": EventCategory.FUNCTION_CALL,
    "response.function_call_arguments.done": EventCategory.FUNCTION_CALL,
    "rate_limits.updated": EventCategory.RATE_LIMITS,
}


def get_event_category(event_type: Any) -> EventCategory:
    """Look up the category of an event type, UNKNOWN when unmapped."""
    if not isinstance(event_type, str):
        return EventCategory.UNKNOWN
    return EVENT_CATEGORIES.get(event_type, EventCategory.UNKNOWN)


def is_delta_event(event_type: str) -> bool:
    return event_type in DELTA_EVENT_TYPES


def is_audio_delta_event(event: Event) -> bool:
    return event.get("type") == AUDIO_DELTA


def is_user_event(line: DecodedLine) -> bool:
    """Whether a line was produced on the user's side of the conversation.

    The "user_input" category fallback has no entry in EVENT_CATEGORIES,
    so today only an explicit [USER] source tag makes this True.
    """
    if line.source is LogSource.USER:
        return True
    return get_event_category(line.event_type).value == "user_input"


def sanitize_event(event: Event) -> Event:
    """Return a copy of event safe to display, with base64 audio hidden.

    WHY: A single response.audio.delta carries kilobytes of base64 PCM
    that is useless to read and drowns out every other field.

    RULES:
    - Only response.audio.delta events are changed
    - The delta field is replaced with AUDIO_REDACTION_PLACEHOLDER
    - Other events are returned as-is (same object)
    """
    if is_audio_delta_event(event):
        sanitized = dict(event)
        sanitized["delta"] = AUDIO_REDACTION_PLACEHOLDER
        return sanitized
    return event


def get_session_stats(session: Session) -> Counter:
    """Count the events of a session by type, in first-seen order."""
    stats: Counter = Counter()
    for line in session.events:
        stats[line.event_type] += 1
    return stats
