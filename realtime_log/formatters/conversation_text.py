"""Plain text conversation reconstructed from a realtime log.

WHY: Reviewers usually want to know what was said, not which events
fired. The words of a realtime conversation are scattered across
transcription events and hundreds of transcript deltas; this export
stitches them back into a readable back-and-forth.

HOW: Each session is grouped with group_events. Completed input
transcriptions become "User:" lines. Each response cycle becomes one
"Assistant:" line built from its transcript/text delta runs, falling back
to the .done events when no deltas were logged. Function calls and
errors get their own lines.

RULES:
- One block per session, headed by "== <session id>" and its metadata
- Cancelled and unfinished responses are tagged "[cancelled]" /
  "[incomplete]"
- Sessions with nothing to say print "(no conversation)"
- Blank line between sessions, no trailing whitespace
- Output suffix: "-conversation.txt"
"""

from __future__ import annotations

from typing import List, Optional

from realtime_log.core.events import (
    AUDIO_TRANSCRIPT_DELTA,
    FUNCTION_CALL_ARGUMENTS_DONE,
    TEXT_DELTA,
)
from realtime_log.core.grouping import get_delta_group_stats, group_events
from realtime_log.core.ir import (
    DecodedLine,
    DeltaGroup,
    ParsedLog,
    ResponseCycle,
    Session,
    StandaloneEvent,
    as_dict,
    as_str,
)
from realtime_log.formatters.base import BaseFormatter, FormatterOutput

_INPUT_TRANSCRIPTION_COMPLETED = "conversation.item.input_audio_transcription.completed"
_AUDIO_TRANSCRIPT_DONE = "response.audio_transcript.done"
_TEXT_DONE = "response.text.done"

_ASSISTANT_DELTA_TYPES = frozenset({AUDIO_TRANSCRIPT_DELTA, TEXT_DELTA})


def _session_header(session: Session) -> str:
    parts = ["== {}".format(session.id)]
    if session.model:
        parts.append("model: {}".format(session.model))
    if session.voice:
        parts.append("voice: {}".format(session.voice))
    if session.start_time:
        parts.append(session.start_time)
    return " | ".join(parts)


def _describe_line(line: DecodedLine) -> Optional[str]:
    """Render a single non-delta event, or None if it carries no dialogue."""
    event = line.event
    event_type = line.event_type

    if event_type == _INPUT_TRANSCRIPTION_COMPLETED:
        transcript = as_str(event.get("transcript"))
        if transcript and transcript.strip():
            return "User: {}".format(transcript.strip())
        return None

    if event_type == FUNCTION_CALL_ARGUMENTS_DONE:
        name = as_str(event.get("name")) or "unknown"
        arguments = as_str(event.get("arguments")) or ""
        return "Function call: {}({})".format(name, arguments)

    if event_type == "error":
        error = as_dict(event.get("error")) or {}
        message = as_str(error.get("message")) or "unknown error"
        return "Error: {}".format(message)

    return None


def _assistant_text(cycle: ResponseCycle) -> str:
    """Reconstruct what the assistant said during one response cycle."""
    streamed: List[str] = []
    finished: List[str] = []

    for item in cycle.items:
        if isinstance(item, DeltaGroup):
            if item.event_type in _ASSISTANT_DELTA_TYPES:
                streamed.append(get_delta_group_stats(item).aggregated_text or "")
        elif item.event_type == _AUDIO_TRANSCRIPT_DONE:
            finished.append(as_str(item.event.get("transcript")) or "")
        elif item.event_type == _TEXT_DONE:
            finished.append(as_str(item.event.get("text")) or "")

    text = "".join(streamed) if any(streamed) else "".join(finished)
    return text.strip()


def _cycle_lines(cycle: ResponseCycle) -> List[str]:
    lines: List[str] = []
    calls: List[str] = []

    for item in cycle.items:
        if isinstance(item, DeltaGroup):
            continue
        described = _describe_line(item)
        if described is None:
            continue
        if item.event_type == FUNCTION_CALL_ARGUMENTS_DONE:
            calls.append(described)
        else:
            lines.append(described)

    text = _assistant_text(cycle)
    tag = ""
    if not cycle.is_complete:
        tag = " [incomplete]"
    elif cycle.is_cancelled:
        tag = " [cancelled]"
    if text or tag:
        lines.append("Assistant{}: {}".format(tag, text).rstrip())

    lines.extend(calls)
    return lines


def _session_lines(session: Session) -> List[str]:
    lines: List[str] = []
    for group in group_events(session.events):
        if isinstance(group, StandaloneEvent):
            described = _describe_line(group.event)
            if described is not None:
                lines.append(described)
        elif isinstance(group, ResponseCycle):
            lines.extend(_cycle_lines(group))
    return lines


class ConversationTextFormatter(BaseFormatter):
    """Formatter that produces a readable User/Assistant transcript.

    RULES:
    - One block per session, in log order
    - Output suffix: "-conversation.txt"
    - Media type: "text/plain"
    """

    @property
    def name(self) -> str:
        return "Conversation Text"

    def format(self, parsed: ParsedLog) -> List[FormatterOutput]:
        blocks: List[str] = []
        for session in parsed.sessions:
            body = _session_lines(session) or ["(no conversation)"]
            blocks.append("\n".join([_session_header(session)] + body))

        content = "\n\n".join(blocks)
        if content:
            content += "\n"

        return [
            FormatterOutput(
                suffix="-conversation.txt",
                content=content,
                media_type="text/plain",
            )
        ]
