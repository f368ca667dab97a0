"""Schema-validated JSON export of the grouped session model.

WHY: Other tools (notebooks, dashboards, diffing scripts) want the
structured model — sessions, phases, response cycles, delta runs — not
the raw log. A stable, validated JSON document is the handoff format.

HOW: Each session is grouped with group_events and serialized as a tree
of plain dicts. Audio deltas are redacted with sanitize_event so the
export stays readable; delta groups carry their member count and, for
text deltas, the reconstructed text. The result is validated with
jsonschema against session_export_schema.json before returning.

RULES:
- Output is deterministic: the same log always exports byte-identical JSON
- Base64 audio never appears in the export
- Every log line appears exactly once under its session's groups
- Schema validation is mandatory — raises on invalid output
- "warnings" lists everything in parsed.warnings: undecodable lines, plus
  audio fragments recorded by earlier decoding (CLI summary, WAV export)
- Output suffix: "-events.json"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import jsonschema

from realtime_log.core.events import (
    get_event_category,
    get_session_stats,
    is_user_event,
    sanitize_event,
)
from realtime_log.core.grouping import get_delta_group_stats, group_events
from realtime_log.core.ir import (
    CycleItem,
    DecodedLine,
    DeltaGroup,
    EventGroup,
    ParsedLog,
    ParseWarning,
    PhaseMarker,
    ResponseCycle,
    Session,
    StandaloneEvent,
)
from realtime_log.formatters.base import BaseFormatter, FormatterOutput

EXPORT_VERSION = "1.0.0"

_SCHEMA_PATH = Path(__file__).resolve().parent / "session_export_schema.json"

_CACHED_SCHEMA: Dict[str, Any] | None = None


def get_schema() -> Dict[str, Any]:
    """Load the export schema, cached after the first call."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def _line_to_dict(line: DecodedLine) -> Dict[str, Any]:
    return {
        "kind": "event",
        "line_number": line.line_number,
        "timestamp": line.timestamp,
        "session_tag": line.session_tag,
        "source": line.source.value if line.source else None,
        "user": is_user_event(line),
        "category": get_event_category(line.event_type).value,
        "event": sanitize_event(line.event),
    }


def _delta_group_to_dict(group: DeltaGroup) -> Dict[str, Any]:
    stats = get_delta_group_stats(group)
    return {
        "kind": "delta_group",
        "event_type": group.event_type,
        "first_line": group.first_line,
        "last_line": group.last_line,
        "count": stats.count,
        "aggregated_text": stats.aggregated_text,
        "events": [_line_to_dict(line) for line in group.events],
    }


def _item_to_dict(item: CycleItem) -> Dict[str, Any]:
    if isinstance(item, DeltaGroup):
        return _delta_group_to_dict(item)
    return _line_to_dict(item)


def _cycle_status(cycle: ResponseCycle) -> str:
    if not cycle.is_complete:
        return "incomplete"
    return "cancelled" if cycle.is_cancelled else "done"


def _cycle_to_dict(cycle: ResponseCycle) -> Dict[str, Any]:
    usage = cycle.token_usage
    return {
        "kind": "response_cycle",
        "response_id": cycle.response_id,
        "status": _cycle_status(cycle),
        "start_line": cycle.start_event.line_number,
        "end_line": cycle.end_event.line_number if cycle.end_event else None,
        "token_usage": (
            {"input": usage.input, "output": usage.output, "total": usage.total}
            if usage else None
        ),
        "total_events": cycle.total_events,
        "items": [_item_to_dict(item) for item in cycle.items],
    }


def _group_to_dict(group: EventGroup) -> Dict[str, Any]:
    if isinstance(group, PhaseMarker):
        return {
            "kind": "phase",
            "phase": group.phase.value,
            "line_number": group.line_number,
            "timestamp": group.timestamp,
        }
    if isinstance(group, StandaloneEvent):
        return {"kind": "standalone", "event": _line_to_dict(group.event)}
    return _cycle_to_dict(group)


def _session_to_dict(session: Session) -> Dict[str, Any]:
    return {
        "id": session.id,
        "session_tag": session.session_tag,
        "remote_session_id": session.remote_session_id,
        "start_time": session.start_time,
        "model": session.model,
        "voice": session.voice,
        "implicit": session.implicit,
        "event_count": len(session.events),
        "stats": dict(get_session_stats(session)),
        "groups": [_group_to_dict(g) for g in group_events(session.events)],
    }


def _warning_to_dict(warning: ParseWarning) -> Dict[str, Any]:
    return {
        "kind": warning.kind,
        "line_number": warning.line_number,
        "message": warning.message,
        "preview": warning.preview,
    }


def build_export(parsed: ParsedLog) -> Dict[str, Any]:
    """Build the export document as plain dicts, without validating it."""
    return {
        "version": EXPORT_VERSION,
        "sessions": [_session_to_dict(s) for s in parsed.sessions],
        "warnings": [_warning_to_dict(w) for w in parsed.warnings],
    }


class JSONExportFormatter(BaseFormatter):
    """Formatter producing the grouped session model as JSON.

    RULES:
    - One file for the whole log, all sessions included
    - Output suffix is "-events.json"
    - Schema validation is mandatory — raises on invalid output
    """

    @property
    def name(self) -> str:
        return "JSON Export"

    def format(self, parsed: ParsedLog) -> List[FormatterOutput]:
        """Serialize the parsed log to JSON.

        Raises:
            jsonschema.ValidationError: If the generated document does not
                conform to the export schema.
        """
        output = build_export(parsed)
        jsonschema.validate(instance=output, schema=get_schema())

        content = json.dumps(output, indent=2, ensure_ascii=False)

        return [
            FormatterOutput(
                suffix="-events.json",
                content=content,
                media_type="application/json",
            )
        ]
