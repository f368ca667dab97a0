"""Exporter registry — pluggable output formats.

WHY: The CLI needs a single lookup to find the right exporter by name. A
central dict makes it trivial to add new formats: create the formatter
class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["json_export"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be constructible with no arguments
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from realtime_log.formatters.conversation_text import ConversationTextFormatter
from realtime_log.formatters.json_export import JSONExportFormatter
from realtime_log.formatters.response_audio import ResponseAudioFormatter

if TYPE_CHECKING:
    from realtime_log.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "json_export": JSONExportFormatter,
    "conversation_text": ConversationTextFormatter,
    "response_audio": ResponseAudioFormatter,
}
