"""Exporter interface shared by every output format.

WHY: The JSON export, the conversation transcript, and the WAV export
all read one ParsedLog, but they differ in how many files they write
and in what those files hold (text vs. audio bytes). The CLI should not
care which one it is driving.

HOW: An exporter subclasses BaseFormatter and returns FormatterOutput
records. Each record names its file only by suffix; the CLI adds the
log's stem and resolves name conflicts.

RULES:
- ``name`` is for status messages only, never for file names
- ``format()`` may return zero outputs (a log without response audio
  yields no WAV files)
- ``content`` is ``str`` for text formats, ``bytes`` for audio
- Exporters never touch the filesystem
- Exporters may append to ``parsed.warnings`` but never change sessions
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from realtime_log.core.ir import ParsedLog


@dataclass
class FormatterOutput:
    """A file an exporter wants written.

    Attributes:
        suffix: Appended to the log's stem; starts with a hyphen
                (``"-session-1-response-2.wav"``).
        content: Text, saved as UTF-8, or raw bytes.
        media_type: MIME type, e.g. ``"audio/wav"``.
    """

    suffix: str
    content: str | bytes
    media_type: str


class BaseFormatter(ABC):
    """An export format selectable with ``--formats``.

    New formats get a module under formatters/ and one entry in
    FORMATTERS.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Label shown while the exporter runs, e.g. 'Conversation Text'."""

    @abstractmethod
    def format(self, parsed: ParsedLog) -> list[FormatterOutput]:
        """Render the whole parsed log.

        Args:
            parsed: Every session of the log plus the warnings collected
                    so far.

        Returns:
            The files to write, in the order they should be saved.
        """
