"""Core parsing, segmentation, and grouping modules.

WHY: The core package holds the algorithmic heart of the inspector —
the IR dataclasses and the transforms that build them from raw log
text. Exporters and the CLI consume these and must not reach past them.

HOW: ir.py defines the data structures, events.py the fixed event type
catalog, decoder.py decodes single lines, segmenter.py splits a file
into sessions, grouping.py builds response cycles and delta runs.

RULES:
- IR dataclasses are the contract — change with care
- Core logic is export-agnostic — no file formats here
"""
