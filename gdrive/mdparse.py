"""Markdown to Google Docs batchUpdate translation.

Supports a deliberately small subset of markdown: ``#``/``##``/``###``
headings, ``-``/``*``/numbered list items, ``**bold**``, ``*italic*`` and
paragraphs separated by blank lines. Everything else is plain text.

Translation is two-pass. All lines are first concatenated into one body
string while recording each line's absolute offsets; formatting operations
are then derived from those offsets alone. The result is an ``EditScript``:
one bulk insert at the start of an empty document followed by formatting
operations whose ranges do not depend on each other.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# Docs API body indices start at 1 (index 0 is the section break).
DOCUMENT_ORIGIN = 1

BULLET_PRESET = "BULLET_DISC_CIRCLE_SQUARE"

_HEADING_PREFIXES = (
    ("# ", "heading1"),
    ("## ", "heading2"),
    ("### ", "heading3"),
)
_HEADING_LEVELS = {"heading1": 1, "heading2": 2, "heading3": 3}

_BULLET_RE = re.compile(r"^[-*]\s+")
_NUMBERED_RE = re.compile(r"^\d+\.\s+")

# Bold is tried first at each position so "**x**" is never two italics.
_INLINE_RE = re.compile(r"\*\*(.+?)\*\*|\*(.+?)\*")


@dataclass(frozen=True)
class TextSpan:
    """A run of literal text with at most one emphasis."""

    text: str
    emphasis: str | None = None  # None, "bold", or "italic"


@dataclass(frozen=True)
class ParsedLine:
    """One output paragraph: its kind plus the inline spans it contains."""

    kind: str  # "heading1".."heading3", "bullet", or "paragraph"
    spans: tuple[TextSpan, ...] = ()

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.spans)


@dataclass(frozen=True)
class FormatOp:
    """A formatting operation over the absolute range [start, end)."""

    kind: str  # "heading", "bullet", "bold", or "italic"
    start: int
    end: int
    level: int | None = None  # heading level, headings only


@dataclass(frozen=True)
class EditScript:
    """Bulk text insert at DOCUMENT_ORIGIN plus formatting over that text."""

    insert_text: str
    format_ops: list[FormatOp] = field(default_factory=list)


_SPACER = ParsedLine(kind="paragraph", spans=(TextSpan(""),))


def parse_inline(text: str) -> list[TextSpan]:
    """Split a line's content into plain, bold and italic spans.

    Unterminated markers don't match and stay in the plain text. Nested
    emphasis is not supported: a span takes the first marker it matched.
    """
    spans: list[TextSpan] = []
    last = 0

    for m in _INLINE_RE.finditer(text):
        if m.start() > last:
            spans.append(TextSpan(text[last:m.start()]))
        if m.group(1) is not None:
            spans.append(TextSpan(m.group(1), "bold"))
        else:
            spans.append(TextSpan(m.group(2), "italic"))
        last = m.end()

    if last < len(text):
        spans.append(TextSpan(text[last:]))

    if not spans:
        spans.append(TextSpan(text))

    return spans


def parse_line(line: str) -> ParsedLine | None:
    """Classify one source line. Returns None for blank lines.

    Prefixes are tested in a fixed priority order and the first match wins.
    Numbered items become plain bullets; their numbering is not kept.
    """
    if not line.strip():
        return None

    kind, content = "paragraph", line
    for prefix, heading_kind in _HEADING_PREFIXES:
        if line.startswith(prefix):
            kind, content = heading_kind, line[len(prefix):]
            break
    else:
        m = _BULLET_RE.match(line) or _NUMBERED_RE.match(line)
        if m:
            kind, content = "bullet", line[m.end():]

    return ParsedLine(kind=kind, spans=tuple(parse_inline(content)))


def parse_markdown(text: str) -> list[ParsedLine]:
    """Parse markdown into paragraphs.

    A run of blank lines between two content lines becomes one empty
    spacer paragraph. Leading and trailing blank lines produce nothing.
    """
    lines: list[ParsedLine] = []
    pending_separator = False

    for raw in text.split("\n"):
        parsed = parse_line(raw)
        if parsed is None:
            pending_separator = True
            continue
        if pending_separator and lines:
            lines.append(_SPACER)
        lines.append(parsed)
        pending_separator = False

    return lines


def build_edit_script(text: str) -> EditScript:
    """Translate markdown into an EditScript for an empty document."""
    parsed_lines = parse_markdown(text)

    # Pass 1: concatenate the body and record each line's offsets.
    body_parts: list[str] = []
    positions: list[tuple[int, int, ParsedLine]] = []
    length = 0
    for line in parsed_lines:
        start = length + DOCUMENT_ORIGIN
        body_parts.append(line.text + "\n")
        length += len(line.text) + 1
        positions.append((start, length, line))

    # Pass 2: derive formatting from the recorded offsets.
    ops: list[FormatOp] = []
    for start, end, line in positions:
        if end > start:
            if line.kind in _HEADING_LEVELS:
                ops.append(FormatOp(
                    "heading", start, end, level=_HEADING_LEVELS[line.kind],
                ))
            elif line.kind == "bullet":
                ops.append(FormatOp("bullet", start, end))

        cursor = start
        for span in line.spans:
            span_end = cursor + len(span.text)
            if span.emphasis and span_end > cursor:
                ops.append(FormatOp(span.emphasis, cursor, span_end))
            cursor = span_end

    return EditScript(insert_text="".join(body_parts), format_ops=ops)


def to_docs_requests(script: EditScript) -> list[dict]:
    """Convert an EditScript into Docs API batchUpdate request dicts.

    The insertText request always comes first; every formatting request
    addresses text that only exists once it has run.
    """
    if not script.insert_text:
        return []

    requests: list[dict] = [{
        "insertText": {
            "location": {"index": DOCUMENT_ORIGIN},
            "text": script.insert_text,
        }
    }]

    for op in script.format_ops:
        rng = {"startIndex": op.start, "endIndex": op.end}
        if op.kind == "heading":
            requests.append({
                "updateParagraphStyle": {
                    "range": rng,
                    "paragraphStyle": {"namedStyleType": f"HEADING_{op.level}"},
                    "fields": "namedStyleType",
                }
            })
        elif op.kind == "bullet":
            requests.append({
                "createParagraphBullets": {
                    "range": rng,
                    "bulletPreset": BULLET_PRESET,
                }
            })
        else:
            requests.append({
                "updateTextStyle": {
                    "range": rng,
                    "textStyle": {op.kind: True},
                    "fields": op.kind,
                }
            })

    return requests


def markdown_to_requests(text: str) -> list[dict]:
    """Shortcut: markdown straight to batchUpdate requests."""
    return to_docs_requests(build_edit_script(text))


_STRIP_RULES = [
    (re.compile(r"^#{1,3}\s+", re.MULTILINE), ""),
    (re.compile(r"\*\*(.+?)\*\*"), r"\1"),
    (re.compile(r"\*(.+?)\*"), r"\1"),
    (re.compile(r"^[-*]\s+", re.MULTILINE), "• "),
]


def strip_markdown(text: str) -> str:
    """Remove supported markdown markers, rendering bullets as '• '."""
    for pattern, repl in _STRIP_RULES:
        text = pattern.sub(repl, text)
    return text
