"""Annotation extraction from scanned comment spans.

Only line and block comment spans are searched. Comment decoration is removed
before matching:

* line comments lose their start token and one following space;
* block comments lose their start/end tokens, and every line loses a leading
  ``*`` (plus one space) so aligned ``/* ... * ... */`` blocks read cleanly.

A marker must stand alone: whitespace or the edge of the stripped comment text
on both sides. ``@TODO(#12)`` also matches and records issue ``12``, the form
used once an annotation has been reported to an issue tracker.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .grammars import GrammarTable
from .scanner import scan
from .spans import Span, SpanKind

_ISSUE_REF = re.compile(rb"\(#(\d+)\)")


class MarkerPolicy(Enum):
    """How many annotations one comment may yield."""

    FIRST = "first"
    """Only the first marker occurrence counts; its payload runs to the comment end."""

    ALL = "all"
    """Every occurrence counts; each payload runs to the next occurrence."""


@dataclass(frozen=True, slots=True)
class Annotation:
    """A marker found in a comment, with the text that follows it."""

    marker: str
    payload: str
    """Text after the marker, decoration stripped, lines joined with ``\\n``."""

    line: int
    """1-based line of the marker's first byte."""

    column: int
    """1-based byte column of the marker's first byte."""

    offset: int
    """Byte offset of the marker's first byte."""

    source_span_kind: SpanKind
    span_start: int
    """Start of the comment (or first joined comment) holding the marker."""

    span_end: int
    """End of the comment (or last joined comment) holding the marker."""

    issue_number: int | None = None
    """Issue referenced as ``marker(#N)``, if the annotation was reported."""

    @property
    def location(self) -> tuple[int, int]:
        return self.line, self.column

    @property
    def is_reported(self) -> bool:
        return self.issue_number is not None

    @property
    def title(self) -> str:
        return self.payload.split("\n", 1)[0]

    @property
    def description(self) -> str:
        rest = self.payload.split("\n")[1:]
        return " ".join(line for line in rest if line)

    @property
    def marker_end(self) -> int:
        """Byte offset just past the marker (before any issue reference)."""
        return self.offset + len(self.marker.encode("utf-8"))


@dataclass(slots=True)
class _Line:
    offset: int
    """Source offset of ``text[0]``."""

    text: bytes


@dataclass(slots=True)
class _Hit:
    line: int
    """Index into the stripped lines."""

    start: int
    after: int
    """Index just past the marker and its issue reference."""

    issue: int | None


def _strip_line_comment(span: Span, source: bytes) -> list[_Line]:
    offset = span.start + len(span.opener.encode("utf-8"))
    text = source[offset : span.end]
    if text.startswith(b" "):
        text = text[1:]
        offset += 1
    return [_Line(offset, text.rstrip(b"\r"))]


def _strip_block_comment(span: Span, source: bytes) -> list[_Line]:
    offset = span.start + len(span.opener.encode("utf-8"))
    lines: list[_Line] = []
    for raw in span.body(source).split(b"\n"):
        text, line_offset = raw, offset
        offset += len(raw) + 1

        stripped = text.lstrip(b" \t")
        if stripped.startswith(b"*"):
            cut = len(text) - len(stripped) + 1
            if text[cut : cut + 1] == b" ":
                cut += 1
            text = text[cut:]
            line_offset += cut
        lines.append(_Line(line_offset, text.rstrip(b"\r")))
    return lines


def _strip(span: Span, source: bytes) -> list[_Line]:
    if span.kind is SpanKind.LINE_COMMENT:
        return _strip_line_comment(span, source)
    return _strip_block_comment(span, source)


def _is_boundary(text: bytes, index: int) -> bool:
    return index < 0 or index >= len(text) or text[index : index + 1].isspace()


def _find_hits(lines: list[_Line], marker: bytes) -> list[_Hit]:
    hits: list[_Hit] = []
    for index, line in enumerate(lines):
        text = line.text
        pos = text.find(marker)
        while pos != -1:
            after = pos + len(marker)
            issue = None
            ref = _ISSUE_REF.match(text, after)
            if ref is not None:
                after, issue = ref.end(), int(ref.group(1))
            if _is_boundary(text, pos - 1) and _is_boundary(text, after):
                hits.append(_Hit(index, pos, after, issue))
                pos = text.find(marker, after)
            else:
                pos = text.find(marker, pos + 1)
    return hits


def _payload(lines: list[_Line], hit: _Hit, stop: _Hit | None) -> str:
    last = len(lines) - 1 if stop is None else stop.line
    parts: list[bytes] = []
    for index in range(hit.line, last + 1):
        text = lines[index].text
        begin = hit.after if index == hit.line else 0
        end = stop.start if stop is not None and index == stop.line else len(text)
        parts.append(text[begin:end].strip())
    return b"\n".join(parts).strip().decode("utf-8", errors="replace")


def _position(span: Span, source: bytes, offset: int) -> tuple[int, int]:
    newline = source.rfind(b"\n", span.start, offset)
    if newline == -1:
        return span.line, span.column + (offset - span.start)
    return span.line + source.count(b"\n", span.start, offset), offset - newline


def _continuation(spans: list[Span], index: int, source: bytes, marker: bytes) -> list[int]:
    """Indices of unmarked line comments directly below ``spans[index]``."""
    following: list[int] = []
    while index + 2 < len(spans):
        gap, nxt = spans[index + 1], spans[index + 2]
        gap_text = gap.text(source)
        if gap.kind is not SpanKind.CODE or gap_text.count(b"\n") != 1 or gap_text.strip():
            break
        if nxt.kind is not SpanKind.LINE_COMMENT or _find_hits(_strip(nxt, source), marker):
            break
        following.append(index + 2)
        index += 2
    return following


def extract_annotations(
    spans: Iterable[Span],
    source: bytes,
    marker: str,
    *,
    policy: MarkerPolicy = MarkerPolicy.FIRST,
    join_line_comments: bool = False,
) -> list[Annotation]:
    """Find *marker* annotations in the comment spans of *source*.

    Args:
        spans: Spans of *source* as produced by :func:`~sibylline_tags.scanner.scan`.
            Scan errors raised while consuming them propagate unchanged, so a
            broken file never looks like a file without annotations.
        source: The scanned bytes.
        marker: Tag token to look for, e.g. ``"@TODO"``.
        policy: Whether a comment yields its first or all marker occurrences.
        join_line_comments: Append unmarked line comments on the directly
            following lines to an annotated line comment's payload.

    Returns:
        Annotations in source order.
    """
    if not marker or any(ch.isspace() for ch in marker):
        raise ValueError(f"marker must be a non-empty token without whitespace, got {marker!r}")

    needle = marker.encode("utf-8")
    span_list = list(spans)
    annotations: list[Annotation] = []
    absorbed: set[int] = set()

    for index, span in enumerate(span_list):
        if not span.kind.is_comment or index in absorbed:
            continue

        lines = _strip(span, source)
        hits = _find_hits(lines, needle)
        if not hits:
            continue
        if policy is MarkerPolicy.FIRST:
            hits = hits[:1]

        span_end = span.end
        if join_line_comments and span.kind is SpanKind.LINE_COMMENT:
            for extra in _continuation(span_list, index, source, needle):
                lines.extend(_strip(span_list[extra], source))
                absorbed.add(extra)
                span_end = span_list[extra].end

        for number, hit in enumerate(hits):
            stop = hits[number + 1] if number + 1 < len(hits) else None
            offset = lines[hit.line].offset + hit.start
            line, column = _position(span, source, offset)
            annotations.append(
                Annotation(
                    marker=marker,
                    payload=_payload(lines, hit, stop),
                    line=line,
                    column=column,
                    offset=offset,
                    source_span_kind=span.kind,
                    span_start=span.start,
                    span_end=span_end,
                    issue_number=hit.issue,
                )
            )

    return annotations


def find_annotations(
    source: bytes,
    grammar: GrammarTable,
    marker: str,
    *,
    policy: MarkerPolicy = MarkerPolicy.FIRST,
    join_line_comments: bool = False,
) -> list[Annotation]:
    """Scan *source* with *grammar* and extract its *marker* annotations."""
    return extract_annotations(
        scan(source, grammar),
        source,
        marker,
        policy=policy,
        join_line_comments=join_line_comments,
    )
