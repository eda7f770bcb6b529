"""Classified regions of a scanned source buffer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SpanKind(Enum):
    CODE = "code"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    STRING_LITERAL = "string_literal"
    CHAR_LITERAL = "char_literal"

    @property
    def is_comment(self) -> bool:
        return self in (SpanKind.LINE_COMMENT, SpanKind.BLOCK_COMMENT)


@dataclass(frozen=True, slots=True)
class Span:
    """A half-open byte range ``[start, end)`` of the input with its classification.

    Spans produced by one scan are contiguous and together cover the whole
    buffer. They do not keep a reference to the buffer; use :meth:`text` with
    the original bytes to read the content back.
    """

    kind: SpanKind
    start: int
    """Byte offset of the first byte."""

    end: int
    """Byte offset one past the last byte."""

    line: int
    """1-based line of ``start``."""

    column: int
    """1-based byte column of ``start``."""

    opener: str = ""
    """Delimiter that opened the span (empty for code)."""

    closer: str = ""
    """Delimiter that closed the span (empty for code and line comments)."""

    @property
    def length(self) -> int:
        return self.end - self.start

    def text(self, source: bytes) -> bytes:
        return source[self.start : self.end]

    def body(self, source: bytes) -> bytes:
        """Content between the opening and closing delimiters."""
        start = self.start + len(self.opener.encode("utf-8"))
        end = self.end - len(self.closer.encode("utf-8"))
        return source[start:end]
