"""Comment/literal-aware scanning of raw source bytes.

The scanner walks a buffer once and classifies every byte as code, line
comment, block comment, string literal or char literal. It is driven entirely
by a :class:`~sibylline_tags.grammars.GrammarTable`:

* In code, opening delimiters are tried in priority order: block comment
  starts, line comment starts, string quotes, char quotes. Within a category
  the table's declared order applies (longer tokens first).
* Inside a comment or literal only that construct's closing rules are active,
  so quotes in comments and comment tokens in strings are inert.
* An escape token makes the following byte inert. A doubled escape consumes
  both bytes and scanning resumes normally.
* A char quote with a ``max_length`` opens a literal only when its body is one
  character or one escape sequence; otherwise the quote is code (Rust
  lifetimes).

Spans are produced lazily. Running off the end of the buffer inside a block
comment or literal raises :class:`UnterminatedComment` or
:class:`UnterminatedLiteral` instead of returning a truncated result.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from functools import lru_cache

from .errors import UnterminatedComment, UnterminatedLiteral
from .grammars.table import BlockComment, GrammarTable, Quote
from .spans import Span, SpanKind

_WHITESPACE = re.compile(rb"\s")


class _Opener:
    """One opening delimiter together with the rule that closes it."""

    __slots__ = ("kind", "text", "closer", "closing", "nested", "limit", "escape")

    def __init__(
        self,
        kind: SpanKind,
        text: str,
        closer: str,
        closing: re.Pattern[bytes] | None,
        nested: bool = False,
        limit: int | None = None,
        escape: bytes | None = None,
    ) -> None:
        self.kind = kind
        self.text = text
        self.closer = closer
        self.closing = closing
        self.nested = nested
        self.limit = limit
        self.escape = escape


def _enc(token: str) -> bytes:
    return token.encode("utf-8")


def _block_opener(block: BlockComment) -> _Opener:
    end = re.escape(_enc(block.end))
    if block.nested:
        pattern = re.compile(b"(?P<close>" + end + b")|(?P<open>" + re.escape(_enc(block.start)) + b")")
    else:
        pattern = re.compile(end)
    return _Opener(SpanKind.BLOCK_COMMENT, block.start, block.end, pattern, nested=block.nested)


def _quote_opener(kind: SpanKind, quote: Quote) -> _Opener:
    token = re.escape(_enc(quote.token))
    if quote.escape is None:
        pattern = re.compile(b"(?P<close>" + token + b")")
    elif quote.escape == quote.token:
        pattern = re.compile(b"(?P<esc>" + token + token + b")|(?P<close>" + token + b")")
    else:
        esc = re.escape(_enc(quote.escape))
        pattern = re.compile(b"(?P<esc>" + esc + b".)|(?P<close>" + token + b")", re.DOTALL)

    limit = None
    if quote.max_length is not None:
        limit = quote.max_length + len(_enc(quote.token))
    escape = None if quote.escape is None else _enc(quote.escape)
    return _Opener(kind, quote.token, quote.token, pattern, limit=limit, escape=escape)


class _Rules:
    """Byte-level matchers compiled from one grammar table."""

    __slots__ = ("openers", "opening")

    def __init__(self, grammar: GrammarTable) -> None:
        openers: list[_Opener] = [_block_opener(b) for b in grammar.block_comments]
        openers += [_Opener(SpanKind.LINE_COMMENT, t, "", None) for t in grammar.line_comments]
        openers += [_quote_opener(SpanKind.STRING_LITERAL, q) for q in grammar.strings]
        openers += [_quote_opener(SpanKind.CHAR_LITERAL, q) for q in grammar.chars]
        self.openers = tuple(openers)

        # At the leftmost match, alternatives are tried in order, which is
        # exactly the priority order of the openers list.
        self.opening: re.Pattern[bytes] | None = None
        if openers:
            self.opening = re.compile(
                b"|".join(b"(" + re.escape(_enc(o.text)) + b")" for o in openers)
            )


@lru_cache(maxsize=64)
def _rules_for(grammar: GrammarTable) -> _Rules:
    return _Rules(grammar)


class _LineTracker:
    """Maps monotonically increasing byte offsets to 1-based line/column."""

    __slots__ = ("buffer", "line", "line_start", "offset")

    def __init__(self, buffer: bytes) -> None:
        self.buffer = buffer
        self.line = 1
        self.line_start = 0
        self.offset = 0

    def position(self, offset: int) -> tuple[int, int]:
        newlines = self.buffer.count(b"\n", self.offset, offset)
        if newlines:
            self.line += newlines
            self.line_start = self.buffer.rfind(b"\n", self.offset, offset) + 1
        self.offset = offset
        return self.line, offset - self.line_start + 1

    def span(self, kind: SpanKind, start: int, end: int, opener: str = "", closer: str = "") -> Span:
        line, column = self.position(start)
        return Span(kind, start, end, line, column, opener, closer)


def _close_block(opener: _Opener, buffer: bytes, pos: int) -> int:
    if not opener.nested:
        match = opener.closing.search(buffer, pos)
        return -1 if match is None else match.end()

    depth = 1
    while True:
        match = opener.closing.search(buffer, pos)
        if match is None:
            return -1
        if match.lastgroup == "close":
            depth -= 1
            if depth == 0:
                return match.end()
        else:
            depth += 1
        pos = match.end()


def _is_char_body(body: bytes, escape: bytes | None) -> bool:
    """One escape sequence or exactly one UTF-8 scalar."""
    if escape is not None and body.startswith(escape):
        return len(body) > len(escape) and _WHITESPACE.search(body) is None
    try:
        return len(body.decode("utf-8")) == 1
    except UnicodeDecodeError:
        return False


def _close_quote(opener: _Opener, buffer: bytes, pos: int) -> int:
    body = pos
    endpos = len(buffer) if opener.limit is None else min(len(buffer), pos + opener.limit)
    while True:
        match = opener.closing.search(buffer, pos, endpos)
        if match is None:
            return -1
        if match.lastgroup == "close":
            if opener.limit is not None and not _is_char_body(
                buffer[body : match.start()], opener.escape
            ):
                return -1
            return match.end()
        pos = match.end()


def scan(buffer: bytes, grammar: GrammarTable) -> Iterator[Span]:
    """Yield the classified spans of *buffer* in order.

    The spans are contiguous, never overlap and cover the buffer exactly.
    Consecutive code bytes are coalesced into a single span. Each call
    starts a fresh scan; the iterator cannot be resumed elsewhere.

    Raises:
        UnterminatedComment: The buffer ends inside a block comment.
        UnterminatedLiteral: The buffer ends inside a string or char literal.
    """
    if isinstance(buffer, str):
        raise TypeError("scan() expects bytes; encode text before scanning")
    if not isinstance(buffer, bytes):
        buffer = bytes(buffer)

    rules = _rules_for(grammar)
    lines = _LineTracker(buffer)
    size = len(buffer)
    code_start = 0
    search_from = 0

    while rules.opening is not None:
        match = rules.opening.search(buffer, search_from)
        if match is None:
            break

        opener = rules.openers[match.lastindex - 1]
        start, body = match.start(), match.end()

        end = -1
        if opener.limit is not None:
            end = _close_quote(opener, buffer, body)
            if end == -1:
                # not a literal; the quote stays in the code span
                search_from = body
                continue

        if start > code_start:
            yield lines.span(SpanKind.CODE, code_start, start)
            code_start = start

        if opener.kind is SpanKind.LINE_COMMENT:
            end = buffer.find(b"\n", body)
            if end == -1:
                end = size
        elif opener.kind is SpanKind.BLOCK_COMMENT:
            end = _close_block(opener, buffer, body)
            if end == -1:
                line, column = lines.position(start)
                raise UnterminatedComment(opener.text, start, line, column)
        elif end == -1:
            end = _close_quote(opener, buffer, body)
            if end == -1:
                line, column = lines.position(start)
                raise UnterminatedLiteral(opener.text, start, line, column)

        yield lines.span(opener.kind, start, end, opener.text, opener.closer)
        code_start = search_from = end

    if code_start < size:
        yield lines.span(SpanKind.CODE, code_start, size)
