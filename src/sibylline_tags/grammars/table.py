"""Declarative comment/literal rules for one language family.

A :class:`GrammarTable` is pure data. The scanner reads its delimiter tables
and never branches on the language itself, so adding a language means adding
a table, not code.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..errors import AmbiguousDelimiterConfiguration


@dataclass(frozen=True, slots=True)
class Quote:
    """A string or char literal delimiter."""

    token: str
    """Opening and closing quote."""

    escape: str | None = None
    """Escape token. When equal to ``token`` a doubled quote is an escaped quote."""

    max_length: int | None = None
    """Longest literal body (in bytes) accepted before the quote is treated as code."""


@dataclass(frozen=True, slots=True)
class BlockComment:
    """A block comment start/end pair."""

    start: str
    end: str
    nested: bool = False
    """Whether inner ``start`` tokens open a nested level."""


@dataclass(frozen=True, slots=True)
class GrammarTable:
    """Comment and literal delimiters of a language, identified by ``language``.

    Delimiters in each category are matched in declared order. A token that is
    a prefix of a later token in the same category would shadow it, so that
    layout is rejected with :class:`AmbiguousDelimiterConfiguration`; listing
    the longer token first is the explicit way to disambiguate.
    """

    language: str
    line_comments: tuple[str, ...] = ()
    block_comments: tuple[BlockComment, ...] = ()
    strings: tuple[Quote, ...] = ()
    chars: tuple[Quote, ...] = ()
    extensions: tuple[str, ...] = ()
    filenames: tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        if not self.language:
            raise AmbiguousDelimiterConfiguration("grammar language id must not be empty")
        _check_category(self.language, "line comment", self.line_comments)
        _check_category(self.language, "block comment", [b.start for b in self.block_comments])
        _check_category(self.language, "string", [q.token for q in self.strings])
        _check_category(self.language, "char", [q.token for q in self.chars])

        for block in self.block_comments:
            if not block.end:
                raise AmbiguousDelimiterConfiguration(
                    f"{self.language}: block comment {block.start!r} has an empty end token"
                )
        for quote in (*self.strings, *self.chars):
            if quote.escape == "":
                raise AmbiguousDelimiterConfiguration(
                    f"{self.language}: quote {quote.token!r} has an empty escape token"
                )
            if quote.max_length is not None and quote.max_length < 1:
                raise AmbiguousDelimiterConfiguration(
                    f"{self.language}: quote {quote.token!r} needs a positive max_length"
                )

    @classmethod
    def from_dict(cls, language: str, data: dict) -> GrammarTable:
        """Build a table from its mapping form (as found in YAML grammar files).

        Example::

            line_comments: ["//"]
            block_comments: [{start: "/*", end: "*/", nested: false}]
            strings: [{token: '"', escape: "\\\\"}]
            chars: [{token: "'", escape: "\\\\", max_length: 10}]
            extensions: [".c", ".h"]
        """
        try:
            return cls(
                language=language,
                line_comments=tuple(data.get("line_comments") or ()),
                block_comments=tuple(
                    BlockComment(
                        start=item["start"],
                        end=item["end"],
                        nested=bool(item.get("nested", False)),
                    )
                    for item in data.get("block_comments") or ()
                ),
                strings=tuple(_quote(item) for item in data.get("strings") or ()),
                chars=tuple(_quote(item) for item in data.get("chars") or ()),
                extensions=tuple(ext.lower() for ext in data.get("extensions") or ()),
                filenames=tuple(data.get("filenames") or ()),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise AmbiguousDelimiterConfiguration(
                f"{language}: malformed grammar definition ({exc})"
            ) from exc


def _quote(item: dict | str) -> Quote:
    if isinstance(item, str):
        return Quote(token=item)
    return Quote(
        token=item["token"],
        escape=item.get("escape"),
        max_length=item.get("max_length"),
    )


def _check_category(language: str, category: str, tokens: Iterable[str]) -> None:
    seen: list[str] = []
    for token in tokens:
        if not token:
            raise AmbiguousDelimiterConfiguration(f"{language}: empty {category} delimiter")
        for earlier in seen:
            if token.startswith(earlier):
                raise AmbiguousDelimiterConfiguration(
                    f"{language}: {category} delimiter {earlier!r} shadows {token!r}; "
                    f"list the longer delimiter first"
                )
        seen.append(token)
