"""Exception taxonomy for grammar construction and source scanning.

Scan-time errors (:class:`ScanError` subclasses) describe one input buffer and
carry the location of the construct that was left open. Construction-time
errors (:class:`AmbiguousDelimiterConfiguration`) indicate a broken grammar
definition and are meant to stop the program at startup.
"""

from __future__ import annotations


class TagScanError(Exception):
    """Base class for every error raised by sibylline-tags."""


class ScanError(TagScanError):
    """The buffer ended inside an open literal or comment."""

    what = "construct"

    def __init__(
        self,
        delimiter: str,
        offset: int,
        line: int,
        column: int,
        path: str | None = None,
    ) -> None:
        self.delimiter = delimiter
        """Opening delimiter that was never closed."""

        self.offset = offset
        """Byte offset of the opening delimiter."""

        self.line = line
        self.column = column
        self.path = path
        super().__init__(self._message())

    def _message(self) -> str:
        where = f"{self.path}:" if self.path else ""
        return (
            f"{where}{self.line}:{self.column}: unterminated {self.what} "
            f"opened by {self.delimiter!r}"
        )

    def with_path(self, path: str) -> ScanError:
        """Return a copy of this error bound to *path*."""
        return type(self)(self.delimiter, self.offset, self.line, self.column, path=path)


class UnterminatedLiteral(ScanError):
    what = "literal"


class UnterminatedComment(ScanError):
    what = "comment"


class UnsupportedLanguage(TagScanError, ValueError):
    """No grammar is registered for the requested language key."""

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"Unsupported language {key!r}")


class AmbiguousDelimiterConfiguration(TagScanError, ValueError):
    """A grammar declares delimiters that cannot be matched unambiguously."""
