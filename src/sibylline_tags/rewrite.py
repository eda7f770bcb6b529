"""Byte-level source edits driven by extracted annotations.

* **mark_reported**: writes ``(#N)`` after a marker once its annotation has
  been filed as issue ``N``.
* **purge_annotations**: removes the comments of annotations, e.g. after the
  referenced issues were closed.

Both work on the raw bytes and leave every byte outside the edited ranges
untouched.
"""

from __future__ import annotations

from collections.abc import Iterable

from .annotations import Annotation


def mark_reported(source: bytes, assignments: Iterable[tuple[Annotation, int]]) -> bytes:
    """Insert ``(#issue)`` after the marker of each annotation.

    Raises:
        ValueError: If an annotation already references an issue.
    """
    result = bytearray(source)
    # Edit from the end so earlier offsets stay valid.
    for annotation, issue in sorted(assignments, key=lambda item: item[0].offset, reverse=True):
        if annotation.is_reported:
            raise ValueError(
                f"annotation at {annotation.line}:{annotation.column} already "
                f"references issue #{annotation.issue_number}"
            )
        at = annotation.marker_end
        result[at:at] = f"(#{issue})".encode()
    return bytes(result)


def _removal_range(source: bytes, start: int, end: int) -> tuple[int, int]:
    """Widen ``[start, end)`` to whole lines when nothing else shares them."""
    line_start = source.rfind(b"\n", 0, start) + 1
    line_end = source.find(b"\n", end)
    if line_end == -1:
        line_end = len(source)

    before = source[line_start:start]
    after = source[end:line_end]

    if after.strip():
        # code follows the comment on the same line; drop only the comment
        return start, end
    if before.strip():
        # trailing comment: take the whitespace in front of it along
        return start - (len(before) - len(before.rstrip())), line_end
    if line_end < len(source):
        line_end += 1
    return line_start, line_end


def purge_annotations(
    source: bytes,
    annotations: Iterable[Annotation],
    issues: Iterable[int] | None = None,
) -> bytes:
    """Remove the comments holding *annotations* from *source*.

    Args:
        source: The bytes the annotations were extracted from.
        annotations: Annotations whose comments should go.
        issues: When given, only reported annotations referencing one of
            these issue numbers are removed.

    Returns:
        The edited source.
    """
    wanted = None if issues is None else set(issues)
    ranges: set[tuple[int, int]] = set()
    for annotation in annotations:
        if wanted is not None and annotation.issue_number not in wanted:
            continue
        ranges.add(_removal_range(source, annotation.span_start, annotation.span_end))

    result = bytearray(source)
    last_start = len(source) + 1
    for start, end in sorted(ranges, reverse=True):
        # widened ranges of neighbouring comments can overlap
        end = min(end, last_start)
        del result[start:end]
        last_start = start
    return bytes(result)
