"""Unit tests for annotation extraction."""

import pytest

from sibylline_tags.annotations import MarkerPolicy, extract_annotations, find_annotations
from sibylline_tags.errors import UnterminatedComment, UnterminatedLiteral
from sibylline_tags.grammars import get_grammar
from sibylline_tags.scanner import scan
from sibylline_tags.spans import SpanKind


def payloads(source, grammar, marker="@TAG", **kwargs):
    return [a.payload for a in find_annotations(source, grammar, marker, **kwargs)]


# -----------------------------------------------------------------------
# Matching
# -----------------------------------------------------------------------


class TestMatching:
    def test_block_comment_marker(self, c_grammar):
        source = b"/* @TAG hello world */"
        (annotation,) = extract_annotations(scan(source, c_grammar), source, "@TAG")
        assert annotation.marker == "@TAG"
        assert annotation.payload == "hello world"
        assert annotation.source_span_kind is SpanKind.BLOCK_COMMENT
        assert annotation.location == (1, 4)
        assert annotation.offset == 3
        assert (annotation.span_start, annotation.span_end) == (0, len(source))

    def test_line_comment_marker(self, c_grammar):
        source = b"int x; // @TAG fix this\nint y;\n"
        (annotation,) = find_annotations(source, c_grammar, "@TAG")
        assert annotation.payload == "fix this"
        assert annotation.source_span_kind is SpanKind.LINE_COMMENT
        assert annotation.location == (1, 11)

    def test_marker_right_after_comment_token(self, c_grammar):
        assert payloads(b"//@TAG tight", c_grammar) == ["tight"]
        assert payloads(b"/*@TAG*/", c_grammar) == [""]

    def test_comment_without_marker(self, c_grammar):
        assert find_annotations(b"// nothing here\n/* nor here */", c_grammar, "@TAG") == []

    def test_marker_in_code_is_ignored(self, c_grammar):
        assert find_annotations(b"int @TAG = 1;", c_grammar, "@TAG") == []

    def test_marker_in_string_is_ignored(self, c_grammar):
        source = b'char *s = "// @TAG not a comment"; char c = \'@\';'
        assert find_annotations(source, c_grammar, "@TAG") == []

    def test_marker_must_stand_alone(self, c_grammar):
        assert find_annotations(b"// @TAGGED x", c_grammar, "@TAG") == []
        assert find_annotations(b"// x@TAG y", c_grammar, "@TAG") == []
        assert find_annotations(b"// @TAG: y", c_grammar, "@TAG") == []

    def test_later_standalone_occurrence_after_embedded_one(self, c_grammar):
        assert payloads(b"// x@TAG y @TAG z", c_grammar) == ["z"]

    def test_marker_only(self, c_grammar):
        assert payloads(b"// @TAG", c_grammar) == [""]

    def test_tab_boundaries(self, c_grammar):
        assert payloads(b"//\t@TAG\tindented", c_grammar) == ["indented"]

    def test_invalid_marker(self, c_grammar):
        with pytest.raises(ValueError):
            find_annotations(b"// x", c_grammar, "")
        with pytest.raises(ValueError):
            find_annotations(b"// x", c_grammar, "@A B")


# -----------------------------------------------------------------------
# Decoration stripping
# -----------------------------------------------------------------------


class TestDecoration:
    def test_star_aligned_block(self, c_grammar):
        source = (
            b"/*\n"
            b" * @TEST_TODO drop a star\n"
            b" * Digital Cypher assigns\n"
            b" * */"
        )
        (annotation,) = find_annotations(source, c_grammar, "@TEST_TODO")
        assert annotation.payload == "drop a star\nDigital Cypher assigns"
        assert annotation.title == "drop a star"
        assert annotation.description == "Digital Cypher assigns"
        assert annotation.location == (2, 4)

    def test_block_without_stars(self, c_grammar):
        source = b"/* @TAG first\n   second line\n*/"
        assert payloads(source, c_grammar) == ["first\nsecond line"]

    def test_doc_comment_opener(self, c_grammar):
        source = b"/** @TAG doc */"
        (annotation,) = find_annotations(source, c_grammar, "@TAG")
        assert annotation.payload == "doc"
        assert annotation.column == 5

    def test_continuation_lines_keep_inner_text(self, c_grammar):
        source = b"/* @TAG a\n * b * c\n * d */"
        (annotation,) = find_annotations(source, c_grammar, "@TAG")
        assert annotation.payload == "a\nb * c\nd"
        assert annotation.description == "b * c d"

    def test_crlf_line_endings(self, c_grammar):
        assert payloads(b"// @TAG crlf\r\nx", c_grammar) == ["crlf"]
        assert payloads(b"/* @TAG a\r\n * b\r\n */", c_grammar) == ["a\nb"]

    def test_utf8_payload_and_byte_columns(self, c_grammar):
        source = "/* é @TAG café */".encode()
        (annotation,) = find_annotations(source, c_grammar, "@TAG")
        assert annotation.payload == "café"
        assert annotation.column == 7

    def test_inline_struct_field_comments(self, c_grammar):
        source = (
            b"struct Person {\n"
            b"  int /* @TEST_TODO inline comment #1 */ age;\n"
            b"  char *name /* @TEST_TODO inline comment #2 */;\n"
            b"};\n"
        )
        annotations = find_annotations(source, c_grammar, "@TEST_TODO")
        assert [a.payload for a in annotations] == ["inline comment #1", "inline comment #2"]
        assert [a.location for a in annotations] == [(2, 10), (3, 17)]


# -----------------------------------------------------------------------
# Marker policy
# -----------------------------------------------------------------------


class TestMarkerPolicy:
    def test_first_occurrence_wins(self, c_grammar):
        assert payloads(b"// @TAG one @TAG two", c_grammar) == ["one @TAG two"]

    def test_all_occurrences(self, c_grammar):
        annotations = find_annotations(
            b"// @TAG one @TAG two", c_grammar, "@TAG", policy=MarkerPolicy.ALL
        )
        assert [a.payload for a in annotations] == ["one", "two"]
        assert [a.column for a in annotations] == [4, 13]

    def test_all_occurrences_across_lines(self, c_grammar):
        source = b"/*\n * @TAG one\n * more\n * @TAG two\n */"
        annotations = find_annotations(source, c_grammar, "@TAG", policy=MarkerPolicy.ALL)
        assert [a.payload for a in annotations] == ["one\nmore", "two"]
        assert [a.line for a in annotations] == [2, 4]


# -----------------------------------------------------------------------
# Issue references
# -----------------------------------------------------------------------


class TestIssueReferences:
    def test_reported_marker(self, c_grammar):
        (annotation,) = find_annotations(b"// @TAG(#432) reported", c_grammar, "@TAG")
        assert annotation.issue_number == 432
        assert annotation.is_reported
        assert annotation.payload == "reported"
        assert annotation.marker_end == 7

    def test_pending_marker(self, c_grammar):
        (annotation,) = find_annotations(b"// @TAG pending", c_grammar, "@TAG")
        assert annotation.issue_number is None
        assert not annotation.is_reported

    def test_reference_must_be_followed_by_boundary(self, c_grammar):
        assert find_annotations(b"// @TAG(#12)x", c_grammar, "@TAG") == []
        assert find_annotations(b"// @TAG(12) x", c_grammar, "@TAG") == []


# -----------------------------------------------------------------------
# Joined line comments
# -----------------------------------------------------------------------


class TestJoinLineComments:
    SOURCE = (
        b"// @TAG title here\n"
        b"// more detail\n"
        b"// even more\n"
        b"\n"
        b"// unrelated\n"
    )

    def test_disabled_by_default(self, c_grammar):
        assert payloads(self.SOURCE, c_grammar) == ["title here"]

    def test_joins_consecutive_lines(self, c_grammar):
        (annotation,) = find_annotations(self.SOURCE, c_grammar, "@TAG", join_line_comments=True)
        assert annotation.payload == "title here\nmore detail\neven more"
        assert annotation.title == "title here"
        assert annotation.description == "more detail even more"
        assert annotation.span_end == self.SOURCE.index(b"// even more") + len(b"// even more")

    def test_indented_continuation(self, python_grammar):
        source = b"    # @TAG a\n    # b\n    x = 1\n"
        assert payloads(source, python_grammar, join_line_comments=True) == ["a\nb"]

    def test_next_marker_stops_joining(self, c_grammar):
        source = b"// @TAG a\n// @TAG b\n// c\n"
        assert payloads(source, c_grammar, join_line_comments=True) == ["a", "b\nc"]

    def test_code_line_stops_joining(self, c_grammar):
        source = b"// @TAG a\nx = 1; // b\n"
        assert payloads(source, c_grammar, join_line_comments=True) == ["a"]


# -----------------------------------------------------------------------
# Other languages
# -----------------------------------------------------------------------


class TestLanguages:
    def test_python_docstring_and_hash(self, python_grammar):
        source = (
            b"def f():\n"
            b'    """@TAG docstring note"""\n'
            b'    s = "# @TAG not a comment"\n'
            b"    return 1  # @TAG hash note\n"
        )
        assert payloads(source, python_grammar) == ["docstring note", "hash note"]

    def test_shell(self):
        source = b"echo '# @TAG no' # @TAG yes\n"
        assert payloads(source, get_grammar("shell")) == ["yes"]

    def test_html(self):
        source = b"<p>@TAG text</p>\n<!-- @TAG markup -->\n"
        assert payloads(source, get_grammar("html")) == ["markup"]

    def test_sql(self):
        source = b"SELECT '-- @TAG no' FROM t; -- @TAG index this\n"
        assert payloads(source, get_grammar("sql")) == ["index this"]


# -----------------------------------------------------------------------
# Failure propagation
# -----------------------------------------------------------------------


class TestFailures:
    def test_unterminated_comment_propagates(self, c_grammar):
        source = b"// @TAG fine\n/* @TAG never closed"
        with pytest.raises(UnterminatedComment):
            extract_annotations(scan(source, c_grammar), source, "@TAG")

    def test_unterminated_literal_propagates(self, c_grammar):
        source = b'// @TAG fine\nchar *s = "open'
        with pytest.raises(UnterminatedLiteral):
            find_annotations(source, c_grammar, "@TAG")
