"""Unit tests for issue write-back and annotation purging."""

import pytest

from sibylline_tags.annotations import MarkerPolicy, find_annotations
from sibylline_tags.rewrite import mark_reported, purge_annotations


class TestMarkReported:
    def test_inserts_issue_reference(self, c_grammar):
        source = b"int x; // @TAG fix\n/* @TAG other */\n"
        first, second = find_annotations(source, c_grammar, "@TAG")

        result = mark_reported(source, [(first, 12), (second, 34)])

        assert result == b"int x; // @TAG(#12) fix\n/* @TAG(#34) other */\n"
        reported = find_annotations(result, c_grammar, "@TAG")
        assert [a.issue_number for a in reported] == [12, 34]
        assert [a.payload for a in reported] == ["fix", "other"]

    def test_order_of_assignments_does_not_matter(self, c_grammar):
        source = b"// @TAG a\n// @TAG b\n"
        first, second = find_annotations(source, c_grammar, "@TAG")
        assert mark_reported(source, [(second, 2), (first, 1)]) == b"// @TAG(#1) a\n// @TAG(#2) b\n"

    def test_untouched_without_assignments(self, c_grammar):
        source = b"// @TAG a\n"
        assert mark_reported(source, []) == source

    def test_already_reported(self, c_grammar):
        source = b"// @TAG(#7) done\n"
        (annotation,) = find_annotations(source, c_grammar, "@TAG")
        with pytest.raises(ValueError, match="already references issue #7"):
            mark_reported(source, [(annotation, 8)])


class TestPurgeAnnotations:
    SOURCE = (
        b"int a;\n"
        b"// @TAG(#1) gone\n"
        b"int b; // @TAG(#2) trailing\n"
        b"int c = /* @TAG(#3) inline */ 3;\n"
        b"/* @TAG keep */\n"
    )

    def test_purge_selected_issues(self, c_grammar):
        annotations = find_annotations(self.SOURCE, c_grammar, "@TAG")
        result = purge_annotations(self.SOURCE, annotations, issues=[1, 2, 3])
        assert result == b"int a;\nint b;\nint c =  3;\n/* @TAG keep */\n"

    def test_issue_filter(self, c_grammar):
        annotations = find_annotations(self.SOURCE, c_grammar, "@TAG")
        result = purge_annotations(self.SOURCE, annotations, issues={2})
        assert b"trailing" not in result
        assert b"gone" in result and b"inline" in result and b"keep" in result

    def test_purge_everything(self, c_grammar):
        annotations = find_annotations(self.SOURCE, c_grammar, "@TAG")
        assert purge_annotations(self.SOURCE, annotations) == b"int a;\nint b;\nint c =  3;\n"

    def test_last_line_without_newline(self, c_grammar):
        source = b"x;\n// @TAG a"
        annotations = find_annotations(source, c_grammar, "@TAG")
        assert purge_annotations(source, annotations) == b"x;\n"

    def test_multi_line_block(self, c_grammar):
        source = b"a;\n/*\n * @TAG x\n * y\n */\nb;\n"
        annotations = find_annotations(source, c_grammar, "@TAG")
        assert purge_annotations(source, annotations) == b"a;\nb;\n"

    def test_joined_line_comments(self, c_grammar):
        source = b"// @TAG a\n// b\nx\n"
        annotations = find_annotations(source, c_grammar, "@TAG", join_line_comments=True)
        assert purge_annotations(source, annotations) == b"x\n"

    def test_several_markers_in_one_comment(self, c_grammar):
        source = b"// @TAG a @TAG b\nx\n"
        annotations = find_annotations(source, c_grammar, "@TAG", policy=MarkerPolicy.ALL)
        assert len(annotations) == 2
        assert purge_annotations(source, annotations) == b"x\n"

    def test_nothing_to_purge(self, c_grammar):
        assert purge_annotations(b"x\n", []) == b"x\n"
