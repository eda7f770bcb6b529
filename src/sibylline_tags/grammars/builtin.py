"""Built-in grammar tables.

These are used when no grammar file overrides a language. Grammar files
(see :mod:`sibylline_tags.config`) describe the same tables in the mapping
form read by :meth:`GrammarTable.from_dict`.
"""

from __future__ import annotations

from .table import BlockComment, GrammarTable, Quote

_BACKSLASH = "\\"

_C_BLOCK = BlockComment("/*", "*/")
_C_NESTED_BLOCK = BlockComment("/*", "*/", nested=True)
_DQ = Quote('"', _BACKSLASH)
_SQ = Quote("'", _BACKSLASH)

BUILTIN_GRAMMARS: tuple[GrammarTable, ...] = (
    GrammarTable(
        language="c",
        line_comments=("//",),
        block_comments=(_C_BLOCK,),
        strings=(_DQ,),
        chars=(_SQ,),
        extensions=(
            ".c", ".h", ".cc", ".cpp", ".cxx", ".hh", ".hpp", ".hxx",
            ".java", ".cs", ".kt", ".kts", ".scala", ".swift",
            ".m", ".mm", ".php", ".dart", ".jai",
        ),
    ),
    GrammarTable(
        language="go",
        line_comments=("//",),
        block_comments=(_C_BLOCK,),
        strings=(_DQ, Quote("`")),
        chars=(_SQ,),
        extensions=(".go",),
    ),
    GrammarTable(
        language="javascript",
        line_comments=("//",),
        block_comments=(_C_BLOCK,),
        strings=(_DQ, _SQ, Quote("`", _BACKSLASH)),
        extensions=(".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts"),
    ),
    GrammarTable(
        language="rust",
        line_comments=("//",),
        block_comments=(_C_NESTED_BLOCK,),
        strings=(_DQ,),
        # lifetimes ('a) reuse the char quote; bound the body so they stay code
        chars=(Quote("'", _BACKSLASH, max_length=10),),
        extensions=(".rs",),
    ),
    GrammarTable(
        language="zig",
        line_comments=("//",),
        strings=(_DQ,),
        chars=(_SQ,),
        extensions=(".zig",),
    ),
    GrammarTable(
        language="python",
        line_comments=("#",),
        # docstrings are where Python annotations live
        block_comments=(BlockComment('"""', '"""'), BlockComment("'''", "'''")),
        strings=(_DQ, _SQ),
        extensions=(".py", ".pyi", ".pyw"),
    ),
    GrammarTable(
        language="shell",
        line_comments=("#",),
        strings=(_DQ, Quote("'")),
        extensions=(".sh", ".bash", ".zsh", ".ksh", ".mk"),
        filenames=("Makefile", "makefile", "GNUmakefile", "Dockerfile"),
    ),
    GrammarTable(
        language="ruby",
        line_comments=("#",),
        block_comments=(BlockComment("=begin", "=end"),),
        strings=(_DQ, _SQ),
        extensions=(".rb", ".rake", ".gemspec"),
        filenames=("Rakefile", "Gemfile"),
    ),
    GrammarTable(
        language="r",
        line_comments=("#",),
        strings=(_DQ, _SQ),
        extensions=(".r",),
    ),
    GrammarTable(
        language="lua",
        line_comments=("--",),
        block_comments=(BlockComment("--[[", "]]"),),
        strings=(_DQ, _SQ),
        extensions=(".lua",),
    ),
    GrammarTable(
        language="haskell",
        line_comments=("--",),
        block_comments=(BlockComment("{-", "-}", nested=True),),
        strings=(_DQ,),
        extensions=(".hs", ".lhs"),
    ),
    GrammarTable(
        language="sql",
        line_comments=("--",),
        block_comments=(_C_BLOCK,),
        strings=(Quote("'", "'"), Quote('"', '"')),
        extensions=(".sql",),
    ),
    GrammarTable(
        language="html",
        block_comments=(BlockComment("<!--", "-->"),),
        extensions=(".html", ".htm", ".xml", ".xhtml", ".svg", ".md", ".markdown"),
    ),
    GrammarTable(
        language="lisp",
        line_comments=(";",),
        block_comments=(BlockComment("#|", "|#", nested=True),),
        strings=(_DQ,),
        extensions=(".lisp", ".lsp", ".cl", ".el", ".scm", ".ss"),
    ),
    GrammarTable(
        language="ocaml",
        block_comments=(BlockComment("(*", "*)", nested=True),),
        strings=(_DQ,),
        extensions=(".ml", ".mli"),
    ),
    GrammarTable(
        language="asm",
        line_comments=(";",),
        strings=(_DQ,),
        extensions=(".asm", ".nasm"),
    ),
)
