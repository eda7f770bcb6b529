"""sibylline-tags: comment/string-aware annotation extraction for source code."""

from .annotations import Annotation, MarkerPolicy, extract_annotations, find_annotations
from .errors import (
    AmbiguousDelimiterConfiguration,
    ScanError,
    TagScanError,
    UnsupportedLanguage,
    UnterminatedComment,
    UnterminatedLiteral,
)
from .grammars import (
    BlockComment,
    GrammarTable,
    Quote,
    get_grammar,
    grammar_for_path,
    list_languages,
    register_grammar,
)
from .scanner import scan
from .spans import Span, SpanKind

__all__ = [
    "scan",
    "Span",
    "SpanKind",
    "Annotation",
    "MarkerPolicy",
    "extract_annotations",
    "find_annotations",
    "GrammarTable",
    "BlockComment",
    "Quote",
    "get_grammar",
    "grammar_for_path",
    "list_languages",
    "register_grammar",
    "TagScanError",
    "ScanError",
    "UnterminatedLiteral",
    "UnterminatedComment",
    "UnsupportedLanguage",
    "AmbiguousDelimiterConfiguration",
    "AnnotationScanner",
    "FileResult",
    "GrammarConfig",
    "mark_reported",
    "purge_annotations",
]

__version__ = "0.1.0"

_LAZY_NAMES = {
    "AnnotationScanner": "files",
    "FileResult": "files",
    "GrammarConfig": "config",
    "mark_reported": "rewrite",
    "purge_annotations": "rewrite",
}


def __getattr__(name: str):
    if name in _LAZY_NAMES:
        # Cache on module to avoid repeated imports
        import importlib
        import sys

        module = importlib.import_module(f".{_LAZY_NAMES[name]}", __name__)
        value = getattr(module, name)
        setattr(sys.modules[__name__], name, value)
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
