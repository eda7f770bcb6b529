"""Grammar registry.

Tables are registered at import time and looked up by language id, file
extension or file name. Third parties can register their own tables via
register_grammar().
"""

from __future__ import annotations

import os

from rapidfuzz import process

from ..errors import UnsupportedLanguage
from .builtin import BUILTIN_GRAMMARS
from .table import BlockComment, GrammarTable, Quote

_REGISTRY: dict[str, GrammarTable] = {}
_BY_EXTENSION: dict[str, str] = {}
_BY_FILENAME: dict[str, str] = {}


def register_grammar(table: GrammarTable) -> GrammarTable:
    """Register *table* under its language id, extensions and file names.

    A table registered later for the same language, extension or file name
    replaces the earlier one.
    """
    previous = _REGISTRY.get(table.language)
    if previous is not None:
        _forget(previous)
    _REGISTRY[table.language] = table
    for ext in table.extensions:
        _BY_EXTENSION[ext.lower()] = table.language
    for name in table.filenames:
        _BY_FILENAME[name] = table.language
    return table


def _forget(table: GrammarTable) -> None:
    for ext in table.extensions:
        if _BY_EXTENSION.get(ext.lower()) == table.language:
            del _BY_EXTENSION[ext.lower()]
    for name in table.filenames:
        if _BY_FILENAME.get(name) == table.language:
            del _BY_FILENAME[name]


def get_grammar(key: str) -> GrammarTable:
    """Look up a grammar by language id (``"python"``) or extension (``".py"``).

    Raises:
        UnsupportedLanguage: If nothing is registered for *key*.
    """
    if key in _REGISTRY:
        return _REGISTRY[key]

    language = _BY_EXTENSION.get(key.lower())
    if language is None and not key.startswith("."):
        language = _BY_EXTENSION.get("." + key.lower())
    if language is not None:
        return _REGISTRY[language]

    available = ", ".join(list_languages())
    message = f"Unsupported language {key!r}. Available languages: {available}"
    suggestion = process.extractOne(key.lower(), list(_REGISTRY), score_cutoff=70)
    if suggestion is not None:
        message += f". Did you mean {suggestion[0]!r}?"
    raise UnsupportedLanguage(key, message)


def grammar_for_path(path: str | os.PathLike[str]) -> GrammarTable:
    """Pick the grammar for a file by exact file name, then by extension."""
    name = os.path.basename(os.fspath(path))
    if name in _BY_FILENAME:
        return _REGISTRY[_BY_FILENAME[name]]

    ext = os.path.splitext(name)[1]
    if not ext:
        raise UnsupportedLanguage(name, f"Cannot determine the language of {name!r}")
    language = _BY_EXTENSION.get(ext.lower())
    if language is None:
        raise UnsupportedLanguage(ext, f"Unsupported file extension {ext!r} ({name})")
    return _REGISTRY[language]


def list_languages() -> list[str]:
    """Return sorted list of registered language ids."""
    return sorted(_REGISTRY.keys())


# Register built-in grammars
for _table in BUILTIN_GRAMMARS:
    register_grammar(_table)
del _table

__all__ = [
    "BlockComment",
    "GrammarTable",
    "Quote",
    "register_grammar",
    "get_grammar",
    "grammar_for_path",
    "list_languages",
]
