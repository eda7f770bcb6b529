"""Configuration loader for user-defined grammars.

Loads grammar tables from YAML files with priority resolution:
1. User config: ~/.config/{app_name}/grammars/ (highest priority)
2. Project config: .{app_name}/grammars/ in current directory
3. Built-in grammars shipped with sibylline-tags (fallback)

A grammar file holds either one table (named by its ``language`` key or the
file stem) or several under a ``grammars`` mapping::

    grammars:
      terraform:
        line_comments: ["#", "//"]
        block_comments: [{start: "/*", end: "*/"}]
        strings: [{token: '"', escape: "\\\\"}]
        extensions: [".tf"]
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .errors import AmbiguousDelimiterConfiguration, UnsupportedLanguage
from .grammars import GrammarTable, get_grammar, grammar_for_path, register_grammar

logger = logging.getLogger(__name__)

# Lazy import yaml to avoid startup cost
_yaml = None


def _get_yaml():
    """Lazy-load PyYAML."""
    global _yaml
    if _yaml is None:
        import yaml

        _yaml = yaml
    return _yaml


class GrammarConfig:
    """Grammar tables from config files, layered over the built-in registry.

    Config locations are checked in priority order:
    1. ~/.config/{app_name}/grammars/ - User overrides
    2. .{app_name}/grammars/ - Project-specific grammars

    A table defined in a higher-priority location replaces a table with the
    same language id from a lower one. Lookups that no config table answers
    fall through to the global registry.
    """

    def __init__(
        self,
        app_name: str = "sibylline-tags",
        locations: list[Path] | None = None,
    ) -> None:
        """Initialize and load every grammar file found.

        Args:
            app_name: Application name for config directory resolution.
            locations: Explicit directories to search, highest priority first.
                       Defaults to the user and project config directories.

        Raises:
            AmbiguousDelimiterConfiguration: A grammar file defines an invalid table.
        """
        self._app_name = app_name
        if locations is None:
            locations = [
                Path.home() / ".config" / app_name / "grammars",  # User overrides
                Path.cwd() / f".{app_name}" / "grammars",  # Project config
            ]
        self._config_locations = list(locations)

        self._tables: dict[str, GrammarTable] = {}
        self._by_extension: dict[str, str] = {}
        self._by_filename: dict[str, str] = {}
        self._load_all()

    def _load_all(self) -> None:
        """Load lowest priority first so higher-priority files overwrite."""
        for config_dir in reversed(self._config_locations):
            if not config_dir.is_dir():
                continue
            for config_file in sorted(config_dir.glob("*.y*ml")):
                self._load_file(config_file)

    def _load_file(self, config_file: Path) -> None:
        yaml = _get_yaml()

        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            logger.warning("Skipping unreadable grammar file %s: %s", config_file, exc)
            return

        if not data:
            return
        if not isinstance(data, dict):
            raise AmbiguousDelimiterConfiguration(
                f"{config_file}: grammar file must contain a mapping"
            )

        if "grammars" in data:
            if not isinstance(data["grammars"], dict):
                raise AmbiguousDelimiterConfiguration(
                    f"{config_file}: 'grammars' must map language ids to definitions"
                )
            for language, definition in data["grammars"].items():
                self._add(GrammarTable.from_dict(str(language), definition or {}), config_file)
        else:
            language = str(data.get("language") or config_file.stem)
            self._add(GrammarTable.from_dict(language, data), config_file)

    def _add(self, table: GrammarTable, origin: Path) -> None:
        logger.debug("Loaded grammar %r from %s", table.language, origin)
        self._tables[table.language] = table
        for ext in table.extensions:
            self._by_extension[ext.lower()] = table.language
        for name in table.filenames:
            self._by_filename[name] = table.language

    def get(self, key: str) -> GrammarTable:
        """Look up a grammar by language id or extension, config tables first.

        Raises:
            UnsupportedLanguage: If neither the config nor the registry knows *key*.
        """
        if key in self._tables:
            return self._tables[key]
        language = self._by_extension.get(key.lower())
        if language is None and not key.startswith("."):
            language = self._by_extension.get("." + key.lower())
        if language is not None:
            return self._tables[language]
        return get_grammar(key)

    def for_path(self, path: str | os.PathLike[str]) -> GrammarTable:
        """Pick the grammar for a file, config tables first."""
        name = os.path.basename(os.fspath(path))
        if name in self._by_filename:
            return self._tables[self._by_filename[name]]
        ext = os.path.splitext(name)[1].lower()
        if ext and ext in self._by_extension:
            return self._tables[self._by_extension[ext]]
        return grammar_for_path(path)

    def register_all(self) -> None:
        """Install the loaded tables in the global registry."""
        for table in self._tables.values():
            register_grammar(table)

    def has(self, key: str) -> bool:
        try:
            self.get(key)
        except UnsupportedLanguage:
            return False
        return True

    @property
    def languages(self) -> list[str]:
        """Language ids defined by config files."""
        return sorted(self._tables)
