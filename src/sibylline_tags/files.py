"""Per-file annotation scanning.

Picks a grammar per file, scans it and extracts annotations, keeping the
outcome of each file separate: an unterminated comment in one file is
reported for that file and never stops the others.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from .annotations import Annotation, MarkerPolicy, extract_annotations
from .config import GrammarConfig
from .errors import ScanError, UnsupportedLanguage
from .scanner import scan

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    """Outcome of scanning one file."""

    path: str
    language: str
    annotations: list[Annotation] = field(default_factory=list)
    error: ScanError | OSError | None = None
    """Why the file could not be scanned; ``annotations`` is empty when set."""

    @property
    def ok(self) -> bool:
        return self.error is None


class AnnotationScanner:
    """Orchestrates grammar lookup, scanning and extraction for files.

    Pipeline:
        1. Select a grammar by file name / extension (config tables first)
        2. Read the file bytes
        3. Scan into spans
        4. Extract marker annotations from the comment spans
        5. Capture scan and read errors on the file's result
    """

    def __init__(
        self,
        marker: str = "@TODO",
        policy: MarkerPolicy = MarkerPolicy.FIRST,
        join_line_comments: bool = False,
        config: GrammarConfig | None = None,
        jobs: int = 1,
    ) -> None:
        if not marker or any(ch.isspace() for ch in marker):
            raise ValueError(f"marker must be a non-empty token without whitespace, got {marker!r}")
        self._marker = marker
        self._policy = policy
        self._join = join_line_comments
        self._config = config if config is not None else GrammarConfig()
        self._jobs = max(1, jobs)

    @property
    def marker(self) -> str:
        return self._marker

    def scan_bytes(self, raw: bytes, language: str) -> list[Annotation]:
        """Scan → extract for an in-memory buffer.

        Raises:
            UnsupportedLanguage: If *language* has no grammar.
            UnterminatedComment, UnterminatedLiteral: If the buffer ends inside
                an open construct.
        """
        grammar = self._config.get(language)
        return extract_annotations(
            scan(raw, grammar),
            raw,
            self._marker,
            policy=self._policy,
            join_line_comments=self._join,
        )

    def scan_file(self, path: str | os.PathLike[str]) -> FileResult:
        """Scan one file.

        Raises:
            UnsupportedLanguage: If no grammar matches the file.
        """
        name = os.fspath(path)
        grammar = self._config.for_path(name)
        result = FileResult(path=name, language=grammar.language)

        try:
            raw = Path(name).read_bytes()
        except OSError as exc:
            logger.warning("Cannot read %s: %s", name, exc)
            result.error = exc
            return result

        try:
            result.annotations = extract_annotations(
                scan(raw, grammar),
                raw,
                self._marker,
                policy=self._policy,
                join_line_comments=self._join,
            )
        except ScanError as exc:
            logger.warning("Scan failed: %s", exc.with_path(name))
            result.error = exc.with_path(name)
            return result

        logger.debug("%s: %d annotation(s)", name, len(result.annotations))
        return result

    def _scan_supported(self, path: str | os.PathLike[str]) -> FileResult | None:
        try:
            return self.scan_file(path)
        except UnsupportedLanguage:
            logger.debug("Skipping %s: no grammar", os.fspath(path))
            return None

    def scan_files(self, paths: Iterable[str | os.PathLike[str]]) -> list[FileResult]:
        """Scan many files, skipping those without a grammar.

        Results keep the order of *paths*. With ``jobs > 1`` files are scanned
        on a thread pool; grammar tables are immutable and shared.
        """
        paths = list(paths)
        if self._jobs == 1 or len(paths) < 2:
            results = [self._scan_supported(p) for p in paths]
        else:
            with ThreadPoolExecutor(max_workers=self._jobs) as ex:
                results = list(ex.map(self._scan_supported, paths))
        return [r for r in results if r is not None]
