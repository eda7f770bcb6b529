"""Shared test fixtures for sibylline-tags."""

import pytest

from sibylline_tags.config import GrammarConfig
from sibylline_tags.grammars import get_grammar


@pytest.fixture
def c_grammar():
    """The built-in C-family grammar."""
    return get_grammar("c")


@pytest.fixture
def python_grammar():
    """The built-in Python grammar."""
    return get_grammar("python")


@pytest.fixture
def empty_config(tmp_path):
    """A GrammarConfig that only sees an empty directory (built-ins only)."""
    return GrammarConfig(locations=[tmp_path / "none"])
