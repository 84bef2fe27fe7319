"""Shared fixtures for the dependency extractor tests."""

import logging
from pathlib import Path

import pytest

from gradlesentinel.engines.dependency_extractor import extract_all_package_files

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def load_fixture():
    def _load(name: str) -> str:
        return (FIXTURES / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def extract():
    """Run the extractor over an in-memory ``{path: content}`` tree.

    Files are passed in dict order unless *order* is given.
    """

    def _extract(files: dict, order: list[str] | None = None, config=None):
        return extract_all_package_files(order or list(files), files, config)

    return _extract


@pytest.fixture(autouse=True)
def _restore_root_handlers():
    """Drop handlers installed by setup_logging() so they do not outlive capsys."""
    root = logging.getLogger()
    before = list(root.handlers)
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
