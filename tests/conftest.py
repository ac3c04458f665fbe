"""Shared fixtures."""

from pathlib import Path

import pytest

from treebind.binder import BindingGenerator, set_generator
from treebind.config import reset_config
from treebind.fetch import set_fetcher

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def clean_globals(monkeypatch):
    """Isolate tests from the environment and from each other's globals."""
    for var in (
        "TREEBIND_MODE",
        "TREEBIND_INCLUDE_DIRS",
        "TREEBIND_DYNLIB",
        "TREEBIND_CACHE_DIR",
        "TREEBIND_FETCH_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_config()
    set_generator(None)
    set_fetcher(None)
    yield
    reset_config()
    set_generator(None)
    set_fetcher(None)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def generator() -> BindingGenerator:
    return BindingGenerator(mode="c")


@pytest.fixture
def parse(generator):
    """Parse C source and return the root node."""

    def _parse(source: str):
        return generator.parse(source).root_node

    return _parse


@pytest.fixture
def find_node():
    """First node of a kind, in document order."""

    def _find(root, kind: str):
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == kind:
                return node
            stack.extend(reversed(node.named_children))
        raise AssertionError(f"No {kind} node")

    return _find
