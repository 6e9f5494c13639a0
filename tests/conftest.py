"""Tests configurations and fixtures."""

from typing import TYPE_CHECKING

import pytest

from pytest_cucu import ActionRegistry, Engine, EngineSettings
from pytest_cucu.core import FeatureLoader

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

if TYPE_CHECKING:
    from pytest_cucu.schema import FeatureNode


@pytest.fixture
def registry() -> ActionRegistry:
    """Provide an empty, isolated step registry."""
    return ActionRegistry()


@pytest.fixture
def engine(registry: ActionRegistry) -> Engine:
    """Provide an engine without step libraries or specification location.

    The engine shares the `registry` fixture so tests can register
    steps on either object.
    """
    return Engine(EngineSettings(), registry=registry)


@pytest.fixture
def parse() -> 'Callable[[str], FeatureNode]':
    """Provide a helper parsing specification text into a feature node."""
    loader = FeatureLoader()

    def parse(content: str, filename: str | None = 'test.feature') -> 'FeatureNode':
        return loader.parse(content, filename=filename)

    return parse


@pytest.fixture
def write_features(tmp_path: 'Path') -> 'Callable[..., Path]':
    """Provide a factory writing feature files into a temporary directory.

    Keyword argument names become file stems, values become contents.
    Returns the directory holding the files.
    """
    def write(**contents: str) -> 'Path':
        for name, content in contents.items():
            (tmp_path / f'{name}.feature').write_text(content, encoding='utf-8')

        return tmp_path

    return write
