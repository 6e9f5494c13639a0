"""Pytest plugin for collecting and executing Gherkin feature files.

This module integrates the engine with pytest by:
- registering custom command-line options and ini values;
- configuring a shared `Engine` instance with step libraries;
- collecting `*.feature` files as executable specifications.

Feature files are collected only when at least one step library is
configured, so projects that do not use the plugin are unaffected.
"""

from typing import TYPE_CHECKING

from .spec import FeatureSpec

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.config.argparsing import Parser
    from _pytest.nodes import Node

FEATURE_SUFFIX = '.feature'


def pytest_addoption(parser: 'Parser') -> None:
    """Register pytest command-line options for pytest-cucu.

    Args:
        parser: Pytest argument parser.
    """
    group = parser.getgroup('cucu', 'Gherkin feature files')
    group.addoption(
        '--cucu-steps',
        action='append',
        dest='cucu_steps',
        default=[],
        metavar='REF',
        help=(
            'Step library reference in module:attribute form. '
            'Enables collection of *.feature files.'
        ),
    )
    group.addoption(
        '--cucu-tags',
        action='append',
        dest='cucu_tags',
        default=[],
        metavar='TAG',
        help='Run only features and scenarios declaring this tag.',
    )
    parser.addini(
        'cucu_steps',
        type='linelist',
        default=[],
        help='Step library references enabling collection of *.feature files.',
    )


def pytest_configure(config: 'Config') -> None:
    """Configure pytest-cucu integration.

    This hook initializes a shared `Engine` instance and attaches it to
    the pytest configuration object as `config.cucu_engine`, or `None`
    when no step library is configured.

    Args:
        config: Pytest configuration object.
    """
    steps = [
        *config.getini('cucu_steps'),
        *config.getoption('cucu_steps', default=[]),
    ]

    config.cucu_engine = None  # type: ignore[attr-defined]
    if not steps:
        return

    from pytest_cucu.runtime.engine import Engine  # noqa: PLC0415
    from pytest_cucu.settings import EngineSettings  # noqa: PLC0415

    config.cucu_engine = Engine(EngineSettings(  # type: ignore[attr-defined]
        steps=tuple(steps),
        tags=tuple(config.getoption('cucu_tags', default=[])),
    ))


def pytest_collect_file(parent: 'Node', file_path: 'Path') -> FeatureSpec | None:
    """Collect Gherkin feature files.

    Args:
        parent: Parent pytest collection node.
        file_path: Path to the file being considered.

    Returns:
        A `FeatureSpec` collector if the file is a feature file and the
        engine is configured, otherwise `None`.
    """
    if getattr(parent.config, 'cucu_engine', None) is None:
        return None

    if file_path.suffix == FEATURE_SUFFIX:
        return FeatureSpec.from_parent(
            parent,
            path=file_path,
        )

    return None
