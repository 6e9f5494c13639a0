"""Pytest integration for Gherkin feature files.

This module defines a custom pytest file collector that treats feature
files as executable specifications. Each collected file is parsed and
built with the shared engine and converted into one `ScenarioCase` per
built scenario, outline rows included.
"""

from typing import TYPE_CHECKING

import pytest

from pytest_cucu.errors import CucuError

from .case import ScenarioCase

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from _pytest._code.code import ExceptionInfo, TerminalRepr

if TYPE_CHECKING:
    from pytest_cucu.runtime.engine import Engine


class FeatureSpec(pytest.File):
    """Pytest file collector for feature files.

    Collection errors (malformed hooks, unresolvable steps, invalid
    syntax) are reported by pytest as collection errors of the file.
    """

    __test__ = False

    @property
    def engine(self) -> 'Engine':
        """Shared engine configured by the plugin."""
        return self.config.cucu_engine  # type: ignore[attr-defined]

    def collect(self) -> 'Iterable[ScenarioCase]':
        """Collect pytest test cases from a feature file.

        Returns:
            Iterable of `ScenarioCase` instances for pytest execution.

        Raises:
            SourceError: If the file can not be parsed.
            BuildError: If the feature can not be built.
        """
        node = self.engine.loader.load(self.path)

        feature = self.engine.build_feature(node)
        if feature is None:
            return

        for scenario in feature.scenarios:
            yield ScenarioCase.from_parent(
                self,
                name=scenario.name or f'scenario {scenario.id}',
                feature=feature,
                scenario=scenario,
                context=self.engine.context,
            )

    def repr_failure(self, excinfo: 'ExceptionInfo[BaseException]') -> 'str | TerminalRepr':
        """Render engine errors with their formatted context."""
        if isinstance(excinfo.value, CucuError):
            return f'{excinfo.value}'

        return super().repr_failure(excinfo)
