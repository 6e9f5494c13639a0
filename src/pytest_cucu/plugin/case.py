"""Pytest item executing a single bound scenario."""

from typing import TYPE_CHECKING

import pytest

from pytest_cucu.errors import CucuError

if TYPE_CHECKING:
    from typing import Any

if TYPE_CHECKING:
    from _pytest._code.code import ExceptionInfo, TerminalRepr

if TYPE_CHECKING:
    from pytest_cucu.context import ExecutionContext
    from pytest_cucu.runtime.tree import Feature, Scenario


class ScenarioCase(pytest.Item):
    """Pytest item running one scenario of a feature."""

    __test__ = False

    def __init__(self, *,
                 feature: 'Feature',
                 scenario: 'Scenario',
                 context: 'ExecutionContext',
                 **kwargs: 'Any') -> None:
        """Initialize a pytest test case backed by a bound scenario.

        Args:
            feature: Feature owning the scenario.
            scenario: Bound scenario to run.
            context: Shared execution context.
            **kwargs: Keyword pytest.Item arguments.
        """
        super().__init__(**kwargs)

        self.feature = feature
        self.scenario = scenario
        self.context = context

    def runtest(self) -> None:
        """Execute the scenario.

        Raises:
            StepRuntimeError: If a step failed.
        """
        self.context.feature = self.feature

        failure = self.scenario.run(self.context)
        self.feature.update_status()

        if failure is not None:
            raise failure

    def repr_failure(self, excinfo: 'ExceptionInfo[BaseException]',
                     style: 'Any' = None) -> 'str | TerminalRepr':
        """Render engine errors with their formatted context."""
        if isinstance(excinfo.value, CucuError):
            return f'{excinfo.value}'

        return super().repr_failure(excinfo, style=style)

    def reportinfo(self) -> tuple[str, int | None, str]:
        """Location shown in pytest reports."""
        line = self.scenario.line - 1 if self.scenario.line else None

        return f'{self.path}', line, f'Scenario: {self.scenario.name}'
