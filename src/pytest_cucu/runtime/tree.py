"""Runtime execution tree.

This module defines the bound feature, scenario, and step units and
the fail/skip containment rules applied while they run:

- a step passes when its callback completes without signaling failure;
- a failing step fails its scenario, every remaining step of that
  scenario is skipped without being invoked;
- a failing scenario never stops its feature, which moves on to the
  next scenario and is marked failed once all of them ran.
"""

import logging
from enum import IntEnum
from traceback import format_exception
from typing import TYPE_CHECKING

from pytest_cucu.errors import CucuError, StepRuntimeError

if TYPE_CHECKING:
    from pytest_cucu.context import ExecutionContext
    from pytest_cucu.values import Parameter, StepCallback, StepResult

logger = logging.getLogger(__name__)

#: Exceptions stopping the whole run instead of failing the step.
INTERRUPTS = (KeyboardInterrupt, SystemExit, GeneratorExit)


class Status(IntEnum):
    """Execution status of a unit."""

    WAIT = 0
    PASS = 1
    FAIL = 2
    SKIP = 3


class Step:
    """A bound step.

    Steps are immutable once bound: the status is the only field
    changing, exactly once, during a run.
    """

    __test__ = False

    def __init__(self, id: int, text: str,  # noqa: A002
                 action: 'StepCallback',
                 params: tuple['Parameter', ...] = (), *,
                 keyword: str = '',
                 line: int | None = None) -> None:
        """Initialize a bound step.

        Args:
            id: Order id within the scenario, starting at 0.
            text: Resolved step text.
            action: Callback resolved from the registry.
            params: Positional parameters passed after the context.
            keyword: Step keyword (`Given`, `When`, ...).
            line: Source line of the step.
        """
        self.id = id
        self.text = text
        self.action = action
        self.params = params
        self.keyword = keyword
        self.line = line

        self.status = Status.WAIT

    def __repr__(self) -> str:
        """String representation."""
        return f'<Step {self.id} {self.text!r} {self.status.name}>'

    def _set_status(self, status: Status) -> None:
        if self.status is not Status.WAIT:
            raise CucuError(f'Step {self.text!r} already finished with {self.status.name}')

        self.status = status

    def invoke(self, context: 'ExecutionContext') -> 'StepResult':
        """Call the action with the context and the bound parameters."""
        return self.action(context, *self.params)

    def run(self, context: 'ExecutionContext') -> StepRuntimeError | None:
        """Run the step.

        A callback fails the step by raising, by returning `False`, or
        by returning an exception instance. Foreign exceptions, including
        test framework outcomes such as `pytest.fail`, are coerced into
        `StepRuntimeError` keeping the original message. Interrupts
        propagate.

        Args:
            context: Execution context of the run.

        Returns:
            The captured failure, or `None` if the step passed.
        """
        context.step = self
        logger.info('[STEP] %s %s', self.keyword, self.text)

        try:
            result = self.invoke(context)
            if result is False:
                raise context.exception('Step returned a failure result')
            if isinstance(result, Exception):
                raise result

        except StepRuntimeError as base:
            if base.trace is None:
                base.trace = ''.join(format_exception(base))
            failure = base.bind(
                context.feature,
                context.scenario,
                self,
                values=dict(context),
            )

        except INTERRUPTS:
            raise

        except BaseException as base:
            failure = StepRuntimeError(
                f'{base}' or f'{base!r}',
                feature=context.feature,
                scenario=context.scenario,
                step=self,
                trace=''.join(format_exception(base)),
                values=dict(context),
            )
            failure.__cause__ = base

        else:
            self._set_status(Status.PASS)
            return None

        self._set_status(Status.FAIL)
        self.report(failure)

        return failure

    def skip(self) -> None:
        """Mark the step as skipped without invoking its action."""
        self._set_status(Status.SKIP)
        logger.info('[SKIP] %s %s', self.keyword, self.text)

    @staticmethod
    def report(failure: StepRuntimeError) -> None:
        """Log a failure with its trace."""
        logger.error('FAIL: %s', failure.message)
        for line in (failure.trace or '').splitlines():
            logger.error('|    %s', line)


class Scenario:
    """A bound scenario: an ordered list of steps.

    For outline rows, `example_name` and `example_index` identify the
    originating example table row.
    """

    __test__ = False

    def __init__(self, id: int, name: str,  # noqa: A002
                 steps: list[Step], *,
                 description: str = '',
                 tags: tuple[str, ...] = (),
                 line: int | None = None,
                 example_name: str | None = None,
                 example_index: int | None = None) -> None:
        """Initialize a bound scenario.

        Args:
            id: Identity unique within the feature.
            name: Scenario name.
            steps: Steps in execution order, ids contiguous from 0.
            description: Scenario description.
            tags: Effective tags.
            line: Source line of the definition.
            example_name: Originating example table name.
            example_index: Originating example row index.
        """
        self.id = id
        self.name = name
        self.steps = steps
        self.description = description
        self.tags = tags
        self.line = line
        self.example_name = example_name
        self.example_index = example_index

        self.status = Status.WAIT

    def __repr__(self) -> str:
        """String representation."""
        return f'<Scenario {self.id} {self.name!r} {self.status.name}>'

    @property
    def is_example(self) -> bool:
        """True when the scenario was expanded from an outline."""
        return self.example_index is not None

    def run(self, context: 'ExecutionContext') -> StepRuntimeError | None:
        """Run all steps in order.

        The first failing step fails the scenario; every remaining step
        is skipped and never invoked.

        Args:
            context: Execution context of the run.

        Returns:
            The captured failure, or `None` if every step passed.
        """
        context.scenario = self
        context.step = None

        logger.info('%s', '-' * 40)
        if context.feature is not None:
            logger.info('%s.%s', context.feature.name, self.name)
        else:
            logger.info('%s', self.name)
        logger.info('%s', '-' * 40)

        failure: StepRuntimeError | None = None
        for step in self.steps:
            if failure is not None:
                step.skip()
            else:
                failure = step.run(context)

        self.status = Status.PASS if failure is None else Status.FAIL

        return failure


class Feature:
    """A bound feature: an ordered list of scenarios."""

    __test__ = False

    def __init__(self, name: str, scenarios: list[Scenario], *,
                 description: str = '',
                 tags: tuple[str, ...] = (),
                 filename: str | None = None) -> None:
        """Initialize a bound feature.

        Args:
            name: Feature name.
            scenarios: Scenarios in execution order.
            description: Feature description.
            tags: Declared tags.
            filename: Source specification file.
        """
        self.name = name
        self.scenarios = scenarios
        self.description = description
        self.tags = tags
        self.filename = filename

        self.status = Status.WAIT

    def __repr__(self) -> str:
        """String representation."""
        return f'<Feature {self.name!r} {self.status.name}>'

    def update_status(self) -> Status:
        """Aggregate the status from the finished scenarios.

        Returns:
            FAIL if any scenario failed, otherwise PASS.
        """
        failed = any(scenario.status is Status.FAIL for scenario in self.scenarios)
        self.status = Status.FAIL if failed else Status.PASS

        return self.status

    def run(self, context: 'ExecutionContext') -> list[StepRuntimeError]:
        """Run all scenarios in order.

        A failing scenario does not stop the feature.

        Args:
            context: Execution context of the run.

        Returns:
            Failures captured in the scenarios, in execution order.
        """
        context.feature = self
        logger.info('Feature: %s', self.name)

        failures = [
            failure
            for scenario in self.scenarios
            if (failure := scenario.run(context)) is not None
        ]

        self.update_status()

        return failures
