"""Execution context shared by step callbacks.

The context is the only bridge between steps: every callback receives it
as its first argument and may store values for subsequent steps.
"""

from traceback import format_stack
from typing import TYPE_CHECKING, Any

from pytest_cucu.errors import StepRuntimeError

if TYPE_CHECKING:
    from typing import NoReturn

if TYPE_CHECKING:
    from pytest_cucu.runtime.tree import Feature, Scenario, Step


class ExecutionContext(dict[str, Any]):
    """Mutable bag of named values threaded through a run.

    Besides the values, the context tracks the feature, scenario, and
    step in progress so that failures raised from callbacks can be
    attributed without passing the units around explicitly.

    The context is reset at the start of every run. There is a single
    writer at any instant: the callback of the running step.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:  # noqa: ANN401
        """Initialize an empty context."""
        super().__init__(*args, **kwargs)

        self.feature: Feature | None = None
        self.scenario: Scenario | None = None
        self.step: Step | None = None

    def reset(self) -> None:
        """Drop all values and references to units in progress."""
        self.clear()

        self.feature = None
        self.scenario = None
        self.step = None

    def exception(self, message: str, *args: Any) -> StepRuntimeError:  # noqa: ANN401
        """Create a failure bound to the units in progress.

        Args:
            message: Error message, optionally with `%` placeholders.
            *args: Values for the message placeholders.

        Returns:
            A new `StepRuntimeError` carrying the current call stack.
        """
        if args:
            message = message % args

        return StepRuntimeError(
            message,
            feature=self.feature,
            scenario=self.scenario,
            step=self.step,
            trace=''.join(format_stack()[:-1]),
            values=dict(self),
        )

    def fail(self, message: str, *args: Any) -> 'NoReturn':  # noqa: ANN401
        """Fail the running step.

        Args:
            message: Error message, optionally with `%` placeholders.
            *args: Values for the message placeholders.

        Raises:
            StepRuntimeError: Always.
        """
        raise self.exception(message, *args)
