"""Core exception hierarchy.

This module defines the error types used across the library to report
malformed hooks and patterns, unresolvable steps, specification source
failures, and step failures captured while a feature is running.

Every error renders as its message followed by the location of the
failure and, for step failures, a YAML dump of the execution context
values and the captured trace:

    Counter is 1, expected 5
        in "shop.feature", line 12
        in feature "Shop", scenario "Count wrong"
        on step 3: the counter is 5
             ...
            context:
              counter: 1
             ---
            Traceback (most recent call last):
            ...
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import safe_dump

from pytest_cucu.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from typing import Self

if TYPE_CHECKING:
    from pytest_cucu.runtime.tree import Feature, Scenario, Step

#: Indentation of location lines below the message.
LOCATION_INDENT = ' ' * 4
#: Indentation of the values and trace snippet.
SNIPPET_INDENT = ' ' * 8
#: Indentation of nested YAML levels.
YAML_INDENT = 2

SNIPPET_START = ' ...'
SNIPPET_BREAK = ' ---'

#: Placeholder rendered instead of values YAML can not represent.
OPAQUE_VALUE = '<runtime object>'
#: Placeholder rendered when the source file is unknown.
UNKNOWN_SOURCE = '<unicode string>'


class ErrorContext(TypedDict, total=False):
    """Location and runtime data attached to an error.

    All fields are optional; missing fields are simply not rendered.
    """

    #: Specification file of the failing unit.
    filename: str | None
    #: Line of the failing unit in the specification file.
    line_num: int | None

    #: Name of the feature in progress.
    feature: str | None
    #: Name of the scenario in progress.
    scenario: str | None

    #: Order id of the step in progress.
    step_num: int | None
    #: Resolved text of the step in progress.
    step: str | None

    #: Underlying exception that triggered formatting.
    error: BaseException | None

    #: Execution context values available at the moment of failure.
    context: dict[str, Any] | None
    #: Formatted stack or traceback captured at the moment of failure.
    trace: str | None


def sanitize(value: Any) -> Any:  # noqa: ANN401
    """Reduce a value to plain scalars, mappings, and lists.

    Anything else is replaced with a placeholder so that opaque objects
    held by the execution context never leak into reports.
    """
    if value is None or isinstance(value, SCALARS):
        return value

    if isinstance(value, MAPPINGS):
        return {f'{key}': sanitize(item) for key, item in value.items()}

    if isinstance(value, SEQUENCES):
        return [sanitize(item) for item in value]

    return OPAQUE_VALUE


def indent_lines(text: str, indent: str) -> str:
    """Prefix every non-blank line of a text, dropping blank lines."""
    if not indent:
        return text

    lines = (line for line in text.splitlines() if line.strip())

    return linesep.join(indent + line for line in lines)


def as_indent(indent: str | int | None) -> str:
    """Accept an indentation as a string or a number of spaces."""
    if isinstance(indent, str):
        return indent

    return ' ' * indent if indent else ''


class ErrorFormatter:
    """Render errors with their location and runtime snippet."""

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Append location lines and a snippet to a message.

        Args:
            message: Human-readable error message.
            context: Optional location and runtime data.

        Returns:
            The message alone when there is no context, otherwise the
            message followed by the rendered context.
        """
        if not context:
            return message

        return ''.join((
            message,
            linesep,
            cls.get_location_string(context, indent=LOCATION_INDENT),
            cls.get_snippet_string(context, indent=SNIPPET_INDENT),
        ))

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Render where the error happened.

        The first line names the file and line, the second one the
        feature and scenario in progress, the third one the step.
        Lines without data are omitted, except the file line.
        """
        indent = as_indent(indent)

        source = f'in "{context.get('filename') or UNKNOWN_SOURCE}"'
        if (line_num := context.get('line_num')) is not None:
            source += f', line {line_num}'
        lines = [source]

        units = [
            f'{kind} "{name}"'
            for kind in ('feature', 'scenario')
            if (name := context.get(kind))
        ]
        if units:
            lines.append(f'in {', '.join(units)}')

        if (step_num := context.get('step_num')) is not None:
            step = f'on step {step_num + 1}'
            if text := context.get('step'):
                step += f': {text}'
            lines.append(step)

        return ''.join(f'{indent}{line}{linesep}' for line in lines)

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Render the context values as YAML followed by the trace.

        Returns:
            The snippet, or an empty string when the context holds
            neither values nor a trace.
        """
        indent = as_indent(indent)

        values = context.get('context')
        trace = context.get('trace')
        if not values and not trace:
            return ''

        parts = [f'{indent}{SNIPPET_START}{linesep}']
        if values:
            dumped = safe_dump(
                {'context': sanitize(values)},
                indent=YAML_INDENT,
                sort_keys=False,
                allow_unicode=True,
            )
            parts.append(indent_lines(dumped, indent) + linesep)

        if trace:
            if values:
                parts.append(f'{indent}{SNIPPET_BREAK}{linesep}')
            parts.append(indent_lines(trace, indent) + linesep)

        return ''.join(parts)


class CucuError(Exception, ErrorFormatter):
    """Base exception for all pytest-cucu errors.

    All custom exceptions raised by the library inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional runtime values.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)


class BuildError(CucuError):
    """Error raised while building the execution tree.

    Covers malformed hook titles, invalid hook priorities, and patterns
    or callbacks rejected at registration time. Build errors abort the
    run before any feature is executed.
    """


class PatternError(BuildError):
    """Error raised when a step or hook pattern does not compile."""

    def __init__(self, message: str, *, pattern: str,
                 context: ErrorContext | None = None) -> None:
        """Initialize a pattern error.

        Args:
            message: Human-readable error description.
            pattern: The offending pattern source.
            context: Optional error context.
        """
        self.pattern = pattern

        super().__init__(message, context=context)


class SignatureError(BuildError):
    """Error raised when a callback can not receive its parameters."""


class StepMatchError(BuildError):
    """Error raised when a step text can not be bound to one callback."""

    def __init__(self, message: str, *, text: str,
                 context: ErrorContext | None = None) -> None:
        """Initialize a step match error.

        Args:
            message: Human-readable error description.
            text: The resolved step text.
            context: Optional error context.
        """
        self.text = text

        super().__init__(message, context=context)


class UnmatchedStepError(StepMatchError):
    """Error raised when no registered pattern matches a step text."""


class AmbiguousStepError(StepMatchError):
    """Error raised when more than one registered pattern matches a step text.

    There is no tie-breaking: every ambiguity is an error.
    """

    def __init__(self, message: str, *, text: str,
                 patterns: tuple[str, ...],
                 context: ErrorContext | None = None) -> None:
        """Initialize an ambiguity error.

        Args:
            message: Human-readable error description.
            text: The resolved step text.
            patterns: Matching pattern sources in registration order.
            context: Optional error context.
        """
        self.patterns = patterns

        super().__init__(message, text=text, context=context)


class SourceError(CucuError):
    """Error raised when a specification source can not be located or parsed."""

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        """Initialize a source error.

        Args:
            message: Human-readable error description.
            filename: Optional specification file associated with the error.
        """
        self.filename = filename

        super().__init__(message, context=ErrorContext(filename=filename))


class StepRuntimeError(CucuError):
    """Error raised when a step callback fails during execution.

    The error retains the feature, scenario, and step in progress at the
    moment of failure together with a trace usable for postmortem
    reporting. It is contained at scenario scope by the runner.
    """

    def __init__(self, message: str, *,
                 feature: 'Feature | None' = None,
                 scenario: 'Scenario | None' = None,
                 step: 'Step | None' = None,
                 trace: str | None = None,
                 values: dict[str, Any] | None = None) -> None:
        """Initialize a step failure.

        Args:
            message: Human-readable error description.
            feature: Feature in progress.
            scenario: Scenario in progress.
            step: Step in progress.
            trace: Formatted traceback or call stack.
            values: Snapshot of execution context values.
        """
        self.feature = feature
        self.scenario = scenario
        self.step = step
        self.trace = trace

        super().__init__(message, context=self.make_context(
            feature, scenario, step,
            trace=trace,
            values=values,
        ))

    @staticmethod
    def make_context(feature: 'Feature | None',
                     scenario: 'Scenario | None',
                     step: 'Step | None', *,
                     trace: str | None = None,
                     values: dict[str, Any] | None = None) -> ErrorContext:
        """Build the error context for the units in progress.

        Args:
            feature: Feature in progress.
            scenario: Scenario in progress.
            step: Step in progress.
            trace: Formatted traceback or call stack.
            values: Snapshot of execution context values.

        Returns:
            An error context suitable for the formatter.
        """
        return ErrorContext(
            filename=feature.filename if feature else None,
            line_num=step.line if step else None,
            feature=feature.name if feature else None,
            scenario=scenario.name if scenario else None,
            step_num=step.id if step else None,
            step=step.text if step else None,
            context=values,
            trace=trace,
        )

    def bind(self, feature: 'Feature | None',
             scenario: 'Scenario | None',
             step: 'Step | None', *,
             values: dict[str, Any] | None = None) -> 'Self':
        """Attach missing location references to this error.

        References already present are kept, so an error created by
        the step itself is not overwritten by its callers.

        Args:
            feature: Feature in progress.
            scenario: Scenario in progress.
            step: Step in progress.
            values: Snapshot of execution context values.

        Returns:
            The same error instance.
        """
        self.feature = self.feature or feature
        self.scenario = self.scenario or scenario
        self.step = self.step or step

        previous = self.context or ErrorContext()
        self.context = self.make_context(
            self.feature, self.scenario, self.step,
            trace=self.trace,
            values=previous.get('context') or values,
        )

        return self
