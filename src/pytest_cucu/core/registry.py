"""Step action registry.

This module maps compiled regular expressions to step callbacks and
resolves a step text to exactly one of them. Matching is never
prioritized: a text matched by several patterns is always an error.

Callback signatures are inspected once, at registration time, so a
callback that can not receive the execution context and the captured
groups is rejected before any feature is built.
"""

from collections.abc import Callable
from inspect import Parameter, signature
from re import Pattern, error
from re import compile as regexp
from threading import Lock
from typing import TYPE_CHECKING

from pydantic import Field

from pytest_cucu.errors import (
    AmbiguousStepError,
    PatternError,
    SignatureError,
    UnmatchedStepError,
)
from pytest_cucu.models import SchemaModel

if TYPE_CHECKING:
    from collections.abc import Iterator

if TYPE_CHECKING:
    from pytest_cucu.values import Capture, StepCallback

#: Positional parameter kinds.
POSITIONAL = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


class ActionBinding(SchemaModel):
    """A compiled pattern bound to a step callback.

    The binding records the positional arity of the callback so the
    binder can verify the full parameter envelope of a step without
    inspecting the callback again.
    """

    pattern: Pattern[str] = Field(
        title='Step pattern',
        description='Compiled regular expression evaluated against step texts.',
    )

    callback: Callable[..., object] = Field(
        title='Step callback',
        description=(
            'Callable receiving the execution context, the captured '
            'groups, and an optional structural argument.'
        ),
    )

    min_args: int = Field(
        ge=0,
        title='Required positional arguments',
    )

    max_args: int | None = Field(
        default=None,
        title='Accepted positional arguments',
        description='`None` when the callback accepts variadic arguments.',
    )

    @property
    def source(self) -> str:
        """Pattern source string."""
        return self.pattern.pattern

    def accepts(self, count: int) -> bool:
        """Check whether the callback accepts a number of positional arguments.

        Args:
            count: Number of positional arguments, execution context included.

        Returns:
            True if the callback can be called with that many arguments.
        """
        if count < self.min_args:
            return False

        return self.max_args is None or count <= self.max_args

    @classmethod
    def build(cls, pattern: str, callback: 'StepCallback') -> 'ActionBinding':
        """Compile a pattern and inspect the callback signature.

        The callback must accept the execution context followed by one
        argument per capture group; it may accept one more positional
        argument for a data table or doc string.

        Args:
            pattern: Regular expression source.
            callback: Step callback.

        Returns:
            A new binding.

        Raises:
            PatternError: If the pattern does not compile.
            SignatureError: If the callback can receive neither the
                context and the captured groups nor those plus one
                structural argument.
        """
        try:
            compiled = regexp(pattern)

        except error as base:
            raise PatternError(
                f'Invalid step pattern {pattern!r}: {base}',
                pattern=pattern,
            ) from base

        if not callable(callback):
            raise SignatureError(f'Callback for {pattern!r} is not callable')

        try:
            parameters = signature(callback).parameters.values()

        except (TypeError, ValueError) as base:
            raise SignatureError(f'Can not inspect callback for {pattern!r}') from base

        min_args = 0
        max_args: int | None = 0
        for parameter in parameters:
            if parameter.kind == Parameter.VAR_POSITIONAL:
                max_args = None
            elif parameter.kind in POSITIONAL:
                if max_args is not None:
                    max_args += 1
                if parameter.default is Parameter.empty:
                    min_args += 1
            elif parameter.kind == Parameter.KEYWORD_ONLY and parameter.default is Parameter.empty:
                raise SignatureError(
                    f'Callback for {pattern!r} has a required keyword-only '
                    f'parameter {parameter.name!r}',
                )

        binding = cls(
            pattern=compiled,
            callback=callback,
            min_args=min_args,
            max_args=max_args,
        )

        count = 1 + compiled.groups
        if not (binding.accepts(count) or binding.accepts(count + 1)):
            raise SignatureError(
                f'Callback for {pattern!r} must accept the execution context '
                f'and {compiled.groups} captured group(s)',
            )

        return binding


class ActionRegistry:
    """Mapping from step patterns to callbacks.

    Registrations are expected during setup, before any run begins. The
    registry outlives individual runs so callbacks registered once are
    reused across specification locations.

    Registering an identical pattern string again replaces the previous
    binding. There is no removal operation.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._bindings: dict[str, ActionBinding] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        """Number of registered patterns."""
        return len(self._bindings)

    def __iter__(self) -> 'Iterator[ActionBinding]':
        """Iterate over bindings in registration order."""
        return iter(tuple(self._bindings.values()))

    def __contains__(self, pattern: object) -> bool:
        """Check whether a pattern string is registered."""
        return pattern in self._bindings

    def register(self, pattern: str, callback: 'StepCallback') -> ActionBinding:
        """Compile and store a binding.

        Args:
            pattern: Regular expression source.
            callback: Step callback.

        Returns:
            The stored binding.

        Raises:
            PatternError: If the pattern does not compile.
            SignatureError: If the callback signature does not fit.
        """
        binding = ActionBinding.build(pattern, callback)

        with self._lock:
            self._bindings[pattern] = binding

        return binding

    def step[F: 'StepCallback'](self, pattern: str) -> Callable[[F], F]:
        """Register the decorated function for a pattern.

        Args:
            pattern: Regular expression source.

        Returns:
            A decorator returning the function unchanged.
        """
        def decorator(callback: F) -> F:
            self.register(pattern, callback)
            return callback

        return decorator

    def update(self, other: 'ActionRegistry') -> None:
        """Copy all bindings of another registry into this one.

        Args:
            other: Registry to merge, later bindings replace earlier ones.
        """
        with self._lock:
            for binding in other:
                self._bindings[binding.source] = binding

    def resolve(self, text: str) -> tuple[ActionBinding, tuple['Capture', ...]]:
        """Resolve a step text to exactly one binding.

        Every registered pattern is evaluated against the text.

        Args:
            text: Resolved step text.

        Returns:
            The matching binding and its captured groups in
            left-to-right order, the whole match excluded.

        Raises:
            UnmatchedStepError: If no pattern matches.
            AmbiguousStepError: If more than one pattern matches.
        """
        matches = [
            (binding, found)
            for binding in self
            if (found := binding.pattern.search(text)) is not None
        ]

        if not matches:
            raise UnmatchedStepError(f'No step matches {text!r}', text=text)

        if len(matches) > 1:
            patterns = tuple(binding.source for binding, _ in matches)
            raise AmbiguousStepError(
                f'Step {text!r} matches {len(matches)} patterns: '
                f'{', '.join(repr(item) for item in patterns)}',
                text=text,
                patterns=patterns,
            )

        binding, found = matches[0]

        return binding, found.groups()
