"""Hook scenarios.

A hook is a plain scenario whose title follows the grammar
`@<key>/<regex>` or `@<key>(<priority>)/<regex>`. Its steps are not run
on their own but injected before or after every scenario whose title
matches `<regex>`.

Examples of hook titles:

    @before/^.*$            applies to every scenario
    @before(-1)/stg         applies to scenarios containing "stg"
    @after(10)/^Checkout    applies to scenarios starting with "Checkout"
"""

from re import Pattern, error
from re import compile as regexp
from typing import TYPE_CHECKING, Literal

from pydantic import Field

from pytest_cucu.errors import BuildError, ErrorContext, PatternError
from pytest_cucu.models import SchemaModel
from pytest_cucu.names import (
    HOOK_AFTER,
    HOOK_BEFORE,
    HOOK_HEAD_PATTERN,
    HOOK_KEYS,
    HOOK_TITLE_PATTERN,
)
from pytest_cucu.schema import OutlineNode, StepNode

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from pytest_cucu.schema import Definition


class Hook(SchemaModel):
    """Steps injected around matching scenarios."""

    key: Literal['before', 'after'] = Field(
        title='Hook key',
    )

    priority: int = Field(
        default=0,
        title='Priority',
        description='Hooks are applied in ascending priority order.',
    )

    pattern: Pattern[str] = Field(
        title='Scenario title pattern',
    )

    steps: tuple[StepNode, ...] = Field(
        default=(),
        title='Injected steps',
    )

    title: str = Field(
        default='',
        title='Declared title',
    )

    def applies(self, name: str) -> bool:
        """Check whether the hook applies to a scenario title."""
        return self.pattern.search(name.strip()) is not None


def sort_hooks(hooks: 'Iterable[Hook]') -> list[Hook]:
    """Sort hooks by ascending priority, keeping discovery order on ties."""
    return sorted(hooks, key=lambda hook: hook.priority)


def select_steps(hooks: 'Iterable[Hook]', name: str, *,
                 reverse: bool = False) -> tuple[StepNode, ...]:
    """Collect the steps of every hook applying to a scenario title.

    Steps are accumulated in hook order, then in step order within
    each hook.

    Args:
        hooks: Hooks sorted by priority.
        name: Scenario title.
        reverse: Reverse the accumulated steps as a whole, so the last
            step of the last hook comes first.

    Returns:
        Ordered steps to inject.
    """
    steps = [
        step
        for hook in hooks
        if hook.applies(name)
        for step in hook.steps
    ]
    if reverse:
        steps.reverse()

    return tuple(steps)


class HookResolver:
    """Partition of scenario definitions into hooks.

    The resolver collects before and after hooks of one feature. Lists
    are exposed sorted by ascending priority; equal priorities keep
    the discovery order.
    """

    def __init__(self, filename: str | None = None) -> None:
        """Initialize empty hook lists.

        Args:
            filename: Optional source file used in error reports.
        """
        self.filename = filename
        self._hooks: dict[str, list[Hook]] = {key: [] for key in HOOK_KEYS}

    @property
    def before(self) -> list[Hook]:
        """Before hooks in application order."""
        return sort_hooks(self._hooks[HOOK_BEFORE])

    @property
    def after(self) -> list[Hook]:
        """After hooks in priority order."""
        return sort_hooks(self._hooks[HOOK_AFTER])

    def parse(self, definition: 'Definition') -> Hook | None:
        """Build a hook from a scenario definition.

        Outlines are never hooks.

        Args:
            definition: Scenario or outline node.

        Returns:
            A hook, or `None` when the title does not follow the hook
            grammar and the definition is a normal scenario.

        Raises:
            BuildError: If the head does not parse into a known key and
                an integer priority.
            PatternError: If the title pattern does not compile.
        """
        if isinstance(definition, OutlineNode):
            return None

        title = definition.name.strip()
        if (matched := HOOK_TITLE_PATTERN.match(title)) is None:
            return None

        if (head := HOOK_HEAD_PATTERN.match(matched['head'].strip())) is None:
            raise self.error(f'Invalid hook title {title!r}', definition)

        key = head['key'].strip().lower()
        if key not in HOOK_KEYS:
            raise self.error(f'Unsupported hook key {key!r} in title {title!r}', definition)

        priority = 0
        if head['priority'] is not None:
            try:
                priority = int(head['priority'].strip())
            except ValueError as base:
                raise self.error(
                    f'Invalid hook priority {head['priority']!r} in title {title!r}',
                    definition,
                ) from base

        body = matched['body'].strip()
        try:
            pattern = regexp(body)
        except error as base:
            raise PatternError(
                f'Invalid hook pattern {body!r} in title {title!r}: {base}',
                pattern=body,
                context=self.make_context(definition),
            ) from base

        return Hook(
            key=key,
            priority=priority,
            pattern=pattern,
            steps=definition.steps,
            title=title,
        )

    def add(self, definition: 'Definition') -> bool:
        """Register a definition as a hook when it is one.

        Args:
            definition: Scenario or outline node.

        Returns:
            True if the definition was consumed as a hook.

        Raises:
            BuildError: If the title follows the hook grammar but is invalid.
        """
        if (hook := self.parse(definition)) is None:
            return False

        self._hooks[hook.key].append(hook)

        return True

    def make_context(self, definition: 'Definition') -> ErrorContext:
        """Build an error context pointing at a definition."""
        return ErrorContext(
            filename=self.filename,
            line_num=definition.line,
            scenario=definition.name,
        )

    def error(self, message: str, definition: 'Definition') -> BuildError:
        """Create a build error pointing at a definition."""
        return BuildError(message, context=self.make_context(definition))
