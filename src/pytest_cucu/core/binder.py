"""Step binding.

The binder turns a parsed step node into a runnable step: it resolves
the text, extracts the structural argument, resolves the action, and
assembles the positional parameters passed after the execution context.

Parameters are ordered as follows:
    1. the execution context (supplied at call time);
    2. captured regular expression groups, in capture order;
    3. the data table argument or the doc string content, if any.
"""

from typing import TYPE_CHECKING

from pytest_cucu.errors import ErrorContext, SignatureError, StepMatchError
from pytest_cucu.runtime.tree import Step

from .outlines import substitute

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from pytest_cucu.schema import DataTable, StepNode
    from pytest_cucu.values import Parameter, TableArgument

    from .registry import ActionRegistry


def table_argument(table: 'DataTable',
                   placeholders: 'Mapping[str, str] | None' = None) -> 'TableArgument':
    """Interpret a data table as a step argument.

    A table with more than one column is a list of records: the first
    row holds the field names, every following row is a record. A table
    with exactly one column is a flat list of values, every row
    included.

    Args:
        table: Parsed data table.
        placeholders: Outline values substituted into every cell.

    Returns:
        A list of records or a list of values.
    """
    placeholders = placeholders or {}
    rows = [
        [substitute(cell, placeholders) for cell in row]
        for row in table.rows
    ]

    if table.width > 1:
        header, *body = rows
        return [dict(zip(header, row, strict=True)) for row in body]

    return [row[0] for row in rows]


class StepBinder:
    """Bind parsed steps to registered actions."""

    def __init__(self, registry: 'ActionRegistry', *,
                 filename: str | None = None) -> None:
        """Initialize a binder.

        Args:
            registry: Registry used to resolve step texts.
            filename: Optional source file used in error reports.
        """
        self.registry = registry
        self.filename = filename

    def bind(self, node: 'StepNode', step_id: int,
             placeholders: 'Mapping[str, str] | None' = None, *,
             scenario: str | None = None) -> Step:
        """Build a runnable step.

        Args:
            node: Parsed step node.
            step_id: Order id of the step within its scenario.
            placeholders: Outline values, empty for plain scenarios.
            scenario: Name of the scenario being built, for error reports.

        Returns:
            A bound step waiting to run.

        Raises:
            UnmatchedStepError: If no pattern matches the step text.
            AmbiguousStepError: If several patterns match the step text.
            SignatureError: If the callback can not receive the parameters.
        """
        placeholders = placeholders or {}
        text = substitute(node.text.strip(), placeholders)

        argument: TableArgument | str | None = None
        if node.data_table is not None:
            argument = table_argument(node.data_table, placeholders)
        elif node.doc_string is not None:
            argument = substitute(node.doc_string.content, placeholders)

        try:
            binding, captures = self.registry.resolve(text)

        except StepMatchError as base:
            base.context = self.make_context(node, step_id, text, scenario)
            raise

        params: list[Parameter] = list(captures)
        if argument is not None:
            params.append(argument)

        if not binding.accepts(1 + len(params)):
            raise SignatureError(
                f'Callback for {binding.source!r} can not receive '
                f'{len(params)} parameter(s) of step {text!r}',
                context=self.make_context(node, step_id, text, scenario),
            )

        return Step(
            step_id,
            text,
            binding.callback,
            tuple(params),
            keyword=node.keyword.strip(),
            line=node.line,
        )

    def make_context(self, node: 'StepNode', step_id: int, text: str,
                     scenario: str | None = None) -> ErrorContext:
        """Build an error context pointing at a step node."""
        return ErrorContext(
            filename=self.filename,
            line_num=node.line,
            scenario=scenario,
            step_num=step_id,
            step=text,
        )
