"""Scenario outline expansion.

Every body row of every example table of an outline produces one
concrete scenario. Placeholders named after the table header columns
are replaced with the row values.
"""

from typing import TYPE_CHECKING

from pydantic import Field

from pytest_cucu.models import SchemaModel
from pytest_cucu.names import PLACEHOLDER_PATTERN

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

if TYPE_CHECKING:
    from pytest_cucu.schema import OutlineNode

EXAMPLE_SEPARATOR = ' | '


def substitute(text: str, placeholders: 'Mapping[str, str]') -> str:
    """Replace `<name>` placeholders with their values.

    The replacement is done in a single pass, so a substituted value
    is never expanded again. Unknown placeholders are left untouched.

    Args:
        text: Text containing placeholders.
        placeholders: Values by placeholder name.

    Returns:
        The substituted text.
    """
    if not placeholders:
        return text

    return PLACEHOLDER_PATTERN.sub(
        lambda found: placeholders.get(found['name'], found[0]),
        text,
    )


class Example(SchemaModel):
    """One row of an example table, ready to become a scenario."""

    name: str = Field(
        title='Scenario name',
        description='Outline name, examples name, and row index.',
    )

    examples_name: str = Field(
        default='',
        title='Example table name',
    )

    index: int = Field(
        ge=0,
        title='Row index',
        description='Position of the row within its example table.',
    )

    placeholders: dict[str, str] = Field(
        default_factory=dict,
        title='Placeholder values',
    )

    tags: tuple[str, ...] = Field(
        default=(),
        title='Effective tags',
        description='Outline tags followed by example table tags.',
    )


class OutlineExpander:
    """Expand scenario outlines into concrete examples."""

    @staticmethod
    def make_name(outline: 'OutlineNode', examples_name: str, index: int) -> str:
        """Build the name of an expanded scenario."""
        return EXAMPLE_SEPARATOR.join((outline.name, examples_name, f'{index}'))

    def expand(self, outline: 'OutlineNode') -> 'Iterator[Example]':
        """Yield one example per body row, tables in declaration order.

        Args:
            outline: Outline node with its example tables.

        Yields:
            Examples carrying the placeholder values of each row.
        """
        for examples in outline.examples:
            tags = tuple(dict.fromkeys((*outline.tags, *examples.tags)))
            for index, record in enumerate(examples.records):
                yield Example(
                    name=self.make_name(outline, examples.name, index),
                    examples_name=examples.name,
                    index=index,
                    placeholders=record,
                    tags=tags,
                )

    def count(self, outline: 'OutlineNode') -> int:
        """Number of scenarios an outline expands to."""
        return sum(len(examples.rows) for examples in outline.examples)
