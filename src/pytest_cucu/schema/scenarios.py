"""Parsed scenario, outline, examples, and background nodes."""

from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from pytest_cucu.models import DescribedMixin, NodeModel

from .steps import StepNode, location_line, table_cells


class TaggedMixin(NodeModel):
    """Mixin providing declared tags.

    Tags are kept as plain strings including the leading `@`.
    """

    tags: tuple[str, ...] = Field(
        default=(),
        title='Tags',
        description='Labels used for selective execution.',
    )

    @field_validator('tags', mode='before')
    @classmethod
    def validate_tags(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept parser tag mappings (`{'name': '@tag'}`)."""
        if not isinstance(value, (list, tuple)):
            return value

        return tuple(
            tag['name'] if isinstance(tag, dict) else tag
            for tag in value
        )


class StepsMixin(NodeModel):
    """Mixin providing an ordered list of steps and a source line."""

    steps: tuple[StepNode, ...] = Field(
        default=(),
        title='Steps',
    )

    line: int | None = Field(
        default=None,
        validation_alias=AliasChoices('line', 'location'),
        title='Source line',
    )

    @field_validator('line', mode='before')
    @classmethod
    def validate_line(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept a parser location mapping as the source line."""
        return location_line(value)


class BackgroundNode(StepsMixin, DescribedMixin, NodeModel):
    """Steps implicitly prepended to every scenario of a feature."""


class ScenarioNode(StepsMixin, TaggedMixin, DescribedMixin, NodeModel):
    """A plain scenario definition."""


class ExamplesNode(TaggedMixin, DescribedMixin, NodeModel):
    """An example table of a scenario outline.

    The header row names the placeholders, every body row provides one
    set of values for a concrete scenario.
    """

    header: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices('header', 'tableHeader'),
        title='Header row',
    )

    rows: tuple[tuple[str, ...], ...] = Field(
        default=(),
        validation_alias=AliasChoices('rows', 'tableBody'),
        title='Body rows',
    )

    @field_validator('header', mode='before')
    @classmethod
    def validate_header(cls, value: Any) -> Any:  # noqa: ANN401
        """Normalize the parser header row."""
        if value is None:
            return ()

        return table_cells(value)

    @field_validator('rows', mode='before')
    @classmethod
    def validate_rows(cls, value: Any) -> Any:  # noqa: ANN401
        """Normalize the parser body rows."""
        if value is None:
            return ()

        return tuple(table_cells(row) for row in value)

    @model_validator(mode='after')
    def validate_width(self) -> 'ExamplesNode':
        """Reject body rows not matching the header width."""
        width = len(self.header)
        for row in self.rows:
            if len(row) != width:
                raise ValueError('Example rows must have as many cells as the header')

        return self

    @property
    def records(self) -> list[dict[str, str]]:
        """Body rows as mappings keyed by the header row."""
        return [
            dict(zip(self.header, row, strict=True))
            for row in self.rows
        ]


class OutlineNode(ScenarioNode):
    """A parameterized scenario expanded through its example tables."""

    examples: tuple[ExamplesNode, ...] = Field(
        default=(),
        title='Example tables',
    )
