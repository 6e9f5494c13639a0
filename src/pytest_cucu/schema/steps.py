"""Parsed step nodes and their structural arguments."""

from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from pytest_cucu.models import NodeModel


def table_cells(row: Any) -> tuple[str, ...]:  # noqa: ANN401
    """Convert a parser table row into a tuple of cell values.

    Accepts either the parser row shape (`{'cells': [{'value': ...}]}`)
    or a plain sequence of values.
    """
    if isinstance(row, dict):
        row = row.get('cells', ())

    return tuple(
        f'{cell['value']}' if isinstance(cell, dict) else f'{cell}'
        for cell in row
    )


def location_line(value: Any) -> Any:  # noqa: ANN401
    """Extract a line number from a parser location mapping."""
    if isinstance(value, dict):
        return value.get('line')

    return value


class DataTable(NodeModel):
    """Two-dimensional table of cells attached to a step."""

    rows: tuple[tuple[str, ...], ...] = Field(
        min_length=1,
        title='Rows',
        description='Table rows in declaration order, including the first row.',
    )

    @field_validator('rows', mode='before')
    @classmethod
    def validate_rows(cls, value: Any) -> Any:  # noqa: ANN401
        """Normalize parser rows and reject non-rectangular tables."""
        if not isinstance(value, (list, tuple)):
            return value

        rows = tuple(table_cells(row) for row in value)
        if len({len(row) for row in rows}) > 1:
            raise ValueError('All table rows must have the same number of cells')

        return rows

    @property
    def width(self) -> int:
        """Number of columns."""
        return len(self.rows[0])


class DocString(NodeModel):
    """Multi-line text block attached to a step."""

    content: str = Field(
        default='',
        title='Content',
    )

    media_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices('media_type', 'mediaType'),
        title='Media type',
        description='Optional content type declared after the opening delimiter.',
    )


class StepNode(NodeModel):
    """A single step line as produced by the parser."""

    keyword: str = ''
    text: str

    data_table: DataTable | None = Field(
        default=None,
        validation_alias=AliasChoices('data_table', 'dataTable'),
        title='Data table argument',
    )

    doc_string: DocString | None = Field(
        default=None,
        validation_alias=AliasChoices('doc_string', 'docString'),
        title='Doc string argument',
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

    @model_validator(mode='before')
    @classmethod
    def validate_argument(cls, data: Any) -> Any:  # noqa: ANN401
        """Reject steps carrying both a data table and a doc string."""
        if isinstance(data, dict):
            table = data.get('data_table', data.get('dataTable'))
            doc = data.get('doc_string', data.get('docString'))
            if table is not None and doc is not None:
                raise ValueError('A step can not carry both a data table and a doc string')

        return data
