"""Tests for scenario outline expansion."""

from typing import TYPE_CHECKING

import pytest

from pytest_cucu.core import OutlineExpander, substitute
from pytest_cucu.errors import SourceError
from pytest_cucu.schema import OutlineNode

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_cucu.schema import FeatureNode

OUTLINE = {
    'keyword': 'Scenario Outline',
    'name': 'Eating',
    'tags': [{'name': '@fruit'}],
    'steps': [
        {'keyword': 'Given ', 'text': 'there are <start> cucumbers'},
        {'keyword': 'When ', 'text': 'I eat <eat> cucumbers'},
    ],
    'examples': [
        {
            'name': 'Small',
            'tags': [{'name': '@small'}],
            'tableHeader': {'cells': [{'value': 'start'}, {'value': 'eat'}]},
            'tableBody': [
                {'cells': [{'value': '12'}, {'value': '5'}]},
                {'cells': [{'value': '20'}, {'value': '5'}]},
            ],
        },
        {
            'name': '',
            'tags': [{'name': '@fruit'}, {'name': '@large'}],
            'tableHeader': {'cells': [{'value': 'start'}, {'value': 'eat'}]},
            'tableBody': [
                {'cells': [{'value': '100'}, {'value': '50'}]},
            ],
        },
    ],
}


@pytest.mark.parametrize('text, placeholders, expected', (
    pytest.param('I have <count> <fruit>', {'count': '3', 'fruit': 'pears'}, 'I have 3 pears', id='all'),
    pytest.param('I have <count> <fruit>', {'count': '3'}, 'I have 3 <fruit>', id='unknown kept'),
    pytest.param('see <a>', {'a': '<b>', 'b': 'x'}, 'see <b>', id='single pass'),
    pytest.param('<a><a>', {'a': '1'}, '11', id='repeated'),
    pytest.param('no placeholders', {}, 'no placeholders', id='empty'),
))
def test_substitute(text: str, placeholders: dict[str, str], expected: str) -> None:
    """Replace placeholders with row values."""
    assert substitute(text, placeholders) == expected


def test_expand_outline() -> None:
    """Expand every row of every example table in declaration order."""
    outline = OutlineNode.model_validate(OUTLINE)
    expander = OutlineExpander()

    examples = list(expander.expand(outline))

    assert expander.count(outline) == 3
    assert [example.name for example in examples] == [
        'Eating | Small | 0',
        'Eating | Small | 1',
        'Eating |  | 0',
    ]
    assert [example.index for example in examples] == [0, 1, 0]
    assert examples[1].placeholders == {'start': '20', 'eat': '5'}
    assert examples[0].tags == ('@fruit', '@small')
    assert examples[2].tags == ('@fruit', '@large')


def test_expand_without_examples() -> None:
    """Expand an outline without example tables to nothing."""
    outline = OutlineNode.model_validate({**OUTLINE, 'examples': []})

    assert list(OutlineExpander().expand(outline)) == []


def test_example_row_width(parse: 'Callable[[str], FeatureNode]') -> None:
    """Reject specifications whose example rows do not match the header."""
    content = '\n'.join((
        'Feature: Broken',
        '  Scenario Outline: Eating',
        '    Given there are <start> cucumbers',
        '    Examples:',
        '      | start | eat |',
        '      | 12    |',
    ))

    with pytest.raises(SourceError, match=r'^Invalid specification'):
        parse(content)
