"""Tests for step binding."""

from typing import TYPE_CHECKING

import pytest

from pytest_cucu.core import StepBinder, table_argument
from pytest_cucu.errors import SignatureError, UnmatchedStepError
from pytest_cucu.schema import DataTable, StepNode

if TYPE_CHECKING:
    from pytest_cucu import ActionRegistry


@pytest.mark.parametrize('rows, expected', (
    pytest.param(
        [['name', 'role'], ['Alice', 'admin'], ['Bob', 'user']],
        [{'name': 'Alice', 'role': 'admin'}, {'name': 'Bob', 'role': 'user'}],
        id='records',
    ),
    pytest.param(
        [['Alice'], ['Bob'], ['Carol']],
        ['Alice', 'Bob', 'Carol'],
        id='column',
    ),
    pytest.param(
        [['name', 'role']],
        [],
        id='header only',
    ),
))
def test_table_argument(rows: list[list[str]], expected: list) -> None:
    """Interpret data tables as records or as a flat column."""
    assert table_argument(DataTable(rows=rows)) == expected


def test_table_argument_placeholders() -> None:
    """Substitute outline values into every cell."""
    table = DataTable.model_validate({'rows': [
        {'cells': [{'value': 'name'}, {'value': 'count'}]},
        {'cells': [{'value': '<user>'}, {'value': '<count>'}]},
    ]})

    assert table_argument(table, {'user': 'Alice', 'count': '2'}) == [
        {'name': 'Alice', 'count': '2'},
    ]


def test_non_rectangular_table() -> None:
    """Reject tables whose rows differ in width."""
    with pytest.raises(ValueError, match=r'same number of cells'):
        DataTable(rows=[['a', 'b'], ['c']])


def test_bind_parameters_order(registry: 'ActionRegistry') -> None:
    """Pass captured groups first, then the structural argument."""
    def users(context, count, table):
        pass

    registry.register(r'^(\d+) users:$', users)
    node = StepNode.model_validate({
        'keyword': 'Given ',
        'text': '<count> users:',
        'location': {'line': 7, 'column': 5},
        'dataTable': {'rows': [
            {'cells': [{'value': 'name'}]},
            {'cells': [{'value': '<first>'}]},
        ]},
    })

    step = StepBinder(registry).bind(node, 4, {'count': '1', 'first': 'Alice'})

    assert step.id == 4
    assert step.text == '1 users:'
    assert step.keyword == 'Given'
    assert step.line == 7
    assert step.action is users
    assert step.params == ('1', ['name', 'Alice'])


def test_bind_doc_string(registry: 'ActionRegistry') -> None:
    """Pass the doc string content as the last parameter."""
    registry.register(r'^a message$', lambda context, body: None)
    node = StepNode.model_validate({
        'text': 'a message',
        'docString': {'content': 'Hello, <name>!', 'delimiter': '"""'},
    })

    step = StepBinder(registry).bind(node, 0, {'name': 'Bob'})

    assert step.params == ('Hello, Bob!',)


def test_bind_rejects_unexpected_argument(registry: 'ActionRegistry') -> None:
    """Reject callbacks that can not receive the structural argument."""
    registry.register(r'^go$', lambda context: None)
    node = StepNode.model_validate({
        'text': 'go',
        'docString': {'content': 'text'},
    })

    with pytest.raises(SignatureError, match=r"can not receive 1 parameter\(s\) of step 'go'"):
        StepBinder(registry, filename='go.feature').bind(node, 0, scenario='Going')


def test_bind_unmatched_context(registry: 'ActionRegistry') -> None:
    """Attach the source location to resolution errors."""
    node = StepNode.model_validate({
        'text': 'nothing is registered',
        'location': {'line': 12},
    })

    with pytest.raises(UnmatchedStepError) as error:
        StepBinder(registry, filename='go.feature').bind(node, 2, scenario='Going')

    assert error.value.context == {
        'filename': 'go.feature',
        'line_num': 12,
        'scenario': 'Going',
        'step_num': 2,
        'step': 'nothing is registered',
    }
    assert 'on step 3: nothing is registered' in f'{error.value}'


def test_step_with_table_and_doc_string() -> None:
    """Reject steps carrying both structural arguments."""
    with pytest.raises(ValueError, match=r'both a data table and a doc string'):
        StepNode.model_validate({
            'text': 'go',
            'dataTable': {'rows': [['a']]},
            'docString': {'content': 'b'},
        })
