"""Tests for error formatting."""

from os import linesep

import pytest

from pytest_cucu.errors import (
    ErrorContext,
    ErrorFormatter,
    SourceError,
    StepRuntimeError,
)
from pytest_cucu.runtime import Feature, Scenario, Step


def test_format_without_context() -> None:
    """Keep the message untouched without a context."""
    assert ErrorFormatter.format('Something failed') == 'Something failed'
    assert ErrorFormatter.format('Something failed', ErrorContext()) == 'Something failed'


@pytest.mark.parametrize('context, expected', (
    pytest.param(
        ErrorContext(filename='a.feature', line_num=3),
        ['in "a.feature", line 3'],
        id='file',
    ),
    pytest.param(
        ErrorContext(scenario='Checkout'),
        ['in "<unicode string>"', 'in scenario "Checkout"'],
        id='scenario only',
    ),
    pytest.param(
        ErrorContext(filename='a.feature', feature='Shop', scenario='Checkout', step_num=0, step='I pay'),
        ['in "a.feature"', 'in feature "Shop", scenario "Checkout"', 'on step 1: I pay'],
        id='full',
    ),
))
def test_location_string(context: ErrorContext, expected: list[str]) -> None:
    """Render source and execution locations line by line."""
    location = ErrorFormatter.get_location_string(context)

    assert location.splitlines() == expected


def test_snippet_string() -> None:
    """Render context values as YAML, hiding opaque objects."""
    snippet = ErrorFormatter.get_snippet_string(ErrorContext(
        context={
            'user': {'name': 'Alice', 'roles': ('admin',)},
            'session': object(),
        },
        trace='Traceback line',
    ), indent=2)

    assert snippet.splitlines() == [
        '   ...',
        '  context:',
        '    user:',
        '      name: Alice',
        '      roles:',
        '      - admin',
        "    session: <runtime object>",
        '   ---',
        '  Traceback line',
    ]


def test_snippet_string_empty() -> None:
    """Render nothing without values and trace."""
    assert ErrorFormatter.get_snippet_string(ErrorContext(filename='a.feature')) == ''


def test_source_error() -> None:
    """Name the offending file."""
    error = SourceError('Invalid specification', filename='a.feature')

    assert f'{error}' == f'Invalid specification{linesep}    in "a.feature"{linesep}'


def test_runtime_error_bind_keeps_references() -> None:
    """Fill missing references without overwriting present ones."""
    first = Scenario(0, 'First', [])
    second = Scenario(1, 'Second', [])
    feature = Feature('Shop', [first, second], filename='shop.feature')
    step = Step(0, 'I pay', lambda context: None)

    error = StepRuntimeError('Declined', scenario=first, values={'total': 1})
    bound = error.bind(feature, second, step, values={'total': 2})

    assert bound is error
    assert error.feature is feature
    assert error.scenario is first
    assert error.step is step
    assert error.context is not None
    assert error.context['filename'] == 'shop.feature'
    assert error.context['scenario'] == 'First'
    assert error.context['context'] == {'total': 1}
