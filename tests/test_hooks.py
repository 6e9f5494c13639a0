"""Tests for hook scenarios."""

import pytest

from pytest_cucu.core import HookResolver, select_steps
from pytest_cucu.errors import BuildError, PatternError
from pytest_cucu.schema import OutlineNode, ScenarioNode


def make_scenario(name: str, *texts: str) -> ScenarioNode:
    """Build a plain scenario node with the given step texts."""
    return ScenarioNode.model_validate({
        'name': name,
        'steps': [{'keyword': 'Given ', 'text': text} for text in texts],
        'location': {'line': 3, 'column': 3},
    })


@pytest.mark.parametrize('title, key, priority, source', (
    pytest.param('@before/^.*$', 'before', 0, '^.*$', id='before'),
    pytest.param('@after/^Checkout', 'after', 0, '^Checkout', id='after'),
    pytest.param('@before(-1)/stg', 'before', -1, 'stg', id='negative priority'),
    pytest.param('@after(10)/^Checkout', 'after', 10, '^Checkout', id='priority'),
    pytest.param('@Before( 2 )/ login ', 'before', 2, 'login', id='spaces and case'),
    pytest.param('@before/a/b', 'before', 0, 'a/b', id='slash in body'),
))
def test_parse_hook(title: str, key: str, priority: int, source: str) -> None:
    """Parse hook titles into hooks."""
    hook = HookResolver().parse(make_scenario(title, 'a step'))

    assert hook is not None
    assert hook.key == key
    assert hook.priority == priority
    assert hook.pattern.pattern == source
    assert [step.text for step in hook.steps] == ['a step']


@pytest.mark.parametrize('title', (
    pytest.param('Regular scenario', id='plain'),
    pytest.param('Send mail to @before/x', id='not at start'),
    pytest.param('@before', id='no body'),
    pytest.param('', id='empty'),
))
def test_parse_not_hook(title: str) -> None:
    """Leave scenarios without the hook grammar untouched."""
    assert HookResolver().parse(make_scenario(title)) is None


def test_outline_is_never_hook() -> None:
    """Ignore the hook grammar on outlines."""
    outline = OutlineNode.model_validate({
        'name': '@before/^.*$',
        'steps': [{'text': 'a step'}],
    })

    resolver = HookResolver()

    assert resolver.parse(outline) is None
    assert not resolver.add(outline)


@pytest.mark.parametrize('title, error_type, expect_message', (
    pytest.param('@before(1/x', BuildError, r"^Invalid hook title '@before\(1/x'", id='unclosed priority'),
    pytest.param('@before(1)(2)/x', BuildError, r'^Invalid hook title', id='two priorities'),
    pytest.param('@around/x', BuildError, r"^Unsupported hook key 'around'", id='unknown key'),
    pytest.param('@before(high)/x', BuildError, r"^Invalid hook priority 'high'", id='bad priority'),
    pytest.param('@before()/x', BuildError, r"^Invalid hook priority ''", id='empty priority'),
    pytest.param('@before/[', PatternError, r"^Invalid hook pattern '\['", id='bad pattern'),
))
def test_parse_invalid_hook(title: str, error_type: type[BuildError], expect_message: str) -> None:
    """Reject malformed hook titles."""
    with pytest.raises(error_type, match=expect_message) as error:
        HookResolver('hooks.feature').parse(make_scenario(title))

    assert error.value.context['filename'] == 'hooks.feature'
    assert error.value.context['line_num'] == 3
    assert 'in "hooks.feature", line 3' in f'{error.value}'


def test_hooks_sorted_by_priority() -> None:
    """Sort hooks by ascending priority keeping discovery order on ties."""
    resolver = HookResolver()
    for title in ('@before(1)/x', '@before/first', '@after(5)/y', '@before(1)/z', '@before(-3)/w'):
        assert resolver.add(make_scenario(title))

    assert [hook.title for hook in resolver.before] == [
        '@before(-3)/w',
        '@before/first',
        '@before(1)/x',
        '@before(1)/z',
    ]
    assert [hook.title for hook in resolver.after] == ['@after(5)/y']


def test_select_steps() -> None:
    """Collect steps of applying hooks, reversed as one sequence."""
    resolver = HookResolver()
    resolver.add(make_scenario('@after(1)/Checkout', 'first one', 'first two'))
    resolver.add(make_scenario('@after(2)/^Checkout', 'second'))
    resolver.add(make_scenario('@after(3)/^Login', 'other'))

    forward = select_steps(resolver.after, 'Checkout with card')
    backward = select_steps(resolver.after, 'Checkout with card', reverse=True)

    assert [step.text for step in forward] == ['first one', 'first two', 'second']
    assert [step.text for step in backward] == ['second', 'first two', 'first one']
    assert select_steps(resolver.after, 'Logout') == ()
