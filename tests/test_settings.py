"""Tests for engine settings."""

import os
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from pytest_cucu import EngineSettings

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


def test_settings_defaults(mocker: 'MockerFixture') -> None:
    """Resolve empty settings without environment variables."""
    mocker.patch.dict(os.environ, clear=True)

    settings = EngineSettings()

    assert settings.features is None
    assert settings.tags == ()
    assert settings.steps == ()


def test_settings_from_environment(mocker: 'MockerFixture') -> None:
    """Resolve settings from prefixed environment variables."""
    mocker.patch.dict(os.environ, {
        'CUCU_FEATURES': 'features/**/*.feature',
        'CUCU_TAGS': '["smoke", "@billing"]',
        'CUCU_STEPS': '["tests.examples.steps:registry"]',
        'UNRELATED': 'ignored',
    }, clear=True)

    settings = EngineSettings()

    assert settings.features == 'features/**/*.feature'
    assert settings.tags == ('@smoke', '@billing')
    assert settings.steps == ('tests.examples.steps:registry',)


def test_settings_arguments_override(mocker: 'MockerFixture') -> None:
    """Prefer explicit arguments over the environment."""
    mocker.patch.dict(os.environ, {'CUCU_TAGS': '["smoke"]'}, clear=True)

    settings = EngineSettings(tags=(' nightly ', ''))

    assert settings.tags == ('@nightly',)


@pytest.mark.parametrize('reference', (
    pytest.param('tests/steps.py', id='path'),
    pytest.param('module:', id='empty attribute'),
    pytest.param('', id='empty'),
))
def test_settings_invalid_steps(reference: str) -> None:
    """Reject malformed step library references."""
    with pytest.raises(ValidationError, match=r'Invalid step library reference'):
        EngineSettings(steps=(reference,))


def test_settings_frozen() -> None:
    """Forbid changing settings after creation."""
    settings = EngineSettings()

    with pytest.raises(ValidationError):
        settings.features = 'other'  # type: ignore[misc]
