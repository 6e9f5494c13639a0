"""Engine configuration.

Settings are resolved from keyword arguments and from environment
variables prefixed with `CUCU_`, for example:

    CUCU_FEATURES=features/**/*.feature
    CUCU_TAGS='["@smoke"]'
    CUCU_STEPS='["tests.steps:registry"]'
"""

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from pytest_cucu.models import SettingsModel
from pytest_cucu.names import REFERENCE_PATTERN, normalize_tag


class EngineSettings(SettingsModel):
    """Explicit configuration held by an engine instance."""

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
        env_prefix='CUCU_',
    )

    features: str | None = Field(
        default=None,
        title='Specification location',
        description='Directory, file, or glob pattern of feature files.',
    )

    tags: tuple[str, ...] = Field(
        default=(),
        title='Tag filter',
        description=(
            'Features and scenarios run only if they declare at least '
            'one of these tags. Empty means no filtering.'
        ),
    )

    steps: tuple[str, ...] = Field(
        default=(),
        title='Step libraries',
        description=(
            'References in `module:attribute` form to step registries '
            'or setup callables receiving the engine.'
        ),
    )

    @field_validator('tags', mode='after')
    @classmethod
    def validate_tags(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        """Normalize tags to carry the `@` prefix."""
        return tuple(normalize_tag(tag) for tag in value if tag.strip())

    @field_validator('steps', mode='after')
    @classmethod
    def validate_steps(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        """Reject malformed step library references."""
        for reference in value:
            if not REFERENCE_PATTERN.match(reference):
                raise ValueError(f'Invalid step library reference {reference!r}')

        return value
