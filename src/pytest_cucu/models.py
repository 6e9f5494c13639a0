"""Base Pydantic models for engine elements.

This module defines the foundational model classes used by the parsed
specification tree, step bindings, hooks, and runtime settings. It
enforces immutability so that a bound tree cannot drift between the
build and the run phases.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for all engine elements.

    Design principles enforced by this model:
        - Immutability: elements cannot be modified after creation.
          Bound steps, hooks, and bindings are shared between scenarios
          and must stay identical for every run.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class NodeModel(SchemaModel):
    """Base immutable model for parsed specification nodes.

    Nodes are produced by an external parser which attaches its own
    bookkeeping (identifiers, keywords, comments, source locations).
    Unknown keys are ignored so the parser output validates directly.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='ignore',
        populate_by_name=True,
    )


class DescribedMixin(NodeModel):
    """Mixin providing a node name and a free-form description."""

    name: str = Field(
        default='',
        title='Name',
        description='Human-readable title of the node.',
    )

    description: str = Field(
        default='',
        title='Description',
        description='Free-form text following the title line.',
    )

    @field_validator('name', 'description', mode='before')
    @classmethod
    def validate_text(cls, value: Any) -> Any:  # noqa: ANN401
        """Treat a missing name or description as an empty string."""
        if value is None:
            return ''

        return value.strip() if isinstance(value, str) else value


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Unknown or extra fields are ignored. This allows the surrounding
    environment to contain unrelated variables without breaking the
    configuration resolution.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
