"""Parsed feature node.

The parser exposes feature contents as an ordered list of children,
each holding exactly one of `background`, `scenario`, or `rule`. This
module reshapes that list into a background and a flat, ordered
sequence of scenario definitions.
"""

from typing import Any

from pydantic import Field, field_validator, model_validator

from pytest_cucu.models import DescribedMixin, NodeModel

from .scenarios import BackgroundNode, OutlineNode, ScenarioNode, TaggedMixin
from .steps import StepNode

#: Keywords introducing a parameterized scenario (English dialect).
OUTLINE_KEYWORDS = frozenset({'scenario outline', 'scenario template'})

#: A scenario definition: plain or parameterized.
type Definition = OutlineNode | ScenarioNode


def _make_definition(data: Any) -> Any:  # noqa: ANN401
    """Choose the definition model for a parser scenario mapping.

    A scenario is an outline when it declares example tables or when
    it is introduced by an outline keyword.
    """
    if not isinstance(data, dict):
        return data

    keyword = f'{data.get('keyword') or ''}'.strip().lower()
    if data.get('examples') or keyword in OUTLINE_KEYWORDS:
        return OutlineNode.model_validate(data)

    return ScenarioNode.model_validate(data)


class FeatureNode(TaggedMixin, DescribedMixin, NodeModel):
    """Top-level grouping of scenarios from one specification file."""

    language: str = 'en'

    filename: str | None = Field(
        default=None,
        title='Source file',
    )

    background: BackgroundNode | None = Field(
        default=None,
        title='Background',
        description='Steps prepended to every scenario of the feature.',
    )

    scenarios: tuple[OutlineNode | ScenarioNode, ...] = Field(
        default=(),
        title='Scenario definitions',
        description='Scenarios and outlines in declaration order.',
    )

    @model_validator(mode='before')
    @classmethod
    def validate_children(cls, data: Any) -> Any:  # noqa: ANN401
        """Reshape parser children into background and scenarios.

        Scenarios nested in rules are flattened in declaration order.

        Raises:
            ValueError: If a rule declares its own background or more
                than one background is declared.
        """
        if not isinstance(data, dict) or 'children' not in data:
            return data

        data = {**data}
        background = data.get('background')
        scenarios = list(data.get('scenarios', ()))

        for child in data.pop('children') or ():
            if 'background' in child:
                if background is not None:
                    raise ValueError('A feature can not declare more than one background')
                background = child['background']
            elif 'scenario' in child:
                scenarios.append(child['scenario'])
            elif 'rule' in child:
                for item in child['rule'].get('children') or ():
                    if 'background' in item:
                        raise ValueError('Rule backgrounds are not supported')
                    if 'scenario' in item:
                        scenarios.append(item['scenario'])

        data['background'] = background
        data['scenarios'] = tuple(scenarios)

        return data

    @field_validator('scenarios', mode='before')
    @classmethod
    def validate_scenarios(cls, value: Any) -> Any:  # noqa: ANN401
        """Validate every scenario mapping with its definition model."""
        if not isinstance(value, (list, tuple)):
            return value

        return tuple(_make_definition(item) for item in value)

    @property
    def background_steps(self) -> tuple[StepNode, ...]:
        """Background steps, empty when no background is declared."""
        if self.background is None:
            return ()

        return self.background.steps
