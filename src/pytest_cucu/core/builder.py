"""Execution tree builder.

The builder turns a parsed feature into a bound feature:

1. the tag filter is applied at feature granularity;
2. scenario definitions are partitioned into hooks and normal scenarios;
3. outlines are expanded into one scenario per example row;
4. the tag filter is applied at scenario granularity;
5. each surviving scenario gets its steps bound in execution order:
   background steps, before-hook steps, own steps, after-hook steps
   (after-hook steps flattened in priority order, then reversed).

Step order ids are contiguous from 0 in that final order.
"""

import logging
from typing import TYPE_CHECKING

from pytest_cucu.names import normalize_tag
from pytest_cucu.runtime.tree import Feature, Scenario
from pytest_cucu.schema import OutlineNode

from .binder import StepBinder
from .hooks import HookResolver, select_steps
from .outlines import OutlineExpander

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

if TYPE_CHECKING:
    from pytest_cucu.runtime.tree import Step
    from pytest_cucu.schema import Definition, FeatureNode, ScenarioNode, StepNode

    from .hooks import Hook
    from .registry import ActionRegistry

logger = logging.getLogger(__name__)


def is_selected(tags: 'Iterable[str]', tag_filter: 'Iterable[str]') -> bool:
    """Apply the tag-intersection rule.

    Args:
        tags: Tags declared by a feature or scenario.
        tag_filter: Active filter, empty when no filter is set.

    Returns:
        True when no filter is active or at least one declared tag
        is in the filter. Untagged nodes are excluded by an active filter.
    """
    wanted = set(tag_filter)
    if not wanted:
        return True

    return not wanted.isdisjoint(tags)


class FeatureBuilder:
    """Build bound features from parsed feature nodes."""

    def __init__(self, registry: 'ActionRegistry',
                 tag_filter: 'Iterable[str]' = ()) -> None:
        """Initialize a builder.

        Args:
            registry: Registry used to bind steps.
            tag_filter: Active tag filter.
        """
        self.registry = registry
        self.tag_filter = tuple(normalize_tag(tag) for tag in tag_filter)
        self.expander = OutlineExpander()

    def build(self, node: 'FeatureNode') -> Feature | None:
        """Build a bound feature.

        Args:
            node: Parsed feature.

        Returns:
            The bound feature, or `None` when the feature is not selected
            by the tag filter.

        Raises:
            BuildError: If a hook title is malformed or a step can not
                be bound.
        """
        if not is_selected(node.tags, self.tag_filter):
            logger.info('Feature %r is not selected by tags', node.name)
            return None

        hooks = HookResolver(node.filename)
        definitions = [
            definition
            for definition in node.scenarios
            if not hooks.add(definition)
        ]

        binder = StepBinder(self.registry, filename=node.filename)
        before, after = hooks.before, hooks.after

        scenarios: list[Scenario] = []
        for definition in definitions:
            scenarios.extend(self.build_definition(
                definition,
                node.background_steps,
                before,
                after,
                binder,
                first_id=len(scenarios),
            ))

        return Feature(
            node.name,
            scenarios,
            description=node.description,
            tags=node.tags,
            filename=node.filename,
        )

    def build_definition(self, definition: 'Definition',
                         background: tuple['StepNode', ...],
                         before: list['Hook'],
                         after: list['Hook'],
                         binder: StepBinder, *,
                         first_id: int = 0) -> list[Scenario]:
        """Build the scenarios of one definition.

        A plain scenario yields at most one scenario, an outline yields
        one per selected example row.

        Args:
            definition: Scenario or outline node.
            background: Feature background steps.
            before: Sorted before hooks.
            after: Sorted after hooks.
            binder: Step binder of the feature.
            first_id: Identity of the first built scenario.

        Returns:
            Built scenarios in order.
        """
        before_steps = select_steps(before, definition.name)
        after_steps = select_steps(after, definition.name, reverse=True)

        if not isinstance(definition, OutlineNode):
            if not is_selected(definition.tags, self.tag_filter):
                return []
            return [self.build_scenario(
                first_id,
                definition,
                definition.name,
                (*background, *before_steps),
                after_steps,
                binder,
                tags=definition.tags,
            )]

        scenarios = []
        for example in self.expander.expand(definition):
            if not is_selected(example.tags, self.tag_filter):
                continue
            scenarios.append(self.build_scenario(
                first_id + len(scenarios),
                definition,
                example.name,
                (*background, *before_steps),
                after_steps,
                binder,
                placeholders=example.placeholders,
                tags=example.tags,
                example_name=example.examples_name,
                example_index=example.index,
            ))

        return scenarios

    def build_scenario(self, scenario_id: int,  # noqa: PLR0913
                       definition: 'ScenarioNode',
                       name: str,
                       prologue: tuple['StepNode', ...],
                       epilogue: tuple['StepNode', ...],
                       binder: StepBinder, *,
                       placeholders: 'Mapping[str, str] | None' = None,
                       tags: tuple[str, ...] = (),
                       example_name: str | None = None,
                       example_index: int | None = None) -> Scenario:
        """Bind the steps of one scenario.

        Placeholders apply to the definition's own steps only; background
        and hook steps are bound as declared.

        Args:
            scenario_id: Identity unique within the feature.
            definition: Scenario or outline node.
            name: Name of the built scenario.
            prologue: Background and before-hook steps.
            epilogue: After-hook steps.
            binder: Step binder of the feature.
            placeholders: Outline row values.
            tags: Effective tags.
            example_name: Originating example table name.
            example_index: Originating example row index.

        Returns:
            A scenario waiting to run.
        """
        parts: tuple[tuple[tuple[StepNode, ...], Mapping[str, str] | None], ...] = (
            (prologue, None),
            (definition.steps, placeholders),
            (epilogue, None),
        )

        steps: list[Step] = []
        for nodes, values in parts:
            for node in nodes:
                steps.append(binder.bind(node, len(steps), values, scenario=name))

        return Scenario(
            scenario_id,
            name,
            steps,
            description=definition.description,
            tags=tags,
            line=definition.line,
            example_name=example_name,
            example_index=example_index,
        )
