"""Parsed specification tree.

Defines immutable Pydantic models describing features, scenarios,
outlines, example tables, and steps as handed over by the parser. The
models validate the parser output directly and are consumed by the
tree builder.
"""

from .features import Definition, FeatureNode
from .scenarios import BackgroundNode, ExamplesNode, OutlineNode, ScenarioNode
from .steps import DataTable, DocString, StepNode

__all__ = (
    'BackgroundNode',
    'DataTable',
    'Definition',
    'DocString',
    'ExamplesNode',
    'FeatureNode',
    'OutlineNode',
    'ScenarioNode',
    'StepNode',
)
