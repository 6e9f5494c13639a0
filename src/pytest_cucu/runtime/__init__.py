"""Runtime execution layer.

The bound feature, scenario, and step tree with its status model lives
in `tree`; the engine orchestrating configuration, building, and runs
lives in `engine`.
"""

from .tree import Feature, Scenario, Status, Step

__all__ = (
    'Feature',
    'Scenario',
    'Status',
    'Step',
)
