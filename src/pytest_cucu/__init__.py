"""Behavior-driven test execution engine for Gherkin specifications.

The `pytest_cucu` package executes parsed feature files by matching each
step text against a registry of pattern-bound callbacks, threading a
shared execution context through the run.

Key features:
- step resolution with ambiguity detection;
- before/after hook scenarios with priority ordering;
- scenario outline expansion from example tables;
- fail/skip containment at scenario scope;
- tag filtering at feature and scenario granularity;
- a command-line runner and a pytest plugin collecting feature files.

Example:

    from pytest_cucu import Engine

    engine = Engine()

    @engine.step(r'^Hello (.*)$')
    def hello(context, name):
        context['name'] = name

    engine.set_spec_location('features/')
    engine.run().raise_for_status()
"""

from pytest_cucu.context import ExecutionContext
from pytest_cucu.core import ActionRegistry
from pytest_cucu.runtime.engine import Engine, RunReport
from pytest_cucu.runtime.tree import Status
from pytest_cucu.settings import EngineSettings

__all__ = (
    'ActionRegistry',
    'Engine',
    'EngineSettings',
    'ExecutionContext',
    'RunReport',
    'Status',
)
