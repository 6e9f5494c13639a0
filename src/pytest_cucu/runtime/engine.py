"""Top-level execution engine.

The engine holds the step registry, the configuration, and the shared
execution context. A run locates specification files, builds every
selected feature, then executes the features in discovery order.

Build-time errors (malformed hooks, unresolvable steps, source errors)
abort the run before any feature executes. Step failures are contained
at scenario scope and reported through the returned `RunReport`.
"""

import logging
from importlib.metadata import EntryPoint
from types import ModuleType
from typing import TYPE_CHECKING

from pytest_cucu.context import ExecutionContext
from pytest_cucu.core import ActionRegistry, FeatureBuilder, FeatureLoader
from pytest_cucu.errors import BuildError, CucuError
from pytest_cucu.names import REFERENCE_PATTERN, normalize_tag
from pytest_cucu.settings import EngineSettings

from .tree import Status

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

if TYPE_CHECKING:
    from pytest_cucu.errors import StepRuntimeError
    from pytest_cucu.schema import FeatureNode
    from pytest_cucu.values import StepCallback

    from .tree import Feature

logger = logging.getLogger(__name__)

#: Attribute looked up when a step library reference names a module.
DEFAULT_REGISTRY_ATTRIBUTE = 'registry'


class RunReport:
    """Outcome of a run."""

    def __init__(self, features: list['Feature'],
                 failures: list['StepRuntimeError']) -> None:
        """Initialize a report.

        Args:
            features: Features run, in execution order.
            failures: Captured failures, in execution order.
        """
        self.features = features
        self.failures = failures

    def __bool__(self) -> bool:
        """True when the run passed."""
        return self.passed

    def __repr__(self) -> str:
        """String representation."""
        return f'<RunReport {'PASS' if self.passed else 'FAIL'} {self.counts()}>'

    @property
    def passed(self) -> bool:
        """True when every scenario of every feature passed."""
        return all(feature.status is Status.PASS for feature in self.features)

    @property
    def error(self) -> 'StepRuntimeError | None':
        """First captured failure, if any."""
        if not self.failures:
            return None

        return self.failures[0]

    def counts(self) -> dict[str, int]:
        """Count scenarios by status name."""
        counts = {status.name: 0 for status in Status}
        for feature in self.features:
            for scenario in feature.scenarios:
                counts[scenario.status.name] += 1

        return counts

    def raise_for_status(self) -> None:
        """Raise the first captured failure when the run failed.

        Raises:
            StepRuntimeError: If any scenario failed.
        """
        if self.error is not None:
            raise self.error


class Engine:
    """Behavior-driven test execution engine.

    Step callbacks are registered once and reused by every run, so an
    engine may run several specification locations in turn.
    """

    def __init__(self, settings: EngineSettings | None = None, *,
                 registry: ActionRegistry | None = None,
                 loader: FeatureLoader | None = None) -> None:
        """Initialize an engine.

        Args:
            settings: Configuration; resolved from the environment
                when omitted.
            registry: Registry to use, a new one by default.
            loader: Specification loader, a new one by default.

        Raises:
            BuildError: If a configured step library can not be loaded.
        """
        settings = settings or EngineSettings()

        self.registry = registry if registry is not None else ActionRegistry()
        self.loader = loader or FeatureLoader()
        self.context = ExecutionContext()

        self.tag_filter: tuple[str, ...] = ()
        self.files: list[str] = []

        self.set_tag_filter(settings.tags)
        for reference in settings.steps:
            self.load_steps(reference)

        if settings.features:
            self.set_spec_location(settings.features)

    def register_step(self, pattern: str, callback: 'StepCallback') -> None:
        """Register a step callback.

        Args:
            pattern: Regular expression matched against step texts.
            callback: Callable receiving the execution context, the
                captured groups, and an optional table argument.

        Raises:
            PatternError: If the pattern does not compile.
            SignatureError: If the callback signature does not fit.
        """
        self.registry.register(pattern, callback)

    def step[F: 'StepCallback'](self, pattern: str) -> 'Callable[[F], F]':
        """Register the decorated function for a pattern."""
        return self.registry.step(pattern)

    def load_steps(self, reference: str) -> None:
        """Load a step library.

        The reference has the `module:attribute` form. The attribute is
        either an `ActionRegistry`, merged into the engine registry, or
        a callable receiving the engine. A bare module reference looks
        up its `registry` attribute.

        Args:
            reference: Step library reference.

        Raises:
            BuildError: If the reference can not be loaded or resolves
                to an unsupported object.
        """
        if not REFERENCE_PATTERN.match(reference):
            raise BuildError(f'Invalid step library reference {reference!r}')

        try:
            library = EntryPoint(name=reference, value=reference, group='cucu_steps').load()
            if isinstance(library, ModuleType):
                library = getattr(library, DEFAULT_REGISTRY_ATTRIBUTE)

        except Exception as base:
            raise BuildError(f'Can not load step library {reference!r}') from base

        if isinstance(library, ActionRegistry):
            self.registry.update(library)
        elif callable(library):
            library(self)
        else:
            raise BuildError(f'Step library {reference!r} is not a registry or a callable')

        logger.info('Loaded step library %s', reference)

    def set_spec_location(self, location: 'str | Path') -> list[str]:
        """Locate specification files for subsequent runs.

        Args:
            location: Directory, file path, or glob pattern.

        Returns:
            Found file paths.
        """
        logger.info('Search specifications by %r', f'{location}')
        self.files = self.loader.locate(location)

        return list(self.files)

    def set_tag_filter(self, tags: 'Iterable[str]') -> None:
        """Set the tag filter for subsequent runs.

        Args:
            tags: Tags with or without the `@` prefix; empty disables
                filtering.
        """
        self.tag_filter = tuple(normalize_tag(tag) for tag in tags if tag.strip())

    def build_feature(self, node: 'FeatureNode') -> 'Feature | None':
        """Build a bound feature from a parsed node.

        Args:
            node: Parsed feature.

        Returns:
            The bound feature, or `None` when it is not selected.

        Raises:
            BuildError: If a hook is malformed or a step can not be bound.
        """
        return FeatureBuilder(self.registry, self.tag_filter).build(node)

    def build(self) -> list['Feature']:
        """Load and build every located feature.

        Returns:
            Selected features in discovery order.

        Raises:
            SourceError: If a file can not be read or parsed.
            BuildError: If a feature can not be built.
        """
        features = []
        for path in self.files:
            try:
                feature = self.build_feature(self.loader.load(path))

            except CucuError:
                logger.error('Reading %s', path)
                raise

            if feature is not None:
                features.append(feature)

        return features

    def run(self) -> RunReport:
        """Execute all located and selected features.

        Every feature runs even after a failure in an earlier one.

        Returns:
            The run report. It passed only if every scenario passed;
            otherwise it holds the captured failures.

        Raises:
            SourceError: If a file can not be read or parsed.
            BuildError: If a feature can not be built.
        """
        self.context.reset()

        features = self.build()

        failures: list[StepRuntimeError] = []
        for feature in features:
            failures.extend(feature.run(self.context))

        report = RunReport(features, failures)
        logger.info('Run finished: %s', report.counts())

        return report
