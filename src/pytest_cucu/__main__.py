"""Command-line runner for Gherkin specifications.

Settings are resolved from `CUCU_*` environment variables and may be
overridden by command-line options.
"""

import logging
import sys

from click import argument, echo, group, option, pass_context
from click import Context as ClickContext
from pydantic import ValidationError

from pytest_cucu.errors import CucuError
from pytest_cucu.runtime.engine import Engine
from pytest_cucu.settings import EngineSettings

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_ERROR = 2

LOG_FORMAT = '%(message)s'


def _make_engine(ctx: ClickContext, **overrides: object) -> Engine:
    """Build an engine from the environment and command-line overrides.

    Args:
        ctx: Click context used to abort on configuration errors.
        **overrides: Settings given on the command line.

    Returns:
        A configured engine.
    """
    values = {key: value for key, value in overrides.items() if value}

    try:
        return Engine(EngineSettings(**values))

    except ValidationError as base:
        echo(f'Invalid settings: {base.errors(include_url=False)[0]['msg']}', err=True)
        ctx.exit(EXIT_ERROR)

    except CucuError as base:
        echo(f'{base}', err=True)
        ctx.exit(EXIT_ERROR)


@group(help='Command-line utilities for pytest-cucu.')
@option('-v', '--verbose', is_flag=True, help='Log every step.')
def cli(verbose: bool) -> None:
    """Root CLI group for pytest-cucu tools."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


@cli.command(
    name='run',
    help='Run feature files found by a directory, file, or glob pattern.',
)
@argument('features', required=False)
@option(
    '-s', '--steps',
    multiple=True,
    help='Step library reference in module:attribute form.',
)
@option(
    '-t', '--tag',
    'tags',
    multiple=True,
    help='Run only features and scenarios declaring this tag.',
)
@pass_context
def run_features(ctx: ClickContext, features: str | None,
                 steps: tuple[str, ...], tags: tuple[str, ...]) -> None:
    """Run specifications and exit with a status code.

    Args:
        ctx: Click context.
        features: Specification location.
        steps: Step library references.
        tags: Tag filter.
    """
    engine = _make_engine(ctx, features=features, steps=steps, tags=tags)
    if not engine.files:
        echo('No specification files found', err=True)
        ctx.exit(EXIT_ERROR)

    try:
        report = engine.run()

    except CucuError as base:
        echo(f'{base}', err=True)
        ctx.exit(EXIT_ERROR)

    for failure in report.failures:
        echo(f'{failure}', err=True)

    counts = report.counts()
    echo(', '.join(
        f'{count} {name.lower()}'
        for name, count in counts.items()
        if name != 'WAIT'
    ))

    ctx.exit(EXIT_PASSED if report.passed else EXIT_FAILED)


@cli.command(
    name='steps',
    help='Print the registered step patterns.',
)
@option(
    '-s', '--steps',
    multiple=True,
    help='Step library reference in module:attribute form.',
)
@pass_context
def print_steps(ctx: ClickContext, steps: tuple[str, ...]) -> None:
    """Print every registered pattern with its callback."""
    engine = _make_engine(ctx, steps=steps)

    for binding in engine.registry:
        callback = getattr(binding.callback, '__qualname__', f'{binding.callback!r}')
        echo(f'{binding.source}  ->  {callback}')


if __name__ == '__main__':
    cli()
