"""Specification source loading.

This module locates specification files and hands their text to the
Gherkin parser. The parser output is validated into the feature node
model consumed by the builder.

Any failure of the file system or of the parser is reported as a
`SourceError` naming the offending file.
"""

import logging
from glob import glob
from pathlib import Path

from gherkin.parser import Parser
from pydantic import ValidationError

from pytest_cucu.errors import CucuError, SourceError
from pytest_cucu.schema import FeatureNode

logger = logging.getLogger(__name__)

#: File name pattern used when a directory is given as location.
FEATURE_GLOB = '*.feature'


class FeatureLoader:
    """Locate and parse specification files."""

    def __init__(self, encoding: str = 'utf-8') -> None:
        """Initialize a loader.

        Args:
            encoding: Encoding of specification files.
        """
        self.encoding = encoding

    def locate(self, location: str | Path) -> list[str]:
        """Resolve a location into concrete specification files.

        A directory resolves to every feature file below it. Anything
        else is treated as a glob pattern, `**` matching nested
        directories.

        Args:
            location: Directory, file path, or glob pattern.

        Returns:
            Sorted file paths. Empty when nothing matches.
        """
        path = Path(location)
        if path.is_dir():
            files = sorted(
                f'{item}'
                for item in path.rglob(FEATURE_GLOB)
                if item.is_file()
            )
        else:
            files = sorted(
                item
                for item in glob(f'{location}', recursive=True)
                if Path(item).is_file()
            )

        if not files:
            logger.warning('No specification files found by %r', f'{location}')

        for item in files:
            logger.info('- %s', item)

        return files

    def parse(self, content: str, filename: str | None = None) -> FeatureNode:
        """Parse specification text into a feature node.

        Args:
            content: Specification text.
            filename: Optional source file name attached to the node.

        Returns:
            The parsed feature.

        Raises:
            SourceError: If the text is not valid or holds no feature.
        """
        try:
            document = Parser().parse(content)

        except CucuError:
            raise

        except Exception as base:
            raise SourceError(f'Invalid specification: {base}', filename=filename) from base

        feature = document.get('feature')
        if not feature:
            raise SourceError('Specification does not declare a feature', filename=filename)

        try:
            return FeatureNode.model_validate({**feature, 'filename': filename})

        except ValidationError as base:
            message = base.errors(include_url=False)[0]['msg']
            raise SourceError(f'Invalid specification: {message}', filename=filename) from base

    def load(self, path: str | Path) -> FeatureNode:
        """Read and parse a specification file.

        Args:
            path: Specification file path.

        Returns:
            The parsed feature.

        Raises:
            SourceError: If the file can not be read or parsed.
        """
        try:
            content = Path(path).read_text(encoding=self.encoding)

        except (OSError, UnicodeDecodeError) as base:
            raise SourceError(f'Can not read specification: {base}', filename=f'{path}') from base

        return self.parse(content, filename=f'{path}')
