"""Core type definitions for step parameters.

This module defines the value types a step callback may receive besides
the execution context, and the container families used to sanitize
arbitrary context values before they are rendered in error reports.
"""

from collections.abc import Callable
from typing import Any

#: A single captured regular expression group.
#: Optional groups that did not participate in the match are `None`.
type Capture = str | None

#: A data table with more than one column, one mapping per body row
#: keyed by the header row.
type Records = list[dict[str, str]]

#: A data table with exactly one column, one value per row.
type Column = list[str]

#: Structural argument extracted from a data table.
type TableArgument = Records | Column

#: Any positional parameter bound to a step, after the execution context.
type Parameter = Capture | TableArgument | str

#: The callable registered for a pattern. Receives the execution context
#: first, then the bound parameters. See `StepResult` for return values.
type StepCallback = Callable[..., Any]

#: Values returned by a step callback. `False` and exception instances
#: mark the step as failed, anything else marks it as passed.
type StepResult = bool | BaseException | None | Any

MAPPINGS = (dict,)
SCALARS = (str, bytes, int, float, bool)
SEQUENCES = (list, tuple, set)
