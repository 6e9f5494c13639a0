"""Core matching and building infrastructure.

This package provides the pieces turning a parsed specification tree
into a bound execution tree:

- the action registry resolving step texts to callbacks;
- the hook resolver promoting specially titled scenarios to hooks;
- the outline expander materializing example rows;
- the step binder assembling step parameters;
- the feature builder orchestrating all of the above;
- the loader handing specification files to the parser.
"""

from .binder import StepBinder, table_argument
from .builder import FeatureBuilder, is_selected
from .hooks import Hook, HookResolver, select_steps, sort_hooks
from .loader import FeatureLoader
from .outlines import Example, OutlineExpander, substitute
from .registry import ActionBinding, ActionRegistry

__all__ = (
    'ActionBinding',
    'ActionRegistry',
    'Example',
    'FeatureBuilder',
    'FeatureLoader',
    'Hook',
    'HookResolver',
    'OutlineExpander',
    'StepBinder',
    'is_selected',
    'select_steps',
    'sort_hooks',
    'substitute',
    'table_argument',
)
