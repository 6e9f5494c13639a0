"""Name patterns used while building the execution tree.

This module defines the grammar of hook titles, outline placeholders,
step references, and tags. The rules defined here form part of the
public contract relied upon by feature authors and step libraries.
"""

from re import compile as regexp

#: Hook scenario title, `@<head>/<regex>`. Any title of this shape is a
#: hook; the body is the remainder after the first slash.
HOOK_TITLE_PATTERN = regexp(r'^@(?P<head>[^/]+)/(?P<body>.+)$')

#: Hook title head, `<key>` or `<key>(<priority>)`.
HOOK_HEAD_PATTERN = regexp(
    r'^(?P<key>[^()]+?)\s*(?:\((?P<priority>[^()]*)\))?$',
)

#: Known hook keys.
HOOK_BEFORE = 'before'
HOOK_AFTER = 'after'
HOOK_KEYS = (HOOK_BEFORE, HOOK_AFTER)

#: Outline placeholder, for example `<username>`.
PLACEHOLDER_PATTERN = regexp(r'<(?P<name>[^<>]+)>')

#: Reference to a step library in `module:attribute` or `module` form.
REFERENCE_PATTERN = regexp(
    r'^(?P<module>[\w.]+)(?::(?P<attr>[\w.]+))?$',
)

TAG_PREFIX = '@'


def normalize_tag(tag: str) -> str:
    """Normalize a tag filter entry.

    Args:
        tag: Tag as given by a user, with or without the `@` prefix.

    Returns:
        The trimmed tag with the `@` prefix.
    """
    tag = tag.strip()
    if tag.startswith(TAG_PREFIX):
        return tag

    return f'{TAG_PREFIX}{tag}'
