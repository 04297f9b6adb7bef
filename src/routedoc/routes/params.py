"""Path parameter extraction for `/:name` style route paths."""

import re

PARAM_RE = re.compile(r"/:([^/]+)")

# How the checker prints a params type it did not resolve
RESOLVE_PATH_PREFIX = "_ResolvePath<"
RESOLVE_PATH_RE = re.compile(r'_ResolvePath<"([^"]+)">')


def extract_params(path: str) -> str:
    """Return an object type mapping each `:param` segment of ``path`` to string.

    >>> extract_params("/users/:id/posts/:postId")
    '{id: string, postId: string}'
    """
    params = PARAM_RE.findall(path)
    if not params:
        return "{}"
    return "{" + ", ".join(f"{name}: string" for name in params) + "}"


def resolve_path_helper(params: str, path: str) -> str | None:
    """Repair an unresolved `_ResolvePath<"...">` params type, or None if resolved."""
    if not params.startswith(RESOLVE_PATH_PREFIX):
        return None
    match = RESOLVE_PATH_RE.match(params)
    if match:
        # The helper's literal is relative ("users/:id"); anchor it like a route path
        return extract_params("/" + match.group(1).lstrip("/"))
    return extract_params(path)
