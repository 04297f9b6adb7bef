"""Detect type-checker output that inlined an array's structure.

Checkers sometimes print an array type member by member instead of as
``T[]``. The detector recognizes that shape so the normalizer can collapse it
back. Swap in another detector for a host whose expansion quirks differ.
"""

import re

from routedoc.types.base import TypeHandle

ARRAY_FINGERPRINT = frozenset({
    "length",
    "push",
    "pop",
    "concat",
    "join",
    "reverse",
    "shift",
    "slice",
    "sort",
    "splice",
    "indexOf",
    "forEach",
    "map",
    "filter",
    "reduce",
    "find",
})

FINGERPRINT_RATIO = 0.75

# `[Symbol.iterator]`, `[Symbol.unscopables]` or array-prototype methods used as keys
EXPANDED_ARRAY_RE = re.compile(
    r"\[\s*Symbol\.\s*(unscopables|iterator)\s*\]"
    r"|(?:pop|push|shift|splice|concat|reverse|forEach|indexOf)\??\s*:"
)

# e.g. `string | null | undefined | undefined`
DUPLICATE_NULLABLE_RE = re.compile(r"\b(undefined|null)\b[^;{}]*?\|\s*\1\b")


class ArrayExpansionDetector:
    """Heuristics for spotting structurally-expanded arrays."""

    def __init__(self, fingerprint: frozenset[str] = ARRAY_FINGERPRINT, ratio: float = FINGERPRINT_RATIO):
        self.fingerprint = fingerprint
        self.ratio = ratio

    def expanded_element(self, handle: TypeHandle) -> TypeHandle | None:
        """Return the element type if ``handle`` is an expanded array, else None."""
        index_type = handle.number_index_type()
        if index_type is None:
            return None

        names = {prop.name for prop in handle.properties()}
        matched = len(self.fingerprint & names)
        if matched >= len(self.fingerprint) * self.ratio:
            return index_type
        return None

    def has_expansion_noise(self, text: str) -> bool:
        return EXPANDED_ARRAY_RE.search(text) is not None

    def has_duplicate_nullable(self, text: str) -> bool:
        return DUPLICATE_NULLABLE_RE.search(text) is not None

    def is_clean(self, text: str) -> bool:
        """True when the raw rendering can be used as-is."""
        return not self.has_expansion_noise(text) and not self.has_duplicate_nullable(text)
