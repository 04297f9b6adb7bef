"""Type normalizer — turns semantic type handles into canonical type expressions.

The host checker tends to fully expand structural types, renders unions with
duplicated or badly ordered members and can loop forever on self-referential
types. The normalizer handles the common shapes itself and only falls back to
the checker's text when that text is already clean.
"""

import json
import re

from routedoc.types.base import PropertyHandle, TypeHandle
from routedoc.types.detect import ArrayExpansionDetector

MAX_DEPTH = 10

# Well-known generic names kept as `Name<Args>` instead of being expanded.
KNOWN_GENERICS = frozenset({
    "Array",
    "ReadonlyArray",
    "Promise",
    "Map",
    "Set",
    "WeakMap",
    "WeakSet",
    "Readonly",
    "Partial",
    "Required",
    "Pick",
    "Omit",
    "Record",
    "Exclude",
    "Extract",
    "NonNullable",
    "ReturnType",
    "Iterable",
    "Iterator",
    "AsyncIterable",
    "AsyncIterator",
    "Generator",
    "AsyncGenerator",
    "IterableIterator",
})

NULLISH = frozenset({"null", "undefined"})

VALID_IDENT = re.compile(r"[a-zA-Z_$][a-zA-Z0-9_$]*")

SYMBOL_PREFIX = "__@"

EMPTY_OBJECT = "{}"


def canonicalize_union(parts: list[str]) -> str:
    """Dedupe union members, fold true/false into boolean, put null/undefined last."""
    unique = list(dict.fromkeys(parts))

    if "true" in unique and "false" in unique:
        unique = [p for p in unique if p not in ("true", "false")]
        unique.append("boolean")

    # sorted() is stable, so concrete members keep their relative order
    unique = sorted(unique, key=lambda p: p in NULLISH)
    return _join(unique, " | ")


def join_intersection(parts: list[str]) -> str:
    """Join intersection members, dropping empty objects and duplicates."""
    unique = list(dict.fromkeys(p for p in parts if p != EMPTY_OBJECT))
    if not unique:
        return EMPTY_OBJECT
    return _join(unique, " & ")


def _join(parts: list[str], operator: str) -> str:
    if len(parts) == 1:
        return parts[0]
    # `() => A | B` would read as a function returning a union
    return operator.join(f"({p})" if is_function(p) else p for p in parts)


def format_key(name: str) -> str:
    return name if VALID_IDENT.fullmatch(name) else json.dumps(name)


def _top_level(expr: str):
    """Yield (index, char) for characters outside brackets and string literals."""
    level = 0
    quote = None
    escaped = False
    prev = ""
    for i, char in enumerate(expr):
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
        elif char in "\"'`":
            quote = char
        elif char in "{[(<":
            level += 1
        elif char in "}])" or (char == ">" and prev != "="):
            level -= 1
        elif level == 0:
            yield i, char
        prev = char


def is_compound(expr: str) -> bool:
    """True if ``expr`` has a top-level ``|`` or ``&`` operator."""
    return any(char in "|&" for _, char in _top_level(expr))


def is_function(expr: str) -> bool:
    """True if ``expr`` is an unparenthesized function type like ``() => void``."""
    return any(char == "=" and expr[i + 1:i + 2] == ">" for i, char in _top_level(expr))


class TypeNormalizer:
    """Converts type handles into compact, deterministic type expressions."""

    def __init__(self, detector: ArrayExpansionDetector | None = None, max_depth: int = MAX_DEPTH):
        self.detector = detector or ArrayExpansionDetector()
        self.max_depth = max_depth

    def normalize(self, handle: TypeHandle, depth: int = 0) -> str:
        """Return the canonical type expression for ``handle``."""
        # Self-referential graphs terminate here
        if depth > self.max_depth:
            return handle.text()

        if handle.is_array():
            return self._array(handle, depth)

        if handle.is_tuple():
            elements = [self.normalize(t, depth + 1) for t in handle.tuple_elements()]
            return f"[{', '.join(elements)}]"

        if handle.is_union():
            return canonicalize_union([self.normalize(t, depth + 1) for t in handle.member_types()])

        if handle.is_intersection():
            return self._intersection(handle, depth)

        symbol = handle.symbol()
        if symbol and symbol.name in KNOWN_GENERICS:
            if symbol.type_args:
                args = [self.normalize(t, depth + 1) for t in symbol.type_args]
                return f"{symbol.name}<{', '.join(args)}>"
            return symbol.name

        if handle.is_object():
            return self._object(handle, depth)

        return handle.text()

    def _array(self, handle: TypeHandle, depth: int) -> str:
        element = handle.element_type()
        if element is None:
            return "unknown[]"
        inner = self.normalize(element, depth + 1)
        if (element.is_union() or element.is_intersection()) and is_compound(inner):
            return f"Array<{inner}>"
        if is_function(inner):
            return f"({inner})[]"
        return f"{inner}[]"

    def _intersection(self, handle: TypeHandle, depth: int) -> str:
        members = handle.member_types()

        if len(members) > 1 and self._mergeable(members):
            merged = self._object_literal(handle.properties(), depth)
            if merged is not None:
                return merged

        return join_intersection([self.normalize(t, depth + 1) for t in members])

    def _mergeable(self, members: list[TypeHandle]) -> bool:
        """All members are anonymous objects and at least one has properties."""
        for member in members:
            if not member.is_object() or member.is_array() or member.call_signature_count():
                return False
            symbol = member.symbol()
            if symbol and symbol.name in KNOWN_GENERICS:
                return False
        return any(member.properties() for member in members)

    def _object(self, handle: TypeHandle, depth: int) -> str:
        element = self.detector.expanded_element(handle)
        if element is not None:
            return f"{self.normalize(element, depth + 1)}[]"

        text = handle.text()
        if self.detector.is_clean(text):
            return text

        if handle.call_signature_count() == 0:
            literal = self._object_literal(handle.properties(), depth)
            if literal is not None:
                return literal

        return text

    def _object_literal(self, properties: list[PropertyHandle], depth: int) -> str | None:
        entries = []
        for prop in properties:
            if prop.name.startswith(SYMBOL_PREFIX):
                continue
            optional = "?" if prop.optional else ""
            resolved = self.normalize(prop.type, depth + 1)
            entries.append(f"{format_key(prop.name)}{optional}: {resolved}")

        if not entries:
            return None
        return "{ " + "; ".join(entries) + " }"


_default = TypeNormalizer()


def normalize_type(handle: TypeHandle) -> str:
    """Normalize ``handle`` with the default detector and depth bound."""
    return _default.normalize(handle)
