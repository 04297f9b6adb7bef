"""Capability protocol for semantic type handles.

The normalizer and route walker only ever query types through this
interface, so any host type system (a checker dump, a live compiler API,
Python's own typing objects) can feed them.
"""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class NamedSymbol:
    """Name and type arguments of a named (possibly parametric) type."""

    name: str
    type_args: tuple["TypeHandle", ...] = field(default=())


@dataclass(frozen=True)
class PropertyHandle:
    """A single own property of an object-like type."""

    name: str
    type: "TypeHandle"
    optional: bool = False


class TypeHandle(Protocol):
    """Read-only view over a resolved type."""

    def is_array(self) -> bool: ...

    def is_tuple(self) -> bool: ...

    def is_union(self) -> bool: ...

    def is_intersection(self) -> bool: ...

    def is_object(self) -> bool: ...

    def element_type(self) -> "TypeHandle | None": ...

    def tuple_elements(self) -> list["TypeHandle"]: ...

    def member_types(self) -> list["TypeHandle"]: ...

    def properties(self) -> list[PropertyHandle]: ...

    def number_index_type(self) -> "TypeHandle | None": ...

    def call_signature_count(self) -> int: ...

    def symbol(self) -> NamedSymbol | None: ...

    def text(self) -> str:
        """The host checker's own rendering, possibly over-expanded."""
        ...
